"""
Preview HTTP endpoint.

A FastAPI app served by uvicorn on a background thread. It is the local
target the localtunnel session exposes.
"""
import threading
import time

import uvicorn
from fastapi import FastAPI
from fastapi.responses import PlainTextResponse

from fscore.errors import PreviewError
from fscore.log import debug_log, log

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 3000

app = FastAPI(title="Firesync preview")


@app.get("/", response_class=PlainTextResponse)
def index():
    return "Hello, World!"


class PreviewServer:
    """uvicorn server thread that can be started and stopped repeatedly."""

    def __init__(self, host=DEFAULT_HOST, port=DEFAULT_PORT, startup_timeout=10.0):
        self.host = host
        self.port = port
        self.startup_timeout = startup_timeout
        self._thread = None
        self._server = None

    @property
    def is_running(self):
        return self._thread is not None and self._thread.is_alive()

    def start(self):
        """
        Start serving and wait until the socket is bound.

        Raises:
            PreviewError: uvicorn exited during startup (e.g. port in use)
        """
        if self.is_running:
            return
        config = uvicorn.Config(app, host=self.host, port=self.port, log_level="warning")
        self._server = uvicorn.Server(config)
        self._thread = threading.Thread(target=self._run, name="firesync-preview", daemon=True)
        self._thread.start()

        deadline = time.monotonic() + self.startup_timeout
        while not self._server.started:
            if not self._thread.is_alive():
                self._server = self._thread = None
                raise PreviewError(f"could not serve on {self.host}:{self.port}",
                                   suggestion="Is the port already in use?")
            if time.monotonic() > deadline:
                self.stop()
                raise PreviewError(f"timed out starting on {self.host}:{self.port}")
            time.sleep(0.05)
        log(f"Preview server listening on http://{self.host}:{self.port}")

    def _run(self):
        try:
            self._server.run()
        except SystemExit:
            # uvicorn exits when it fails to bind
            pass

    def stop(self, timeout=5.0):
        """Ask uvicorn to exit and wait for the thread."""
        if self._server is not None:
            self._server.should_exit = True
        if self._thread is not None:
            self._thread.join(timeout)
            debug_log("Preview server stopped")
        self._server = None
        self._thread = None
