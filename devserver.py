"""
Firesync development server.

Watches the input tree, queues a build for every settled burst of changes and
keeps a preview HTTP server and a localtunnel session alive while running.

    server = DevServer(load_config())
    server.start()
    ...
    server.stop()

All mutable state sits behind one lock. Front ends only use start(), stop(),
request_build(), set_paths() and status().
"""
import threading
from enum import Enum
from pathlib import Path

from builder import build
from fscore.config import FiresyncConfig
from fscore.errors import FiresyncError
from fscore.log import debug_log, error_log, log
from fscore.preview import PreviewServer
from fscore.tasks import Task, TaskQueue
from fscore.tunnel import Tunnel
from fscore.watcher import DebouncedWatcher


class ServerState(str, Enum):
    STOPPED = "stopped"
    STARTING = "starting"
    RUNNING = "running"
    STOPPING = "stopping"


class BuildStatus(str, Enum):
    UNBUILT = "unbuilt"
    BUILDING = "building"
    BUILT = "built"
    REBUILDING = "rebuilding"
    FAILED = "failed"


class ServerStatus:
    """Snapshot returned by DevServer.status()."""

    def __init__(self, state, build_status, url, last_error, pending_tasks):
        self.state = state
        self.build_status = build_status
        self.url = url
        self.last_error = last_error
        self.pending_tasks = pending_tasks

    def __repr__(self):
        return (f"ServerStatus(state={self.state.value}, build={self.build_status.value}, "
                f"url={self.url!r})")


class DevServer:
    def __init__(self, config=None, build_fn=build, tunnel=None, preview=None,
                 watcher_factory=DebouncedWatcher):
        self.config = config or FiresyncConfig()
        self._build_fn = build_fn
        self._watcher_factory = watcher_factory
        self._lock = threading.RLock()

        self.tunnel = tunnel or Tunnel(
            server=self.config.tunnel_server,
            local_host=self.config.local_host,
            local_port=self.config.port,
            max_conn=self.config.tunnel_max_conn,
        )
        self.preview = preview or PreviewServer(host=self.config.host, port=self.config.port)
        self.tasks = TaskQueue(self._run_task, maxsize=self.config.queue_size)
        self.watcher = None

        self.state = ServerState.STOPPED
        self.build_status = BuildStatus.UNBUILT
        self.last_error = None

    @property
    def input_path(self):
        return self.config.input

    @property
    def output_path(self):
        return self.config.output

    def set_paths(self, input_path, output_path):
        """Change the build paths. Only allowed while the server is stopped."""
        with self._lock:
            if self.state is not ServerState.STOPPED:
                raise RuntimeError("Stop the server before changing its paths")
            self.config = self.config.model_copy(
                update={"input": Path(input_path), "output": Path(output_path)}
            )

    def status(self):
        with self._lock:
            return ServerStatus(self.state, self.build_status, self.tunnel.url,
                                self.last_error, self.tasks.pending())

    # --- Lifecycle ---

    def start(self):
        """
        Start preview server, tunnel, build consumer and watcher, in that order.

        If any step fails, whatever was already started is torn down again and
        the error is re-raised; the server is back in the STOPPED state.

        Returns:
            The public tunnel URL
        """
        with self._lock:
            if self.state is not ServerState.STOPPED:
                debug_log(f"start() ignored, server is {self.state.value}")
                return self.tunnel.url
            self.state = ServerState.STARTING
            try:
                self.preview.start()
                self.tunnel.connect()
                self.tasks.start()
                watcher = self._watcher_factory(
                    self.config.input, self.request_build, window=self.config.debounce_seconds,
                    max_wait=self.config.debounce_max_wait,
                )
                watcher.start()
                self.watcher = watcher
            except Exception as e:
                error_log(f"Failed to start development server: {e}")
                self._teardown()
                self.state = ServerState.STOPPED
                raise
            self.state = ServerState.RUNNING
            log(f"Development server running, watching {self.config.input}")
            return self.tunnel.url

    def stop(self):
        """
        Disconnect the tunnel, stop the preview server and the watcher.

        The build consumer is left idle and reused by the next start(); a
        build that is already running finishes normally.
        """
        with self._lock:
            if self.state is ServerState.STOPPED:
                return
            self.state = ServerState.STOPPING
            self._teardown()
            self.state = ServerState.STOPPED
            log("Development server stopped")

    def close(self, timeout=None):
        """stop() and shut the build consumer down."""
        self.stop()
        self.tasks.shutdown(timeout)

    def _teardown(self):
        try:
            self.tunnel.disconnect()
        except FiresyncError as e:
            error_log(str(e))
        self.preview.stop()
        if self.watcher is not None:
            self.watcher.stop()
            self.watcher = None

    # --- Builds ---

    def request_build(self):
        """Queue a build. Safe to call from any thread, never blocks."""
        return self.tasks.submit(Task.BUILD)

    def _run_task(self, task):
        if task is not Task.BUILD:
            return
        with self._lock:
            config = self.config
            self.build_status = (
                BuildStatus.REBUILDING if self.build_status is BuildStatus.BUILT
                else BuildStatus.BUILDING
            )

        result = self._build_fn(
            config.input, config.output,
            config_path=config.darklua_configuration,
            darklua=config.darklua,
            recursive=config.recursive,
        )

        with self._lock:
            if result:
                self.build_status = BuildStatus.BUILT
                self.last_error = None
            else:
                self.build_status = BuildStatus.FAILED
                self.last_error = result.error
        problems = result.error_messages()
        if problems:
            debug_log(f"Build left {len(problems)} problem(s): " + "; ".join(problems))
