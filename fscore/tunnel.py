"""
localtunnel client.

connect() asks the relay for a tunnel on a random subdomain:

    GET https://localtunnel.me/<uuid4>
    -> {"id": ..., "url": "https://<id>.loca.lt", "port": 4321, "max_conn_count": 10}

then keeps up to max_conn TCP connections open to the relay's port, piping
each one to the local preview server. disconnect() broadcasts a shutdown to
every relay connection.
"""
import selectors
import socket
import threading
import uuid
from urllib.parse import urlparse

import requests

from fscore.errors import TunnelError
from fscore.log import debug_log, error_log, log

DEFAULT_SERVER = "https://localtunnel.me"
DEFAULT_LOCAL_HOST = "localhost"
DEFAULT_LOCAL_PORT = 3000
DEFAULT_MAX_CONN = 5

_RETRY_DELAY = 1.0
_POLL_INTERVAL = 0.5


class Tunnel:
    """A localtunnel session exposing local_host:local_port."""

    def __init__(self, server=DEFAULT_SERVER, local_host=DEFAULT_LOCAL_HOST,
                 local_port=DEFAULT_LOCAL_PORT, max_conn=DEFAULT_MAX_CONN,
                 timeout=10.0, session=None):
        self.server = server.rstrip("/")
        self.local_host = local_host
        self.local_port = local_port
        self.max_conn = max_conn
        self.timeout = timeout
        self.session = session or requests.Session()
        self.url = None
        self._shutdown = threading.Event()
        self._threads = []

    @property
    def connected(self):
        return self.url is not None

    def connect(self):
        """
        Open the tunnel and start the relay connections.

        Returns:
            The public URL

        Raises:
            TunnelError: The relay refused or couldn't be reached
        """
        if self.connected:
            return self.url

        subdomain = str(uuid.uuid4())
        info = self._request_tunnel(subdomain)
        try:
            url = info["url"]
            remote_port = int(info["port"])
        except (KeyError, TypeError, ValueError):
            raise TunnelError(f"unexpected response from {self.server}: {info!r}")

        remote_host = info.get("ip") or urlparse(self.server).hostname
        connections = min(self.max_conn, int(info.get("max_conn_count") or self.max_conn))

        self._shutdown = threading.Event()
        self._threads = []
        for i in range(connections):
            thread = threading.Thread(
                target=self._relay, args=(remote_host, remote_port, self._shutdown),
                name=f"firesync-tunnel-{i}", daemon=True,
            )
            thread.start()
            self._threads.append(thread)

        self.url = url
        log(f"localtunnel connected: {self.url}")
        return self.url

    def disconnect(self):
        """Drop the URL and signal every relay connection to close."""
        self.url = None
        self._shutdown.set()
        self._threads = []
        log("localtunnel disconnected")

    def _request_tunnel(self, subdomain):
        endpoint = f"{self.server}/{subdomain}"
        try:
            resp = self.session.get(endpoint, timeout=self.timeout)
            resp.raise_for_status()
            body = resp.json()
        except requests.exceptions.Timeout:
            raise TunnelError(f"{self.server} timed out ({self.timeout}s)")
        except requests.exceptions.ConnectionError:
            raise TunnelError(f"failed to connect to {self.server}",
                              suggestion="Check your internet connection")
        except requests.exceptions.HTTPError as e:
            status = e.response.status_code if e.response is not None else "unknown"
            raise TunnelError(f"{self.server} answered with status {status}")
        except ValueError:
            raise TunnelError(f"{self.server} did not return JSON")
        if not isinstance(body, dict):
            raise TunnelError(f"unexpected response from {self.server}: {body!r}")
        if body.get("message") and "url" not in body:
            raise TunnelError(body["message"])
        return body

    def _relay(self, remote_host, remote_port, shutdown):
        """Keep one relay connection open until shutdown is set."""
        while not shutdown.is_set():
            try:
                remote = socket.create_connection((remote_host, remote_port), timeout=self.timeout)
            except OSError as e:
                error_log(f"tunnel relay {remote_host}:{remote_port} unreachable: {e}")
                shutdown.wait(_RETRY_DELAY)
                continue

            with remote:
                try:
                    local = socket.create_connection((self.local_host, self.local_port),
                                                     timeout=self.timeout)
                except OSError as e:
                    error_log(f"local server {self.local_host}:{self.local_port} unreachable: {e}")
                    shutdown.wait(_RETRY_DELAY)
                    continue
                with local:
                    self._pipe(remote, local, shutdown)
        debug_log("tunnel relay closed")

    @staticmethod
    def _pipe(remote, local, shutdown):
        """Copy bytes both ways until one side closes or shutdown is set."""
        remote.settimeout(None)
        local.settimeout(None)
        with selectors.DefaultSelector() as selector:
            selector.register(remote, selectors.EVENT_READ, local)
            selector.register(local, selectors.EVENT_READ, remote)
            while not shutdown.is_set():
                for key, _ in selector.select(timeout=_POLL_INTERVAL):
                    try:
                        data = key.fileobj.recv(65536)
                        if not data:
                            return
                        key.data.sendall(data)
                    except OSError as e:
                        debug_log(f"tunnel connection closed: {e}")
                        return
