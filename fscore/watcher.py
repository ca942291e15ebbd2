"""
Debounced filesystem watcher.

A watchdog observer watches the input tree recursively. Every create, modify,
delete or move restarts a quiescence timer; the callback only runs once the
tree has been quiet for the whole window, so a burst of saves triggers a
single rebuild. A burst that never goes quiet still fires once max_wait
seconds after its first change.
"""
import threading
import time
from pathlib import Path

from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

from fscore.errors import WatcherError
from fscore.log import debug_log, error_log

DEFAULT_DEBOUNCE_SECONDS = 2.0
DEFAULT_MAX_WAIT_SECONDS = 10.0
WATCHED_EVENTS = frozenset({"created", "modified", "deleted", "moved"})


class _ChangeHandler(FileSystemEventHandler):
    def __init__(self, watcher):
        super().__init__()
        self.watcher = watcher

    def on_any_event(self, event):
        if event.event_type in WATCHED_EVENTS:
            self.watcher.notify(event.src_path)


class DebouncedWatcher:
    """Calls callback() once per burst of changes under path."""

    def __init__(self, path, callback, window=DEFAULT_DEBOUNCE_SECONDS,
                 max_wait=DEFAULT_MAX_WAIT_SECONDS, observer_factory=Observer):
        self.path = Path(path)
        self.callback = callback
        self.window = window
        self.max_wait = max(max_wait, window)
        self._observer_factory = observer_factory
        self._observer = None
        self._timer = None
        self._pending = 0
        self._burst_start = None
        self._lock = threading.Lock()

    @property
    def running(self):
        return self._observer is not None

    def start(self):
        """
        Start watching.

        Raises:
            WatcherError: The path doesn't exist or the OS watcher can't be set up
        """
        if self._observer is not None:
            return
        if not self.path.exists():
            raise WatcherError(f"cannot watch {self.path}: no such file or directory")
        observer = self._observer_factory()
        try:
            observer.schedule(_ChangeHandler(self), str(self.path), recursive=True)
            observer.start()
        except OSError as e:
            raise WatcherError(f"cannot watch {self.path}: {e.strerror or e}") from e
        self._observer = observer
        debug_log(f"Watching {self.path} (debounce {self.window}s)")

    def stop(self):
        """Stop watching and drop any burst that hasn't fired yet."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            self._pending = 0
            self._burst_start = None
        observer, self._observer = self._observer, None
        if observer is not None:
            observer.stop()
            observer.join()
            debug_log(f"Stopped watching {self.path}")

    def notify(self, src_path=None):
        """Record one change and restart the quiescence window."""
        with self._lock:
            now = time.monotonic()
            if self._burst_start is None:
                self._burst_start = now
            self._pending += 1
            if self._timer is not None:
                self._timer.cancel()
            # Never push the deadline past max_wait from the first change
            delay = min(self.window, max(0.0, self._burst_start + self.max_wait - now))
            self._timer = threading.Timer(delay, self._fire)
            self._timer.daemon = True
            self._timer.start()
        debug_log(f"Change detected: {src_path}")

    def _fire(self):
        with self._lock:
            # A newer event may have replaced this timer right before it fired
            if self._timer is not threading.current_thread():
                return
            self._timer = None
            self._burst_start = None
            count, self._pending = self._pending, 0
        debug_log(f"{count} change(s) settled")
        try:
            self.callback()
        except Exception as e:
            error_log(f"watcher callback failed: {e!r}")
