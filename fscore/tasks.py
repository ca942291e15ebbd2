"""
Build task queue.

A bounded FIFO with exactly one consumer thread. Each task is run to
completion before the next one is taken, so two builds never overlap.
Producers never block: the watcher callback runs on the observer thread and
must return immediately, so a full queue drops the new task instead.
"""
import queue
import threading
from enum import Enum

from fscore.log import debug_log, error_log, warn_log

DEFAULT_QUEUE_SIZE = 32


class Task(str, Enum):
    BUILD = "build"


_SHUTDOWN = object()


class TaskQueue:
    """Single-consumer queue running handler(task) for each submitted task."""

    def __init__(self, handler, maxsize=DEFAULT_QUEUE_SIZE):
        self.handler = handler
        self._queue = queue.Queue(maxsize=maxsize)
        self._thread = None
        self._lock = threading.Lock()

    @property
    def alive(self):
        return self._thread is not None and self._thread.is_alive()

    def pending(self):
        return self._queue.qsize()

    def start(self):
        """Spawn the consumer thread unless one is already running."""
        with self._lock:
            if self.alive:
                return self._thread
            self._thread = threading.Thread(
                target=self._consume, name="firesync-tasks", daemon=True
            )
            self._thread.start()
            return self._thread

    def submit(self, task=Task.BUILD):
        """
        Enqueue a task without blocking.

        Returns:
            False if the queue was full and the task was dropped
        """
        try:
            self._queue.put_nowait(task)
        except queue.Full:
            warn_log(f"Task queue full, dropping {task.value} request")
            return False
        debug_log(f"Queued {task.value} ({self._queue.qsize()} pending)")
        return True

    def join(self):
        """Block until every queued task has been processed."""
        self._queue.join()

    def shutdown(self, timeout=None):
        """Stop the consumer after the tasks already queued."""
        with self._lock:
            thread = self._thread
            if thread is None or not thread.is_alive():
                return
            self._queue.put(_SHUTDOWN)
        thread.join(timeout)

    def _consume(self):
        while True:
            task = self._queue.get()
            try:
                if task is _SHUTDOWN:
                    return
                self.handler(task)
            except Exception as e:
                error_log(f"error while running {task.value} task: {e!r}")
            finally:
                self._queue.task_done()
