"""
Unit tests for the single-consumer build queue.
"""
import threading
import time

import pytest

from fscore.tasks import Task, TaskQueue


class Recorder:
    """Task handler that tracks how many runs overlap."""

    def __init__(self, duration=0.05):
        self.duration = duration
        self.runs = 0
        self.active = 0
        self.max_active = 0
        self._lock = threading.Lock()

    def __call__(self, task):
        with self._lock:
            self.active += 1
            self.max_active = max(self.max_active, self.active)
        time.sleep(self.duration)
        with self._lock:
            self.active -= 1
            self.runs += 1


@pytest.fixture
def recorder():
    return Recorder()


class TestTaskQueue:
    """Tests for TaskQueue."""

    def test_builds_never_overlap(self, recorder):
        """Tasks submitted during a build wait for it to finish."""
        tasks = TaskQueue(recorder)
        tasks.start()
        for _ in range(4):
            assert tasks.submit(Task.BUILD)
        tasks.join()
        assert recorder.runs == 4
        assert recorder.max_active == 1
        tasks.shutdown(timeout=2)

    def test_full_queue_drops(self, recorder):
        """Submitting to a full queue returns False instead of blocking."""
        tasks = TaskQueue(recorder, maxsize=2)
        assert tasks.submit()
        assert tasks.submit()
        assert tasks.submit() is False
        assert tasks.pending() == 2

    def test_handler_errors_keep_consumer_alive(self):
        """A failing task is logged and the next one still runs."""
        seen = []

        def handler(task):
            seen.append(task)
            if len(seen) == 1:
                raise RuntimeError("boom")

        tasks = TaskQueue(handler)
        tasks.start()
        tasks.submit()
        tasks.submit()
        tasks.join()
        assert seen == [Task.BUILD, Task.BUILD]
        assert tasks.alive
        tasks.shutdown(timeout=2)

    def test_start_is_reused(self, recorder):
        """A second start() keeps the running consumer."""
        tasks = TaskQueue(recorder)
        first = tasks.start()
        assert tasks.start() is first
        tasks.shutdown(timeout=2)

    def test_shutdown_drains_first(self, recorder):
        """Tasks queued before shutdown still run."""
        tasks = TaskQueue(recorder)
        tasks.submit()
        tasks.submit()
        tasks.start()
        tasks.shutdown(timeout=5)
        assert recorder.runs == 2
        assert not tasks.alive

    def test_shutdown_without_start(self, recorder):
        """Shutting down an idle queue is a no-op."""
        tasks = TaskQueue(recorder)
        tasks.shutdown(timeout=1)
        assert not tasks.alive
