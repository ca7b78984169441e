"""
Shared fixtures for Session Guard tests.
"""

import os

import pytest

from session_guard.app.config import MonitorThresholds, SessionPolicy
from session_guard.app.kiosk.fullscreen import FullscreenController
from session_guard.app.monitor.adapter import SignalSource
from session_guard.app.monitor.scheduler import ScheduledTask, Scheduler

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")


class ManualScheduler(Scheduler):
    """Scheduler driven by an explicit clock, in milliseconds."""

    def __init__(self):
        self.now_ms = 0
        self._tasks = []

    def call_later(self, delay_ms, callback):
        task = ScheduledTask(lambda: None)
        self._tasks.append((self.now_ms + delay_ms, task, callback))
        return task

    def advance(self, ms):
        self.now_ms += ms
        due = [t for t in self._tasks if t[0] <= self.now_ms]
        self._tasks = [t for t in self._tasks if t[0] > self.now_ms]
        for _, task, callback in sorted(due, key=lambda t: t[0]):
            if task.active:
                task._fired()
                callback()

    @property
    def pending_count(self):
        return sum(1 for _, task, _ in self._tasks if task.active)


class FakeFullscreen(FullscreenController):
    """Records fullscreen requests; optionally refuses them."""

    def __init__(self, fail=False):
        self.fail = fail
        self.requests = []

    def request_fullscreen(self):
        self.requests.append("enter")
        if self.fail:
            raise RuntimeError("denied")

    def exit_fullscreen(self):
        self.requests.append("exit")
        if self.fail:
            raise RuntimeError("denied")


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def source():
    return SignalSource()


@pytest.fixture
def policy():
    return SessionPolicy(test_title="Physics Final", allow_tab_switch=False, show_warnings=True)


@pytest.fixture
def make_monitor(source, scheduler, policy):
    """Factory for monitors wired to the shared fake source and scheduler."""
    from session_guard.app.monitor.session_monitor import SessionMonitor

    def factory(**kwargs):
        kwargs.setdefault("policy", policy)
        kwargs.setdefault("source", source)
        kwargs.setdefault("scheduler", scheduler)
        kwargs.setdefault("thresholds", MonitorThresholds())
        return SessionMonitor(**kwargs)

    return factory


@pytest.fixture
def fake_fullscreen():
    return FakeFullscreen()


@pytest.fixture
def failing_fullscreen():
    return FakeFullscreen(fail=True)
