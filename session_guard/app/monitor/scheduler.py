"""
Session Guard - Monitor: Scheduling

Cancellable one-shot tasks and the alert auto-dismiss timer built on them.
"""

import logging
from abc import ABC, abstractmethod
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class ScheduledTask:
    """A pending one-shot callback."""

    def __init__(self, cancel: Callable[[], None]):
        self._cancel = cancel
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def cancel(self):
        if not self._active:
            return
        self._active = False
        self._cancel()

    def _fired(self):
        self._active = False


class Scheduler(ABC):
    """Interface for scheduling one-shot callbacks on the event loop."""

    @abstractmethod
    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> ScheduledTask:
        """Run callback once after delay_ms unless the returned task is cancelled."""


class QtScheduler(Scheduler):
    """Scheduler backed by single-shot QTimers on the Qt event loop."""

    def __init__(self, parent=None):
        self.parent = parent

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> ScheduledTask:
        from PySide6.QtCore import QTimer

        timer = QTimer(self.parent)
        timer.setSingleShot(True)

        def cleanup():
            timer.stop()
            timer.deleteLater()

        task = ScheduledTask(cleanup)

        def fire():
            if not task.active:
                return
            task._fired()
            timer.deleteLater()
            callback()

        timer.timeout.connect(fire)
        timer.start(delay_ms)
        return task


class AlertTimer:
    """
    Auto-dismiss timer for the security alert.

    restart() cancels any pending task before scheduling a new one, so at
    most one dismiss task is pending at a time.
    """

    def __init__(self, scheduler: Scheduler, delay_ms: int, on_expire: Callable[[], None]):
        self.scheduler = scheduler
        self.delay_ms = delay_ms
        self.on_expire = on_expire
        self._task: Optional[ScheduledTask] = None

    @property
    def pending(self) -> bool:
        return self._task is not None and self._task.active

    def restart(self):
        self.cancel()
        self._task = self.scheduler.call_later(self.delay_ms, self._expire)

    def cancel(self):
        if self._task is not None:
            self._task.cancel()
            self._task = None

    def _expire(self):
        self._task = None
        logger.debug("Security alert auto-dismissed")
        self.on_expire()
