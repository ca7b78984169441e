"""
Unit tests for scheduled tasks and the alert timer.
"""

import pytest

from session_guard.app.monitor.scheduler import AlertTimer, ScheduledTask, Scheduler


class TestScheduler:
    """Tests for the scheduler interface."""

    def test_interface_is_abstract(self):
        with pytest.raises(TypeError):
            Scheduler()

    def test_incomplete_scheduler_rejected_at_creation(self):
        class Forgetful(Scheduler):
            pass

        with pytest.raises(TypeError):
            Forgetful()

    def test_task_cancel_runs_once(self):
        calls = []
        task = ScheduledTask(lambda: calls.append("cancel"))

        task.cancel()
        task.cancel()

        assert calls == ["cancel"]
        assert not task.active


class TestAlertTimer:
    """Tests for the cancel-and-replace alert timer."""

    def test_restart_replaces_pending_task(self, scheduler):
        expired = []
        timer = AlertTimer(scheduler, 5000, lambda: expired.append(scheduler.now_ms))

        timer.restart()
        scheduler.advance(3000)
        timer.restart()

        assert scheduler.pending_count == 1

        scheduler.advance(5000)
        assert expired == [8000]
        assert not timer.pending

    def test_cancel(self, scheduler):
        expired = []
        timer = AlertTimer(scheduler, 5000, lambda: expired.append(True))

        timer.restart()
        timer.cancel()
        scheduler.advance(10000)

        assert expired == []
        assert scheduler.pending_count == 0


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
