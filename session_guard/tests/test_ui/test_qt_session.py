"""
Integration tests for the Qt signal source and session window.

Run against the offscreen platform plugin.
"""

import pytest

QtWidgets = pytest.importorskip("PySide6.QtWidgets")

from PySide6.QtCore import QEvent, QPoint, Qt
from PySide6.QtGui import QCloseEvent, QContextMenuEvent, QKeyEvent, QWindowStateChangeEvent

from session_guard.app.config import SessionPolicy
from session_guard.app.monitor.classifier import ViolationKind
from session_guard.app.monitor.state import SessionPhase


@pytest.fixture(scope="module")
def qapp():
    app = QtWidgets.QApplication.instance()
    if app is None:
        app = QtWidgets.QApplication([])
    return app


@pytest.fixture
def make_window(qapp):
    """Factory for session windows; their event filters are removed afterwards."""
    from session_guard.app.ui.session_window import SecureSessionWindow

    windows = []

    def factory(policy=None, confirm_leave=None, **kwargs):
        window = SecureSessionWindow(
            policy or SessionPolicy(test_title="Geography"),
            confirm_leave=confirm_leave or (lambda parent, message: False),
            **kwargs,
        )
        windows.append(window)
        return window

    yield factory

    for window in windows:
        window.signals.dispose()
        window.deleteLater()


def send_ctrl_c(widget):
    event = QKeyEvent(QEvent.KeyPress, int(Qt.Key_C), Qt.ControlModifier)
    QtWidgets.QApplication.sendEvent(widget, event)
    return event


def send_context_menu(widget):
    event = QContextMenuEvent(QContextMenuEvent.Mouse, QPoint(5, 5))
    QtWidgets.QApplication.sendEvent(widget, event)
    return event


def send_window_event(window, event_type):
    event = QEvent(event_type)
    QtWidgets.QApplication.sendEvent(window, event)
    return event


def set_window_state(window, state):
    old_state = window.windowState()
    window.setWindowState(state)
    QtWidgets.QApplication.sendEvent(window, QWindowStateChangeEvent(old_state))


class TestSignalSource:
    """Tests for Qt event translation."""

    def test_context_menu_recorded(self, make_window):
        window = make_window()
        window.set_test_active(True)

        send_context_menu(window.content)

        assert [v.kind for v in window.monitor.violations] == [ViolationKind.CONTEXT_MENU]

    def test_blocked_shortcut_recorded(self, make_window):
        window = make_window()
        window.set_test_active(True)

        send_ctrl_c(window.content)

        assert len(window.monitor.violations) == 1
        assert window.monitor.violations[0].detail == "Attempted to use Ctrl+C"

    def test_inactive_window_not_monitored(self, make_window):
        window = make_window()

        send_context_menu(window.content)

        assert window.monitor.violations == ()

    def test_close_blocked_when_not_confirmed(self, make_window):
        prompts = []
        window = make_window(confirm_leave=lambda parent, message: prompts.append(message) or False)
        window.set_test_active(True)

        event = QCloseEvent()
        QtWidgets.QApplication.sendEvent(window, event)

        assert len(prompts) == 1
        assert not event.isAccepted()
        assert window.monitor.phase == SessionPhase.ACTIVE
        assert window.monitor.violations == ()

    def test_close_allowed_when_confirmed(self, make_window):
        window = make_window(confirm_leave=lambda parent, message: True)
        window.set_test_active(True)

        QtWidgets.QApplication.sendEvent(window, QCloseEvent())

        assert window.monitor.phase == SessionPhase.INACTIVE
        assert not window.monitor.attached

    def test_dispose_is_idempotent(self, make_window):
        window = make_window()
        window.set_test_active(True)

        window.signals.dispose()
        window.signals.dispose()
        send_context_menu(window.content)

        assert window.monitor.violations == ()


class TestWindowSignals:
    """Tests for focus and window state translation."""

    def test_deactivate_counts_as_tab_switch(self, make_window):
        window = make_window()
        window.set_test_active(True)

        send_window_event(window, QEvent.WindowDeactivate)

        assert window.monitor.tab_switch_count == 1
        assert [v.kind for v in window.monitor.violations] == [ViolationKind.TAB_SWITCH]

    def test_reactivate_is_not_a_violation(self, make_window):
        window = make_window()
        window.set_test_active(True)

        send_window_event(window, QEvent.WindowDeactivate)
        send_window_event(window, QEvent.WindowActivate)

        assert window.monitor.tab_switch_count == 1
        assert len(window.monitor.violations) == 1

    def test_allowed_tab_switch_not_recorded(self, make_window):
        window = make_window(policy=SessionPolicy(allow_tab_switch=True))
        window.set_test_active(True)

        send_window_event(window, QEvent.WindowDeactivate)

        assert window.monitor.violations == ()
        assert window.monitor.tab_switch_count == 0

    def test_child_focus_events_ignored(self, make_window):
        window = make_window()
        window.set_test_active(True)

        send_window_event(window.content, QEvent.WindowDeactivate)

        assert window.monitor.violations == ()

    def test_fullscreen_follows_window_state(self, make_window):
        window = make_window()
        window.set_test_active(True)

        set_window_state(window, Qt.WindowFullScreen)
        assert window.isFullScreen()
        assert window.monitor.is_fullscreen
        assert window.fullscreen_btn.text() == "Exit Fullscreen"

        set_window_state(window, Qt.WindowNoState)
        assert not window.isFullScreen()
        assert not window.monitor.is_fullscreen
        assert window.monitor.violations == ()

    def test_leave_prompt_focus_loss_not_logged(self, make_window):
        prompts = []

        def confirm(parent, message):
            prompts.append(message)
            send_window_event(parent, QEvent.WindowDeactivate)
            return False

        window = make_window(confirm_leave=confirm)
        window.set_test_active(True)

        QtWidgets.QApplication.sendEvent(window, QCloseEvent())

        assert len(prompts) == 1
        assert window.monitor.violations == ()

        # Focus loss after the prompt closes is recorded again
        send_window_event(window, QEvent.WindowDeactivate)
        assert window.monitor.tab_switch_count == 1


class TestSessionWindow:
    """Tests for the session window chrome."""

    def test_chrome_hidden_while_inactive(self, make_window):
        window = make_window()

        assert window.header.isHidden()
        assert window.status_bar.isHidden()

    def test_chrome_follows_violations(self, make_window):
        window = make_window()
        window.set_test_active(True)

        assert not window.header.isHidden()
        assert window.status_bar.isHidden()

        send_context_menu(window.content)
        send_context_menu(window.content)

        assert not window.status_bar.isHidden()
        assert window.violation_label.text() == "⚠ 2 violations"
        assert window.status_label.text() == "Security Status: 2 violations detected"
        assert not window.alert_banner.isHidden()

    def test_banner_dismiss(self, make_window):
        window = make_window()
        window.set_test_active(True)
        send_context_menu(window.content)

        window.alert_banner.dismiss_requested.emit()

        assert window.alert_banner.isHidden()
        assert not window.monitor.alert_visible

    def test_countdown_label(self, make_window):
        window = make_window(policy=SessionPolicy(time_remaining_seconds=3661))
        window.set_test_active(True)

        assert window.countdown_label.text() == "1:01:01"

        window.set_time_remaining(59)
        assert window.countdown_label.text() == "0:59"

    def test_submit_emits_report(self, make_window):
        payloads = []
        reports = []
        window = make_window(on_test_submit=reports.append)
        window.test_submitted.connect(payloads.append)
        window.set_test_active(True)
        send_ctrl_c(window.content)

        window.submit_btn.click()

        assert len(reports) == 1
        assert payloads[0]["securityScore"] == 90
        assert payloads[0]["violations"][0]["type"] == "keyboard_shortcut"
        assert window.monitor.phase == SessionPhase.CLOSED
        assert not window.submit_btn.isEnabled()

    def test_violation_signal(self, make_window):
        payloads = []
        window = make_window()
        window.security_violation.connect(payloads.append)
        window.set_test_active(True)

        send_context_menu(window.content)

        assert payloads[0]["type"] == "right_click"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
