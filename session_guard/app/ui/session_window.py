"""
Session Guard - UI: Secure Session Window

Wraps the test content while a session is monitored: header with title,
violation count, countdown and controls; security alert banner; status
bar with violation and tab switch counters.
"""

import logging
from typing import Callable, Optional
from PySide6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QLabel, QPushButton, QFrame
)
from PySide6.QtCore import Signal

from session_guard.app.config import MonitorThresholds, SessionPolicy
from session_guard.app.kiosk.fullscreen import QtFullscreenController
from session_guard.app.kiosk.qt_signals import QtSignalSource
from session_guard.app.monitor.classifier import Violation
from session_guard.app.monitor.report import IntegrityReport
from session_guard.app.monitor.scheduler import QtScheduler
from session_guard.app.monitor.session_monitor import SessionMonitor
from session_guard.app.monitor.state import SessionPhase, SessionState
from session_guard.app.ui.countdown import format_countdown
from session_guard.app.ui.warning_overlay import SecurityAlertBanner
from session_guard.app.utils.logger import AuditLogger

logger = logging.getLogger(__name__)


def _plural(count: int) -> str:
    return f"{count} violation{'s' if count != 1 else ''}"


class SecureSessionWindow(QWidget):
    """
    Session container with integrity monitoring.

    While inactive the content is shown without any chrome.
    """

    test_submitted = Signal(dict)  # report payload
    security_violation = Signal(dict)  # violation payload

    def __init__(
        self,
        policy: SessionPolicy,
        content: Optional[QWidget] = None,
        on_test_submit: Optional[Callable[[IntegrityReport], None]] = None,
        on_security_violation: Optional[Callable[[Violation], None]] = None,
        thresholds: Optional[MonitorThresholds] = None,
        audit: Optional[AuditLogger] = None,
        confirm_leave=None,
        parent=None,
    ):
        super().__init__(parent)

        self.policy = policy
        self.time_remaining: Optional[int] = policy.time_remaining_seconds
        self._on_test_submit_cb = on_test_submit
        self._on_security_violation_cb = on_security_violation

        self._setup_ui(content)

        self.signals = QtSignalSource(self, confirm_leave)
        self.monitor = SessionMonitor(
            policy,
            self.signals,
            QtScheduler(self),
            on_test_submit=self._on_test_submit,
            on_security_violation=self._on_security_violation,
            fullscreen=QtFullscreenController(self),
            thresholds=thresholds,
            audit=audit,
        )
        self.monitor.add_state_listener(self._render)
        self._render(self.monitor.state)

    def _setup_ui(self, content: Optional[QWidget]):
        """Create session chrome around the content."""
        self.setWindowTitle(self.policy.test_title)
        self.setStyleSheet("background-color: #1a1a2e;")

        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(0)

        # Header
        self.header = QFrame()
        self.header.setStyleSheet("""
            QFrame {
                background-color: #16213e;
                border-bottom: 1px solid #0f3460;
            }
        """)
        header_layout = QHBoxLayout(self.header)
        header_layout.setContentsMargins(16, 12, 16, 12)

        self.title_label = QLabel(f"● {self.policy.test_title}")
        self.title_label.setStyleSheet("color: white; font-size: 16px; font-weight: bold;")
        header_layout.addWidget(self.title_label)

        self.violation_label = QLabel("")
        self.violation_label.setStyleSheet("color: #ff9900; font-size: 13px;")
        header_layout.addWidget(self.violation_label)

        header_layout.addStretch()

        self.countdown_label = QLabel("")
        self.countdown_label.setStyleSheet("""
            color: #4da6ff;
            font-size: 16px;
            font-weight: bold;
            font-family: 'Consolas', monospace;
        """)
        header_layout.addWidget(self.countdown_label)

        self.fullscreen_btn = QPushButton("Fullscreen")
        self.fullscreen_btn.setStyleSheet(self._button_style("#4da6ff"))
        self.fullscreen_btn.clicked.connect(self._toggle_fullscreen)
        header_layout.addWidget(self.fullscreen_btn)

        self.submit_btn = QPushButton("Submit Test")
        self.submit_btn.setStyleSheet(self._button_style("#e53935"))
        self.submit_btn.clicked.connect(self._on_submit_clicked)
        header_layout.addWidget(self.submit_btn)

        layout.addWidget(self.header)

        # Content
        self.content = content or QWidget()
        layout.addWidget(self.content, 1)

        # Status bar
        self.status_bar = QFrame()
        self.status_bar.setStyleSheet("""
            QFrame {
                background-color: #0f3460;
            }
            QLabel {
                color: #bbbbbb;
                font-size: 12px;
            }
        """)
        status_layout = QHBoxLayout(self.status_bar)
        status_layout.setContentsMargins(16, 6, 16, 6)

        self.status_label = QLabel("")
        status_layout.addWidget(self.status_label)
        status_layout.addStretch()
        self.tab_switch_label = QLabel("")
        status_layout.addWidget(self.tab_switch_label)

        layout.addWidget(self.status_bar)

        # Alert banner floats above the content
        self.alert_banner = SecurityAlertBanner(self)
        self.alert_banner.dismiss_requested.connect(self._on_alert_dismissed)

    def _button_style(self, color: str) -> str:
        return f"""
            QPushButton {{
                background-color: {color};
                color: white;
                border: none;
                border-radius: 6px;
                padding: 8px 18px;
                font-size: 13px;
            }}
            QPushButton:disabled {{
                background-color: #333;
            }}
        """

    # ==================== Host inputs ====================

    def set_test_active(self, active: bool):
        """Follow the host's in-progress flag."""
        self.monitor.set_test_active(active)

    def set_time_remaining(self, seconds: Optional[int]):
        """Update the remaining time shown in the header."""
        self.time_remaining = seconds
        self.countdown_label.setText(format_countdown(seconds))

    # ==================== Rendering ====================

    def _render(self, state: SessionState):
        monitored = state.phase != SessionPhase.INACTIVE
        count = state.violation_count

        self.header.setVisible(monitored)
        self.status_bar.setVisible(monitored and count > 0)

        self.violation_label.setText(f"⚠ {_plural(count)}" if count else "")
        self.countdown_label.setText(format_countdown(self.time_remaining))
        self.fullscreen_btn.setText("Exit Fullscreen" if state.is_fullscreen else "Fullscreen")

        active = state.phase == SessionPhase.ACTIVE
        self.fullscreen_btn.setEnabled(active)
        self.submit_btn.setEnabled(active)

        self.status_label.setText(f"Security Status: {_plural(count)} detected")
        self.tab_switch_label.setText(f"Tab switches: {state.tab_switch_count}")

        self.alert_banner.set_alert_visible(state.alert_visible)

        if state.phase == SessionPhase.CLOSED:
            self.signals.dispose()

    # ==================== Actions ====================

    def _toggle_fullscreen(self):
        if self.monitor.is_fullscreen:
            self.monitor.exit_fullscreen()
        else:
            self.monitor.enter_fullscreen()

    def _on_submit_clicked(self):
        self.monitor.submit()

    def _on_alert_dismissed(self):
        self.monitor.dismiss_alert()

    def _on_test_submit(self, report: IntegrityReport):
        self.test_submitted.emit(report.to_dict())
        if self._on_test_submit_cb:
            self._on_test_submit_cb(report)

    def _on_security_violation(self, violation: Violation):
        self.security_violation.emit(violation.to_dict())
        if self._on_security_violation_cb:
            self._on_security_violation_cb(violation)

    # ==================== Event Handlers ====================

    def resizeEvent(self, event):
        super().resizeEvent(event)
        if not self.alert_banner.isHidden():
            self.alert_banner.reposition()

    def closeEvent(self, event):
        """Close allowed by the signal source: stop monitoring."""
        if self.monitor.phase == SessionPhase.ACTIVE:
            logger.warning("Session window closed during an active test")
            self.monitor.set_test_active(False)
        self.signals.dispose()
        super().closeEvent(event)
