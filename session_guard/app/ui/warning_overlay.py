"""
Session Guard - UI: Security Alert Banner

Non-intrusive warning banner shown while the session's alert is visible.
Its visibility is driven by the session monitor, which owns the
auto-dismiss timer.
"""

import logging
from PySide6.QtWidgets import QWidget, QHBoxLayout, QVBoxLayout, QLabel, QPushButton
from PySide6.QtCore import Signal

logger = logging.getLogger(__name__)

ALERT_TITLE = "Security Warning"
ALERT_MESSAGE = "Suspicious activity detected. Please focus on the test window."


class SecurityAlertBanner(QWidget):
    """
    Warning banner anchored to the top-right of the session window.
    """

    dismiss_requested = Signal()

    def __init__(self, parent=None):
        super().__init__(parent)
        self._setup_ui()
        self.hide()

    def _setup_ui(self):
        """Create banner UI."""
        self.setFixedWidth(360)

        self.setStyleSheet("""
            QWidget {
                background-color: #ff9900;
                border-radius: 8px;
            }
        """)

        layout = QHBoxLayout(self)
        layout.setContentsMargins(16, 12, 12, 12)

        # Icon
        icon = QLabel("⚠️")
        icon.setStyleSheet("font-size: 20px;")
        layout.addWidget(icon)

        # Title and message
        text_layout = QVBoxLayout()
        title = QLabel(ALERT_TITLE)
        title.setStyleSheet("""
            color: white;
            font-size: 14px;
            font-weight: bold;
        """)
        text_layout.addWidget(title)

        self.message_label = QLabel(ALERT_MESSAGE)
        self.message_label.setWordWrap(True)
        self.message_label.setStyleSheet("color: white; font-size: 12px;")
        text_layout.addWidget(self.message_label)
        layout.addLayout(text_layout, 1)

        # Dismiss button
        dismiss = QPushButton("×")
        dismiss.setFixedSize(30, 30)
        dismiss.setStyleSheet("""
            QPushButton {
                background-color: rgba(255, 255, 255, 0.2);
                color: white;
                border: none;
                border-radius: 15px;
                font-size: 18px;
            }
            QPushButton:hover {
                background-color: rgba(255, 255, 255, 0.3);
            }
        """)
        dismiss.clicked.connect(self.dismiss_requested.emit)
        layout.addWidget(dismiss)

    def set_alert_visible(self, visible: bool):
        """Show or hide the banner, keeping it on top of the session content."""
        if visible == (not self.isHidden()):
            return
        if visible:
            self.reposition()
            self.show()
            self.raise_()
        else:
            self.hide()

    def reposition(self):
        parent = self.parentWidget()
        if parent is None:
            return
        self.adjustSize()
        self.move(max(0, parent.width() - self.width() - 16), 80)
