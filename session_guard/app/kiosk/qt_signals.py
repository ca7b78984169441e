"""
Session Guard - Kiosk: Qt Signal Source

Application-wide Qt event filter that turns events aimed at the session
window into platform signals. A handler that prevents the default makes
the filter swallow the event.
"""

import logging
from typing import Callable, Optional

from PySide6.QtCore import QEvent, QObject, Qt
from PySide6.QtGui import QKeySequence
from PySide6.QtWidgets import QApplication, QMessageBox, QWidget

from session_guard.app.monitor.adapter import SignalSource
from session_guard.app.monitor.events import EventCategory, PlatformEvent, normalize_key

logger = logging.getLogger(__name__)


def key_name(key: int) -> str:
    """Portable name for a Qt key code ("C", "Tab", "F12")."""
    return normalize_key(QKeySequence(key).toString())


def ask_leave_confirmation(parent: QWidget, message: str) -> bool:
    """Native confirmation prompt for a close request."""
    answer = QMessageBox.question(
        parent,
        "Leave Test?",
        message,
        QMessageBox.Yes | QMessageBox.No,
        QMessageBox.No,
    )
    return answer == QMessageBox.Yes


class _SessionEventFilter(QObject):
    """Event filter forwarding to QtSignalSource."""

    def __init__(self, owner: "QtSignalSource"):
        super().__init__()
        self._owner = owner

    def eventFilter(self, obj, event) -> bool:
        return self._owner._filter(obj, event)


class QtSignalSource(SignalSource):
    """
    Platform signal source for a Qt session window.

    Watches the window and its descendants:
    - WindowDeactivate / WindowActivate -> visibility changes
    - KeyPress -> key presses
    - ContextMenu -> context-menu requests
    - WindowStateChange -> fullscreen changes
    - Close -> before-unload requests
    """

    def __init__(
        self,
        window: QWidget,
        confirm_leave: Optional[Callable[[QWidget, str], bool]] = None,
    ):
        super().__init__()
        self.window = window
        self.confirm_leave = confirm_leave or ask_leave_confirmation
        self._prompting = False

        app = QApplication.instance()
        if app is None:
            raise RuntimeError("QtSignalSource requires a QApplication")

        self._event_filter = _SessionEventFilter(self)
        app.installEventFilter(self._event_filter)
        self._installed = True

    def dispose(self):
        """Remove the application event filter. Safe to call twice."""
        if not self._installed:
            return
        app = QApplication.instance()
        if app is not None:
            app.removeEventFilter(self._event_filter)
        self._installed = False

    def _is_session_widget(self, obj) -> bool:
        if obj is self.window:
            return True
        return isinstance(obj, QWidget) and self.window.isAncestorOf(obj)

    def _filter(self, obj, event) -> bool:
        if not self._is_session_widget(obj):
            return False

        etype = event.type()

        if etype == QEvent.KeyPress:
            mods = event.modifiers()
            signal = PlatformEvent(EventCategory.KEY_PRESSED, {
                "key": key_name(event.key()),
                "ctrl": bool(mods & Qt.ControlModifier),
                "alt": bool(mods & Qt.AltModifier),
                "shift": bool(mods & Qt.ShiftModifier),
            })
            return self.emit(signal).default_prevented

        if etype == QEvent.ContextMenu:
            return self.emit(PlatformEvent(EventCategory.CONTEXT_MENU_REQUESTED)).default_prevented

        if obj is not self.window:
            return False

        if etype in (QEvent.WindowDeactivate, QEvent.WindowActivate):
            # Our own confirmation dialog takes focus from the window
            if self._prompting:
                return False
            hidden = etype == QEvent.WindowDeactivate
            self.emit(PlatformEvent(EventCategory.VISIBILITY_CHANGED, {"hidden": hidden}))
            return False

        if etype == QEvent.WindowStateChange:
            self.emit(PlatformEvent(
                EventCategory.FULLSCREEN_CHANGED,
                {"is_fullscreen": self.window.isFullScreen()},
            ))
            return False

        if etype == QEvent.Close:
            return self._handle_close(event)

        return False

    def _handle_close(self, event) -> bool:
        signal = self.emit(PlatformEvent(EventCategory.BEFORE_UNLOAD_REQUESTED))
        if not signal.default_prevented:
            return False

        if signal.return_value:
            self._prompting = True
            try:
                confirmed = self.confirm_leave(self.window, signal.return_value)
            finally:
                self._prompting = False

            if confirmed:
                logger.warning("Leave confirmed by user")
                return False

        event.ignore()
        logger.info("Close request blocked during test")
        return True
