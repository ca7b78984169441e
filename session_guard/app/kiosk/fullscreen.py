"""
Session Guard - Kiosk: Fullscreen Containment

Best-effort fullscreen requests on the session's root container. The
actual fullscreen status is reported back through window state changes.
"""

import logging
from abc import ABC, abstractmethod

logger = logging.getLogger(__name__)


class FullscreenUnavailable(RuntimeError):
    """Fullscreen is not supported or was refused by the platform."""


class FullscreenController(ABC):
    """
    Interface for requesting and leaving fullscreen.

    Implementations raise FullscreenUnavailable when the platform refuses.
    """

    @abstractmethod
    def request_fullscreen(self):
        pass

    @abstractmethod
    def exit_fullscreen(self):
        pass


class QtFullscreenController(FullscreenController):
    """Fullscreen control for the top-level window holding a container widget."""

    def __init__(self, container):
        self.container = container

    def _window(self):
        if self.container is None:
            raise FullscreenUnavailable("No session container")
        window = self.container.window()
        if window is None:
            raise FullscreenUnavailable("Session container has no window")
        return window

    def request_fullscreen(self):
        window = self._window()
        window.showFullScreen()
        window.raise_()
        window.activateWindow()
        logger.debug("Fullscreen requested")

    def exit_fullscreen(self):
        window = self._window()
        if not window.isFullScreen():
            raise FullscreenUnavailable("Window is not fullscreen")
        window.showNormal()
        logger.debug("Fullscreen exit requested")
