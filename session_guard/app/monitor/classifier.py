"""
Session Guard - Monitor: Violation Classifier

Maps a normalized event and the session policy to at most one violation.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional

from session_guard.app.config import SessionPolicy
from session_guard.app.monitor.events import BLOCKED_SHORTCUTS, EventCategory, KeyCombo, RawEvent


class ViolationKind(Enum):
    """Types of recorded violations."""
    TAB_SWITCH = "tab_switch"
    DISALLOWED_SHORTCUT = "keyboard_shortcut"
    CONTEXT_MENU = "right_click"
    NAVIGATION_ATTEMPT = "navigation_attempt"


@dataclass(frozen=True)
class Violation:
    """A recorded, timestamped violation."""
    kind: ViolationKind
    timestamp: datetime
    detail: str

    @property
    def timestamp_iso(self) -> str:
        return self.timestamp.isoformat()

    def to_dict(self) -> dict:
        return {
            "type": self.kind.value,
            "timestamp": self.timestamp_iso,
            "message": self.detail,
        }


def classify(event: RawEvent, policy: SessionPolicy) -> Optional[Violation]:
    """
    Classify a single event.

    Returns None for events that are not violations, including close
    requests and fullscreen changes.
    """
    category = event.category

    if category == EventCategory.VISIBILITY_CHANGED:
        if event.payload.get("hidden") and not policy.allow_tab_switch:
            return Violation(ViolationKind.TAB_SWITCH, event.time, "Tab switched during test")
        return None

    if category == EventCategory.KEY_PRESSED:
        combo = KeyCombo.from_payload(event.payload)
        if combo in BLOCKED_SHORTCUTS:
            return Violation(
                ViolationKind.DISALLOWED_SHORTCUT,
                event.time,
                f"Attempted to use {combo.label}",
            )
        return None

    if category == EventCategory.CONTEXT_MENU_REQUESTED:
        return Violation(ViolationKind.CONTEXT_MENU, event.time, "Right-click attempted during test")

    return None
