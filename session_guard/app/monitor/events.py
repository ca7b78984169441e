"""
Session Guard - Monitor: Events

Normalized platform events shared by the event source adapter,
the classifier and the session reducer.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional


LEAVE_WARNING = "Are you sure you want to leave? Your test progress may be lost."


class EventCategory(Enum):
    """Platform signal categories."""
    VISIBILITY_CHANGED = "visibility_changed"
    KEY_PRESSED = "key_pressed"
    CONTEXT_MENU_REQUESTED = "context_menu_requested"
    FULLSCREEN_CHANGED = "fullscreen_changed"
    BEFORE_UNLOAD_REQUESTED = "before_unload_requested"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def normalize_key(key: str) -> str:
    """Upper-case printable single keys, keep named keys ("Tab", "F12") as is."""
    if len(key) == 1:
        return key.upper()
    return key


@dataclass(frozen=True)
class KeyCombo:
    """A key together with its exact modifier set."""
    key: str
    ctrl: bool = False
    alt: bool = False
    shift: bool = False

    def __post_init__(self):
        object.__setattr__(self, "key", normalize_key(self.key))

    @property
    def label(self) -> str:
        parts = []
        if self.ctrl:
            parts.append("Ctrl")
        if self.alt:
            parts.append("Alt")
        if self.shift:
            parts.append("Shift")
        parts.append(self.key)
        return "+".join(parts)

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "KeyCombo":
        return cls(
            key=payload.get("key", ""),
            ctrl=bool(payload.get("ctrl", False)),
            alt=bool(payload.get("alt", False)),
            shift=bool(payload.get("shift", False)),
        )

    def to_payload(self) -> Dict[str, Any]:
        return {"key": self.key, "ctrl": self.ctrl, "alt": self.alt, "shift": self.shift}


# Shortcuts whose platform default is always suppressed during a session
BLOCKED_SHORTCUTS = frozenset({
    KeyCombo("C", ctrl=True),
    KeyCombo("V", ctrl=True),
    KeyCombo("A", ctrl=True),
    KeyCombo("T", ctrl=True),
    KeyCombo("Tab", alt=True),
    KeyCombo("F12"),
    KeyCombo("I", ctrl=True, shift=True),
})


@dataclass(frozen=True)
class RawEvent:
    """A normalized event as re-emitted by the event source adapter."""
    category: EventCategory
    payload: Dict[str, Any] = field(default_factory=dict)
    time: datetime = field(default_factory=utc_now)

    @property
    def time_iso(self) -> str:
        return self.time.isoformat()

    @classmethod
    def visibility(cls, hidden: bool, time: Optional[datetime] = None) -> "RawEvent":
        return cls(EventCategory.VISIBILITY_CHANGED, {"hidden": hidden}, time or utc_now())

    @classmethod
    def key(cls, key: str, ctrl: bool = False, alt: bool = False, shift: bool = False,
            time: Optional[datetime] = None) -> "RawEvent":
        combo = KeyCombo(key, ctrl=ctrl, alt=alt, shift=shift)
        return cls(EventCategory.KEY_PRESSED, combo.to_payload(), time or utc_now())

    @classmethod
    def context_menu(cls, time: Optional[datetime] = None) -> "RawEvent":
        return cls(EventCategory.CONTEXT_MENU_REQUESTED, {}, time or utc_now())

    @classmethod
    def fullscreen(cls, is_fullscreen: bool, time: Optional[datetime] = None) -> "RawEvent":
        return cls(EventCategory.FULLSCREEN_CHANGED, {"is_fullscreen": is_fullscreen}, time or utc_now())

    @classmethod
    def before_unload(cls, time: Optional[datetime] = None) -> "RawEvent":
        return cls(EventCategory.BEFORE_UNLOAD_REQUESTED, {}, time or utc_now())


class PlatformEvent:
    """
    A raw signal as delivered by a platform source.

    Handlers may call prevent_default() to stop the platform's default
    action; for close requests the return value becomes the text of the
    confirmation prompt.
    """

    def __init__(self, category: EventCategory, payload: Optional[Dict[str, Any]] = None,
                 time: Optional[datetime] = None):
        self.category = category
        self.payload = dict(payload or {})
        self.time = time or utc_now()
        self.default_prevented = False
        self.return_value: Optional[str] = None

    def prevent_default(self, return_value: Optional[str] = None):
        self.default_prevented = True
        if return_value is not None:
            self.return_value = return_value

    def __repr__(self):
        return f"<PlatformEvent {self.category.value} {self.payload}>"
