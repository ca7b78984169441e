"""
Session Guard - Monitor: Session State

Immutable session state and the pure transition functions that the
session monitor applies. Nothing here touches timers or the platform.
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, Tuple

from session_guard.app.config import SessionPolicy
from session_guard.app.monitor.classifier import Violation, ViolationKind, classify
from session_guard.app.monitor.events import EventCategory, RawEvent
from session_guard.app.monitor.violation_log import GENESIS_DIGEST, chain_digest


class SessionPhase(Enum):
    """Lifecycle of a monitored session."""
    INACTIVE = "inactive"
    ACTIVE = "active"
    SUBMITTING = "submitting"
    CLOSED = "closed"


@dataclass(frozen=True)
class SessionState:
    """Snapshot of a session. tab_switch_count always equals the TAB_SWITCH entries in violations."""
    phase: SessionPhase = SessionPhase.INACTIVE
    violations: Tuple[Violation, ...] = ()
    tab_switch_count: int = 0
    is_fullscreen: bool = False
    alert_visible: bool = False
    log_digest: str = GENESIS_DIGEST

    @property
    def violation_count(self) -> int:
        return len(self.violations)

    @property
    def is_active(self) -> bool:
        return self.phase == SessionPhase.ACTIVE


@dataclass(frozen=True)
class Transition:
    """Result of reducing one event."""
    state: SessionState
    violation: Optional[Violation] = None
    restart_alert: bool = False
    confirm_leave: bool = False


def start_session() -> SessionState:
    return SessionState(phase=SessionPhase.ACTIVE)


def reduce(state: SessionState, event: RawEvent, policy: SessionPolicy) -> Transition:
    """
    Apply one event to an active session.

    Events reaching a session that is not ACTIVE leave it unchanged.
    """
    if state.phase != SessionPhase.ACTIVE:
        return Transition(state)

    if event.category == EventCategory.FULLSCREEN_CHANGED:
        is_fullscreen = bool(event.payload.get("is_fullscreen"))
        return Transition(replace(state, is_fullscreen=is_fullscreen))

    if event.category == EventCategory.BEFORE_UNLOAD_REQUESTED:
        return Transition(state, confirm_leave=True)

    violation = classify(event, policy)
    if violation is None:
        return Transition(state)

    tab_switches = state.tab_switch_count
    if violation.kind == ViolationKind.TAB_SWITCH:
        tab_switches += 1

    new_state = replace(
        state,
        violations=state.violations + (violation,),
        tab_switch_count=tab_switches,
        alert_visible=state.alert_visible or policy.show_warnings,
        log_digest=chain_digest(state.log_digest, violation),
    )
    return Transition(new_state, violation=violation, restart_alert=policy.show_warnings)


def dismiss_alert(state: SessionState) -> SessionState:
    if not state.alert_visible:
        return state
    return replace(state, alert_visible=False)


def begin_submit(state: SessionState) -> SessionState:
    return replace(state, phase=SessionPhase.SUBMITTING, alert_visible=False)


def close_session(state: SessionState) -> SessionState:
    return replace(state, phase=SessionPhase.CLOSED)
