"""Session integrity monitor for Session Guard"""

from session_guard.app.monitor.adapter import EventSourceAdapter, SignalSource, Subscription
from session_guard.app.monitor.classifier import Violation, ViolationKind, classify
from session_guard.app.monitor.events import EventCategory, KeyCombo, PlatformEvent, RawEvent
from session_guard.app.monitor.report import IntegrityReport, build_report, security_score
from session_guard.app.monitor.scheduler import AlertTimer, QtScheduler, Scheduler
from session_guard.app.monitor.session_monitor import SessionMonitor
from session_guard.app.monitor.state import SessionPhase, SessionState, reduce

__all__ = [
    "EventSourceAdapter", "SignalSource", "Subscription",
    "Violation", "ViolationKind", "classify",
    "EventCategory", "KeyCombo", "PlatformEvent", "RawEvent",
    "IntegrityReport", "build_report", "security_score",
    "AlertTimer", "QtScheduler", "Scheduler",
    "SessionMonitor",
    "SessionPhase", "SessionState", "reduce",
]
