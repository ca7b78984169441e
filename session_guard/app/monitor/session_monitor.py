"""
Session Guard - Monitor: Session Monitor

Owns the session lifecycle (INACTIVE -> ACTIVE -> SUBMITTING -> CLOSED),
applies classified events to the session state, drives the alert timer
and exposes fullscreen containment.
"""

import logging
from typing import Callable, List, Optional

from session_guard.app.config import MonitorThresholds, SessionPolicy
from session_guard.app.kiosk.fullscreen import FullscreenController
from session_guard.app.monitor.adapter import EventSourceAdapter, SignalSource
from session_guard.app.monitor.classifier import Violation
from session_guard.app.monitor.events import RawEvent, utc_now
from session_guard.app.monitor.report import IntegrityReport, build_report
from session_guard.app.monitor.scheduler import AlertTimer, Scheduler
from session_guard.app.monitor.state import (
    SessionPhase, SessionState, begin_submit, close_session, dismiss_alert, reduce, start_session
)
from session_guard.app.utils.logger import AuditLogger

logger = logging.getLogger(__name__)


class SessionMonitor:
    """
    Integrity monitor for one assessment session.

    A monitor supervises at most one submitted session; once CLOSED it
    ignores every further call and a new monitor must be created.
    """

    def __init__(
        self,
        policy: SessionPolicy,
        source: SignalSource,
        scheduler: Scheduler,
        on_test_submit: Optional[Callable[[IntegrityReport], None]] = None,
        on_security_violation: Optional[Callable[[Violation], None]] = None,
        fullscreen: Optional[FullscreenController] = None,
        thresholds: Optional[MonitorThresholds] = None,
        audit: Optional[AuditLogger] = None,
    ):
        """
        Initialize session monitor.

        Args:
            policy: Session policy, fixed for the lifetime of the monitor
            source: Platform signal source the adapter subscribes to
            scheduler: Scheduler for the alert auto-dismiss timer
            on_test_submit: Called once with the final report
            on_security_violation: Called once per recorded violation
            fullscreen: Fullscreen controller for the session container
            thresholds: Monitor constants (alert delay, scoring)
            audit: Optional audit trail
        """
        self.policy = policy
        self.source = source
        self.on_test_submit = on_test_submit
        self.on_security_violation = on_security_violation
        self.fullscreen = fullscreen
        self.thresholds = thresholds or MonitorThresholds()
        self.audit = audit

        self._state = SessionState()
        self._adapter: Optional[EventSourceAdapter] = None
        self._report: Optional[IntegrityReport] = None
        self._state_listeners: List[Callable[[SessionState], None]] = []
        self._alert_timer = AlertTimer(
            scheduler, self.thresholds.ALERT_DISMISS_MS, self._on_alert_expired
        )

    # ==================== Read-only view ====================

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def phase(self) -> SessionPhase:
        return self._state.phase

    @property
    def violations(self):
        return self._state.violations

    @property
    def tab_switch_count(self) -> int:
        return self._state.tab_switch_count

    @property
    def is_fullscreen(self) -> bool:
        return self._state.is_fullscreen

    @property
    def alert_visible(self) -> bool:
        return self._state.alert_visible

    @property
    def alert_pending(self) -> bool:
        return self._alert_timer.pending

    @property
    def attached(self) -> bool:
        return self._adapter is not None and self._adapter.attached

    @property
    def report(self) -> Optional[IntegrityReport]:
        return self._report

    # ==================== Lifecycle ====================

    def set_test_active(self, active: bool):
        """
        Follow the host's in-progress flag.

        True starts a fresh session and attaches the adapter; False aborts
        an active session without producing a report.
        """
        phase = self._state.phase

        if active:
            if phase != SessionPhase.INACTIVE:
                logger.debug(f"Activation ignored in phase {phase.value}")
                return

            self._state = start_session()
            self._adapter = EventSourceAdapter(self.source, self.handle_event)
            self._adapter.attach()

            logger.info(f"Session started: {self.policy.test_title}")
            self._audit("session_started", evidence=self.policy.to_dict())
            self._notify_state_change()
        else:
            if phase != SessionPhase.ACTIVE:
                logger.debug(f"Deactivation ignored in phase {phase.value}")
                return

            self.detach()
            self._state = SessionState()
            logger.info("Session deactivated by host before submission")
            self._audit("session_aborted")
            self._notify_state_change()

    def detach(self):
        """
        Release every event subscription and cancel the alert timer.

        Idempotent: detaching an already detached monitor does nothing.
        """
        self._alert_timer.cancel()

        if self._adapter is None:
            return

        self._adapter.detach()
        self._adapter = None
        logger.debug("Session monitor detached")

    def submit(self) -> Optional[IntegrityReport]:
        """
        Submit the session and hand the report to the collaborator.

        Returns the report, or None when the session is not ACTIVE.
        """
        if self._state.phase != SessionPhase.ACTIVE:
            logger.warning(f"Submit ignored in phase {self._state.phase.value}")
            return None

        self._state = begin_submit(self._state)
        self.detach()
        self._notify_state_change()

        report = build_report(
            self._state,
            test_title=self.policy.test_title,
            submission_time=utc_now(),
            thresholds=self.thresholds,
        )
        self._report = report

        logger.info(
            f"Session submitted: {report.violation_count} violations, "
            f"score {report.security_score}"
        )
        self._audit("session_submitted", evidence=report.to_dict())

        if self.on_test_submit:
            try:
                self.on_test_submit(report)
            except Exception as e:
                logger.error(f"Error in submit handler: {e}")

        self._state = close_session(self._state)
        self._notify_state_change()
        return report

    # ==================== Events ====================

    def handle_event(self, event: RawEvent):
        """Apply one normalized event. Ignored unless ACTIVE and attached."""
        if self._state.phase != SessionPhase.ACTIVE or not self.attached:
            logger.debug(f"Ignoring {event.category.value} in phase {self._state.phase.value}")
            return

        transition = reduce(self._state, event, self.policy)
        self._state = transition.state

        if transition.confirm_leave:
            logger.warning("Leave attempt during test, confirmation requested")

        violation = transition.violation
        if violation is not None:
            logger.warning(f"Violation detected: {violation.kind.value} ({violation.detail})")
            self._audit("violation_recorded", evidence=violation.to_dict())

            # The listener may submit; submit's detach() then cancels this timer
            if transition.restart_alert:
                self._alert_timer.restart()

            if self.on_security_violation:
                try:
                    self.on_security_violation(violation)
                except Exception as e:
                    logger.error(f"Error in violation listener: {e}")

        self._notify_state_change()

    def dismiss_alert(self):
        """Hide the security alert before its timer expires."""
        self._alert_timer.cancel()
        if self._state.alert_visible:
            self._state = dismiss_alert(self._state)
            self._notify_state_change()

    def _on_alert_expired(self):
        if self._state.alert_visible:
            self._state = dismiss_alert(self._state)
            self._notify_state_change()

    # ==================== Fullscreen ====================

    def enter_fullscreen(self) -> bool:
        """
        Request fullscreen on the session container.

        Returns True if the request was issued. is_fullscreen only changes
        once the platform reports the new window state.
        """
        return self._request_fullscreen(enter=True)

    def exit_fullscreen(self) -> bool:
        """Request leaving fullscreen. Same contract as enter_fullscreen()."""
        return self._request_fullscreen(enter=False)

    def _request_fullscreen(self, enter: bool) -> bool:
        if self._state.phase != SessionPhase.ACTIVE:
            logger.debug(f"Fullscreen request ignored in phase {self._state.phase.value}")
            return False

        if self.fullscreen is None:
            logger.warning("Fullscreen not supported or denied")
            return False

        try:
            if enter:
                self.fullscreen.request_fullscreen()
            else:
                self.fullscreen.exit_fullscreen()
            return True
        except Exception as e:
            action = "Fullscreen" if enter else "Exit fullscreen"
            logger.warning(f"{action} not supported or denied: {e}")
            return False

    # ==================== Listeners ====================

    def add_state_listener(self, callback: Callable[[SessionState], None]):
        """Add a listener called with the state after every change."""
        if callback not in self._state_listeners:
            self._state_listeners.append(callback)

    def remove_state_listener(self, callback: Callable[[SessionState], None]):
        if callback in self._state_listeners:
            self._state_listeners.remove(callback)

    def _notify_state_change(self):
        state = self._state
        for listener in list(self._state_listeners):
            try:
                listener(state)
            except Exception as e:
                logger.error(f"Error in state listener: {e}")

    def _audit(self, action: str, evidence: Optional[dict] = None):
        if self.audit is None:
            return
        self.audit.log_event(
            action=action,
            entity="session",
            entity_id=self.policy.test_title,
            evidence=evidence,
        )
