"""
Unit tests for the session reducer.
"""

import pytest

from session_guard.app.config import SessionPolicy
from session_guard.app.monitor.events import RawEvent
from session_guard.app.monitor.state import (
    SessionPhase, SessionState, begin_submit, close_session, dismiss_alert, reduce, start_session
)

POLICY = SessionPolicy()


class TestReduce:
    """Tests for reduce(state, event, policy)."""

    def test_input_state_untouched(self):
        state = start_session()

        transition = reduce(state, RawEvent.context_menu(), POLICY)

        assert state.violations == ()
        assert transition.state.violation_count == 1
        assert transition.state is not state

    def test_ignored_event_keeps_state(self):
        state = start_session()

        transition = reduce(state, RawEvent.key("q"), POLICY)

        assert transition.state is state
        assert transition.violation is None
        assert not transition.restart_alert

    @pytest.mark.parametrize("phase", [
        SessionPhase.INACTIVE, SessionPhase.SUBMITTING, SessionPhase.CLOSED,
    ])
    def test_non_active_phases_frozen(self, phase):
        state = SessionState(phase=phase)

        transition = reduce(state, RawEvent.context_menu(), POLICY)

        assert transition.state is state
        assert transition.violation is None

    def test_violation_raises_alert(self):
        transition = reduce(start_session(), RawEvent.visibility(True), POLICY)

        assert transition.state.alert_visible
        assert transition.restart_alert
        assert transition.state.tab_switch_count == 1

    def test_quiet_policy_records_without_alert(self):
        quiet = SessionPolicy(show_warnings=False)

        transition = reduce(start_session(), RawEvent.visibility(True), quiet)

        assert transition.violation is not None
        assert not transition.state.alert_visible
        assert not transition.restart_alert

    def test_before_unload_requests_confirmation(self):
        state = start_session()

        transition = reduce(state, RawEvent.before_unload(), POLICY)

        assert transition.confirm_leave
        assert transition.state is state

    def test_fullscreen_event_updates_flag(self):
        transition = reduce(start_session(), RawEvent.fullscreen(True), POLICY)

        assert transition.state.is_fullscreen
        assert transition.violation is None

    def test_log_order_is_event_order(self):
        state = start_session()
        events = [RawEvent.key("F12"), RawEvent.context_menu(), RawEvent.visibility(True)]
        for event in events:
            state = reduce(state, event, POLICY).state

        assert [v.timestamp for v in state.violations] == [e.time for e in events]


class TestPhaseTransitions:
    """Tests for the lifecycle helpers."""

    def test_submit_hides_alert(self):
        state = reduce(start_session(), RawEvent.context_menu(), POLICY).state

        submitting = begin_submit(state)

        assert submitting.phase == SessionPhase.SUBMITTING
        assert not submitting.alert_visible
        assert submitting.violations == state.violations

    def test_close(self):
        assert close_session(begin_submit(start_session())).phase == SessionPhase.CLOSED

    def test_dismiss_alert_noop_when_hidden(self):
        state = start_session()
        assert dismiss_alert(state) is state


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
