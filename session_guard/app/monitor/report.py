"""
Session Guard - Monitor: Scoring & Report Builder

Integrity score and the final report handed to the submission collaborator.
"""

import json
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Tuple

from session_guard.app.config import MonitorThresholds
from session_guard.app.monitor.classifier import Violation
from session_guard.app.monitor.events import utc_now
from session_guard.app.monitor.state import SessionState


def security_score(violation_count: int, penalty: int = 10, max_score: int = 100) -> int:
    """Integrity score: max_score minus penalty per violation, floored at 0."""
    return max(0, max_score - penalty * violation_count)


@dataclass(frozen=True)
class IntegrityReport:
    """Final integrity report for a session."""
    violations: Tuple[Violation, ...]
    tab_switch_count: int
    submission_time: datetime
    security_score: int
    log_digest: str
    test_title: str = ""

    @property
    def violation_count(self) -> int:
        return len(self.violations)

    def to_dict(self) -> dict:
        return {
            "violations": [v.to_dict() for v in self.violations],
            "tabSwitchCount": self.tab_switch_count,
            "submissionTime": self.submission_time.isoformat(),
            "securityScore": self.security_score,
            "logDigest": self.log_digest,
            "testTitle": self.test_title,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict())


def build_report(
    state: SessionState,
    test_title: str = "",
    submission_time: Optional[datetime] = None,
    thresholds: Optional[MonitorThresholds] = None,
) -> IntegrityReport:
    """Snapshot a session state into a report."""
    thresholds = thresholds or MonitorThresholds()

    return IntegrityReport(
        violations=tuple(state.violations),
        tab_switch_count=state.tab_switch_count,
        submission_time=submission_time or utc_now(),
        security_score=security_score(
            state.violation_count,
            penalty=thresholds.VIOLATION_PENALTY,
            max_score=thresholds.MAX_SCORE,
        ),
        log_digest=state.log_digest,
        test_title=test_title,
    )
