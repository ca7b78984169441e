"""
Session Guard - Monitor: Violation Log Chain

Hash chain over the violation log. Each digest covers the previous digest
and the canonical JSON of one violation, so the head digest issued with a
report commits to the full ordered log.
"""

import hashlib
import json
from typing import Iterable

from session_guard.app.monitor.classifier import Violation

GENESIS_DIGEST = hashlib.sha256(b"session-guard/violation-log").hexdigest()


def chain_digest(previous: str, violation: Violation) -> str:
    """Digest of a log extended by one violation."""
    entry = json.dumps(violation.to_dict(), sort_keys=True)
    return hashlib.sha256(f"{previous}:{entry}".encode()).hexdigest()


def log_digest(violations: Iterable[Violation]) -> str:
    """Head digest for an ordered sequence of violations."""
    digest = GENESIS_DIGEST
    for violation in violations:
        digest = chain_digest(digest, violation)
    return digest


def verify_log(violations: Iterable[Violation], expected_digest: str) -> bool:
    """Check that a violation sequence matches an issued head digest."""
    return log_digest(violations) == expected_digest
