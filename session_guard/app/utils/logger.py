"""
Session Guard - Logging Utilities

Structured JSON logging and a hash-chained audit trail.
"""

import logging
import json
import hashlib
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional
from logging.handlers import RotatingFileHandler


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


class JSONFormatter(logging.Formatter):
    """Format log records as JSON for structured logging"""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": _utc_now_iso(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        # Add exception info if present
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        # Add extra fields
        if hasattr(record, "extra_data"):
            log_data["data"] = record.extra_data

        return json.dumps(log_data)


class AuditLogger:
    """
    Specialized logger for the session audit trail.

    Events are append-only; each one carries the hash of the previous
    event so that removed or edited lines break the chain.
    """

    def __init__(self, log_file: Path):
        self.log_file = log_file
        self.logger = logging.getLogger(f"audit.{log_file}")
        self.logger.propagate = False
        self._last_hash = ""

        log_file.parent.mkdir(parents=True, exist_ok=True)

        if not self.logger.handlers:
            handler = RotatingFileHandler(
                log_file,
                maxBytes=10 * 1024 * 1024,  # 10MB
                backupCount=5,
            )
            handler.setFormatter(logging.Formatter("%(message)s"))
            self.logger.addHandler(handler)
        self.logger.setLevel(logging.INFO)

    def log_event(
        self,
        action: str,
        entity: str,
        entity_id: Optional[str] = None,
        evidence: Optional[dict] = None,
    ) -> dict:
        """Log an audit event and return it with its chain hash."""
        event = {
            "action": action,
            "entity": entity,
            "entity_id": entity_id,
            "evidence": evidence,
            "timestamp": _utc_now_iso(),
            "prev_hash": self._last_hash,
        }

        event_json = json.dumps(event, sort_keys=True)
        event["hash"] = hashlib.sha256(event_json.encode()).hexdigest()[:16]
        self._last_hash = event["hash"]

        self.logger.info(json.dumps(event))
        return event


def setup_logging(log_file: Path, debug: bool = False):
    """
    Configure application logging.

    Args:
        log_file: Path to main log file
        debug: Enable debug level logging
    """
    log_file.parent.mkdir(parents=True, exist_ok=True)

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG if debug else logging.INFO)

    # Console handler (human readable)
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.DEBUG if debug else logging.INFO)
    console_format = logging.Formatter(
        "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )
    console_handler.setFormatter(console_format)
    root_logger.addHandler(console_handler)

    # File handler (JSON structured)
    file_handler = RotatingFileHandler(
        log_file,
        maxBytes=50 * 1024 * 1024,  # 50MB
        backupCount=10,
    )
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(JSONFormatter())
    root_logger.addHandler(file_handler)

    logging.info(f"Logging initialized. File: {log_file}, Debug: {debug}")


# Global audit logger instance
_audit_logger: Optional[AuditLogger] = None


def get_audit_logger() -> AuditLogger:
    """Get or create the global audit logger"""
    global _audit_logger
    if _audit_logger is None:
        from session_guard.app.config import get_config
        config = get_config()
        _audit_logger = AuditLogger(config.data_dir / "audit.log")
    return _audit_logger
