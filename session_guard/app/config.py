"""
Session Guard - Configuration Management

Handles environment variables and loading of signed session policy files.
Monitor thresholds are defaults; the per-session policy comes from the
exam host and may be RSA-signed.
"""

import os
import json
import logging
from dataclasses import dataclass, field
from typing import Optional
from pathlib import Path
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding
from cryptography.exceptions import InvalidSignature

logger = logging.getLogger(__name__)


@dataclass
class MonitorThresholds:
    """Monitor constants - configurable via environment"""
    # Alert banner
    ALERT_DISMISS_MS: int = 5000  # Auto-dismiss delay for security alerts

    # Scoring
    VIOLATION_PENALTY: int = 10  # Points deducted per violation
    MAX_SCORE: int = 100  # Score of a clean session

    # UI
    COUNTDOWN_REFRESH_MS: int = 1000


@dataclass(frozen=True)
class SessionPolicy:
    """
    Per-session policy supplied by the exam host.

    Never mutated by the monitor.
    """
    test_title: str = "Test in Progress"
    time_remaining_seconds: Optional[int] = None
    allow_tab_switch: bool = False
    show_warnings: bool = True

    def __post_init__(self):
        if self.time_remaining_seconds is not None and self.time_remaining_seconds < 0:
            raise ValueError(
                f"time_remaining_seconds must be >= 0, got {self.time_remaining_seconds}"
            )

    @classmethod
    def from_dict(cls, data: dict) -> "SessionPolicy":
        """Build a policy from a policy-file payload."""
        defaults = cls()
        return cls(
            test_title=data.get("test_title", defaults.test_title),
            time_remaining_seconds=data.get("time_remaining_seconds"),
            allow_tab_switch=bool(data.get("allow_tab_switch", defaults.allow_tab_switch)),
            show_warnings=bool(data.get("show_warnings", defaults.show_warnings)),
        )

    def to_dict(self) -> dict:
        return {
            "test_title": self.test_title,
            "time_remaining_seconds": self.time_remaining_seconds,
            "allow_tab_switch": self.allow_tab_switch,
            "show_warnings": self.show_warnings,
        }


@dataclass
class AppConfig:
    """Main application configuration"""
    thresholds: MonitorThresholds = field(default_factory=MonitorThresholds)
    default_policy: SessionPolicy = field(default_factory=SessionPolicy)

    # Paths
    data_dir: Path = field(default_factory=lambda: Path.home() / ".session_guard")
    log_file: Path = field(default_factory=lambda: Path.home() / ".session_guard" / "app.log")

    # Policy
    policy_public_key: Optional[bytes] = None
    policy_verified: bool = False

    # Runtime
    debug_mode: bool = False


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class ConfigManager:
    """Manages loading and verification of configuration"""

    def __init__(self):
        self.config = AppConfig()
        self._load_environment()
        self._ensure_directories()

    def _load_environment(self):
        """Load configuration from environment variables"""
        from dotenv import load_dotenv
        load_dotenv()

        data_dir = os.getenv("SESSION_GUARD_DATA_DIR")
        if data_dir:
            self.config.data_dir = Path(data_dir)
            self.config.log_file = self.config.data_dir / "app.log"

        # Debug mode
        self.config.debug_mode = _env_flag("SESSION_GUARD_DEBUG", False)

        # Alert delay
        alert_ms = os.getenv("SESSION_GUARD_ALERT_DISMISS_MS")
        if alert_ms:
            self.config.thresholds.ALERT_DISMISS_MS = int(alert_ms)

        # Default session policy
        defaults = SessionPolicy()
        self.config.default_policy = SessionPolicy(
            test_title=os.getenv("SESSION_GUARD_TEST_TITLE", defaults.test_title),
            allow_tab_switch=_env_flag("SESSION_GUARD_ALLOW_TAB_SWITCH", defaults.allow_tab_switch),
            show_warnings=_env_flag("SESSION_GUARD_SHOW_WARNINGS", defaults.show_warnings),
        )

        # Public key for signed policies (PEM file path)
        key_path = os.getenv("SESSION_GUARD_POLICY_PUBLIC_KEY")
        if key_path and Path(key_path).exists():
            self.config.policy_public_key = Path(key_path).read_bytes()

        logger.info(f"Loaded configuration: data dir = {self.config.data_dir}")

    def _ensure_directories(self):
        """Create necessary directories"""
        self.config.data_dir.mkdir(parents=True, exist_ok=True)

    def load_policy(self, policy_path: Optional[Path] = None) -> Optional[SessionPolicy]:
        """
        Load and verify a session policy file.

        Returns the policy, or None if the file is missing or invalid.
        """
        if policy_path is None:
            policy_path = self.config.data_dir / "policy.json"

        if not policy_path.exists():
            logger.warning("No policy file found, using defaults")
            return None

        try:
            with open(policy_path, "r") as f:
                policy_data = json.load(f)

            # Verify signature if we have a public key
            if self.config.policy_public_key:
                if "signature" not in policy_data:
                    logger.error("Policy is unsigned but a public key is configured")
                    return None
                if not self._verify_policy_signature(policy_data):
                    logger.error("Policy signature verification failed!")
                    return None
                self.config.policy_verified = True

            policy = SessionPolicy.from_dict(policy_data.get("session", {}))
            logger.info(f"Policy loaded successfully: {policy.test_title}")
            return policy

        except (OSError, ValueError, TypeError) as e:
            logger.error(f"Failed to load policy: {e}")
            return None

    def _verify_policy_signature(self, policy_data: dict) -> bool:
        """Verify RSA signature of policy data"""
        try:
            signature = bytes.fromhex(policy_data["signature"])

            # Create payload without signature
            payload = {k: v for k, v in policy_data.items() if k != "signature"}
            payload_bytes = json.dumps(payload, sort_keys=True).encode()

            public_key = serialization.load_pem_public_key(self.config.policy_public_key)

            public_key.verify(
                signature,
                payload_bytes,
                padding.PKCS1v15(),
                hashes.SHA256()
            )
            return True

        except InvalidSignature:
            return False
        except ValueError as e:
            logger.error(f"Signature verification error: {e}")
            return False

    def get_default_policy(self) -> dict:
        """Generate default policy JSON for reference"""
        return {"session": self.config.default_policy.to_dict()}


# Global config instance
_config_manager: Optional[ConfigManager] = None


def get_config() -> AppConfig:
    """Get the global configuration instance"""
    return get_config_manager().config


def get_config_manager() -> ConfigManager:
    """Get the configuration manager instance"""
    global _config_manager
    if _config_manager is None:
        _config_manager = ConfigManager()
    return _config_manager
