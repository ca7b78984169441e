"""
Session Guard - Main Entry Point

Runs a monitored test session in a Qt window and logs the integrity
report on submission.
"""

import sys
import logging
import argparse
from datetime import datetime
from pathlib import Path

from PySide6.QtWidgets import QApplication, QLabel
from PySide6.QtCore import Qt, QTimer

from session_guard.app.config import get_config_manager
from session_guard.app.utils.logger import setup_logging, get_audit_logger
from session_guard.app.ui.session_window import SecureSessionWindow


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Run a monitored test session")
    parser.add_argument("--policy", type=Path, default=None, help="Session policy JSON file")
    parser.add_argument("--duration", type=int, default=None, help="Test duration in seconds")
    return parser.parse_args(argv)


def main(argv=None):
    """Application entry point"""
    args = parse_args(argv)

    # Initialize configuration first
    config_manager = get_config_manager()
    config = config_manager.config

    # Setup logging
    setup_logging(config.log_file, config.debug_mode)
    logger = logging.getLogger(__name__)

    logger.info("=" * 60)
    logger.info("Session Guard Starting")
    logger.info(f"Timestamp: {datetime.now().isoformat()}")
    logger.info("=" * 60)

    # Load policy configuration
    policy = config_manager.load_policy(args.policy)
    if policy is not None:
        logger.info("Session policy loaded")
        if config.policy_verified:
            logger.info("Policy signature verified")
    else:
        logger.info("Using default session policy")
        policy = config.default_policy

    remaining = args.duration if args.duration is not None else policy.time_remaining_seconds

    app = QApplication(sys.argv[:1])
    app.setApplicationName("Session Guard")
    app.setOrganizationName("ExamProctor")

    body = QLabel("Answer the questions below. Leaving this window is recorded.")
    body.setAlignment(Qt.AlignCenter)
    body.setStyleSheet("color: white; font-size: 18px;")

    def on_submit(report):
        logger.info(f"Integrity report: {report.to_json()}")
        QTimer.singleShot(0, app.quit)

    window = SecureSessionWindow(
        policy,
        content=body,
        on_test_submit=on_submit,
        thresholds=config.thresholds,
        audit=get_audit_logger(),
    )
    window.resize(1024, 768)
    window.show()
    window.set_time_remaining(remaining)
    window.set_test_active(True)
    window.monitor.enter_fullscreen()

    # Host-side countdown; auto-submit when time runs out
    countdown = QTimer(window)

    def tick():
        if not window.time_remaining:
            return
        left = max(0, window.time_remaining - 1)
        window.set_time_remaining(left)
        if left == 0:
            countdown.stop()
            logger.info("Time is up, submitting")
            window.monitor.submit()

    countdown.timeout.connect(tick)
    countdown.start(config.thresholds.COUNTDOWN_REFRESH_MS)

    logger.info("Application UI initialized")

    exit_code = app.exec()

    logger.info(f"Application exiting with code {exit_code}")
    return exit_code


if __name__ == "__main__":
    sys.exit(main())
