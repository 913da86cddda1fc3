"""
PrintU Kiosk backend - Flask Application Entry Point.

This is a slim app factory that:
1. Verifies the platform and the default CUPS destination (fail-fast)
2. Builds the consumables tracker, transform chain and print service
3. Registers route blueprints
4. Sets up JSON error handlers

ARCHITECTURE:
    Main Thread
    ├── Startup checks (Linux only, `lpstat -d`)
    └── Flask request handling (threaded, one worker thread per request)

    Notify Threads (one per e-mail)
    └── SMTP delivery, fire-and-forget

Shared state (paper count, ink notification signature) lives in ONE
ConsumablesTracker owned by the app and guarded by its lock.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Any, Dict, Optional

from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException, RequestEntityTooLarge

from logging_config import setup_logging, get_logger
from core.command_runner import CommandRunner
from core.exceptions import InvalidPrintRequestError, KioskError, PrinterNotConfiguredError
from core.spooler import CupsSpooler
from models.consumables import ConsumablesState
from modules.transform_chain import DocumentTransformChain
from services.consumables_service import ConsumablesTracker
from services.notifier import MailNotifier
from services.print_service import PrintService
from routes import register_blueprints


# Module logger (configured after setup_logging)
logger = get_logger(__name__)


def create_app(
    config_object: str = "config.Config",
    overrides: Optional[Dict[str, Any]] = None,
    runner: Optional[CommandRunner] = None,
    notifier=None,
    verify_printer: bool = True,
) -> Flask:
    """
    Application factory - creates and configures the Flask app.

    Args:
        config_object: Import path of the config class
        overrides: Extra config values applied after the config class
        runner: Command runner (tests pass a fake)
        notifier: Object with notify(text) (default: MailNotifier from config)
        verify_printer: Run the Linux / default destination startup checks

    Returns:
        Configured Flask application

    Raises:
        PrinterNotConfiguredError: If CUPS has no default destination
    """
    app = Flask(__name__)
    app.config.from_object(config_object)
    if overrides:
        app.config.update(overrides)

    # Configure logging
    log_level = logging.DEBUG if app.config.get("DEBUG") else logging.INFO
    root_logger = setup_logging(
        log_level=log_level,
        enable_file_logging=app.config.get("ENVIRONMENT") == "production",
    )
    app.logger.handlers = root_logger.handlers
    app.logger.setLevel(log_level)

    logger.info(f"Starting PrintU Kiosk backend in {app.config.get('ENVIRONMENT')} mode")

    # =========================================================================
    # CORE INITIALIZATION (FAIL-FAST)
    # =========================================================================

    runner = runner or CommandRunner(logger=get_logger("core.command_runner"))
    spooler = CupsSpooler(
        runner,
        media=app.config["PRINT_MEDIA"],
        ink_device=app.config["INK_DEVICE"],
        logger=get_logger("core.spooler"),
    )

    if verify_printer:
        if not sys.platform.startswith("linux"):
            logger.error("FATAL: This program only supports Linux")
            raise RuntimeError("This program only supports Linux")
        try:
            spooler.verify_default_destination()
        except PrinterNotConfiguredError as e:
            logger.error(f"FATAL: Cannot start backend - {e}")
            raise

    tmp_dir = Path(app.config["TMP_DIR"])
    tmp_dir.mkdir(parents=True, exist_ok=True)

    # =========================================================================
    # SERVICES INITIALIZATION
    # =========================================================================

    notifier = notifier or MailNotifier.from_config(app.config)
    tracker = ConsumablesTracker(
        spooler,
        notifier,
        ConsumablesState(paper_count=app.config["INITIAL_PAPERS"]),
        low_paper_threshold=app.config["LOW_PAPER"],
    )
    transform_chain = DocumentTransformChain(
        runner,
        tmp_dir,
        papersize=app.config["NUP_PAPERSIZE"],
    )
    print_service = PrintService(
        tracker,
        transform_chain,
        spooler,
        check_inks=app.config["CHECK_INKS"],
        strict_single_flight=app.config["STRICT_SINGLE_FLIGHT"],
    )

    app.config["CONSUMABLES_TRACKER"] = tracker
    app.config["PRINT_SERVICE"] = print_service

    register_blueprints(app)

    # =========================================================================
    # ERROR HANDLERS
    # =========================================================================

    @app.errorhandler(InvalidPrintRequestError)
    def handle_invalid_request(e):
        logger.warning(f"Invalid print request: {e}")
        return jsonify({"success": False, "message": e.message}), 400

    @app.errorhandler(RequestEntityTooLarge)
    def handle_file_too_large(e):
        max_mb = app.config.get("MAX_CONTENT_LENGTH", 0) / (1024 * 1024)
        return jsonify({
            "success": False,
            "message": f"File too large. Maximum upload size is {max_mb:.0f} MB.",
        }), 413

    @app.errorhandler(KioskError)
    def handle_kiosk_error(e):
        logger.error(f"Request failed: {e}")
        return jsonify({"success": False, "message": e.message}), 500

    @app.errorhandler(Exception)
    def handle_unexpected(e):
        if isinstance(e, HTTPException):
            return jsonify({"success": False, "message": e.description}), e.code
        logger.error(f"500 error: {e}", exc_info=True)
        return jsonify({"success": False, "message": "Internal server error"}), 500

    logger.info("Application initialized successfully")
    return app


if __name__ == "__main__":
    app = create_app()
    app.run(host="0.0.0.0", port=app.config["PORT"], threaded=True)
