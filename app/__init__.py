from __future__ import annotations

import atexit
import contextlib
import logging
import signal
import threading
from typing import Any

from flask import Flask, request
from werkzeug.exceptions import HTTPException

from app.blueprints.api.crops import crops_bp
from app.blueprints.api.equipment import equipment_bp
from app.blueprints.api.financial import financial_bp
from app.blueprints.api.health import health_api
from app.blueprints.api.irrigation import irrigation_bp
from app.config import load_config, setup_logging
from app.extensions import init_extensions, socketio


def create_app(config_overrides: dict[str, Any] | None = None) -> Flask:
    """
    Build the Flask application and its service container.

    Args:
        config_overrides: AppConfig attributes to replace, by name
            (e.g. ``{"scheduler_enabled": False}`` in tests).
    """
    config = load_config()
    if config_overrides:
        for key, value in config_overrides.items():
            attr = key if hasattr(config, key) else key.lower()
            if not hasattr(config, attr):
                raise ValueError(f"Unknown configuration key: {key}")
            setattr(config, attr, value)

    # Configure logging early so container startup is visible in the terminal and farm.log.
    setup_logging(debug=config.DEBUG, log_dir=config.log_dir)

    flask_app = Flask(__name__)
    flask_app.config.update(config.as_flask_config())
    flask_app.config["MAX_CONTENT_LENGTH"] = 4 * 1024 * 1024

    # Initialize Socket.IO BEFORE building ServiceContainer (AlertEmitter needs it)
    init_extensions(flask_app, config)

    from app.services.container import ServiceContainer

    container = ServiceContainer.build(config, socketio=socketio)
    flask_app.config["CONTAINER"] = container

    if config.scheduler_enabled:
        container.scheduler.start()
        logging.info("✓ UnifiedScheduler started")
    else:
        logging.info("Scheduler disabled (FARM_SCHEDULER_ENABLED=false); jobs run only on demand")

    # ── Graceful shutdown handlers ──────────────────────────────────
    _shutdown_lock = threading.Lock()
    _shutdown_done = False

    def _graceful_shutdown(reason: str = "unknown") -> None:
        nonlocal _shutdown_done
        with _shutdown_lock:
            if _shutdown_done:
                return
            _shutdown_done = True
        logging.info("Graceful shutdown initiated (%s)", reason)
        try:
            container.shutdown()
        except Exception as exc:
            logging.warning("Error during graceful shutdown: %s", exc)

    def _signal_handler(signum: int, _frame: object) -> None:
        sig_name = signal.Signals(signum).name
        logging.info("Received %s, shutting down", sig_name)
        _graceful_shutdown(sig_name)
        raise SystemExit(0)

    atexit.register(_graceful_shutdown, "atexit")

    # Only a process that runs background jobs needs to stop them on SIGINT/SIGTERM
    if config.scheduler_enabled:
        for sig in (signal.SIGINT, signal.SIGTERM):
            with contextlib.suppress(OSError, ValueError):
                signal.signal(sig, _signal_handler)

    # Global JSON error handler: catches anything that escapes a route on
    # /api/ and returns a generic message instead of leaking stack traces.
    @flask_app.errorhandler(Exception)
    def _handle_unhandled(exc):
        from app.domain.exceptions import FarmError
        from app.utils.http import error_response, safe_error

        if isinstance(exc, HTTPException):
            status = int(exc.code or 500)
            if status >= 500:
                return safe_error(exc, status, context="http-exception")
            return error_response(exc.description or "Request failed", status)

        if not request.path.startswith("/api/"):
            raise exc

        if isinstance(exc, FarmError):
            status = exc.http_status
            if status >= 500:
                return safe_error(exc, status, context=type(exc).__name__)
            return error_response(str(exc) or "Request failed", status)

        return safe_error(exc, 500, context="unhandled")

    flask_app.register_blueprint(irrigation_bp, url_prefix="/api/irrigation")
    flask_app.register_blueprint(financial_bp, url_prefix="/api/financial")
    flask_app.register_blueprint(crops_bp, url_prefix="/api/crops")
    flask_app.register_blueprint(equipment_bp, url_prefix="/api/equipment")
    flask_app.register_blueprint(health_api, url_prefix="/api/health")

    logger = logging.getLogger(__name__)
    logger.info("Farm management backend initialized (environment=%s).", config.environment)

    return flask_app


__all__ = ["create_app", "socketio"]
