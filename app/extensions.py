"""Flask extension instances shared across the application.

``socketio`` is created unbound at import time so blueprints and the
``AlertEmitter`` can reference it; :func:`init_extensions` binds it to the
Flask app using the transport and CORS settings from ``AppConfig``.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from flask import Flask
from flask_socketio import SocketIO

if TYPE_CHECKING:
    from app.config import AppConfig

logger = logging.getLogger(__name__)

socketio = SocketIO(
    async_mode="threading",
    logger=False,
    engineio_logger=False,
    ping_timeout=60,
    ping_interval=25,
)


def parse_transports(raw: str | None) -> list[str]:
    """Split a comma separated transport list, falling back to polling."""
    transports = [t.strip() for t in (raw or "").split(",") if t.strip()]
    return transports or ["polling"]


def init_extensions(app: Flask, config: "AppConfig") -> None:
    """Bind Socket.IO to ``app`` for the alert, irrigation and crop namespaces."""
    transports = parse_transports(config.socketio_transports)
    logging.getLogger("engineio").setLevel(logging.WARNING)

    socketio.init_app(
        app,
        cors_allowed_origins=config.socketio_cors_origins or "*",
        transports=transports,
        logger=logging.getLogger("socketio"),
        engineio_logger=False,
    )
    logger.info(
        "Socket.IO initialized (origins=%s, transports=%s)",
        config.socketio_cors_origins,
        ",".join(transports),
    )
