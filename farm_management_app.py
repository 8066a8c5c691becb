"""WSGI entry point for the farm management backend.

Used both in development and production: ``farm-backend`` (the console
script) calls :func:`main`, and WSGI servers can import ``app``.
"""
from __future__ import annotations

import logging
import os

from app import create_app, socketio

app = create_app()


def _env_flag_true(name: str) -> bool:
    v = os.getenv(name)
    return bool(v and v.lower() in ("1", "true", "yes", "on"))


def main() -> int:
    host = os.getenv("FARM_HOST", "0.0.0.0")
    port = int(os.getenv("FARM_PORT", "8000"))
    debug = _env_flag_true("FARM_DEBUG")

    logging.info("Starting server on %s:%s", host, port)
    logging.info("SocketIO async_mode: %s", socketio.async_mode)

    try:
        socketio.run(
            app,
            host=host,
            port=port,
            debug=debug,
            use_reloader=False,
            allow_unsafe_werkzeug=True,
        )
        logging.info("Server stopped.")
        return 0
    except KeyboardInterrupt:
        logging.info("Server stopped by user.")
        return 0
    except OSError as exc:
        logging.exception("ERROR: Failed to start server: %s", exc)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
