from __future__ import annotations

import functools
import logging
from typing import Any, Callable, TypeVar

from flask import Response, jsonify
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from app.utils.time import iso_now

_log = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

# ---------------------------------------------------------------------------
# Generic user-facing messages; internals never leak
# ---------------------------------------------------------------------------
_GENERIC_MESSAGES: dict[int, str] = {
    400: "Invalid request",
    404: "Resource not found",
    409: "Conflict",
    422: "Unprocessable entity",
    500: "An internal error occurred",
    502: "Upstream service unavailable",
}


def safe_error(
    exc: BaseException,
    status: int = 500,
    *,
    context: str = "",
) -> Response:
    """Return a generic error response while logging the real exception.

    Parameters
    ----------
    exc:
        The caught exception, logged server-side, **never** sent to the
        client.
    status:
        HTTP status code for the response (determines the generic message).
    context:
        Optional human-readable context string logged alongside *exc*,
        e.g. ``"starting irrigation"``.
    """
    _log.error("API error [%s] %s: %s", status, context, exc, exc_info=exc)
    message = _GENERIC_MESSAGES.get(status, _GENERIC_MESSAGES[500])
    return error_response(message, status)


def success_response(
    data: dict | list | None = None,
    status: int = 200,
    *,
    message: str | None = None,
) -> Response:
    payload: dict[str, Any] = {"ok": True, "data": data, "error": None}
    if message is not None:
        payload["message"] = message
    response = jsonify(payload)
    response.status_code = status
    return response


def error_response(
    message: str,
    status: int = 500,
    *,
    details: Any = None,
) -> Response:
    payload: dict[str, Any] = {"message": message, "timestamp": iso_now()}
    if details:
        payload["details"] = details
    response = jsonify({"ok": False, "data": None, "error": payload})
    response.status_code = status
    return response


def parse_body(schema: type[ModelT], raw: dict | None) -> ModelT:
    """Validate a JSON body against a pydantic schema.

    Raises pydantic's ``ValidationError``; :func:`safe_route` turns it into
    a 400 carrying the field errors.
    """
    return schema.model_validate(raw or {})


# ---------------------------------------------------------------------------
# Route decorator replacing per-route try/except blocks
# ---------------------------------------------------------------------------


def safe_route(
    error_message: str = "An internal error occurred",
    *,
    error_status: int = 500,
) -> Callable:
    """Decorator that wraps a Flask route handler with standardized error handling.

    * pydantic ``ValidationError`` -> 400 with ``details``
    * :class:`~app.domain.exceptions.FarmError` -> ``exc.http_status``; the
      message is surfaced for 4xx and replaced by a generic one for 5xx
    * anything else -> logged, generic ``error_status``

    Usage::

        @irrigation_bp.get("/zones")
        @safe_route("Failed to list zones")
        def list_zones():
            svc = get_irrigation_service()
            ...
    """
    from app.domain.exceptions import FarmError

    def decorator(fn: Callable) -> Callable:
        @functools.wraps(fn)
        def wrapper(*args: Any, **kwargs: Any) -> Response:
            try:
                return fn(*args, **kwargs)
            except PydanticValidationError as ve:
                return error_response(
                    "Invalid request",
                    400,
                    details=ve.errors(include_url=False, include_context=False),
                )
            except FarmError as exc:
                status = exc.http_status
                if status >= 500:
                    return safe_error(exc, status, context=error_message)
                return error_response(str(exc) or error_message, status)
            except Exception as exc:
                return safe_error(exc, error_status, context=error_message)

        return wrapper

    return decorator
