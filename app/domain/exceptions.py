"""Centralized exception hierarchy for the farm management backend.

All domain and service exceptions inherit from :class:`FarmError` so that
callers can catch a single base class when they need a broad safety net, yet
still match on specific subclasses where narrower handling is appropriate.

Blueprint-level error handling (see ``app/utils/http.safe_route``) maps these
to the correct HTTP status codes automatically.

Error discipline
----------------
Services follow one rule:

* Lookups and soft mutations (``get_*``, ``update_*``, ``delete_*``,
  ``stop_irrigation``, alert/notification status changes) return ``None`` /
  ``False`` / ``[]`` when the target does not exist.
* Guarded commands (``add_sensor``, ``create_schedule``, ``start_irrigation``,
  ``add_treatment``, equipment record additions, ``generate_report``) raise a
  typed subclass below when a precondition fails.

Hierarchy
---------
::

    FarmError (base, maps to 500)
    ├── ValidationError          (400: bad input from caller)
    ├── NotFoundError            (404: entity does not exist)
    ├── ConflictError            (409: state conflict, e.g. zone busy)
    ├── ServiceError             (500: business-logic failure)
    │   └── ExternalServiceError (502: weather provider / network)
    └── ConfigurationError       (500: missing / invalid config)
"""

from __future__ import annotations


class FarmError(Exception):
    """Base exception for all farm management errors.

    Parameters
    ----------
    message:
        Human-readable description. Messages of 4xx subclasses are written
        for the caller and surfaced verbatim by the HTTP layer.
    detail:
        Optional machine-readable context dict attached to the error for
        structured logging.
    """

    http_status: int = 500

    def __init__(self, message: str = "", *, detail: dict | None = None) -> None:
        super().__init__(message)
        self.detail = detail or {}


# ── Client errors (4xx) ──────────────────────────────────────────────


class ValidationError(FarmError):
    """Caller supplied invalid or incomplete input (HTTP 400)."""

    http_status: int = 400


class NotFoundError(FarmError):
    """Requested entity does not exist (HTTP 404)."""

    http_status: int = 404


class ConflictError(FarmError):
    """Operation conflicts with existing state (HTTP 409)."""

    http_status: int = 409


# ── Server errors (5xx) ──────────────────────────────────────────────


class ServiceError(FarmError):
    """Business-logic failure in a service method (HTTP 500)."""

    http_status: int = 500


class ExternalServiceError(ServiceError):
    """Third-party or network dependency failure (HTTP 502)."""

    http_status: int = 502


class ConfigurationError(FarmError):
    """Missing or invalid application configuration (HTTP 500)."""

    http_status: int = 500
