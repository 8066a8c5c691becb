"""
Blueprint Common Utilities
==========================

Shared helper functions for all API blueprints.
Import these instead of duplicating helper code in each blueprint.

Usage:
    from app.blueprints.api._common import (
        get_json, success, fail, not_found,
        get_irrigation_service, get_financial_service, ...
    )

This module centralizes:
- Service container access
- Request JSON and query parsing
- Standardized response helpers
- Common service accessors
"""

from __future__ import annotations

import logging
from typing import Any, Type, TypeVar

from flask import current_app, request
from pydantic import BaseModel

from app.domain.exceptions import ValidationError
from app.utils.http import error_response, parse_body, success_response

logger = logging.getLogger("api._common")

ModelT = TypeVar("ModelT", bound=BaseModel)

# ============================================================================
# CONTAINER ACCESS
# ============================================================================


def get_container():
    """
    Get the service container from Flask app config.

    Returns:
        ServiceContainer: The application service container

    Raises:
        RuntimeError: If container is not configured
    """
    container = current_app.config.get("CONTAINER")
    if not container:
        raise RuntimeError("ServiceContainer not found in app config")
    return container


def get_irrigation_service():
    return get_container().irrigation_service


def get_water_analytics():
    return get_container().water_analytics


def get_irrigation_planner():
    return get_container().irrigation_planner


def get_financial_service():
    return get_container().financial_service


def get_financial_reports():
    return get_container().financial_reports


def get_crop_service():
    return get_container().crop_service


def get_equipment_service():
    return get_container().equipment_service


def get_scheduler():
    return get_container().scheduler


# ============================================================================
# REQUEST HELPERS
# ============================================================================


def get_json() -> dict:
    """
    Get JSON request body with silent failure.

    Returns:
        dict: Parsed JSON body or empty dict if not available
    """
    return request.get_json(silent=True) or {}


def parse_json(schema: Type[ModelT]) -> ModelT:
    """Validate the request body against ``schema``; errors become a 400 via ``safe_route``."""
    return parse_body(schema, get_json())


def body_dict(schema: Type[ModelT], *, partial: bool = False) -> dict[str, Any]:
    """
    Validated body as JSON-shaped data for the services.

    Creates keep schema defaults and drop nulls; ``partial`` updates keep only
    the fields the client actually sent.
    """
    model = parse_json(schema)
    if partial:
        return model.model_dump(mode="json", exclude_unset=True)
    return model.model_dump(mode="json", exclude_none=True)


def query_int(name: str, default: int, *, minimum: int = 1, maximum: int = 3650) -> int:
    raw = request.args.get(name)
    if raw is None or raw == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValidationError(f"'{name}' must be an integer") from None
    return max(minimum, min(maximum, value))


def query_bool(name: str, default: bool = False) -> bool:
    raw = request.args.get(name)
    if raw is None:
        return default
    return raw.lower() in {"1", "true", "yes", "on"}


# ============================================================================
# RESPONSE HELPERS
# ============================================================================


def success(data: dict | list | None = None, status: int = 200, *, message: str | None = None):
    """
    Standard success response wrapper.

    Returns:
        Flask Response with format: {"ok": true, "data": ..., "error": null}
    """
    return success_response(data, status, message=message)


def fail(message: str, status: int = 400, *, details: dict | None = None):
    """
    Standard error response wrapper.

    Returns:
        Flask Response with format: {"ok": false, "data": null, "error": {...}}
    """
    return error_response(message, status, details=details)


def not_found(what: str):
    return fail(f"{what} not found", 404)


def dump(items) -> list[dict[str, Any]]:
    """Serialize a list of records."""
    return [item.to_dict() for item in items]
