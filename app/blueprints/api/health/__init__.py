"""
Health API Blueprint
====================

Health monitoring endpoints for the backend and its background workers.

Routes:
- GET /api/health/ - Basic liveness check
- GET /api/health/ping - Liveness alias for monitoring tools
- GET /api/health/system - Irrigation system status and event bus metrics
- GET /api/health/scheduler - Scheduler health check and configured jobs
- GET /api/health/scheduler/history - Recent job executions
"""

from __future__ import annotations

import logging

from flask import Blueprint

logger = logging.getLogger("health_api")

# Create the blueprint
health_api = Blueprint("health_api", __name__)

# Import and register routes from submodules
from app.blueprints.api.health.scheduler import register_scheduler_routes  # noqa: E402
from app.blueprints.api.health.system import register_system_routes  # noqa: E402

# Register all routes on the blueprint
register_system_routes(health_api)
register_scheduler_routes(health_api)

__all__ = ["health_api"]
