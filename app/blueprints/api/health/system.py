"""
System Health Endpoints
=======================

Liveness and overall backend health.
"""

from __future__ import annotations

import logging

from flask import Blueprint, Response

from app.blueprints.api._common import (
    get_container as _container,
    success as _success,
)
from app.utils.http import safe_route
from app.utils.time import iso_now

logger = logging.getLogger("health_api")


def register_system_routes(health_api: Blueprint):
    """Register system health routes on the blueprint."""

    @health_api.get("/")
    @health_api.get("/ping")
    @safe_route("Failed to handle ping request")
    def ping() -> Response:
        """
        Basic liveness check for monitoring tools.

        Returns:
            {"status": "ok", "timestamp": "..."}
        """
        return _success({"status": "ok", "timestamp": iso_now()})

    @health_api.get("/system")
    @safe_route("Failed to get system health")
    def get_system_health() -> Response:
        """
        Backend health: irrigation system status, live irrigation and bus metrics.

        Returns:
            {
                "status": "healthy|degraded|critical",
                "irrigation": {...},
                "event_bus": {...},
                "scheduler": {...},
                "timestamp": "..."
            }
        """
        container = _container()
        irrigation = container.irrigation_service
        system_status = irrigation.update_system_status()
        bus_metrics = container.event_bus.get_metrics()
        scheduler_status = container.scheduler.get_status()

        if system_status.value == "maintenance":
            status = "critical"
        elif bus_metrics["is_dropping"] or system_status.value == "offline":
            status = "degraded"
        else:
            status = "healthy"

        return _success(
            {
                "status": status,
                "irrigation": {
                    "system_status": system_status.value,
                    "zones": len(irrigation.get_all_zones()),
                    "active_zones": len(irrigation.get_active_zones()),
                    "irrigating": len(irrigation.get_active_irrigation_events()),
                    "active_alerts": len(irrigation.get_alerts(active_only=True)),
                },
                "event_bus": bus_metrics,
                "scheduler": scheduler_status,
                "timestamp": iso_now(),
            }
        )
