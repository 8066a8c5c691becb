"""
Scheduler Health Endpoints
==========================

Health check, job listing and execution history for the UnifiedScheduler.
"""

from __future__ import annotations

import logging

from flask import Blueprint, Response, request

from app.blueprints.api._common import (
    get_scheduler as _scheduler,
    query_int as _query_int,
    success as _success,
)
from app.utils.http import safe_route

logger = logging.getLogger("health_api")


def register_scheduler_routes(health_api: Blueprint):
    """Register scheduler health routes on the blueprint."""

    @health_api.get("/scheduler")
    @safe_route("Failed to get scheduler health")
    def get_scheduler_health() -> Response:
        """
        Scheduler health check plus the configured jobs.

        Query params:
        - namespace: only jobs in this namespace (irrigation, financial, crop)
        """
        scheduler = _scheduler()
        jobs = scheduler.get_jobs(namespace=request.args.get("namespace") or None)
        return _success(
            {
                "health": scheduler.health_check(),
                "status": scheduler.get_status(),
                "jobs": [job.to_dict() for job in jobs],
            }
        )

    @health_api.get("/scheduler/history")
    @safe_route("Failed to get scheduler history")
    def get_scheduler_history() -> Response:
        """
        Recent job executions, newest first.

        Query params:
        - job_id: one job only
        - limit: max results (default 50)
        """
        history = _scheduler().get_history(
            job_id=request.args.get("job_id") or None,
            limit=_query_int("limit", 50, maximum=1000),
        )
        return _success([result.to_dict() for result in history])
