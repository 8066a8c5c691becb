"""
Workers module for background services and scheduled tasks.

This module contains:
- unified_scheduler: Unified scheduler for all background tasks
- scheduled_tasks: Task definitions organized by namespace (irrigation.*, financial.*, crop.*)
"""

__all__ = [
    "UnifiedScheduler",
    "configure_scheduler",
    "register_all_tasks",
    "schedule_default_jobs",
]

from app.workers.unified_scheduler import UnifiedScheduler
from app.workers.scheduled_tasks import configure_scheduler, register_all_tasks, schedule_default_jobs
