"""
Scheduled Tasks: background task definitions for the UnifiedScheduler.

Tasks are organized by namespace:
- irrigation.*: zone monitoring tick and per-event auto-stop
- financial.*: recurring transaction processing
- crop.*: daily crop stage and pest-check monitoring

Usage:
    from app.workers.scheduled_tasks import configure_scheduler

    configure_scheduler(container.scheduler, container)
    container.scheduler.start()
"""

from __future__ import annotations

import logging
from functools import wraps
from typing import TYPE_CHECKING, Any

from app.services.application.irrigation_service import AUTO_STOP_TASK

if TYPE_CHECKING:
    from app.services.container import ServiceContainer
    from app.workers.unified_scheduler import UnifiedScheduler

logger = logging.getLogger(__name__)

IRRIGATION_MONITOR_TASK = "irrigation.monitor"
RECURRING_TRANSACTIONS_TASK = "financial.recurring_transactions"
CROP_MONITOR_TASK = "crop.monitor"


# ==================== Irrigation Namespace Tasks ====================


def irrigation_monitor_task(container: "ServiceContainer") -> dict[str, Any]:
    """
    Per-minute irrigation tick: scheduled starts, offline sensors and
    system status.
    """
    return container.irrigation_service.run_monitoring_cycle(container.clock.now())


def irrigation_auto_stop_task(
    container: "ServiceContainer",
    zone_id: str,
    event_id: str,
    auto_stop: bool = True,
) -> bool:
    """
    Stop an irrigation event when its planned duration elapses.

    Scheduled once per started event; a manual stop removes the job first.
    """
    return container.irrigation_service.handle_auto_stop(zone_id, event_id, auto_stop=auto_stop)


# ==================== Financial Namespace Tasks ====================


def financial_recurring_transactions_task(container: "ServiceContainer") -> dict[str, Any]:
    """
    Materialise due recurring transactions.
    """
    created = container.financial_service.process_recurring_transactions(container.clock.now())
    return {"created": created, "count": len(created)}


# ==================== Crop Namespace Tasks ====================


def crop_monitor_task(container: "ServiceContainer") -> dict[str, Any]:
    """
    Daily crop check: stage reviews due and overdue pest monitoring.
    """
    return container.crop_service.run_monitoring_cycle(container.clock.now())


# ==================== Registration ====================


def register_all_tasks(
    scheduler: "UnifiedScheduler",
    container: "ServiceContainer",
) -> None:
    """
    Register all tasks with the unified scheduler.

    Args:
        scheduler: UnifiedScheduler instance
        container: ServiceContainer with all services
    """
    logger.info("Registering scheduled tasks...")

    def bind(task_fn):
        @wraps(task_fn)
        def bound_task(*args, **kwargs):
            try:
                return task_fn(container, *args, **kwargs)
            # Intentional broad catch: log with context, then let the scheduler record the failure.
            except Exception as e:
                logger.error("Scheduled task %s raised: %s", task_fn.__name__, e, exc_info=True)
                raise

        return bound_task

    scheduler.register_task(IRRIGATION_MONITOR_TASK, bind(irrigation_monitor_task))
    scheduler.register_task(AUTO_STOP_TASK, bind(irrigation_auto_stop_task))
    scheduler.register_task(RECURRING_TRANSACTIONS_TASK, bind(financial_recurring_transactions_task))
    scheduler.register_task(CROP_MONITOR_TASK, bind(crop_monitor_task))

    logger.info("Registered %s tasks", len(scheduler._tasks))


def schedule_default_jobs(scheduler: "UnifiedScheduler", config: Any) -> None:
    """
    Schedule the recurring jobs at their configured timing.

    Call this after register_all_tasks(). Auto-stop jobs are scheduled per
    event by the irrigation service, not here.
    """
    logger.info("Scheduling default jobs...")

    scheduler.schedule_interval(
        IRRIGATION_MONITOR_TASK,
        interval_seconds=config.irrigation_monitor_interval,
        job_id="irrigation_monitor",
    )
    scheduler.schedule_daily(
        RECURRING_TRANSACTIONS_TASK,
        time_of_day=config.recurring_transactions_time,
        job_id="financial_recurring_transactions_daily",
    )
    scheduler.schedule_daily(
        CROP_MONITOR_TASK,
        time_of_day=config.crop_monitor_time,
        job_id="crop_monitor_daily",
    )

    logger.info("Default jobs scheduled")


def configure_scheduler(scheduler: "UnifiedScheduler", container: "ServiceContainer") -> None:
    """Register every task and schedule the default jobs."""
    register_all_tasks(scheduler, container)
    schedule_default_jobs(scheduler, container.config)
