"""
Centralized scheduling service for all background tasks.

Every periodic or deferred piece of work in the backend goes through one
``UnifiedScheduler`` owned by the service container: the irrigation monitoring
tick, per-event automatic stops, recurring financial transactions and the daily
crop monitor.

Design Principles:
- Single scheduler loop thread, bounded worker pool for job execution
- Time comes from an injected clock, never from ``datetime.now()``
- ``run_pending()`` executes due jobs inline so tests can drive time by hand
- Jobs are grouped by namespace (the task name prefix: irrigation, financial, crop)
"""

from __future__ import annotations

import heapq
import itertools
import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from functools import wraps
from typing import Any, Callable

from app.utils.time import Clock, SystemClock, iso_or_none, parse_hhmm

logger = logging.getLogger(__name__)

WEEKDAY_NAMES = ("mon", "tue", "wed", "thu", "fri", "sat", "sun")

# Health thresholds over the most recent executions
HEALTH_WINDOW = 50
UNHEALTHY_FAILURE_RATE = 0.5
DEGRADED_FAILURE_RATE = 0.2
STALE_AFTER_INTERVALS = 3


class ScheduleType(Enum):
    """How a job's next run is derived."""

    INTERVAL = "interval"  # every N seconds, fixed rate
    DAILY = "daily"  # HH:MM each day
    WEEKLY = "weekly"  # weekday + HH:MM
    ONCE = "once"  # single run, then dropped


@dataclass
class JobResult:
    """Outcome of one job execution."""

    job_id: str
    success: bool
    started_at: datetime
    completed_at: datetime
    result: Any = None
    error: str | None = None

    @property
    def duration_seconds(self) -> float:
        return (self.completed_at - self.started_at).total_seconds()

    def to_dict(self) -> dict[str, Any]:
        return {
            "job_id": self.job_id,
            "success": self.success,
            "started_at": self.started_at.isoformat(),
            "completed_at": self.completed_at.isoformat(),
            "duration_seconds": round(self.duration_seconds, 3),
            "error": self.error,
        }


@dataclass
class ScheduledJob:
    """A registered job plus its run bookkeeping."""

    job_id: str
    task_name: str
    namespace: str
    schedule_type: ScheduleType
    enabled: bool = True
    args: tuple = field(default_factory=tuple)
    kwargs: dict[str, Any] = field(default_factory=dict)

    interval_seconds: int | None = None
    time_of_day: str | None = None
    day_of_week: int | None = None  # 0 = Monday
    run_at: datetime | None = None

    next_run: datetime | None = None
    last_run: datetime | None = None
    run_count: int = 0
    success_count: int = 0
    failure_count: int = 0
    last_error: str | None = None

    def compute_next_run(self, reference: datetime, scheduled: datetime | None = None) -> datetime | None:
        """Next fire time after ``reference``.

        Interval jobs advance from the slot they were scheduled for and jump
        over slots already in the past rather than replaying them.
        """
        if self.schedule_type is ScheduleType.INTERVAL:
            step = timedelta(seconds=int(self.interval_seconds or 60))
            candidate = (scheduled or reference) + step
            if candidate <= reference:
                missed = (reference - candidate) // step + 1
                candidate += step * missed
            return candidate
        if self.schedule_type is ScheduleType.DAILY:
            return next_daily_run(self.time_of_day or "00:00", reference)
        if self.schedule_type is ScheduleType.WEEKLY:
            return next_weekly_run(self.day_of_week or 0, self.time_of_day or "00:00", reference)
        return None

    def record(self, result: JobResult) -> None:
        self.last_run = result.started_at
        self.run_count += 1
        if result.success:
            self.success_count += 1
            self.last_error = None
        else:
            self.failure_count += 1
            self.last_error = result.error

    def to_dict(self) -> dict[str, Any]:
        return {
            "job_id": self.job_id,
            "task_name": self.task_name,
            "namespace": self.namespace,
            "schedule_type": self.schedule_type.value,
            "enabled": self.enabled,
            "interval_seconds": self.interval_seconds,
            "time_of_day": self.time_of_day,
            "day_of_week": self.day_of_week,
            "run_at": iso_or_none(self.run_at),
            "next_run": iso_or_none(self.next_run),
            "last_run": iso_or_none(self.last_run),
            "run_count": self.run_count,
            "success_count": self.success_count,
            "failure_count": self.failure_count,
            "last_error": self.last_error,
        }


def next_daily_run(time_of_day: str, after: datetime) -> datetime:
    hour, minute = parse_hhmm(time_of_day)
    candidate = after.replace(hour=hour, minute=minute, second=0, microsecond=0)
    return candidate if candidate > after else candidate + timedelta(days=1)


def next_weekly_run(day_of_week: int, time_of_day: str, after: datetime) -> datetime:
    hour, minute = parse_hhmm(time_of_day)
    days_ahead = (int(day_of_week) - after.weekday()) % 7
    candidate = (after + timedelta(days=days_ahead)).replace(hour=hour, minute=minute, second=0, microsecond=0)
    return candidate if candidate > after else candidate + timedelta(days=7)


class _RunQueue:
    """Min-heap of (timestamp, seq, job_id).

    Entries are never removed in place. A popped entry is stale when its job
    is gone, disabled, or has since been given a different next run.
    """

    def __init__(self) -> None:
        self._heap: list[tuple[float, int, str]] = []
        self._seq = itertools.count(1)

    def push(self, job: ScheduledJob) -> None:
        if job.enabled and job.next_run is not None:
            heapq.heappush(self._heap, (job.next_run.timestamp(), next(self._seq), job.job_id))

    def pop_due(self, now_ts: float) -> list[tuple[float, str]]:
        due = []
        while self._heap and self._heap[0][0] <= now_ts:
            ts, _seq, job_id = heapq.heappop(self._heap)
            due.append((ts, job_id))
        return due


class UnifiedScheduler:
    """Centralized scheduler for irrigation, financial and crop jobs."""

    def __init__(
        self,
        clock: Clock | None = None,
        check_interval_seconds: float = 1.0,
        max_history: int = 1000,
        max_workers: int = 4,
    ):
        """
        Args:
            clock: Time source (defaults to a UTC SystemClock)
            check_interval_seconds: How often the background loop looks for due jobs
            max_history: Executions kept for history and health reporting
            max_workers: Concurrent job executions in the background pool
        """
        self._clock: Clock = clock or SystemClock()
        self._check_interval = float(check_interval_seconds)
        self._max_history = int(max_history)
        self._max_workers = int(max_workers)

        self._jobs: dict[str, ScheduledJob] = {}
        self._tasks: dict[str, Callable] = {}
        self._queue = _RunQueue()
        self._history: list[JobResult] = []

        self._running = False
        self._thread: threading.Thread | None = None
        self._stop_event = threading.Event()
        self._job_lock = threading.RLock()
        self._executor: ThreadPoolExecutor | None = None

        logger.info("UnifiedScheduler initialized")

    @property
    def clock(self) -> Clock:
        return self._clock

    def now(self) -> datetime:
        return self._clock.now()

    # ==================== Task Registration ====================

    def task(self, name: str) -> Callable:
        """
        Decorator registering a task under ``name``.

        The wrapped function gains ``.delay(*args, **kwargs)``, which runs it
        through :meth:`run_now` so the execution lands in history.
        """

        def decorator(func: Callable) -> Callable:
            self.register_task(name, func)

            @wraps(func)
            def wrapper(*args, **kwargs):
                return func(*args, **kwargs)

            wrapper.delay = lambda *a, **kw: self.run_now(name, args=a, kwargs=kw)
            return wrapper

        return decorator

    def register_task(self, name: str, func: Callable) -> None:
        self._tasks[name] = func
        logger.debug("Registered task: %s", name)

    def has_task(self, name: str) -> bool:
        return name in self._tasks

    # ==================== Job Scheduling ====================

    def _schedule(self, job: ScheduledJob) -> ScheduledJob:
        with self._job_lock:
            self._jobs[job.job_id] = job
            self._queue.push(job)
        return job

    @staticmethod
    def _namespace_for(task_name: str, namespace: str | None) -> str:
        if namespace:
            return namespace
        return task_name.split(".", 1)[0] if "." in task_name else "default"

    def schedule_interval(
        self,
        task_name: str,
        interval_seconds: int,
        *,
        job_id: str | None = None,
        namespace: str | None = None,
        args: tuple = (),
        kwargs: dict[str, Any] | None = None,
        enabled: bool = True,
        start_immediately: bool = False,
    ) -> ScheduledJob:
        """Run ``task_name`` every ``interval_seconds``."""
        seconds = int(interval_seconds)
        if seconds <= 0:
            raise ValueError("interval_seconds must be positive")

        now = self.now()
        job = self._schedule(
            ScheduledJob(
                job_id=job_id or f"{task_name}_{int(now.timestamp())}",
                task_name=task_name,
                namespace=self._namespace_for(task_name, namespace),
                schedule_type=ScheduleType.INTERVAL,
                enabled=enabled,
                args=args,
                kwargs=kwargs or {},
                interval_seconds=seconds,
                next_run=now if start_immediately else now + timedelta(seconds=seconds),
            )
        )
        logger.info("Scheduled interval job: %s (every %ss)", job.job_id, seconds)
        return job

    def schedule_daily(
        self,
        task_name: str,
        time_of_day: str,
        *,
        job_id: str | None = None,
        namespace: str | None = None,
        args: tuple = (),
        kwargs: dict[str, Any] | None = None,
        enabled: bool = True,
    ) -> ScheduledJob:
        """Run ``task_name`` every day at ``time_of_day`` (HH:MM, clock timezone)."""
        job = self._schedule(
            ScheduledJob(
                job_id=job_id or f"{task_name}_daily_{time_of_day.replace(':', '')}",
                task_name=task_name,
                namespace=self._namespace_for(task_name, namespace),
                schedule_type=ScheduleType.DAILY,
                enabled=enabled,
                args=args,
                kwargs=kwargs or {},
                time_of_day=time_of_day,
                next_run=next_daily_run(time_of_day, self.now()),
            )
        )
        logger.info("Scheduled daily job: %s (at %s)", job.job_id, time_of_day)
        return job

    def schedule_weekly(
        self,
        task_name: str,
        day_of_week: int,
        time_of_day: str,
        *,
        job_id: str | None = None,
        namespace: str | None = None,
        args: tuple = (),
        kwargs: dict[str, Any] | None = None,
        enabled: bool = True,
    ) -> ScheduledJob:
        """Run ``task_name`` on ``day_of_week`` (0 = Monday) at ``time_of_day``."""
        day = int(day_of_week)
        job = self._schedule(
            ScheduledJob(
                job_id=job_id or f"{task_name}_weekly_{WEEKDAY_NAMES[day]}_{time_of_day.replace(':', '')}",
                task_name=task_name,
                namespace=self._namespace_for(task_name, namespace),
                schedule_type=ScheduleType.WEEKLY,
                enabled=enabled,
                args=args,
                kwargs=kwargs or {},
                time_of_day=time_of_day,
                day_of_week=day,
                next_run=next_weekly_run(day, time_of_day, self.now()),
            )
        )
        logger.info("Scheduled weekly job: %s (%s at %s)", job.job_id, WEEKDAY_NAMES[day], time_of_day)
        return job

    def schedule_once(
        self,
        task_name: str,
        run_at: datetime,
        *,
        job_id: str | None = None,
        namespace: str | None = None,
        args: tuple = (),
        kwargs: dict[str, Any] | None = None,
    ) -> ScheduledJob:
        """Run ``task_name`` a single time at ``run_at``; used for irrigation auto-stops."""
        job = self._schedule(
            ScheduledJob(
                job_id=job_id or f"{task_name}_once_{int(run_at.timestamp())}",
                task_name=task_name,
                namespace=self._namespace_for(task_name, namespace),
                schedule_type=ScheduleType.ONCE,
                args=args,
                kwargs=kwargs or {},
                run_at=run_at,
                next_run=run_at,
            )
        )
        logger.debug("Scheduled one-time job: %s (at %s)", job.job_id, run_at.isoformat())
        return job

    def run_now(
        self,
        task_name: str,
        *,
        args: tuple = (),
        kwargs: dict[str, Any] | None = None,
    ) -> JobResult | None:
        """Run a registered task synchronously, outside any schedule.

        Returns None when no task is registered under ``task_name``.
        """
        if task_name not in self._tasks:
            logger.error("Task not found: %s", task_name)
            return None

        job_id = f"{task_name}_immediate_{int(self.now().timestamp())}"
        result = self._invoke(job_id, task_name, args, kwargs or {})
        self._record_history(result)
        return result

    # ==================== Job Management ====================

    def remove_job(self, job_id: str) -> bool:
        with self._job_lock:
            removed = self._jobs.pop(job_id, None)
        if removed is not None:
            logger.debug("Removed job: %s", job_id)
        return removed is not None

    def _set_enabled(self, job_id: str, enabled: bool) -> bool:
        with self._job_lock:
            job = self._jobs.get(job_id)
            if job is None:
                return False
            job.enabled = enabled
            if enabled:
                if job.next_run is None:
                    job.next_run = job.compute_next_run(self.now())
                self._queue.push(job)
        logger.info("Job %s %s", job_id, "resumed" if enabled else "paused")
        return True

    def pause_job(self, job_id: str) -> bool:
        return self._set_enabled(job_id, False)

    def resume_job(self, job_id: str) -> bool:
        return self._set_enabled(job_id, True)

    def get_job(self, job_id: str) -> ScheduledJob | None:
        return self._jobs.get(job_id)

    def get_jobs(self, namespace: str | None = None, enabled_only: bool = False) -> list[ScheduledJob]:
        with self._job_lock:
            jobs = list(self._jobs.values())
        return [
            job
            for job in jobs
            if (namespace is None or job.namespace == namespace) and (job.enabled or not enabled_only)
        ]

    def get_namespaces(self) -> set[str]:
        return {job.namespace for job in self._jobs.values()}

    # ==================== Scheduler Control ====================

    def start(self) -> None:
        """Start the background loop and its worker pool."""
        if self._running:
            logger.warning("Scheduler already running")
            return

        self._executor = self._executor or ThreadPoolExecutor(
            max_workers=self._max_workers,
            thread_name_prefix="UnifiedSchedulerJob",
        )
        self._running = True
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run_loop, daemon=True, name="UnifiedScheduler")
        self._thread.start()
        logger.info("UnifiedScheduler started")

    def stop(self, wait: bool = True, timeout: float = 5.0) -> None:
        if not self._running:
            return

        self._running = False
        self._stop_event.set()
        if wait and self._thread:
            self._thread.join(timeout=timeout)
        if self._executor:
            self._executor.shutdown(wait=wait)
            self._executor = None
        logger.info("UnifiedScheduler stopped")

    def shutdown(self, wait: bool = True, timeout: float = 5.0) -> None:
        self.stop(wait=wait, timeout=timeout)

    def is_running(self) -> bool:
        return self._running

    def _run_loop(self) -> None:
        while self._running:
            try:
                for job_id, scheduled_for in self._claim_due_jobs():
                    self._submit(job_id, scheduled_for)
            except Exception as e:
                logger.error("Error in scheduler loop: %s", e, exc_info=True)
            self._stop_event.wait(self._check_interval)

    def _submit(self, job_id: str, scheduled_for: datetime) -> None:
        if not self._executor:
            logger.warning("Executor unavailable; skipping job %s", job_id)
            return
        try:
            self._executor.submit(self._execute_job, job_id, scheduled_for)
        except RuntimeError as e:
            logger.error("Failed to submit job %s to executor: %s", job_id, e, exc_info=True)

    def run_pending(self) -> list[JobResult]:
        """Execute every job due at ``clock.now()`` on the calling thread.

        Jobs that become due while running (a task scheduling another one in
        the past) are picked up in the same call.
        """
        results: list[JobResult] = []
        due = self._claim_due_jobs()
        while due:
            for job_id, scheduled_for in due:
                result = self._execute_job(job_id, scheduled_for)
                if result is not None:
                    results.append(result)
            due = self._claim_due_jobs()
        return results

    # ==================== Execution ====================

    def _claim_due_jobs(self) -> list[tuple[str, datetime]]:
        """Pop due entries and move each job to its next slot before it runs."""
        now = self.now()
        claimed: list[tuple[str, datetime]] = []

        with self._job_lock:
            for ts, job_id in self._queue.pop_due(now.timestamp()):
                job = self._jobs.get(job_id)
                if job is None or not job.enabled or job.next_run is None:
                    continue
                if abs(job.next_run.timestamp() - ts) > 1e-6:
                    continue

                scheduled_for = job.next_run
                job.next_run = job.compute_next_run(now, scheduled_for)
                self._queue.push(job)
                claimed.append((job_id, scheduled_for))

        return claimed

    def _invoke(self, job_id: str, task_name: str, args: tuple, kwargs: dict[str, Any]) -> JobResult:
        started_at = self.now()
        func = self._tasks.get(task_name)
        try:
            if func is None:
                raise LookupError(f"Task function not found: {task_name}")
            value = func(*args, **kwargs)
        except Exception as e:
            logger.error("Job %s failed: %s", job_id, e, exc_info=True)
            return JobResult(job_id, False, started_at, self.now(), error=str(e))
        return JobResult(job_id, True, started_at, self.now(), result=value)

    def _execute_job(self, job_id: str, scheduled_for: datetime) -> JobResult | None:
        with self._job_lock:
            job = self._jobs.get(job_id)
            if job is not None and job.schedule_type is ScheduleType.ONCE:
                del self._jobs[job_id]

        if job is None:
            return None

        result = self._invoke(job.job_id, job.task_name, job.args, job.kwargs)
        with self._job_lock:
            job.record(result)
        self._record_history(result)

        if result.success:
            logger.debug(
                "Job %s completed in %.2fs (scheduled_for=%s)",
                job.job_id,
                result.duration_seconds,
                scheduled_for.isoformat(),
            )
        return result

    def _record_history(self, result: JobResult) -> None:
        with self._job_lock:
            self._history.append(result)
            del self._history[: -self._max_history]

    # ==================== Status & History ====================

    def get_status(self) -> dict[str, Any]:
        with self._job_lock:
            enabled = [j for j in self._jobs.values() if j.enabled]
            return {
                "running": self._running,
                "total_jobs": len(self._jobs),
                "enabled_jobs": len(enabled),
                "namespaces": sorted(self.get_namespaces()),
                "pending_jobs": sum(1 for j in enabled if j.next_run is not None),
                "history_size": len(self._history),
                "recent_failures": sum(1 for r in self._history[-20:] if not r.success),
                "max_workers": self._max_workers,
            }

    def _stale_jobs(self, now: datetime) -> list[dict[str, Any]]:
        stale = []
        for job in self._jobs.values():
            if not job.enabled or job.schedule_type is not ScheduleType.INTERVAL or job.last_run is None:
                continue
            interval = job.interval_seconds or 60
            idle = (now - job.last_run).total_seconds()
            if idle > interval * STALE_AFTER_INTERVALS:
                stale.append(
                    {
                        "job_id": job.job_id,
                        "task_name": job.task_name,
                        "last_run": job.last_run.isoformat(),
                        "expected_interval_seconds": interval,
                        "overdue_seconds": idle - interval,
                    }
                )
        return stale

    def health_check(self) -> dict[str, Any]:
        """
        Summarise scheduler health as healthy, degraded or unhealthy.

        A stopped loop or a failure rate above 50% over the recent window is
        unhealthy. Stale interval jobs (idle for three intervals) or a failure
        rate above 20% is degraded.
        """
        with self._job_lock:
            now = self.now()
            recent = self._history[-HEALTH_WINDOW:]
            failures = [r for r in recent if not r.success]
            failure_rate = len(failures) / len(recent) if recent else 0.0
            stale = self._stale_jobs(now)
            total_jobs = len(self._jobs)
            enabled_jobs = sum(1 for j in self._jobs.values() if j.enabled)

        if not self._running:
            health, reason = "unhealthy", "Scheduler is not running"
        elif failure_rate > UNHEALTHY_FAILURE_RATE:
            health, reason = "unhealthy", f"High failure rate: {failure_rate:.0%}"
        elif stale:
            health, reason = "degraded", f"{len(stale)} stale job(s) detected"
        elif failure_rate > DEGRADED_FAILURE_RATE:
            health, reason = "degraded", f"Elevated failure rate: {failure_rate:.0%}"
        else:
            health, reason = "healthy", "All systems operational"

        failure_summary: dict[str, dict[str, Any]] = {}
        for r in failures:
            entry = failure_summary.setdefault(r.job_id, {"count": 0, "last_error": None})
            entry["count"] += 1
            entry["last_error"] = r.error

        return {
            "health": health,
            "reason": reason,
            "timestamp": now.isoformat(),
            "scheduler_running": self._running,
            "statistics": {
                "total_jobs": total_jobs,
                "enabled_jobs": enabled_jobs,
                "recent_executions": len(recent),
                "recent_failures": len(failures),
                "failure_rate": round(failure_rate, 3),
            },
            "stale_jobs": stale,
            "failure_summary": failure_summary,
            "thread_pool_active": self._executor is not None,
        }

    def get_history(
        self,
        job_id: str | None = None,
        namespace: str | None = None,
        limit: int = 100,
    ) -> list[JobResult]:
        """Execution history, newest first."""
        with self._job_lock:
            results = list(self._history)
            namespace_ids = {j.job_id for j in self._jobs.values() if j.namespace == namespace}

        if job_id:
            results = [r for r in results if r.job_id == job_id]
        if namespace:
            results = [r for r in results if r.job_id in namespace_ids]
        return sorted(results, key=lambda r: r.started_at, reverse=True)[: int(limit)]
