from datetime import datetime, timedelta, timezone

import pytest

from app.workers.unified_scheduler import ScheduleType, UnifiedScheduler


def test_interval_job_runs_when_due(scheduler, clock):
    calls = []
    scheduler.register_task("irrigation.monitor", lambda: calls.append(clock.now()) or len(calls))
    job = scheduler.schedule_interval("irrigation.monitor", 60, job_id="monitor")

    assert scheduler.run_pending() == []

    clock.advance(seconds=60)
    [result] = scheduler.run_pending()

    assert result.success is True
    assert result.result == 1
    assert job.namespace == "irrigation"
    assert job.run_count == 1
    assert job.next_run == clock.now() + timedelta(seconds=60)


def test_interval_skips_missed_slots(scheduler, clock):
    scheduler.register_task("tick", lambda: None)
    job = scheduler.schedule_interval("tick", 60, job_id="tick")

    clock.advance(minutes=10, seconds=30)
    results = scheduler.run_pending()

    assert len(results) == 1
    assert job.namespace == "default"
    assert job.next_run == clock.now() + timedelta(seconds=30)


def test_interval_must_be_positive(scheduler):
    with pytest.raises(ValueError):
        scheduler.schedule_interval("tick", 0)


def test_daily_next_run(scheduler, clock):
    today = scheduler.schedule_daily("crop.monitor", "06:00", job_id="later_today")
    tomorrow = scheduler.schedule_daily("financial.recurring", "00:05", job_id="tomorrow")

    assert today.next_run == datetime(2024, 6, 3, 6, 0, tzinfo=timezone.utc)
    assert tomorrow.next_run == datetime(2024, 6, 4, 0, 5, tzinfo=timezone.utc)


def test_weekly_next_run(scheduler):
    job = scheduler.schedule_weekly("report", 2, "07:30")
    assert job.job_id == "report_weekly_wed_0730"
    assert job.next_run == datetime(2024, 6, 5, 7, 30, tzinfo=timezone.utc)
    assert job.schedule_type is ScheduleType.WEEKLY


def test_one_shot_job_leaves_the_table(scheduler, clock):
    received = []
    scheduler.register_task("irrigation.auto_stop", lambda zone_id: received.append(zone_id))
    scheduler.schedule_once(
        "irrigation.auto_stop",
        clock.now() + timedelta(minutes=5),
        job_id="stop_zone_1",
        kwargs={"zone_id": "zone_1"},
    )

    clock.advance(minutes=5)
    scheduler.run_pending()

    assert received == ["zone_1"]
    assert scheduler.get_job("stop_zone_1") is None
    assert scheduler.run_pending() == []


def test_removed_job_never_runs(scheduler, clock):
    received = []
    scheduler.register_task("once", lambda: received.append(1))
    scheduler.schedule_once("once", clock.now(), job_id="once")

    assert scheduler.remove_job("once") is True
    assert scheduler.remove_job("once") is False
    assert scheduler.run_pending() == []
    assert received == []


def test_paused_job_is_skipped_until_resumed(scheduler, clock):
    scheduler.register_task("tick", lambda: None)
    scheduler.schedule_interval("tick", 60, job_id="tick")

    scheduler.pause_job("tick")
    clock.advance(seconds=61)
    assert scheduler.run_pending() == []

    scheduler.resume_job("tick")
    assert len(scheduler.run_pending()) == 1


def test_failures_are_recorded(scheduler, clock):
    def explode():
        raise RuntimeError("pump offline")

    scheduler.register_task("boom", explode)
    scheduler.schedule_once("boom", clock.now(), job_id="boom")
    scheduler.schedule_once("missing.task", clock.now(), job_id="orphan")

    results = {r.job_id: r for r in scheduler.run_pending()}

    assert results["boom"].success is False
    assert results["boom"].error == "pump offline"
    assert "Task function not found" in results["orphan"].error
    assert scheduler.get_status()["recent_failures"] == 2


def test_history_is_newest_first(scheduler, clock):
    scheduler.register_task("tick", lambda: None)
    scheduler.schedule_interval("tick", 60, job_id="tick")
    for _ in range(3):
        clock.advance(seconds=60)
        scheduler.run_pending()

    history = scheduler.get_history(job_id="tick", limit=2)

    assert len(history) == 2
    assert history[0].started_at > history[1].started_at


def test_run_now_and_task_decorator(scheduler):
    @scheduler.task("crop.monitor")
    def monitor(value=1):
        return value * 2

    assert monitor(2) == 4
    assert monitor.delay(value=5).result == 10
    assert scheduler.run_now("crop.unknown") is None


def test_status_and_health_when_stopped(scheduler):
    scheduler.register_task("tick", lambda: None)
    scheduler.schedule_interval("tick", 60, job_id="tick")

    status = scheduler.get_status()
    assert status["running"] is False
    assert status["total_jobs"] == 1
    assert status["namespaces"] == ["default"]

    health = scheduler.health_check()
    assert health["health"] == "unhealthy"
    assert health["reason"] == "Scheduler is not running"


def test_start_and_stop():
    scheduler = UnifiedScheduler(check_interval_seconds=0.05)
    scheduler.start()
    try:
        assert scheduler.is_running()
        assert scheduler.health_check()["health"] == "healthy"
    finally:
        scheduler.shutdown()
    assert not scheduler.is_running()
