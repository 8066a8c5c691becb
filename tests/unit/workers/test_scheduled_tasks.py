import json

import pytest

from app.config import AppConfig
from app.services.application.irrigation_service import AUTO_STOP_TASK
from app.services.container import ServiceContainer
from app.workers import scheduler_cli
from app.workers.scheduled_tasks import (
    CROP_MONITOR_TASK,
    IRRIGATION_MONITOR_TASK,
    RECURRING_TRANSACTIONS_TASK,
)


class FakeSocketIO:
    def __init__(self) -> None:
        self.emits: list[dict] = []

    def emit(self, event, payload, namespace="/"):
        self.emits.append({"event": event, "payload": payload, "namespace": namespace})


@pytest.fixture()
def built(tmp_path):
    container = ServiceContainer.build(AppConfig(eventbus_worker_count=0, log_dir=str(tmp_path)))
    yield container
    container.shutdown()


def test_default_jobs_are_scheduled(built):
    jobs = {job.job_id: job for job in built.scheduler.get_jobs()}

    assert set(jobs) == {"irrigation_monitor", "financial_recurring_transactions_daily", "crop_monitor_daily"}
    assert jobs["irrigation_monitor"].interval_seconds == 60
    assert jobs["financial_recurring_transactions_daily"].time_of_day == "00:05"
    assert jobs["crop_monitor_daily"].namespace == "crop"
    assert built.scheduler.is_running() is False


def test_every_task_is_registered(built):
    for name in (IRRIGATION_MONITOR_TASK, AUTO_STOP_TASK, RECURRING_TRANSACTIONS_TASK, CROP_MONITOR_TASK):
        assert built.scheduler.has_task(name), name


def test_tasks_call_into_services(built):
    recurring = built.scheduler.run_now(RECURRING_TRANSACTIONS_TASK)
    assert recurring.success is True
    assert recurring.result == {"created": [], "count": 0}

    monitor = built.scheduler.run_now(IRRIGATION_MONITOR_TASK)
    assert monitor.success is True
    assert monitor.result["started_events"] == []

    crops = built.scheduler.run_now(CROP_MONITOR_TASK)
    assert crops.result == {"stage_updates_due": 0, "pest_checks_due": 0}


def test_auto_stop_task_completes_the_event(built):
    service = built.irrigation_service
    zone_id = service.create_zone({"name": "South Pivot"})
    event_id = service.start_irrigation(zone_id, duration=15)
    assert built.scheduler.get_job(f"irrigation_auto_stop_{event_id}") is not None

    result = built.scheduler.run_now(AUTO_STOP_TASK, kwargs={"zone_id": zone_id, "event_id": event_id})

    assert result.result is True
    assert service.get_active_irrigation_events() == []


def test_task_errors_are_recorded_as_failures(built):
    result = built.scheduler.run_now(AUTO_STOP_TASK, kwargs={"zone_id": "zone_missing"})
    assert result.success is False


def test_socketio_emitter_is_wired_when_given(tmp_path):
    sio = FakeSocketIO()
    container = ServiceContainer.build(AppConfig(eventbus_worker_count=0, log_dir=str(tmp_path)), socketio=sio)
    try:
        container.irrigation_service.create_zone({"name": "Orchard"})
    finally:
        container.shutdown()

    assert [e["event"] for e in sio.emits] == ["alert_created"]
    assert container.emitter is not None


def test_cli_lists_jobs(monkeypatch, tmp_path, capsys):
    monkeypatch.setattr(scheduler_cli, "setup_logging", lambda **kwargs: None)
    monkeypatch.setenv("FARM_LOG_DIR", str(tmp_path))
    monkeypatch.setenv("FARM_EVENTBUS_WORKER_COUNT", "0")

    assert scheduler_cli.main(["--list-jobs"]) == 0

    jobs = json.loads(capsys.readouterr().out)
    assert sorted(job["task_name"] for job in jobs) == sorted(
        [IRRIGATION_MONITOR_TASK, RECURRING_TRANSACTIONS_TASK, CROP_MONITOR_TASK]
    )


def test_cli_once_runs_nothing_on_a_fresh_container(monkeypatch, tmp_path, capsys):
    monkeypatch.setattr(scheduler_cli, "setup_logging", lambda **kwargs: None)
    monkeypatch.setenv("FARM_LOG_DIR", str(tmp_path))
    monkeypatch.setenv("FARM_EVENTBUS_WORKER_COUNT", "0")

    assert scheduler_cli.main(["--once"]) == 0
    assert json.loads(capsys.readouterr().out) == []
