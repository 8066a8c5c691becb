"""
Shared test fixtures for the farm management backend test suite.

Provides:
- A manual clock so tests drive time by hand
- An inline EventBus (no worker threads) that records published topics
- An unstarted UnifiedScheduler driven through ``run_pending()``
- Service fixtures wired the same way the ContainerBuilder wires them
- A Flask app / test client with the scheduler disabled
- Helper utilities for seeding zones, crops and transactions

Usage:
    def test_example(irrigation_service, clock):
        zone_id = irrigation_service.create_zone({"name": "North"})
        clock.advance(minutes=30)
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any

import pytest

from app.services.application.crop_service import CropService
from app.services.application.equipment_service import EquipmentService
from app.services.application.financial_report_service import FinancialReportService
from app.services.application.financial_service import FinancialService
from app.services.application.irrigation_planner import IrrigationPlanner
from app.services.application.irrigation_service import AUTO_STOP_TASK, IrrigationService
from app.services.application.water_analytics_service import WaterAnalyticsService
from app.utils.event_bus import EventBus
from app.workers.unified_scheduler import UnifiedScheduler

# ---------------------------------------------------------------------------
# Logging: keep test output clean
# ---------------------------------------------------------------------------
logging.getLogger("app").setLevel(logging.WARNING)

START = datetime(2024, 6, 3, 5, 50, tzinfo=timezone.utc)  # a Monday


class ManualClock:
    """Clock whose time only moves when a test says so."""

    def __init__(self, start: datetime = START) -> None:
        self._now = start
        self.tz = start.tzinfo

    def now(self) -> datetime:
        return self._now

    def set(self, value: datetime) -> None:
        self._now = value

    def advance(self, **delta: float) -> datetime:
        self._now = self._now + timedelta(**delta)
        return self._now


class RecordingBus(EventBus):
    """Inline EventBus that also keeps every (topic, payload) it publishes."""

    def __init__(self) -> None:
        super().__init__(worker_count=0)
        self.published: list[tuple[str, Any]] = []

    def publish(self, event_name, data=None) -> None:
        name = getattr(event_name, "value", event_name)
        self.published.append((name, data))
        super().publish(event_name, data)

    def topics(self) -> list[str]:
        return [topic for topic, _ in self.published]


# ========================== Core Utilities =================================


@pytest.fixture()
def clock():
    """Manual clock starting Monday 2024-06-03 05:50 UTC."""
    return ManualClock()


@pytest.fixture()
def event_bus():
    """Inline bus; subscribers run on the publishing thread."""
    return RecordingBus()


@pytest.fixture()
def scheduler(clock):
    """Scheduler that is never started; tests call run_pending()."""
    return UnifiedScheduler(clock=clock)


# ========================== Service Fixtures ===============================


@pytest.fixture()
def irrigation_service(clock, event_bus, scheduler):
    """IrrigationService with auto-stop jobs routed to the test scheduler."""
    service = IrrigationService(clock=clock, event_bus=event_bus, scheduler=scheduler)
    scheduler.register_task(
        AUTO_STOP_TASK,
        lambda zone_id, event_id, auto_stop=True: service.handle_auto_stop(zone_id, event_id, auto_stop),
    )
    return service


@pytest.fixture()
def water_analytics(irrigation_service):
    return WaterAnalyticsService(irrigation_service=irrigation_service)


@pytest.fixture()
def irrigation_planner(irrigation_service, clock):
    """Planner without a weather client; pass weather explicitly."""
    return IrrigationPlanner(irrigation_service=irrigation_service, clock=clock)


@pytest.fixture()
def crop_service(clock, event_bus):
    return CropService(clock=clock, event_bus=event_bus)


@pytest.fixture()
def equipment_service(clock):
    return EquipmentService(clock=clock)


@pytest.fixture()
def financial_service(clock, event_bus, crop_service):
    return FinancialService(clock=clock, event_bus=event_bus, crop_lookup=crop_service.get_crop)


@pytest.fixture()
def financial_reports(financial_service, clock):
    return FinancialReportService(financial_service=financial_service, clock=clock, total_acreage=100.0)


# ========================== Flask Fixtures =================================


@pytest.fixture()
def app(tmp_path):
    """Application with background jobs off and an inline event bus."""
    from app import create_app

    flask_app = create_app(
        {
            "scheduler_enabled": False,
            "eventbus_worker_count": 0,
            "log_dir": str(tmp_path),
        }
    )
    flask_app.config["TESTING"] = True
    yield flask_app
    flask_app.config["CONTAINER"].shutdown()


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def container(app):
    return app.config["CONTAINER"]


# ========================== Seed Helpers ===================================


@pytest.fixture()
def make_zone(irrigation_service):
    """Factory for zones applying 0.5 in/hr with a 120 minute session limit."""

    def _make(**overrides: Any) -> str:
        data = {
            "name": "North Field",
            "field_id": "field_1",
            "area": 10.0,
            "settings": {
                "efficiency": {"application_rate": 0.5},
                "constraints": {"max_session_duration": 120},
            },
            "water_budget": {"allocation": 10.0},
        }
        data.update(overrides)
        return irrigation_service.create_zone(data)

    return _make


@pytest.fixture()
def zone_id(make_zone):
    return make_zone()


@pytest.fixture()
def category_id(financial_service):
    """Look up a seeded category id by its code (e.g. ``CROP_SALES``)."""

    def _lookup(code: str) -> str:
        category = financial_service.get_category_by_code(code)
        assert category is not None, code
        return category.id

    return _lookup
