"""
Container Builder
=================

Extracts service container construction logic from ServiceContainer.build().

Each build_*() method constructs one subsystem; build() stitches them
together and returns the keyword arguments for ServiceContainer.

Architecture:
- ContainerBuilder: Orchestrates the construction of all services
- Each build_*() method: Constructs a specific subsystem
- ServiceContainer.build(): Delegates to ContainerBuilder.build()
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from app.config import AppConfig
from app.services.application.crop_service import CropService
from app.services.application.equipment_service import EquipmentService
from app.services.application.financial_report_service import FinancialReportService
from app.services.application.financial_service import FinancialService
from app.services.application.irrigation_planner import IrrigationPlanner
from app.services.application.irrigation_service import IrrigationService
from app.services.application.water_analytics_service import WaterAnalyticsService
from app.services.utilities.weather_client import WeatherClient
from app.utils.emitters import AlertEmitter
from app.utils.event_bus import EventBus
from app.utils.time import SystemClock
from app.workers.unified_scheduler import UnifiedScheduler

logger = logging.getLogger(__name__)


@dataclass
class SharedUtilities:
    """Shared utility services (clock, event bus, scheduler, emitter)."""

    clock: SystemClock
    event_bus: EventBus
    scheduler: UnifiedScheduler
    emitter: AlertEmitter | None


@dataclass
class IrrigationComponents:
    """Irrigation zones, analytics and weather-driven planning."""

    weather_client: WeatherClient
    irrigation_service: IrrigationService
    water_analytics: WaterAnalyticsService
    irrigation_planner: IrrigationPlanner


@dataclass
class FarmComponents:
    """Crop lifecycle and equipment fleet."""

    crop_service: CropService
    equipment_service: EquipmentService


@dataclass
class FinancialComponents:
    """Ledger, budgets and financial reporting."""

    financial_service: FinancialService
    financial_reports: FinancialReportService


class ContainerBuilder:
    """
    Builder for constructing the service container.

    Args:
        config: Application configuration
        socketio: Optional Flask-SocketIO instance; when given, bus events are
            forwarded to dashboards through an AlertEmitter.
    """

    def __init__(self, config: AppConfig, *, socketio: Any = None):
        self.config = config
        self.socketio = socketio

    def build_shared_utilities(self) -> SharedUtilities:
        logger.info("Building shared utilities...")

        clock = SystemClock(self.config.timezone)
        event_bus = EventBus(
            queue_size=self.config.eventbus_queue_size,
            worker_count=self.config.eventbus_worker_count,
        )
        scheduler = UnifiedScheduler(
            clock=clock,
            check_interval_seconds=self.config.scheduler_check_interval,
            max_workers=self.config.scheduler_max_workers,
        )

        emitter = None
        if self.socketio is not None:
            emitter = AlertEmitter(self.socketio)
            emitter.register(event_bus)
            logger.info("✓ AlertEmitter registered on event bus")

        logger.info("✓ Shared utilities built (timezone=%s)", self.config.timezone)
        return SharedUtilities(clock=clock, event_bus=event_bus, scheduler=scheduler, emitter=emitter)

    def build_irrigation_components(self, shared: SharedUtilities) -> IrrigationComponents:
        logger.info("Building irrigation components...")

        weather_client = WeatherClient(
            self.config.weather_api_url,
            timeout=self.config.weather_timeout,
            latitude=self.config.latitude,
            longitude=self.config.longitude,
            clock=shared.clock,
        )
        irrigation_service = IrrigationService(
            clock=shared.clock,
            event_bus=shared.event_bus,
            scheduler=shared.scheduler,
            sensor_reading_limit=self.config.sensor_reading_limit,
            sensor_offline_minutes=self.config.sensor_offline_minutes,
        )
        water_analytics = WaterAnalyticsService(irrigation_service=irrigation_service)
        irrigation_planner = IrrigationPlanner(
            irrigation_service=irrigation_service,
            weather_client=weather_client,
            clock=shared.clock,
        )

        logger.info("✓ Irrigation components built")
        return IrrigationComponents(
            weather_client=weather_client,
            irrigation_service=irrigation_service,
            water_analytics=water_analytics,
            irrigation_planner=irrigation_planner,
        )

    def build_farm_components(self, shared: SharedUtilities) -> FarmComponents:
        logger.info("Building farm components...")
        crop_service = CropService(clock=shared.clock, event_bus=shared.event_bus)
        equipment_service = EquipmentService(clock=shared.clock)
        logger.info("✓ Farm components built")
        return FarmComponents(crop_service=crop_service, equipment_service=equipment_service)

    def build_financial_components(self, shared: SharedUtilities, farm: FarmComponents) -> FinancialComponents:
        logger.info("Building financial components...")

        financial_service = FinancialService(
            clock=shared.clock,
            event_bus=shared.event_bus,
            crop_lookup=farm.crop_service.get_crop,
        )
        financial_reports = FinancialReportService(
            financial_service=financial_service,
            clock=shared.clock,
            total_acreage=self.config.total_acreage,
        )

        logger.info("✓ Financial components built")
        return FinancialComponents(financial_service=financial_service, financial_reports=financial_reports)

    def build(self) -> dict[str, Any]:
        """
        Build every subsystem.

        Returns:
            Keyword arguments for ServiceContainer
        """
        shared = self.build_shared_utilities()
        irrigation = self.build_irrigation_components(shared)
        farm = self.build_farm_components(shared)
        financial = self.build_financial_components(shared, farm)

        return {
            "config": self.config,
            "clock": shared.clock,
            "event_bus": shared.event_bus,
            "scheduler": shared.scheduler,
            "emitter": shared.emitter,
            "weather_client": irrigation.weather_client,
            "irrigation_service": irrigation.irrigation_service,
            "water_analytics": irrigation.water_analytics,
            "irrigation_planner": irrigation.irrigation_planner,
            "crop_service": farm.crop_service,
            "equipment_service": farm.equipment_service,
            "financial_service": financial.financial_service,
            "financial_reports": financial.financial_reports,
        }
