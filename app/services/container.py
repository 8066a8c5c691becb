from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

from app.config import AppConfig
from app.services.application.crop_service import CropService
from app.services.application.equipment_service import EquipmentService
from app.services.application.financial_report_service import FinancialReportService
from app.services.application.financial_service import FinancialService
from app.services.application.irrigation_planner import IrrigationPlanner
from app.services.application.irrigation_service import IrrigationService
from app.services.application.water_analytics_service import WaterAnalyticsService
from app.services.container_builder import ContainerBuilder
from app.services.utilities.weather_client import WeatherClient
from app.utils.emitters import AlertEmitter
from app.utils.event_bus import EventBus
from app.utils.time import Clock
from app.workers.unified_scheduler import UnifiedScheduler

logger = logging.getLogger(__name__)


@dataclass
class ServiceContainer:
    """Aggregate and manage core backend services."""

    config: AppConfig
    clock: Clock
    event_bus: EventBus
    scheduler: UnifiedScheduler
    weather_client: WeatherClient
    irrigation_service: IrrigationService
    water_analytics: WaterAnalyticsService
    irrigation_planner: IrrigationPlanner
    crop_service: CropService
    equipment_service: EquipmentService
    financial_service: FinancialService
    financial_reports: FinancialReportService
    emitter: Optional[AlertEmitter] = None

    @classmethod
    def build(cls, config: AppConfig, *, socketio: Any = None) -> "ServiceContainer":
        """Construct the service container with all dependencies.

        Args:
            config: Application configuration
            socketio: Optional Flask-SocketIO instance for dashboard pushes

        The scheduler is configured but not started; callers decide whether
        this process runs background jobs.
        """
        logger.info("Building ServiceContainer using ContainerBuilder...")
        builder = ContainerBuilder(config, socketio=socketio)
        container = cls(**builder.build())

        # Tasks need the real services, so register them once the container exists.
        from app.workers.scheduled_tasks import configure_scheduler

        try:
            configure_scheduler(container.scheduler, container)
            logger.info("✓ UnifiedScheduler configured")
        except Exception as e:
            raise RuntimeError("Failed to initialize UnifiedScheduler") from e

        logger.info("ServiceContainer built successfully.")
        return container

    def shutdown(self) -> None:
        """Release background threads before process exit."""
        try:
            self.scheduler.shutdown()
            logger.info("✓ UnifiedScheduler stopped")
        except Exception as e:
            logger.warning("Failed to stop UnifiedScheduler: %s", e)

        if self.emitter is not None:
            self.emitter.unregister()

        try:
            self.event_bus.shutdown()
            logger.info("✓ EventBus stopped")
        except Exception as e:
            logger.warning("Failed to stop EventBus: %s", e)

        self.weather_client.clear_cache()
        logger.info("ServiceContainer shutdown complete.")
