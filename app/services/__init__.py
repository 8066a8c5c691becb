"""
Service Organization
====================
Services are organized by their lifecycle and instantiation pattern:

**application/**
  Singleton services managed by ServiceContainer. One instance per application.
  Examples: IrrigationService, FinancialService, CropService, EquipmentService

**utilities/**
  Clients for external systems that hold no domain state of their own.
  Examples: WeatherClient

Wiring lives in ``container_builder.py``; ``container.py`` exposes the
assembled services to the Flask blueprints and the scheduler.
"""

from .application.crop_service import CropService
from .application.equipment_service import EquipmentService
from .application.financial_report_service import FinancialReportService
from .application.financial_service import FinancialService
from .application.irrigation_planner import IrrigationPlanner
from .application.irrigation_service import IrrigationService
from .application.water_analytics_service import WaterAnalyticsService
from .utilities.weather_client import WeatherClient

__all__ = [
    "CropService",
    "EquipmentService",
    "FinancialReportService",
    "FinancialService",
    "IrrigationPlanner",
    "IrrigationService",
    "WaterAnalyticsService",
    "WeatherClient",
]
