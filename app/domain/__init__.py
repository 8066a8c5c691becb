"""
Farm Domain Package
===================
Entity dataclasses for irrigation, weather, finance, crops and equipment.

Every entity derives from :class:`app.domain.base.Record`, which provides
``to_dict()`` for API payloads and ``from_dict()`` for JSON-shaped input.
"""

from .base import Record, to_plain
from .crops import (
    Crop,
    CropNotification,
    GrowthStage,
    GrowthStageRecord,
    HarvestData,
    PestObservation,
    TreatmentRecord,
    YieldPrediction,
)
from .equipment import Equipment, EquipmentMaintenanceRecord, InspectionRecord, UsageRecord
from .financial import Budget, Category, Customer, PaymentMethod, Transaction, Vendor
from .irrigation import (
    AlertAction,
    IoTSensor,
    IrrigationAlert,
    IrrigationEvent,
    IrrigationSchedule,
    IrrigationSettings,
    IrrigationSystem,
    IrrigationZone,
    MaintenanceRecord,
    SensorReading,
    SensorThresholds,
    WaterBudget,
)
from .weather import CropWaterRequirement, ForecastDay, WeatherData

__all__ = [
    "Record",
    "to_plain",
    # Irrigation
    "AlertAction",
    "IoTSensor",
    "IrrigationAlert",
    "IrrigationEvent",
    "IrrigationSchedule",
    "IrrigationSettings",
    "IrrigationSystem",
    "IrrigationZone",
    "MaintenanceRecord",
    "SensorReading",
    "SensorThresholds",
    "WaterBudget",
    # Weather
    "CropWaterRequirement",
    "ForecastDay",
    "WeatherData",
    # Financial
    "Budget",
    "Category",
    "Customer",
    "PaymentMethod",
    "Transaction",
    "Vendor",
    # Crops
    "Crop",
    "CropNotification",
    "GrowthStage",
    "GrowthStageRecord",
    "HarvestData",
    "PestObservation",
    "TreatmentRecord",
    "YieldPrediction",
    # Equipment
    "Equipment",
    "EquipmentMaintenanceRecord",
    "InspectionRecord",
    "UsageRecord",
]
