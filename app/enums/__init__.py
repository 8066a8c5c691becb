"""
Enums Module
============

This module provides enumeration types for the farm management backend.
Enums ensure type safety and consistency across the codebase.
"""

from app.enums.crops import (
    CropStatus,
    NotificationPriority,
    NotificationType,
    PestType,
    Severity,
    TreatmentType,
    WeatherSensitivity,
)
from app.enums.equipment import (
    EquipmentCategory,
    EquipmentStatus,
    EquipmentType,
    InspectionResult,
    MaintenanceType,
)
from app.enums.events import (
    AlertEvent,
    CropEvent,
    EventType,
    FinancialEvent,
    ZoneEvent,
    WebSocketEvent,
)
from app.enums.financial import (
    BudgetStatus,
    CustomerType,
    PaymentMethodType,
    RecurringFrequency,
    ReportType,
    Season,
    TransactionStatus,
    TransactionType,
    VendorCategory,
    WeatherImpactType,
)
from app.enums.irrigation import (
    AlertPriority,
    AlertStatus,
    AlertType,
    BudgetPeriod,
    EventStatus,
    FrequencyType,
    IrrigationEventType,
    IrrigationMode,
    IrrigationSystemType,
    ReadingQuality,
    ScheduleStatus,
    ScheduleType,
    SensorStatus,
    SensorType,
    SystemStatus,
    TriggerType,
    ZoneStatus,
)

__all__ = [
    # Irrigation enums
    "ZoneStatus",
    "IrrigationSystemType",
    "SystemStatus",
    "SensorType",
    "SensorStatus",
    "ReadingQuality",
    "IrrigationMode",
    "ScheduleType",
    "ScheduleStatus",
    "FrequencyType",
    "IrrigationEventType",
    "EventStatus",
    "TriggerType",
    "AlertType",
    "AlertPriority",
    "AlertStatus",
    "BudgetPeriod",
    # Financial enums
    "TransactionType",
    "TransactionStatus",
    "RecurringFrequency",
    "PaymentMethodType",
    "VendorCategory",
    "CustomerType",
    "BudgetStatus",
    "ReportType",
    "Season",
    "WeatherImpactType",
    # Crop enums
    "CropStatus",
    "WeatherSensitivity",
    "TreatmentType",
    "PestType",
    "Severity",
    "NotificationType",
    "NotificationPriority",
    # Equipment enums
    "EquipmentCategory",
    "EquipmentType",
    "EquipmentStatus",
    "MaintenanceType",
    "InspectionResult",
    # Event bus topics
    "ZoneEvent",
    "AlertEvent",
    "FinancialEvent",
    "CropEvent",
    "WebSocketEvent",
    "EventType",
]
