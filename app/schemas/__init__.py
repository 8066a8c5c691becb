"""
Schemas Module
==============

This module provides Pydantic models for request validation.
Schemas ensure data integrity before it reaches the services.
"""

from app.schemas.common import ErrorResponse, SuccessResponse
from app.schemas.crops import (
    AddTreatmentRequest,
    CreateCropRequest,
    HarvestRequest,
    PestObservationRequest,
    StageObservationRequest,
    StageProgressRequest,
    TreatmentEffectivenessRequest,
    UpdateCropRequest,
    YieldPredictionRequest,
)
from app.schemas.equipment import (
    CreateEquipmentRequest,
    InspectionRecordRequest,
    MaintenanceRecordRequest,
    UpdateEquipmentRequest,
    UsageRecordRequest,
)
from app.schemas.financial import (
    CashFlowProjectionRequest,
    CreateBudgetRequest,
    CreateCategoryRequest,
    CreateCustomerRequest,
    CreatePaymentMethodRequest,
    CreateTransactionRequest,
    CreateVendorRequest,
    ReportRequest,
    UpdateBudgetRequest,
    UpdateTransactionRequest,
)
from app.schemas.irrigation import (
    AddSensorRequest,
    CancelIrrigationRequest,
    CreateScheduleRequest,
    CreateZoneRequest,
    OptimalScheduleRequest,
    ResolveAlertRequest,
    SensorReadingRequest,
    StartIrrigationRequest,
    StopIrrigationRequest,
    UpdateScheduleRequest,
    UpdateZoneRequest,
)

__all__ = [
    # Common
    "SuccessResponse",
    "ErrorResponse",
    # Irrigation
    "CreateZoneRequest",
    "UpdateZoneRequest",
    "AddSensorRequest",
    "SensorReadingRequest",
    "CreateScheduleRequest",
    "UpdateScheduleRequest",
    "StartIrrigationRequest",
    "StopIrrigationRequest",
    "CancelIrrigationRequest",
    "ResolveAlertRequest",
    "OptimalScheduleRequest",
    # Financial
    "CreateTransactionRequest",
    "UpdateTransactionRequest",
    "CreateCategoryRequest",
    "CreateVendorRequest",
    "CreateCustomerRequest",
    "CreatePaymentMethodRequest",
    "CreateBudgetRequest",
    "UpdateBudgetRequest",
    "ReportRequest",
    "CashFlowProjectionRequest",
    # Crops
    "CreateCropRequest",
    "UpdateCropRequest",
    "StageObservationRequest",
    "StageProgressRequest",
    "AddTreatmentRequest",
    "TreatmentEffectivenessRequest",
    "PestObservationRequest",
    "YieldPredictionRequest",
    "HarvestRequest",
    # Equipment
    "CreateEquipmentRequest",
    "UpdateEquipmentRequest",
    "MaintenanceRecordRequest",
    "UsageRecordRequest",
    "InspectionRecordRequest",
]
