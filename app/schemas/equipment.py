"""
Equipment Schemas
=================

Request schemas for the equipment registry and its maintenance, usage and
inspection logs.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from app.enums.equipment import (
    EquipmentCategory,
    EquipmentStatus,
    EquipmentType,
    InspectionResult,
    MaintenanceType,
)


class DepreciationModel(BaseModel):
    model_config = ConfigDict(extra="allow")

    useful_life_years: float = Field(default=10.0, gt=0)
    salvage_value: float = Field(default=0.0, ge=0)


class CreateEquipmentRequest(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: str = Field(..., min_length=1, max_length=120)
    category: EquipmentCategory = EquipmentCategory.TOOLS
    type: EquipmentType = EquipmentType.OTHER
    brand: str = ""
    model: str = ""
    serial_number: str = ""
    year: Optional[int] = Field(default=None, ge=1900, le=2100)
    purchase_date: Optional[str] = None
    purchase_price: float = Field(default=0.0, ge=0)
    current_value: Optional[float] = Field(default=None, ge=0)
    depreciation: Optional[DepreciationModel] = None
    status: EquipmentStatus = EquipmentStatus.ACTIVE
    maintenance_interval_days: int = Field(default=90, ge=1, le=3650)
    tags: List[str] = Field(default_factory=list)


class UpdateEquipmentRequest(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: Optional[str] = Field(default=None, min_length=1, max_length=120)
    status: Optional[EquipmentStatus] = None
    current_value: Optional[float] = Field(default=None, ge=0)
    assigned_to: Optional[str] = None
    maintenance_interval_days: Optional[int] = Field(default=None, ge=1, le=3650)


class MaintenanceRecordRequest(BaseModel):
    model_config = ConfigDict(extra="allow")

    type: MaintenanceType = MaintenanceType.ROUTINE
    date: Optional[str] = None
    description: str = ""
    performed_by: str = ""
    tasks_completed: List[str] = Field(default_factory=list)
    parts_used: List[Dict[str, Any]] = Field(default_factory=list)
    labor_hours: float = Field(default=0.0, ge=0)
    labor_cost: float = Field(default=0.0, ge=0)
    parts_cost: float = Field(default=0.0, ge=0)


class UsageRecordRequest(BaseModel):
    model_config = ConfigDict(extra="allow")

    date: Optional[str] = None
    operator_name: str = ""
    hours_used: float = Field(..., ge=0)
    acres_covered: Optional[float] = Field(default=None, ge=0)
    fuel_consumed: float = Field(default=0.0, ge=0)
    fuel_cost: float = Field(default=0.0, ge=0)
    fields_worked: List[str] = Field(default_factory=list)


class InspectionRecordRequest(BaseModel):
    model_config = ConfigDict(extra="allow")

    date: Optional[str] = None
    type: str = "routine"
    inspector: str = ""
    overall_rating: int = Field(default=10, ge=1, le=10)
    result: InspectionResult = InspectionResult.PASSED
    issues_found: List[str] = Field(default_factory=list)
    regulatory_compliance: bool = True
