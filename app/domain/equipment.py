"""
Equipment Domain Objects
========================
Farm machinery with its maintenance, usage and inspection logs.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from app.domain.base import Record
from app.enums.equipment import (
    EquipmentCategory,
    EquipmentStatus,
    EquipmentType,
    InspectionResult,
    MaintenanceType,
)


@dataclass
class EquipmentMaintenanceRecord(Record):
    id: str = ""
    date: Optional[datetime] = None
    type: MaintenanceType = MaintenanceType.ROUTINE
    description: str = ""
    performed_by: str = ""
    hours_at_maintenance: float = 0.0
    tasks_completed: List[str] = field(default_factory=list)
    parts_used: List[Dict[str, Any]] = field(default_factory=list)
    labor_hours: float = 0.0
    labor_cost: float = 0.0
    parts_cost: float = 0.0
    total_cost: float = 0.0
    next_due: Optional[datetime] = None
    notes: str = ""


@dataclass
class UsageRecord(Record):
    id: str = ""
    date: Optional[datetime] = None
    operator_id: str = ""
    operator_name: str = ""
    hours_used: float = 0.0
    acres_covered: Optional[float] = None
    fuel_consumed: float = 0.0
    fuel_cost: float = 0.0
    fields_worked: List[str] = field(default_factory=list)
    issues: List[str] = field(default_factory=list)
    notes: str = ""


@dataclass
class InspectionRecord(Record):
    id: str = ""
    date: Optional[datetime] = None
    type: str = "routine"
    inspector: str = ""
    overall_rating: int = 10  # 1-10
    result: InspectionResult = InspectionResult.PASSED
    issues_found: List[str] = field(default_factory=list)
    immediate_actions: List[str] = field(default_factory=list)
    regulatory_compliance: bool = True
    notes: str = ""


@dataclass
class Depreciation(Record):
    """Straight-line depreciation parameters."""
    useful_life_years: float = 10.0
    salvage_value: float = 0.0


@dataclass
class Equipment(Record):
    id: str = ""
    farm_id: str = ""
    name: str = ""
    category: EquipmentCategory = EquipmentCategory.TOOLS
    type: EquipmentType = EquipmentType.OTHER
    brand: str = ""
    model: str = ""
    serial_number: str = ""
    year: Optional[int] = None
    purchase_date: Optional[datetime] = None
    purchase_price: float = 0.0
    current_value: float = 0.0
    depreciation: Depreciation = field(default_factory=Depreciation)
    status: EquipmentStatus = EquipmentStatus.ACTIVE
    assigned_to: Optional[str] = None
    maintenance_interval_days: int = 90
    maintenance_history: List[EquipmentMaintenanceRecord] = field(default_factory=list)
    usage_records: List[UsageRecord] = field(default_factory=list)
    inspection_history: List[InspectionRecord] = field(default_factory=list)
    total_hours: float = 0.0
    last_inspection: Optional[datetime] = None
    next_maintenance_due: Optional[datetime] = None
    tags: List[str] = field(default_factory=list)
    notes: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    PROTECTED_FIELDS = frozenset(
        {"id", "maintenance_history", "usage_records", "inspection_history", "created_at", "updated_at"}
    )
