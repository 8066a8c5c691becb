"""
Equipment Service
=================

In-memory fleet registry with maintenance, usage and inspection logs, the
upcoming maintenance schedule, per-machine cost analysis (straight-line
depreciation) and fleet analytics.
"""

from __future__ import annotations

import logging
import threading
import uuid
from collections import Counter
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from app.domain.equipment import (
    Equipment,
    EquipmentMaintenanceRecord,
    InspectionRecord,
    UsageRecord,
)
from app.domain.exceptions import NotFoundError, ValidationError
from app.enums.equipment import EquipmentCategory, EquipmentStatus
from app.utils.concurrency import synchronized
from app.utils.time import Clock, SystemClock

logger = logging.getLogger(__name__)

UPCOMING_WINDOW_DAYS = 30
INSPECTION_INTERVAL_DAYS = 365

# Equipment that no longer needs servicing
_OUT_OF_SERVICE = frozenset({EquipmentStatus.RETIRED, EquipmentStatus.SOLD})


def _new_id(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex[:12]}"


class EquipmentService:
    """Fleet registry and equipment analytics."""

    def __init__(self, *, clock: Optional[Clock] = None) -> None:
        self._clock = clock or SystemClock()
        self._lock = threading.RLock()
        self._equipment: Dict[str, Equipment] = {}

    def _require(self, equipment_id: str) -> Equipment:
        equipment = self._equipment.get(equipment_id)
        if equipment is None:
            raise NotFoundError("Equipment not found")
        return equipment

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------

    def get_all_equipment(
        self,
        category: Optional[str] = None,
        status: Optional[str] = None,
    ) -> List[Equipment]:
        try:
            wanted_category = EquipmentCategory(category) if category else None
            wanted_status = EquipmentStatus(status) if status else None
        except ValueError as exc:
            raise ValidationError(str(exc)) from None

        with self._lock:
            items = list(self._equipment.values())
        if wanted_category is not None:
            items = [e for e in items if e.category == wanted_category]
        if wanted_status is not None:
            items = [e for e in items if e.status == wanted_status]
        return sorted(items, key=lambda e: e.name.lower())

    def get_equipment(self, equipment_id: str) -> Optional[Equipment]:
        return self._equipment.get(equipment_id)

    @synchronized
    def create_equipment(self, data: Dict[str, Any]) -> Equipment:
        equipment = Equipment.from_dict(
            {k: v for k, v in (data or {}).items() if k not in Equipment.PROTECTED_FIELDS}
        )
        if not equipment.name:
            raise ValidationError("Equipment name is required")

        now = self._clock.now()
        equipment.id = _new_id("equipment")
        equipment.created_at = now
        equipment.updated_at = now
        if not equipment.current_value:
            equipment.current_value = equipment.purchase_price
        if equipment.next_maintenance_due is None:
            equipment.next_maintenance_due = (equipment.purchase_date or now) + timedelta(
                days=equipment.maintenance_interval_days
            )
        self._equipment[equipment.id] = equipment
        logger.info("Registered equipment %s (%s)", equipment.id, equipment.name)
        return equipment

    @synchronized
    def update_equipment(self, equipment_id: str, updates: Dict[str, Any]) -> Optional[Equipment]:
        equipment = self._equipment.get(equipment_id)
        if equipment is None:
            return None
        equipment.apply_updates(updates or {}, protected=Equipment.PROTECTED_FIELDS)
        equipment.updated_at = self._clock.now()
        return equipment

    @synchronized
    def delete_equipment(self, equipment_id: str) -> bool:
        if self._equipment.pop(equipment_id, None) is None:
            return False
        logger.info("Removed equipment %s", equipment_id)
        return True

    # ------------------------------------------------------------------
    # Records
    # ------------------------------------------------------------------

    @synchronized
    def add_maintenance_record(self, equipment_id: str, data: Dict[str, Any]) -> Equipment:
        equipment = self._require(equipment_id)
        now = self._clock.now()
        record = EquipmentMaintenanceRecord.from_dict({k: v for k, v in (data or {}).items() if k != "id"})
        record.id = _new_id("maint")
        record.date = record.date or now
        if not record.total_cost:
            record.total_cost = round(record.labor_cost + record.parts_cost, 2)
        if not record.hours_at_maintenance:
            record.hours_at_maintenance = equipment.total_hours
        record.next_due = record.next_due or record.date + timedelta(days=equipment.maintenance_interval_days)

        equipment.maintenance_history.append(record)
        equipment.next_maintenance_due = record.next_due
        equipment.updated_at = now
        logger.info("Maintenance recorded for %s, next due %s", equipment_id, record.next_due.date())
        return equipment

    @synchronized
    def add_usage_record(self, equipment_id: str, data: Dict[str, Any]) -> Equipment:
        equipment = self._require(equipment_id)
        record = UsageRecord.from_dict({k: v for k, v in (data or {}).items() if k != "id"})
        if record.hours_used < 0:
            raise ValidationError("hours_used cannot be negative")
        record.id = _new_id("usage")
        record.date = record.date or self._clock.now()

        equipment.usage_records.append(record)
        equipment.total_hours = round(equipment.total_hours + record.hours_used, 2)
        equipment.updated_at = self._clock.now()
        return equipment

    @synchronized
    def add_inspection_record(self, equipment_id: str, data: Dict[str, Any]) -> Equipment:
        equipment = self._require(equipment_id)
        record = InspectionRecord.from_dict({k: v for k, v in (data or {}).items() if k != "id"})
        record.id = _new_id("inspection")
        record.date = record.date or self._clock.now()

        equipment.inspection_history.append(record)
        equipment.last_inspection = record.date
        equipment.updated_at = self._clock.now()
        return equipment

    # ------------------------------------------------------------------
    # Schedule and analysis
    # ------------------------------------------------------------------

    def get_maintenance_schedule(self, now: Optional[datetime] = None) -> List[Dict[str, Any]]:
        """Upcoming maintenance for in-service equipment, soonest first."""
        now = now or self._clock.now()
        entries = []
        for equipment in self.get_all_equipment():
            if equipment.status in _OUT_OF_SERVICE or equipment.next_maintenance_due is None:
                continue
            days = (equipment.next_maintenance_due - now).days
            if days < 0:
                priority = "high"
            elif days <= 7:
                priority = "medium"
            else:
                priority = "low"
            entries.append(
                {
                    "equipment_id": equipment.id,
                    "equipment_name": equipment.name,
                    "category": equipment.category.value,
                    "due_date": equipment.next_maintenance_due.isoformat(),
                    "days_until_due": days,
                    "overdue": days < 0,
                    "priority": priority,
                    "current_hours": equipment.total_hours,
                }
            )
        entries.sort(key=lambda e: e["due_date"])
        return entries

    def _accumulated_depreciation(self, equipment: Equipment, now: datetime) -> Dict[str, float]:
        settings = equipment.depreciation
        basis = max(0.0, equipment.purchase_price - settings.salvage_value)
        annual = basis / settings.useful_life_years if settings.useful_life_years > 0 else 0.0

        if equipment.purchase_date is not None:
            years = max(0.0, (now - equipment.purchase_date).days / 365.25)
        elif equipment.year:
            years = max(0, now.year - equipment.year)
        else:
            years = 0.0
        return {
            "annual_depreciation": round(annual, 2),
            "years_owned": round(years, 2),
            "accumulated_depreciation": round(min(basis, annual * years), 2),
        }

    def get_cost_analysis(self, equipment_id: str) -> Optional[Dict[str, Any]]:
        equipment = self._equipment.get(equipment_id)
        if equipment is None:
            return None
        now = self._clock.now()

        maintenance = sum(r.total_cost for r in equipment.maintenance_history)
        repairs = sum(r.total_cost for r in equipment.maintenance_history if r.type.value in ("repair", "emergency"))
        fuel = sum(r.fuel_cost for r in equipment.usage_records)
        depreciation = self._accumulated_depreciation(equipment, now)
        operating = maintenance + fuel
        hours = equipment.total_hours

        return {
            "equipment_id": equipment.id,
            "acquisition_cost": equipment.purchase_price,
            "current_value": equipment.current_value,
            "cost_breakdown": {
                "maintenance": round(maintenance - repairs, 2),
                "repairs": round(repairs, 2),
                "fuel": round(fuel, 2),
                "depreciation": depreciation["accumulated_depreciation"],
            },
            "depreciation": depreciation,
            "total_operating_cost": round(operating, 2),
            "total_ownership_cost": round(equipment.purchase_price + operating, 2),
            "total_hours": hours,
            "cost_per_hour": round((operating + depreciation["accumulated_depreciation"]) / hours, 2)
            if hours > 0
            else 0.0,
        }

    def get_equipment_analytics(self, now: Optional[datetime] = None) -> Dict[str, Any]:
        now = now or self._clock.now()
        fleet = self.get_all_equipment()
        upcoming = [e for e in self.get_maintenance_schedule(now) if e["days_until_due"] <= UPCOMING_WINDOW_DAYS]
        inspection_cutoff = now - timedelta(days=INSPECTION_INTERVAL_DAYS)
        overdue_inspections = [
            e.id
            for e in fleet
            if e.status not in _OUT_OF_SERVICE and (e.last_inspection is None or e.last_inspection < inspection_cutoff)
        ]

        return {
            "total_equipment": len(fleet),
            "equipment_by_status": dict(Counter(e.status.value for e in fleet)),
            "equipment_by_category": dict(Counter(e.category.value for e in fleet)),
            "total_value": round(sum(e.current_value for e in fleet), 2),
            "total_maintenance_cost": round(
                sum(r.total_cost for e in fleet for r in e.maintenance_history), 2
            ),
            "total_hours": round(sum(e.total_hours for e in fleet), 2),
            "upcoming_maintenance": upcoming,
            "overdue_inspections": overdue_inspections,
        }
