from datetime import datetime, timezone

import pytest

from app.domain.equipment import Depreciation, Equipment, EquipmentMaintenanceRecord
from app.domain.exceptions import ValidationError
from app.domain.irrigation import IrrigationEvent
from app.enums.equipment import EquipmentStatus
from app.enums.irrigation import EventStatus, IrrigationEventType


def test_from_dict_coerces_nested_values_and_ignores_unknown_keys():
    equipment = Equipment.from_dict(
        {
            "name": "Sprayer",
            "status": "maintenance",
            "purchase_date": "2023-04-01T08:00:00Z",
            "purchase_price": "32000",
            "depreciation": {"useful_life_years": 8},
            "maintenance_history": [{"id": "m1", "type": "repair", "total_cost": 120}],
            "colour": "green",
        }
    )

    assert equipment.status is EquipmentStatus.MAINTENANCE
    assert equipment.purchase_date == datetime(2023, 4, 1, 8, tzinfo=timezone.utc)
    assert equipment.purchase_price == 32000.0
    assert equipment.depreciation == Depreciation(useful_life_years=8)
    assert isinstance(equipment.maintenance_history[0], EquipmentMaintenanceRecord)
    assert not hasattr(equipment, "colour")


@pytest.mark.parametrize(
    "data, field_name",
    [
        ({"status": "sold"}, "status"),
        ({"purchase_date": "last spring"}, "purchase_date"),
        ({"purchase_price": "a lot"}, "purchase_price"),
    ],
)
def test_from_dict_reports_the_bad_field(data, field_name):
    with pytest.raises(ValidationError, match=f"Invalid value for {field_name}"):
        Equipment.from_dict(data)


def test_to_dict_renders_primitives_and_skips_internal_fields():
    event = IrrigationEvent(
        id="event_1",
        zone_id="zone_1",
        type=IrrigationEventType.MANUAL,
        status=EventStatus.RUNNING,
        start_time=datetime(2024, 6, 3, 6, tzinfo=timezone.utc),
        planned_duration=30,
        auto_stop_job_id="irrigation_auto_stop_event_1",
    )

    payload = event.to_dict()

    assert payload["type"] == "manual"
    assert payload["start_time"] == "2024-06-03T06:00:00+00:00"
    assert payload["water_applied"]["planned"] == 0.0
    assert "auto_stop_job_id" not in payload


def test_apply_updates_respects_protected_fields():
    equipment = Equipment(id="equipment_1", name="Old name")

    changed = equipment.apply_updates(
        {"id": "other", "name": "New name", "status": "repair", "unknown": 1},
        protected=Equipment.PROTECTED_FIELDS,
    )

    assert changed == ["name", "status"]
    assert equipment.id == "equipment_1"
    assert equipment.status is EquipmentStatus.REPAIR
    with pytest.raises(ValidationError):
        equipment.apply_updates({"status": "melted"})
