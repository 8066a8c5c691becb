"""
Irrigation Domain Objects
=========================

Zones, their hardware, sensors, schedules, events, budgets and alerts.

A zone owns its sensors, schedules, alerts and the history of terminated
events. A running ``IrrigationEvent`` lives in the service's live tracker
and is appended to ``IrrigationZone.history`` (the same object) when it
terminates.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from app.domain.base import Record
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


# ---------------------------------------------------------------------------
# Zone description
# ---------------------------------------------------------------------------


@dataclass
class GeoLocation(Record):
    latitude: float = 0.0
    longitude: float = 0.0
    elevation: Optional[float] = None


@dataclass
class SoilCharacteristics(Record):
    """Soil water properties (inches of water per foot of soil, in/hr for infiltration)."""
    field_capacity: float = 2.0
    wilting_point: float = 1.0
    infiltration_rate: float = 0.5
    available_water: float = 1.0
    drainage: str = "moderate"


# ---------------------------------------------------------------------------
# Irrigation system
# ---------------------------------------------------------------------------


@dataclass
class SystemCapacity(Record):
    flow_rate: float = 0.0  # GPM
    pressure: float = 0.0  # PSI
    coverage: float = 0.0  # acres


@dataclass
class SystemEfficiency(Record):
    """Static efficiency ratings of the hardware, all percentages."""
    application_efficiency: float = 85.0
    distribution_uniformity: float = 85.0
    water_use_efficiency: float = 80.0


@dataclass
class MaintenanceRecord(Record):
    id: str = ""
    date: Optional[datetime] = None
    type: str = "inspection"
    description: str = ""
    cost: float = 0.0
    technician: str = ""
    parts: List[str] = field(default_factory=list)
    next_due: Optional[datetime] = None


@dataclass
class IrrigationSystem(Record):
    type: IrrigationSystemType = IrrigationSystemType.DRIP
    manufacturer: str = ""
    model: str = ""
    capacity: SystemCapacity = field(default_factory=SystemCapacity)
    efficiency: SystemEfficiency = field(default_factory=SystemEfficiency)
    components: List[Dict[str, Any]] = field(default_factory=list)
    maintenance_history: List[MaintenanceRecord] = field(default_factory=list)
    operating_hours: float = 0.0
    energy_consumption: float = 0.0
    status: SystemStatus = SystemStatus.ONLINE


# ---------------------------------------------------------------------------
# Zone settings
# ---------------------------------------------------------------------------


@dataclass
class MoistureTarget(Record):
    """Soil moisture window in percent volumetric water content."""
    min: float = 30.0
    max: float = 70.0
    optimal: float = 50.0


@dataclass
class IrrigationConstraints(Record):
    max_daily_water: float = 2.0  # inches
    max_session_duration: int = 120  # minutes
    min_time_between_sessions: int = 240  # minutes
    allowed_time_windows: List[Dict[str, str]] = field(default_factory=list)


@dataclass
class CropFactors(Record):
    crop_coefficient: float = 1.0
    root_depth: float = 24.0  # inches
    critical_periods: List[Dict[str, Any]] = field(default_factory=list)


@dataclass
class ApplicationEfficiency(Record):
    application_rate: float = 0.5  # inches per hour
    runoff_factor: float = 0.05
    evaporation_loss: float = 0.1


@dataclass
class AlertSettings(Record):
    low_moisture: bool = True
    high_moisture: bool = True
    system_fault: bool = True
    budget_exceeded: bool = True


@dataclass
class IrrigationSettings(Record):
    mode: IrrigationMode = IrrigationMode.MANUAL
    auto_start: bool = False
    weather_integration: bool = True
    soil_moisture_target: MoistureTarget = field(default_factory=MoistureTarget)
    constraints: IrrigationConstraints = field(default_factory=IrrigationConstraints)
    crop_factors: CropFactors = field(default_factory=CropFactors)
    efficiency: ApplicationEfficiency = field(default_factory=ApplicationEfficiency)
    alerts: AlertSettings = field(default_factory=AlertSettings)


# ---------------------------------------------------------------------------
# Sensors
# ---------------------------------------------------------------------------


@dataclass
class ValueRange(Record):
    """A closed interval; a missing side is open."""
    min: Optional[float] = None
    max: Optional[float] = None

    def contains(self, value: float) -> bool:
        if self.min is not None and value < self.min:
            return False
        if self.max is not None and value > self.max:
            return False
        return True


@dataclass
class SensorThresholds(Record):
    """Normal bounds (minimum/maximum) sit inside the critical bounds.

    Critical bounds left out of the payload are unbounded, so only the
    normal band raises alerts for such a sensor.
    """
    minimum: float = 0.0
    maximum: float = 100.0
    optimal: ValueRange = field(default_factory=ValueRange)
    critical: ValueRange = field(default_factory=ValueRange)
    alert_enabled: bool = True


@dataclass
class SensorReading(Record):
    timestamp: datetime
    value: float
    unit: str
    quality: ReadingQuality = ReadingQuality.GOOD


@dataclass
class IoTSensor(Record):
    id: str = ""
    type: SensorType = SensorType.SOIL_MOISTURE
    name: str = ""
    location: Dict[str, Any] = field(default_factory=dict)
    battery_level: float = 100.0
    signal_strength: float = 100.0
    status: SensorStatus = SensorStatus.ONLINE
    readings: List[SensorReading] = field(default_factory=list)
    thresholds: SensorThresholds = field(default_factory=SensorThresholds)
    installed_at: Optional[datetime] = None

    @property
    def last_reading(self) -> Optional[SensorReading]:
        return self.readings[-1] if self.readings else None

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        last = self.last_reading
        data["last_reading"] = last.to_dict() if last else None
        return data


# ---------------------------------------------------------------------------
# Schedules
# ---------------------------------------------------------------------------


@dataclass
class ScheduleFrequency(Record):
    type: FrequencyType = FrequencyType.DAILY
    interval: int = 1
    days_of_week: List[int] = field(default_factory=list)  # 0=Monday


@dataclass
class ScheduleTiming(Record):
    start_time: str = "06:00"  # HH:MM wall clock
    duration: int = 30  # minutes


@dataclass
class WaterAmount(Record):
    target: float = 0.5  # inches
    min: float = 0.25
    max: float = 1.0


@dataclass
class IrrigationSchedule(Record):
    id: str = ""
    zone_id: str = ""
    name: str = ""
    type: ScheduleType = ScheduleType.FIXED
    status: ScheduleStatus = ScheduleStatus.ACTIVE
    priority: int = 1
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    frequency: ScheduleFrequency = field(default_factory=ScheduleFrequency)
    timing: ScheduleTiming = field(default_factory=ScheduleTiming)
    water_amount: WaterAmount = field(default_factory=WaterAmount)
    conditions: Dict[str, Any] = field(default_factory=dict)
    adjustments: Dict[str, Any] = field(default_factory=dict)
    created_at: Optional[datetime] = None
    last_modified: Optional[datetime] = None
    last_triggered_on: Optional[date] = None

    PROTECTED_FIELDS = frozenset({"id", "zone_id", "created_at", "last_modified", "last_triggered_on"})


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------


@dataclass
class WaterApplied(Record):
    planned: float = 0.0  # inches
    actual: float = 0.0
    efficiency: float = 0.0


@dataclass
class EventTrigger(Record):
    type: TriggerType = TriggerType.MANUAL
    source: str = "user"
    reason: str = ""
    data: Dict[str, Any] = field(default_factory=dict)


@dataclass
class EventConditions(Record):
    """Conditions observed when an event started."""
    soil_moisture: Optional[float] = None
    temperature: float = 70.0
    humidity: float = 60.0
    wind_speed: float = 5.0
    rainfall: float = 0.0


@dataclass
class EventResults(Record):
    success: bool = False
    moisture_increase: float = 0.0
    uniformity: float = 0.0
    runoff: float = 0.0
    deep_percolation: float = 0.0


@dataclass
class EventCost(Record):
    water: float = 0.0
    energy: float = 0.0
    labor: float = 0.0
    total: float = 0.0


@dataclass
class IrrigationEvent(Record):
    id: str
    zone_id: str
    type: IrrigationEventType
    status: EventStatus
    start_time: datetime
    planned_duration: int  # minutes
    schedule_id: Optional[str] = None
    end_time: Optional[datetime] = None
    actual_duration: Optional[int] = None
    water_applied: WaterApplied = field(default_factory=WaterApplied)
    trigger: EventTrigger = field(default_factory=EventTrigger)
    conditions: EventConditions = field(default_factory=EventConditions)
    system_performance: SystemCapacity = field(default_factory=SystemCapacity)
    results: Optional[EventResults] = None
    cost: Optional[EventCost] = None
    created_by: str = "system"
    cancel_reason: Optional[str] = None
    auto_stop_job_id: Optional[str] = field(default=None, metadata={"serialize": False})

    @property
    def is_running(self) -> bool:
        return self.status == EventStatus.RUNNING


# ---------------------------------------------------------------------------
# Budget and alerts
# ---------------------------------------------------------------------------


@dataclass
class BudgetCost(Record):
    budgeted: float = 0.0
    actual: float = 0.0
    projected: float = 0.0


@dataclass
class WaterBudget(Record):
    """Cumulative water allocation for a zone; it never resets on its own."""
    period: BudgetPeriod = BudgetPeriod.MONTHLY
    allocation: float = 10.0  # inches
    used: float = 0.0
    remaining: float = 10.0
    efficiency: float = 0.0
    cost: BudgetCost = field(default_factory=BudgetCost)
    restrictions: List[Dict[str, Any]] = field(default_factory=list)
    goals: Dict[str, Any] = field(default_factory=dict)

    @property
    def usage_ratio(self) -> float:
        return self.used / self.allocation if self.allocation > 0 else 0.0


@dataclass
class AlertAction(Record):
    type: str
    label: str
    description: str = ""
    automated: bool = False


@dataclass
class IrrigationAlert(Record):
    id: str
    zone_id: str
    type: AlertType
    priority: AlertPriority
    title: str
    message: str
    timestamp: datetime
    status: AlertStatus = AlertStatus.ACTIVE
    data: Dict[str, Any] = field(default_factory=dict)
    actions: List[AlertAction] = field(default_factory=list)
    acknowledged_at: Optional[datetime] = None
    resolved_at: Optional[datetime] = None
    resolved_by: Optional[str] = None


# ---------------------------------------------------------------------------
# Zone aggregate
# ---------------------------------------------------------------------------


@dataclass
class IrrigationZone(Record):
    id: str = ""
    name: str = ""
    description: str = ""
    field_id: str = ""
    crop_id: Optional[str] = None
    area: float = 1.0  # acres
    location: GeoLocation = field(default_factory=GeoLocation)
    soil_type: str = "loam"
    soil_characteristics: SoilCharacteristics = field(default_factory=SoilCharacteristics)
    irrigation_system: IrrigationSystem = field(default_factory=IrrigationSystem)
    sensors: List[IoTSensor] = field(default_factory=list)
    schedules: List[IrrigationSchedule] = field(default_factory=list)
    status: ZoneStatus = ZoneStatus.ACTIVE
    settings: IrrigationSettings = field(default_factory=IrrigationSettings)
    history: List[IrrigationEvent] = field(default_factory=list)
    water_budget: WaterBudget = field(default_factory=WaterBudget)
    alerts: List[IrrigationAlert] = field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    # Keys update_zone never touches: identity and collections the service owns.
    PROTECTED_FIELDS = frozenset(
        {"id", "sensors", "schedules", "history", "alerts", "water_budget", "created_at", "updated_at"}
    )

    def find_sensor(self, sensor_id: str) -> Optional[IoTSensor]:
        return next((s for s in self.sensors if s.id == sensor_id), None)

    def find_schedule(self, schedule_id: str) -> Optional[IrrigationSchedule]:
        return next((s for s in self.schedules if s.id == schedule_id), None)

    def summary(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "status": self.status.value,
            "area": self.area,
            "crop_id": self.crop_id,
            "system_type": self.irrigation_system.type.value,
            "sensor_count": len(self.sensors),
            "schedule_count": len(self.schedules),
        }
