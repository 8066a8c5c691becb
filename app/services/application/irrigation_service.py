"""
Irrigation zone registry and event lifecycle.

Owns every zone with its sensors, schedules and alerts, starts and stops
irrigation events, and runs the per-minute monitoring cycle (scheduled
irrigation, offline sensors, system status).

Locking: a per-zone lock serialises start/stop/delete for one zone; the
registry lock guards the shared dicts. The zone lock is always taken first.
"""

from __future__ import annotations

import logging
import math
import threading
import uuid
from dataclasses import replace
from datetime import timedelta, tzinfo
from typing import Any, Dict, List, Optional

from app.domain.exceptions import ConflictError, FarmError, NotFoundError, ValidationError
from app.domain.irrigation import (
    AlertAction,
    EventConditions,
    EventCost,
    EventResults,
    EventTrigger,
    IoTSensor,
    IrrigationAlert,
    IrrigationEvent,
    IrrigationSchedule,
    IrrigationZone,
    SensorReading,
    SystemCapacity,
    WaterApplied,
)
from app.enums.events import AlertEvent, ZoneEvent
from app.enums.irrigation import (
    AlertPriority,
    AlertStatus,
    AlertType,
    EventStatus,
    IrrigationEventType,
    ReadingQuality,
    ScheduleStatus,
    SensorStatus,
    SensorType,
    SystemStatus,
    TriggerType,
    ZoneStatus,
)
from app.utils.concurrency import KeyedLocks
from app.utils.time import Clock, SystemClock, parse_hhmm

logger = logging.getLogger(__name__)

AUTO_STOP_TASK = "irrigation.auto_stop"

MIN_SESSION_MINUTES = 10
WATER_COST_PER_INCH_ACRE = 2.0
PUMP_KWH_PER_HOUR = 5.0
ENERGY_COST_PER_KWH = 0.10

# Fallbacks when a zone has no online sensor for a condition
DEFAULT_TEMPERATURE = 70.0
DEFAULT_HUMIDITY = 60.0
DEFAULT_WIND_SPEED = 5.0

_ALERT_ACTIONS: Dict[AlertType, List[AlertAction]] = {
    AlertType.LOW_MOISTURE: [
        AlertAction("start_irrigation", "Start Irrigation", "Begin irrigation to restore soil moisture"),
    ],
    AlertType.HIGH_MOISTURE: [
        AlertAction(
            "stop_irrigation",
            "Stop Irrigation",
            "Stop current irrigation to prevent overwatering",
            automated=True,
        ),
    ],
    AlertType.SYSTEM_FAULT: [
        AlertAction("maintenance_request", "Request Maintenance", "Schedule maintenance for system repair"),
    ],
    AlertType.SENSOR_OFFLINE: [
        AlertAction("sensor_check", "Check Sensor", "Inspect sensor and restore connection"),
    ],
}


def _new_id(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex[:12]}"


class IrrigationService:
    """Zone registry, irrigation control and alerting for all irrigation zones."""

    def __init__(
        self,
        *,
        clock: Optional[Clock] = None,
        event_bus: Optional[Any] = None,
        scheduler: Optional[Any] = None,
        sensor_reading_limit: int = 1000,
        sensor_offline_minutes: int = 30,
    ) -> None:
        self._clock = clock or SystemClock()
        self._event_bus = event_bus
        self._scheduler = scheduler
        self._reading_limit = max(1, int(sensor_reading_limit))
        self._offline_after = timedelta(minutes=sensor_offline_minutes)
        self._tz: Optional[tzinfo] = getattr(self._clock, "tz", None)

        self._zones: Dict[str, IrrigationZone] = {}
        self._active_events: Dict[str, IrrigationEvent] = {}
        self._alerts: List[IrrigationAlert] = []
        self._system_status = SystemStatus.ONLINE

        self._lock = threading.RLock()
        self._zone_locks = KeyedLocks()

    def set_scheduler(self, scheduler: Any) -> None:
        """Attach the scheduler used for auto-stop jobs."""
        self._scheduler = scheduler

    @property
    def system_status(self) -> SystemStatus:
        return self._system_status

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _now(self):
        return self._clock.now()

    def _publish(self, topic, payload: Dict[str, Any]) -> None:
        if self._event_bus is not None:
            self._event_bus.publish(topic, payload)

    def _require_zone(self, zone_id: str) -> IrrigationZone:
        zone = self.get_zone(zone_id)
        if zone is None:
            raise NotFoundError("Zone not found", detail={"zone_id": zone_id})
        return zone

    def _running_event_for(self, zone_id: str) -> Optional[IrrigationEvent]:
        with self._lock:
            return next(
                (e for e in self._active_events.values() if e.zone_id == zone_id and e.is_running),
                None,
            )

    # ------------------------------------------------------------------
    # Zones
    # ------------------------------------------------------------------

    def create_zone(self, data: Dict[str, Any]) -> str:
        """Register a new zone and return its id."""
        payload = {k: v for k, v in (data or {}).items() if k not in {"id", "history", "alerts"}}
        zone = IrrigationZone.from_dict(payload)
        if not zone.name:
            raise ValidationError("Zone name is required")

        now = self._now()
        zone.id = _new_id("zone")
        zone.created_at = now
        zone.updated_at = now
        zone.history = []
        zone.alerts = []
        zone.water_budget.remaining = max(0.0, zone.water_budget.allocation - zone.water_budget.used)
        for sensor in zone.sensors:
            sensor.id = sensor.id or _new_id("sensor")
            sensor.installed_at = sensor.installed_at or now
        for schedule in zone.schedules:
            self._validate_schedule(schedule)
            schedule.id = schedule.id or _new_id("schedule")
            schedule.zone_id = zone.id
            schedule.created_at = schedule.last_modified = now

        with self._lock:
            self._zones[zone.id] = zone

        logger.info("Created irrigation zone %s (%s)", zone.id, zone.name)
        self.create_alert(
            zone.id,
            AlertType.SYSTEM_FAULT,
            AlertPriority.LOW,
            "Irrigation Zone Created",
            f'New irrigation zone "{zone.name}" has been created and is ready for configuration',
        )
        self._publish(ZoneEvent.ZONE_CREATED, {"zone_id": zone.id, "name": zone.name})
        return zone.id

    def get_zone(self, zone_id: str) -> Optional[IrrigationZone]:
        with self._lock:
            return self._zones.get(zone_id)

    def get_all_zones(self) -> List[IrrigationZone]:
        with self._lock:
            return list(self._zones.values())

    def get_active_zones(self) -> List[IrrigationZone]:
        return [z for z in self.get_all_zones() if z.status == ZoneStatus.ACTIVE]

    def update_zone(self, zone_id: str, updates: Dict[str, Any]) -> bool:
        with self._zone_locks.hold(zone_id):
            zone = self.get_zone(zone_id)
            if zone is None:
                return False
            changed = zone.apply_updates(updates or {}, protected=IrrigationZone.PROTECTED_FIELDS)
            zone.updated_at = self._now()
        logger.debug("Updated zone %s fields=%s", zone_id, changed)
        return True

    def delete_zone(self, zone_id: str) -> bool:
        """Remove a zone, completing any running event first."""
        with self._zone_locks.hold(zone_id):
            zone = self.get_zone(zone_id)
            if zone is None:
                return False
            if self._running_event_for(zone_id) is not None:
                self.stop_irrigation(zone_id)
            with self._lock:
                self._zones.pop(zone_id, None)
        self._zone_locks.discard(zone_id)

        logger.info("Deleted irrigation zone %s (%s)", zone_id, zone.name)
        self._publish(ZoneEvent.ZONE_DELETED, {"zone_id": zone_id, "name": zone.name})
        return True

    # ------------------------------------------------------------------
    # Sensors
    # ------------------------------------------------------------------

    def add_sensor(self, zone_id: str, sensor: Dict[str, Any]) -> str:
        zone = self._require_zone(zone_id)
        record = IoTSensor.from_dict({k: v for k, v in (sensor or {}).items() if k not in {"id", "readings"}})
        record.id = _new_id("sensor")
        record.installed_at = self._now()
        with self._zone_locks.hold(zone_id):
            zone.sensors.append(record)
            zone.updated_at = record.installed_at
        logger.info("Added %s sensor %s to zone %s", record.type, record.id, zone_id)
        return record.id

    def record_sensor_reading(
        self,
        zone_id: str,
        sensor_id: str,
        value: float,
        unit: Optional[str] = None,
        quality: str | ReadingQuality = ReadingQuality.GOOD,
    ) -> bool:
        """Append a reading, trim the buffer and check alert thresholds."""
        zone = self.get_zone(zone_id)
        if zone is None:
            return False
        sensor = zone.find_sensor(sensor_id)
        if sensor is None:
            return False
        try:
            reading = SensorReading(
                timestamp=self._now(),
                value=float(value),
                unit=unit or sensor.type.unit,
                quality=ReadingQuality(quality),
            )
        except ValueError as exc:
            raise ValidationError(f"Invalid sensor reading: {exc}") from exc

        with self._zone_locks.hold(zone_id):
            sensor.readings.append(reading)
            overflow = len(sensor.readings) - self._reading_limit
            if overflow > 0:
                del sensor.readings[:overflow]
            if sensor.status == SensorStatus.OFFLINE:
                sensor.status = SensorStatus.ONLINE

        self._check_sensor_thresholds(zone, sensor, reading)
        self._publish(
            ZoneEvent.SENSOR_READING,
            {"zone_id": zone_id, "sensor_id": sensor_id, "sensor_type": sensor.type.value, **reading.to_dict()},
        )
        return True

    def get_sensor_readings(self, zone_id: str, sensor_id: str, hours: int = 24) -> List[SensorReading]:
        zone = self.get_zone(zone_id)
        sensor = zone.find_sensor(sensor_id) if zone else None
        if sensor is None:
            return []
        since = self._now() - timedelta(hours=hours)
        return [r for r in sensor.readings if r.timestamp >= since]

    def get_latest_sensor_reading(self, zone_id: str, sensor_type: str | SensorType) -> Optional[SensorReading]:
        """Newest reading across the zone's online sensors of one type."""
        zone = self.get_zone(zone_id)
        if zone is None:
            return None
        candidates = [
            s.last_reading
            for s in zone.sensors
            if s.type == sensor_type and s.status == SensorStatus.ONLINE and s.last_reading is not None
        ]
        if not candidates:
            return None
        return max(candidates, key=lambda r: r.timestamp)

    @staticmethod
    def get_sensor_unit(sensor_type: str | SensorType) -> str:
        try:
            return SensorType(sensor_type).unit
        except ValueError:
            return "units"

    def _check_sensor_thresholds(self, zone: IrrigationZone, sensor: IoTSensor, reading: SensorReading) -> None:
        thresholds = sensor.thresholds
        if not thresholds.alert_enabled:
            return

        value = reading.value
        alert_type = AlertType.LOW_MOISTURE if sensor.type == SensorType.SOIL_MOISTURE else AlertType.SENSOR_OFFLINE
        label = sensor.type.value
        if not thresholds.critical.contains(value):
            self.create_alert(
                zone.id,
                alert_type,
                AlertPriority.CRITICAL,
                f"Critical {label} Reading",
                f"{sensor.name} reading ({value}{reading.unit}) is outside critical range",
                {"sensor_id": sensor.id, "value": value},
            )
        elif value < thresholds.minimum or value > thresholds.maximum:
            self.create_alert(
                zone.id,
                alert_type,
                AlertPriority.HIGH,
                f"{label} Warning",
                f"{sensor.name} reading ({value}{reading.unit}) is outside normal range",
                {"sensor_id": sensor.id, "value": value},
            )

    # ------------------------------------------------------------------
    # Schedules
    # ------------------------------------------------------------------

    def create_schedule(self, zone_id: str, data: Dict[str, Any]) -> str:
        zone = self._require_zone(zone_id)
        payload = {k: v for k, v in (data or {}).items() if k not in IrrigationSchedule.PROTECTED_FIELDS}
        schedule = IrrigationSchedule.from_dict(payload)
        self._validate_schedule(schedule)

        now = self._now()
        schedule.id = _new_id("schedule")
        schedule.zone_id = zone_id
        schedule.created_at = now
        schedule.last_modified = now
        with self._zone_locks.hold(zone_id):
            zone.schedules.append(schedule)
        logger.info("Created schedule %s for zone %s at %s", schedule.id, zone_id, schedule.timing.start_time)
        return schedule.id

    def update_schedule(self, zone_id: str, schedule_id: str, updates: Dict[str, Any]) -> bool:
        zone = self.get_zone(zone_id)
        schedule = zone.find_schedule(schedule_id) if zone else None
        if schedule is None:
            return False
        with self._zone_locks.hold(zone_id):
            # Stage on a detached copy so a rejected update leaves the stored schedule untouched.
            staged = IrrigationSchedule.from_dict(schedule.to_dict())
            staged.apply_updates(updates or {}, protected=IrrigationSchedule.PROTECTED_FIELDS)
            self._validate_schedule(staged)
            staged.last_modified = self._now()
            zone.schedules[zone.schedules.index(schedule)] = staged
        return True

    def delete_schedule(self, zone_id: str, schedule_id: str) -> bool:
        zone = self.get_zone(zone_id)
        schedule = zone.find_schedule(schedule_id) if zone else None
        if schedule is None:
            return False
        with self._zone_locks.hold(zone_id):
            zone.schedules.remove(schedule)
        return True

    def get_active_schedules(self, zone_id: Optional[str] = None) -> List[IrrigationSchedule]:
        if zone_id is not None:
            zone = self.get_zone(zone_id)
            zones = [zone] if zone else []
        else:
            zones = self.get_all_zones()
        return [s for z in zones for s in z.schedules if s.status == ScheduleStatus.ACTIVE]

    @staticmethod
    def _validate_start_time(value: str) -> None:
        try:
            hour, minute = parse_hhmm(value)
        except ValueError:
            raise ValidationError(f"Invalid start time: {value!r}") from None
        if not (0 <= hour < 24 and 0 <= minute < 60):
            raise ValidationError(f"Invalid start time: {value!r}")

    @classmethod
    def _validate_schedule(cls, schedule: IrrigationSchedule) -> None:
        cls._validate_start_time(schedule.timing.start_time)
        if schedule.timing.duration <= 0:
            raise ValidationError(
                "Schedule duration must be positive",
                detail={"duration": schedule.timing.duration},
            )

    # ------------------------------------------------------------------
    # Irrigation control
    # ------------------------------------------------------------------

    @staticmethod
    def calculate_optimal_duration(zone: IrrigationZone, water_amount: Optional[float] = None) -> int:
        """Minutes needed to apply ``water_amount`` inches, clamped to the session limits."""
        target = water_amount if water_amount else zone.settings.soil_moisture_target.optimal / 100
        rate = zone.settings.efficiency.application_rate
        max_session = zone.settings.constraints.max_session_duration
        if rate <= 0:
            return max_session
        duration = target / rate * 60
        return int(round(min(max(duration, MIN_SESSION_MINUTES), max_session)))

    @staticmethod
    def calculate_water_requirement(zone: IrrigationZone, duration: float) -> float:
        """Inches applied by running ``duration`` minutes at the zone's application rate."""
        return zone.settings.efficiency.application_rate * duration / 60

    def _current_conditions(self, zone_id: str) -> EventConditions:
        moisture = self.get_latest_sensor_reading(zone_id, SensorType.SOIL_MOISTURE)
        temperature = self.get_latest_sensor_reading(zone_id, SensorType.AMBIENT_TEMPERATURE)
        humidity = self.get_latest_sensor_reading(zone_id, SensorType.HUMIDITY)
        return EventConditions(
            soil_moisture=moisture.value if moisture else None,
            temperature=temperature.value if temperature else DEFAULT_TEMPERATURE,
            humidity=humidity.value if humidity else DEFAULT_HUMIDITY,
            wind_speed=DEFAULT_WIND_SPEED,
            rainfall=0.0,
        )

    def start_irrigation(
        self,
        zone_id: str,
        *,
        duration: Optional[int] = None,
        water_amount: Optional[float] = None,
        schedule_id: Optional[str] = None,
        trigger: Optional[Dict[str, Any] | EventTrigger] = None,
    ) -> str:
        """Start irrigating a zone and return the new event id.

        Raises:
            NotFoundError: the zone does not exist.
            ConflictError: the zone is not active or is already irrigating.
        """
        if isinstance(trigger, EventTrigger):
            event_trigger = trigger
        else:
            event_trigger = EventTrigger.from_dict(trigger or {})

        with self._zone_locks.hold(zone_id):
            zone = self._require_zone(zone_id)
            if zone.status != ZoneStatus.ACTIVE:
                raise ConflictError(f"Zone is not active (status: {zone.status.value})")
            if self._running_event_for(zone_id) is not None:
                raise ConflictError("Zone is already being irrigated")

            minutes = int(duration) if duration else self.calculate_optimal_duration(zone, water_amount)
            if minutes <= 0:
                raise ValidationError("Duration must be positive")
            planned_water = water_amount if water_amount else self.calculate_water_requirement(zone, minutes)

            now = self._now()
            capacity = zone.irrigation_system.capacity
            event = IrrigationEvent(
                id=_new_id("event"),
                zone_id=zone_id,
                schedule_id=schedule_id,
                type=IrrigationEventType.SCHEDULED if schedule_id else IrrigationEventType.MANUAL,
                status=EventStatus.RUNNING,
                start_time=now,
                planned_duration=minutes,
                water_applied=WaterApplied(planned=round(planned_water, 4)),
                trigger=event_trigger,
                conditions=self._current_conditions(zone_id),
                system_performance=SystemCapacity(
                    flow_rate=capacity.flow_rate,
                    pressure=capacity.pressure,
                    coverage=capacity.coverage,
                ),
            )
            with self._lock:
                self._active_events[event.id] = event

            if self._scheduler is not None:
                job = self._scheduler.schedule_once(
                    AUTO_STOP_TASK,
                    now + timedelta(minutes=minutes),
                    job_id=f"irrigation_auto_stop_{event.id}",
                    kwargs={"zone_id": zone_id, "event_id": event.id, "auto_stop": True},
                )
                event.auto_stop_job_id = job.job_id

        logger.info("Irrigation started in zone %s for %s minutes (event %s)", zone_id, minutes, event.id)
        self.create_alert(
            zone_id,
            AlertType.SYSTEM_FAULT,
            AlertPriority.LOW,
            "Irrigation Started",
            f'Irrigation started in zone "{zone.name}" for {minutes} minutes',
        )
        self._publish(ZoneEvent.STARTED, event.to_dict())
        return event.id

    def _find_running(self, zone_id: str, event_id: Optional[str]) -> Optional[IrrigationEvent]:
        if event_id is None:
            return self._running_event_for(zone_id)
        with self._lock:
            event = self._active_events.get(event_id)
        if event is None or event.zone_id != zone_id or not event.is_running:
            return None
        return event

    def _terminate(self, zone: IrrigationZone, event: IrrigationEvent, status: EventStatus, *, auto_stop: bool) -> None:
        """Close a running event and move it from the live tracker into history."""
        if event.auto_stop_job_id and self._scheduler is not None and not auto_stop:
            self._scheduler.remove_job(event.auto_stop_job_id)
        event.auto_stop_job_id = None

        event.status = status
        event.end_time = self._now()
        elapsed = (event.end_time - event.start_time).total_seconds() / 60
        event.actual_duration = max(0, math.ceil(elapsed))
        with self._lock:
            self._active_events.pop(event.id, None)
            zone.history.append(event)

    def stop_irrigation(
        self,
        zone_id: str,
        event_id: Optional[str] = None,
        *,
        auto_stop: bool = False,
    ) -> bool:
        """Complete the running event of a zone.

        Returns False when the zone is unknown or nothing matching is running,
        so repeated and late auto-stop calls are harmless.
        """
        with self._zone_locks.hold(zone_id):
            zone = self.get_zone(zone_id)
            if zone is None:
                return False
            event = self._find_running(zone_id, event_id)
            if event is None:
                return False

            self._terminate(zone, event, EventStatus.COMPLETED, auto_stop=auto_stop)

            actual_water = min(
                event.water_applied.planned,
                self.calculate_water_requirement(zone, event.actual_duration or 0),
            )
            planned = event.water_applied.planned
            event.water_applied.actual = round(actual_water, 4)
            event.water_applied.efficiency = round(actual_water / planned * 100, 2) if planned > 0 else 0.0
            event.results = self._calculate_results(zone, event)
            event.cost = self._calculate_cost(zone, event)
            exceeded = self._update_water_budget(zone, event)

        logger.info(
            "Irrigation %s in zone %s after %s minutes%s",
            event.status.value,
            zone_id,
            event.actual_duration,
            " (auto-stop)" if auto_stop else "",
        )
        if exceeded:
            logger.info("Water budget exceeded in zone %s", zone_id)
            self.create_alert(
                zone_id,
                AlertType.BUDGET_EXCEEDED,
                AlertPriority.HIGH,
                "Water Budget Exceeded",
                f'Zone "{zone.name}" has exceeded its water budget allocation',
                {"used": zone.water_budget.used, "allocation": zone.water_budget.allocation},
            )
        self.create_alert(
            zone_id,
            AlertType.SYSTEM_FAULT,
            AlertPriority.LOW,
            "Irrigation Completed",
            f'Irrigation completed in zone "{zone.name}" after {event.actual_duration} minutes',
        )
        self._publish(ZoneEvent.COMPLETED, event.to_dict())
        return True

    def cancel_irrigation(self, zone_id: str, reason: str = "") -> bool:
        """Abort the running event without charging cost or budget."""
        with self._zone_locks.hold(zone_id):
            zone = self.get_zone(zone_id)
            if zone is None:
                return False
            event = self._find_running(zone_id, None)
            if event is None:
                return False
            self._terminate(zone, event, EventStatus.CANCELLED, auto_stop=False)
            event.cancel_reason = reason or None

        logger.info("Irrigation cancelled in zone %s: %s", zone_id, reason or "no reason given")
        self._publish(ZoneEvent.CANCELLED, event.to_dict())
        return True

    def handle_auto_stop(self, zone_id: str, event_id: str, auto_stop: bool = True) -> bool:
        """Scheduler entry point for the one-shot auto-stop job."""
        return self.stop_irrigation(zone_id, event_id, auto_stop=auto_stop)

    def _calculate_results(self, zone: IrrigationZone, event: IrrigationEvent) -> EventResults:
        after = self.get_latest_sensor_reading(zone.id, SensorType.SOIL_MOISTURE)
        before = event.conditions.soil_moisture
        increase = after.value - before if after is not None and before is not None else 0.0
        system_efficiency = zone.irrigation_system.efficiency
        return EventResults(
            success=increase > 0,
            moisture_increase=round(increase, 2),
            uniformity=system_efficiency.distribution_uniformity,
            runoff=zone.settings.efficiency.runoff_factor,
            deep_percolation=round(max(0.0, 100 - system_efficiency.application_efficiency) * 0.1, 2),
        )

    @staticmethod
    def _calculate_cost(zone: IrrigationZone, event: IrrigationEvent) -> EventCost:
        water = event.water_applied.actual or event.water_applied.planned
        minutes = event.actual_duration or event.planned_duration
        water_cost = water * zone.area * WATER_COST_PER_INCH_ACRE
        energy_cost = (minutes / 60) * PUMP_KWH_PER_HOUR * ENERGY_COST_PER_KWH
        return EventCost(
            water=round(water_cost, 2),
            energy=round(energy_cost, 2),
            total=round(water_cost + energy_cost, 2),
        )

    @staticmethod
    def _update_water_budget(zone: IrrigationZone, event: IrrigationEvent) -> bool:
        """Charge the event to the zone budget; True when the allocation is now exceeded."""
        budget = zone.water_budget
        budget.used = round(budget.used + (event.water_applied.actual or event.water_applied.planned), 4)
        budget.remaining = max(0.0, budget.allocation - budget.used)
        budget.cost.actual = round(budget.cost.actual + (event.cost.total if event.cost else 0.0), 2)
        return budget.used > budget.allocation

    def get_active_irrigation_events(self) -> List[IrrigationEvent]:
        with self._lock:
            return [e for e in self._active_events.values() if e.is_running]

    def get_irrigation_history(self, zone_id: str, days: int = 30) -> List[IrrigationEvent]:
        zone = self.get_zone(zone_id)
        if zone is None:
            return []
        since = self._now() - timedelta(days=days)
        with self._lock:
            return [e for e in zone.history if e.start_time >= since]

    # ------------------------------------------------------------------
    # Alerts
    # ------------------------------------------------------------------

    def create_alert(
        self,
        zone_id: str,
        alert_type: AlertType | str,
        priority: AlertPriority | str,
        title: str,
        message: str,
        data: Optional[Dict[str, Any]] = None,
    ) -> str:
        alert_type = AlertType(alert_type)
        alert = IrrigationAlert(
            id=_new_id("alert"),
            zone_id=zone_id,
            type=alert_type,
            priority=AlertPriority(priority),
            title=title,
            message=message,
            timestamp=self._now(),
            data=dict(data or {}),
            actions=[replace(a) for a in _ALERT_ACTIONS.get(alert_type, [])],
        )
        with self._lock:
            self._alerts.append(alert)
            zone = self._zones.get(zone_id)
            if zone is not None:
                zone.alerts.append(alert)

        if alert.priority in (AlertPriority.HIGH, AlertPriority.CRITICAL):
            logger.warning("Irrigation alert [%s] %s: %s", alert.priority.value, title, message)
        else:
            logger.debug("Irrigation alert [%s] %s", alert.priority.value, title)
        self._publish(AlertEvent.RAISED, alert.to_dict())
        return alert.id

    def get_alerts(self, zone_id: Optional[str] = None, active_only: bool = False) -> List[IrrigationAlert]:
        with self._lock:
            alerts = list(self._alerts)
        if zone_id is not None:
            alerts = [a for a in alerts if a.zone_id == zone_id]
        if active_only:
            alerts = [a for a in alerts if a.status == AlertStatus.ACTIVE]
        return sorted(alerts, key=lambda a: a.timestamp, reverse=True)

    def _find_alert(self, alert_id: str) -> Optional[IrrigationAlert]:
        with self._lock:
            return next((a for a in self._alerts if a.id == alert_id), None)

    def acknowledge_alert(self, alert_id: str) -> bool:
        alert = self._find_alert(alert_id)
        if alert is None:
            return False
        alert.status = AlertStatus.ACKNOWLEDGED
        alert.acknowledged_at = self._now()
        self._publish(AlertEvent.ACKNOWLEDGED, alert.to_dict())
        return True

    def resolve_alert(self, alert_id: str, resolved_by: str = "system") -> bool:
        alert = self._find_alert(alert_id)
        if alert is None:
            return False
        alert.status = AlertStatus.RESOLVED
        alert.resolved_at = self._now()
        alert.resolved_by = resolved_by
        self._publish(AlertEvent.RESOLVED, alert.to_dict())
        return True

    def dismiss_alert(self, alert_id: str) -> bool:
        alert = self._find_alert(alert_id)
        if alert is None:
            return False
        alert.status = AlertStatus.DISMISSED
        self._publish(AlertEvent.DISMISSED, alert.to_dict())
        return True

    # ------------------------------------------------------------------
    # Monitoring cycle
    # ------------------------------------------------------------------

    def run_monitoring_cycle(self, now=None) -> Dict[str, Any]:
        """One tick of the periodic monitor."""
        now = now or self._now()
        started = self.process_scheduled_irrigation(now)
        offline = self.monitor_sensor_alerts(now)
        status = self.update_system_status()
        return {"started_events": started, "offline_sensors": offline, "system_status": status.value}

    def process_scheduled_irrigation(self, now=None) -> List[str]:
        """Start every active schedule whose start time matches this minute.

        Each schedule fires at most once per calendar day. A tick that misses
        the exact minute skips that day's run.
        """
        now = now or self._now()
        wall = now.astimezone(self._tz) if self._tz is not None else now
        started: List[str] = []

        for schedule in self.get_active_schedules():
            if self.get_zone(schedule.zone_id) is None:
                continue
            if not self._should_execute(schedule, wall):
                continue
            schedule.last_triggered_on = wall.date()
            try:
                event_id = self.start_irrigation(
                    schedule.zone_id,
                    duration=schedule.timing.duration,
                    schedule_id=schedule.id,
                    trigger=EventTrigger(
                        type=TriggerType.SCHEDULE,
                        source="scheduler",
                        reason=f"Scheduled irrigation: {schedule.name}",
                        data={"schedule_id": schedule.id},
                    ),
                )
            except FarmError as exc:
                logger.warning("Skipped schedule %s for zone %s: %s", schedule.id, schedule.zone_id, exc)
                continue
            logger.info("Schedule %s fired for zone %s", schedule.id, schedule.zone_id)
            self._publish(
                ZoneEvent.SCHEDULE_FIRED,
                {"schedule_id": schedule.id, "zone_id": schedule.zone_id, "event_id": event_id},
            )
            started.append(event_id)
        return started

    @staticmethod
    def _should_execute(schedule: IrrigationSchedule, wall) -> bool:
        try:
            hour, minute = parse_hhmm(schedule.timing.start_time)
        except ValueError:
            return False
        if (wall.hour, wall.minute) != (hour, minute):
            return False
        if schedule.last_triggered_on == wall.date():
            return False
        if schedule.start_date and wall < schedule.start_date:
            return False
        if schedule.end_date and wall > schedule.end_date:
            return False
        days = schedule.frequency.days_of_week
        return not days or wall.weekday() in days

    def monitor_sensor_alerts(self, now=None) -> List[str]:
        """Mark online sensors offline when they have gone quiet; return their ids."""
        now = now or self._now()
        offline: List[str] = []
        for zone in self.get_all_zones():
            for sensor in list(zone.sensors):
                last = sensor.last_reading
                if last is None or sensor.status != SensorStatus.ONLINE:
                    continue
                silence = now - last.timestamp
                if silence <= self._offline_after:
                    continue
                sensor.status = SensorStatus.OFFLINE
                offline.append(sensor.id)
                minutes = round(silence.total_seconds() / 60)
                self.create_alert(
                    zone.id,
                    AlertType.SENSOR_OFFLINE,
                    AlertPriority.HIGH,
                    "Sensor Offline",
                    f"{sensor.name} has not reported data for {minutes} minutes",
                    {"sensor_id": sensor.id},
                )
        return offline

    def update_system_status(self) -> SystemStatus:
        zones = self.get_all_zones()
        if any(z.status == ZoneStatus.ERROR for z in zones):
            status = SystemStatus.MAINTENANCE
        elif not any(z.status == ZoneStatus.ACTIVE for z in zones):
            status = SystemStatus.OFFLINE
        else:
            status = SystemStatus.ONLINE
        if status != self._system_status:
            logger.info("Irrigation system status %s -> %s", self._system_status.value, status.value)
        self._system_status = status
        return status
