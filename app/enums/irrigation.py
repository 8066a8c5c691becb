"""
Irrigation Enumerations
=======================

Zone, sensor, schedule, event and alert vocabularies for the irrigation
lifecycle.
"""

from enum import Enum


class ZoneStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    MAINTENANCE = "maintenance"
    ERROR = "error"

    def __str__(self) -> str:
        return self.value


class IrrigationSystemType(str, Enum):
    DRIP = "drip"
    SPRINKLER = "sprinkler"
    PIVOT = "pivot"
    FLOOD = "flood"
    MICRO_SPRAY = "micro_spray"
    SUBSURFACE = "subsurface"

    def __str__(self) -> str:
        return self.value


class SystemStatus(str, Enum):
    """Status of a zone's irrigation hardware, and of the system as a whole."""

    ONLINE = "online"
    OFFLINE = "offline"
    MAINTENANCE = "maintenance"
    ERROR = "error"

    def __str__(self) -> str:
        return self.value


class SensorType(str, Enum):
    SOIL_MOISTURE = "soil_moisture"
    SOIL_TEMPERATURE = "soil_temperature"
    AMBIENT_TEMPERATURE = "ambient_temperature"
    HUMIDITY = "humidity"
    PRESSURE = "pressure"
    FLOW_RATE = "flow_rate"
    WATER_LEVEL = "water_level"

    def __str__(self) -> str:
        return self.value

    @property
    def unit(self) -> str:
        return _SENSOR_UNITS.get(self, "units")


_SENSOR_UNITS = {
    SensorType.SOIL_MOISTURE: "%",
    SensorType.SOIL_TEMPERATURE: "°F",
    SensorType.AMBIENT_TEMPERATURE: "°F",
    SensorType.HUMIDITY: "%",
    SensorType.PRESSURE: "PSI",
    SensorType.FLOW_RATE: "GPM",
    SensorType.WATER_LEVEL: "inches",
}


class SensorStatus(str, Enum):
    ONLINE = "online"
    OFFLINE = "offline"
    LOW_BATTERY = "low_battery"
    ERROR = "error"

    def __str__(self) -> str:
        return self.value


class ReadingQuality(str, Enum):
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"

    def __str__(self) -> str:
        return self.value


class IrrigationMode(str, Enum):
    MANUAL = "manual"
    SCHEDULED = "scheduled"
    SMART = "smart"
    SENSOR_BASED = "sensor_based"

    def __str__(self) -> str:
        return self.value


class ScheduleType(str, Enum):
    FIXED = "fixed"
    FLEXIBLE = "flexible"
    DEFICIT = "deficit"
    PRECISION = "precision"

    def __str__(self) -> str:
        return self.value


class ScheduleStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    PAUSED = "paused"
    COMPLETED = "completed"

    def __str__(self) -> str:
        return self.value


class FrequencyType(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    INTERVAL = "interval"
    CONDITIONAL = "conditional"

    def __str__(self) -> str:
        return self.value


class IrrigationEventType(str, Enum):
    SCHEDULED = "scheduled"
    MANUAL = "manual"
    AUTOMATIC = "automatic"
    EMERGENCY = "emergency"

    def __str__(self) -> str:
        return self.value


class EventStatus(str, Enum):
    """planned -> running -> completed | cancelled | failed"""

    PLANNED = "planned"
    RUNNING = "running"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    FAILED = "failed"

    def __str__(self) -> str:
        return self.value

    @property
    def is_terminal(self) -> bool:
        return self in (EventStatus.COMPLETED, EventStatus.CANCELLED, EventStatus.FAILED)


class TriggerType(str, Enum):
    MANUAL = "manual"
    SCHEDULE = "schedule"
    SENSOR = "sensor"
    WEATHER = "weather"
    EMERGENCY = "emergency"

    def __str__(self) -> str:
        return self.value


class AlertType(str, Enum):
    LOW_MOISTURE = "low_moisture"
    HIGH_MOISTURE = "high_moisture"
    SYSTEM_FAULT = "system_fault"
    MAINTENANCE = "maintenance"
    BUDGET_EXCEEDED = "budget_exceeded"
    EFFICIENCY_LOW = "efficiency_low"
    SENSOR_OFFLINE = "sensor_offline"

    def __str__(self) -> str:
        return self.value


class AlertPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    def __str__(self) -> str:
        return self.value


class AlertStatus(str, Enum):
    ACTIVE = "active"
    ACKNOWLEDGED = "acknowledged"
    RESOLVED = "resolved"
    DISMISSED = "dismissed"

    def __str__(self) -> str:
        return self.value


class BudgetPeriod(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    SEASONAL = "seasonal"

    def __str__(self) -> str:
        return self.value
