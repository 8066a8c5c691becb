"""
Irrigation Schemas
==================

Request schemas for the irrigation zone, sensor, schedule and control
endpoints. Nested structures (system, settings, thresholds ...) are passed
through to the domain dataclasses, which coerce them.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.enums.irrigation import ReadingQuality, ScheduleType, SensorType, ZoneStatus


def _validate_hhmm(value: str) -> str:
    parts = value.split(":")
    if len(parts) != 2 or not all(p.isdigit() for p in parts):
        raise ValueError("start_time must be formatted as HH:MM")
    hour, minute = int(parts[0]), int(parts[1])
    if not (0 <= hour < 24 and 0 <= minute < 60):
        raise ValueError("start_time must be a valid time of day")
    return f"{hour:02d}:{minute:02d}"


class CreateZoneRequest(BaseModel):
    """Request schema for creating an irrigation zone."""

    model_config = ConfigDict(extra="allow")

    name: str = Field(..., min_length=1, max_length=120, description="Zone name")
    description: Optional[str] = None
    field_id: Optional[str] = None
    crop_id: Optional[str] = None
    area: float = Field(default=1.0, gt=0, description="Zone area in acres")
    soil_type: Optional[str] = None
    status: ZoneStatus = Field(default=ZoneStatus.ACTIVE)
    location: Optional[Dict[str, Any]] = None
    irrigation_system: Optional[Dict[str, Any]] = None
    settings: Optional[Dict[str, Any]] = None
    water_budget: Optional[Dict[str, Any]] = None


class UpdateZoneRequest(BaseModel):
    """Partial zone update; identity and owned collections are ignored by the service."""

    model_config = ConfigDict(extra="allow")

    name: Optional[str] = Field(default=None, min_length=1, max_length=120)
    description: Optional[str] = None
    area: Optional[float] = Field(default=None, gt=0)
    status: Optional[ZoneStatus] = None


class AddSensorRequest(BaseModel):
    """Request schema for attaching an IoT sensor to a zone."""

    model_config = ConfigDict(extra="allow")

    type: SensorType = Field(..., description="Sensor type, e.g. soil_moisture")
    name: str = Field(default="", max_length=120)
    battery_level: float = Field(default=100.0, ge=0, le=100)
    signal_strength: float = Field(default=100.0, ge=0, le=100)
    location: Optional[Dict[str, Any]] = None
    thresholds: Optional[Dict[str, Any]] = None

    @field_validator("type", mode="before")
    @classmethod
    def normalize_type(cls, v):
        if isinstance(v, str):
            return SensorType(v.lower())
        return v


class SensorReadingRequest(BaseModel):
    """Request schema for recording a sensor reading."""

    value: float = Field(..., description="Measured value")
    unit: Optional[str] = Field(default=None, description="Defaults to the unit for the sensor type")
    quality: ReadingQuality = Field(default=ReadingQuality.GOOD)


class ScheduleTimingModel(BaseModel):
    start_time: str = Field(..., description="Wall-clock start, HH:MM")
    duration: int = Field(..., ge=1, le=1440, description="Minutes")

    @field_validator("start_time")
    @classmethod
    def check_start_time(cls, v: str) -> str:
        return _validate_hhmm(v)


class CreateScheduleRequest(BaseModel):
    """Request schema for creating an irrigation schedule."""

    model_config = ConfigDict(extra="allow")

    name: str = Field(..., min_length=1, max_length=120)
    type: ScheduleType = Field(default=ScheduleType.FIXED)
    priority: int = Field(default=1, ge=1, le=10)
    timing: ScheduleTimingModel
    frequency: Optional[Dict[str, Any]] = None
    water_amount: Optional[Dict[str, Any]] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None


class UpdateScheduleRequest(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: Optional[str] = Field(default=None, min_length=1, max_length=120)
    priority: Optional[int] = Field(default=None, ge=1, le=10)
    timing: Optional[ScheduleTimingModel] = None


class StartIrrigationRequest(BaseModel):
    """Request schema for a manual irrigation start."""

    duration: Optional[int] = Field(default=None, ge=1, le=1440, description="Minutes")
    water_amount: Optional[float] = Field(default=None, gt=0, description="Inches of water")
    schedule_id: Optional[str] = None
    trigger: Optional[Dict[str, Any]] = None


class StopIrrigationRequest(BaseModel):
    event_id: Optional[str] = None


class CancelIrrigationRequest(BaseModel):
    reason: str = Field(default="", max_length=500)


class ResolveAlertRequest(BaseModel):
    resolved_by: str = Field(default="user", min_length=1, max_length=120)


class ForecastDayModel(BaseModel):
    model_config = ConfigDict(extra="allow")

    day: str = Field(..., description="ISO date, YYYY-MM-DD")
    temperature_high: float = 75.0
    temperature_low: float = 55.0
    humidity: float = Field(default=60.0, ge=0, le=100)
    wind_speed: float = Field(default=5.0, ge=0)
    precipitation: float = Field(default=0.0, ge=0, description="Inches")
    precipitation_probability: float = Field(default=0.0, ge=0, le=100)
    evapotranspiration: float = Field(default=0.0, ge=0)


class WeatherPayload(BaseModel):
    """Weather supplied by the caller instead of fetched from the provider."""

    model_config = ConfigDict(extra="allow")

    current: Dict[str, Any] = Field(default_factory=dict)
    forecast: List[ForecastDayModel] = Field(default_factory=list)


class OptimalScheduleRequest(BaseModel):
    weather: WeatherPayload
    crop_requirement: Optional[Dict[str, Any]] = None
