"""
Weather Domain Objects
======================
Current conditions, forecast days and crop water requirements used by the
irrigation planner. Units are imperial: °F, %, mph, inHg and inches.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional

from app.domain.base import Record


@dataclass
class CurrentConditions(Record):
    temperature: float = 70.0
    humidity: float = 60.0
    wind_speed: float = 5.0
    pressure: float = 29.92
    rainfall: float = 0.0
    evapotranspiration: float = 0.0  # inches/day


@dataclass
class ForecastDay(Record):
    day: date
    temperature_high: float = 75.0
    temperature_low: float = 55.0
    humidity: float = 60.0
    wind_speed: float = 5.0
    precipitation: float = 0.0  # inches
    precipitation_probability: float = 0.0  # percent
    evapotranspiration: float = 0.0

    @property
    def mean_temperature(self) -> float:
        return (self.temperature_high + self.temperature_low) / 2


@dataclass
class WeatherData(Record):
    current: CurrentConditions = field(default_factory=CurrentConditions)
    forecast: List[ForecastDay] = field(default_factory=list)
    source: str = "manual"


@dataclass
class CropWaterRequirement(Record):
    crop_id: str = ""
    stage: str = ""
    coefficient: float = 1.0
    root_depth: float = 24.0  # inches
    allowable_depletion: float = 50.0  # percent
    critical_period: bool = False
    stress_multiplier: float = 1.0
    notes: Optional[str] = None
