"""
Smart irrigation planning.

Turns weather data and crop water requirements into recommended (unsaved)
irrigation schedules for a zone. Evapotranspiration uses a simplified
temperature/humidity/wind estimate when the provider does not report ET.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from typing import Any, Dict, List, Optional

from app.domain.exceptions import ConfigurationError
from app.domain.irrigation import (
    IrrigationSchedule,
    IrrigationZone,
    ScheduleFrequency,
    ScheduleTiming,
    WaterAmount,
)
from app.domain.weather import CropWaterRequirement, ForecastDay, WeatherData
from app.enums.irrigation import FrequencyType, ScheduleStatus, ScheduleType, SensorType
from app.utils.time import Clock, SystemClock

logger = logging.getLogger(__name__)

RAIN_EFFECTIVENESS = 0.8
RAIN_SKIP_PROBABILITY = 70
MIN_WATER_NEED = 0.1  # inches
FORECAST_DAYS = 7
DEFAULT_SOIL_MOISTURE = 50.0
MAX_WIND_SPEED = 15

_PRIORITY = {"high": 3, "medium": 2, "low": 1}


def estimate_evapotranspiration(temperature: float, humidity: float, wind_speed: float) -> float:
    """Simplified daily ET in inches from °F, % humidity and mph wind."""
    et_mm = (temperature - 32) * 0.1 * (1 - humidity / 100) * (1 + wind_speed / 10)
    return max(0.0, et_mm / 25.4)


def get_seasonal_multiplier(day: date) -> float:
    """Northern-hemisphere water demand multiplier for the month of ``day``."""
    month = day.month - 1
    if 2 <= month <= 4:
        return 1.2
    if 5 <= month <= 8:
        return 1.3
    if 9 <= month <= 11:
        return 0.9
    return 0.7


def get_optimal_irrigation_time(now: datetime) -> str:
    """Evening slot when asked in the evening, otherwise early morning."""
    return "20:00" if 18 <= now.hour <= 22 else "06:00"


class IrrigationPlanner:
    """Weather-driven schedule recommendations for irrigation zones."""

    def __init__(
        self,
        *,
        irrigation_service: Any,
        weather_client: Optional[Any] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        self._irrigation = irrigation_service
        self._weather = weather_client
        self._clock = clock or SystemClock()

    @staticmethod
    def _coefficient(zone: IrrigationZone, crop_req: Optional[CropWaterRequirement]) -> float:
        if crop_req is not None and crop_req.coefficient:
            return crop_req.coefficient
        return zone.settings.crop_factors.crop_coefficient

    def calculate_daily_water_requirement(
        self,
        zone: IrrigationZone,
        weather: WeatherData,
        crop_req: Optional[CropWaterRequirement] = None,
    ) -> float:
        current = weather.current
        et = current.evapotranspiration or estimate_evapotranspiration(
            current.temperature, current.humidity, current.wind_speed
        )
        need = et * self._coefficient(zone, crop_req) - current.rainfall * RAIN_EFFECTIVENESS
        return max(0.0, need)

    def should_irrigate_based_on_forecast(
        self,
        zone: IrrigationZone,
        day: ForecastDay,
        crop_req: Optional[CropWaterRequirement] = None,
    ) -> Dict[str, Any]:
        """Decide whether a forecast day needs irrigation and how much."""
        skip = {"needed": False, "priority": "low", "duration": 0, "water_amount": 0.0}
        if day.precipitation_probability > RAIN_SKIP_PROBABILITY:
            return skip

        et = day.evapotranspiration or estimate_evapotranspiration(
            day.mean_temperature, day.humidity, day.wind_speed
        )
        need = max(0.0, et * self._coefficient(zone, crop_req) - day.precipitation * RAIN_EFFECTIVENESS)
        if need <= MIN_WATER_NEED:
            return skip

        if need > 0.3:
            priority = "high"
        elif need > 0.15:
            priority = "medium"
        else:
            priority = "low"
        return {
            "needed": True,
            "priority": priority,
            "duration": self._irrigation.calculate_optimal_duration(zone, need),
            "water_amount": round(need, 4),
        }

    def calculate_optimal_schedule(
        self,
        zone_id: str,
        weather: WeatherData,
        crop_req: Optional[CropWaterRequirement] = None,
    ) -> List[IrrigationSchedule]:
        """Recommended schedules for the coming week; nothing is saved."""
        zone = self._irrigation.get_zone(zone_id)
        if zone is None:
            return []

        now = self._clock.now()
        start_time = get_optimal_irrigation_time(now)
        adjustments = {
            "weather_based": True,
            "sensor_based": True,
            "crop_stage_multiplier": crop_req.coefficient if crop_req else 1.0,
            "seasonal_multiplier": get_seasonal_multiplier(now.date()),
        }
        recommendations: List[IrrigationSchedule] = []

        reading = self._irrigation.get_latest_sensor_reading(zone_id, SensorType.SOIL_MOISTURE)
        moisture = reading.value if reading else DEFAULT_SOIL_MOISTURE
        target = zone.settings.soil_moisture_target

        if moisture < target.min:
            daily = self.calculate_daily_water_requirement(zone, weather, crop_req)
            recommendations.append(
                IrrigationSchedule(
                    id=f"auto_{int(now.timestamp())}",
                    zone_id=zone_id,
                    name="Immediate Irrigation Required",
                    type=ScheduleType.PRECISION,
                    status=ScheduleStatus.ACTIVE,
                    priority=_PRIORITY["high"],
                    start_date=now,
                    frequency=ScheduleFrequency(type=FrequencyType.CONDITIONAL),
                    timing=ScheduleTiming(
                        start_time=start_time,
                        duration=self._irrigation.calculate_optimal_duration(zone, daily),
                    ),
                    water_amount=WaterAmount(target=round(daily, 4), min=round(daily * 0.8, 4), max=round(daily * 1.2, 4)),
                    conditions={
                        "min_soil_moisture": target.min,
                        "max_wind_speed": MAX_WIND_SPEED,
                        "weather_forecast": True,
                    },
                    adjustments=dict(adjustments),
                    created_at=now,
                    last_modified=now,
                )
            )

        for offset, day in enumerate(weather.forecast[:FORECAST_DAYS], start=1):
            decision = self.should_irrigate_based_on_forecast(zone, day, crop_req)
            if not decision["needed"]:
                continue
            water = decision["water_amount"]
            recommendations.append(
                IrrigationSchedule(
                    id=f"forecast_{offset}_{int(now.timestamp())}",
                    zone_id=zone_id,
                    name=f"Smart Schedule - Day {offset}",
                    type=ScheduleType.FLEXIBLE,
                    status=ScheduleStatus.ACTIVE,
                    priority=_PRIORITY[decision["priority"]],
                    start_date=now + timedelta(days=offset),
                    frequency=ScheduleFrequency(type=FrequencyType.DAILY),
                    timing=ScheduleTiming(start_time=start_time, duration=decision["duration"]),
                    water_amount=WaterAmount(target=water, min=round(water * 0.8, 4), max=round(water * 1.2, 4)),
                    conditions={
                        "max_wind_speed": MAX_WIND_SPEED,
                        "weather_forecast": True,
                        "precipitation_probability": 30,
                    },
                    adjustments=dict(adjustments),
                    created_at=now,
                    last_modified=now,
                )
            )

        logger.debug("Planned %d schedule recommendations for zone %s", len(recommendations), zone_id)
        return recommendations

    def plan_with_forecast(self, zone_id: str, crop_req: Optional[CropWaterRequirement] = None) -> List[IrrigationSchedule]:
        """Fetch weather for the zone location, then plan. Needs a weather client."""
        zone = self._irrigation.get_zone(zone_id)
        if zone is None:
            return []
        if self._weather is None:
            raise ConfigurationError("No weather client configured")
        location = zone.location
        has_location = bool(location.latitude or location.longitude)
        weather = self._weather.fetch(
            location.latitude if has_location else None,
            location.longitude if has_location else None,
        )
        return self.calculate_optimal_schedule(zone_id, weather, crop_req)
