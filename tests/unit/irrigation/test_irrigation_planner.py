from datetime import date, datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest

from app.domain.exceptions import ConfigurationError
from app.domain.weather import CropWaterRequirement, CurrentConditions, ForecastDay, WeatherData
from app.enums.irrigation import ScheduleType
from app.services.application.irrigation_planner import (
    IrrigationPlanner,
    estimate_evapotranspiration,
    get_optimal_irrigation_time,
    get_seasonal_multiplier,
)


def _weather(*days: ForecastDay, current: CurrentConditions | None = None) -> WeatherData:
    return WeatherData(current=current or CurrentConditions(evapotranspiration=0.25), forecast=list(days))


def _day(offset: int, et: float, probability: float = 0.0, rain: float = 0.0) -> ForecastDay:
    return ForecastDay(
        day=date(2024, 6, 3) + timedelta(days=offset),
        evapotranspiration=et,
        precipitation_probability=probability,
        precipitation=rain,
    )


def test_estimate_evapotranspiration():
    assert estimate_evapotranspiration(82, 50, 10) == pytest.approx(5 / 25.4)
    assert estimate_evapotranspiration(20, 40, 5) == 0.0


@pytest.mark.parametrize(
    "day, multiplier",
    [
        (date(2024, 1, 15), 0.7),
        (date(2024, 4, 15), 1.2),
        (date(2024, 7, 15), 1.3),
        (date(2024, 10, 15), 0.9),
        (date(2024, 12, 15), 0.7),
    ],
)
def test_seasonal_multiplier(day, multiplier):
    assert get_seasonal_multiplier(day) == multiplier


def test_optimal_irrigation_time():
    assert get_optimal_irrigation_time(datetime(2024, 6, 3, 19, 0)) == "20:00"
    assert get_optimal_irrigation_time(datetime(2024, 6, 3, 23, 0)) == "06:00"
    assert get_optimal_irrigation_time(datetime(2024, 6, 3, 9, 0)) == "06:00"


class TestForecastDecision:
    @pytest.fixture()
    def zone(self, irrigation_service, zone_id):
        return irrigation_service.get_zone(zone_id)

    def test_likely_rain_skips_day(self, irrigation_planner, zone):
        decision = irrigation_planner.should_irrigate_based_on_forecast(zone, _day(1, 0.5, probability=75))
        assert decision == {"needed": False, "priority": "low", "duration": 0, "water_amount": 0.0}

    def test_small_need_skips_day(self, irrigation_planner, zone):
        assert irrigation_planner.should_irrigate_based_on_forecast(zone, _day(1, 0.1))["needed"] is False

    def test_rain_offsets_need(self, irrigation_planner, zone):
        # 0.4 - 0.25 * 0.8 = 0.2
        decision = irrigation_planner.should_irrigate_based_on_forecast(zone, _day(1, 0.4, rain=0.25))
        assert decision["priority"] == "medium"
        assert decision["water_amount"] == pytest.approx(0.2)

    @pytest.mark.parametrize("et, priority", [(0.4, "high"), (0.2, "medium"), (0.12, "low")])
    def test_priority_bands(self, irrigation_planner, zone, et, priority):
        decision = irrigation_planner.should_irrigate_based_on_forecast(zone, _day(1, et))
        assert decision["needed"] is True
        assert decision["priority"] == priority

    def test_crop_coefficient_scales_need(self, irrigation_planner, zone):
        crop = CropWaterRequirement(coefficient=1.5)
        decision = irrigation_planner.should_irrigate_based_on_forecast(zone, _day(1, 0.2), crop)
        assert decision["water_amount"] == pytest.approx(0.3)
        assert decision["duration"] == 36


def test_schedule_for_unknown_zone_is_empty(irrigation_planner):
    assert irrigation_planner.calculate_optimal_schedule("zone_missing", _weather(_day(1, 0.4))) == []


def test_schedule_from_forecast_days(irrigation_planner, zone_id):
    weather = _weather(_day(1, 0.4), _day(2, 0.05), _day(3, 0.5, probability=90), _day(4, 0.2))

    schedules = irrigation_planner.calculate_optimal_schedule(zone_id, weather)

    assert [s.name for s in schedules] == ["Smart Schedule - Day 1", "Smart Schedule - Day 4"]
    first = schedules[0]
    assert first.type == ScheduleType.FLEXIBLE
    assert first.priority == 3
    assert first.timing.start_time == "06:00"
    assert first.timing.duration == 48
    assert first.water_amount.target == 0.4
    assert first.water_amount.min == pytest.approx(0.32)
    assert schedules[1].priority == 2
    assert first.adjustments["seasonal_multiplier"] == 1.3


def test_dry_soil_adds_immediate_schedule(irrigation_planner, irrigation_service, zone_id, clock):
    sensor_id = irrigation_service.add_sensor(zone_id, {"type": "soil_moisture"})
    irrigation_service.record_sensor_reading(zone_id, sensor_id, 20)
    clock.set(datetime(2024, 6, 3, 19, 0, tzinfo=timezone.utc))

    schedules = irrigation_planner.calculate_optimal_schedule(zone_id, _weather())

    assert len(schedules) == 1
    immediate = schedules[0]
    assert immediate.name == "Immediate Irrigation Required"
    assert immediate.type == ScheduleType.PRECISION
    assert immediate.priority == 3
    assert immediate.timing.start_time == "20:00"
    assert immediate.conditions["min_soil_moisture"] == 30.0
    # current ET 0.25 in -> 30 minutes at 0.5 in/hr
    assert immediate.timing.duration == 30


def test_plan_with_forecast_uses_weather_client(irrigation_service, zone_id, clock):
    client = MagicMock()
    client.fetch.return_value = _weather(_day(1, 0.4))
    planner = IrrigationPlanner(irrigation_service=irrigation_service, weather_client=client, clock=clock)

    schedules = planner.plan_with_forecast(zone_id)

    client.fetch.assert_called_once_with(None, None)
    assert len(schedules) == 1


def test_plan_with_forecast_requires_weather_client(irrigation_planner, zone_id):
    with pytest.raises(ConfigurationError):
        irrigation_planner.plan_with_forecast(zone_id)
