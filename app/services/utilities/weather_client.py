"""
Weather Client
==============

Fetches current conditions and a 7-day forecast for the farm location from
an Open-Meteo compatible API and maps them onto :class:`WeatherData`.

Features:
- Imperial units requested from the provider (°F, mph, inches)
- Short in-memory cache per location to minimise API calls
- Network and payload failures surface as ``ExternalServiceError``
"""
from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from typing import Any, Dict, Optional, Tuple

import requests

from app.domain.exceptions import ExternalServiceError
from app.domain.weather import CurrentConditions, ForecastDay, WeatherData
from app.utils.time import Clock, SystemClock

logger = logging.getLogger(__name__)

HPA_TO_INHG = 0.02953
MM_PER_INCH = 25.4

_CURRENT_FIELDS = "temperature_2m,relative_humidity_2m,wind_speed_10m,surface_pressure,precipitation"
_DAILY_FIELDS = (
    "temperature_2m_max,temperature_2m_min,relative_humidity_2m_mean,wind_speed_10m_max,"
    "precipitation_sum,precipitation_probability_max,et0_fao_evapotranspiration"
)


class WeatherClient:
    """HTTP client for the forecast provider."""

    def __init__(
        self,
        api_url: str,
        *,
        timeout: float = 10,
        latitude: Optional[float] = None,
        longitude: Optional[float] = None,
        cache_minutes: int = 30,
        clock: Optional[Clock] = None,
        session: Optional[requests.Session] = None,
    ):
        """
        Args:
            api_url: Forecast endpoint (Open-Meteo ``/v1/forecast`` shape)
            timeout: Request timeout in seconds
            latitude: Default latitude when ``fetch`` is called without one
            longitude: Default longitude when ``fetch`` is called without one
            cache_minutes: How long a fetched forecast is reused (0 disables)
            clock: Time source for cache expiry
            session: Optional ``requests.Session`` to reuse connections
        """
        self.api_url = api_url
        self.timeout = timeout
        self.default_latitude = latitude
        self.default_longitude = longitude
        self.cache_ttl = timedelta(minutes=cache_minutes)
        self._clock = clock or SystemClock()
        self._session = session or requests.Session()
        self._cache: Dict[Tuple[float, float], Tuple[WeatherData, datetime]] = {}

    def fetch(self, latitude: Optional[float] = None, longitude: Optional[float] = None) -> WeatherData:
        """
        Current conditions plus a 7-day forecast.

        Raises:
            ExternalServiceError: the provider is unreachable or returned an
                unusable payload.
        """
        lat = latitude if latitude is not None else self.default_latitude
        lon = longitude if longitude is not None else self.default_longitude
        if lat is None or lon is None:
            raise ExternalServiceError("No location configured for weather lookup")

        key = (round(float(lat), 4), round(float(lon), 4))
        cached = self._get_cached(key)
        if cached is not None:
            return cached

        params = {
            "latitude": lat,
            "longitude": lon,
            "current": _CURRENT_FIELDS,
            "daily": _DAILY_FIELDS,
            "temperature_unit": "fahrenheit",
            "wind_speed_unit": "mph",
            "precipitation_unit": "inch",
            "forecast_days": 7,
            "timezone": "auto",
        }
        try:
            response = self._session.get(self.api_url, params=params, timeout=self.timeout)
            response.raise_for_status()
            payload = response.json()
        except requests.RequestException as exc:
            logger.warning("Weather request failed: %s", exc)
            raise ExternalServiceError(f"Weather service unavailable: {exc}") from exc
        except ValueError as exc:
            raise ExternalServiceError("Weather service returned invalid JSON") from exc

        weather = self._parse(payload)
        if self.cache_ttl > timedelta(0):
            self._cache[key] = (weather, self._clock.now())
        logger.debug("Fetched weather for %s (%d forecast days)", key, len(weather.forecast))
        return weather

    def _get_cached(self, key: Tuple[float, float]) -> Optional[WeatherData]:
        entry = self._cache.get(key)
        if entry is None:
            return None
        weather, cached_at = entry
        if self._clock.now() - cached_at > self.cache_ttl:
            del self._cache[key]
            return None
        return weather

    def clear_cache(self) -> None:
        self._cache.clear()

    @staticmethod
    def _parse(payload: Dict[str, Any]) -> WeatherData:
        try:
            current = payload["current"]
            daily = payload["daily"]
            days = daily["time"]

            def series(name: str, idx: int, default: float = 0.0) -> float:
                values = daily.get(name) or []
                value = values[idx] if idx < len(values) else None
                return float(value) if value is not None else default

            forecast = [
                ForecastDay(
                    day=date.fromisoformat(day),
                    temperature_high=series("temperature_2m_max", i),
                    temperature_low=series("temperature_2m_min", i),
                    humidity=series("relative_humidity_2m_mean", i, 60.0),
                    wind_speed=series("wind_speed_10m_max", i),
                    precipitation=series("precipitation_sum", i),
                    precipitation_probability=series("precipitation_probability_max", i),
                    evapotranspiration=round(series("et0_fao_evapotranspiration", i) / MM_PER_INCH, 4),
                )
                for i, day in enumerate(days)
            ]
            conditions = CurrentConditions(
                temperature=float(current["temperature_2m"]),
                humidity=float(current["relative_humidity_2m"]),
                wind_speed=float(current.get("wind_speed_10m") or 0.0),
                pressure=round(float(current.get("surface_pressure") or 0.0) * HPA_TO_INHG, 2),
                rainfall=float(current.get("precipitation") or 0.0),
                evapotranspiration=forecast[0].evapotranspiration if forecast else 0.0,
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise ExternalServiceError(f"Unexpected weather payload: {exc}") from exc

        return WeatherData(current=conditions, forecast=forecast, source="open-meteo")
