from datetime import date
from unittest.mock import MagicMock

import pytest
import requests

from app.domain.exceptions import ExternalServiceError
from app.services.utilities.weather_client import WeatherClient

PAYLOAD = {
    "current": {
        "temperature_2m": 84.2,
        "relative_humidity_2m": 41,
        "wind_speed_10m": 7.5,
        "surface_pressure": 1013.0,
        "precipitation": 0.0,
    },
    "daily": {
        "time": ["2024-06-03", "2024-06-04"],
        "temperature_2m_max": [88.0, 79.0],
        "temperature_2m_min": [62.0, 58.0],
        "relative_humidity_2m_mean": [45, None],
        "wind_speed_10m_max": [12.0, 9.0],
        "precipitation_sum": [0.0, 0.4],
        "precipitation_probability_max": [5, 80],
        "et0_fao_evapotranspiration": [6.35, 3.81],
    },
}


def _session(payload=PAYLOAD):
    session = MagicMock()
    session.get.return_value.json.return_value = payload
    return session


def _client(session, clock, **kwargs):
    return WeatherClient(
        "https://weather.test/v1/forecast",
        latitude=41.5,
        longitude=-93.6,
        clock=clock,
        session=session,
        **kwargs,
    )


def test_fetch_maps_provider_payload(clock):
    session = _session()
    weather = _client(session, clock).fetch()

    args, kwargs = session.get.call_args
    assert args == ("https://weather.test/v1/forecast",)
    assert kwargs["params"]["latitude"] == 41.5
    assert kwargs["params"]["temperature_unit"] == "fahrenheit"
    assert kwargs["timeout"] == 10

    assert weather.source == "open-meteo"
    assert weather.current.temperature == 84.2
    assert weather.current.pressure == pytest.approx(29.91, abs=0.01)
    assert weather.current.evapotranspiration == 0.25

    assert [d.day for d in weather.forecast] == [date(2024, 6, 3), date(2024, 6, 4)]
    second = weather.forecast[1]
    assert second.humidity == 60.0
    assert second.precipitation_probability == 80.0
    assert second.evapotranspiration == 0.15
    assert second.mean_temperature == 68.5


def test_fetch_is_cached_per_location(clock):
    session = _session()
    client = _client(session, clock, cache_minutes=30)

    client.fetch()
    client.fetch(41.50001, -93.60001)
    assert session.get.call_count == 1

    clock.advance(minutes=31)
    client.fetch()
    assert session.get.call_count == 2

    client.clear_cache()
    client.fetch()
    assert session.get.call_count == 3


def test_network_failure_becomes_external_service_error(clock):
    session = MagicMock()
    session.get.side_effect = requests.ConnectionError("connection refused")

    with pytest.raises(ExternalServiceError):
        _client(session, clock).fetch()


def test_http_error_becomes_external_service_error(clock):
    session = _session()
    session.get.return_value.raise_for_status.side_effect = requests.HTTPError("503 Server Error")

    with pytest.raises(ExternalServiceError):
        _client(session, clock).fetch()


def test_invalid_payload_becomes_external_service_error(clock):
    session = _session()
    session.get.return_value.json.side_effect = ValueError("Expecting value")
    with pytest.raises(ExternalServiceError):
        _client(session, clock).fetch()

    with pytest.raises(ExternalServiceError):
        _client(_session({"current": {}}), clock).fetch()


def test_fetch_without_location_fails(clock):
    client = WeatherClient("https://weather.test/v1/forecast", clock=clock, session=_session())
    with pytest.raises(ExternalServiceError):
        client.fetch()
