import logging
from dataclasses import dataclass

from pydantic import BaseModel

from app.enums.events import ZoneEvent
from app.utils.event_bus import EventBus


class _Reading(BaseModel):
    sensor_id: str
    value: float


@dataclass
class _Stopped:
    zone_id: str
    minutes: int


def test_inline_bus_dispatches_on_publish():
    bus = EventBus(worker_count=0)
    received = []
    bus.subscribe(ZoneEvent.STARTED, received.append)

    bus.publish(ZoneEvent.STARTED, {"zone_id": "zone_1"})
    bus.publish("irrigation.started", {"zone_id": "zone_2"})

    assert received == [{"zone_id": "zone_1"}, {"zone_id": "zone_2"}]


def test_unsubscribe_stops_delivery():
    bus = EventBus(worker_count=0)
    received = []
    unsubscribe = bus.subscribe(ZoneEvent.COMPLETED, received.append)

    unsubscribe()
    unsubscribe()
    bus.publish(ZoneEvent.COMPLETED, {"zone_id": "zone_1"})

    assert received == []


def test_payloads_are_normalised_to_dicts():
    bus = EventBus(worker_count=0)
    received = []
    bus.subscribe("topic", received.append)

    bus.publish("topic", _Reading(sensor_id="sensor_1", value=41.5))
    bus.publish("topic", _Stopped(zone_id="zone_1", minutes=12))

    assert received == [
        {"sensor_id": "sensor_1", "value": 41.5},
        {"zone_id": "zone_1", "minutes": 12},
    ]


def test_failing_callback_is_logged_and_others_still_run(caplog):
    bus = EventBus(worker_count=0)
    received = []

    def boom(_payload):
        raise RuntimeError("subscriber broke")

    bus.subscribe("topic", boom)
    bus.subscribe("topic", received.append)

    with caplog.at_level(logging.ERROR, logger="app.utils.event_bus"):
        bus.publish("topic", {"n": 1})

    assert received == [{"n": 1}]
    assert "Error in callback for event topic" in caplog.text


def test_listener_decorator_and_metrics():
    bus = EventBus(worker_count=0)

    @bus.listener(ZoneEvent.CANCELLED)
    def on_cancel(payload):
        return payload

    metrics = bus.get_metrics()
    assert metrics["mode"] == "inline"
    assert metrics["subscribers"] == 1
    assert metrics["dropped_events"] == 0
    assert metrics["is_dropping"] is False


def test_queued_bus_delivers_through_workers():
    bus = EventBus(worker_count=1)
    received = []
    bus.subscribe("topic", received.append)
    try:
        bus.publish("topic", {"n": 1})
    finally:
        bus.shutdown()

    assert received == [{"n": 1}]
    assert bus.get_metrics()["mode"] == "queued"
