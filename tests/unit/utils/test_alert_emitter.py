from app.enums.events import AlertEvent, CropEvent, ZoneEvent
from app.utils.emitters import (
    SOCKETIO_NAMESPACE_ALERTS,
    SOCKETIO_NAMESPACE_CROPS,
    SOCKETIO_NAMESPACE_IRRIGATION,
    AlertEmitter,
)
from app.utils.event_bus import EventBus


class FakeSocketIO:
    def __init__(self) -> None:
        self.emits: list[dict] = []

    def emit(self, event, payload, namespace="/"):
        self.emits.append({"event": event, "payload": payload, "namespace": namespace})


class BrokenSocketIO:
    def emit(self, event, payload, namespace="/"):
        raise ConnectionError("transport closed")


def test_bus_topics_are_forwarded_to_namespaces():
    sio = FakeSocketIO()
    bus = EventBus(worker_count=0)
    AlertEmitter(sio).register(bus)

    bus.publish(AlertEvent.RAISED, {"id": "alert_1"})
    bus.publish(AlertEvent.RESOLVED, {"id": "alert_1"})
    bus.publish(ZoneEvent.STARTED, {"zone_id": "zone_1"})
    bus.publish(CropEvent.NOTIFICATION, {"id": "notif_1"})
    bus.publish(ZoneEvent.SENSOR_READING, {"zone_id": "zone_1"})

    assert [(e["event"], e["namespace"]) for e in sio.emits] == [
        ("alert_created", SOCKETIO_NAMESPACE_ALERTS),
        ("alert_updated", SOCKETIO_NAMESPACE_ALERTS),
        ("irrigation_status", SOCKETIO_NAMESPACE_IRRIGATION),
        ("crop_notification", SOCKETIO_NAMESPACE_CROPS),
    ]
    assert sio.emits[2]["payload"] == {"zone_id": "zone_1"}


def test_unregister_detaches_from_bus():
    sio = FakeSocketIO()
    bus = EventBus(worker_count=0)
    emitter = AlertEmitter(sio)
    emitter.register(bus)

    emitter.unregister()
    bus.publish(AlertEvent.RAISED, {"id": "alert_1"})

    assert sio.emits == []


def test_failed_emit_is_logged_not_raised(caplog):
    emitter = AlertEmitter(BrokenSocketIO())

    emitter.emit_alert_created({"id": "alert_1"})

    assert "Failed to emit event 'alert_created'" in caplog.text
