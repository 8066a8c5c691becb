"""
WebSocket Emitters
==================

Bridges event-bus topics to Socket.IO so dashboards receive alerts,
irrigation status changes and crop notifications as they happen.

Namespaces:
- ``/alerts``: irrigation alerts raised, acknowledged, resolved or dismissed
- ``/irrigation``: irrigation started / completed / cancelled
- ``/crops``: crop notifications

Usage:
    emitter = AlertEmitter(socketio)
    emitter.register(event_bus)
"""

import logging
from typing import Any, Callable, Dict, List

from flask_socketio import SocketIO

from app.enums.events import AlertEvent, CropEvent, WebSocketEvent, ZoneEvent

logger = logging.getLogger(__name__)

SOCKETIO_NAMESPACE_ALERTS = "/alerts"
SOCKETIO_NAMESPACE_IRRIGATION = "/irrigation"
SOCKETIO_NAMESPACE_CROPS = "/crops"


class AlertEmitter:
    """
    Forwards bus events to Socket.IO namespaces.

    Attributes:
        sio: The Flask-SocketIO instance used for emitting.
    """

    def __init__(self, sio: SocketIO):
        self.sio = sio
        self._unsubscribers: List[Callable[[], None]] = []

    def emit(self, event: str, payload: dict, namespace: str = "/") -> None:
        """
        Emit a Socket.IO event; a failed emit is logged, never raised.

        Args:
            event: WebSocket event name.
            payload: JSON serializable data to send.
            namespace: Socket.IO namespace to emit under.
        """
        try:
            self.sio.emit(event, payload, namespace=namespace)
            logger.debug("Emitted %s to %s", event, namespace)
        except Exception:
            logger.exception("Failed to emit event '%s' to namespace '%s'", event, namespace)

    def emit_alert_created(self, payload: Dict[str, Any]) -> None:
        self.emit(WebSocketEvent.ALERT_CREATED.value, payload, SOCKETIO_NAMESPACE_ALERTS)

    def emit_alert_updated(self, payload: Dict[str, Any]) -> None:
        self.emit(WebSocketEvent.ALERT_UPDATED.value, payload, SOCKETIO_NAMESPACE_ALERTS)

    def emit_irrigation_status(self, payload: Dict[str, Any]) -> None:
        self.emit(WebSocketEvent.IRRIGATION_STATUS.value, payload, SOCKETIO_NAMESPACE_IRRIGATION)

    def emit_crop_notification(self, payload: Dict[str, Any]) -> None:
        self.emit(WebSocketEvent.CROP_NOTIFICATION.value, payload, SOCKETIO_NAMESPACE_CROPS)

    def register(self, event_bus: Any) -> None:
        """Subscribe to the bus topics that have a WebSocket counterpart."""
        routes = {
            AlertEvent.RAISED: self.emit_alert_created,
            AlertEvent.ACKNOWLEDGED: self.emit_alert_updated,
            AlertEvent.RESOLVED: self.emit_alert_updated,
            AlertEvent.DISMISSED: self.emit_alert_updated,
            ZoneEvent.STARTED: self.emit_irrigation_status,
            ZoneEvent.COMPLETED: self.emit_irrigation_status,
            ZoneEvent.CANCELLED: self.emit_irrigation_status,
            CropEvent.NOTIFICATION: self.emit_crop_notification,
        }
        for topic, handler in routes.items():
            self._unsubscribers.append(event_bus.subscribe(topic, handler))
        logger.info("AlertEmitter subscribed to %d topics", len(routes))

    def unregister(self) -> None:
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers.clear()
