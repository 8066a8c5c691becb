"""
Event Topics
============

Event bus topics and WebSocket event names.
"""

from enum import Enum
from typing import TypeAlias


class WebSocketEvent(str, Enum):
    """WebSocket event names for real-time communication."""

    ALERT_CREATED = "alert_created"
    ALERT_UPDATED = "alert_updated"
    IRRIGATION_STATUS = "irrigation_status"
    CROP_NOTIFICATION = "crop_notification"


class ZoneEvent(str, Enum):
    """Zone and irrigation lifecycle topics."""

    ZONE_CREATED = "irrigation.zone_created"
    ZONE_DELETED = "irrigation.zone_deleted"
    STARTED = "irrigation.started"
    COMPLETED = "irrigation.completed"
    CANCELLED = "irrigation.cancelled"
    SENSOR_READING = "irrigation.sensor_reading"
    SCHEDULE_FIRED = "irrigation.schedule_fired"


class AlertEvent(str, Enum):
    RAISED = "alert.raised"
    ACKNOWLEDGED = "alert.acknowledged"
    RESOLVED = "alert.resolved"
    DISMISSED = "alert.dismissed"


class FinancialEvent(str, Enum):
    TRANSACTION_CREATED = "financial.transaction_created"
    RECURRING_PROCESSED = "financial.recurring_processed"


class CropEvent(str, Enum):
    CROP_PLANTED = "crop.planted"
    STAGE_ADVANCED = "crop.stage_advanced"
    HARVESTED = "crop.harvested"
    NOTIFICATION = "crop.notification"


EventType: TypeAlias = ZoneEvent | AlertEvent | FinancialEvent | CropEvent | WebSocketEvent
