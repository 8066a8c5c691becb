"""
Irrigation API Blueprint
========================

REST API endpoints for irrigation zones, sensors, schedules, control,
alerts, water analytics and weather-driven schedule recommendations.

Endpoints:
- GET/POST /api/irrigation/zones - List / create zones
- GET/PUT/DELETE /api/irrigation/zones/<id> - Zone CRUD
- POST /api/irrigation/zones/<id>/sensors - Attach a sensor
- GET/POST /api/irrigation/zones/<id>/sensors/<sid>/readings - Sensor readings
- GET/POST /api/irrigation/zones/<id>/schedules - List / create schedules
- PUT/DELETE /api/irrigation/zones/<id>/schedules/<sid> - Schedule update / delete
- POST /api/irrigation/zones/<id>/start|stop|cancel - Irrigation control
- GET /api/irrigation/events/active - Running events
- GET /api/irrigation/zones/<id>/history - Terminated events
- GET /api/irrigation/alerts - Alerts (zone_id, active_only)
- POST /api/irrigation/alerts/<id>/acknowledge|resolve|dismiss - Alert lifecycle
- GET /api/irrigation/zones/<id>/efficiency - Water efficiency
- GET /api/irrigation/zones/<id>/analytics - Zone analytics
- GET /api/irrigation/analytics - System analytics
- GET/POST /api/irrigation/zones/<id>/optimal-schedule - Recommended schedules
"""

from __future__ import annotations

from flask import Blueprint, Response, request

from app.blueprints.api._common import (
    body_dict,
    dump,
    get_irrigation_planner,
    get_irrigation_service,
    get_water_analytics,
    not_found,
    parse_json,
    query_bool,
    query_int,
    success,
)
from app.domain.weather import CropWaterRequirement, WeatherData
from app.schemas import (
    AddSensorRequest,
    CancelIrrigationRequest,
    CreateScheduleRequest,
    CreateZoneRequest,
    OptimalScheduleRequest,
    ResolveAlertRequest,
    SensorReadingRequest,
    StartIrrigationRequest,
    StopIrrigationRequest,
    UpdateScheduleRequest,
    UpdateZoneRequest,
)
from app.utils.http import safe_route

irrigation_bp = Blueprint("irrigation", __name__)


# ==================== Zones ====================


@irrigation_bp.route("/zones", methods=["GET"])
@safe_route("Failed to list irrigation zones")
def list_zones() -> Response:
    """
    List irrigation zones.

    Query params:
    - active_only: only zones with status ``active``
    """
    service = get_irrigation_service()
    zones = service.get_active_zones() if query_bool("active_only") else service.get_all_zones()
    return success(dump(zones))


@irrigation_bp.route("/zones", methods=["POST"])
@safe_route("Failed to create irrigation zone")
def create_zone() -> Response:
    service = get_irrigation_service()
    zone_id = service.create_zone(body_dict(CreateZoneRequest))
    return success(service.get_zone(zone_id).to_dict(), 201)


@irrigation_bp.route("/zones/<zone_id>", methods=["GET"])
@safe_route("Failed to get irrigation zone")
def get_zone(zone_id: str) -> Response:
    zone = get_irrigation_service().get_zone(zone_id)
    if zone is None:
        return not_found("Zone")
    return success(zone.to_dict())


@irrigation_bp.route("/zones/<zone_id>", methods=["PUT"])
@safe_route("Failed to update irrigation zone")
def update_zone(zone_id: str) -> Response:
    service = get_irrigation_service()
    if not service.update_zone(zone_id, body_dict(UpdateZoneRequest, partial=True)):
        return not_found("Zone")
    return success(service.get_zone(zone_id).to_dict())


@irrigation_bp.route("/zones/<zone_id>", methods=["DELETE"])
@safe_route("Failed to delete irrigation zone")
def delete_zone(zone_id: str) -> Response:
    """Delete a zone; a running event is stopped and recorded first."""
    if not get_irrigation_service().delete_zone(zone_id):
        return not_found("Zone")
    return success({"deleted": zone_id})


# ==================== Sensors ====================


@irrigation_bp.route("/zones/<zone_id>/sensors", methods=["POST"])
@safe_route("Failed to add sensor")
def add_sensor(zone_id: str) -> Response:
    sensor_id = get_irrigation_service().add_sensor(zone_id, body_dict(AddSensorRequest))
    return success({"sensor_id": sensor_id}, 201)


@irrigation_bp.route("/zones/<zone_id>/sensors/<sensor_id>/readings", methods=["GET"])
@safe_route("Failed to get sensor readings")
def get_sensor_readings(zone_id: str, sensor_id: str) -> Response:
    """
    Readings for one sensor.

    Query params:
    - hours: look-back window (default 24)
    """
    hours = query_int("hours", 24, maximum=24 * 365)
    readings = get_irrigation_service().get_sensor_readings(zone_id, sensor_id, hours=hours)
    return success(dump(readings))


@irrigation_bp.route("/zones/<zone_id>/sensors/<sensor_id>/readings", methods=["POST"])
@safe_route("Failed to record sensor reading")
def record_sensor_reading(zone_id: str, sensor_id: str) -> Response:
    body = parse_json(SensorReadingRequest)
    recorded = get_irrigation_service().record_sensor_reading(
        zone_id, sensor_id, body.value, unit=body.unit, quality=body.quality
    )
    if not recorded:
        return not_found("Zone or sensor")
    return success({"recorded": True}, 201)


# ==================== Schedules ====================


@irrigation_bp.route("/zones/<zone_id>/schedules", methods=["GET"])
@safe_route("Failed to list schedules")
def list_schedules(zone_id: str) -> Response:
    zone = get_irrigation_service().get_zone(zone_id)
    if zone is None:
        return not_found("Zone")
    return success(dump(zone.schedules))


@irrigation_bp.route("/zones/<zone_id>/schedules", methods=["POST"])
@safe_route("Failed to create schedule")
def create_schedule(zone_id: str) -> Response:
    schedule_id = get_irrigation_service().create_schedule(zone_id, body_dict(CreateScheduleRequest))
    return success({"schedule_id": schedule_id}, 201)


@irrigation_bp.route("/zones/<zone_id>/schedules/<schedule_id>", methods=["PUT"])
@safe_route("Failed to update schedule")
def update_schedule(zone_id: str, schedule_id: str) -> Response:
    updates = body_dict(UpdateScheduleRequest, partial=True)
    if not get_irrigation_service().update_schedule(zone_id, schedule_id, updates):
        return not_found("Schedule")
    return success({"updated": schedule_id})


@irrigation_bp.route("/zones/<zone_id>/schedules/<schedule_id>", methods=["DELETE"])
@safe_route("Failed to delete schedule")
def delete_schedule(zone_id: str, schedule_id: str) -> Response:
    if not get_irrigation_service().delete_schedule(zone_id, schedule_id):
        return not_found("Schedule")
    return success({"deleted": schedule_id})


# ==================== Control ====================


@irrigation_bp.route("/zones/<zone_id>/start", methods=["POST"])
@safe_route("Failed to start irrigation")
def start_irrigation(zone_id: str) -> Response:
    """
    Start irrigating a zone.

    Request body (optional):
    - duration: minutes; defaults to the optimal duration for the zone
    - water_amount: inches; defaults to application rate x duration
    """
    body = parse_json(StartIrrigationRequest)
    event_id = get_irrigation_service().start_irrigation(
        zone_id,
        duration=body.duration,
        water_amount=body.water_amount,
        schedule_id=body.schedule_id,
        trigger=body.trigger or {"type": "manual", "source": "api"},
    )
    return success({"event_id": event_id}, 201)


@irrigation_bp.route("/zones/<zone_id>/stop", methods=["POST"])
@safe_route("Failed to stop irrigation")
def stop_irrigation(zone_id: str) -> Response:
    body = parse_json(StopIrrigationRequest)
    stopped = get_irrigation_service().stop_irrigation(zone_id, body.event_id)
    if not stopped:
        return not_found("Running irrigation event")
    return success({"stopped": True})


@irrigation_bp.route("/zones/<zone_id>/cancel", methods=["POST"])
@safe_route("Failed to cancel irrigation")
def cancel_irrigation(zone_id: str) -> Response:
    body = parse_json(CancelIrrigationRequest)
    if not get_irrigation_service().cancel_irrigation(zone_id, body.reason):
        return not_found("Running irrigation event")
    return success({"cancelled": True})


@irrigation_bp.route("/events/active", methods=["GET"])
@safe_route("Failed to list active irrigation events")
def active_events() -> Response:
    return success(dump(get_irrigation_service().get_active_irrigation_events()))


@irrigation_bp.route("/zones/<zone_id>/history", methods=["GET"])
@safe_route("Failed to get irrigation history")
def irrigation_history(zone_id: str) -> Response:
    """
    Terminated events for a zone, newest first.

    Query params:
    - days: look-back window (default 30)
    """
    service = get_irrigation_service()
    if service.get_zone(zone_id) is None:
        return not_found("Zone")
    return success(dump(service.get_irrigation_history(zone_id, days=query_int("days", 30))))


# ==================== Alerts ====================


@irrigation_bp.route("/alerts", methods=["GET"])
@safe_route("Failed to list alerts")
def list_alerts() -> Response:
    alerts = get_irrigation_service().get_alerts(
        zone_id=request.args.get("zone_id") or None,
        active_only=query_bool("active_only"),
    )
    return success(dump(alerts))


@irrigation_bp.route("/alerts/<alert_id>/acknowledge", methods=["POST"])
@safe_route("Failed to acknowledge alert")
def acknowledge_alert(alert_id: str) -> Response:
    if not get_irrigation_service().acknowledge_alert(alert_id):
        return not_found("Alert")
    return success({"acknowledged": alert_id})


@irrigation_bp.route("/alerts/<alert_id>/resolve", methods=["POST"])
@safe_route("Failed to resolve alert")
def resolve_alert(alert_id: str) -> Response:
    body = parse_json(ResolveAlertRequest)
    if not get_irrigation_service().resolve_alert(alert_id, resolved_by=body.resolved_by):
        return not_found("Alert")
    return success({"resolved": alert_id})


@irrigation_bp.route("/alerts/<alert_id>/dismiss", methods=["POST"])
@safe_route("Failed to dismiss alert")
def dismiss_alert(alert_id: str) -> Response:
    if not get_irrigation_service().dismiss_alert(alert_id):
        return not_found("Alert")
    return success({"dismissed": alert_id})


# ==================== Analytics ====================


@irrigation_bp.route("/zones/<zone_id>/efficiency", methods=["GET"])
@safe_route("Failed to calculate water efficiency")
def zone_efficiency(zone_id: str) -> Response:
    if get_irrigation_service().get_zone(zone_id) is None:
        return not_found("Zone")
    days = query_int("days", 30)
    return success(get_water_analytics().calculate_water_efficiency(zone_id, days=days))


@irrigation_bp.route("/zones/<zone_id>/analytics", methods=["GET"])
@safe_route("Failed to build zone analytics")
def zone_analytics(zone_id: str) -> Response:
    analytics = get_water_analytics().get_zone_analytics(zone_id)
    if analytics is None:
        return not_found("Zone")
    return success(analytics)


@irrigation_bp.route("/analytics", methods=["GET"])
@safe_route("Failed to build system analytics")
def system_analytics() -> Response:
    return success(get_water_analytics().get_system_analytics())


# ==================== Smart Scheduling ====================


@irrigation_bp.route("/zones/<zone_id>/optimal-schedule", methods=["POST"])
@safe_route("Failed to calculate optimal schedule")
def optimal_schedule_with_weather(zone_id: str) -> Response:
    """Recommend schedules from caller-supplied weather; nothing is saved."""
    body = parse_json(OptimalScheduleRequest)
    if get_irrigation_service().get_zone(zone_id) is None:
        return not_found("Zone")
    weather = WeatherData.from_dict(body.weather.model_dump(mode="json"))
    crop_req = CropWaterRequirement.from_dict(body.crop_requirement) if body.crop_requirement else None
    schedules = get_irrigation_planner().calculate_optimal_schedule(zone_id, weather, crop_req)
    return success(dump(schedules))


@irrigation_bp.route("/zones/<zone_id>/optimal-schedule", methods=["GET"])
@safe_route("Failed to calculate optimal schedule", error_status=502)
def optimal_schedule_from_forecast(zone_id: str) -> Response:
    """Fetch the forecast for the zone location, then recommend schedules."""
    if get_irrigation_service().get_zone(zone_id) is None:
        return not_found("Zone")
    return success(dump(get_irrigation_planner().plan_with_forecast(zone_id)))
