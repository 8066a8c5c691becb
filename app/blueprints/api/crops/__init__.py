"""
Crops API Blueprint
===================

REST API endpoints for the crop lifecycle: planting, growth stages,
treatments, pest monitoring, yield prediction, harvest, notifications and
crop/field analytics.

Endpoints:
- GET/POST /api/crops/crops - List (status, field_id) / plant a crop
- GET/PUT/DELETE /api/crops/crops/<id> - Crop CRUD
- POST /api/crops/crops/<id>/advance-stage - Close the current stage
- POST /api/crops/crops/<id>/progress - Current stage completion
- GET/POST /api/crops/crops/<id>/treatments - Treatment history / apply
- PUT /api/crops/crops/<id>/treatments/<tid>/effectiveness - Evaluate a treatment
- GET/POST /api/crops/crops/<id>/pests - Pest history (active_only) / observe
- GET/POST /api/crops/crops/<id>/yield-prediction - Current / recalculated prediction
- POST /api/crops/crops/<id>/harvest - Record harvest
- GET /api/crops/crops/<id>/analytics - Crop analytics
- GET /api/crops/fields/<id>/analytics - Field analytics
- GET /api/crops/harvest-ready - Crops ready within a week
- GET /api/crops/notifications - Notifications (crop_id, unread_only)
- POST /api/crops/notifications/<id>/read|dismiss - Notification state
"""

from __future__ import annotations

from flask import Blueprint, Response, request

from app.blueprints.api._common import (
    body_dict,
    dump,
    get_crop_service,
    not_found,
    parse_json,
    query_bool,
    success,
)
from app.schemas import (
    AddTreatmentRequest,
    CreateCropRequest,
    HarvestRequest,
    PestObservationRequest,
    StageObservationRequest,
    StageProgressRequest,
    TreatmentEffectivenessRequest,
    UpdateCropRequest,
    YieldPredictionRequest,
)
from app.utils.http import safe_route

crops_bp = Blueprint("crops", __name__)


# ==================== Crops ====================


@crops_bp.route("/crops", methods=["GET"])
@safe_route("Failed to list crops")
def list_crops() -> Response:
    """
    List crops.

    Query params:
    - status: planned | planted | growing | harvested | failed
    - field_id: crops in one field
    """
    service = get_crop_service()
    if request.args.get("status"):
        crops = service.get_crops_by_status(request.args["status"])
    elif request.args.get("field_id"):
        crops = service.get_crops_by_field(request.args["field_id"])
    else:
        crops = service.get_all_crops()
    return success(dump(crops))


@crops_bp.route("/crops", methods=["POST"])
@safe_route("Failed to create crop")
def create_crop() -> Response:
    service = get_crop_service()
    crop_id = service.create_crop(body_dict(CreateCropRequest))
    return success(service.get_crop(crop_id).to_dict(), 201)


@crops_bp.route("/crops/<crop_id>", methods=["GET"])
@safe_route("Failed to get crop")
def get_crop(crop_id: str) -> Response:
    crop = get_crop_service().get_crop(crop_id)
    if crop is None:
        return not_found("Crop")
    return success(crop.to_dict())


@crops_bp.route("/crops/<crop_id>", methods=["PUT"])
@safe_route("Failed to update crop")
def update_crop(crop_id: str) -> Response:
    service = get_crop_service()
    if not service.update_crop(crop_id, body_dict(UpdateCropRequest, partial=True)):
        return not_found("Crop")
    return success(service.get_crop(crop_id).to_dict())


@crops_bp.route("/crops/<crop_id>", methods=["DELETE"])
@safe_route("Failed to delete crop")
def delete_crop(crop_id: str) -> Response:
    if not get_crop_service().delete_crop(crop_id):
        return not_found("Crop")
    return success({"deleted": crop_id})


# ==================== Growth ====================


@crops_bp.route("/crops/<crop_id>/advance-stage", methods=["POST"])
@safe_route("Failed to advance growth stage")
def advance_stage(crop_id: str) -> Response:
    service = get_crop_service()
    if not service.advance_growth_stage(crop_id, body_dict(StageObservationRequest, partial=True)):
        return not_found("Crop")
    return success(service.get_crop(crop_id).to_dict())


@crops_bp.route("/crops/<crop_id>/progress", methods=["POST"])
@safe_route("Failed to update stage progress")
def update_progress(crop_id: str) -> Response:
    body = parse_json(StageProgressRequest)
    service = get_crop_service()
    if not service.update_growth_stage_progress(crop_id, body.percentage):
        return not_found("Crop")
    return success(service.get_crop(crop_id).current_stage.to_dict())


# ==================== Treatments ====================


@crops_bp.route("/crops/<crop_id>/treatments", methods=["GET"])
@safe_route("Failed to get treatment history")
def treatment_history(crop_id: str) -> Response:
    service = get_crop_service()
    if service.get_crop(crop_id) is None:
        return not_found("Crop")
    return success(dump(service.get_treatment_history(crop_id)))


@crops_bp.route("/crops/<crop_id>/treatments", methods=["POST"])
@safe_route("Failed to add treatment")
def add_treatment(crop_id: str) -> Response:
    treatment_id = get_crop_service().add_treatment(crop_id, body_dict(AddTreatmentRequest))
    return success({"treatment_id": treatment_id}, 201)


@crops_bp.route("/crops/<crop_id>/treatments/<treatment_id>/effectiveness", methods=["PUT"])
@safe_route("Failed to update treatment effectiveness")
def treatment_effectiveness(crop_id: str, treatment_id: str) -> Response:
    body = parse_json(TreatmentEffectivenessRequest)
    updated = get_crop_service().update_treatment_effectiveness(
        crop_id, treatment_id, body.effectiveness, body.side_effects
    )
    if not updated:
        return not_found("Treatment")
    return success({"updated": treatment_id})


# ==================== Pests ====================


@crops_bp.route("/crops/<crop_id>/pests", methods=["GET"])
@safe_route("Failed to get pest observations")
def pest_history(crop_id: str) -> Response:
    """
    Pest observations for a crop.

    Query params:
    - active_only: only observations from the last 14 days
    """
    service = get_crop_service()
    if service.get_crop(crop_id) is None:
        return not_found("Crop")
    if query_bool("active_only"):
        return success(dump(service.get_active_pests(crop_id)))
    return success(dump(service.get_pest_history(crop_id)))


@crops_bp.route("/crops/<crop_id>/pests", methods=["POST"])
@safe_route("Failed to record pest observation")
def add_pest_observation(crop_id: str) -> Response:
    data = body_dict(PestObservationRequest)
    data["crop_id"] = crop_id
    observation_id = get_crop_service().add_pest_observation(data)
    return success({"observation_id": observation_id}, 201)


# ==================== Yield and harvest ====================


@crops_bp.route("/crops/<crop_id>/yield-prediction", methods=["GET"])
@safe_route("Failed to get yield prediction")
def get_yield_prediction(crop_id: str) -> Response:
    crop = get_crop_service().get_crop(crop_id)
    if crop is None:
        return not_found("Crop")
    prediction = crop.predictions.yield_prediction
    return success(prediction.to_dict() if prediction else None)


@crops_bp.route("/crops/<crop_id>/yield-prediction", methods=["POST"])
@safe_route("Failed to update yield prediction")
def update_yield_prediction(crop_id: str) -> Response:
    body = parse_json(YieldPredictionRequest)
    prediction = get_crop_service().update_yield_prediction(crop_id, body.weather, body.soil)
    if prediction is None:
        return not_found("Crop")
    return success(prediction.to_dict())


@crops_bp.route("/crops/<crop_id>/harvest", methods=["POST"])
@safe_route("Failed to record harvest")
def record_harvest(crop_id: str) -> Response:
    service = get_crop_service()
    if not service.record_harvest(crop_id, body_dict(HarvestRequest)):
        return not_found("Crop")
    return success(service.get_crop(crop_id).to_dict())


@crops_bp.route("/harvest-ready", methods=["GET"])
@safe_route("Failed to list harvest-ready crops")
def harvest_ready() -> Response:
    return success(dump(get_crop_service().get_harvest_ready_crops()))


# ==================== Analytics ====================


@crops_bp.route("/crops/<crop_id>/analytics", methods=["GET"])
@safe_route("Failed to build crop analytics")
def crop_analytics(crop_id: str) -> Response:
    analytics = get_crop_service().get_crop_analytics(crop_id)
    if analytics is None:
        return not_found("Crop")
    return success(analytics)


@crops_bp.route("/fields/<field_id>/analytics", methods=["GET"])
@safe_route("Failed to build field analytics")
def field_analytics(field_id: str) -> Response:
    analytics = get_crop_service().get_field_analytics(field_id)
    if analytics is None:
        return not_found("Field")
    return success(analytics)


# ==================== Notifications ====================


@crops_bp.route("/notifications", methods=["GET"])
@safe_route("Failed to list notifications")
def list_notifications() -> Response:
    notifications = get_crop_service().get_notifications(
        crop_id=request.args.get("crop_id") or None,
        unread_only=query_bool("unread_only"),
    )
    return success(dump(notifications))


@crops_bp.route("/notifications/<notification_id>/read", methods=["POST"])
@safe_route("Failed to mark notification read")
def mark_notification_read(notification_id: str) -> Response:
    if not get_crop_service().mark_notification_read(notification_id):
        return not_found("Notification")
    return success({"read": notification_id})


@crops_bp.route("/notifications/<notification_id>/dismiss", methods=["POST"])
@safe_route("Failed to dismiss notification")
def dismiss_notification(notification_id: str) -> Response:
    if not get_crop_service().dismiss_notification(notification_id):
        return not_found("Notification")
    return success({"dismissed": notification_id})
