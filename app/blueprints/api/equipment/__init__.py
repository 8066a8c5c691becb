"""
Equipment API Blueprint
=======================

REST API endpoints for the equipment registry.

Endpoints:
- GET/POST /api/equipment/ - List (category, status) / register equipment
- GET/PUT/DELETE /api/equipment/<id> - Equipment CRUD
- POST /api/equipment/<id>/maintenance - Log maintenance
- POST /api/equipment/<id>/usage - Log usage hours
- POST /api/equipment/<id>/inspections - Log an inspection
- GET /api/equipment/<id>/cost-analysis - Ownership and operating cost
- GET /api/equipment/analytics/overview - Fleet analytics
- GET /api/equipment/maintenance/schedule - Upcoming maintenance
"""

from __future__ import annotations

from flask import Blueprint, Response, request

from app.blueprints.api._common import (
    body_dict,
    dump,
    get_equipment_service,
    not_found,
    success,
)
from app.schemas import (
    CreateEquipmentRequest,
    InspectionRecordRequest,
    MaintenanceRecordRequest,
    UpdateEquipmentRequest,
    UsageRecordRequest,
)
from app.utils.http import safe_route

equipment_bp = Blueprint("equipment", __name__)


@equipment_bp.route("/", methods=["GET"])
@safe_route("Failed to list equipment")
def list_equipment() -> Response:
    items = get_equipment_service().get_all_equipment(
        category=request.args.get("category") or None,
        status=request.args.get("status") or None,
    )
    return success(dump(items))


@equipment_bp.route("/", methods=["POST"])
@safe_route("Failed to register equipment")
def create_equipment() -> Response:
    equipment = get_equipment_service().create_equipment(body_dict(CreateEquipmentRequest))
    return success(equipment.to_dict(), 201)


# Static paths are registered before /<equipment_id> so they never match as ids
@equipment_bp.route("/analytics/overview", methods=["GET"])
@safe_route("Failed to build equipment analytics")
def equipment_analytics() -> Response:
    return success(get_equipment_service().get_equipment_analytics())


@equipment_bp.route("/maintenance/schedule", methods=["GET"])
@safe_route("Failed to build maintenance schedule")
def maintenance_schedule() -> Response:
    return success(get_equipment_service().get_maintenance_schedule())


@equipment_bp.route("/<equipment_id>", methods=["GET"])
@safe_route("Failed to get equipment")
def get_equipment(equipment_id: str) -> Response:
    equipment = get_equipment_service().get_equipment(equipment_id)
    if equipment is None:
        return not_found("Equipment")
    return success(equipment.to_dict())


@equipment_bp.route("/<equipment_id>", methods=["PUT"])
@safe_route("Failed to update equipment")
def update_equipment(equipment_id: str) -> Response:
    equipment = get_equipment_service().update_equipment(
        equipment_id, body_dict(UpdateEquipmentRequest, partial=True)
    )
    if equipment is None:
        return not_found("Equipment")
    return success(equipment.to_dict())


@equipment_bp.route("/<equipment_id>", methods=["DELETE"])
@safe_route("Failed to delete equipment")
def delete_equipment(equipment_id: str) -> Response:
    if not get_equipment_service().delete_equipment(equipment_id):
        return not_found("Equipment")
    return success({"deleted": equipment_id})


@equipment_bp.route("/<equipment_id>/maintenance", methods=["POST"])
@safe_route("Failed to record maintenance")
def add_maintenance(equipment_id: str) -> Response:
    equipment = get_equipment_service().add_maintenance_record(equipment_id, body_dict(MaintenanceRecordRequest))
    return success(equipment.to_dict(), 201)


@equipment_bp.route("/<equipment_id>/usage", methods=["POST"])
@safe_route("Failed to record usage")
def add_usage(equipment_id: str) -> Response:
    equipment = get_equipment_service().add_usage_record(equipment_id, body_dict(UsageRecordRequest))
    return success(equipment.to_dict(), 201)


@equipment_bp.route("/<equipment_id>/inspections", methods=["POST"])
@safe_route("Failed to record inspection")
def add_inspection(equipment_id: str) -> Response:
    equipment = get_equipment_service().add_inspection_record(equipment_id, body_dict(InspectionRecordRequest))
    return success(equipment.to_dict(), 201)


@equipment_bp.route("/<equipment_id>/cost-analysis", methods=["GET"])
@safe_route("Failed to analyze equipment cost")
def cost_analysis(equipment_id: str) -> Response:
    analysis = get_equipment_service().get_cost_analysis(equipment_id)
    if analysis is None:
        return not_found("Equipment")
    return success(analysis)
