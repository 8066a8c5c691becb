"""
Crop Schemas
============

Request schemas for crop lifecycle endpoints: planting, stage progress,
treatments, pest observations, yield inputs and harvest.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from app.enums.crops import CropStatus, PestType, Severity, TreatmentType


class FieldLocationModel(BaseModel):
    latitude: float = Field(default=0.0, ge=-90, le=90)
    longitude: float = Field(default=0.0, ge=-180, le=180)
    area: float = Field(default=0.0, ge=0, description="Acres")
    soil_type: str = "loam"


class CreateCropRequest(BaseModel):
    """Request schema for planting a crop; ``name`` selects the growth-stage template."""

    model_config = ConfigDict(extra="allow")

    name: str = Field(..., min_length=1, max_length=120, description="Crop name, e.g. corn")
    variety: str = Field(default="", max_length=120)
    category: str = Field(default="grain", max_length=60)
    field_id: str = Field(default="", max_length=120)
    planting_date: Optional[str] = None
    expected_harvest_date: Optional[str] = None
    field_location: Optional[FieldLocationModel] = None
    status: CropStatus = CropStatus.PLANTED
    metadata: Dict[str, Any] = Field(default_factory=dict)


class UpdateCropRequest(BaseModel):
    model_config = ConfigDict(extra="allow")

    variety: Optional[str] = Field(default=None, max_length=120)
    status: Optional[CropStatus] = None
    expected_harvest_date: Optional[str] = None
    field_location: Optional[FieldLocationModel] = None


class StageObservationRequest(BaseModel):
    """Observation stored with the stage being closed."""

    model_config = ConfigDict(extra="allow")

    observed_characteristics: List[str] = Field(default_factory=list)
    environmental_conditions: Optional[Dict[str, float]] = None
    health_score: float = Field(default=100.0, ge=0, le=100)
    notes: str = ""
    recorded_by: str = "system"


class StageProgressRequest(BaseModel):
    # Out-of-range values are clamped by the service
    percentage: float


class AddTreatmentRequest(BaseModel):
    model_config = ConfigDict(extra="allow")

    type: TreatmentType = TreatmentType.OTHER
    name: str = Field(..., min_length=1, max_length=120)
    application_date: Optional[str] = None
    dosage: Optional[Dict[str, Any]] = None
    coverage_area: float = Field(default=0.0, ge=0)
    coverage_percentage: float = Field(default=100.0, ge=0, le=100)
    cost: float = Field(default=0.0, ge=0)
    applied_by: str = ""


class TreatmentEffectivenessRequest(BaseModel):
    effectiveness: float = Field(..., ge=0, le=100)
    side_effects: Optional[List[str]] = None


class PestObservationRequest(BaseModel):
    """Pest or disease sighting for a crop (the crop comes from the URL)."""

    model_config = ConfigDict(extra="allow")

    pest_type: PestType = PestType.INSECT
    pest_name: str = Field(..., min_length=1, max_length=120)
    severity: Severity = Severity.LOW
    affected_area_percentage: float = Field(default=0.0, ge=0, le=100)
    identification_confidence: float = Field(default=100.0, ge=0, le=100)
    monitoring_date: Optional[str] = None
    estimated_yield_loss: float = Field(default=0.0, ge=0, le=100)


class YieldPredictionRequest(BaseModel):
    weather: Optional[Dict[str, Any]] = None
    soil: Optional[Dict[str, Any]] = None


class HarvestRequest(BaseModel):
    model_config = ConfigDict(extra="allow")

    harvest_date: Optional[str] = None
    yield_amount: float = Field(..., ge=0)
    yield_unit: str = Field(default="bu/acre", max_length=40)
    quality_grade: str = ""
    moisture_content: Optional[float] = Field(default=None, ge=0, le=100)
    market_value: float = Field(default=0.0, ge=0)
    costs: Dict[str, float] = Field(default_factory=dict)
