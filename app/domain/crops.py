"""
Crop Domain Objects
===================

A crop moves through the growth stages of its type (see
``app.domain.growth_stages``). Each completed stage lands in
``growth_history``; treatments, harvest data and predictions hang off the
crop, while pest observations and notifications are kept by the service.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from app.domain.base import Record
from app.enums.crops import (
    CropStatus,
    NotificationPriority,
    NotificationType,
    PestType,
    Severity,
    TreatmentType,
    WeatherSensitivity,
)


@dataclass
class FieldLocation(Record):
    latitude: float = 0.0
    longitude: float = 0.0
    area: float = 0.0  # acres
    soil_type: str = "loam"


@dataclass
class GrowthStage(Record):
    id: str
    name: str
    description: str = ""
    start_date: Optional[datetime] = None
    expected_duration: int = 0  # days
    completion_percentage: float = 0.0
    characteristics: List[str] = field(default_factory=list)
    critical_factors: List[str] = field(default_factory=list)
    recommended_actions: List[str] = field(default_factory=list)
    weather_sensitivity: WeatherSensitivity = WeatherSensitivity.MEDIUM


@dataclass
class EnvironmentalConditions(Record):
    average_temperature: float = 0.0
    total_rainfall: float = 0.0
    average_humidity: float = 0.0
    sunlight_hours: float = 0.0
    soil_moisture: float = 0.0


@dataclass
class GrowthStageRecord(Record):
    stage_id: str
    stage_name: str
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    actual_duration: Optional[int] = None  # days
    observed_characteristics: List[str] = field(default_factory=list)
    environmental_conditions: EnvironmentalConditions = field(default_factory=EnvironmentalConditions)
    health_score: float = 100.0
    notes: str = ""
    recorded_by: str = "system"


@dataclass
class Dosage(Record):
    amount: float = 0.0
    unit: str = ""
    concentration: Optional[float] = None


@dataclass
class TreatmentRecord(Record):
    id: str = ""
    type: TreatmentType = TreatmentType.OTHER
    name: str = ""
    active_ingredient: Optional[str] = None
    application_method: str = "spray"
    application_date: Optional[datetime] = None
    dosage: Dosage = field(default_factory=Dosage)
    coverage_area: float = 0.0  # acres
    coverage_percentage: float = 100.0
    purpose: str = ""
    conditions: Dict[str, float] = field(default_factory=dict)
    cost: float = 0.0
    supplier: str = ""
    preharvest_interval: Optional[int] = None  # days
    effectiveness: float = 0.0  # 0-100, evaluated after the fact
    side_effects: List[str] = field(default_factory=list)
    certification_compliant: bool = True
    applied_by: str = ""
    notes: str = ""


@dataclass
class PestObservation(Record):
    id: str = ""
    crop_id: str = ""
    monitoring_date: Optional[datetime] = None
    pest_type: PestType = PestType.INSECT
    pest_name: str = ""
    identification_confidence: float = 100.0
    severity: Severity = Severity.LOW
    affected_area_percentage: float = 0.0
    lifecycle: str = ""
    population_density: float = 0.0
    estimated_yield_loss: float = 0.0
    economic_threshold: bool = False
    identification_method: str = "visual"
    recommendations: List[Dict[str, Any]] = field(default_factory=list)
    monitored_by: str = ""
    notes: str = ""


@dataclass
class PredictedYield(Record):
    amount: float = 0.0
    unit: str = "units/acre"
    confidence: float = 60.0
    range_min: float = 0.0
    range_max: float = 0.0


@dataclass
class YieldPrediction(Record):
    crop_id: str
    prediction_date: datetime
    predicted_yield: PredictedYield
    quality_grade: str = "Good"
    quality_characteristics: Dict[str, float] = field(default_factory=dict)
    quality_confidence: float = 60.0
    factors: Dict[str, Any] = field(default_factory=dict)
    scenarios: List[Dict[str, Any]] = field(default_factory=list)
    model_version: str = "2.1.0"


@dataclass
class HarvestData(Record):
    harvest_date: Optional[datetime] = None
    yield_amount: float = 0.0
    yield_unit: str = "bu/acre"
    quality_grade: str = ""
    moisture_content: Optional[float] = None
    market_value: float = 0.0
    costs: Dict[str, float] = field(default_factory=dict)
    equipment_used: List[str] = field(default_factory=list)
    notes: str = ""


@dataclass
class CropPredictions(Record):
    yield_prediction: Optional[YieldPrediction] = None
    harvest_window_start: Optional[datetime] = None
    harvest_window_end: Optional[datetime] = None
    weather_risk: str = "medium"
    risks: List[Dict[str, Any]] = field(default_factory=list)
    opportunities: List[Dict[str, Any]] = field(default_factory=list)


@dataclass
class Crop(Record):
    id: str = ""
    name: str = ""
    variety: str = ""
    category: str = "grain"
    planting_date: Optional[datetime] = None
    expected_harvest_date: Optional[datetime] = None
    actual_harvest_date: Optional[datetime] = None
    field_id: str = ""
    field_location: FieldLocation = field(default_factory=FieldLocation)
    current_stage: Optional[GrowthStage] = None
    status: CropStatus = CropStatus.PLANTED
    metadata: Dict[str, Any] = field(default_factory=dict)
    growth_history: List[GrowthStageRecord] = field(default_factory=list)
    treatment_history: List[TreatmentRecord] = field(default_factory=list)
    harvest_data: Optional[HarvestData] = None
    predictions: CropPredictions = field(default_factory=CropPredictions)

    PROTECTED_FIELDS = frozenset(
        {"id", "current_stage", "growth_history", "treatment_history", "harvest_data", "predictions"}
    )

    @property
    def crop_type(self) -> str:
        return self.name.strip().lower()


@dataclass
class CropNotification(Record):
    id: str
    crop_id: str
    type: NotificationType
    priority: NotificationPriority
    title: str
    message: str
    created_at: datetime
    action_required: bool = False
    action_description: Optional[str] = None
    due_date: Optional[datetime] = None
    read_at: Optional[datetime] = None
    dismissed_at: Optional[datetime] = None
    related_data: Dict[str, Any] = field(default_factory=dict)
