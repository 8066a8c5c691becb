"""
Crop Management Service
=======================

Tracks crops through the growth-stage tables, records treatments, pest
observations and harvests, keeps yield predictions current, and raises crop
notifications. ``run_monitoring_cycle`` is the daily job that flags stages
due for review and crops overdue for a pest check.
"""

from __future__ import annotations

import logging
import math
import threading
import uuid
from collections import Counter, defaultdict
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from app.domain.crops import (
    Crop,
    CropNotification,
    CropPredictions,
    GrowthStageRecord,
    HarvestData,
    PestObservation,
    PredictedYield,
    TreatmentRecord,
    YieldPrediction,
)
from app.domain.exceptions import NotFoundError, ValidationError
from app.domain.growth_stages import (
    CRITICAL_WEATHER_PERIODS,
    QUALITY_CHARACTERISTICS,
    STAGE_YIELD_MULTIPLIERS,
    base_yield,
    stages_for,
    start_stage,
    yield_unit,
)
from app.enums.crops import (
    CropStatus,
    NotificationPriority,
    NotificationType,
    Severity,
    WeatherSensitivity,
)
from app.enums.events import CropEvent
from app.utils.concurrency import synchronized
from app.utils.time import Clock, SystemClock

logger = logging.getLogger(__name__)

ACTIVE_PEST_DAYS = 14
PEST_CHECK_DAYS = 7
HARVEST_READY_DAYS = 7
MAX_RECOMMENDATIONS = 5

PEST_YIELD_FACTORS = {
    Severity.LOW: 0.98,
    Severity.MEDIUM: 0.95,
    Severity.HIGH: 0.90,
    Severity.CRITICAL: 0.80,
}

PEST_HEALTH_PENALTIES = {
    Severity.LOW: 5,
    Severity.MEDIUM: 10,
    Severity.HIGH: 20,
    Severity.CRITICAL: 35,
}

YIELD_SCENARIOS: List[Dict[str, Any]] = [
    {
        "name": "Optimal Conditions",
        "description": "Favorable weather and no major pest pressure",
        "probability": 30,
        "yield_impact": 15,
        "recommendations": ["Continue current management", "Monitor for opportunities"],
    },
    {
        "name": "Average Conditions",
        "description": "Normal weather patterns and minor pest pressure",
        "probability": 50,
        "yield_impact": 0,
        "recommendations": ["Maintain vigilant monitoring", "Follow treatment schedule"],
    },
    {
        "name": "Challenging Conditions",
        "description": "Weather stress or significant pest pressure",
        "probability": 20,
        "yield_impact": -20,
        "recommendations": ["Implement stress mitigation", "Increase monitoring frequency"],
    },
]


def _new_id(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex[:12]}"


def _days_between(start: datetime, end: datetime) -> int:
    return math.ceil((end - start).total_seconds() / 86400)


def quality_grade(health_score: float) -> str:
    if health_score >= 90:
        return "Premium"
    if health_score >= 80:
        return "Good"
    if health_score >= 70:
        return "Average"
    return "Below Average"


class CropService:
    """Crop lifecycle, predictions and notifications."""

    def __init__(self, *, clock: Optional[Clock] = None, event_bus: Optional[Any] = None) -> None:
        self._clock = clock or SystemClock()
        self._event_bus = event_bus
        self._lock = threading.RLock()

        self._crops: Dict[str, Crop] = {}
        self._pests: Dict[str, List[PestObservation]] = defaultdict(list)
        self._notifications: List[CropNotification] = []

    def _publish(self, topic, payload: Dict[str, Any]) -> None:
        if self._event_bus is not None:
            self._event_bus.publish(topic, payload)

    def _require_crop(self, crop_id: str) -> Crop:
        crop = self._crops.get(crop_id)
        if crop is None:
            raise NotFoundError("Crop not found")
        return crop

    # ------------------------------------------------------------------
    # Crops
    # ------------------------------------------------------------------

    @synchronized
    def create_crop(self, data: Dict[str, Any]) -> str:
        crop = Crop.from_dict({k: v for k, v in (data or {}).items() if k not in Crop.PROTECTED_FIELDS})
        if not crop.name:
            raise ValidationError("Crop name is required")

        now = self._clock.now()
        crop.id = _new_id("crop")
        crop.planting_date = crop.planting_date or now
        crop.current_stage = start_stage(stages_for(crop.crop_type)[0], crop.planting_date)
        crop.predictions = self._initial_predictions(crop, now)
        self._crops[crop.id] = crop

        logger.info("Created crop %s (%s %s) in field %s", crop.id, crop.name, crop.variety, crop.field_id)
        self.create_notification(
            crop.id,
            NotificationType.STAGE_CHANGE,
            NotificationPriority.MEDIUM,
            "Crop Planted Successfully",
            f"{crop.name} ({crop.variety}) has been planted in field {crop.field_id}",
        )
        self._publish(CropEvent.CROP_PLANTED, crop.to_dict())
        return crop.id

    def _initial_predictions(self, crop: Crop, now: datetime) -> CropPredictions:
        amount = base_yield(crop.crop_type)
        prediction = YieldPrediction(
            crop_id=crop.id,
            prediction_date=now,
            predicted_yield=PredictedYield(
                amount=amount,
                unit=yield_unit(crop.crop_type),
                confidence=60.0,
                range_min=round(amount * 0.7, 2),
                range_max=round(amount * 1.3, 2),
            ),
            quality_grade="Good",
            quality_confidence=60.0,
            factors={
                "weather": {"influence": 0, "critical_periods": [], "risk_factors": []},
                "soil": {"influence": 0, "nutrients": {}, "moisture": 50, "ph": 6.5},
                "management": {"influence": 0, "practices_score": 70, "timing_score": 70},
                "pests": {"influence": 0, "risk_level": "low", "threat_types": []},
            },
        )
        harvest = crop.expected_harvest_date
        return CropPredictions(
            yield_prediction=prediction,
            harvest_window_start=harvest - timedelta(days=7) if harvest else None,
            harvest_window_end=harvest + timedelta(days=7) if harvest else None,
            risks=[
                {
                    "type": "weather",
                    "probability": 30,
                    "impact": "medium",
                    "description": "Weather-related stress during critical growth periods",
                    "mitigation_strategies": ["Monitor weather forecasts", "Ensure adequate irrigation"],
                }
            ],
            opportunities=[
                {
                    "type": "quality",
                    "potential": 15,
                    "description": "Potential for premium quality grade",
                    "action_required": ["Optimal nutrition timing", "Pest management"],
                    "timeline": "Throughout growing season",
                }
            ],
        )

    def get_crop(self, crop_id: str) -> Optional[Crop]:
        return self._crops.get(crop_id)

    def get_all_crops(self) -> List[Crop]:
        return list(self._crops.values())

    def get_crops_by_status(self, status: str | CropStatus) -> List[Crop]:
        try:
            wanted = CropStatus(status)
        except ValueError:
            raise ValidationError(f"Unknown crop status: {status}") from None
        return [c for c in self._crops.values() if c.status == wanted]

    def get_crops_by_field(self, field_id: str) -> List[Crop]:
        return [c for c in self._crops.values() if c.field_id == field_id]

    @synchronized
    def update_crop(self, crop_id: str, updates: Dict[str, Any]) -> bool:
        crop = self._crops.get(crop_id)
        if crop is None:
            return False
        crop.apply_updates(updates or {}, protected=Crop.PROTECTED_FIELDS)
        return True

    @synchronized
    def delete_crop(self, crop_id: str) -> bool:
        if self._crops.pop(crop_id, None) is None:
            return False
        self._pests.pop(crop_id, None)
        self._notifications = [n for n in self._notifications if n.crop_id != crop_id]
        logger.info("Deleted crop %s", crop_id)
        return True

    # ------------------------------------------------------------------
    # Growth stages
    # ------------------------------------------------------------------

    @synchronized
    def advance_growth_stage(self, crop_id: str, observation: Optional[Dict[str, Any]] = None) -> bool:
        """
        Close the current stage into ``growth_history`` and open the next one.

        At the last stage of the table the history record is still written
        and the call succeeds, but the crop stays in its final stage.
        """
        crop = self._crops.get(crop_id)
        if crop is None:
            return False

        now = self._clock.now()
        stage = crop.current_stage
        started = stage.start_date or crop.planting_date or now
        observed = {k: v for k, v in (observation or {}).items() if k not in ("stage_id", "stage_name")}
        record = GrowthStageRecord.from_dict(
            {"stage_id": stage.id, "stage_name": stage.name, "start_date": started, **observed}
        )
        record.end_date = record.end_date or now
        record.actual_duration = _days_between(started, record.end_date)
        crop.growth_history.append(record)

        if crop.status == CropStatus.PLANTED:
            crop.status = CropStatus.GROWING

        stages = stages_for(crop.crop_type)
        index = next((i for i, s in enumerate(stages) if s.id == stage.id), -1)
        if index < len(stages) - 1:
            next_stage = stages[index + 1]
            crop.current_stage = start_stage(next_stage, now)
            logger.info("Crop %s advanced to %s", crop_id, next_stage.name)
            self.create_notification(
                crop_id,
                NotificationType.STAGE_CHANGE,
                NotificationPriority.MEDIUM,
                "Growth Stage Advanced",
                f"{crop.name} has advanced to {next_stage.name}",
            )
            self._publish(
                CropEvent.STAGE_ADVANCED,
                {"crop_id": crop_id, "from_stage": stage.id, "to_stage": next_stage.id},
            )
        else:
            logger.debug("Crop %s is already in its final stage %s", crop_id, stage.id)

        crop.predictions.yield_prediction = self._calculate_yield_prediction(crop)
        return True

    @synchronized
    def update_growth_stage_progress(self, crop_id: str, percentage: float) -> bool:
        crop = self._crops.get(crop_id)
        if crop is None or crop.current_stage is None:
            return False
        crop.current_stage.completion_percentage = min(100.0, max(0.0, float(percentage)))
        return True

    # ------------------------------------------------------------------
    # Treatments
    # ------------------------------------------------------------------

    @synchronized
    def add_treatment(self, crop_id: str, data: Dict[str, Any]) -> str:
        crop = self._require_crop(crop_id)
        treatment = TreatmentRecord.from_dict({k: v for k, v in (data or {}).items() if k != "id"})
        treatment.id = _new_id("treatment")
        treatment.application_date = treatment.application_date or self._clock.now()
        crop.treatment_history.append(treatment)

        self.create_notification(
            crop_id,
            NotificationType.TREATMENT_DUE,
            NotificationPriority.MEDIUM,
            "Treatment Applied",
            f'{treatment.type.value} treatment "{treatment.name}" applied to {crop.name}',
        )
        return treatment.id

    def get_treatment_history(self, crop_id: str) -> List[TreatmentRecord]:
        crop = self._crops.get(crop_id)
        return list(crop.treatment_history) if crop else []

    @synchronized
    def update_treatment_effectiveness(
        self,
        crop_id: str,
        treatment_id: str,
        effectiveness: float,
        side_effects: Optional[List[str]] = None,
    ) -> bool:
        crop = self._crops.get(crop_id)
        if crop is None:
            return False
        treatment = next((t for t in crop.treatment_history if t.id == treatment_id), None)
        if treatment is None:
            return False
        treatment.effectiveness = float(effectiveness)
        if side_effects is not None:
            treatment.side_effects = list(side_effects)
        return True

    # ------------------------------------------------------------------
    # Pests
    # ------------------------------------------------------------------

    @synchronized
    def add_pest_observation(self, data: Dict[str, Any]) -> str:
        observation = PestObservation.from_dict({k: v for k, v in (data or {}).items() if k != "id"})
        self._require_crop(observation.crop_id)
        observation.id = _new_id("pest")
        observation.monitoring_date = observation.monitoring_date or self._clock.now()
        self._pests[observation.crop_id].append(observation)

        if observation.severity == Severity.CRITICAL:
            priority = NotificationPriority.CRITICAL
        elif observation.severity == Severity.HIGH:
            priority = NotificationPriority.HIGH
        else:
            priority = NotificationPriority.MEDIUM

        pest_type = observation.pest_type.value
        self.create_notification(
            observation.crop_id,
            NotificationType.PEST_ALERT,
            priority,
            f"{pest_type} Detection: {observation.pest_name}",
            f"{observation.severity.value} severity {pest_type} detected affecting "
            f"{observation.affected_area_percentage}% of the crop",
        )
        return observation.id

    def get_pest_history(self, crop_id: str) -> List[PestObservation]:
        return list(self._pests.get(crop_id, []))

    def get_active_pests(self, crop_id: str, now: Optional[datetime] = None) -> List[PestObservation]:
        """Observations recorded within the last 14 days."""
        cutoff = (now or self._clock.now()) - timedelta(days=ACTIVE_PEST_DAYS)
        return [p for p in self._pests.get(crop_id, []) if p.monitoring_date and p.monitoring_date >= cutoff]

    # ------------------------------------------------------------------
    # Yield prediction
    # ------------------------------------------------------------------

    def update_yield_prediction(
        self,
        crop_id: str,
        weather: Optional[Dict[str, Any]] = None,
        soil: Optional[Dict[str, Any]] = None,
    ) -> Optional[YieldPrediction]:
        with self._lock:
            crop = self._crops.get(crop_id)
            if crop is None:
                return None
            prediction = self._calculate_yield_prediction(crop, weather, soil)
            crop.predictions.yield_prediction = prediction
            return prediction

    def _management_multiplier(self, crop: Crop) -> float:
        return min(1.2, 1.1 if crop.treatment_history else 0.95)

    def _pest_multiplier(self, crop: Crop) -> float:
        factor = 1.0
        for pest in self.get_active_pests(crop.id):
            factor *= PEST_YIELD_FACTORS[pest.severity]
        return factor

    def _prediction_confidence(self, crop: Crop, weather, soil) -> float:
        confidence = 60.0
        if crop.growth_history:
            confidence += 10
        if crop.treatment_history:
            confidence += 5
        if weather:
            confidence += 10
        if soil:
            confidence += 10
        confidence -= 5 * len(self.get_active_pests(crop.id))
        return min(95.0, max(30.0, confidence))

    def _pest_risk_level(self, crop: Crop) -> str:
        active = self.get_active_pests(crop.id)
        if not active:
            return "low"
        if any(p.severity in (Severity.HIGH, Severity.CRITICAL) for p in active):
            return "high"
        return "medium" if len(active) > 2 else "low"

    def _management_score(self, crop: Crop, now: datetime) -> float:
        cutoff = now - timedelta(days=30)
        recent = [t for t in crop.treatment_history if t.application_date and t.application_date >= cutoff]
        return min(100.0, 70 + min(20, len(recent) * 5))

    def _calculate_yield_prediction(self, crop: Crop, weather=None, soil=None) -> YieldPrediction:
        now = self._clock.now()
        crop_type = crop.crop_type
        stage_id = crop.current_stage.id if crop.current_stage else ""
        stage_mult = STAGE_YIELD_MULTIPLIERS.get(stage_id, 1.0)
        management_mult = self._management_multiplier(crop)
        pest_mult = self._pest_multiplier(crop)

        amount = base_yield(crop_type) * stage_mult * management_mult * pest_mult
        confidence = self._prediction_confidence(crop, weather, soil)
        soil = soil or {}

        return YieldPrediction(
            crop_id=crop.id,
            prediction_date=now,
            predicted_yield=PredictedYield(
                amount=round(amount, 2),
                unit=yield_unit(crop_type),
                confidence=confidence,
                range_min=round(amount * 0.8, 2),
                range_max=round(amount * 1.2, 2),
            ),
            quality_grade=quality_grade(self.calculate_health_score(crop)),
            quality_characteristics=dict(QUALITY_CHARACTERISTICS.get(crop_type, {})),
            quality_confidence=round(confidence * 0.9, 2),
            factors={
                "weather": {
                    "influence": 0.0,
                    "critical_periods": list(CRITICAL_WEATHER_PERIODS.get(crop_type, [])),
                    "risk_factors": ["Drought stress", "Heat stress", "Excessive moisture"],
                },
                "soil": {
                    "influence": 0.0,
                    "nutrients": soil.get("nutrients", {}),
                    "moisture": soil.get("moisture", 50),
                    "ph": soil.get("ph", 6.5),
                },
                "management": {
                    "influence": round((management_mult - 1) * 100, 2),
                    "practices_score": self._management_score(crop, now),
                    "timing_score": 75,
                },
                "pests": {
                    "influence": round((pest_mult - 1) * 100, 2),
                    "risk_level": self._pest_risk_level(crop),
                    "threat_types": sorted({p.pest_name for p in self.get_active_pests(crop.id)}),
                },
            },
            scenarios=[dict(s) for s in YIELD_SCENARIOS],
        )

    # ------------------------------------------------------------------
    # Harvest
    # ------------------------------------------------------------------

    @synchronized
    def record_harvest(self, crop_id: str, data: Dict[str, Any]) -> bool:
        crop = self._crops.get(crop_id)
        if crop is None:
            return False
        harvest = HarvestData.from_dict(data or {})
        harvest.harvest_date = harvest.harvest_date or self._clock.now()
        crop.harvest_data = harvest
        crop.actual_harvest_date = harvest.harvest_date
        crop.status = CropStatus.HARVESTED

        logger.info("Recorded harvest for crop %s: %s %s", crop_id, harvest.yield_amount, harvest.yield_unit)
        self.create_notification(
            crop_id,
            NotificationType.HARVEST_READY,
            NotificationPriority.HIGH,
            "Harvest Completed",
            f"{crop.name} harvest completed with {harvest.yield_amount} {harvest.yield_unit}",
        )
        self._publish(CropEvent.HARVESTED, {"crop_id": crop_id, "harvest": harvest.to_dict()})
        return True

    def get_harvest_ready_crops(self, now: Optional[datetime] = None) -> List[Crop]:
        """Growing crops whose expected harvest is 0-7 days away."""
        now = now or self._clock.now()
        ready = []
        for crop in self.get_crops_by_status(CropStatus.GROWING):
            if crop.expected_harvest_date is None:
                continue
            days = _days_between(now, crop.expected_harvest_date)
            if 0 <= days <= HARVEST_READY_DAYS:
                ready.append(crop)
        return ready

    # ------------------------------------------------------------------
    # Notifications
    # ------------------------------------------------------------------

    def create_notification(
        self,
        crop_id: str,
        notification_type: str | NotificationType,
        priority: str | NotificationPriority,
        title: str,
        message: str,
        action_required: bool = False,
        action_description: Optional[str] = None,
        due_date: Optional[datetime] = None,
    ) -> str:
        notification = CropNotification(
            id=_new_id("notif"),
            crop_id=crop_id,
            type=NotificationType(notification_type),
            priority=NotificationPriority(priority),
            title=title,
            message=message,
            created_at=self._clock.now(),
            action_required=action_required,
            action_description=action_description,
            due_date=due_date,
        )
        with self._lock:
            self._notifications.append(notification)
        self._publish(CropEvent.NOTIFICATION, notification.to_dict())
        return notification.id

    def get_notifications(self, crop_id: Optional[str] = None, unread_only: bool = False) -> List[CropNotification]:
        with self._lock:
            items = list(self._notifications)
        if crop_id:
            items = [n for n in items if n.crop_id == crop_id]
        if unread_only:
            items = [n for n in items if n.read_at is None]
        return sorted(items, key=lambda n: n.created_at, reverse=True)

    def _find_notification(self, notification_id: str) -> Optional[CropNotification]:
        return next((n for n in self._notifications if n.id == notification_id), None)

    @synchronized
    def mark_notification_read(self, notification_id: str) -> bool:
        notification = self._find_notification(notification_id)
        if notification is None:
            return False
        notification.read_at = self._clock.now()
        return True

    @synchronized
    def dismiss_notification(self, notification_id: str) -> bool:
        notification = self._find_notification(notification_id)
        if notification is None:
            return False
        notification.dismissed_at = self._clock.now()
        return True

    # ------------------------------------------------------------------
    # Analytics
    # ------------------------------------------------------------------

    def calculate_health_score(self, crop: Crop, now: Optional[datetime] = None) -> float:
        """100 minus active pest penalties plus up to 15 for effective recent treatments."""
        now = now or self._clock.now()
        score = 100.0
        for pest in self.get_active_pests(crop.id, now):
            score -= PEST_HEALTH_PENALTIES[pest.severity]

        cutoff = now - timedelta(days=ACTIVE_PEST_DAYS)
        recent = [
            t
            for t in crop.treatment_history
            if t.application_date and t.application_date >= cutoff and t.effectiveness > 70
        ]
        score += min(15, len(recent) * 3)
        return min(100.0, max(0.0, score))

    def _growth_rate(self, crop: Crop, now: datetime) -> float:
        stage = crop.current_stage
        if stage is None or not stage.start_date or stage.expected_duration <= 0:
            return 0.0
        return min(100.0, _days_between(stage.start_date, now) / stage.expected_duration * 100)

    def _performance(self, crop: Crop, now: datetime) -> Dict[str, float]:
        season_progress = 0.0
        if crop.planting_date and crop.expected_harvest_date:
            expected = _days_between(crop.planting_date, crop.expected_harvest_date)
            if expected > 0:
                season_progress = min(100.0, _days_between(crop.planting_date, now) / expected * 100)

        rated = [t.effectiveness for t in crop.treatment_history if t.effectiveness > 0]
        return {
            "season_progress": round(season_progress, 2),
            "stage_progress": crop.current_stage.completion_percentage if crop.current_stage else 0.0,
            "health_score": self.calculate_health_score(crop, now),
            "treatment_efficiency": round(sum(rated) / len(rated)) if rated else 0,
        }

    def _crop_risks(self, crop: Crop, now: datetime) -> List[Dict[str, str]]:
        risks = []
        if crop.current_stage and crop.current_stage.weather_sensitivity == WeatherSensitivity.HIGH:
            risks.append(
                {"type": "weather", "level": "medium", "description": "Current growth stage is highly weather sensitive"}
            )
        active = self.get_active_pests(crop.id, now)
        if active:
            risks.append(
                {
                    "type": "pest",
                    "level": self._pest_risk_level(crop),
                    "description": f"{len(active)} active pest(s) detected",
                }
            )
        if crop.expected_harvest_date and crop.status == CropStatus.GROWING:
            if _days_between(now, crop.expected_harvest_date) < 30:
                risks.append({"type": "timing", "level": "medium", "description": "Approaching harvest window"})
        return risks

    def _recommendations(self, crop: Crop, now: datetime) -> List[str]:
        recommendations = list(crop.current_stage.recommended_actions) if crop.current_stage else []
        for pest in self.get_active_pests(crop.id, now):
            if pest.recommendations:
                kind = pest.recommendations[0].get("type", "targeted")
                recommendations.append(f"Address {pest.pest_name}: {kind} treatment recommended")
        if crop.current_stage and crop.current_stage.weather_sensitivity == WeatherSensitivity.HIGH:
            recommendations.append("Monitor weather forecasts closely during this sensitive growth stage")
        return recommendations[:MAX_RECOMMENDATIONS]

    def get_crop_analytics(self, crop_id: str) -> Optional[Dict[str, Any]]:
        crop = self._crops.get(crop_id)
        if crop is None:
            return None
        now = self._clock.now()
        stage = crop.current_stage

        return {
            "crop": {
                "id": crop.id,
                "name": crop.name,
                "variety": crop.variety,
                "status": crop.status.value,
                "days_planted": _days_between(crop.planting_date, now) if crop.planting_date else 0,
            },
            "current_stage": {
                **(stage.to_dict() if stage else {}),
                "days_in_stage": _days_between(stage.start_date, now) if stage and stage.start_date else 0,
            },
            "metrics": {
                "growth_rate": round(self._growth_rate(crop, now), 2),
                "health_score": self.calculate_health_score(crop, now),
                "performance": self._performance(crop, now),
            },
            "predictions": crop.predictions.to_dict(),
            "risk_assessment": self._crop_risks(crop, now),
            "recent_activity": {
                "treatments": [t.to_dict() for t in crop.treatment_history[-5:]],
                "observations": [r.to_dict() for r in crop.growth_history[-3:]],
                "pests": [p.to_dict() for p in self.get_active_pests(crop_id, now)[-3:]],
            },
            "recommendations": self._recommendations(crop, now),
        }

    def get_field_analytics(self, field_id: str) -> Optional[Dict[str, Any]]:
        crops = self.get_crops_by_field(field_id)
        if not crops:
            return None
        now = self._clock.now()

        def predicted(crop: Crop) -> float:
            prediction = crop.predictions.yield_prediction
            return prediction.predicted_yield.amount if prediction else 0.0

        scores = {c.id: self.calculate_health_score(c, now) for c in crops}
        average_health = sum(scores.values()) / len(crops)

        risks = []
        pest_counts = Counter(p.pest_name for c in crops for p in self.get_active_pests(c.id, now))
        for name, count in pest_counts.items():
            if count >= len(crops) * 0.5:
                risks.append(
                    {"type": "widespread_pest", "level": "high", "description": f"{name} affecting multiple crops in field"}
                )

        recommendations = []
        if average_health < 70:
            recommendations.append(
                "Overall field health is below optimal - consider comprehensive field assessment"
            )
        by_stage = Counter(c.current_stage.name for c in crops if c.current_stage)
        for stage_name, count in by_stage.items():
            if count > 1:
                recommendations.append(f"Consider synchronized treatment for {count} crops in {stage_name} stage")

        return {
            "field_id": field_id,
            "summary": {
                "total_crops": len(crops),
                "total_area": sum(c.field_location.area for c in crops),
                "avg_health_score": round(average_health),
                "total_predicted_yield": round(sum(predicted(c) for c in crops), 2),
            },
            "crops": [
                {
                    "id": c.id,
                    "name": c.name,
                    "status": c.status.value,
                    "stage": c.current_stage.name if c.current_stage else None,
                    "health_score": scores[c.id],
                    "predicted_yield": predicted(c),
                }
                for c in crops
            ],
            "risks": risks,
            "recommendations": recommendations[:3],
        }

    # ------------------------------------------------------------------
    # Monitoring
    # ------------------------------------------------------------------

    def run_monitoring_cycle(self, now: Optional[datetime] = None) -> Dict[str, int]:
        """Daily check for stages due for review and overdue pest checks."""
        now = now or self._clock.now()
        stage_updates = 0
        pest_reminders = 0

        for crop in self.get_crops_by_status(CropStatus.GROWING):
            stage = crop.current_stage
            if stage and stage.start_date and _days_between(stage.start_date, now) >= stage.expected_duration:
                self.create_notification(
                    crop.id,
                    NotificationType.STAGE_CHANGE,
                    NotificationPriority.MEDIUM,
                    "Growth Stage Update Due",
                    f"{crop.name} may be ready to advance to the next growth stage",
                    action_required=True,
                    action_description="Observe crop and update growth stage if appropriate",
                )
                stage_updates += 1

            last_check = max(
                (p.monitoring_date for p in self._pests.get(crop.id, []) if p.monitoring_date), default=None
            )
            if last_check is None or now - last_check > timedelta(days=PEST_CHECK_DAYS):
                self.create_notification(
                    crop.id,
                    NotificationType.MAINTENANCE,
                    NotificationPriority.LOW,
                    "Pest Monitoring Due",
                    f"{crop.name} should be checked for pests and diseases",
                    action_required=True,
                    action_description="Conduct field inspection and record observations",
                )
                pest_reminders += 1

        if stage_updates or pest_reminders:
            logger.info(
                "Crop monitoring: %d stage reviews due, %d pest checks due", stage_updates, pest_reminders
            )
        return {"stage_updates_due": stage_updates, "pest_checks_due": pest_reminders}
