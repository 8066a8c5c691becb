from datetime import timedelta

import pytest

from app.domain.exceptions import NotFoundError, ValidationError
from app.enums.crops import CropStatus, NotificationPriority, NotificationType
from app.services.application.crop_service import quality_grade


@pytest.fixture()
def corn(crop_service):
    return crop_service.create_crop(
        {
            "name": "Corn",
            "variety": "Pioneer P1197",
            "field_id": "field_7",
            "field_location": {"area": 40},
        }
    )


def test_create_crop_starts_first_stage(crop_service, corn, event_bus, clock):
    crop = crop_service.get_crop(corn)

    assert crop.status == CropStatus.PLANTED
    assert crop.current_stage.id == "emergence"
    assert crop.current_stage.start_date == clock.now()
    assert crop.planting_date == clock.now()
    assert crop.predictions.yield_prediction.predicted_yield.amount == 160
    assert "crop.planted" in event_bus.topics()

    [notification] = crop_service.get_notifications(corn)
    assert notification.title == "Crop Planted Successfully"
    assert notification.type == NotificationType.STAGE_CHANGE


def test_unknown_crop_type_uses_corn_stages(crop_service):
    crop_id = crop_service.create_crop({"name": "Sorghum"})
    assert crop_service.get_crop(crop_id).current_stage.id == "emergence"


def test_create_crop_requires_name(crop_service):
    with pytest.raises(ValidationError):
        crop_service.create_crop({"variety": "unnamed"})


def test_advance_growth_stage(crop_service, corn, clock, event_bus):
    clock.advance(days=6, hours=1)

    assert crop_service.advance_growth_stage(corn, {"notes": "even stand", "health_score": 92})

    crop = crop_service.get_crop(corn)
    assert crop.status == CropStatus.GROWING
    assert crop.current_stage.id == "vegetative"
    assert crop.current_stage.start_date == clock.now()
    [record] = crop.growth_history
    assert record.stage_id == "emergence"
    assert record.actual_duration == 7
    assert record.notes == "even stand"
    assert "crop.stage_advanced" in event_bus.topics()
    assert crop_service.advance_growth_stage("crop_missing") is False


def test_final_stage_is_kept(crop_service, corn):
    for _ in range(3):
        crop_service.advance_growth_stage(corn)
    assert crop_service.get_crop(corn).current_stage.id == "maturity"

    assert crop_service.advance_growth_stage(corn) is True

    crop = crop_service.get_crop(corn)
    assert crop.current_stage.id == "maturity"
    assert len(crop.growth_history) == 4


def test_stage_progress_is_clamped(crop_service, corn):
    crop_service.update_growth_stage_progress(corn, 140)
    assert crop_service.get_crop(corn).current_stage.completion_percentage == 100.0
    crop_service.update_growth_stage_progress(corn, -3)
    assert crop_service.get_crop(corn).current_stage.completion_percentage == 0.0


def test_treatments(crop_service, corn):
    treatment_id = crop_service.add_treatment(corn, {"type": "fertilizer", "name": "UAN 32%", "cost": 1200})

    assert crop_service.update_treatment_effectiveness(corn, treatment_id, 85, ["minor leaf burn"])
    [treatment] = crop_service.get_treatment_history(corn)
    assert treatment.effectiveness == 85
    assert treatment.side_effects == ["minor leaf burn"]
    assert crop_service.update_treatment_effectiveness(corn, "treatment_missing", 50) is False
    with pytest.raises(NotFoundError):
        crop_service.add_treatment("crop_missing", {"name": "x"})


@pytest.mark.parametrize(
    "severity, priority",
    [
        ("critical", NotificationPriority.CRITICAL),
        ("high", NotificationPriority.HIGH),
        ("medium", NotificationPriority.MEDIUM),
        ("low", NotificationPriority.MEDIUM),
    ],
)
def test_pest_notification_priority(crop_service, corn, severity, priority):
    crop_service.add_pest_observation({"crop_id": corn, "pest_name": "Corn borer", "severity": severity})

    alert = next(n for n in crop_service.get_notifications(corn) if n.type == NotificationType.PEST_ALERT)
    assert alert.priority == priority
    assert alert.title == "insect Detection: Corn borer"


def test_pest_observation_for_unknown_crop(crop_service):
    with pytest.raises(NotFoundError):
        crop_service.add_pest_observation({"crop_id": "crop_missing", "pest_name": "Aphid"})


def test_active_pests_cover_fourteen_days(crop_service, corn, clock):
    crop_service.add_pest_observation({"crop_id": corn, "pest_name": "Aphid"})
    clock.advance(days=15)
    crop_service.add_pest_observation({"crop_id": corn, "pest_name": "Rootworm"})

    assert [p.pest_name for p in crop_service.get_active_pests(corn)] == ["Rootworm"]
    assert len(crop_service.get_pest_history(corn)) == 2


class TestYieldPrediction:
    def test_unknown_crop(self, crop_service):
        assert crop_service.update_yield_prediction("crop_missing") is None

    def test_baseline(self, crop_service, corn):
        prediction = crop_service.update_yield_prediction(corn)
        # no treatments yet: management factor 0.95
        assert prediction.predicted_yield.amount == 152.0
        assert prediction.predicted_yield.confidence == 60.0
        assert prediction.predicted_yield.unit == "bu/acre"

    def test_inputs_raise_confidence(self, crop_service, corn):
        crop_service.add_treatment(corn, {"type": "fertilizer", "name": "Starter"})
        crop_service.advance_growth_stage(corn)

        prediction = crop_service.update_yield_prediction(corn, weather={"rain": 1.2}, soil={"ph": 6.4})

        assert prediction.predicted_yield.amount == 176.0
        assert prediction.predicted_yield.confidence == 95.0
        assert prediction.factors["soil"]["ph"] == 6.4

    def test_stage_and_pests_reduce_yield(self, crop_service, corn):
        crop_service.advance_growth_stage(corn)
        crop_service.advance_growth_stage(corn)
        crop_service.add_pest_observation({"crop_id": corn, "pest_name": "Rootworm", "severity": "high"})

        prediction = crop_service.update_yield_prediction(corn)

        assert prediction.predicted_yield.amount == pytest.approx(160 * 0.95 * 0.95 * 0.9, abs=0.01)
        assert prediction.predicted_yield.confidence == 65.0
        assert prediction.factors["pests"]["risk_level"] == "high"

    def test_soybean_base_yield(self, crop_service):
        crop_id = crop_service.create_crop({"name": "Soybeans"})
        assert crop_service.update_yield_prediction(crop_id).predicted_yield.amount == pytest.approx(47.5)


def test_health_score(crop_service, corn):
    crop = crop_service.get_crop(corn)
    assert crop_service.calculate_health_score(crop) == 100.0

    crop_service.add_pest_observation({"crop_id": corn, "pest_name": "Rust", "pest_type": "disease", "severity": "high"})
    treatment_id = crop_service.add_treatment(corn, {"type": "fungicide", "name": "Headline"})
    crop_service.update_treatment_effectiveness(corn, treatment_id, 90)

    assert crop_service.calculate_health_score(crop) == 83.0


@pytest.mark.parametrize("score, grade", [(95, "Premium"), (85, "Good"), (70, "Average"), (50, "Below Average")])
def test_quality_grade(score, grade):
    assert quality_grade(score) == grade


def test_harvest(crop_service, corn, event_bus):
    assert crop_service.record_harvest(corn, {"yield_amount": 182, "quality_grade": "Premium"})

    crop = crop_service.get_crop(corn)
    assert crop.status == CropStatus.HARVESTED
    assert crop.actual_harvest_date is not None
    assert crop.harvest_data.yield_amount == 182
    assert "crop.harvested" in event_bus.topics()
    assert crop_service.record_harvest("crop_missing", {}) is False


def test_harvest_ready_crops(crop_service, clock):
    soon = crop_service.create_crop({"name": "Wheat", "expected_harvest_date": clock.now() + timedelta(days=5)})
    later = crop_service.create_crop({"name": "Wheat", "expected_harvest_date": clock.now() + timedelta(days=20)})
    planted = crop_service.create_crop({"name": "Wheat", "expected_harvest_date": clock.now() + timedelta(days=3)})
    for crop_id in (soon, later):
        crop_service.advance_growth_stage(crop_id)

    assert [c.id for c in crop_service.get_harvest_ready_crops()] == [soon]
    assert crop_service.get_crop(planted).status == CropStatus.PLANTED


def test_notifications_read_and_dismiss(crop_service, corn):
    notification_id = crop_service.create_notification(corn, "weather_warning", "high", "Frost", "Frost tonight")

    assert crop_service.mark_notification_read(notification_id)
    assert notification_id not in [n.id for n in crop_service.get_notifications(corn, unread_only=True)]
    assert crop_service.dismiss_notification(notification_id)
    assert crop_service.mark_notification_read("notif_missing") is False


def test_monitoring_cycle_counts_growing_crops(crop_service, corn, clock):
    crop_service.create_crop({"name": "Soybeans"})
    assert crop_service.run_monitoring_cycle() == {"stage_updates_due": 0, "pest_checks_due": 0}

    crop_service.advance_growth_stage(corn)
    assert crop_service.run_monitoring_cycle() == {"stage_updates_due": 0, "pest_checks_due": 1}

    crop_service.add_pest_observation({"crop_id": corn, "pest_name": "Aphid"})
    clock.advance(days=50)
    assert crop_service.run_monitoring_cycle() == {"stage_updates_due": 1, "pest_checks_due": 1}


def test_crop_and_field_analytics(crop_service, corn):
    crop_service.create_crop({"name": "Corn", "field_id": "field_7", "field_location": {"area": 20}})

    analytics = crop_service.get_crop_analytics(corn)
    assert analytics["crop"]["status"] == "planted"
    assert analytics["metrics"]["health_score"] == 100.0
    assert analytics["risk_assessment"][0]["type"] == "weather"
    assert len(analytics["recommendations"]) <= 5
    assert crop_service.get_crop_analytics("crop_missing") is None

    field = crop_service.get_field_analytics("field_7")
    assert field["summary"]["total_crops"] == 2
    assert field["summary"]["total_area"] == 60
    assert field["summary"]["total_predicted_yield"] == 320
    assert field["recommendations"] == ["Consider synchronized treatment for 2 crops in Emergence (VE) stage"]
    assert crop_service.get_field_analytics("field_missing") is None
