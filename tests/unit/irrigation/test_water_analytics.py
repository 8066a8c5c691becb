import pytest


def _run(irrigation_service, clock, zone_id, minutes):
    irrigation_service.start_irrigation(zone_id, duration=minutes)
    clock.advance(minutes=minutes)
    irrigation_service.stop_irrigation(zone_id)


def test_efficiency_without_history_reports_system_ratings(water_analytics, zone_id):
    assert water_analytics.calculate_water_efficiency(zone_id) == {
        "application_efficiency": 85.0,
        "distribution_uniformity": 85.0,
        "water_use_efficiency": 80.0,
        "total_water_used": 0.0,
        "average_cost_per_inch": 0.0,
    }


def test_efficiency_from_completed_events(water_analytics, irrigation_service, clock, zone_id):
    _run(irrigation_service, clock, zone_id, 30)
    _run(irrigation_service, clock, zone_id, 30)

    efficiency = water_analytics.calculate_water_efficiency(zone_id)

    assert efficiency["application_efficiency"] == 100.0
    assert efficiency["distribution_uniformity"] == 85.0
    assert efficiency["total_water_used"] == 0.5
    # each event: $5.25 for 0.25 in
    assert efficiency["average_cost_per_inch"] == 21.0


def test_cancelled_events_are_not_counted(water_analytics, irrigation_service, clock, zone_id):
    irrigation_service.start_irrigation(zone_id, duration=30)
    clock.advance(minutes=10)
    irrigation_service.cancel_irrigation(zone_id, "wind")

    assert water_analytics.calculate_water_efficiency(zone_id)["total_water_used"] == 0.0


def test_zone_analytics(water_analytics, irrigation_service, clock, zone_id):
    assert water_analytics.get_zone_analytics("zone_missing") is None

    sensor_id = irrigation_service.add_sensor(zone_id, {"type": "soil_moisture", "name": "Bed moisture"})
    irrigation_service.record_sensor_reading(zone_id, sensor_id, 42)
    _run(irrigation_service, clock, zone_id, 30)

    analytics = water_analytics.get_zone_analytics(zone_id)

    assert set(analytics) == {"zone", "efficiency", "irrigation", "sensors", "alerts", "water_budget", "recommendations"}
    assert analytics["zone"]["sensor_count"] == 1
    assert analytics["irrigation"]["events_last_30_days"] == 1
    assert analytics["irrigation"]["average_session_duration"] == 30.0
    assert analytics["sensors"]["soil_moisture"]["latest_value"] == 42.0
    assert analytics["water_budget"]["used"] == 0.25
    assert analytics["alerts"]["active"] >= 1


def test_recommendations_for_idle_zone_near_budget(water_analytics, irrigation_service, make_zone, clock):
    zone_id = make_zone(water_budget={"allocation": 0.3})
    _run(irrigation_service, clock, zone_id, 30)
    clock.advance(days=8)

    recommendations = water_analytics.generate_zone_recommendations(irrigation_service.get_zone(zone_id))

    assert "Monitor water usage closely - approaching budget limit" in recommendations
    assert "Consider setting up automated irrigation schedules" in recommendations
    assert len(recommendations) <= 5


def test_system_analytics(water_analytics, irrigation_service, make_zone, clock):
    first = make_zone()
    make_zone(name="Orchard", status="inactive")
    irrigation_service.update_system_status()
    irrigation_service.start_irrigation(first, duration=30)

    analytics = water_analytics.get_system_analytics()

    assert analytics["system"] == {
        "status": "online",
        "total_zones": 2,
        "active_zones": 1,
        "currently_irrigating": 1,
    }
    assert analytics["water"]["average_efficiency"] == pytest.approx(85.0)
    assert {row["name"] for row in analytics["zones"]} == {"North Field", "Orchard"}
