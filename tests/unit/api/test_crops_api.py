import pytest

BASE = "/api/crops"


@pytest.fixture()
def crop(client):
    response = client.post(
        f"{BASE}/crops",
        json={"name": "Corn", "variety": "Pioneer P1197", "field_id": "field_7", "field_location": {"area": 40}},
    )
    assert response.status_code == 201
    return response.get_json()["data"]


def test_create_and_list_crops(client, crop):
    assert crop["id"].startswith("crop_")
    assert crop["status"] == "planted"
    assert crop["current_stage"]["id"] == "emergence"

    assert [c["id"] for c in client.get(f"{BASE}/crops").get_json()["data"]] == [crop["id"]]
    by_field = client.get(f"{BASE}/crops", query_string={"field_id": "field_7"}).get_json()["data"]
    assert len(by_field) == 1
    assert client.get(f"{BASE}/crops", query_string={"status": "harvested"}).get_json()["data"] == []


def test_create_crop_requires_name(client):
    assert client.post(f"{BASE}/crops", json={"variety": "x"}).status_code == 400


def test_update_and_delete_crop(client, crop):
    updated = client.put(f"{BASE}/crops/{crop['id']}", json={"variety": "DKC 62-08"})
    assert updated.get_json()["data"]["variety"] == "DKC 62-08"

    assert client.delete(f"{BASE}/crops/{crop['id']}").status_code == 200
    assert client.get(f"{BASE}/crops/{crop['id']}").status_code == 404


def test_growth_routes(client, crop):
    advanced = client.post(f"{BASE}/crops/{crop['id']}/advance-stage", json={"notes": "even stand"})
    data = advanced.get_json()["data"]
    assert data["current_stage"]["id"] == "vegetative"
    assert data["status"] == "growing"

    progress = client.post(f"{BASE}/crops/{crop['id']}/progress", json={"percentage": 150})
    assert progress.get_json()["data"]["completion_percentage"] == 100.0

    assert client.post(f"{BASE}/crops/crop_missing/advance-stage", json={}).status_code == 404


def test_treatments(client, crop):
    created = client.post(
        f"{BASE}/crops/{crop['id']}/treatments", json={"type": "fertilizer", "name": "UAN 32%", "cost": 900}
    )
    assert created.status_code == 201
    treatment_id = created.get_json()["data"]["treatment_id"]

    effectiveness = client.put(
        f"{BASE}/crops/{crop['id']}/treatments/{treatment_id}/effectiveness", json={"effectiveness": 80}
    )
    assert effectiveness.status_code == 200

    [treatment] = client.get(f"{BASE}/crops/{crop['id']}/treatments").get_json()["data"]
    assert treatment["effectiveness"] == 80

    assert client.post(f"{BASE}/crops/crop_missing/treatments", json={"name": "x"}).status_code == 404
    out_of_range = client.put(
        f"{BASE}/crops/{crop['id']}/treatments/{treatment_id}/effectiveness", json={"effectiveness": 120}
    )
    assert out_of_range.status_code == 400


def test_pests_and_notifications(client, crop):
    created = client.post(
        f"{BASE}/crops/{crop['id']}/pests", json={"pest_name": "Corn borer", "severity": "critical"}
    )
    assert created.status_code == 201

    active = client.get(f"{BASE}/crops/{crop['id']}/pests", query_string={"active_only": "1"}).get_json()["data"]
    assert [p["pest_name"] for p in active] == ["Corn borer"]

    notifications = client.get(f"{BASE}/notifications", query_string={"crop_id": crop["id"]}).get_json()["data"]
    titles = {n["title"]: n for n in notifications}
    assert titles["insect Detection: Corn borer"]["priority"] == "critical"

    notification_id = titles["Crop Planted Successfully"]["id"]
    assert client.post(f"{BASE}/notifications/{notification_id}/read").status_code == 200
    assert client.post(f"{BASE}/notifications/{notification_id}/dismiss").status_code == 200
    assert client.post(f"{BASE}/notifications/notif_missing/read").status_code == 404

    assert client.post(f"{BASE}/crops/crop_missing/pests", json={"pest_name": "Aphid"}).status_code == 404


def test_yield_prediction_and_harvest(client, crop):
    current = client.get(f"{BASE}/crops/{crop['id']}/yield-prediction").get_json()["data"]
    assert current["predicted_yield"]["amount"] == 160

    updated = client.post(f"{BASE}/crops/{crop['id']}/yield-prediction", json={}).get_json()["data"]
    assert updated["predicted_yield"]["amount"] == 152.0

    harvested = client.post(f"{BASE}/crops/{crop['id']}/harvest", json={"yield_amount": 175})
    assert harvested.get_json()["data"]["status"] == "harvested"
    assert client.post(f"{BASE}/crops/{crop['id']}/harvest", json={}).status_code == 400


def test_analytics_routes(client, crop):
    analytics = client.get(f"{BASE}/crops/{crop['id']}/analytics").get_json()["data"]
    assert analytics["metrics"]["health_score"] == 100.0

    field = client.get(f"{BASE}/fields/field_7/analytics").get_json()["data"]
    assert field["summary"]["total_crops"] == 1
    assert client.get(f"{BASE}/fields/field_missing/analytics").status_code == 404

    assert client.get(f"{BASE}/harvest-ready").get_json()["data"] == []
