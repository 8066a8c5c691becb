import pytest

BASE = "/api/equipment"


@pytest.fixture()
def tractor(client):
    response = client.post(
        f"{BASE}/",
        json={
            "name": "John Deere 8R",
            "category": "tractors",
            "type": "tractor",
            "purchase_date": "2022-06-03T00:00:00Z",
            "purchase_price": 110000,
            "depreciation": {"useful_life_years": 10, "salvage_value": 10000},
        },
    )
    assert response.status_code == 201
    return response.get_json()["data"]


def test_create_and_list(client, tractor):
    assert tractor["id"].startswith("equipment_")
    assert tractor["current_value"] == 110000
    assert tractor["next_maintenance_due"] == "2022-09-01T00:00:00+00:00"

    listed = client.get(f"{BASE}/", query_string={"category": "tractors"}).get_json()["data"]
    assert [e["id"] for e in listed] == [tractor["id"]]
    assert client.get(f"{BASE}/", query_string={"category": "spaceships"}).status_code == 400


def test_create_validation(client):
    assert client.post(f"{BASE}/", json={"category": "tools"}).status_code == 400
    assert client.post(f"{BASE}/", json={"name": "Baler", "year": 1800}).status_code == 400


def test_update_and_delete(client, tractor):
    updated = client.put(f"{BASE}/{tractor['id']}", json={"status": "maintenance", "assigned_to": "Dale"})
    data = updated.get_json()["data"]
    assert data["status"] == "maintenance"
    assert data["assigned_to"] == "Dale"

    assert client.delete(f"{BASE}/{tractor['id']}").status_code == 200
    assert client.get(f"{BASE}/{tractor['id']}").status_code == 404
    assert client.put(f"{BASE}/{tractor['id']}", json={"name": "x"}).status_code == 404


def test_records(client, tractor):
    maintained = client.post(
        f"{BASE}/{tractor['id']}/maintenance", json={"type": "routine", "labor_cost": 300, "parts_cost": 200}
    )
    assert maintained.status_code == 201
    assert maintained.get_json()["data"]["maintenance_history"][0]["total_cost"] == 500

    used = client.post(f"{BASE}/{tractor['id']}/usage", json={"hours_used": 6.5, "fuel_cost": 90})
    assert used.get_json()["data"]["total_hours"] == 6.5
    assert client.post(f"{BASE}/{tractor['id']}/usage", json={}).status_code == 400

    inspected = client.post(f"{BASE}/{tractor['id']}/inspections", json={"inspector": "Dale"})
    assert inspected.get_json()["data"]["last_inspection"] is not None

    assert client.post(f"{BASE}/equipment_missing/maintenance", json={}).status_code == 404


def test_static_routes_are_not_ids(client, tractor):
    schedule = client.get(f"{BASE}/maintenance/schedule")
    assert schedule.status_code == 200
    assert schedule.get_json()["data"][0]["equipment_id"] == tractor["id"]

    overview = client.get(f"{BASE}/analytics/overview").get_json()["data"]
    assert overview["total_equipment"] == 1


def test_cost_analysis(client, tractor):
    analysis = client.get(f"{BASE}/{tractor['id']}/cost-analysis").get_json()["data"]
    assert analysis["depreciation"]["annual_depreciation"] == 10000
    assert client.get(f"{BASE}/equipment_missing/cost-analysis").status_code == 404
