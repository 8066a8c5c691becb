def test_ping(client):
    for path in ("/api/health/", "/api/health/ping"):
        body = client.get(path).get_json()
        assert body["ok"] is True
        assert body["data"]["status"] == "ok"


def test_system_health(client):
    client.post("/api/irrigation/zones", json={"name": "North Field"})

    data = client.get("/api/health/system").get_json()["data"]

    assert data["status"] == "healthy"
    assert data["irrigation"]["zones"] == 1
    assert data["irrigation"]["system_status"] == "online"
    assert data["event_bus"]["mode"] == "inline"
    assert data["scheduler"]["running"] is False


def test_scheduler_health_lists_jobs(client):
    data = client.get("/api/health/scheduler").get_json()["data"]

    assert data["health"]["health"] == "unhealthy"
    assert {job["job_id"] for job in data["jobs"]} == {
        "irrigation_monitor",
        "financial_recurring_transactions_daily",
        "crop_monitor_daily",
    }

    crop_jobs = client.get("/api/health/scheduler", query_string={"namespace": "crop"}).get_json()["data"]["jobs"]
    assert [job["job_id"] for job in crop_jobs] == ["crop_monitor_daily"]


def test_scheduler_history(client, container):
    container.scheduler.run_now("financial.recurring_transactions")

    history = client.get("/api/health/scheduler/history", query_string={"limit": 5}).get_json()["data"]

    assert len(history) == 1
    assert history[0]["success"] is True


def test_unknown_api_route_returns_json_404(client):
    response = client.get("/api/does-not-exist")
    assert response.status_code == 404
    assert response.get_json()["ok"] is False
