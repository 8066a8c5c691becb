import pytest

BASE = "/api/financial"


@pytest.fixture()
def categories(client):
    listed = client.get(f"{BASE}/categories").get_json()["data"]
    return {c["code"]: c["id"] for c in listed}


def _post_transaction(client, **body):
    return client.post(f"{BASE}/transactions", json=body)


def test_categories_filter_by_type(client, categories):
    assert len(categories) == 7
    income = client.get(f"{BASE}/categories", query_string={"type": "income"}).get_json()["data"]
    assert {c["code"] for c in income} == {"CROP_SALES", "GOV_PAYMENTS"}


def test_create_transaction(client, categories):
    response = _post_transaction(
        client,
        type="expense",
        category_id=categories["FUEL"],
        amount=310.5,
        date="2024-04-12T10:00:00Z",
    )

    assert response.status_code == 201
    data = response.get_json()["data"]
    assert data["id"].startswith("txn_")
    assert data["status"] == "pending"
    assert data["date"] == "2024-04-12T10:00:00+00:00"

    fetched = client.get(f"{BASE}/transactions/{data['id']}").get_json()["data"]
    assert fetched["amount"] == 310.5


def test_create_transaction_validation(client, categories):
    negative = _post_transaction(client, type="expense", category_id=categories["FUEL"], amount=-1)
    assert negative.status_code == 400

    unknown_type = _post_transaction(client, type="barter", category_id=categories["FUEL"], amount=1)
    assert unknown_type.status_code == 400

    bad_date = _post_transaction(client, type="expense", category_id=categories["FUEL"], amount=1, date="soon")
    assert bad_date.status_code == 400


def test_update_and_delete_transaction(client, categories):
    txn_id = _post_transaction(
        client, type="income", category_id=categories["CROP_SALES"], amount=900
    ).get_json()["data"]["id"]

    updated = client.put(f"{BASE}/transactions/{txn_id}", json={"status": "completed"})
    assert updated.get_json()["data"]["status"] == "completed"

    assert client.delete(f"{BASE}/transactions/{txn_id}").status_code == 200
    assert client.get(f"{BASE}/transactions/{txn_id}").status_code == 404
    assert client.put(f"{BASE}/transactions/{txn_id}", json={"amount": 1}).status_code == 404


def test_list_transactions_by_date_range(client, categories):
    for day, amount in (("2024-03-31", 1), ("2024-04-01", 2), ("2024-04-30", 3), ("2024-05-01", 4)):
        _post_transaction(
            client, type="expense", category_id=categories["SEEDS"], amount=amount, date=f"{day}T12:00:00Z"
        )

    listed = client.get(
        f"{BASE}/transactions", query_string={"start_date": "2024-04-01", "end_date": "2024-04-30"}
    ).get_json()["data"]

    assert sorted(t["amount"] for t in listed) == [2, 3]


def test_vendors_and_customers(client):
    vendor = client.post(f"{BASE}/vendors", json={"name": "Agri Supply", "category": "seeds"})
    assert vendor.status_code == 201
    vendor_id = vendor.get_json()["data"]["id"]
    assert client.get(f"{BASE}/vendors/{vendor_id}").get_json()["data"]["name"] == "Agri Supply"
    assert client.get(f"{BASE}/vendors/vendor_missing").status_code == 404

    customer = client.post(f"{BASE}/customers", json={"name": "Grain Co"})
    assert customer.status_code == 201
    assert len(client.get(f"{BASE}/customers").get_json()["data"]) == 1
    assert client.post(f"{BASE}/customers", json={}).status_code == 400


def test_payment_methods(client):
    created = client.post(f"{BASE}/payment-methods", json={"name": "Farm card", "last_four_digits": "4242"})
    assert created.status_code == 201
    assert client.post(f"{BASE}/payment-methods", json={"name": "x", "last_four_digits": "42"}).status_code == 400


def test_budget_lifecycle(client, categories):
    created = client.post(
        f"{BASE}/budgets",
        json={
            "name": "2024 Plan",
            "start_date": "2024-01-01",
            "end_date": "2024-12-31",
            "categories": [{"category_id": categories["FUEL"], "budgeted_amount": 5000}],
            "total_budgeted_income": 20000,
            "total_budgeted_expenses": 5000,
        },
    )
    assert created.status_code == 201
    budget = created.get_json()["data"]
    assert budget["status"] == "draft"
    assert budget["projected_profit"] == 15000

    assert client.get(f"{BASE}/budgets/active").get_json()["data"] is None
    client.put(f"{BASE}/budgets/{budget['id']}", json={"status": "active"})
    assert client.get(f"{BASE}/budgets/active").get_json()["data"]["id"] == budget["id"]

    assert client.delete(f"{BASE}/budgets/{budget['id']}").status_code == 200
    assert client.get(f"{BASE}/budgets/{budget['id']}").status_code == 404


def test_profitability_and_kpis(client, categories):
    _post_transaction(
        client,
        type="income",
        category_id=categories["CROP_SALES"],
        amount=4000,
        date="2024-04-10T00:00:00Z",
        status="completed",
    )

    analysis = client.get(
        f"{BASE}/analysis/profitability", query_string={"start_date": "2024-04-01", "end_date": "2024-04-30"}
    ).get_json()["data"]
    assert analysis["total_revenue"] == 4000

    kpis = client.get(f"{BASE}/kpis").get_json()["data"]
    assert [k["name"] for k in kpis] == ["Gross Profit Margin", "Net Profit Margin", "Revenue per Acre", "Cost per Acre"]


def test_cash_flow_projection(client):
    response = client.post(f"{BASE}/cash-flow", json={"periods": 3})
    assert response.status_code == 201
    assert len(response.get_json()["data"]["monthly_projections"]) == 3
    assert client.post(f"{BASE}/cash-flow", json={"periods": 0}).status_code == 400


def test_reports(client):
    response = client.post(
        f"{BASE}/reports", json={"type": "profit_loss", "start_date": "2024-01-01", "end_date": "2024-03-31"}
    )
    assert response.status_code == 201
    report = response.get_json()["data"]
    assert report["title"] == "PROFIT LOSS Report"

    assert client.get(f"{BASE}/reports/{report['id']}").get_json()["data"]["id"] == report["id"]
    assert [r["id"] for r in client.get(f"{BASE}/reports").get_json()["data"]] == [report["id"]]
    assert client.get(f"{BASE}/reports/report_missing").status_code == 404

    bad_type = client.post(f"{BASE}/reports", json={"type": "balance_sheet", "start_date": "x", "end_date": "y"})
    assert bad_type.status_code == 400


def test_weather_impact_and_recurring(client):
    impact = client.get(
        f"{BASE}/weather-impact", query_string={"start_date": "2024-01-01", "end_date": "2024-12-31"}
    ).get_json()["data"]
    assert impact["total_impact"] == 0

    processed = client.post(f"{BASE}/recurring/process").get_json()["data"]
    assert processed == {"created": [], "count": 0}
