import pytest

from app.domain.exceptions import ValidationError
from app.services.application.financial_report_service import projection_confidence


@pytest.fixture()
def record(financial_service, category_id):
    def add(type_, code, amount, when, **extra):
        return financial_service.create_transaction(
            {
                "type": type_,
                "category_id": category_id(code),
                "amount": amount,
                "date": when,
                "status": "completed",
                **extra,
            }
        )

    return add


def test_kpis_cover_trailing_thirty_days(financial_reports, record):
    record("income", "CROP_SALES", 5000, "2024-05-20T00:00:00Z")
    record("expense", "FUEL", 2000, "2024-05-25T00:00:00Z")
    record("income", "CROP_SALES", 90000, "2024-01-05T00:00:00Z")

    kpis = {k["name"]: k for k in financial_reports.generate_financial_kpis()}

    assert list(kpis) == ["Gross Profit Margin", "Net Profit Margin", "Revenue per Acre", "Cost per Acre"]
    assert kpis["Gross Profit Margin"]["value"] == 60.0
    assert kpis["Gross Profit Margin"]["target_value"] == 30
    assert kpis["Revenue per Acre"]["value"] == 50.0
    assert kpis["Cost per Acre"]["value"] == 20.0
    assert "target_value" not in kpis["Cost per Acre"]


@pytest.mark.parametrize(
    "months_out, history, expected",
    [(0, 12, 90.0), (5, 12, 75.0), (0, 6, 45.0), (20, 6, 30.0), (40, 12, 40.0)],
)
def test_projection_confidence(months_out, history, expected):
    assert projection_confidence(months_out, history) == expected


def test_cash_flow_projection(financial_reports, record):
    record("income", "CROP_SALES", 12000, "2024-03-15T00:00:00Z")
    record("expense", "SEEDS", 6000, "2024-04-10T00:00:00Z")
    record("income", "CROP_SALES", 99999, "2023-05-31T00:00:00Z")

    projection = financial_reports.generate_cash_flow_projection(3)

    months = projection["monthly_projections"]
    assert [m["month"] for m in months] == ["2024-06-01", "2024-07-01", "2024-08-01"]
    # summer: income x1.2, expenses x1.1 on averages of 1000 / 500
    assert months[0]["projected_income"] == 1200.0
    assert months[0]["projected_expenses"] == 550.0
    assert months[2]["cumulative_cash_flow"] == 1950.0
    assert [m["confidence"] for m in months] == [90.0, 87.0, 84.0]
    assert financial_reports.get_projection(projection["id"]) is projection


def test_cash_flow_projection_applies_fall_multipliers(financial_reports, record, clock):
    record("income", "CROP_SALES", 1200, "2024-05-01T00:00:00Z")
    months = financial_reports.generate_cash_flow_projection(4)["monthly_projections"]
    assert months[3]["month"] == "2024-09-01"
    assert months[3]["projected_income"] == 180.0


def test_cash_flow_projection_needs_a_period(financial_reports):
    with pytest.raises(ValidationError):
        financial_reports.generate_cash_flow_projection(0)


def test_profit_loss_report_is_stored(financial_reports, record):
    record("income", "CROP_SALES", 8000, "2024-04-02T00:00:00Z")
    record("expense", "LABOR", 2000, "2024-04-03T00:00:00Z")

    report = financial_reports.generate_report("profit_loss", "2024-04-01", "2024-04-30", label="April")

    assert report["id"].startswith("report_")
    assert report["title"] == "PROFIT LOSS Report"
    assert report["period"]["label"] == "April"
    assert report["summary"] == {
        "total_income": 8000,
        "total_expenses": 2000,
        "net_profit": 6000,
        "profit_margin": 75.0,
    }
    assert report["data"]["expenses_by_category"] == {"Labor": 2000}
    assert len(report["data"]["transactions"]) == 2
    assert financial_reports.get_report(report["id"]) is report
    assert financial_reports.get_all_reports() == [report]


def test_unknown_report_type(financial_reports):
    with pytest.raises(ValidationError, match="Unknown report type"):
        financial_reports.generate_report("balance_sheet", "2024-01-01", "2024-12-31")


def test_cash_flow_report_runs_monthly_totals(financial_reports, record):
    record("income", "CROP_SALES", 500, "2024-02-10T00:00:00Z")
    record("expense", "FUEL", 200, "2024-02-11T00:00:00Z")
    record("expense", "FUEL", 100, "2024-03-01T00:00:00Z")

    months = financial_reports.generate_report("cash_flow", "2024-01-01", "2024-03-31")["data"]["months"]

    assert months == [
        {"month": "2024-02", "inflow": 500, "outflow": 200, "net": 300, "cumulative": 300},
        {"month": "2024-03", "inflow": 0, "outflow": 100, "net": -100, "cumulative": 200},
    ]


def test_budget_variance_report(financial_reports, financial_service, record, category_id):
    fuel = category_id("FUEL")
    budget_id = financial_service.create_budget(
        {"name": "Q2", "status": "active", "categories": [{"category_id": fuel, "budgeted_amount": 1000}]}
    )
    record("expense", "FUEL", 1200, "2024-05-01T00:00:00Z")

    data = financial_reports.generate_report("budget_variance", "2024-04-01", "2024-06-30")["data"]

    assert data["budget"]["id"] == budget_id
    [line] = data["lines"]
    assert line["category"] == "Fuel & Energy"
    assert line["variance"] == 200
    assert line["variance_percent"] == 20.0


def test_vendor_analysis_report(financial_reports, financial_service, record):
    big = financial_service.create_vendor({"name": "Co-op", "category": "fertilizer"})
    small = financial_service.create_vendor({"name": "Seed House", "category": "seeds"})
    record("expense", "FERTILIZERS", 3000, "2024-04-01T00:00:00Z", vendor_id=big)
    record("expense", "SEEDS", 400, "2024-04-02T00:00:00Z", vendor_id=small)

    vendors = financial_reports.generate_report("vendor_analysis", "2024-04-01", "2024-04-30")["data"]["vendors"]

    assert [v["name"] for v in vendors] == ["Co-op", "Seed House"]
    assert vendors[0]["period_spend"] == 3000
    assert vendors[0]["transactions"] == 1


def test_weather_impact_analysis(financial_reports, record):
    record(
        "expense",
        "SEEDS",
        900,
        "2024-05-02T00:00:00Z",
        weather_impact={"weather_condition": "drought", "estimated_cost_impact": 4000},
    )
    record(
        "expense",
        "EQUIPMENT",
        300,
        "2024-05-09T00:00:00Z",
        weather_impact={"weather_condition": "hail", "estimated_cost_impact": 1500.5},
    )
    record("expense", "FUEL", 50, "2024-05-10T00:00:00Z")

    impact = financial_reports.analyze_weather_impact("2024-05-01", "2024-05-31")

    assert impact["total_impact"] == 5500.5
    assert impact["impact_by_type"] == {"drought": 4000, "hail": 1500.5}
    assert len(impact["affected_transactions"]) == 2
    assert len(impact["recommendations"]) == 4
