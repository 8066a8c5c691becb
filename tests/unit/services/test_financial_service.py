from datetime import date, datetime, timezone

import pytest

from app.domain.exceptions import ValidationError
from app.enums.financial import RecurringFrequency, Season
from app.services.application.financial_service import (
    FinancialService,
    add_months,
    as_range_bound,
    get_season,
    next_recurring_date,
)


def _utc(*args):
    return datetime(*args, tzinfo=timezone.utc)


@pytest.fixture()
def ledger(financial_service, category_id):
    """Sales and costs spread over 2024 Q2, all completed unless noted."""

    def add(type_, code, amount, when, **extra):
        return financial_service.create_transaction(
            {
                "type": type_,
                "category_id": category_id(code),
                "amount": amount,
                "date": when,
                "status": extra.pop("status", "completed"),
                **extra,
            }
        )

    return add


# ---------------------------------------------------------------------------
# Module helpers
# ---------------------------------------------------------------------------


def test_add_months_clamps_day():
    assert add_months(_utc(2024, 1, 31), 1) == _utc(2024, 2, 29)
    assert add_months(_utc(2023, 11, 30), 3) == _utc(2024, 2, 29)
    assert add_months(_utc(2024, 3, 15), -3) == _utc(2023, 12, 15)


def test_next_recurring_date():
    start = _utc(2024, 1, 31)
    assert next_recurring_date(start, RecurringFrequency.DAILY, 2) == _utc(2024, 2, 2)
    assert next_recurring_date(start, RecurringFrequency.WEEKLY) == _utc(2024, 2, 7)
    assert next_recurring_date(start, RecurringFrequency.QUARTERLY) == _utc(2024, 4, 30)
    assert next_recurring_date(start, RecurringFrequency.ANNUALLY) == _utc(2025, 1, 31)


@pytest.mark.parametrize(
    "day, season",
    [
        (date(2024, 3, 1), Season.SPRING),
        (date(2024, 6, 1), Season.SUMMER),
        (date(2024, 11, 30), Season.FALL),
        (date(2024, 12, 1), Season.WINTER),
        (date(2024, 2, 29), Season.WINTER),
    ],
)
def test_get_season(day, season):
    assert get_season(day) == season


def test_as_range_bound():
    assert as_range_bound("2024-06-30", end=True) == datetime(2024, 6, 30, 23, 59, 59, 999999, tzinfo=timezone.utc)
    assert as_range_bound(date(2024, 6, 1)) == _utc(2024, 6, 1)
    assert as_range_bound("2024-06-01T12:00:00Z") == _utc(2024, 6, 1, 12)
    with pytest.raises(ValidationError):
        as_range_bound("2024-13-45")
    with pytest.raises(ValidationError):
        as_range_bound("not a date")


# ---------------------------------------------------------------------------
# Transactions
# ---------------------------------------------------------------------------


def test_default_categories_are_seeded(financial_service):
    codes = {c.code for c in financial_service.get_all_categories()}
    assert codes == {"CROP_SALES", "GOV_PAYMENTS", "SEEDS", "FERTILIZERS", "FUEL", "LABOR", "EQUIPMENT"}
    assert len(financial_service.get_income_categories()) == 2
    assert len(financial_service.get_expense_categories()) == 5
    assert FinancialService(seed_defaults=False).get_all_categories() == []


def test_create_transaction_defaults_and_event(financial_service, event_bus, clock, category_id):
    txn_id = financial_service.create_transaction({"category_id": category_id("FUEL"), "amount": 120})

    txn = financial_service.get_transaction(txn_id)
    assert txn.date == clock.now()
    assert txn.type.value == "expense"
    assert txn.status.value == "pending"
    assert "financial.transaction_created" in event_bus.topics()


def test_negative_amount_is_rejected(financial_service):
    with pytest.raises(ValidationError):
        financial_service.create_transaction({"amount": -5})


def test_date_range_is_inclusive(financial_service, ledger):
    ledger("expense", "FUEL", 10, "2024-06-01T00:00:00Z")
    ledger("expense", "FUEL", 20, "2024-06-30T18:45:00Z")
    ledger("expense", "FUEL", 30, "2024-07-01T00:00:00Z")

    in_june = financial_service.get_transactions_by_date_range("2024-06-01", "2024-06-30")

    assert sorted(t.amount for t in in_june) == [10, 20]


def test_transactions_are_listed_newest_first(financial_service, ledger, category_id):
    ledger("expense", "FUEL", 1, "2024-04-01T00:00:00Z")
    ledger("expense", "SEEDS", 2, "2024-05-01T00:00:00Z", crop_id="crop_1")

    assert [t.amount for t in financial_service.get_all_transactions()] == [2, 1]
    assert [t.amount for t in financial_service.get_transactions_by_category(category_id("SEEDS"))] == [2]
    assert [t.amount for t in financial_service.get_transactions_by_crop("crop_1")] == [2]


def test_party_totals_follow_completed_transactions(financial_service, ledger):
    vendor_id = financial_service.create_vendor({"name": "Agri Supply", "category": "seeds"})
    customer_id = financial_service.create_customer({"name": "Grain Co", "type": "elevator"})

    first = ledger("expense", "SEEDS", 400, "2024-04-01T00:00:00Z", vendor_id=vendor_id)
    ledger("expense", "SEEDS", 100, "2024-04-02T00:00:00Z", vendor_id=vendor_id)
    ledger("expense", "SEEDS", 999, "2024-04-03T00:00:00Z", vendor_id=vendor_id, status="pending")
    ledger("income", "CROP_SALES", 2500, "2024-05-01T00:00:00Z", customer_id=customer_id)

    vendor = financial_service.get_vendor(vendor_id)
    assert vendor.total_spent == 500
    assert vendor.average_order_value == 250
    assert vendor.last_transaction_date == _utc(2024, 4, 2)
    assert financial_service.get_customer(customer_id).total_revenue == 2500

    financial_service.update_transaction(first, {"status": "cancelled"})
    assert vendor.total_spent == 100

    financial_service.delete_transaction(first)
    assert financial_service.delete_transaction(first) is False
    assert financial_service.update_transaction(first, {"amount": 1}) is False


def test_reference_data_requires_names(financial_service):
    for create in (
        financial_service.create_vendor,
        financial_service.create_customer,
        financial_service.create_category,
        financial_service.create_budget,
    ):
        with pytest.raises(ValidationError):
            create({})
    assert financial_service.category_name(None) == "Uncategorized"


def test_budget_projected_profit_and_active_lookup(financial_service):
    budget_id = financial_service.create_budget(
        {"name": "2024 Plan", "total_budgeted_income": 50000, "total_budgeted_expenses": 32000}
    )
    assert financial_service.get_budget(budget_id).projected_profit == 18000
    assert financial_service.get_active_budget() is None

    financial_service.update_budget(budget_id, {"status": "active"})
    assert financial_service.get_active_budget().id == budget_id


# ---------------------------------------------------------------------------
# Analysis
# ---------------------------------------------------------------------------


def test_profitability_analysis(financial_service, ledger, crop_service):
    crop_id = crop_service.create_crop({"name": "Corn", "variety": "Pioneer", "field_location": {"area": 40}})
    ledger("income", "CROP_SALES", 10000, "2024-06-10T00:00:00Z", crop_id=crop_id)
    ledger("expense", "SEEDS", 2000, "2024-04-10T00:00:00Z", crop_id=crop_id)
    ledger("expense", "FUEL", 1000, "2024-05-10T00:00:00Z")
    ledger("expense", "LABOR", 5000, "2024-05-11T00:00:00Z", status="pending")
    ledger("income", "GOV_PAYMENTS", 500, "2024-05-12T00:00:00Z", crop_id="crop_unknown")

    analysis = financial_service.calculate_profitability_analysis("2024-04-01", "2024-06-30")

    assert analysis["total_revenue"] == 10500
    assert analysis["total_expenses"] == 3000
    assert analysis["net_profit"] == 7500
    assert analysis["net_margin"] == pytest.approx(71.43)
    assert analysis["revenue_by_category"] == {"Crop Sales": 10000, "Government Payments": 500}
    assert analysis["expenses_by_category"] == {"Seeds & Plants": 2000, "Fuel & Energy": 1000}

    crops = {row["crop_id"]: row for row in analysis["crop_profitability"]}
    assert crops[crop_id]["crop_name"] == "Corn"
    assert crops[crop_id]["acres"] == 40
    assert crops[crop_id]["profit_per_acre"] == 200
    assert crops[crop_id]["roi"] == 400
    assert crops["crop_unknown"]["acres"] == 25

    seasons = {row["season"]: row for row in analysis["seasonal_trends"]}
    assert seasons["Spring"]["expenses"] == 3000
    assert seasons["Spring"]["revenue"] == 500
    assert seasons["Summer"]["revenue"] == 10000
    assert seasons["Winter"]["margin"] == 0.0


def test_empty_period_has_zero_margins(financial_service):
    analysis = financial_service.calculate_profitability_analysis("2020-01-01", "2020-12-31")
    assert analysis["net_margin"] == 0.0
    assert analysis["crop_profitability"] == []


# ---------------------------------------------------------------------------
# Recurring transactions
# ---------------------------------------------------------------------------


def test_recurring_catches_up_every_due_occurrence(financial_service, event_bus, category_id):
    template_id = financial_service.create_transaction(
        {
            "category_id": category_id("LABOR"),
            "amount": 1500,
            "date": "2024-01-31T09:00:00Z",
            "status": "completed",
            "recurring": {"frequency": "monthly"},
        }
    )
    template = financial_service.get_transaction(template_id)
    assert template.recurring.next_due_date == _utc(2024, 2, 29, 9)

    created = financial_service.process_recurring_transactions(_utc(2024, 4, 30))

    assert [financial_service.get_transaction(t).date for t in created] == [
        _utc(2024, 2, 29, 9),
        _utc(2024, 3, 29, 9),
        _utc(2024, 4, 29, 9),
    ]
    assert all(financial_service.get_transaction(t).recurring is None for t in created)
    assert template.recurring.next_due_date == _utc(2024, 5, 29, 9)
    assert "financial.recurring_processed" in event_bus.topics()

    assert financial_service.process_recurring_transactions(_utc(2024, 5, 1)) == []


def test_recurring_template_stops_after_end_date(financial_service, category_id):
    template_id = financial_service.create_transaction(
        {
            "category_id": category_id("FUEL"),
            "amount": 80,
            "date": "2024-01-31T00:00:00Z",
            "recurring": {"frequency": "monthly", "end_date": "2024-03-15T00:00:00Z"},
        }
    )

    created = financial_service.process_recurring_transactions(_utc(2024, 6, 1))

    assert len(created) == 1
    assert financial_service.get_transaction(template_id).recurring.is_active is False
