"""
Financial Management Service
============================

In-memory ledger for farm transactions plus the reference data they point
at (categories, vendors, customers, payment methods) and budgets.

Provides:
- Transaction CRUD and filters (date range is inclusive at both ends)
- Vendor / customer totals recomputed from completed transactions
- Profitability analysis by category, crop and season
- Daily processing of recurring transaction templates
"""

from __future__ import annotations

import calendar
import logging
import threading
import uuid
from collections import defaultdict
from datetime import date, datetime, time, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional

from app.domain.exceptions import ValidationError
from app.domain.financial import (
    Budget,
    Category,
    Customer,
    PaymentMethod,
    Transaction,
    Vendor,
)
from app.enums.events import FinancialEvent
from app.enums.financial import (
    BudgetStatus,
    RecurringFrequency,
    Season,
    TransactionType,
)
from app.utils.concurrency import synchronized
from app.utils.time import Clock, SystemClock, coerce_datetime

logger = logging.getLogger(__name__)

UNCATEGORIZED = "Uncategorized"
DEFAULT_CROP_ACRES = 25.0

DEFAULT_CATEGORIES: List[Dict[str, Any]] = [
    {
        "name": "Crop Sales",
        "type": "income",
        "code": "CROP_SALES",
        "description": "Revenue from crop sales",
        "tax_deductible": False,
        "subcategories": ["Grain Sales", "Produce Sales", "Specialty Crops"],
    },
    {
        "name": "Government Payments",
        "type": "income",
        "code": "GOV_PAYMENTS",
        "description": "Government subsidies and payments",
        "tax_deductible": False,
        "subcategories": ["Conservation Payments", "Insurance Payments", "Disaster Relief"],
    },
    {
        "name": "Seeds & Plants",
        "type": "expense",
        "code": "SEEDS",
        "description": "Cost of seeds and planting materials",
        "tax_deductible": True,
        "subcategories": ["Certified Seeds", "Hybrid Seeds", "Organic Seeds"],
    },
    {
        "name": "Fertilizers",
        "type": "expense",
        "code": "FERTILIZERS",
        "description": "Fertilizer and soil amendment costs",
        "tax_deductible": True,
        "subcategories": ["Nitrogen", "Phosphorus", "Potassium", "Organic Fertilizers"],
    },
    {
        "name": "Fuel & Energy",
        "type": "expense",
        "code": "FUEL",
        "description": "Fuel and energy costs",
        "tax_deductible": True,
        "subcategories": ["Diesel", "Gasoline", "Electricity", "Propane"],
    },
    {
        "name": "Labor",
        "type": "expense",
        "code": "LABOR",
        "description": "Labor costs including wages and benefits",
        "tax_deductible": True,
        "subcategories": ["Seasonal Labor", "Full-time Employees", "Contract Labor"],
    },
    {
        "name": "Equipment & Maintenance",
        "type": "expense",
        "code": "EQUIPMENT",
        "description": "Equipment purchases and maintenance",
        "tax_deductible": True,
        "subcategories": ["Equipment Purchase", "Repairs", "Maintenance", "Parts"],
    },
]


def _new_id(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex[:12]}"


def add_months(value: datetime, months: int) -> datetime:
    """Shift by calendar months, clamping the day to the target month's length."""
    index = value.month - 1 + months
    year = value.year + index // 12
    month = index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def next_recurring_date(current: datetime, frequency: RecurringFrequency, interval: int = 1) -> datetime:
    step = max(1, int(interval))
    if frequency == RecurringFrequency.DAILY:
        return current + timedelta(days=step)
    if frequency == RecurringFrequency.WEEKLY:
        return current + timedelta(weeks=step)
    if frequency == RecurringFrequency.MONTHLY:
        return add_months(current, step)
    if frequency == RecurringFrequency.QUARTERLY:
        return add_months(current, 3 * step)
    return add_months(current, 12 * step)


def get_season(value: date) -> Season:
    """Northern-hemisphere season of a date (March-May is Spring)."""
    month = value.month - 1
    if 2 <= month <= 4:
        return Season.SPRING
    if 5 <= month <= 7:
        return Season.SUMMER
    if 8 <= month <= 10:
        return Season.FALL
    return Season.WINTER


def as_range_bound(value: Any, *, end: bool = False) -> datetime:
    """Normalise a date/datetime/ISO string into an aware range bound.

    A bare date covers the whole day, so an end bound lands on 23:59:59.
    """
    if isinstance(value, date) and not isinstance(value, datetime):
        value = datetime.combine(value, time.max if end else time.min, tzinfo=timezone.utc)
    elif isinstance(value, str) and len(value.strip()) == 10:
        try:
            day = date.fromisoformat(value.strip())
        except ValueError:
            raise ValidationError(f"Invalid date: {value!r}") from None
        return as_range_bound(day, end=end)
    parsed = coerce_datetime(value)
    if parsed is None:
        raise ValidationError(f"Invalid date: {value!r}")
    return parsed


class FinancialService:
    """Transactions, reference data, budgets and profitability analysis."""

    def __init__(
        self,
        *,
        clock: Optional[Clock] = None,
        event_bus: Optional[Any] = None,
        crop_lookup: Optional[Callable[[str], Any]] = None,
        seed_defaults: bool = True,
    ) -> None:
        """
        Args:
            clock: Time source for timestamps and recurring processing.
            event_bus: Optional bus for transaction events.
            crop_lookup: Resolves a crop id to a crop record (name and acreage)
                for crop profitability; unknown crops fall back to 25 acres.
            seed_defaults: Create the seven default categories.
        """
        self._clock = clock or SystemClock()
        self._event_bus = event_bus
        self._crop_lookup = crop_lookup
        self._lock = threading.RLock()

        self._transactions: Dict[str, Transaction] = {}
        self._categories: Dict[str, Category] = {}
        self._vendors: Dict[str, Vendor] = {}
        self._customers: Dict[str, Customer] = {}
        self._payment_methods: Dict[str, PaymentMethod] = {}
        self._budgets: Dict[str, Budget] = {}

        if seed_defaults:
            for category in DEFAULT_CATEGORIES:
                self.create_category(category)

    def set_crop_lookup(self, crop_lookup: Callable[[str], Any]) -> None:
        self._crop_lookup = crop_lookup

    def _publish(self, topic, payload: Dict[str, Any]) -> None:
        if self._event_bus is not None:
            self._event_bus.publish(topic, payload)

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    @synchronized
    def create_transaction(self, data: Dict[str, Any]) -> str:
        payload = {k: v for k, v in (data or {}).items() if k not in Transaction.PROTECTED_FIELDS}
        transaction = Transaction.from_dict(payload)
        if transaction.amount < 0:
            raise ValidationError("Transaction amount cannot be negative")

        now = self._clock.now()
        transaction.id = _new_id("txn")
        transaction.date = transaction.date or now
        transaction.created_at = now
        transaction.updated_at = now

        recurring = transaction.recurring
        if recurring is not None and recurring.is_active and recurring.next_due_date is None:
            recurring.start_date = recurring.start_date or transaction.date
            recurring.next_due_date = next_recurring_date(
                recurring.start_date, recurring.frequency, recurring.interval
            )

        self._transactions[transaction.id] = transaction
        self._refresh_party_totals(transaction.vendor_id, transaction.customer_id)

        logger.info(
            "Created %s transaction %s for %.2f %s",
            transaction.type.value,
            transaction.id,
            transaction.amount,
            transaction.currency,
        )
        self._publish(FinancialEvent.TRANSACTION_CREATED, transaction.to_dict())
        return transaction.id

    def get_transaction(self, transaction_id: str) -> Optional[Transaction]:
        return self._transactions.get(transaction_id)

    def get_all_transactions(self) -> List[Transaction]:
        with self._lock:
            return sorted(self._transactions.values(), key=lambda t: t.date or t.created_at, reverse=True)

    def get_transactions_by_date_range(self, start: Any, end: Any) -> List[Transaction]:
        start_dt = as_range_bound(start)
        end_dt = as_range_bound(end, end=True)
        return [t for t in self.get_all_transactions() if t.date is not None and start_dt <= t.date <= end_dt]

    def get_transactions_by_category(self, category_id: str) -> List[Transaction]:
        return [t for t in self.get_all_transactions() if t.category_id == category_id]

    def get_transactions_by_crop(self, crop_id: str) -> List[Transaction]:
        return [t for t in self.get_all_transactions() if t.crop_id == crop_id]

    @synchronized
    def update_transaction(self, transaction_id: str, updates: Dict[str, Any]) -> bool:
        transaction = self._transactions.get(transaction_id)
        if transaction is None:
            return False
        previous_parties = (transaction.vendor_id, transaction.customer_id)
        transaction.apply_updates(updates or {}, protected=Transaction.PROTECTED_FIELDS)
        transaction.updated_at = self._clock.now()
        self._refresh_party_totals(*previous_parties)
        self._refresh_party_totals(transaction.vendor_id, transaction.customer_id)
        return True

    @synchronized
    def delete_transaction(self, transaction_id: str) -> bool:
        transaction = self._transactions.pop(transaction_id, None)
        if transaction is None:
            return False
        self._refresh_party_totals(transaction.vendor_id, transaction.customer_id)
        return True

    def _refresh_party_totals(self, vendor_id: Optional[str], customer_id: Optional[str]) -> None:
        """Recompute vendor/customer totals from their completed transactions."""
        vendor = self._vendors.get(vendor_id) if vendor_id else None
        if vendor is not None:
            spent = [
                t
                for t in self._transactions.values()
                if t.vendor_id == vendor.id and t.is_completed and t.type == TransactionType.EXPENSE
            ]
            vendor.total_spent = round(sum(t.amount for t in spent), 2)
            vendor.average_order_value = round(vendor.total_spent / len(spent), 2) if spent else 0.0
            vendor.last_transaction_date = max((t.date for t in spent if t.date), default=None)

        customer = self._customers.get(customer_id) if customer_id else None
        if customer is not None:
            earned = [
                t
                for t in self._transactions.values()
                if t.customer_id == customer.id and t.is_completed and t.is_income
            ]
            customer.total_revenue = round(sum(t.amount for t in earned), 2)
            customer.average_order_value = round(customer.total_revenue / len(earned), 2) if earned else 0.0
            customer.last_transaction_date = max((t.date for t in earned if t.date), default=None)

    # ------------------------------------------------------------------
    # Categories, vendors, customers, payment methods
    # ------------------------------------------------------------------

    @synchronized
    def create_category(self, data: Dict[str, Any]) -> str:
        category = Category.from_dict({k: v for k, v in (data or {}).items() if k != "id"})
        if not category.name:
            raise ValidationError("Category name is required")
        category.id = _new_id("cat")
        self._categories[category.id] = category
        return category.id

    def get_category(self, category_id: str) -> Optional[Category]:
        return self._categories.get(category_id)

    def get_category_by_code(self, code: str) -> Optional[Category]:
        return next((c for c in self._categories.values() if c.code == code), None)

    def get_all_categories(self) -> List[Category]:
        return list(self._categories.values())

    def get_income_categories(self) -> List[Category]:
        return [c for c in self._categories.values() if c.type == TransactionType.INCOME]

    def get_expense_categories(self) -> List[Category]:
        return [c for c in self._categories.values() if c.type == TransactionType.EXPENSE]

    def category_name(self, category_id: Optional[str]) -> str:
        category = self._categories.get(category_id) if category_id else None
        return category.name if category else UNCATEGORIZED

    @synchronized
    def create_vendor(self, data: Dict[str, Any]) -> str:
        blocked = {"id", "total_spent", "average_order_value", "last_transaction_date"}
        vendor = Vendor.from_dict({k: v for k, v in (data or {}).items() if k not in blocked})
        if not vendor.name:
            raise ValidationError("Vendor name is required")
        vendor.id = _new_id("vendor")
        self._vendors[vendor.id] = vendor
        return vendor.id

    def get_vendor(self, vendor_id: str) -> Optional[Vendor]:
        return self._vendors.get(vendor_id)

    def get_all_vendors(self) -> List[Vendor]:
        return list(self._vendors.values())

    @synchronized
    def create_customer(self, data: Dict[str, Any]) -> str:
        blocked = {"id", "total_revenue", "average_order_value", "last_transaction_date"}
        customer = Customer.from_dict({k: v for k, v in (data or {}).items() if k not in blocked})
        if not customer.name:
            raise ValidationError("Customer name is required")
        customer.id = _new_id("customer")
        self._customers[customer.id] = customer
        return customer.id

    def get_customer(self, customer_id: str) -> Optional[Customer]:
        return self._customers.get(customer_id)

    def get_all_customers(self) -> List[Customer]:
        return list(self._customers.values())

    @synchronized
    def create_payment_method(self, data: Dict[str, Any]) -> str:
        method = PaymentMethod.from_dict({k: v for k, v in (data or {}).items() if k != "id"})
        method.id = _new_id("pm")
        self._payment_methods[method.id] = method
        return method.id

    def get_payment_method(self, method_id: str) -> Optional[PaymentMethod]:
        return self._payment_methods.get(method_id)

    def get_all_payment_methods(self) -> List[PaymentMethod]:
        return list(self._payment_methods.values())

    # ------------------------------------------------------------------
    # Budgets
    # ------------------------------------------------------------------

    @synchronized
    def create_budget(self, data: Dict[str, Any]) -> str:
        budget = Budget.from_dict({k: v for k, v in (data or {}).items() if k not in Budget.PROTECTED_FIELDS})
        if not budget.name:
            raise ValidationError("Budget name is required")
        now = self._clock.now()
        budget.id = _new_id("budget")
        budget.created_at = now
        budget.updated_at = now
        if not budget.projected_profit:
            budget.projected_profit = budget.total_budgeted_income - budget.total_budgeted_expenses
        self._budgets[budget.id] = budget
        return budget.id

    def get_budget(self, budget_id: str) -> Optional[Budget]:
        return self._budgets.get(budget_id)

    def get_all_budgets(self) -> List[Budget]:
        return list(self._budgets.values())

    def get_active_budget(self) -> Optional[Budget]:
        return next((b for b in self._budgets.values() if b.status == BudgetStatus.ACTIVE), None)

    @synchronized
    def update_budget(self, budget_id: str, updates: Dict[str, Any]) -> bool:
        budget = self._budgets.get(budget_id)
        if budget is None:
            return False
        budget.apply_updates(updates or {}, protected=Budget.PROTECTED_FIELDS)
        budget.updated_at = self._clock.now()
        return True

    @synchronized
    def delete_budget(self, budget_id: str) -> bool:
        return self._budgets.pop(budget_id, None) is not None

    # ------------------------------------------------------------------
    # Analysis
    # ------------------------------------------------------------------

    def _crop_details(self, crop_id: str) -> tuple[str, float]:
        crop = self._crop_lookup(crop_id) if self._crop_lookup else None
        if crop is None:
            return crop_id, DEFAULT_CROP_ACRES
        acres = crop.field_location.area or DEFAULT_CROP_ACRES
        return crop.name or crop_id, acres

    def calculate_crop_profitability(self, transactions: List[Transaction]) -> List[Dict[str, Any]]:
        totals: Dict[str, Dict[str, float]] = defaultdict(lambda: {"revenue": 0.0, "costs": 0.0})
        for t in transactions:
            if not t.crop_id or not t.is_completed:
                continue
            totals[t.crop_id]["revenue" if t.is_income else "costs"] += t.amount

        rows = []
        for crop_id, data in totals.items():
            name, acres = self._crop_details(crop_id)
            profit = data["revenue"] - data["costs"]
            rows.append(
                {
                    "crop_id": crop_id,
                    "crop_name": name,
                    "acres": acres,
                    "revenue": round(data["revenue"], 2),
                    "direct_costs": round(data["costs"], 2),
                    "indirect_costs": 0.0,
                    "gross_profit": round(profit, 2),
                    "net_profit": round(profit, 2),
                    "profit_per_acre": round(profit / acres, 2) if acres > 0 else 0.0,
                    "margin": round(profit / data["revenue"] * 100, 2) if data["revenue"] > 0 else 0.0,
                    "roi": round(profit / data["costs"] * 100, 2) if data["costs"] > 0 else 0.0,
                }
            )
        return rows

    @staticmethod
    def calculate_seasonal_trends(transactions: List[Transaction]) -> List[Dict[str, Any]]:
        buckets = {season: {"revenue": 0.0, "expenses": 0.0} for season in Season}
        for t in transactions:
            if not t.is_completed or t.date is None:
                continue
            buckets[get_season(t.date)]["revenue" if t.is_income else "expenses"] += t.amount

        trends = []
        for season, data in buckets.items():
            profit = data["revenue"] - data["expenses"]
            trends.append(
                {
                    "season": season.value,
                    "revenue": round(data["revenue"], 2),
                    "expenses": round(data["expenses"], 2),
                    "profit": round(profit, 2),
                    "margin": round(profit / data["revenue"] * 100, 2) if data["revenue"] > 0 else 0.0,
                    "year_over_year_change": 0.0,
                }
            )
        return trends

    def calculate_profitability_analysis(self, start: Any, end: Any) -> Dict[str, Any]:
        """Profit and margins over completed transactions in ``[start, end]``."""
        start_dt = as_range_bound(start)
        end_dt = as_range_bound(end, end=True)
        transactions = self.get_transactions_by_date_range(start_dt, end_dt)
        completed = [t for t in transactions if t.is_completed]

        revenue_by_category: Dict[str, float] = defaultdict(float)
        expenses_by_category: Dict[str, float] = defaultdict(float)
        for t in completed:
            bucket = revenue_by_category if t.is_income else expenses_by_category
            bucket[self.category_name(t.category_id)] += t.amount

        revenue = sum(revenue_by_category.values())
        expenses = sum(expenses_by_category.values())
        profit = revenue - expenses
        margin = profit / revenue * 100 if revenue > 0 else 0.0

        return {
            "period": {"start_date": start_dt.isoformat(), "end_date": end_dt.isoformat()},
            "total_revenue": round(revenue, 2),
            "total_expenses": round(expenses, 2),
            "gross_profit": round(profit, 2),
            "net_profit": round(profit, 2),
            "gross_margin": round(margin, 2),
            "net_margin": round(margin, 2),
            "return_on_investment": 0.0,
            "revenue_by_category": {k: round(v, 2) for k, v in revenue_by_category.items()},
            "expenses_by_category": {k: round(v, 2) for k, v in expenses_by_category.items()},
            "crop_profitability": self.calculate_crop_profitability(transactions),
            "seasonal_trends": self.calculate_seasonal_trends(transactions),
        }

    @staticmethod
    def get_season(value: date) -> Season:
        return get_season(value)

    # ------------------------------------------------------------------
    # Recurring transactions
    # ------------------------------------------------------------------

    def process_recurring_transactions(self, now: Optional[datetime] = None) -> List[str]:
        """Materialise every due occurrence of the active recurring templates.

        Each occurrence is a plain copy dated on its due date; the template's
        ``next_due_date`` advances past ``now`` and the template is
        deactivated once the next date falls after ``end_date``.
        """
        now = now or self._clock.now()
        created: List[str] = []

        with self._lock:
            templates = [
                t
                for t in self._transactions.values()
                if t.recurring is not None and t.recurring.is_active and t.recurring.next_due_date is not None
            ]
            for template in templates:
                recurring = template.recurring
                while recurring.is_active and recurring.next_due_date <= now:
                    due = recurring.next_due_date
                    if recurring.end_date is not None and due > recurring.end_date:
                        recurring.is_active = False
                        break
                    copy = template.to_dict()
                    for key in ("id", "created_at", "updated_at", "recurring"):
                        copy.pop(key, None)
                    copy["date"] = due
                    created.append(self.create_transaction(copy))
                    recurring.next_due_date = next_recurring_date(due, recurring.frequency, recurring.interval)

                if recurring.end_date is not None and recurring.next_due_date > recurring.end_date:
                    recurring.is_active = False

        if created:
            logger.info("Processed %d recurring transactions", len(created))
            self._publish(FinancialEvent.RECURRING_PROCESSED, {"created": created, "processed_at": now.isoformat()})
        return created
