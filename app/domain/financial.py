"""
Financial Domain Objects
========================

Transactions, the reference data they point at (categories, vendors,
customers, payment methods) and budgets.

Transactions reference their category, vendor and customer by id; the
service resolves names when it builds reports.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from app.domain.base import Record
from app.enums.financial import (
    BudgetStatus,
    CustomerType,
    PaymentMethodType,
    RecurringFrequency,
    TransactionStatus,
    TransactionType,
    VendorCategory,
)


@dataclass
class ContactInfo(Record):
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Dict[str, str] = field(default_factory=dict)
    contact_person: Optional[str] = None


@dataclass
class RecurringSchedule(Record):
    """Recurrence of a template transaction; ``next_due_date`` is advanced on each run."""
    frequency: RecurringFrequency = RecurringFrequency.MONTHLY
    interval: int = 1
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    next_due_date: Optional[datetime] = None
    is_active: bool = True


@dataclass
class TaxInformation(Record):
    tax_rate: Optional[float] = None
    tax_amount: Optional[float] = None
    tax_category: Optional[str] = None
    deductible: bool = False


@dataclass
class WeatherImpact(Record):
    impact_type: str = "negative"  # positive | negative | neutral
    severity: str = "medium"
    description: str = ""
    estimated_cost_impact: float = 0.0
    weather_condition: str = "other"  # drought, flood, hail, storm ...
    date_of_impact: Optional[datetime] = None
    recovery_expected: bool = True
    insurance_claim: Optional[str] = None


@dataclass
class Transaction(Record):
    id: str = ""
    type: TransactionType = TransactionType.EXPENSE
    category_id: str = ""
    subcategory: Optional[str] = None
    amount: float = 0.0
    currency: str = "USD"
    date: Optional[datetime] = None
    description: str = ""
    reference: Optional[str] = None
    payment_method_id: Optional[str] = None
    vendor_id: Optional[str] = None
    customer_id: Optional[str] = None
    crop_id: Optional[str] = None
    field_id: Optional[str] = None
    tags: List[str] = field(default_factory=list)
    status: TransactionStatus = TransactionStatus.PENDING
    recurring: Optional[RecurringSchedule] = None
    tax_info: Optional[TaxInformation] = None
    weather_impact: Optional[WeatherImpact] = None
    notes: Optional[str] = None
    created_by: str = "system"
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    PROTECTED_FIELDS = frozenset({"id", "created_at", "updated_at"})

    @property
    def is_completed(self) -> bool:
        return self.status == TransactionStatus.COMPLETED

    @property
    def is_income(self) -> bool:
        return self.type == TransactionType.INCOME


@dataclass
class Category(Record):
    id: str = ""
    name: str = ""
    type: TransactionType = TransactionType.EXPENSE
    code: str = ""
    description: str = ""
    parent_category: Optional[str] = None
    is_active: bool = True
    budgetable: bool = True
    tax_deductible: bool = False
    subcategories: List[str] = field(default_factory=list)


@dataclass
class PaymentMethod(Record):
    id: str = ""
    name: str = ""
    type: PaymentMethodType = PaymentMethodType.OTHER
    account: Optional[str] = None
    provider: Optional[str] = None
    last_four_digits: Optional[str] = None
    is_active: bool = True


@dataclass
class Vendor(Record):
    id: str = ""
    name: str = ""
    category: VendorCategory = VendorCategory.OTHER
    contact: ContactInfo = field(default_factory=ContactInfo)
    tax_id: Optional[str] = None
    is_active: bool = True
    notes: Optional[str] = None
    rating: Optional[float] = None
    total_spent: float = 0.0
    average_order_value: float = 0.0
    last_transaction_date: Optional[datetime] = None


@dataclass
class Customer(Record):
    id: str = ""
    name: str = ""
    type: CustomerType = CustomerType.OTHER
    contact: ContactInfo = field(default_factory=ContactInfo)
    credit_limit: Optional[float] = None
    tax_id: Optional[str] = None
    is_active: bool = True
    notes: Optional[str] = None
    total_revenue: float = 0.0
    average_order_value: float = 0.0
    last_transaction_date: Optional[datetime] = None


@dataclass
class BudgetLine(Record):
    category_id: str = ""
    budgeted_amount: float = 0.0
    actual_amount: float = 0.0
    variance: float = 0.0
    variance_percent: float = 0.0
    allocations: List[Dict[str, Any]] = field(default_factory=list)
    notes: Optional[str] = None


@dataclass
class BudgetPeriodInfo(Record):
    type: str = "annual"  # monthly | quarterly | annual | seasonal | custom
    fiscal_year: Optional[int] = None
    season: Optional[str] = None
    custom_label: Optional[str] = None


@dataclass
class Budget(Record):
    id: str = ""
    name: str = ""
    period: BudgetPeriodInfo = field(default_factory=BudgetPeriodInfo)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    status: BudgetStatus = BudgetStatus.DRAFT
    categories: List[BudgetLine] = field(default_factory=list)
    total_budgeted_income: float = 0.0
    total_budgeted_expenses: float = 0.0
    projected_profit: float = 0.0
    actual_profit: Optional[float] = None
    variance: Optional[float] = None
    notes: Optional[str] = None
    created_by: str = "system"
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    PROTECTED_FIELDS = frozenset({"id", "created_at", "updated_at"})
