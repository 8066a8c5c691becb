"""
Financial Schemas
=================

Request schemas for transactions, reference data, budgets and reports.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.enums.financial import (
    BudgetStatus,
    CustomerType,
    PaymentMethodType,
    RecurringFrequency,
    ReportType,
    TransactionStatus,
    TransactionType,
    VendorCategory,
)


class RecurringScheduleModel(BaseModel):
    frequency: RecurringFrequency = RecurringFrequency.MONTHLY
    interval: int = Field(default=1, ge=1, le=365)
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    next_due_date: Optional[str] = None
    is_active: bool = True


class CreateTransactionRequest(BaseModel):
    """Request schema for recording income or an expense."""

    model_config = ConfigDict(extra="allow")

    type: TransactionType = Field(..., description="income, expense, transfer ...")
    category_id: str = Field(..., min_length=1)
    amount: float = Field(..., ge=0, description="Non-negative amount in currency units")
    currency: str = Field(default="USD", min_length=3, max_length=3)
    date: Optional[str] = Field(default=None, description="ISO-8601; defaults to now")
    description: str = Field(default="", max_length=500)
    status: TransactionStatus = TransactionStatus.PENDING
    vendor_id: Optional[str] = None
    customer_id: Optional[str] = None
    crop_id: Optional[str] = None
    field_id: Optional[str] = None
    payment_method_id: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    recurring: Optional[RecurringScheduleModel] = None
    tax_info: Optional[Dict[str, Any]] = None
    weather_impact: Optional[Dict[str, Any]] = None

    @field_validator("type", mode="before")
    @classmethod
    def normalize_type(cls, v):
        if isinstance(v, str):
            return TransactionType(v.lower())
        return v


class UpdateTransactionRequest(BaseModel):
    model_config = ConfigDict(extra="allow")

    amount: Optional[float] = Field(default=None, ge=0)
    status: Optional[TransactionStatus] = None
    description: Optional[str] = Field(default=None, max_length=500)
    category_id: Optional[str] = None


class CreateCategoryRequest(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: str = Field(..., min_length=1, max_length=120)
    type: TransactionType
    code: str = Field(..., min_length=1, max_length=20)
    description: str = ""
    budgetable: bool = True
    tax_deductible: bool = False


class CreateVendorRequest(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: str = Field(..., min_length=1, max_length=120)
    category: VendorCategory = VendorCategory.OTHER
    contact: Optional[Dict[str, Any]] = None
    rating: Optional[float] = Field(default=None, ge=0, le=5)


class CreateCustomerRequest(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: str = Field(..., min_length=1, max_length=120)
    type: CustomerType = CustomerType.OTHER
    contact: Optional[Dict[str, Any]] = None
    credit_limit: Optional[float] = Field(default=None, ge=0)


class CreatePaymentMethodRequest(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: str = Field(..., min_length=1, max_length=120)
    type: PaymentMethodType = PaymentMethodType.OTHER
    last_four_digits: Optional[str] = Field(default=None, pattern=r"^\d{4}$")


class BudgetLineModel(BaseModel):
    model_config = ConfigDict(extra="allow")

    category_id: str = Field(..., min_length=1)
    budgeted_amount: float = Field(..., ge=0)


class CreateBudgetRequest(BaseModel):
    """Request schema for a budget covering a period."""

    model_config = ConfigDict(extra="allow")

    name: str = Field(..., min_length=1, max_length=120)
    start_date: str
    end_date: str
    status: BudgetStatus = BudgetStatus.DRAFT
    period: Optional[Dict[str, Any]] = None
    categories: List[BudgetLineModel] = Field(default_factory=list)
    total_budgeted_income: float = Field(default=0.0, ge=0)
    total_budgeted_expenses: float = Field(default=0.0, ge=0)


class UpdateBudgetRequest(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: Optional[str] = Field(default=None, min_length=1, max_length=120)
    status: Optional[BudgetStatus] = None
    categories: Optional[List[BudgetLineModel]] = None


class ReportRequest(BaseModel):
    """Request schema for generating a financial report over a date range."""

    type: ReportType
    start_date: str
    end_date: str
    label: Optional[str] = Field(default=None, max_length=120)

    @field_validator("type", mode="before")
    @classmethod
    def normalize_type(cls, v):
        if isinstance(v, str):
            return ReportType(v.lower())
        return v


class CashFlowProjectionRequest(BaseModel):
    periods: int = Field(default=12, ge=1, le=60, description="Months to project")
