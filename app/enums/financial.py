"""
Financial Enumerations
======================
"""

from enum import Enum


class TransactionType(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"

    def __str__(self) -> str:
        return self.value


class TransactionStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    DISPUTED = "disputed"

    def __str__(self) -> str:
        return self.value


class RecurringFrequency(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    ANNUALLY = "annually"

    def __str__(self) -> str:
        return self.value


class PaymentMethodType(str, Enum):
    CASH = "cash"
    CHECK = "check"
    CREDIT_CARD = "credit_card"
    BANK_TRANSFER = "bank_transfer"
    ACH = "ach"
    WIRE = "wire"
    OTHER = "other"

    def __str__(self) -> str:
        return self.value


class VendorCategory(str, Enum):
    SEEDS = "seeds"
    FERTILIZER = "fertilizer"
    CHEMICALS = "chemicals"
    EQUIPMENT = "equipment"
    FUEL = "fuel"
    SERVICES = "services"
    LABOR = "labor"
    OTHER = "other"

    def __str__(self) -> str:
        return self.value


class CustomerType(str, Enum):
    ELEVATOR = "elevator"
    PROCESSOR = "processor"
    COOPERATIVE = "cooperative"
    DIRECT = "direct"
    GOVERNMENT = "government"
    OTHER = "other"

    def __str__(self) -> str:
        return self.value


class BudgetStatus(str, Enum):
    DRAFT = "draft"
    ACTIVE = "active"
    COMPLETED = "completed"
    ARCHIVED = "archived"

    def __str__(self) -> str:
        return self.value


class ReportType(str, Enum):
    PROFIT_LOSS = "profit_loss"
    CASH_FLOW = "cash_flow"
    BUDGET_VARIANCE = "budget_variance"
    CROP_PROFITABILITY = "crop_profitability"
    VENDOR_ANALYSIS = "vendor_analysis"

    def __str__(self) -> str:
        return self.value


class Season(str, Enum):
    SPRING = "Spring"
    SUMMER = "Summer"
    FALL = "Fall"
    WINTER = "Winter"

    def __str__(self) -> str:
        return self.value


class WeatherImpactType(str, Enum):
    DROUGHT = "drought"
    FLOOD = "flood"
    HAIL = "hail"
    FROST = "frost"
    STORM = "storm"
    HEAT = "heat"
    OTHER = "other"

    def __str__(self) -> str:
        return self.value
