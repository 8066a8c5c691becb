"""
Financial API Blueprint
=======================

REST API endpoints for the farm ledger, reference data, budgets and
financial reporting.

Endpoints:
- GET/POST /api/financial/transactions - List (filters) / create transactions
- GET/PUT/DELETE /api/financial/transactions/<id> - Transaction CRUD
- GET/POST /api/financial/categories - Categories (type=income|expense)
- GET/POST /api/financial/vendors, /customers, /payment-methods - Parties
- GET/POST /api/financial/budgets - Budgets
- GET/PUT/DELETE /api/financial/budgets/<id> - Budget CRUD
- GET /api/financial/budgets/active - Budget covering today
- GET /api/financial/analysis/profitability - Profitability over a range
- GET /api/financial/kpis - Headline KPIs
- POST /api/financial/cash-flow - Cash-flow projection
- GET/POST /api/financial/reports - List / generate reports
- GET /api/financial/reports/<id> - Stored report
- GET /api/financial/weather-impact - Weather-related costs over a range
- POST /api/financial/recurring/process - Materialise due recurring transactions

Date-range query params ``start_date`` / ``end_date`` accept ISO dates or
timestamps; a bare end date covers the whole day.
"""

from __future__ import annotations

from datetime import timedelta

from flask import Blueprint, Response, request

from app.blueprints.api._common import (
    body_dict,
    dump,
    get_container,
    get_financial_reports,
    get_financial_service,
    not_found,
    parse_json,
    success,
)
from app.schemas import (
    CashFlowProjectionRequest,
    CreateBudgetRequest,
    CreateCategoryRequest,
    CreateCustomerRequest,
    CreatePaymentMethodRequest,
    CreateTransactionRequest,
    CreateVendorRequest,
    ReportRequest,
    UpdateBudgetRequest,
    UpdateTransactionRequest,
)
from app.utils.http import safe_route

financial_bp = Blueprint("financial", __name__)

DEFAULT_RANGE_DAYS = 365


def _date_range() -> tuple[str, str]:
    """Range from query params, defaulting to the trailing year."""
    now = get_container().clock.now()
    start = request.args.get("start_date") or (now - timedelta(days=DEFAULT_RANGE_DAYS)).isoformat()
    end = request.args.get("end_date") or now.isoformat()
    return start, end


# ==================== Transactions ====================


@financial_bp.route("/transactions", methods=["GET"])
@safe_route("Failed to list transactions")
def list_transactions() -> Response:
    """
    List transactions, newest first.

    Query params (first match wins):
    - category_id: transactions in a category
    - crop_id: transactions attributed to a crop
    - start_date + end_date: inclusive date range
    """
    service = get_financial_service()
    if request.args.get("category_id"):
        items = service.get_transactions_by_category(request.args["category_id"])
    elif request.args.get("crop_id"):
        items = service.get_transactions_by_crop(request.args["crop_id"])
    elif request.args.get("start_date") or request.args.get("end_date"):
        items = service.get_transactions_by_date_range(*_date_range())
    else:
        items = service.get_all_transactions()
    return success(dump(items))


@financial_bp.route("/transactions", methods=["POST"])
@safe_route("Failed to create transaction")
def create_transaction() -> Response:
    service = get_financial_service()
    transaction_id = service.create_transaction(body_dict(CreateTransactionRequest))
    return success(service.get_transaction(transaction_id).to_dict(), 201)


@financial_bp.route("/transactions/<transaction_id>", methods=["GET"])
@safe_route("Failed to get transaction")
def get_transaction(transaction_id: str) -> Response:
    transaction = get_financial_service().get_transaction(transaction_id)
    if transaction is None:
        return not_found("Transaction")
    return success(transaction.to_dict())


@financial_bp.route("/transactions/<transaction_id>", methods=["PUT"])
@safe_route("Failed to update transaction")
def update_transaction(transaction_id: str) -> Response:
    service = get_financial_service()
    if not service.update_transaction(transaction_id, body_dict(UpdateTransactionRequest, partial=True)):
        return not_found("Transaction")
    return success(service.get_transaction(transaction_id).to_dict())


@financial_bp.route("/transactions/<transaction_id>", methods=["DELETE"])
@safe_route("Failed to delete transaction")
def delete_transaction(transaction_id: str) -> Response:
    if not get_financial_service().delete_transaction(transaction_id):
        return not_found("Transaction")
    return success({"deleted": transaction_id})


# ==================== Reference data ====================


@financial_bp.route("/categories", methods=["GET"])
@safe_route("Failed to list categories")
def list_categories() -> Response:
    service = get_financial_service()
    kind = (request.args.get("type") or "").lower()
    if kind == "income":
        items = service.get_income_categories()
    elif kind == "expense":
        items = service.get_expense_categories()
    else:
        items = service.get_all_categories()
    return success(dump(items))


@financial_bp.route("/categories", methods=["POST"])
@safe_route("Failed to create category")
def create_category() -> Response:
    service = get_financial_service()
    category_id = service.create_category(body_dict(CreateCategoryRequest))
    return success(service.get_category(category_id).to_dict(), 201)


@financial_bp.route("/vendors", methods=["GET"])
@safe_route("Failed to list vendors")
def list_vendors() -> Response:
    return success(dump(get_financial_service().get_all_vendors()))


@financial_bp.route("/vendors", methods=["POST"])
@safe_route("Failed to create vendor")
def create_vendor() -> Response:
    service = get_financial_service()
    vendor_id = service.create_vendor(body_dict(CreateVendorRequest))
    return success(service.get_vendor(vendor_id).to_dict(), 201)


@financial_bp.route("/vendors/<vendor_id>", methods=["GET"])
@safe_route("Failed to get vendor")
def get_vendor(vendor_id: str) -> Response:
    vendor = get_financial_service().get_vendor(vendor_id)
    if vendor is None:
        return not_found("Vendor")
    return success(vendor.to_dict())


@financial_bp.route("/customers", methods=["GET"])
@safe_route("Failed to list customers")
def list_customers() -> Response:
    return success(dump(get_financial_service().get_all_customers()))


@financial_bp.route("/customers", methods=["POST"])
@safe_route("Failed to create customer")
def create_customer() -> Response:
    service = get_financial_service()
    customer_id = service.create_customer(body_dict(CreateCustomerRequest))
    return success(service.get_customer(customer_id).to_dict(), 201)


@financial_bp.route("/customers/<customer_id>", methods=["GET"])
@safe_route("Failed to get customer")
def get_customer(customer_id: str) -> Response:
    customer = get_financial_service().get_customer(customer_id)
    if customer is None:
        return not_found("Customer")
    return success(customer.to_dict())


@financial_bp.route("/payment-methods", methods=["GET"])
@safe_route("Failed to list payment methods")
def list_payment_methods() -> Response:
    return success(dump(get_financial_service().get_all_payment_methods()))


@financial_bp.route("/payment-methods", methods=["POST"])
@safe_route("Failed to create payment method")
def create_payment_method() -> Response:
    service = get_financial_service()
    method_id = service.create_payment_method(body_dict(CreatePaymentMethodRequest))
    return success(service.get_payment_method(method_id).to_dict(), 201)


# ==================== Budgets ====================


@financial_bp.route("/budgets", methods=["GET"])
@safe_route("Failed to list budgets")
def list_budgets() -> Response:
    return success(dump(get_financial_service().get_all_budgets()))


@financial_bp.route("/budgets", methods=["POST"])
@safe_route("Failed to create budget")
def create_budget() -> Response:
    service = get_financial_service()
    budget_id = service.create_budget(body_dict(CreateBudgetRequest))
    return success(service.get_budget(budget_id).to_dict(), 201)


@financial_bp.route("/budgets/active", methods=["GET"])
@safe_route("Failed to get active budget")
def active_budget() -> Response:
    budget = get_financial_service().get_active_budget()
    return success(budget.to_dict() if budget else None)


@financial_bp.route("/budgets/<budget_id>", methods=["GET"])
@safe_route("Failed to get budget")
def get_budget(budget_id: str) -> Response:
    budget = get_financial_service().get_budget(budget_id)
    if budget is None:
        return not_found("Budget")
    return success(budget.to_dict())


@financial_bp.route("/budgets/<budget_id>", methods=["PUT"])
@safe_route("Failed to update budget")
def update_budget(budget_id: str) -> Response:
    service = get_financial_service()
    if not service.update_budget(budget_id, body_dict(UpdateBudgetRequest, partial=True)):
        return not_found("Budget")
    return success(service.get_budget(budget_id).to_dict())


@financial_bp.route("/budgets/<budget_id>", methods=["DELETE"])
@safe_route("Failed to delete budget")
def delete_budget(budget_id: str) -> Response:
    if not get_financial_service().delete_budget(budget_id):
        return not_found("Budget")
    return success({"deleted": budget_id})


# ==================== Analysis and reports ====================


@financial_bp.route("/analysis/profitability", methods=["GET"])
@safe_route("Failed to calculate profitability")
def profitability() -> Response:
    return success(get_financial_service().calculate_profitability_analysis(*_date_range()))


@financial_bp.route("/kpis", methods=["GET"])
@safe_route("Failed to calculate financial KPIs")
def kpis() -> Response:
    return success(get_financial_reports().generate_financial_kpis())


@financial_bp.route("/cash-flow", methods=["POST"])
@safe_route("Failed to project cash flow")
def cash_flow_projection() -> Response:
    body = parse_json(CashFlowProjectionRequest)
    return success(get_financial_reports().generate_cash_flow_projection(body.periods), 201)


@financial_bp.route("/reports", methods=["GET"])
@safe_route("Failed to list reports")
def list_reports() -> Response:
    return success(get_financial_reports().get_all_reports())


@financial_bp.route("/reports", methods=["POST"])
@safe_route("Failed to generate report")
def generate_report() -> Response:
    """
    Generate a report.

    Request body:
    - type: profit_loss | cash_flow | budget_variance | crop_profitability | vendor_analysis
    - start_date, end_date: report period
    - label: optional period label
    """
    body = parse_json(ReportRequest)
    report = get_financial_reports().generate_report(body.type.value, body.start_date, body.end_date, body.label)
    return success(report, 201)


@financial_bp.route("/reports/<report_id>", methods=["GET"])
@safe_route("Failed to get report")
def get_report(report_id: str) -> Response:
    report = get_financial_reports().get_report(report_id)
    if report is None:
        return not_found("Report")
    return success(report)


@financial_bp.route("/weather-impact", methods=["GET"])
@safe_route("Failed to analyze weather impact")
def weather_impact() -> Response:
    return success(get_financial_reports().analyze_weather_impact(*_date_range()))


@financial_bp.route("/recurring/process", methods=["POST"])
@safe_route("Failed to process recurring transactions")
def process_recurring() -> Response:
    created = get_financial_service().process_recurring_transactions()
    return success({"created": created, "count": len(created)})
