"""
Financial Reporting
===================

KPIs, cash-flow projections, stored reports and weather-impact analysis built
on top of :class:`FinancialService`. All figures are derived on demand from
the ledger; only generated reports and projections are kept.
"""

from __future__ import annotations

import logging
import threading
import uuid
from collections import defaultdict
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from app.domain.exceptions import ValidationError
from app.enums.financial import ReportType, Season, TransactionType
from app.services.application.financial_service import add_months, as_range_bound, get_season
from app.utils.time import Clock, SystemClock

logger = logging.getLogger(__name__)

# (income, expenses) multipliers applied to the monthly averages
SEASONAL_CASH_FLOW: Dict[Season, tuple[float, float]] = {
    Season.SPRING: (0.8, 1.3),
    Season.SUMMER: (1.2, 1.1),
    Season.FALL: (1.8, 0.9),
    Season.WINTER: (0.6, 0.7),
}

HISTORY_MONTHS = 12

PROJECTION_ASSUMPTIONS: List[Dict[str, Any]] = [
    {
        "category": "Market Prices",
        "description": "Commodity prices remain stable within 10% of current levels",
        "value": "+/-10%",
        "impact": "high",
        "source": "Current market analysis",
    },
    {
        "category": "Weather",
        "description": "Normal weather patterns with no major disasters",
        "value": "Normal",
        "impact": "high",
        "source": "Historical weather data",
    },
    {
        "category": "Input Costs",
        "description": "Input costs increase by 3% annually",
        "value": 3,
        "impact": "medium",
        "source": "Industry trends",
    },
]

CASH_FLOW_SCENARIOS: List[Dict[str, Any]] = [
    {
        "name": "Optimistic",
        "description": "Above average yields and prices",
        "type": "optimistic",
        "adjustments": [
            {
                "category": "Revenue",
                "adjustment_type": "percentage",
                "value": 20,
                "reasoning": "Higher commodity prices and yields",
            }
        ],
    },
    {
        "name": "Pessimistic",
        "description": "Below average yields or market downturn",
        "type": "pessimistic",
        "adjustments": [
            {
                "category": "Revenue",
                "adjustment_type": "percentage",
                "value": -25,
                "reasoning": "Lower yields due to weather or market conditions",
            }
        ],
    },
]

RISK_FACTORS: List[Dict[str, Any]] = [
    {
        "name": "Weather Events",
        "description": "Drought, flooding, or severe storms affecting crop yields",
        "probability": 30,
        "impact": 50000,
        "mitigation": "Crop insurance and diversification",
        "category": "weather",
    },
    {
        "name": "Market Volatility",
        "description": "Significant changes in commodity prices",
        "probability": 50,
        "impact": 30000,
        "mitigation": "Forward contracts and price hedging",
        "category": "market",
    },
    {
        "name": "Equipment Failure",
        "description": "Major equipment breakdown during critical periods",
        "probability": 20,
        "impact": 25000,
        "mitigation": "Preventive maintenance and equipment reserves",
        "category": "operational",
    },
]


def projection_confidence(months_out: int, historical_months: int) -> float:
    base = min(90.0, historical_months / HISTORY_MONTHS * 90)
    return max(30.0, base - min(50, months_out * 3))


def _month_start(value: datetime) -> datetime:
    return value.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


class FinancialReportService:
    """Derived financial views over a :class:`FinancialService` ledger."""

    def __init__(
        self,
        *,
        financial_service: Any,
        clock: Optional[Clock] = None,
        total_acreage: float = 100.0,
    ) -> None:
        self._financial = financial_service
        self._clock = clock or SystemClock()
        self._total_acreage = total_acreage
        self._lock = threading.Lock()
        self._reports: Dict[str, Dict[str, Any]] = {}
        self._projections: Dict[str, Dict[str, Any]] = {}

    # ------------------------------------------------------------------
    # KPIs
    # ------------------------------------------------------------------

    def generate_financial_kpis(self) -> List[Dict[str, Any]]:
        """Margin and per-acre KPIs over the trailing 30 days."""
        now = self._clock.now()
        analysis = self._financial.calculate_profitability_analysis(now - timedelta(days=30), now)
        acreage = max(1.0, float(self._total_acreage))
        stamp = now.isoformat()

        def kpi(name, value, unit, category, calculation, target=None, benchmark=None):
            entry = {
                "name": name,
                "value": round(value, 2),
                "unit": unit,
                "trend": "stable",
                "change_percent": 0.0,
                "category": category,
                "calculation": calculation,
                "last_updated": stamp,
            }
            if target is not None:
                entry["target_value"] = target
                entry["benchmark"] = benchmark
            return entry

        return [
            kpi("Gross Profit Margin", analysis["gross_margin"], "%", "profitability",
                "(Revenue - COGS) / Revenue * 100", 30, 25),
            kpi("Net Profit Margin", analysis["net_margin"], "%", "profitability",
                "Net Profit / Revenue * 100", 20, 15),
            kpi("Revenue per Acre", analysis["total_revenue"] / acreage, "$/acre", "efficiency",
                "Total Revenue / Total Acreage"),
            kpi("Cost per Acre", analysis["total_expenses"] / acreage, "$/acre", "efficiency",
                "Total Expenses / Total Acreage"),
        ]

    # ------------------------------------------------------------------
    # Cash flow
    # ------------------------------------------------------------------

    def _historical_monthly(self, months: int) -> List[Dict[str, Any]]:
        current = _month_start(self._clock.now())
        history = []
        for back in range(months - 1, -1, -1):
            start = add_months(current, -back)
            end = add_months(start, 1) - timedelta(microseconds=1)
            income = expenses = 0.0
            for t in self._financial.get_transactions_by_date_range(start, end):
                if not t.is_completed:
                    continue
                if t.type == TransactionType.INCOME:
                    income += t.amount
                else:
                    expenses += t.amount
            history.append({"month": start, "income": income, "expenses": expenses})
        return history

    def generate_cash_flow_projection(self, periods: int = 12) -> Dict[str, Any]:
        """
        Month-by-month projection from trailing 12-month averages.

        Each projected month scales the averages by its season's income and
        expense multipliers. Confidence falls by 3 points per month out and
        never drops below 30.
        """
        if periods < 1:
            raise ValidationError("periods must be at least 1")

        now = self._clock.now()
        history = self._historical_monthly(HISTORY_MONTHS)
        avg_income = sum(h["income"] for h in history) / len(history)
        avg_expenses = sum(h["expenses"] for h in history) / len(history)

        months = []
        cumulative = 0.0
        first = _month_start(now)
        for i in range(periods):
            month = add_months(first, i)
            income_mult, expense_mult = SEASONAL_CASH_FLOW[get_season(month)]
            income = avg_income * income_mult
            expenses = avg_expenses * expense_mult
            net = income - expenses
            cumulative += net
            months.append(
                {
                    "month": month.date().isoformat(),
                    "projected_income": round(income, 2),
                    "projected_expenses": round(expenses, 2),
                    "net_cash_flow": round(net, 2),
                    "cumulative_cash_flow": round(cumulative, 2),
                    "confidence": projection_confidence(i, len(history)),
                }
            )

        projection = {
            "id": f"projection_{uuid.uuid4().hex[:12]}",
            "name": f"Cash Flow Projection - {now.date().isoformat()}",
            "projection_period": periods,
            "start_date": now.isoformat(),
            "monthly_projections": months,
            "assumptions": [dict(a) for a in PROJECTION_ASSUMPTIONS],
            "scenarios": [dict(s, total_impact=0) for s in CASH_FLOW_SCENARIOS],
            "risk_factors": [dict(r) for r in RISK_FACTORS],
            "created_at": now.isoformat(),
        }
        with self._lock:
            self._projections[projection["id"]] = projection
        return projection

    def get_projection(self, projection_id: str) -> Optional[Dict[str, Any]]:
        return self._projections.get(projection_id)

    # ------------------------------------------------------------------
    # Reports
    # ------------------------------------------------------------------

    def _profit_loss(self, start: datetime, end: datetime) -> Dict[str, Any]:
        analysis = self._financial.calculate_profitability_analysis(start, end)
        return {
            "revenue_by_category": analysis["revenue_by_category"],
            "expenses_by_category": analysis["expenses_by_category"],
            "gross_profit": analysis["gross_profit"],
            "net_profit": analysis["net_profit"],
            "transactions": [t.to_dict() for t in self._financial.get_transactions_by_date_range(start, end)],
        }

    def _cash_flow(self, start: datetime, end: datetime) -> Dict[str, Any]:
        months: Dict[str, Dict[str, float]] = defaultdict(lambda: {"inflow": 0.0, "outflow": 0.0})
        for t in self._financial.get_transactions_by_date_range(start, end):
            if not t.is_completed:
                continue
            key = t.date.strftime("%Y-%m")
            months[key]["inflow" if t.is_income else "outflow"] += t.amount

        rows = []
        running = 0.0
        for key in sorted(months):
            net = months[key]["inflow"] - months[key]["outflow"]
            running += net
            rows.append(
                {
                    "month": key,
                    "inflow": round(months[key]["inflow"], 2),
                    "outflow": round(months[key]["outflow"], 2),
                    "net": round(net, 2),
                    "cumulative": round(running, 2),
                }
            )
        return {"months": rows}

    def _budget_variance(self, start: datetime, end: datetime) -> Dict[str, Any]:
        budget = self._financial.get_active_budget()
        actual: Dict[str, float] = defaultdict(float)
        for t in self._financial.get_transactions_by_date_range(start, end):
            if t.is_completed:
                actual[t.category_id] += t.amount

        lines = []
        if budget is not None:
            for line in budget.categories:
                spent = actual.get(line.category_id, 0.0)
                variance = spent - line.budgeted_amount
                lines.append(
                    {
                        "category_id": line.category_id,
                        "category": self._financial.category_name(line.category_id),
                        "budgeted": round(line.budgeted_amount, 2),
                        "actual": round(spent, 2),
                        "variance": round(variance, 2),
                        "variance_percent": round(variance / line.budgeted_amount * 100, 2)
                        if line.budgeted_amount
                        else 0.0,
                    }
                )
        return {
            "budget": budget.to_dict() if budget else None,
            "actual_by_category": {
                self._financial.category_name(cid): round(v, 2) for cid, v in actual.items()
            },
            "lines": lines,
        }

    def _crop_profitability(self, start: datetime, end: datetime) -> Dict[str, Any]:
        transactions = self._financial.get_transactions_by_date_range(start, end)
        return {"crop_profitability": self._financial.calculate_crop_profitability(transactions)}

    def _vendor_analysis(self, start: datetime, end: datetime) -> Dict[str, Any]:
        spend: Dict[str, Dict[str, float]] = defaultdict(lambda: {"total": 0.0, "count": 0})
        for t in self._financial.get_transactions_by_date_range(start, end):
            if t.vendor_id and t.is_completed and t.type == TransactionType.EXPENSE:
                spend[t.vendor_id]["total"] += t.amount
                spend[t.vendor_id]["count"] += 1

        vendors = []
        for vendor in self._financial.get_all_vendors():
            data = spend.get(vendor.id, {"total": 0.0, "count": 0})
            vendors.append(
                {
                    "vendor_id": vendor.id,
                    "name": vendor.name,
                    "category": vendor.category.value,
                    "period_spend": round(data["total"], 2),
                    "transactions": int(data["count"]),
                    "total_spent": vendor.total_spent,
                    "rating": vendor.rating,
                }
            )
        vendors.sort(key=lambda v: v["period_spend"], reverse=True)
        return {"vendors": vendors}

    def generate_report(
        self,
        report_type: str,
        start: Any,
        end: Any,
        label: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Build and store a report of ``report_type`` over ``[start, end]``.

        Raises:
            ValidationError: unknown report type or unparsable dates.
        """
        try:
            kind = ReportType(report_type)
        except ValueError:
            raise ValidationError(f"Unknown report type: {report_type}") from None

        start_dt = as_range_bound(start)
        end_dt = as_range_bound(end, end=True)
        builders = {
            ReportType.PROFIT_LOSS: self._profit_loss,
            ReportType.CASH_FLOW: self._cash_flow,
            ReportType.BUDGET_VARIANCE: self._budget_variance,
            ReportType.CROP_PROFITABILITY: self._crop_profitability,
            ReportType.VENDOR_ANALYSIS: self._vendor_analysis,
        }
        data = builders[kind](start_dt, end_dt)
        analysis = self._financial.calculate_profitability_analysis(start_dt, end_dt)

        report = {
            "id": f"report_{uuid.uuid4().hex[:12]}",
            "type": kind.value,
            "title": f"{kind.value.replace('_', ' ').upper()} Report",
            "period": {
                "start_date": start_dt.isoformat(),
                "end_date": end_dt.isoformat(),
                "label": label,
            },
            "generated_at": self._clock.now().isoformat(),
            "generated_by": "system",
            "data": data,
            "summary": {
                "total_income": analysis["total_revenue"],
                "total_expenses": analysis["total_expenses"],
                "net_profit": analysis["net_profit"],
                "profit_margin": analysis["net_margin"],
            },
            "format": "json",
        }
        with self._lock:
            self._reports[report["id"]] = report
        logger.info("Generated %s report %s", kind.value, report["id"])
        return report

    def get_report(self, report_id: str) -> Optional[Dict[str, Any]]:
        return self._reports.get(report_id)

    def get_all_reports(self) -> List[Dict[str, Any]]:
        return sorted(self._reports.values(), key=lambda r: r["generated_at"], reverse=True)

    # ------------------------------------------------------------------
    # Weather impact
    # ------------------------------------------------------------------

    def analyze_weather_impact(self, start: Any, end: Any) -> Dict[str, Any]:
        affected = [
            t for t in self._financial.get_transactions_by_date_range(start, end) if t.weather_impact is not None
        ]
        by_condition: Dict[str, float] = defaultdict(float)
        for t in affected:
            by_condition[t.weather_impact.weather_condition] += t.weather_impact.estimated_cost_impact

        conditions = set(by_condition)
        recommendations: List[str] = []
        if "drought" in conditions:
            recommendations.append("Consider investing in drought-resistant crop varieties")
            recommendations.append("Evaluate irrigation system upgrades")
        if conditions & {"storm", "hail"}:
            recommendations.append("Review crop insurance coverage")
            recommendations.append("Consider windbreaks or protective structures")

        return {
            "total_impact": round(sum(by_condition.values()), 2),
            "impact_by_type": {k: round(v, 2) for k, v in by_condition.items()},
            "affected_transactions": [t.to_dict() for t in affected],
            "recommendations": recommendations,
        }
