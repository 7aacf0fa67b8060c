"""
Monthly profit reconciliation.

    profit_loss = income - (expenses + total_product_cost)

Expenses and income count when their date parses and falls inside the
month. Product cost counts delivered sale lines dated in the month, valued
at the average cost current when this runs (not the cost at sale time).
A product code with no average cost is valued at 0.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Mapping

from ...constants import STATUS_DELIVERED
from ...database.repositories import (
    Expense,
    Income,
    MonthlyProfitSnapshot,
    ProductCostLine,
    SaleOrder,
)
from ...utils.helpers import parse_iso_date
from ...utils.validators import float_or_zero
from .periods import MonthPeriod

MONITORED_FIELDS = ("expenses", "income", "total_product_cost", "profit_loss")


@dataclass(frozen=True)
class MonthlyProfitResult:
    period: MonthPeriod
    expenses: float
    income: float
    total_product_cost: float
    profit_loss: float
    product_data: tuple[ProductCostLine, ...] = ()

    @property
    def is_empty(self) -> bool:
        """No income, no expenses and nothing delivered: "no data yet"."""
        return self.income == 0 and self.expenses == 0 and self.total_product_cost == 0

    def monitored(self) -> dict[str, float]:
        return {name: float(getattr(self, name)) for name in MONITORED_FIELDS}

    def to_snapshot(self, timestamp: str) -> MonthlyProfitSnapshot:
        return MonthlyProfitSnapshot(
            month_key=self.period.key,
            month=self.period.label,
            expenses=self.expenses,
            income=self.income,
            profit_loss=self.profit_loss,
            total_product_cost=self.total_product_cost,
            product_data=self.product_data,
            timestamp=timestamp,
        )


def sum_in_month(records: Iterable[Expense | Income], period: MonthPeriod) -> float:
    """Unparseable dates fall outside every month; they are skipped, not reported."""
    total = 0.0
    for rec in records:
        if period.contains(parse_iso_date(rec.date)):
            total += float_or_zero(rec.amount)
    return total


def is_delivered(order: SaleOrder) -> bool:
    return (order.status or "").strip().lower() == STATUS_DELIVERED.lower()


def delivered_in_month(sales: Iterable[SaleOrder], period: MonthPeriod) -> list[SaleOrder]:
    return [
        s for s in sales
        if is_delivered(s) and period.same_month(parse_iso_date(s.date))
    ]


def product_breakdown(
    orders: Iterable[SaleOrder],
    avg_costs: Mapping[str, float],
) -> tuple[ProductCostLine, ...]:
    quantities: dict[str, float] = {}
    for order in orders:
        for line in order.products:
            code = line.product_code
            quantities[code] = quantities.get(code, 0.0) + float_or_zero(line.quantity)

    out = []
    for code, qty in quantities.items():
        cost = float(avg_costs.get(code, 0.0) or 0.0)
        out.append(ProductCostLine(code, qty, cost, qty * cost))
    return tuple(out)


def reconcile_month(
    period: MonthPeriod,
    expenses: Iterable[Expense],
    income: Iterable[Income],
    sales: Iterable[SaleOrder],
    avg_costs: Mapping[str, float],
) -> MonthlyProfitResult:
    total_expenses = sum_in_month(expenses, period)
    total_income = sum_in_month(income, period)
    lines = product_breakdown(delivered_in_month(sales, period), avg_costs)
    total_product_cost = sum((line.total for line in lines), 0.0)
    return MonthlyProfitResult(
        period=period,
        expenses=total_expenses,
        income=total_income,
        total_product_cost=total_product_cost,
        profit_loss=total_income - (total_expenses + total_product_cost),
        product_data=lines,
    )
