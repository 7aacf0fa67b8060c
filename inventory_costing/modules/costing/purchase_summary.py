from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Mapping, Optional

from ...database.repositories import StockReceipt


@dataclass(frozen=True)
class PurchaseLine:
    stock_in_id: int
    product_code: str
    quantity: int
    unit_cost: Optional[float]   # None = no cost entered yet
    line_cost: float


@dataclass(frozen=True)
class PurchaseSummary:
    lines: tuple[PurchaseLine, ...]
    total_purchase_cost: float


def summarize_purchases(
    receipts: Iterable[StockReceipt],
    unit_costs: Mapping[int, float],
) -> PurchaseSummary:
    """
    One row per receipt (code, qty, unit cost, line cost) plus the grand total.
    Missing unit costs contribute 0 to the total but stay None on the row so
    a display can tell "not entered" from an explicit 0.
    """
    lines = []
    total = 0.0
    for r in receipts:
        unit = unit_costs.get(r.stock_in_id)
        line_cost = float(unit or 0.0) * (r.quantity or 0)
        lines.append(PurchaseLine(r.stock_in_id, r.product_code, r.quantity, unit, line_cost))
        total += line_cost
    return PurchaseSummary(tuple(lines), total)
