from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Mapping

from ...constants import AVG_COST_PLACES
from ...database.repositories import AverageCostEntry, StockReceipt

_CENTS = Decimal(1).scaleb(-AVG_COST_PLACES)


def _round_half_up(value: float) -> float:
    # Decimal(float) is the exact binary value, so 0.125 rounds to 0.13
    return float(Decimal(value).quantize(_CENTS, rounding=ROUND_HALF_UP))


def compute_average_costs(
    receipts: Iterable[StockReceipt],
    unit_costs: Mapping[int, float],
) -> list[AverageCostEntry]:
    """
    Quantity-weighted average unit cost per product code.

    A receipt's unit cost is looked up by the receipt's own id, so two
    deliveries of the same code at different prices both feed one average:

        avg(code) = sum(unit_cost * qty) / sum(qty), rounded half up to 2 places

    Receipts without a unit cost count at 0 (they still add quantity).
    Codes come out in first-received order.
    """
    cost_sum: dict[str, float] = {}
    qty_sum: dict[str, float] = {}
    for r in receipts:
        unit = float(unit_costs.get(r.stock_in_id, 0.0) or 0.0)
        qty = r.quantity or 0
        cost_sum[r.product_code] = cost_sum.get(r.product_code, 0.0) + unit * qty
        qty_sum[r.product_code] = qty_sum.get(r.product_code, 0) + qty

    out: list[AverageCostEntry] = []
    for code, cost in cost_sum.items():
        qty = qty_sum[code]
        avg = _round_half_up(cost / qty) if qty > 0 else 0.0
        out.append(AverageCostEntry(code, avg))
    return out


def average_cost_map(entries: Iterable[AverageCostEntry]) -> dict[str, float]:
    return {e.product_code: e.avg_cost for e in entries}
