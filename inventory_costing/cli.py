# inventory_costing/cli.py
"""
Recompute the derived costing views from the command line and print them.

    python -m inventory_costing.cli --month 2024-06 --history
"""

from __future__ import annotations

import argparse
import sys
from typing import Optional, Sequence

from .database import connection_factory
from .modules.costing import CostingPipeline, MonthPeriod, SourceReadError
from .utils.helpers import fmt_money
from .utils.loggers import get_logger

log = get_logger("inventory_costing.cli")


def _print_result(result, out) -> None:
    m = result.monthly
    print(m.period.label, file=out)
    print(f"  Monthly Expenses:    {fmt_money(m.expenses)}", file=out)
    print(f"  Monthly Income:      {fmt_money(m.income)}", file=out)
    print(f"  Monthly Profit/Loss: {fmt_money(m.profit_loss)}", file=out)
    print("", file=out)
    print(f"  {'Code':<16}{'Qty':>10}{'Unit':>12}{'Total':>14}", file=out)
    for line in m.product_data:
        print(
            f"  {line.product_code:<16}{line.quantity:>10g}"
            f"{fmt_money(line.avg_cost):>12}{fmt_money(line.total):>14}",
            file=out,
        )
    print(f"  Total Monthly Product Cost: {fmt_money(m.total_product_cost)}", file=out)
    print(f"  Total Purchase Cost:        {fmt_money(result.purchases.total_purchase_cost)}", file=out)
    outcomes = ", ".join(f"{k}={v.value}" for k, v in result.outcomes.items())
    print(f"  Saved: {outcomes}", file=out)


def _print_history(snapshots, out) -> None:
    print("", file=out)
    print("Previous Monthly Data", file=out)
    for s in snapshots:
        print(
            f"  {s.month:<16} expenses {fmt_money(s.expenses)}  income {fmt_money(s.income)}  "
            f"profit/loss {fmt_money(s.profit_loss)}  product cost {fmt_money(s.total_product_cost)}",
            file=out,
        )


def main(argv: Optional[Sequence[str]] = None, out=None) -> int:
    out = out or sys.stdout
    parser = argparse.ArgumentParser(description="Recompute average costs, purchase total and monthly profit")
    parser.add_argument("--db", default=None, help="SQLite database path (default: data/costing.db)")
    parser.add_argument("--month", default=None, help="Month to reconcile as YYYY-MM (default: current month)")
    parser.add_argument("--history", action="store_true", help="Also print every saved monthly snapshot")
    args = parser.parse_args(argv)

    try:
        period = MonthPeriod.parse(args.month) if args.month else MonthPeriod.current()
    except ValueError as e:
        parser.error(str(e))

    pipeline = CostingPipeline(connection_factory(args.db))
    try:
        result = pipeline.run(period)
    except SourceReadError as e:
        log.error("%s", e)
        return 2

    _print_result(result, out)
    for view, err in result.errors.items():
        log.error("%s: %s", view, err)
    if args.history:
        _print_history(pipeline.history(), out)
    return 0 if result.ok else 1


if __name__ == "__main__":
    sys.exit(main())
