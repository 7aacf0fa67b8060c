# inventory_costing/modules/costing/pipeline.py
from __future__ import annotations

import logging
import sqlite3
import traceback
from dataclasses import dataclass, field
from typing import Callable, Dict, Optional

from ...constants import PURCHASE_SUMMARY_ID
from ...database import ConnectionFactory
from ...database.versioning import SchemaVersionError
from ...database.repositories import (
    AverageCostEntry,
    AverageCostsRepo,
    MonthlyProfitRepo,
    MonthlyProfitSnapshot,
    PurchaseSummaryRepo,
)
from ...utils.loggers import get_event_logger, log_event
from .average_cost import average_cost_map, compute_average_costs
from .history import ProfitHistory
from .change_detection import ChangeDetectingWriter, PersistenceError, WriteOutcome
from .monthly_profit import MonthlyProfitResult, reconcile_month
from .periods import MonthPeriod
from .purchase_summary import PurchaseSummary, summarize_purchases
from .sources import SourceReader, SourceReadError, SourceSnapshot

VIEW_AVERAGE_COSTS = "averageCosts"
VIEW_PURCHASE_SUMMARY = "purchaseSummary"
VIEW_MONTHLY_PROFIT = "monthlyProfit"


def document_key(view: str, doc_id: str = "") -> str:
    return f"{view}/{doc_id}" if doc_id else view


@dataclass
class PipelineResult:
    """In-memory outputs of one run, whatever happened to persistence."""

    generation: int
    period: MonthPeriod
    average_costs: list[AverageCostEntry]
    purchases: PurchaseSummary
    monthly: MonthlyProfitResult
    outcomes: Dict[str, WriteOutcome] = field(default_factory=dict)
    errors: Dict[str, PersistenceError] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.errors

    @property
    def superseded(self) -> bool:
        """A newer run already committed at least one of this run's views."""
        return any(o is WriteOutcome.SUPERSEDED for o in self.outcomes.values())


class CostingPipeline:
    """
    Recompute every derived view from the raw collections.

    Evaluation order:
      level 0  read expenses, income, stockIn, unitCosts, sales (concurrently)
      level 1  average costs, purchase summary  (stockIn + unitCosts)
      level 2  monthly profit                   (expenses, income, sales, level-1 avg costs)

    A read failure aborts the run before anything is written. Write failures
    are collected per view; one view failing to persist does not stop the
    others (monthly profit always uses the freshly computed averages).
    """

    def __init__(
        self,
        connect: ConnectionFactory,
        *,
        writer: Optional[ChangeDetectingWriter] = None,
        reader: Optional[SourceReader] = None,
        logger: Optional[logging.Logger] = None,
        event_logger: Optional[logging.Logger] = None,
    ) -> None:
        self._connect = connect
        self.writer = writer or ChangeDetectingWriter()
        self.reader = reader or SourceReader(connect)
        self._log = logger or logging.getLogger(__name__)
        self._events = event_logger or get_event_logger()

    # ---- pure stages ----

    @staticmethod
    def compute(snapshot: SourceSnapshot, period: MonthPeriod):
        avg = compute_average_costs(snapshot.stock_receipts, snapshot.unit_costs)
        purchases = summarize_purchases(snapshot.stock_receipts, snapshot.unit_costs)
        monthly = reconcile_month(
            period,
            snapshot.expenses,
            snapshot.income,
            snapshot.sales,
            average_cost_map(avg),
        )
        return avg, purchases, monthly

    # ---- run ----

    def run(self, period: Optional[MonthPeriod] = None, *, raise_on_error: bool = False) -> PipelineResult:
        period = period or MonthPeriod.current()
        generation = self.writer.next_generation()
        ctx = {"month_key": period.key, "generation": generation}

        log_event(self._events, "refresh", "read", "Reading source collections", ctx)
        try:
            snapshot = self.reader.read_all()
        except SourceReadError as exc:
            log_event(
                self._events, "refresh", "read", "Source read failed; run aborted",
                {**ctx, "failed": sorted(exc.failures)}, level=logging.WARNING,
            )
            raise

        avg, purchases, monthly = self.compute(snapshot, period)
        result = PipelineResult(generation, period, avg, purchases, monthly)

        try:
            conn = self._connect()
        except (sqlite3.Error, SchemaVersionError) as exc:
            self._log.debug("Opening the write connection failed:\n%s", traceback.format_exc())
            keys = {
                VIEW_AVERAGE_COSTS: document_key(VIEW_AVERAGE_COSTS),
                VIEW_PURCHASE_SUMMARY: document_key(VIEW_PURCHASE_SUMMARY, PURCHASE_SUMMARY_ID),
                VIEW_MONTHLY_PROFIT: document_key(VIEW_MONTHLY_PROFIT, period.key),
            }
            if monthly.is_empty:
                result.outcomes[VIEW_MONTHLY_PROFIT] = WriteOutcome.SKIPPED_EMPTY
                del keys[VIEW_MONTHLY_PROFIT]
            for view, key in keys.items():
                result.errors[view] = PersistenceError(key, exc)
            conn = None

        if conn is not None:
            self._persist_views(conn, result)

        log_event(
            self._events, "refresh", "done", "Derived views recomputed",
            {
                **ctx,
                "outcomes": {k: v.value for k, v in result.outcomes.items()},
                "errors": sorted(result.errors),
                "profit_loss": monthly.profit_loss,
            },
            level=logging.INFO if result.ok else logging.WARNING,
        )
        if raise_on_error and result.errors:
            raise next(iter(result.errors.values()))
        return result

    def _persist_views(self, conn: sqlite3.Connection, result: PipelineResult) -> None:
        generation = result.generation
        avg, purchases, monthly = result.average_costs, result.purchases, result.monthly
        try:
            self._persist(
                result, VIEW_AVERAGE_COSTS,
                lambda: self.writer.replace(
                    document_key(VIEW_AVERAGE_COSTS), generation,
                    save=lambda: AverageCostsRepo(conn).replace_all(avg),
                ),
            )
            self._persist(
                result, VIEW_PURCHASE_SUMMARY,
                lambda: self._write_purchase_summary(conn, generation, purchases),
            )
            if monthly.is_empty:
                result.outcomes[VIEW_MONTHLY_PROFIT] = WriteOutcome.SKIPPED_EMPTY
            else:
                self._persist(
                    result, VIEW_MONTHLY_PROFIT,
                    lambda: self._write_monthly(conn, generation, monthly),
                )
        finally:
            conn.close()

    def _persist(self, result: PipelineResult, view: str, write: Callable[[], WriteOutcome]) -> None:
        try:
            result.outcomes[view] = write()
        except PersistenceError as exc:
            self._log.debug("Persisting %s failed:\n%s", view, traceback.format_exc())
            result.errors[view] = exc

    def _write_purchase_summary(self, conn, generation: int, purchases: PurchaseSummary) -> WriteOutcome:
        repo = PurchaseSummaryRepo(conn)

        def load():
            current = repo.get()
            return None if current is None else {"value": current["value"]}

        return self.writer.write_if_changed(
            document_key(VIEW_PURCHASE_SUMMARY, repo.summary_id),
            generation,
            {"value": purchases.total_purchase_cost},
            load=load,
            save=lambda ts: repo.upsert(purchases.total_purchase_cost, ts),
        )

    def _write_monthly(self, conn, generation: int, monthly: MonthlyProfitResult) -> WriteOutcome:
        repo = MonthlyProfitRepo(conn)

        def load():
            snap = repo.get(monthly.period.key)
            if snap is None:
                return None
            return {
                "expenses": snap.expenses,
                "income": snap.income,
                "total_product_cost": snap.total_product_cost,
                "profit_loss": snap.profit_loss,
            }

        return self.writer.write_if_changed(
            document_key(VIEW_MONTHLY_PROFIT, monthly.period.key),
            generation,
            monthly.monitored(),
            load=load,
            save=lambda ts: repo.upsert(monthly.to_snapshot(ts)),
        )

    # ---- reads of derived views ----

    def history(self) -> list[MonthlyProfitSnapshot]:
        return ProfitHistory(self._connect).list()
