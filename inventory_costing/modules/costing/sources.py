"""
Full-scan readers for the five raw collections.

The scans are independent, so they run side by side, each on its own
connection (sqlite3 connections cannot be shared across threads). There is
no transaction spanning them: a record written while a run is reading may
or may not be part of that run.
"""

from __future__ import annotations

import logging
import sqlite3
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Callable, Dict, Mapping, Optional

from ...constants import MAX_READ_THREADS
from ...database import ConnectionFactory
from ...database.repositories import (
    Expense,
    ExpensesRepo,
    Income,
    IncomeRepo,
    SaleOrder,
    SalesRepo,
    StockInRepo,
    StockReceipt,
    UnitCostsRepo,
)

EXPENSES = "expenses"
INCOME = "income"
STOCK_IN = "stockIn"
UNIT_COSTS = "unitCosts"
SALES = "sales"

COLLECTIONS = (EXPENSES, INCOME, STOCK_IN, UNIT_COSTS, SALES)

Reader = Callable[[sqlite3.Connection], object]

DEFAULT_READERS: Dict[str, Reader] = {
    EXPENSES: lambda conn: tuple(ExpensesRepo(conn).list_all()),
    INCOME: lambda conn: tuple(IncomeRepo(conn).list_all()),
    STOCK_IN: lambda conn: tuple(StockInRepo(conn).list_all()),
    UNIT_COSTS: lambda conn: MappingProxyType(UnitCostsRepo(conn).as_map()),
    SALES: lambda conn: tuple(SalesRepo(conn).list_all()),
}


class SourceReadError(Exception):
    """One or more collections could not be read; the run must not persist anything."""

    def __init__(self, failures: Mapping[str, BaseException]) -> None:
        self.failures = dict(failures)
        names = ", ".join(sorted(self.failures))
        super().__init__(f"Could not read: {names}")


@dataclass(frozen=True)
class SourceSnapshot:
    expenses: tuple[Expense, ...] = ()
    income: tuple[Income, ...] = ()
    stock_receipts: tuple[StockReceipt, ...] = ()
    unit_costs: Mapping[int, float] = field(default_factory=dict)
    sales: tuple[SaleOrder, ...] = ()


class SourceReader:
    def __init__(
        self,
        connect: ConnectionFactory,
        *,
        readers: Optional[Mapping[str, Reader]] = None,
        max_threads: int = MAX_READ_THREADS,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._connect = connect
        self._readers = dict(DEFAULT_READERS)
        if readers:
            self._readers.update(readers)
        self._max_threads = max(1, int(max_threads))
        self._log = logger or logging.getLogger(__name__)

    def _read_one(self, name: str):
        conn = self._connect()
        try:
            return self._readers[name](conn)
        finally:
            conn.close()

    def read_all(self) -> SourceSnapshot:
        """
        Scan every collection concurrently and wait for all of them.

        Raises SourceReadError listing every collection that failed.
        """
        results: Dict[str, object] = {}
        failures: Dict[str, BaseException] = {}
        with ThreadPoolExecutor(
            max_workers=self._max_threads, thread_name_prefix="costing-read"
        ) as pool:
            futures = {name: pool.submit(self._read_one, name) for name in COLLECTIONS}
            for name, fut in futures.items():
                exc = fut.exception()
                if exc is not None:
                    self._log.debug("read of %s failed", name, exc_info=exc)
                    failures[name] = exc
                else:
                    results[name] = fut.result()

        if failures:
            raise SourceReadError(failures)

        return SourceSnapshot(
            expenses=results[EXPENSES],
            income=results[INCOME],
            stock_receipts=results[STOCK_IN],
            unit_costs=results[UNIT_COSTS],
            sales=results[SALES],
        )
