# tests/conftest.py
# ---------------------------------------------------------------------
# Ground rules:
# - Every test gets its own file-backed SQLite DB under tmp_path
#   (file-backed so worker threads can open their own connections)
# - `connect` is the connection factory handed to the pipeline
# - `conn` is a plain connection for seeding/asserting, closed after the test
# - pytest-qt owns QApplication (qtbot fixture) for RefreshJob tests
# ---------------------------------------------------------------------

from __future__ import annotations

import logging
import os
import sqlite3
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

# Headless runs: let Qt start without a display server.
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from inventory_costing.database import connection_factory, get_connection
from inventory_costing.database.repositories import (
    ExpensesRepo,
    IncomeRepo,
    SaleLine,
    SaleOrder,
    SalesRepo,
    StockInRepo,
    UnitCostsRepo,
)
from inventory_costing.modules.costing import ChangeDetectingWriter, CostingPipeline


# ---------- DB ----------
@pytest.fixture()
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "costing.db"


@pytest.fixture()
def connect(db_path: Path):
    return connection_factory(db_path)


@pytest.fixture()
def conn(db_path: Path):
    con = get_connection(db_path)
    try:
        yield con
    finally:
        con.close()


# ---------- Clock ----------
class TickingClock:
    """Each call is one minute after the previous one."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2024, 6, 20, 9, 0, tzinfo=timezone.utc)
        self.calls = 0

    def __call__(self) -> datetime:
        self.calls += 1
        self.now = self.now + timedelta(minutes=1)
        return self.now


@pytest.fixture()
def clock() -> TickingClock:
    return TickingClock()


@pytest.fixture()
def events() -> logging.Logger:
    return logging.getLogger("tests.costing.events")


@pytest.fixture()
def pipeline(connect, clock, events) -> CostingPipeline:
    return CostingPipeline(connect, writer=ChangeDetectingWriter(clock=clock), event_logger=events)


# ---------- Seeding helpers ----------
class Seeder:
    def __init__(self, con: sqlite3.Connection) -> None:
        self.expenses = ExpensesRepo(con)
        self.income = IncomeRepo(con)
        self.stock = StockInRepo(con)
        self.unit_costs = UnitCostsRepo(con)
        self.sales = SalesRepo(con)

    def receipt(self, code: str, qty: int, unit_cost=None, date: str = "2024-06-01") -> int:
        rid = self.stock.create(date, code, f"{code} details", qty)
        if unit_cost is not None:
            self.unit_costs.set_unit_cost(rid, unit_cost)
        return rid

    def sale(self, date: str, lines, status: str = "Delivered") -> int:
        return self.sales.create(make_order(date, lines, status))


def make_order(date: str, lines, status: str = "Delivered") -> SaleOrder:
    return SaleOrder(
        sale_id=None,
        date=date,
        status=status,
        destination_branch="Central",
        customer_name="A. Customer",
        full_address="1 Market Road",
        phone1="0123456789",
        phone2=None,
        cod_amount=250.0,
        products=[SaleLine(code, qty) for code, qty in lines],
    )


@pytest.fixture()
def seed(conn) -> Seeder:
    return Seeder(conn)


@pytest.fixture()
def order():
    """Factory fixture: order(date, [(code, qty), ...], status='Delivered')."""
    return make_order
