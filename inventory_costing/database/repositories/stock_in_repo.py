from __future__ import annotations

"""
Repository for stock receipts (goods received into inventory).

Each receipt is one delivery of one product code. Unit costs are entered
later, per receipt, through UnitCostsRepo; a receipt may never get one.

Conventions:
- Dates are ISO 'YYYY-MM-DD' strings as entered.
- Quantities are positive integers.
"""

import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass
from typing import List

from ...utils.validators import is_positive_integer, non_empty


class DomainError(Exception):
    """Domain-level error suitable for surfacing to the UI."""
    pass


@dataclass
class StockReceipt:
    stock_in_id: int | None
    date: str
    product_code: str
    product_details: str
    quantity: int


class StockInRepo:
    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn
        self.conn.row_factory = sqlite3.Row

    @contextmanager
    def _immediate_tx(self):
        """
        Start an IMMEDIATE transaction, commit on success, rollback on error.
        """
        cur = self.conn.cursor()
        try:
            cur.execute("BEGIN IMMEDIATE")
            yield
            self.conn.commit()
        except Exception:
            self.conn.rollback()
            raise
        finally:
            cur.close()

    # ---------------------------- Reads ----------------------------

    def list_all(self) -> list[StockReceipt]:
        """Every receipt, oldest first."""
        rows = self.conn.execute(
            "SELECT stock_in_id, date, product_code, product_details, quantity "
            "FROM stock_in ORDER BY stock_in_id"
        ).fetchall()
        return [StockReceipt(**r) for r in rows]

    def get(self, stock_in_id: int) -> StockReceipt | None:
        r = self.conn.execute(
            "SELECT stock_in_id, date, product_code, product_details, quantity "
            "FROM stock_in WHERE stock_in_id=?",
            (stock_in_id,),
        ).fetchone()
        return StockReceipt(**r) if r else None

    def search(self, query: str = "") -> list[StockReceipt]:
        """
        Case-insensitive substring match on product code or details.
        A blank query returns everything.
        """
        q = (query or "").strip().lower()
        receipts = self.list_all()
        if not q:
            return receipts
        return [
            r for r in receipts
            if q in r.product_code.lower() or q in (r.product_details or "").lower()
        ]

    def unique_product_codes(self) -> List[str]:
        """Distinct non-empty product codes in first-received order."""
        rows = self.conn.execute(
            "SELECT product_code, MIN(stock_in_id) AS first_id FROM stock_in "
            "WHERE TRIM(product_code) <> '' "
            "GROUP BY product_code ORDER BY first_id"
        ).fetchall()
        return [r["product_code"] for r in rows]

    # ---------------------------- Writes ----------------------------

    def create(self, date: str, product_code: str, product_details: str, quantity) -> int:
        if not non_empty(date):
            raise DomainError("Date is required.")
        if not non_empty(product_code):
            raise DomainError("Product code is required.")
        if not non_empty(product_details):
            raise DomainError("Product details are required.")
        if not is_positive_integer(quantity):
            raise DomainError("Quantity must be a positive integer.")
        with self._immediate_tx():
            cur = self.conn.execute(
                "INSERT INTO stock_in(date, product_code, product_details, quantity) "
                "VALUES (?, ?, ?, ?)",
                (str(date).strip(), product_code.strip(), product_details.strip(), int(quantity)),
            )
            return int(cur.lastrowid)

    def delete(self, stock_in_id: int) -> None:
        """Remove a receipt; its unit cost goes with it (ON DELETE CASCADE)."""
        with self._immediate_tx():
            self.conn.execute("DELETE FROM stock_in WHERE stock_in_id=?", (stock_in_id,))
