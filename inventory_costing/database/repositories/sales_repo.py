from __future__ import annotations
from dataclasses import dataclass, field
import sqlite3
from contextlib import contextmanager
from typing import Iterable

from ...constants import SALE_STATUSES, STATUS_PROCESSING
from ...utils.validators import is_valid_phone, non_empty


class DomainError(Exception):
    """Domain-level error raised for validation issues."""
    pass


@dataclass
class SaleLine:
    product_code: str
    quantity: object  # as entered; aggregation parses it leniently


@dataclass
class SaleOrder:
    sale_id: int | None
    date: str
    status: str = STATUS_PROCESSING
    destination_branch: str | None = None
    customer_name: str | None = None
    full_address: str | None = None
    phone1: str | None = None
    phone2: str | None = None
    cod_amount: float | None = None
    products: list[SaleLine] = field(default_factory=list)


class SalesRepo:
    """
    Sale orders with their product lines.

    Key behavior:
      - Lines live in sale_items and are replaced wholesale on update.
      - Status is one of SALE_STATUSES; only 'Delivered' orders count toward
        monthly product cost.
      - list_all() is the full scan consumed by the costing pipeline;
        list_for_display() adds the newest-first serial numbers.
    """

    _HEADER_COLS = (
        "sale_id, date, status, destination_branch, customer_name, full_address, "
        "phone1, phone2, CAST(cod_amount AS REAL) AS cod_amount"
    )

    def __init__(self, conn: sqlite3.Connection):
        # ensure rows behave like dicts/tuples
        conn.row_factory = sqlite3.Row
        self.conn = conn

    @contextmanager
    def _immediate_tx(self):
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

    # ---------------------------------------------------------------------
    # VALIDATION
    # ---------------------------------------------------------------------
    @staticmethod
    def validate(order: SaleOrder) -> None:
        """
        All fields except phone2 are required; phones are exactly 10 digits.
        """
        required = (
            order.date,
            order.destination_branch,
            order.customer_name,
            order.full_address,
            order.phone1,
        )
        if not all(non_empty(v) for v in required) or order.cod_amount in (None, ""):
            raise DomainError("All fields except Phone No. 2 are required.")
        if not is_valid_phone(order.phone1):
            raise DomainError("Phone No. 1 must be exactly 10 digits.")
        if order.phone2 and not is_valid_phone(order.phone2):
            raise DomainError("Phone No. 2 must be exactly 10 digits if provided.")
        if order.status not in SALE_STATUSES:
            raise DomainError(f"Unknown status {order.status!r}.")

    # ---------------------------------------------------------------------
    # READ
    # ---------------------------------------------------------------------
    def _lines_by_sale(self) -> dict[int, list[SaleLine]]:
        out: dict[int, list[SaleLine]] = {}
        for r in self.conn.execute(
            "SELECT sale_id, product_code, quantity FROM sale_items ORDER BY sale_id, item_id"
        ):
            out.setdefault(int(r["sale_id"]), []).append(
                SaleLine(r["product_code"], r["quantity"])
            )
        return out

    def _to_order(self, row: sqlite3.Row, lines: Iterable[SaleLine]) -> SaleOrder:
        return SaleOrder(
            sale_id=int(row["sale_id"]),
            date=row["date"],
            status=row["status"],
            destination_branch=row["destination_branch"],
            customer_name=row["customer_name"],
            full_address=row["full_address"],
            phone1=row["phone1"],
            phone2=row["phone2"],
            cod_amount=row["cod_amount"],
            products=list(lines),
        )

    def list_all(self) -> list[SaleOrder]:
        """Every order with its lines, in insertion order."""
        lines = self._lines_by_sale()
        rows = self.conn.execute(
            f"SELECT {self._HEADER_COLS} FROM sales ORDER BY sale_id"
        ).fetchall()
        return [self._to_order(r, lines.get(int(r["sale_id"]), [])) for r in rows]

    def get(self, sale_id: int) -> SaleOrder | None:
        row = self.conn.execute(
            f"SELECT {self._HEADER_COLS} FROM sales WHERE sale_id=?", (sale_id,)
        ).fetchone()
        if row is None:
            return None
        lines = [
            SaleLine(r["product_code"], r["quantity"])
            for r in self.conn.execute(
                "SELECT product_code, quantity FROM sale_items WHERE sale_id=? ORDER BY item_id",
                (sale_id,),
            )
        ]
        return self._to_order(row, lines)

    def list_for_display(self) -> list[dict]:
        """
        Orders newest first (by date, then id) with a `serial` counting down
        from the number of orders, so the newest order carries the highest serial.
        """
        orders = sorted(
            self.list_all(),
            key=lambda o: (o.date or "", o.sale_id or 0),
            reverse=True,
        )
        total = len(orders)
        out = []
        for idx, o in enumerate(orders):
            d = dict(o.__dict__)
            d["products"] = [dict(p.__dict__) for p in o.products]
            d["serial"] = total - idx
            out.append(d)
        return out

    # ---------------------------------------------------------------------
    # WRITE
    # ---------------------------------------------------------------------
    def _insert_lines(self, sale_id: int, lines: Iterable[SaleLine]) -> None:
        for line in lines:
            code = (line.product_code or "").strip()
            if not code:
                continue
            self.conn.execute(
                "INSERT INTO sale_items(sale_id, product_code, quantity) VALUES (?, ?, ?)",
                (sale_id, code, line.quantity),
            )

    def create(self, order: SaleOrder) -> int:
        self.validate(order)
        with self._immediate_tx():
            cur = self.conn.execute(
                """
                INSERT INTO sales(date, status, destination_branch, customer_name,
                                  full_address, phone1, phone2, cod_amount)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    order.date.strip(), order.status, order.destination_branch,
                    order.customer_name, order.full_address, order.phone1,
                    order.phone2 or None, order.cod_amount,
                ),
            )
            sale_id = int(cur.lastrowid)
            self._insert_lines(sale_id, order.products)
        return sale_id

    def update(self, sale_id: int, order: SaleOrder) -> None:
        self.validate(order)
        with self._immediate_tx():
            cur = self.conn.execute(
                """
                UPDATE sales
                   SET date=?, status=?, destination_branch=?, customer_name=?,
                       full_address=?, phone1=?, phone2=?, cod_amount=?
                 WHERE sale_id=?
                """,
                (
                    order.date.strip(), order.status, order.destination_branch,
                    order.customer_name, order.full_address, order.phone1,
                    order.phone2 or None, order.cod_amount, sale_id,
                ),
            )
            if cur.rowcount == 0:
                raise DomainError(f"No sale with id {sale_id}.")
            self.conn.execute("DELETE FROM sale_items WHERE sale_id=?", (sale_id,))
            self._insert_lines(sale_id, order.products)

    def set_status(self, sale_id: int, status: str) -> None:
        if status not in SALE_STATUSES:
            raise DomainError(f"Unknown status {status!r}.")
        cur = self.conn.execute("UPDATE sales SET status=? WHERE sale_id=?", (status, sale_id))
        if cur.rowcount == 0:
            self.conn.rollback()
            raise DomainError(f"No sale with id {sale_id}.")
        self.conn.commit()
