# inventory_costing/database/repositories/monthly_profit_repo.py
from __future__ import annotations

import json
import sqlite3
from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class ProductCostLine:
    product_code: str
    quantity: float
    avg_cost: float
    total: float

    def to_dict(self) -> dict:
        return {
            "productCode": self.product_code,
            "quantity": self.quantity,
            "avgCost": self.avg_cost,
            "total": self.total,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "ProductCostLine":
        return cls(
            product_code=str(d.get("productCode", "")),
            quantity=float(d.get("quantity") or 0.0),
            avg_cost=float(d.get("avgCost") or 0.0),
            total=float(d.get("total") or 0.0),
        )


@dataclass(frozen=True)
class MonthlyProfitSnapshot:
    month_key: str          # 'YYYY-M'
    month: str              # 'June 2024'
    expenses: float
    income: float
    profit_loss: float
    total_product_cost: float
    product_data: tuple[ProductCostLine, ...] = field(default_factory=tuple)
    timestamp: str = ""


class MonthlyProfitRepo:
    """
    Persisted monthly profit snapshots, one row per month_key.

    Rows are created/updated only by the costing pipeline and are kept as
    history after their month has passed.
    """

    _COLS = (
        "month_key, month, expenses, income, profit_loss, "
        "total_product_cost, product_data, timestamp"
    )

    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn
        self.conn.row_factory = sqlite3.Row

    @staticmethod
    def _to_snapshot(r: sqlite3.Row) -> MonthlyProfitSnapshot:
        try:
            raw_lines = json.loads(r["product_data"] or "[]")
        except ValueError:
            raw_lines = []
        return MonthlyProfitSnapshot(
            month_key=r["month_key"],
            month=r["month"],
            expenses=float(r["expenses"] or 0.0),
            income=float(r["income"] or 0.0),
            profit_loss=float(r["profit_loss"] or 0.0),
            total_product_cost=float(r["total_product_cost"] or 0.0),
            product_data=tuple(ProductCostLine.from_dict(d) for d in raw_lines),
            timestamp=r["timestamp"],
        )

    def get(self, month_key: str) -> Optional[MonthlyProfitSnapshot]:
        row = self.conn.execute(
            f"SELECT {self._COLS} FROM monthly_profit WHERE month_key=?", (month_key,)
        ).fetchone()
        return self._to_snapshot(row) if row else None

    def upsert(self, snap: MonthlyProfitSnapshot) -> None:
        payload = json.dumps([line.to_dict() for line in snap.product_data])
        try:
            self.conn.execute(
                f"""
                INSERT INTO monthly_profit({self._COLS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(month_key) DO UPDATE SET
                    month = excluded.month,
                    expenses = excluded.expenses,
                    income = excluded.income,
                    profit_loss = excluded.profit_loss,
                    total_product_cost = excluded.total_product_cost,
                    product_data = excluded.product_data,
                    timestamp = excluded.timestamp
                """,
                (
                    snap.month_key, snap.month, snap.expenses, snap.income,
                    snap.profit_loss, snap.total_product_cost, payload, snap.timestamp,
                ),
            )
            self.conn.commit()
        except sqlite3.Error:
            self.conn.rollback()
            raise

    def history(self) -> list[MonthlyProfitSnapshot]:
        """All snapshots, newest timestamp first. No pagination."""
        rows = self.conn.execute(
            f"SELECT {self._COLS} FROM monthly_profit ORDER BY timestamp DESC, month_key DESC"
        ).fetchall()
        return [self._to_snapshot(r) for r in rows]
