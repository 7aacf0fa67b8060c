from __future__ import annotations

import sqlite3
from dataclasses import dataclass
from typing import Dict, Iterable


@dataclass(frozen=True)
class AverageCostEntry:
    product_code: str
    avg_cost: float


class AverageCostsRepo:
    """
    Derived per-product average unit cost (averageCosts view).

    Written only by the costing pipeline; the whole set is replaced on
    every recompute so codes that disappeared from stock do not linger.
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn
        self.conn.row_factory = sqlite3.Row

    def list_all(self) -> list[AverageCostEntry]:
        rows = self.conn.execute(
            "SELECT product_code, avg_cost FROM average_costs ORDER BY product_code"
        ).fetchall()
        return [AverageCostEntry(r["product_code"], float(r["avg_cost"] or 0.0)) for r in rows]

    def as_map(self) -> Dict[str, float]:
        return {e.product_code: e.avg_cost for e in self.list_all()}

    def replace_all(self, entries: Iterable[AverageCostEntry]) -> None:
        """Delete + insert in one transaction; readers never see a partial set."""
        try:
            self.conn.execute("DELETE FROM average_costs")
            self.conn.executemany(
                "INSERT INTO average_costs(product_code, avg_cost) VALUES (?, ?)",
                [(e.product_code, float(e.avg_cost)) for e in entries],
            )
            self.conn.commit()
        except sqlite3.Error:
            self.conn.rollback()
            raise
