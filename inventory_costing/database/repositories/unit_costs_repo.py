from __future__ import annotations

import sqlite3
from typing import Dict

from ...utils.validators import try_parse_float


class DomainError(Exception):
    """Domain-level error the controller/UI can surface (toast/snackbar)."""
    pass


class UnitCostsRepo:
    """
    Per-receipt unit cost overrides, keyed by stock_in_id.

    The table is sparse: receipts without a row simply carry no cost.
    """

    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn
        self.conn.row_factory = sqlite3.Row

    def set_unit_cost(self, stock_in_id: int, value) -> float:
        """
        Upsert the unit cost for one receipt and return the stored value.

        `value` may be raw text from an input box; anything that does not
        parse as a number is stored as 0, the same as clearing the field.
        """
        ok, parsed = try_parse_float(value)
        cost = parsed if ok else 0.0
        try:
            self.conn.execute(
                """
                INSERT INTO unit_costs(stock_in_id, unit_cost) VALUES (?, ?)
                ON CONFLICT(stock_in_id) DO UPDATE SET unit_cost = excluded.unit_cost
                """,
                (int(stock_in_id), cost),
            )
            self.conn.commit()
        except sqlite3.IntegrityError as e:
            self.conn.rollback()
            raise DomainError(f"Unknown stock receipt {stock_in_id}.") from e
        return cost

    def get(self, stock_in_id: int) -> float | None:
        row = self.conn.execute(
            "SELECT CAST(unit_cost AS REAL) AS unit_cost FROM unit_costs WHERE stock_in_id=?",
            (stock_in_id,),
        ).fetchone()
        return None if row is None else float(row["unit_cost"] or 0.0)

    def as_map(self) -> Dict[int, float]:
        """Full scan: {stock_in_id: unit_cost}."""
        rows = self.conn.execute(
            "SELECT stock_in_id, CAST(unit_cost AS REAL) AS unit_cost FROM unit_costs"
        ).fetchall()
        return {int(r["stock_in_id"]): float(r["unit_cost"] or 0.0) for r in rows}

