from __future__ import annotations

import sqlite3
from typing import Optional

from ...constants import PURCHASE_SUMMARY_ID


class PurchaseSummaryRepo:
    """Single-row purchase cost total (purchaseSummary/totalPurchaseCost)."""

    def __init__(self, conn: sqlite3.Connection, summary_id: str = PURCHASE_SUMMARY_ID) -> None:
        self.conn = conn
        self.conn.row_factory = sqlite3.Row
        self.summary_id = summary_id

    def get(self) -> Optional[dict]:
        """{'value': float, 'updated_at': str} or None if never computed."""
        row = self.conn.execute(
            "SELECT value, updated_at FROM purchase_summary WHERE summary_id=?",
            (self.summary_id,),
        ).fetchone()
        if row is None:
            return None
        return {"value": float(row["value"] or 0.0), "updated_at": row["updated_at"]}

    def upsert(self, value: float, updated_at: str) -> None:
        try:
            self.conn.execute(
                """
                INSERT INTO purchase_summary(summary_id, value, updated_at) VALUES (?, ?, ?)
                ON CONFLICT(summary_id) DO UPDATE
                   SET value = excluded.value, updated_at = excluded.updated_at
                """,
                (self.summary_id, float(value), updated_at),
            )
            self.conn.commit()
        except sqlite3.Error:
            self.conn.rollback()
            raise
