from __future__ import annotations

"""
Repository for expense records.

Schema reference (see `database/schema.py`):

CREATE TABLE expenses (
    expense_id  INTEGER PRIMARY KEY AUTOINCREMENT,
    date        TEXT    NOT NULL,
    amount      NUMERIC NOT NULL CHECK (CAST(amount AS REAL) >= 0),
    description TEXT
);

The `date` column is free text on purpose: it is stored exactly as the data
entry screen sent it. Month aggregation parses it and skips what does not
parse, so this repository does not reject odd dates. Amounts must parse as
non-negative numbers and are returned as `float`.

`IncomeRepo` (income_repo.py) shares this implementation against the
`income` table.
"""

import sqlite3
from dataclasses import dataclass
from typing import Optional, List, Dict

from ...utils.validators import try_parse_float


class DomainError(Exception):
    """Domain-level error raised for validation issues."""
    pass


@dataclass
class Expense:
    expense_id: int | None
    date: str
    amount: float
    description: str | None = None


class AmountLedgerRepo:
    """
    CRUD for a dated-amount table (expenses, income).

    Persists changes immediately (auto-commit) after write operations.
    Subclasses set `table`, `id_col` and `record_cls`.
    """

    table = "expenses"
    id_col = "expense_id"
    record_cls: type = Expense

    def __init__(self, conn: sqlite3.Connection):
        # ensure rows behave like dicts/tuples
        conn.row_factory = sqlite3.Row
        self.conn = conn

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    @staticmethod
    def _normalize_amount(amount) -> float:
        ok, val = try_parse_float(amount)
        if not ok or val is None:
            raise DomainError("Amount must be a number.")
        if val < 0:
            raise DomainError("Amount must be non-negative.")
        return val

    @staticmethod
    def _normalize_date(date: str) -> str:
        if date is None or not str(date).strip():
            raise DomainError("Date cannot be empty.")
        return str(date).strip()

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def _select(self) -> str:
        return (
            f"SELECT {self.id_col}, date, CAST(amount AS REAL) AS amount, description "
            f"FROM {self.table}"
        )

    def _to_record(self, row: sqlite3.Row):
        return self.record_cls(
            row[self.id_col],
            row["date"],
            float(row["amount"] or 0.0),
            row["description"],
        )

    def list_all(self) -> list:
        """Full scan in insertion order; no filtering."""
        rows = self.conn.execute(
            self._select() + f" ORDER BY {self.id_col}"
        ).fetchall()
        return [self._to_record(r) for r in rows]

    def list_for_display(self) -> List[Dict]:
        """Rows as dicts ordered by date (DESC) then id (DESC)."""
        rows = self.conn.execute(
            self._select() + f" ORDER BY date DESC, {self.id_col} DESC"
        ).fetchall()
        return [dict(r) for r in rows]

    def get(self, record_id: int):
        """Fetch a single record by ID. Returns None if not found."""
        row = self.conn.execute(
            self._select() + f" WHERE {self.id_col} = ?", (record_id,)
        ).fetchone()
        return self._to_record(row) if row else None

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create(self, date: str, amount, description: Optional[str] = None) -> int:
        """Insert a record and return its new id."""
        date_n = self._normalize_date(date)
        amount_n = self._normalize_amount(amount)
        desc_n = description.strip() if description and description.strip() else None
        cur = self.conn.execute(
            f"INSERT INTO {self.table}(date, amount, description) VALUES (?,?,?)",
            (date_n, amount_n, desc_n),
        )
        self.conn.commit()
        return int(cur.lastrowid)

    def update(self, record_id: int, date: str, amount, description: Optional[str] = None) -> None:
        """Same validation rules as `create` apply."""
        date_n = self._normalize_date(date)
        amount_n = self._normalize_amount(amount)
        desc_n = description.strip() if description and description.strip() else None
        cur = self.conn.execute(
            f"UPDATE {self.table} SET date = ?, amount = ?, description = ? WHERE {self.id_col} = ?",
            (date_n, amount_n, desc_n, record_id),
        )
        if cur.rowcount == 0:
            self.conn.rollback()
            raise DomainError(f"No {self.table} record with id {record_id}.")
        self.conn.commit()

    def delete(self, record_id: int) -> None:
        cur = self.conn.execute(
            f"DELETE FROM {self.table} WHERE {self.id_col} = ?", (record_id,)
        )
        if cur.rowcount == 0:
            self.conn.rollback()
            raise DomainError(f"No {self.table} record with id {record_id}.")
        self.conn.commit()


class ExpensesRepo(AmountLedgerRepo):
    table = "expenses"
    id_col = "expense_id"
    record_cls = Expense
