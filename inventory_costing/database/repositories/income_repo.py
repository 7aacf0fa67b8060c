from __future__ import annotations

from dataclasses import dataclass

from .expenses_repo import AmountLedgerRepo, DomainError


@dataclass
class Income:
    income_id: int | None
    date: str
    amount: float
    description: str | None = None


class IncomeRepo(AmountLedgerRepo):
    """Income records; same rules as expenses, stored in the `income` table."""

    table = "income"
    id_col = "income_id"
    record_cls = Income


__all__ = ["IncomeRepo", "Income", "DomainError"]
