from __future__ import annotations

from ...database import ConnectionFactory
from ...database.repositories import MonthlyProfitRepo, MonthlyProfitSnapshot


class ProfitHistory:
    """Read-only view over every persisted monthly snapshot, newest first."""

    def __init__(self, connect: ConnectionFactory) -> None:
        self._connect = connect

    def list(self) -> list[MonthlyProfitSnapshot]:
        conn = self._connect()
        try:
            return MonthlyProfitRepo(conn).history()
        finally:
            conn.close()

    def get(self, month_key: str) -> MonthlyProfitSnapshot | None:
        conn = self._connect()
        try:
            return MonthlyProfitRepo(conn).get(month_key)
        finally:
            conn.close()
