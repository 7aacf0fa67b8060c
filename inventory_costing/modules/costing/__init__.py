"""
Costing pipeline package.

- Keeps imports light: the Qt-backed RefreshJob is only imported on demand.
- Pure computations (average cost, purchase summary, monthly profit) take
  explicit inputs and return values; CostingPipeline wires them to storage.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .average_cost import compute_average_costs
from .change_detection import ChangeDetectingWriter, PersistenceError, WriteOutcome
from .history import ProfitHistory
from .monthly_profit import MonthlyProfitResult, reconcile_month
from .periods import MonthPeriod
from .pipeline import CostingPipeline, PipelineResult
from .purchase_summary import PurchaseLine, PurchaseSummary, summarize_purchases
from .sources import SourceReader, SourceReadError, SourceSnapshot

if TYPE_CHECKING:
    from .refresh_job import RefreshJob  # pragma: no cover

__all__ = [
    "ChangeDetectingWriter",
    "CostingPipeline",
    "MonthPeriod",
    "MonthlyProfitResult",
    "PersistenceError",
    "PipelineResult",
    "ProfitHistory",
    "PurchaseLine",
    "PurchaseSummary",
    "SourceReadError",
    "SourceReader",
    "SourceSnapshot",
    "WriteOutcome",
    "compute_average_costs",
    "create_refresh_job",
    "reconcile_month",
    "summarize_purchases",
]


def create_refresh_job(pipeline: CostingPipeline) -> "RefreshJob":
    """
    Factory for the background refresh runner.

    Importing it here (instead of at module import time) keeps PySide6 out of
    callers that only need the synchronous pipeline.
    """
    from .refresh_job import RefreshJob
    return RefreshJob(pipeline)
