"""
modules/costing/refresh_job.py

Purpose
-------
Run a costing pipeline refresh off the caller's thread and report back via
duck-typed callbacks, so a view can trigger it on load or on pull-to-refresh
without blocking.

Public interface
----------------
- RefreshJob.run_async(period, callbacks) -> int   (the run's ticket)

Where callbacks is any object (or simple namespace) that exposes:
- phase(text: str)
- finished(success: bool, message: str, result: Optional[PipelineResult])

Overlapping refreshes are allowed. Each run's writes are checked against the
newest committed run for the same document, so an older run that finishes
late is reported with result.superseded == True and leaves storage alone.
"""

from __future__ import annotations

import itertools
import logging
import threading
import traceback
from dataclasses import dataclass
from typing import Callable, Optional

from PySide6.QtCore import QObject, QThreadPool

from .periods import MonthPeriod
from .pipeline import CostingPipeline, PipelineResult
from .sources import SourceReadError
from .workers import JobRunnable, safe_call


def _fmt_err(msg: str, exc: BaseException | None = None) -> str:
    if exc is None:
        return msg
    return f"{msg}\n\n{exc.__class__.__name__}: {exc}"


@dataclass
class _Callbacks:
    phase: Optional[Callable[[str], None]] = None
    finished: Optional[Callable[[bool, str, Optional[PipelineResult]], None]] = None


class RefreshJob(QObject):
    """
    Encapsulates a pipeline refresh and its progress reporting.
    """
    def __init__(self, pipeline: CostingPipeline, logger: Optional[logging.Logger] = None) -> None:
        super().__init__()
        self._pipeline = pipeline
        self._pool = QThreadPool.globalInstance()
        self._log = logger or logging.getLogger(__name__)
        self._tickets = itertools.count(1)
        self._ticket_lock = threading.Lock()

    def run_async(self, period: Optional[MonthPeriod], callbacks) -> int:
        cb = _Callbacks(
            phase=getattr(callbacks, "phase", None),
            finished=getattr(callbacks, "finished", None),
        )
        with self._ticket_lock:
            ticket = next(self._tickets)
        runnable = JobRunnable(lambda: self._run(period, cb, ticket))
        self._pool.start(runnable)
        return ticket

    # ---- core workflow (runs in worker thread) ----
    def _run(self, period: Optional[MonthPeriod], cb: _Callbacks, ticket: int) -> None:
        try:
            safe_call(cb.phase, "Recomputing")
            result = self._pipeline.run(period)

            if not result.ok:
                failed = ", ".join(sorted(result.errors))
                safe_call(cb.finished, False, f"Some figures could not be saved: {failed}.", result)
            elif result.superseded:
                safe_call(cb.phase, "Superseded")
                safe_call(cb.finished, True, "A newer refresh already saved these figures.", result)
            else:
                safe_call(cb.finished, True, "Figures are up to date.", result)

        except SourceReadError as exc:
            self._log.debug("Refresh %s could not read sources:\n%s", ticket, traceback.format_exc())
            safe_call(cb.finished, False, _fmt_err("Could not load records. Pull to retry.", exc), None)
        except Exception as exc:
            self._log.debug("Refresh %s failed:\n%s", ticket, traceback.format_exc())
            safe_call(cb.finished, False, _fmt_err("Refresh failed.", exc), None)
