import sqlite3
import threading
from types import SimpleNamespace

from inventory_costing.modules.costing import (
    CostingPipeline,
    MonthPeriod,
    SourceReader,
    create_refresh_job,
)

JUNE = MonthPeriod(2024, 6)


class _Recorder:
    def __init__(self):
        self.phases = []
        self.results = []
        self.lock = threading.Lock()

    def callbacks(self):
        return SimpleNamespace(phase=self._phase, finished=self._finished)

    def _phase(self, text):
        with self.lock:
            self.phases.append(text)

    def _finished(self, success, message, result):
        with self.lock:
            self.results.append((success, message, result))


def test_refresh_reports_success(qtbot, seed, pipeline):
    seed.income.create("2024-06-10", 120)
    rec = _Recorder()
    job = create_refresh_job(pipeline)

    ticket = job.run_async(JUNE, rec.callbacks())
    qtbot.waitUntil(lambda: len(rec.results) == 1, timeout=5000)

    assert ticket == 1
    success, message, result = rec.results[0]
    assert success is True
    assert message == "Figures are up to date."
    assert result.monthly.income == 120.0
    assert rec.phases[0] == "Recomputing"


def test_refresh_reports_read_failure(qtbot, seed, connect, events):
    def broken(_conn):
        raise sqlite3.OperationalError("unable to open database file")

    pipeline = CostingPipeline(
        connect,
        reader=SourceReader(connect, readers={"expenses": broken}),
        event_logger=events,
    )
    rec = _Recorder()
    create_refresh_job(pipeline).run_async(JUNE, rec.callbacks())
    qtbot.waitUntil(lambda: len(rec.results) == 1, timeout=5000)

    success, message, result = rec.results[0]
    assert success is False
    assert message.startswith("Could not load records. Pull to retry.")
    assert result is None


def test_overlapping_refreshes_all_finish(qtbot, seed, pipeline):
    seed.expenses.create("2024-06-01", 10)
    rec = _Recorder()
    job = create_refresh_job(pipeline)
    tickets = [job.run_async(JUNE, rec.callbacks()) for _ in range(3)]
    qtbot.waitUntil(lambda: len(rec.results) == 3, timeout=10000)

    assert tickets == [1, 2, 3]
    assert all(success for success, _, _ in rec.results)
    assert {r.monthly.expenses for _, _, r in rec.results} == {10.0}


def test_write_failure_wins_over_superseded(qtbot, seed, connect, clock, events, monkeypatch):
    from inventory_costing.database.repositories import PurchaseSummaryRepo
    from inventory_costing.modules.costing import ChangeDetectingWriter
    from inventory_costing.modules.costing.pipeline import VIEW_AVERAGE_COSTS, document_key

    seed.receipt("P1", 2, unit_cost=3)
    writer = ChangeDetectingWriter(clock=clock)
    # a newer run already committed the average costs
    writer.replace(document_key(VIEW_AVERAGE_COSTS), 1_000, save=lambda: None)

    def fail(self, value, updated_at):
        raise sqlite3.OperationalError("disk I/O error")

    monkeypatch.setattr(PurchaseSummaryRepo, "upsert", fail)
    pipeline = CostingPipeline(connect, writer=writer, event_logger=events)
    rec = _Recorder()
    create_refresh_job(pipeline).run_async(JUNE, rec.callbacks())
    qtbot.waitUntil(lambda: len(rec.results) == 1, timeout=5000)

    success, message, result = rec.results[0]
    assert result.superseded
    assert success is False
    assert message == "Some figures could not be saved: purchaseSummary."
