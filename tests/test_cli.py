import io

import pytest

from inventory_costing import cli


@pytest.fixture(autouse=True)
def _quiet_event_log(tmp_path):
    from inventory_costing.utils.loggers import get_event_logger
    get_event_logger(str(tmp_path / "events.log"))


def test_prints_month_and_saves(seed, db_path):
    seed.receipt("P1", 10, unit_cost=5)
    seed.expenses.create("2024-06-05", 100)
    seed.income.create("2024-06-10", 500)
    seed.sale("2024-06-15", [("P1", 4)])

    out = io.StringIO()
    code = cli.main(["--db", str(db_path), "--month", "2024-06", "--history"], out=out)
    text = out.getvalue()

    assert code == 0
    assert "June 2024" in text
    assert "Monthly Profit/Loss: 380.00" in text
    assert "Total Monthly Product Cost: 20.00" in text
    assert "Total Purchase Cost:" in text and "50.00" in text
    assert "monthlyProfit=created" in text
    assert "Previous Monthly Data" in text


def test_bad_month_is_a_usage_error(db_path):
    with pytest.raises(SystemExit) as ei:
        cli.main(["--db", str(db_path), "--month", "June"], out=io.StringIO())
    assert ei.value.code == 2
