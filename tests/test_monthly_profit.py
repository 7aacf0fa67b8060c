from inventory_costing.database.repositories import Expense, Income, MonthlyProfitRepo
from inventory_costing.modules.costing import MonthPeriod, WriteOutcome, reconcile_month
from inventory_costing.modules.costing.pipeline import VIEW_MONTHLY_PROFIT

JUNE = MonthPeriod(2024, 6)


def test_delivered_sales_valued_at_average_cost(order):
    expenses = [Expense(1, "2024-06-05", 100.0), Expense(2, "2024-05-31", 999.0)]
    income = [Income(1, "2024-06-10", 500.0), Income(2, "not-a-date", 70.0)]
    sales = [
        order("2024-06-15", [("P1", 4)]),
        order("2024-06-16", [("P1", 1)], status="Parcel Sent"),
        order("2023-06-15", [("P1", 50)]),
        order("2024-06-20", [("P2", "2")], status="delivered"),
    ]
    result = reconcile_month(JUNE, expenses, income, sales, {"P1": 5.0})

    assert result.expenses == 100.0
    assert result.income == 500.0
    # P2 has no average cost: counted at 0
    assert [(p.product_code, p.quantity, p.total) for p in result.product_data] == [
        ("P1", 4.0, 20.0),
        ("P2", 2.0, 0.0),
    ]
    assert result.total_product_cost == 20.0
    assert result.profit_loss == 380.0
    assert not result.is_empty


def test_month_with_no_activity_is_empty(order):
    result = reconcile_month(
        JUNE,
        [Expense(1, "2024-07-01", 10.0)],
        [],
        [order("2024-06-02", [("P1", 1)], status="Returned")],
        {"P1": 3.0},
    )
    assert result.is_empty
    assert result.profit_loss == 0.0


def test_pipeline_writes_snapshot_then_leaves_it_alone(seed, pipeline, conn):
    seed.receipt("P1", 10, unit_cost=5)
    seed.expenses.create("2024-06-05", 100)
    seed.income.create("2024-06-10", 500)
    seed.sale("2024-06-15", [("P1", 4)])

    first = pipeline.run(JUNE)
    assert first.outcomes[VIEW_MONTHLY_PROFIT] is WriteOutcome.CREATED
    snap = MonthlyProfitRepo(conn).get("2024-6")
    assert snap.month == "June 2024"
    assert snap.profit_loss == 380.0
    assert [p.to_dict() for p in snap.product_data] == [
        {"productCode": "P1", "quantity": 4.0, "avgCost": 5.0, "total": 20.0}
    ]

    second = pipeline.run(JUNE)
    assert second.outcomes[VIEW_MONTHLY_PROFIT] is WriteOutcome.UNCHANGED
    assert MonthlyProfitRepo(conn).get("2024-6").timestamp == snap.timestamp

    seed.expenses.create("2024-06-25", 30)
    third = pipeline.run(JUNE)
    assert third.outcomes[VIEW_MONTHLY_PROFIT] is WriteOutcome.UPDATED
    updated = MonthlyProfitRepo(conn).get("2024-6")
    assert updated.expenses == 130.0
    assert updated.timestamp > snap.timestamp


def test_empty_month_is_not_persisted(seed, pipeline, conn):
    seed.receipt("P1", 10, unit_cost=5)
    result = pipeline.run(JUNE)
    assert result.outcomes[VIEW_MONTHLY_PROFIT] is WriteOutcome.SKIPPED_EMPTY
    assert MonthlyProfitRepo(conn).get("2024-6") is None
