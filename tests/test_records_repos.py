# tests/test_records_repos.py
import pytest

from inventory_costing.database.repositories import (
    ExpensesDomainError,
    ExpensesRepo,
    IncomeRepo,
    SaleLine,
    SalesDomainError,
    SalesRepo,
    StockInDomainError,
    StockInRepo,
    UnitCostsDomainError,
    UnitCostsRepo,
)


# ---------------------------------------------------------------------
# Expenses / income
# ---------------------------------------------------------------------

def test_expense_create_list_update_delete(conn):
    repo = ExpensesRepo(conn)
    eid = repo.create("2024-06-05", "100", " rent ")
    repo.create("not-a-date", 20)  # stored as entered

    rows = repo.list_all()
    assert [r.amount for r in rows] == [100.0, 20.0]
    assert rows[0].description == "rent"
    assert rows[1].date == "not-a-date"

    repo.update(eid, "2024-06-06", 120)
    assert repo.get(eid).amount == 120.0

    repo.delete(eid)
    assert repo.get(eid) is None


def test_expense_amount_validation(conn):
    repo = ExpensesRepo(conn)
    with pytest.raises(ExpensesDomainError):
        repo.create("2024-06-05", -1)
    with pytest.raises(ExpensesDomainError):
        repo.create("2024-06-05", "abc")
    with pytest.raises(ExpensesDomainError):
        repo.create("  ", 5)
    with pytest.raises(ExpensesDomainError):
        repo.update(999, "2024-06-05", 5)
    with pytest.raises(ExpensesDomainError):
        repo.delete(999)


def test_income_is_separate_table(conn):
    IncomeRepo(conn).create("2024-06-10", 500)
    assert ExpensesRepo(conn).list_all() == []
    income = IncomeRepo(conn).list_all()
    assert len(income) == 1 and income[0].income_id is not None


# ---------------------------------------------------------------------
# Stock receipts & unit costs
# ---------------------------------------------------------------------

def test_stock_in_validation(conn):
    repo = StockInRepo(conn)
    assert repo.create("2024-06-01", " P1 ", "Blue mug", "3") > 0
    for bad in (0, -2, "1.5", "", None, "x"):
        with pytest.raises(StockInDomainError):
            repo.create("2024-06-01", "P1", "Blue mug", bad)
    with pytest.raises(StockInDomainError):
        repo.create("2024-06-01", "  ", "Blue mug", 1)
    with pytest.raises(StockInDomainError):
        repo.create("2024-06-01", "P1", "", 1)
    rows = repo.list_all()
    assert len(rows) == 1
    assert rows[0].product_code == "P1" and rows[0].quantity == 3


def test_stock_search_and_unique_codes(conn):
    repo = StockInRepo(conn)
    repo.create("2024-06-01", "MUG-1", "Blue mug", 2)
    repo.create("2024-06-02", "CUP-7", "Paper cup", 5)
    repo.create("2024-06-03", "MUG-1", "Blue mug restock", 4)

    assert [r.product_code for r in repo.search("mug")] == ["MUG-1", "MUG-1"]
    assert [r.product_code for r in repo.search("PAPER")] == ["CUP-7"]
    assert len(repo.search("")) == 3
    assert repo.unique_product_codes() == ["MUG-1", "CUP-7"]


def test_unit_cost_parsing_and_cascade(conn):
    stock = StockInRepo(conn)
    costs = UnitCostsRepo(conn)
    rid = stock.create("2024-06-01", "P1", "Item", 10)

    assert costs.get(rid) is None
    assert costs.set_unit_cost(rid, "7.5") == 7.5
    assert costs.set_unit_cost(rid, "abc") == 0.0
    assert costs.get(rid) == 0.0
    costs.set_unit_cost(rid, 4)
    assert costs.as_map() == {rid: 4.0}

    stock.delete(rid)
    assert costs.as_map() == {}


def test_unit_cost_for_unknown_receipt(conn):
    with pytest.raises(UnitCostsDomainError):
        UnitCostsRepo(conn).set_unit_cost(424242, 3)


# ---------------------------------------------------------------------
# Sales
# ---------------------------------------------------------------------

def test_sale_validation(conn, order):
    repo = SalesRepo(conn)
    o = order("2024-06-15", [("P1", 1)])
    o.phone1 = "12345"
    with pytest.raises(SalesDomainError, match="Phone No. 1"):
        repo.create(o)

    o = order("2024-06-15", [("P1", 1)])
    o.phone2 = "99"
    with pytest.raises(SalesDomainError, match="Phone No. 2"):
        repo.create(o)

    o = order("2024-06-15", [("P1", 1)])
    o.customer_name = " "
    with pytest.raises(SalesDomainError, match="required"):
        repo.create(o)

    with pytest.raises(SalesDomainError, match="status"):
        repo.create(order("2024-06-15", [("P1", 1)], status="Lost"))


def test_sale_create_update_and_display_order(conn, order):
    repo = SalesRepo(conn)
    s1 = repo.create(order("2024-06-01", [("P1", 1)], status="Parcel Processing"))
    s2 = repo.create(order("2024-06-20", [("P1", 2), ("P2", "3")]))
    s3 = repo.create(order("2024-06-10", [("P3", 1), ("  ", 9)]))

    got = repo.get(s2)
    assert [(p.product_code, float(p.quantity)) for p in got.products] == [("P1", 2.0), ("P2", 3.0)]
    # blank product codes are not stored
    assert [p.product_code for p in repo.get(s3).products] == ["P3"]

    updated = order("2024-06-01", [("P9", 5)], status="Delivered")
    repo.update(s1, updated)
    got = repo.get(s1)
    assert got.status == "Delivered"
    assert [p.product_code for p in got.products] == ["P9"]

    shown = repo.list_for_display()
    assert [r["sale_id"] for r in shown] == [s2, s3, s1]
    assert [r["serial"] for r in shown] == [3, 2, 1]
    assert shown[0]["products"][0] == {"product_code": "P1", "quantity": 2}


def test_sale_update_missing_and_set_status(conn, order):
    repo = SalesRepo(conn)
    with pytest.raises(SalesDomainError):
        repo.update(12345, order("2024-06-01", [("P1", 1)]))
    with pytest.raises(SalesDomainError, match="No sale"):
        repo.set_status(12345, "Delivered")
    sid = repo.create(order("2024-06-01", [("P1", 1)], status="Parcel Sent"))
    repo.set_status(sid, "Returned")
    assert repo.get(sid).status == "Returned"
    with pytest.raises(SalesDomainError):
        repo.set_status(sid, "Gone")
    assert all(isinstance(line, SaleLine) for line in repo.get(sid).products)


# ---------------------------------------------------------------------
# Schema version stamp
# ---------------------------------------------------------------------

def test_version_stamp(conn):
    from inventory_costing.constants import SCHEMA_VERSION
    from inventory_costing.database.versioning import (
        SchemaVersionError,
        ensure_version,
        get_current_version,
        set_current_version,
    )

    assert get_current_version(conn) == SCHEMA_VERSION
    set_current_version(conn, "1.4.0")
    assert ensure_version(conn) == "1.4.0"
    set_current_version(conn, "2.0.0")
    with pytest.raises(SchemaVersionError):
        ensure_version(conn)
