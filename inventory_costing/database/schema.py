from pathlib import Path
import sqlite3
import sys

SQL = r"""
PRAGMA foreign_keys = ON;

/* ======================== RAW COLLECTIONS ======================== */

/* Dates are kept exactly as entered; aggregation decides what parses. */

/* -------- expenses / income -------- */
CREATE TABLE IF NOT EXISTS expenses (
    expense_id  INTEGER PRIMARY KEY AUTOINCREMENT,
    date        TEXT    NOT NULL,
    amount      NUMERIC NOT NULL CHECK (CAST(amount AS REAL) >= 0),
    description TEXT
);
CREATE INDEX IF NOT EXISTS idx_expenses_date ON expenses(date);

CREATE TABLE IF NOT EXISTS income (
    income_id   INTEGER PRIMARY KEY AUTOINCREMENT,
    date        TEXT    NOT NULL,
    amount      NUMERIC NOT NULL CHECK (CAST(amount AS REAL) >= 0),
    description TEXT
);
CREATE INDEX IF NOT EXISTS idx_income_date ON income(date);

/* -------- stock receipts & per-receipt unit costs -------- */
CREATE TABLE IF NOT EXISTS stock_in (
    stock_in_id     INTEGER PRIMARY KEY AUTOINCREMENT,
    date            TEXT    NOT NULL,
    product_code    TEXT    NOT NULL,
    product_details TEXT    NOT NULL DEFAULT '',
    quantity        INTEGER NOT NULL CHECK (quantity > 0)
);
CREATE INDEX IF NOT EXISTS idx_stock_in_code ON stock_in(product_code);

/* sparse: a receipt without a row here carries no cost */
CREATE TABLE IF NOT EXISTS unit_costs (
    stock_in_id INTEGER PRIMARY KEY,
    unit_cost   NUMERIC NOT NULL DEFAULT 0,
    FOREIGN KEY (stock_in_id) REFERENCES stock_in(stock_in_id) ON DELETE CASCADE
);

/* -------- sale orders -------- */
CREATE TABLE IF NOT EXISTS sales (
    sale_id            INTEGER PRIMARY KEY AUTOINCREMENT,
    date               TEXT NOT NULL,
    status             TEXT NOT NULL DEFAULT 'Parcel Processing',
    destination_branch TEXT,
    customer_name      TEXT,
    full_address       TEXT,
    phone1             TEXT,
    phone2             TEXT,
    cod_amount         NUMERIC
);

CREATE TABLE IF NOT EXISTS sale_items (
    item_id      INTEGER PRIMARY KEY AUTOINCREMENT,
    sale_id      INTEGER NOT NULL,
    product_code TEXT    NOT NULL,
    quantity     NUMERIC NOT NULL DEFAULT 0,
    FOREIGN KEY (sale_id) REFERENCES sales(sale_id) ON DELETE CASCADE
);
CREATE INDEX IF NOT EXISTS idx_sale_items_sale ON sale_items(sale_id);

/* ======================== DERIVED VIEWS ======================== */

/* one row per product code, replaced wholesale on every recompute */
CREATE TABLE IF NOT EXISTS average_costs (
    product_code TEXT PRIMARY KEY,
    avg_cost     REAL NOT NULL DEFAULT 0
);

CREATE TABLE IF NOT EXISTS purchase_summary (
    summary_id TEXT PRIMARY KEY,
    value      REAL NOT NULL DEFAULT 0,
    updated_at TEXT NOT NULL
);

/* month_key is 'YYYY-M' (month not zero padded) */
CREATE TABLE IF NOT EXISTS monthly_profit (
    month_key          TEXT PRIMARY KEY,
    month              TEXT NOT NULL,
    expenses           REAL NOT NULL DEFAULT 0,
    income             REAL NOT NULL DEFAULT 0,
    profit_loss        REAL NOT NULL DEFAULT 0,
    total_product_cost REAL NOT NULL DEFAULT 0,
    product_data       TEXT NOT NULL DEFAULT '[]',
    timestamp          TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_monthly_profit_ts ON monthly_profit(timestamp);
"""


def init_schema(db_path: Path | str = "costing.db") -> None:
    db_path = Path(db_path)
    db_path.parent.mkdir(parents=True, exist_ok=True)
    with sqlite3.connect(db_path) as conn:
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode=WAL;")
        # Apply (idempotent) schema
        conn.executescript(SQL)
        conn.commit()
    conn.close()


if __name__ == "__main__":
    target = sys.argv[1] if len(sys.argv) > 1 else Path(__file__).resolve().parents[1] / "data" / "costing.db"
    init_schema(target)
    print(f"✓ DB applied to {target}")
