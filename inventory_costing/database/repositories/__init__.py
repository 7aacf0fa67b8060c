# database/repositories/__init__.py
"""
Repository layer public API.

Usage:
    from inventory_costing.database.repositories import (
        # Raw collections
        ExpensesRepo, Expense, IncomeRepo, Income,
        StockInRepo, StockReceipt, UnitCostsRepo,
        SalesRepo, SaleOrder, SaleLine,
        # Derived views
        AverageCostsRepo, AverageCostEntry, PurchaseSummaryRepo,
        MonthlyProfitRepo, MonthlyProfitSnapshot, ProductCostLine,
    )
"""

# ---------------- Expenses / Income -----------------
from .expenses_repo import (
    ExpensesRepo,
    Expense,
    DomainError as ExpensesDomainError,
)
from .income_repo import IncomeRepo, Income

# ---------------- Stock receipts ----------------
from .stock_in_repo import (
    StockInRepo,
    StockReceipt,
    DomainError as StockInDomainError,
)
from .unit_costs_repo import (
    UnitCostsRepo,
    DomainError as UnitCostsDomainError,
)

# ------------------ Sales ------------------
from .sales_repo import (
    SalesRepo,
    SaleOrder,
    SaleLine,
    DomainError as SalesDomainError,
)

# --------------- Derived views ---------------
from .average_costs_repo import AverageCostsRepo, AverageCostEntry
from .purchase_summary_repo import PurchaseSummaryRepo
from .monthly_profit_repo import (
    MonthlyProfitRepo,
    MonthlyProfitSnapshot,
    ProductCostLine,
)

__all__ = [
    # expenses / income
    "ExpensesRepo",
    "Expense",
    "ExpensesDomainError",
    "IncomeRepo",
    "Income",
    # stock
    "StockInRepo",
    "StockReceipt",
    "StockInDomainError",
    "UnitCostsRepo",
    "UnitCostsDomainError",
    # sales
    "SalesRepo",
    "SaleOrder",
    "SaleLine",
    "SalesDomainError",
    # derived
    "AverageCostsRepo",
    "AverageCostEntry",
    "PurchaseSummaryRepo",
    "MonthlyProfitRepo",
    "MonthlyProfitSnapshot",
    "ProductCostLine",
]
