"""
Inventory costing back end.

Raw purchase/sales/expense records live in SQLite; the costing pipeline
derives average product costs, the purchase cost summary and monthly
profit snapshots from them.
"""
