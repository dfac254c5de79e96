"""
Finance Tracker - Source Package

The domain core of a personal finance tracking client: it records income
and expense transactions, tracks category budgets and derives the figures
a presentation layer shows.

DESIGN PRINCIPLES:
1. Figures are derived from the transaction log, never stored
2. Money is Decimal from input to display
3. Bad input is rejected before anything is written
4. Storage layer is swappable
5. Every change is auditable
"""

__version__ = "1.0.0"
__author__ = "Finance Tracker Team"
