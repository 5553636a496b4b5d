"""
Business finance tracker.

Expenses, liabilities, salaries, cashflow, post-dated cheques and capital
injections behind a small JSON API.
"""

__version__ = "1.0.0"
