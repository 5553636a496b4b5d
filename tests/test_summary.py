"""
Tests for Dashboard Aggregation
"""

from decimal import Decimal

from bizfin.records.summary import (
    DashboardStats,
    build_dashboard_stats,
    net_cashflow,
    sum_column,
)


class TestSummary:
    """Tests for the dashboard totals."""

    def test_net_cashflow(self):
        rows = [
            {"type": "inflow", "amount": 100},
            {"type": "inflow", "amount": 50},
            {"type": "outflow", "amount": 30},
        ]

        assert net_cashflow(rows) == Decimal("120")

    def test_net_cashflow_can_be_negative(self):
        rows = [{"type": "outflow", "amount": "75.50"}]

        assert net_cashflow(rows) == Decimal("-75.50")

    def test_sum_column_handles_mixed_types(self):
        rows = [{"amount": 10}, {"amount": 2.5}, {"amount": Decimal("0.25")}, {"amount": None}]

        assert sum_column(rows) == Decimal("12.75")

    def test_empty_sets_are_zero(self):
        stats = build_dashboard_stats([], [], [], [], [], [])

        assert stats == DashboardStats()
        assert stats.to_dict()["total_cashflow"] == 0.0

    def test_build_dashboard_stats(self):
        stats = build_dashboard_stats(
            expenses=[{"amount": 200}, {"amount": 300}],
            liabilities=[{"outstanding_amount": 1000}, {"outstanding_amount": 500}],
            salaries=[{"amount": 25000}],
            cashflow=[{"type": "inflow", "amount": 100}, {"type": "outflow", "amount": 40}],
            pending_pdc=[{"amount": 12000}],
            capital=[{"amount": 50000}, {"amount": 5000}],
        )

        assert stats.to_dict() == {
            "total_expenses": 500.0,
            "total_liabilities": 1500.0,
            "total_salaries": 25000.0,
            "total_cashflow": 60.0,
            "pending_pdc": 12000.0,
            "capital_injected": 55000.0,
        }
