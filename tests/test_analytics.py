from datetime import date

import pytest

from moneymosaic.services.analytics import build_dashboard
from moneymosaic.services.daterange import InvalidRangeError
from moneymosaic.services.filters import FilterSpec
from moneymosaic.services.records import BudgetRecord

TODAY = date(2024, 1, 31)


@pytest.fixture
def txns(make_txn):
    return [
        make_txn("2024-01-31", 50, "Food", merchant="Cafe"),
        make_txn("2024-01-31", -2000, "Deposit"),
        make_txn("2024-01-15", 70, "Transport", merchant="Metro"),
        make_txn("2023-12-20", 40, "Food", merchant="Cafe"),
    ]


class TestBuildDashboard:
    def test_default_window(self, txns):
        payload = build_dashboard(txns, [BudgetRecord("Food", 4000)], FilterSpec(), today=TODAY)

        assert payload["range"] == {"start": "2024-01-02", "end": "2024-01-31"}
        assert payload["bucket_count"] == 30
        assert payload["active_filters"] == 0
        assert len(payload["trends"]) == 30
        assert payload["trends"][-1] == {
            "date": "2024-01-31", "income": 2000.0, "spending": 50.0, "net": 1950.0,
        }
        assert payload["summary"]["total_expenses"] == 120.0
        assert payload["summary"]["total_income"] == 2000.0
        assert [c["category"] for c in payload["categories"]] == ["Transport", "Food"]
        assert payload["all_categories"] == ["Food", "Transport"]
        assert payload["comparison"]["previous"]["total_expenses"] == 40.0
        assert payload["top_merchants"][0]["merchant"] == "Metro"

    def test_budget_alerts(self, txns):
        payload = build_dashboard(txns, [BudgetRecord("Food", 4000)], FilterSpec(), today=TODAY)
        (line,) = payload["budgets"]
        assert line["spent"] == 50.0
        assert line["over_budget"] is True
        assert payload["alerts"][0]["severity"] == "high"
        assert payload["alerts_summary"] == {"total_alerts": 1, "high": 1, "medium": 0, "low": 0}

    def test_pattern_alerts_included(self, txns, make_txn):
        txns += [make_txn("2024-01-30", 10, "Food"), make_txn("2024-01-31", 50, "Food", merchant="Cafe")]
        payload = build_dashboard(txns, [], FilterSpec(), today=TODAY)
        assert [a["type"] for a in payload["alerts"]] == ["high_spending", "duplicate_transactions"]
        assert payload["alerts_summary"]["total_alerts"] == 2

    def test_single_category_filter(self, txns):
        spec = FilterSpec(categories=frozenset({"Food"}))
        payload = build_dashboard(txns, [], spec, today=TODAY)
        assert payload["active_filters"] == 1
        assert payload["categories"] == [
            {"category": "Food", "amount": 50.0, "percentage": 100.0, "transaction_count": 1}
        ]
        assert payload["summary"]["total_income"] == 0.0
        assert payload["comparison"]["previous"]["total_expenses"] == 40.0

    def test_long_window_caps_trend_not_totals(self, txns):
        payload = build_dashboard(txns, [], FilterSpec(date_range="90"), today=TODAY)
        assert payload["bucket_count"] == 30
        assert len(payload["trends"]) == 30
        assert payload["summary"]["total_expenses"] == 160.0
        assert sum(p["spending"] for p in payload["trends"]) == 120.0

    def test_inverted_custom_range(self, txns):
        spec = FilterSpec(date_range="custom", custom_start="2024-02-01", custom_end="2024-01-01")
        with pytest.raises(InvalidRangeError):
            build_dashboard(txns, [], spec, today=TODAY)

    def test_inputs_untouched_and_repeatable(self, txns):
        snapshot = list(txns)
        first = build_dashboard(txns, [], FilterSpec(), today=TODAY)
        second = build_dashboard(txns, [], FilterSpec(), today=TODAY)
        assert first == second
        assert txns == snapshot
