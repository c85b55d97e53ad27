from datetime import date

from moneymosaic.services.alerts import (
    alerts_summary,
    duplicate_transactions_alert,
    find_duplicate_transactions,
    high_spending_alert,
    pattern_alerts,
)

TODAY = date(2024, 3, 15)


class TestHighSpendingAlert:
    def test_spike_against_weekly_average(self, make_txn):
        txns = [
            make_txn("2024-03-10", 20),
            make_txn("2024-03-12", 40),
            make_txn("2024-03-15", 100),
        ]
        alert = high_spending_alert(txns, today=TODAY)
        assert alert["type"] == "high_spending"
        assert alert["severity"] == "medium"
        assert alert["details"] == {"today_spending": 100.0, "weekly_average": 30.0}
        assert alert["percentage"] == 333.33

    def test_exactly_double_is_not_a_spike(self, make_txn):
        txns = [make_txn("2024-03-14", 50), make_txn("2024-03-15", 100)]
        assert high_spending_alert(txns, today=TODAY) is None

    def test_no_history_no_alert(self, make_txn):
        assert high_spending_alert([make_txn("2024-03-15", 500)], today=TODAY) is None

    def test_history_older_than_a_week_ignored(self, make_txn):
        txns = [make_txn("2024-03-07", 10), make_txn("2024-03-15", 500)]
        assert high_spending_alert(txns, today=TODAY) is None

    def test_income_today_is_not_spending(self, make_txn):
        txns = [make_txn("2024-03-14", 10), make_txn("2024-03-15", -5000, "Salary")]
        assert high_spending_alert(txns, today=TODAY) is None


class TestDuplicateTransactions:
    def test_same_merchant_amount_and_day(self, make_txn):
        txns = [
            make_txn("2024-03-14", 12.5, merchant="Cafe"),
            make_txn("2024-03-14", 12.5, merchant="CAFE"),
            make_txn("2024-03-14", 9.0, merchant="Cafe"),
            make_txn("2024-03-13", 12.5, merchant="Cafe"),
        ]
        (dup,) = find_duplicate_transactions(txns, today=TODAY)
        assert dup["amount"] == 12.5
        assert dup["date"] == "2024-03-14"
        assert dup["count"] == 2
        assert dup["transaction_ids"] == sorted([txns[0].id, txns[1].id])

    def test_outside_window_ignored(self, make_txn):
        txns = [make_txn("2024-03-01", 5, merchant="Cafe") for _ in range(2)]
        assert find_duplicate_transactions(txns, today=TODAY) == []

    def test_falls_back_to_description(self, make_txn):
        txns = [make_txn("2024-03-15", 5, name="ATM WITHDRAWAL") for _ in range(2)]
        assert len(find_duplicate_transactions(txns, today=TODAY)) == 1

    def test_alert_caps_listed_groups(self, make_txn):
        txns = []
        for i in range(7):
            txns += [make_txn("2024-03-15", 10 + i, merchant="Shop") for _ in range(2)]
        alert = duplicate_transactions_alert(txns, today=TODAY)
        assert alert["details"]["duplicate_count"] == 7
        assert len(alert["details"]["duplicates"]) == 5
        assert alert["severity"] == "low"

    def test_no_duplicates_no_alert(self, make_txn):
        assert duplicate_transactions_alert([make_txn("2024-03-15", 5)], today=TODAY) is None


class TestPatternAlerts:
    def test_both_alerts_and_summary(self, make_txn):
        txns = [
            make_txn("2024-03-14", 10, merchant="Cafe"),
            make_txn("2024-03-15", 40, merchant="Cafe"),
            make_txn("2024-03-15", 40, merchant="Cafe"),
        ]
        alerts = pattern_alerts(txns, today=TODAY)
        assert [a["type"] for a in alerts] == ["high_spending", "duplicate_transactions"]
        assert alerts_summary(alerts) == {"total_alerts": 2, "high": 0, "medium": 1, "low": 1}

    def test_quiet_week(self, make_txn):
        txns = [make_txn("2024-03-14", 10), make_txn("2024-03-15", 12)]
        assert pattern_alerts(txns, today=TODAY) == []
