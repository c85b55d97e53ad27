from datetime import date

from moneymosaic.services.budgets import evaluate_budgets
from moneymosaic.services.insights import (
    category_spending,
    detect_recurring_payments,
    detect_unusual_spending,
    find_savings_opportunities,
    generate_insights,
)
from moneymosaic.services.records import BudgetRecord

# Current 30-day window is 2024-03-02..2024-03-31, previous is 2024-02-01..2024-03-01
TODAY = date(2024, 3, 31)


class TestSavingsOpportunities:
    def test_month_over_month_increase(self, make_txn):
        txns = [make_txn("2024-02-10", 100, "Food"), make_txn("2024-03-10", 150, "Food")]
        opps = find_savings_opportunities(txns, [], today=TODAY)
        assert len(opps) == 1
        assert opps[0]["category"] == "Food"
        assert opps[0]["potential_savings"] == 50.0
        assert opps[0]["reason"] == "increasing"

    def test_small_increase_ignored(self, make_txn):
        txns = [make_txn("2024-02-10", 100, "Food"), make_txn("2024-03-10", 105, "Food")]
        assert find_savings_opportunities(txns, [], today=TODAY) == []

    def test_new_category_without_baseline_ignored(self, make_txn):
        txns = [make_txn("2024-03-10", 500, "Gadgets")]
        assert find_savings_opportunities(txns, [], today=TODAY) == []

    def test_over_budget(self):
        lines = evaluate_budgets([BudgetRecord("Rent", 100000)], {"Rent": 120000})
        opps = find_savings_opportunities([], lines, today=TODAY)
        assert opps[0]["potential_savings"] == 200.0
        assert opps[0]["reason"] == "over_budget"

    def test_larger_figure_wins_per_category(self, make_txn):
        txns = [make_txn("2024-02-10", 100, "Food"), make_txn("2024-03-10", 150, "Food")]
        lines = evaluate_budgets([BudgetRecord("Food", 14000)], {"Food": 15000})
        opps = find_savings_opportunities(txns, lines, today=TODAY)
        assert len(opps) == 1
        assert opps[0]["potential_savings"] == 50.0
        assert opps[0]["reason"] == "increasing"

    def test_ranked_and_capped(self, make_txn):
        txns = []
        for i in range(7):
            txns.append(make_txn("2024-02-10", 100, f"Cat{i}"))
            txns.append(make_txn("2024-03-10", 200 + i * 10, f"Cat{i}"))
        opps = find_savings_opportunities(txns, [], today=TODAY)
        assert len(opps) == 5
        assert [o["category"] for o in opps] == ["Cat6", "Cat5", "Cat4", "Cat3", "Cat2"]


class TestRecurringPayments:
    def test_monthly_subscription(self, make_txn):
        txns = [
            make_txn(d, 15.99, "Entertainment", merchant="Netflix")
            for d in ("2024-01-05", "2024-02-05", "2024-03-05")
        ]
        result = detect_recurring_payments(txns)
        assert result == [{
            "merchant": "Netflix",
            "merchant_key": "netflix",
            "amount": 15.99,
            "frequency": "monthly",
            "interval_days": 30,
            "occurrences": 3,
            "last_date": "2024-03-05",
            "next_expected_date": "2024-04-04",
        }]

    def test_weekly(self, make_txn):
        txns = [
            make_txn(d, 40, merchant="Yoga Studio")
            for d in ("2024-01-01", "2024-01-08", "2024-01-15", "2024-01-22")
        ]
        (payment,) = detect_recurring_payments(txns)
        assert payment["frequency"] == "weekly"
        assert payment["interval_days"] == 7

    def test_irregular_interval_label(self, make_txn):
        txns = [
            make_txn(d, 60, merchant="Pest Control")
            for d in ("2024-01-01", "2024-02-15", "2024-03-31")
        ]
        (payment,) = detect_recurring_payments(txns)
        assert payment["frequency"] == "every 45 days"

    def test_merchant_grouping_is_case_insensitive(self, make_txn):
        txns = [
            make_txn("2024-01-05", 9.99, merchant="Spotify"),
            make_txn("2024-02-05", 9.99, merchant="SPOTIFY "),
            make_txn("2024-03-05", 9.99, merchant="spotify"),
        ]
        (payment,) = detect_recurring_payments(txns)
        assert payment["merchant_key"] == "spotify"
        assert payment["occurrences"] == 3

    def test_amount_outside_tolerance(self, make_txn):
        txns = [
            make_txn("2024-01-05", 10, merchant="Gym"),
            make_txn("2024-02-05", 10, merchant="Gym"),
            make_txn("2024-03-05", 20, merchant="Gym"),
        ]
        assert detect_recurring_payments(txns) == []

    def test_amount_within_tolerance(self, make_txn):
        txns = [
            make_txn("2024-01-05", 100, merchant="Power Co"),
            make_txn("2024-02-05", 110, merchant="Power Co"),
            make_txn("2024-03-05", 95, merchant="Power Co"),
        ]
        (payment,) = detect_recurring_payments(txns)
        assert payment["amount"] == 100.0

    def test_interval_outside_tolerance(self, make_txn):
        txns = [
            make_txn("2024-01-01", 10, merchant="Gym"),
            make_txn("2024-01-08", 10, merchant="Gym"),
            make_txn("2024-02-07", 10, merchant="Gym"),
        ]
        assert detect_recurring_payments(txns) == []

    def test_needs_three_occurrences(self, make_txn):
        txns = [
            make_txn("2024-01-05", 10, merchant="Gym"),
            make_txn("2024-02-05", 10, merchant="Gym"),
        ]
        assert detect_recurring_payments(txns) == []

    def test_same_day_charges_ignored(self, make_txn):
        txns = [make_txn("2024-01-05", 10, merchant="Cafe") for _ in range(3)]
        assert detect_recurring_payments(txns) == []

    def test_income_and_unnamed_ignored(self, make_txn):
        txns = [
            make_txn(d, -2000, "Salary", merchant="Employer")
            for d in ("2024-01-01", "2024-01-15", "2024-01-29")
        ] + [make_txn(d, 10) for d in ("2024-01-01", "2024-02-01", "2024-03-01")]
        assert detect_recurring_payments(txns) == []

    def test_sorted_by_next_expected(self, make_txn):
        txns = [
            make_txn(d, 15, merchant="Later")
            for d in ("2024-01-20", "2024-02-20", "2024-03-20")
        ] + [
            make_txn(d, 15, merchant="Sooner")
            for d in ("2024-01-10", "2024-02-10", "2024-03-10")
        ]
        assert [p["merchant"] for p in detect_recurring_payments(txns)] == ["Sooner", "Later"]


class TestUnusualSpending:
    def test_flags_large_charge(self, make_txn):
        history = [make_txn("2024-02-01", 5, merchant="Cafe") for _ in range(3)]
        big = make_txn("2024-03-20", 30, merchant="Cafe")
        normal = make_txn("2024-03-21", 6, merchant="Cafe")
        result = detect_unusual_spending([big, normal], history)
        assert len(result) == 1
        assert result[0]["id"] == big.id
        assert result[0]["amount"] == 30.0
        assert result[0]["reason"] == "Amount is 600% of your usual spending at this merchant"

    def test_no_history_no_flag(self, make_txn):
        recent = [make_txn("2024-03-20", 1000, merchant="New Shop")]
        assert detect_unusual_spending(recent, []) == []

    def test_limit(self, make_txn):
        history = [make_txn("2024-02-01", 1, merchant="Cafe")]
        recent = [make_txn("2024-03-20", 10 + i, merchant="Cafe") for i in range(8)]
        result = detect_unusual_spending(recent, history, limit=3)
        assert [r["amount"] for r in result] == [17.0, 16.0, 15.0]


class TestCategorySpending:
    def test_higher_lower_consistent(self, make_txn):
        history = [
            make_txn("2024-01-15", 300, "Food"),
            make_txn("2024-01-15", 300, "Fun"),
            make_txn("2024-01-15", 300, "Rent"),
        ]
        recent = [
            make_txn("2024-03-10", 400, "Food"),
            make_txn("2024-03-10", 60, "Fun"),
            make_txn("2024-03-10", 100, "Rent"),
        ]
        result = {r["category"]: r for r in category_spending(recent, history + recent)}
        assert result["Food"]["status"] == "higher"
        assert result["Food"]["avg_monthly"] == 233.33
        assert result["Fun"]["status"] == "lower"
        assert result["Rent"]["status"] == "consistent"
        assert "Consider reviewing Food" in result["Food"]["recommendation"]

    def test_new_category_is_higher(self, make_txn):
        recent = [make_txn("2024-03-10", 50, "Gadgets")]
        (row,) = category_spending(recent, [])
        assert row["avg_monthly"] == 0.0
        assert row["status"] == "higher"

    def test_quiet_category_reported_as_lower(self, make_txn):
        (row,) = category_spending([], [make_txn("2024-01-15", 90, "Gym")])
        assert row == {
            "category": "Gym",
            "spent": 0.0,
            "avg_monthly": 30.0,
            "status": "lower",
            "recommendation": "Great job! Spending is lower than usual in Gym.",
        }

    def test_income_ignored_and_sorted_by_spend(self, make_txn):
        recent = [
            make_txn("2024-03-10", 10, "A"),
            make_txn("2024-03-10", 20, "B"),
            make_txn("2024-03-10", -500, "Salary"),
        ]
        assert [r["category"] for r in category_spending(recent, recent)] == ["B", "A"]


class TestGenerateInsights:
    def test_shape_and_idempotence(self, make_txn):
        txns = [
            make_txn(d, 15.99, "Entertainment", merchant="Netflix")
            for d in ("2024-01-05", "2024-02-05", "2024-03-05")
        ] + [
            make_txn("2024-02-10", 100, "Food"),
            make_txn("2024-03-10", 150, "Food"),
        ]
        lines = evaluate_budgets([BudgetRecord("Food", 10000)], {"Food": 15000})
        first = generate_insights(txns, lines, today=TODAY)
        second = generate_insights(txns, lines, today=TODAY)
        assert first == second
        assert set(first) == {
            "savings_opportunities",
            "recurring_payments",
            "unusual_spending",
            "category_spending",
        }
        assert first["recurring_payments"][0]["merchant"] == "Netflix"
        assert first["savings_opportunities"][0]["category"] == "Food"

    def test_empty(self):
        assert generate_insights([], [], today=TODAY) == {
            "savings_opportunities": [],
            "recurring_payments": [],
            "unusual_spending": [],
            "category_spending": [],
        }
