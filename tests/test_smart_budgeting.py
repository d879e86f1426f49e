from datetime import date

import pytest

from household_budget.models import Assignment, Person, SavingsGoal, Transaction, TransactionType
from household_budget.periods import LAST_MONTH, THIS_MONTH, custom_range, preset_range
from household_budget.smart_budgeting import (
    DECREASING,
    INCREASING,
    STABLE,
    build_smart_budgets,
    classify_trend,
    confidence_score,
    historical_spend,
    recommend_budget,
    savings_reduction,
)

TODAY = date(2024, 7, 15)


def _monthly(category, amounts, assigned_to=Assignment.SELF, split=None):
    """One expense per month from January 2024, oldest first."""
    return [
        Transaction(f"{category}-{i}", date(2024, i + 1, 10), category, category, amount,
                    TransactionType.EXPENSE, assigned_to=assigned_to, split_percentage=split)
        for i, amount in enumerate(amounts)
        if amount
    ]


def _by_category(rows):
    return {row.category: row for row in rows}


def test_trend_classification():
    assert classify_trend([100, 100, 100, 200, 200, 200]) == INCREASING
    assert classify_trend([200, 200, 200, 100, 100, 100]) == DECREASING
    assert classify_trend([100, 100, 100, 105, 105, 105]) == STABLE


def test_confidence_is_clamped_and_defaults_for_empty_history():
    assert confidence_score([0, 0, 0, 0, 0, 0]) == 0.5
    assert confidence_score([100] * 6) == 1.0
    assert confidence_score([0, 0, 0, 0, 0, 600]) == 0.3
    assert confidence_score([100, 100, 100, 200, 200, 200]) == pytest.approx(1 - 50 / 150)


def test_history_window_is_trailing_months_with_zero_fill():
    txs = _monthly('Wine', [0, 0, 0, 0, 0, 600]) + [
        Transaction('now', date(2024, 7, 1), 'Wine', 'Wine', 5000, TransactionType.EXPENSE,
                    assigned_to=Assignment.SELF),
    ]

    history = historical_spend(txs, ['Wine', 'Golf'], TODAY)

    assert history.loc['Wine'].tolist() == [0, 0, 0, 0, 0, 600]
    assert history.loc['Golf'].tolist() == [0] * 6


def test_history_counts_the_selected_persons_share():
    txs = _monthly('Groceries', [1000] * 6, assigned_to=Assignment.SHARED, split=60)

    self_history = historical_spend(txs, ['Groceries'], TODAY, default_split=55)
    spouse_history = historical_spend(txs, ['Groceries'], TODAY, default_split=55,
                                      person=Person.SPOUSE)

    assert self_history.loc['Groceries'].tolist() == pytest.approx([600] * 6)
    assert spouse_history.loc['Groceries'].tolist() == pytest.approx([400] * 6)


def test_increasing_trend_recommendation_is_capped_by_average():
    rows = _by_category(build_smart_budgets(
        _monthly('Groceries', [100, 100, 100, 200, 200, 200]), today=TODAY,
    ))

    groceries = rows['Groceries']
    assert groceries.trend == INCREASING
    assert groceries.historical_average == pytest.approx(150.0)
    assert groceries.recommended_budget == pytest.approx(165.0)
    assert groceries.recommended_adjustment == pytest.approx(165.0 - 12000.0)


def test_decreasing_trend_recommendation_is_floored_by_allocation():
    rows = _by_category(build_smart_budgets(
        _monthly('Petrol', [200, 200, 200, 100, 100, 100]), today=TODAY,
    ))

    assert rows['Petrol'].trend == DECREASING
    assert rows['Petrol'].recommended_budget == pytest.approx(3500 * 0.8)


def test_savings_pressure_trims_discretionary_categories_only():
    goals = [SavingsGoal('g', 'Holiday', 12000, 0, date(2025, 7, 10), 0)]
    txs = _monthly('Eating Out', [400] * 6) + _monthly('Groceries', [400] * 6)

    rows = _by_category(build_smart_budgets(txs, goals, today=TODAY))

    assert rows['Eating Out'].recommended_budget == pytest.approx(360.0)
    assert rows['Groceries'].recommended_budget == pytest.approx(400.0)


def test_savings_reduction_is_capped():
    assert savings_reduction(0) == 0
    assert savings_reduction(1000) == pytest.approx(0.1)
    assert savings_reduction(10000) == pytest.approx(0.3)


def test_recommend_budget_stable_trend_keeps_average():
    assert recommend_budget('Kids', 7000, STABLE, 8000) == 7000


def test_historical_average_is_independent_of_display_period():
    txs = _monthly('Golf', [300, 0, 600, 0, 900, 0])
    this_month = build_smart_budgets(txs, period=preset_range(THIS_MONTH, TODAY), today=TODAY)
    last_month = build_smart_budgets(txs, period=preset_range(LAST_MONTH, TODAY), today=TODAY)
    custom = build_smart_budgets(txs, period=custom_range('2024-01-01', '2024-03-31'), today=TODAY)

    averages = {
        tuple(row.historical_average for row in rows) for rows in (this_month, last_month, custom)
    }
    assert len(averages) == 1
    assert _by_category(this_month)['Golf'].historical_average == pytest.approx(300.0)
    assert _by_category(custom)['Golf'].spent == 900
