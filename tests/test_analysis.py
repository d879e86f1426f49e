from datetime import date

import pytest

from household_budget.analysis import (
    ON_TRACK,
    OVER,
    UNDER,
    analyse_budgets,
    budget_vs_actual,
    goal_impact,
    variance_percentage,
    variance_trend,
)
from household_budget.models import Assignment, SavingsGoal
from household_budget.smart_budgeting import SmartBudget
from household_budget.summary import CategoryBudget


def _smart(category='Groceries', allocated=1000.0, spent=0.0, recommended=900.0):
    return SmartBudget(
        category=category,
        allocated=allocated,
        spent=spent,
        color='#10B981',
        assigned_to=Assignment.SHARED,
        historical_average=950.0,
        trend='stable',
        recommended_budget=recommended,
        confidence=0.8,
    )


def _budget(category, allocated, spent, assigned_to):
    return CategoryBudget(category, allocated, spent, '#000000', assigned_to)


@pytest.mark.parametrize('spent, expected', [(1150, OVER), (850, UNDER), (1000, ON_TRACK)])
def test_variance_trend_scenarios(spent, expected):
    row = analyse_budgets([_smart(spent=spent)])[0]

    assert row.trend == expected
    assert row.variance == spent - 1000
    assert row.variance_percentage == pytest.approx((spent - 1000) / 10)


def test_boundary_of_ten_percent_is_on_track():
    assert variance_trend(10.0) == ON_TRACK
    assert variance_trend(-10.0) == ON_TRACK


def test_zero_budget_variance_percentage_is_guarded():
    row = analyse_budgets([_smart(allocated=0, spent=500, recommended=400)])[0]

    assert row.variance_percentage == 0
    assert row.trend == ON_TRACK
    assert variance_percentage(10, 0) == 0


def test_impact_on_goals_relative_to_monthly_contributions():
    goals = [
        SavingsGoal('a', 'Fund', 10000, 0, date(2025, 1, 1), 1500),
        SavingsGoal('b', 'Car', 10000, 0, date(2025, 1, 1), 500),
    ]

    over, under = analyse_budgets([_smart(spent=1500), _smart(spent=500)], goals)

    assert over.impact_on_goals == pytest.approx(25.0)
    assert under.impact_on_goals == 0


def test_impact_on_goals_without_goals_is_zero():
    assert analyse_budgets([_smart(spent=5000)])[0].impact_on_goals == 0
    assert goal_impact(100, 0) == 0


def test_recommended_budget_is_allocation_plus_adjustment():
    row = analyse_budgets([_smart(allocated=1000, recommended=1234)])[0]

    assert row.recommended_budget == pytest.approx(1234)
    assert row.historical_average == 950


def test_budget_vs_actual_groups_by_assignment():
    totals = budget_vs_actual([
        _budget('Golf', 1000, 1200, Assignment.SELF),
        _budget('Clothing', 500, 100, Assignment.SPOUSE),
        _budget('Groceries', 8000, 7000, Assignment.SHARED),
        _budget('Kids', 2000, 2500, Assignment.SHARED),
    ])

    assert totals['self'].over_budget == 200
    assert totals['self'].remaining == -200
    assert totals['spouse'].remaining == 400
    assert totals['shared'].allocated == 10000
    assert totals['shared'].spent == 9500
    assert totals['combined'].allocated == 11500
    assert totals['combined'].spent == 10800
    assert totals['combined'].over_budget == 0
