from datetime import date

import pytest

from household_budget.goals import (
    goal_progress,
    months_remaining,
    person_contribution,
    required_monthly,
    total_monthly_contribution,
    total_required_monthly,
)
from household_budget.models import Assignment, BudgetSetup, Person, SavingsGoal

TODAY = date(2024, 1, 1)


def _goal(target=12000.0, current=0.0, target_date=date(2024, 12, 26), contribution=1000.0,
          assigned_to=Assignment.SHARED, goal_id='g'):
    return SavingsGoal(goal_id, 'Holiday', target, current, target_date, contribution, assigned_to=assigned_to)


def test_months_remaining_rounds_up_and_has_a_floor_of_one():
    assert months_remaining(date(2024, 1, 31), TODAY) == 1
    assert months_remaining(date(2024, 2, 1), TODAY) == 2
    assert months_remaining(date(2023, 6, 1), TODAY) == 1


def test_required_monthly_spreads_the_remaining_amount():
    goal = _goal(target=12000, current=0, target_date=date(2024, 12, 26))

    assert months_remaining(goal.target_date, TODAY) == 12
    assert required_monthly(goal, TODAY) == pytest.approx(1000.0)


def test_reached_goal_requires_nothing():
    assert required_monthly(_goal(target=500, current=800), TODAY) == 0


def test_progress_reports_track_status_and_gap():
    behind = goal_progress(_goal(contribution=400), TODAY)
    ahead = goal_progress(_goal(contribution=1500), TODAY)

    assert not behind.is_on_track
    assert behind.contribution_gap == pytest.approx(600.0)
    assert ahead.is_on_track
    assert ahead.contribution_gap == 0


def test_progress_percentage_is_capped():
    assert goal_progress(_goal(target=100, current=250), TODAY).progress_percentage == 100


def test_totals_across_goals():
    goals = [_goal(goal_id='a'), _goal(target=6000, goal_id='b', contribution=250)]

    assert total_required_monthly(goals, TODAY) == pytest.approx(1500.0)
    assert total_monthly_contribution(goals) == pytest.approx(1250.0)


def test_person_contribution_uses_household_split_for_shared_goals():
    setup = BudgetSetup(default_split_percentage=60)
    goals = [
        _goal(goal_id='shared', contribution=1000, assigned_to=Assignment.SHARED),
        _goal(goal_id='mine', contribution=300, assigned_to=Assignment.SELF),
        _goal(goal_id='nobody', contribution=999, assigned_to=None),
    ]

    assert person_contribution(goals, Person.SELF, setup) == pytest.approx(900.0)
    assert person_contribution(goals, Person.SPOUSE, setup) == pytest.approx(400.0)
