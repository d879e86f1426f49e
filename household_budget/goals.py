"""Savings goal progress helpers.

Goals are read-only here: nothing in the pipeline changes a goal's
current amount.  Months are approximated as 30-day blocks, rounded up,
with at least one month remaining so overdue goals ask for the whole
remainder now.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date
from typing import Iterable, List, Optional

from . import config
from .allocation import resolve_split, share_percentage
from .models import Assignment, BudgetSetup, Person, SavingsGoal


@dataclass(frozen=True)
class GoalProgress:
    goal_id: str
    name: str
    target_amount: float
    current_amount: float
    remaining_amount: float
    progress_percentage: float
    months_remaining: int
    required_monthly: float
    monthly_contribution: float
    contribution_gap: float
    is_on_track: bool


def months_remaining(target_date: date, today: Optional[date] = None) -> int:
    days = (target_date - (today or date.today())).days
    return max(1, math.ceil(days / config.DAYS_PER_MONTH))


def required_monthly(goal: SavingsGoal, today: Optional[date] = None) -> float:
    """Monthly saving needed to hit the target on time (never negative)."""
    remaining = goal.target_amount - goal.current_amount
    return max(0.0, remaining / months_remaining(goal.target_date, today))


def total_required_monthly(goals: Iterable[SavingsGoal], today: Optional[date] = None) -> float:
    return sum(required_monthly(goal, today) for goal in goals)


def total_monthly_contribution(goals: Iterable[SavingsGoal]) -> float:
    return sum(goal.monthly_contribution for goal in goals)


def goal_progress(goal: SavingsGoal, today: Optional[date] = None) -> GoalProgress:
    required = required_monthly(goal, today)
    progress = (goal.current_amount / goal.target_amount * 100.0) if goal.target_amount > 0 else 0.0
    return GoalProgress(
        goal_id=goal.id,
        name=goal.name,
        target_amount=goal.target_amount,
        current_amount=goal.current_amount,
        remaining_amount=max(0.0, goal.target_amount - goal.current_amount),
        progress_percentage=min(progress, 100.0),
        months_remaining=months_remaining(goal.target_date, today),
        required_monthly=required,
        monthly_contribution=goal.monthly_contribution,
        contribution_gap=max(0.0, required - goal.monthly_contribution),
        is_on_track=goal.monthly_contribution >= required,
    )


def goals_progress(goals: Iterable[SavingsGoal], today: Optional[date] = None) -> List[GoalProgress]:
    return [goal_progress(goal, today) for goal in goals]


def person_contribution(
    goals: Iterable[SavingsGoal],
    person: Person,
    setup: Optional[BudgetSetup] = None,
) -> float:
    """Monthly contributions attributable to ``person``.

    Goals without an assignment belong to nobody in particular and are
    left out of per-person totals.
    """
    default_split = resolve_split(None, setup)
    total = 0.0
    for goal in goals:
        if goal.assigned_to is None:
            continue
        pct = share_percentage(goal.assigned_to, person, None, default_split)
        total += goal.monthly_contribution * pct / 100.0
    return total


def goals_for(goals: Iterable[SavingsGoal], person: Person) -> List[SavingsGoal]:
    return [
        goal for goal in goals
        if goal.assigned_to is not None
        and (goal.assigned_to is Assignment.SHARED or goal.assigned_to.value == person.value)
    ]
