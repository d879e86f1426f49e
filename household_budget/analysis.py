"""Budget analysis rows and budget-vs-actual grouping."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Sequence

from . import config
from .goals import total_monthly_contribution
from .models import Assignment, SavingsGoal
from .smart_budgeting import SmartBudget
from .summary import CategoryBudget

OVER = 'over'
UNDER = 'under'
ON_TRACK = 'on-track'


@dataclass(frozen=True)
class BudgetAnalysis:
    category: str
    actual: float
    budgeted: float
    variance: float
    variance_percentage: float
    historical_average: float
    recommended_budget: float
    trend: str
    impact_on_goals: float


@dataclass(frozen=True)
class BudgetTotals:
    allocated: float = 0.0
    spent: float = 0.0

    @property
    def remaining(self) -> float:
        return self.allocated - self.spent

    @property
    def over_budget(self) -> float:
        return max(0.0, self.spent - self.allocated)


def variance_percentage(variance: float, budgeted: float) -> float:
    return variance / budgeted * 100.0 if budgeted else 0.0


def variance_trend(percentage: float, tolerance: float = config.VARIANCE_TOLERANCE) -> str:
    """Classify a variance percentage.

    Example:
        >>> variance_trend(15.0), variance_trend(-15.0), variance_trend(0.0)
        ('over', 'under', 'on-track')
    """
    if percentage > tolerance:
        return OVER
    if percentage < -tolerance:
        return UNDER
    return ON_TRACK


def goal_impact(variance: float, monthly_contributions: float) -> float:
    """Overspend as a percentage of the monthly savings contributions."""
    if variance <= 0 or monthly_contributions <= 0:
        return 0.0
    return variance / monthly_contributions * 100.0


def analyse_budgets(
    smart_budgets: Iterable[SmartBudget],
    goals: Sequence[SavingsGoal] = (),
) -> List[BudgetAnalysis]:
    """One analysis row per smart budget, in the same order."""
    contributions = total_monthly_contribution(goals)
    rows = []
    for budget in smart_budgets:
        variance = budget.spent - budget.allocated
        percentage = variance_percentage(variance, budget.allocated)
        rows.append(BudgetAnalysis(
            category=budget.category,
            actual=budget.spent,
            budgeted=budget.allocated,
            variance=variance,
            variance_percentage=percentage,
            historical_average=budget.historical_average,
            recommended_budget=budget.allocated + budget.recommended_adjustment,
            trend=variance_trend(percentage),
            impact_on_goals=goal_impact(variance, contributions),
        ))
    return rows


def budget_vs_actual(budgets: Iterable[CategoryBudget]) -> Dict[str, BudgetTotals]:
    """Allocated and spent totals grouped by who the budget is assigned to.

    Returns:
        Mapping with keys ``self``, ``spouse``, ``shared`` and ``combined``
    """
    groups = {key: [0.0, 0.0] for key in ('self', 'spouse', 'shared', 'combined')}
    for budget in budgets:
        key = budget.assigned_to.value if budget.assigned_to else Assignment.SHARED.value
        for bucket in (key, 'combined'):
            groups[bucket][0] += budget.allocated
            groups[bucket][1] += budget.spent
    return {key: BudgetTotals(allocated, spent) for key, (allocated, spent) in groups.items()}
