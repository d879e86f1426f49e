"""Smart budgeting engine.

Per tracked category this module derives a six-month spending history,
classifies its trend, scores how consistent it is, and recommends a
monthly allocation that leans on discretionary categories while savings
goals still need funding.

The history is always the trailing calendar months before today's month.
It never depends on the period being displayed, so it can be computed
once and reused while the user changes the period filter.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from . import config, defaults
from .allocation import resolve_split
from .frames import expense_rows, share_column, transactions_frame, with_month
from .goals import total_required_monthly
from .models import Assignment, BudgetSetup, Person, SavingsGoal, Transaction
from .periods import DateRange, trailing_months
from .summary import category_budgets

INCREASING = 'increasing'
DECREASING = 'decreasing'
STABLE = 'stable'


@dataclass(frozen=True)
class SmartBudget:
    category: str
    allocated: float
    spent: float
    color: str
    assigned_to: Assignment
    historical_average: float
    trend: str
    recommended_budget: float
    confidence: float
    monthly_spend: Tuple[float, ...] = ()

    @property
    def recommended_adjustment(self) -> float:
        return self.recommended_budget - self.allocated


def _policy(key: str, default):
    return defaults.get_value('categories', 'smart_budgeting', key, default=default)


def historical_spend(
    transactions: Iterable[Transaction],
    categories: Sequence[str],
    today: Optional[date] = None,
    default_split: Optional[float] = None,
    person: Person = Person.SELF,
    months: int = config.HISTORY_MONTHS,
) -> pd.DataFrame:
    """Monthly personal-share expense per category over the trailing window.

    Args:
        transactions: Full transaction set (not period-filtered)
        categories: Categories to include, in row order
        today: Anchor date; the window is the ``months`` calendar months before its month
        default_split: Self's share of shared expenses without their own split
        person: Whose share of each expense is counted
        months: Window length

    Returns:
        DataFrame indexed by category with one column per month (oldest
        first).  Months without spending are 0, never missing.

    Example:
        >>> history = historical_spend([], ['Groceries'], today=date(2024, 7, 15))
        >>> list(history.columns.astype(str))
        ['2024-01', '2024-02', '2024-03', '2024-04', '2024-05', '2024-06']
    """
    window = trailing_months(today, months)
    categories = list(dict.fromkeys(categories))
    frame = with_month(expense_rows(transactions_frame(transactions, default_split)))
    frame = frame[frame['month'].isin(window) & frame['category'].isin(categories)]
    totals = frame.groupby(['category', 'month'])[share_column(person)].sum()
    matrix = totals.unstack('month') if not totals.empty else pd.DataFrame()
    return matrix.reindex(index=categories, columns=window).fillna(0.0).astype(float)


def classify_trend(monthly: Sequence[float], window: int = config.TREND_WINDOW) -> str:
    """Compare the latest ``window`` months against the ``window`` before them.

    ``monthly`` is ordered oldest to newest.

    Example:
        >>> classify_trend([100, 100, 100, 200, 200, 200])
        'increasing'
    """
    values = list(monthly)
    recent = values[-window:]
    older = values[-2 * window:-window]
    recent_avg = sum(recent) / window
    older_avg = sum(older) / window
    if recent_avg > older_avg * config.TREND_UPPER:
        return INCREASING
    if recent_avg < older_avg * config.TREND_LOWER:
        return DECREASING
    return STABLE


def confidence_score(monthly: Sequence[float]) -> float:
    """Consistency of the history: 1 minus the coefficient of variation, clamped."""
    values = np.asarray(list(monthly), dtype=float)
    if values.size == 0:
        return config.CONFIDENCE_UNKNOWN
    average = values.mean()
    if average == 0:
        return config.CONFIDENCE_UNKNOWN
    score = 1.0 - values.std() / average
    return float(min(config.CONFIDENCE_CEILING, max(config.CONFIDENCE_FLOOR, score)))


def savings_reduction(savings_needed: float) -> float:
    """Fraction trimmed from discretionary budgets for the outstanding goal requirement."""
    if savings_needed <= 0:
        return 0.0
    per_thousand = _policy('savings_reduction_per_thousand', 0.1)
    return min(_policy('max_savings_reduction', 0.3), savings_needed / 1000.0 * per_thousand)


def recommend_budget(
    category: str,
    average: float,
    trend: str,
    allocated: float,
    savings_needed: float = 0.0,
) -> float:
    recommended = average
    if trend == INCREASING:
        recommended = min(average * config.TREND_UPPER, allocated * _policy('increasing_cap', 1.2))
    elif trend == DECREASING:
        recommended = max(average * config.TREND_LOWER, allocated * _policy('decreasing_floor', 0.8))

    if category in _policy('discretionary', []):
        recommended *= 1.0 - savings_reduction(savings_needed)
    return recommended


def build_smart_budgets(
    transactions: Iterable[Transaction],
    goals: Sequence[SavingsGoal] = (),
    period: Optional[DateRange] = None,
    setup: Optional[BudgetSetup] = None,
    today: Optional[date] = None,
    person: Person = Person.SELF,
    history: Optional[pd.DataFrame] = None,
) -> List[SmartBudget]:
    """Smart budget rows for every tracked category.

    Args:
        transactions: Full transaction set
        goals: Savings goals; their outstanding requirement trims discretionary budgets
        period: Display period used for ``spent`` only
        setup: Household configuration
        today: Anchor for the historical window and the goal requirement
        person: Whose share is counted for both ``spent`` and history
        history: Precomputed :func:`historical_spend` matrix to reuse

    Returns:
        One SmartBudget per tracked category, in display order
    """
    transactions = tuple(transactions)
    budgets = category_budgets(transactions, period, setup, person)
    categories = [budget.category for budget in budgets]
    if history is None:
        history = historical_spend(
            transactions, categories, today, resolve_split(None, setup), person
        )
    savings_needed = total_required_monthly(goals, today)

    rows: List[SmartBudget] = []
    for budget in budgets:
        if budget.category in history.index:
            monthly = tuple(float(v) for v in history.loc[budget.category])
        else:
            monthly = (0.0,) * config.HISTORY_MONTHS
        average = float(np.mean(monthly))
        trend = classify_trend(monthly)
        rows.append(SmartBudget(
            category=budget.category,
            allocated=budget.allocated,
            spent=budget.spent,
            color=budget.color,
            assigned_to=budget.assigned_to,
            historical_average=average,
            trend=trend,
            recommended_budget=recommend_budget(
                budget.category, average, trend, budget.allocated, savings_needed
            ),
            confidence=confidence_score(monthly),
            monthly_spend=monthly,
        ))
    return rows
