"""One-shot budget recommendations.

This is the explicit "recommend my budgets" action, separate from the
continuous smart budgeting engine and deliberately simpler: a six-month
average with a flat buffer per category group, a seasonal bump for
electricity, and a significance filter so only meaningful changes are
shown.  Results can be written back into the manual budgets.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from datetime import date
from typing import Callable, Iterable, List, Optional, Sequence

import numpy as np
import pandas as pd

from . import config, defaults
from .allocation import resolve_split
from .frames import expense_rows, share_column, transactions_frame, with_month
from .log import get_logger
from .models import Assignment, BudgetSetup, ManualBudget, Person, Transaction

logger = get_logger(__name__)


@dataclass(frozen=True)
class BudgetRecommendation:
    category: str
    current_budget: float
    recommended_budget: float
    six_month_average: float
    confidence: float
    reasoning: str
    assigned_to: Assignment
    change: float
    change_percentage: float


def _policy(key: str, default):
    return defaults.get_value('categories', 'recommendations', key, default=default)


def _candidate_categories(setup: Optional[BudgetSetup]) -> List[str]:
    names = list(defaults.category_names())
    if setup is not None:
        names.extend(b.category for b in setup.active_manual_budgets() if b.category not in names)
    return names


def _current_budget(setup: Optional[BudgetSetup], category: str) -> float:
    if setup is None:
        return 0.0
    for budget in setup.manual_budgets:
        if budget.category == category:
            return budget.allocated_amount
    return 0.0


def buffered_budget(category: str, average: float, today: date) -> tuple:
    """Apply the group buffer and seasonal adjustment.

    Returns:
        Tuple of (recommended amount, human-readable reasoning)
    """
    if category in _policy('essential', []):
        amount = average * _policy('essential_buffer', 1.1)
        reasoning = 'Essential category with 10% safety buffer added'
    elif category in _policy('discretionary', []):
        amount = average * _policy('discretionary_factor', 0.95)
        reasoning = 'Discretionary spending with 5% reduction for savings optimization'
    else:
        amount = average * _policy('regular_buffer', 1.05)
        reasoning = 'Based on 6-month average with 5% buffer'

    if category == _policy('seasonal_category', 'Electricity') and today.month in _policy('seasonal_months', []):
        amount *= _policy('seasonal_factor', 1.2)
        reasoning += ' + 20% summer adjustment'
    return amount, reasoning


def is_significant(change: float, change_percentage: float) -> bool:
    return (
        abs(change_percentage) > _policy('min_change_percentage', 5)
        or abs(change) > _policy('min_change_amount', 100)
    )


def generate_recommendations(
    transactions: Iterable[Transaction],
    setup: Optional[BudgetSetup] = None,
    today: Optional[date] = None,
) -> List[BudgetRecommendation]:
    """Recommend monthly allocations from the last six months, this month included.

    Categories with no expenses in the last six months are skipped.  Only
    significant changes are returned, largest absolute change first.

    Args:
        transactions: Full transaction set
        setup: Household configuration (manual budgets, default split)
        today: Anchor date

    Returns:
        Recommendations sorted by absolute change, descending
    """
    today = today or date.today()
    months = config.HISTORY_MONTHS
    current = pd.Period(today, freq='M')
    window = [current - i for i in range(months)]
    cutoff = pd.Timestamp(today) - pd.DateOffset(months=months)

    frame = expense_rows(transactions_frame(transactions, resolve_split(None, setup)))
    frame = with_month(frame[frame['date'] >= cutoff])
    totals = frame.groupby(['category', 'month'])[share_column(Person.SELF)].sum()
    self_assigned = _policy('self_assigned', [])

    recommendations: List[BudgetRecommendation] = []
    for category in _candidate_categories(setup):
        if category not in frame['category'].values:
            continue
        monthly = np.array(
            [float(totals.get((category, month), 0.0)) for month in window], dtype=float
        )
        average = float(monthly.mean())
        variation = monthly.std() / average if average > 0 else 1.0
        confidence = float(max(config.CONFIDENCE_FLOOR, min(config.CONFIDENCE_CEILING, 1.0 - variation)))

        recommended, reasoning = buffered_budget(category, average, today)
        current_budget = _current_budget(setup, category)
        change = recommended - current_budget
        change_percentage = change / current_budget * 100.0 if current_budget > 0 else 0.0
        if not is_significant(change, change_percentage):
            continue

        recommendations.append(BudgetRecommendation(
            category=category,
            current_budget=current_budget,
            recommended_budget=float(round(recommended)),
            six_month_average=float(round(average)),
            confidence=confidence,
            reasoning=reasoning,
            assigned_to=Assignment.SELF if category in self_assigned else Assignment.SHARED,
            change=change,
            change_percentage=change_percentage,
        ))

    recommendations.sort(key=lambda r: abs(r.change), reverse=True)
    logger.debug("recommendations_generated", count=len(recommendations))
    return recommendations


def _timestamp_id() -> str:
    return str(int(time.time() * 1000))


def apply_recommendations(
    setup: BudgetSetup,
    recommendations: Sequence[BudgetRecommendation],
    id_factory: Callable[[], str] = _timestamp_id,
) -> BudgetSetup:
    """Write recommendations into the manual budgets.

    An existing budget for the category is replaced in place and keeps its
    id; otherwise a new budget is appended.  Applied budgets are active and
    take the recommendation's assignment.
    """
    budgets = list(setup.manual_budgets)
    for recommendation in recommendations:
        index = next(
            (i for i, b in enumerate(budgets) if b.category == recommendation.category), None
        )
        replacement = ManualBudget(
            id=budgets[index].id if index is not None else id_factory(),
            category=recommendation.category,
            allocated_amount=recommendation.recommended_budget,
            assigned_to=recommendation.assigned_to,
            is_active=True,
        )
        if index is not None:
            budgets[index] = replacement
        else:
            budgets.append(replacement)
    logger.info("recommendations_applied", categories=[r.category for r in recommendations])
    return setup.with_changes(manual_budgets=tuple(budgets))


def apply_recommendation(
    setup: BudgetSetup,
    recommendation: BudgetRecommendation,
    id_factory: Callable[[], str] = _timestamp_id,
) -> BudgetSetup:
    return apply_recommendations(setup, [recommendation], id_factory)


class RecommendationRunner:
    """Runs the recommendation flow behind a simulated delay.

    Only the most recent request wins: when a newer ``generate`` call starts
    while an older one is still waiting, the older call returns ``None``.
    """

    def __init__(self, latency: float = 2.0):
        self.latency = latency
        self._latest = 0

    async def generate(
        self,
        transactions: Iterable[Transaction],
        setup: Optional[BudgetSetup] = None,
        today: Optional[date] = None,
    ) -> Optional[List[BudgetRecommendation]]:
        self._latest += 1
        token = self._latest
        transactions = tuple(transactions)
        await asyncio.sleep(self.latency)
        if token != self._latest:
            logger.debug("recommendations_superseded", request=token, latest=self._latest)
            return None
        return generate_recommendations(transactions, setup, today)
