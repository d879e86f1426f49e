"""Memoised dashboard pipeline.

Every derived view is a pure function of hashable inputs (the transaction
tuple, the frozen configuration, the goals tuple, the period and today's
date), so results are cached on those inputs.  The six-month history is
cached separately and keyed without the display period: switching periods
reuses it instead of rebuilding the trailing windows.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from functools import lru_cache
from types import MappingProxyType
from typing import Iterable, Mapping, Optional, Tuple

import pandas as pd

from .allocation import resolve_split
from .analysis import BudgetAnalysis, BudgetTotals, analyse_budgets, budget_vs_actual
from .bank_balance import BankBalanceData, bank_balances
from .goals import GoalProgress, goals_progress
from .log import get_logger
from .models import BudgetSetup, Person, SavingsGoal, Transaction, as_transactions
from .periods import DateRange, default_range
from .settlement import CreditCardBalance, credit_card_balance
from .smart_budgeting import SmartBudget, build_smart_budgets, historical_spend
from .sources import TransactionSource, load_transactions
from .storage import HouseholdStore
from .summary import (
    AccountBalance,
    CategoryBudget,
    FinancialSummary,
    MonthlyTrend,
    PersonSummary,
    account_balances,
    category_budgets,
    financial_summary,
    monthly_trends,
    person_summary,
    tracked_categories,
)

logger = get_logger(__name__)


@dataclass(frozen=True)
class Dashboard:
    period: DateRange
    summary: FinancialSummary
    budgets: Tuple[CategoryBudget, ...]
    smart_budgets: Tuple[SmartBudget, ...]
    analysis: Tuple[BudgetAnalysis, ...]
    budget_groups: Mapping[str, BudgetTotals]
    credit_card: CreditCardBalance
    bank_balance: BankBalanceData
    people: Mapping[Person, PersonSummary]
    goals: Tuple[GoalProgress, ...]
    trends: Tuple[MonthlyTrend, ...]
    accounts: Tuple[AccountBalance, ...]


@lru_cache(maxsize=16)
def cached_history(
    transactions: Tuple[Transaction, ...],
    categories: Tuple[str, ...],
    today: date,
    default_split: float,
    person: Person = Person.SELF,
) -> pd.DataFrame:
    """Trailing monthly spend matrix; shared between calls, do not mutate."""
    logger.debug("history_cache_miss", categories=len(categories), today=today.isoformat())
    return historical_spend(transactions, categories, today, default_split, person)


@lru_cache(maxsize=64)
def _compute(
    transactions: Tuple[Transaction, ...],
    setup: Optional[BudgetSetup],
    goals: Tuple[SavingsGoal, ...],
    period: DateRange,
    today: date,
    person: Person,
) -> Dashboard:
    logger.debug("dashboard_cache_miss", period=period.label, transactions=len(transactions))
    categories = tuple(entry.category for entry in tracked_categories(setup))
    history = cached_history(transactions, categories, today, resolve_split(None, setup), person)

    budgets = category_budgets(transactions, period, setup, person)
    smart = build_smart_budgets(transactions, goals, period, setup, today, person, history=history)
    people = {}
    if setup is not None:
        people = {p: person_summary(setup, p, transactions, goals, period) for p in Person}

    return Dashboard(
        period=period,
        summary=financial_summary(transactions, goals, period, setup),
        budgets=tuple(budgets),
        smart_budgets=tuple(smart),
        analysis=tuple(analyse_budgets(smart, goals)),
        budget_groups=MappingProxyType(budget_vs_actual(budgets)),
        credit_card=credit_card_balance(
            transactions,
            setup.last_credit_card_settlement if setup is not None else None,
            setup,
        ),
        bank_balance=bank_balances(transactions, setup, period),
        people=MappingProxyType(people),
        goals=tuple(goals_progress(goals, today)),
        trends=tuple(monthly_trends(transactions, today)),
        accounts=tuple(account_balances(transactions)),
    )


def compute_dashboard(
    transactions: Iterable[Transaction],
    setup: Optional[BudgetSetup] = None,
    goals: Iterable[SavingsGoal] = (),
    period: Optional[DateRange] = None,
    today: Optional[date] = None,
    person: Person = Person.SELF,
) -> Dashboard:
    """Derive every dashboard view for one set of inputs.

    Args:
        transactions: Full transaction set
        setup: Household configuration, if one has been saved
        goals: Savings goals
        period: Display period (defaults to the current pay cycle)
        today: Anchor for history, trends and goal requirements
        person: Whose share drives category spend and history

    Returns:
        The derived Dashboard; identical inputs return the cached object
    """
    today = today or date.today()
    return _compute(
        as_transactions(transactions),
        setup,
        tuple(goals),
        period or default_range(today),
        today,
        person,
    )


def load_dashboard(
    store: HouseholdStore,
    source: TransactionSource,
    fallback: Optional[TransactionSource] = None,
    period: Optional[DateRange] = None,
    today: Optional[date] = None,
) -> Dashboard:
    """Read configuration and transactions, then compute the dashboard.

    Sheet sources built without a self name take the saved household's
    ``self_name`` so Personal rows are attributed to the right member.
    """
    with store.lock:
        setup = store.load_budget_setup()
        goals = store.load_savings_goals()
    if setup is not None:
        source = source.with_self_name(setup.self_name)
        if fallback is not None:
            fallback = fallback.with_self_name(setup.self_name)
    transactions = load_transactions(source, fallback)
    return compute_dashboard(transactions, setup, goals, period, today)


def clear_caches() -> None:
    cached_history.cache_clear()
    _compute.cache_clear()
