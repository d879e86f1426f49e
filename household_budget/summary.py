"""Financial summary calculations.

This module aggregates period-filtered transactions into household totals,
per-category budget-vs-spent figures, configuration-based per-person
overviews, monthly trends and account balances.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Dict, Iterable, List, Optional, Sequence

import pandas as pd

from . import defaults
from .allocation import owned_recurring_total, recurring_share, resolve_split
from .frames import (
    expense_rows,
    income_rows,
    share_column,
    transactions_frame,
    within,
)
from .goals import goals_for, person_contribution
from .models import Assignment, BudgetSetup, Person, SavingsGoal, Transaction, as_transactions
from .periods import DateRange


@dataclass(frozen=True)
class CategoryAllocation:
    """A category the household tracks, with its monthly allocation."""

    category: str
    allocated: float
    assigned_to: Assignment = Assignment.SHARED
    color: str = '#6B7280'


@dataclass(frozen=True)
class CategoryBudget:
    category: str
    allocated: float
    spent: float
    color: str
    assigned_to: Assignment

    @property
    def remaining(self) -> float:
        return self.allocated - self.spent


@dataclass(frozen=True)
class FinancialSummary:
    total_income: float
    total_expenses: float
    net_income: float
    total_budget: float
    budget_used: float
    savings_rate: float
    total_savings_goals: float
    projected_savings: float

    def to_dict(self) -> Dict[str, float]:
        return {
            'totalIncome': self.total_income,
            'totalExpenses': self.total_expenses,
            'netIncome': self.net_income,
            'totalBudget': self.total_budget,
            'budgetUsed': self.budget_used,
            'savingsRate': self.savings_rate,
            'totalSavingsGoals': self.total_savings_goals,
            'projectedSavings': self.projected_savings,
        }


@dataclass(frozen=True)
class PersonSummary:
    """Configuration-based monthly picture of one household member."""

    person: Person
    name: str
    configured_income: float
    own_fixed_expenses: float
    shared_fixed_expenses: float
    actual_spending: float
    budget_allocated: float
    budget_spent: float
    savings_contributions: float

    @property
    def fixed_expenses(self) -> float:
        return self.own_fixed_expenses + self.shared_fixed_expenses

    @property
    def net(self) -> float:
        return self.configured_income - self.fixed_expenses

    @property
    def budget_utilization(self) -> float:
        if self.budget_allocated <= 0:
            return 0.0
        return self.budget_spent / self.budget_allocated * 100.0

    @property
    def savings_rate(self) -> float:
        if self.configured_income <= 0:
            return 0.0
        return self.savings_contributions / self.configured_income * 100.0


@dataclass(frozen=True)
class MonthlyTrend:
    month: str
    income: float
    expenses: float

    @property
    def net(self) -> float:
        return self.income - self.expenses


@dataclass(frozen=True)
class AccountBalance:
    id: str
    name: str
    balance: float
    type: str


def tracked_categories(setup: Optional[BudgetSetup] = None) -> List[CategoryAllocation]:
    """Categories to report on, in display order.

    Active manual budgets replace the built-in table entirely; without any,
    the built-in table is used.
    """
    manual = setup.active_manual_budgets() if setup is not None else ()
    if manual:
        return [
            CategoryAllocation(
                category=budget.category,
                allocated=budget.allocated_amount,
                assigned_to=budget.assigned_to,
                color=defaults.category_color(budget.category, index),
            )
            for index, budget in enumerate(manual)
        ]
    return [
        CategoryAllocation(
            category=entry['name'],
            allocated=float(entry['allocated']),
            assigned_to=Assignment(entry.get('assigned_to', 'shared')),
            color=entry.get('color', '#6B7280'),
        )
        for entry in defaults.default_categories()
    ]


def _period_frame(
    transactions: Iterable[Transaction],
    period: Optional[DateRange],
    setup: Optional[BudgetSetup],
) -> pd.DataFrame:
    frame = transactions_frame(transactions, resolve_split(None, setup))
    if period is None:
        return frame
    return within(frame, period.start_date, period.end_date)


def category_budgets(
    transactions: Iterable[Transaction],
    period: Optional[DateRange] = None,
    setup: Optional[BudgetSetup] = None,
    person: Person = Person.SELF,
) -> List[CategoryBudget]:
    """Allocated vs spent for every tracked category.

    Args:
        transactions: Full transaction set
        period: Date range to report on (all transactions when None)
        setup: Household configuration; supplies manual budgets and the split
        person: Whose allocation-engine share counts as spent

    Returns:
        One CategoryBudget per tracked category
    """
    expenses = expense_rows(_period_frame(transactions, period, setup))
    spent_by_category = expenses.groupby('category')[share_column(person)].sum()
    return [
        CategoryBudget(
            category=entry.category,
            allocated=entry.allocated,
            spent=float(spent_by_category.get(entry.category, 0.0)),
            color=entry.color,
            assigned_to=entry.assigned_to,
        )
        for entry in tracked_categories(setup)
    ]


def financial_summary(
    transactions: Iterable[Transaction],
    goals: Sequence[SavingsGoal] = (),
    period: Optional[DateRange] = None,
    setup: Optional[BudgetSetup] = None,
) -> FinancialSummary:
    """Household totals for the period.

    Income and expense totals are whole amounts; the allocation engine is
    not applied at this level.

    Example:
        >>> financial_summary([]).net_income
        0.0
    """
    frame = _period_frame(transactions, period, setup)
    total_income = float(income_rows(frame)['amount'].sum())
    total_expenses = float(expense_rows(frame)['amount'].sum())
    net = total_income - total_expenses
    return FinancialSummary(
        total_income=total_income,
        total_expenses=total_expenses,
        net_income=net,
        total_budget=float(sum(entry.allocated for entry in tracked_categories(setup))),
        budget_used=total_expenses,
        savings_rate=(net / total_income * 100.0) if total_income > 0 else 0.0,
        total_savings_goals=float(sum(goal.target_amount for goal in goals)),
        projected_savings=max(0.0, net),
    )


def person_summary(
    setup: BudgetSetup,
    person: Person,
    transactions: Iterable[Transaction] = (),
    goals: Sequence[SavingsGoal] = (),
    period: Optional[DateRange] = None,
) -> PersonSummary:
    """Monthly overview for one member, driven by the configured cash flows.

    Income is the monthly-normalised active income sources assigned to the
    member.  Spending, budget utilisation and savings contributions are
    extras layered on top from the period's transactions and the goals.
    """
    transactions = as_transactions(transactions)
    own_fixed = owned_recurring_total(setup.fixed_expenses, person)
    shared_fixed = recurring_share(
        (item for item in setup.fixed_expenses if item.assigned_to is Assignment.SHARED),
        person,
        setup,
    )

    frame = expense_rows(_period_frame(transactions, period, setup))
    actual = float(frame[share_column(person)].sum())

    own_budgets = [
        budget for budget in category_budgets(transactions, period, setup, person)
        if budget.assigned_to.value == person.value
    ]

    return PersonSummary(
        person=person,
        name=setup.name_of(person),
        configured_income=owned_recurring_total(setup.income_sources, person),
        own_fixed_expenses=own_fixed,
        shared_fixed_expenses=shared_fixed,
        actual_spending=actual,
        budget_allocated=sum(b.allocated for b in own_budgets),
        budget_spent=sum(b.spent for b in own_budgets),
        savings_contributions=person_contribution(goals_for(goals, person), person, setup),
    )


def monthly_trends(
    transactions: Iterable[Transaction],
    today: Optional[date] = None,
    months: int = 6,
) -> List[MonthlyTrend]:
    """Income and expenses for the ``months`` calendar months ending this month, oldest first."""
    frame = transactions_frame(transactions)
    current = pd.Period(today or date.today(), freq='M')
    buckets = frame['date'].dt.to_period('M')
    trends = []
    for offset in range(months - 1, -1, -1):
        period = current - offset
        rows = frame[buckets == period]
        trends.append(MonthlyTrend(
            month=period.strftime('%b %Y'),
            income=float(income_rows(rows)['amount'].sum()),
            expenses=float(expense_rows(rows)['amount'].sum()),
        ))
    return trends


def _account_type(name: str) -> str:
    lowered = name.lower()
    if 'credit' in lowered:
        return 'credit'
    if 'savings' in lowered:
        return 'savings'
    return 'checking'


def account_balances(transactions: Iterable[Transaction]) -> List[AccountBalance]:
    """Running balance per account across all transactions (income adds, expenses subtract)."""
    frame = transactions_frame(transactions)
    if frame.empty:
        return []
    signed = frame['amount'].where(frame['type'] == 'income', -frame['amount'])
    totals = signed.groupby(frame['account'], sort=False).sum()
    return [
        AccountBalance(id=f"account-{index}", name=name, balance=float(balance), type=_account_type(name))
        for index, (name, balance) in enumerate(totals.items())
    ]
