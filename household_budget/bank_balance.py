"""Bank balance projection.

Per member and per period the projected cash position is::

    closing = opening + income - fixed expenses - cash expenses - card settlement

Income here is observed (income transactions in the period), unlike the
configured income of the per-person summary.  Card spend only leaves the
bank account when a settlement happens inside the period.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, Iterable, Optional, Tuple

import pandas as pd

from .allocation import recurring_share, resolve_split
from .frames import (
    expense_rows,
    income_rows,
    on_or_before,
    share_column,
    transactions_frame,
    within,
)
from .log import get_logger
from .models import Assignment, BudgetSetup, Person, Transaction, as_transactions, to_timestamp
from .periods import DateRange

logger = get_logger(__name__)


@dataclass(frozen=True)
class PersonBankBalance:
    opening_balance: float = 0.0
    observed_income: float = 0.0
    fixed_expenses: float = 0.0
    cash_expenses: float = 0.0
    credit_card_settlements: float = 0.0
    closing_balance: float = 0.0
    transactions: Tuple[Transaction, ...] = ()

    @property
    def total_expenses(self) -> float:
        return self.fixed_expenses + self.cash_expenses + self.credit_card_settlements


@dataclass(frozen=True)
class BankBalanceData:
    self_balance: PersonBankBalance
    spouse_balance: PersonBankBalance

    def for_person(self, person: Person) -> PersonBankBalance:
        return self.self_balance if person is Person.SELF else self.spouse_balance

    @property
    def total_closing_balance(self) -> float:
        return self.self_balance.closing_balance + self.spouse_balance.closing_balance

    @property
    def total_income(self) -> float:
        return self.self_balance.observed_income + self.spouse_balance.observed_income

    @property
    def total_expenses(self) -> float:
        return self.self_balance.total_expenses + self.spouse_balance.total_expenses

    def to_dict(self) -> Dict[str, float]:
        return {
            'totalClosingBalance': self.total_closing_balance,
            'totalIncome': self.total_income,
            'totalExpenses': self.total_expenses,
        }


def _settlement_drawdown(frame: pd.DataFrame, setup: BudgetSetup, period: DateRange) -> pd.Series:
    """Per-member card spend settled inside ``period`` (zeros otherwise)."""
    columns = [share_column(Person.SELF), share_column(Person.SPOUSE)]
    instant = setup.last_credit_card_settlement
    if instant is None or not period.contains(instant):
        return pd.Series(0.0, index=columns)
    settled = on_or_before(expense_rows(frame), instant)
    settled = settled[settled['is_credit_card']]
    return settled[columns].sum()


def _person_balance(
    person: Person,
    frame: pd.DataFrame,
    transactions: Tuple[Transaction, ...],
    setup: BudgetSetup,
    period: DateRange,
    drawdown: float,
) -> PersonBankBalance:
    column = share_column(person)
    in_period = within(frame, period.start_date, period.end_date)

    income = income_rows(in_period)
    observed_income = float(income.loc[income['assigned_to'] == person.value, 'amount'].sum())
    fixed = recurring_share(setup.fixed_expenses, person, setup)
    expenses = expense_rows(in_period)
    cash = float(expenses.loc[~expenses['is_credit_card'], column].sum())

    if setup.zero_balances:
        opening = -observed_income + fixed + cash + drawdown
        closing = 0.0
    else:
        opening = setup.opening_balance(person)
        closing = opening + observed_income - fixed - cash - drawdown

    # Rows shown to the member: their own items plus shared expenses.
    visible = in_period[
        (in_period['assigned_to'] == person.value)
        | ((in_period['assigned_to'] == Assignment.SHARED.value) & (in_period['type'] == 'expense'))
    ]
    return PersonBankBalance(
        opening_balance=opening,
        observed_income=observed_income,
        fixed_expenses=fixed,
        cash_expenses=cash,
        credit_card_settlements=drawdown,
        closing_balance=closing,
        transactions=tuple(transactions[position] for position in visible.index),
    )


def bank_balances(
    transactions: Iterable[Transaction],
    setup: Optional[BudgetSetup],
    period: DateRange,
) -> BankBalanceData:
    """Project both members' bank balances over ``period``.

    Args:
        transactions: Full transaction set (settlement draw-down looks
            before the period)
        setup: Household configuration; None yields zeroed balances
        period: Period to project over

    Returns:
        Per-member balances; combined totals are derived from them so they
        always reconcile
    """
    if setup is None:
        return BankBalanceData(PersonBankBalance(), PersonBankBalance())

    transactions = as_transactions(transactions)
    frame = transactions_frame(transactions, resolve_split(None, setup))
    drawdown = _settlement_drawdown(frame, setup, period)
    balances = {
        person: _person_balance(
            person, frame, transactions, setup, period, float(drawdown[share_column(person)])
        )
        for person in Person
    }
    return BankBalanceData(balances[Person.SELF], balances[Person.SPOUSE])


def update_opening_balances(
    setup: BudgetSetup,
    self_balance: float,
    spouse_balance: float,
    now: Optional[datetime] = None,
) -> BudgetSetup:
    """Record new opening balances as of ``now`` and leave zero-balance mode."""
    stamped = to_timestamp(now or datetime.now(timezone.utc))
    logger.info(
        "opening_balances_updated",
        self_balance=self_balance,
        spouse_balance=spouse_balance,
        as_of=stamped.isoformat(),
    )
    return setup.with_changes(
        self_opening_balance=float(self_balance),
        spouse_opening_balance=float(spouse_balance),
        balance_as_of_date=stamped,
        zero_balances=False,
    )


def zero_balances(setup: BudgetSetup, now: Optional[datetime] = None) -> BudgetSetup:
    """Re-baseline both members so their closing balance is exactly zero."""
    stamped = to_timestamp(now or datetime.now(timezone.utc))
    logger.info("balances_zeroed", as_of=stamped.isoformat())
    return setup.with_changes(zero_balances=True, balance_as_of_date=stamped)
