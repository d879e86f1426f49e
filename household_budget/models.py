"""Value objects for transactions and household configuration.

Every object here is an immutable dataclass.  Collections are stored as
tuples so whole configurations are hashable, which lets the pipeline
memoise derived views on its inputs.  ``to_dict``/``from_dict`` use the
camelCase keys of the persisted browser state so exported JSON loads
unchanged.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, Iterable, Optional, Tuple

import pandas as pd

from . import config
from .errors import ConfigurationError


class Person(str, Enum):
    SELF = 'self'
    SPOUSE = 'spouse'


class Assignment(str, Enum):
    SELF = 'self'
    SPOUSE = 'spouse'
    SHARED = 'shared'


class TransactionType(str, Enum):
    INCOME = 'income'
    EXPENSE = 'expense'


class PaymentMethod(str, Enum):
    CASH = 'cash'
    CREDIT_CARD = 'credit_card'


class Frequency(str, Enum):
    MONTHLY = 'monthly'
    WEEKLY = 'weekly'
    BI_WEEKLY = 'bi-weekly'
    ANNUAL = 'annual'


class GoalPriority(str, Enum):
    HIGH = 'high'
    MEDIUM = 'medium'
    LOW = 'low'


def _enum(enum_cls, value: Any, default=None):
    if value is None or value == '':
        if default is None:
            raise ConfigurationError(f"Missing value for {enum_cls.__name__}")
        return default
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).strip().lower())
    except ValueError as exc:
        raise ConfigurationError(f"Unknown {enum_cls.__name__} value: {value!r}") from exc


def _split(value: Any) -> Optional[float]:
    if value is None or value == '':
        return None
    split = float(value)
    if not 0.0 <= split <= 100.0:
        raise ConfigurationError(f"Split percentage must be within 0-100, got {split}")
    return split


def to_date(value: Any) -> date:
    """Parse an ISO-ish date (or datetime) into a ``date``."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    parsed = pd.to_datetime(value)
    return parsed.date()


def to_timestamp(value: Any) -> Optional[datetime]:
    """Parse an instant into a naive UTC ``datetime``; ``None`` passes through."""
    if value is None or value == '':
        return None
    stamp = pd.Timestamp(value)
    if stamp.tzinfo is not None:
        stamp = stamp.tz_convert('UTC').tz_localize(None)
    return stamp.to_pydatetime()


def mentions_credit(*texts: Optional[str]) -> bool:
    """True when any text contains the credit marker (case-insensitive)."""
    marker = config.CREDIT_MARKER
    return any(marker in (text or '').lower() for text in texts)


def _iso(value: Optional[Any]) -> Optional[str]:
    return value.isoformat() if value is not None else None


@dataclass(frozen=True)
class Transaction:
    id: str
    date: date
    description: str
    category: str
    amount: float
    type: TransactionType
    account: str = config.DEFAULT_ACCOUNT
    assigned_to: Assignment = Assignment.SHARED
    split_percentage: Optional[float] = None
    payment_method: PaymentMethod = PaymentMethod.CASH

    def __post_init__(self) -> None:
        if self.amount < 0:
            raise ConfigurationError(f"Transaction {self.id} has a negative amount")
        _split(self.split_percentage)

    @property
    def is_credit_card(self) -> bool:
        if self.payment_method is PaymentMethod.CREDIT_CARD:
            return True
        return mentions_credit(self.account, self.description)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'date': self.date.isoformat(),
            'description': self.description,
            'category': self.category,
            'amount': self.amount,
            'type': self.type.value,
            'account': self.account,
            'assignedTo': self.assigned_to.value,
            'splitPercentage': self.split_percentage,
            'paymentMethod': self.payment_method.value,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Transaction':
        return cls(
            id=str(data['id']),
            date=to_date(data['date']),
            description=str(data.get('description') or ''),
            category=str(data.get('category') or config.DEFAULT_CATEGORY),
            amount=float(data.get('amount') or 0.0),
            type=_enum(TransactionType, data.get('type')),
            account=str(data.get('account') or config.DEFAULT_ACCOUNT),
            assigned_to=_enum(Assignment, data.get('assignedTo'), Assignment.SHARED),
            split_percentage=_split(data.get('splitPercentage')),
            payment_method=_enum(PaymentMethod, data.get('paymentMethod'), PaymentMethod.CASH),
        )


@dataclass(frozen=True)
class IncomeSource:
    id: str
    name: str
    amount: float
    frequency: Frequency = Frequency.MONTHLY
    assigned_to: Assignment = Assignment.SELF
    is_active: bool = True
    split_percentage: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'amount': self.amount,
            'frequency': self.frequency.value,
            'assignedTo': self.assigned_to.value,
            'isActive': self.is_active,
            'splitPercentage': self.split_percentage,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'IncomeSource':
        return cls(
            id=str(data['id']),
            name=str(data.get('name') or ''),
            amount=float(data.get('amount') or 0.0),
            frequency=_enum(Frequency, data.get('frequency'), Frequency.MONTHLY),
            assigned_to=_enum(Assignment, data.get('assignedTo'), Assignment.SELF),
            is_active=bool(data.get('isActive', True)),
            split_percentage=_split(data.get('splitPercentage')),
        )


@dataclass(frozen=True)
class FixedExpense:
    id: str
    name: str
    amount: float
    category: str = config.DEFAULT_CATEGORY
    frequency: Frequency = Frequency.MONTHLY
    assigned_to: Assignment = Assignment.SHARED
    split_percentage: Optional[float] = None
    due_date: Optional[int] = None
    is_active: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'amount': self.amount,
            'category': self.category,
            'frequency': self.frequency.value,
            'assignedTo': self.assigned_to.value,
            'splitPercentage': self.split_percentage,
            'dueDate': self.due_date,
            'isActive': self.is_active,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'FixedExpense':
        due = data.get('dueDate')
        return cls(
            id=str(data['id']),
            name=str(data.get('name') or ''),
            amount=float(data.get('amount') or 0.0),
            category=str(data.get('category') or config.DEFAULT_CATEGORY),
            frequency=_enum(Frequency, data.get('frequency'), Frequency.MONTHLY),
            assigned_to=_enum(Assignment, data.get('assignedTo'), Assignment.SHARED),
            split_percentage=_split(data.get('splitPercentage')),
            due_date=int(due) if due not in (None, '') else None,
            is_active=bool(data.get('isActive', True)),
        )


@dataclass(frozen=True)
class ManualBudget:
    id: str
    category: str
    allocated_amount: float
    assigned_to: Assignment = Assignment.SHARED
    split_percentage: Optional[float] = None
    is_active: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'category': self.category,
            'allocatedAmount': self.allocated_amount,
            'assignedTo': self.assigned_to.value,
            'splitPercentage': self.split_percentage,
            'isActive': self.is_active,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ManualBudget':
        return cls(
            id=str(data['id']),
            category=str(data['category']),
            allocated_amount=float(data.get('allocatedAmount') or 0.0),
            assigned_to=_enum(Assignment, data.get('assignedTo'), Assignment.SHARED),
            split_percentage=_split(data.get('splitPercentage')),
            is_active=bool(data.get('isActive', True)),
        )


@dataclass(frozen=True)
class SavingsGoal:
    id: str
    name: str
    target_amount: float
    current_amount: float
    target_date: date
    monthly_contribution: float = 0.0
    priority: GoalPriority = GoalPriority.MEDIUM
    category: Optional[str] = None
    assigned_to: Optional[Assignment] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'targetAmount': self.target_amount,
            'currentAmount': self.current_amount,
            'targetDate': self.target_date.isoformat(),
            'priority': self.priority.value,
            'monthlyContribution': self.monthly_contribution,
            'category': self.category,
            'assignedTo': self.assigned_to.value if self.assigned_to else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SavingsGoal':
        assigned = data.get('assignedTo')
        return cls(
            id=str(data['id']),
            name=str(data.get('name') or ''),
            target_amount=float(data.get('targetAmount') or 0.0),
            current_amount=float(data.get('currentAmount') or 0.0),
            target_date=to_date(data['targetDate']),
            monthly_contribution=float(data.get('monthlyContribution') or 0.0),
            priority=_enum(GoalPriority, data.get('priority'), GoalPriority.MEDIUM),
            category=data.get('category'),
            assigned_to=_enum(Assignment, assigned) if assigned else None,
        )


@dataclass(frozen=True)
class BudgetSetup:
    """Household configuration: the aggregate root read by every calculator."""

    self_name: str = 'Self'
    spouse_name: str = 'Spouse'
    default_split_percentage: float = config.FALLBACK_SPLIT_PERCENTAGE
    income_sources: Tuple[IncomeSource, ...] = field(default_factory=tuple)
    fixed_expenses: Tuple[FixedExpense, ...] = field(default_factory=tuple)
    manual_budgets: Tuple[ManualBudget, ...] = field(default_factory=tuple)
    last_credit_card_settlement: Optional[datetime] = None
    self_opening_balance: float = 0.0
    spouse_opening_balance: float = 0.0
    balance_as_of_date: Optional[datetime] = None
    zero_balances: bool = False

    def __post_init__(self) -> None:
        if _split(self.default_split_percentage) is None:
            raise ConfigurationError("Default split percentage is required")
        # Accept any iterable but store tuples so the setup stays hashable.
        object.__setattr__(self, 'income_sources', tuple(self.income_sources))
        object.__setattr__(self, 'fixed_expenses', tuple(self.fixed_expenses))
        object.__setattr__(self, 'manual_budgets', tuple(self.manual_budgets))

    def name_of(self, person: Person) -> str:
        return self.self_name if person is Person.SELF else self.spouse_name

    def opening_balance(self, person: Person) -> float:
        return self.self_opening_balance if person is Person.SELF else self.spouse_opening_balance

    def active_manual_budgets(self) -> Tuple[ManualBudget, ...]:
        return tuple(b for b in self.manual_budgets if b.is_active)

    def with_changes(self, **changes: Any) -> 'BudgetSetup':
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'selfName': self.self_name,
            'spouseName': self.spouse_name,
            'defaultSplitPercentage': self.default_split_percentage,
            'incomeSources': [s.to_dict() for s in self.income_sources],
            'fixedExpenses': [e.to_dict() for e in self.fixed_expenses],
            'manualBudgets': [b.to_dict() for b in self.manual_budgets],
            'lastCreditCardSettlement': _iso(self.last_credit_card_settlement),
            'johnoOpeningBalance': self.self_opening_balance,
            'angelaOpeningBalance': self.spouse_opening_balance,
            'balanceAsOfDate': _iso(self.balance_as_of_date),
            'zeroBalances': self.zero_balances,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'BudgetSetup':
        default_split = data.get('defaultSplitPercentage')
        return cls(
            self_name=str(data.get('selfName') or 'Self'),
            spouse_name=str(data.get('spouseName') or 'Spouse'),
            default_split_percentage=(
                float(default_split) if default_split not in (None, '')
                else config.FALLBACK_SPLIT_PERCENTAGE
            ),
            income_sources=tuple(IncomeSource.from_dict(s) for s in data.get('incomeSources') or []),
            fixed_expenses=tuple(FixedExpense.from_dict(e) for e in data.get('fixedExpenses') or []),
            manual_budgets=tuple(ManualBudget.from_dict(b) for b in data.get('manualBudgets') or []),
            last_credit_card_settlement=to_timestamp(data.get('lastCreditCardSettlement')),
            self_opening_balance=float(
                data.get('selfOpeningBalance', data.get('johnoOpeningBalance')) or 0.0
            ),
            spouse_opening_balance=float(
                data.get('spouseOpeningBalance', data.get('angelaOpeningBalance')) or 0.0
            ),
            balance_as_of_date=to_timestamp(data.get('balanceAsOfDate')),
            zero_balances=bool(data.get('zeroBalances', False)),
        )


def as_transactions(items: Iterable[Transaction]) -> Tuple[Transaction, ...]:
    """Freeze any iterable of transactions into a hashable tuple."""
    return items if isinstance(items, tuple) else tuple(items)
