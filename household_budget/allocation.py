"""Allocation engine: how much of an item belongs to each household member.

A split percentage is always *self's* share of a shared item.  Spouse's
share is the complement, so every shared amount partitions exactly into
one share per member.
"""

from __future__ import annotations

from typing import Iterable, Optional, Union

from . import config
from .models import Assignment, BudgetSetup, Frequency, Person, Transaction


def resolve_split(
    split_percentage: Optional[float],
    setup: Optional[BudgetSetup] = None,
) -> float:
    """Resolve self's share of a shared item.

    Order: the item's own split, then the household default, then
    ``config.FALLBACK_SPLIT_PERCENTAGE``.  An explicit 0 is a real split.

    Example:
        >>> resolve_split(None)
        55.0
        >>> resolve_split(60)
        60.0
    """
    if split_percentage is not None:
        return float(split_percentage)
    if setup is not None:
        return float(setup.default_split_percentage)
    return float(config.FALLBACK_SPLIT_PERCENTAGE)


def share_percentage(
    assigned_to: Assignment,
    person: Person,
    split_percentage: Optional[float] = None,
    default_split: Optional[float] = None,
) -> float:
    """Percentage (0-100) of an item attributable to ``person``."""
    if assigned_to is Assignment.SHARED:
        split = float(split_percentage) if split_percentage is not None else (
            float(default_split) if default_split is not None else config.FALLBACK_SPLIT_PERCENTAGE
        )
        return split if person is Person.SELF else 100.0 - split
    return 100.0 if assigned_to.value == person.value else 0.0


def personal_share(
    transaction: Transaction,
    person: Person,
    default_split: Optional[float] = None,
) -> float:
    """Monetary share of ``transaction`` belonging to ``person``.

    Args:
        transaction: The transaction to allocate
        person: Whose share to compute
        default_split: Self's share used when the transaction carries no split

    Returns:
        Full amount when assigned to ``person``, the split share when shared,
        otherwise 0.

    Example:
        >>> t = Transaction('1', date(2024, 1, 1), 'Shop', 'Groceries', 1000,
        ...                 TransactionType.EXPENSE, split_percentage=60)
        >>> personal_share(t, Person.SPOUSE)
        400.0
    """
    pct = share_percentage(transaction.assigned_to, person, transaction.split_percentage, default_split)
    return transaction.amount * pct / 100.0


def monthly_amount(amount: float, frequency: Union[Frequency, str]) -> float:
    """Normalise a recurring amount to its monthly equivalent."""
    key = frequency.value if isinstance(frequency, Frequency) else str(frequency)
    return amount * config.FREQUENCY_MULTIPLIERS.get(key, 1.0)


def recurring_share(items: Iterable, person: Person, setup: Optional[BudgetSetup] = None) -> float:
    """Monthly total of active recurring items attributable to ``person``.

    Works for anything with ``amount``, ``frequency``, ``assigned_to``,
    ``is_active`` and an optional ``split_percentage`` (fixed expenses,
    income sources).
    """
    default_split = resolve_split(None, setup)
    total = 0.0
    for item in items:
        if not item.is_active:
            continue
        pct = share_percentage(
            item.assigned_to,
            person,
            getattr(item, 'split_percentage', None),
            default_split,
        )
        total += monthly_amount(item.amount, item.frequency) * pct / 100.0
    return total


def owned_recurring_total(items: Iterable, person: Person) -> float:
    """Monthly total of active recurring items assigned to ``person`` alone."""
    return sum(
        monthly_amount(item.amount, item.frequency)
        for item in items
        if item.is_active and item.assigned_to.value == person.value
    )
