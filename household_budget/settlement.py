"""Credit card settlement.

What each member owes on the shared credit card is always re-derived from
the transaction history and the last settlement instant.  There is no
running counter: settling simply moves the instant forward.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable, Optional, Tuple

from .allocation import resolve_split
from .frames import after, expense_rows, share_column, transactions_frame
from .log import get_logger
from .models import BudgetSetup, Person, Transaction, as_transactions, to_timestamp
from .storage import HouseholdStore

logger = get_logger(__name__)


@dataclass(frozen=True)
class CreditCardBalance:
    self_owes: float
    spouse_owes: float
    total_outstanding: float
    last_settlement_date: Optional[datetime]
    transactions: Tuple[Transaction, ...]

    def owes(self, person: Person) -> float:
        return self.self_owes if person is Person.SELF else self.spouse_owes


def credit_card_balance(
    transactions: Iterable[Transaction],
    last_settlement: Optional[datetime] = None,
    setup: Optional[BudgetSetup] = None,
) -> CreditCardBalance:
    """Outstanding credit card spend per member since the last settlement.

    Args:
        transactions: Full transaction set
        last_settlement: Settlement instant; None counts every transaction
        setup: Household configuration supplying the default split

    Returns:
        Balance with each member's share rounded to cents and the
        contributing transactions in input order

    Example:
        >>> credit_card_balance([]).total_outstanding
        0.0
    """
    transactions = as_transactions(transactions)
    instant = to_timestamp(last_settlement)
    frame = transactions_frame(transactions, resolve_split(None, setup))
    eligible = after(expense_rows(frame), instant)
    eligible = eligible[eligible['is_credit_card']]

    self_owes = round(float(eligible[share_column(Person.SELF)].sum()), 2)
    spouse_owes = round(float(eligible[share_column(Person.SPOUSE)].sum()), 2)
    return CreditCardBalance(
        self_owes=self_owes,
        spouse_owes=spouse_owes,
        total_outstanding=round(self_owes + spouse_owes, 2),
        last_settlement_date=instant,
        transactions=tuple(transactions[position] for position in eligible.index),
    )


def settle(setup: BudgetSetup, now: Optional[datetime] = None) -> BudgetSetup:
    """Configuration with the settlement instant moved to ``now``."""
    return setup.with_changes(last_credit_card_settlement=to_timestamp(now or datetime.now(timezone.utc)))


def record_settlement(
    store: HouseholdStore,
    now: Optional[datetime] = None,
    default: Optional[BudgetSetup] = None,
) -> BudgetSetup:
    """Stamp a settlement on the stored configuration.

    The load, stamp and save happen under the store's lock, so a balance
    computed afterwards never sees a half-written configuration.
    """
    instant = to_timestamp(now or datetime.now(timezone.utc))
    updated = store.update_budget_setup(lambda setup: settle(setup, instant), default)
    logger.info("credit_card_settled", settled_at=instant.isoformat())
    return updated
