from datetime import date, datetime, timezone

import pytest

from household_budget.models import (
    Assignment,
    BudgetSetup,
    PaymentMethod,
    Transaction,
    TransactionType,
)
from household_budget.settlement import credit_card_balance, record_settlement, settle
from household_budget.storage import JsonFileStore, MemoryStore

SETTLED_AT = datetime(2024, 3, 1, 9, 30)


def _card(tx_id, day, amount, assigned_to=Assignment.SHARED, split=None,
          method=PaymentMethod.CREDIT_CARD, tx_type=TransactionType.EXPENSE):
    return Transaction(tx_id, day, 'Card purchase', 'Ad Hoc', amount, tx_type,
                       'Main Account', assigned_to, split, method)


def _scenario():
    return [
        _card('self', date(2024, 3, 5), 200, Assignment.SELF),
        _card('spouse', date(2024, 3, 6), 300, Assignment.SPOUSE),
        _card('shared', date(2024, 3, 7), 100),
    ]


def test_outstanding_balance_per_person():
    balance = credit_card_balance(_scenario(), SETTLED_AT)

    assert balance.self_owes == 255.00
    assert balance.spouse_owes == 345.00
    assert balance.total_outstanding == 600.00
    assert [t.id for t in balance.transactions] == ['self', 'spouse', 'shared']


def test_only_card_expenses_after_the_settlement_count():
    txs = _scenario() + [
        _card('before', date(2024, 2, 28), 1000),
        _card('same-day', date(2024, 3, 1), 1000),
        _card('cash', date(2024, 3, 8), 1000, method=PaymentMethod.CASH),
        _card('refund', date(2024, 3, 9), 1000, tx_type=TransactionType.INCOME),
    ]

    balance = credit_card_balance(txs, SETTLED_AT)

    assert balance.total_outstanding == 600.00


def test_without_settlement_everything_counts():
    txs = _scenario() + [_card('before', date(2020, 1, 1), 50, Assignment.SELF)]

    assert credit_card_balance(txs, None).self_owes == 305.00


def test_household_split_is_used_for_shared_card_spend():
    setup = BudgetSetup(default_split_percentage=50)

    balance = credit_card_balance(_scenario(), SETTLED_AT, setup)

    assert balance.self_owes == 250.00
    assert balance.spouse_owes == 350.00


def test_owes_are_rounded_to_cents():
    balance = credit_card_balance([_card('x', date(2024, 3, 2), 10.005, split=33.3)], SETTLED_AT)

    assert balance.self_owes == round(10.005 * 0.333, 2)
    assert balance.total_outstanding == round(balance.self_owes + balance.spouse_owes, 2)


def test_calculation_is_idempotent():
    first = credit_card_balance(_scenario(), SETTLED_AT)
    second = credit_card_balance(_scenario(), SETTLED_AT)

    assert first == second


def test_settling_clears_outstanding_balance():
    setup = settle(BudgetSetup(), now=datetime(2024, 3, 10, 12, 0))

    balance = credit_card_balance(_scenario(), setup.last_credit_card_settlement, setup)

    assert setup.last_credit_card_settlement == datetime(2024, 3, 10, 12, 0)
    assert balance.total_outstanding == 0


def test_settle_normalises_aware_instants_to_utc():
    setup = settle(BudgetSetup(), now=datetime(2024, 3, 10, 12, 0, tzinfo=timezone.utc))

    assert setup.last_credit_card_settlement == datetime(2024, 3, 10, 12, 0)


def test_record_settlement_updates_the_store():
    store = MemoryStore()
    store.save_budget_setup(BudgetSetup(self_name='Johno', spouse_name='Angela'))

    updated = record_settlement(store, now=datetime(2024, 4, 1, 8, 0))

    assert store.load_budget_setup() == updated
    assert updated.self_name == 'Johno'
    assert updated.last_credit_card_settlement == datetime(2024, 4, 1, 8, 0)


def test_record_settlement_persists_to_json(tmp_path):
    store = JsonFileStore(tmp_path / 'state.json')

    record_settlement(store, now=datetime(2024, 4, 1, 8, 0))

    reloaded = JsonFileStore(tmp_path / 'state.json').load_budget_setup()
    assert reloaded.last_credit_card_settlement == datetime(2024, 4, 1, 8, 0)


def test_account_or_description_alone_marks_card_spend():
    txs = [
        Transaction('by-account', date(2024, 3, 5), 'Woolworths', 'Groceries', 1000,
                    TransactionType.EXPENSE, 'FNB Credit Card', Assignment.SELF),
        Transaction.from_dict({
            'id': 'by-description',
            'date': '2024-03-06',
            'description': 'Credit purchase',
            'category': 'Ad Hoc',
            'amount': 500,
            'type': 'expense',
            'assignedTo': 'self',
        }),
    ]

    balance = credit_card_balance(txs, SETTLED_AT)

    assert balance.self_owes == 1500.00
    assert balance.total_outstanding == 1500.00
