from datetime import date

import pandas as pd
import pytest

from household_budget import pipeline
from household_budget.errors import TransactionSourceError
from household_budget.ingestion import SHEET_COLUMNS
from household_budget.models import Assignment, BudgetSetup, ManualBudget, Person
from household_budget.periods import custom_range, preset_range
from household_budget.sample_data import generate_savings_goals, generate_transactions
from household_budget.sources import CsvTransactionSource, SampleTransactionSource, TransactionSource
from household_budget.storage import MemoryStore

TODAY = date(2024, 6, 20)


class _FailingSource(TransactionSource):
    name = 'failing'

    def fetch(self):
        raise TransactionSourceError("sheet unreachable", source=self.name)


@pytest.fixture(autouse=True)
def _fresh_caches():
    pipeline.clear_caches()
    yield
    pipeline.clear_caches()


def _setup():
    return BudgetSetup(
        self_name='Johno',
        spouse_name='Angela',
        manual_budgets=(
            ManualBudget('m1', 'Groceries', 9000),
            ManualBudget('m2', 'Golf', 1200, Assignment.SELF),
        ),
    )


def test_identical_inputs_return_the_cached_dashboard():
    transactions = generate_transactions(today=TODAY)

    first = pipeline.compute_dashboard(transactions, _setup(), today=TODAY)
    second = pipeline.compute_dashboard(list(transactions), _setup(), today=TODAY)

    assert second is first


def test_switching_period_reuses_history():
    transactions = generate_transactions(today=TODAY)
    april = custom_range(date(2024, 4, 1), date(2024, 4, 30))
    may = custom_range(date(2024, 5, 1), date(2024, 5, 31))

    first = pipeline.compute_dashboard(transactions, _setup(), period=april, today=TODAY)
    second = pipeline.compute_dashboard(transactions, _setup(), period=may, today=TODAY)

    info = pipeline.cached_history.cache_info()
    assert (info.misses, info.hits) == (1, 1)
    assert first is not second
    assert [b.historical_average for b in first.smart_budgets] == [
        b.historical_average for b in second.smart_budgets
    ]
    assert [b.trend for b in first.smart_budgets] == [b.trend for b in second.smart_budgets]


def test_dashboard_views_are_consistent():
    transactions = generate_transactions(today=TODAY)
    period = preset_range('This Month', TODAY)

    dashboard = pipeline.compute_dashboard(
        transactions, _setup(), generate_savings_goals(TODAY), period, TODAY
    )

    assert dashboard.period == period
    assert [b.category for b in dashboard.budgets] == ['Groceries', 'Golf']
    assert [a.category for a in dashboard.analysis] == ['Groceries', 'Golf']
    assert dashboard.budget_groups['combined'].allocated == 10200
    assert set(dashboard.people) == {Person.SELF, Person.SPOUSE}
    assert len(dashboard.trends) == 6
    assert dashboard.summary.total_budget == 10200
    assert dashboard.bank_balance.total_closing_balance == pytest.approx(
        dashboard.bank_balance.self_balance.closing_balance
        + dashboard.bank_balance.spouse_balance.closing_balance
    )


def test_missing_configuration_still_computes():
    dashboard = pipeline.compute_dashboard(generate_transactions(today=TODAY), None, today=TODAY)

    assert dashboard.people == {}
    assert dashboard.bank_balance.total_closing_balance == 0
    assert dashboard.budgets


def test_load_dashboard_falls_back_to_sample_data():
    store = MemoryStore()
    store.save_budget_setup(_setup())
    store.save_savings_goals(generate_savings_goals(TODAY))

    dashboard = pipeline.load_dashboard(
        store, _FailingSource(), SampleTransactionSource(today=TODAY), today=TODAY
    )

    expected = pipeline.compute_dashboard(
        generate_transactions(today=TODAY), _setup(), generate_savings_goals(TODAY), today=TODAY
    )
    assert dashboard is expected
    assert len(dashboard.goals) == len(generate_savings_goals(TODAY))


def test_load_dashboard_without_fallback_raises():
    with pytest.raises(TransactionSourceError):
        pipeline.load_dashboard(MemoryStore(), _FailingSource(), today=TODAY)


def test_cached_dashboard_mappings_are_read_only():
    dashboard = pipeline.compute_dashboard(generate_transactions(today=TODAY), _setup(), today=TODAY)

    with pytest.raises(TypeError):
        dashboard.people[Person.SELF] = None
    with pytest.raises(TypeError):
        dashboard.budget_groups['combined'] = None

    again = pipeline.compute_dashboard(generate_transactions(today=TODAY), _setup(), today=TODAY)
    assert again.budget_groups['combined'].allocated == 10200


def test_load_dashboard_attributes_personal_rows_with_saved_name(tmp_path):
    path = tmp_path / 'sheet.csv'
    pd.DataFrame(
        [['2024-03-06', 'Salary', 'Johno', 'Income', 'Personal', '-40000', '', '', '', '']],
        columns=SHEET_COLUMNS,
    ).to_csv(path, index=False)
    store = MemoryStore()
    store.save_budget_setup(_setup())
    march = custom_range(date(2024, 3, 1), date(2024, 3, 31))

    dashboard = pipeline.load_dashboard(store, CsvTransactionSource(path), period=march, today=TODAY)

    assert dashboard.bank_balance.self_balance.observed_income == 40000
    assert dashboard.bank_balance.spouse_balance.observed_income == 0
