"""Top-level package for the household budget pipeline.

The package turns a household's transactions and configuration into the
figures a two-person budgeting dashboard shows.  The primary modules are:

* ``allocation`` – how much of each item belongs to self and spouse
* ``summary`` – period totals, category budgets and per-person overviews
* ``smart_budgeting`` – six-month history, trends and recommended budgets
* ``recommendations`` – the one-shot recommendation flow
* ``settlement`` – credit card amounts owed since the last settlement
* ``bank_balance`` – projected bank balances per person
* ``analysis`` – variance rows combining the above with savings goals
* ``pipeline`` – memoised entry point that derives everything at once

A typical session:

```python
from household_budget import pipeline, sources, storage

store = storage.JsonFileStore()
dashboard = pipeline.load_dashboard(
    store,
    sources.CsvTransactionSource("data/sheet.csv", self_name="Johno"),
    fallback=sources.SampleTransactionSource(),
)
```
"""

from .models import (  # noqa: F401  # re-exported for convenience
    Assignment,
    BudgetSetup,
    FixedExpense,
    Frequency,
    IncomeSource,
    ManualBudget,
    PaymentMethod,
    Person,
    SavingsGoal,
    Transaction,
    TransactionType,
)
from .pipeline import Dashboard, compute_dashboard, load_dashboard  # noqa: F401

__version__ = "0.1.0"

__all__ = [
    "Assignment",
    "BudgetSetup",
    "Dashboard",
    "FixedExpense",
    "Frequency",
    "IncomeSource",
    "ManualBudget",
    "PaymentMethod",
    "Person",
    "SavingsGoal",
    "Transaction",
    "TransactionType",
    "compute_dashboard",
    "load_dashboard",
]
