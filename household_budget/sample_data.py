"""Offline sample dataset used when the spreadsheet cannot be reached."""

from __future__ import annotations

from datetime import date
from typing import Dict, List, Optional, Tuple

import numpy as np
import pandas as pd

from .defaults import category_names
from .models import (
    Assignment,
    GoalPriority,
    PaymentMethod,
    SavingsGoal,
    Transaction,
    TransactionType,
)

DESCRIPTIONS: Dict[str, List[str]] = {
    'Groceries': ['Pick n Pay', 'Woolworths', 'Checkers', 'Spar', 'Food Lovers'],
    'Electricity': ['Eskom', 'City Power', 'Electricity Bill', 'Prepaid Electricity'],
    'Hair/Nails/Beauty': ['Hair Salon', 'Nail Salon', 'Beauty Treatments', 'Spa Day'],
    'Pet Expenses': ['Vet Bills', 'Pet Food', 'Pet Grooming', 'Pet Supplies'],
    'Eating Out': ['Restaurant', 'Takeaways', 'Coffee Shop', 'Fast Food'],
    'Clothing': ['Edgars', 'Mr Price', 'Woolworths Clothing', 'Online Shopping'],
    'Golf': ['Golf Course', 'Golf Equipment', 'Golf Lessons', 'Golf Club Fees'],
    'Dischem/Clicks': ['Dis-Chem', 'Clicks', 'Pharmacy', 'Health & Beauty'],
    'Petrol': ['Shell', 'BP', 'Engen', 'Sasol', 'Caltex'],
    'Gifts': ['Birthday Gifts', 'Christmas Gifts', 'Anniversary', 'Special Occasions'],
    'Travel': ['Flights', 'Hotels', 'Car Rental', 'Holiday Expenses'],
    'Wine': ['Wine Shop', 'Liquor Store', 'Wine Farm', 'Online Wine'],
    'Kids': ['School Fees', 'Uniform', 'Sports Equipment', 'School Trip', 'Aftercare'],
    'House': ['Builders Warehouse', 'Home Maintenance', 'Garden'],
    'Subscriptions': ['Netflix', 'Spotify', 'DSTV', 'Gym Membership', 'Software'],
    'Ad Hoc': ['Incredible Connection', 'Online Purchase', 'Emergency Expense', 'Miscellaneous'],
}
INCOME_DESCRIPTIONS = ['Salary', 'Freelance', 'Investment', 'Bonus', 'Side Hustle']

SHARED_SPLIT = 55.0


def generate_transactions(
    today: Optional[date] = None,
    months: int = 6,
    seed: int = 42,
    self_name: str = 'Self',
    spouse_name: str = 'Spouse',
) -> Tuple[Transaction, ...]:
    """Generate ``months`` calendar months of plausible household activity.

    The generator is seeded so the same arguments always produce the same
    transactions.  Results are sorted newest first.
    """
    rng = np.random.default_rng(seed)
    current = pd.Period(today or date.today(), freq='M')
    categories = list(category_names()) or list(DESCRIPTIONS)
    transactions: List[Transaction] = []

    for offset in range(months):
        period = current - offset
        month_index = period.month

        for i in range(int(rng.integers(2, 4))):
            day = int(rng.integers(1, 29))
            earner_is_self = rng.random() > 0.4
            amount = (
                int(rng.integers(45000, 70000)) if earner_is_self else int(rng.integers(35000, 55000))
            )
            name = self_name if earner_is_self else spouse_name
            transactions.append(Transaction(
                id=f"income-{offset}-{i}",
                date=date(period.year, month_index, day),
                description=f"{name} {INCOME_DESCRIPTIONS[int(rng.integers(len(INCOME_DESCRIPTIONS)))]}",
                category='Income',
                amount=float(amount),
                type=TransactionType.INCOME,
                account='FNB Savings' if rng.random() > 0.7 else 'Standard Bank Cheque',
                assigned_to=Assignment.SELF if earner_is_self else Assignment.SPOUSE,
            ))

        expense_count = max(10, 20 + int(rng.integers(-5, 5)))
        for i in range(expense_count):
            day = int(rng.integers(1, 29))
            category = categories[int(rng.integers(len(categories)))]
            options = DESCRIPTIONS.get(category, ['Purchase'])
            base = float(rng.integers(150, 3150))
            if category == 'Electricity' and month_index in (12, 1, 2):
                base *= 1.5
            if category == 'Eating Out' and month_index == 12:
                base *= 1.3

            shared = rng.random() > 0.6
            if shared:
                assigned = Assignment.SHARED
            else:
                assigned = Assignment.SELF if rng.random() > 0.5 else Assignment.SPOUSE
            on_card = rng.random() > 0.8
            transactions.append(Transaction(
                id=f"expense-{offset}-{i}",
                date=date(period.year, month_index, day),
                description=options[int(rng.integers(len(options)))],
                category=category,
                amount=float(int(base)),
                type=TransactionType.EXPENSE,
                account='Absa Credit Card' if on_card else 'Standard Bank Cheque',
                assigned_to=assigned,
                split_percentage=SHARED_SPLIT if shared else None,
                payment_method=PaymentMethod.CREDIT_CARD if on_card else PaymentMethod.CASH,
            ))

    transactions.sort(key=lambda t: t.date, reverse=True)
    return tuple(transactions)


def generate_savings_goals(today: Optional[date] = None) -> Tuple[SavingsGoal, ...]:
    """Four sample goals with target dates relative to ``today``."""
    anchor = pd.Timestamp(today or date.today())

    def months_ahead(n: int) -> date:
        return (anchor + pd.DateOffset(months=n)).date()

    return (
        SavingsGoal('goal-1', 'Emergency Fund', 150000.0, 52500.0, months_ahead(12), 7500.0,
                    GoalPriority.HIGH, 'Emergency', Assignment.SHARED),
        SavingsGoal('goal-2', 'Cape Town Holiday', 75000.0, 18000.0, months_ahead(8), 4500.0,
                    GoalPriority.MEDIUM, 'Travel', Assignment.SHARED),
        SavingsGoal('goal-3', 'New Car Down Payment', 120000.0, 42000.0, months_ahead(15), 6000.0,
                    GoalPriority.MEDIUM, 'Transportation', Assignment.SELF),
        SavingsGoal('goal-4', 'Home Renovation', 225000.0, 67500.0, months_ahead(18), 9000.0,
                    GoalPriority.LOW, 'Home', Assignment.SHARED),
    )
