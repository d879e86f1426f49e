"""Tabular view of the transaction set.

Aggregations (monthly buckets, category totals, period sums) run on a
pandas DataFrame built once from the immutable transaction tuple.  The
frame carries one share column per household member so every downstream
calculator reads the same allocation.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Iterable, Optional

import numpy as np
import pandas as pd

from .allocation import resolve_split
from .models import Person, Transaction

FRAME_COLUMNS = [
    'id', 'date', 'description', 'category', 'amount', 'type', 'account',
    'assigned_to', 'split_percentage', 'is_credit_card',
]


def share_column(person: Person) -> str:
    return f"{person.value}_share"


def transactions_frame(
    transactions: Iterable[Transaction],
    default_split: Optional[float] = None,
) -> pd.DataFrame:
    """Build the canonical transaction DataFrame.

    Args:
        transactions: Transactions to tabulate
        default_split: Self's share used for shared rows without their own split

    Returns:
        DataFrame with ``FRAME_COLUMNS`` plus ``self_share`` and ``spouse_share``.
        ``date`` is a datetime64 column at midnight.
    """
    records = [
        {
            'id': t.id,
            'date': t.date,
            'description': t.description,
            'category': t.category,
            'amount': t.amount,
            'type': t.type.value,
            'account': t.account,
            'assigned_to': t.assigned_to.value,
            'split_percentage': t.split_percentage,
            'is_credit_card': t.is_credit_card,
        }
        for t in transactions
    ]
    frame = pd.DataFrame.from_records(records, columns=FRAME_COLUMNS)
    frame['date'] = pd.to_datetime(frame['date'])
    frame['amount'] = pd.to_numeric(frame['amount'], errors='coerce').fillna(0.0).astype(float)
    frame['is_credit_card'] = frame['is_credit_card'].astype(bool)

    fallback = default_split if default_split is not None else resolve_split(None)
    split = pd.to_numeric(frame['split_percentage'], errors='coerce').fillna(fallback).astype(float)
    assigned = frame['assigned_to']
    frame['self_share'] = np.where(
        assigned == 'self',
        frame['amount'],
        np.where(assigned == 'shared', frame['amount'] * split / 100.0, 0.0),
    ).astype(float)
    frame['spouse_share'] = np.where(
        assigned == 'spouse',
        frame['amount'],
        np.where(assigned == 'shared', frame['amount'] * (100.0 - split) / 100.0, 0.0),
    ).astype(float)
    return frame


def expense_rows(frame: pd.DataFrame) -> pd.DataFrame:
    return frame[frame['type'] == 'expense']


def income_rows(frame: pd.DataFrame) -> pd.DataFrame:
    return frame[frame['type'] == 'income']


def within(frame: pd.DataFrame, start: date, end: date) -> pd.DataFrame:
    """Rows dated within ``[start, end]`` inclusive of both calendar days."""
    if frame.empty:
        return frame
    lower = pd.Timestamp(start)
    upper = pd.Timestamp(end)
    return frame[(frame['date'] >= lower) & (frame['date'] <= upper)]


def after(frame: pd.DataFrame, instant: Optional[datetime]) -> pd.DataFrame:
    """Rows dated strictly after ``instant`` (all rows when ``instant`` is None)."""
    if instant is None or frame.empty:
        return frame
    return frame[frame['date'] > pd.Timestamp(instant)]


def on_or_before(frame: pd.DataFrame, instant: datetime) -> pd.DataFrame:
    if frame.empty:
        return frame
    return frame[frame['date'] <= pd.Timestamp(instant)]


def with_month(frame: pd.DataFrame) -> pd.DataFrame:
    """Copy of ``frame`` with a monthly ``Period`` column named ``month``."""
    data = frame.copy()
    data['month'] = data['date'].dt.to_period('M')
    return data
