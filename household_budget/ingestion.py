"""Normalisation boundary between the spreadsheet feed and the pipeline.

Raw sheet rows arrive as lists of strings with this column order::

    Date | Description | Person | Category | Combined/Personal | Amount |
    Payment Method | (unused) | Self Amount | Spouse Amount

Everything loose about a row is resolved here, once: sign convention,
missing assignment, split derivation from per-person amounts, and the
three credit-card heuristics (payment method, account text, description
text) collapse into one ``payment_method``.  Rows without a usable date
or description, or with a zero amount, are dropped and counted, never
raised.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

import pandas as pd

from . import config
from .errors import ConfigurationError
from .log import get_logger
from .models import Assignment, PaymentMethod, Transaction, TransactionType, mentions_credit

logger = get_logger(__name__)

COL_DATE = 0
COL_DESCRIPTION = 1
COL_PERSON = 2
COL_CATEGORY = 3
COL_SCOPE = 4
COL_AMOUNT = 5
COL_PAYMENT = 6
COL_SELF_AMOUNT = 8
COL_SPOUSE_AMOUNT = 9

SHEET_COLUMNS = [
    'Date', 'Description', 'Person', 'Category', 'Combined/Personal', 'Amount',
    'Payment Method', 'Notes', 'Self Amount', 'Spouse Amount',
]


def _cell(row: Sequence[Any], index: int) -> str:
    if index >= len(row):
        return ''
    value = row[index]
    if value is None or (isinstance(value, float) and pd.isna(value)):
        return ''
    return str(value).strip()


def _number(text: str) -> float:
    cleaned = text.replace(config.CURRENCY_SYMBOL, '').replace(',', '').replace(' ', '')
    try:
        return float(cleaned) if cleaned else 0.0
    except ValueError:
        return 0.0


def resolve_payment_method(method: Any, account: str = '', description: str = '') -> PaymentMethod:
    """Collapse the credit-card heuristics into one canonical payment method."""
    text = str(method or '').strip().lower().replace(' ', '_')
    if text == PaymentMethod.CREDIT_CARD.value or mentions_credit(account, description):
        return PaymentMethod.CREDIT_CARD
    return PaymentMethod.CASH


def parse_sheet_row(
    row: Sequence[Any],
    index: int,
    self_name: str = '',
) -> Optional[Transaction]:
    """Parse one data row into a Transaction, or ``None`` when it is unusable.

    Args:
        row: Raw cell values in sheet column order
        index: Zero-based position among data rows, used as the id
        self_name: Household self name; Personal rows whose Person cell
            contains it are assigned to self, otherwise to spouse

    Returns:
        The normalised transaction, or None for rows with no date,
        no description, an unparseable date or a zero amount
    """
    raw_date = _cell(row, COL_DATE)
    description = _cell(row, COL_DESCRIPTION)
    if not raw_date or not description:
        return None
    parsed = pd.to_datetime(raw_date, errors='coerce')
    if pd.isna(parsed):
        return None

    total = _number(_cell(row, COL_AMOUNT))
    if total == 0:
        return None
    self_amount = _number(_cell(row, COL_SELF_AMOUNT))
    scope = _cell(row, COL_SCOPE).lower()
    person = _cell(row, COL_PERSON).lower()

    # Positive sheet amounts are money going out.
    tx_type = TransactionType.EXPENSE if total > 0 else TransactionType.INCOME

    if scope == 'personal':
        marker = self_name.strip().lower()
        assigned = Assignment.SELF if marker and marker in person else Assignment.SPOUSE
    else:
        assigned = Assignment.SHARED

    split = None
    if scope == 'combined' and total > 0 and self_amount > 0:
        split = min(100.0, self_amount / total * 100.0)

    return Transaction(
        id=str(index),
        date=parsed.date(),
        description=description,
        category=_cell(row, COL_CATEGORY) or config.DEFAULT_CATEGORY,
        amount=abs(total),
        type=tx_type,
        account=config.DEFAULT_ACCOUNT,
        assigned_to=assigned,
        split_percentage=split,
        payment_method=resolve_payment_method(_cell(row, COL_PAYMENT), config.DEFAULT_ACCOUNT, description),
    )


def parse_sheet_rows(
    rows: Iterable[Sequence[Any]],
    self_name: str = '',
    has_header: bool = True,
) -> Tuple[Transaction, ...]:
    """Parse a batch of sheet rows, dropping malformed rows.

    Example:
        >>> rows = [SHEET_COLUMNS, ['2024-01-05', 'Checkers', 'Johno', 'Groceries', 'Combined', '1000']]
        >>> parse_sheet_rows(rows, self_name='Johno')[0].assigned_to
        <Assignment.SHARED: 'shared'>
    """
    data_rows = list(rows)
    if has_header and data_rows:
        data_rows = data_rows[1:]

    parsed: List[Transaction] = []
    dropped = 0
    # Blank spacer rows are skipped before ids are assigned.
    filled = [row for row in data_rows if row and _cell(row, COL_DATE)]
    for index, row in enumerate(filled):
        transaction = parse_sheet_row(row, index, self_name)
        if transaction is None:
            dropped += 1
            continue
        parsed.append(transaction)

    if dropped:
        logger.warning("sheet_rows_dropped", dropped=dropped, kept=len(parsed))
    return tuple(parsed)


def parse_sheet_frame(df: pd.DataFrame, self_name: str = '') -> Tuple[Transaction, ...]:
    """Parse a DataFrame whose columns follow the sheet order (no header row)."""
    if df is None or df.empty:
        return ()
    rows = df.astype(object).where(df.notna(), None).values.tolist()
    return parse_sheet_rows(rows, self_name=self_name, has_header=False)


def normalize_record(record: Dict[str, Any]) -> Optional[Transaction]:
    """Normalise an already-structured record (e.g. exported JSON).

    Absent ``assignedTo`` becomes shared, absent ``paymentMethod`` becomes
    cash unless account or description mention credit.
    """
    if not record.get('date') or not record.get('description'):
        return None
    data = dict(record)
    data.setdefault('id', '')
    data['paymentMethod'] = resolve_payment_method(
        data.get('paymentMethod'),
        str(data.get('account') or ''),
        str(data.get('description') or ''),
    ).value
    if data.get('type') in (None, ''):
        data['type'] = TransactionType.EXPENSE.value
    try:
        return Transaction.from_dict(data)
    except (ConfigurationError, ValueError, KeyError, TypeError):
        return None


def normalize_records(records: Iterable[Dict[str, Any]]) -> Tuple[Transaction, ...]:
    kept: List[Transaction] = []
    dropped = 0
    for record in records:
        transaction = normalize_record(record)
        if transaction is None:
            dropped += 1
        else:
            kept.append(transaction)
    if dropped:
        logger.warning("records_dropped", dropped=dropped, kept=len(kept))
    return tuple(kept)
