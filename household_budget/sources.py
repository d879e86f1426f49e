"""Transaction sources.

A source yields the flat transaction list the pipeline consumes.  Any
failure to read is raised as :class:`TransactionSourceError`; callers can
hand :func:`load_transactions` a fallback source (usually the sample
data) to keep the dashboard usable offline.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date
from pathlib import Path
from typing import Optional, Tuple, Union

import pandas as pd

from . import sample_data
from .errors import TransactionSourceError
from .ingestion import parse_sheet_frame
from .log import get_logger
from .models import Transaction

logger = get_logger(__name__)


class TransactionSource(ABC):
    """Port for anything that supplies transactions."""

    name = 'source'

    @abstractmethod
    def fetch(self) -> Tuple[Transaction, ...]:
        """Return every available transaction.

        Raises:
            TransactionSourceError: If the underlying data cannot be read
        """

    def with_self_name(self, self_name: str) -> 'TransactionSource':
        """Source to use for a household whose self member is ``self_name``.

        Sources that do not attribute rows by name return themselves.
        """
        return self


class CsvTransactionSource(TransactionSource):
    """Reads a CSV export of the household sheet (header row included)."""

    name = 'csv'

    def __init__(self, path: Union[str, Path], self_name: str = ''):
        self.path = Path(path)
        self.self_name = self_name

    def with_self_name(self, self_name: str) -> 'CsvTransactionSource':
        if self.self_name or not self_name:
            return self
        return CsvTransactionSource(self.path, self_name=self_name)

    def fetch(self) -> Tuple[Transaction, ...]:
        if not self.path.exists():
            raise TransactionSourceError(f"Sheet export not found: {self.path}", source=self.name)
        try:
            df = pd.read_csv(self.path, header=None, skiprows=1, dtype=str, keep_default_na=False)
        except pd.errors.EmptyDataError:
            return ()
        except (OSError, UnicodeDecodeError, pd.errors.ParserError) as exc:
            raise TransactionSourceError(f"Failed to read {self.path}: {exc}", source=self.name) from exc
        return parse_sheet_frame(df, self_name=self.self_name)


class FrameTransactionSource(TransactionSource):
    """Wraps an in-memory DataFrame laid out in sheet column order."""

    name = 'frame'

    def __init__(self, frame: pd.DataFrame, self_name: str = ''):
        self.frame = frame
        self.self_name = self_name

    def with_self_name(self, self_name: str) -> 'FrameTransactionSource':
        if self.self_name or not self_name:
            return self
        return FrameTransactionSource(self.frame, self_name=self_name)

    def fetch(self) -> Tuple[Transaction, ...]:
        return parse_sheet_frame(self.frame, self_name=self.self_name)


class SampleTransactionSource(TransactionSource):
    """Deterministic offline data."""

    name = 'sample'

    def __init__(self, today: Optional[date] = None, seed: int = 42):
        self.today = today
        self.seed = seed

    def fetch(self) -> Tuple[Transaction, ...]:
        return sample_data.generate_transactions(today=self.today, seed=self.seed)


def load_transactions(
    source: TransactionSource,
    fallback: Optional[TransactionSource] = None,
) -> Tuple[Transaction, ...]:
    """Fetch from ``source``, falling back when it fails.

    Raises:
        TransactionSourceError: If ``source`` fails and no fallback is given
    """
    try:
        transactions = source.fetch()
    except TransactionSourceError as exc:
        if fallback is None:
            logger.warning("transaction_source_failed", source=source.name, error=str(exc))
            raise
        logger.warning(
            "transaction_source_fallback",
            source=source.name,
            fallback=fallback.name,
            error=str(exc),
        )
        return fallback.fetch()
    logger.debug("transactions_loaded", source=source.name, count=len(transactions))
    return transactions
