"""Household configuration persistence.

The calculators never touch storage; they receive value objects.  A store
only loads and saves the three persisted keys (``budgetSetup``,
``savingsGoals``, ``apiLocked``) with last-write-wins semantics.  The
JSON layout mirrors the browser storage the household used before, so an
exported state file loads unchanged.
"""

from __future__ import annotations

import json
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Sequence, Tuple, Union

from . import config
from .errors import ConfigurationError, StorageError
from .log import get_logger
from .models import BudgetSetup, SavingsGoal

logger = get_logger(__name__)

BUDGET_SETUP_KEY = 'budgetSetup'
SAVINGS_GOALS_KEY = 'savingsGoals'
API_LOCKED_KEY = 'apiLocked'


class HouseholdStore(ABC):
    """Load/save port for the household configuration."""

    def __init__(self) -> None:
        self.lock = threading.RLock()

    @abstractmethod
    def load_budget_setup(self) -> Optional[BudgetSetup]:
        """Return the saved configuration, or None if nothing was saved."""

    @abstractmethod
    def save_budget_setup(self, setup: BudgetSetup) -> None:
        """Persist ``setup``.

        Raises:
            StorageError: If the write fails
        """

    @abstractmethod
    def load_savings_goals(self) -> Tuple[SavingsGoal, ...]:
        """Return the saved goals (empty when none)."""

    @abstractmethod
    def save_savings_goals(self, goals: Sequence[SavingsGoal]) -> None:
        """Persist ``goals``."""

    @abstractmethod
    def is_api_locked(self) -> bool:
        """Whether the transaction feed settings are locked."""

    @abstractmethod
    def set_api_locked(self, locked: bool) -> None:
        """Persist the feed lock flag."""

    @abstractmethod
    def clear(self) -> None:
        """Remove everything this store holds."""

    def update_budget_setup(
        self,
        change: Callable[[BudgetSetup], BudgetSetup],
        default: Optional[BudgetSetup] = None,
    ) -> BudgetSetup:
        """Load, transform and save the configuration as one step.

        No other update through this store can interleave between the load
        and the save.

        Args:
            change: Function returning the new configuration
            default: Configuration to start from when nothing is saved yet

        Returns:
            The saved configuration
        """
        with self.lock:
            current = self.load_budget_setup()
            if current is None:
                current = default if default is not None else BudgetSetup()
            updated = change(current)
            self.save_budget_setup(updated)
            return updated


class MemoryStore(HouseholdStore):
    """Process-local store, used by tests and one-off sessions."""

    def __init__(self) -> None:
        super().__init__()
        self._data: Dict[str, Any] = {}

    def load_budget_setup(self) -> Optional[BudgetSetup]:
        return self._data.get(BUDGET_SETUP_KEY)

    def save_budget_setup(self, setup: BudgetSetup) -> None:
        self._data[BUDGET_SETUP_KEY] = setup

    def load_savings_goals(self) -> Tuple[SavingsGoal, ...]:
        return self._data.get(SAVINGS_GOALS_KEY, ())

    def save_savings_goals(self, goals: Sequence[SavingsGoal]) -> None:
        self._data[SAVINGS_GOALS_KEY] = tuple(goals)

    def is_api_locked(self) -> bool:
        return bool(self._data.get(API_LOCKED_KEY, False))

    def set_api_locked(self, locked: bool) -> None:
        self._data[API_LOCKED_KEY] = bool(locked)

    def clear(self) -> None:
        self._data.clear()


class JsonFileStore(HouseholdStore):
    """Keeps all keys in one JSON document on disk.

    Unreadable or corrupt files are treated as empty (and logged) so a bad
    file never blocks the dashboard.  Failed writes raise ``StorageError``.
    """

    def __init__(self, path: Union[str, Path, None] = None):
        super().__init__()
        self.path = Path(path if path is not None else config.get_state_path())

    def _read(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with self.path.open('r', encoding='utf-8') as handle:
                data = json.load(handle)
        except (json.JSONDecodeError, OSError, UnicodeDecodeError) as exc:
            logger.warning("state_read_failed", path=str(self.path), error=str(exc))
            return {}
        if not isinstance(data, dict):
            logger.warning("state_read_failed", path=str(self.path), error="top-level value is not an object")
            return {}
        return data

    def _write(self, data: Dict[str, Any]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self.path.with_suffix(self.path.suffix + '.tmp')
            with tmp_path.open('w', encoding='utf-8') as handle:
                json.dump(data, handle, indent=2)
            tmp_path.replace(self.path)
        except (OSError, TypeError, ValueError) as exc:
            raise StorageError(f"Failed to write {self.path}: {exc}", path=str(self.path)) from exc

    def _set(self, key: str, value: Any) -> None:
        with self.lock:
            data = self._read()
            data[key] = value
            self._write(data)

    def load_budget_setup(self) -> Optional[BudgetSetup]:
        raw = self._read().get(BUDGET_SETUP_KEY)
        if not raw:
            return None
        try:
            return BudgetSetup.from_dict(raw)
        except (ConfigurationError, KeyError, TypeError, ValueError) as exc:
            logger.warning("budget_setup_invalid", path=str(self.path), error=str(exc))
            return None

    def save_budget_setup(self, setup: BudgetSetup) -> None:
        self._set(BUDGET_SETUP_KEY, setup.to_dict())

    def load_savings_goals(self) -> Tuple[SavingsGoal, ...]:
        raw = self._read().get(SAVINGS_GOALS_KEY) or []
        try:
            return tuple(SavingsGoal.from_dict(item) for item in raw)
        except (ConfigurationError, KeyError, TypeError, ValueError) as exc:
            logger.warning("savings_goals_invalid", path=str(self.path), error=str(exc))
            return ()

    def save_savings_goals(self, goals: Sequence[SavingsGoal]) -> None:
        self._set(SAVINGS_GOALS_KEY, [goal.to_dict() for goal in goals])

    def is_api_locked(self) -> bool:
        return bool(self._read().get(API_LOCKED_KEY, False))

    def set_api_locked(self, locked: bool) -> None:
        self._set(API_LOCKED_KEY, bool(locked))

    def clear(self) -> None:
        with self.lock:
            try:
                self.path.unlink()
            except FileNotFoundError:
                return
            except OSError as exc:
                raise StorageError(f"Failed to remove {self.path}: {exc}", path=str(self.path)) from exc
