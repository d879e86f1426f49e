"""Configuration management for the household budget pipeline.

This module centralizes all configuration values including paths,
numeric policy constants, and environment variable overrides.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Dict

# Base project root - assumes this file is in household_budget/
_PROJECT_ROOT = Path(__file__).parent.parent.resolve()

# Data directories
DATA_DIR = Path(os.getenv("HOUSEHOLD_BUDGET_DATA_DIR", _PROJECT_ROOT / "data"))

# Persisted household configuration (setup, savings goals, lock flag)
STATE_PATH = Path(
    os.getenv("HOUSEHOLD_BUDGET_STATE_PATH", DATA_DIR / "household_state.json")
).resolve()

# Logging
LOG_LEVEL = os.getenv("HOUSEHOLD_BUDGET_LOG_LEVEL", "INFO").upper()
LOG_JSON = os.getenv("HOUSEHOLD_BUDGET_LOG_JSON", "").strip().lower() in {"1", "true", "yes"}

# Self's share of a shared item when neither the item nor the household sets one
FALLBACK_SPLIT_PERCENTAGE = 55.0

# Trailing calendar months used for historical averages and trends
HISTORY_MONTHS = 6
TREND_WINDOW = 3
TREND_UPPER = 1.1
TREND_LOWER = 0.9

# Confidence bounds for smart budgets
CONFIDENCE_FLOOR = 0.3
CONFIDENCE_CEILING = 1.0
CONFIDENCE_UNKNOWN = 0.5

# Variance band (percent) inside which a category is on track
VARIANCE_TOLERANCE = 10.0

# Income lands on the 25th, so a pay cycle runs 25th -> 24th
PAY_CYCLE_START_DAY = 25

# Monthly equivalents for recurring income and fixed expenses
FREQUENCY_MULTIPLIERS: Dict[str, float] = {
    "monthly": 1.0,
    "weekly": 4.33,
    "bi-weekly": 2.17,
    "annual": 1 / 12,
}

# Goals: months are approximated as 30-day blocks
DAYS_PER_MONTH = 30

CREDIT_MARKER = "credit"
DEFAULT_ACCOUNT = "Main Account"
DEFAULT_CATEGORY = "Other"
CURRENCY_SYMBOL = "R"


def get_state_path() -> str:
    """Get the persisted state path as a string."""
    return str(STATE_PATH)
