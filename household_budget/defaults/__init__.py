"""Loader for the packaged default tables (categories, groupings, heuristics)."""

from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Tuple

# Defaults directory
DEFAULTS_DIR = Path(__file__).parent


@lru_cache(maxsize=None)
def load_defaults(name: str) -> Dict[str, Any]:
    """Load a defaults file by name.

    Args:
        name: Name of the defaults file (without .json extension)

    Returns:
        Dictionary containing the defaults

    Raises:
        FileNotFoundError: If the defaults file doesn't exist
        json.JSONDecodeError: If the defaults file is invalid JSON

    Example:
        >>> load_defaults('categories')['smart_budgeting']['max_savings_reduction']
        0.3
    """
    path = DEFAULTS_DIR / f"{name}.json"

    if not path.exists():
        raise FileNotFoundError(f"Defaults file not found: {path}")

    with open(path, 'r', encoding='utf-8') as f:
        return json.load(f)


def get_value(name: str, *keys: str, default: Any = None) -> Any:
    """Get a nested defaults value by key path.

    Args:
        name: Name of the defaults file
        *keys: Path to the nested value (e.g., 'recommendations', 'essential')
        default: Value returned if the key path doesn't exist

    Returns:
        The value at the specified path, or default if not found

    Example:
        >>> get_value('categories', 'recommendations', 'seasonal_category')
        'Electricity'
    """
    try:
        value = load_defaults(name)
        for key in keys:
            value = value[key]
        return value
    except (KeyError, FileNotFoundError):
        return default


def default_categories() -> List[Dict[str, Any]]:
    """Return the built-in category table in display order."""
    return list(get_value('categories', 'categories', default=[]))


def category_names() -> Tuple[str, ...]:
    return tuple(entry['name'] for entry in default_categories())


def category_color(category: str, index: int = 0) -> str:
    """Colour for a category, cycling the palette for categories outside the table."""
    table = default_categories()
    for entry in table:
        if entry['name'] == category:
            return entry['color']
    palette = [entry['color'] for entry in table] or ['#6B7280']
    return palette[index % len(palette)]


__all__ = [
    'load_defaults',
    'get_value',
    'default_categories',
    'category_names',
    'category_color',
]
