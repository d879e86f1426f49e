"""Formatting utilities for Rand amounts and percentages."""

from __future__ import annotations

from typing import Union

from . import config


def format_rand(amount: Union[float, int], include_symbol: bool = True) -> str:
    """Format an amount the South African way.

    Thousands are separated by spaces and cents by a point.

    Args:
        amount: The amount to format
        include_symbol: Whether to prefix the ``R`` symbol

    Returns:
        Formatted string (e.g. "R 1 234.56")

    Example:
        >>> format_rand(1234.56)
        'R 1 234.56'
        >>> format_rand(-50)
        '-R 50.00'
        >>> format_rand(1234.5, include_symbol=False)
        '1 234.50'
    """
    formatted = f"{abs(amount):,.2f}".replace(",", " ")
    if include_symbol:
        formatted = f"{config.CURRENCY_SYMBOL} {formatted}"
    return f"-{formatted}" if amount < 0 else formatted


def format_percentage(value: float, decimals: int = 1) -> str:
    """Format a percentage value.

    Example:
        >>> format_percentage(12.345)
        '12.3%'
    """
    return f"{value:.{decimals}f}%"
