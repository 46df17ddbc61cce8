"""
Month-key utilities for FinTrackLab.

Month keys are ``YYYY-MM`` strings. Ordering is plain string comparison (the
keys are zero-padded), while stepping between months always goes through
numpy ``datetime64[M]`` calendar arithmetic.
"""

from __future__ import annotations

import re
from collections.abc import Sequence

import numpy as np

_MONTH_KEY = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")


def is_month_key(value: object) -> bool:
    """Return True if ``value`` is a well-formed ``YYYY-MM`` string."""
    return isinstance(value, str) and bool(_MONTH_KEY.match(value))


def to_month(month: str) -> np.datetime64:
    """Convert a ``YYYY-MM`` key to ``datetime64[M]``."""
    return np.datetime64(month, "M")


def add_months(month: str, months: int) -> str:
    """
    Shift a month key by a number of calendar months.

    Args:
        month: Month key (``YYYY-MM``)
        months: Offset in months (negative moves backwards)

    Returns:
        The shifted month key

    Example:
        ```python
        add_months("2024-11", 3)   # '2025-02'
        add_months("2024-01", -1)  # '2023-12'
        ```
    """
    return str(to_month(month) + np.timedelta64(int(months), "M"))


def previous_month(month: str) -> str:
    """Return the calendar month immediately preceding ``month``."""
    return add_months(month, -1)


def months_between(start: str, end: str) -> int:
    """
    Number of whole calendar months from ``start`` to ``end``.

    Negative when ``end`` precedes ``start``.
    """
    return int((to_month(end) - to_month(start)).astype(int))


def month_range(start: str, months: int) -> list[str]:
    """
    Generate consecutive month keys starting from ``start``.

    **Args:**
        start: First month key
        months: Number of months to generate

    **Returns:**
        List of ``YYYY-MM`` strings

    **Example:**
        ```python
        month_range("2024-11", 4)
        # ['2024-11', '2024-12', '2025-01', '2025-02']
        ```
    """
    s = to_month(start)
    return [str(m) for m in s + np.arange(months).astype("timedelta64[M]")]


def index_at_or_before(sorted_months: Sequence[str], month: str) -> int:
    """
    Binary search for the last position whose month is ``<= month``.

    Args:
        sorted_months: Ascending month keys without duplicates
        month: Target month key

    Returns:
        Position in ``sorted_months``, or -1 when every entry is later
    """
    if len(sorted_months) == 0:
        return -1
    return int(np.searchsorted(np.asarray(sorted_months), month, side="right")) - 1


def index_before(sorted_months: Sequence[str], month: str) -> int:
    """Last position whose month is strictly earlier than ``month`` (-1 if none)."""
    if len(sorted_months) == 0:
        return -1
    return int(np.searchsorted(np.asarray(sorted_months), month, side="left")) - 1


def index_of(sorted_months: Sequence[str], month: str) -> int:
    """Position of ``month`` in ``sorted_months``, or -1 when absent."""
    idx = index_at_or_before(sorted_months, month)
    if idx >= 0 and sorted_months[idx] == month:
        return idx
    return -1


def unique_sorted_months(months) -> list[str]:
    """Sorted union of month keys, skipping empty values."""
    return sorted({m for m in months if m})
