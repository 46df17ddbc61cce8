"""
Display formatting.

The engines never round; values are rounded here, once, when rendered.
"""

from __future__ import annotations

import pandas as pd


def format_currency(amount: float, symbol: str = "$") -> str:
    """
    Format an amount with a currency symbol.

    Whole amounts are shown without decimals, anything else with two.

    **Example:**
        ```python
        format_currency(1500)      # '$1500'
        format_currency(12.5)      # '$12.50'
        format_currency(-2.5, "€") # '-€2.50'
        ```
    """
    value = float(amount)
    sign = "-" if value < 0 else ""
    value = abs(value)
    body = str(int(value)) if value.is_integer() else f"{value:.2f}"
    return f"{sign}{symbol}{body}"


def format_percentage(value: float) -> str:
    """Two-decimal percentage, ``5.2`` → ``'5.20%'``."""
    return f"{float(value):.2f}%"


def format_month(month: str) -> str:
    """Long month name and year, ``'2024-01'`` → ``'January 2024'``."""
    return pd.Period(month, freq="M").strftime("%B %Y")


def format_frame(df: pd.DataFrame, symbol: str = "$") -> str:
    """Render a month-indexed amount frame as a plain-text table."""
    if df.empty:
        return "(no data)"
    out = df.map(lambda v: format_currency(v, symbol))
    out.index = [str(p) for p in df.index]
    out.index.name = df.index.name
    return out.to_string()
