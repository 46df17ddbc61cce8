"""
Precious-metal calculation engine.

Derives accumulated position, valuation and profit per metal type from
purchase history. Every month-indexed function looks at *all* records up to
and including the requested month: callers must pass the complete history and
trim the resulting series for display, never the input.

Valuation uses ``average_price`` (the market price recorded for the month),
while cost basis uses ``price_per_gram`` (what was actually paid).

**Latest-price tie-break:**
    When several records share the latest month, records are stably sorted by
    date and the last one wins, i.e. the last record in input order among
    those sharing that month.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from .core.records import PreciousMetalRecord, RecordsByMetalType, flatten
from .core.results import MetalStats, MonthlyReturn
from .core.utils import (
    index_at_or_before,
    index_of,
    previous_month,
    unique_sorted_months,
)


def calculate_total_grams(records: list[PreciousMetalRecord]) -> float:
    """Sum of purchased grams (0 for empty input)."""
    return sum((r.grams for r in records), 0.0)


def calculate_total_amount(records: list[PreciousMetalRecord]) -> float:
    """Cost basis: sum of ``grams × price_per_gram``. Not a valuation."""
    return sum((r.grams * r.price_per_gram for r in records), 0.0)


def _latest_record(records: list[PreciousMetalRecord]) -> PreciousMetalRecord:
    # sorted() is stable, so equal dates keep input order and the last one wins
    return sorted(records, key=lambda r: r.date)[-1]


def calculate_total_profit(records: list[PreciousMetalRecord]) -> float:
    """
    Mark-to-market profit of a record set.

    ``Σgrams × latest average_price − Σ(grams × price_per_gram)``
    """
    if not records:
        return 0.0
    latest = _latest_record(records)
    return calculate_total_grams(records) * latest.average_price - calculate_total_amount(
        records
    )


def calculate_monthly_profit(records: list[PreciousMetalRecord]) -> float:
    """
    Amortized monthly profit over the span of a record set.

    Total profit divided by the number of distinct months in ``records``. This
    is not a calendar-month series; callers isolate the records they want
    beforehand.
    """
    if not records:
        return 0.0
    month_count = len({r.date for r in records})
    if month_count == 0:
        return 0.0
    return calculate_total_profit(records) / month_count


def calculate_metal_stats(
    records: list[PreciousMetalRecord],
    upto_month: str | None = None,
    records_by_type: RecordsByMetalType | None = None,
) -> MetalStats:
    """
    Aggregate figures for one metal type, optionally as of ``upto_month``.

    Args:
        records: Purchase history of one metal type
        upto_month: Only records dated ``<= upto_month`` are considered
        records_by_type: Complete grouped history; when given together with
            ``upto_month``, ``monthly_profit`` is that month's accumulated
            profit summed over all types instead of the amortized figure

    Returns:
        MetalStats with totals, current value and profit figures
    """
    filtered = [r for r in records if upto_month is None or r.date <= upto_month]
    if not filtered:
        return MetalStats(0.0, 0.0, 0.0, 0.0, 0.0)

    total_grams = calculate_total_grams(filtered)
    total_amount = calculate_total_amount(filtered)
    current_value = total_grams * _latest_record(filtered).average_price

    if upto_month is not None and records_by_type is not None:
        profits = calculate_monthly_accumulated_profit(records_by_type, upto_month)
        monthly_profit = sum(profits.values(), 0.0)
    else:
        monthly_profit = calculate_monthly_profit(filtered)

    return MetalStats(
        total_grams=total_grams,
        total_amount=total_amount,
        current_value=current_value,
        total_profit=current_value - total_amount,
        monthly_profit=monthly_profit,
    )


@dataclass(frozen=True)
class _MetalHistory:
    """
    Month-aggregated purchase history of one metal type.

    One slot per distinct month, ascending. ``prices`` holds the average price
    of the latest record in each month; the cumulative arrays make every
    "as of month" question a single binary search.
    """

    months: list[str]
    prices: np.ndarray
    grams: np.ndarray
    cost: np.ndarray
    cum_grams: np.ndarray
    cum_cost: np.ndarray

    @classmethod
    def from_records(cls, records: list[PreciousMetalRecord]) -> _MetalHistory:
        months: list[str] = []
        prices: list[float] = []
        grams: list[float] = []
        cost: list[float] = []
        for r in sorted(records, key=lambda r: r.date):
            if months and months[-1] == r.date:
                prices[-1] = r.average_price
                grams[-1] += r.grams
                cost[-1] += r.grams * r.price_per_gram
            else:
                months.append(r.date)
                prices.append(r.average_price)
                grams.append(r.grams)
                cost.append(r.grams * r.price_per_gram)

        grams_arr = np.asarray(grams, dtype=float)
        cost_arr = np.asarray(cost, dtype=float)
        return cls(
            months=months,
            prices=np.asarray(prices, dtype=float),
            grams=grams_arr,
            cost=cost_arr,
            cum_grams=np.cumsum(grams_arr),
            cum_cost=np.cumsum(cost_arr),
        )

    def value_at(self, idx: int) -> float:
        """Accumulated grams × average price of the month slot ``idx``."""
        if idx < 0:
            return 0.0
        return float(self.cum_grams[idx] * self.prices[idx])

    def value_as_of(self, month: str) -> float:
        """Valuation as of ``month``, carrying the latest earlier price forward."""
        return self.value_at(index_at_or_before(self.months, month))


def calculate_monthly_metal_values(
    records_by_type: RecordsByMetalType, month: str
) -> dict[str, float]:
    """
    Market value of each metal type as of ``month``.

    ``accumulated grams (<= month) × average price at or before month``. When
    no record exists in ``month`` itself, the most recent earlier month's
    price is used, however far back it lies. Types without any record up to
    ``month`` are valued at 0.
    """
    return {
        metal_type: _MetalHistory.from_records(records).value_as_of(month)
        for metal_type, records in records_by_type.items()
    }


def calculate_total_metal_value(records_by_type: RecordsByMetalType, month: str) -> float:
    """Market value of all metal types as of ``month``."""
    return sum(calculate_monthly_metal_values(records_by_type, month).values(), 0.0)


def get_previous_month_metal_value(records_by_type: RecordsByMetalType, month: str) -> float:
    """
    Total metal value as of the calendar month preceding ``month``.

    Empty months in between are bridged by the at-or-before price lookup, so
    the nearest earlier data point is found regardless of the gap length.
    """
    return calculate_total_metal_value(records_by_type, previous_month(month))


def _accumulated_profit(history: _MetalHistory, month: str) -> float:
    idx = index_of(history.months, month)
    if idx < 0:
        # no purchase and no price for this month
        return 0.0
    prev_idx = idx - 1
    if prev_idx < 0:
        # first month with data: no prior position to compare against
        return 0.0
    return history.value_at(idx) - history.value_at(prev_idx) - float(history.cost[idx])


def calculate_monthly_accumulated_profit(
    records_by_type: RecordsByMetalType, month: str
) -> dict[str, float]:
    """
    Profit attributed to ``month`` for each metal type.

    Formula (per type):
        ``accumulated grams(<= month) × average price(month)``
        ``− accumulated grams(<= prev) × average price(prev)``
        ``− Σ grams × price_per_gram purchased in month``

    where *prev* is the calendar month before ``month`` and its price is the
    latest one at or before it.

    **Edge cases:**
    - A type with no record in ``month`` yields 0.
    - A type's first month with data yields 0.

    **Note:**
        The result for a month depends on all earlier records. Computing it
        from a date-trimmed record set gives different (wrong) numbers for
        any window that does not start at the first month of history.

    **Example:**
        ```python
        # Gold: Jan 100g @500 (avg 500), Feb 50g @510 (avg 520)
        calculate_monthly_accumulated_profit({"Gold": records}, "2024-02")
        # {'Gold': 2500.0}  = 150*520 - 100*500 - 50*510
        ```
    """
    return {
        metal_type: _accumulated_profit(_MetalHistory.from_records(records), month)
        for metal_type, records in records_by_type.items()
    }


def _total_profit_at(history: _MetalHistory, month: str) -> float:
    idx = index_of(history.months, month)
    if idx < 0:
        return 0.0
    return history.value_at(idx) - float(history.cum_cost[idx])


def calculate_monthly_total_profit(
    records_by_type: RecordsByMetalType, month: str
) -> dict[str, float]:
    """
    Cumulative mark-to-market profit since inception, per metal type.

    ``accumulated grams(<= month) × average price(month) − Σ cost(<= month)``.
    Types without a record in ``month`` itself yield 0, so profit series only
    show points for months that carry a price.
    """
    return {
        metal_type: _total_profit_at(_MetalHistory.from_records(records), month)
        for metal_type, records in records_by_type.items()
    }


def calculate_metal_monthly_returns(records_by_type: RecordsByMetalType) -> list[MonthlyReturn]:
    """
    Portfolio-wide monthly return of precious metals.

    One point per month that has metal records. ``profit`` is the month's
    accumulated profit summed over types; ``return_rate`` divides it by the
    total metal value as of the previous calendar month (0 without a base).
    """
    histories = {t: _MetalHistory.from_records(r) for t, r in records_by_type.items()}
    months = unique_sorted_months(r.date for r in flatten(records_by_type))

    result = []
    for month in months:
        profit = sum((_accumulated_profit(h, month) for h in histories.values()), 0.0)
        prev = previous_month(month)
        base = sum((h.value_as_of(prev) for h in histories.values()), 0.0)
        rate = profit / base * 100 if base > 0 else 0.0
        result.append(MonthlyReturn(month, rate, previous_snapshot=base, profit=profit))
    return result


__all__ = [
    "calculate_total_grams",
    "calculate_total_amount",
    "calculate_total_profit",
    "calculate_monthly_profit",
    "calculate_metal_stats",
    "calculate_monthly_metal_values",
    "calculate_total_metal_value",
    "get_previous_month_metal_value",
    "calculate_monthly_accumulated_profit",
    "calculate_monthly_total_profit",
    "calculate_metal_monthly_returns",
]
