"""
Property-based tests for the calculation engines.

Profits are computed from the complete history, so appending later records
must never change an earlier month, and repeating a calculation must give the
same answer.
"""

import pytest
from conftest import make_investment, make_metal
from hypothesis import given, settings
from hypothesis import strategies as st

from fintracklab.core.kinds import K
from fintracklab.core.utils import month_range
from fintracklab.investments import calculate_monthly_profit_series
from fintracklab.metals import (
    calculate_monthly_accumulated_profit,
    calculate_monthly_metal_values,
)

MONTHS = month_range("2023-01", 24)

month_index = st.integers(min_value=0, max_value=len(MONTHS) - 1)
amount = st.floats(min_value=0.0, max_value=100000.0, allow_nan=False, allow_infinity=False).map(
    lambda x: round(x, 2)
)
price = st.floats(min_value=1.0, max_value=2000.0, allow_nan=False, allow_infinity=False).map(
    lambda x: round(x, 2)
)
grams = st.floats(min_value=0.1, max_value=1000.0, allow_nan=False, allow_infinity=False).map(
    lambda x: round(x, 3)
)

metal_purchases = st.lists(
    st.tuples(month_index, st.sampled_from([K.METAL_GOLD, K.METAL_SILVER]), grams, price, price),
    min_size=1,
    max_size=30,
)
investment_rows = st.lists(
    st.tuples(month_index, st.sampled_from(["A", "B"]), amount, st.one_of(st.none(), amount)),
    min_size=1,
    max_size=30,
)


def _metals(purchases):
    grouped = {}
    for i, (idx, metal, g, cost_price, avg_price) in enumerate(purchases):
        grouped.setdefault(metal, []).append(
            make_metal(f"m{i}", MONTHS[idx], metal, g, cost_price, avg_price)
        )
    return grouped


def _investments(rows):
    return [
        make_investment(i, MONTHS[idx], amt, snap, account=account)
        for i, (idx, account, amt, snap) in enumerate(rows)
    ]


def _up_to(grouped, month):
    return {k: [r for r in records if r.date <= month] for k, records in grouped.items()}


class TestMetalProperties:
    """Accumulated profit and valuation."""

    @given(purchases=metal_purchases, cutoff=month_index)
    @settings(max_examples=60, deadline=None)
    def test_later_records_do_not_change_earlier_months(self, purchases, cutoff):
        full = _metals(purchases)
        prefix = _up_to(full, MONTHS[cutoff])

        for month in MONTHS[: cutoff + 1]:
            expected = calculate_monthly_accumulated_profit(prefix, month)
            actual = calculate_monthly_accumulated_profit(full, month)
            assert actual == pytest.approx(expected)
            assert calculate_monthly_metal_values(full, month) == pytest.approx(
                calculate_monthly_metal_values(prefix, month)
            )

    @given(purchases=metal_purchases)
    @settings(max_examples=40, deadline=None)
    def test_repeatable(self, purchases):
        grouped = _metals(purchases)
        for month in MONTHS[::6]:
            first = calculate_monthly_accumulated_profit(grouped, month)
            assert calculate_monthly_accumulated_profit(grouped, month) == first

    @given(purchases=metal_purchases)
    @settings(max_examples=40, deadline=None)
    def test_first_month_of_each_type_is_zero(self, purchases):
        grouped = _metals(purchases)
        for metal, records in grouped.items():
            first = min(r.date for r in records)
            assert calculate_monthly_accumulated_profit(grouped, first)[metal] == 0

    @given(
        purchases=st.lists(st.tuples(month_index, grams), min_size=1, max_size=30),
        constant=price,
    )
    @settings(max_examples=40, deadline=None)
    def test_no_price_movement_means_no_profit(self, purchases, constant):
        grouped = _metals([(idx, K.METAL_GOLD, g, constant, constant) for idx, g in purchases])
        for month in MONTHS:
            profit = calculate_monthly_accumulated_profit(grouped, month)[K.METAL_GOLD]
            assert profit == pytest.approx(0, abs=1e-6)


class TestInvestmentProperties:
    """Monthly profit series."""

    @given(rows=investment_rows, cutoff=month_index)
    @settings(max_examples=60, deadline=None)
    def test_later_records_do_not_change_earlier_months(self, rows, cutoff):
        records = _investments(rows)
        prefix = [r for r in records if r.date <= MONTHS[cutoff]]

        full = calculate_monthly_profit_series(records)
        partial = calculate_monthly_profit_series(prefix)
        for month, profit in partial.items():
            assert full[month] == pytest.approx(profit)

    @given(rows=investment_rows)
    @settings(max_examples=40, deadline=None)
    def test_repeatable_and_first_month_zero(self, rows):
        records = _investments(rows)
        series = calculate_monthly_profit_series(records)

        assert calculate_monthly_profit_series(records) == series
        assert series[min(series)] == 0

    @given(contributions=st.lists(amount, min_size=2, max_size=24), start=price)
    @settings(max_examples=40, deadline=None)
    def test_snapshots_tracking_contributions_mean_no_profit(self, contributions, start):
        records = []
        value = start
        for i, contribution in enumerate(contributions):
            value = value + contribution if i else value
            records.append(make_investment(i, MONTHS[i], contribution if i else start, value))

        for profit in calculate_monthly_profit_series(records).values():
            assert profit == pytest.approx(0, abs=1e-6)
