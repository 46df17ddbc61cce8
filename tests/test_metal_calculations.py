"""
Tests for the precious-metal calculation engine.
"""

import pytest
from conftest import make_metal

from fintracklab.core.kinds import K
from fintracklab.metals import (
    calculate_metal_monthly_returns,
    calculate_metal_stats,
    calculate_monthly_accumulated_profit,
    calculate_monthly_metal_values,
    calculate_monthly_profit,
    calculate_monthly_total_profit,
    calculate_total_amount,
    calculate_total_grams,
    calculate_total_metal_value,
    calculate_total_profit,
    get_previous_month_metal_value,
)


class TestTotals:
    """Totals over a single metal type's records."""

    def test_empty_input_is_neutral(self):
        assert calculate_total_grams([]) == 0
        assert calculate_total_amount([]) == 0
        assert calculate_total_profit([]) == 0
        assert calculate_monthly_profit([]) == 0

    def test_grams_and_cost_basis(self, gold_records):
        assert calculate_total_grams(gold_records) == 150
        assert calculate_total_amount(gold_records) == 75500

    def test_total_profit_uses_latest_average_price(self, gold_records):
        # 150×520 − 75500
        assert calculate_total_profit(gold_records) == pytest.approx(2500)

    def test_latest_is_by_date_not_input_order(self, gold_records):
        assert calculate_total_profit(list(reversed(gold_records))) == pytest.approx(2500)

    def test_tie_on_latest_date_takes_last_record_in_input_order(self):
        records = [
            make_metal("a", "2024-01", K.METAL_GOLD, 10, 500, 500),
            make_metal("b", "2024-02", K.METAL_GOLD, 10, 500, 520),
            make_metal("c", "2024-02", K.METAL_GOLD, 10, 500, 530),
        ]
        assert calculate_total_profit(records) == pytest.approx(30 * 530 - 15000)
        values = calculate_monthly_metal_values({K.METAL_GOLD: records}, "2024-02")
        assert values[K.METAL_GOLD] == pytest.approx(30 * 530)

    def test_amortized_monthly_profit(self, gold_records):
        assert calculate_monthly_profit(gold_records) == pytest.approx(1250)

    def test_no_price_movement_means_no_profit(self):
        records = [
            make_metal("a", "2024-01", K.METAL_SILVER, 10.5, 7.25, 7.25),
            make_metal("b", "2024-03", K.METAL_SILVER, 3.2, 7.25, 7.25),
        ]
        assert calculate_total_profit(records) == pytest.approx(0, abs=1e-9)


class TestMetalStats:
    """calculate_metal_stats with and without a cut-off month."""

    def test_all_records(self, gold_records):
        stats = calculate_metal_stats(gold_records)
        assert stats.total_grams == 150
        assert stats.total_amount == 75500
        assert stats.current_value == pytest.approx(78000)
        assert stats.total_profit == pytest.approx(2500)
        assert stats.monthly_profit == pytest.approx(1250)

    def test_upto_month_filters_records(self, gold_records):
        stats = calculate_metal_stats(gold_records, upto_month="2024-01")
        assert stats.total_grams == 100
        assert stats.current_value == pytest.approx(50000)
        assert stats.total_profit == pytest.approx(0)

    def test_upto_month_before_history_is_zero(self, gold_records):
        stats = calculate_metal_stats(gold_records, upto_month="2023-12")
        assert stats.total_grams == 0
        assert stats.current_value == 0

    def test_monthly_profit_from_grouped_history(self, gold_records, metals_by_type):
        stats = calculate_metal_stats(
            gold_records, upto_month="2024-02", records_by_type=metals_by_type
        )
        # Single-month accumulated profit over all types: 2500 + 1100
        assert stats.monthly_profit == pytest.approx(3600)


class TestValuation:
    """Month-indexed valuation with backward price search."""

    def test_values_per_type(self, metals_by_type):
        values = calculate_monthly_metal_values(metals_by_type, "2024-02")
        assert values[K.METAL_GOLD] == pytest.approx(78000)
        assert values[K.METAL_SILVER] == pytest.approx(7200)

    def test_month_without_records_carries_last_price(self, metals_by_type):
        values = calculate_monthly_metal_values(metals_by_type, "2024-09")
        assert values[K.METAL_GOLD] == pytest.approx(78000)

    def test_month_before_history_is_zero(self, metals_by_type):
        values = calculate_monthly_metal_values(metals_by_type, "2023-06")
        assert values == {K.METAL_GOLD: 0, K.METAL_SILVER: 0}

    def test_total_value(self, metals_by_type):
        assert calculate_total_metal_value(metals_by_type, "2024-01") == pytest.approx(55000)
        assert calculate_total_metal_value(metals_by_type, "2024-02") == pytest.approx(85200)

    def test_previous_month_value(self, metals_by_type):
        assert get_previous_month_metal_value(metals_by_type, "2024-02") == pytest.approx(55000)
        assert get_previous_month_metal_value(metals_by_type, "2024-01") == 0

    def test_previous_month_value_walks_back_across_gap(self):
        records = {
            K.METAL_GOLD: [
                make_metal("a", "2023-11", K.METAL_GOLD, 100, 500, 500),
                make_metal("b", "2024-06", K.METAL_GOLD, 10, 600, 600),
            ]
        }
        # Nearest earlier data point is seven months back, across a year boundary
        assert get_previous_month_metal_value(records, "2024-06") == pytest.approx(50000)


class TestAccumulatedProfit:
    """Profit attributed to a single month."""

    def test_gold_example(self, gold_records):
        result = calculate_monthly_accumulated_profit({K.METAL_GOLD: gold_records}, "2024-02")
        assert result[K.METAL_GOLD] == pytest.approx(2500)

    def test_silver_example(self, silver_records):
        result = calculate_monthly_accumulated_profit({K.METAL_SILVER: silver_records}, "2024-02")
        assert result[K.METAL_SILVER] == pytest.approx(1100)

    def test_combined_dashboard_value(self, metals_by_type):
        result = calculate_monthly_accumulated_profit(metals_by_type, "2024-02")
        assert sum(result.values()) == pytest.approx(3600)

    def test_first_month_is_zero(self, metals_by_type):
        result = calculate_monthly_accumulated_profit(metals_by_type, "2024-01")
        assert result == {K.METAL_GOLD: 0, K.METAL_SILVER: 0}

    def test_month_without_records_is_zero(self, metals_by_type):
        result = calculate_monthly_accumulated_profit(metals_by_type, "2024-03")
        assert result == {K.METAL_GOLD: 0, K.METAL_SILVER: 0}

    def test_gap_uses_nearest_earlier_position(self):
        records = {
            K.METAL_GOLD: [
                make_metal("a", "2024-01", K.METAL_GOLD, 100, 500, 500),
                make_metal("b", "2024-06", K.METAL_GOLD, 10, 600, 600),
            ]
        }
        result = calculate_monthly_accumulated_profit(records, "2024-06")
        # 110×600 − 100×500 − 10×600
        assert result[K.METAL_GOLD] == pytest.approx(10000)

    def test_several_purchases_in_one_month_are_summed(self):
        records = {
            K.METAL_GOLD: [
                make_metal("a", "2024-01", K.METAL_GOLD, 100, 500, 500),
                make_metal("b", "2024-02", K.METAL_GOLD, 20, 510, 520),
                make_metal("c", "2024-02", K.METAL_GOLD, 30, 510, 520),
            ]
        }
        result = calculate_monthly_accumulated_profit(records, "2024-02")
        assert result[K.METAL_GOLD] == pytest.approx(2500)


class TestTotalProfitSeries:
    """Cumulative mark-to-market profit per month."""

    def test_cumulative_profit(self, metals_by_type):
        result = calculate_monthly_total_profit(metals_by_type, "2024-02")
        assert result[K.METAL_GOLD] == pytest.approx(2500)
        assert result[K.METAL_SILVER] == pytest.approx(1100)

    def test_first_month_has_no_price_movement(self, metals_by_type):
        result = calculate_monthly_total_profit(metals_by_type, "2024-01")
        assert result[K.METAL_GOLD] == pytest.approx(0)

    def test_month_without_record_is_zero(self, metals_by_type):
        result = calculate_monthly_total_profit(metals_by_type, "2024-05")
        assert result[K.METAL_GOLD] == 0


class TestMetalReturns:
    """Portfolio-wide metal return series."""

    def test_series(self, metals_by_type):
        returns = calculate_metal_monthly_returns(metals_by_type)
        assert [r.month for r in returns] == ["2024-01", "2024-02"]

        jan, feb = returns
        assert jan.profit == 0
        assert jan.return_rate == 0
        assert feb.profit == pytest.approx(3600)
        assert feb.previous_snapshot == pytest.approx(55000)
        assert feb.return_rate == pytest.approx(3600 / 55000 * 100)

    def test_empty(self):
        assert calculate_metal_monthly_returns({}) == []
