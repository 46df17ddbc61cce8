"""
Tests for display formatting.
"""

import pandas as pd

from fintracklab.formatting import format_currency, format_frame, format_month, format_percentage


class TestFormatting:
    def test_currency(self):
        assert format_currency(1500) == "$1500"
        assert format_currency(12.5) == "$12.50"
        assert format_currency(0) == "$0"
        assert format_currency(-2.5, "€") == "-€2.50"

    def test_percentage(self):
        assert format_percentage(5.2) == "5.20%"
        assert format_percentage(-1) == "-1.00%"

    def test_month(self):
        assert format_month("2024-01") == "January 2024"
        assert format_month("2023-12") == "December 2023"

    def test_frame(self):
        df = pd.DataFrame(
            {"total_assets": [100.0, 250.5]},
            index=pd.PeriodIndex(["2024-01", "2024-02"], freq="M", name="month"),
        )
        text = format_frame(df, "€")
        assert "2024-02" in text
        assert "€250.50" in text
        assert "€100" in text

    def test_empty_frame(self):
        assert format_frame(pd.DataFrame()) == "(no data)"
