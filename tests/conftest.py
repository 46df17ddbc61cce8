"""
Shared fixtures for FinTrackLab tests.
"""

import pytest

from fintracklab.core.kinds import K
from fintracklab.core.records import InvestmentRecord, PreciousMetalRecord
from fintracklab.core.utils import month_range


def make_investment(
    id,
    date,
    amount,
    snapshot=None,
    account="Broker",
    asset_type=K.STOCKS,
    **extra,
):
    return InvestmentRecord(
        id=str(id),
        date=date,
        account=account,
        asset_type=asset_type,
        amount=amount,
        snapshot=snapshot,
        **extra,
    )


def make_metal(id, date, metal_type, grams, price_per_gram, average_price):
    return PreciousMetalRecord(
        id=str(id),
        date=date,
        metal_type=metal_type,
        grams=grams,
        price_per_gram=price_per_gram,
        average_price=average_price,
    )


@pytest.fixture
def gold_records():
    """Jan 100g @500 (avg 500), Feb 50g @510 (avg 520)."""
    return [
        make_metal("g1", "2024-01", K.METAL_GOLD, 100, 500, 500),
        make_metal("g2", "2024-02", K.METAL_GOLD, 50, 510, 520),
    ]


@pytest.fixture
def silver_records():
    """Jan 1000g @5 (avg 5), Feb 200g @5.5 (avg 6)."""
    return [
        make_metal("s1", "2024-01", K.METAL_SILVER, 1000, 5, 5),
        make_metal("s2", "2024-02", K.METAL_SILVER, 200, 5.5, 6),
    ]


@pytest.fixture
def metals_by_type(gold_records, silver_records):
    return {K.METAL_GOLD: gold_records, K.METAL_SILVER: silver_records}


@pytest.fixture
def twelve_month_records():
    """Contributions of 10000×(1+0.05i) with snapshots compounding at 10000×1.05^(i+1)."""
    return [
        make_investment(
            f"r{i + 1}",
            month,
            amount=10000 * (1 + 0.05 * i),
            snapshot=10000 * 1.05 ** (i + 1),
        )
        for i, month in enumerate(month_range("2024-01", 12))
    ]


@pytest.fixture
def time_deposit():
    """10000 at 3 % for 12 months, opened 2024-01."""
    return make_investment(
        "td1",
        "2024-01",
        amount=10000,
        account="Bank",
        asset_type=K.TIME_DEPOSITS,
        is_time_deposit=True,
        deposit_term_months=12,
        annual_interest_rate=3,
        maturity_date="2025-01",
    )
