"""
Investment calculation engine.

Turns contribution and snapshot records into month-over-month profit, return
rate and ROI series, per account, per asset type and portfolio-wide.

**Profit of an account in a month:**
    ``snapshot(month) − snapshot(nearest earlier month with a snapshot)``
    ``− Σ contributions(account, month)``

The earlier snapshot is found by binary search over the account's snapshot
months, so gaps of any length are skipped. A month without a snapshot has no
mark-to-market signal and contributes 0; the first snapshot of an account has
no comparison base and also yields 0.

Every function here expects the complete record history. Restricting the
input to a date window changes the comparison base of the window's first
month; trim the returned series instead.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from .core.records import InvestmentRecord, RecordsByMetalType, RecordsByType, flatten
from .core.results import (
    AccountInvestmentSeries,
    AccountReturnSeries,
    AlignedReturn,
    AssetTypeReturnSeries,
    MonthlyInvestmentData,
    MonthlyReturn,
    SnapshotPoint,
)
from .core.utils import index_at_or_before, index_before, unique_sorted_months
from .deposits import calculate_time_deposit_value, time_deposit_accrual
from .metals import calculate_monthly_accumulated_profit


def _percent(numerator: float, denominator: float) -> float:
    return numerator / denominator * 100 if denominator > 0 else 0.0


def _contributions(records: Iterable[InvestmentRecord]) -> dict[tuple[str, str], float]:
    totals: dict[tuple[str, str], float] = {}
    for r in records:
        key = (r.account, r.date)
        totals[key] = totals.get(key, 0.0) + r.amount
    return totals


def group_snapshots_by_account(
    records: Iterable[InvestmentRecord],
) -> dict[str, list[SnapshotPoint]]:
    """
    Snapshot history of each account, ascending by month.

    Records without a snapshot are skipped. When several records of an
    account share a month, the last one in input order that carries a
    snapshot supplies that month's value, so each account has at most one
    point per month.

    Args:
        records: Investment records of any asset types

    Returns:
        Mapping of account name to its sorted snapshot points, in the order
        accounts first appear in ``records``
    """
    latest: dict[str, dict[str, float]] = {}
    for r in records:
        if r.has_snapshot:
            latest.setdefault(r.account, {})[r.date] = r.snapshot
    return {
        account: [SnapshotPoint(month, value) for month, value in sorted(by_month.items())]
        for account, by_month in latest.items()
    }


@dataclass(frozen=True)
class _AccountMonth:
    """Profit of one account in one snapshot month."""

    month: str
    profit: float
    previous_snapshot: float
    investment: float
    is_first: bool


def _account_months(
    account: str,
    points: Sequence[SnapshotPoint],
    contributions: dict[tuple[str, str], float],
) -> list[_AccountMonth]:
    result = []
    for i, point in enumerate(points):
        investment = contributions.get((account, point.date), 0.0)
        if i == 0:
            result.append(_AccountMonth(point.date, 0.0, 0.0, investment, True))
            continue
        prev = points[i - 1].snapshot
        profit = point.snapshot - prev - investment
        result.append(_AccountMonth(point.date, profit, prev, investment, False))
    return result


def _profits_by_account(
    records: Sequence[InvestmentRecord],
) -> dict[str, list[_AccountMonth]]:
    contributions = _contributions(records)
    return {
        account: _account_months(account, points, contributions)
        for account, points in group_snapshots_by_account(records).items()
    }


def calculate_monthly_profit(month: str, records: Sequence[InvestmentRecord]) -> float:
    """
    Portfolio profit attributed to a calendar month.

    Summed over accounts that have a snapshot in ``month`` and an earlier
    snapshot to compare against. 0 when no account qualifies.

    **Example:**
        ```python
        # Jan snapshot 10000, Feb amount 0 snapshot 10500
        calculate_monthly_profit("2024-02", records)  # 500.0
        ```
    """
    total = 0.0
    for account_months in _profits_by_account(records).values():
        for item in account_months:
            if item.month == month:
                total += item.profit
    return total


def calculate_monthly_profit_series(records: Sequence[InvestmentRecord]) -> dict[str, float]:
    """``calculate_monthly_profit`` for every month that has records, in one pass."""
    profits = {month: 0.0 for month in unique_sorted_months(r.date for r in records)}
    for account_months in _profits_by_account(records).values():
        for item in account_months:
            profits[item.month] += item.profit
    return profits


def calculate_current_month_investment(month: str, records: Iterable[InvestmentRecord]) -> float:
    """Total contributions dated exactly ``month``, time deposits included."""
    return sum((r.amount for r in records if r.date == month), 0.0)


def calculate_previous_month_snapshot(
    snapshots_by_account: dict[str, list[SnapshotPoint]], month: str
) -> float:
    """
    Sum over accounts of the latest snapshot strictly before ``month``.

    Accounts whose history starts at or after ``month`` contribute nothing.
    """
    total = 0.0
    for points in snapshots_by_account.values():
        idx = index_before([p.date for p in points], month)
        if idx >= 0:
            total += points[idx].snapshot
    return total


def calculate_total_assets_for_month(month: str, records: Sequence[InvestmentRecord]) -> float:
    """
    Investment assets held as of ``month``.

    For each account, regular records dated ``<= month`` are considered: when
    the account's latest month carries a snapshot, that snapshot is its
    value, otherwise the sum of its contributions so far. Time deposits are
    added at principal plus accrued interest.
    """
    latest_month: dict[str, str] = {}
    latest_snapshot: dict[str, float | None] = {}
    contributed: dict[str, float] = {}
    deposits = 0.0

    for r in records:
        if r.date > month:
            continue
        if r.is_time_deposit:
            deposits += calculate_time_deposit_value(r, month)
            continue
        contributed[r.account] = contributed.get(r.account, 0.0) + r.amount
        current = latest_month.get(r.account)
        if current is None or r.date > current:
            latest_month[r.account] = r.date
            latest_snapshot[r.account] = r.snapshot
        elif r.date == current and r.has_snapshot:
            latest_snapshot[r.account] = r.snapshot

    regular = 0.0
    for account, total in contributed.items():
        snapshot = latest_snapshot.get(account)
        regular += snapshot if snapshot is not None else total
    return regular + deposits


def calculate_monthly_return_by_account(records_by_type: RecordsByType) -> list[AccountReturnSeries]:
    """
    Return series for every account found across all asset-type buckets.

    ``return_rate = profit / previous snapshot × 100`` (0 when the base is 0).
    The first snapshot month reports profit 0 and rate 0. Accounts that never
    recorded a snapshot get an empty series.
    """
    records = flatten(records_by_type)
    profits = _profits_by_account(records)

    result = []
    for account in dict.fromkeys(r.account for r in records):
        data = [
            MonthlyReturn(
                month=item.month,
                return_rate=_percent(item.profit, item.previous_snapshot),
                previous_snapshot=item.previous_snapshot,
                profit=item.profit,
            )
            for item in profits.get(account, [])
        ]
        result.append(AccountReturnSeries(account, data))
    return result


def _time_deposit_returns(records: Sequence[InvestmentRecord]) -> list[MonthlyReturn]:
    return [
        MonthlyReturn(month, _percent(interest, principal), previous_snapshot=principal, profit=interest)
        for month, (interest, principal) in time_deposit_accrual(records).items()
    ]


def calculate_monthly_return_by_asset_type(
    records_by_type: RecordsByType,
) -> list[AssetTypeReturnSeries]:
    """
    Return series per asset-type bucket.

    For each month, the profits of the bucket's accounts are summed and
    divided by the sum of their previous snapshots. Buckets made only of time
    deposits have no snapshots; they report the accrual series instead,
    i.e. interest earned in each active month over the principal then on
    deposit. Empty buckets are skipped.
    """
    result = []
    for asset_type, records in records_by_type.items():
        if not records:
            continue
        if all(r.is_time_deposit for r in records):
            result.append(AssetTypeReturnSeries(asset_type, _time_deposit_returns(records)))
            continue

        monthly: dict[str, list[float]] = {}
        for account_months in _profits_by_account(records).values():
            for item in account_months:
                slot = monthly.setdefault(item.month, [0.0, 0.0])
                slot[0] += item.profit
                slot[1] += item.previous_snapshot

        data = [
            MonthlyReturn(month, _percent(profit, prev), previous_snapshot=prev, profit=profit)
            for month, (profit, prev) in sorted(monthly.items())
        ]
        result.append(AssetTypeReturnSeries(asset_type, data))
    return result


def calculate_overall_monthly_roi(
    records_by_type: RecordsByType,
    records_by_metal_type: RecordsByMetalType | None = None,
    include_metal: bool = False,
) -> list[MonthlyInvestmentData]:
    """
    Portfolio-wide ROI for each month with investment records.

    Args:
        records_by_type: Complete investment history
        records_by_metal_type: Complete metal history (used with ``include_metal``)
        include_metal: Add metal accumulated profit and purchase cost per month

    Returns:
        One ``MonthlyInvestmentData`` per month, ascending, with
        ``roi = profit / investment × 100`` (0 when nothing was invested)
    """
    records = flatten(records_by_type)
    summary: dict[str, list[float]] = {}
    for month, profit in calculate_monthly_profit_series(records).items():
        summary[month] = [profit, calculate_current_month_investment(month, records)]

    if include_metal and records_by_metal_type:
        cost: dict[str, float] = {}
        for r in flatten(records_by_metal_type):
            cost[r.date] = cost.get(r.date, 0.0) + r.cost
        for month, spent in cost.items():
            profit = sum(calculate_monthly_accumulated_profit(records_by_metal_type, month).values())
            slot = summary.setdefault(month, [0.0, 0.0])
            slot[0] += profit
            slot[1] += spent

    return [
        MonthlyInvestmentData(month, profit, investment, _percent(profit, investment))
        for month, (profit, investment) in sorted(summary.items())
    ]


def calculate_overall_monthly_return(records_by_type: RecordsByType) -> list[MonthlyReturn]:
    """
    Portfolio-wide return for each month in which any account has a snapshot.

    ``return_rate = Σ profit / Σ latest snapshot before the month × 100``.
    """
    records = flatten(records_by_type)
    snapshots = group_snapshots_by_account(records)
    profits = calculate_monthly_profit_series(records)
    months = unique_sorted_months(p.date for points in snapshots.values() for p in points)

    result = []
    for month in months:
        base = calculate_previous_month_snapshot(snapshots, month)
        profit = profits.get(month, 0.0)
        result.append(MonthlyReturn(month, _percent(profit, base), previous_snapshot=base, profit=profit))
    return result


def calculate_monthly_investment_data_by_account(
    records_by_type: RecordsByType,
) -> list[AccountInvestmentSeries]:
    """Per-account profit, contribution and ROI for each snapshot month."""
    result = []
    for account, account_months in _profits_by_account(flatten(records_by_type)).items():
        data = [
            MonthlyInvestmentData(
                item.month, item.profit, item.investment, _percent(item.profit, item.investment)
            )
            for item in account_months
        ]
        result.append(AccountInvestmentSeries(account, data))
    return result


def get_all_unique_months_from_return_data(
    series_list: Iterable[AccountReturnSeries | AssetTypeReturnSeries],
) -> list[str]:
    """Sorted union of the months present in any of the series."""
    return unique_sorted_months(point.month for series in series_list for point in series.data)


def align_return_data_to_months(
    series: Sequence[MonthlyReturn], months: Sequence[str]
) -> list[AlignedReturn]:
    """
    Re-index a sparse return series onto a shared month axis.

    Months without a data point get ``return_rate=None`` so that renderers
    draw a gap rather than a zero.
    """
    rates = {point.month: point.return_rate for point in series}
    return [AlignedReturn(month, rates.get(month)) for month in months]


def latest_snapshot_at_or_before(points: Sequence[SnapshotPoint], month: str) -> float | None:
    """Most recent snapshot of an account as of ``month``, or ``None``."""
    idx = index_at_or_before([p.date for p in points], month)
    return points[idx].snapshot if idx >= 0 else None


def previous_snapshot_month(points: Sequence[SnapshotPoint], month: str) -> str | None:
    """Month of the nearest snapshot strictly before ``month``, or ``None``."""
    idx = index_before([p.date for p in points], month)
    return points[idx].date if idx >= 0 else None


__all__ = [
    "group_snapshots_by_account",
    "calculate_monthly_profit",
    "calculate_monthly_profit_series",
    "calculate_current_month_investment",
    "calculate_previous_month_snapshot",
    "calculate_total_assets_for_month",
    "calculate_monthly_return_by_account",
    "calculate_monthly_return_by_asset_type",
    "calculate_overall_monthly_roi",
    "calculate_overall_monthly_return",
    "calculate_monthly_investment_data_by_account",
    "get_all_unique_months_from_return_data",
    "align_return_data_to_months",
    "latest_snapshot_at_or_before",
    "previous_snapshot_month",
]
