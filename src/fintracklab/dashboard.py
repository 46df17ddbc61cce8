"""
Dashboard aggregation layer.

``calculate_base_data`` runs both engines once over the complete history and
bundles every month-indexed series the dashboard views need. A ``DateRange``
is applied afterwards by ``build_dashboard_view``, which only drops months
from already-computed series. Changing the range therefore never changes the
value of a month that stays visible.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field, replace
from typing import TypeVar

import pandas as pd

from .cache import ComputationCache
from .core.records import (
    InvestmentRecord,
    PreciousMetalRecord,
    RecordsByMetalType,
    RecordsByType,
    flatten,
)
from .core.results import (
    AccountReturnSeries,
    AlignedReturn,
    AssetTypeReturnSeries,
    DateRange,
    MonthlyReturn,
    MonthlyValue,
    SnapshotPoint,
)
from .core.settings import TrackerSettings
from .core.utils import unique_sorted_months
from .deposits import calculate_time_deposit_profit_for_month
from .investments import (
    align_return_data_to_months,
    calculate_monthly_profit_series,
    calculate_monthly_return_by_account,
    calculate_monthly_return_by_asset_type,
    calculate_total_assets_for_month,
    get_all_unique_months_from_return_data,
    group_snapshots_by_account,
)
from .metals import (
    calculate_metal_monthly_returns,
    calculate_monthly_accumulated_profit,
    calculate_monthly_metal_values,
)

log = logging.getLogger(__name__)

T = TypeVar("T")

# Frame columns and how they aggregate to coarser frequencies
FLOW_COLUMNS = ["investment_profit", "metal_profit", "deposit_profit"]
STOCK_COLUMNS = ["metal_value", "investment_assets", "total_assets"]
FRAME_COLUMNS = FLOW_COLUMNS + STOCK_COLUMNS


def _empty_frame() -> pd.DataFrame:
    return pd.DataFrame(
        {col: pd.Series(dtype=float) for col in FRAME_COLUMNS},
        index=pd.PeriodIndex([], freq="M", name="month"),
    )


def aggregate_frame(df: pd.DataFrame, freq: str = "M") -> pd.DataFrame:
    """
    Re-bucket a monthly dashboard frame to ``freq`` ('M', 'Q', 'Y', ...).

    Profit columns are summed over the period; asset columns take the
    period-end value.
    """
    if freq.upper() in ["M", "MONTHLY"] or df.empty:
        return df
    agg = {col: ("sum" if col in FLOW_COLUMNS else "last") for col in df.columns}
    out = df.groupby(df.index.asfreq(freq)).agg(agg)
    out.index.name = df.index.name
    return out.reindex(columns=df.columns)


@dataclass(frozen=True)
class BaseDashboardData:
    """
    Every series the dashboard needs, computed over the full history.

    Attributes:
        all_months: Sorted union of investment and metal record months
        all_records: Flattened investment records
        monthly_profits: Investment profit per month
        return_data_by_account: Return series per account
        return_data_by_asset_type: Return series per asset type
        snapshots_by_account: Snapshot history per account
        time_deposit_records: Investment records flagged as time deposits
        monthly_total_assets: Investments, deposits and metals per month
        monthly_investment_assets: Investments and deposits per month (no metals)
        monthly_metal_values: ``{month: {metal_type: value}}``
        monthly_metal_profits: ``{month: {metal_type: accumulated profit}}``
        metal_return_data: Portfolio-wide metal return series
        all_metal_records: Flattened metal records
        monthly_deposit_profits: Deposit interest attributed to each month
    """

    all_months: list[str] = field(default_factory=list)
    all_records: list[InvestmentRecord] = field(default_factory=list)
    monthly_profits: dict[str, float] = field(default_factory=dict)
    return_data_by_account: list[AccountReturnSeries] = field(default_factory=list)
    return_data_by_asset_type: list[AssetTypeReturnSeries] = field(default_factory=list)
    snapshots_by_account: dict[str, list[SnapshotPoint]] = field(default_factory=dict)
    time_deposit_records: list[InvestmentRecord] = field(default_factory=list)
    monthly_total_assets: dict[str, float] = field(default_factory=dict)
    monthly_investment_assets: dict[str, float] = field(default_factory=dict)
    monthly_metal_values: dict[str, dict[str, float]] = field(default_factory=dict)
    monthly_metal_profits: dict[str, dict[str, float]] = field(default_factory=dict)
    metal_return_data: list[MonthlyReturn] = field(default_factory=list)
    all_metal_records: list[PreciousMetalRecord] = field(default_factory=list)
    monthly_deposit_profits: dict[str, float] = field(default_factory=dict)

    @classmethod
    def empty(cls) -> BaseDashboardData:
        """Well-typed structure with no data, used when aggregation fails."""
        return cls()

    @property
    def is_empty(self) -> bool:
        return not self.all_months

    def to_frame(self, freq: str = "M") -> pd.DataFrame:
        """
        Month-indexed summary as a DataFrame (PeriodIndex named ``month``).

        Columns: ``investment_profit``, ``metal_profit``, ``deposit_profit``,
        ``metal_value``, ``investment_assets``, ``total_assets``.
        """
        if self.is_empty:
            return _empty_frame()
        rows = {
            "investment_profit": [self.monthly_profits.get(m, 0.0) for m in self.all_months],
            "metal_profit": [
                sum(self.monthly_metal_profits.get(m, {}).values()) for m in self.all_months
            ],
            "deposit_profit": [self.monthly_deposit_profits.get(m, 0.0) for m in self.all_months],
            "metal_value": [
                sum(self.monthly_metal_values.get(m, {}).values()) for m in self.all_months
            ],
            "investment_assets": [
                self.monthly_investment_assets.get(m, 0.0) for m in self.all_months
            ],
            "total_assets": [self.monthly_total_assets.get(m, 0.0) for m in self.all_months],
        }
        index = pd.PeriodIndex(self.all_months, freq="M", name="month")
        return aggregate_frame(pd.DataFrame(rows, index=index, columns=FRAME_COLUMNS), freq)


def _compute_base_data(
    records_by_type: RecordsByType, records_by_metal_type: RecordsByMetalType
) -> BaseDashboardData:
    all_records = flatten(records_by_type)
    all_metal_records = flatten(records_by_metal_type)
    time_deposits = [r for r in all_records if r.is_time_deposit]

    all_months = unique_sorted_months(
        [r.date for r in all_records] + [r.date for r in all_metal_records]
    )

    profit_series = calculate_monthly_profit_series(all_records)
    monthly_profits = {m: profit_series.get(m, 0.0) for m in all_months}

    monthly_metal_values = {}
    monthly_metal_profits = {}
    monthly_investment_assets = {}
    monthly_total_assets = {}
    monthly_deposit_profits = {}
    for month in all_months:
        metal_values = calculate_monthly_metal_values(records_by_metal_type, month)
        monthly_metal_values[month] = metal_values
        monthly_metal_profits[month] = calculate_monthly_accumulated_profit(
            records_by_metal_type, month
        )
        investment_assets = calculate_total_assets_for_month(month, all_records)
        monthly_investment_assets[month] = investment_assets
        monthly_total_assets[month] = investment_assets + sum(metal_values.values())
        monthly_deposit_profits[month] = sum(
            (calculate_time_deposit_profit_for_month(r, month) for r in time_deposits), 0.0
        )

    return BaseDashboardData(
        all_months=all_months,
        all_records=all_records,
        monthly_profits=monthly_profits,
        return_data_by_account=calculate_monthly_return_by_account(records_by_type),
        return_data_by_asset_type=calculate_monthly_return_by_asset_type(records_by_type),
        snapshots_by_account=group_snapshots_by_account(all_records),
        time_deposit_records=time_deposits,
        monthly_total_assets=monthly_total_assets,
        monthly_investment_assets=monthly_investment_assets,
        monthly_metal_values=monthly_metal_values,
        monthly_metal_profits=monthly_metal_profits,
        metal_return_data=calculate_metal_monthly_returns(records_by_metal_type),
        all_metal_records=all_metal_records,
        monthly_deposit_profits=monthly_deposit_profits,
    )


def calculate_base_data(
    records_by_type: RecordsByType | None,
    records_by_metal_type: RecordsByMetalType | None,
) -> BaseDashboardData:
    """
    Compute every dashboard series once, over the complete history.

    Never raises: an internal failure is logged and an empty
    ``BaseDashboardData`` is returned so that views degrade to "no data".

    Args:
        records_by_type: All investment records, grouped by asset type
        records_by_metal_type: All metal records, grouped by metal type

    Returns:
        BaseDashboardData bundling the computed series
    """
    try:
        return _compute_base_data(records_by_type or {}, records_by_metal_type or {})
    except Exception:
        log.exception("dashboard base data calculation failed; returning empty data")
        return BaseDashboardData.empty()


def filter_months_by_date_range(
    all_months: Sequence[str], date_range: DateRange | None
) -> list[str]:
    """Months inside ``date_range`` (all of them for an open or missing range)."""
    if date_range is None or date_range.is_open:
        return list(all_months)
    return [m for m in all_months if date_range.contains(m)]


def filter_monthly_data_by_date_range(points: Iterable[T], date_range: DateRange | None) -> list[T]:
    """Points (anything with a ``month`` attribute) inside ``date_range``."""
    if date_range is None or date_range.is_open:
        return list(points)
    return [p for p in points if date_range.contains(p.month)]


def filter_records_by_date_range(records: Iterable[T], date_range: DateRange | None) -> list[T]:
    """
    Records (anything with a ``date`` attribute) inside ``date_range``.

    For listing records only. Feeding the result to an engine function
    yields wrong profits for the first months of the range.
    """
    if date_range is None or date_range.is_open:
        return list(records)
    return [r for r in records if date_range.contains(r.date)]


@dataclass(frozen=True)
class DashboardView:
    """
    Display-ready slice of ``BaseDashboardData``.

    Every point is taken as-is from the base data; only months outside the
    range are dropped. ``aligned_returns_by_account`` re-indexes each account
    onto the visible return months with ``None`` gaps.
    """

    date_range: DateRange
    months: list[str]
    monthly_profits: list[MonthlyValue]
    monthly_metal_profits: list[MonthlyValue]
    monthly_deposit_profits: list[MonthlyValue]
    monthly_metal_values: list[MonthlyValue]
    monthly_investment_assets: list[MonthlyValue]
    monthly_total_assets: list[MonthlyValue]
    return_data_by_account: list[AccountReturnSeries]
    return_data_by_asset_type: list[AssetTypeReturnSeries]
    aligned_returns_by_account: dict[str, list[AlignedReturn]]
    metal_return_data: list[MonthlyReturn]
    records: list[InvestmentRecord]
    metal_records: list[PreciousMetalRecord]

    def to_frame(self) -> pd.DataFrame:
        """Visible months as a DataFrame with the ``BaseDashboardData`` columns."""
        if not self.months:
            return _empty_frame()
        columns = {
            "investment_profit": self.monthly_profits,
            "metal_profit": self.monthly_metal_profits,
            "deposit_profit": self.monthly_deposit_profits,
            "metal_value": self.monthly_metal_values,
            "investment_assets": self.monthly_investment_assets,
            "total_assets": self.monthly_total_assets,
        }
        index = pd.PeriodIndex(self.months, freq="M", name="month")
        return pd.DataFrame(
            {name: [p.value for p in points] for name, points in columns.items()},
            index=index,
            columns=FRAME_COLUMNS,
        )


def _values(months: Sequence[str], by_month: dict[str, float]) -> list[MonthlyValue]:
    return [MonthlyValue(m, by_month.get(m, 0.0)) for m in months]


def _summed(months: Sequence[str], by_month: dict[str, dict[str, float]]) -> list[MonthlyValue]:
    return [MonthlyValue(m, sum(by_month.get(m, {}).values())) for m in months]


def build_dashboard_view(
    base: BaseDashboardData, date_range: DateRange | None = None
) -> DashboardView:
    """
    Trim computed series to ``date_range`` for display.

    Nothing is recomputed; a month's values are identical for every range
    that contains it.
    """
    date_range = date_range or DateRange()
    months = filter_months_by_date_range(base.all_months, date_range)

    by_account = [
        replace(s, data=filter_monthly_data_by_date_range(s.data, date_range))
        for s in base.return_data_by_account
    ]
    by_asset_type = [
        replace(s, data=filter_monthly_data_by_date_range(s.data, date_range))
        for s in base.return_data_by_asset_type
    ]
    return_months = get_all_unique_months_from_return_data(by_account)

    return DashboardView(
        date_range=date_range,
        months=months,
        monthly_profits=_values(months, base.monthly_profits),
        monthly_metal_profits=_summed(months, base.monthly_metal_profits),
        monthly_deposit_profits=_values(months, base.monthly_deposit_profits),
        monthly_metal_values=_summed(months, base.monthly_metal_values),
        monthly_investment_assets=_values(months, base.monthly_investment_assets),
        monthly_total_assets=_values(months, base.monthly_total_assets),
        return_data_by_account=by_account,
        return_data_by_asset_type=by_asset_type,
        aligned_returns_by_account={
            s.account: align_return_data_to_months(s.data, return_months) for s in by_account
        },
        metal_return_data=filter_monthly_data_by_date_range(base.metal_return_data, date_range),
        records=filter_records_by_date_range(base.all_records, date_range),
        metal_records=filter_records_by_date_range(base.all_metal_records, date_range),
    )


class DashboardDataManager:
    """
    Owns a ``ComputationCache`` and serves dashboard data from it.

    Args:
        cache: Cache to use; a new one with ``settings.cache_ttl`` by default
        settings: Tracker settings (defaults when omitted)

    **Example:**
        ```python
        manager = DashboardDataManager()
        view = manager.get_view(book.records_by_type, book.records_by_metal_type,
                                DateRange("2024-06", "2024-08"))
        ```
    """

    CACHE_KEY = "dashboard:base"

    def __init__(
        self,
        cache: ComputationCache | None = None,
        settings: TrackerSettings | None = None,
    ):
        self.settings = settings or TrackerSettings()
        self.cache = cache if cache is not None else ComputationCache(ttl=self.settings.cache_ttl)

    def get_base_data(
        self,
        records_by_type: RecordsByType | None,
        records_by_metal_type: RecordsByMetalType | None,
    ) -> BaseDashboardData:
        """Memoized ``calculate_base_data``; recomputed when the records change."""
        payload = {"investments": records_by_type or {}, "metals": records_by_metal_type or {}}
        return self.cache.get_cached_data(
            self.CACHE_KEY,
            payload,
            lambda: calculate_base_data(records_by_type, records_by_metal_type),
        )

    def get_view(
        self,
        records_by_type: RecordsByType | None,
        records_by_metal_type: RecordsByMetalType | None,
        date_range: DateRange | None = None,
    ) -> DashboardView:
        """Base data for the records, trimmed to ``date_range``."""
        base = self.get_base_data(records_by_type, records_by_metal_type)
        return build_dashboard_view(base, date_range)

    def invalidate(self) -> None:
        """Drop cached dashboard results."""
        self.cache.clear_cache("dashboard")
