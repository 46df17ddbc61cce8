"""
Core module for FinTrackLab.

Month keys, the record model, result types and the in-memory record book
shared by the calculation engines.
"""

from .errors import ConfigError, RecordError
from .kinds import K
from .records import (
    Account,
    InvestmentRecord,
    PreciousMetalRecord,
    RecordsByMetalType,
    RecordsByType,
    flatten,
    records_by_metal_type_from_dict,
    records_by_type_from_dict,
)
from .results import (
    AccountInvestmentSeries,
    AccountReturnSeries,
    AlignedReturn,
    AssetTypeReturnSeries,
    DateRange,
    MetalStats,
    MonthlyInvestmentData,
    MonthlyReturn,
    MonthlyValue,
    SnapshotPoint,
)
from .settings import TrackerSettings
from .store import RecordBook
from .utils import (
    add_months,
    is_month_key,
    month_range,
    months_between,
    previous_month,
)

__all__ = [
    "Account",
    "AccountInvestmentSeries",
    "AccountReturnSeries",
    "AlignedReturn",
    "AssetTypeReturnSeries",
    "ConfigError",
    "DateRange",
    "InvestmentRecord",
    "K",
    "MetalStats",
    "MonthlyInvestmentData",
    "MonthlyReturn",
    "MonthlyValue",
    "PreciousMetalRecord",
    "RecordBook",
    "RecordError",
    "RecordsByMetalType",
    "RecordsByType",
    "SnapshotPoint",
    "TrackerSettings",
    "add_months",
    "flatten",
    "is_month_key",
    "month_range",
    "months_between",
    "previous_month",
    "records_by_metal_type_from_dict",
    "records_by_type_from_dict",
]
