"""
FinTrackLab - Monthly Calculation Engine for a Personal Investment Tracker

FinTrackLab turns append-only, irregularly dated investment and precious-metal
purchase records into month-indexed profit, return-rate and ROI series.

Key Features:
- **Full-history calculation**: every month is computed from all records up to it
- **Display-only date ranges**: trimming the month axis never changes a value
- **Gap-tolerant lookups**: previous snapshots and prices are found by binary
  search, however many months back they lie
- **Time deposits**: simple-interest accrual that stops at maturity
- **Memoized dashboard**: checksum-keyed cache with injectable clock and TTL

Architecture Overview:
- **core**: month keys, record model, result types, record book, settings
- **metals**: accumulation, valuation and profit attribution per metal type
- **investments**: snapshot-based profit, return and ROI series
- **deposits**: fixed-term deposit valuation
- **dashboard**: one-pass aggregation plus display filtering
- **cache**: checksum/TTL memoization
- **io**: JSON backups and CSV export

Quick Start:
    ```python
    from fintracklab import DashboardDataManager, DateRange, load_backup

    book = load_backup("backup.json")
    view = DashboardDataManager().get_view(
        book.records_by_type, book.records_by_metal_type, DateRange("2024-06", "2024-08")
    )
    for point in view.monthly_profits:
        print(point.month, point.value)
    ```
"""

# Version information
__version__ = "0.1.0"
__description__ = "Monthly calculation engine for a personal investment tracker"

from .cache import CacheStats, ComputationCache, compute_checksum
from .core import (
    Account,
    ConfigError,
    DateRange,
    InvestmentRecord,
    K,
    MetalStats,
    MonthlyInvestmentData,
    MonthlyReturn,
    PreciousMetalRecord,
    RecordBook,
    RecordError,
    TrackerSettings,
)
from .dashboard import (
    BaseDashboardData,
    DashboardDataManager,
    DashboardView,
    build_dashboard_view,
    calculate_base_data,
    filter_months_by_date_range,
)
from .io import dump_backup, load_backup

__all__ = [
    "__version__",
    "Account",
    "BaseDashboardData",
    "CacheStats",
    "ComputationCache",
    "ConfigError",
    "DashboardDataManager",
    "DashboardView",
    "DateRange",
    "InvestmentRecord",
    "K",
    "MetalStats",
    "MonthlyInvestmentData",
    "MonthlyReturn",
    "PreciousMetalRecord",
    "RecordBook",
    "RecordError",
    "TrackerSettings",
    "build_dashboard_view",
    "calculate_base_data",
    "compute_checksum",
    "dump_backup",
    "filter_months_by_date_range",
    "load_backup",
]
