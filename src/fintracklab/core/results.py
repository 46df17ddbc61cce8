"""
Result structures for FinTrackLab.

All engine outputs are plain frozen dataclasses keyed by month so they can be
serialized, aligned onto a month axis and trimmed for display without being
recomputed.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .errors import ConfigError
from .utils import is_month_key


@dataclass(frozen=True)
class SnapshotPoint:
    """Account value observed in a month."""

    date: str
    snapshot: float


@dataclass(frozen=True)
class MonthlyReturn:
    """
    Month-over-month return for an account, asset type or portfolio.

    Attributes:
        month: Month key
        return_rate: Return in percent (5.2 means 5.2 %)
        previous_snapshot: Comparison base used as denominator
        profit: Profit attributed to the month
    """

    month: str
    return_rate: float
    previous_snapshot: float = 0.0
    profit: float = 0.0


@dataclass(frozen=True)
class MonthlyInvestmentData:
    """Profit, contribution and ROI (percent) for a month."""

    month: str
    profit: float
    investment: float
    roi: float


@dataclass(frozen=True)
class AccountReturnSeries:
    """Return series of a single account, ordered by month."""

    account: str
    data: list[MonthlyReturn] = field(default_factory=list)


@dataclass(frozen=True)
class AssetTypeReturnSeries:
    """Return series of a single asset type, ordered by month."""

    asset_type: str
    data: list[MonthlyReturn] = field(default_factory=list)


@dataclass(frozen=True)
class AccountInvestmentSeries:
    """ROI series of a single account, ordered by month."""

    account: str
    data: list[MonthlyInvestmentData] = field(default_factory=list)


@dataclass(frozen=True)
class AlignedReturn:
    """A return point on a shared month axis; ``None`` marks a gap."""

    month: str
    return_rate: float | None


@dataclass(frozen=True)
class MonthlyValue:
    """Generic ``{month, value}`` point consumed by renderers."""

    month: str
    value: float


@dataclass(frozen=True)
class MetalStats:
    """Aggregate figures for one metal type."""

    total_grams: float
    total_amount: float
    current_value: float
    total_profit: float
    monthly_profit: float


@dataclass(frozen=True)
class DateRange:
    """
    Display filter on the month axis.

    Either bound may be ``None`` (open). A date range never feeds a
    calculation; it only decides which already-computed months are shown.
    """

    start_month: str | None = None
    end_month: str | None = None

    def __post_init__(self):
        for bound in (self.start_month, self.end_month):
            if bound is not None and not is_month_key(bound):
                raise ConfigError(f"Date range bound must be YYYY-MM, got {bound!r}")

    @property
    def is_open(self) -> bool:
        """True when neither bound is set."""
        return self.start_month is None and self.end_month is None

    def contains(self, month: str) -> bool:
        if self.start_month is not None and month < self.start_month:
            return False
        if self.end_month is not None and month > self.end_month:
            return False
        return True
