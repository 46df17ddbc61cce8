"""
Time-deposit valuation.

Fixed-term deposits accrue simple (non-compounding) interest from their start
month until maturity. Interest stops once the term is over: a matured deposit
keeps reporting the full-term interest, never a later snapshot.

Records that are not time deposits, or lack a term or a rate, are neutral:
every function returns 0 for them.
"""

from __future__ import annotations

from .core.records import InvestmentRecord
from .core.utils import add_months, months_between


def _is_valued_deposit(record: InvestmentRecord) -> bool:
    return bool(
        record.is_time_deposit and record.deposit_term_months and record.annual_interest_rate
    )


def calculate_maturity_date(start_month: str, term_months: int) -> str:
    """Month key at which a deposit opened in ``start_month`` matures."""
    return add_months(start_month, term_months)


def is_time_deposit_matured(start_month: str, term_months: int, month: str) -> bool:
    """True when ``month`` is on or after the maturity month."""
    return month >= calculate_maturity_date(start_month, term_months)


def calculate_time_deposit_monthly_profit(principal: float, annual_interest_rate: float) -> float:
    """Interest earned per month: ``principal × rate / 100 / 12``."""
    return principal * (annual_interest_rate / 100 / 12)


def calculate_time_deposit_profit_for_month(record: InvestmentRecord, month: str) -> float:
    """
    Interest attributed to ``month`` alone.

    0 before the start month and from the maturity month on.
    """
    if not _is_valued_deposit(record):
        return 0.0
    if month < record.date:
        return 0.0
    if is_time_deposit_matured(record.date, record.deposit_term_months, month):
        return 0.0
    return calculate_time_deposit_monthly_profit(record.amount, record.annual_interest_rate)


def calculate_time_deposit_total_profit(record: InvestmentRecord, month: str) -> float:
    """
    Interest accrued from the start month up to ``month``.

    **Formula:**
        ``principal × rate / 100 × elapsed / 12`` where ``elapsed`` is the
        number of calendar months since the start, clamped to ``[0, term]``.

    **Example:**
        ```python
        # 12-month deposit of 10000 at 3 % opened 2024-01
        calculate_time_deposit_total_profit(record, "2024-07")  # 150.0
        calculate_time_deposit_total_profit(record, "2026-01")  # 300.0 (matured)
        ```
    """
    if not _is_valued_deposit(record):
        return 0.0
    elapsed = min(max(months_between(record.date, month), 0), record.deposit_term_months)
    if elapsed <= 0:
        return 0.0
    return calculate_time_deposit_monthly_profit(record.amount, record.annual_interest_rate) * elapsed


def calculate_time_deposit_average_monthly_profit(record: InvestmentRecord) -> float:
    """Full-term interest spread evenly over the term."""
    if not _is_valued_deposit(record):
        return 0.0
    term = record.deposit_term_months
    total = record.amount * (record.annual_interest_rate / 100) * (term / 12)
    return total / term


def calculate_time_deposit_value(record: InvestmentRecord, month: str) -> float:
    """
    Principal plus accrued interest as of ``month``.

    0 before the deposit's start month. Deposits without term or rate are
    carried at principal.
    """
    if not record.is_time_deposit or month < record.date:
        return 0.0
    return record.amount + calculate_time_deposit_total_profit(record, month)


def time_deposit_accrual(records: list[InvestmentRecord]) -> dict[str, tuple[float, float]]:
    """
    Monthly interest and active principal over the life of deposits.

    Returns:
        ``{month: (interest, principal)}`` for every month from each deposit's
        start up to, not including, its maturity month, ascending by month
    """
    accrual: dict[str, list[float]] = {}
    for record in records:
        if not _is_valued_deposit(record):
            continue
        interest = calculate_time_deposit_monthly_profit(record.amount, record.annual_interest_rate)
        for offset in range(record.deposit_term_months):
            slot = accrual.setdefault(add_months(record.date, offset), [0.0, 0.0])
            slot[0] += interest
            slot[1] += record.amount
    return {month: (v[0], v[1]) for month, v in sorted(accrual.items())}


__all__ = [
    "calculate_maturity_date",
    "is_time_deposit_matured",
    "calculate_time_deposit_monthly_profit",
    "calculate_time_deposit_profit_for_month",
    "calculate_time_deposit_total_profit",
    "calculate_time_deposit_average_monthly_profit",
    "calculate_time_deposit_value",
    "time_deposit_accrual",
]
