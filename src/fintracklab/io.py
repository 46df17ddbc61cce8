"""
Backup and export.

JSON backups use the tracker's envelope::

    {"version": "1.0.0", "exportDate": "...", "data": {
        "investmentRecords": {assetType: [record, ...]},
        "preciousMetalRecords": {metalType: [record, ...]},
        "accounts": [account, ...]}}

A bare ``data`` mapping is accepted on load as well. CSV exports flatten the
records with pandas and never depend on engine output.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path

import pandas as pd

from .core.errors import RecordError
from .core.kinds import K
from .core.records import (
    Account,
    InvestmentRecord,
    PreciousMetalRecord,
    records_by_metal_type_from_dict,
    records_by_type_from_dict,
)
from .core.store import RecordBook
from .core.utils import month_range

BACKUP_VERSION = "1.0.0"

INVESTMENT_COLUMNS = [
    "id",
    "date",
    "asset_type",
    "account",
    "amount",
    "snapshot",
    "is_time_deposit",
    "deposit_term_months",
    "annual_interest_rate",
    "maturity_date",
    "note",
]

METAL_COLUMNS = [
    "id",
    "date",
    "metal_type",
    "grams",
    "price_per_gram",
    "total_amount",
    "average_price",
    "current_value",
    "account",
    "note",
]


def book_from_dict(payload: dict) -> RecordBook:
    """
    Build a ``RecordBook`` from a parsed backup.

    Raises:
        RecordError: If the payload is not an object or a record is malformed
    """
    if not isinstance(payload, dict):
        raise RecordError("backup must be a JSON object")
    data = payload.get("data", payload)
    if not isinstance(data, dict):
        raise RecordError("backup 'data' must be a JSON object")
    return RecordBook(
        records_by_type=records_by_type_from_dict(data.get("investmentRecords")),
        records_by_metal_type=records_by_metal_type_from_dict(data.get("preciousMetalRecords")),
        accounts=[Account.from_dict(a) for a in data.get("accounts") or []],
    )


def book_to_dict(book: RecordBook, export_date: datetime | None = None) -> dict:
    """Backup envelope for ``book``."""
    export_date = export_date or datetime.now(timezone.utc)
    return {
        "version": BACKUP_VERSION,
        "exportDate": export_date.isoformat(),
        "data": {
            "investmentRecords": {
                k: [r.to_dict() for r in records] for k, records in book.records_by_type.items()
            },
            "preciousMetalRecords": {
                k: [r.to_dict() for r in records]
                for k, records in book.records_by_metal_type.items()
            },
            "accounts": [a.to_dict() for a in book.accounts],
        },
    }


def loads_backup(text: str) -> RecordBook:
    return book_from_dict(json.loads(text))


def load_backup(path: str | Path) -> RecordBook:
    """Read a JSON backup file."""
    with open(path, encoding="utf-8") as f:
        return book_from_dict(json.load(f))


def dumps_backup(book: RecordBook, export_date: datetime | None = None) -> str:
    return json.dumps(book_to_dict(book, export_date), indent=2, ensure_ascii=False)


def dump_backup(book: RecordBook, path: str | Path, export_date: datetime | None = None) -> None:
    """Write ``book`` as a JSON backup file."""
    with open(path, "w", encoding="utf-8") as f:
        f.write(dumps_backup(book, export_date))
        f.write("\n")


def investment_records_frame(records: list[InvestmentRecord]) -> pd.DataFrame:
    """One row per investment record, sorted by month then account."""
    rows = [
        {
            "id": r.id,
            "date": r.date,
            "asset_type": r.asset_type,
            "account": r.account,
            "amount": r.amount,
            "snapshot": r.snapshot,
            "is_time_deposit": r.is_time_deposit,
            "deposit_term_months": r.deposit_term_months,
            "annual_interest_rate": r.annual_interest_rate,
            "maturity_date": r.maturity_date,
            "note": r.note,
        }
        for r in records
    ]
    df = pd.DataFrame(rows, columns=INVESTMENT_COLUMNS)
    return df.sort_values(["date", "account"], kind="mergesort").reset_index(drop=True)


def metal_records_frame(records: list[PreciousMetalRecord]) -> pd.DataFrame:
    """
    One row per metal record, sorted by month.

    ``total_amount`` is the purchase cost and ``current_value`` the record's
    grams at its own month's average price.
    """
    rows = [
        {
            "id": r.id,
            "date": r.date,
            "metal_type": r.metal_type,
            "grams": r.grams,
            "price_per_gram": r.price_per_gram,
            "total_amount": r.total_amount if r.total_amount is not None else r.cost,
            "average_price": r.average_price,
            "current_value": r.grams * r.average_price,
            "account": r.account,
            "note": r.note,
        }
        for r in records
    ]
    df = pd.DataFrame(rows, columns=METAL_COLUMNS)
    return df.sort_values("date", kind="mergesort").reset_index(drop=True)


def export_investment_csv(records: list[InvestmentRecord], path: str | Path) -> int:
    """
    Write investment records as CSV (UTF-8 with BOM for spreadsheet apps).

    Returns:
        Number of rows written
    """
    df = investment_records_frame(records)
    df.to_csv(path, index=False, encoding="utf-8-sig")
    return len(df)


def export_metal_csv(records: list[PreciousMetalRecord], path: str | Path) -> int:
    """Write metal records as CSV; returns the number of rows written."""
    df = metal_records_frame(records)
    df.to_csv(path, index=False, encoding="utf-8-sig")
    return len(df)


def example_book() -> RecordBook:
    """
    Small record book exercising every engine.

    Twelve months of a compounding stock account, a 12-month time deposit,
    and two months of gold and silver purchases.
    """
    book = RecordBook()
    book.add_account(Account("Broker", type="brokerage", group="Investments"))
    book.add_account(Account("Bank", type="bank", group="Savings"))
    book.add_account(Account("Vault", type="custody"))

    for i, month in enumerate(month_range("2024-01", 12)):
        book.add_record(
            InvestmentRecord(
                id=f"stk-{i + 1}",
                date=month,
                account="Broker",
                asset_type=K.STOCKS,
                amount=round(10000 * (1 + 0.05 * i), 2),
                snapshot=round(10000 * 1.05 ** (i + 1), 2),
            )
        )
    book.add_record(
        InvestmentRecord(
            id="td-1",
            date="2024-01",
            account="Bank",
            asset_type=K.TIME_DEPOSITS,
            amount=10000,
            is_time_deposit=True,
            deposit_term_months=12,
            annual_interest_rate=3,
            maturity_date="2025-01",
        )
    )
    metals = [
        ("au-1", "2024-01", K.METAL_GOLD, 100, 500, 500),
        ("au-2", "2024-02", K.METAL_GOLD, 50, 510, 520),
        ("ag-1", "2024-01", K.METAL_SILVER, 1000, 5, 5),
        ("ag-2", "2024-02", K.METAL_SILVER, 200, 5.5, 6),
    ]
    for record_id, month, metal, grams, price, avg in metals:
        book.add_metal_record(
            PreciousMetalRecord(
                id=record_id,
                date=month,
                metal_type=metal,
                grams=grams,
                price_per_gram=price,
                average_price=avg,
                account="Vault",
            )
        )
    return book
