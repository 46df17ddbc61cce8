"""
Record model for FinTrackLab.

Records are immutable once created. Storage hands them over as camelCase JSON
objects; ``from_dict`` is the only place where raw payloads are coerced and
validated, so the calculation engines can assume well-formed records.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .errors import RecordError
from .utils import is_month_key


def _float(data: dict, key: str, record_id: str | None, default=None) -> float | None:
    value = data.get(key, default)
    if value is None or value == "":
        return default
    try:
        return float(value)
    except (TypeError, ValueError) as e:
        raise RecordError(f"field {key!r} is not numeric: {value!r}", record_id) from e


def _month(data: dict, key: str, record_id: str | None) -> str:
    value = data.get(key)
    if not is_month_key(value):
        raise RecordError(f"field {key!r} must be a YYYY-MM month, got {value!r}", record_id)
    return value


def _drop_none(payload: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in payload.items() if v is not None}


@dataclass(frozen=True)
class InvestmentRecord:
    """
    One contribution event for a traditional asset.

    Attributes:
        id: Unique, opaque identifier
        date: Month key (``YYYY-MM``)
        account: Owner-defined account name
        asset_type: Category string (see ``K.asset_kinds()``)
        amount: Contribution for that month (may be 0)
        snapshot: Total account value as of ``date``; ``None`` when no snapshot was taken
        is_time_deposit: Whether this record is a fixed-term deposit
        deposit_term_months: Deposit term (time deposits only)
        annual_interest_rate: Annual rate in percent, ``5`` means 5 % (time deposits only)
        maturity_date: Month key of maturity (time deposits only)
        note: Free-form note

    Note:
        Several records may share ``(account, date)``. Their amounts are summed;
        only the last one carrying a snapshot supplies the month's snapshot.
    """

    id: str
    date: str
    account: str
    asset_type: str
    amount: float
    snapshot: float | None = None
    is_time_deposit: bool = False
    deposit_term_months: int | None = None
    annual_interest_rate: float | None = None
    maturity_date: str | None = None
    note: str | None = None

    @property
    def has_snapshot(self) -> bool:
        """True when the record carries a mark-to-market snapshot."""
        return self.snapshot is not None

    @classmethod
    def from_dict(cls, data: dict, asset_type: str | None = None) -> InvestmentRecord:
        """
        Build a record from its storage representation.

        Args:
            data: camelCase mapping (``assetType`` or ``type`` for the category)
            asset_type: Fallback category, usually the bucket key

        Raises:
            RecordError: If a required field is missing or malformed
        """
        record_id = data.get("id")
        if record_id is None or record_id == "":
            raise RecordError("field 'id' is required")
        record_id = str(record_id)

        category = data.get("assetType") or data.get("type") or asset_type
        if not category:
            raise RecordError("field 'assetType' is required", record_id)

        account = data.get("account")
        if account is None:
            raise RecordError("field 'account' is required", record_id)

        amount = _float(data, "amount", record_id)
        if amount is None:
            raise RecordError("field 'amount' is required", record_id)

        term = _float(data, "depositTermMonths", record_id)
        maturity = data.get("maturityDate") or None

        return cls(
            id=record_id,
            date=_month(data, "date", record_id),
            account=str(account),
            asset_type=str(category),
            amount=amount,
            snapshot=_float(data, "snapshot", record_id),
            is_time_deposit=bool(data.get("isTimeDeposit", False)),
            deposit_term_months=int(term) if term is not None else None,
            annual_interest_rate=_float(data, "annualInterestRate", record_id),
            maturity_date=maturity,
            note=data.get("note"),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert back to the camelCase storage representation."""
        return _drop_none(
            {
                "id": self.id,
                "date": self.date,
                "account": self.account,
                "assetType": self.asset_type,
                "amount": self.amount,
                "snapshot": self.snapshot,
                "isTimeDeposit": self.is_time_deposit or None,
                "depositTermMonths": self.deposit_term_months,
                "annualInterestRate": self.annual_interest_rate,
                "maturityDate": self.maturity_date,
                "note": self.note,
            }
        )


@dataclass(frozen=True)
class PreciousMetalRecord:
    """
    One purchase event for a metal type.

    Attributes:
        id: Unique, opaque identifier
        date: Month key (``YYYY-MM``)
        metal_type: Category string (see ``K.metal_kinds()``)
        grams: Quantity purchased that month
        price_per_gram: Purchase price per gram (cost basis)
        average_price: Market average price that month, used for valuation
        account: Optional holding account
        total_amount: Optional stored purchase total
        note: Free-form note
    """

    id: str
    date: str
    metal_type: str
    grams: float
    price_per_gram: float
    average_price: float
    account: str | None = None
    total_amount: float | None = None
    note: str | None = None

    @property
    def cost(self) -> float:
        """Purchase cost of this record (grams × price per gram)."""
        return self.grams * self.price_per_gram

    @classmethod
    def from_dict(cls, data: dict, metal_type: str | None = None) -> PreciousMetalRecord:
        """Build a record from its storage representation."""
        record_id = data.get("id")
        if record_id is None or record_id == "":
            raise RecordError("field 'id' is required")
        record_id = str(record_id)

        category = data.get("metalType") or metal_type
        if not category:
            raise RecordError("field 'metalType' is required", record_id)

        values = {}
        for key in ("grams", "pricePerGram", "averagePrice"):
            value = _float(data, key, record_id)
            if value is None:
                raise RecordError(f"field {key!r} is required", record_id)
            values[key] = value

        return cls(
            id=record_id,
            date=_month(data, "date", record_id),
            metal_type=str(category),
            grams=values["grams"],
            price_per_gram=values["pricePerGram"],
            average_price=values["averagePrice"],
            account=data.get("account"),
            total_amount=_float(data, "totalAmount", record_id),
            note=data.get("note"),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert back to the camelCase storage representation."""
        return _drop_none(
            {
                "id": self.id,
                "date": self.date,
                "metalType": self.metal_type,
                "grams": self.grams,
                "pricePerGram": self.price_per_gram,
                "averagePrice": self.average_price,
                "account": self.account,
                "totalAmount": self.total_amount,
                "note": self.note,
            }
        )


@dataclass(frozen=True)
class Account:
    """Named account with an optional grouping tag (UI organization only)."""

    name: str
    type: str | None = None
    balance: float | None = None
    group: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> Account:
        name = data.get("name")
        if not name:
            raise RecordError("account field 'name' is required")
        return cls(
            name=str(name),
            type=data.get("type"),
            balance=_float(data, "balance", None),
            group=data.get("group"),
        )

    def to_dict(self) -> dict[str, Any]:
        return _drop_none(
            {"name": self.name, "type": self.type, "balance": self.balance, "group": self.group}
        )


RecordsByType = dict[str, list[InvestmentRecord]]
RecordsByMetalType = dict[str, list[PreciousMetalRecord]]


def records_by_type_from_dict(raw: dict | None) -> RecordsByType:
    """Coerce a raw ``{assetType: [record, ...]}`` payload into records."""
    return {
        asset_type: [InvestmentRecord.from_dict(item, asset_type) for item in items or []]
        for asset_type, items in (raw or {}).items()
    }


def records_by_metal_type_from_dict(raw: dict | None) -> RecordsByMetalType:
    """Coerce a raw ``{metalType: [record, ...]}`` payload into records."""
    return {
        metal_type: [PreciousMetalRecord.from_dict(item, metal_type) for item in items or []]
        for metal_type, items in (raw or {}).items()
    }


def flatten(records_by_key: dict[str, list]) -> list:
    """All records of a grouped mapping, in bucket order."""
    return [record for records in records_by_key.values() for record in records]
