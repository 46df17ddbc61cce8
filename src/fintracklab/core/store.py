"""
In-memory record book.

Holds the three record collections a tracker persists: investment records
grouped by asset type, metal records grouped by metal type, and accounts.
Records are immutable; an update replaces the record at an index. Every
mutation bumps ``version`` so callers can tell when derived data is stale.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace

from .records import (
    Account,
    InvestmentRecord,
    PreciousMetalRecord,
    RecordsByMetalType,
    RecordsByType,
)

log = logging.getLogger(__name__)


def _check_index(items: list, index: int, what: str) -> None:
    if not 0 <= index < len(items):
        raise IndexError(f"{what} index {index} out of range (0..{len(items) - 1})")


@dataclass
class RecordBook:
    """
    Mutable container of records and accounts.

    Attributes:
        records_by_type: Investment records keyed by asset type
        records_by_metal_type: Metal records keyed by metal type
        accounts: Account list, in insertion order
        version: Incremented on every mutation

    Note:
        Indices are positions within a bucket. Out-of-range indices raise
        ``IndexError``; an unknown bucket is treated as empty.
    """

    records_by_type: RecordsByType = field(default_factory=dict)
    records_by_metal_type: RecordsByMetalType = field(default_factory=dict)
    accounts: list[Account] = field(default_factory=list)
    version: int = 0

    def _touch(self, action: str, **details) -> None:
        self.version += 1
        log.debug("record book %s %s (version %d)", action, details, self.version)

    # === Investment records ===

    def add_record(self, record: InvestmentRecord) -> None:
        """Append ``record`` to the bucket of its asset type."""
        self.records_by_type.setdefault(record.asset_type, []).append(record)
        self._touch("add_record", id=record.id)

    def update_record(self, asset_type: str, index: int, record: InvestmentRecord) -> None:
        """
        Replace the record at ``index`` in the ``asset_type`` bucket.

        When the new record belongs to another asset type it is moved to that
        bucket.
        """
        bucket = self.records_by_type.get(asset_type, [])
        _check_index(bucket, index, asset_type)
        if record.asset_type == asset_type:
            bucket[index] = record
        else:
            del bucket[index]
            self.records_by_type.setdefault(record.asset_type, []).append(record)
        self._touch("update_record", id=record.id)

    def delete_record(self, asset_type: str, index: int) -> InvestmentRecord:
        """Remove and return the record at ``index`` in the ``asset_type`` bucket."""
        bucket = self.records_by_type.get(asset_type, [])
        _check_index(bucket, index, asset_type)
        record = bucket.pop(index)
        self._touch("delete_record", id=record.id)
        return record

    # === Metal records ===

    def add_metal_record(self, record: PreciousMetalRecord) -> None:
        self.records_by_metal_type.setdefault(record.metal_type, []).append(record)
        self._touch("add_metal_record", id=record.id)

    def update_metal_record(self, metal_type: str, index: int, record: PreciousMetalRecord) -> None:
        bucket = self.records_by_metal_type.get(metal_type, [])
        _check_index(bucket, index, metal_type)
        if record.metal_type == metal_type:
            bucket[index] = record
        else:
            del bucket[index]
            self.records_by_metal_type.setdefault(record.metal_type, []).append(record)
        self._touch("update_metal_record", id=record.id)

    def delete_metal_record(self, metal_type: str, index: int) -> PreciousMetalRecord:
        bucket = self.records_by_metal_type.get(metal_type, [])
        _check_index(bucket, index, metal_type)
        record = bucket.pop(index)
        self._touch("delete_metal_record", id=record.id)
        return record

    # === Accounts ===

    def add_account(self, account: Account) -> None:
        self.accounts.append(account)
        self._touch("add_account", name=account.name)

    def update_account(self, index: int, account: Account) -> None:
        _check_index(self.accounts, index, "account")
        self.accounts[index] = account
        self._touch("update_account", name=account.name)

    def delete_account(self, index: int) -> Account:
        _check_index(self.accounts, index, "account")
        account = self.accounts.pop(index)
        self._touch("delete_account", name=account.name)
        return account

    def regroup_accounts(self, old_group: str, new_group: str | None = None) -> int:
        """
        Move every account of ``old_group`` into ``new_group``.

        Passing no ``new_group`` removes the grouping tag.

        Returns:
            Number of accounts changed
        """
        changed = 0
        for i, account in enumerate(self.accounts):
            if account.group == old_group:
                self.accounts[i] = replace(account, group=new_group)
                changed += 1
        self._touch("regroup_accounts", old=old_group, new=new_group, changed=changed)
        return changed

    # === Views ===

    def all_records(self) -> list[InvestmentRecord]:
        return [r for records in self.records_by_type.values() for r in records]

    def all_metal_records(self) -> list[PreciousMetalRecord]:
        return [r for records in self.records_by_metal_type.values() for r in records]

    def account_names(self) -> list[str]:
        """Known account names: declared accounts first, then any only seen on records."""
        names = dict.fromkeys(a.name for a in self.accounts)
        names.update(dict.fromkeys(r.account for r in self.all_records()))
        return list(names)
