"""
Tests for the in-memory record book.
"""

import pytest
from conftest import make_investment, make_metal

from fintracklab.core.kinds import K
from fintracklab.core.records import Account
from fintracklab.core.store import RecordBook


@pytest.fixture
def book():
    book = RecordBook()
    book.add_record(make_investment(1, "2024-01", 100, 100))
    book.add_record(make_investment(2, "2024-02", 50, account="Other"))
    book.add_metal_record(make_metal("g", "2024-01", K.METAL_GOLD, 10, 500, 500))
    book.add_account(Account("Broker", group="Investments"))
    book.add_account(Account("Savings", group="Investments"))
    return book


class TestRecordBook:
    def test_version_tracks_mutations(self, book):
        assert book.version == 5
        book.delete_record(K.STOCKS, 0)
        assert book.version == 6

    def test_update_in_place(self, book):
        book.update_record(K.STOCKS, 1, make_investment(2, "2024-02", 75, account="Other"))
        assert book.records_by_type[K.STOCKS][1].amount == 75

    def test_update_moves_between_buckets(self, book):
        moved = make_investment(1, "2024-01", 100, 100, asset_type=K.FUNDS)
        book.update_record(K.STOCKS, 0, moved)

        assert [r.id for r in book.records_by_type[K.STOCKS]] == ["2"]
        assert book.records_by_type[K.FUNDS] == [moved]

    def test_delete_returns_record(self, book):
        removed = book.delete_record(K.STOCKS, 1)
        assert removed.id == "2"
        assert len(book.all_records()) == 1

    def test_out_of_range(self, book):
        with pytest.raises(IndexError):
            book.delete_record(K.STOCKS, 5)
        with pytest.raises(IndexError):
            book.update_record(K.BONDS, 0, make_investment(9, "2024-01", 1))

    def test_metal_records(self, book):
        silver = make_metal("s", "2024-01", K.METAL_SILVER, 100, 5, 5)
        book.update_metal_record(K.METAL_GOLD, 0, silver)
        assert book.records_by_metal_type[K.METAL_GOLD] == []
        assert book.delete_metal_record(K.METAL_SILVER, 0) == silver
        assert book.all_metal_records() == []

    def test_accounts(self, book):
        assert book.account_names() == ["Broker", "Savings", "Other"]
        book.update_account(1, Account("Savings", group="Cash"))
        assert book.regroup_accounts("Investments", "Core") == 1
        assert book.accounts[0].group == "Core"
        assert book.regroup_accounts("Cash") == 1
        assert book.accounts[1].group is None
        assert book.delete_account(0).name == "Broker"
