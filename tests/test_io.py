"""
Tests for JSON backups and CSV export.
"""

import json
from datetime import datetime, timezone

import pandas as pd
import pytest

from fintracklab.core.errors import RecordError
from fintracklab.core.kinds import K
from fintracklab.io import (
    BACKUP_VERSION,
    book_from_dict,
    book_to_dict,
    dump_backup,
    example_book,
    export_investment_csv,
    export_metal_csv,
    load_backup,
    loads_backup,
)


@pytest.fixture
def payload():
    return {
        "version": "1.0.0",
        "exportDate": "2024-03-01T00:00:00+00:00",
        "data": {
            "investmentRecords": {
                "Stocks": [
                    {"id": "1", "date": "2024-01", "account": "Broker", "amount": 1000, "snapshot": 1000},
                    {"id": "2", "date": "2024-02", "account": "Broker", "amount": "500"},
                ]
            },
            "preciousMetalRecords": {
                "Gold": [
                    {
                        "id": "g1",
                        "date": "2024-01",
                        "metalType": "Gold",
                        "grams": 10,
                        "pricePerGram": 500,
                        "averagePrice": 500,
                    }
                ]
            },
            "accounts": [{"name": "Broker", "type": "brokerage"}],
        },
    }


class TestBackup:
    def test_load_envelope(self, payload):
        book = book_from_dict(payload)

        stocks = book.records_by_type[K.STOCKS]
        assert [r.id for r in stocks] == ["1", "2"]
        assert stocks[0].asset_type == K.STOCKS
        assert stocks[1].amount == 500
        assert stocks[1].snapshot is None
        assert book.records_by_metal_type[K.METAL_GOLD][0].grams == 10
        assert book.account_names() == ["Broker"]

    def test_load_bare_data(self, payload):
        book = book_from_dict(payload["data"])
        assert len(book.all_records()) == 2

    def test_rejects_non_object(self):
        with pytest.raises(RecordError):
            book_from_dict([])

    def test_bad_record_names_its_id(self, payload):
        payload["data"]["investmentRecords"]["Stocks"][1]["date"] = "2024/02"
        with pytest.raises(RecordError, match=r"\[record 2\]"):
            book_from_dict(payload)

    def test_envelope(self):
        when = datetime(2024, 3, 1, tzinfo=timezone.utc)
        out = book_to_dict(example_book(), export_date=when)

        assert out["version"] == BACKUP_VERSION
        assert out["exportDate"] == "2024-03-01T00:00:00+00:00"
        assert len(out["data"]["investmentRecords"][K.STOCKS]) == 12
        assert out["data"]["investmentRecords"][K.TIME_DEPOSITS][0]["isTimeDeposit"] is True

    def test_file_round_trip(self, tmp_path):
        book = example_book()
        path = tmp_path / "backup.json"
        dump_backup(book, path)

        loaded = load_backup(path)
        assert loaded.all_records() == book.all_records()
        assert loaded.all_metal_records() == book.all_metal_records()
        assert json.loads(path.read_text(encoding="utf-8"))["version"] == BACKUP_VERSION

    def test_loads_invalid_json(self):
        with pytest.raises(json.JSONDecodeError):
            loads_backup("{not json")


class TestCsvExport:
    def test_investments(self, tmp_path):
        book = example_book()
        path = tmp_path / "investments.csv"

        assert export_investment_csv(book.all_records(), path) == 13
        df = pd.read_csv(path, encoding="utf-8-sig")
        assert df["date"].is_monotonic_increasing
        assert df.columns[0] == "id"
        # Same month: Bank sorts before Broker
        assert list(df["account"].iloc[:2]) == ["Bank", "Broker"]

    def test_metals(self, tmp_path):
        book = example_book()
        path = tmp_path / "metals.csv"

        assert export_metal_csv(book.all_metal_records(), path) == 4
        df = pd.read_csv(path, encoding="utf-8-sig")
        gold = df[df["id"] == "au-2"].iloc[0]
        assert gold["total_amount"] == pytest.approx(25500)
        assert gold["current_value"] == pytest.approx(26000)
