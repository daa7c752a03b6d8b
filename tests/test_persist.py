import pandas as pd
import pytest

from usagerecon import clean, persist
from usagerecon.exceptions import StoreError


@pytest.fixture
def filled(make_records):
    df = make_records([("2024-01-02", "00:00", 0.5), ("2024-01-02", "00:45", 1.25)], "a.csv")
    return clean.fill_gaps(df)


def _assert_same_records(left, right):
    assert list(left.index) == list(right.index)
    for col in ["civil_date", "start_time", "import_kwh", "source", "synthetic"]:
        assert list(left[col]) == list(right[col]), col


def test_stored_record_keys_are_epoch_milliseconds(filled):
    records = persist.to_stored_records(filled)
    first = pd.Timestamp("2024-01-02 08:00", tz="UTC")
    assert records[0].timestamp_key == first.value // 1_000_000
    assert records[1].synthetic and records[1].source == "synthetic-gap-fill"


def test_memory_store_round_trip(filled):
    store = persist.MemoryRecordStore()
    assert store.get_all().empty
    store.put_all(filled)
    assert len(store) == 4
    _assert_same_records(store.get_all(), filled)
    store.clear()
    assert store.get_all().empty


def test_put_all_replaces_whole_series(filled):
    store = persist.MemoryRecordStore()
    store.put_all(filled)
    store.put_all(filled.iloc[:1])
    assert len(store.get_all()) == 1


def test_csv_store_round_trip(tmp_path, filled):
    store = persist.CsvRecordStore(tmp_path / "nested" / "records.csv")
    assert store.get_all().empty
    store.put_all(filled)
    assert store.path.exists()
    _assert_same_records(store.get_all(), filled)
    assert list(tmp_path.joinpath("nested").iterdir()) == [store.path]
    store.clear()
    assert not store.path.exists()
    assert store.get_all().empty


def test_csv_store_empty_series(tmp_path, filled):
    store = persist.CsvRecordStore(tmp_path / "records.csv")
    store.put_all(filled.iloc[:0])
    assert store.get_all().empty


def test_csv_store_rejects_foreign_file(tmp_path):
    path = tmp_path / "records.csv"
    path.write_text("a,b\n1,2\n", encoding="utf-8")
    with pytest.raises(StoreError, match="missing columns"):
        persist.CsvRecordStore(path).get_all()


def test_csv_store_rejects_invalid_rows(tmp_path):
    path = tmp_path / "records.csv"
    path.write_text(
        "timestamp_key,civil_date,start_time,import_kwh,source,synthetic\n"
        "not-a-number,2024-01-02,00:00,0.5,a.csv,False\n",
        encoding="utf-8",
    )
    with pytest.raises(StoreError, match="invalid stored record"):
        persist.CsvRecordStore(path).get_all()


def test_csv_store_rejects_undecodable_file(tmp_path):
    path = tmp_path / "records.csv"
    path.write_bytes(b"timestamp_key,civil_date\n\xff\xfe\xfa,2024-01-02\n")
    with pytest.raises(StoreError, match="Failed to read"):
        persist.CsvRecordStore(path).get_all()
