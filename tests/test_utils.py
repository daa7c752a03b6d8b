"""Unit tests for file-name handling and small formatting helpers in utils."""

from pathlib import Path

import pandas as pd
import pytest

from usagerecon import utils


def test_parse_source_name():
    name = utils.parse_source_name("/tmp/scl_electric_5550001_0_2024-01-01_to_2024-01-31.csv")
    assert name == utils.SourceName(
        prefix="scl_electric",
        service_id="5550001",
        service_index="0",
        start_date="2024-01-01",
        end_date="2024-01-31",
    )
    assert utils.parse_source_name("notes.csv") is None


def test_order_sources_sorts_by_file_name_only():
    paths = [
        "b/usage_1_0_2024-02-01_to_2024-02-29.csv",
        "a/usage_1_0_2024-03-01_to_2024-03-31.csv",
        "c/usage_1_0_2024-01-01_to_2024-01-31.csv",
    ]
    assert [p.name[10:20] for p in utils.order_sources(paths)] == [
        "2024-01-01",
        "2024-02-01",
        "2024-03-01",
    ]
    assert all(isinstance(p, Path) for p in utils.order_sources(paths))


@pytest.mark.parametrize(
    "hhmm, expected",
    [("00:00", "12:00 AM"), ("09:05", "9:05 AM"), ("12:30", "12:30 PM"), ("23:45", "11:45 PM")],
)
def test_display_time(hhmm, expected):
    assert utils.display_time(hhmm) == expected


def test_next_civil_date_crosses_month_and_leap_day():
    assert utils.next_civil_date("2024-02-28") == "2024-02-29"
    assert utils.next_civil_date("2024-12-31") == "2025-01-01"


def test_hour_of():
    assert list(utils.hour_of(pd.Series(["00:15", "09:45", "23:00"]))) == [0, 9, 23]


def test_empty_frames_have_expected_shape():
    usage = utils.empty_usage_frame()
    assert list(usage.columns) == ["civil_date", "start_time", "import_kwh", "source", "synthetic"]
    assert str(usage.index.tz) == "UTC"
    buckets = utils.empty_bucket_frame()
    assert list(buckets.columns) == ["civil_date", "start_time", "import_kwh", "sample_count"]
