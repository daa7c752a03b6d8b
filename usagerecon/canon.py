from __future__ import annotations
from typing import Final

INDEX_NAME: Final[str] = "timestamp"
TIME_ZONE: Final[str] = "America/Los_Angeles"
INTERVAL_MIN: Final[int] = 15
ROLLING_WINDOW: Final[int] = 10

SYNTHETIC_SOURCE: Final[str] = "synthetic-gap-fill"

# Portal export layout (after the metadata preamble)
HEADER_PREFIX: Final[str] = "TYPE,DATE,START TIME,END TIME,IMPORT (kWh)"
DATE_COL: Final[str] = "DATE"
START_TIME_COL: Final[str] = "START TIME"
IMPORT_COL: Final[str] = "IMPORT (kWh)"

USAGE_COLS: Final[list[str]] = [
    "civil_date",
    "start_time",
    "import_kwh",
    "source",
    "synthetic",
]
BUCKET_COLS: Final[list[str]] = ["civil_date", "start_time", "import_kwh", "sample_count"]

GRANULARITIES: Final[tuple[str, ...]] = ("15min", "hourly", "daily")
