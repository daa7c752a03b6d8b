# usagerecon/utils.py
from __future__ import annotations
import re
from dataclasses import dataclass
from datetime import date, timedelta
from pathlib import Path
from typing import Iterable, Optional

import numpy as np
import pandas as pd

from . import canon
from .civil import as_utc_index
from .types import BucketFrame, UsageFrame

_SOURCE_NAME_RE = re.compile(
    r"^(?P<prefix>.+?)_(?P<service_id>[^_]+)_(?P<service_index>[^_]+)_"
    r"(?P<start_date>\d{4}-\d{2}-\d{2})_to_(?P<end_date>\d{4}-\d{2}-\d{2})\.csv$",
    re.IGNORECASE,
)


@dataclass(frozen=True)
class SourceName:
    prefix: str
    service_id: str
    service_index: str
    start_date: str
    end_date: str


def parse_source_name(name: str | Path) -> Optional[SourceName]:
    """Split a portal export name like 'usage_123_0_2024-01-01_to_2024-01-31.csv'."""
    m = _SOURCE_NAME_RE.match(Path(name).name)
    if m is None:
        return None
    return SourceName(**m.groupdict())


def order_sources(paths: Iterable[str | Path]) -> list[Path]:
    """Order files by file name; the export naming makes this chronological."""
    return sorted((Path(p) for p in paths), key=lambda p: p.name)


def next_civil_date(civil_date: str) -> str:
    return (date.fromisoformat(civil_date) + timedelta(days=1)).isoformat()


def hour_of(start_time: pd.Series) -> pd.Series:
    """Local hour-of-day from 'HH:MM' strings."""
    return start_time.astype(str).str.split(":", n=1).str[0].astype(int)


def display_time(hhmm: str) -> str:
    """'13:05' -> '1:05 PM'."""
    hour, minute = (int(part) for part in hhmm.split(":")[:2])
    suffix = "AM" if hour < 12 else "PM"
    return f"{hour % 12 or 12}:{minute:02d} {suffix}"


def build_usage_frame(
    idx,
    *,
    civil_date,
    start_time,
    import_kwh: np.ndarray | pd.Series,
    source,
    synthetic: bool | np.ndarray,
) -> UsageFrame:
    df = pd.DataFrame(
        {
            "civil_date": np.asarray(civil_date, dtype=object),
            "start_time": np.asarray(start_time, dtype=object),
            "import_kwh": np.asarray(import_kwh, dtype=float),
            "source": source,
            "synthetic": synthetic,
        },
        index=as_utc_index(idx).rename(canon.INDEX_NAME),
    )
    df["synthetic"] = df["synthetic"].astype(bool)
    return UsageFrame(df)


def empty_usage_frame() -> UsageFrame:
    """Return an empty UsageFrame with the UTC index and required columns."""
    idx = pd.DatetimeIndex([], tz="UTC", name=canon.INDEX_NAME)
    return build_usage_frame(
        idx,
        civil_date=[],
        start_time=[],
        import_kwh=np.array([], dtype=float),
        source=np.array([], dtype=object),
        synthetic=np.array([], dtype=bool),
    )


def empty_bucket_frame() -> BucketFrame:
    idx = pd.DatetimeIndex([], tz="UTC", name=canon.INDEX_NAME)
    out = pd.DataFrame(
        {
            "civil_date": np.array([], dtype=object),
            "start_time": np.array([], dtype=object),
            "import_kwh": np.array([], dtype=float),
            "sample_count": np.array([], dtype=int),
        },
        index=idx,
    )
    return BucketFrame(out)


def empty_rolling_frame() -> pd.DataFrame:
    idx = pd.DatetimeIndex([], tz="UTC", name=canon.INDEX_NAME)
    return pd.DataFrame({"avg": np.array([], dtype=float)}, index=idx)
