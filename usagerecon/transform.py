from __future__ import annotations
import numpy as np
import pandas as pd
from typing import Optional

from . import canon, utils
from .civil import TimeZoneCalendar, as_utc_index, default_calendar
from .exceptions import TransformError, require
from .types import BucketFrame, Granularity


def aggregate(
    df: pd.DataFrame,
    granularity: Granularity,
    *,
    calendar: Optional[TimeZoneCalendar] = None,
) -> pd.DataFrame:
    """
    Re-bucket a filled 15-minute series.

    - '15min': returned as a copy.
    - 'hourly': grouped by (civil_date, local hour of start_time).
    - 'daily': grouped by civil_date.

    Buckets follow the civil calendar rather than fixed 60/1440 minute
    windows, so DST days hold 23 or 25 hours worth of intervals. Each
    bucket's instant is its local start (HH:00 or midnight) resolved in
    the fixed zone.
    """
    require(
        granularity in canon.GRANULARITIES,
        f"Unknown granularity {granularity!r}; expected one of {canon.GRANULARITIES}",
        TransformError,
    )
    if granularity == "15min":
        return df.copy()
    if df.empty:
        return utils.empty_bucket_frame()
    calendar = calendar or default_calendar()

    d = pd.DataFrame(
        {
            "civil_date": df["civil_date"].to_numpy(),
            "import_kwh": df["import_kwh"].to_numpy(dtype=float),
        }
    )
    keys = ["civil_date"]
    if granularity == "hourly":
        d["hour"] = utils.hour_of(df["start_time"]).to_numpy()
        keys.append("hour")

    g = (
        d.groupby(keys, sort=False)
        .agg(import_kwh=("import_kwh", "sum"), sample_count=("import_kwh", "size"))
        .reset_index()
    )
    if granularity == "hourly":
        g["start_time"] = [f"{h:02d}:00" for h in g["hour"]]
    else:
        g["start_time"] = "00:00"

    idx = calendar.resolve_instants(g["civil_date"], g["start_time"])
    out = pd.DataFrame(
        {
            "civil_date": g["civil_date"].to_numpy(dtype=object),
            "start_time": g["start_time"].to_numpy(dtype=object),
            "import_kwh": g["import_kwh"].to_numpy(dtype=float),
            "sample_count": g["sample_count"].to_numpy(dtype=int),
        },
        index=idx,
    )
    return BucketFrame(out.sort_index(kind="mergesort"))


def filter_range(
    df: pd.DataFrame,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    *,
    calendar: Optional[TimeZoneCalendar] = None,
) -> pd.DataFrame:
    """
    Keep rows between two civil dates, both inclusive.

    The start bound is local midnight of start_date; the end bound is local
    midnight of the day after end_date, exclusive. Rows are compared by
    instant, so bucket rows of any granularity filter the same way.
    """
    if df.empty or not (start_date or end_date):
        return df
    calendar = calendar or default_calendar()

    idx = as_utc_index(df.index)
    mask = np.ones(len(df), dtype=bool)
    if start_date:
        mask &= np.asarray(idx >= calendar.resolve_instant(start_date, "00:00"))
    if end_date:
        calendar.resolve_instant(end_date, "00:00")  # rejects malformed end_date
        end_exclusive = calendar.resolve_instant(utils.next_civil_date(end_date), "00:00")
        mask &= np.asarray(idx < end_exclusive)
    return df.loc[mask]


def rolling_average(df: pd.DataFrame, window_size: int) -> pd.DataFrame:
    """
    Trailing moving average of import_kwh over window_size rows.

    One point per row once window_size rows have been seen; no partial
    windows. Returns an empty frame when df is empty or window_size <= 1.
    """
    if df.empty or window_size <= 1:
        return utils.empty_rolling_frame()
    avg = df["import_kwh"].astype(float).rolling(window=window_size).mean()
    out = avg.iloc[window_size - 1 :].to_frame("avg")
    out.index = as_utc_index(out.index).rename(canon.INDEX_NAME)
    return out


def list_available_dates(df: pd.DataFrame) -> list[str]:
    """Distinct civil dates in series order."""
    if df.empty:
        return []
    return [str(d) for d in df["civil_date"].drop_duplicates()]
