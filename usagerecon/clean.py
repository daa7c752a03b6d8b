from __future__ import annotations
from typing import Iterable, Optional

import numpy as np
import pandas as pd

from . import canon, utils
from .civil import TimeZoneCalendar, as_utc_index, default_calendar
from .types import UsageFrame


def merge_series(series_list: Iterable[Optional[pd.DataFrame]]) -> UsageFrame:
    """
    Combine record series into one instant-keyed series.

    Series are visited in the order given and a later record replaces an
    earlier one at the same instant, so callers pass older sources first.
    Output is sorted ascending with one row per instant.
    """
    frames = []
    for df in series_list:
        if df is None or df.empty:
            continue
        df = df.copy()
        df.index = as_utc_index(df.index).as_unit("ns").rename(canon.INDEX_NAME)
        frames.append(df[canon.USAGE_COLS])
    if not frames:
        return utils.empty_usage_frame()

    combined = pd.concat(frames)
    out = (
        combined[~combined.index.duplicated(keep="last")]
        .sort_index(kind="mergesort")
        .astype({"synthetic": bool})
    )
    return UsageFrame(out)


def fill_gaps(
    df: pd.DataFrame,
    *,
    interval_min: int = canon.INTERVAL_MIN,
    calendar: Optional[TimeZoneCalendar] = None,
) -> UsageFrame:
    """
    Insert zero-usage rows at every missing interval boundary.

    Between each consecutive pair (current, next), rows are synthesised at
    current + k * interval for as long as that is strictly before next.
    Nothing is added after the last row. Only elapsed absolute time is
    considered, so a spring-forward jump from 01:45 to 03:00 is not a gap.

    A synthesised row is kept only when its local wall clock is later than
    the wall clock of the row it follows. On fall-back day an export that
    goes 01:45 -> 02:00 without repeating the 01:xx block therefore gets no
    zero rows in the repeated hour.
    """
    if df.empty:
        return UsageFrame(df.copy())
    calendar = calendar or default_calendar()

    idx = as_utc_index(df.index).as_unit("ns")
    ts = idx.asi8
    step = pd.Timedelta(minutes=interval_min).value

    # boundaries strictly inside each gap: ceil(gap / step) - 1
    gaps = np.diff(ts)
    counts = np.maximum((gaps - 1) // step, 0)
    total = int(counts.sum())
    if total == 0:
        return UsageFrame(df.copy())

    starts = np.repeat(ts[:-1], counts)
    first_pos = np.repeat(np.cumsum(counts) - counts, counts)
    k = np.arange(total) - first_pos + 1
    synth_idx = pd.to_datetime(starts + k * step, unit="ns", utc=True)

    # drop boundaries whose wall clock repeats the preceding real row's
    after = np.asarray(
        calendar.wall_clock(synth_idx)
        > calendar.wall_clock(pd.to_datetime(starts, unit="ns", utc=True))
    )
    synth_idx = synth_idx[after]
    total = len(synth_idx)
    if total == 0:
        return UsageFrame(df.copy())

    synth = utils.build_usage_frame(
        synth_idx,
        civil_date=calendar.civil_dates(synth_idx),
        start_time=calendar.civil_times(synth_idx),
        import_kwh=np.zeros(total, dtype=float),
        source=canon.SYNTHETIC_SOURCE,
        synthetic=True,
    )

    base = df.copy()
    base.index = idx.rename(canon.INDEX_NAME)
    out = (
        pd.concat([base[canon.USAGE_COLS], synth])
        .sort_index(kind="mergesort")
        .astype({"synthetic": bool})
    )
    return UsageFrame(out)
