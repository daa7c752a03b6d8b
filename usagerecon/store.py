from __future__ import annotations

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Literal, Mapping, Optional

import pandas as pd

from . import canon, clean, transform, utils, validate
from .config import ReconcileConfig, default_config
from .exceptions import TransformError, require
from .types import Granularity


@dataclass(frozen=True)
class UsageView:
    """Read-only slice handed to charting/summary code."""

    granularity: Granularity
    records: pd.DataFrame
    rolling: pd.DataFrame
    window_size: int
    start_date: Optional[str] = None
    end_date: Optional[str] = None


@dataclass(frozen=True)
class TimeSeriesStore:
    """
    Reconciled series for every granularity plus the selected date range.

    Produced by ``rebuild``; replace it rather than mutating it.
    """

    series: Mapping[str, pd.DataFrame]
    available_dates: tuple[str, ...] = ()
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    config: ReconcileConfig = field(default_factory=ReconcileConfig)

    @property
    def empty(self) -> bool:
        return not self.available_dates

    def with_range(
        self,
        start_date: Optional[str],
        end_date: Optional[str],
        *,
        anchor: Literal["start", "end"] = "start",
    ) -> "TimeSeriesStore":
        """
        Select a new [start_date, end_date] window.

        Bounds are clamped to the available dates. When start > end the bound
        named by ``anchor`` is kept and the other moves to meet it.
        """
        start = start_date or None
        end = end_date or None
        if self.available_dates:
            lo, hi = self.available_dates[0], self.available_dates[-1]
            start = min(max(start, lo), hi) if start else lo
            end = min(max(end, lo), hi) if end else hi
        if start and end and start > end:
            if anchor == "start":
                end = start
            else:
                start = end
        return replace(self, start_date=start, end_date=end)

    def view(
        self, granularity: Granularity, window_size: Optional[int] = None
    ) -> UsageView:
        require(
            granularity in canon.GRANULARITIES,
            f"Unknown granularity {granularity!r}",
            TransformError,
        )
        window = self.config.rolling_window if window_size is None else window_size
        records = transform.filter_range(
            self.series[granularity],
            self.start_date,
            self.end_date,
            calendar=self.config.calendar(),
        )
        return UsageView(
            granularity=granularity,
            records=records,
            rolling=transform.rolling_average(records, window),
            window_size=window,
            start_date=self.start_date,
            end_date=self.end_date,
        )


def rebuild(
    merged: pd.DataFrame, *, config: Optional[ReconcileConfig] = None
) -> TimeSeriesStore:
    """Derive every granularity from an authoritative merged series."""
    config = config or default_config()
    calendar = config.calendar()
    validate.assert_usage(merged)

    filled = clean.fill_gaps(merged, interval_min=config.interval_min, calendar=calendar)
    series = {
        "15min": filled,
        "hourly": transform.aggregate(filled, "hourly", calendar=calendar),
        "daily": transform.aggregate(filled, "daily", calendar=calendar),
    }
    dates = tuple(transform.list_available_dates(filled))
    return TimeSeriesStore(
        series=MappingProxyType(series),
        available_dates=dates,
        start_date=dates[0] if dates else None,
        end_date=dates[-1] if dates else None,
        config=config,
    )


def empty_store(config: Optional[ReconcileConfig] = None) -> TimeSeriesStore:
    return rebuild(utils.empty_usage_frame(), config=config)
