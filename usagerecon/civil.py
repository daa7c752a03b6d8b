from __future__ import annotations
from datetime import datetime
from functools import lru_cache
from typing import Iterable
from zoneinfo import ZoneInfo

import numpy as np
import pandas as pd

from . import canon
from .exceptions import InvalidInputError

_WALL_FORMAT = "%Y-%m-%d %H:%M"


def as_utc_index(idx) -> pd.DatetimeIndex:
    """Coerce instants to a UTC DatetimeIndex; naive values are read as UTC."""
    out = pd.DatetimeIndex(idx)
    if out.tz is None:
        return out.tz_localize("UTC")
    return out.tz_convert("UTC")


class TimeZoneCalendar:
    """
    Civil calendar for one timezone, built on a single primitive: the zone's
    UTC offset at a given instant.

    Subclasses provide ``utc_offset`` (and may override the vectorised
    ``utc_offsets``); resolution and formatting are shared.
    """

    zone: str

    def utc_offset(self, instant: pd.Timestamp) -> pd.Timedelta:
        raise NotImplementedError

    def utc_offsets(self, idx: pd.DatetimeIndex) -> pd.TimedeltaIndex:
        return pd.TimedeltaIndex([self.utc_offset(t) for t in idx])

    # Wall clock -> instant
    def resolve_instants(
        self, civil_dates: Iterable[str], local_times: Iterable[str]
    ) -> pd.DatetimeIndex:
        """
        Resolve (YYYY-MM-DD, HH:MM) wall-clock pairs into UTC instants.

        The pair is first read as if it were UTC; the zone's offset at that
        candidate is subtracted. The offset is then checked again at the
        corrected instant, and when it differs the re-corrected instant is
        used if it is self-consistent. Wall times just after a spring-forward
        therefore land correctly, skipped wall times fall forward and
        repeated wall times take their first occurrence.
        """
        dates = pd.Index(list(civil_dates), dtype=object).astype(str).str.strip()
        times = pd.Index(list(local_times), dtype=object).astype(str).str.strip()
        if len(dates) != len(times):
            raise InvalidInputError("civil_dates and local_times differ in length")

        wall = pd.DatetimeIndex(
            pd.to_datetime(dates + " " + times, format=_WALL_FORMAT, errors="coerce")
        )
        bad = np.asarray(wall.isna())
        if bad.any():
            pos = int(np.flatnonzero(bad)[0])
            raise InvalidInputError(
                f"Invalid civil date/time {dates[pos]!r} {times[pos]!r}"
            )

        candidate = wall.tz_localize("UTC")
        first = self.utc_offsets(candidate)
        guess = candidate - first
        second = self.utc_offsets(guess)
        corrected = candidate - second
        third = self.utc_offsets(corrected)

        use_corrected = np.asarray(second != first) & np.asarray(third == second)
        out = guess.where(~use_corrected, corrected)
        return pd.DatetimeIndex(out, name=canon.INDEX_NAME)

    def resolve_instant(self, civil_date: str, local_time: str) -> pd.Timestamp:
        return self.resolve_instants([civil_date], [local_time])[0]

    # Instant -> wall clock
    def wall_clock(self, idx) -> pd.DatetimeIndex:
        utc = as_utc_index(idx)
        return utc.tz_localize(None) + self.utc_offsets(utc)

    def civil_dates(self, idx) -> pd.Index:
        return self.wall_clock(idx).strftime("%Y-%m-%d")

    def civil_times(self, idx) -> pd.Index:
        return self.wall_clock(idx).strftime("%H:%M")

    def civil_date(self, instant: datetime | pd.Timestamp) -> str:
        return str(self.civil_dates([instant])[0])

    def civil_time(self, instant: datetime | pd.Timestamp) -> str:
        return str(self.civil_times([instant])[0])


class ZoneInfoCalendar(TimeZoneCalendar):
    """Calendar backed by the host's IANA timezone database."""

    def __init__(self, zone: str = canon.TIME_ZONE):
        self.zone = zone
        self._tz = ZoneInfo(zone)

    def __repr__(self) -> str:
        return f"ZoneInfoCalendar({self.zone!r})"

    def utc_offset(self, instant: pd.Timestamp) -> pd.Timedelta:
        ts = pd.Timestamp(instant)
        ts = ts.tz_localize("UTC") if ts.tz is None else ts
        return pd.Timedelta(ts.tz_convert(self._tz).utcoffset())

    def utc_offsets(self, idx: pd.DatetimeIndex) -> pd.TimedeltaIndex:
        utc = as_utc_index(idx)
        local = utc.tz_convert(self._tz)
        return pd.TimedeltaIndex(local.tz_localize(None) - utc.tz_localize(None))


@lru_cache(maxsize=None)
def get_calendar(zone: str = canon.TIME_ZONE) -> ZoneInfoCalendar:
    return ZoneInfoCalendar(zone)


def default_calendar() -> ZoneInfoCalendar:
    return get_calendar(canon.TIME_ZONE)


def resolve(
    civil_date: str, local_time: str, zone: str = canon.TIME_ZONE
) -> pd.Timestamp:
    """Absolute instant for a local wall-clock date/time in ``zone``."""
    return get_calendar(zone).resolve_instant(civil_date, local_time)
