"""
Code to support our tests

A calendar driven by a hand-written offset table, so DST edge cases can be
checked without depending on the host's timezone database.
"""

from __future__ import annotations

from bisect import bisect_right
from typing import Iterable

import pandas as pd

from .civil import TimeZoneCalendar


def _utc(value) -> pd.Timestamp:
    ts = pd.Timestamp(value)
    return ts.tz_localize("UTC") if ts.tz is None else ts.tz_convert("UTC")


class FixedTableCalendar(TimeZoneCalendar):
    """
    Offsets taken from a list of (transition instant, offset) pairs.

    Before the first transition ``base_offset`` applies.
    """

    def __init__(
        self,
        zone: str,
        base_offset: str | pd.Timedelta,
        transitions: Iterable[tuple[str | pd.Timestamp, str | pd.Timedelta]] = (),
    ):
        self.zone = zone
        self.base_offset = pd.Timedelta(base_offset)
        table = sorted(
            (_utc(at), pd.Timedelta(offset))
            for at, offset in transitions
        )
        self._at = [at for at, _ in table]
        self._offsets = [offset for _, offset in table]

    def __repr__(self) -> str:
        return f"FixedTableCalendar({self.zone!r}, {len(self._at)} transitions)"

    def utc_offset(self, instant: pd.Timestamp) -> pd.Timedelta:
        pos = bisect_right(self._at, _utc(instant))
        return self.base_offset if pos == 0 else self._offsets[pos - 1]


def pacific_2024() -> FixedTableCalendar:
    """US Pacific time for 2024: PDT from 10 March, PST again from 3 November."""
    return FixedTableCalendar(
        "US/Pacific (2024 table)",
        "-8h",
        [
            ("2024-03-10 10:00", "-7h"),
            ("2024-11-03 09:00", "-8h"),
        ],
    )
