from __future__ import annotations
from typing import Literal, Optional, TypedDict

import pandas as pd

Granularity = Literal["15min", "hourly", "daily"]


class UsageFrame(pd.DataFrame):
    """
    Reconciled 15-minute interval dataframe.

    Expected:
      - DatetimeIndex named 'timestamp', tz-aware UTC
      - Columns: ['civil_date', 'start_time', 'import_kwh', 'source', 'synthetic']
    """

    @property
    def _constructor(self):
        return UsageFrame

    @property
    def civil_date(self) -> pd.Series:
        return self["civil_date"]

    @property
    def start_time(self) -> pd.Series:
        return self["start_time"]

    @property
    def import_kwh(self) -> pd.Series:
        return self["import_kwh"]

    @property
    def source(self) -> pd.Series:
        return self["source"]

    @property
    def synthetic(self) -> pd.Series:
        return self["synthetic"]


class BucketFrame(pd.DataFrame):
    """
    Hourly or daily aggregate dataframe.

    Expected:
      - DatetimeIndex named 'timestamp' holding each bucket's local start, tz-aware UTC
      - Columns: ['civil_date', 'start_time', 'import_kwh', 'sample_count']
    """

    @property
    def _constructor(self):
        return BucketFrame

    @property
    def import_kwh(self) -> pd.Series:
        return self["import_kwh"]

    @property
    def sample_count(self) -> pd.Series:
        return self["sample_count"]


class ViewSummary(TypedDict):
    granularity: str
    points: int
    synthetic_points: int
    start: Optional[str]
    end: Optional[str]
    total_import_kwh: float
    rolling_window: Optional[str]
