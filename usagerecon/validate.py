from __future__ import annotations
import pandas as pd
from typing import cast

from . import canon, exceptions


def _assert_index(df: pd.DataFrame) -> None:
    if df.index.name != canon.INDEX_NAME:
        raise exceptions.FrameError(f"Index must be '{canon.INDEX_NAME}'.")
    if not isinstance(df.index, pd.DatetimeIndex):
        raise exceptions.FrameError("Index must be a DatetimeIndex.")
    tz_index = cast(pd.DatetimeIndex, df.index)
    if tz_index.tz is None:
        raise exceptions.FrameError("Index must be tz-aware.")
    if not (tz_index.is_monotonic_increasing and tz_index.is_unique):
        raise exceptions.FrameError("Index must be strictly ascending and unique.")


def assert_usage(df: pd.DataFrame) -> None:
    """Check the 15-minute series invariants."""
    _assert_index(df)
    for col in canon.USAGE_COLS:
        if col not in df.columns:
            raise exceptions.FrameError(f"Missing required column '{col}'.")
    if df["import_kwh"].isna().any():
        raise exceptions.FrameError("import_kwh must not contain NaN.")


def assert_buckets(df: pd.DataFrame) -> None:
    _assert_index(df)
    for col in canon.BUCKET_COLS:
        if col not in df.columns:
            raise exceptions.FrameError(f"Missing required column '{col}'.")
