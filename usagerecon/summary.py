from __future__ import annotations
from typing import Optional

import pandas as pd

from . import utils
from .store import UsageView
from .types import ViewSummary

EMPTY_STATUS = "No data in the selected range. Try expanding the dates."

_ROLLING_UNITS = {
    "15min": "15-min intervals",
    "hourly": "hours",
    "daily": "days",
}


def describe_rolling_window(granularity: str, window_size: int) -> str:
    if granularity == "15min":
        hours = window_size * 15 / 60
        approx = f"{hours:.0f} h" if hours % 1 == 0 else f"{hours:.1f} h"
        return f"{window_size} × 15-min intervals ({approx})"
    unit = _ROLLING_UNITS.get(granularity, "intervals")
    return f"{window_size} {unit}"


def _label(row: pd.Series, granularity: str) -> str:
    if granularity == "daily":
        return str(row["civil_date"])
    return f"{row['civil_date']} {utils.display_time(str(row['start_time']))}"


def summarise_view(view: UsageView) -> ViewSummary:
    records = view.records
    start: Optional[str] = None
    end: Optional[str] = None
    if len(records):
        start = _label(records.iloc[0], view.granularity)
        end = _label(records.iloc[-1], view.granularity)

    synthetic = 0
    if "synthetic" in records.columns:
        synthetic = int(records["synthetic"].astype(bool).sum())

    return {
        "granularity": view.granularity,
        "points": int(len(records)),
        "synthetic_points": synthetic,
        "start": start,
        "end": end,
        "total_import_kwh": float(records["import_kwh"].sum()) if len(records) else 0.0,
        "rolling_window": (
            describe_rolling_window(view.granularity, view.window_size)
            if len(view.rolling)
            else None
        ),
    }


def status_text(view: UsageView) -> str:
    """One-line description of a view, as shown under the chart."""
    s = summarise_view(view)
    if not s["points"]:
        return EMPTY_STATUS
    unit = "points" if view.granularity == "15min" else view.granularity
    parts = [
        f"Showing {s['points']} {unit} from {s['start']} through {s['end']}",
        f"Total import {s['total_import_kwh']:.2f} kWh",
    ]
    if s["rolling_window"]:
        parts.append(f"Rolling avg window {s['rolling_window']}")
    return " · ".join(parts)
