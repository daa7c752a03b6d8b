from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Mapping, Optional

from . import canon
from .civil import ZoneInfoCalendar, get_calendar


@dataclass(frozen=True)
class ReconcileConfig:
    # Zone used for every timestamp resolution and civil-date derivation
    time_zone: str = canon.TIME_ZONE

    # Native spacing of the export; gap filling steps by this
    interval_min: int = canon.INTERVAL_MIN

    # Trailing window, counted in points of whichever granularity is shown
    # (10 means 2.5 h of 15-min intervals, 10 hours or 10 days)
    rolling_window: int = canon.ROLLING_WINDOW

    # Concurrent file reads during ingestion
    max_workers: int = 4

    def calendar(self) -> ZoneInfoCalendar:
        return get_calendar(self.time_zone)


def default_config() -> ReconcileConfig:
    return ReconcileConfig()


def config_from_env(environ: Optional[Mapping[str, str]] = None) -> ReconcileConfig:
    """Override defaults from USAGERECON_ROLLING_WINDOW / USAGERECON_MAX_WORKERS."""
    env = os.environ if environ is None else environ
    cfg = default_config()
    if env.get("USAGERECON_ROLLING_WINDOW"):
        cfg = replace(cfg, rolling_window=int(env["USAGERECON_ROLLING_WINDOW"]))
    if env.get("USAGERECON_MAX_WORKERS"):
        cfg = replace(cfg, max_workers=max(1, int(env["USAGERECON_MAX_WORKERS"])))
    return cfg
