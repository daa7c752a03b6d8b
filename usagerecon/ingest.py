from __future__ import annotations
import io
import logging
from pathlib import Path
from typing import Optional

import numpy as np
import pandas as pd

from . import canon, utils
from .civil import TimeZoneCalendar, default_calendar
from .exceptions import InvalidInputError, MalformedSourceError
from .types import UsageFrame

log = logging.getLogger(__name__)


def normalize_csv(text: str) -> str:
    """
    Drop a leading byte-order mark and the metadata preamble, returning the
    text from the column header line onwards.
    """
    clean = text[1:] if text.startswith("\ufeff") else text
    lines = clean.splitlines()
    header_idx = next(
        (i for i, line in enumerate(lines) if line.startswith(canon.HEADER_PREFIX)),
        None,
    )
    if header_idx is None:
        raise MalformedSourceError("Unable to locate CSV header row.")
    return "\n".join(lines[header_idx:])


def read_table(text: str) -> pd.DataFrame:
    """
    Tokenize normalised CSV text into string-valued rows.

    Columns come from the header line. A row with more fields than the
    header (an unquoted comma in NOTES, say) keeps its leading fields and
    the extras are ignored.
    """
    try:
        header = pd.read_csv(io.StringIO(text), nrows=0).columns
        out = pd.read_csv(
            io.StringIO(text),
            dtype=str,
            keep_default_na=False,
            usecols=list(header),
        )
    except pd.errors.ParserError as exc:
        raise MalformedSourceError(f"Unable to tokenize CSV: {exc}") from exc
    log.debug("Tokenized %d rows x %d columns", len(out), len(out.columns))
    return out


def _energy(values: pd.Series) -> np.ndarray:
    kwh = pd.to_numeric(values, errors="coerce").to_numpy(dtype=float)
    return np.where(np.isfinite(kwh), kwh, 0.0)


def parse_rows(
    table: pd.DataFrame,
    source: str,
    *,
    calendar: Optional[TimeZoneCalendar] = None,
) -> UsageFrame:
    """
    Convert tokenized export rows into a UsageFrame sorted by instant.

    - Rows with a blank DATE or START TIME are dropped (trailer rows).
    - IMPORT (kWh) that is missing or not a finite number becomes 0.0.
    - A malformed DATE/START TIME raises InvalidInputError for the whole table.
    """
    calendar = calendar or default_calendar()

    for col in (canon.DATE_COL, canon.START_TIME_COL):
        if col not in table.columns:
            raise MalformedSourceError(f"{source}: missing required column {col!r}")

    dates = table[canon.DATE_COL].fillna("").astype(str).str.strip()
    times = table[canon.START_TIME_COL].fillna("").astype(str).str.strip()
    keep = (dates != "") & (times != "")
    if not keep.all():
        log.debug("%s: dropped %d rows without DATE/START TIME", source, int((~keep).sum()))
    rows = table.loc[keep]
    dates, times = dates[keep], times[keep]

    if canon.IMPORT_COL in rows.columns:
        kwh = _energy(rows[canon.IMPORT_COL])
    else:
        kwh = np.zeros(len(rows), dtype=float)

    try:
        idx = calendar.resolve_instants(dates, times)
    except InvalidInputError as exc:
        raise InvalidInputError(f"{source}: {exc}") from exc

    # Re-derive the civil fields so '9:00' and '09:00' bucket together
    wall = pd.to_datetime(dates + " " + times, format="%Y-%m-%d %H:%M")
    out = utils.build_usage_frame(
        idx,
        civil_date=wall.dt.strftime("%Y-%m-%d"),
        start_time=wall.dt.strftime("%H:%M"),
        import_kwh=kwh,
        source=source,
        synthetic=False,
    )
    return UsageFrame(out.sort_index(kind="mergesort"))


def parse_csv_text(
    text: str, source: str, *, calendar: Optional[TimeZoneCalendar] = None
) -> UsageFrame:
    return parse_rows(read_table(normalize_csv(text)), source, calendar=calendar)


def read_source(
    path: str | Path, *, calendar: Optional[TimeZoneCalendar] = None
) -> UsageFrame:
    """
    Read and parse one portal export file, tagging rows with its file name.

    OSError propagates; parse problems raise MalformedSourceError or
    InvalidInputError. Bytes that are not UTF-8 decode to U+FFFD.
    """
    path = Path(path)
    text = path.read_text(encoding="utf-8", errors="replace")
    try:
        out = parse_csv_text(text, path.name, calendar=calendar)
    except MalformedSourceError as exc:
        raise MalformedSourceError(f"Failed to parse {path.name}: {exc}") from exc
    log.debug("%s: parsed %d rows", path.name, len(out))
    return out
