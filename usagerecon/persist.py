from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import Iterable, Protocol

import pandas as pd
from pydantic import BaseModel, TypeAdapter, ValidationError

from . import canon, utils
from .exceptions import StoreError
from .types import UsageFrame

log = logging.getLogger(__name__)

STORE_COLUMNS = [
    "timestamp_key",
    "civil_date",
    "start_time",
    "import_kwh",
    "source",
    "synthetic",
]


class StoredRecord(BaseModel):
    """One persisted interval, keyed by its instant in epoch milliseconds."""

    timestamp_key: int
    civil_date: str
    start_time: str
    import_kwh: float = 0.0
    source: str
    synthetic: bool = False
    model_config = {"frozen": True}


_RECORDS = TypeAdapter(list[StoredRecord])


def to_stored_records(df: pd.DataFrame) -> list[StoredRecord]:
    if df.empty:
        return []
    keys = pd.DatetimeIndex(df.index).as_unit("ms").asi8
    return [
        StoredRecord(
            timestamp_key=int(key),
            civil_date=str(row.civil_date),
            start_time=str(row.start_time),
            import_kwh=float(row.import_kwh),
            source=str(row.source),
            synthetic=bool(row.synthetic),
        )
        for key, row in zip(keys, df[canon.USAGE_COLS].itertuples(index=False))
    ]


def from_stored_records(records: Iterable[StoredRecord]) -> UsageFrame:
    records = sorted(records, key=lambda r: r.timestamp_key)
    if not records:
        return utils.empty_usage_frame()
    idx = pd.to_datetime([r.timestamp_key for r in records], unit="ms", utc=True)
    return utils.build_usage_frame(
        idx,
        civil_date=[r.civil_date for r in records],
        start_time=[r.start_time for r in records],
        import_kwh=[r.import_kwh for r in records],
        source=[r.source for r in records],
        synthetic=[r.synthetic for r in records],
    )


class RecordStore(Protocol):
    """Persisted merged series; whole-series replace, keyed by instant."""

    def get_all(self) -> UsageFrame: ...

    def put_all(self, records: pd.DataFrame) -> None: ...

    def clear(self) -> None: ...


class MemoryRecordStore:
    def __init__(self) -> None:
        self._records: dict[int, StoredRecord] = {}

    def get_all(self) -> UsageFrame:
        return from_stored_records(self._records.values())

    def put_all(self, records: pd.DataFrame) -> None:
        self._records = {r.timestamp_key: r for r in to_stored_records(records)}

    def clear(self) -> None:
        self._records = {}

    def __len__(self) -> int:
        return len(self._records)


class CsvRecordStore:
    """
    Records kept in a single CSV file.

    Writes go to a temporary file in the same directory which then replaces
    the target, so a failed write leaves the previous contents in place.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def __repr__(self) -> str:
        return f"CsvRecordStore({str(self.path)!r})"

    def get_all(self) -> UsageFrame:
        if not self.path.exists():
            return utils.empty_usage_frame()
        try:
            raw = pd.read_csv(
                self.path,
                dtype={"civil_date": str, "start_time": str, "source": str},
                keep_default_na=False,
            )
        except pd.errors.EmptyDataError:
            return utils.empty_usage_frame()
        except (OSError, UnicodeDecodeError, pd.errors.ParserError) as exc:
            raise StoreError(f"Failed to read {self.path}: {exc}") from exc

        missing = [c for c in STORE_COLUMNS if c not in raw.columns]
        if missing:
            raise StoreError(f"{self.path}: missing columns {missing}")
        try:
            records = _RECORDS.validate_python(raw[STORE_COLUMNS].to_dict(orient="records"))
        except ValidationError as exc:
            raise StoreError(f"{self.path}: invalid stored record: {exc}") from exc
        log.debug("Loaded %d records from %s", len(records), self.path)
        return from_stored_records(records)

    def put_all(self, records: pd.DataFrame) -> None:
        rows = [r.model_dump() for r in to_stored_records(records)]
        out = pd.DataFrame(rows, columns=STORE_COLUMNS)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(
                dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8", newline="") as fh:
                    out.to_csv(fh, index=False)
                os.replace(tmp, self.path)
            except BaseException:
                Path(tmp).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise StoreError(f"Failed to write {self.path}: {exc}") from exc
        log.debug("Stored %d records in %s", len(out), self.path)

    def clear(self) -> None:
        try:
            self.path.unlink(missing_ok=True)
        except OSError as exc:
            raise StoreError(f"Failed to clear {self.path}: {exc}") from exc
