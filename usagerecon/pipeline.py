"""
Ingestion batches: read exports concurrently, merge them over the persisted
series, persist the result and rebuild the per-granularity views.

A file that cannot be parsed is reported and left out; its siblings still
load. A file or store that cannot be read fails the whole batch and nothing
is written.
"""
from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional

from . import clean, ingest, utils
from .config import ReconcileConfig, default_config
from .exceptions import IngestError, InvalidInputError, MalformedSourceError, StoreError
from .persist import RecordStore
from .store import TimeSeriesStore, empty_store, rebuild

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class SourceFailure:
    source: str
    reason: str


@dataclass(frozen=True)
class IngestResult:
    store: TimeSeriesStore
    loaded: tuple[str, ...]
    failures: tuple[SourceFailure, ...]
    record_count: int

    @property
    def ok(self) -> bool:
        return not self.failures


def ingest_files(
    paths: Iterable[str | Path],
    record_store: RecordStore,
    *,
    config: Optional[ReconcileConfig] = None,
) -> IngestResult:
    config = config or default_config()
    calendar = config.calendar()
    ordered = utils.order_sources(paths)
    if not ordered:
        raise IngestError("No files provided.")

    log.info("Loading %d file(s)", len(ordered))
    with ThreadPoolExecutor(max_workers=config.max_workers) as pool:
        futures = [
            (path, pool.submit(ingest.read_source, path, calendar=calendar))
            for path in ordered
        ]

        # fan-in in file-name order so later exports win the merge
        frames = []
        loaded: list[str] = []
        failures: list[SourceFailure] = []
        for path, future in futures:
            try:
                frames.append(future.result())
            except (MalformedSourceError, InvalidInputError) as exc:
                log.warning("Skipping %s: %s", path.name, exc)
                failures.append(SourceFailure(path.name, str(exc)))
                continue
            except OSError as exc:
                raise IngestError(f"Failed to read {path.name}: {exc}") from exc
            loaded.append(path.name)

    try:
        existing = record_store.get_all()
        merged = clean.merge_series([existing, *frames])
        if frames:
            record_store.put_all(merged)
    except StoreError as exc:
        raise IngestError(f"Record store unavailable: {exc}") from exc

    log.info(
        "Merged %d file(s) into %d records (%d failed)",
        len(loaded),
        len(merged),
        len(failures),
    )
    return IngestResult(
        store=rebuild(merged, config=config),
        loaded=tuple(loaded),
        failures=tuple(failures),
        record_count=len(merged),
    )


def load(
    record_store: RecordStore, *, config: Optional[ReconcileConfig] = None
) -> TimeSeriesStore:
    """Rebuild views from whatever is already persisted."""
    return rebuild(record_store.get_all(), config=config)


def clear(
    record_store: RecordStore, *, config: Optional[ReconcileConfig] = None
) -> TimeSeriesStore:
    record_store.clear()
    log.info("Cleared stored records")
    return empty_store(config)
