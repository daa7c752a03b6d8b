from . import (
    canon,
    civil,
    exceptions,
    types,
    utils,
    ingest,
    validate,
    clean,
    transform,
    config,
    store,
    persist,
    pipeline,
    summary,
)

__all__ = [
    "canon",
    "civil",
    "exceptions",
    "types",
    "utils",
    "ingest",
    "validate",
    "clean",
    "transform",
    "config",
    "store",
    "persist",
    "pipeline",
    "summary",
]
