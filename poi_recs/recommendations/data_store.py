from __future__ import annotations

import threading
from pathlib import Path

import pandas as pd

from .config import DEFAULT_CATALOG_CONFIG

_df: pd.DataFrame | None = None
_load_lock = threading.Lock()


def load_catalog(path: Path) -> pd.DataFrame:
    """Read a JSON-lines candidate catalog and add the helper columns the provider filters on."""
    df = pd.read_json(path, lines=True, dtype={"id": str, "city_id": str}, convert_dates=False)

    df["place_types"] = df["place_types"].apply(
        lambda types: list(types) if isinstance(types, list) else []
    )
    # Sets for fast intersection tests in the filters
    df["type_set"] = df["place_types"].apply(frozenset)

    for flag in ("is_must_see", "is_tourist_attraction"):
        df[flag] = df[flag].fillna(False).astype(bool) if flag in df else False

    if "review_count" not in df:
        df["review_count"] = 0
    df["review_count"] = df["review_count"].fillna(0).astype(int)
    if "duration" not in df:
        df["duration"] = 60
    df["duration"] = df["duration"].fillna(60)

    return df


def get_dataframe() -> pd.DataFrame:
    """Return the in-memory candidate DataFrame, loading it on first call."""
    global _df
    if _df is None:
        # Concurrent queries land here from worker threads
        with _load_lock:
            if _df is None:
                _df = load_catalog(DEFAULT_CATALOG_CONFIG.catalog_path)
    return _df
