from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from ..scoring.engine import DEFAULT_MAX_PAGE_SIZE

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")

_SAMPLE_CATALOG = Path(__file__).resolve().parent.parent / "data" / "sample_catalog.jsonl"


@dataclass(frozen=True)
class CatalogConfig:
    catalog_path: Path = Path(os.getenv("POI_CATALOG_PATH", str(_SAMPLE_CATALOG)))
    max_page_size: int = int(os.getenv("POI_MAX_PAGE_SIZE", str(DEFAULT_MAX_PAGE_SIZE)))


DEFAULT_CATALOG_CONFIG = CatalogConfig()
