from __future__ import annotations

import asyncio
import logging
import time
from datetime import datetime, timezone

from ..scoring.categories import CATEGORY_CONFIGS, CategoryConfig, OutputMode, get_category_config
from ..scoring.engine import WeightedScorer
from ..scoring.models import Candidate, Page, ScoredCandidate, ScoringContext
from ..scoring.tables import TABLES_VERSION
from .config import DEFAULT_CATALOG_CONFIG, CatalogConfig
from .models import CategoryInfo, ScoringRequest
from .provider import CandidateProvider

logger = logging.getLogger(__name__)


async def fetch_candidates(
    provider: CandidateProvider,
    city_id: str,
    config: CategoryConfig,
    context: ScoringContext,
) -> list[Candidate]:
    """Run the category's queries concurrently and concatenate the results, first one wins on duplicates."""
    batches = await asyncio.gather(
        *(provider.fetch(city_id, query, context) for query in config.queries)
    )

    seen: set[str] = set()
    candidates: list[Candidate] = []
    for batch in batches:
        for candidate in batch:
            if candidate.id not in seen:
                seen.add(candidate.id)
                candidates.append(candidate)
    return candidates


async def get_recommendations(
    request: ScoringRequest,
    provider: CandidateProvider,
    catalog_config: CatalogConfig = DEFAULT_CATALOG_CONFIG,
) -> Page | list[ScoredCandidate]:
    start_time = time.time()
    config = get_category_config(request.category)

    context = request.context
    if context.reference_time is None:
        context = context.model_copy(update={"reference_time": datetime.now(timezone.utc)})

    candidates = await fetch_candidates(provider, request.city_id, config, context)

    result = WeightedScorer(config).rank(
        candidates,
        context,
        request.pagination,
        max_page_size=catalog_config.max_page_size,
    )

    returned = len(result.items) if isinstance(result, Page) else len(result)
    elapsed_ms = round((time.time() - start_time) * 1000, 1)
    logger.info(
        "Scored %s for city %s: %d candidates, %d returned in %.1f ms",
        config.category.value,
        request.city_id,
        len(candidates),
        returned,
        elapsed_ms,
    )
    return result


def describe_categories() -> list[CategoryInfo]:
    infos: list[CategoryInfo] = []
    for config in CATEGORY_CONFIGS.values():
        paged = config.output_mode is OutputMode.paged
        infos.append(CategoryInfo(
            category=config.category,
            output_mode=config.output_mode,
            threshold=config.threshold,
            default_page_size=config.default_page_size if paged else None,
            top_n=None if paged else config.top_n,
            base_weights=dict(config.base_weights),
            tables_version=TABLES_VERSION,
        ))
    return infos
