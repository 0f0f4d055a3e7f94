from __future__ import annotations

import asyncio
import logging
import math
from collections.abc import Callable
from typing import Any, Protocol

import pandas as pd

from ..scoring.categories import CandidateQuery
from ..scoring.models import (
    BusinessStatus,
    Candidate,
    RatingTier,
    ReviewCountTier,
    ScoringContext,
)
from ..scoring.tables import (
    NON_VEGETARIAN_RESTAURANT_TYPES,
    VEGETARIAN_RESTAURANT_TYPES,
    expand_interests,
    max_duration_for_energy,
)
from .data_store import get_dataframe

logger = logging.getLogger(__name__)

_RATING_RANK = {tier.value: rank for rank, tier in enumerate(RatingTier)}
_REVIEW_RANK = {tier.value: rank for rank, tier in enumerate(ReviewCountTier)}


class CandidateProviderError(RuntimeError):
    """Candidates could not be fetched. There is no fallback source."""


class CandidateProvider(Protocol):
    async def fetch(
        self, city_id: str, query: CandidateQuery, context: ScoringContext
    ) -> list[Candidate]:
        ...


def _is_missing(value: Any) -> bool:
    return value is None or (isinstance(value, float) and math.isnan(value))


def _to_candidate(record: dict[str, Any]) -> Candidate:
    fields = {
        key: value
        for key, value in record.items()
        if key in Candidate.model_fields and not _is_missing(value)
    }
    return Candidate.model_validate(fields)


def _wants_vegetarian(context: ScoringContext) -> bool:
    return "vegetarian" in {restriction.lower() for restriction in context.dietary_restrictions}


class CatalogCandidateProvider:
    """Serves candidates from the in-memory catalog DataFrame."""

    def __init__(self, loader: Callable[[], pd.DataFrame] = get_dataframe) -> None:
        self._loader = loader

    async def fetch(
        self, city_id: str, query: CandidateQuery, context: ScoringContext
    ) -> list[Candidate]:
        try:
            return await asyncio.to_thread(self.select, city_id, query, context)
        except (OSError, ValueError, KeyError) as exc:
            logger.warning(
                "Candidate query %r failed for city %s", query.name, city_id, exc_info=True
            )
            raise CandidateProviderError(f"Could not load {query.name!r} candidates for {city_id}") from exc

    def select(self, city_id: str, query: CandidateQuery, context: ScoringContext) -> list[Candidate]:
        df = self._loader()

        mask = (df["city_id"] == city_id) & (
            df["business_status"] == BusinessStatus.OPERATIONAL.value
        )

        # --- Allow-lists: any one qualifies ---
        include = set(query.include_types)
        if query.interest_table is not None:
            include |= expand_interests(context.interests, query.interest_table)

        eligible = pd.Series(False, index=df.index)
        if include:
            eligible = eligible | df["type_set"].apply(lambda types: bool(types & include))
        if query.primary_types:
            eligible = eligible | df["primary_type"].isin(list(query.primary_types))
        if query.match_flags:
            eligible = eligible | df["is_must_see"] | df["is_tourist_attraction"]
        if query.must_see_types:
            must_see_types = query.must_see_types
            eligible = eligible | (
                df["is_must_see"] & df["type_set"].apply(lambda types: bool(types & must_see_types))
            )
        mask = mask & eligible

        # --- Deny-lists and minimums ---
        if query.exclude_types:
            excluded = query.exclude_types
            mask = mask & ~df["type_set"].apply(lambda types: bool(types & excluded))

        if query.seasonal is not None:
            mask = mask & (df["seasonal_availability"] == query.seasonal.value)

        if query.min_review_count is not None:
            mask = mask & (df["review_count"] >= query.min_review_count)

        if query.min_rating is not None:
            mask = mask & (df["rating"] >= query.min_rating)

        if query.review_tiers:
            mask = mask & df["review_count_tier"].isin([tier.value for tier in query.review_tiers])

        if query.cap_duration_by_energy:
            mask = mask & (df["duration"] <= max_duration_for_energy(context.energy_level))

        if query.respect_vegetarian and _wants_vegetarian(context):
            mask = mask & df["type_set"].apply(
                lambda types: bool(types & VEGETARIAN_RESTAURANT_TYPES)
                and not types & NON_VEGETARIAN_RESTAURANT_TYPES
            )

        rows = df.loc[mask]
        if query.order_by_tiers:
            rows = rows.assign(
                _rating_rank=rows["rating_tier"].map(_RATING_RANK),
                _review_rank=rows["review_count_tier"].map(_REVIEW_RANK),
            ).sort_values(["_rating_rank", "_review_rank", "id"], ascending=[False, False, True])
        else:
            rows = rows.sort_values("id")

        if query.limit is not None:
            rows = rows.head(query.limit)

        return [_to_candidate(record) for record in rows.to_dict("records")]
