from __future__ import annotations

import logging

from fastapi import Depends, FastAPI, HTTPException

from .recommendations.models import CategoryInfo, ScoringRequest
from .recommendations.provider import (
    CandidateProvider,
    CandidateProviderError,
    CatalogCandidateProvider,
)
from .recommendations.service import describe_categories, get_recommendations
from .scoring.models import Page, ScoredCandidate

logger = logging.getLogger(__name__)

app = FastAPI(title="POI Recommendation API", version="1.0.0")


def get_candidate_provider() -> CandidateProvider:
    return CatalogCandidateProvider()


# ── Public endpoints ─────────────────────────────────────────────────────


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/categories", response_model=list[CategoryInfo])
def categories() -> list[CategoryInfo]:
    return describe_categories()


@app.post("/recommendations", response_model=Page | list[ScoredCandidate])
async def recommendations(
    body: ScoringRequest,
    provider: CandidateProvider = Depends(get_candidate_provider),
) -> Page | list[ScoredCandidate]:
    try:
        return await get_recommendations(body, provider)
    except CandidateProviderError as exc:
        logger.error("Recommendations unavailable for %s/%s: %s", body.city_id, body.category.value, exc)
        raise HTTPException(status_code=502, detail=str(exc)) from exc
