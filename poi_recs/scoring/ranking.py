from __future__ import annotations

import math
from collections.abc import Iterable, Sequence

from .models import Candidate, Page, ReviewCountTier, ScoredCandidate


def filter_and_sort(scored: Iterable[ScoredCandidate], threshold: float) -> list[ScoredCandidate]:
    """Drop scores at or below ``threshold``; best first, ties broken by candidate id."""
    kept = [item for item in scored if item.score > threshold]
    return sorted(kept, key=lambda item: (-item.score, item.candidate.id))


def top_n(ranked: Sequence[ScoredCandidate], n: int) -> list[ScoredCandidate]:
    return list(ranked[:n])


def paginate(ranked: Sequence[ScoredCandidate], page: int, page_size: int) -> Page:
    """Slice one page out of a ranked list, clamping ``page`` into range."""
    total = len(ranked)
    total_pages = max(1, math.ceil(total / page_size))
    safe_page = min(max(1, page), total_pages)

    start = (safe_page - 1) * page_size
    return Page(
        items=list(ranked[start:start + page_size]),
        total=total,
        page=safe_page,
        page_size=page_size,
        total_pages=total_pages,
        has_next_page=safe_page < total_pages,
        has_previous_page=safe_page > 1,
    )


def clamp_page_size(requested: int | None, default: int, maximum: int) -> int:
    size = requested if requested is not None else default
    return min(max(1, size), maximum)


def _branch_strength(candidate: Candidate) -> float:
    boost = 1.2 if candidate.review_count_tier is ReviewCountTier.VERY_HIGH else 1.0
    return candidate.rating * boost


def dedupe_by_name(candidates: Iterable[Candidate]) -> list[Candidate]:
    """Keep the strongest branch of each chain, in first-seen name order."""
    best: dict[str, Candidate] = {}
    for candidate in candidates:
        current = best.get(candidate.name)
        if current is None or _branch_strength(candidate) > _branch_strength(current):
            best[candidate.name] = candidate
    return list(best.values())
