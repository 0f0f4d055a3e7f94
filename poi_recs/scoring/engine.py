from __future__ import annotations

from collections.abc import Iterable

from ..geo.clusters import build_activity_clusters
from .categories import CategoryConfig, OutputMode
from .models import (
    ActivityClusterContext,
    Candidate,
    Page,
    PaginationParams,
    ScoredCandidate,
    ScoringContext,
    TripPhase,
)
from .ranking import clamp_page_size, dedupe_by_name, filter_and_sort, paginate, top_n
from .weights import compute_weight_profile

DEFAULT_MAX_PAGE_SIZE = 100


class WeightedScorer:
    """Scores and ranks one category's candidates against a traveller's context.

    The scorer holds no per-request state; a single instance per category can
    serve any number of concurrent requests.
    """

    def __init__(self, config: CategoryConfig) -> None:
        self.config = config

    def prepare_context(self, context: ScoringContext) -> ScoringContext:
        """Derive activity clusters from the itinerary while planning.

        Clusters only replace the caller's when the context is cluster based,
        the trip is still being planned and activities have been selected.
        """
        location_context = context.location_context
        if (
            isinstance(location_context, ActivityClusterContext)
            and context.phase is TripPhase.planning
            and context.selected_activities
        ):
            clusters = build_activity_clusters(context.selected_activities, self.config.cluster_spec)
            derived = location_context.model_copy(update={"clusters": clusters})
            return context.model_copy(update={"location_context": derived})
        return context

    def weights_for(self, context: ScoringContext) -> dict[str, float]:
        return compute_weight_profile(
            self.config.base_weights,
            self.config.weight_rules,
            context,
            renormalize=self.config.renormalize_weights,
        )

    def score(
        self, candidate: Candidate, context: ScoringContext, weights: dict[str, float]
    ) -> ScoredCandidate:
        sub_scores = {dim: calc(candidate, context) for dim, calc in self.config.calculators.items()}
        total = sum(sub_scores[dim] * weight for dim, weight in weights.items())
        return ScoredCandidate(candidate=candidate, score=total, sub_scores=sub_scores)

    def score_all(self, candidates: Iterable[Candidate], context: ScoringContext) -> list[ScoredCandidate]:
        """Score every candidate with one weight profile; no filtering or ordering."""
        context = self.prepare_context(context)
        if self.config.dedupe_by_name:
            candidates = dedupe_by_name(candidates)
        weights = self.weights_for(context)
        return [self.score(candidate, context, weights) for candidate in candidates]

    def rank(
        self,
        candidates: Iterable[Candidate],
        context: ScoringContext,
        pagination: PaginationParams | None = None,
        max_page_size: int = DEFAULT_MAX_PAGE_SIZE,
    ) -> Page | list[ScoredCandidate]:
        ranked = filter_and_sort(self.score_all(candidates, context), self.config.threshold)

        if self.config.output_mode is OutputMode.top_n:
            return top_n(ranked, self.config.top_n)

        pagination = pagination or PaginationParams()
        page_size = clamp_page_size(pagination.page_size, self.config.default_page_size, max_page_size)
        return paginate(ranked, pagination.page, page_size)
