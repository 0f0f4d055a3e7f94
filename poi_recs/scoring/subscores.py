"""
Sub-score calculators shared across categories.

Every calculator is a frozen dataclass called as ``calc(candidate, context)``
and returns a value in [0, 1]. Category-specific parameters live on the
instance; see ``categories.py`` for the configured instances.
"""
from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from ..geo.distance import distance_meters
from .models import (
    Budget,
    Candidate,
    CrowdPreference,
    Interest,
    OpeningPeriod,
    PriceLevel,
    RatingTier,
    ReviewCountTier,
    ScoringContext,
    StartTime,
    TransportMode,
    TripPhase,
)
from .tables import (
    BUDGET_TARGET_ORDINAL,
    FIXED_INTENSITY_BY_ENERGY,
    INTENSITY_BUCKETS,
    POPULARITY_BY_REVIEW_TIER,
    PRESTIGE_TYPES,
    PRICE_ORDINAL,
    REVIEW_QUALITY_BY_RATING_TIER,
    START_TIME_FALLBACK,
    START_TIME_TIERS,
    TOO_EARLY_OPENING_HOUR,
    WALKING_ACCESS_TIERS,
    expand_interests,
    max_duration_for_energy,
)

SubScore = Callable[[Candidate, ScoringContext], float]


def clamp_unit(value: float) -> float:
    return min(1.0, max(0.0, value))


def crowd_alignment(
    candidate: Candidate,
    crowd_preference: CrowdPreference | None,
    weight: float = 0.3,
    neutral: float = 0.15,
) -> float:
    """Reward busy places for crowd-seekers and quiet ones for the crowd-averse."""
    popularity = POPULARITY_BY_REVIEW_TIER[candidate.review_count_tier]
    if crowd_preference is CrowdPreference.popular:
        return weight * popularity
    if crowd_preference is CrowdPreference.hidden:
        return weight * (1 - popularity)
    return neutral


# ── Prestige ─────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class PrestigeScore:
    must_see: float = 0.6
    tourist_attraction: float = 0.3
    landmark_bonus: float = 0.2
    acclaim_bonus: float = 0.2

    def __call__(self, candidate: Candidate, context: ScoringContext) -> float:
        score = 0.0
        if candidate.is_must_see:
            score += self.must_see
        if candidate.is_tourist_attraction:
            score += self.tourist_attraction
        if candidate.place_types & PRESTIGE_TYPES:
            score += self.landmark_bonus
        if (
            candidate.rating_tier is RatingTier.EXCEPTIONAL
            and candidate.review_count_tier is ReviewCountTier.VERY_HIGH
        ):
            score += self.acclaim_bonus
        return clamp_unit(score)


@dataclass(frozen=True)
class TierCreditScore:
    """Additive credit for rating tier, review volume and curation flags.

    Used for the quality dimensions and for tier-driven must-see scoring.
    ``scale`` divides the raw sum, for tables expressed in points.
    """

    rating_credit: Mapping[RatingTier, float]
    review_credit: Mapping[ReviewCountTier, float]
    must_see: float = 0.0
    tourist_attraction: float = 0.0
    scale: float = 1.0

    def __call__(self, candidate: Candidate, context: ScoringContext) -> float:
        score = self.rating_credit.get(candidate.rating_tier, 0.0)
        score += self.review_credit.get(candidate.review_count_tier, 0.0)
        if candidate.is_must_see:
            score += self.must_see
        if candidate.is_tourist_attraction:
            score += self.tourist_attraction
        return clamp_unit(score / self.scale)


# ── Interest ─────────────────────────────────────────────────────────────


def _default_rating_boosts() -> dict[RatingTier, float]:
    return {RatingTier.HIGH: 0.1, RatingTier.EXCEPTIONAL: 0.2}


@dataclass(frozen=True)
class InterestMatchScore:
    """Share of the interest-derived place types that the candidate carries.

    Matches earn a rating-tier boost. ``crowd_boost`` rewards very popular
    places for crowd-seekers and little-reviewed ones for the crowd-averse;
    ``type_boosts`` are (place type, interest, bonus) triples.
    """

    table: Mapping[Interest, frozenset[str]]
    always_include: frozenset[str] = frozenset()
    rating_boosts: Mapping[RatingTier, float] = field(default_factory=_default_rating_boosts)
    crowd_boost: float = 0.0
    type_boosts: tuple[tuple[str, Interest, float], ...] = ()

    def __call__(self, candidate: Candidate, context: ScoringContext) -> float:
        relevant = expand_interests(context.interests, self.table, self.always_include)
        matches = candidate.place_types & relevant

        score = len(matches) / max(len(relevant), 1)
        if matches:
            score += self.rating_boosts.get(candidate.rating_tier, 0.0)

        if self.crowd_boost:
            crowd = context.crowd_preference
            tier = candidate.review_count_tier
            if (crowd is CrowdPreference.popular and tier is ReviewCountTier.VERY_HIGH) or (
                crowd is CrowdPreference.hidden and tier is ReviewCountTier.LOW
            ):
                score += self.crowd_boost

        for place_type, interest, bonus in self.type_boosts:
            if place_type in candidate.place_types and interest in context.interests:
                score += bonus

        return clamp_unit(score)


# ── Activity fit ─────────────────────────────────────────────────────────


class IntensityMode(str, Enum):
    buckets = "buckets"
    duration = "duration"
    fixed = "fixed"


def activity_intensity(place_types: frozenset[str]) -> float:
    """Weighted mean intensity of the candidate's bucketed place types, 0 when none are bucketed."""
    weighted = 0.0
    count = 0
    for bucket, value in INTENSITY_BUCKETS:
        hits = len(place_types & bucket)
        weighted += hits * value
        count += hits
    return weighted / (count or 1)


@dataclass(frozen=True)
class ActivityFitScore:
    """Intensity alignment (<= 0.4) + review quality or walking access (<= 0.3) + crowd alignment (<= 0.3)."""

    intensity: IntensityMode = IntensityMode.buckets
    walking_access: bool = False

    def __call__(self, candidate: Candidate, context: ScoringContext) -> float:
        score = self._intensity_part(candidate, context)
        if self.walking_access:
            score += self._walking_part(candidate, context)
        else:
            score += REVIEW_QUALITY_BY_RATING_TIER.get(candidate.rating_tier, 0.0)
        score += crowd_alignment(candidate, context.crowd_preference)
        return clamp_unit(score)

    def _intensity_part(self, candidate: Candidate, context: ScoringContext) -> float:
        energy = context.energy_level

        if self.intensity is IntensityMode.duration:
            ratio = candidate.duration / max_duration_for_energy(energy)
            return max(0.0, 0.4 * (1 - abs(1 - ratio)))

        if energy is None:
            return 0.0
        if self.intensity is IntensityMode.fixed:
            return FIXED_INTENSITY_BY_ENERGY[energy]

        level = activity_intensity(candidate.place_types)
        if energy == 1:
            return 0.4 * (1 - level)
        if energy == 2:
            return 0.4 * (1 - abs(0.5 - level))
        return 0.4 * level

    @staticmethod
    def _walking_part(candidate: Candidate, context: ScoringContext) -> float:
        reference = context.reference_point
        if TransportMode.walking not in context.transport_preferences or reference is None:
            return 0.2
        distance = distance_meters(
            reference.lat, reference.lng, candidate.location.lat, candidate.location.lng
        )
        for limit, value in WALKING_ACCESS_TIERS:
            if distance <= limit:
                return value
        return 0.0


# ── Price ────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class PriceFitScore:
    """Budget containment bonus plus an alignment term on the price ordinal.

    FREE candidates short-circuit to ``free_for_budget`` / ``free_otherwise``
    unless those are None. Without a containment match the score starts from
    ``mismatch_score``. With ``use_price_preference`` the alignment target is
    the context's explicit price preference when one is given.
    """

    tiers: Mapping[Budget, frozenset[PriceLevel]]
    match_bonus: float = 0.6
    mismatch_score: float = 0.0
    alignment: float = 0.4
    alignment_step: float = 0.1
    free_for_budget: float | None = 1.0
    free_otherwise: float | None = 0.8
    exceptional_bonus: float = 0.0
    use_price_preference: bool = False

    def __call__(self, candidate: Candidate, context: ScoringContext) -> float:
        is_budget = context.budget is Budget.budget
        if candidate.price_level is PriceLevel.FREE and self.free_for_budget is not None:
            return clamp_unit(self.free_for_budget if is_budget else self.free_otherwise)

        matched = candidate.price_level in self.tiers[context.budget]
        score = self.match_bonus if matched else self.mismatch_score
        if matched and candidate.rating_tier is RatingTier.EXCEPTIONAL:
            score += self.exceptional_bonus

        if self.alignment:
            target = BUDGET_TARGET_ORDINAL[context.budget]
            if self.use_price_preference and context.price_preference is not None:
                target = context.price_preference
            diff = abs(PRICE_ORDINAL[candidate.price_level] - target)
            score += max(0.0, self.alignment - diff * self.alignment_step)

        return clamp_unit(score)


# ── Time ─────────────────────────────────────────────────────────────────


def _as_utc(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def _open_span_hours(period: OpeningPeriod) -> int:
    open_hour = period.open.hour
    close_hour = period.close.hour
    if close_hour >= open_hour:
        return close_hour - open_hour
    return 24 - open_hour + close_hour


def start_time_fit(start_time: StartTime, earliest_opening: int) -> float:
    score = START_TIME_FALLBACK[start_time]
    for limit, value in START_TIME_TIERS[start_time]:
        if earliest_opening <= limit:
            score = value
            break
    too_early = TOO_EARLY_OPENING_HOUR.get(start_time)
    if too_early is not None and earliest_opening <= too_early:
        score *= 0.9
    return score


@dataclass(frozen=True)
class TimeFitScore:
    long_hours: int = 8
    long_hours_bonus: float = 0.1
    neutral: float = 0.5

    def __call__(self, candidate: Candidate, context: ScoringContext) -> float:
        hours = candidate.opening_hours
        if context.preferred_start_time is None or hours is None:
            return self.neutral

        active = context.phase is TripPhase.active
        if active and hours.open_now is False:
            return 0.0

        periods = [p for p in hours.periods if p.is_valid]
        if not periods:
            return self.neutral

        earliest = min(p.open.hour for p in periods)
        score = start_time_fit(context.preferred_start_time, earliest)
        if any(_open_span_hours(p) >= self.long_hours for p in periods):
            score = min(1.0, score + self.long_hours_bonus)

        if active and hours.next_close_time is not None and context.reference_time is not None:
            remaining = _as_utc(hours.next_close_time) - _as_utc(context.reference_time)
            hours_left = remaining.total_seconds() / 3600
            if hours_left < 1:
                score *= 0.5
            elif hours_left < 2:
                score *= 0.8

        return clamp_unit(score)
