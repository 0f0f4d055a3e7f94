"""Calculators that only make sense for one or two categories."""
from __future__ import annotations

from dataclasses import dataclass

from ..geo.distance import distance_meters
from .models import (
    Candidate,
    CrowdPreference,
    EnergyLevel,
    Interest,
    PriceLevel,
    RatingTier,
    ReviewCountTier,
    ScoringContext,
)
from .subscores import clamp_unit
from .tables import (
    ARCHITECTURAL_INDICATORS,
    CULTURAL_INDICATORS,
    HISTORIC_TYPES,
    RELIGIOUS_TYPES,
    TIME_PERIOD_INDICATORS,
)


def _description(candidate: Candidate) -> str:
    return (candidate.description or "").lower()


def _count_indicators(text: str, indicators: tuple[str, ...]) -> int:
    return sum(1 for indicator in indicators if indicator in text)


# ── Popularity variants ──────────────────────────────────────────────────

_CROWD_MATRIX: dict[ReviewCountTier, dict[CrowdPreference, float]] = {
    ReviewCountTier.VERY_HIGH: {CrowdPreference.popular: 1.0, CrowdPreference.mixed: 0.6, CrowdPreference.hidden: 0.3},
    ReviewCountTier.HIGH: {CrowdPreference.popular: 0.8, CrowdPreference.mixed: 0.7, CrowdPreference.hidden: 0.5},
    ReviewCountTier.MODERATE: {CrowdPreference.popular: 0.6, CrowdPreference.mixed: 0.7, CrowdPreference.hidden: 0.8},
    ReviewCountTier.LOW: {CrowdPreference.popular: 0.4, CrowdPreference.mixed: 0.6, CrowdPreference.hidden: 1.0},
}


@dataclass(frozen=True)
class CrowdMatrixScore:
    """Look up review volume against crowd preference; neutral without a preference."""

    neutral: float = 0.5

    def __call__(self, candidate: Candidate, context: ScoringContext) -> float:
        if context.crowd_preference is None:
            return self.neutral
        return _CROWD_MATRIX[candidate.review_count_tier][context.crowd_preference]


@dataclass(frozen=True)
class AcclaimScore:
    """Acclaim from rating and review tiers, inverted for hidden-gem seekers.

    Mixed (or unstated) crowd preferences halve the distance from 0.5.
    """

    def __call__(self, candidate: Candidate, context: ScoringContext) -> float:
        reviews = candidate.review_count_tier
        rating = candidate.rating_tier
        if reviews is ReviewCountTier.VERY_HIGH and rating is RatingTier.EXCEPTIONAL:
            score = 1.0
        elif reviews is ReviewCountTier.HIGH or (
            reviews is ReviewCountTier.MODERATE and rating is RatingTier.HIGH
        ):
            score = 0.8
        elif reviews is ReviewCountTier.MODERATE:
            score = 0.6
        else:
            score = 0.4

        crowd = context.crowd_preference
        if crowd is CrowdPreference.hidden:
            score = 1 - score
        elif crowd is not CrowdPreference.popular:
            score = 0.5 + (score - 0.5) * 0.5
        return clamp_unit(score)


_REVIEW_VOLUME_CREDIT = {ReviewCountTier.VERY_HIGH: 0.5, ReviewCountTier.HIGH: 0.3}


@dataclass(frozen=True)
class RatingPopularityScore:
    rating_bands: tuple[tuple[float, float], ...] = ((4.5, 0.5), (4.2, 0.3), (4.0, 0.1))

    def __call__(self, candidate: Candidate, context: ScoringContext) -> float:
        score = 0.0
        for minimum, credit in self.rating_bands:
            if candidate.rating >= minimum:
                score += credit
                break
        score += _REVIEW_VOLUME_CREDIT.get(candidate.review_count_tier, 0.0)
        return clamp_unit(score)


# ── Nightlife ────────────────────────────────────────────────────────────

_VENUE_INTEREST_CREDIT: tuple[tuple[Interest, str, float], ...] = (
    (Interest.entertainment, "comedy_club", 0.4),
    (Interest.entertainment, "karaoke", 0.3),
    (Interest.entertainment, "casino", 0.3),
    (Interest.food, "wine_bar", 0.4),
    (Interest.food, "pub", 0.3),
    # historic pubs
    (Interest.history, "pub", 0.3),
)
_CORE_VENUE_CREDIT: tuple[tuple[str, float], ...] = (("night_club", 0.3), ("bar", 0.3))


@dataclass(frozen=True)
class VenueTypeScore:
    def __call__(self, candidate: Candidate, context: ScoringContext) -> float:
        types = candidate.place_types
        score = sum(
            credit for interest, place_type, credit in _VENUE_INTEREST_CREDIT
            if interest in context.interests and place_type in types
        )
        score += sum(credit for place_type, credit in _CORE_VENUE_CREDIT if place_type in types)
        return clamp_unit(score)


_HIGH_ENERGY_VENUES = frozenset({"night_club", "casino"})
_MEDIUM_ENERGY_VENUES = frozenset({"karaoke", "bar"})
_LOW_ENERGY_VENUES = frozenset({"wine_bar", "pub"})


@dataclass(frozen=True)
class AtmosphereScore:
    """Venue energy against the traveller's energy, plus rating; flat 0.3 with no energy level."""

    neutral: float = 0.3

    def __call__(self, candidate: Candidate, context: ScoringContext) -> float:
        energy = context.energy_level
        if energy is None:
            return self.neutral

        types = candidate.place_types
        high = bool(types & _HIGH_ENERGY_VENUES)
        medium = bool(types & _MEDIUM_ENERGY_VENUES)
        low = bool(types & _LOW_ENERGY_VENUES)

        score = 0.0
        if energy is EnergyLevel.light:
            score += 0.4 if low else 0.0
            score += 0.2 if medium else 0.0
        elif energy is EnergyLevel.moderate:
            score += 0.4 if medium else 0.0
            score += 0.2 if (low or high) else 0.0
        else:
            score += 0.4 if high else 0.0
            score += 0.2 if medium else 0.0

        if candidate.rating_tier is RatingTier.EXCEPTIONAL:
            score += 0.3
        elif candidate.rating_tier is RatingTier.HIGH:
            score += 0.2
        elif candidate.rating_tier is RatingTier.AVERAGE:
            score += 0.1
        return clamp_unit(score)


# ── Historic sites ───────────────────────────────────────────────────────


@dataclass(frozen=True)
class HistoricSignificanceScore:
    def __call__(self, candidate: Candidate, context: ScoringContext) -> float:
        score = 0.3 * len(candidate.place_types & HISTORIC_TYPES)
        score += 0.2 * len(candidate.place_types & RELIGIOUS_TYPES)

        text = _description(candidate)
        if text:
            score += 0.1 * _count_indicators(text, TIME_PERIOD_INDICATORS)
            score += 0.1 * _count_indicators(text, ARCHITECTURAL_INDICATORS)
            score += 0.1 * _count_indicators(text, CULTURAL_INDICATORS)

        if candidate.is_must_see:
            score += 0.2
        if (
            candidate.rating_tier is RatingTier.EXCEPTIONAL
            and candidate.review_count_tier is ReviewCountTier.VERY_HIGH
        ):
            score += 0.2
        return clamp_unit(score)


@dataclass(frozen=True)
class CulturalRelevanceScore:
    def __call__(self, candidate: Candidate, context: ScoringContext) -> float:
        score = 0.2 * _count_indicators(_description(candidate), CULTURAL_INDICATORS)
        if candidate.is_tourist_attraction:
            score += 0.3
        score += {RatingTier.EXCEPTIONAL: 0.3, RatingTier.HIGH: 0.2}.get(candidate.rating_tier, 0.0)
        score += {ReviewCountTier.VERY_HIGH: 0.2, ReviewCountTier.HIGH: 0.1}.get(
            candidate.review_count_tier, 0.0
        )
        return clamp_unit(score)


_STRENUOUS_SITE_TYPES = frozenset({"archaeological_site", "castle"})


@dataclass(frozen=True)
class AccessibilityScore:
    """How comfortably the traveller can take in a site, starting from neutral 0.5."""

    def __call__(self, candidate: Candidate, context: ScoringContext) -> float:
        score = 0.5
        energy = context.energy_level
        strenuous = bool(candidate.place_types & _STRENUOUS_SITE_TYPES) or (
            _count_indicators(_description(candidate), ARCHITECTURAL_INDICATORS) > 0
        )
        if strenuous:
            if energy is EnergyLevel.active:
                score += 0.3
            elif energy is EnergyLevel.moderate:
                score += 0.1
            else:
                score -= 0.1
        else:
            score += 0.2 if energy is EnergyLevel.light else 0.1

        very_popular = candidate.review_count_tier is ReviewCountTier.VERY_HIGH
        if context.crowd_preference is CrowdPreference.hidden and not very_popular:
            score += 0.2
        elif context.crowd_preference is CrowdPreference.popular and very_popular:
            score += 0.2

        if candidate.location.neighborhood:
            score += 0.1
        return clamp_unit(score)


# ── Shopping ─────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class UpscaleScore:
    def __call__(self, candidate: Candidate, context: ScoringContext) -> float:
        score = {PriceLevel.VERY_EXPENSIVE: 0.4, PriceLevel.EXPENSIVE: 0.3}.get(candidate.price_level, 0.0)
        if candidate.is_tourist_attraction:
            score += 0.3
        if candidate.is_must_see:
            score += 0.3
        return clamp_unit(score)


@dataclass(frozen=True)
class VarietyScore:
    def __call__(self, candidate: Candidate, context: ScoringContext) -> float:
        types = candidate.place_types
        score = 0.0
        if "shopping_mall" in types:
            score += 0.7
        elif "department_store" in types:
            score += 0.5
        elif any("market" in place_type for place_type in types):
            score += 0.6

        neighborhood = (candidate.location.neighborhood or "").lower()
        if "shopping" in neighborhood:
            score += 0.3
        return clamp_unit(score)


# ── Spas ─────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class LuxuryScore:
    def __call__(self, candidate: Candidate, context: ScoringContext) -> float:
        score = {
            PriceLevel.VERY_EXPENSIVE: 0.4,
            PriceLevel.EXPENSIVE: 0.3,
            PriceLevel.MODERATE: 0.2,
        }.get(candidate.price_level, 0.0)
        types = candidate.place_types
        if "spa" in types:
            score += 0.3
        if "beauty_salon" in types:
            score += 0.2
        if "massage" in types:
            score += 0.2
        return clamp_unit(score)


@dataclass(frozen=True)
class EnergyAlignmentScore:
    """Closeness of the venue's intensity to the traveller's energy (unset counts as light)."""

    def __call__(self, candidate: Candidate, context: ScoringContext) -> float:
        types = candidate.place_types
        if types & {"gym", "fitness_center"}:
            intensity = 0.8
        elif types & {"yoga", "pilates"}:
            intensity = 0.5
        else:
            intensity = 0.2

        energy = int(context.energy_level or EnergyLevel.light)
        normalized = (energy - 1) / 2
        return clamp_unit(1 - abs(intensity - normalized))


# ── Restaurants ──────────────────────────────────────────────────────────


@dataclass(frozen=True)
class CuisineRelevanceScore:
    """Cuisine, diet and proximity relevance, on a 30 point scale normalised to [0, 1].

    Preferred cuisines earn 15 points and avoided ones cost 30. Matching a
    vegetarian or vegan diet earns 15 each. Proximity earns up to 15 points
    within 500 m of the traveller's current position.
    """

    points: float = 30.0
    proximity_meters: float = 500.0

    def __call__(self, candidate: Candidate, context: ScoringContext) -> float:
        types = candidate.place_types
        cuisine_types = [t for t in types if t.endswith("_restaurant")]
        score = 0.0

        if cuisine_types:
            preferred = [c.lower() for c in context.cuisine_preferences.preferred]
            avoided = [c.lower() for c in context.cuisine_preferences.avoided]
            if any(c in t for c in preferred for t in cuisine_types):
                score += 15
            if any(c in t for c in avoided for t in cuisine_types):
                score -= 30

        diet = {d.lower() for d in context.dietary_restrictions}
        if "vegetarian" in diet and "vegetarian_restaurant" in types:
            score += 15
        if "vegan" in diet and "vegan_restaurant" in types:
            score += 15

        location_context = context.location_context
        if location_context is not None and location_context.type == "current_location":
            reference = location_context.reference
            distance = distance_meters(
                reference.lat, reference.lng, candidate.location.lat, candidate.location.lng
            )
            score += min(15.0, max(0.0, 15 - distance / self.proximity_meters * 15))

        return clamp_unit(score / self.points)
