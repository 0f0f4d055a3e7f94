"""
Static lookup tables shared by the scoring calculators and the candidate provider.

Bump ``TABLES_VERSION`` whenever any table changes: cached client results and
offline evaluations are keyed on it.
"""
from __future__ import annotations

from .models import (
    Budget,
    EnergyLevel,
    Interest,
    PriceLevel,
    RatingTier,
    ReviewCountTier,
    StartTime,
    TransportMode,
)

TABLES_VERSION = "1.1"

# ── Place-type groups ────────────────────────────────────────────────────

PARK_TYPES = frozenset({
    "park", "national_park", "state_park", "garden", "botanical_garden", "hiking_area",
})
BEACH_TYPES = frozenset({"beach"})
MUSEUM_TYPES = frozenset({"museum", "art_gallery", "history_museum", "art_museum"})
HISTORIC_TYPES = frozenset({
    "historical_landmark", "historic_site", "monument", "castle",
    "archaeological_site", "cultural_landmark",
})
ATTRACTION_TYPES = frozenset({
    "tourist_attraction", "amusement_park", "aquarium", "zoo",
    "observation_deck", "landmark", "visitor_center",
})
NIGHTLIFE_TYPES = frozenset({
    "night_club", "bar", "pub", "wine_bar", "karaoke", "comedy_club", "casino",
})
RESTAURANT_TYPES = frozenset({"restaurant", "cafe", "meal_takeaway", "bakery"})
SHOPPING_TYPES = frozenset({
    "shopping_mall", "department_store", "market", "clothing_store",
    "book_store", "gift_shop", "jewelry_store",
})
SHOPPING_EXCLUDED_TYPES = frozenset({
    "gas_station", "convenience_store", "supermarket", "grocery_store", "pharmacy",
})
SPA_PRIMARY_TYPES = frozenset({"spa", "wellness_center", "sauna"})
RELIGIOUS_TYPES = frozenset({"church", "hindu_temple", "mosque", "synagogue"})
PRESTIGE_TYPES = frozenset({"landmark", "monument"})
ESSENTIAL_TYPES = frozenset({
    "tourist_attraction", "point_of_interest", "landmark", "monument", "museum",
})

VEGETARIAN_RESTAURANT_TYPES = frozenset({
    "vegetarian_restaurant", "vegan_restaurant", "indian_restaurant",
    "mediterranean_restaurant", "middle_eastern_restaurant",
})
NON_VEGETARIAN_RESTAURANT_TYPES = frozenset({
    "steak_house", "seafood_restaurant", "barbecue_restaurant", "sushi_restaurant",
})

# ── Interest expansion ───────────────────────────────────────────────────

INTEREST_PLACE_TYPES: dict[Interest, frozenset[str]] = {
    Interest.outdoors: PARK_TYPES | BEACH_TYPES,
    Interest.arts: MUSEUM_TYPES,
    Interest.history: HISTORIC_TYPES | MUSEUM_TYPES,
    Interest.entertainment: ATTRACTION_TYPES | NIGHTLIFE_TYPES,
    Interest.photography: ATTRACTION_TYPES | HISTORIC_TYPES | PARK_TYPES,
    Interest.food: RESTAURANT_TYPES,
}

# Sightseeing categories leave food and after-dark venues to their own categories.
SIGHTSEEING_INTEREST_PLACE_TYPES: dict[Interest, frozenset[str]] = {
    Interest.outdoors: PARK_TYPES | BEACH_TYPES,
    Interest.arts: MUSEUM_TYPES,
    Interest.history: HISTORIC_TYPES | MUSEUM_TYPES,
    Interest.entertainment: ATTRACTION_TYPES,
    Interest.photography: ATTRACTION_TYPES | HISTORIC_TYPES | PARK_TYPES,
}

# Museums only care about the interests a collection can serve.
MUSEUM_INTEREST_PLACE_TYPES: dict[Interest, frozenset[str]] = {
    Interest.arts: MUSEUM_TYPES,
    Interest.history: MUSEUM_TYPES,
    Interest.photography: frozenset({"art_gallery"}),
}

SIGHTSEEING_ALWAYS_INCLUDE = ATTRACTION_TYPES | HISTORIC_TYPES


def expand_interests(
    interests: frozenset[Interest] | set[Interest],
    table: dict[Interest, frozenset[str]] = INTEREST_PLACE_TYPES,
    always_include: frozenset[str] = frozenset(),
) -> frozenset[str]:
    """Return the place types relevant to a set of interests."""
    types: set[str] = set(always_include)
    for interest in interests:
        types |= table.get(interest, frozenset())
    return frozenset(types)


# ── Intensity ────────────────────────────────────────────────────────────

HIGH_INTENSITY_TYPES = frozenset({
    "hiking_trail", "hiking_area", "amusement_park", "zoo", "aquarium",
    "sports_complex", "beach", "national_park",
})
MODERATE_INTENSITY_TYPES = frozenset({"park", "garden", "tourist_attraction"})
LOW_INTENSITY_TYPES = frozenset({
    "museum", "art_gallery", "monument", "historic_site", "church", "temple",
    "observation_deck",
})
INTENSITY_BUCKETS: tuple[tuple[frozenset[str], float], ...] = (
    (HIGH_INTENSITY_TYPES, 1.0),
    (MODERATE_INTENSITY_TYPES, 0.6),
    (LOW_INTENSITY_TYPES, 0.3),
)

FIXED_INTENSITY_BY_ENERGY: dict[EnergyLevel, float] = {
    EnergyLevel.light: 0.4,
    EnergyLevel.moderate: 0.3,
    EnergyLevel.active: 0.2,
}

BASE_VISIT_MINUTES = 180
DURATION_MULTIPLIER_BY_ENERGY: dict[EnergyLevel, float] = {
    EnergyLevel.light: 0.7,
    EnergyLevel.moderate: 1.0,
    EnergyLevel.active: 1.3,
}


def max_duration_for_energy(energy_level: EnergyLevel | None) -> float:
    """Longest visit (minutes) that suits an energy level; no level means the moderate cap."""
    if energy_level is None:
        return float(BASE_VISIT_MINUTES)
    return BASE_VISIT_MINUTES * DURATION_MULTIPLIER_BY_ENERGY[energy_level]


# ── Price ────────────────────────────────────────────────────────────────

PRICE_ORDINAL: dict[PriceLevel, int] = {
    PriceLevel.UNSPECIFIED: 3,
    PriceLevel.FREE: 1,
    PriceLevel.INEXPENSIVE: 2,
    PriceLevel.MODERATE: 3,
    PriceLevel.EXPENSIVE: 4,
    PriceLevel.VERY_EXPENSIVE: 5,
}

BUDGET_TARGET_ORDINAL: dict[Budget, float] = {
    Budget.budget: 1.5,
    Budget.moderate: 3.0,
    Budget.luxury: 4.5,
}

BUDGET_PRICE_TIERS: dict[Budget, frozenset[PriceLevel]] = {
    Budget.budget: frozenset({PriceLevel.FREE, PriceLevel.INEXPENSIVE}),
    Budget.moderate: frozenset({PriceLevel.MODERATE}),
    Budget.luxury: frozenset({PriceLevel.EXPENSIVE, PriceLevel.VERY_EXPENSIVE}),
}

# Free entry is rare after dark, so a nightlife budget only matches cheap venues.
NIGHTLIFE_BUDGET_PRICE_TIERS: dict[Budget, frozenset[PriceLevel]] = {
    **BUDGET_PRICE_TIERS,
    Budget.budget: frozenset({PriceLevel.INEXPENSIVE}),
}

# ── Popularity and quality ───────────────────────────────────────────────

POPULARITY_BY_REVIEW_TIER: dict[ReviewCountTier, float] = {
    ReviewCountTier.VERY_HIGH: 1.0,
    ReviewCountTier.HIGH: 0.7,
    ReviewCountTier.MODERATE: 0.4,
    ReviewCountTier.LOW: 0.2,
}

REVIEW_QUALITY_BY_RATING_TIER: dict[RatingTier, float] = {
    RatingTier.EXCEPTIONAL: 0.3,
    RatingTier.HIGH: 0.2,
    RatingTier.AVERAGE: 0.1,
}

# ── Location ─────────────────────────────────────────────────────────────

DEFAULT_TRANSPORT_RANGE_METERS = 1000.0
TRANSPORT_RANGE_METERS: tuple[tuple[TransportMode, float], ...] = (
    (TransportMode.public_transit, 5000.0),
    (TransportMode.driving, 10000.0),
)

WALKING_ACCESS_TIERS: tuple[tuple[float, float], ...] = ((2000.0, 0.3), (4000.0, 0.2))

# ── Time ─────────────────────────────────────────────────────────────────

START_TIME_TIERS: dict[StartTime, tuple[tuple[int, float], ...]] = {
    StartTime.early: ((7, 1.0), (8, 0.9), (9, 0.7), (10, 0.5)),
    StartTime.mid: ((9, 1.0), (10, 0.8), (11, 0.6)),
    StartTime.late: ((10, 1.0), (11, 0.9), (12, 0.7)),
}
START_TIME_FALLBACK: dict[StartTime, float] = {
    StartTime.early: 0.3,
    StartTime.mid: 0.4,
    StartTime.late: 0.4,
}
# Opening at or before this hour is needlessly early for the bucket.
TOO_EARLY_OPENING_HOUR: dict[StartTime, int] = {
    StartTime.mid: 7,
    StartTime.late: 8,
}

# ── Historic indicators ──────────────────────────────────────────────────

TIME_PERIOD_INDICATORS = (
    "century", "medieval", "ancient", "roman", "gothic", "baroque",
    "renaissance", "victorian", "colonial",
)
ARCHITECTURAL_INDICATORS = (
    "cathedral", "palace", "fortress", "castle", "tower", "ruins", "basilica", "fort",
)
CULTURAL_INDICATORS = (
    "heritage", "unesco", "historic", "tradition", "royal", "sacred", "pilgrimage",
)
