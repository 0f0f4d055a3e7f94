"""
Per-category scoring configuration.

Each ``CategoryConfig`` names its dimensions, base weights, the calculator for
each dimension, the context rules that shift weight between dimensions, the
candidate queries the provider should run, and how results are cut.
"""
from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum

from ..geo.clusters import DEFAULT_CLUSTER_SPEC, EVENING_CLUSTER_SPEC, WELLNESS_CLUSTER_SPEC, ClusterSpec
from .location import (
    DecayBand,
    LinearBand,
    LocationFitScore,
    ScaledRadius,
    StepBand,
    TieredRadius,
    TransportRangeScore,
)
from .models import (
    Budget,
    CrowdPreference,
    Interest,
    RatingTier,
    ReviewCountTier,
    SeasonalAvailability,
    TripPhase,
)
from .signals import (
    AccessibilityScore,
    AcclaimScore,
    AtmosphereScore,
    CrowdMatrixScore,
    CuisineRelevanceScore,
    CulturalRelevanceScore,
    EnergyAlignmentScore,
    HistoricSignificanceScore,
    LuxuryScore,
    RatingPopularityScore,
    UpscaleScore,
    VarietyScore,
    VenueTypeScore,
)
from .subscores import (
    ActivityFitScore,
    InterestMatchScore,
    IntensityMode,
    PrestigeScore,
    PriceFitScore,
    SubScore,
    TierCreditScore,
    TimeFitScore,
)
from .tables import (
    BUDGET_PRICE_TIERS,
    ESSENTIAL_TYPES,
    HISTORIC_TYPES,
    INTEREST_PLACE_TYPES,
    MUSEUM_INTEREST_PLACE_TYPES,
    MUSEUM_TYPES,
    NIGHTLIFE_BUDGET_PRICE_TIERS,
    NIGHTLIFE_TYPES,
    RESTAURANT_TYPES,
    SHOPPING_EXCLUDED_TYPES,
    SHOPPING_TYPES,
    SIGHTSEEING_ALWAYS_INCLUDE,
    SIGHTSEEING_INTEREST_PLACE_TYPES,
    SPA_PRIMARY_TYPES,
)
from .weights import FieldEquals, FieldPresent, HasInterest, WeightRule, rule, validate_rules


class Category(str, Enum):
    tourist_attractions = "tourist_attractions"
    museums = "museums"
    nightlife = "nightlife"
    for_you = "for_you"
    popular = "popular"
    spas = "spas"
    essential_experiences = "essential_experiences"
    historic_sites = "historic_sites"
    shopping = "shopping"
    restaurants = "restaurants"


class OutputMode(str, Enum):
    paged = "paged"
    top_n = "top_n"


DEFAULT_PAGE_SIZE = 24


@dataclass(frozen=True)
class CandidateQuery:
    """Coarse catalog filter a provider applies before scoring.

    A candidate qualifies when it carries any ``include_types`` (plus, with an
    ``interest_table``, the types expanded from the traveller's interests), or
    its primary type is in ``primary_types``, or it is flagged must-see /
    tourist attraction while ``match_flags`` is set, or it is a must-see
    carrying any ``must_see_types``. Deny-lists and minimums apply after that.
    """

    name: str = "default"
    include_types: frozenset[str] = frozenset()
    interest_table: Mapping | None = None
    primary_types: frozenset[str] = frozenset()
    match_flags: bool = False
    must_see_types: frozenset[str] = frozenset()
    exclude_types: frozenset[str] = frozenset()
    seasonal: SeasonalAvailability | None = None
    min_review_count: int | None = None
    min_rating: float | None = None
    review_tiers: frozenset[ReviewCountTier] = frozenset()
    cap_duration_by_energy: bool = False
    respect_vegetarian: bool = False
    order_by_tiers: bool = False
    limit: int | None = None


@dataclass(frozen=True)
class CategoryConfig:
    category: Category
    base_weights: Mapping[str, float]
    calculators: Mapping[str, SubScore]
    weight_rules: tuple[WeightRule, ...] = ()
    queries: tuple[CandidateQuery, ...] = field(default_factory=lambda: (CandidateQuery(),))
    threshold: float = 0.0
    output_mode: OutputMode = OutputMode.paged
    top_n: int = 20
    default_page_size: int = DEFAULT_PAGE_SIZE
    cluster_spec: ClusterSpec = DEFAULT_CLUSTER_SPEC
    dedupe_by_name: bool = False
    renormalize_weights: bool = False

    def __post_init__(self) -> None:
        if set(self.base_weights) != set(self.calculators):
            raise ValueError(
                f"{self.category.value}: weight dimensions {sorted(self.base_weights)} "
                f"do not match calculators {sorted(self.calculators)}"
            )
        if not math.isclose(sum(self.base_weights.values()), 1.0, abs_tol=1e-9):
            raise ValueError(f"{self.category.value}: base weights must sum to 1.0")
        validate_rules(self.base_weights, self.weight_rules)


# ── Shared pieces ────────────────────────────────────────────────────────

ACTIVE_PHASE = FieldEquals("phase", TripPhase.active)
WANTS_POPULAR = FieldEquals("crowd_preference", CrowdPreference.popular)
WANTS_HIDDEN = FieldEquals("crowd_preference", CrowdPreference.hidden)
ON_BUDGET = FieldEquals("budget", Budget.budget)
GOING_LUXURY = FieldEquals("budget", Budget.luxury)

STANDARD_PRICE = PriceFitScore(tiers=BUDGET_PRICE_TIERS)
STANDARD_LOCATION = LocationFitScore()

QUALITY_CREDIT = TierCreditScore(
    rating_credit={
        RatingTier.EXCEPTIONAL: 0.6,
        RatingTier.HIGH: 0.45,
        RatingTier.AVERAGE: 0.3,
        RatingTier.LOW: 0.15,
    },
    review_credit={
        ReviewCountTier.VERY_HIGH: 0.4,
        ReviewCountTier.HIGH: 0.3,
        ReviewCountTier.MODERATE: 0.2,
        ReviewCountTier.LOW: 0.1,
    },
)

SIGHTSEEING_INTEREST = InterestMatchScore(
    table=SIGHTSEEING_INTEREST_PLACE_TYPES, always_include=SIGHTSEEING_ALWAYS_INCLUDE
)
SIGHTSEEING_EXCLUDES = frozenset({"restaurant", "event_venue"})


# ── Category table ───────────────────────────────────────────────────────

TOURIST_ATTRACTIONS = CategoryConfig(
    category=Category.tourist_attractions,
    base_weights={"interest": 0.35, "activity_fit": 0.25, "price": 0.2, "location": 0.2},
    calculators={
        "interest": SIGHTSEEING_INTEREST,
        "activity_fit": ActivityFitScore(intensity=IntensityMode.duration),
        "price": STANDARD_PRICE,
        "location": STANDARD_LOCATION,
    },
    weight_rules=(
        rule(ACTIVE_PHASE, location=0.05, interest=-0.05),
        rule(WANTS_POPULAR, interest=0.05, location=-0.05),
        rule(WANTS_HIDDEN, interest=-0.05, location=0.05),
    ),
    queries=(
        CandidateQuery(
            include_types=SIGHTSEEING_ALWAYS_INCLUDE,
            interest_table=SIGHTSEEING_INTEREST_PLACE_TYPES,
            exclude_types=SIGHTSEEING_EXCLUDES,
            seasonal=SeasonalAvailability.ALL_YEAR,
            cap_duration_by_energy=True,
        ),
    ),
)

MUSEUMS = CategoryConfig(
    category=Category.museums,
    base_weights={"quality": 0.3, "interest": 0.25, "activity_fit": 0.2, "price": 0.15, "location": 0.1},
    calculators={
        "quality": QUALITY_CREDIT,
        "interest": InterestMatchScore(
            table=MUSEUM_INTEREST_PLACE_TYPES,
            rating_boosts={},
            type_boosts=(
                ("art_gallery", Interest.arts, 0.2),
                ("history_museum", Interest.history, 0.2),
            ),
        ),
        "activity_fit": ActivityFitScore(intensity=IntensityMode.fixed),
        # a museum inside budget scores 1.0 outright; free entry would be 1.2 for budget travellers
        "price": PriceFitScore(
            tiers=BUDGET_PRICE_TIERS,
            match_bonus=1.0,
            alignment=1.0,
            alignment_step=0.25,
            free_for_budget=1.2,
            free_otherwise=1.0,
        ),
        "location": LocationFitScore(
            city_center=StepBand(tiers=((2000.0, 1.0), (4000.0, 0.8), (6000.0, 0.6)), beyond=0.3),
            current_location=LinearBand(max_distance=8000.0),
            cluster=ScaledRadius(scale=1.5),
        ),
    },
    weight_rules=(
        rule(ACTIVE_PHASE, location=0.05, quality=-0.05),
        rule(WANTS_POPULAR, quality=0.05, location=-0.05),
        rule(WANTS_HIDDEN, quality=-0.05, interest=0.05),
        rule(ON_BUDGET, price=0.05, quality=-0.05),
    ),
    queries=(
        CandidateQuery(
            include_types=MUSEUM_TYPES,
            exclude_types=frozenset({"restaurant", "amusement_center"}),
        ),
    ),
)

NIGHTLIFE = CategoryConfig(
    category=Category.nightlife,
    base_weights={"venue_type": 0.25, "atmosphere": 0.25, "price": 0.15, "location": 0.2, "popularity": 0.15},
    calculators={
        "venue_type": VenueTypeScore(),
        "atmosphere": AtmosphereScore(),
        "price": PriceFitScore(tiers=NIGHTLIFE_BUDGET_PRICE_TIERS, free_for_budget=0.6, free_otherwise=0.6),
        "location": LocationFitScore(
            city_center=StepBand(tiers=((1000.0, 1.0), (2000.0, 0.8), (3000.0, 0.5)), beyond=0.2),
            current_location=DecayBand(full_within=800.0, segments=((3000.0, 0.8, 0.0), (5000.0, 0.4, 0.0))),
            cluster=TieredRadius(core_fraction=0.3, inside=0.7, falloff_meters=500.0),
        ),
        "popularity": CrowdMatrixScore(),
    },
    weight_rules=(
        rule(ACTIVE_PHASE, location=0.05, atmosphere=-0.05),
        rule(WANTS_POPULAR, popularity=0.05, location=-0.05),
        rule(WANTS_HIDDEN, popularity=-0.05, atmosphere=0.05),
    ),
    queries=(
        CandidateQuery(
            primary_types=NIGHTLIFE_TYPES,
            exclude_types=frozenset({"movie_theater", "restaurant"}),
            min_review_count=300,
        ),
    ),
    threshold=0.4,
    cluster_spec=EVENING_CLUSTER_SPEC,
)

FOR_YOU = CategoryConfig(
    category=Category.for_you,
    base_weights={"interest": 0.5, "time": 0.1, "price": 0.15, "location": 0.15, "activity_fit": 0.1},
    calculators={
        "interest": InterestMatchScore(
            table=INTEREST_PLACE_TYPES,
            rating_boosts={RatingTier.HIGH: 0.2, RatingTier.EXCEPTIONAL: 0.3},
            crowd_boost=0.2,
        ),
        "time": TimeFitScore(),
        "price": PriceFitScore(
            tiers=BUDGET_PRICE_TIERS,
            match_bonus=0.8,
            mismatch_score=0.3,
            alignment=0.0,
            exceptional_bonus=0.2,
        ),
        "location": STANDARD_LOCATION,
        "activity_fit": ActivityFitScore(walking_access=True),
    },
    weight_rules=(
        rule(FieldPresent("energy_level"), activity_fit=0.05, location=-0.05),
        rule(FieldPresent("preferred_start_time"), time=0.05, interest=-0.05),
        rule(ON_BUDGET, price=0.1, interest=-0.1),
    ),
    queries=(
        CandidateQuery(
            name="activities",
            interest_table=INTEREST_PLACE_TYPES,
            exclude_types=RESTAURANT_TYPES | {"event_venue"},
        ),
        CandidateQuery(
            name="restaurants",
            include_types=RESTAURANT_TYPES,
            respect_vegetarian=True,
        ),
    ),
)

POPULAR = CategoryConfig(
    category=Category.popular,
    base_weights={"must_see": 0.2, "interest": 0.2, "activity_fit": 0.2, "price": 0.15, "location": 0.25},
    calculators={
        "must_see": TierCreditScore(
            rating_credit={RatingTier.EXCEPTIONAL: 0.4, RatingTier.HIGH: 0.3},
            review_credit={ReviewCountTier.VERY_HIGH: 0.4, ReviewCountTier.HIGH: 0.3},
            must_see=0.3,
            tourist_attraction=0.2,
        ),
        "interest": SIGHTSEEING_INTEREST,
        "activity_fit": ActivityFitScore(),
        "price": STANDARD_PRICE,
        "location": STANDARD_LOCATION,
    },
    weight_rules=(
        rule(WANTS_POPULAR, must_see=0.1, location=-0.1),
        rule(WANTS_HIDDEN, must_see=-0.1, interest=0.1),
        rule(ON_BUDGET, price=0.05, activity_fit=-0.05),
    ),
    queries=(
        CandidateQuery(
            include_types=SIGHTSEEING_ALWAYS_INCLUDE,
            interest_table=SIGHTSEEING_INTEREST_PLACE_TYPES,
            match_flags=True,
            exclude_types=SIGHTSEEING_EXCLUDES,
            seasonal=SeasonalAvailability.ALL_YEAR,
        ),
    ),
)

SPAS = CategoryConfig(
    category=Category.spas,
    base_weights={"quality": 0.3, "luxury": 0.2, "price": 0.15, "location": 0.2, "energy_alignment": 0.15},
    calculators={
        "quality": TierCreditScore(
            rating_credit={RatingTier.EXCEPTIONAL: 0.5, RatingTier.HIGH: 0.3, RatingTier.AVERAGE: 0.2},
            review_credit={
                ReviewCountTier.VERY_HIGH: 0.5,
                ReviewCountTier.HIGH: 0.3,
                ReviewCountTier.MODERATE: 0.2,
            },
        ),
        "luxury": LuxuryScore(),
        "price": PriceFitScore(tiers=BUDGET_PRICE_TIERS, free_otherwise=0.6),
        "location": LocationFitScore(
            city_center=StepBand(tiers=((2000.0, 1.0), (5000.0, 0.8), (10000.0, 0.6)), beyond=0.4),
            current_location=DecayBand(full_within=2000.0, segments=((10000.0, 0.8, 0.0), (20000.0, 0.4, 0.2))),
            cluster=TieredRadius(core_fraction=0.5, inside=0.8, falloff_meters=5000.0, floor=0.3),
        ),
        "energy_alignment": EnergyAlignmentScore(),
    },
    weight_rules=(
        rule(ACTIVE_PHASE, location=0.05, luxury=-0.05),
        rule(GOING_LUXURY, luxury=0.05, price=-0.05),
        rule(ON_BUDGET, luxury=-0.05, price=0.05),
        rule(WANTS_HIDDEN, quality=-0.05, location=0.05),
    ),
    queries=(
        CandidateQuery(primary_types=SPA_PRIMARY_TYPES, seasonal=SeasonalAvailability.ALL_YEAR),
    ),
    cluster_spec=WELLNESS_CLUSTER_SPEC,
)

ESSENTIAL_EXPERIENCES = CategoryConfig(
    category=Category.essential_experiences,
    base_weights={"quality": 0.25, "price": 0.15, "popularity": 0.25, "location": 0.15, "must_see": 0.2},
    calculators={
        "quality": QUALITY_CREDIT,
        "price": STANDARD_PRICE,
        "popularity": AcclaimScore(),
        "location": TransportRangeScore(),
        "must_see": PrestigeScore(),
    },
    weight_rules=(
        rule(WANTS_POPULAR, popularity=0.05, location=-0.05),
        rule(WANTS_HIDDEN, popularity=-0.05, location=0.05),
        rule(ON_BUDGET, price=0.05, quality=-0.05),
    ),
    queries=(
        CandidateQuery(
            include_types=ESSENTIAL_TYPES,
            match_flags=True,
            exclude_types=frozenset({"restaurant"}),
            limit=50,
        ),
    ),
    output_mode=OutputMode.top_n,
    top_n=20,
)

HISTORIC_SITES = CategoryConfig(
    category=Category.historic_sites,
    base_weights={"significance": 0.35, "cultural": 0.25, "accessibility": 0.2, "price": 0.1, "location": 0.1},
    calculators={
        "significance": HistoricSignificanceScore(),
        "cultural": CulturalRelevanceScore(),
        "accessibility": AccessibilityScore(),
        "price": STANDARD_PRICE,
        "location": TransportRangeScore(),
    },
    weight_rules=(
        rule(HasInterest(Interest.history), significance=0.05, price=-0.05),
        rule(HasInterest(Interest.photography), cultural=0.05, location=-0.05),
        rule(ON_BUDGET, price=0.05, cultural=-0.05),
    ),
    queries=(
        CandidateQuery(include_types=HISTORIC_TYPES, must_see_types=MUSEUM_TYPES, limit=50),
    ),
    output_mode=OutputMode.top_n,
    top_n=8,
)

SHOPPING = CategoryConfig(
    category=Category.shopping,
    base_weights={"popularity": 0.25, "upscale": 0.2, "variety": 0.2, "price": 0.2, "location": 0.15},
    calculators={
        "popularity": RatingPopularityScore(),
        "upscale": UpscaleScore(),
        "variety": VarietyScore(),
        "price": PriceFitScore(tiers=BUDGET_PRICE_TIERS, free_for_budget=None, free_otherwise=None),
        "location": TransportRangeScore(),
    },
    weight_rules=(
        rule(GOING_LUXURY, upscale=0.1, popularity=-0.05, price=-0.05),
        rule(ON_BUDGET, upscale=-0.1, price=0.1),
        rule(WANTS_HIDDEN, popularity=-0.05, variety=0.05),
    ),
    queries=(
        CandidateQuery(
            include_types=SHOPPING_TYPES,
            exclude_types=SHOPPING_EXCLUDED_TYPES | {"restaurant", "museum"},
            min_rating=4.0,
            review_tiers=frozenset({ReviewCountTier.VERY_HIGH, ReviewCountTier.HIGH}),
            limit=100,
        ),
    ),
    output_mode=OutputMode.top_n,
    top_n=20,
    dedupe_by_name=True,
)

RESTAURANTS = CategoryConfig(
    category=Category.restaurants,
    base_weights={"quality": 0.4, "price": 0.3, "relevance": 0.3},
    calculators={
        "quality": TierCreditScore(
            rating_credit={
                RatingTier.EXCEPTIONAL: 25,
                RatingTier.HIGH: 20,
                RatingTier.AVERAGE: 15,
                RatingTier.LOW: 5,
            },
            review_credit={
                ReviewCountTier.VERY_HIGH: 15,
                ReviewCountTier.HIGH: 12,
                ReviewCountTier.MODERATE: 8,
                ReviewCountTier.LOW: 4,
            },
            scale=40.0,
        ),
        "price": PriceFitScore(
            tiers=BUDGET_PRICE_TIERS,
            match_bonus=20 / 30,
            alignment=10 / 30,
            alignment_step=3 / 30,
            free_for_budget=None,
            free_otherwise=None,
            use_price_preference=True,
        ),
        "relevance": CuisineRelevanceScore(),
    },
    queries=(
        CandidateQuery(
            include_types=frozenset({"restaurant", "cafe", "meal_takeaway"}),
            order_by_tiers=True,
            limit=50,
        ),
    ),
    output_mode=OutputMode.top_n,
    top_n=20,
)

CATEGORY_CONFIGS: dict[Category, CategoryConfig] = {
    config.category: config
    for config in (
        TOURIST_ATTRACTIONS,
        MUSEUMS,
        NIGHTLIFE,
        FOR_YOU,
        POPULAR,
        SPAS,
        ESSENTIAL_EXPERIENCES,
        HISTORIC_SITES,
        SHOPPING,
        RESTAURANTS,
    )
}


def get_category_config(category: Category | str) -> CategoryConfig:
    """Look up a category's configuration; raises ValueError for unknown categories."""
    return CATEGORY_CONFIGS[Category(category)]
