from __future__ import annotations

import itertools
from datetime import datetime, timedelta, timezone

import pytest

from poi_recs.scoring.categories import CATEGORY_CONFIGS, MUSEUMS, NIGHTLIFE, POPULAR, SPAS, TOURIST_ATTRACTIONS
from poi_recs.scoring.location import (
    DecayBand,
    LocationFitScore,
    StepBand,
    TieredRadius,
    TransportRangeScore,
    transport_range,
)
from poi_recs.scoring.models import (
    ActivityCluster,
    ActivityClusterContext,
    Budget,
    Candidate,
    CityCenterContext,
    Coordinates,
    CrowdPreference,
    CuisinePreferences,
    CurrentLocationContext,
    EnergyLevel,
    Interest,
    Location,
    OpeningHours,
    OpeningPeriod,
    PriceLevel,
    RatingTier,
    ReviewCountTier,
    ScoringContext,
    StartTime,
    TimeOfDay,
    TransportMode,
    TripPhase,
)
from poi_recs.scoring.signals import AcclaimScore, CuisineRelevanceScore, EnergyAlignmentScore
from poi_recs.scoring.subscores import (
    ActivityFitScore,
    InterestMatchScore,
    PriceFitScore,
    TimeFitScore,
    activity_intensity,
    start_time_fit,
)
from poi_recs.scoring.tables import BUDGET_PRICE_TIERS, INTEREST_PLACE_TYPES

CENTER = Coordinates(lat=38.7223, lng=-9.1393)


def _candidate(candidate_id: str = "c1", lat: float = 38.7223, lng: float = -9.1393, **overrides) -> Candidate:
    data = {
        "id": candidate_id,
        "city_id": "lisbon",
        "name": f"Place {candidate_id}",
        "place_types": frozenset({"museum"}),
        "location": Location(lat=lat, lng=lng, neighborhood="Baixa"),
    }
    data.update(overrides)
    return Candidate(**data)


def _hours(open_hour: int, close_hour: int, **kwargs) -> OpeningHours:
    period = OpeningPeriod(open=TimeOfDay(day=1, hour=open_hour), close=TimeOfDay(day=1, hour=close_hour))
    return OpeningHours(periods=(period,), **kwargs)


SAMPLE_CANDIDATES = [
    _candidate("a"),
    _candidate(
        "b",
        place_types=frozenset({"historical_landmark", "monument", "tourist_attraction", "church"}),
        rating_tier=RatingTier.EXCEPTIONAL,
        review_count_tier=ReviewCountTier.VERY_HIGH,
        price_level=PriceLevel.FREE,
        is_must_see=True,
        is_tourist_attraction=True,
        description="Gothic cathedral, a UNESCO heritage site from the 13th century",
        opening_hours=_hours(7, 22, open_now=True),
    ),
    _candidate(
        "c",
        lat=38.80,
        lng=-9.30,
        place_types=frozenset({"night_club", "bar", "wine_bar", "casino", "karaoke"}),
        rating=4.8,
        rating_tier=RatingTier.HIGH,
        review_count_tier=ReviewCountTier.HIGH,
        price_level=PriceLevel.VERY_EXPENSIVE,
    ),
    _candidate(
        "d",
        place_types=frozenset({"spa", "massage", "beauty_salon", "vegetarian_restaurant", "vegan_restaurant"}),
        price_level=PriceLevel.VERY_EXPENSIVE,
        rating_tier=RatingTier.EXCEPTIONAL,
        is_must_see=True,
        is_tourist_attraction=True,
    ),
    _candidate("e", lat=39.5, lng=-8.0, place_types=frozenset(), rating_tier=RatingTier.LOW, duration=600),
]

SAMPLE_CONTEXTS = [
    ScoringContext(),
    ScoringContext(
        budget=Budget.budget,
        interests=frozenset(Interest),
        crowd_preference=CrowdPreference.hidden,
        energy_level=EnergyLevel.light,
        location_context=CityCenterContext(reference=CENTER),
        preferred_start_time=StartTime.late,
        dietary_restrictions=frozenset({"vegetarian", "vegan"}),
        cuisine_preferences=CuisinePreferences(preferred=["vegetarian", "vegan"]),
    ),
    ScoringContext(
        budget=Budget.luxury,
        crowd_preference=CrowdPreference.popular,
        energy_level=EnergyLevel.active,
        transport_preferences=frozenset({TransportMode.walking}),
        location_context=CurrentLocationContext(reference=CENTER),
        preferred_start_time=StartTime.early,
        phase=TripPhase.active,
        reference_time=datetime(2026, 6, 1, 12, tzinfo=timezone.utc),
    ),
    ScoringContext(
        location_context=ActivityClusterContext(
            clusters=[ActivityCluster(center=CENTER, radius=1500.0)],
        ),
        energy_level=EnergyLevel.moderate,
    ),
]


# ── Bounds ───────────────────────────────────────────────────────────────


def test_every_calculator_stays_within_unit_interval():
    for config in CATEGORY_CONFIGS.values():
        for (dim, calc), candidate, context in itertools.product(
            config.calculators.items(), SAMPLE_CANDIDATES, SAMPLE_CONTEXTS
        ):
            value = calc(candidate, context)
            assert 0.0 <= value <= 1.0, (config.category, dim, candidate.id)


# ── Price ────────────────────────────────────────────────────────────────


def test_free_museum_is_capped_at_full_score_for_budget_travellers():
    price = MUSEUMS.calculators["price"]
    free = _candidate(price_level=PriceLevel.FREE)
    assert price(free, ScoringContext(budget=Budget.budget)) == 1.0
    assert price(free, ScoringContext(budget=Budget.moderate)) == 1.0


def test_standard_price_fit():
    price = PriceFitScore(tiers=BUDGET_PRICE_TIERS)
    moderate = _candidate(price_level=PriceLevel.MODERATE)
    # containment 0.6 + alignment 0.4
    assert price(moderate, ScoringContext()) == pytest.approx(1.0)
    # no containment; ordinal 3 vs target 4.5
    assert price(moderate, ScoringContext(budget=Budget.luxury)) == pytest.approx(0.25)
    assert price(_candidate(price_level=PriceLevel.FREE), ScoringContext()) == pytest.approx(0.8)


def test_nightlife_free_entry_is_flat():
    price = NIGHTLIFE.calculators["price"]
    assert price(_candidate(price_level=PriceLevel.FREE), ScoringContext(budget=Budget.budget)) == 0.6


def test_explicit_price_preference_moves_the_target():
    price = PriceFitScore(tiers=BUDGET_PRICE_TIERS, alignment=0.4, match_bonus=0.6, use_price_preference=True)
    cheap = _candidate(price_level=PriceLevel.INEXPENSIVE)
    assert price(cheap, ScoringContext(price_preference=2)) == pytest.approx(0.4)
    assert price(cheap, ScoringContext()) == pytest.approx(0.3)


# ── Time ─────────────────────────────────────────────────────────────────


def test_time_fit_is_neutral_without_start_time_or_hours():
    time_fit = TimeFitScore()
    assert time_fit(_candidate(opening_hours=_hours(9, 12)), ScoringContext()) == 0.5
    assert time_fit(_candidate(), ScoringContext(preferred_start_time=StartTime.mid)) == 0.5


def test_time_fit_ignores_incomplete_periods():
    hours = OpeningHours(periods=(OpeningPeriod(open=TimeOfDay(day=1, hour=9)),))
    candidate = _candidate(opening_hours=hours)
    assert TimeFitScore()(candidate, ScoringContext(preferred_start_time=StartTime.mid)) == 0.5


def test_start_time_tiers():
    assert start_time_fit(StartTime.early, 7) == 1.0
    assert start_time_fit(StartTime.early, 11) == 0.3
    assert start_time_fit(StartTime.mid, 10) == 0.8
    # opening at 7 is needlessly early for a mid-morning start
    assert start_time_fit(StartTime.mid, 7) == pytest.approx(0.9)
    assert start_time_fit(StartTime.late, 12) == 0.7


def test_long_opening_hours_earn_a_bonus():
    context = ScoringContext(preferred_start_time=StartTime.mid)
    assert TimeFitScore()(_candidate(opening_hours=_hours(10, 12)), context) == pytest.approx(0.8)
    assert TimeFitScore()(_candidate(opening_hours=_hours(10, 20)), context) == pytest.approx(0.9)


def test_overnight_span_counts_as_long():
    context = ScoringContext(preferred_start_time=StartTime.late)
    assert TimeFitScore()(_candidate(opening_hours=_hours(20, 4)), context) == pytest.approx(0.5)


def test_closed_now_scores_zero_while_travelling():
    context = ScoringContext(preferred_start_time=StartTime.mid, phase=TripPhase.active)
    closed = _candidate(opening_hours=_hours(9, 17, open_now=False))
    assert TimeFitScore()(closed, context) == 0.0
    # planning ignores the live flag
    assert TimeFitScore()(closed, context.model_copy(update={"phase": TripPhase.planning})) == 1.0


def test_closing_soon_is_penalised():
    now = datetime(2026, 6, 1, 16, 30, tzinfo=timezone.utc)
    context = ScoringContext(preferred_start_time=StartTime.mid, phase=TripPhase.active, reference_time=now)
    soon = _candidate(opening_hours=_hours(9, 17, open_now=True, next_close_time=now + timedelta(minutes=30)))
    later = _candidate(opening_hours=_hours(9, 17, open_now=True, next_close_time=now + timedelta(minutes=90)))
    assert TimeFitScore()(soon, context) == pytest.approx(0.5)
    assert TimeFitScore()(later, context) == pytest.approx(0.8)


def test_naive_close_time_is_treated_as_utc():
    now = datetime(2026, 6, 1, 16, 30, tzinfo=timezone.utc)
    context = ScoringContext(preferred_start_time=StartTime.mid, phase=TripPhase.active, reference_time=now)
    naive_close = datetime(2026, 6, 1, 17, 0)
    candidate = _candidate(opening_hours=_hours(9, 17, open_now=True, next_close_time=naive_close))
    assert TimeFitScore()(candidate, context) == pytest.approx(0.5)


# ── Location ─────────────────────────────────────────────────────────────


def test_location_is_neutral_without_context():
    assert LocationFitScore()(_candidate(), ScoringContext()) == 0.5


def test_location_is_neutral_with_no_clusters():
    context = ScoringContext(location_context=ActivityClusterContext())
    assert LocationFitScore()(_candidate(), context) == 0.5


def test_city_center_steps():
    context = ScoringContext(location_context=CityCenterContext(reference=CENTER))
    location = LocationFitScore()
    assert location(_candidate(), context) == 1.0
    # roughly 3.3 km north
    assert location(_candidate(lat=38.7523), context) == 0.7
    assert location(_candidate(lat=38.90), context) == 0.4


def test_current_location_decays_linearly():
    context = ScoringContext(location_context=CurrentLocationContext(reference=CENTER))
    near = LocationFitScore()(_candidate(lat=38.7323), context)
    far = LocationFitScore()(_candidate(lat=38.7523), context)
    assert 1.0 > near > far > 0.0
    assert LocationFitScore()(_candidate(lat=38.90), context) == 0.0


def test_best_cluster_wins():
    context = ScoringContext(location_context=ActivityClusterContext(clusters=[
        ActivityCluster(center=Coordinates(lat=39.5, lng=-8.0), radius=1000.0),
        ActivityCluster(center=CENTER, radius=2000.0),
    ]))
    assert LocationFitScore()(_candidate(), context) == 1.0


def test_decay_band_segments():
    band = DecayBand(full_within=800.0, segments=((3000.0, 0.8, 0.0), (5000.0, 0.4, 0.0)))
    assert band(500.0) == 1.0
    assert band(1900.0) == pytest.approx(0.4)
    assert band(4000.0) == pytest.approx(0.2)
    assert band(9000.0) == 0.0


def test_decay_band_keeps_final_floor():
    spa_band = SPAS.calculators["location"].current_location
    assert spa_band(25000.0) == pytest.approx(0.2)


def test_tiered_radius():
    band = TieredRadius(core_fraction=0.3, inside=0.7, falloff_meters=500.0)
    assert band(200.0, 1000.0) == 1.0
    assert band(800.0, 1000.0) == 0.7
    assert band(1250.0, 1000.0) == pytest.approx(0.2)
    assert band(5000.0, 1000.0) == 0.0


def test_step_band_beyond():
    band = StepBand(tiers=((1000.0, 1.0),), beyond=0.2)
    assert band(1000.0) == 1.0
    assert band(1000.1) == 0.2


def test_transport_range_prefers_transit_over_driving():
    assert transport_range([]) == 1000.0
    assert transport_range([TransportMode.walking]) == 1000.0
    assert transport_range([TransportMode.public_transit]) == 5000.0
    assert transport_range([TransportMode.public_transit, TransportMode.driving]) == 5000.0
    assert transport_range([TransportMode.driving, TransportMode.walking]) == 10000.0


def test_transport_range_score_needs_current_location():
    score = TransportRangeScore()
    city = ScoringContext(location_context=CityCenterContext(reference=CENTER))
    assert score(_candidate(), city) == 0.5

    here = ScoringContext(
        location_context=CurrentLocationContext(reference=CENTER),
        transport_preferences=frozenset({TransportMode.public_transit}),
    )
    assert score(_candidate(), here) == 1.0
    assert score(_candidate(lat=39.5), here) == 0.0


# ── Interest and activity fit ────────────────────────────────────────────


def test_interest_share_and_rating_boost():
    interest = InterestMatchScore(table=INTEREST_PLACE_TYPES)
    context = ScoringContext(interests=frozenset({Interest.arts}))
    plain = _candidate(place_types=frozenset({"museum", "art_gallery"}))
    # 2 of the 4 museum types
    assert interest(plain, context) == pytest.approx(0.5)
    acclaimed = _candidate(place_types=frozenset({"museum", "art_gallery"}), rating_tier=RatingTier.EXCEPTIONAL)
    assert interest(acclaimed, context) == pytest.approx(0.7)


def test_interest_without_matches_scores_zero():
    interest = InterestMatchScore(table=INTEREST_PLACE_TYPES)
    candidate = _candidate(place_types=frozenset({"bar"}), rating_tier=RatingTier.EXCEPTIONAL)
    assert interest(candidate, ScoringContext(interests=frozenset({Interest.arts}))) == 0.0
    assert interest(candidate, ScoringContext()) == 0.0


@pytest.mark.parametrize("config", [TOURIST_ATTRACTIONS, POPULAR])
def test_sightseeing_interest_ignores_food_and_nightlife(config):
    interest = config.calculators["interest"]
    context = ScoringContext(interests=frozenset({Interest.food, Interest.entertainment}))
    assert interest(_candidate(place_types=frozenset({"cafe"})), context) == 0.0
    assert interest(_candidate(place_types=frozenset({"bar"})), context) == 0.0
    assert interest(_candidate(place_types=frozenset({"aquarium"})), context) > 0.0


def test_museum_type_boosts():
    interest = MUSEUMS.calculators["interest"]
    gallery = _candidate(place_types=frozenset({"art_gallery"}))
    context = ScoringContext(interests=frozenset({Interest.arts}))
    assert interest(gallery, context) == pytest.approx(0.25 + 0.2)


def test_activity_intensity_buckets():
    assert activity_intensity(frozenset()) == 0.0
    assert activity_intensity(frozenset({"zoo", "museum"})) == pytest.approx(0.65)
    assert activity_intensity(frozenset({"park"})) == pytest.approx(0.6)


def test_activity_fit_components():
    fit = ActivityFitScore()
    museum = _candidate(rating_tier=RatingTier.HIGH)
    # 0.4 * (1 - 0.3) + 0.2 review quality + 0.15 neutral crowd
    assert fit(museum, ScoringContext(energy_level=EnergyLevel.light)) == pytest.approx(0.63)
    # no energy level: intensity contributes nothing
    assert fit(museum, ScoringContext()) == pytest.approx(0.35)


def test_walking_access_defaults_without_reference():
    fit = ActivityFitScore(walking_access=True)
    context = ScoringContext(transport_preferences=frozenset({TransportMode.walking}))
    assert fit(_candidate(), context) == pytest.approx(0.2 + 0.15)


def test_crowd_alignment_for_hidden_gems():
    fit = ActivityFitScore()
    quiet = _candidate(rating_tier=RatingTier.LOW, review_count_tier=ReviewCountTier.LOW)
    assert fit(quiet, ScoringContext(crowd_preference=CrowdPreference.hidden)) == pytest.approx(0.3 * 0.8)


# ── Category signals ─────────────────────────────────────────────────────


def test_acclaim_flips_for_hidden_gem_seekers():
    acclaimed = _candidate(rating_tier=RatingTier.EXCEPTIONAL, review_count_tier=ReviewCountTier.VERY_HIGH)
    score = AcclaimScore()
    assert score(acclaimed, ScoringContext(crowd_preference=CrowdPreference.popular)) == 1.0
    assert score(acclaimed, ScoringContext(crowd_preference=CrowdPreference.hidden)) == 0.0
    assert score(acclaimed, ScoringContext(crowd_preference=CrowdPreference.mixed)) == pytest.approx(0.75)
    assert score(acclaimed, ScoringContext()) == pytest.approx(0.75)


def test_energy_alignment_defaults_to_light():
    spa = _candidate(place_types=frozenset({"spa"}))
    assert EnergyAlignmentScore()(spa, ScoringContext()) == pytest.approx(0.8)
    assert EnergyAlignmentScore()(spa, ScoringContext(energy_level=EnergyLevel.active)) == pytest.approx(0.2)


def test_cuisine_relevance():
    relevance = CuisineRelevanceScore()
    veggie = _candidate(place_types=frozenset({"restaurant", "vegetarian_restaurant"}))
    steak = _candidate(place_types=frozenset({"restaurant", "steak_house", "american_restaurant"}))

    vegetarian = ScoringContext(dietary_restrictions=frozenset({"Vegetarian"}))
    assert relevance(veggie, vegetarian) == pytest.approx(0.5)

    avoiding = ScoringContext(cuisine_preferences=CuisinePreferences(avoided=["american"]))
    assert relevance(steak, avoiding) == 0.0

    nearby = ScoringContext(location_context=CurrentLocationContext(reference=CENTER))
    assert relevance(veggie, nearby) == pytest.approx(0.5)
