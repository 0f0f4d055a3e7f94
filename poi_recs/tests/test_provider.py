from __future__ import annotations

import asyncio
import importlib
import time
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from unittest.mock import patch

import pytest

from poi_recs.recommendations import config as catalog_config
from poi_recs.recommendations import data_store
from poi_recs.recommendations.data_store import load_catalog
from poi_recs.recommendations.models import ScoringRequest
from poi_recs.recommendations.provider import CandidateProviderError, CatalogCandidateProvider
from poi_recs.recommendations.service import describe_categories, fetch_candidates, get_recommendations
from poi_recs.scoring.categories import (
    FOR_YOU,
    MUSEUMS,
    NIGHTLIFE,
    POPULAR,
    RESTAURANTS,
    SHOPPING,
    SPAS,
    TOURIST_ATTRACTIONS,
    Category,
    CandidateQuery,
    OutputMode,
)
from poi_recs.scoring.engine import DEFAULT_MAX_PAGE_SIZE
from poi_recs.scoring.models import (
    Candidate,
    EnergyLevel,
    Interest,
    Location,
    Page,
    ScoringContext,
)

SAMPLE_CATALOG = Path(__file__).resolve().parent.parent / "data" / "sample_catalog.jsonl"
_CATALOG = load_catalog(SAMPLE_CATALOG)


def _provider() -> CatalogCandidateProvider:
    return CatalogCandidateProvider(loader=lambda: _CATALOG)


def _select(config, context: ScoringContext | None = None, city_id: str = "lisbon") -> list[str]:
    context = context or ScoringContext()
    query = config.queries[0]
    return [c.id for c in _provider().select(city_id, query, context)]


# ── Catalog loading ──────────────────────────────────────────────────────


def test_load_catalog_adds_type_sets():
    assert len(_CATALOG) == 27
    row = _CATALOG.set_index("id").loc["lis-001"]
    assert row["type_set"] == frozenset({"historical_landmark", "tourist_attraction", "monument"})
    assert bool(row["is_must_see"]) is True


def test_catalog_loads_once_under_concurrent_first_use(monkeypatch):
    monkeypatch.setattr(data_store, "_df", None)

    def slow_load(path):
        time.sleep(0.05)
        return _CATALOG

    with patch("poi_recs.recommendations.data_store.load_catalog", side_effect=slow_load) as mock_load:
        with ThreadPoolExecutor(max_workers=4) as pool:
            frames = list(pool.map(lambda _: data_store.get_dataframe(), range(4)))

    assert mock_load.call_count == 1
    assert all(frame is _CATALOG for frame in frames)


def test_max_page_size_defaults_to_engine_limit(monkeypatch):
    monkeypatch.delenv("POI_MAX_PAGE_SIZE", raising=False)
    reloaded = importlib.reload(catalog_config)
    assert reloaded.DEFAULT_CATALOG_CONFIG.max_page_size == DEFAULT_MAX_PAGE_SIZE


# ── Coarse filters ───────────────────────────────────────────────────────


def test_other_cities_and_closed_places_are_filtered():
    ids = _select(MUSEUMS)
    assert ids == ["lis-004", "lis-005", "lis-006", "lis-007"]
    assert "lis-026" not in ids


def test_unknown_city_returns_nothing():
    assert _select(MUSEUMS, city_id="atlantis") == []


def test_nightlife_needs_enough_reviews():
    assert _select(NIGHTLIFE) == ["lis-012", "lis-013", "lis-014"]


def test_spas_match_on_primary_type():
    assert _select(SPAS) == ["lis-016", "lis-017"]


def test_seasonal_places_are_left_out_of_sightseeing():
    ids = _select(TOURIST_ATTRACTIONS, ScoringContext(interests=frozenset({Interest.outdoors})))
    assert "lis-009" in ids
    assert "lis-011" not in ids


@pytest.mark.parametrize("config", [TOURIST_ATTRACTIONS, POPULAR])
def test_sightseeing_leaves_cafes_and_bars_out(config):
    context = ScoringContext(interests=frozenset({Interest.food, Interest.entertainment}))
    ids = _select(config, context)
    for venue in ("lis-012", "lis-013", "lis-014", "lis-015", "lis-025"):
        assert venue not in ids
    assert "lis-001" in ids


def test_long_visits_are_capped_by_energy():
    light = _select(TOURIST_ATTRACTIONS, ScoringContext(energy_level=EnergyLevel.light))
    active = _select(TOURIST_ATTRACTIONS, ScoringContext(energy_level=EnergyLevel.active))
    assert "lis-008" not in light
    assert "lis-003" in light
    assert "lis-008" in active


def test_shopping_minimums_and_exclusions():
    ids = _select(SHOPPING)
    assert ids == ["lis-018", "lis-019", "lis-020", "lis-021"]


def test_restaurants_are_ordered_by_tiers():
    assert _select(RESTAURANTS) == ["lis-024", "lis-025", "lis-023", "lis-022"]


def test_vegetarian_diet_narrows_restaurants():
    context = ScoringContext(dietary_restrictions=frozenset({"vegetarian"}))
    restaurants = FOR_YOU.queries[1]
    ids = [c.id for c in _provider().select("lisbon", restaurants, context)]
    assert ids == ["lis-023"]


def test_limit_is_applied_after_ordering():
    query = CandidateQuery(include_types=frozenset({"museum"}), limit=2)
    ids = [c.id for c in _provider().select("lisbon", query, ScoringContext())]
    assert ids == ["lis-004", "lis-005"]


def test_rows_become_candidates():
    query = CandidateQuery(include_types=frozenset({"spa"}))
    spa = _provider().select("lisbon", query, ScoringContext())[0]
    assert isinstance(spa, Candidate)
    assert spa.location.neighborhood == "Marques de Pombal"
    assert spa.opening_hours is None
    assert spa.description is None
    assert "massage" in spa.place_types


# ── Async fetch ──────────────────────────────────────────────────────────


def test_fetch_runs_off_the_event_loop():
    candidates = asyncio.run(_provider().fetch("lisbon", SPAS.queries[0], ScoringContext()))
    assert [c.id for c in candidates] == ["lis-016", "lis-017"]


def test_loader_failure_becomes_provider_error():
    def broken_loader():
        raise OSError("catalog unavailable")

    provider = CatalogCandidateProvider(loader=broken_loader)
    with pytest.raises(CandidateProviderError) as excinfo:
        asyncio.run(provider.fetch("lisbon", MUSEUMS.queries[0], ScoringContext()))
    assert isinstance(excinfo.value.__cause__, OSError)


class _RecordingProvider:
    def __init__(self, batches: dict[str, list[Candidate]]):
        self.batches = batches
        self.calls: list[str] = []

    async def fetch(self, city_id, query, context):
        self.calls.append(query.name)
        await asyncio.sleep(0)
        return self.batches[query.name]


def _candidate(candidate_id: str) -> Candidate:
    return Candidate(
        id=candidate_id, city_id="lisbon", name=candidate_id, location=Location(lat=38.72, lng=-9.14)
    )


def test_fetch_candidates_merges_queries_without_duplicates():
    provider = _RecordingProvider({
        "activities": [_candidate("a"), _candidate("b")],
        "restaurants": [_candidate("b"), _candidate("c")],
    })
    merged = asyncio.run(fetch_candidates(provider, "lisbon", FOR_YOU, ScoringContext()))
    assert sorted(provider.calls) == ["activities", "restaurants"]
    assert [c.id for c in merged] == ["a", "b", "c"]


# ── Service ──────────────────────────────────────────────────────────────


def test_get_recommendations_pages_results():
    request = ScoringRequest(city_id="lisbon", category=Category.museums)
    result = asyncio.run(get_recommendations(request, _provider()))
    assert isinstance(result, Page)
    assert result.total == 4
    assert {i.candidate.id for i in result.items} == {"lis-004", "lis-005", "lis-006", "lis-007"}


def test_get_recommendations_top_n():
    request = ScoringRequest(city_id="lisbon", category=Category.essential_experiences)
    result = asyncio.run(get_recommendations(request, _provider()))
    assert isinstance(result, list)
    assert 0 < len(result) <= 20
    assert all(item.candidate.city_id == "lisbon" for item in result)


def test_describe_categories():
    infos = {info.category: info for info in describe_categories()}
    assert set(infos) == set(Category)
    assert infos[Category.historic_sites].output_mode is OutputMode.top_n
    assert infos[Category.historic_sites].top_n == 8
    assert infos[Category.museums].default_page_size == 24
    assert infos[Category.museums].top_n is None
    assert infos[Category.nightlife].threshold == 0.4
