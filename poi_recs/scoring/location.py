"""
Location-fit calculators.

A ``LocationFitScore`` picks a distance curve by the kind of location context:
``city_center`` and ``current_location`` score the distance to the reference
point, ``activity_cluster`` scores the best cluster. Missing context or an
empty cluster list is neutral.
"""
from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass

from ..geo.distance import distance_meters
from .models import Candidate, Coordinates, ScoringContext, TransportMode
from .subscores import clamp_unit
from .tables import DEFAULT_TRANSPORT_RANGE_METERS, TRANSPORT_RANGE_METERS

DistanceBand = Callable[[float], float]
ClusterBand = Callable[[float, float], float]


def _distance_to(point: Coordinates, candidate: Candidate) -> float:
    return distance_meters(point.lat, point.lng, candidate.location.lat, candidate.location.lng)


# ── Distance curves ──────────────────────────────────────────────────────


@dataclass(frozen=True)
class StepBand:
    """Fixed score per distance tier; ``tiers`` are (max meters, score) in ascending order."""

    tiers: tuple[tuple[float, float], ...]
    beyond: float

    def __call__(self, distance: float) -> float:
        for limit, score in self.tiers:
            if distance <= limit:
                return score
        return self.beyond


@dataclass(frozen=True)
class LinearBand:
    max_distance: float

    def __call__(self, distance: float) -> float:
        return max(0.0, 1 - distance / self.max_distance)


@dataclass(frozen=True)
class DecayBand:
    """Full score up to ``full_within``, then piecewise linear decay.

    Each segment is (end meters, starting score, floor) and starts where the
    previous one ended. Distances past the last segment keep decaying along
    it down to its floor.
    """

    full_within: float
    segments: tuple[tuple[float, float, float], ...]

    def __call__(self, distance: float) -> float:
        if distance <= self.full_within:
            return 1.0
        start = self.full_within
        for index, (end, peak, floor) in enumerate(self.segments):
            if distance <= end or index == len(self.segments) - 1:
                return max(floor, peak * (1 - (distance - start) / (end - start)))
            start = end
        return 0.0


@dataclass(frozen=True)
class ScaledRadius:
    scale: float = 1.0

    def __call__(self, distance: float, radius: float) -> float:
        return max(0.0, 1 - distance / (radius * self.scale))


@dataclass(frozen=True)
class TieredRadius:
    """Premium near the cluster core, a flat score inside it, linear falloff outside."""

    core_fraction: float
    inside: float
    falloff_meters: float
    floor: float = 0.0

    def __call__(self, distance: float, radius: float) -> float:
        if distance <= radius * self.core_fraction:
            return 1.0
        if distance <= radius:
            return self.inside
        return max(self.floor, self.inside - (distance - radius) / self.falloff_meters)


# ── Calculators ──────────────────────────────────────────────────────────


@dataclass(frozen=True)
class LocationFitScore:
    city_center: DistanceBand = StepBand(tiers=((2000.0, 1.0), (5000.0, 0.7)), beyond=0.4)
    current_location: DistanceBand = LinearBand(max_distance=5000.0)
    cluster: ClusterBand = ScaledRadius()
    neutral: float = 0.5

    def __call__(self, candidate: Candidate, context: ScoringContext) -> float:
        location_context = context.location_context
        if location_context is None:
            return self.neutral

        if location_context.type == "activity_cluster":
            if not location_context.clusters:
                return self.neutral
            return clamp_unit(max(
                self.cluster(_distance_to(cluster.center, candidate), cluster.radius)
                for cluster in location_context.clusters
            ))

        distance = _distance_to(location_context.reference, candidate)
        if location_context.type == "city_center":
            return clamp_unit(self.city_center(distance))
        return clamp_unit(self.current_location(distance))


def transport_range(modes: Iterable[TransportMode]) -> float:
    """Range of the first preferred mode in table order (transit before driving); walking range otherwise."""
    modes = set(modes)
    for mode, meters in TRANSPORT_RANGE_METERS:
        if mode in modes:
            return meters
    return DEFAULT_TRANSPORT_RANGE_METERS


@dataclass(frozen=True)
class TransportRangeScore:
    """Linear decay from the traveller's current position out to their transport range."""

    neutral: float = 0.5

    def __call__(self, candidate: Candidate, context: ScoringContext) -> float:
        location_context = context.location_context
        if location_context is None or location_context.type != "current_location":
            return self.neutral
        distance = _distance_to(location_context.reference, candidate)
        return clamp_unit(1 - distance / transport_range(context.transport_preferences))
