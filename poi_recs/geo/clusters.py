from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np

from ..scoring.models import ActivityCluster, Coordinates, SelectedActivity
from .distance import distances_from


@dataclass(frozen=True)
class ClusterSpec:
    min_radius: float = 2000.0
    spread_factor: float = 1.0
    # Only activities starting at or after this hour take part, when set.
    min_start_hour: int | None = None


DEFAULT_CLUSTER_SPEC = ClusterSpec()
EVENING_CLUSTER_SPEC = ClusterSpec(min_radius=800.0, spread_factor=0.8, min_start_hour=17)
WELLNESS_CLUSTER_SPEC = ClusterSpec(min_radius=3000.0)


def build_activity_clusters(
    activities: Sequence[SelectedActivity],
    spec: ClusterSpec = DEFAULT_CLUSTER_SPEC,
) -> list[ActivityCluster]:
    """Summarise already-selected activities as one geographic cluster.

    The center is the plain mean of latitudes and longitudes, which is fine at
    city scale. The radius covers one (scaled) standard deviation past the mean
    distance to the center and never drops below ``spec.min_radius``.
    Fewer than two usable activities yields no clusters.
    """
    if spec.min_start_hour is not None:
        activities = [
            a for a in activities
            if a.start_time is not None and a.start_time.hour >= spec.min_start_hour
        ]
    if len(activities) < 2:
        return []

    points = np.array([[a.location.lat, a.location.lng] for a in activities], dtype=float)
    center_lat, center_lng = points.mean(axis=0)
    distances = distances_from(center_lat, center_lng, points)

    # np.std defaults to the population deviation
    radius = max(spec.min_radius, float(distances.mean() + spec.spread_factor * distances.std()))
    center = Coordinates(lat=float(center_lat), lng=float(center_lng))
    return [ActivityCluster(center=center, radius=radius)]
