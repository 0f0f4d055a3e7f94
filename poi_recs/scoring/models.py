from __future__ import annotations

from datetime import datetime
from enum import Enum, IntEnum
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field


class PriceLevel(str, Enum):
    UNSPECIFIED = "UNSPECIFIED"
    FREE = "FREE"
    INEXPENSIVE = "INEXPENSIVE"
    MODERATE = "MODERATE"
    EXPENSIVE = "EXPENSIVE"
    VERY_EXPENSIVE = "VERY_EXPENSIVE"


class RatingTier(str, Enum):
    LOW = "LOW"
    AVERAGE = "AVERAGE"
    HIGH = "HIGH"
    EXCEPTIONAL = "EXCEPTIONAL"


class ReviewCountTier(str, Enum):
    LOW = "LOW"
    MODERATE = "MODERATE"
    HIGH = "HIGH"
    VERY_HIGH = "VERY_HIGH"


class BusinessStatus(str, Enum):
    OPERATIONAL = "OPERATIONAL"
    CLOSED_TEMPORARILY = "CLOSED_TEMPORARILY"
    CLOSED_PERMANENTLY = "CLOSED_PERMANENTLY"


class SeasonalAvailability(str, Enum):
    ALL_YEAR = "ALL_YEAR"
    SPRING = "SPRING"
    SUMMER = "SUMMER"
    FALL = "FALL"
    WINTER = "WINTER"


class Budget(str, Enum):
    budget = "budget"
    moderate = "moderate"
    luxury = "luxury"


class CrowdPreference(str, Enum):
    popular = "popular"
    hidden = "hidden"
    mixed = "mixed"


class EnergyLevel(IntEnum):
    light = 1
    moderate = 2
    active = 3


class TripPhase(str, Enum):
    planning = "planning"
    active = "active"


class StartTime(str, Enum):
    early = "early"
    mid = "mid"
    late = "late"


class TransportMode(str, Enum):
    walking = "walking"
    public_transit = "public-transit"
    taxi = "taxi"
    driving = "driving"


class Interest(str, Enum):
    outdoors = "outdoors"
    arts = "arts"
    food = "food"
    entertainment = "entertainment"
    photography = "photography"
    history = "history"


# ── Candidate records ────────────────────────────────────────────────────


class Coordinates(BaseModel):
    model_config = ConfigDict(frozen=True)

    lat: float = Field(..., ge=-90.0, le=90.0)
    lng: float = Field(..., ge=-180.0, le=180.0)


class Location(Coordinates):
    address: str = ""
    neighborhood: str | None = None


class TimeOfDay(BaseModel):
    model_config = ConfigDict(frozen=True)

    day: int = Field(..., ge=0, le=6)
    hour: int | None = Field(default=None, ge=0, le=23)
    minute: int = Field(default=0, ge=0, le=59)


class OpeningPeriod(BaseModel):
    model_config = ConfigDict(frozen=True)

    open: TimeOfDay | None = None
    close: TimeOfDay | None = None

    @property
    def is_valid(self) -> bool:
        return (
            self.open is not None
            and self.close is not None
            and self.open.hour is not None
            and self.close.hour is not None
        )


class OpeningHours(BaseModel):
    model_config = ConfigDict(frozen=True)

    periods: tuple[OpeningPeriod, ...] = ()
    open_now: bool | None = None
    next_close_time: datetime | None = None


class Candidate(BaseModel):
    """A point of interest as delivered by the candidate provider."""

    model_config = ConfigDict(frozen=True)

    id: str
    city_id: str
    name: str
    place_types: frozenset[str] = frozenset()
    primary_type: str | None = None
    rating: float = Field(default=0.0, ge=0.0, le=5.0)
    rating_tier: RatingTier = RatingTier.AVERAGE
    review_count: int = Field(default=0, ge=0)
    review_count_tier: ReviewCountTier = ReviewCountTier.LOW
    price_level: PriceLevel = PriceLevel.UNSPECIFIED
    is_must_see: bool = False
    is_tourist_attraction: bool = False
    business_status: BusinessStatus = BusinessStatus.OPERATIONAL
    location: Location
    opening_hours: OpeningHours | None = None
    duration: int = Field(default=60, ge=0, description="Typical visit length in minutes")
    seasonal_availability: SeasonalAvailability = SeasonalAvailability.ALL_YEAR
    description: str | None = None


# ── Scoring context ──────────────────────────────────────────────────────


class ActivityCluster(BaseModel):
    model_config = ConfigDict(frozen=True)

    center: Coordinates
    radius: float = Field(..., gt=0.0, description="Meters")


class SelectedActivity(BaseModel):
    id: str
    location: Coordinates
    start_time: datetime | None = None
    place_types: list[str] = Field(default_factory=list)


class CityCenterContext(BaseModel):
    type: Literal["city_center"] = "city_center"
    reference: Coordinates


class CurrentLocationContext(BaseModel):
    type: Literal["current_location"] = "current_location"
    reference: Coordinates


class ActivityClusterContext(BaseModel):
    type: Literal["activity_cluster"] = "activity_cluster"
    reference: Coordinates | None = None
    clusters: list[ActivityCluster] = Field(default_factory=list)


LocationContext = Annotated[
    CityCenterContext | CurrentLocationContext | ActivityClusterContext,
    Field(discriminator="type"),
]


class CuisinePreferences(BaseModel):
    preferred: list[str] = Field(default_factory=list)
    avoided: list[str] = Field(default_factory=list)


class ScoringContext(BaseModel):
    """Per-request preferences the engine scores against. Never mutated by the engine."""

    model_config = ConfigDict(frozen=True)

    budget: Budget = Budget.moderate
    interests: frozenset[Interest] = frozenset()
    transport_preferences: frozenset[TransportMode] = frozenset()
    crowd_preference: CrowdPreference | None = None
    energy_level: EnergyLevel | None = None
    dietary_restrictions: frozenset[str] = frozenset()
    cuisine_preferences: CuisinePreferences = Field(default_factory=CuisinePreferences)
    price_preference: int | None = Field(default=None, ge=1, le=3)
    location_context: LocationContext | None = None
    selected_activities: tuple[SelectedActivity, ...] = ()
    preferred_start_time: StartTime | None = None
    phase: TripPhase = TripPhase.planning
    reference_time: datetime | None = None

    @property
    def reference_point(self) -> Coordinates | None:
        """The anchor coordinates of the location context, if it has one."""
        if self.location_context is None:
            return None
        return self.location_context.reference


# ── Results ──────────────────────────────────────────────────────────────


class ScoredCandidate(BaseModel):
    candidate: Candidate
    score: float
    sub_scores: dict[str, float] = Field(default_factory=dict)


class PaginationParams(BaseModel):
    page: int = 1
    page_size: int | None = None


class Page(BaseModel):
    items: list[ScoredCandidate]
    total: int
    page: int
    page_size: int
    total_pages: int
    has_next_page: bool
    has_previous_page: bool
