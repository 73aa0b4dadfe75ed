"""fixtrack Domain Models - Pydantic models for fixes and track results."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

EARTH_RADIUS_M = 6371000  # Earth radius in meters


def haversine(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """
    Great-circle distance between two points using the Haversine formula.

    Args:
        lat1, lon1: First point coordinates (degrees)
        lat2, lon2: Second point coordinates (degrees)

    Returns:
        Distance in meters
    """
    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)
    dlat = math.radians(lat2 - lat1)
    dlon = math.radians(lon2 - lon1)

    a = (
        math.sin(dlat / 2) ** 2
        + math.cos(lat1_rad) * math.cos(lat2_rad) * math.sin(dlon / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_M * c


class Fix(BaseModel):
    """One geolocation reading from a fix source."""

    model_config = ConfigDict(frozen=True)

    latitude: float = Field(..., ge=-90, le=90, allow_inf_nan=False)
    longitude: float = Field(..., ge=-180, le=180, allow_inf_nan=False)
    accuracy: float | None = Field(None, ge=0, allow_inf_nan=False)  # metres, 68% radius; None = unknown
    speed: float | None = Field(None, ge=0, allow_inf_nan=False)  # m/s; None = not reported
    timestamp: int = Field(..., ge=0)  # epoch milliseconds

    @property
    def speed_kmh(self) -> float | None:
        """Speed in km/h, or None when not reported."""
        if self.speed is None:
            return None
        return self.speed * 3.6

    def distance_to(self, other: Fix) -> float:
        """Calculate distance to another fix in meters (Haversine)."""
        return haversine(self.latitude, self.longitude, other.latitude, other.longitude)


class IngestStatus(str, Enum):
    """Outcome of feeding one fix to an accumulator."""

    ACCEPTED = "accepted"
    LOW_ACCURACY = "low_accuracy"
    OUT_OF_ORDER = "out_of_order"


class DistanceMethod(str, Enum):
    """How the distance for an accepted fix was estimated."""

    FIRST = "first"  # no previous fix to measure from
    SPEED = "speed"  # reported speed x elapsed time
    GEOMETRIC = "geometric"  # haversine between positions


@dataclass(frozen=True)
class IngestResult:
    """Result of a single ``TrackAccumulator.ingest`` call."""

    status: IngestStatus
    fix: Fix
    total_distance: float
    path_length: int
    added_distance: float = 0.0
    method: DistanceMethod | None = None

    @property
    def accepted(self) -> bool:
        return self.status is IngestStatus.ACCEPTED

    @property
    def rejected(self) -> bool:
        return not self.accepted


@dataclass(frozen=True)
class TrackSnapshot:
    """Read-only view of accumulated track state for presentation."""

    total_meters: float = 0.0
    points_count: int = 0
    last_fix: Fix | None = None

    @property
    def total_km(self) -> float:
        """Total distance in kilometers."""
        return self.total_meters / 1000.0

    def to_dict(self) -> dict:
        """Export snapshot as dictionary."""
        return {
            "total_meters": self.total_meters,
            "total_km": self.total_km,
            "points_count": self.points_count,
            "last_lat": self.last_fix.latitude if self.last_fix else None,
            "last_lon": self.last_fix.longitude if self.last_fix else None,
        }
