"""
GPS Track Accumulator
=====================

Accumulates total distance traveled from a live stream of GPS fixes.

Two estimates are reconciled per fix: the device-reported speed (when the
device reports meaningful movement) and the Haversine distance between
consecutive positions (gated to filter jitter). Output is never revised;
``total_meters`` only grows until ``reset()``.

Usage:
    tracker = TrackAccumulator()

    for fix in fix_stream:
        result = tracker.ingest(fix)
        if result.accepted:
            print(f"total: {tracker.total_km:.3f}km over {result.path_length} points")
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional

from ...domain.models import (
    DistanceMethod,
    Fix,
    IngestResult,
    IngestStatus,
    TrackSnapshot,
    haversine,
)

if TYPE_CHECKING:
    from ...config import TrackingConfig

logger = logging.getLogger(__name__)


@dataclass
class TrackState:
    """Accumulated state for one track."""

    last_accepted: Optional[Fix] = None
    path: list[Fix] = field(default_factory=list)
    total_distance: float = 0.0


@dataclass
class TrackAccumulator:
    """
    Single-pass distance accumulator over a fix stream.

    Not thread-safe: callers must serialize ``ingest`` calls.
    """

    max_accuracy_m: float = 20.0  # Reject fixes less accurate than this
    min_distance_m: float = 5.0  # Ignore positional jitter below this threshold
    min_speed_mps: float = 0.5  # Trust reported speed only above this
    state: TrackState = field(default_factory=TrackState)

    @classmethod
    def from_config(cls, config: TrackingConfig) -> TrackAccumulator:
        return cls(
            max_accuracy_m=config.max_accuracy_m,
            min_distance_m=config.min_distance_m,
            min_speed_mps=config.min_speed_mps,
        )

    def ingest(self, fix: Fix) -> IngestResult:
        """
        Feed one fix to the accumulator.

        Args:
            fix: Next fix from the source, in arrival order

        Returns:
            IngestResult with the updated totals, or a rejection status.
            Rejected fixes leave the state untouched.
        """
        last = self.state.last_accepted

        if last is not None and fix.timestamp < last.timestamp:
            logger.debug(
                "Out of order fix (%d < %d), skipping", fix.timestamp, last.timestamp
            )
            return self._rejected(IngestStatus.OUT_OF_ORDER, fix)

        if fix.accuracy is not None and fix.accuracy > self.max_accuracy_m:
            logger.debug("Low accuracy, skipping (%.1fm)", fix.accuracy)
            return self._rejected(IngestStatus.LOW_ACCURACY, fix)

        added = 0.0
        if last is None:
            method = DistanceMethod.FIRST
        elif fix.speed is not None and fix.speed > self.min_speed_mps:
            # Reported speed already filters positional noise: no distance gate
            method = DistanceMethod.SPEED
            elapsed = (fix.timestamp - last.timestamp) / 1000
            added = fix.speed * elapsed
        else:
            method = DistanceMethod.GEOMETRIC
            distance = haversine(
                last.latitude, last.longitude, fix.latitude, fix.longitude
            )
            if distance >= self.min_distance_m:
                added = distance

        self.state.total_distance += added
        self.state.path.append(fix)
        self.state.last_accepted = fix

        return IngestResult(
            status=IngestStatus.ACCEPTED,
            fix=fix,
            total_distance=self.state.total_distance,
            path_length=len(self.state.path),
            added_distance=added,
            method=method,
        )

    def _rejected(self, status: IngestStatus, fix: Fix) -> IngestResult:
        return IngestResult(
            status=status,
            fix=fix,
            total_distance=self.state.total_distance,
            path_length=len(self.state.path),
        )

    @property
    def total_meters(self) -> float:
        """Total distance in meters."""
        return self.state.total_distance

    @property
    def total_km(self) -> float:
        """Total distance in kilometers."""
        return self.state.total_distance / 1000.0

    @property
    def points_count(self) -> int:
        return len(self.state.path)

    @property
    def last_accepted(self) -> Optional[Fix]:
        return self.state.last_accepted

    @property
    def path(self) -> tuple[Fix, ...]:
        """Accepted fixes in arrival order."""
        return tuple(self.state.path)

    @property
    def is_active(self) -> bool:
        """True once a fix has been accepted."""
        return self.state.last_accepted is not None

    def reset(self) -> None:
        """Reset tracker to initial state."""
        self.state.last_accepted = None
        self.state.path.clear()
        self.state.total_distance = 0.0

    def snapshot(self) -> TrackSnapshot:
        """Immutable view of the current totals."""
        return TrackSnapshot(
            total_meters=self.state.total_distance,
            points_count=len(self.state.path),
            last_fix=self.state.last_accepted,
        )

    def to_dict(self) -> dict:
        """Export tracker state as dictionary."""
        return self.snapshot().to_dict()


def calculate_distance(
    lat1: float, lon1: float, lat2: float, lon2: float
) -> float:
    """
    Convenience function to calculate distance between two points.

    Args:
        lat1, lon1: First point coordinates (degrees)
        lat2, lon2: Second point coordinates (degrees)

    Returns:
        Distance in meters
    """
    return haversine(lat1, lon1, lat2, lon2)
