"""fixtrack Domain Layer - Core models and result types."""

from .models import DistanceMethod, Fix, IngestResult, IngestStatus, TrackSnapshot

__all__ = [
    "DistanceMethod",
    "Fix",
    "IngestResult",
    "IngestStatus",
    "TrackSnapshot",
]
