"""GPS infrastructure - fix sources and distance accumulation."""

from .distance import TrackAccumulator, TrackState, calculate_distance
from .gpsd_client import AsyncGPSClient, MockGPSClient
from .source import FixSource, SourceUnavailable

__all__ = [
    "AsyncGPSClient",
    "FixSource",
    "MockGPSClient",
    "SourceUnavailable",
    "TrackAccumulator",
    "TrackState",
    "calculate_distance",
]
