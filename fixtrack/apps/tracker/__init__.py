"""Tracking session and stats rendering around the track accumulator."""

from .display import format_stats, render_stats
from .session import TrackingSession

__all__ = ["TrackingSession", "format_stats", "render_stats"]
