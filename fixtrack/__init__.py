"""fixtrack - noise-filtered distance tracking over a live GPS fix stream."""

__version__ = "0.1.0"
