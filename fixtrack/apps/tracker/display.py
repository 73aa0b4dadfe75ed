"""Terminal rendering of current track stats."""

from __future__ import annotations

from rich.panel import Panel
from rich.text import Text

from ...domain.models import TrackSnapshot


def format_stats(snapshot: TrackSnapshot, error: str | None = None) -> list[str]:
    """Plain text lines for the current stats."""
    lines: list[str] = []
    if error:
        lines.append(error)

    lines.append(f"Distance: {snapshot.total_km:.3f} km ({snapshot.total_meters:.1f} meters)")
    lines.append(f"Points: {snapshot.points_count} GPS readings")

    fix = snapshot.last_fix
    if fix is not None:
        lines.append("Current Position")
        lines.append(f"Latitude: {fix.latitude:.6f}°")
        lines.append(f"Longitude: {fix.longitude:.6f}°")
        if fix.accuracy is not None:
            lines.append(f"Accuracy: ±{fix.accuracy:.1f} m")
        if fix.speed_kmh is not None:
            lines.append(f"Speed: {fix.speed_kmh:.1f} km/h")
    return lines


def render_stats(snapshot: TrackSnapshot, error: str | None = None, tracking: bool = False) -> Panel:
    text = Text()
    for i, line in enumerate(format_stats(snapshot, error)):
        if i:
            text.append("\n")
        text.append(line, style="bold red" if error and i == 0 else None)
    title = "Tracking" if tracking else "Stopped"
    return Panel(text, title=f"Location Tracker - {title}", border_style="green" if tracking else "blue")
