from __future__ import annotations

import asyncio
import importlib.metadata as md
import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.live import Live

from .apps.tracker import TrackingSession, format_stats, render_stats
from .config import FixtrackConfig, load_config, resolve_config_path
from .infrastructure.gps import AsyncGPSClient, FixSource, MockGPSClient, TrackAccumulator

# Typer application: tests import this
app = typer.Typer(no_args_is_help=True, add_completion=False, help="fixtrack CLI")
console = Console()


def _setup_logging(cfg: FixtrackConfig) -> None:
    logging.basicConfig(
        level=cfg.logging.level,
        format=cfg.logging.format,
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def _build_source(cfg: FixtrackConfig, mock: bool) -> FixSource:
    if mock or cfg.gps.mock_mode:
        return MockGPSClient(
            start_lat=cfg.gps.mock_lat,
            start_lon=cfg.gps.mock_lon,
            speed_mps=cfg.gps.mock_speed_mps,
            interval=cfg.gps.mock_interval,
        )
    return AsyncGPSClient(cfg.gps)


@app.command()
def version() -> None:
    """Print version information."""
    try:
        dist_version = md.version("fixtrack")
    except md.PackageNotFoundError:
        from . import __version__

        dist_version = __version__
    console.print(f"fixtrack {dist_version}")
    raise typer.Exit(code=0)


@app.command(name="config-validate")
def config_validate(path: Path = typer.Argument(Path("configs/fixtrack.yml"))) -> None:
    """Validate and show resolved configuration."""
    resolved = resolve_config_path(path)
    console.print(f"Using config: {resolved}")
    try:
        cfg: FixtrackConfig = load_config(resolved)
    except (OSError, ValueError) as exc:
        console.print(f"Config validation failed: {exc}", markup=False)
        raise typer.Exit(code=1) from exc
    console.print("Config OK. Noise gates:")
    console.print(f"- max accuracy: {cfg.tracking.max_accuracy_m} m")
    console.print(f"- min distance: {cfg.tracking.min_distance_m} m")
    console.print(f"- min speed: {cfg.tracking.min_speed_mps} m/s")
    source = "mock" if cfg.gps.mock_mode else f"gpsd {cfg.gps.host}:{cfg.gps.port}"
    console.print(f"- source: {source}")


@app.command()
def config_which(path: Path = typer.Option(Path("configs/fixtrack.yml"), "--config", "-c")) -> None:
    """Print resolved config path by priority rules."""
    resolved = resolve_config_path(path)
    console.print(str(resolved))


@app.command()
def track(
    config: Path = typer.Option(Path("configs/fixtrack.yml"), "--config", "-c"),
    mock: bool = typer.Option(False, "--mock", help="Use simulated fixes instead of gpsd"),
    max_fixes: int | None = typer.Option(None, "--max-fixes", min=1, help="Stop after N fixes"),
) -> None:
    """Track distance from live GPS fixes until interrupted."""
    resolved = resolve_config_path(config)
    if resolved.exists():
        try:
            cfg = load_config(resolved)
        except ValueError as exc:
            console.print(f"Config validation failed: {exc}", markup=False)
            raise typer.Exit(code=1) from exc
    else:
        cfg = FixtrackConfig()
    _setup_logging(cfg)

    if not (mock or cfg.gps.mock_mode or cfg.gps.enabled):
        console.print("GPS is disabled in config; use --mock for simulated fixes.")
        raise typer.Exit(code=1)

    session = TrackingSession(TrackAccumulator.from_config(cfg.tracking))
    source = _build_source(cfg, mock)

    def _renderable():
        return render_stats(session.snapshot(), session.error, session.tracking)

    try:
        with Live(
            console=console,
            refresh_per_second=cfg.display.refresh_per_second,
            transient=True,
            get_renderable=_renderable,
        ):
            asyncio.run(session.run(source, max_fixes=max_fixes))
    except KeyboardInterrupt:
        console.print("Interrupted.")

    for line in format_stats(session.snapshot(), session.error):
        console.print(line, markup=False, highlight=False)
    if session.rejected_count:
        console.print(f"Rejected: {session.rejected_count} fixes")
    if session.error:
        raise typer.Exit(code=1)


def launch() -> None:
    """Entry point when executed as a module/script."""
    cli()


# Click command export
cli = typer.main.get_command(app)

__all__ = ["app", "cli"]

if __name__ == "__main__":
    launch()
