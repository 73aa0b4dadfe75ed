from __future__ import annotations

import logging
import os
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator


class TrackingConfig(BaseModel):
    """Noise gates applied by the track accumulator."""

    max_accuracy_m: float = Field(20.0, gt=0)  # Reject fixes less accurate than this
    min_distance_m: float = Field(5.0, ge=0)  # Positional jitter gate
    min_speed_mps: float = Field(0.5, ge=0)  # Reported speed trusted above this


class GPSConfig(BaseModel):
    """GPS daemon configuration."""

    enabled: bool = Field(True)
    host: str = Field("localhost")
    port: int = Field(2947, ge=1, le=65535)
    timeout: float = Field(10.0, ge=1.0)
    reconnect_delay: float = Field(5.0, ge=0.0)
    max_reconnect_attempts: int = Field(0, ge=0)  # 0 = infinite
    mock_mode: bool = Field(False)  # Use mock GPS for testing
    mock_lat: float = Field(41.0082, ge=-90, le=90)  # Istanbul default
    mock_lon: float = Field(28.9784, ge=-180, le=180)
    mock_speed_mps: float | None = Field(1.0, ge=0)
    mock_interval: float = Field(1.0, ge=0.0)

    @field_validator("host")
    @classmethod
    def _validate_host(cls, value: str) -> str:
        if not value or any(c.isspace() for c in value):
            raise ValueError("host must be a valid hostname or IP")
        return value


class LoggingConfig(BaseModel):
    level: str = Field("INFO")
    format: str = Field("%(asctime)s | %(name)s | %(levelname)s | %(message)s")

    @field_validator("level")
    @classmethod
    def _validate_level(cls, value: str) -> str:
        level = value.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"invalid log level: {value}")
        return level


class DisplayConfig(BaseModel):
    refresh_per_second: float = Field(4.0, gt=0, le=30)


class FixtrackConfig(BaseModel):
    tracking: TrackingConfig = Field(default_factory=TrackingConfig)
    gps: GPSConfig = Field(default_factory=GPSConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    display: DisplayConfig = Field(default_factory=DisplayConfig)


def load_config(path: Path) -> FixtrackConfig:
    with Path(path).expanduser().open("r", encoding="utf-8") as fp:
        raw = yaml.safe_load(fp) or {}
    try:
        return FixtrackConfig.model_validate(raw)
    except ValidationError as exc:  # pragma: no cover - formatting
        raise ValueError(str(exc)) from exc


def resolve_config_path(cli_path: Path | None) -> Path:
    """Resolve config path by priority: CLI, env, /etc/fixtrack, repo configs."""
    candidates: list[Path] = []
    if cli_path:
        p = Path(cli_path).expanduser()
        if p.exists():
            return p.resolve()
        candidates.append(p)
    env = os.environ.get("FIXTRACK_CONFIG")
    if env:
        p = Path(env).expanduser()
        if p.exists():
            return p.resolve()
        candidates.append(p)
    for p in [Path("/etc/fixtrack/fixtrack.yml"), Path("configs/fixtrack.yml")]:
        if p.exists():
            return p.resolve()
        candidates.append(p)
    # Fallback to first candidate even if not exists to surface errors consistently
    return candidates[0] if candidates else Path("configs/fixtrack.yml").resolve()
