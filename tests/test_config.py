from pathlib import Path

import pytest

from fixtrack.config import FixtrackConfig, load_config, resolve_config_path


def test_default_model_has_expected_gates():
    cfg = FixtrackConfig()
    assert cfg.tracking.max_accuracy_m == 20.0
    assert cfg.tracking.min_distance_m == 5.0
    assert cfg.tracking.min_speed_mps == 0.5
    assert cfg.gps.port == 2947
    assert cfg.gps.timeout == 10.0
    assert cfg.logging.level == "INFO"


def test_yaml_loads_and_validates(tmp_path: Path):
    yml = tmp_path / "fixtrack.yml"
    yml.write_text(
        """
tracking:
  min_distance_m: 3
gps:
  host: gps.local
logging:
  level: debug
        """.strip(),
        encoding="utf-8",
    )
    cfg = load_config(yml)
    assert cfg.tracking.min_distance_m == 3
    assert cfg.tracking.max_accuracy_m == 20.0
    assert cfg.gps.host == "gps.local"
    assert cfg.logging.level == "DEBUG"


def test_empty_yaml_gives_defaults(tmp_path: Path):
    yml = tmp_path / "fixtrack.yml"
    yml.write_text("", encoding="utf-8")
    assert load_config(yml) == FixtrackConfig()


@pytest.mark.parametrize(
    "body",
    [
        "tracking:\n  max_accuracy_m: 0",
        "tracking:\n  min_distance_m: -1",
        "gps:\n  port: 70000",
        "gps:\n  host: 'bad host'",
        "logging:\n  level: LOUD",
    ],
)
def test_invalid_values_raise(tmp_path: Path, body: str):
    yml = tmp_path / "fixtrack.yml"
    yml.write_text(body, encoding="utf-8")
    with pytest.raises(ValueError):
        load_config(yml)


def test_shipped_config_is_valid():
    shipped = Path(__file__).resolve().parent.parent / "configs" / "fixtrack.yml"
    cfg = load_config(shipped)
    assert cfg == FixtrackConfig()


def test_resolve_prefers_cli(tmp_path, monkeypatch):
    cfg = tmp_path / "a.yml"
    cfg.write_text("{}", encoding="utf-8")
    monkeypatch.setenv("FIXTRACK_CONFIG", str(tmp_path / "b.yml"))
    assert resolve_config_path(cfg) == cfg.resolve()


def test_resolve_env_when_no_cli(tmp_path, monkeypatch):
    cfg = tmp_path / "b.yml"
    cfg.write_text("{}", encoding="utf-8")
    monkeypatch.setenv("FIXTRACK_CONFIG", str(cfg))
    assert resolve_config_path(None) == cfg.resolve()


def test_resolve_falls_back_to_missing_cli_path(tmp_path, monkeypatch):
    monkeypatch.delenv("FIXTRACK_CONFIG", raising=False)
    monkeypatch.chdir(tmp_path)
    missing = tmp_path / "missing.yml"
    assert resolve_config_path(missing) == missing
