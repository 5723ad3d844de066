from __future__ import annotations

from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Optional

import yaml

from .errors import ConfigurationError


@dataclass
class ShoalConfig:
    running: bool = True
    paused: bool = False
    width: int = 1_920
    height: int = 1_080
    entity_count: int = 500
    direction_change_prob: float = 0.1
    speed_change_prob: float = 0.05
    stress_change_prob: float = 0.001
    # Degrees; None sees the full circle.
    attraction_fov: Optional[float] = None
    alignment_fov: Optional[float] = None
    attraction_radius: float = 50.0
    alignment_radius: float = 30.0
    avoidance_radius: float = 10.0


@dataclass
class EngineConfig:
    seed: Optional[int] = None
    smoothing_rate: float = 10.0
    snap_epsilon: float = 1e-3
    max_delta_time: float = 0.25
    # When set, every tick advances by this many seconds instead of wall time.
    fixed_time_step: Optional[float] = None
    wrap_neighbor_cells: bool = True
    idle_speed_range: tuple[float, float] = (10.0, 100.0)
    idle_stress_range: tuple[float, float] = (0.1, 0.5)


@dataclass
class AppConfig:
    simulation: ShoalConfig = field(default_factory=ShoalConfig)
    engine: EngineConfig = field(default_factory=EngineConfig)
    broadcast_interval: int = 1
    log_level: str = "INFO"
    # Release page that redirects to the latest tag; None disables the check.
    release_url: Optional[str] = None

    @staticmethod
    def from_yaml(path: Path) -> "AppConfig":
        try:
            data = yaml.safe_load(Path(path).read_text())
        except (OSError, yaml.YAMLError) as exc:
            raise ConfigurationError(f"cannot read config {path}: {exc}") from exc
        return load_config(data or {})


def _pair(value: tuple[float, float] | list[float] | None, default: tuple[float, float]) -> tuple[float, float]:
    if isinstance(value, (tuple, list)) and len(value) == 2:
        return (float(value[0]), float(value[1]))
    return default


def _build(cls, raw: dict, section: str):
    known = {f.name for f in fields(cls)}
    unknown = set(raw) - known
    if unknown:
        raise ConfigurationError(f"unknown {section} keys: {', '.join(sorted(unknown))}")
    return cls(**raw)


def load_config(raw: dict) -> AppConfig:
    if not isinstance(raw, dict):
        raise ConfigurationError("config root must be a mapping")
    default_engine = EngineConfig()
    simulation = _build(ShoalConfig, raw.get("simulation") or {}, "simulation")
    engine_raw = dict(raw.get("engine") or {})
    engine_raw["idle_speed_range"] = _pair(engine_raw.get("idle_speed_range"), default_engine.idle_speed_range)
    engine_raw["idle_stress_range"] = _pair(engine_raw.get("idle_stress_range"), default_engine.idle_stress_range)
    engine = _build(EngineConfig, engine_raw, "engine")
    app_values = {k: v for k, v in raw.items() if k not in {"simulation", "engine"}}
    app = _build(AppConfig, {**app_values, "simulation": simulation, "engine": engine}, "app")
    validate_config(app.simulation)
    return app


def validate_config(config: ShoalConfig) -> None:
    """Reject configurations the simulator cannot run sensibly.

    The simulator itself trusts whatever it is given; this check belongs to
    the layers that build configurations (YAML loading, the web controller).
    """

    if config.width <= 2 or config.height <= 2:
        raise ConfigurationError(f"arena must be larger than 2x2, got {config.width}x{config.height}")
    if config.entity_count < 0:
        raise ConfigurationError(f"entity_count must be >= 0, got {config.entity_count}")
    for name in ("direction_change_prob", "speed_change_prob", "stress_change_prob"):
        value = getattr(config, name)
        if not 0.0 <= value <= 1.0:
            raise ConfigurationError(f"{name} must be within [0, 1], got {value}")
    if config.avoidance_radius < 0.0:
        raise ConfigurationError("radii must be non-negative")
    if not config.avoidance_radius < config.alignment_radius < config.attraction_radius:
        raise ConfigurationError(
            "radii must be nested: avoidance < alignment < attraction, got "
            f"{config.avoidance_radius} / {config.alignment_radius} / {config.attraction_radius}"
        )
    for name in ("attraction_fov", "alignment_fov"):
        value = getattr(config, name)
        if value is not None and not 0.0 <= value <= 360.0:
            raise ConfigurationError(f"{name} must be within [0, 360] degrees, got {value}")
