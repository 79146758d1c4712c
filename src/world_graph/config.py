"""Tunable constants for graph seeding, the force model and scheduling."""

from __future__ import annotations

import json
import math
from dataclasses import asdict, dataclass, fields, replace
from pathlib import Path
from typing import Any, Mapping, Sequence, Tuple

Point = Tuple[float, float]

_POINT_FIELDS = ("center", "canvas_size")


def _finite(name: str, value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{name} must be a number, got {value!r}")
    if not math.isfinite(value):
        raise ValueError(f"{name} must be finite, got {value!r}")
    return float(value)


def _point(name: str, value: Any) -> Point:
    if isinstance(value, (str, bytes)) or not isinstance(value, Sequence) or len(value) != 2:
        raise ValueError(f"{name} must be a pair of numbers, got {value!r}")
    return (_finite(name, value[0]), _finite(name, value[1]))


@dataclass(frozen=True)
class SimulationConfig:
    """Force model and scheduling parameters.

    Defaults reproduce the journal app's world map: a 320x320 canvas centred
    at (160, 160), a 60 Hz settle burst of 120 ticks and a 10 Hz idle loop.
    """

    repulsion_constant: float = 3000.0
    spring_constant: float = 0.02
    rest_length: float = 80.0
    centering_constant: float = 0.005
    friction: float = 0.85
    min_distance: float = 1.0
    center: Point = (160.0, 160.0)
    canvas_size: Point = (320.0, 320.0)
    seed_radius_min: float = 30.0
    seed_radius_max: float = 120.0
    settle_tick_count: int = 120
    settle_interval: float = 1.0 / 60.0
    idle_interval: float = 0.1
    edge_lift: float = 20.0

    def __post_init__(self) -> None:
        for f in fields(self):
            value = getattr(self, f.name)
            if f.name in _POINT_FIELDS:
                object.__setattr__(self, f.name, _point(f.name, value))
            elif f.name == "settle_tick_count":
                if isinstance(value, bool) or not isinstance(value, int):
                    raise ValueError(f"{f.name} must be an integer, got {value!r}")
            else:
                object.__setattr__(self, f.name, _finite(f.name, value))
        if self.repulsion_constant < 0.0:
            raise ValueError("repulsion_constant must be non-negative")
        if self.spring_constant < 0.0:
            raise ValueError("spring_constant must be non-negative")
        if self.rest_length < 0.0:
            raise ValueError("rest_length must be non-negative")
        if self.centering_constant < 0.0:
            raise ValueError("centering_constant must be non-negative")
        if not 0.0 < self.friction < 1.0:
            raise ValueError("friction must lie strictly between 0 and 1")
        if self.min_distance <= 0.0:
            raise ValueError("min_distance must be positive")
        if self.canvas_size[0] <= 0 or self.canvas_size[1] <= 0:
            raise ValueError("canvas_size must be positive in both dimensions")
        if self.seed_radius_min < 0.0 or self.seed_radius_max < self.seed_radius_min:
            raise ValueError("seed radii must satisfy 0 <= seed_radius_min <= seed_radius_max")
        if self.settle_tick_count < 0:
            raise ValueError("settle_tick_count must be non-negative")
        if self.settle_interval <= 0.0 or self.idle_interval <= 0.0:
            raise ValueError("settle_interval and idle_interval must be positive")

    def replace(self, **overrides: Any) -> "SimulationConfig":
        return replace(self, **overrides)

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["center"] = list(self.center)
        data["canvas_size"] = list(self.canvas_size)
        return data

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "SimulationConfig":
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown simulation config keys: {', '.join(unknown)}")
        kwargs = dict(data)
        for key in _POINT_FIELDS:
            if isinstance(kwargs.get(key), list):
                kwargs[key] = tuple(kwargs[key])
        return cls(**kwargs)


def load_config(path: Path | str) -> SimulationConfig:
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(data, Mapping):
        raise ValueError(f"Config file {path} must contain a JSON object")
    return SimulationConfig.from_mapping(data)
