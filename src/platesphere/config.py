"""World generation configuration.

Usage
-----
>>> from platesphere.config import SMALL_WORLD, load_config
>>> cfg = load_config("world.json")
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional, Union


# ═══════════════════════════════════════════════════════════════════
# Configuration
# ═══════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class WorldGenConfig:
    """All tuneable parameters for plate generation.

    Attributes
    ----------
    n_plates : int
        Number of plates *K*.
    max_size_ratio : float
        Plate size imbalance tolerance *R* during flood fill.
    ocean_divisor : int
        ``n_plates // ocean_divisor`` plates become ocean.
    frequency : int
        Icosphere subdivision frequency (cells = 10 × freq² + 2).
    radius : float
        Sphere radius.
    cells_per_tick : int
        Flood-fill steps run per simulation tick.
    max_speed : float
        Upper bound of the random plate angular speed.
    seed : int or None
        Master random seed; *None* for a fresh run every time.
    """

    n_plates: int = 40
    max_size_ratio: float = 3.0
    ocean_divisor: int = 3
    frequency: int = 20
    radius: float = 1.0
    cells_per_tick: int = 1
    max_speed: float = 1.0
    seed: Optional[int] = None

    def __post_init__(self) -> None:
        if self.n_plates < 1:
            raise ValueError("n_plates must be >= 1")
        if self.max_size_ratio < 1.0:
            raise ValueError("max_size_ratio must be >= 1")
        if self.ocean_divisor < 1:
            raise ValueError("ocean_divisor must be >= 1")
        if self.frequency < 1:
            raise ValueError("frequency must be >= 1")
        if self.radius <= 0:
            raise ValueError("radius must be > 0")
        if self.cells_per_tick < 1:
            raise ValueError("cells_per_tick must be >= 1")
        if self.max_speed < 0:
            raise ValueError("max_speed must be >= 0")

    @property
    def ocean_plate_count(self) -> int:
        return self.n_plates // self.ocean_divisor

    def with_overrides(self, **changes: Any) -> "WorldGenConfig":
        """Return a copy with every non-``None`` keyword applied."""
        return replace(self, **{k: v for k, v in changes.items() if v is not None})

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "WorldGenConfig":
        known = {f.name for f in fields(cls)}
        unknown = set(payload) - known
        if unknown:
            raise ValueError(f"Unknown config keys: {sorted(unknown)}")
        return cls(**payload)


# ═══════════════════════════════════════════════════════════════════
# Preset configs
# ═══════════════════════════════════════════════════════════════════

DEFAULT_WORLD = WorldGenConfig()

SMALL_WORLD = WorldGenConfig(
    n_plates=12,
    frequency=8,
    cells_per_tick=4,
)

DETAILED_WORLD = WorldGenConfig(
    n_plates=40,
    frequency=40,
    cells_per_tick=32,
)


def load_config(path: Union[str, Path]) -> WorldGenConfig:
    """Read a :class:`WorldGenConfig` from a JSON object file."""
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError("Config file must contain a JSON object")
    return WorldGenConfig.from_dict(data)
