"""Quick-look rendering of a generated world.

Draws cell centres as an equirectangular scatter (longitude × latitude)
coloured by plate, surface label, boundary flag or velocity magnitude.
Requires ``matplotlib``.
"""

from __future__ import annotations

import math
import random
from pathlib import Path
from typing import List, Optional, Tuple, Union

import numpy as np

from .models import SurfaceLabel
from .world import WorldState

RGB = Tuple[float, float, float]

LAND_COLOUR: RGB = (0.565, 0.933, 0.565)
OCEAN_COLOUR: RGB = (0.0, 0.412, 0.58)
BOUNDARY_COLOUR: RGB = (0.0, 0.0, 0.0)
UNASSIGNED_COLOUR: RGB = (1.0, 1.0, 1.0)

RENDER_MODES = ("plates", "surface", "boundaries", "velocity")


def plate_palette(n_plates: int, rng: Optional[random.Random] = None) -> List[RGB]:
    """One random colour per plate."""
    rng = rng if rng is not None else random.Random(0)
    return [(rng.random(), rng.random(), rng.random()) for _ in range(n_plates)]


def _ensure_mpl():
    """Lazy-import matplotlib; raise helpful error if missing."""
    try:
        import matplotlib

        matplotlib.use("Agg")
        import matplotlib.pyplot as plt
        return plt
    except ImportError as exc:
        raise RuntimeError(
            "matplotlib is required for rendering. "
            "Install with `pip install matplotlib`."
        ) from exc


def lon_lat_deg(centers: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """Convert ``(N, 3)`` cartesian centres to longitude / latitude degrees."""
    r = np.linalg.norm(centers, axis=1)
    r[r == 0] = 1.0
    lon = np.degrees(np.arctan2(centers[:, 1], centers[:, 0]))
    lat = np.degrees(np.arcsin(np.clip(centers[:, 2] / r, -1.0, 1.0)))
    return lon, lat


def cell_colours(
    world: WorldState,
    mode: str = "plates",
    *,
    palette: Optional[List[RGB]] = None,
) -> List[RGB]:
    """Per-cell RGB colours for *mode* (one of :data:`RENDER_MODES`)."""
    if mode not in RENDER_MODES:
        raise ValueError(f"Unknown render mode {mode!r}; expected one of {RENDER_MODES}")
    owners = world.assignment.as_list()

    if mode == "plates":
        palette = palette or plate_palette(world.n_plates)
        return [UNASSIGNED_COLOUR if r is None else palette[r] for r in owners]

    if mode == "surface":
        labels = world.surface_labels
        if labels is None:
            return [UNASSIGNED_COLOUR] * len(owners)
        return [OCEAN_COLOUR if lbl is SurfaceLabel.OCEAN else LAND_COLOUR for lbl in labels]

    if mode == "boundaries":
        palette = palette or plate_palette(world.n_plates)
        flags = world.boundary_flags or (False,) * len(owners)
        return [
            BOUNDARY_COLOUR if flag else (UNASSIGNED_COLOUR if r is None else palette[r])
            for r, flag in zip(owners, flags)
        ]

    velocities = world.velocities
    if velocities is None:
        return [UNASSIGNED_COLOUR] * len(owners)
    speed = np.linalg.norm(velocities, axis=1)
    top = float(speed.max()) if speed.size and speed.max() > 0 else 1.0
    return [(float(s / top), 0.2, float(1.0 - s / top)) for s in speed]


def render_world_png(
    world: WorldState,
    path: Union[str, Path],
    *,
    mode: str = "plates",
    palette: Optional[List[RGB]] = None,
    dpi: int = 150,
    point_size: Optional[float] = None,
) -> Path:
    """Render *world* to a PNG file and return the output path."""
    plt = _ensure_mpl()

    centers = np.asarray(world.graph.centers)
    lon, lat = lon_lat_deg(centers)
    colours = cell_colours(world, mode, palette=palette)
    if point_size is None:
        point_size = max(1.0, 4000.0 / max(len(world), 1))

    fig, ax = plt.subplots(figsize=(12, 6))
    ax.scatter(lon, lat, c=colours, s=point_size, marker="h", linewidths=0)
    if mode == "velocity":
        arrows = velocity_arrows(world, stride=max(1, len(world) // 800))
        if arrows:
            x, y, u, v = zip(*arrows)
            ax.quiver(x, y, u, v, color="#2b2b2b", width=0.0015)
    ax.set_xlim(-180, 180)
    ax.set_ylim(-90, 90)
    ax.set_aspect("equal")
    ax.set_xlabel("longitude (°)")
    ax.set_ylabel("latitude (°)")
    ax.set_title(f"{mode} — {world.n_plates} plates, {len(world)} cells")

    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(out, dpi=dpi, bbox_inches="tight")
    plt.close(fig)
    return out


def velocity_arrows(world: WorldState, stride: int = 1) -> List[Tuple[float, float, float, float]]:
    """Return ``(lon, lat, d_lon, d_lat)`` arrow tuples for velocity overlays.

    The 3-D tangent velocity is projected onto the local east / north
    axes.  Every *stride*-th cell is included.
    """
    velocities = world.velocities
    if velocities is None:
        return []
    centers = np.asarray(world.graph.centers)
    lon, lat = lon_lat_deg(centers)
    arrows = []
    for idx in range(0, len(centers), max(stride, 1)):
        lo, la = math.radians(lon[idx]), math.radians(lat[idx])
        east = np.array([-math.sin(lo), math.cos(lo), 0.0])
        north = np.array([
            -math.sin(la) * math.cos(lo),
            -math.sin(la) * math.sin(lo),
            math.cos(la),
        ])
        v = velocities[idx]
        arrows.append((float(lon[idx]), float(lat[idx]), float(v @ east), float(v @ north)))
    return arrows
