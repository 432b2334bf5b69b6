"""Plate velocity field — rigid rotation of every plate about the origin.

Each plate gets an angular-velocity vector ω (uniform random direction,
uniform random speed).  A cell at position *p* then moves with
``v = ω × p``, which is tangent to the sphere and identical in form for
every cell of the same plate.
"""

from __future__ import annotations

import math
import random
from typing import Sequence

import numpy as np

from .assignment import RegionAssignment
from .cellgraph import CellGraph


def random_unit_vector(rng: random.Random) -> np.ndarray:
    """Uniformly sample a direction on the unit sphere."""
    u = rng.uniform(-1.0, 1.0)
    theta = rng.uniform(0.0, 2.0 * math.pi)
    r = math.sqrt(1.0 - u * u)
    return np.array([r * math.cos(theta), r * math.sin(theta), u])


def random_rotation_vector(rng: random.Random, max_speed: float = 1.0) -> np.ndarray:
    """Angular velocity with uniform direction and speed in ``[0, max_speed]``."""
    return random_unit_vector(rng) * rng.uniform(0.0, max_speed)


def plate_rotation_vectors(
    n_plates: int,
    rng: random.Random,
    max_speed: float = 1.0,
) -> np.ndarray:
    """``(n_plates, 3)`` array of angular velocities."""
    if n_plates == 0:
        return np.zeros((0, 3))
    return np.stack([random_rotation_vector(rng, max_speed) for _ in range(n_plates)])


def velocity_field(
    graph: CellGraph,
    assignment: RegionAssignment,
    omegas: Sequence[Sequence[float]],
) -> np.ndarray:
    """Return the ``(num_cells, 3)`` linear velocity of every cell."""
    if not assignment.is_complete():
        raise RuntimeError("Plate assignment incomplete; cannot derive velocities")
    omegas = np.asarray(omegas, dtype=np.float64).reshape(-1, 3)
    if len(omegas) != assignment.n_regions:
        raise ValueError(
            f"Expected {assignment.n_regions} angular velocities, got {len(omegas)}"
        )
    plates = np.asarray(assignment.as_list(), dtype=np.int64)
    return np.cross(omegas[plates], graph.centers)
