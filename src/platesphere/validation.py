"""World validation — check a generated world against its invariants.

:func:`validate_world` inspects whatever stages a :class:`WorldState`
has published so far and reports every violation it finds:

1. Totality — every cell has a plate.
2. Non-empty plates — every plate owns a cell (when plates ≤ cells).
3. Boundary flags — set iff some neighbour is on another plate.
4. Surface labels — uniform per plate, ocean count = ``K // divisor``.
5. Velocities — ``v = ω × center`` for the cell's plate, tangent to
   the sphere.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

import numpy as np

from .world import WorldState


@dataclass
class WorldValidation:
    """Result of :func:`validate_world`."""

    ok: bool
    errors: List[str] = field(default_factory=list)

    def __bool__(self) -> bool:
        return self.ok


def _preview(items: List[int], limit: int = 5) -> str:
    text = ", ".join(str(i) for i in items[:limit])
    return text + ("…" if len(items) > limit else "")


def validate_world(
    world: WorldState,
    *,
    ocean_divisor: Optional[int] = 3,
    atol: float = 1e-9,
) -> WorldValidation:
    """Check *world* for correctness.

    Parameters
    ----------
    world : WorldState
    ocean_divisor : int or None
        Expected ``n_plates // ocean_divisor`` ocean plates; *None*
        skips the count check.
    atol : float
        Absolute tolerance for the velocity checks.
    """
    errors: List[str] = []
    graph = world.graph
    owners = world.assignment.as_list()

    # 1. Totality
    missing = [i for i, r in enumerate(owners) if r is None]
    if missing:
        errors.append(f"Unassigned cells ({len(missing)}): {_preview(missing)}")

    # 2. Non-empty plates
    if world.n_plates <= len(owners):
        empty = [i for i, s in enumerate(world.plate_sizes()) if s == 0]
        if empty:
            errors.append(f"Empty plates ({len(empty)}): {_preview(empty)}")

    # Derived passes are only meaningful over a total assignment.
    if missing:
        return WorldValidation(ok=False, errors=errors)

    # 3. Boundary flags
    flags = world.boundary_flags
    if flags is not None:
        wrong = [
            cell.id
            for cell in graph
            if flags[cell.id]
            != any(owners[nid] != owners[cell.id] for nid in cell.neighbor_ids)
        ]
        if wrong:
            errors.append(f"Incorrect boundary flags ({len(wrong)}): {_preview(wrong)}")

    # 4. Surface labels
    labels = world.surface_labels
    plate_labels = world.plate_surface
    if labels is not None and plate_labels is not None:
        mismatched = [
            i for i, lbl in enumerate(labels) if lbl is not plate_labels[owners[i]]
        ]
        if mismatched:
            errors.append(
                f"Cells disagree with their plate's surface label "
                f"({len(mismatched)}): {_preview(mismatched)}"
            )
        if ocean_divisor:
            expected = world.n_plates // ocean_divisor
            actual = world.ocean_plate_count()
            if actual != expected:
                errors.append(
                    f"Ocean plate count {actual} (expected {expected})"
                )

    # 5. Velocities
    velocities = world.velocities
    omegas = world.plate_omegas
    if velocities is not None and omegas is not None:
        centers = graph.centers
        expected_v = np.cross(omegas[np.asarray(owners, dtype=np.int64)], centers)
        off = np.where(~np.isclose(velocities, expected_v, atol=atol).all(axis=1))[0]
        if off.size:
            errors.append(
                f"Velocities not rigid per plate ({off.size}): "
                f"{_preview(off.tolist())}"
            )
        dots = np.einsum("ij,ij->i", velocities, centers)
        scale = np.linalg.norm(centers, axis=1) * np.linalg.norm(velocities, axis=1)
        non_tangent = np.where(np.abs(dots) > atol * np.maximum(scale, 1.0))[0]
        if non_tangent.size:
            errors.append(
                f"Velocities not tangent ({non_tangent.size}): "
                f"{_preview(non_tangent.tolist())}"
            )

    return WorldValidation(ok=len(errors) == 0, errors=errors)
