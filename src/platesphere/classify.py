"""Per-cell classification passes over a finished plate assignment.

- :func:`classify_boundaries` — a cell is a boundary cell iff some
  neighbour belongs to a different plate.
- :func:`choose_ocean_plates` / :func:`classify_surface` — a random
  ``floor(K / divisor)`` plates become ocean, the rest land, and every
  cell inherits its plate's label.

Both passes build a complete new list and return it; nothing is written
until the caller publishes the result.
"""

from __future__ import annotations

import random
from typing import List, Optional, Sequence, Set, Tuple

import structlog

from .assignment import RegionAssignment
from .cellgraph import CellGraph
from .models import SurfaceLabel

logger = structlog.get_logger(__name__)


def _require_complete(assignment: RegionAssignment) -> None:
    if not assignment.is_complete():
        raise RuntimeError(
            f"Plate assignment incomplete: {assignment.unassigned_count} "
            "cells have no plate"
        )


def classify_boundaries(
    graph: CellGraph,
    assignment: RegionAssignment,
) -> List[bool]:
    """Return ``is_boundary`` for every cell."""
    _require_complete(assignment)
    owners = assignment.as_list()
    flags = [
        any(owners[nid] != owners[cell.id] for nid in cell.neighbor_ids)
        for cell in graph
    ]
    logger.debug("boundaries_classified", boundary_cells=sum(flags))
    return flags


def choose_ocean_plates(
    n_plates: int,
    rng: random.Random,
    *,
    divisor: int = 3,
) -> Set[int]:
    """Pick ``n_plates // divisor`` distinct plate ids to become ocean."""
    if divisor < 1:
        raise ValueError("divisor must be >= 1")
    return set(rng.sample(range(n_plates), n_plates // divisor))


def classify_surface(
    assignment: RegionAssignment,
    rng: random.Random,
    *,
    divisor: int = 3,
    ocean_plates: Optional[Set[int]] = None,
) -> Tuple[List[SurfaceLabel], List[SurfaceLabel]]:
    """Label plates and cells as land or ocean.

    Returns ``(plate_labels, cell_labels)``.  *ocean_plates* overrides the
    random draw.
    """
    _require_complete(assignment)
    if ocean_plates is None:
        ocean_plates = choose_ocean_plates(assignment.n_regions, rng, divisor=divisor)

    plate_labels = [
        SurfaceLabel.OCEAN if plate in ocean_plates else SurfaceLabel.LAND
        for plate in range(assignment.n_regions)
    ]
    cell_labels = [plate_labels[plate] for plate in assignment.as_list()]

    logger.debug(
        "surface_classified",
        ocean_plates=sorted(ocean_plates),
        ocean_cells=sum(1 for lbl in cell_labels if lbl is SurfaceLabel.OCEAN),
    )
    return plate_labels, cell_labels


def ocean_plate_ids(plate_labels: Sequence[SurfaceLabel]) -> List[int]:
    return [i for i, lbl in enumerate(plate_labels) if lbl is SurfaceLabel.OCEAN]
