from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple

Vec3 = Tuple[float, float, float]


@dataclass(frozen=True)
class Cell:
    """One face of the subdivided sphere.

    *id* is the stable integer index in ``[0, num_cells)``.
    *center* is the 3-D centre position of the face.
    *neighbor_ids* is the ordered tuple of adjacent cell indices.
    """

    id: int
    center: Vec3
    neighbor_ids: Tuple[int, ...] = field(default_factory=tuple)

    def degree(self) -> int:
        return len(self.neighbor_ids)

    def validate(self) -> list[str]:
        errors: list[str] = []
        if len(set(self.neighbor_ids)) != self.degree():
            errors.append(f"Cell {self.id} has repeated neighbour ids")
        if self.id in self.neighbor_ids:
            errors.append(f"Cell {self.id} lists itself as a neighbour")
        if len(self.center) != 3:
            errors.append(f"Cell {self.id} centre must have 3 components")
        return errors


class SurfaceLabel(str, Enum):
    LAND = "land"
    OCEAN = "ocean"


class StepStatus(str, Enum):
    """Result of one incremental :class:`~partition.Partitioner` step."""

    IN_PROGRESS = "in_progress"
    DONE = "done"


@dataclass(frozen=True)
class CellState:
    """Read-only snapshot of everything the generator derives for one cell.

    Fields that have not been published yet are ``None``.
    """

    cell_id: int
    region_id: Optional[int]
    is_boundary: Optional[bool]
    surface: Optional[SurfaceLabel]
    velocity: Optional[Vec3]
