"""World state — the per-cell record shared by every generation phase.

A :class:`WorldState` owns the plate assignment plus one column per
derived quantity (boundary flag, surface label, velocity).  Each column
is replaced wholesale by a ``publish_*`` call, so a reader sees either
the previous complete pass or the new one, never a partial write.
"""

from __future__ import annotations

from typing import Iterator, List, Optional, Sequence

import numpy as np

from .assignment import RegionAssignment
from .cellgraph import CellGraph
from .models import CellState, SurfaceLabel


class WorldState:
    """Per-cell world state for one generation run.

    Parameters
    ----------
    graph : CellGraph
    assignment : RegionAssignment
        Usually the live assignment of a :class:`~partition.Partitioner`.
    """

    def __init__(self, graph: CellGraph, assignment: RegionAssignment) -> None:
        if assignment.num_cells != graph.num_cells():
            raise ValueError("Assignment and graph disagree on the cell count")
        self.graph = graph
        self.assignment = assignment
        self._boundary: Optional[tuple[bool, ...]] = None
        self._surface: Optional[tuple[SurfaceLabel, ...]] = None
        self._plate_surface: Optional[tuple[SurfaceLabel, ...]] = None
        self._omegas: Optional[np.ndarray] = None
        self._velocity: Optional[np.ndarray] = None

    @property
    def n_plates(self) -> int:
        return self.assignment.n_regions

    def __len__(self) -> int:
        return self.graph.num_cells()

    # ── Publishing ──────────────────────────────────────────────────

    def publish_boundaries(self, flags: Sequence[bool]) -> None:
        self._check_length(flags, "boundary flags")
        self._boundary = tuple(bool(f) for f in flags)

    def publish_surface(
        self,
        plate_labels: Sequence[SurfaceLabel],
        cell_labels: Sequence[SurfaceLabel],
    ) -> None:
        if len(plate_labels) != self.n_plates:
            raise ValueError(
                f"Expected {self.n_plates} plate labels, got {len(plate_labels)}"
            )
        self._check_length(cell_labels, "surface labels")
        self._plate_surface = tuple(plate_labels)
        self._surface = tuple(cell_labels)

    def clear_surface(self) -> None:
        """Drop every land/ocean label; plates and boundaries are untouched."""
        self._plate_surface = None
        self._surface = None

    def publish_velocities(self, omegas: np.ndarray, velocities: np.ndarray) -> None:
        omegas = np.array(omegas, dtype=np.float64).reshape(-1, 3)
        velocities = np.array(velocities, dtype=np.float64).reshape(-1, 3)
        if len(omegas) != self.n_plates:
            raise ValueError(f"Expected {self.n_plates} angular velocities")
        self._check_length(velocities, "velocities")
        omegas.flags.writeable = False
        velocities.flags.writeable = False
        self._omegas = omegas
        self._velocity = velocities

    def _check_length(self, values: Sequence, what: str) -> None:
        if len(values) != self.graph.num_cells():
            raise ValueError(
                f"Expected {self.graph.num_cells()} {what}, got {len(values)}"
            )

    # ── Readers ─────────────────────────────────────────────────────

    @property
    def boundary_flags(self) -> Optional[tuple[bool, ...]]:
        return self._boundary

    @property
    def surface_labels(self) -> Optional[tuple[SurfaceLabel, ...]]:
        return self._surface

    @property
    def plate_surface(self) -> Optional[tuple[SurfaceLabel, ...]]:
        return self._plate_surface

    @property
    def plate_omegas(self) -> Optional[np.ndarray]:
        return self._omegas

    @property
    def velocities(self) -> Optional[np.ndarray]:
        return self._velocity

    def has_boundaries(self) -> bool:
        return self._boundary is not None

    def has_surface(self) -> bool:
        return self._surface is not None

    def has_velocities(self) -> bool:
        return self._velocity is not None

    def is_complete(self) -> bool:
        """True when every column is populated for every cell."""
        return (
            self.assignment.is_complete()
            and self.has_boundaries()
            and self.has_surface()
            and self.has_velocities()
        )

    def ocean_plate_count(self) -> int:
        if self._plate_surface is None:
            return 0
        return sum(1 for lbl in self._plate_surface if lbl is SurfaceLabel.OCEAN)

    def cell_state(self, cell_id: int) -> CellState:
        region = self.assignment.get(cell_id)
        velocity = None
        if self._velocity is not None:
            vx, vy, vz = self._velocity[cell_id]
            velocity = (float(vx), float(vy), float(vz))
        return CellState(
            cell_id=cell_id,
            region_id=region,
            is_boundary=None if self._boundary is None else self._boundary[cell_id],
            surface=None if self._surface is None else self._surface[cell_id],
            velocity=velocity,
        )

    def __getitem__(self, cell_id: int) -> CellState:
        return self.cell_state(cell_id)

    def cells(self) -> Iterator[CellState]:
        for cell_id in range(self.graph.num_cells()):
            yield self.cell_state(cell_id)

    def plate_sizes(self) -> List[int]:
        return list(self.assignment.region_sizes)

    def __repr__(self) -> str:
        return (
            f"WorldState(cells={len(self)}, plates={self.n_plates}, "
            f"boundaries={self.has_boundaries()}, surface={self.has_surface()}, "
            f"velocities={self.has_velocities()})"
        )
