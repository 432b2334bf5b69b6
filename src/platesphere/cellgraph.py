from __future__ import annotations

import json
from collections import deque
from typing import Iterable, Iterator, List, Optional, Sequence

import numpy as np

from .models import Cell, Vec3


class CellGraph:
    """Immutable adjacency structure over the cells of a sphere.

    Cells are indexed ``0 … num_cells()-1``; the index of each cell must
    match its position in *cells*.  Neighbour order is preserved exactly
    as supplied.
    """

    VERSION = "1.0"

    def __init__(
        self,
        cells: Iterable[Cell],
        metadata: Optional[dict] = None,
    ) -> None:
        self._cells: List[Cell] = list(cells)
        for idx, cell in enumerate(self._cells):
            if cell.id != idx:
                raise ValueError(f"Cell at position {idx} has id {cell.id}")
        self.metadata = metadata or {}
        self._centers = np.array(
            [cell.center for cell in self._cells], dtype=np.float64
        ).reshape(-1, 3)

    @classmethod
    def from_adjacency(
        cls,
        adjacency: Sequence[Sequence[int]],
        centers: Sequence[Vec3],
        metadata: Optional[dict] = None,
    ) -> "CellGraph":
        """Build a graph from parallel neighbour lists and centre positions."""
        if len(adjacency) != len(centers):
            raise ValueError("adjacency and centers must have the same length")
        for idx, c in enumerate(centers):
            if len(c) != 3:
                raise ValueError(f"Cell {idx} centre must have 3 components")
        cells = [
            Cell(
                id=idx,
                center=(float(c[0]), float(c[1]), float(c[2])),
                neighbor_ids=tuple(int(n) for n in neighbors),
            )
            for idx, (neighbors, c) in enumerate(zip(adjacency, centers))
        ]
        return cls(cells, metadata)

    # ── Collaborator contract ───────────────────────────────────────

    def num_cells(self) -> int:
        return len(self._cells)

    def neighbors(self, cell_id: int) -> tuple[int, ...]:
        return self._cell(cell_id).neighbor_ids

    def center(self, cell_id: int) -> Vec3:
        return self._cell(cell_id).center

    @property
    def centers(self) -> np.ndarray:
        """``(num_cells, 3)`` array of cell centres (read-only view)."""
        view = self._centers.view()
        view.flags.writeable = False
        return view

    def cell(self, cell_id: int) -> Cell:
        return self._cell(cell_id)

    def __iter__(self) -> Iterator[Cell]:
        return iter(self._cells)

    def __len__(self) -> int:
        return len(self._cells)

    def _cell(self, cell_id: int) -> Cell:
        if not 0 <= cell_id < len(self._cells):
            raise IndexError(f"Cell {cell_id} out of range [0, {len(self._cells)})")
        return self._cells[cell_id]

    # ── Checks ──────────────────────────────────────────────────────

    def validate(self, strict: bool = False) -> list[str]:
        """Return a list of problems with the graph (empty = valid).

        With *strict*, adjacency must be symmetric and the graph connected.
        """
        errors: list[str] = []
        n = len(self._cells)

        for cell in self._cells:
            errors.extend(cell.validate())
            for nid in cell.neighbor_ids:
                if not 0 <= nid < n:
                    errors.append(f"Cell {cell.id} references missing cell {nid}")

        if strict and not errors:
            for cell in self._cells:
                for nid in cell.neighbor_ids:
                    if cell.id not in self._cells[nid].neighbor_ids:
                        errors.append(
                            f"Adjacency not symmetric: {cell.id} -> {nid}"
                        )
            n_components = len(self.connected_components())
            if n_components > 1:
                errors.append(f"Graph has {n_components} connected components")

        return errors

    def connected_components(self) -> List[List[int]]:
        """Return cell ids grouped by connected component (BFS order)."""
        seen = [False] * len(self._cells)
        components: List[List[int]] = []
        for start in range(len(self._cells)):
            if seen[start]:
                continue
            seen[start] = True
            component = [start]
            queue = deque([start])
            while queue:
                cur = queue.popleft()
                for nid in self._cells[cur].neighbor_ids:
                    if not seen[nid]:
                        seen[nid] = True
                        component.append(nid)
                        queue.append(nid)
            components.append(component)
        return components

    def is_connected(self) -> bool:
        return len(self._cells) == 0 or len(self.connected_components()) == 1

    # ── Serialisation ───────────────────────────────────────────────

    def to_dict(self) -> dict:
        return {
            "version": self.VERSION,
            "metadata": self.metadata,
            "cells": [
                {
                    "id": cell.id,
                    "center": list(cell.center),
                    "neighbors": list(cell.neighbor_ids),
                }
                for cell in self._cells
            ],
        }

    @classmethod
    def from_dict(cls, payload: dict) -> "CellGraph":
        """Rebuild a graph from :meth:`to_dict` output.

        Raises ``ValueError`` naming the first malformed cell entry.
        """
        if not isinstance(payload, dict):
            raise ValueError("Cell graph payload must be a JSON object")
        entries = payload.get("cells", [])
        if not isinstance(entries, list):
            raise ValueError("'cells' must be a list")
        for pos, entry in enumerate(entries):
            _check_cell_entry(pos, entry)
        cells = sorted(entries, key=lambda c: c["id"])
        return cls.from_adjacency(
            [c.get("neighbors", []) for c in cells],
            [c["center"] for c in cells],
            metadata=payload.get("metadata", {}),
        )

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent, sort_keys=True)

    @classmethod
    def from_json(cls, json_data: str) -> "CellGraph":
        return cls.from_dict(json.loads(json_data))

    def __repr__(self) -> str:
        return f"CellGraph(cells={len(self._cells)})"


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _check_cell_entry(pos: int, entry) -> None:
    if not isinstance(entry, dict):
        raise ValueError(f"Cell entry {pos} must be an object")
    cell_id = entry.get("id")
    if not isinstance(cell_id, int) or isinstance(cell_id, bool):
        raise ValueError(f"Cell entry {pos} has no integer 'id'")
    center = entry.get("center")
    if not isinstance(center, list) or len(center) != 3 or not all(_is_number(c) for c in center):
        raise ValueError(f"Cell {cell_id} 'center' must be a list of 3 numbers")
    neighbors = entry.get("neighbors", [])
    if not isinstance(neighbors, list) or not all(
        isinstance(n, int) and not isinstance(n, bool) for n in neighbors
    ):
        raise ValueError(f"Cell {cell_id} 'neighbors' must be a list of integers")
