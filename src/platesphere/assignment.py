from __future__ import annotations

from typing import Dict, List, Optional


class RegionAssignment:
    """Mapping ``cell index → region id`` with per-region size counters.

    Assignment is write-once: :meth:`set` refuses to overwrite a cell that
    already has a region, and there is no removal.  Callers check
    :meth:`get` first.
    """

    def __init__(self, num_cells: int, n_regions: int) -> None:
        if num_cells < 0:
            raise ValueError("num_cells must be >= 0")
        if n_regions < 1:
            raise ValueError("n_regions must be >= 1")
        self._owner: List[Optional[int]] = [None] * num_cells
        self._sizes: List[int] = [0] * n_regions
        self._unassigned = num_cells

    @property
    def num_cells(self) -> int:
        return len(self._owner)

    @property
    def n_regions(self) -> int:
        return len(self._sizes)

    def get(self, cell: int) -> Optional[int]:
        self._check_cell(cell)
        return self._owner[cell]

    def set(self, cell: int, region: int) -> None:
        self._check_cell(cell)
        if not 0 <= region < len(self._sizes):
            raise IndexError(f"Region {region} out of range [0, {len(self._sizes)})")
        current = self._owner[cell]
        if current is not None:
            raise ValueError(f"Cell {cell} already assigned to region {current}")
        self._owner[cell] = region
        self._sizes[region] += 1
        self._unassigned -= 1

    def region_size(self, region: int) -> int:
        if not 0 <= region < len(self._sizes):
            raise IndexError(f"Region {region} out of range [0, {len(self._sizes)})")
        return self._sizes[region]

    @property
    def region_sizes(self) -> tuple[int, ...]:
        return tuple(self._sizes)

    def min_nonempty_size(self) -> int:
        """Smallest size among regions owning at least one cell (0 if none)."""
        return min((s for s in self._sizes if s > 0), default=0)

    @property
    def unassigned_count(self) -> int:
        return self._unassigned

    def is_complete(self) -> bool:
        return self._unassigned == 0

    def as_list(self) -> List[Optional[int]]:
        """Copy of the per-cell region ids."""
        return list(self._owner)

    def cells_by_region(self) -> Dict[int, List[int]]:
        """Return ``{region: [cell ids]}`` for every non-empty region."""
        result: Dict[int, List[int]] = {}
        for cell, region in enumerate(self._owner):
            if region is not None:
                result.setdefault(region, []).append(cell)
        return result

    def _check_cell(self, cell: int) -> None:
        if not 0 <= cell < len(self._owner):
            raise IndexError(f"Cell {cell} out of range [0, {len(self._owner)})")

    def __len__(self) -> int:
        return len(self._owner)

    def __repr__(self) -> str:
        sizes = ", ".join(f"{i}={s}" for i, s in enumerate(self._sizes))
        return (
            f"RegionAssignment(cells={len(self._owner)}, "
            f"unassigned={self._unassigned}, sizes=[{sizes}])"
        )
