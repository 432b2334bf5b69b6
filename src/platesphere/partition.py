"""Plate partitioning — balanced multi-source flood fill.

Splits every cell of a :class:`~cellgraph.CellGraph` into one of *K*
regions ("plates").  Growth is incremental: :meth:`Partitioner.step`
assigns at most one cell, so a caller can advance the fill one tick at a
time and observe it grow.

Algorithm
---------
1. **Seeding** — *K* distinct cells drawn uniformly at random become the
   seeds of regions ``0 … K-1`` and form the initial frontier.
2. **Balanced expansion** — each step computes the smallest non-empty
   region size ``min``; only frontier cells whose region is smaller than
   ``int(min × ratio)`` may grow.  If no frontier cell qualifies the cap
   is relaxed for that step.  A random eligible frontier cell then claims
   one random unassigned neighbour, or leaves the frontier when it has
   none left.
3. **Finalisation** — if the frontier empties while cells are still
   unassigned, repeated scans let each unassigned cell adopt the region
   of a random assigned neighbour.  Components that no seed can reach
   adopt the region of the geometrically nearest assigned cell.

Usage
-----
>>> part = Partitioner(graph, 40, rng=random.Random(7))
>>> part.seed()
>>> while part.step() is StepStatus.IN_PROGRESS:
...     pass
>>> part.assignment.is_complete()
True
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np
import structlog

from .assignment import RegionAssignment
from .cellgraph import CellGraph
from .models import StepStatus

logger = structlog.get_logger(__name__)

# Upper bound on cell pairs per distance block in the nearest-cell search.
_NEAREST_BLOCK = 1 << 18


# ═══════════════════════════════════════════════════════════════════
# Statistics
# ═══════════════════════════════════════════════════════════════════

@dataclass
class PartitionStats:
    """Counters collected while partitioning.

    Attributes
    ----------
    steps : int
        Expansion steps executed (each picks one frontier cell).
    assignments : int
        Cells assigned by expansion steps (seeds excluded).
    frontier_removals : int
        Steps that retired a frontier cell instead of growing.
    relaxed_steps : int
        Steps where the size cap excluded every frontier cell.
    finalized_cells : int
        Cells assigned by the neighbour-adoption cleanup.
    nearest_fallback_cells : int
        Cells in seedless components bridged by nearest-cell adoption.
    """

    steps: int = 0
    assignments: int = 0
    frontier_removals: int = 0
    relaxed_steps: int = 0
    finalized_cells: int = 0
    nearest_fallback_cells: int = 0


# ═══════════════════════════════════════════════════════════════════
# Partitioner
# ═══════════════════════════════════════════════════════════════════

class Partitioner:
    """Incremental balanced flood fill over a :class:`CellGraph`.

    Parameters
    ----------
    graph : CellGraph
    n_regions : int
        Number of regions *K* (≥ 1).
    max_size_ratio : float
        Size-imbalance tolerance *R* (≥ 1).
    rng : random.Random, optional
        Source of every random choice.  If *None* a fresh unseeded
        generator is used.
    """

    def __init__(
        self,
        graph: CellGraph,
        n_regions: int,
        *,
        max_size_ratio: float = 3.0,
        rng: Optional[random.Random] = None,
    ) -> None:
        if n_regions < 1:
            raise ValueError("n_regions must be >= 1")
        if max_size_ratio < 1.0:
            raise ValueError("max_size_ratio must be >= 1")
        self.graph = graph
        self.n_regions = n_regions
        self.max_size_ratio = max_size_ratio
        self.rng = rng if rng is not None else random.Random()
        self.stats = PartitionStats()

        self._assignment = RegionAssignment(graph.num_cells(), n_regions)
        # Parallel arrays; swap-remove keeps them aligned.
        self._frontier: List[int] = []
        self._frontier_regions: List[int] = []
        self._seeds: List[int] = []
        self._seeded = False
        self._done = False

        self.last_assigned: Optional[int] = None
        self.last_step_relaxed = False

    # ── Properties ──────────────────────────────────────────────────

    @property
    def assignment(self) -> RegionAssignment:
        return self._assignment

    @property
    def frontier(self) -> tuple[int, ...]:
        return tuple(self._frontier)

    @property
    def seeds(self) -> tuple[int, ...]:
        return tuple(self._seeds)

    @property
    def seeded(self) -> bool:
        return self._seeded

    @property
    def done(self) -> bool:
        return self._done

    # ── Stage A ─────────────────────────────────────────────────────

    def seed(self, seed_cells: Optional[Sequence[int]] = None) -> List[int]:
        """Assign one seed cell per region and return the seed cells.

        *seed_cells* overrides the random draw; seed ``i`` starts region
        ``i``.  When *K* exceeds the cell count only ``num_cells`` regions
        receive a seed.
        """
        if self._seeded:
            raise RuntimeError("Partitioner has already been seeded")

        num_cells = self.graph.num_cells()
        if seed_cells is None:
            n_seeds = min(self.n_regions, num_cells)
            if n_seeds < self.n_regions:
                logger.warning(
                    "more_regions_than_cells",
                    n_regions=self.n_regions,
                    num_cells=num_cells,
                )
            seed_cells = self.rng.sample(range(num_cells), n_seeds)
        else:
            seed_cells = list(seed_cells)
            if len(seed_cells) > self.n_regions:
                raise ValueError("More seed cells than regions")
            if len(set(seed_cells)) != len(seed_cells):
                raise ValueError("Seed cells must be distinct")

        for region, cell in enumerate(seed_cells):
            self._assignment.set(cell, region)
            self._frontier.append(cell)
            self._frontier_regions.append(region)

        self._seeds = list(seed_cells)
        self._seeded = True
        logger.info(
            "partition_seeded",
            n_regions=self.n_regions,
            seeds=len(self._seeds),
            num_cells=num_cells,
        )
        self._check_finished()
        return list(self._seeds)

    # ── Stage B ─────────────────────────────────────────────────────

    def step(self) -> StepStatus:
        """Run one balanced expansion step.

        Returns :attr:`StepStatus.DONE` once every cell has a region
        (finalisation included), otherwise :attr:`StepStatus.IN_PROGRESS`.
        """
        if not self._seeded:
            raise RuntimeError("Partitioner.seed() must be called before step()")
        if self._done:
            return StepStatus.DONE

        self.last_assigned = None
        self.last_step_relaxed = False
        self.stats.steps += 1

        assignment = self._assignment
        sizes = assignment.region_sizes
        max_allowed = int(assignment.min_nonempty_size() * self.max_size_ratio)

        candidates = [
            pos
            for pos, region in enumerate(self._frontier_regions)
            if sizes[region] < max_allowed
        ]
        if not candidates:
            candidates = list(range(len(self._frontier)))
            self.last_step_relaxed = True
            self.stats.relaxed_steps += 1

        pos = self.rng.choice(candidates)
        cell = self._frontier[pos]
        region = self._frontier_regions[pos]

        open_neighbors = [
            nid for nid in self.graph.neighbors(cell) if assignment.get(nid) is None
        ]
        if not open_neighbors:
            self._remove_frontier(pos)
            self.stats.frontier_removals += 1
        else:
            target = self.rng.choice(open_neighbors)
            assignment.set(target, region)
            self._frontier.append(target)
            self._frontier_regions.append(region)
            self.last_assigned = target
            self.stats.assignments += 1

        self._check_finished()
        return StepStatus.DONE if self._done else StepStatus.IN_PROGRESS

    def run(self, max_steps: Optional[int] = None) -> RegionAssignment:
        """Seed if needed, then step until done (or *max_steps* reached)."""
        if not self._seeded:
            self.seed()
        taken = 0
        while not self._done:
            if max_steps is not None and taken >= max_steps:
                break
            self.step()
            taken += 1
        return self._assignment

    def _remove_frontier(self, pos: int) -> None:
        last = len(self._frontier) - 1
        self._frontier[pos] = self._frontier[last]
        self._frontier_regions[pos] = self._frontier_regions[last]
        self._frontier.pop()
        self._frontier_regions.pop()

    # ── Finalisation ────────────────────────────────────────────────

    def _check_finished(self) -> None:
        if self._assignment.is_complete():
            self._finish()
        elif not self._frontier:
            logger.warning(
                "partition_frontier_exhausted",
                unassigned=self._assignment.unassigned_count,
            )
            self._finish()

    def _finish(self) -> None:
        if not self._assignment.is_complete():
            self._adopt_neighbor_regions()
        while not self._assignment.is_complete():
            self._adopt_nearest_region()
            self._adopt_neighbor_regions()

        self._done = True
        self._frontier.clear()
        self._frontier_regions.clear()
        if self.stats.finalized_cells or self.stats.nearest_fallback_cells:
            logger.warning(
                "partition_finalized",
                finalized_cells=self.stats.finalized_cells,
                nearest_fallback_cells=self.stats.nearest_fallback_cells,
            )
        logger.info(
            "partition_complete",
            steps=self.stats.steps,
            assignments=self.stats.assignments,
            relaxed_steps=self.stats.relaxed_steps,
            sizes=list(self._assignment.region_sizes),
        )

    def _adopt_neighbor_regions(self) -> None:
        """Repeatedly let unassigned cells copy a random assigned neighbour."""
        assignment = self._assignment
        changed = True
        while changed:
            changed = False
            for cell in range(assignment.num_cells):
                if assignment.get(cell) is not None:
                    continue
                neighbor_regions = [
                    r
                    for r in (assignment.get(nid) for nid in self.graph.neighbors(cell))
                    if r is not None
                ]
                if neighbor_regions:
                    assignment.set(cell, self.rng.choice(neighbor_regions))
                    self.stats.finalized_cells += 1
                    changed = True

    def _adopt_nearest_region(self) -> None:
        """Bridge one seedless component via the closest assigned cell."""
        owners = self._assignment.as_list()
        assigned = np.array([i for i, r in enumerate(owners) if r is not None])
        unassigned = np.array([i for i, r in enumerate(owners) if r is None])
        if assigned.size == 0:
            raise RuntimeError("No assigned cell to adopt a region from")

        centers = self.graph.centers
        targets = centers[assigned]
        rows = max(1, _NEAREST_BLOCK // len(assigned))
        best = np.inf
        cell = region = None
        for start in range(0, len(unassigned), rows):
            block = unassigned[start:start + rows]
            diff = centers[block][:, None, :] - targets[None, :, :]
            dist = np.einsum("ijk,ijk->ij", diff, diff)
            u_idx, a_idx = np.unravel_index(int(np.argmin(dist)), dist.shape)
            if dist[u_idx, a_idx] < best:
                best = dist[u_idx, a_idx]
                cell = int(block[u_idx])
                region = owners[int(assigned[a_idx])]
        self._assignment.set(cell, region)
        self.stats.nearest_fallback_cells += 1


def partition_balanced(
    graph: CellGraph,
    n_regions: int,
    *,
    max_size_ratio: float = 3.0,
    rng: Optional[random.Random] = None,
) -> RegionAssignment:
    """Run a :class:`Partitioner` to completion in one call."""
    part = Partitioner(graph, n_regions, max_size_ratio=max_size_ratio, rng=rng)
    return part.run()
