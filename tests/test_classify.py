"""Tests for boundary and land/ocean classification."""

from __future__ import annotations

import random

import pytest

from platesphere import (
    CellGraph,
    RegionAssignment,
    SurfaceLabel,
    build_icosphere_graph,
    choose_ocean_plates,
    classify_boundaries,
    classify_surface,
    ocean_plate_ids,
    partition_balanced,
)


@pytest.fixture
def path_graph() -> CellGraph:
    """Six cells in a line: 0-1-2-3-4-5."""
    adjacency = [[1], [0, 2], [1, 3], [2, 4], [3, 5], [4]]
    centers = [(1.0, 0.1 * i, 0.0) for i in range(6)]
    return CellGraph.from_adjacency(adjacency, centers)


@pytest.fixture
def path_assignment() -> RegionAssignment:
    """Cells 0-2 on plate 0, cells 3-5 on plate 1."""
    assignment = RegionAssignment(6, 2)
    for cell in range(6):
        assignment.set(cell, 0 if cell < 3 else 1)
    return assignment


@pytest.fixture(scope="module")
def sphere_plates():
    graph = build_icosphere_graph(6)
    return graph, partition_balanced(graph, 12, rng=random.Random(21))


# ═══════════════════════════════════════════════════════════════════
# Boundaries
# ═══════════════════════════════════════════════════════════════════


class TestBoundaries:
    def test_path_boundary(self, path_graph, path_assignment) -> None:
        flags = classify_boundaries(path_graph, path_assignment)
        assert flags == [False, False, True, True, False, False]

    def test_single_plate_has_no_boundary(self, path_graph) -> None:
        assignment = RegionAssignment(6, 1)
        for cell in range(6):
            assignment.set(cell, 0)
        assert not any(classify_boundaries(path_graph, assignment))

    def test_boundary_iff_foreign_neighbour(self, sphere_plates) -> None:
        graph, assignment = sphere_plates
        flags = classify_boundaries(graph, assignment)
        for cell in graph:
            own = assignment.get(cell.id)
            foreign = any(assignment.get(n) != own for n in cell.neighbor_ids)
            assert flags[cell.id] == foreign

    def test_every_plate_touches_a_boundary(self, sphere_plates) -> None:
        graph, assignment = sphere_plates
        flags = classify_boundaries(graph, assignment)
        plates_on_boundary = {assignment.get(i) for i, f in enumerate(flags) if f}
        assert plates_on_boundary == set(range(12))

    def test_incomplete_assignment_rejected(self, path_graph) -> None:
        assignment = RegionAssignment(6, 2)
        assignment.set(0, 0)
        with pytest.raises(RuntimeError):
            classify_boundaries(path_graph, assignment)


# ═══════════════════════════════════════════════════════════════════
# Surface
# ═══════════════════════════════════════════════════════════════════


class TestSurface:
    @pytest.mark.parametrize("n_plates,expected", [(1, 0), (2, 0), (3, 1), (10, 3), (40, 13)])
    def test_ocean_count(self, n_plates: int, expected: int) -> None:
        chosen = choose_ocean_plates(n_plates, random.Random(0))
        assert len(chosen) == expected
        assert all(0 <= p < n_plates for p in chosen)

    def test_custom_divisor(self) -> None:
        assert len(choose_ocean_plates(10, random.Random(0), divisor=2)) == 5

    def test_invalid_divisor(self) -> None:
        with pytest.raises(ValueError):
            choose_ocean_plates(10, random.Random(0), divisor=0)

    def test_cells_follow_their_plate(self, sphere_plates) -> None:
        _, assignment = sphere_plates
        plate_labels, cell_labels = classify_surface(assignment, random.Random(5))
        assert len(plate_labels) == 12
        assert len(cell_labels) == assignment.num_cells
        for cell, label in enumerate(cell_labels):
            assert label is plate_labels[assignment.get(cell)]
        assert len(ocean_plate_ids(plate_labels)) == 4

    def test_explicit_ocean_plates(self, path_assignment) -> None:
        plate_labels, cell_labels = classify_surface(
            path_assignment, random.Random(0), ocean_plates={1}
        )
        assert plate_labels == [SurfaceLabel.LAND, SurfaceLabel.OCEAN]
        assert cell_labels[:3] == [SurfaceLabel.LAND] * 3
        assert cell_labels[3:] == [SurfaceLabel.OCEAN] * 3

    def test_redraw_keeps_count(self, sphere_plates) -> None:
        _, assignment = sphere_plates
        rng = random.Random(9)
        draws = [ocean_plate_ids(classify_surface(assignment, rng)[0]) for _ in range(20)]
        assert all(len(d) == 4 for d in draws)
        # 495 possible choices; twenty draws should not all coincide
        assert len({tuple(d) for d in draws}) > 1

    def test_incomplete_assignment_rejected(self) -> None:
        with pytest.raises(RuntimeError):
            classify_surface(RegionAssignment(3, 1), random.Random(0))

    def test_surface_label_values(self) -> None:
        assert SurfaceLabel.LAND.value == "land"
        assert SurfaceLabel.OCEAN.value == "ocean"
