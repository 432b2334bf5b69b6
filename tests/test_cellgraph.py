"""Tests for the cell models, CellGraph and graph I/O."""

from __future__ import annotations

import json
import math
from dataclasses import FrozenInstanceError

import numpy as np
import pytest

from platesphere import Cell, CellGraph, load_graph, save_graph


# ═══════════════════════════════════════════════════════════════════
# Fixtures
# ═══════════════════════════════════════════════════════════════════


def _torus(rows: int, cols: int) -> CellGraph:
    adjacency = []
    centers = []
    for r in range(rows):
        for c in range(cols):
            adjacency.append([
                ((r - 1) % rows) * cols + c,
                r * cols + (c + 1) % cols,
                ((r + 1) % rows) * cols + c,
                r * cols + (c - 1) % cols,
            ])
            lat = math.radians((r - (rows - 1) / 2) * 30.0)
            lon = math.radians(c * 360.0 / cols)
            centers.append((
                math.cos(lat) * math.cos(lon),
                math.cos(lat) * math.sin(lon),
                math.sin(lat),
            ))
    return CellGraph.from_adjacency(adjacency, centers)


@pytest.fixture
def torus() -> CellGraph:
    """4 × 6 wrap-around grid: 24 cells, four neighbours each."""
    return _torus(4, 6)


@pytest.fixture
def two_islands() -> CellGraph:
    """Two disconnected triangles."""
    adjacency = [[1, 2], [0, 2], [0, 1], [4, 5], [3, 5], [3, 4]]
    centers = [
        (1, 0, 0), (0.9, 0.1, 0), (0.9, 0, 0.1),
        (-1, 0, 0), (-0.9, 0.1, 0), (-0.9, 0, 0.1),
    ]
    return CellGraph.from_adjacency(adjacency, centers)


# ═══════════════════════════════════════════════════════════════════
# Cell
# ═══════════════════════════════════════════════════════════════════


class TestCell:
    def test_degree(self) -> None:
        cell = Cell(id=0, center=(1.0, 0.0, 0.0), neighbor_ids=(1, 2, 3))
        assert cell.degree() == 3

    def test_valid_cell_has_no_errors(self) -> None:
        cell = Cell(id=0, center=(1.0, 0.0, 0.0), neighbor_ids=(1, 2))
        assert cell.validate() == []

    def test_self_neighbour_is_reported(self) -> None:
        cell = Cell(id=3, center=(1.0, 0.0, 0.0), neighbor_ids=(3, 4))
        assert any("itself" in e for e in cell.validate())

    def test_repeated_neighbour_is_reported(self) -> None:
        cell = Cell(id=0, center=(1.0, 0.0, 0.0), neighbor_ids=(1, 1))
        assert any("repeated" in e for e in cell.validate())

    def test_frozen(self) -> None:
        cell = Cell(id=0, center=(1.0, 0.0, 0.0))
        with pytest.raises(FrozenInstanceError):
            cell.id = 5  # type: ignore[misc]


# ═══════════════════════════════════════════════════════════════════
# CellGraph
# ═══════════════════════════════════════════════════════════════════


class TestCellGraph:
    def test_num_cells(self, torus: CellGraph) -> None:
        assert torus.num_cells() == 24
        assert len(torus) == 24

    def test_neighbour_order_preserved(self, torus: CellGraph) -> None:
        # row 0, col 0: up wraps to row 3, left wraps to col 5
        assert torus.neighbors(0) == (18, 1, 6, 5)

    def test_center_matches_centers_array(self, torus: CellGraph) -> None:
        for i in range(torus.num_cells()):
            assert np.allclose(torus.center(i), torus.centers[i])

    def test_centers_is_read_only(self, torus: CellGraph) -> None:
        with pytest.raises(ValueError):
            torus.centers[0, 0] = 5.0

    def test_out_of_range_index(self, torus: CellGraph) -> None:
        with pytest.raises(IndexError):
            torus.neighbors(24)
        with pytest.raises(IndexError):
            torus.center(-1)

    def test_ids_must_match_positions(self) -> None:
        with pytest.raises(ValueError):
            CellGraph([Cell(id=1, center=(1.0, 0.0, 0.0))])

    def test_adjacency_and_centers_length_mismatch(self) -> None:
        with pytest.raises(ValueError):
            CellGraph.from_adjacency([[1], [0]], [(1.0, 0.0, 0.0)])

    def test_iteration_yields_cells_in_order(self, torus: CellGraph) -> None:
        assert [c.id for c in torus] == list(range(24))

    def test_validate_ok(self, torus: CellGraph) -> None:
        assert torus.validate() == []
        assert torus.validate(strict=True) == []

    def test_validate_missing_reference(self) -> None:
        g = CellGraph.from_adjacency([[1], [7]], [(1, 0, 0), (0, 1, 0)])
        errors = g.validate()
        assert any("missing cell 7" in e for e in errors)

    def test_validate_strict_asymmetric(self) -> None:
        g = CellGraph.from_adjacency([[1], []], [(1, 0, 0), (0, 1, 0)])
        assert g.validate() == []
        assert any("not symmetric" in e for e in g.validate(strict=True))

    def test_validate_strict_disconnected(self, two_islands: CellGraph) -> None:
        assert two_islands.validate() == []
        assert any("2 connected components" in e for e in two_islands.validate(strict=True))

    def test_connected_components(self, two_islands: CellGraph) -> None:
        comps = two_islands.connected_components()
        assert sorted(sorted(c) for c in comps) == [[0, 1, 2], [3, 4, 5]]
        assert not two_islands.is_connected()

    def test_empty_graph_is_connected(self) -> None:
        assert CellGraph([]).is_connected()


# ═══════════════════════════════════════════════════════════════════
# Serialisation
# ═══════════════════════════════════════════════════════════════════


class TestSerialisation:
    def test_to_dict_shape(self, torus: CellGraph) -> None:
        data = torus.to_dict()
        assert data["version"] == CellGraph.VERSION
        assert len(data["cells"]) == 24
        assert set(data["cells"][0]) == {"id", "center", "neighbors"}

    def test_json_roundtrip_preserves_adjacency(self, torus: CellGraph) -> None:
        restored = CellGraph.from_json(torus.to_json())
        assert restored.num_cells() == torus.num_cells()
        for i in range(torus.num_cells()):
            assert restored.neighbors(i) == torus.neighbors(i)
        assert np.allclose(restored.centers, torus.centers)

    def test_from_dict_sorts_cells_by_id(self, torus: CellGraph) -> None:
        data = torus.to_dict()
        data["cells"].reverse()
        restored = CellGraph.from_dict(data)
        assert restored.neighbors(0) == torus.neighbors(0)

    def test_save_and_load(self, torus: CellGraph, tmp_path) -> None:
        path = tmp_path / "graph.json"
        torus.metadata["generator"] = "torus"
        save_graph(torus, path)
        assert json.loads(path.read_text())["metadata"]["generator"] == "torus"
        loaded = load_graph(path)
        assert loaded.metadata["generator"] == "torus"
        assert loaded.validate(strict=True) == []

    def test_load_rejects_broken_graph(self, tmp_path) -> None:
        path = tmp_path / "broken.json"
        broken = CellGraph.from_adjacency([[1], [0, 9]], [(1, 0, 0), (0, 1, 0)])
        save_graph(broken, path)
        with pytest.raises(ValueError, match="missing cell 9"):
            load_graph(path)
        assert load_graph(path, check=False).num_cells() == 2

    @pytest.mark.parametrize("entry,message", [
        ({"id": 0, "center": [1, 0], "neighbors": []}, "Cell 0 'center'"),
        ({"id": 0, "neighbors": []}, "Cell 0 'center'"),
        ({"id": 0, "center": [1, 0, "x"], "neighbors": []}, "Cell 0 'center'"),
        ({"id": 0, "center": [1, 0, 0], "neighbors": [1.5]}, "Cell 0 'neighbors'"),
        ({"center": [1, 0, 0]}, "Cell entry 0"),
        ([1, 0, 0], "Cell entry 0"),
    ])
    def test_from_dict_rejects_malformed_entries(self, entry, message: str) -> None:
        with pytest.raises(ValueError, match=message):
            CellGraph.from_dict({"cells": [entry]})

    def test_from_dict_rejects_non_object(self) -> None:
        with pytest.raises(ValueError):
            CellGraph.from_dict([])
        with pytest.raises(ValueError):
            CellGraph.from_dict({"cells": {}})

    def test_from_adjacency_rejects_short_center(self) -> None:
        with pytest.raises(ValueError, match="3 components"):
            CellGraph.from_adjacency([[]], [(1.0, 0.0)])
