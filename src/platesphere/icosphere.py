"""Geodesic sphere builder — a concrete :class:`CellGraph` source.

Subdivides each of the 20 icosahedron faces into ``frequency²`` triangles,
projects every lattice point onto the sphere and treats each projected
point as one cell (the dual of the triangulation is a Goldberg
polyhedron: 12 pentagons, every other cell a hexagon).

Functions
---------
- :func:`icosphere_cell_count` — ``10 × frequency² + 2``
- :func:`build_icosphere_graph` — main entry point
"""

from __future__ import annotations

import math
from typing import Dict, List, Set, Tuple

import numpy as np

from .cellgraph import CellGraph

_EPS = 1e-12

_LatticeKey = Tuple[Tuple[int, int], ...]


def icosphere_cell_count(frequency: int) -> int:
    """Number of cells produced by :func:`build_icosphere_graph`."""
    if frequency < 1:
        raise ValueError("frequency must be >= 1")
    return 10 * frequency * frequency + 2


def _icosahedron() -> Tuple[np.ndarray, List[Tuple[int, int, int]]]:
    phi = (1.0 + math.sqrt(5.0)) / 2.0
    verts = np.array([
        [-1, 0, phi], [1, 0, phi], [-1, 0, -phi], [1, 0, -phi],
        [0, phi, -1], [0, phi, 1], [0, -phi, -1], [0, -phi, 1],
        [phi, -1, 0], [phi, 1, 0], [-phi, -1, 0], [-phi, 1, 0],
    ], dtype=np.float64)
    faces = [
        (0, 11, 5), (0, 5, 1), (0, 1, 7), (0, 7, 10), (0, 10, 11),
        (1, 5, 9), (5, 11, 4), (11, 10, 2), (10, 7, 6), (7, 1, 8),
        (3, 9, 4), (3, 4, 2), (3, 2, 6), (3, 6, 8), (3, 8, 9),
        (4, 9, 5), (2, 4, 11), (6, 2, 10), (8, 6, 7), (9, 8, 1),
    ]
    return verts / np.linalg.norm(verts, axis=1, keepdims=True), faces


def _lattice_key(weights: Tuple[Tuple[int, int], ...]) -> _LatticeKey:
    """Canonical key for a barycentric lattice point (shared along edges)."""
    return tuple(sorted((v, w) for v, w in weights if w > 0))


def _subdivide(frequency: int) -> Tuple[np.ndarray, List[Tuple[int, int, int]]]:
    """Return ``(points, triangles)`` of the subdivided icosahedron."""
    base, faces = _icosahedron()
    index: Dict[_LatticeKey, int] = {}
    points: List[np.ndarray] = []
    triangles: List[Tuple[int, int, int]] = []

    def point_id(a: int, b: int, c: int, i: int, j: int) -> int:
        k = frequency - i - j
        key = _lattice_key(((a, i), (b, j), (c, k)))
        pid = index.get(key)
        if pid is None:
            p = (i * base[a] + j * base[b] + k * base[c]) / float(frequency)
            p = p / (np.linalg.norm(p) + _EPS)
            pid = len(points)
            index[key] = pid
            points.append(p)
        return pid

    for a, b, c in faces:
        rows = [
            [point_id(a, b, c, i, j) for j in range(frequency - i + 1)]
            for i in range(frequency + 1)
        ]
        for i in range(frequency):
            for j in range(frequency - i):
                triangles.append((rows[i][j], rows[i + 1][j], rows[i][j + 1]))
                if j < frequency - i - 1:
                    triangles.append(
                        (rows[i + 1][j], rows[i + 1][j + 1], rows[i][j + 1])
                    )

    return np.asarray(points, dtype=np.float64), triangles


def _tangent_basis(n: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    a = np.array([1.0, 0.0, 0.0])
    if abs(float(n @ a)) > 0.9:
        a = np.array([0.0, 1.0, 0.0])
    t = a - n * float(n @ a)
    t /= np.linalg.norm(t) + _EPS
    b = np.cross(n, t)
    b /= np.linalg.norm(b) + _EPS
    return t, b


def _ordered_neighbors(points: np.ndarray, idx: int, neighbors: Set[int]) -> List[int]:
    """Sort *neighbors* counter-clockwise around the outward normal at *idx*."""
    n = points[idx]
    t, b = _tangent_basis(n)

    def angle(nid: int) -> float:
        d = points[nid] - n
        return math.atan2(float(d @ b), float(d @ t))

    return sorted(neighbors, key=angle)


def build_icosphere_graph(frequency: int, *, radius: float = 1.0) -> CellGraph:
    """Build a :class:`CellGraph` over a geodesic sphere.

    Parameters
    ----------
    frequency : int
        Edge subdivision count (≥ 1).  Cell count = 10 × freq² + 2.
    radius : float
        Sphere radius applied to every cell centre.
    """
    if radius <= 0:
        raise ValueError("radius must be > 0")
    expected = icosphere_cell_count(frequency)

    points, triangles = _subdivide(frequency)
    adjacency: List[Set[int]] = [set() for _ in range(len(points))]
    for a, b, c in triangles:
        adjacency[a].update((b, c))
        adjacency[b].update((a, c))
        adjacency[c].update((a, b))

    ordered = [
        _ordered_neighbors(points, idx, neigh)
        for idx, neigh in enumerate(adjacency)
    ]
    centers = points * radius

    metadata = {
        "generator": "icosphere",
        "frequency": frequency,
        "radius": radius,
        "cell_count": len(points),
        "pentagon_count": sum(1 for n in ordered if len(n) == 5),
        "hexagon_count": sum(1 for n in ordered if len(n) == 6),
    }
    assert len(points) == expected, (len(points), expected)

    return CellGraph.from_adjacency(ordered, centers.tolist(), metadata=metadata)
