from __future__ import annotations

import json
from pathlib import Path
from typing import Union

from .cellgraph import CellGraph


PathLike = Union[str, Path]


def load_graph(path: PathLike, *, check: bool = True) -> CellGraph:
    """Read a :class:`CellGraph` JSON file.

    With *check* the graph must pass :meth:`CellGraph.validate`; every
    problem found is reported in a single ``ValueError``.
    """
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    graph = CellGraph.from_dict(data)
    if check:
        problems = graph.validate()
        if problems:
            raise ValueError(f"{path}: " + "; ".join(problems))
    return graph


def save_graph(graph: CellGraph, path: PathLike) -> Path:
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(graph.to_json(), encoding="utf-8")
    return out
