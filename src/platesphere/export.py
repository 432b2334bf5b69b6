"""World export — JSON payload for renderers and downstream tools.

Functions
---------
- :func:`export_world_payload` — build the full export dict
- :func:`export_world_json` — write payload to a JSON file
- :func:`validate_world_payload` — validate against :data:`WORLD_SCHEMA`
"""

from __future__ import annotations

import json
import random
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import jsonschema

from .render import plate_palette
from .world import WorldState

_EXPORT_VERSION = "1.0"

_VEC3 = {
    "type": "array",
    "items": {"type": "number"},
    "minItems": 3,
    "maxItems": 3,
}

WORLD_SCHEMA: Dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "title": "platesphere world",
    "type": "object",
    "required": ["metadata", "cells", "plates"],
    "properties": {
        "metadata": {
            "type": "object",
            "required": ["version", "cell_count", "plate_count", "ocean_plate_count"],
            "properties": {
                "version": {"type": "string"},
                "generator": {"type": "string"},
                "cell_count": {"type": "integer", "minimum": 0},
                "plate_count": {"type": "integer", "minimum": 1},
                "ocean_plate_count": {"type": "integer", "minimum": 0},
                "phase": {"type": ["string", "null"]},
                "graph": {"type": "object"},
            },
        },
        "cells": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["id", "center", "neighbor_ids", "plate"],
                "properties": {
                    "id": {"type": "integer", "minimum": 0},
                    "center": _VEC3,
                    "neighbor_ids": {"type": "array", "items": {"type": "integer"}},
                    "plate": {"type": ["integer", "null"], "minimum": 0},
                    "is_boundary": {"type": ["boolean", "null"]},
                    "surface": {"enum": ["land", "ocean", None]},
                    "velocity": {"oneOf": [_VEC3, {"type": "null"}]},
                },
            },
        },
        "plates": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["id", "size", "color"],
                "properties": {
                    "id": {"type": "integer", "minimum": 0},
                    "size": {"type": "integer", "minimum": 0},
                    "surface": {"enum": ["land", "ocean", None]},
                    "angular_velocity": {"oneOf": [_VEC3, {"type": "null"}]},
                    "color": _VEC3,
                },
            },
        },
    },
}


def _round_vec(values, digits: int = 8) -> List[float]:
    return [round(float(v), digits) for v in values]


def export_world_payload(
    world: WorldState,
    *,
    phase: Optional[str] = None,
    palette_seed: int = 0,
) -> Dict[str, Any]:
    """Build a JSON-serialisable export of *world*.

    The returned dict has three top-level keys:

    ``metadata``
        Version, counts, the phase reached and the graph's own metadata.
    ``cells``
        One entry per cell: id, centre, neighbours, plate, boundary
        flag, surface label and velocity.  Unpublished stages are
        ``null``.
    ``plates``
        One entry per plate: size, surface label, angular velocity and
        display colour.
    """
    palette = plate_palette(world.n_plates, random.Random(palette_seed))

    cells: List[Dict[str, Any]] = []
    for cell, state in zip(world.graph, world.cells()):
        cells.append({
            "id": cell.id,
            "center": _round_vec(cell.center),
            "neighbor_ids": list(cell.neighbor_ids),
            "plate": state.region_id,
            "is_boundary": state.is_boundary,
            "surface": state.surface.value if state.surface is not None else None,
            "velocity": _round_vec(state.velocity) if state.velocity is not None else None,
        })

    plate_surface = world.plate_surface
    omegas = world.plate_omegas
    plates: List[Dict[str, Any]] = []
    for plate, size in enumerate(world.plate_sizes()):
        plates.append({
            "id": plate,
            "size": size,
            "surface": plate_surface[plate].value if plate_surface is not None else None,
            "angular_velocity": _round_vec(omegas[plate]) if omegas is not None else None,
            "color": [round(c, 4) for c in palette[plate]],
        })

    metadata = {
        "version": _EXPORT_VERSION,
        "generator": "platesphere.export",
        "cell_count": len(world),
        "plate_count": world.n_plates,
        "ocean_plate_count": world.ocean_plate_count(),
        "phase": phase,
        "graph": dict(world.graph.metadata),
    }

    return {"metadata": metadata, "cells": cells, "plates": plates}


def export_world_json(
    world: WorldState,
    path: Union[str, Path],
    *,
    phase: Optional[str] = None,
    indent: int = 2,
) -> Path:
    """Export *world* to a JSON file and return the output path."""
    payload = export_world_payload(world, phase=phase)
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(json.dumps(payload, indent=indent), encoding="utf-8")
    return out


def validate_world_payload(payload: Dict[str, Any]) -> List[str]:
    """Validate *payload* against :data:`WORLD_SCHEMA` plus count checks.

    Returns a list of error messages (empty = valid).
    """
    validator = jsonschema.Draft7Validator(WORLD_SCHEMA)
    errors = [
        f"{'/'.join(str(p) for p in err.absolute_path) or '<root>'}: {err.message}"
        for err in validator.iter_errors(payload)
    ]
    if errors:
        return errors

    meta = payload["metadata"]
    if len(payload["cells"]) != meta["cell_count"]:
        errors.append(
            f"cell_count mismatch: metadata says {meta['cell_count']}, "
            f"got {len(payload['cells'])}"
        )
    if len(payload["plates"]) != meta["plate_count"]:
        errors.append(
            f"plate_count mismatch: metadata says {meta['plate_count']}, "
            f"got {len(payload['plates'])}"
        )
    return errors
