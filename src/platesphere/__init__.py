"""platesphere — tectonic plate seeding on a subdivided sphere.

Public API is organised into layers:

- **Core** — cell models, cell graph, icosphere builder, I/O
- **Generation** — plate partitioning, classification, velocities
- **Phases** — the tick/confirm driven generation state machine
- **Output** — validation, JSON export, rendering (requires matplotlib)
"""

# ── Core ────────────────────────────────────────────────────────────
from .models import Cell, CellState, StepStatus, SurfaceLabel
from .cellgraph import CellGraph
from .icosphere import build_icosphere_graph, icosphere_cell_count
from .io import load_graph, save_graph
from .config import (
    WorldGenConfig,
    DEFAULT_WORLD,
    SMALL_WORLD,
    DETAILED_WORLD,
    load_config,
)

# ── Generation ──────────────────────────────────────────────────────
from .assignment import RegionAssignment
from .partition import PartitionStats, Partitioner, partition_balanced
from .classify import (
    choose_ocean_plates,
    classify_boundaries,
    classify_surface,
    ocean_plate_ids,
)
from .velocity import (
    plate_rotation_vectors,
    random_rotation_vector,
    random_unit_vector,
    velocity_field,
)
from .world import WorldState

# ── Phases ──────────────────────────────────────────────────────────
from .phases import (
    CONFIRM_TRANSITIONS,
    Phase,
    PhaseController,
    Transition,
    drive_headless,
)

# ── Output ──────────────────────────────────────────────────────────
from .validation import WorldValidation, validate_world
from .export import (
    WORLD_SCHEMA,
    export_world_json,
    export_world_payload,
    validate_world_payload,
)
from .render import cell_colours, plate_palette, render_world_png

__all__ = [
    # Core
    "Cell",
    "CellState",
    "StepStatus",
    "SurfaceLabel",
    "CellGraph",
    "build_icosphere_graph",
    "icosphere_cell_count",
    "load_graph",
    "save_graph",
    "WorldGenConfig",
    "DEFAULT_WORLD",
    "SMALL_WORLD",
    "DETAILED_WORLD",
    "load_config",
    # Generation
    "RegionAssignment",
    "PartitionStats",
    "Partitioner",
    "partition_balanced",
    "choose_ocean_plates",
    "classify_boundaries",
    "classify_surface",
    "ocean_plate_ids",
    "plate_rotation_vectors",
    "random_rotation_vector",
    "random_unit_vector",
    "velocity_field",
    "WorldState",
    # Phases
    "CONFIRM_TRANSITIONS",
    "Phase",
    "PhaseController",
    "Transition",
    "drive_headless",
    # Output
    "WorldValidation",
    "validate_world",
    "WORLD_SCHEMA",
    "export_world_json",
    "export_world_payload",
    "validate_world_payload",
    "cell_colours",
    "plate_palette",
    "render_world_png",
]
