#!/usr/bin/env python3
"""Demo: grow tectonic plates tick by tick and render every stage.

Simulates the two cadences of an interactive session: a fixed-rate tick
that advances the generator, and a frame loop that delivers the
``confirm`` / ``reset`` signals a user would press.  Writes one PNG per
stage plus optional flood-fill snapshots.

Usage:
    python scripts/demo_plates.py                         # default output
    python scripts/demo_plates.py --frequency 16 --plates 24 --snapshots 6
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from platesphere import (
    Phase,
    PhaseController,
    WorldGenConfig,
    build_icosphere_graph,
    render_world_png,
    validate_world,
)
from platesphere.log_config import configure_logging


def main() -> None:
    parser = argparse.ArgumentParser(description="Plate generation demo")
    parser.add_argument("--frequency", type=int, default=12, help="Icosphere frequency (default: 12)")
    parser.add_argument("--plates", type=int, default=20, help="Number of plates (default: 20)")
    parser.add_argument("--seed", type=int, default=7)
    parser.add_argument("--snapshots", type=int, default=4, help="Flood-fill snapshots to save")
    parser.add_argument("--resets", type=int, default=1, help="Continent re-rolls before accepting")
    parser.add_argument("--out", type=str, default="exports/plates", help="Output directory")
    args = parser.parse_args()

    configure_logging("INFO")
    out_dir = Path(args.out)

    config = WorldGenConfig(
        n_plates=args.plates,
        frequency=args.frequency,
        cells_per_tick=8,
        seed=args.seed,
    )
    graph = build_icosphere_graph(config.frequency)
    print(f"Sphere: {graph.num_cells()} cells, {config.n_plates} plates")

    controller = PhaseController(graph, config)
    ticks_per_snapshot = max(1, graph.num_cells() // (config.cells_per_tick * max(args.snapshots, 1)))
    resets_left = args.resets
    snapshot = 0

    while not controller.generation_complete:
        phase = controller.tick()

        if phase is Phase.GEN_PLATES and controller.ticks % ticks_per_snapshot == 0:
            path = out_dir / f"growth_{snapshot:02d}.png"
            render_world_png(controller.world, path, mode="plates")
            snapshot += 1

        if phase is Phase.FINISHED_PLATES:
            render_world_png(controller.world, out_dir / "plates.png", mode="plates")
        elif phase is Phase.FINISHED_PLATE_BOUNDARIES:
            render_world_png(controller.world, out_dir / "boundaries.png", mode="boundaries")
        elif phase is Phase.FINISHED_CONTINENTS:
            render_world_png(controller.world, out_dir / f"surface_r{controller.reset_count}.png", mode="surface")
            if resets_left > 0:
                resets_left -= 1
                controller.handle_input(reset=True)
                continue
        elif phase is Phase.JUST_CHILL:
            render_world_png(controller.world, out_dir / "velocity.png", mode="velocity")

        controller.handle_input(confirm=controller.waiting_for_confirm)

    result = validate_world(controller.world, ocean_divisor=config.ocean_divisor)
    print("World valid ✓" if result else "\n".join(result.errors))
    print(f"Saved renders to {out_dir}")


if __name__ == "__main__":
    main()
