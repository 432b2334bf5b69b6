"""platesphere command-line interface."""

from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Optional, Sequence

from .config import DEFAULT_WORLD, WorldGenConfig, load_config
from .log_config import configure_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="platesphere CLI")
    parser.add_argument("--log-level", default="WARNING")
    parser.add_argument("--json-logs", action="store_true")
    sub = parser.add_subparsers(dest="command", required=True)

    generate = sub.add_parser("generate", help="Generate plates, continents and velocities")
    source = generate.add_mutually_exclusive_group()
    source.add_argument("--frequency", type=int, help="Icosphere subdivision frequency")
    source.add_argument("--graph", dest="graph_path", help="Cell graph JSON to generate on")
    generate.add_argument("--config", dest="config_path", help="WorldGenConfig JSON")
    generate.add_argument("--plates", type=int, dest="n_plates")
    generate.add_argument("--ratio", type=float, dest="max_size_ratio")
    generate.add_argument("--cells-per-tick", type=int, dest="cells_per_tick")
    generate.add_argument("--seed", type=int)
    generate.add_argument("--out", dest="output_path", default="exports/world.json")
    generate.add_argument("--render-out", dest="render_path")
    generate.add_argument(
        "--render-mode",
        choices=["plates", "surface", "boundaries", "velocity"],
        default="surface",
    )
    generate.add_argument("--validate", action="store_true")

    validate = sub.add_parser("validate", help="Validate an exported world JSON")
    validate.add_argument("--in", dest="input_path", required=True)

    build_graph = sub.add_parser("build-graph", help="Write an icosphere cell graph")
    build_graph.add_argument("--frequency", type=int, required=True)
    build_graph.add_argument("--radius", type=float, default=1.0)
    build_graph.add_argument("--out", dest="output_path", required=True)

    return parser


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        configure_logging(args.log_level, json=args.json_logs)
    except ValueError as exc:
        parser.error(str(exc))

    if args.command == "generate":
        _cmd_generate(args)

    elif args.command == "validate":
        from .export import validate_world_payload
        try:
            payload = json.loads(Path(args.input_path).read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            print(f"Cannot read {args.input_path}: {exc}")
            raise SystemExit(1)
        errors = validate_world_payload(payload)
        if errors:
            for error in errors:
                print(error)
            raise SystemExit(1)
        print("OK")

    elif args.command == "build-graph":
        from .icosphere import build_icosphere_graph
        from .io import save_graph
        try:
            graph = build_icosphere_graph(args.frequency, radius=args.radius)
        except ValueError as exc:
            print(exc)
            raise SystemExit(1)
        save_graph(graph, args.output_path)
        print(f"Saved {args.output_path} ({graph.num_cells()} cells)")


def _resolve_config(args) -> WorldGenConfig:
    base = load_config(args.config_path) if args.config_path else DEFAULT_WORLD
    return base.with_overrides(
        n_plates=args.n_plates,
        max_size_ratio=args.max_size_ratio,
        cells_per_tick=args.cells_per_tick,
        frequency=args.frequency,
        seed=args.seed,
    )


def _cmd_generate(args) -> None:
    from .export import export_world_json
    from .icosphere import build_icosphere_graph
    from .io import load_graph
    from .phases import PhaseController, drive_headless
    from .validation import validate_world

    try:
        config = _resolve_config(args)
        if args.graph_path:
            graph = load_graph(args.graph_path)
        else:
            graph = build_icosphere_graph(config.frequency, radius=config.radius)
    except (OSError, ValueError) as exc:
        print(exc)
        raise SystemExit(1)

    print(f"Generating {config.n_plates} plates on {graph.num_cells()} cells …")
    controller = PhaseController(graph, config)
    world = drive_headless(controller)

    if args.validate:
        result = validate_world(world, ocean_divisor=config.ocean_divisor)
        if not result:
            for error in result.errors:
                print(error)
            raise SystemExit(1)
        print("World valid ✓")

    out = export_world_json(world, args.output_path, phase=controller.phase.value)
    print(f"Saved {out}")

    if args.render_path:
        from .render import render_world_png
        render_world_png(world, args.render_path, mode=args.render_mode)
        print(f"Saved {args.render_path}")


if __name__ == "__main__":
    main()
