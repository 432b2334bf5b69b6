"""Generation phases — the state machine that sequences world generation.

The controller is driven from two cadences:

- :meth:`PhaseController.tick` — fixed-rate simulation tick.  Runs the
  work of the current phase (seeding, one or more flood-fill steps, or
  a one-shot classification pass).
- :meth:`PhaseController.handle_input` — once per frame with the
  edge-triggered ``confirm`` / ``reset`` signals.  Only the waiting
  phases react to them.

Phase order::

    SEED_PLATES → GEN_PLATES ⟲ → FINISHED_PLATES ⏸ → ASSIGN_PLATE_BOUNDARIES
    → FINISHED_PLATE_BOUNDARIES ⏸ → GEN_CONTINENTS → FINISHED_CONTINENTS ⏸
    → GEN_PLATE_VELOCITIES → JUST_CHILL ⏸ → FINISHED

``⏸`` phases wait for ``confirm``.  ``reset`` in ``FINISHED_CONTINENTS``
clears the land/ocean labels and returns to ``GEN_CONTINENTS``.
"""

from __future__ import annotations

import random
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional

import structlog

from .cellgraph import CellGraph
from .classify import classify_boundaries, classify_surface
from .config import DEFAULT_WORLD, WorldGenConfig
from .models import StepStatus
from .partition import Partitioner
from .velocity import plate_rotation_vectors, velocity_field
from .world import WorldState

logger = structlog.get_logger(__name__)


class Phase(str, Enum):
    SEED_PLATES = "seed_plates"
    GEN_PLATES = "gen_plates"
    FINISHED_PLATES = "finished_plates"
    ASSIGN_PLATE_BOUNDARIES = "assign_plate_boundaries"
    FINISHED_PLATE_BOUNDARIES = "finished_plate_boundaries"
    GEN_CONTINENTS = "gen_continents"
    FINISHED_CONTINENTS = "finished_continents"
    GEN_PLATE_VELOCITIES = "gen_plate_velocities"
    JUST_CHILL = "just_chill"
    FINISHED = "finished"


# Phases that hold until the user confirms, and where confirm leads.
CONFIRM_TRANSITIONS: Dict[Phase, Phase] = {
    Phase.FINISHED_PLATES: Phase.ASSIGN_PLATE_BOUNDARIES,
    Phase.FINISHED_PLATE_BOUNDARIES: Phase.GEN_CONTINENTS,
    Phase.FINISHED_CONTINENTS: Phase.GEN_PLATE_VELOCITIES,
    Phase.JUST_CHILL: Phase.FINISHED,
}

WAITING_PHASES = frozenset(CONFIRM_TRANSITIONS)

TransitionHook = Callable[[Phase, Phase], None]
"""Signature for the transition hook: ``(old_phase, new_phase)``."""


@dataclass(frozen=True)
class Transition:
    source: Phase
    target: Phase
    tick: int


class PhaseController:
    """Drives one world generation run through every :class:`Phase`.

    Parameters
    ----------
    graph : CellGraph
        The sphere to generate on.
    config : WorldGenConfig
        Plate count, balance ratio, ocean divisor, speed limit and seed.
    rng : random.Random, optional
        Shared random source; defaults to ``random.Random(config.seed)``.
    on_transition : TransitionHook, optional
        Called after every phase change.
    """

    def __init__(
        self,
        graph: CellGraph,
        config: WorldGenConfig = DEFAULT_WORLD,
        *,
        rng: Optional[random.Random] = None,
        on_transition: Optional[TransitionHook] = None,
    ) -> None:
        self.graph = graph
        self.config = config
        self.rng = rng if rng is not None else random.Random(config.seed)
        self.partitioner = Partitioner(
            graph,
            config.n_plates,
            max_size_ratio=config.max_size_ratio,
            rng=self.rng,
        )
        self.world = WorldState(graph, self.partitioner.assignment)
        self._on_transition = on_transition
        self._phase = Phase.SEED_PLATES
        self.ticks = 0
        self.reset_count = 0
        self.elapsed: Dict[Phase, float] = {}
        self.history: List[Transition] = []

        self._tick_handlers: Dict[Phase, Callable[[], None]] = {
            Phase.SEED_PLATES: self._seed_plates,
            Phase.GEN_PLATES: self._grow_plates,
            Phase.ASSIGN_PLATE_BOUNDARIES: self._assign_boundaries,
            Phase.GEN_CONTINENTS: self._assign_continents,
            Phase.GEN_PLATE_VELOCITIES: self._assign_velocities,
        }

    # ── State ───────────────────────────────────────────────────────

    @property
    def phase(self) -> Phase:
        return self._phase

    @property
    def waiting_for_confirm(self) -> bool:
        return self._phase in WAITING_PHASES

    @property
    def generation_complete(self) -> bool:
        return self._phase is Phase.FINISHED

    # ── Cadences ────────────────────────────────────────────────────

    def tick(self) -> Phase:
        """Advance one fixed-rate tick and return the resulting phase."""
        self.ticks += 1
        phase = self._phase
        handler = self._tick_handlers.get(phase)
        if handler is not None:
            t0 = time.perf_counter()
            handler()
            self.elapsed[phase] = self.elapsed.get(phase, 0.0) + time.perf_counter() - t0
        return self._phase

    def handle_input(self, *, confirm: bool = False, reset: bool = False) -> Phase:
        """Apply this frame's signals and return the resulting phase.

        ``reset`` wins over ``confirm`` when both arrive together.
        """
        if reset and self._phase is Phase.FINISHED_CONTINENTS:
            self._reset_continents()
        elif confirm and self._phase in CONFIRM_TRANSITIONS:
            self._transition(CONFIRM_TRANSITIONS[self._phase])
        elif confirm or reset:
            logger.debug(
                "signal_ignored",
                phase=self._phase.value,
                confirm=confirm,
                reset=reset,
            )
        return self._phase

    def confirm(self) -> Phase:
        return self.handle_input(confirm=True)

    def reset(self) -> Phase:
        return self.handle_input(reset=True)

    # ── Phase work ──────────────────────────────────────────────────

    def _seed_plates(self) -> None:
        self.partitioner.seed()
        self._transition(Phase.GEN_PLATES)

    def _grow_plates(self) -> None:
        for _ in range(self.config.cells_per_tick):
            if self.partitioner.step() is StepStatus.DONE:
                self._transition(Phase.FINISHED_PLATES)
                return

    def _assign_boundaries(self) -> None:
        flags = classify_boundaries(self.graph, self.world.assignment)
        self.world.publish_boundaries(flags)
        self._transition(Phase.FINISHED_PLATE_BOUNDARIES)

    def _assign_continents(self) -> None:
        plate_labels, cell_labels = classify_surface(
            self.world.assignment,
            self.rng,
            divisor=self.config.ocean_divisor,
        )
        self.world.publish_surface(plate_labels, cell_labels)
        logger.info(
            "continents_assigned",
            ocean_plates=self.world.ocean_plate_count(),
            land_plates=self.world.n_plates - self.world.ocean_plate_count(),
        )
        self._transition(Phase.FINISHED_CONTINENTS)

    def _assign_velocities(self) -> None:
        omegas = plate_rotation_vectors(
            self.world.n_plates, self.rng, self.config.max_speed
        )
        velocities = velocity_field(self.graph, self.world.assignment, omegas)
        self.world.publish_velocities(omegas, velocities)
        self._transition(Phase.JUST_CHILL)

    def _reset_continents(self) -> None:
        self.world.clear_surface()
        self.reset_count += 1
        self._transition(Phase.GEN_CONTINENTS)

    def _transition(self, target: Phase) -> None:
        source = self._phase
        self._phase = target
        self.history.append(Transition(source, target, self.ticks))
        logger.info(
            "phase_transition",
            source=source.value,
            target=target.value,
            tick=self.ticks,
        )
        if self._on_transition:
            self._on_transition(source, target)

    def __repr__(self) -> str:
        return f"PhaseController(phase={self._phase.value}, ticks={self.ticks})"


def drive_headless(
    controller: PhaseController,
    *,
    max_ticks: Optional[int] = None,
) -> WorldState:
    """Run *controller* to :attr:`Phase.FINISHED`, confirming every gate."""
    while not controller.generation_complete:
        if controller.waiting_for_confirm:
            controller.confirm()
            continue
        if max_ticks is not None and controller.ticks >= max_ticks:
            raise RuntimeError(
                f"Generation did not finish within {max_ticks} ticks "
                f"(stuck in {controller.phase.value})"
            )
        controller.tick()
    return controller.world
