"""
Rolling Fiefdoms - Activation Engine

Decides which buildings are staffed. A building is active when its worker
requirement, net of Springhouse boosts, is met.

Two modes share one function:
    - Build phase preview: no allocations yet, so the raw population on the
      nodes around a plot stands in for workers
    - Activation phase: explicit worker allocations per plot are authoritative

The activation phase itself moves workers one at a time from a node to an
adjacent building; buildings that can no longer be staffed are marked
activation-forfeited and drop out of scoring.
"""

import logging
from dataclasses import dataclass
from typing import Sequence

from fiefdoms.engine.base import Board, Cell, Coord, Grid
from fiefdoms.engine.events import EventPayload, GameEvent, describe_cell, rejected
from fiefdoms.engine.population import PopulationEngine

logger = logging.getLogger(__name__)

ActivationMap = dict[Coord, bool]


@dataclass(frozen=True)
class ActivationState:
    """
    Worker bookkeeping during the activation phase.

    Attributes:
        available: Population per node not yet assigned as workers
        allocations: Workers assigned per plot (same shape as the board)
    """
    available: Grid
    allocations: Grid


@dataclass(frozen=True)
class WorkerUpdate:
    """
    Result of assigning one worker.

    Attributes:
        state: Updated bookkeeping; the input state when refused
        assigned: Whether a worker moved
        activated: Whether the building just reached its requirement
        event: Outcome and message for the game log
    """
    state: ActivationState
    assigned: bool
    activated: bool
    event: EventPayload


class ActivationEngine:
    """Stateless engine for building activation."""

    @classmethod
    def effective_requirement(cls, cell: Cell) -> int:
        """Workers still needed after Springhouse boosts."""
        if cell.rule is None:
            return 0
        return max(0, cell.rule.requirement - max(0, cell.spring_boost))

    @classmethod
    def compute_activation_map(
        cls,
        board: Board,
        population: Sequence[Sequence[int]],
        worker_allocations: Sequence[Sequence[int]] | None = None,
    ) -> ActivationMap:
        """
        Activation status of every plot.

        Args:
            board: Current board
            population: Population per lattice node
            worker_allocations: Workers per plot; None to use nearby population

        Returns:
            Mapping (row, col) -> active
        """
        activation: ActivationMap = {}
        for r, c, cell in board.iter_cells():
            if cell.building is None or cell.forfeited or cell.activation_forfeit:
                activation[(r, c)] = False
                continue

            required = cls.effective_requirement(cell)
            if required <= 0:
                activation[(r, c)] = True
            elif worker_allocations is not None:
                activation[(r, c)] = max(0, worker_allocations[r][c]) >= required
            else:
                activation[(r, c)] = (
                    PopulationEngine.population_around(r, c, population) >= required
                )
        return activation

    @classmethod
    def begin(cls, board: Board, population: Sequence[Sequence[int]]) -> tuple[Board, ActivationState]:
        """
        Start the activation phase.

        Clears earlier activation forfeits, makes all placed population
        available as workers, and forfeits buildings that already cannot
        be staffed.
        """
        cleared = board
        for r, c, cell in board.iter_cells():
            if cell.activation_forfeit:
                cleared = cleared.update_cell(r, c, activation_forfeit=False)

        state = ActivationState(
            available=PopulationEngine.from_rows(population),
            allocations=PopulationEngine.empty_grid(board.rows, board.cols),
        )
        return cls.auto_forfeit_unfillable(cleared, state, finalize=False), state

    @classmethod
    def assign_worker(
        cls,
        board: Board,
        state: ActivationState,
        node: Coord,
        target: Coord,
    ) -> WorkerUpdate:
        """
        Move one worker from a node to an adjacent building.

        Args:
            board: Current board
            state: Activation bookkeeping
            node: Lattice node supplying the worker
            target: Plot receiving the worker

        Returns:
            WorkerUpdate; assigned is False with a reason when refused
        """
        pr, pc = node
        br, bc = target

        if not board.in_bounds(br, bc):
            return cls._refuse(state, "Select a valid building.", target)
        cell = board.cells[br][bc]
        if cell.building is None or cell.forfeited or cell.activation_forfeit:
            return cls._refuse(state, "Select a valid building.", target)

        nodes = PopulationEngine.nodes_for_cell(br, bc, state.available)
        if node not in nodes:
            return cls._refuse(state, "Population must be adjacent to the building.", target)
        available = state.available[pr][pc]
        if available <= 0:
            return cls._refuse(state, "No available population on that node.", target)

        required = cls.effective_requirement(cell)
        filled = state.allocations[br][bc]
        if required - filled <= 0:
            return cls._refuse(state, "Building already filled.", target)

        new_state = ActivationState(
            available=_set(state.available, pr, pc, available - 1),
            allocations=_set(state.allocations, br, bc, filled + 1),
        )
        activated = filled + 1 >= required
        where = describe_cell(br, bc)
        if activated:
            message = f"Activated {cell.building} at {where}."
            event = GameEvent.BUILDING_ACTIVATED
        else:
            message = f"Assigned a worker to {cell.building} at {where}."
            event = GameEvent.WORKER_ASSIGNED
        logger.debug("%s", message)
        return WorkerUpdate(
            state=new_state,
            assigned=True,
            activated=activated,
            event=EventPayload(event=event, message=message, cell=target),
        )

    @classmethod
    def auto_forfeit_unfillable(
        cls,
        board: Board,
        state: ActivationState,
        finalize: bool = False,
    ) -> Board:
        """
        Mark buildings that cannot reach their requirement.

        While the phase is running a building is forfeited when the
        population still available around it is less than the workers it
        lacks; a later pass can clear that again. When finalizing, any
        building still short of workers is forfeited.
        """
        updated = board
        for r, c, cell in board.iter_cells():
            if cell.building is None or cell.forfeited:
                continue

            remaining = max(0, cls.effective_requirement(cell) - state.allocations[r][c])
            if remaining <= 0:
                should_forfeit = False
            elif finalize:
                should_forfeit = True
            else:
                nearby = PopulationEngine.population_around(r, c, state.available)
                should_forfeit = nearby < remaining

            if should_forfeit and not cell.activation_forfeit:
                logger.debug(
                    "Could not activate %s at %s; marked forfeited for scoring",
                    cell.building,
                    describe_cell(r, c),
                )
                updated = updated.update_cell(r, c, activation_forfeit=True)
            elif not should_forfeit and cell.activation_forfeit:
                updated = updated.update_cell(r, c, activation_forfeit=False)
        return updated

    @classmethod
    def activation_forfeits(cls, before: Board, after: Board) -> list[EventPayload]:
        """Log entries for buildings newly activation-forfeited between two boards."""
        events = []
        for r, c, cell in after.iter_cells():
            if cell.activation_forfeit and not before.cells[r][c].activation_forfeit:
                events.append(EventPayload(
                    event=GameEvent.ACTIVATION_FORFEITED,
                    message=(
                        f"Could not activate {cell.building} at {describe_cell(r, c)}; "
                        "marked forfeited for scoring."
                    ),
                    cell=(r, c),
                ))
        return events

    @classmethod
    def finish(cls, board: Board, state: ActivationState) -> Board:
        """Final pass: every building still short of workers is forfeited."""
        return cls.auto_forfeit_unfillable(board, state, finalize=True)

    @classmethod
    def _refuse(cls, state: ActivationState, message: str, cell: Coord) -> WorkerUpdate:
        logger.debug("Refused: %s", message)
        return WorkerUpdate(state=state, assigned=False, activated=False, event=rejected(message, cell))


def _set(grid: Grid, r: int, c: int, value: int) -> Grid:
    row = grid[r][:c] + (value,) + grid[r][c + 1:]
    return grid[:r] + (row,) + grid[r + 1:]
