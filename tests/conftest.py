"""
Rolling Fiefdoms - Test Configuration and Fixtures

Common fixtures and board builders for all test modules.
"""

from typing import Callable

import pytest

from fiefdoms.engine.base import Board, Die, Grid, GuildType
from fiefdoms.engine.population import PopulationEngine


# =============================================================================
# BOARD FIXTURES
# =============================================================================

@pytest.fixture
def empty_board() -> Board:
    """Empty 5×5 board over the printed terrain."""
    return Board.empty()


@pytest.fixture
def build() -> Callable[..., Board]:
    """
    Factory placing buildings directly on a board.

    Usage: build({(0, 0): "F", (2, 3): "GF"}, forfeited=[(1, 1)])
    Guild labels (GF/GQ/GW/GM) place a Guild of that subtype.
    """
    def _build(
        buildings: dict[tuple[int, int], str] | None = None,
        forfeited: list[tuple[int, int]] | None = None,
        activation_forfeit: list[tuple[int, int]] | None = None,
        spring_boost: dict[tuple[int, int], int] | None = None,
        board: Board | None = None,
    ) -> Board:
        board = board or Board.empty()
        for (r, c), code in (buildings or {}).items():
            guild = GuildType.from_label(code)
            if guild is not None:
                board = board.update_cell(r, c, building="G", building_label=guild.value)
            else:
                board = board.update_cell(r, c, building=code, building_label=None)
        for r, c in forfeited or []:
            board = board.update_cell(r, c, forfeited=True)
        for r, c in activation_forfeit or []:
            board = board.update_cell(r, c, activation_forfeit=True)
        for (r, c), boost in (spring_boost or {}).items():
            board = board.update_cell(r, c, spring_boost=boost)
        return board

    return _build


@pytest.fixture
def full_board(build) -> Board:
    """Every plot built with a Cottage."""
    return build({(r, c): "C" for r in range(5) for c in range(5)})


# =============================================================================
# POPULATION FIXTURES
# =============================================================================

@pytest.fixture
def empty_pop() -> Grid:
    """Zeroed 4×4 population lattice."""
    return PopulationEngine.empty_grid()


@pytest.fixture
def pop() -> Callable[..., Grid]:
    """Factory for a 4×4 lattice with some populated nodes: pop({(1, 1): 3})."""
    def _pop(values: dict[tuple[int, int], int] | None = None, fill: int = 0) -> Grid:
        rows = [[fill] * 4 for _ in range(4)]
        for (r, c), value in (values or {}).items():
            rows[r][c] = value
        return PopulationEngine.from_rows(rows)

    return _pop


@pytest.fixture
def alloc() -> Callable[..., Grid]:
    """Factory for 5×5 worker allocations: alloc({(0, 0): 2})."""
    def _alloc(values: dict[tuple[int, int], int] | None = None, fill: int = 0) -> Grid:
        rows = [[fill] * 5 for _ in range(5)]
        for (r, c), value in (values or {}).items():
            rows[r][c] = value
        return tuple(tuple(row) for row in rows)

    return _alloc


# =============================================================================
# DICE FIXTURES
# =============================================================================

@pytest.fixture
def dice() -> Callable[..., tuple[Die, ...]]:
    """Factory for the turn's dice from faces in order N1, N2, X1, X2."""
    def _dice(n1, n2, x1, x2) -> tuple[Die, ...]:
        return (
            Die.from_face("N1", n1),
            Die.from_face("N2", n2),
            Die.from_face("X1", x1),
            Die.from_face("X2", x2),
        )

    return _dice
