"""
Rolling Fiefdoms - Population Engine

Population lives on the lattice intersections between plots: a 5×5 board
has a 4×4 grid of nodes, and node (i, j) touches plots (i, j), (i, j+1),
(i+1, j) and (i+1, j+1). A node is filled once and never topped up.
"""

import logging
from typing import ClassVar, Sequence

from fiefdoms.engine.base import Coord, Grid, PopulationResult
from fiefdoms.engine.validators import validate_grid

logger = logging.getLogger(__name__)


class PopulationEngine:
    """Stateless helpers for the population lattice."""

    DEFAULT_CAPACITY: ClassVar[int] = 5

    @classmethod
    def empty_grid(cls, rows: int = 4, cols: int = 4) -> Grid:
        return tuple(tuple(0 for _ in range(cols)) for _ in range(rows))

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence[int]]) -> Grid:
        """Validated, immutable copy of nested rows."""
        return validate_grid(rows, "population grid")

    @classmethod
    def total_population(cls, grid: Sequence[Sequence[int]]) -> int:
        return sum(sum(row) for row in grid)

    @classmethod
    def nodes_for_cell(cls, r: int, c: int, grid: Sequence[Sequence[int]]) -> list[Coord]:
        """Lattice nodes touching plot (r, c); corner plots touch only one."""
        rows = len(grid)
        cols = len(grid[0]) if rows else 0
        candidates = ((r - 1, c - 1), (r - 1, c), (r, c - 1), (r, c))
        return [
            (nr, nc) for nr, nc in candidates
            if 0 <= nr < rows and 0 <= nc < cols
        ]

    @classmethod
    def open_nodes_for_cell(cls, r: int, c: int, grid: Sequence[Sequence[int]]) -> list[Coord]:
        """Nodes touching plot (r, c) that can still take population."""
        return [(nr, nc) for nr, nc in cls.nodes_for_cell(r, c, grid) if grid[nr][nc] == 0]

    @classmethod
    def population_around(cls, r: int, c: int, grid: Sequence[Sequence[int]]) -> int:
        """Sum of population on the nodes touching plot (r, c)."""
        return sum(grid[nr][nc] for nr, nc in cls.nodes_for_cell(r, c, grid))

    @classmethod
    def allocate_population_to_node(
        cls,
        grid: Sequence[Sequence[int]],
        row: int,
        col: int,
        amount: int,
        cap: int = DEFAULT_CAPACITY,
    ) -> PopulationResult:
        """
        Place population on a single node.

        The node must exist and be empty. At most `cap` is placed; any
        excess is dropped, not carried to another node.

        Args:
            grid: Current population grid (never modified)
            row: Node row
            col: Node column
            amount: Population to place
            cap: Node capacity

        Returns:
            PopulationResult; placed is 0 and grid is the input when refused
        """
        rows = len(grid)
        cols = len(grid[0]) if rows else 0
        if not (0 <= row < rows and 0 <= col < cols):
            logger.debug("Population node (%d, %d) is off the lattice", row, col)
            return PopulationResult(placed=0, grid=grid)

        if grid[row][col] > 0:
            logger.debug("Population node (%d, %d) already used", row, col)
            return PopulationResult(placed=0, grid=grid)

        placed = max(0, min(amount, max(0, cap)))
        new_grid = tuple(
            tuple(placed if (r, c) == (row, col) else value for c, value in enumerate(values))
            for r, values in enumerate(grid)
        )
        if placed < amount:
            logger.debug("Dropped %d population over node capacity", amount - placed)
        return PopulationResult(placed=placed, grid=new_grid)
