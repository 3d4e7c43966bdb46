"""
Rolling Fiefdoms - Scoring Engine

Computes the score sheet from the board, the population lattice and
(during or after activation) the worker allocations. The breakdown is
recomputed from scratch on every call.

Scoring Rules:
    - Cottage: 2 per cottage occupied, one occupied per 4 population
    - Farm: 3, +2 next to a Springhouse
    - Quarry: 3, +1 if another Quarry shares its row or column
    - Windmill: 3, +1 per neighbouring Windmill
    - Market: population on the surrounding nodes
    - Springhouse: 4, -1 per neighbouring forfeited plot
    - Townhall: 5, +2 per distinct active basic/special building in its
      row or column
    - University: 0/5/8/12/15 for 0/1/2/3/4+ distinct advanced buildings built
    - Almshouse: cancels up to 12 vagrant penalty
    - Guild: 15 if its pattern is on the board (4 contiguous Farms or
      Quarries, 4 edge Windmills, 4 interior Markets)
    - Vagrants: -1 per population above housing (4 per cottage)

Only active buildings score, except where a rule says otherwise.
"""

import logging
from dataclasses import asdict, dataclass
from typing import ClassVar, Sequence

from fiefdoms.engine.activation import ActivationEngine, ActivationMap
from fiefdoms.engine.base import (
    BUILDING_RULES,
    Board,
    Building,
    BuildingCategory,
    Coord,
)
from fiefdoms.engine.population import PopulationEngine

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScoreBreakdown:
    """
    Score per sheet category.

    Attributes:
        forfeits: Forfeited plot count; informational, never scored
        vagrants: Penalty, zero or negative
    """
    cottages: int = 0
    farm: int = 0
    quarry: int = 0
    windmill: int = 0
    market: int = 0
    springhouse: int = 0
    townhall: int = 0
    university: int = 0
    almshouse: int = 0
    guilds: int = 0
    forfeits: int = 0
    vagrants: int = 0

    @property
    def total(self) -> int:
        """Sum of every scoring category (forfeits excluded)."""
        return sum(value for name, value in asdict(self).items() if name != "forfeits")

    def to_dict(self) -> dict[str, int]:
        return asdict(self)


@dataclass(frozen=True)
class ScoreResult:
    """
    Complete score for a board.

    Attributes:
        total: Final score
        breakdown: Per-category scores
        pop: Total population
        housing: Housing capacity (4 per cottage)
        forfeits: Forfeited plots plus activation-forfeited buildings
    """
    total: int
    breakdown: ScoreBreakdown
    pop: int
    housing: int
    forfeits: int

    def __str__(self) -> str:
        lines = [f"Total: {self.total} points"]
        for name, value in self.breakdown.to_dict().items():
            if name != "forfeits" and value:
                lines.append(f"  - {name}: {value}")
        return "\n".join(lines)


class ScoringEngine:
    """
    Stateless engine for scoring.

    All methods are class methods operating on immutable data.
    """

    HOUSING_PER_COTTAGE: ClassVar[int] = 4
    FARM_SPRINGHOUSE_BONUS: ClassVar[int] = 2
    QUARRY_LINE_BONUS: ClassVar[int] = 1
    TOWNHALL_PER_TYPE: ClassVar[int] = 2
    ALMSHOUSE_CANCEL: ClassVar[int] = 12
    GUILD_BONUS: ClassVar[int] = 15
    GUILD_PATTERN_SIZE: ClassVar[int] = 4
    UNIVERSITY_TIERS: ClassVar[tuple[int, ...]] = (0, 5, 8, 12, 15)

    # Building -> breakdown field for the per-plot terms
    CATEGORY_FIELDS: ClassVar[dict[Building, str]] = {
        Building.FARM: "farm",
        Building.QUARRY: "quarry",
        Building.WINDMILL: "windmill",
        Building.MARKET: "market",
        Building.SPRINGHOUSE: "springhouse",
        Building.TOWNHALL: "townhall",
        Building.UNIVERSITY: "university",
        Building.ALMSHOUSE: "almshouse",
        Building.GUILD: "guilds",
    }

    @classmethod
    def calc_vagrants(cls, pop: int, housing: int) -> int:
        """Population without housing."""
        return max(0, pop - housing)

    @classmethod
    def compute_score(
        cls,
        board: Board,
        population: Sequence[Sequence[int]],
        worker_allocations: Sequence[Sequence[int]] | None = None,
    ) -> ScoreResult:
        """
        Score a board.

        Args:
            board: Current board
            population: Population per lattice node
            worker_allocations: Workers per plot, or None for the
                population-based preview

        Returns:
            ScoreResult with total, breakdown and the tracks it used
        """
        pop_total = PopulationEngine.total_population(population)
        cottages = board.count(Building.COTTAGE)
        housing = cottages * cls.HOUSING_PER_COTTAGE
        forfeits = sum(
            1 for _, _, cell in board.iter_cells()
            if cell.forfeited or cell.activation_forfeit
        )
        activation = ActivationEngine.compute_activation_map(board, population, worker_allocations)

        scores = {name: 0 for name in cls.CATEGORY_FIELDS.values()}
        for r, c, cell in board.iter_cells():
            name = cls.CATEGORY_FIELDS.get(cell.building)
            if name is None:
                continue
            scores[name] += cls._cell_score(board, population, activation, r, c)

        vagrants = -cls.calc_vagrants(pop_total, housing)
        if vagrants < 0 and cls._almshouse_active(board, activation):
            vagrants = min(0, vagrants + cls.ALMSHOUSE_CANCEL)

        breakdown = ScoreBreakdown(
            cottages=cls.score_cottages(board, population),
            forfeits=forfeits,
            vagrants=vagrants,
            **scores,
        )
        logger.debug(
            "Scored %d (pop %d, housing %d, forfeits %d)",
            breakdown.total, pop_total, housing, forfeits,
        )
        return ScoreResult(
            total=breakdown.total,
            breakdown=breakdown,
            pop=pop_total,
            housing=housing,
            forfeits=forfeits,
        )

    @classmethod
    def score_cottages(cls, board: Board, population: Sequence[Sequence[int]]) -> int:
        """Cottages score when occupied; housing, not workers, decides that."""
        pop = PopulationEngine.total_population(population)
        occupied = min(board.count(Building.COTTAGE), pop // cls.HOUSING_PER_COTTAGE)
        return occupied * BUILDING_RULES[Building.COTTAGE].base

    @classmethod
    def score_building_at(
        cls,
        board: Board,
        population: Sequence[Sequence[int]],
        worker_allocations: Sequence[Sequence[int]] | None,
        r: int,
        c: int,
        activation: ActivationMap | None = None,
    ) -> int:
        """
        Points one plot contributes to its category.

        Cottages, vagrants and other board-wide terms are not per-plot and
        score 0 here. Summing this over all plots of a type matches that
        type's entry in compute_score.
        """
        if not board.in_bounds(r, c):
            return 0
        if activation is None:
            activation = ActivationEngine.compute_activation_map(board, population, worker_allocations)
        return cls._cell_score(board, population, activation, r, c)

    @classmethod
    def _cell_score(
        cls,
        board: Board,
        population: Sequence[Sequence[int]],
        activation: ActivationMap,
        r: int,
        c: int,
    ) -> int:
        cell = board.cells[r][c]
        if cell.building is None or not activation.get((r, c), False):
            return 0

        code = cell.building
        base = BUILDING_RULES[code].base
        if code is Building.FARM:
            bonus = cls.FARM_SPRINGHOUSE_BONUS if cls._adjacent_count(board, r, c, Building.SPRINGHOUSE) else 0
            return base + bonus
        if code is Building.QUARRY:
            bonus = cls.QUARRY_LINE_BONUS if cls._line_has(board, r, c, Building.QUARRY) else 0
            return base + bonus
        if code is Building.WINDMILL:
            return base + cls._adjacent_count(board, r, c, Building.WINDMILL)
        if code is Building.MARKET:
            return PopulationEngine.population_around(r, c, population)
        if code is Building.SPRINGHOUSE:
            forfeited = sum(1 for nr, nc in board.neighbors(r, c) if board.cells[nr][nc].forfeited)
            return base - forfeited
        if code is Building.TOWNHALL:
            return base + cls.TOWNHALL_PER_TYPE * len(cls._active_types_in_line(board, activation, r, c))
        if code is Building.UNIVERSITY:
            return cls.university_points(cls._distinct_advanced(board))
        if code is Building.GUILD:
            guild = cell.guild_type
            if guild is None:
                return 0
            return cls.GUILD_BONUS if cls.meets_guild_condition(board, activation, guild.target) else 0
        # Cottage scores via housing, Almshouse via vagrants
        return 0

    @classmethod
    def university_points(cls, distinct_advanced: int) -> int:
        tiers = cls.UNIVERSITY_TIERS
        return tiers[min(distinct_advanced, len(tiers) - 1)]

    @classmethod
    def meets_guild_condition(
        cls,
        board: Board,
        activation: ActivationMap,
        target: Building,
    ) -> bool:
        """Whether the board shows the pattern a guild rewards."""
        size = cls.GUILD_PATTERN_SIZE
        if target in (Building.FARM, Building.QUARRY):
            return cls.max_contiguous(board, activation, target) >= size
        if target is Building.WINDMILL:
            return cls._count_active(board, activation, target, edge=True) >= size
        if target is Building.MARKET:
            return cls._count_active(board, activation, target, edge=False) >= size
        return False

    @classmethod
    def max_contiguous(cls, board: Board, activation: ActivationMap, code: Building) -> int:
        """Largest cardinally connected group of active plots holding `code`."""
        def matches(pos: Coord) -> bool:
            r, c = pos
            return board.cells[r][c].building == code and activation.get(pos, False)

        visited: set[Coord] = set()
        best = 0
        for r, c, _ in board.iter_cells():
            if (r, c) in visited or not matches((r, c)):
                continue
            visited.add((r, c))
            stack = [(r, c)]
            size = 0
            while stack:
                cr, cc = stack.pop()
                size += 1
                for neighbor in board.neighbors(cr, cc):
                    if neighbor not in visited and matches(neighbor):
                        visited.add(neighbor)
                        stack.append(neighbor)
            best = max(best, size)
        return best

    @classmethod
    def _count_active(cls, board: Board, activation: ActivationMap, code: Building, edge: bool) -> int:
        return sum(
            1 for r, c, cell in board.iter_cells()
            if cell.building == code
            and activation.get((r, c), False)
            and board.is_edge(r, c) == edge
        )

    @classmethod
    def _almshouse_active(cls, board: Board, activation: ActivationMap) -> bool:
        return any(
            cell.building is Building.ALMSHOUSE and activation.get((r, c), False)
            for r, c, cell in board.iter_cells()
        )

    @classmethod
    def _adjacent_count(cls, board: Board, r: int, c: int, code: Building) -> int:
        return sum(1 for nr, nc in board.neighbors(r, c) if board.cells[nr][nc].building == code)

    @classmethod
    def _line_has(cls, board: Board, r: int, c: int, code: Building) -> bool:
        """Another `code` anywhere in row r or column c, active or not."""
        in_row = any(board.cells[r][cc].building == code for cc in range(board.cols) if cc != c)
        in_col = any(board.cells[rr][c].building == code for rr in range(board.rows) if rr != r)
        return in_row or in_col

    @classmethod
    def _active_types_in_line(
        cls,
        board: Board,
        activation: ActivationMap,
        r: int,
        c: int,
    ) -> set[Building]:
        """Distinct active basic/special buildings sharing row r or column c."""
        eligible = (BuildingCategory.BASIC, BuildingCategory.SPECIAL)
        line = [(r, cc) for cc in range(board.cols)] + [(rr, c) for rr in range(board.rows)]
        types = set()
        for pos in line:
            cell = board.cells[pos[0]][pos[1]]
            if cell.building is None or not activation.get(pos, False):
                continue
            if BUILDING_RULES[cell.building].category in eligible:
                types.add(cell.building)
        return types

    @classmethod
    def _distinct_advanced(cls, board: Board) -> int:
        """Distinct advanced buildings built, whether active or not."""
        return len({
            cell.building for _, _, cell in board.iter_cells()
            if cell.building is not None
            and BUILDING_RULES[cell.building].category is BuildingCategory.ADVANCED
        })
