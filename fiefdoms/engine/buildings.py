"""
Rolling Fiefdoms - Building Engine

Resolves which buildings the two build dice allow and places them.

Rules:
    - Each build die value unlocks one building (1 Cottage ... 10 Guild);
      the sum of both dice unlocks another if it is 10 or less
    - A building taken from one die grants the other die's value as
      population; a building taken from the sum grants none
    - Townhall, University and Almshouse can each be built once per game
    - At most two Guilds, each of a different subtype
    - A Springhouse lowers the worker requirement of one built neighbour by 1

All methods are stateless class methods operating on immutable data.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from itertools import product
from typing import ClassVar, Mapping, Sequence

from fiefdoms.engine.base import (
    BUILDING_RULES,
    VALUE_TO_BUILDING,
    Board,
    Building,
    BuildingRule,
    Coord,
    Die,
    GuildType,
)
from fiefdoms.engine.dice import DiceEngine
from fiefdoms.engine.events import EventPayload, GameEvent, describe_cell, rejected

logger = logging.getLogger(__name__)


class OptionSource(Enum):
    """What produced a building option."""
    DIE1 = "die1"
    DIE2 = "die2"
    SUM = "sum"


@dataclass(frozen=True)
class BuildOption:
    """
    Common shape of a building the player may choose.

    Attributes:
        code: Building code
        name: Display name
        source_label: Human-readable origin, e.g. "N1 (4)" or "sum 7"
    """
    code: Building
    name: str
    source_label: str


@dataclass(frozen=True)
class DieOption(BuildOption):
    """Building unlocked by one die; the other die becomes population."""
    source: OptionSource = OptionSource.DIE1
    pop_gain: int = 0


@dataclass(frozen=True)
class SumOption(BuildOption):
    """Building unlocked by the sum of both build dice."""
    total: int = 0

    @property
    def source(self) -> OptionSource:
        return OptionSource.SUM

    @property
    def pop_gain(self) -> int:
        return 0


@dataclass(frozen=True)
class BoardUpdate:
    """
    Result of a board-changing rules call.

    Attributes:
        board: Updated board; the input board when nothing was applied
        applied: Whether the change happened
        event: Outcome and message for the game log
    """
    board: Board
    applied: bool
    event: EventPayload


class BuildingEngine:
    """Stateless engine for building options and placement."""

    LIMITED_ADVANCED: ClassVar[frozenset[Building]] = frozenset(
        {Building.TOWNHALL, Building.UNIVERSITY, Building.ALMSHOUSE}
    )
    MAX_GUILDS: ClassVar[int] = 2

    @classmethod
    def building_options(
        cls,
        values: Sequence[int],
        rules: Mapping[Building, BuildingRule] = BUILDING_RULES,
    ) -> list[BuildOption]:
        """Building options for plain build die values."""
        labels = ("die A", "die B")
        dice = [Die.from_face(labels[i], value) for i, value in enumerate(values[:2])]
        return cls.building_options_from_dice(dice, rules)

    @classmethod
    def building_options_from_dice(
        cls,
        build_dice: Sequence[Die],
        rules: Mapping[Building, BuildingRule] = BUILDING_RULES,
    ) -> list[BuildOption]:
        """
        Enumerate every building the build dice allow.

        Split faces are expanded, so "1/2" with "4/5" offers all four value
        combinations. Options are deduplicated across combinations.

        Args:
            build_dice: The two dice not used for the location
            rules: Building rule table

        Returns:
            Options in discovery order (die1, die2, sum per combination)
        """
        values_per_die = [
            DiceEngine.possible_values(die) or (None,) for die in build_dice
        ]
        label_a = build_dice[0].label if len(build_dice) > 0 else "die A"
        label_b = build_dice[1].label if len(build_dice) > 1 else "die B"

        options: dict[tuple, BuildOption] = {}
        for combo in product(*values_per_die):
            if all(v is None for v in combo):
                continue
            a = combo[0]
            b = combo[1] if len(combo) > 1 else None

            code_a = VALUE_TO_BUILDING.get(a) if a is not None else None
            if code_a is not None:
                key = (OptionSource.DIE1, label_a, code_a, b or 0)
                options.setdefault(key, DieOption(
                    code=code_a,
                    name=rules[code_a].name,
                    source_label=f"{label_a} ({a})",
                    source=OptionSource.DIE1,
                    pop_gain=b or 0,
                ))

            code_b = VALUE_TO_BUILDING.get(b) if b is not None else None
            if code_b is not None:
                key = (OptionSource.DIE2, label_b, code_b, a or 0)
                options.setdefault(key, DieOption(
                    code=code_b,
                    name=rules[code_b].name,
                    source_label=f"{label_b} ({b})",
                    source=OptionSource.DIE2,
                    pop_gain=a or 0,
                ))

            if a is not None and b is not None:
                code_sum = VALUE_TO_BUILDING.get(a + b)
                if code_sum is not None:
                    options.setdefault((OptionSource.SUM, code_sum), SumOption(
                        code=code_sum,
                        name=rules[code_sum].name,
                        source_label=f"sum {a + b}",
                        total=a + b,
                    ))

        return list(options.values())

    @classmethod
    def built_guild_types(cls, board: Board) -> set[GuildType]:
        """Guild subtypes already on the board."""
        return {
            cell.guild_type for _, _, cell in board.iter_cells()
            if cell.guild_type is not None
        }

    @classmethod
    def available_guild_types(cls, board: Board) -> list[GuildType]:
        """Guild subtypes that can still be built, in sheet order."""
        built = cls.built_guild_types(board)
        return [guild for guild in GuildType if guild not in built]

    @classmethod
    def restrict_build_options_for_board(
        cls,
        options: Sequence[BuildOption],
        board: Board,
    ) -> list[BuildOption]:
        """
        Remove options the board no longer allows.

        Drops advanced buildings already built once, and the Guild once two
        guilds stand or every guild subtype is taken.
        """
        built_advanced = {
            cell.building for _, _, cell in board.iter_cells()
            if cell.building in cls.LIMITED_ADVANCED
        }
        guild_open = cls._guild_slot_open(board)

        allowed = []
        for option in options:
            if option.code in cls.LIMITED_ADVANCED:
                if option.code not in built_advanced:
                    allowed.append(option)
            elif option.code is Building.GUILD:
                if guild_open:
                    allowed.append(option)
            else:
                allowed.append(option)
        return allowed

    @classmethod
    def _guild_slot_open(cls, board: Board) -> bool:
        guilds = board.count(Building.GUILD)
        return guilds < cls.MAX_GUILDS and len(cls.built_guild_types(board)) < len(GuildType)

    @classmethod
    def place_building(
        cls,
        board: Board,
        r: int,
        c: int,
        code: Building | str,
        guild_type: GuildType | str | None = None,
    ) -> BoardUpdate:
        """
        Build on an open plot.

        Args:
            board: Current board
            r: Row
            c: Column
            code: Building to place
            guild_type: Subtype, required when placing a Guild

        Returns:
            BoardUpdate; applied is False with a reason when refused
        """
        code = Building(code)
        where = describe_cell(r, c)

        if not board.is_open(r, c):
            return cls._refuse(board, "Cell occupied or forfeited.", (r, c))

        if code in cls.LIMITED_ADVANCED and board.count(code) > 0:
            return cls._refuse(board, "That advanced building is already built.", (r, c))

        label = code.value
        if code is Building.GUILD:
            if board.count(Building.GUILD) >= cls.MAX_GUILDS:
                return cls._refuse(board, "Maximum number of guilds already built.", (r, c))
            available = cls.available_guild_types(board)
            if not available:
                return cls._refuse(board, "No guild types available.", (r, c))
            chosen = GuildType.from_label(guild_type) if guild_type is not None else None
            if chosen is None:
                return cls._refuse(board, "Select a guild type before placing a Guild.", (r, c))
            if chosen not in available:
                return cls._refuse(board, f"Guild type {chosen} is already built.", (r, c))
            label = chosen.value

        updated = board.update_cell(r, c, building=code, building_label=label)
        logger.debug("Placed %s at %s", label, where)
        return BoardUpdate(
            board=updated,
            applied=True,
            event=EventPayload(
                event=GameEvent.BUILDING_PLACED,
                message=f"Placed {label} at {where}",
                cell=(r, c),
                data={"code": code.value, "label": label},
            ),
        )

    @classmethod
    def forfeit_cell(cls, board: Board, r: int, c: int) -> BoardUpdate:
        """Mark an open plot forfeited for the rest of the game."""
        if not board.is_open(r, c):
            return cls._refuse(board, "Cell occupied or forfeited.", (r, c))
        updated = board.update_cell(r, c, forfeited=True)
        logger.debug("Forfeited %s", describe_cell(r, c))
        return BoardUpdate(
            board=updated,
            applied=True,
            event=EventPayload(
                event=GameEvent.PLOT_FORFEITED,
                message=f"Forfeited {describe_cell(r, c)}",
                cell=(r, c),
            ),
        )

    @classmethod
    def springhouse_targets(cls, board: Board, r: int, c: int) -> list[Coord]:
        """
        Neighbours of a Springhouse at (r, c) that can take its boost.

        A target must be built, not forfeited, and still need workers.
        An empty list means the Springhouse effect goes unused.
        """
        targets = []
        for nr, nc in board.neighbors(r, c):
            cell = board.cells[nr][nc]
            if cell.building is None or cell.forfeited:
                continue
            if max(0, cell.rule.requirement - cell.spring_boost) > 0:
                targets.append((nr, nc))
        return targets

    @classmethod
    def apply_springhouse_boost(cls, board: Board, target: Coord) -> BoardUpdate:
        """Lower a building's worker requirement by 1, never below zero."""
        tr, tc = target
        if not board.in_bounds(tr, tc):
            return cls._refuse(board, "Select a built, non-forfeited building for the Springhouse effect.")
        cell = board.cells[tr][tc]
        if cell.building is None or cell.forfeited:
            return cls._refuse(
                board,
                "Select a built, non-forfeited building for the Springhouse effect.",
                target,
            )

        max_boost = max(0, cell.rule.requirement)
        boost = min(max_boost, cell.spring_boost + 1)
        updated = board.update_cell(tr, tc, spring_boost=boost)
        logger.debug("Spring boost at %s now %d", describe_cell(tr, tc), boost)
        return BoardUpdate(
            board=updated,
            applied=True,
            event=EventPayload(
                event=GameEvent.SPRINGHOUSE_BOOSTED,
                message=f"Springhouse reduced worker requirement for {describe_cell(tr, tc)} by 1.",
                cell=target,
                data={"spring_boost": boost},
            ),
        )

    @classmethod
    def _refuse(cls, board: Board, message: str, cell: Coord | None = None) -> BoardUpdate:
        logger.debug("Refused: %s", message)
        return BoardUpdate(board=board, applied=False, event=rejected(message, cell))
