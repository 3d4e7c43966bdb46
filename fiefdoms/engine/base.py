"""
Rolling Fiefdoms - Game Engine Base Classes

This module defines the foundational data structures and enums used throughout
the rules engine. All classes are immutable (frozen dataclasses): every engine
call takes a snapshot and returns new values, so nothing a caller holds is
changed behind its back.
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Iterator, Sequence

from fiefdoms.engine.validators import (
    FORFEIT_FACE,
    SPLIT_FACES,
    validate_die_face,
    validate_die_resolution,
    validate_rectangular,
)

Coord = tuple[int, int]
Grid = tuple[tuple[int, ...], ...]


class DieKind(Enum):
    """Kind of die rolled each turn."""
    NUMBERED = "numbered"  # N1, N2: faces 1-5 plus a split face
    SPECIAL = "special"    # X1, X2: faces 1-5 plus the forfeit face


class Terrain(Enum):
    """Printed terrain of a plot on the sheet."""
    PLAIN = ".."
    MOUNTAIN = "Mt"
    FOREST = "Fo"
    SEA = "Se"
    MARSH = "Ma"
    VILLAGE = "Vi"


class BuildingCategory(Enum):
    """Rule category of a building."""
    BASIC = "basic"
    ADVANCED = "advanced"
    SPECIAL = "special"


class Building(str, Enum):
    """Building codes as written on the board."""
    COTTAGE = "C"
    FARM = "F"
    QUARRY = "Q"
    WINDMILL = "W"
    MARKET = "M"
    SPRINGHOUSE = "S"
    TOWNHALL = "T"
    UNIVERSITY = "U"
    ALMSHOUSE = "A"
    GUILD = "G"

    def __str__(self) -> str:
        return self.value


class GuildType(str, Enum):
    """Guild subtypes; each rewards a pattern of one basic building."""
    FARMERS = "GF"
    QUARRYMEN = "GQ"
    WINDMILLERS = "GW"
    MERCHANTS = "GM"

    @property
    def target(self) -> Building:
        """The basic building this guild rewards."""
        return _GUILD_TARGETS[self]

    @classmethod
    def from_label(cls, label: str | None) -> "GuildType | None":
        """Resolve a cell label to a guild subtype, or None if it is not one."""
        if not label:
            return None
        try:
            return cls(str(label).strip().upper())
        except ValueError:
            return None

    def __str__(self) -> str:
        return self.value


_GUILD_TARGETS = {
    GuildType.FARMERS: Building.FARM,
    GuildType.QUARRYMEN: Building.QUARRY,
    GuildType.WINDMILLERS: Building.WINDMILL,
    GuildType.MERCHANTS: Building.MARKET,
}


@dataclass(frozen=True)
class BuildingRule:
    """
    Static rule entry for one building.

    Attributes:
        name: Display name
        requirement: Workers needed to activate
        base: Base score when active
        category: basic, advanced or special
    """
    name: str
    requirement: int
    base: int
    category: BuildingCategory


BUILDING_RULES: dict[Building, BuildingRule] = {
    Building.COTTAGE: BuildingRule("Cottage", 0, 2, BuildingCategory.SPECIAL),
    Building.FARM: BuildingRule("Farm", 2, 3, BuildingCategory.BASIC),
    Building.QUARRY: BuildingRule("Quarry", 2, 3, BuildingCategory.BASIC),
    Building.WINDMILL: BuildingRule("Windmill", 2, 3, BuildingCategory.BASIC),
    Building.MARKET: BuildingRule("Market", 3, 0, BuildingCategory.BASIC),
    Building.SPRINGHOUSE: BuildingRule("Springhouse", 0, 4, BuildingCategory.SPECIAL),
    Building.TOWNHALL: BuildingRule("Townhall", 4, 5, BuildingCategory.ADVANCED),
    Building.UNIVERSITY: BuildingRule("University", 3, 0, BuildingCategory.ADVANCED),
    Building.ALMSHOUSE: BuildingRule("Almshouse", 2, 0, BuildingCategory.ADVANCED),
    Building.GUILD: BuildingRule("Guild", 4, 0, BuildingCategory.ADVANCED),
}

# Value shown by a die (or the sum of both build dice) -> building it unlocks
VALUE_TO_BUILDING: dict[int, Building] = {
    1: Building.COTTAGE,
    2: Building.FARM,
    3: Building.QUARRY,
    4: Building.WINDMILL,
    5: Building.MARKET,
    6: Building.SPRINGHOUSE,
    7: Building.TOWNHALL,
    8: Building.UNIVERSITY,
    9: Building.ALMSHOUSE,
    10: Building.GUILD,
}

# Printed sheet, row by row
TERRAIN_LAYOUT: tuple[tuple[Terrain, ...], ...] = tuple(
    tuple(Terrain(code) for code in row)
    for row in (
        ("Mt", "Fo", "Fo", "Fo", "Se"),
        ("Mt", "..", "..", "..", "Se"),
        ("Mt", "..", "Vi", "..", "Se"),
        ("Mt", "..", "..", "..", "Se"),
        ("Mt", "Ma", "Ma", "Ma", "Se"),
    )
)


@dataclass(frozen=True)
class Die:
    """
    One rolled die.

    Attributes:
        label: Die name (N1, N2 numbered; X1, X2 special)
        face: 1-5, a split face ("1/2", "4/5") or the forfeit face "X"
        choices: Alternatives of a split face, empty otherwise
        resolved: Committed numeric value; None for the forfeit face
    """
    label: str
    face: int | str
    choices: tuple[int, ...] = ()
    resolved: int | None = None

    def __post_init__(self) -> None:
        """Validate the face against its choices and resolution."""
        validate_die_face(self.face)
        object.__setattr__(
            self,
            "choices",
            validate_die_resolution(self.face, self.choices, self.resolved),
        )

    @classmethod
    def from_face(cls, label: str, face: int | str) -> "Die":
        """Create a die showing a face; split faces resolve to their first choice."""
        if isinstance(face, str) and face in SPLIT_FACES:
            choices = SPLIT_FACES[face]
            return cls(label=label, face=face, choices=choices, resolved=choices[0])
        if isinstance(face, int):
            return cls(label=label, face=face, resolved=face)
        return cls(label=label, face=face)

    @property
    def is_forfeit(self) -> bool:
        """True if the die shows the forfeit face."""
        return self.face == FORFEIT_FACE

    @property
    def is_split(self) -> bool:
        """True if the die shows a split face."""
        return bool(self.choices)

    @property
    def is_numbered(self) -> bool:
        """True for the numbered dice (labels starting with N)."""
        return self.label.upper().startswith("N")

    def resolve(self, value: int) -> "Die":
        """Return a copy committed to one of the die's values."""
        return replace(self, resolved=value)

    def __str__(self) -> str:
        return f"{self.label}:{self.face}"


@dataclass(frozen=True)
class Cell:
    """
    One plot of the board.

    Attributes:
        terrain: Printed terrain
        building: Building code, or None if empty
        building_label: Guild subtype for guilds, otherwise the building code
        forfeited: Plot permanently unusable
        activation_forfeit: Built plot excluded from scoring during activation
        spring_boost: Worker requirement reduction from Springhouses
    """
    terrain: Terrain = Terrain.PLAIN
    building: Building | None = None
    building_label: str | None = None
    forfeited: bool = False
    activation_forfeit: bool = False
    spring_boost: int = 0

    def __post_init__(self) -> None:
        """Normalize the building code and check cell invariants."""
        if self.building is not None:
            object.__setattr__(self, "building", Building(self.building))
            if self.building_label is None:
                object.__setattr__(self, "building_label", self.building.value)
        if self.building is not None and self.forfeited:
            raise ValueError("A plot cannot be both built and forfeited.")
        if self.spring_boost < 0:
            raise ValueError(f"Spring boost cannot be negative, got {self.spring_boost}.")

    @property
    def is_open(self) -> bool:
        """True if nothing is built and the plot is not forfeited."""
        return self.building is None and not self.forfeited

    @property
    def rule(self) -> BuildingRule | None:
        """Rule entry for the building on this plot."""
        return BUILDING_RULES[self.building] if self.building is not None else None

    @property
    def guild_type(self) -> GuildType | None:
        """Guild subtype, if this plot holds a labelled guild."""
        if self.building is not Building.GUILD:
            return None
        return GuildType.from_label(self.building_label)


@dataclass(frozen=True)
class Board:
    """
    Immutable rectangular grid of plots (5×5 on the printed sheet).

    Attributes:
        cells: Rows of cells, top to bottom
    """
    cells: tuple[tuple[Cell, ...], ...]

    def __post_init__(self) -> None:
        """Validate board shape."""
        validate_rectangular(self.cells, "board")

    @classmethod
    def empty(
        cls,
        terrain: Sequence[Sequence[Terrain]] = TERRAIN_LAYOUT,
    ) -> "Board":
        """Create an empty board over a terrain layout."""
        return cls(cells=tuple(
            tuple(Cell(terrain=t) for t in row) for row in terrain
        ))

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Board":
        """Create a Board from its mapping form."""
        rows = data.get("cells", [])
        return cls(cells=tuple(
            tuple(
                Cell(
                    terrain=Terrain(cell.get("terrain", Terrain.PLAIN.value)),
                    building=cell.get("building"),
                    building_label=cell.get("building_label"),
                    forfeited=bool(cell.get("forfeited", False)),
                    activation_forfeit=bool(cell.get("activation_forfeit", False)),
                    spring_boost=int(cell.get("spring_boost", 0)),
                )
                for cell in row
            )
            for row in rows
        ))

    def to_dict(self) -> dict[str, Any]:
        """Convert to a plain mapping for the presentation layer."""
        return {
            "cells": [
                [
                    {
                        "terrain": cell.terrain.value,
                        "building": cell.building.value if cell.building else None,
                        "building_label": cell.building_label,
                        "forfeited": cell.forfeited,
                        "activation_forfeit": cell.activation_forfeit,
                        "spring_boost": cell.spring_boost,
                    }
                    for cell in row
                ]
                for row in self.cells
            ]
        }

    @property
    def rows(self) -> int:
        return len(self.cells)

    @property
    def cols(self) -> int:
        return len(self.cells[0])

    def in_bounds(self, r: int, c: int) -> bool:
        return 0 <= r < self.rows and 0 <= c < self.cols

    def cell(self, r: int, c: int) -> Cell:
        """Cell at (r, c). Negative indices are not wrapped."""
        if not self.in_bounds(r, c):
            raise IndexError(f"Cell ({r}, {c}) is outside a {self.rows}x{self.cols} board.")
        return self.cells[r][c]

    def is_open(self, r: int, c: int) -> bool:
        """True if (r, c) exists and is open; out-of-range plots count as closed."""
        return self.in_bounds(r, c) and self.cells[r][c].is_open

    def is_edge(self, r: int, c: int) -> bool:
        return r == 0 or c == 0 or r == self.rows - 1 or c == self.cols - 1

    def is_full(self) -> bool:
        """True once every plot is built or forfeited."""
        return not any(cell.is_open for _, _, cell in self.iter_cells())

    def iter_cells(self) -> Iterator[tuple[int, int, Cell]]:
        """Yield (row, col, cell) in row-major order."""
        for r, row in enumerate(self.cells):
            for c, cell in enumerate(row):
                yield r, c, cell

    def neighbors(self, r: int, c: int) -> list[Coord]:
        """Cardinal neighbours of (r, c) that lie on the board."""
        candidates = ((r - 1, c), (r + 1, c), (r, c - 1), (r, c + 1))
        return [(nr, nc) for nr, nc in candidates if self.in_bounds(nr, nc)]

    def count(self, code: Building) -> int:
        """Number of plots holding a building code."""
        return sum(1 for _, _, cell in self.iter_cells() if cell.building == code)

    def update_cell(self, r: int, c: int, **changes: Any) -> "Board":
        """Return a new board with one cell's fields replaced."""
        updated = replace(self.cell(r, c), **changes)
        new_row = self.cells[r][:c] + (updated,) + self.cells[r][c + 1:]
        return Board(cells=self.cells[:r] + (new_row,) + self.cells[r + 1:])


@dataclass(frozen=True)
class PopulationResult:
    """
    Result of placing population on a lattice node.

    Attributes:
        placed: Population actually placed (0 when refused)
        grid: Updated grid; the input grid itself when nothing changed
    """
    placed: int
    grid: Grid

