"""
Rolling Fiefdoms - Pestilence Engine

When both special dice show the forfeit face, Pestilence strikes: the sum
of the numbered dice names a board section, and the player must forfeit
an open plot there (or anywhere, if that section has no open plot).

Sections overlap, as printed on the sheet:
    - Forest: rows 1-2         (sum 2 or 3)
    - Sea: columns 4-5         (sum 4 or 5)
    - Centre: middle 3×3       (sum 6)
    - Mountain: columns 1-2    (sum 7 or 8)
    - Marsh: rows 4-5          (sum 9 or 10)
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, Sequence

from fiefdoms.engine.base import Board, Coord, Die

logger = logging.getLogger(__name__)


class Section(Enum):
    """Board sections Pestilence can strike."""
    FOREST = "forest"
    SEA = "sea"
    MOUNTAIN = "mountain"
    MARSH = "marsh"
    CENTRE = "centre"

    @property
    def label(self) -> str:
        return self.value.capitalize()


@dataclass(frozen=True)
class PestilenceInfo:
    """
    Resolved Pestilence event.

    Attributes:
        total: Sum of the numbered dice
        section: Section struck, or None when the sum names none
        target_cells: Open plots in that section; empty means any open plot
    """
    total: int
    section: Section | None
    target_cells: tuple[Coord, ...] = field(default_factory=tuple)

    @property
    def any_open_plot(self) -> bool:
        """True when the player may forfeit any open plot instead."""
        return not self.target_cells


class PestilenceEngine:
    """Stateless engine for Pestilence resolution."""

    SECTION_SUMS: ClassVar[dict[Section, tuple[int, ...]]] = {
        Section.FOREST: (2, 3),
        Section.SEA: (4, 5),
        Section.MOUNTAIN: (7, 8),
        Section.MARSH: (9, 10),
        Section.CENTRE: (6,),
    }

    @classmethod
    def section_for_sum(cls, total: int) -> Section | None:
        for section, sums in cls.SECTION_SUMS.items():
            if total in sums:
                return section
        return None

    @classmethod
    def cell_sections(cls, r: int, c: int, rows: int = 5, cols: int = 5) -> frozenset[Section]:
        """Every section plot (r, c) belongs to."""
        sections = set()
        if 1 <= r <= 3 and 1 <= c <= 3:
            sections.add(Section.CENTRE)
        if r <= 1:
            sections.add(Section.FOREST)
        if r >= rows - 2:
            sections.add(Section.MARSH)
        if c <= 1:
            sections.add(Section.MOUNTAIN)
        if c >= cols - 2:
            sections.add(Section.SEA)
        return frozenset(sections)

    @classmethod
    def compute_pestilence_info(cls, dice: Sequence[Die], board: Board) -> PestilenceInfo:
        """
        Resolve the section and the plots Pestilence can claim.

        Args:
            dice: The rolled dice; only numbered dice count toward the sum
            board: Current board

        Returns:
            PestilenceInfo with open target plots in reading order
        """
        total = sum(die.resolved or 0 for die in dice if die.is_numbered)
        section = cls.section_for_sum(total)

        targets: list[Coord] = []
        if section is not None:
            for r, c, cell in board.iter_cells():
                if cell.is_open and section in cls.cell_sections(r, c, board.rows, board.cols):
                    targets.append((r, c))

        if section is not None and not targets:
            logger.debug("Pestilence section %s is full; any open plot may be forfeited", section.label)
        return PestilenceInfo(total=total, section=section, target_cells=tuple(targets))
