"""
Rolling Fiefdoms - Dice Engine

Rolls the four turn dice and turns them into location choices.

Dice:
    - N1: faces 1-5 plus the split face "1/2"
    - N2: faces 1-5 plus the split face "4/5"
    - X1, X2: faces 1-5 plus the forfeit face "X"

Two dice pick a plot (their values are a 1-indexed row/column pair, read
either way round); the other two pick a building. A split face stays
ambiguous until a pairing commits it, so every alternative is offered.

All methods are stateless class methods operating on immutable data.
"""

import logging
import random
from dataclasses import dataclass
from itertools import combinations, product
from typing import ClassVar, Sequence

from fiefdoms.engine.base import Board, Coord, Die, DieKind
from fiefdoms.engine.validators import FORFEIT_FACE

logger = logging.getLogger(__name__)

Pair = tuple[int, int]


@dataclass(frozen=True)
class DiceSplit:
    """
    Dice divided between the location and the building choice.

    Attributes:
        build_dice: The (up to two) dice left for the building choice
        location_dice: The two dice that realise the location pair, resolved
    """
    build_dice: tuple[Die, ...]
    location_dice: tuple[Die, ...]


class DiceEngine:
    """Stateless engine for rolling dice and enumerating location pairs."""

    NUMBERED_LABELS: ClassVar[tuple[str, str]] = ("N1", "N2")
    SPECIAL_LABELS: ClassVar[tuple[str, str]] = ("X1", "X2")
    SPLIT_FACE_BY_LABEL: ClassVar[dict[str, str]] = {"N1": "1/2", "N2": "4/5"}
    BASE_FACES: ClassVar[tuple[int, ...]] = (1, 2, 3, 4, 5)

    @classmethod
    def create_rng(cls, seed: int | None = None) -> random.Random:
        """Random source for rolls; a fixed seed replays the same game."""
        return random.Random(seed)

    @classmethod
    def faces_for(cls, kind: DieKind, label: str) -> tuple[int | str, ...]:
        """Face table of a die."""
        if kind is DieKind.NUMBERED:
            return cls.BASE_FACES + (cls.SPLIT_FACE_BY_LABEL.get(label, "4/5"),)
        return cls.BASE_FACES + (FORFEIT_FACE,)

    @classmethod
    def roll_die(
        cls,
        kind: DieKind,
        label: str,
        rng: random.Random | None = None,
    ) -> Die:
        """
        Roll a single die.

        Args:
            kind: Numbered or special
            label: Die name, selects the split face of numbered dice
            rng: Random source (module random when omitted)

        Returns:
            Die showing the rolled face
        """
        source = rng or random
        face = source.choice(cls.faces_for(kind, label))
        return Die.from_face(label, face)

    @classmethod
    def roll_dice(cls, rng: random.Random | None = None) -> tuple[Die, ...]:
        """Roll the turn's dice in order N1, N2, X1, X2."""
        dice = tuple(
            cls.roll_die(DieKind.NUMBERED, label, rng) for label in cls.NUMBERED_LABELS
        ) + tuple(
            cls.roll_die(DieKind.SPECIAL, label, rng) for label in cls.SPECIAL_LABELS
        )
        logger.debug("Rolled %s", cls.describe(dice))
        return dice

    @classmethod
    def describe(cls, dice: Sequence[Die]) -> str:
        return ", ".join(str(die) for die in dice)

    @classmethod
    def is_pestilence(cls, dice: Sequence[Die]) -> bool:
        """True when both special dice show the forfeit face."""
        special = [die for die in dice if not die.is_numbered]
        return len(special) >= 2 and all(die.is_forfeit for die in special)

    @classmethod
    def possible_values(cls, die: Die) -> tuple[int, ...]:
        """
        Values a die can still stand for.

        A split face offers both alternatives even after a value was
        committed; a forfeit face offers none.
        """
        if die.is_split:
            return die.choices
        if die.resolved is not None:
            return (die.resolved,)
        return ()

    @classmethod
    def unique_location_pairs(cls, dice: Sequence[Die]) -> list[Pair]:
        """
        All distinct value pairs any two dice can form.

        Args:
            dice: The rolled dice

        Returns:
            Sorted pairs (a, b) with a <= b, without duplicates
        """
        values = [cls.possible_values(die) for die in dice]
        pairs: set[Pair] = set()
        for first, second in combinations(values, 2):
            for a, b in product(first, second):
                pairs.add((min(a, b), max(a, b)))
        return sorted(pairs)

    @classmethod
    def pair_to_cells(cls, pair: Pair) -> tuple[Coord, Coord]:
        """
        Plots a location pair can target.

        Dice values are 1-indexed and unordered, so (a, b) names both
        (row a-1, col b-1) and (row b-1, col a-1).
        """
        a, b = pair
        return (a - 1, b - 1), (b - 1, a - 1)

    @classmethod
    def open_cells_for_pair(cls, pair: Pair, board: Board) -> list[Coord]:
        """Distinct open plots a pair can target."""
        cells: list[Coord] = []
        for r, c in cls.pair_to_cells(pair):
            if board.is_open(r, c) and (r, c) not in cells:
                cells.append((r, c))
        return cells

    @classmethod
    def filter_available_pairs(cls, pairs: Sequence[Pair], board: Board) -> list[Pair]:
        """Keep pairs with at least one open target plot."""
        return [tuple(pair) for pair in pairs if cls.open_cells_for_pair(pair, board)]

    @classmethod
    def available_location_pairs(cls, dice: Sequence[Die], board: Board) -> list[Pair]:
        """Legal location pairs for the current roll and board."""
        available = cls.filter_available_pairs(cls.unique_location_pairs(dice), board)
        if not available:
            logger.debug("No valid location pairs for %s", cls.describe(dice))
        return available

    @classmethod
    def compute_build_dice(cls, location_pair: Pair, dice: Sequence[Die]) -> DiceSplit:
        """
        Split the dice into location and build dice for a chosen pair.

        Among all ways two dice can realise the pair, prefer the one that
        leaves the most split-face values to the build dice, then the one
        that spends the fewest split faces on the location. The chosen
        location dice are committed to the values they were used for.

        Args:
            location_pair: The chosen (a, b) location values
            dice: The rolled dice

        Returns:
            DiceSplit; location_dice is empty if no two dice form the pair
        """
        target = tuple(sorted(location_pair))
        values = [cls.possible_values(die) for die in dice]

        best_key: tuple[int, int] | None = None
        best: tuple[int, int, int, int] | None = None
        for i, j in combinations(range(len(dice)), 2):
            for a, b in product(values[i], values[j]):
                if (min(a, b), max(a, b)) != target:
                    continue
                remaining_flex = sum(
                    max(len(values[k]), 1 if dice[k].resolved is not None else 0)
                    for k in range(len(dice))
                    if k not in (i, j)
                )
                used_flex = int(len(values[i]) > 1) + int(len(values[j]) > 1)
                key = (-remaining_flex, used_flex)
                if best_key is None or key < best_key:
                    best_key = key
                    best = (i, j, a, b)

        if best is None:
            return DiceSplit(build_dice=tuple(dice)[:2], location_dice=())

        i, j, a, b = best
        location_dice = (dice[i].resolve(a), dice[j].resolve(b))
        build_dice = tuple(die for k, die in enumerate(dice) if k not in (i, j))
        return DiceSplit(build_dice=build_dice[:2], location_dice=location_dice)
