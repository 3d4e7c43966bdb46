"""
Rolling Fiefdoms - Input Validation Utilities

Provides validation functions for the data classes of the rules engine.
All validators either return normalized data or raise descriptive
ValueError exceptions. They guard construction only; rule violations
during play are reported through sentinel results instead.
"""

from typing import Sequence

SPLIT_FACES: dict[str, tuple[int, int]] = {
    "1/2": (1, 2),
    "4/5": (4, 5),
}
FORFEIT_FACE = "X"
NUMERIC_FACES = (1, 2, 3, 4, 5)


def validate_die_face(face: int | str) -> int | str:
    """
    Validate a die face.

    Args:
        face: A number 1-5, a split face ("1/2" or "4/5") or the forfeit face "X"

    Returns:
        The face unchanged

    Raises:
        ValueError: If the face is not on any die
    """
    if isinstance(face, bool):
        raise ValueError(f"Die face must be a number or symbol, got {face!r}.")
    if isinstance(face, int):
        if face not in NUMERIC_FACES:
            raise ValueError(f"Invalid die face {face}. Must be between 1 and 5.")
        return face
    if face in SPLIT_FACES or face == FORFEIT_FACE:
        return face
    raise ValueError(f"Invalid die face {face!r}.")


def validate_die_resolution(
    face: int | str,
    choices: Sequence[int],
    resolved: int | None,
) -> tuple[int, ...]:
    """
    Validate that a die's choices and resolved value agree with its face.

    Args:
        face: Validated die face
        choices: Alternatives offered by a split face (empty otherwise)
        resolved: The committed numeric value, or None

    Returns:
        The choices as a tuple

    Raises:
        ValueError: If the combination breaks a die invariant
    """
    choices_tuple = tuple(choices)

    if face == FORFEIT_FACE:
        if resolved is not None:
            raise ValueError(f"A forfeit face cannot resolve to a value, got {resolved}.")
        if choices_tuple:
            raise ValueError("A forfeit face has no choices.")
        return choices_tuple

    if isinstance(face, str):
        expected = SPLIT_FACES[face]
        if choices_tuple != expected:
            raise ValueError(f"Face {face} must offer choices {expected}, got {choices_tuple}.")
        if resolved not in choices_tuple:
            raise ValueError(f"Resolved value {resolved} is not one of {choices_tuple}.")
        return choices_tuple

    if choices_tuple:
        raise ValueError(f"Face {face} is unambiguous and has no choices.")
    if resolved != face:
        raise ValueError(f"Face {face} must resolve to itself, got {resolved}.")
    return choices_tuple


def validate_grid(
    values: Sequence[Sequence[int]],
    name: str = "grid",
) -> tuple[tuple[int, ...], ...]:
    """
    Validate and normalize a rectangular grid of non-negative integers.

    Args:
        values: Nested rows of integers
        name: Label used in error messages

    Returns:
        Grid as a tuple of tuples

    Raises:
        ValueError: If rows differ in length or an entry is negative
    """
    grid = tuple(tuple(row) for row in values)
    if not grid:
        return grid

    width = len(grid[0])
    for r, row in enumerate(grid):
        if len(row) != width:
            raise ValueError(f"{name} row {r} has {len(row)} entries, expected {width}.")
        for c, value in enumerate(row):
            if not isinstance(value, int) or isinstance(value, bool):
                raise ValueError(
                    f"{name} entry at ({r}, {c}) must be an integer, got {type(value).__name__}."
                )
            if value < 0:
                raise ValueError(f"{name} entry at ({r}, {c}) cannot be negative, got {value}.")

    return grid


def validate_rectangular(rows: Sequence[Sequence[object]], name: str = "board") -> None:
    """
    Check that nested rows form a non-empty rectangle.

    Raises:
        ValueError: If there are no rows or rows differ in length
    """
    if not rows or not rows[0]:
        raise ValueError(f"{name} must have at least one row and one column.")
    width = len(rows[0])
    for r, row in enumerate(rows):
        if len(row) != width:
            raise ValueError(f"{name} row {r} has {len(row)} cells, expected {width}.")
