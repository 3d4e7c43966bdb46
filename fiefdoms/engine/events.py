"""
Rolling Fiefdoms - Rule Event Definitions

Event types and payloads describing what a rules call did (or refused to
do). The caller shows `message` in the game log; nothing here is raised.
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any

from fiefdoms.engine.base import Coord


class GameEvent(Enum):
    """Outcomes a rules call can report."""

    BUILDING_PLACED = auto()
    PLOT_FORFEITED = auto()
    SPRINGHOUSE_BOOSTED = auto()
    WORKER_ASSIGNED = auto()
    BUILDING_ACTIVATED = auto()
    ACTIVATION_FORFEITED = auto()
    MOVE_REJECTED = auto()


@dataclass(frozen=True)
class EventPayload:
    """Wrapper for an outcome and its player-facing message."""

    event: GameEvent
    message: str
    cell: Coord | None = None
    data: dict[str, Any] = field(default_factory=dict)

    @property
    def rejected(self) -> bool:
        return self.event is GameEvent.MOVE_REJECTED


def describe_cell(r: int, c: int) -> str:
    """1-indexed plot name used in log messages."""
    return f"row {r + 1}, col {c + 1}"


def rejected(message: str, cell: Coord | None = None, **data: Any) -> EventPayload:
    """Build the payload for a refused move."""
    return EventPayload(event=GameEvent.MOVE_REJECTED, message=message, cell=cell, data=data)
