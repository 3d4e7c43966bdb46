"""
Rolling Fiefdoms Game Engine.

Pure Python rules with zero UI/persistence dependencies.
Handles dice pairing, building options, population, activation,
scoring and Pestilence.
"""

from fiefdoms.engine.activation import ActivationEngine, ActivationState, WorkerUpdate
from fiefdoms.engine.base import (
    BUILDING_RULES,
    TERRAIN_LAYOUT,
    VALUE_TO_BUILDING,
    Board,
    Building,
    BuildingCategory,
    BuildingRule,
    Cell,
    Die,
    DieKind,
    GuildType,
    PopulationResult,
    Terrain,
)
from fiefdoms.engine.buildings import (
    BoardUpdate,
    BuildingEngine,
    BuildOption,
    DieOption,
    OptionSource,
    SumOption,
)
from fiefdoms.engine.dice import DiceEngine, DiceSplit
from fiefdoms.engine.events import EventPayload, GameEvent
from fiefdoms.engine.pestilence import PestilenceEngine, PestilenceInfo, Section
from fiefdoms.engine.population import PopulationEngine
from fiefdoms.engine.scoring import ScoreBreakdown, ScoreResult, ScoringEngine

__all__ = [
    # Data Classes
    "Board",
    "Cell",
    "Die",
    "BuildingRule",
    "BuildOption",
    "DieOption",
    "SumOption",
    "BoardUpdate",
    "DiceSplit",
    "PopulationResult",
    "ActivationState",
    "WorkerUpdate",
    "ScoreBreakdown",
    "ScoreResult",
    "PestilenceInfo",
    "EventPayload",
    # Enums
    "Building",
    "BuildingCategory",
    "DieKind",
    "GameEvent",
    "GuildType",
    "OptionSource",
    "Section",
    "Terrain",
    # Tables
    "BUILDING_RULES",
    "TERRAIN_LAYOUT",
    "VALUE_TO_BUILDING",
    # Engines
    "ActivationEngine",
    "BuildingEngine",
    "DiceEngine",
    "PestilenceEngine",
    "PopulationEngine",
    "ScoringEngine",
]
