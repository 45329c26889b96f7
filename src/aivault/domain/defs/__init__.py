"""Domain definition exports."""

from .badge_def import BadgeDef
from .character_def import CharacterDef
from .meta_puzzle_def import MetaPuzzleDef, MetaStepDef
from .puzzle_def import (
    DEFAULT_FAILURE_FEEDBACK,
    DEFAULT_SUCCESS_FEEDBACK,
    GOAL_SOLUTION_KIND,
    SOLUTION_KINDS,
    HintDef,
    PuzzleDef,
    PuzzleFeedbackDef,
    PuzzleKind,
    SolutionDef,
)
from .room_def import ArtifactDef, RoomDef

__all__ = [
    "DEFAULT_FAILURE_FEEDBACK",
    "DEFAULT_SUCCESS_FEEDBACK",
    "GOAL_SOLUTION_KIND",
    "SOLUTION_KINDS",
    "ArtifactDef",
    "BadgeDef",
    "CharacterDef",
    "HintDef",
    "MetaPuzzleDef",
    "MetaStepDef",
    "PuzzleDef",
    "PuzzleFeedbackDef",
    "PuzzleKind",
    "RoomDef",
    "SolutionDef",
]
