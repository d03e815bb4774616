"""
Game enumerations.

These enums define the phases, chapter mechanics and difficulty settings
shared by the game engine, the scoring engine and persisted data.
"""

from enum import Enum


class GamePhase(str, Enum):
    """Turn state of a round.

    Attributes:
        PINGING: Player emits pings (initial state)
        PLACING: Player is choosing the final guess location
        CONFIRMING: A guess is placed and waits for submission
    """
    PINGING = "pinging"
    PLACING = "placing"
    CONFIRMING = "confirming"


class SpecialMechanic(str, Enum):
    """Chapter-level target mechanic.

    Attributes:
        NONE: Static target
        SHRINKING_TARGET: Target shrinks after every ping
        MOVING_TARGET: Target drifts after every ping
        PHANTOM_TARGETS: Decoy targets are drawn next to the real one
        COMBINED_CHALLENGE: Shrink, move and phantoms at once
    """
    NONE = "none"
    SHRINKING_TARGET = "shrinking_target"
    MOVING_TARGET = "moving_target"
    PHANTOM_TARGETS = "phantom_targets"
    COMBINED_CHALLENGE = "combined_challenge"


class DifficultyTier(str, Enum):
    """Per-level difficulty tier derived from the level's position in its chapter."""
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class ScoringDifficulty(str, Enum):
    """Run-wide difficulty setting that drives the score multiplier."""
    NORMAL = "normal"
    CHALLENGE = "challenge"


class BoonArchetype(str, Enum):
    """Boon families. Offers contain at most one boon of each."""
    PRECISION = "precision"
    EFFICIENCY = "efficiency"
    ADAPTABILITY = "adaptability"


class PingsMode(str, Enum):
    """Whether the ping budget is enforced."""
    LIMITED = "limited"
    UNLIMITED = "unlimited"


class HintType(str, Enum):
    """Kinds of hint the hint generator produces."""
    PROXIMITY = "proximity"
    DIRECTIONAL = "directional"


class CheatCategory(str, Enum):
    PROGRESSION = "progression"
    GAMEPLAY = "gameplay"
    DEBUG = "debug"
    META = "meta"
