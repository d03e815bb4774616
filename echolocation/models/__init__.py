"""
Data models for the echolocation game core.

This package provides all Pydantic data models used across the system:
- Primitives: Position, GameBounds, Direction
- Game: Target, PhantomTarget, PingRecord, Hint
- Chapter config: ChapterConfig, LevelConfig, Boon and boon effects
- Scoring: RoundTelemetry, ScoreComponents, ScoreResult, RoundResult
- Progress: ChapterStats, SavePointer, CheatCode, CustomStats

Usage:
    >>> from echolocation.models import Position, Target
    >>> from echolocation.models.enums import GamePhase
"""

# ============================================================================
# Primitives
# ============================================================================
from .primitives import (
    Position,
    GameBounds,
    Direction,
)

# ============================================================================
# Enums
# ============================================================================
from .enums import (
    GamePhase,
    SpecialMechanic,
    DifficultyTier,
    ScoringDifficulty,
    BoonArchetype,
    PingsMode,
    HintType,
    CheatCategory,
)

# ============================================================================
# Round models
# ============================================================================
from .game import (
    Target,
    PhantomTarget,
    PingRecord,
    Hint,
)

# ============================================================================
# Chapter, level and boon configuration
# ============================================================================
from .chapter_config import (
    MechanicDetails,
    ChapterConfig,
    LevelConfig,
    BoonEffect,
    Boon,
    BoonModifiers,
)

# ============================================================================
# Scoring
# ============================================================================
from .scoring import (
    RoundTelemetry,
    ScoreComponents,
    ScoreResult,
    RankInfo,
    RoundResult,
)

# ============================================================================
# Persisted progress
# ============================================================================
from .progress import (
    ChapterStats,
    ChapterProgressEntry,
    SavePointer,
    CheatCode,
    ModeStats,
    RecentCustomGame,
    CustomStats,
)

__all__ = [
    # Primitives
    "Position",
    "GameBounds",
    "Direction",
    # Enums
    "GamePhase",
    "SpecialMechanic",
    "DifficultyTier",
    "ScoringDifficulty",
    "BoonArchetype",
    "PingsMode",
    "HintType",
    "CheatCategory",
    # Round
    "Target",
    "PhantomTarget",
    "PingRecord",
    "Hint",
    # Config
    "MechanicDetails",
    "ChapterConfig",
    "LevelConfig",
    "BoonEffect",
    "Boon",
    "BoonModifiers",
    # Scoring
    "RoundTelemetry",
    "ScoreComponents",
    "ScoreResult",
    "RankInfo",
    "RoundResult",
    # Progress
    "ChapterStats",
    "ChapterProgressEntry",
    "SavePointer",
    "CheatCode",
    "ModeStats",
    "RecentCustomGame",
    "CustomStats",
]
