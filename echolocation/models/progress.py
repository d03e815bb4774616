"""
Persisted progress models.

Chapter stats, the classic-mode save pointer, the cheat catalogue
entries and custom game statistics. Everything round-trips through the
key-value store as plain JSON.
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, Field, ConfigDict

from .enums import CheatCategory


class ChapterStats(BaseModel):
    """Progress and records for one chapter.

    best_ping_count and fastest_time stay None until the first
    successful level (JSON has no infinity).
    """
    completed: bool = False
    completed_at: Optional[str] = None
    levels_completed: int = Field(0, ge=0, le=10)
    best_score: int = Field(0, ge=0)
    avg_score: float = Field(0.0, ge=0)
    total_pings: int = Field(0, ge=0)
    total_time: float = Field(0.0, ge=0)
    total_attempts: int = Field(0, ge=0)
    successful_attempts: int = Field(0, ge=0)
    perfect_rounds: int = Field(0, ge=0)
    best_ping_count: Optional[int] = Field(None, ge=0)
    fastest_time: Optional[float] = Field(None, ge=0)


class ChapterProgressEntry(BaseModel):
    """Last played level inside a chapter."""
    current_level: int = Field(..., ge=1, le=10)
    last_played_at: str


class SavePointer(BaseModel):
    """Where classic mode resumes.

    Attributes:
        chapter: Chapter of the current level
        level: Global 1-indexed level counter
    """
    chapter: int = Field(1, ge=1)
    level: int = Field(1, ge=1)

    model_config = ConfigDict(frozen=True)


class CheatCode(BaseModel):
    """A named boolean toggle activated by typing its code."""
    code: str
    name: str
    description: str
    category: CheatCategory
    special: bool = False

    model_config = ConfigDict(frozen=True)


# ============================================================================
# Custom games
# ============================================================================

class ModeStats(BaseModel):
    """Per-mode or per-arena split of custom game results."""
    games_played: int = Field(0, ge=0)
    best_score: int = Field(0, ge=0)
    average_score: int = Field(0, ge=0)


class RecentCustomGame(BaseModel):
    """One entry of the recent custom games list.

    won is None for free play (no win threshold).
    """
    timestamp: float
    score: int = Field(..., ge=0)
    proximity: int = Field(..., ge=0, le=100)
    pings_used: int = Field(..., ge=0)
    elapsed_seconds: float = Field(..., ge=0)
    config_hash: str
    won: Optional[bool] = None


def _mode_splits() -> Dict[str, ModeStats]:
    return {'limited': ModeStats(), 'unlimited': ModeStats()}


def _arena_splits() -> Dict[str, ModeStats]:
    return {'small': ModeStats(), 'medium': ModeStats(), 'large': ModeStats()}


class CustomStats(BaseModel):
    """Lifetime statistics of custom games.

    Averages are rounded to whole points. fastest_time stays None until a
    timed game is recorded. recent_games is newest first.
    """
    total_games: int = Field(0, ge=0)
    total_rounds: int = Field(0, ge=0)
    best_score: int = Field(0, ge=0)
    best_proximity: int = Field(0, ge=0, le=100)
    fastest_time: Optional[float] = Field(None, ge=0)
    average_score: int = Field(0, ge=0)
    average_proximity: int = Field(0, ge=0, le=100)
    total_pings_used: int = Field(0, ge=0)
    games_won: int = Field(0, ge=0)
    games_lost: int = Field(0, ge=0)
    stats_by_mode: Dict[str, ModeStats] = Field(default_factory=_mode_splits)
    stats_by_arena: Dict[str, ModeStats] = Field(default_factory=_arena_splits)
    recent_games: List[RecentCustomGame] = Field(default_factory=list)
    perfect_games: int = Field(0, ge=0)
    speedrun_games: int = Field(0, ge=0)
    efficient_games: int = Field(0, ge=0)
