"""
Chapter, level and boon configuration models.

Chapters are loaded from the bundled chapter data file and validated
through these models. Level configs are derived from a chapter at runtime
and never persisted.
"""

from typing import Optional

from pydantic import BaseModel, Field, ConfigDict

from .enums import SpecialMechanic, DifficultyTier, BoonArchetype


class MechanicDetails(BaseModel):
    """Tuning block shared by the chapter mechanics.

    Unset fields fall back to the configured defaults when the mechanic
    rules are resolved.
    """
    shrink_amount: Optional[float] = Field(None, gt=0)
    min_target_size: Optional[float] = Field(None, gt=0)
    move_distance: Optional[float] = Field(None, gt=0)
    phantom_count: Optional[int] = Field(None, ge=0)

    model_config = ConfigDict(frozen=True)


class ChapterConfig(BaseModel):
    """One of the fixed campaign chapters.

    Attributes:
        id: Chapter number (1-5)
        name: Display name
        description: One-line summary
        base_pings: Ping budget before per-level reductions
        target_size: Target diameter before per-level reductions
        special_mechanic: Target mechanic active for every level of the chapter
        mechanic_details: Mechanic tuning
        replays_available: -1 unlimited, 0 none, N finite per round
    """
    id: int = Field(..., ge=1, le=5)
    name: str
    description: str = ""
    base_pings: int = Field(..., ge=1)
    target_size: float = Field(..., gt=0)
    special_mechanic: SpecialMechanic = SpecialMechanic.NONE
    mechanic_details: MechanicDetails = Field(default_factory=MechanicDetails)
    replays_available: int = Field(0, ge=-1)

    model_config = ConfigDict(frozen=True)


class LevelConfig(BaseModel):
    """Static numbers for one level, derived from its chapter.

    Attributes:
        chapter: Chapter id
        level: Level number as passed in (global or chapter-local)
        level_in_chapter: 1-10 position within the chapter
        pings: Ping budget
        target_size: Target diameter
        difficulty: Difficulty tier
        is_boss: True on the tenth level of a chapter
    """
    chapter: int
    level: int
    level_in_chapter: int = Field(..., ge=1, le=10)
    pings: int = Field(..., ge=2)
    target_size: float = Field(..., ge=50)
    difficulty: DifficultyTier
    is_boss: bool = False

    model_config = ConfigDict(frozen=True)


class BoonEffect(BaseModel):
    """Sparse effect of one boon. Unset fields have no effect."""
    extra_pings: Optional[int] = None
    extra_replays: Optional[int] = None
    proximity_multiplier: Optional[float] = Field(None, gt=0)
    radius_multiplier: Optional[float] = Field(None, gt=0)
    time_penalty_multiplier: Optional[float] = Field(None, ge=0)
    phantom_visibility: Optional[bool] = None
    show_trail: Optional[bool] = None

    model_config = ConfigDict(frozen=True)


class Boon(BaseModel):
    """A gameplay modifier card."""
    id: str
    name: str
    description: str
    archetype: BoonArchetype
    unlock_chapter: int = Field(..., ge=1, le=5)
    effect: BoonEffect

    model_config = ConfigDict(frozen=True)


class BoonModifiers(BaseModel):
    """All active boon effects folded into one fixed-shape result.

    Attributes:
        pings: Ping budget after extra pings (at least 1)
        replays: Replay budget; None when replays are disabled, -1 when unlimited
        proximity_multiplier: Product of proximity multipliers
        radius_multiplier: Product of success radius multipliers
        time_penalty_multiplier: Product of time penalty multipliers
        phantom_visibility: Phantoms are drawn translucent
        show_trail: Ping trail is drawn on the canvas
    """
    pings: int = Field(..., ge=1)
    replays: Optional[int] = Field(None, ge=-1)
    proximity_multiplier: float = 1.0
    radius_multiplier: float = 1.0
    time_penalty_multiplier: float = 1.0
    phantom_visibility: bool = False
    show_trail: bool = False

    model_config = ConfigDict(frozen=True)
