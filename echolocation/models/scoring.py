"""
Scoring models.

RoundTelemetry is the raw input collected while a round is played;
ScoreResult is the outcome handed to the results screen and to the
chapter stats.
"""

from typing import Optional

from pydantic import BaseModel, Field, computed_field, ConfigDict

from .enums import ScoringDifficulty
from .primitives import Position


class RoundTelemetry(BaseModel):
    """Raw telemetry of one completed round.

    Attributes:
        proximity: 0-100 closeness of the final guess
        pings_used: Pings emitted this round
        total_pings: Ping budget of the round
        elapsed_seconds: Time from round start to guess placement
        chapter: Chapter id the round was played in
        replays_used: Replays spent this round
        replays_available: Replay budget (None disabled, -1 unlimited)
        hint_used: A hint was shown during the round
        difficulty: Run-wide difficulty
        active_boons: Number of boons active for the round
    """
    proximity: int = Field(..., ge=0, le=100)
    pings_used: int = Field(..., ge=0)
    total_pings: int = Field(..., ge=0)
    elapsed_seconds: float = Field(..., ge=0)
    chapter: int = Field(1, ge=1)
    replays_used: int = Field(0, ge=0)
    replays_available: Optional[int] = Field(None, ge=-1)
    hint_used: bool = False
    difficulty: ScoringDifficulty = ScoringDifficulty.NORMAL
    active_boons: int = Field(0, ge=0)

    model_config = ConfigDict(frozen=True)

    @computed_field
    @property
    def unused_pings(self) -> int:
        """Pings still banked when the guess was placed."""
        return max(0, self.total_pings - self.pings_used)


class ScoreComponents(BaseModel):
    """Named breakdown of a round score."""
    base: int = Field(..., ge=0)
    proximity_bonus: int = Field(..., ge=0)
    ping_efficiency_bonus: int = Field(..., ge=0)
    early_guess_bonus: int = Field(..., ge=0)
    speed_bonus: int = Field(..., ge=0)
    perfect_hit_bonus: int = Field(..., ge=0)
    boon_bonus: int = Field(..., ge=0)
    replay_bonus: int = Field(..., ge=0)
    time_penalty: int = Field(..., ge=0)
    difficulty_multiplier: float = Field(..., gt=0)

    model_config = ConfigDict(frozen=True)

    @computed_field
    @property
    def positive_total(self) -> int:
        """Sum of every bonus component including the base score."""
        return (
            self.base
            + self.proximity_bonus
            + self.ping_efficiency_bonus
            + self.early_guess_bonus
            + self.speed_bonus
            + self.perfect_hit_bonus
            + self.boon_bonus
            + self.replay_bonus
        )

    @computed_field
    @property
    def earned_points(self) -> int:
        """Points won above the base score, before the difficulty multiplier."""
        return self.positive_total - self.time_penalty - self.base


class ScoreResult(BaseModel):
    """Outcome of one round. The total is clamped to zero or more."""
    total: int = Field(..., ge=0)
    components: ScoreComponents
    rank: str

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return f"ScoreResult(total={self.total}, rank={self.rank})"


class RankInfo(BaseModel):
    """A rank label and the minimum score needed for it."""
    rank: str
    threshold: int = Field(..., ge=0)

    model_config = ConfigDict(frozen=True)


class RoundResult(BaseModel):
    """Everything the results screen needs after a submitted guess.

    Attributes:
        score: Scored outcome
        proximity: 0-100 closeness of the guess
        guess: Submitted position
        target_center: Real target center at submission
        elapsed_seconds: Frozen round time
        advanced: Classic mode: the next level was unlocked
        won: Custom mode: the win proximity was reached (always True in free play)
    """
    score: ScoreResult
    proximity: int = Field(..., ge=0, le=100)
    guess: Position
    target_center: Position
    elapsed_seconds: float = Field(..., ge=0)
    advanced: bool = False
    won: bool = False

    model_config = ConfigDict(frozen=True)
