"""
Round-level game models.

These models describe what exists inside a single round: the hidden
target, its decoys, the pings the player emitted and the hints derived
from them.
"""

from typing import Optional

from pydantic import BaseModel, Field, field_validator, computed_field, ConfigDict

from .primitives import Position
from .enums import HintType


class Target(BaseModel):
    """The real hidden goal of a round.

    The target is a circle inscribed in a square bounding box.

    Attributes:
        position: Top-left corner of the bounding box
        size: Diameter in pixels (must be positive)

    Examples:
        >>> target = Target(position=Position(x=100.0, y=100.0), size=120.0)
        >>> target.center
        Position(x=160.0, y=160.0)
    """
    position: Position
    size: float

    @field_validator('size')
    @classmethod
    def validate_size(cls, v: float) -> float:
        """Validate size is positive."""
        if v <= 0:
            raise ValueError(f'Size must be positive, got {v}')
        return v

    @computed_field
    @property
    def center(self) -> Position:
        """Center of the target circle."""
        return Position(
            x=self.position.x + self.size / 2,
            y=self.position.y + self.size / 2,
        )

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return f"Target(pos={self.position}, size={self.size:.1f})"


class PhantomTarget(Target):
    """A decoy drawn like the real target but silent to pings.

    Attributes:
        id: Stable identifier within the round (e.g. "phantom-0")
        is_real: Always False
    """
    id: str
    is_real: bool = False


class PingRecord(BaseModel):
    """One emitted ping.

    The target center and size are copied at ping time. Later shrink or
    move mechanics produce a new live target and never touch a record,
    so replays reproduce the echo the player originally heard.

    Attributes:
        position: Where the player clicked
        target_center: Snapshot of the real target center at ping time
        target_size: Snapshot of the real target size at ping time
        timestamp: Wall-clock time of the ping (seconds)
        is_replayed: True once the ping has been replayed at least once
    """
    position: Position
    target_center: Position
    target_size: float = Field(..., gt=0)
    timestamp: float
    is_replayed: bool = False

    model_config = ConfigDict(frozen=True)


class Hint(BaseModel):
    """Hint derived from the most recent ping.

    Attributes:
        type: Proximity ("very close") or directional hint
        message: Player-facing text
        direction: Dominant direction for directional hints (left/right/up/down)
        angle: Raw atan2 angle in radians for an optional arrow cue
        distance: Distance from the ping to the target center
    """
    type: HintType
    message: str
    direction: Optional[str] = None
    angle: Optional[float] = None
    distance: float = Field(..., ge=0)

    model_config = ConfigDict(frozen=True)
