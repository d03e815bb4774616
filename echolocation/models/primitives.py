"""
Shared primitive data types for the game core.

This module provides the basic geometric types used throughout the
codebase: arena positions, arena bounds and the directional echo vector
handed to the audio layer.
"""

import math

from pydantic import BaseModel, Field, computed_field, ConfigDict


class Position(BaseModel):
    """Immutable 2D point in arena-local coordinates.

    Used for ping locations, guesses, target positions (top-left corner)
    and target centers.

    Attributes:
        x: X coordinate (horizontal, grows to the right)
        y: Y coordinate (vertical, grows downwards)

    Examples:
        >>> click = Position(x=120.0, y=340.0)
        >>> click.x
        120.0
    """
    x: float
    y: float

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        """String representation for debugging."""
        return f"Position(x={self.x:.2f}, y={self.y:.2f})"


class GameBounds(BaseModel):
    """Arena dimensions.

    Attributes:
        width: Width in pixels (must be positive)
        height: Height in pixels (must be positive)

    Examples:
        >>> arena = GameBounds(width=800, height=600)
        >>> arena.diagonal
        1000.0
    """
    width: int = Field(..., gt=0)
    height: int = Field(..., gt=0)

    @computed_field
    @property
    def diagonal(self) -> float:
        """Length of the arena diagonal."""
        return math.hypot(self.width, self.height)

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return f"GameBounds({self.width}x{self.height})"


class Direction(BaseModel):
    """Direction and distance from a ping to an echo source.

    This is the only shape the audio collaborator consumes: the ratios
    drive stereo pan and pitch, the distance drives volume falloff.

    Attributes:
        angle: Angle in degrees, atan2(dy, dx)
        horizontal_ratio: -1 (left) to 1 (right)
        vertical_ratio: -1 (up) to 1 (down)
        distance: Euclidean distance in pixels
    """
    angle: float
    horizontal_ratio: float
    vertical_ratio: float
    distance: float = Field(..., ge=0)

    model_config = ConfigDict(frozen=True)
