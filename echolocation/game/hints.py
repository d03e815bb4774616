"""
Hints derived from the most recent ping.

Once the player has spent 60% of the ping budget, each new ping produces
either a "very close" proximity hint or a directional hint naming the
dominant axis towards the target.
"""
import math
from typing import Optional, Sequence

from echolocation import config
from echolocation.game.geometry import calculate_distance
from echolocation.models import GameBounds, Hint, HintType, Position, Target


def generate_hint(last_ping: Position, target: Target, bounds: GameBounds) -> Hint:
    """Build a hint from the last ping towards the target center.

    Args:
        last_ping: Most recent ping position
        target: Live target
        bounds: Arena dimensions (reserved for quadrant-style hints)
    """
    center = target.center
    distance = calculate_distance(last_ping, center)
    dx = center.x - last_ping.x
    dy = center.y - last_ping.y

    if distance < config.HINT_PROXIMITY_RADIUS:
        return Hint(
            type=HintType.PROXIMITY,
            message="Very close! You're almost there.",
            distance=distance,
        )

    if abs(dx) > abs(dy):
        direction = 'right' if dx > 0 else 'left'
    else:
        direction = 'down' if dy > 0 else 'up'

    return Hint(
        type=HintType.DIRECTIONAL,
        message=f"Try moving {direction}",
        direction=direction,
        angle=math.atan2(dy, dx),
        distance=distance,
    )


def should_show_hint(pings_used: int, total_pings: int) -> bool:
    """True once 60% of the ping budget is spent."""
    return pings_used >= math.floor(total_pings * config.HINT_THRESHOLD_RATIO)


class HintTracker:
    """Per-round hint state.

    Call update() after every ping. While hints are enabled and the
    threshold is met, the latest ping produces a fresh hint.
    """

    def __init__(self, enabled: bool, bounds: GameBounds):
        self.enabled = enabled
        self.bounds = bounds
        self.current_hint: Optional[Hint] = None
        self.visible = False
        self.hint_used = False

    def update(
        self,
        pings_used: int,
        total_pings: int,
        ping_history: Sequence[Position],
        target: Target,
    ) -> Optional[Hint]:
        """Re-evaluate after a ping. Returns the new hint, if one was produced."""
        if not self.enabled or not ping_history:
            return None
        if not should_show_hint(pings_used, total_pings):
            return None

        self.current_hint = generate_hint(ping_history[-1], target, self.bounds)
        self.visible = True
        self.hint_used = True
        return self.current_hint

    def dismiss(self) -> None:
        self.visible = False

    def reset(self) -> None:
        self.current_hint = None
        self.visible = False
        self.hint_used = False
