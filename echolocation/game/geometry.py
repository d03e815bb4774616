"""
Placement and distance math for targets and pings.

Everything here is pure: functions take positions and bounds and return
new models. Randomness comes from an optional ``rng`` (any object with the
``random.Random`` API) so tests can seed it; it defaults to the module-level
``random`` generator.
"""

import math
import random
from typing import List, Optional

from echolocation import config
from echolocation.logging import get_logger
from echolocation.models import Position, GameBounds, Direction, Target, PhantomTarget

log = get_logger('geometry')


def generate_target_position(
    bounds: GameBounds,
    size: float,
    margin: float = config.TARGET_MARGIN,
    rng: Optional[random.Random] = None,
) -> Target:
    """Place a target uniformly inside the arena minus the margin.

    The top-left corner is drawn from [margin, width - size - margin] and
    the analogous vertical range, so the whole circle stays inside.

    Args:
        bounds: Arena dimensions
        size: Target diameter
        margin: Clearance kept from every edge
        rng: Random generator (default: module random)

    Returns:
        New Target

    Raises:
        ValueError: If the arena cannot fit the target plus both margins
    """
    rng = rng or random
    span_x = bounds.width - size - 2 * margin
    span_y = bounds.height - size - 2 * margin
    if span_x < 0 or span_y < 0:
        raise ValueError(
            f"Arena {bounds} too small for target size {size} with margin {margin}"
        )

    return Target(
        position=Position(
            x=margin + rng.random() * span_x,
            y=margin + rng.random() * span_y,
        ),
        size=size,
    )


def generate_phantom_targets(
    bounds: GameBounds,
    real_target: Target,
    count: int,
    min_distance: float = config.PHANTOM_MIN_DISTANCE,
    rng: Optional[random.Random] = None,
) -> List[PhantomTarget]:
    """Place up to ``count`` decoys by rejection sampling.

    Each slot gets PHANTOM_MAX_ATTEMPTS candidates. A candidate is kept
    only if its center is at least ``min_distance`` from the real target
    center and from every phantom accepted so far. A slot that runs out
    of attempts is dropped, so fewer than ``count`` phantoms may come back.
    """
    rng = rng or random
    phantoms: List[PhantomTarget] = []
    real_center = real_target.center

    for slot in range(count):
        for _ in range(config.PHANTOM_MAX_ATTEMPTS):
            candidate = generate_target_position(bounds, real_target.size, rng=rng)
            center = candidate.center
            if calculate_distance(center, real_center) < min_distance:
                continue
            if any(calculate_distance(center, p.center) < min_distance for p in phantoms):
                continue
            phantoms.append(PhantomTarget(
                id=f"phantom-{len(phantoms)}",
                position=candidate.position,
                size=candidate.size,
            ))
            break
        else:
            log.debug("Phantom slot %d dropped after %d attempts",
                      slot, config.PHANTOM_MAX_ATTEMPTS)

    return phantoms


def get_target_center(target: Target) -> Position:
    """Center of a target: position + size / 2 on both axes."""
    return target.center


def calculate_distance(a: Position, b: Position) -> float:
    """Euclidean distance between two points."""
    return math.hypot(b.x - a.x, b.y - a.y)


def normalized_distance(a: Position, b: Position, max_distance: float) -> float:
    """Distance as a 0-1 fraction of max_distance."""
    return min(calculate_distance(a, b) / max_distance, 1.0)


def get_direction(from_pos: Position, to_pos: Position) -> Direction:
    """Direction info for audio panning and pitch.

    Returns:
        Direction with angle in degrees and unit-vector ratios
        (both 0 when the points coincide).
    """
    dx = to_pos.x - from_pos.x
    dy = to_pos.y - from_pos.y
    distance = math.hypot(dx, dy)

    return Direction(
        angle=math.degrees(math.atan2(dy, dx)),
        horizontal_ratio=dx / distance if distance > 0 else 0.0,
        vertical_ratio=dy / distance if distance > 0 else 0.0,
        distance=distance,
    )


def calculate_proximity(guess: Position, target: Position, max_distance: float) -> int:
    """Proximity percentage: 100 is an exact hit, 0 is max_distance or beyond."""
    distance = calculate_distance(guess, target)
    proximity = max(0.0, 100 - (distance / max_distance) * 100)
    return int(round(proximity))


def is_within_target(position: Position, target: Target) -> bool:
    """Check whether a point lies inside the target's bounding box."""
    return (
        target.position.x <= position.x <= target.position.x + target.size
        and target.position.y <= position.y <= target.position.y + target.size
    )


def proximity_max_distance(bounds: GameBounds, radius_multiplier: float = 1.0) -> float:
    """Distance at which proximity drops to 0 for this arena.

    A larger success radius (boon) stretches the falloff.
    """
    return bounds.diagonal * config.PROXIMITY_DISTANCE_FACTOR * radius_multiplier
