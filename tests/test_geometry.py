"""Tests for target placement and distance math."""

import math
import random

import pytest

from echolocation.game.geometry import (
    calculate_distance,
    calculate_proximity,
    generate_phantom_targets,
    generate_target_position,
    get_direction,
    get_target_center,
    is_within_target,
    normalized_distance,
    proximity_max_distance,
)
from echolocation.models import GameBounds, Position, Target


class TestTargetPlacement:
    """Test generate_target_position."""

    @pytest.mark.parametrize('size,margin', [(120, 50), (60, 0), (50, 100), (200, 150)])
    def test_placement_stays_inside_margins(self, bounds, size, margin):
        """Test that every placement keeps the whole target inside the margin."""
        rng = random.Random(7)
        for _ in range(300):
            target = generate_target_position(bounds, size, margin=margin, rng=rng)
            assert margin <= target.position.x <= bounds.width - size - margin
            assert margin <= target.position.y <= bounds.height - size - margin
            assert target.size == size

    def test_exact_fit_arena(self):
        """Test that an arena with zero slack always places at the margin."""
        bounds = GameBounds(width=200, height=200)
        target = generate_target_position(bounds, 100, margin=50, rng=random.Random(1))
        assert target.position == Position(x=50, y=50)

    def test_arena_too_small(self):
        with pytest.raises(ValueError):
            generate_target_position(GameBounds(width=100, height=100), 80, margin=50)

    def test_seeded_rng_is_reproducible(self, bounds):
        first = generate_target_position(bounds, 80, rng=random.Random(3))
        second = generate_target_position(bounds, 80, rng=random.Random(3))
        assert first == second


class TestPhantomTargets:
    """Test generate_phantom_targets."""

    def test_phantom_separation(self, bounds, rng):
        """Test that phantoms keep their distance from the target and each other."""
        for _ in range(25):
            real = generate_target_position(bounds, 80, rng=rng)
            phantoms = generate_phantom_targets(bounds, real, 3, min_distance=150, rng=rng)
            centers = [real.center] + [p.center for p in phantoms]
            for i, a in enumerate(centers):
                for b in centers[i + 1:]:
                    assert calculate_distance(a, b) >= 150

    def test_phantoms_match_real_size(self, bounds, rng):
        real = generate_target_position(bounds, 90, rng=rng)
        phantoms = generate_phantom_targets(bounds, real, 2, rng=rng)
        assert all(p.size == 90 for p in phantoms)
        assert all(not p.is_real for p in phantoms)

    def test_unplaceable_phantoms_are_dropped(self, rng):
        """Test that slots which never find room are dropped, not raised."""
        bounds = GameBounds(width=200, height=200)
        real = Target(position=Position(x=50, y=50), size=100)
        assert generate_phantom_targets(bounds, real, 2, rng=rng) == []

    def test_ids_are_sequential(self, bounds, rng):
        real = Target(position=Position(x=50, y=50), size=60)
        phantoms = generate_phantom_targets(bounds, real, 2, min_distance=100, rng=rng)
        assert [p.id for p in phantoms] == [f"phantom-{i}" for i in range(len(phantoms))]

    def test_zero_count(self, bounds, target, rng):
        assert generate_phantom_targets(bounds, target, 0, rng=rng) == []


class TestDistance:
    """Test distance and direction helpers."""

    def test_get_target_center(self, target):
        assert get_target_center(target) == Position(x=400, y=300)

    def test_calculate_distance(self):
        assert calculate_distance(Position(x=0, y=0), Position(x=3, y=4)) == 5

    def test_normalized_distance_caps_at_one(self):
        assert normalized_distance(Position(x=0, y=0), Position(x=300, y=400), 100) == 1.0
        assert normalized_distance(Position(x=0, y=0), Position(x=3, y=4), 10) == 0.5

    def test_direction(self):
        direction = get_direction(Position(x=0, y=0), Position(x=3, y=4))
        assert direction.distance == 5
        assert direction.horizontal_ratio == pytest.approx(0.6)
        assert direction.vertical_ratio == pytest.approx(0.8)
        assert direction.angle == pytest.approx(math.degrees(math.atan2(4, 3)))

    def test_direction_left_is_negative(self):
        direction = get_direction(Position(x=100, y=0), Position(x=0, y=0))
        assert direction.horizontal_ratio == pytest.approx(-1.0)

    def test_direction_zero_distance(self):
        direction = get_direction(Position(x=5, y=5), Position(x=5, y=5))
        assert direction.distance == 0
        assert direction.horizontal_ratio == 0
        assert direction.vertical_ratio == 0

    def test_is_within_target(self, target):
        assert is_within_target(Position(x=400, y=300), target)
        assert is_within_target(Position(x=360, y=260), target)
        assert not is_within_target(Position(x=359, y=300), target)


class TestProximity:
    """Test calculate_proximity."""

    def test_exact_hit_is_100(self):
        center = Position(x=400, y=300)
        assert calculate_proximity(center, center, 800) == 100

    def test_beyond_max_distance_is_0(self):
        assert calculate_proximity(Position(x=0, y=0), Position(x=800, y=600), 800) == 0

    def test_monotonic_and_bounded(self):
        """Test that proximity never increases as the guess moves away."""
        target = Position(x=400, y=300)
        previous = 100
        for step in range(0, 1200, 7):
            proximity = calculate_proximity(Position(x=400 + step, y=300), target, 800)
            assert 0 <= proximity <= 100
            assert proximity <= previous
            previous = proximity

    def test_halfway(self):
        assert calculate_proximity(Position(x=0, y=0), Position(x=400, y=0), 800) == 50

    def test_max_distance_for_arena(self, bounds):
        assert proximity_max_distance(bounds) == pytest.approx(800)
        assert proximity_max_distance(bounds, 1.2) == pytest.approx(960)
