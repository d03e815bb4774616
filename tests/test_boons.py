"""Tests for the boon catalogue and effect composition."""

import itertools
import random

import pytest

from echolocation.game.boons import (
    BOONS,
    apply_boon_effects,
    draw_boon_offers,
    get_boon_by_id,
    get_unlocked_boons,
)
from echolocation.models import BoonArchetype, BoonModifiers


class TestBoonCatalogue:
    """Test the fixed boon list."""

    def test_fifteen_boons(self):
        assert len(BOONS) == 15
        assert len({b.id for b in BOONS}) == 15

    def test_one_per_archetype_per_chapter(self):
        for chapter in range(1, 6):
            archetypes = sorted(b.archetype.value for b in BOONS if b.unlock_chapter == chapter)
            assert archetypes == sorted(a.value for a in BoonArchetype)

    def test_lookup(self):
        assert get_boon_by_id('spare_ping').effect.extra_pings == 1
        assert get_boon_by_id('nope') is None

    def test_unlocked_boons(self):
        unlocked = get_unlocked_boons({1, 2})
        assert len(unlocked) == 6
        assert {b.unlock_chapter for b in unlocked} == {1, 2}
        assert get_unlocked_boons([]) == []


class TestApplyBoonEffects:
    """Test folding active boons into round modifiers."""

    def test_no_boons_is_identity(self):
        mods = apply_boon_effects(5, 3, [])
        assert mods == BoonModifiers(pings=5, replays=3)

    def test_extra_pings_add(self):
        mods = apply_boon_effects(4, 0, ['spare_ping', 'ping_reserve'])
        assert mods.pings == 7

    def test_extra_replays_add(self):
        mods = apply_boon_effects(4, 2, ['second_listen', 'echo_memory'])
        assert mods.replays == 5

    def test_extra_replays_skip_unlimited(self):
        assert apply_boon_effects(5, -1, ['echo_memory']).replays == -1

    def test_extra_replays_skip_disabled(self):
        assert apply_boon_effects(5, None, ['echo_memory']).replays is None

    def test_multipliers_multiply(self):
        mods = apply_boon_effects(4, 0, ['sharper_ears', 'eagle_ear', 'deep_focus'])
        assert mods.proximity_multiplier == pytest.approx(1.15 * 1.25 * 1.1)
        assert mods.radius_multiplier == pytest.approx(1.1)

    def test_time_multipliers(self):
        mods = apply_boon_effects(4, 0, ['steady_pace', 'quick_draw'])
        assert mods.time_penalty_multiplier == pytest.approx(0.375)

    def test_flags_are_ored(self):
        mods = apply_boon_effects(4, 0, ['echo_trail', 'phantom_sight'])
        assert mods.show_trail is True
        assert mods.phantom_visibility is True

    def test_unknown_ids_ignored(self):
        assert apply_boon_effects(5, 1, ['bogus', 'spare_ping']) == apply_boon_effects(5, 1, ['spare_ping'])

    def test_order_independent(self):
        """Test that every ordering of a boon set folds to the same modifiers."""
        ids = ['sharper_ears', 'spare_ping', 'echo_trail', 'steady_pace', 'echo_memory', 'master_sonar']
        expected = apply_boon_effects(4, 2, ids)
        for perm in itertools.permutations(ids, 4):
            assert apply_boon_effects(4, 2, perm) == apply_boon_effects(4, 2, sorted(perm))
        assert apply_boon_effects(4, 2, list(reversed(ids))) == expected

    def test_pair_order(self):
        a, b = 'wide_net', 'master_sonar'
        assert apply_boon_effects(3, 1, [a, b]) == apply_boon_effects(3, 1, [b, a])


class TestBoonOffers:
    """Test draw_boon_offers."""

    def test_one_per_archetype(self):
        offers = draw_boon_offers(BOONS, rng=random.Random(1))
        assert [o.archetype for o in offers] == list(BoonArchetype)

    def test_active_boons_excluded(self):
        available = get_unlocked_boons({1})
        offers = draw_boon_offers(available, ['sharper_ears'], rng=random.Random(1))
        assert [o.id for o in offers] == ['spare_ping', 'echo_trail']

    def test_nothing_available(self):
        assert draw_boon_offers([], rng=random.Random(1)) == []
