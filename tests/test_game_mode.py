"""
Tests for the classic and custom round loops.

These drive whole rounds through the public API: pings, guess placement,
submission, advancement and the boon and cheat hooks.
"""

import time

import pytest

from echolocation.game.cheats import REVEAL_TARGET, SWAP_BOONS, UNLOCK_ALL, UNLOCK_ALL_BOONS, CheatGate
from echolocation.game.custom import CustomGameConfig, MovementMode
from echolocation.game.custom_stats import CustomStatsRepository
from echolocation.game.game_mode import ClassicGameMode, CustomGameMode
from echolocation.game.progress import ProgressRepository
from echolocation.game.timer import GameTimer
from echolocation.models import GamePhase, PingsMode, Position, ScoringDifficulty, SpecialMechanic
from echolocation.storage import ACTIVE_BOONS_KEY, MemoryStore


@pytest.fixture
def classic(store, rng, clock):
    return ClassicGameMode(store, hints_enabled=False, rng=rng, clock=clock)


def play_round(mode, guess=None, pings=1, elapsed=10):
    """Ping, place the guess (default: the target center) and submit."""
    for i in range(pings):
        assert mode.click(Position(x=60 + i * 10, y=60))
    assert mode.place_final_guess()
    assert mode.click(guess or mode.target.center)
    return mode.submit(elapsed_seconds=elapsed)


def lose_round(mode):
    """Spend every ping and guess the far corner of the arena."""
    center = mode.target.center
    corner = Position(
        x=0 if center.x > mode.bounds.width / 2 else mode.bounds.width,
        y=0 if center.y > mode.bounds.height / 2 else mode.bounds.height,
    )
    return play_round(mode, guess=corner, pings=mode.pings.total_pings, elapsed=300)


# ============================================================================
# Classic mode
# ============================================================================


class TestClassicStart:
    """Test the initial round."""

    def test_starts_at_level_one(self, classic):
        assert classic.level == 1
        assert classic.chapter == 1
        assert classic.current_phase == GamePhase.PINGING
        assert classic.pings.pings_remaining == 5
        assert classic.target.size == 116
        assert classic.phantoms == []

    def test_chapter_one_has_unlimited_replays(self, classic):
        assert classic.pings.replays_remaining == -1

    def test_resumes_from_save_pointer(self, rng, clock):
        store = MemoryStore()
        ProgressRepository(store).save_pointer(2, 14)
        mode = ClassicGameMode(store, rng=rng, clock=clock)
        assert mode.level == 14
        assert mode.chapter == 2
        assert mode.rules.shrink

    def test_target_inside_arena(self, classic):
        pos = classic.target.position
        assert 50 <= pos.x <= classic.bounds.width - classic.target.size - 50
        assert 50 <= pos.y <= classic.bounds.height - classic.target.size - 50

    def test_locked_level_falls_back_to_save_pointer(self, store, rng, clock):
        mode = ClassicGameMode(store, level=41, rng=rng, clock=clock)
        assert mode.level == 1
        assert not mode.unlocks.is_chapter_unlocked(5)

    def test_unlocked_level_is_honoured(self, store, rng, clock):
        CheatGate(store).activate(UNLOCK_ALL)
        mode = ClassicGameMode(store, level=41, rng=rng, clock=clock)
        assert mode.level == 41
        assert mode.chapter == 5

    def test_ping_timestamps_are_wall_clock(self, classic, clock):
        record = classic.ping(Position(x=100, y=100))
        assert record.timestamp != clock.now
        assert record.timestamp == pytest.approx(time.time(), abs=60)


class TestClassicRound:
    """Test a round from first ping to submission."""

    def test_perfect_round(self, classic, store):
        result = play_round(classic)
        assert result.proximity == 100
        assert result.score.total == 2203
        assert result.score.rank == 'A+'
        assert result.advanced
        assert ProgressRepository(store).get_chapter_stats(1).total_attempts == 1

    def test_submit_twice_records_once(self, classic, store):
        first = play_round(classic)
        assert classic.submit() is first
        assert ProgressRepository(store).get_chapter_stats(1).total_attempts == 1

    def test_submit_without_guess(self, classic):
        assert classic.submit() is None
        classic.place_final_guess()
        assert classic.submit() is None

    def test_losing_round(self, classic):
        result = lose_round(classic)
        assert not result.advanced
        assert result.score.rank in ('C', 'D')

    def test_pings_exhausted(self, classic):
        for i in range(5):
            assert classic.click(Position(x=100 + i, y=100))
        assert not classic.click(Position(x=100, y=100))
        assert len(classic.pings.ping_history) == 5
        classic.place_final_guess()
        assert not classic.back_to_pinging()

    def test_no_pings_while_placing(self, classic):
        classic.place_final_guess()
        assert classic.ping(Position(x=100, y=100)) is None
        assert classic.pings.pings_used == 0

    def test_reposition(self, classic):
        classic.place_final_guess()
        classic.click(Position(x=10, y=10))
        assert classic.reposition()
        assert classic.current_phase == GamePhase.PLACING
        assert classic.phase.final_guess is None

    def test_timer_stops_at_confirmation(self, classic, clock):
        clock.advance(7)
        classic.place_final_guess()
        classic.click(classic.target.center)
        clock.advance(100)
        assert classic.submit().elapsed_seconds == pytest.approx(7)

    def test_replay(self, classic):
        classic.click(Position(x=100, y=100))
        assert classic.replay(0) is not None
        assert classic.pings.replays_used == 1

    def test_round_record_emitted(self, classic, round_sink):
        play_round(classic)
        assert len(round_sink.records) == 1
        module, record = round_sink.records[0]
        assert module == 'rounds'
        assert record['mode'] == 'classic'
        assert record['level'] == 1
        assert record['score']['total'] == 2203

    def test_challenge_difficulty(self, store, rng, clock):
        mode = ClassicGameMode(
            store, difficulty=ScoringDifficulty.CHALLENGE, hints_enabled=False, rng=rng, clock=clock,
        )
        result = play_round(mode)
        assert result.score.components.difficulty_multiplier == 1.5

    def test_hints_flag_hint_used(self, store, rng, clock):
        mode = ClassicGameMode(store, hints_enabled=True, rng=rng, clock=clock)
        for i in range(3):
            mode.click(Position(x=60 + i, y=60))
        assert mode.hints.hint_used
        assert mode.hints.current_hint is not None


class TestClassicProgression:
    """Test advance, retry and chapter selection."""

    def test_advance_after_success(self, classic, store):
        play_round(classic)
        assert classic.advance()
        assert classic.level == 2
        assert classic.current_phase == GamePhase.PINGING
        assert classic.pings.pings_used == 0
        assert classic.pings.ping_history == ()
        assert classic.last_result is None
        pointer = ProgressRepository(store).load_save_pointer()
        assert (pointer.chapter, pointer.level) == (1, 2)

    def test_cannot_advance_without_result(self, classic):
        assert not classic.advance()

    def test_cannot_advance_after_failure(self, classic):
        lose_round(classic)
        assert not classic.advance()
        assert classic.level == 1

    def test_retry_resets_round(self, classic):
        play_round(classic, pings=2)
        classic.retry()
        assert classic.level == 1
        assert classic.current_phase == GamePhase.PINGING
        assert classic.pings.pings_remaining == 5
        assert classic.timer.final_time is None

    def test_boss_level_budget(self, store, rng, clock):
        mode = ClassicGameMode(store, level=10, rng=rng, clock=clock)
        assert mode.level_config.is_boss
        assert mode.pings.pings_remaining == 2
        assert mode.target.size == 70

    def test_clearing_boss_completes_chapter(self, store, rng, clock):
        mode = ClassicGameMode(store, level=10, hints_enabled=False, rng=rng, clock=clock)
        play_round(mode)
        assert ProgressRepository(store).completed_chapters() == {1}
        assert mode.advance()
        assert mode.chapter == 2

    def test_select_locked_chapter(self, classic):
        assert not classic.select_chapter(3)
        assert classic.level == 1

    def test_select_chapter_with_unlock_all(self, classic, store):
        CheatGate(store).activate(UNLOCK_ALL)
        assert classic.select_chapter(3)
        assert classic.level == 21
        assert classic.rules.mechanic == SpecialMechanic.MOVING_TARGET
        assert not classic.select_chapter(6)

    def test_phantom_chapter_places_phantoms(self, classic, store):
        CheatGate(store).activate(UNLOCK_ALL)
        classic.select_chapter(4)
        assert 0 < len(classic.phantoms) <= 2
        classic.retry()
        assert all(p.size == classic.target.size for p in classic.phantoms)

    def test_shrinking_chapter(self, store, rng, clock):
        CheatGate(store).activate(UNLOCK_ALL)
        mode = ClassicGameMode(store, level=11, rng=rng, clock=clock)
        mode.click(Position(x=100, y=100))
        assert mode.target.size == 73


class TestClassicCheatsAndBoons:
    """Test reveal, boon choice and swapping."""

    def test_reveal_target(self, store, rng, clock):
        CheatGate(store).activate(REVEAL_TARGET)
        CheatGate(store).activate(UNLOCK_ALL)
        mode = ClassicGameMode(store, level=11, rng=rng, clock=clock)
        assert mode.revealed_target == mode.target

    def test_no_reveal_in_chapter_one(self, classic, store):
        CheatGate(store).activate(REVEAL_TARGET)
        assert classic.revealed_target is None

    def test_choose_locked_boon(self, classic):
        assert not classic.choose_boon('spare_ping')

    def test_choose_boon_applies_next_round(self, classic, store):
        CheatGate(store).activate(UNLOCK_ALL_BOONS)
        assert classic.choose_boon('spare_ping')
        assert store.get(ACTIVE_BOONS_KEY) == ['spare_ping']
        classic.retry()
        assert classic.pings.pings_remaining == 6
        assert classic.modifiers.pings == 6

    def test_same_archetype_needs_swap(self, classic, store):
        cheats = CheatGate(store)
        cheats.activate(UNLOCK_ALL_BOONS)
        classic.choose_boon('spare_ping')
        assert not classic.choose_boon('ping_reserve')
        cheats.activate(SWAP_BOONS)
        assert classic.choose_boon('ping_reserve')
        assert classic.active_boon_ids == ['ping_reserve']

    def test_different_archetypes_stack(self, classic, store):
        CheatGate(store).activate(UNLOCK_ALL_BOONS)
        assert classic.choose_boon('spare_ping')
        assert classic.choose_boon('sharper_ears')
        assert not classic.choose_boon('sharper_ears')
        assert len(classic.active_boons) == 2

    def test_remove_boon_needs_swap(self, classic, store):
        cheats = CheatGate(store)
        cheats.activate(UNLOCK_ALL_BOONS)
        classic.choose_boon('spare_ping')
        assert not classic.remove_boon('spare_ping')
        cheats.activate(SWAP_BOONS)
        assert classic.remove_boon('spare_ping')
        assert classic.active_boon_ids == []

    def test_malformed_saved_boons(self, rng, clock):
        mode = ClassicGameMode(MemoryStore({ACTIVE_BOONS_KEY: ['bogus', 7]}), rng=rng, clock=clock)
        assert mode.active_boon_ids == ['bogus']
        assert mode.active_boons == []
        assert mode.pings.pings_remaining == 5

    def test_boon_offers_exclude_active(self, classic, store):
        CheatGate(store).activate(UNLOCK_ALL_BOONS)
        classic.choose_boon('spare_ping')
        offers = classic.boon_offers()
        assert len(offers) == 3
        assert 'spare_ping' not in [b.id for b in offers]

    def test_boon_bonus_scored(self, classic, store):
        CheatGate(store).activate(UNLOCK_ALL_BOONS)
        classic.choose_boon('echo_trail')
        classic.retry()
        result = play_round(classic)
        assert result.score.components.boon_bonus == 25


# ============================================================================
# Custom mode
# ============================================================================


class TestCustomMode:
    """Test CustomGameMode."""

    def test_unlimited_free_play(self, rng, clock):
        mode = CustomGameMode(
            CustomGameConfig(pings_mode=PingsMode.UNLIMITED, timer_enabled=False),
            rng=rng, clock=clock,
        )
        for i in range(20):
            assert mode.click(Position(x=100 + i, y=100))
        assert mode.pings.pings_remaining is None
        mode.place_final_guess()
        assert mode.back_to_pinging()
        mode.place_final_guess()
        mode.click(mode.target.center)
        result = mode.submit()
        assert result.won
        assert result.score.total == 1600

    def test_win_proximity(self, rng, clock):
        mode = CustomGameMode(CustomGameConfig(win_proximity=95), rng=rng, clock=clock)
        result = play_round(mode, guess=Position(x=0, y=0))
        assert not result.won

    def test_decoys_and_movement(self, rng, clock):
        mode = CustomGameMode(
            CustomGameConfig(decoys=True, movement_mode=MovementMode.AFTER_PINGS),
            rng=rng, clock=clock,
        )
        assert mode.phantoms
        before = mode.target
        mode.click(Position(x=100, y=100))
        assert mode.target.position != before.position
        assert mode.target.size == before.size

    def test_no_replays_or_hints(self, rng, clock):
        mode = CustomGameMode(CustomGameConfig(), rng=rng, clock=clock)
        mode.click(Position(x=100, y=100))
        assert mode.replay(0) is None
        assert not mode.hints.enabled

    def test_config_is_clamped(self, rng, clock):
        mode = CustomGameMode(CustomGameConfig(pings_count=0, target_size=500), rng=rng, clock=clock)
        assert mode.pings.pings_remaining == 1
        assert mode.target.size == 200

    def test_new_round(self, rng, clock, round_sink):
        mode = CustomGameMode(CustomGameConfig(), rng=rng, clock=clock)
        play_round(mode)
        assert round_sink.records[0][1]['mode'] == 'custom'
        mode.new_round()
        assert mode.last_result is None
        assert mode.pings.pings_used == 0

    def test_games_recorded_in_stats(self, store, rng, clock):
        mode = CustomGameMode(CustomGameConfig(win_proximity=95), store=store, rng=rng, clock=clock)
        play_round(mode)
        mode.submit()
        mode.new_round()
        play_round(mode, guess=Position(x=0, y=0))

        stats = CustomStatsRepository(store).load()
        assert stats.total_games == 2
        assert stats.games_won == 1
        assert stats.games_lost == 1
        assert stats.best_proximity == 100
        assert stats.stats_by_mode['limited'].games_played == 2
        assert stats.stats_by_arena['medium'].games_played == 2
        assert len(stats.recent_games) == 2

    def test_no_stats_without_store(self, rng, clock):
        mode = CustomGameMode(CustomGameConfig(), rng=rng, clock=clock)
        play_round(mode)
        assert mode.stats is None


# ============================================================================
# Timer
# ============================================================================


class TestGameTimer:
    """Test GameTimer."""

    def test_elapsed_and_freeze(self, clock):
        timer = GameTimer(clock=clock)
        clock.advance(5)
        assert timer.elapsed == 5
        assert timer.freeze() == 5
        clock.advance(10)
        assert timer.elapsed == 5
        assert timer.final_time == 5
        assert timer.frozen

    def test_reset(self, clock):
        timer = GameTimer(clock=clock)
        clock.advance(5)
        timer.freeze()
        timer.reset()
        assert timer.final_time is None
        assert timer.elapsed == 0

    def test_disabled(self, clock):
        timer = GameTimer(enabled=False, clock=clock)
        clock.advance(30)
        assert timer.elapsed == 0
        assert timer.freeze() == 0
