"""Tests for ping bookkeeping, snapshots and replays."""

import pytest

from echolocation.game.chapters import MechanicRules, get_chapter
from echolocation.game.geometry import get_direction
from echolocation.game.pings import PingSession
from echolocation.models import PingsMode, Position, Target

PING = Position(x=100, y=100)


@pytest.fixture
def echoes():
    return []


@pytest.fixture
def session(target, bounds, clock, echoes):
    return PingSession(
        initial_pings=3,
        target=target,
        bounds=bounds,
        initial_replays=2,
        on_echo=lambda direction, replay: echoes.append((direction, replay)),
        clock=clock,
    )


class TestHandlePing:
    """Test handle_ping."""

    def test_records_snapshot(self, session, clock):
        record = session.handle_ping(PING)
        assert record.position == PING
        assert record.target_center == Position(x=400, y=300)
        assert record.target_size == 80
        assert record.timestamp == clock.now
        assert session.ping_history == (record,)

    def test_updates_counters(self, session):
        session.handle_ping(PING)
        assert session.pings_remaining == 2
        assert session.pings_used == 1

    def test_notifies_echo(self, session, echoes):
        session.handle_ping(PING)
        direction, replay = echoes[0]
        assert replay is False
        assert direction == get_direction(PING, Position(x=400, y=300))

    def test_exhausted_budget_rejected(self, session, echoes):
        """Test that a spent budget leaves history and counters untouched."""
        for _ in range(3):
            assert session.handle_ping(PING) is not None
        assert session.pings_remaining == 0

        assert session.handle_ping(PING) is None
        assert len(session.ping_history) == 3
        assert session.pings_used == 3
        assert session.pings_remaining == 0
        assert len(echoes) == 3

    def test_unlimited_mode(self, target, bounds):
        session = PingSession(1, target, bounds, pings_mode=PingsMode.UNLIMITED)
        for _ in range(10):
            assert session.handle_ping(PING) is not None
        assert session.pings_remaining is None
        assert session.pings_used == 10

    def test_static_target_is_untouched(self, session, target):
        session.handle_ping(PING)
        assert session.target == target


class TestPingMechanics:
    """Test mechanics applied after each ping."""

    def test_shrinking_target(self, target, bounds):
        changes = []
        session = PingSession(
            4, target, bounds,
            rules=MechanicRules.for_chapter(get_chapter(2)),
            on_target_change=changes.append,
        )
        session.handle_ping(PING)
        session.handle_ping(PING)
        assert session.target.size == 74
        assert [t.size for t in changes] == [77, 74]

    def test_record_uses_pre_mechanic_target(self, target, bounds):
        session = PingSession(4, target, bounds, rules=MechanicRules.for_chapter(get_chapter(2)))
        first = session.handle_ping(PING)
        second = session.handle_ping(PING)
        assert first.target_size == 80
        assert second.target_size == 77

    def test_snapshot_survives_moves(self, target, bounds, rng):
        """Test that replays use the center stored at ping time, not the live target."""
        session = PingSession(
            3, target, bounds,
            rules=MechanicRules.for_chapter(get_chapter(5)),
            initial_replays=-1,
            rng=rng,
        )
        session.handle_ping(PING)
        session.handle_ping(Position(x=700, y=500))
        assert session.target.center != target.center

        replayed = session.handle_replay_ping(0)
        assert replayed == get_direction(PING, target.center)
        assert replayed != get_direction(PING, session.target.center)


class TestReplay:
    """Test handle_replay_ping."""

    def test_replay_marks_record(self, session, echoes):
        session.handle_ping(PING)
        direction = session.handle_replay_ping(0)
        assert direction == get_direction(PING, Position(x=400, y=300))
        assert session.ping_history[0].is_replayed
        assert echoes[-1] == (direction, True)

    def test_finite_budget(self, session):
        session.handle_ping(PING)
        assert session.handle_replay_ping(0) is not None
        assert session.handle_replay_ping(0) is not None
        assert session.handle_replay_ping(0) is None
        assert session.replays_remaining == 0
        assert session.replays_used == 2

    def test_unlimited_replays(self, target, bounds):
        session = PingSession(3, target, bounds, initial_replays=-1)
        session.handle_ping(PING)
        for _ in range(10):
            assert session.handle_replay_ping(0) is not None
        assert session.replays_remaining == -1
        assert session.replays_used == 10

    def test_replays_disabled(self, target, bounds):
        session = PingSession(3, target, bounds, initial_replays=None)
        session.handle_ping(PING)
        assert session.handle_replay_ping(0) is None
        assert not session.ping_history[0].is_replayed

    def test_zero_replays(self, target, bounds):
        session = PingSession(3, target, bounds, initial_replays=0)
        session.handle_ping(PING)
        assert session.handle_replay_ping(0) is None

    @pytest.mark.parametrize('index', [-1, 1, 5])
    def test_out_of_range(self, session, index):
        session.handle_ping(PING)
        assert session.handle_replay_ping(index) is None
        assert session.replays_remaining == 2


class TestReset:
    """Test reset."""

    def test_reset_restores_budgets(self, session):
        session.handle_ping(PING)
        session.handle_replay_ping(0)
        session.reset()
        assert session.ping_history == ()
        assert session.pings_remaining == 3
        assert session.pings_used == 0
        assert session.replays_remaining == 2
        assert session.replays_used == 0

    def test_reset_replaces_target_and_budgets(self, session):
        new_target = Target(position=Position(x=100, y=100), size=60)
        session.reset(initial_pings=5, initial_replays=None, target=new_target)
        assert session.target == new_target
        assert session.pings_remaining == 5
        assert session.replays_remaining is None
