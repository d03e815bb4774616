"""
Ping and replay bookkeeping for a single round.

Every ping stores a snapshot of the real target's center and size at the
moment it was made. Replays re-derive the echo from that snapshot, never
from the live target, so a target that has since shrunk or drifted still
replays exactly what the player heard.
"""
import random
import time
from typing import Callable, List, Optional, Tuple

from echolocation.game.chapters import MechanicRules, apply_ping_mechanics
from echolocation.game.geometry import get_direction
from echolocation.logging import get_logger
from echolocation.models import (
    Direction,
    GameBounds,
    PingRecord,
    PingsMode,
    Position,
    Target,
)

log = get_logger('pings')

UNLIMITED = -1

# Sentinel so reset() can tell "keep the replay budget" from "disable replays"
_KEEP = object()

EchoCallback = Callable[[Direction, bool], None]
TargetCallback = Callable[[Target], None]


class PingSession:
    """Ping history, budgets and the live target for one round.

    Args:
        initial_pings: Ping budget (ignored in unlimited mode)
        target: The real target at round start
        bounds: Arena dimensions, used by the move mechanic
        rules: Chapter mechanics applied after each ping
        pings_mode: Limited budget or unlimited pings
        initial_replays: None (replays disabled), -1 (unlimited) or a budget
        on_echo: Called with (direction, is_replay) for every echo
        on_target_change: Called with the new target after mechanics run
        rng: Random generator for the move mechanic
        clock: Timestamp source for ping records
    """

    def __init__(
        self,
        initial_pings: int,
        target: Target,
        bounds: GameBounds,
        rules: Optional[MechanicRules] = None,
        pings_mode: PingsMode = PingsMode.LIMITED,
        initial_replays: Optional[int] = None,
        on_echo: Optional[EchoCallback] = None,
        on_target_change: Optional[TargetCallback] = None,
        rng: Optional[random.Random] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.bounds = bounds
        self.rules = rules or MechanicRules()
        self.pings_mode = pings_mode
        self.on_echo = on_echo
        self.on_target_change = on_target_change
        self._rng = rng
        self._clock = clock

        self._initial_pings = initial_pings
        self._initial_replays = initial_replays
        self._target = target
        self._history: List[PingRecord] = []
        self._pings_remaining = initial_pings
        self._pings_used = 0
        self._replays_remaining = initial_replays
        self._replays_used = 0

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    @property
    def target(self) -> Target:
        return self._target

    @property
    def ping_history(self) -> Tuple[PingRecord, ...]:
        return tuple(self._history)

    @property
    def ping_positions(self) -> List[Position]:
        return [record.position for record in self._history]

    @property
    def is_unlimited(self) -> bool:
        return self.pings_mode == PingsMode.UNLIMITED

    @property
    def pings_remaining(self) -> Optional[int]:
        """Remaining budget, or None in unlimited mode."""
        return None if self.is_unlimited else self._pings_remaining

    @property
    def pings_used(self) -> int:
        return self._pings_used

    @property
    def total_pings(self) -> int:
        return self._initial_pings

    @property
    def replays_remaining(self) -> Optional[int]:
        return self._replays_remaining

    @property
    def replays_used(self) -> int:
        return self._replays_used

    @property
    def initial_replays(self) -> Optional[int]:
        return self._initial_replays

    def can_ping(self) -> bool:
        return self.is_unlimited or self._pings_remaining > 0

    def can_replay(self) -> bool:
        if self._replays_remaining is None:
            return False
        return self._replays_remaining == UNLIMITED or self._replays_remaining > 0

    # -------------------------------------------------------------------------
    # Actions
    # -------------------------------------------------------------------------

    def handle_ping(self, position: Position) -> Optional[PingRecord]:
        """Ping at a position.

        Returns:
            The stored PingRecord, or None if the limited budget is spent
            (nothing changes in that case).
        """
        if not self.can_ping():
            log.debug("Ping rejected: budget exhausted")
            return None

        center = self._target.center
        record = PingRecord(
            position=position,
            target_center=center,
            target_size=self._target.size,
            timestamp=self._clock(),
        )
        self._history.append(record)

        if self.on_echo is not None:
            self.on_echo(get_direction(position, center), False)

        if not self.is_unlimited:
            self._pings_remaining -= 1
        self._pings_used += 1

        if self.rules.mutates_target:
            self._target = apply_ping_mechanics(self._target, self.rules, self.bounds, self._rng)
            if self.on_target_change is not None:
                self.on_target_change(self._target)

        log.debug(f"Ping {self._pings_used} at ({position.x:.0f}, {position.y:.0f})")
        return record

    def handle_replay_ping(self, index: int) -> Optional[Direction]:
        """Replay the echo of an earlier ping from its snapshot.

        Returns:
            The replayed Direction, or None when the index is out of range,
            replays are disabled or the finite budget is spent.
        """
        if not 0 <= index < len(self._history):
            return None
        if not self.can_replay():
            log.debug("Replay rejected: no replays available")
            return None

        record = self._history[index]
        direction = get_direction(record.position, record.target_center)

        if self._replays_remaining != UNLIMITED:
            self._replays_remaining -= 1
        self._replays_used += 1
        self._history[index] = record.model_copy(update={'is_replayed': True})

        if self.on_echo is not None:
            self.on_echo(direction, True)
        return direction

    def reset(
        self,
        initial_pings: Optional[int] = None,
        initial_replays=_KEEP,
        target: Optional[Target] = None,
    ) -> None:
        """Clear history and restore budgets, optionally replacing them and the target."""
        if initial_pings is not None:
            self._initial_pings = initial_pings
        if initial_replays is not _KEEP:
            self._initial_replays = initial_replays
        if target is not None:
            self._target = target

        self._history = []
        self._pings_remaining = self._initial_pings
        self._pings_used = 0
        self._replays_remaining = self._initial_replays
        self._replays_used = 0
