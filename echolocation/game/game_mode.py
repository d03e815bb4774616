"""
Round loop for the classic chapter track and for custom games.

RoundController owns everything that lives for exactly one round: the
target and its phantoms, the ping session, the phase machine, hints and
the timer. Starting a round (first start, advance or retry) replaces the
target and phantoms wholesale and resets all of those together.

Usage:
    mode = ClassicGameMode(JsonFileStore(config.STORAGE_PATH))
    mode.click(Position(x=200, y=150))    # ping
    mode.place_final_guess()
    mode.click(Position(x=410, y=300))    # place guess -> confirming
    result = mode.submit()
    if result.advanced:
        mode.advance()
    else:
        mode.retry()
"""
import random
import time
from typing import Any, Callable, Dict, List, Optional

from echolocation import config
from echolocation.game.boons import apply_boon_effects, draw_boon_offers, get_boon_by_id
from echolocation.game.chapters import (
    TOTAL_CHAPTERS,
    MechanicRules,
    generate_chapter_phantoms,
    get_chapter,
    get_chapter_from_level,
    get_first_level,
    get_level_config,
)
from echolocation.game.cheats import CheatGate
from echolocation.game.custom import CustomGameConfig, validate_custom_config
from echolocation.game.custom_stats import CustomStatsRepository
from echolocation.game.geometry import (
    calculate_proximity,
    generate_target_position,
    proximity_max_distance,
)
from echolocation.game.hints import HintTracker
from echolocation.game.phase import GamePhaseMachine
from echolocation.game.pings import EchoCallback, PingSession
from echolocation.game.progress import ProgressRepository
from echolocation.game.scoring import (
    calculate_custom_score,
    calculate_score,
    can_advance,
    check_win_condition,
)
from echolocation.game.timer import GameTimer
from echolocation.game.unlocks import UnlockGate
from echolocation.logging import emit_record, get_logger
from echolocation.models import (
    Boon,
    BoonModifiers,
    ChapterConfig,
    Direction,
    GameBounds,
    GamePhase,
    LevelConfig,
    PhantomTarget,
    PingRecord,
    PingsMode,
    Position,
    RoundResult,
    RoundTelemetry,
    ScoreResult,
    ScoringDifficulty,
    Target,
)
from echolocation.storage import ACTIVE_BOONS_KEY, KeyValueStore

log = get_logger('game_mode')

MAX_LEVEL = TOTAL_CHAPTERS * config.LEVELS_PER_CHAPTER


def default_bounds() -> GameBounds:
    return GameBounds(width=config.ARENA_WIDTH, height=config.ARENA_HEIGHT)


class RoundController:
    """Shared per-round state and actions.

    Subclasses decide the budgets and rules of each round and how a
    submitted guess is scored.
    """

    def __init__(
        self,
        bounds: GameBounds,
        hints_enabled: bool = False,
        timer_enabled: bool = True,
        pings_mode: PingsMode = PingsMode.LIMITED,
        on_echo: Optional[EchoCallback] = None,
        rng: Optional[random.Random] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.bounds = bounds
        self._rng = rng
        self.rules = MechanicRules()
        self.radius_multiplier = 1.0
        self.phantoms: List[PhantomTarget] = []
        self.last_result: Optional[RoundResult] = None

        self.phase = GamePhaseMachine()
        self.hints = HintTracker(hints_enabled, bounds)
        self.timer = GameTimer(enabled=timer_enabled, clock=clock)
        self.pings = PingSession(
            initial_pings=1,
            target=Target(position=Position(x=0, y=0), size=1),
            bounds=bounds,
            pings_mode=pings_mode,
            on_echo=on_echo,
            rng=rng,
        )

    # -------------------------------------------------------------------------
    # Round lifecycle
    # -------------------------------------------------------------------------

    def _start_round(
        self,
        pings: int,
        replays: Optional[int],
        target_size: float,
        rules: MechanicRules,
    ) -> None:
        """Place a new target and reset every per-round component."""
        target = generate_target_position(self.bounds, target_size, rng=self._rng)
        self.rules = rules
        self.phantoms = generate_chapter_phantoms(rules, self.bounds, target, self._rng)

        self.pings.rules = rules
        self.pings.reset(initial_pings=pings, initial_replays=replays, target=target)
        self.phase.reset()
        self.hints.reset()
        self.timer.reset()
        self.last_result = None

        log.debug(f"Round started: {pings} pings, size {target_size:.0f}, "
                  f"{len(self.phantoms)} phantoms")

    @property
    def target(self) -> Target:
        return self.pings.target

    @property
    def current_phase(self) -> GamePhase:
        return self.phase.phase

    # -------------------------------------------------------------------------
    # Player actions
    # -------------------------------------------------------------------------

    def ping(self, position: Position) -> Optional[PingRecord]:
        """Ping while in the pinging phase. None if the ping was rejected."""
        if not self.phase.can_ping():
            return None
        record = self.pings.handle_ping(position)
        if record is not None and not self.pings.is_unlimited:
            self.hints.update(
                self.pings.pings_used,
                self.pings.total_pings,
                self.pings.ping_positions,
                self.target,
            )
        return record

    def replay(self, index: int) -> Optional[Direction]:
        return self.pings.handle_replay_ping(index)

    def place_final_guess(self) -> bool:
        return self.phase.place_final_guess()

    def click(self, position: Position) -> bool:
        """Arena click: a ping while pinging, the guess while placing."""
        if self.phase.phase == GamePhase.PINGING:
            return self.ping(position) is not None
        if self.phase.handle_canvas_click(position):
            self.timer.freeze()
            return True
        return False

    def reposition(self) -> bool:
        return self.phase.reposition()

    def back_to_pinging(self) -> bool:
        return self.phase.go_back_to_pinging(self.pings.pings_remaining)

    def submit(self, elapsed_seconds: Optional[float] = None) -> Optional[RoundResult]:
        """Score the confirmed guess.

        Args:
            elapsed_seconds: Override for the round time (default: the timer)

        Returns:
            RoundResult (the same one on repeated calls), or None when no
            guess is confirmed yet
        """
        if self.last_result is not None:
            return self.last_result

        guess = self.phase.confirmed_guess
        if guess is None:
            log.debug("Submit ignored: no confirmed guess")
            return None

        elapsed = self.timer.freeze() if elapsed_seconds is None else elapsed_seconds
        center = self.target.center
        proximity = calculate_proximity(
            guess, center, proximity_max_distance(self.bounds, self.radius_multiplier),
        )
        self.last_result = self._finish(guess, center, proximity, elapsed)
        return self.last_result

    def _finish(
        self,
        guess: Position,
        center: Position,
        proximity: int,
        elapsed: float,
    ) -> RoundResult:
        raise NotImplementedError


class ClassicGameMode(RoundController):
    """Chapter track: fifty levels, boons, stats and a save pointer.

    Args:
        store: Persistence for progress, cheats and active boons
        difficulty: Scoring difficulty
        hints_enabled: Show hints once 60% of the pings are spent
            (default: ECHO_HINTS_ENABLED)
        level: Global level to start on (default: the save pointer). A level
            in a locked chapter falls back to the save pointer.
        bounds: Arena dimensions (default: config arena)
        on_echo: Audio callback, see PingSession
        rng: Random generator for placement, mechanics and offers
        clock: Timer clock (ping timestamps use wall-clock time)
    """

    def __init__(
        self,
        store: KeyValueStore,
        difficulty: ScoringDifficulty = ScoringDifficulty.NORMAL,
        hints_enabled: Optional[bool] = None,
        level: Optional[int] = None,
        bounds: Optional[GameBounds] = None,
        on_echo: Optional[EchoCallback] = None,
        rng: Optional[random.Random] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        super().__init__(
            bounds or default_bounds(),
            hints_enabled=config.HINTS_ENABLED if hints_enabled is None else hints_enabled,
            on_echo=on_echo,
            rng=rng,
            clock=clock,
        )
        self.store = store
        self.difficulty = difficulty
        self.progress = ProgressRepository(store)
        self.cheats = CheatGate(store)
        self.unlocks = UnlockGate(self.cheats, self.progress)

        pointer_level = max(1, min(MAX_LEVEL, self.progress.load_save_pointer().level))
        self.level = pointer_level
        if level is not None:
            level = max(1, min(MAX_LEVEL, level))
            if self.unlocks.is_chapter_unlocked(get_chapter_from_level(level)):
                self.level = level
            else:
                log.warning("Level %d is in a locked chapter, resuming at level %d",
                            level, pointer_level)
        self.modifiers = BoonModifiers(pings=1)
        self._start_level()

    # -------------------------------------------------------------------------
    # Level state
    # -------------------------------------------------------------------------

    @property
    def chapter(self) -> int:
        return get_chapter_from_level(self.level)

    @property
    def chapter_config(self) -> ChapterConfig:
        return get_chapter(self.chapter)

    @property
    def level_config(self) -> LevelConfig:
        return get_level_config(self.chapter, self.level)

    def _start_level(self) -> None:
        level_config = self.level_config
        chapter_config = self.chapter_config
        self.modifiers = apply_boon_effects(
            level_config.pings, chapter_config.replays_available, self.active_boon_ids,
        )
        self.radius_multiplier = self.modifiers.radius_multiplier
        self._start_round(
            pings=self.modifiers.pings,
            replays=self.modifiers.replays,
            target_size=level_config.target_size,
            rules=MechanicRules.for_chapter(chapter_config),
        )
        self.progress.save_chapter_progress(self.chapter, level_config.level_in_chapter)

    def retry(self) -> None:
        """Replay the current level with a fresh target."""
        self._start_level()

    def advance(self) -> bool:
        """Move to the next level. Only after a result that unlocked it."""
        if self.last_result is None or not self.last_result.advanced:
            return False
        if self.level >= MAX_LEVEL:
            log.info("Final level cleared")
            return False

        self.level += 1
        self.progress.save_pointer(self.chapter, self.level)
        self._start_level()
        return True

    def select_chapter(self, chapter: int) -> bool:
        """Jump to the first level of an unlocked chapter."""
        if not 1 <= chapter <= TOTAL_CHAPTERS or not self.unlocks.is_chapter_unlocked(chapter):
            return False
        self.level = get_first_level(chapter)
        self.progress.save_pointer(chapter, self.level)
        self._start_level()
        return True

    @property
    def revealed_target(self) -> Optional[Target]:
        """The live target when the reveal cheat applies to this chapter."""
        if self.unlocks.reveal_target_allowed(self.chapter):
            return self.target
        return None

    # -------------------------------------------------------------------------
    # Boons
    # -------------------------------------------------------------------------

    @property
    def active_boon_ids(self) -> List[str]:
        raw = self.store.get(ACTIVE_BOONS_KEY, [])
        if not isinstance(raw, list):
            log.warning("Stored active boons are malformed, using none")
            return []
        return [b for b in raw if isinstance(b, str)]

    @property
    def active_boons(self) -> List[Boon]:
        return [b for b in map(get_boon_by_id, self.active_boon_ids) if b is not None]

    def boon_offers(self, rng: Optional[random.Random] = None) -> List[Boon]:
        return draw_boon_offers(self.unlocks.available_boons(), self.active_boon_ids, rng or self._rng)

    def choose_boon(self, boon_id: str) -> bool:
        """Activate an available boon. Effects apply from the next round.

        Holding a boon of the same archetype blocks the choice unless the
        SWAP_BOONS cheat is active, in which case the old one is replaced.
        """
        boon = get_boon_by_id(boon_id)
        if boon is None or boon not in self.unlocks.available_boons():
            return False

        active = self.active_boons
        if boon in active:
            return False

        same_archetype = [b for b in active if b.archetype == boon.archetype]
        if same_archetype and not self.unlocks.can_swap_boons():
            return False

        ids = [b.id for b in active if b not in same_archetype] + [boon.id]
        self.store.set(ACTIVE_BOONS_KEY, ids)
        log.info("Boon chosen: %s", boon.name)
        return True

    def remove_boon(self, boon_id: str) -> bool:
        """Drop an active boon. Needs the SWAP_BOONS cheat."""
        if not self.unlocks.can_swap_boons():
            return False
        ids = self.active_boon_ids
        if boon_id not in ids:
            return False
        ids.remove(boon_id)
        self.store.set(ACTIVE_BOONS_KEY, ids)
        return True

    # -------------------------------------------------------------------------
    # Scoring
    # -------------------------------------------------------------------------

    def _finish(self, guess, center, proximity, elapsed) -> RoundResult:
        telemetry = RoundTelemetry(
            proximity=proximity,
            pings_used=self.pings.pings_used,
            total_pings=self.pings.total_pings,
            elapsed_seconds=elapsed,
            chapter=self.chapter,
            replays_used=self.pings.replays_used,
            replays_available=self.pings.initial_replays,
            hint_used=self.hints.hint_used,
            difficulty=self.difficulty,
            active_boons=len(self.active_boons),
        )
        score = calculate_score(telemetry, self.modifiers)
        advanced = can_advance(score, self.difficulty)

        self.progress.update_chapter_stats(
            self.chapter,
            self.level_config.level_in_chapter,
            telemetry.pings_used,
            score.total,
            elapsed,
            score.rank,
        )
        emit_record('rounds', self._round_record(telemetry, score, advanced))

        log.info(f"Level {self.level}: {score.total} pts ({score.rank}), proximity {proximity}%")
        return RoundResult(
            score=score,
            proximity=proximity,
            guess=guess,
            target_center=center,
            elapsed_seconds=elapsed,
            advanced=advanced,
            won=advanced,
        )

    def _round_record(
        self,
        telemetry: RoundTelemetry,
        score: ScoreResult,
        advanced: bool,
    ) -> Dict[str, Any]:
        return {
            'mode': 'classic',
            'level': self.level,
            'telemetry': telemetry.model_dump(mode='json'),
            'score': score.model_dump(mode='json'),
            'boons': self.active_boon_ids,
            'advanced': advanced,
        }


class CustomGameMode(RoundController):
    """Free-form game from a CustomGameConfig. No chapter stats, boons or hints.

    Args:
        custom: Game settings (clamped on construction)
        store: Where to record custom game stats (None: not recorded)
        on_echo: Audio callback, see PingSession
        rng: Random generator for placement and mechanics
        clock: Timer clock
    """

    def __init__(
        self,
        custom: CustomGameConfig,
        store: Optional[KeyValueStore] = None,
        on_echo: Optional[EchoCallback] = None,
        rng: Optional[random.Random] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.custom = validate_custom_config(custom)
        self.stats = CustomStatsRepository(store) if store is not None else None
        super().__init__(
            self.custom.bounds(),
            hints_enabled=False,
            timer_enabled=self.custom.timer_enabled,
            pings_mode=self.custom.pings_mode,
            on_echo=on_echo,
            rng=rng,
            clock=clock,
        )
        self.new_round()

    def new_round(self) -> None:
        self._start_round(
            pings=self.custom.pings_count,
            replays=None,
            target_size=self.custom.target_size,
            rules=self.custom.mechanic_rules(),
        )

    def _finish(self, guess, center, proximity, elapsed) -> RoundResult:
        score = calculate_custom_score(
            proximity,
            self.pings.pings_used,
            None if self.custom.is_unlimited else self.pings.total_pings,
            elapsed,
            self.custom.timer_enabled,
        )
        won = check_win_condition(proximity, self.custom.win_proximity)
        emit_record('rounds', {
            'mode': 'custom',
            'config': self.custom.model_dump(mode='json'),
            'proximity': proximity,
            'score': score.model_dump(mode='json'),
            'won': won,
        })
        if self.stats is not None:
            self.stats.record_game(
                self.custom,
                score.total,
                proximity,
                self.pings.pings_used,
                elapsed,
                won=None if self.custom.win_proximity is None else won,
            )
        return RoundResult(
            score=score,
            proximity=proximity,
            guess=guess,
            target_center=center,
            elapsed_seconds=elapsed,
            won=won,
        )
