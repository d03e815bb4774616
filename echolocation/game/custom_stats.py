"""
Lifetime statistics for custom games.

Every submitted custom game is folded into one CustomStats record: totals,
bests, rounded running averages, won/lost counts when a win threshold was
set, splits by pings mode and arena size, and a capped list of recent games.
"""
import hashlib
import json
import time
from typing import Callable, Optional

from pydantic import ValidationError

from echolocation.game.custom import CustomGameConfig
from echolocation.logging import get_logger
from echolocation.models import CustomStats, ModeStats, PingsMode, RecentCustomGame
from echolocation.storage import CUSTOM_STATS_KEY, KeyValueStore

log = get_logger('custom_stats')

MAX_RECENT_GAMES = 50
SPEEDRUN_SECONDS = 10
PERFECT_PROXIMITY = 100


def config_hash(custom: CustomGameConfig) -> str:
    """Short stable identifier of a custom config, for grouping recent games."""
    payload = json.dumps(custom.model_dump(mode='json'), sort_keys=True)
    return hashlib.sha1(payload.encode()).hexdigest()[:8]


def _running_average(average: int, count: int, value: int) -> int:
    return round((average * (count - 1) + value) / count)


def _update_split(split: ModeStats, score: int) -> None:
    split.games_played += 1
    split.best_score = max(split.best_score, score)
    split.average_score = _running_average(split.average_score, split.games_played, score)


class CustomStatsRepository:
    """Load, record and reset custom game statistics.

    Args:
        store: Backing key-value store
        clock: Wall-clock source for recent game timestamps
    """

    def __init__(self, store: KeyValueStore, clock: Callable[[], float] = time.time):
        self.store = store
        self._clock = clock

    def load(self) -> CustomStats:
        raw = self.store.get(CUSTOM_STATS_KEY)
        if raw is None:
            return CustomStats()
        try:
            return CustomStats.model_validate(raw)
        except ValidationError as e:
            log.warning("Ignoring malformed custom stats: %s", e)
            return CustomStats()

    def save(self, stats: CustomStats) -> None:
        self.store.set(CUSTOM_STATS_KEY, stats.model_dump(mode='json'))

    def record_game(
        self,
        custom: CustomGameConfig,
        score: int,
        proximity: int,
        pings_used: int,
        elapsed_seconds: float,
        won: Optional[bool] = None,
    ) -> CustomStats:
        """Fold one finished custom game into the stats.

        Args:
            custom: Config the game was played with
            score: Game total
            proximity: Final proximity (0-100)
            pings_used: Pings spent
            elapsed_seconds: Game time (ignored for records when untimed)
            won: Win check result, or None for free play
        """
        stats = self.load()

        stats.total_games += 1
        stats.total_rounds += 1
        stats.best_score = max(stats.best_score, score)
        stats.best_proximity = max(stats.best_proximity, proximity)
        timed = custom.timer_enabled and elapsed_seconds > 0
        if timed and (stats.fastest_time is None or elapsed_seconds < stats.fastest_time):
            stats.fastest_time = elapsed_seconds
        stats.total_pings_used += pings_used
        stats.average_score = _running_average(stats.average_score, stats.total_games, score)
        stats.average_proximity = _running_average(
            stats.average_proximity, stats.total_games, proximity,
        )

        if won is True:
            stats.games_won += 1
        elif won is False:
            stats.games_lost += 1

        _update_split(stats.stats_by_mode.setdefault(custom.pings_mode.value, ModeStats()), score)
        _update_split(stats.stats_by_arena.setdefault(custom.arena_size.value, ModeStats()), score)

        if proximity >= PERFECT_PROXIMITY:
            stats.perfect_games += 1
        if custom.timer_enabled and elapsed_seconds < SPEEDRUN_SECONDS:
            stats.speedrun_games += 1
        if custom.pings_mode == PingsMode.LIMITED and pings_used == 0:
            stats.efficient_games += 1

        stats.recent_games.insert(0, RecentCustomGame(
            timestamp=self._clock(),
            score=score,
            proximity=proximity,
            pings_used=pings_used,
            elapsed_seconds=elapsed_seconds,
            config_hash=config_hash(custom),
            won=won,
        ))
        del stats.recent_games[MAX_RECENT_GAMES:]

        self.save(stats)
        log.debug("Custom game recorded: %d pts, %d total games", score, stats.total_games)
        return stats

    def reset(self) -> None:
        self.store.delete(CUSTOM_STATS_KEY)
