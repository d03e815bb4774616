"""
Chapter statistics, save pointer and chapter progress persistence.

All loads are best effort: malformed stored values fall back to defaults
with a warning, never an exception.
"""
from datetime import datetime, timezone
from typing import Dict, List, Set

from pydantic import ValidationError

from echolocation import config
from echolocation.game.scoring import is_successful_rank
from echolocation.logging import get_logger
from echolocation.models import ChapterProgressEntry, ChapterStats, SavePointer
from echolocation.storage import (
    CHAPTER_PROGRESS_KEY,
    SAVE_POINTER_KEY,
    SEEN_INTROS_KEY,
    STATS_KEY,
    KeyValueStore,
)

log = get_logger('progress')

# Rank that counts as a perfect round
PERFECT_RANK = 'SS'


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class ProgressRepository:
    """Typed access to persisted progress.

    Args:
        store: Backing key-value store
    """

    def __init__(self, store: KeyValueStore):
        self.store = store

    # -------------------------------------------------------------------------
    # Chapter stats
    # -------------------------------------------------------------------------

    def load_stats(self) -> Dict[int, ChapterStats]:
        raw = self.store.get(STATS_KEY, {})
        if not isinstance(raw, dict):
            log.warning("Stored chapter stats are not a mapping, using defaults")
            return {}

        stats: Dict[int, ChapterStats] = {}
        for key, value in raw.items():
            try:
                stats[int(key)] = ChapterStats.model_validate(value)
            except (ValueError, ValidationError) as e:
                log.warning("Ignoring malformed stats for chapter %r: %s", key, e)
        return stats

    def save_stats(self, stats: Dict[int, ChapterStats]) -> None:
        self.store.set(STATS_KEY, {str(k): v.model_dump() for k, v in stats.items()})

    def get_chapter_stats(self, chapter: int) -> ChapterStats:
        return self.load_stats().get(chapter, ChapterStats())

    def update_chapter_stats(
        self,
        chapter: int,
        level: int,
        pings_used: int,
        score: int,
        elapsed_seconds: float,
        rank: str,
    ) -> ChapterStats:
        """Record one finished round and return the chapter's new stats.

        Every round counts as an attempt. Only successful rounds (rank B or
        better) feed the totals, records and average score, and a perfect
        round is one ranked SS. A successful round on the chapter's final
        level marks the chapter completed.

        Args:
            chapter: Chapter id
            level: Level within the chapter (1-10)
            pings_used: Pings spent this round
            score: Round total
            elapsed_seconds: Round time
            rank: Round rank label
        """
        stats = self.load_stats()
        entry = stats.get(chapter, ChapterStats())
        entry.total_attempts += 1

        if not is_successful_rank(rank):
            stats[chapter] = entry
            self.save_stats(stats)
            return entry

        entry.successful_attempts += 1
        entry.total_pings += pings_used
        entry.total_time += elapsed_seconds
        entry.levels_completed = max(entry.levels_completed, level)
        entry.best_score = max(entry.best_score, score)
        if entry.best_ping_count is None or pings_used < entry.best_ping_count:
            entry.best_ping_count = pings_used
        if entry.fastest_time is None or elapsed_seconds < entry.fastest_time:
            entry.fastest_time = elapsed_seconds
        if rank == PERFECT_RANK:
            entry.perfect_rounds += 1
        entry.avg_score = (
            entry.avg_score * (entry.successful_attempts - 1) + score
        ) / entry.successful_attempts

        if level >= config.LEVELS_PER_CHAPTER and not entry.completed:
            entry.completed = True
            entry.completed_at = _now()
            log.info("Chapter %d completed", chapter)

        stats[chapter] = entry
        self.save_stats(stats)
        return entry

    def completed_chapters(self) -> Set[int]:
        return {chapter for chapter, s in self.load_stats().items() if s.completed}

    # -------------------------------------------------------------------------
    # Save pointer / chapter progress
    # -------------------------------------------------------------------------

    def load_save_pointer(self) -> SavePointer:
        raw = self.store.get(SAVE_POINTER_KEY)
        if raw is None:
            return SavePointer()
        try:
            return SavePointer.model_validate(raw)
        except ValidationError as e:
            log.warning("Ignoring malformed save pointer: %s", e)
            return SavePointer()

    def save_pointer(self, chapter: int, level: int) -> SavePointer:
        pointer = SavePointer(chapter=chapter, level=level)
        self.store.set(SAVE_POINTER_KEY, pointer.model_dump())
        return pointer

    def load_chapter_progress(self) -> Dict[int, ChapterProgressEntry]:
        raw = self.store.get(CHAPTER_PROGRESS_KEY, {})
        if not isinstance(raw, dict):
            log.warning("Stored chapter progress is not a mapping, using defaults")
            return {}

        progress: Dict[int, ChapterProgressEntry] = {}
        for key, value in raw.items():
            try:
                progress[int(key)] = ChapterProgressEntry.model_validate(value)
            except (ValueError, ValidationError) as e:
                log.warning("Ignoring malformed progress for chapter %r: %s", key, e)
        return progress

    def save_chapter_progress(self, chapter: int, level_in_chapter: int) -> None:
        progress = self.load_chapter_progress()
        progress[chapter] = ChapterProgressEntry(
            current_level=level_in_chapter,
            last_played_at=_now(),
        )
        self.store.set(
            CHAPTER_PROGRESS_KEY,
            {str(k): v.model_dump() for k, v in progress.items()},
        )

    def has_progress(self, chapter: int) -> bool:
        """At least one level of the chapter has been passed."""
        return self.get_chapter_stats(chapter).levels_completed > 0

    # -------------------------------------------------------------------------
    # Chapter intros
    # -------------------------------------------------------------------------

    def seen_intros(self) -> List[int]:
        raw = self.store.get(SEEN_INTROS_KEY, [])
        if not isinstance(raw, list):
            log.warning("Stored intro list is malformed, using defaults")
            return []
        return [c for c in raw if isinstance(c, int)]

    def has_seen_intro(self, chapter: int) -> bool:
        return chapter in self.seen_intros()

    def mark_intro_seen(self, chapter: int) -> None:
        seen = self.seen_intros()
        if chapter not in seen:
            seen.append(chapter)
            self.store.set(SEEN_INTROS_KEY, seen)
