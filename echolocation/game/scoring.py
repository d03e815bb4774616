"""
Round scoring.

Converts a finished round's telemetry into a ScoreResult: a named
component breakdown, a clamped total and a rank label. All weights are
named constants in echolocation.config.

    total = round(max(0, base + bonuses - time_penalty) * difficulty_multiplier)

Examples:
    >>> telemetry = RoundTelemetry(proximity=100, pings_used=2, total_pings=5,
    ...                            elapsed_seconds=10)
    >>> calculate_score(telemetry).rank
    'A+'
"""
import random
from typing import List, Optional

from echolocation import config
from echolocation.models import (
    BoonModifiers,
    RankInfo,
    RoundTelemetry,
    ScoreComponents,
    ScoreResult,
    ScoringDifficulty,
)

RANK_THRESHOLDS: List[RankInfo] = [
    RankInfo(rank='SS', threshold=2800),
    RankInfo(rank='S+', threshold=2600),
    RankInfo(rank='S', threshold=2400),
    RankInfo(rank='A+', threshold=2000),
    RankInfo(rank='A', threshold=1700),
    RankInfo(rank='B+', threshold=1400),
    RankInfo(rank='B', threshold=1100),
    RankInfo(rank='C', threshold=800),
    RankInfo(rank='D', threshold=0),
]

RANK_ORDER = [r.rank for r in RANK_THRESHOLDS]

DIFFICULTY_MULTIPLIERS = {
    ScoringDifficulty.NORMAL: config.NORMAL_MULTIPLIER,
    ScoringDifficulty.CHALLENGE: config.CHALLENGE_MULTIPLIER,
}

ADVANCE_MIN_POINTS = {
    ScoringDifficulty.NORMAL: config.ADVANCE_MIN_POINTS_NORMAL,
    ScoringDifficulty.CHALLENGE: config.ADVANCE_MIN_POINTS_CHALLENGE,
}

RANK_FLAVORS = {
    'SS': ['LEGENDARY! You are a master of the echoes!', 'TRANSCENDENT! The echoes bow to your skill!'],
    'S+': ['EXCEPTIONAL! Near-perfect execution!', 'PHENOMENAL! Elite-tier performance!'],
    'S': ['Perfect Echo!', 'Sonar Master', 'Flawless Navigation'],
    'A+': ['Excellent Precision', 'Sharp Hearing', 'Nearly Perfect'],
    'A': ['Great Work', 'Strong Signal', 'Well Done'],
    'B+': ['Good Job', 'Solid Ping', 'Getting Close'],
    'B': ['Not Bad', 'Decent Echo', 'Keep Practicing'],
    'C': ['Room for Improvement', 'Faint Signal', 'Try Again'],
    'D': ['Needs Work', 'Lost Signal', 'Better Luck Next Time'],
}


# =============================================================================
# Components
# =============================================================================

def _proximity_bonus(proximity: int, hint_used: bool, multiplier: float) -> int:
    effective = min(100.0, proximity * multiplier)
    if hint_used:
        effective *= config.HINT_PROXIMITY_FACTOR
    return round(effective * config.PROXIMITY_POINTS_PER_PERCENT)


def _ping_efficiency_bonus(unused: int, total: int) -> int:
    if total <= 0:
        return 0
    return round(unused / total * config.PING_EFFICIENCY_MAX)


def _speed_bonus(seconds: float) -> int:
    threshold = config.SPEED_BONUS_THRESHOLD
    if seconds >= threshold:
        return 0
    return round((threshold - seconds) / threshold * config.SPEED_BONUS_MAX)


def _time_penalty(seconds: float, multiplier: float = 1.0) -> int:
    penalty = min(config.MAX_TIME_PENALTY, round(seconds * config.TIME_PENALTY_PER_SECOND))
    return round(penalty * multiplier)


def _replay_bonus(replays_used: int, replays_available: Optional[int]) -> int:
    # Only a finite budget can be conserved
    if replays_available is None or replays_available <= 0:
        return 0
    unused = max(0, replays_available - replays_used)
    return min(config.REPLAY_BONUS_MAX, unused * config.REPLAY_BONUS_PER_UNUSED)


def get_difficulty_multiplier(difficulty: ScoringDifficulty) -> float:
    return DIFFICULTY_MULTIPLIERS[difficulty]


def calculate_score(
    telemetry: RoundTelemetry,
    modifiers: Optional[BoonModifiers] = None,
) -> ScoreResult:
    """Score a finished round.

    Args:
        telemetry: Raw round telemetry
        modifiers: Folded boon effects for the round, if any

    Returns:
        ScoreResult with a total clamped to >= 0
    """
    proximity_multiplier = modifiers.proximity_multiplier if modifiers else 1.0
    time_multiplier = modifiers.time_penalty_multiplier if modifiers else 1.0
    unused = telemetry.unused_pings

    components = ScoreComponents(
        base=config.BASE_SCORE,
        proximity_bonus=_proximity_bonus(telemetry.proximity, telemetry.hint_used, proximity_multiplier),
        ping_efficiency_bonus=_ping_efficiency_bonus(unused, telemetry.total_pings),
        early_guess_bonus=unused * config.EARLY_GUESS_BONUS_PER_PING,
        speed_bonus=_speed_bonus(telemetry.elapsed_seconds),
        perfect_hit_bonus=(
            config.PERFECT_HIT_BONUS
            if telemetry.proximity >= config.PERFECT_HIT_PROXIMITY else 0
        ),
        boon_bonus=telemetry.active_boons * config.BOON_BONUS_PER_BOON,
        replay_bonus=_replay_bonus(telemetry.replays_used, telemetry.replays_available),
        time_penalty=_time_penalty(telemetry.elapsed_seconds, time_multiplier),
        difficulty_multiplier=get_difficulty_multiplier(telemetry.difficulty),
    )
    return _result_from(components)


def calculate_custom_score(
    proximity: int,
    pings_used: int,
    total_pings: Optional[int],
    elapsed_seconds: float,
    timer_enabled: bool,
) -> ScoreResult:
    """Score a custom game.

    No difficulty multiplier, boon or replay bonus. Ping components are 0
    when pings are unlimited (total_pings None) and time components are 0
    when the timer is disabled.
    """
    unused = 0 if total_pings is None else max(0, total_pings - pings_used)

    components = ScoreComponents(
        base=config.BASE_SCORE,
        proximity_bonus=_proximity_bonus(proximity, False, 1.0),
        ping_efficiency_bonus=0 if total_pings is None else _ping_efficiency_bonus(unused, total_pings),
        early_guess_bonus=unused * config.EARLY_GUESS_BONUS_PER_PING,
        speed_bonus=_speed_bonus(elapsed_seconds) if timer_enabled else 0,
        perfect_hit_bonus=config.PERFECT_HIT_BONUS if proximity >= config.PERFECT_HIT_PROXIMITY else 0,
        boon_bonus=0,
        replay_bonus=0,
        time_penalty=_time_penalty(elapsed_seconds) if timer_enabled else 0,
        difficulty_multiplier=1.0,
    )
    return _result_from(components)


def _result_from(components: ScoreComponents) -> ScoreResult:
    pre_multiplier = max(0, components.positive_total - components.time_penalty)
    total = max(0, round(pre_multiplier * components.difficulty_multiplier))
    return ScoreResult(total=total, components=components, rank=get_rank(total))


# =============================================================================
# Ranks
# =============================================================================

def get_rank(score: int) -> str:
    """Rank label for a score."""
    for info in RANK_THRESHOLDS:
        if score >= info.threshold:
            return info.rank
    return 'D'


def rank_at_least(rank: str, minimum: str) -> bool:
    """True if ``rank`` is ``minimum`` or better."""
    return RANK_ORDER.index(rank) <= RANK_ORDER.index(minimum)


def get_next_rank_info(current_rank: str) -> Optional[RankInfo]:
    """The rank directly above, or None at the top."""
    index = RANK_ORDER.index(current_rank)
    return RANK_THRESHOLDS[index - 1] if index > 0 else None


def get_points_to_next_rank(score: int, current_rank: str) -> int:
    next_rank = get_next_rank_info(current_rank)
    return max(0, next_rank.threshold - score) if next_rank else 0


def get_progress_to_next_rank(score: int, current_rank: str) -> float:
    """Percent of the way from the current rank's threshold to the next."""
    next_rank = get_next_rank_info(current_rank)
    if next_rank is None:
        return 100.0

    current_threshold = RANK_THRESHOLDS[RANK_ORDER.index(current_rank)].threshold
    span = next_rank.threshold - current_threshold
    return min(100.0, max(0.0, (score - current_threshold) / span * 100))


def get_rank_flavor(rank: str, rng: Optional[random.Random] = None) -> str:
    rng = rng or random
    return rng.choice(RANK_FLAVORS.get(rank, ['Keep Going']))


def can_advance(result: ScoreResult, difficulty: ScoringDifficulty = ScoringDifficulty.NORMAL) -> bool:
    """Whether a round result unlocks the next level.

    Needs the minimum rank (B) and the difficulty's minimum earned points
    (500 normal, 700 challenge). Earned points are counted above the base
    score and before the multiplier, so challenge rounds cannot reach the
    floor through the multiplier alone.
    """
    return (
        rank_at_least(result.rank, config.ADVANCE_MIN_RANK)
        and result.components.earned_points >= ADVANCE_MIN_POINTS[difficulty]
    )


def is_successful_rank(rank: str) -> bool:
    """Ranks that count as a completed level in chapter stats."""
    return rank_at_least(rank, config.ADVANCE_MIN_RANK)


# =============================================================================
# Post-round helpers
# =============================================================================

def generate_strategic_tips(
    result: ScoreResult,
    proximity: int,
    pings_used: int,
    total_pings: int,
    elapsed_seconds: float,
) -> List[str]:
    """Up to two tips for the results screen."""
    tips = []

    if proximity < 85:
        tips.append("Use pings to triangulate the target's position more precisely")

    if total_pings > 0 and (total_pings - pings_used) / total_pings * 100 < 20:
        tips.append(f"Save pings! Each unused ping is worth {config.PING_BONUS_PER_UNUSED} points")

    if elapsed_seconds > 30:
        tips.append(
            "Work faster to reduce time penalty "
            f"(you lose {config.TIME_PENALTY_PER_SECOND:g} points per second)"
        )
    elif 15 < elapsed_seconds < 20:
        tips.append(
            f"You're close to the speed bonus threshold (under {config.SPEED_BONUS_THRESHOLD:g} seconds)!"
        )

    if elapsed_seconds >= config.SPEED_BONUS_THRESHOLD and result.components.speed_bonus == 0:
        tips.append(f"Complete in under {config.SPEED_BONUS_THRESHOLD:g} seconds to earn a speed bonus!")

    if 95 <= proximity < 100:
        tips.append(f"So close to 100% for the Perfect Hit bonus (+{config.PERFECT_HIT_BONUS} pts)!")

    return tips[:2]


def check_win_condition(proximity: int, proximity_threshold: Optional[int] = None) -> bool:
    """Custom-game win check. No threshold means free play, which always passes."""
    if proximity_threshold is None:
        return True
    return proximity >= proximity_threshold
