"""
Chapter and level progression.

Chapters are defined in ``data/chapters.yaml`` and validated against
``data/chapters.schema.json`` before being parsed into ChapterConfig
models. Levels are never stored: every level's ping budget and target
size is derived from its chapter on demand.

Chapter mechanics (shrink, move, phantoms) are resolved once per chapter
into MechanicRules. Per-ping side effects go through
apply_ping_mechanics(), which the ping session calls after every ping.

Example:
    >>> get_chapter_from_level(23)
    3
    >>> get_level_config(1, 1).pings
    5
"""
import json
import math
import random
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

import jsonschema
import yaml

from echolocation import config
from echolocation.game.geometry import generate_phantom_targets
from echolocation.logging import get_logger
from echolocation.models import (
    ChapterConfig,
    DifficultyTier,
    GameBounds,
    LevelConfig,
    MechanicDetails,
    PhantomTarget,
    Position,
    SpecialMechanic,
    Target,
)

log = get_logger('chapters')

DATA_DIR = Path(__file__).parent.parent / 'data'
CHAPTERS_FILE = DATA_DIR / 'chapters.yaml'
CHAPTERS_SCHEMA = DATA_DIR / 'chapters.schema.json'


class ChapterDataError(Exception):
    """Raised when the chapter data file is missing or invalid."""


# =============================================================================
# Loading
# =============================================================================

def _load_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise ChapterDataError(f"No chapter data file found: {path}")
    with open(path, 'r') as f:
        return yaml.safe_load(f) or {}


def validate_chapter_data(data: Dict[str, Any], source_path: Optional[Path] = None) -> None:
    """Validate chapter data against the bundled JSON schema.

    Raises:
        ChapterDataError: If validation fails (unless ECHO_SKIP_SCHEMA_VALIDATION=1)
    """
    with open(CHAPTERS_SCHEMA) as f:
        schema = json.load(f)

    try:
        jsonschema.validate(data, schema)
    except jsonschema.ValidationError as e:
        path_str = f" in {source_path}" if source_path else ""
        location = '/'.join(str(p) for p in e.absolute_path)
        error_msg = f"Schema validation error{path_str}: {e.message} at {location}"
        if config.SKIP_SCHEMA_VALIDATION:
            log.warning(error_msg)
        else:
            raise ChapterDataError(error_msg) from e


def load_chapters(path: Path = CHAPTERS_FILE) -> List[ChapterConfig]:
    """Load and validate the chapter catalogue, sorted by id.

    Raises:
        ChapterDataError: If the file is missing, fails the schema, or
            does not number its chapters 1..N
    """
    data = _load_yaml(Path(path))
    validate_chapter_data(data, path)

    chapters = sorted(
        (ChapterConfig.model_validate(entry) for entry in data.get('chapters', [])),
        key=lambda c: c.id,
    )
    ids = [c.id for c in chapters]
    if ids != list(range(1, len(chapters) + 1)):
        raise ChapterDataError(f"Chapter ids must be 1..{len(chapters)}, got {ids}")

    log.debug("Loaded %d chapters from %s", len(chapters), path)
    return chapters


CHAPTERS: List[ChapterConfig] = load_chapters()
TOTAL_CHAPTERS = len(CHAPTERS)


# =============================================================================
# Chapter / level lookup
# =============================================================================

def get_chapter(chapter_id: int) -> ChapterConfig:
    """Chapter by id, falling back to the first chapter for unknown ids."""
    for chapter in CHAPTERS:
        if chapter.id == chapter_id:
            return chapter
    log.warning("Unknown chapter %s, using chapter %d", chapter_id, CHAPTERS[0].id)
    return CHAPTERS[0]


def get_chapter_from_level(level: int) -> int:
    """Chapter containing a 1-indexed global level.

    Levels past the last chapter clamp to the last chapter.
    """
    return min((level - 1) // config.LEVELS_PER_CHAPTER + 1, TOTAL_CHAPTERS)


def get_level_in_chapter(level: int) -> int:
    """1-10 position of a level inside its chapter."""
    return ((level - 1) % config.LEVELS_PER_CHAPTER) + 1


def get_first_level(chapter_id: int) -> int:
    """Global level number of a chapter's first level."""
    return (chapter_id - 1) * config.LEVELS_PER_CHAPTER + 1


def _difficulty_for(level_in_chapter: int) -> DifficultyTier:
    if level_in_chapter <= 3:
        return DifficultyTier.EASY
    if level_in_chapter <= 7:
        return DifficultyTier.MEDIUM
    return DifficultyTier.HARD


def get_level_config(chapter: int, level: int) -> LevelConfig:
    """Derive the static numbers for a level.

    Ping budget drops by one every three levels (floor 3) and the target
    shrinks 4px per level (floor 60). The boss level (10th) takes a
    further -1 ping (floor 2) and -10px (floor 50).

    Args:
        chapter: Chapter id
        level: Global or chapter-local level number (1-indexed)
    """
    chapter_config = get_chapter(chapter)
    level_in_chapter = get_level_in_chapter(level)
    is_boss = level_in_chapter == config.LEVELS_PER_CHAPTER

    pings = max(config.MIN_PINGS, chapter_config.base_pings - level_in_chapter // 3)
    target_size = max(
        config.MIN_TARGET_SIZE,
        chapter_config.target_size - level_in_chapter * config.LEVEL_SIZE_STEP,
    )
    if is_boss:
        pings = max(config.MIN_BOSS_PINGS, pings - 1)
        target_size = max(config.MIN_BOSS_TARGET_SIZE, target_size - config.BOSS_SIZE_REDUCTION)

    return LevelConfig(
        chapter=chapter_config.id,
        level=level,
        level_in_chapter=level_in_chapter,
        pings=pings,
        target_size=target_size,
        difficulty=_difficulty_for(level_in_chapter),
        is_boss=is_boss,
    )


def get_chapter_progress(level: int) -> float:
    """Percent of the level's chapter reached (0-100)."""
    return min(100.0, get_level_in_chapter(level) / config.LEVELS_PER_CHAPTER * 100)


# =============================================================================
# Mechanics
# =============================================================================

# mechanic -> (shrink, move, phantoms)
_MECHANIC_FLAGS = {
    SpecialMechanic.NONE: (False, False, False),
    SpecialMechanic.SHRINKING_TARGET: (True, False, False),
    SpecialMechanic.MOVING_TARGET: (False, True, False),
    SpecialMechanic.PHANTOM_TARGETS: (False, False, True),
    SpecialMechanic.COMBINED_CHALLENGE: (True, True, True),
}


@dataclass(frozen=True)
class MechanicRules:
    """Resolved target mechanics for one chapter (or custom game).

    Built from the chapter's tagged mechanic so combined_challenge is just
    all three flags on one shared details block.
    """
    mechanic: SpecialMechanic = SpecialMechanic.NONE
    shrink: bool = False
    move: bool = False
    phantoms: bool = False
    shrink_amount: float = config.DEFAULT_SHRINK_AMOUNT
    min_target_size: float = config.DEFAULT_MIN_TARGET_SIZE
    move_distance: float = config.DEFAULT_MOVE_DISTANCE
    phantom_count: int = config.DEFAULT_PHANTOM_COUNT

    @classmethod
    def from_mechanic(
        cls,
        mechanic: SpecialMechanic,
        details: Optional[MechanicDetails] = None,
    ) -> 'MechanicRules':
        details = details or MechanicDetails()
        shrink, move, phantoms = _MECHANIC_FLAGS[mechanic]

        def pick(value, default):
            return default if value is None else value

        return cls(
            mechanic=mechanic,
            shrink=shrink,
            move=move,
            phantoms=phantoms,
            shrink_amount=pick(details.shrink_amount, config.DEFAULT_SHRINK_AMOUNT),
            min_target_size=pick(details.min_target_size, config.DEFAULT_MIN_TARGET_SIZE),
            move_distance=pick(details.move_distance, config.DEFAULT_MOVE_DISTANCE),
            phantom_count=pick(details.phantom_count, config.DEFAULT_PHANTOM_COUNT),
        )

    @classmethod
    def for_chapter(cls, chapter: ChapterConfig) -> 'MechanicRules':
        return cls.from_mechanic(chapter.special_mechanic, chapter.mechanic_details)

    @property
    def mutates_target(self) -> bool:
        """True if pings change the live target."""
        return self.shrink or self.move


def shrink_target(target: Target, amount: float, min_size: float) -> Target:
    """Shrink a target in place of its top-left corner, never below min_size."""
    return target.model_copy(update={'size': max(min_size, target.size - amount)})


def move_target(
    target: Target,
    distance: float,
    bounds: GameBounds,
    rng: Optional[random.Random] = None,
) -> Target:
    """Drift a target by ``distance`` along a uniformly random angle.

    The result is clamped to [50, bound - size - 50] on each axis.
    """
    rng = rng or random
    angle = rng.random() * math.pi * 2
    margin = config.MOVE_CLAMP_MARGIN

    new_x = max(margin, min(bounds.width - target.size - margin,
                            target.position.x + math.cos(angle) * distance))
    new_y = max(margin, min(bounds.height - target.size - margin,
                            target.position.y + math.sin(angle) * distance))

    return target.model_copy(update={'position': Position(x=new_x, y=new_y)})


def apply_ping_mechanics(
    target: Target,
    rules: MechanicRules,
    bounds: GameBounds,
    rng: Optional[random.Random] = None,
) -> Target:
    """Apply a chapter's per-ping mechanics: shrink first, then move."""
    if rules.shrink:
        target = shrink_target(target, rules.shrink_amount, rules.min_target_size)
    if rules.move:
        target = move_target(target, rules.move_distance, bounds, rng)
    return target


def generate_chapter_phantoms(
    rules: MechanicRules,
    bounds: GameBounds,
    target: Target,
    rng: Optional[random.Random] = None,
) -> List[PhantomTarget]:
    """Decoys for a freshly placed target; empty when the mechanic has none."""
    if not rules.phantoms or rules.phantom_count <= 0:
        return []
    return generate_phantom_targets(bounds, target, rules.phantom_count, rng=rng)
