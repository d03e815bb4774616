"""
echolocation - Configuration loader.

Loads settings from a .env file with sensible defaults. Every tunable
number of the game core lives here so it can be retuned without touching
the algorithms: arena geometry, mechanic defaults, hint thresholds and
all scoring weights.

Environment variables use the ECHO_ prefix, e.g. ECHO_ARENA_WIDTH=1000.
"""
import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from the working directory, then from the package directory
load_dotenv()
_env_path = Path(__file__).parent / '.env'
load_dotenv(_env_path)

_PREFIX = 'ECHO_'


def _get_bool(key: str, default: bool) -> bool:
    """Get boolean from environment."""
    val = os.getenv(_PREFIX + key, str(default)).lower()
    return val in ('true', '1', 'yes')


def _get_int(key: str, default: int) -> int:
    """Get integer from environment."""
    return int(os.getenv(_PREFIX + key, str(default)))


def _get_float(key: str, default: float) -> float:
    """Get float from environment."""
    return float(os.getenv(_PREFIX + key, str(default)))


def _get_str(key: str, default: str) -> str:
    """Get string from environment."""
    return os.getenv(_PREFIX + key, default)


# Arena
ARENA_WIDTH = _get_int('ARENA_WIDTH', 800)
ARENA_HEIGHT = _get_int('ARENA_HEIGHT', 600)
TARGET_MARGIN = _get_int('TARGET_MARGIN', 50)  # keep targets away from edges
MOVE_CLAMP_MARGIN = 50  # moving targets always clamp with 50, not TARGET_MARGIN

# Proximity: max distance = arena diagonal * factor (800x600 -> 800px)
PROXIMITY_DISTANCE_FACTOR = _get_float('PROXIMITY_DISTANCE_FACTOR', 0.8)

# Phantom placement
PHANTOM_MIN_DISTANCE = _get_float('PHANTOM_MIN_DISTANCE', 150.0)
PHANTOM_MAX_ATTEMPTS = _get_int('PHANTOM_MAX_ATTEMPTS', 50)

# Chapter mechanic defaults (used when a chapter leaves them unset)
DEFAULT_SHRINK_AMOUNT = _get_float('DEFAULT_SHRINK_AMOUNT', 3.0)
DEFAULT_MIN_TARGET_SIZE = _get_float('DEFAULT_MIN_TARGET_SIZE', 40.0)
DEFAULT_MOVE_DISTANCE = _get_float('DEFAULT_MOVE_DISTANCE', 30.0)
DEFAULT_PHANTOM_COUNT = _get_int('DEFAULT_PHANTOM_COUNT', 2)

# Levels
LEVELS_PER_CHAPTER = 10
MIN_PINGS = 3
MIN_BOSS_PINGS = 2
MIN_TARGET_SIZE = 60
MIN_BOSS_TARGET_SIZE = 50
LEVEL_SIZE_STEP = 4  # pixels removed per level in chapter
BOSS_SIZE_REDUCTION = 10

# Hints
HINT_PROXIMITY_RADIUS = _get_float('HINT_PROXIMITY_RADIUS', 150.0)
HINT_THRESHOLD_RATIO = _get_float('HINT_THRESHOLD_RATIO', 0.6)
HINTS_ENABLED = _get_bool('HINTS_ENABLED', True)

# Scoring
# total = (positives - time_penalty) * difficulty multiplier, clamped to >= 0
BASE_SCORE = _get_int('BASE_SCORE', 1000)
PROXIMITY_POINTS_PER_PERCENT = _get_int('PROXIMITY_POINTS_PER_PERCENT', 4)
PING_EFFICIENCY_MAX = _get_int('PING_EFFICIENCY_MAX', 300)
EARLY_GUESS_BONUS_PER_PING = _get_int('EARLY_GUESS_BONUS_PER_PING', 75)
PING_BONUS_PER_UNUSED = _get_int('PING_BONUS_PER_UNUSED', 50)  # tips text only
SPEED_BONUS_THRESHOLD = _get_float('SPEED_BONUS_THRESHOLD', 15.0)  # seconds
SPEED_BONUS_MAX = _get_int('SPEED_BONUS_MAX', 250)
PERFECT_HIT_PROXIMITY = _get_int('PERFECT_HIT_PROXIMITY', 100)
PERFECT_HIT_BONUS = _get_int('PERFECT_HIT_BONUS', 200)
BOON_BONUS_PER_BOON = _get_int('BOON_BONUS_PER_BOON', 25)
REPLAY_BONUS_PER_UNUSED = _get_int('REPLAY_BONUS_PER_UNUSED', 40)
REPLAY_BONUS_MAX = _get_int('REPLAY_BONUS_MAX', 120)
TIME_PENALTY_PER_SECOND = _get_float('TIME_PENALTY_PER_SECOND', 2.0)
MAX_TIME_PENALTY = _get_int('MAX_TIME_PENALTY', 500)
HINT_PROXIMITY_FACTOR = _get_float('HINT_PROXIMITY_FACTOR', 0.75)
NORMAL_MULTIPLIER = _get_float('NORMAL_MULTIPLIER', 1.0)
CHALLENGE_MULTIPLIER = _get_float('CHALLENGE_MULTIPLIER', 1.5)

# Advancement: minimum rank plus minimum points earned above the base score,
# counted before the difficulty multiplier
ADVANCE_MIN_RANK = _get_str('ADVANCE_MIN_RANK', 'B')
ADVANCE_MIN_POINTS_NORMAL = _get_int('ADVANCE_MIN_POINTS_NORMAL', 500)
ADVANCE_MIN_POINTS_CHALLENGE = _get_int('ADVANCE_MIN_POINTS_CHALLENGE', 700)

# Persistence
STORAGE_PATH = _get_str(
    'STORAGE_PATH',
    str(Path(os.environ.get('XDG_DATA_HOME', str(Path.home() / '.local' / 'share')))
        / 'echolocation' / 'state.json'),
)

# Chapter data
# Set ECHO_SKIP_SCHEMA_VALIDATION=1 to log schema errors instead of raising
SKIP_SCHEMA_VALIDATION = _get_bool('SKIP_SCHEMA_VALIDATION', False)
