"""
Custom game configuration.

A custom game picks its own ping budget, target size, movement and arena
instead of following the chapter track. validate_custom_config() clamps
every field into its playable range; the other helpers translate the
config into the same MechanicRules and GameBounds the classic mode uses,
and persist the last used config plus any number of named presets.
"""
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from echolocation.game.chapters import MechanicRules
from echolocation.logging import get_logger
from echolocation.models import GameBounds, PingsMode, SpecialMechanic
from echolocation.storage import CUSTOM_CONFIG_KEY, CUSTOM_PRESETS_KEY, KeyValueStore

log = get_logger('custom')

MIN_PINGS_COUNT = 1
MAX_PINGS_COUNT = 999
MIN_CUSTOM_TARGET_SIZE = 30
MAX_CUSTOM_TARGET_SIZE = 200


class MovementMode(str, Enum):
    STATIC = "static"
    AFTER_PINGS = "after-pings"


class ArenaSize(str, Enum):
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"


ARENA_PRESETS: Dict[ArenaSize, GameBounds] = {
    ArenaSize.SMALL: GameBounds(width=600, height=450),
    ArenaSize.MEDIUM: GameBounds(width=800, height=600),
    ArenaSize.LARGE: GameBounds(width=1000, height=750),
}


class CustomGameConfig(BaseModel):
    """Player-chosen settings for a custom game.

    Attributes:
        pings_mode: Limited budget or unlimited pings
        pings_count: Budget in limited mode
        target_size: Target diameter in pixels
        movement_mode: Static target, or one that drifts after every ping
        timer_enabled: Whether time counts towards the score
        decoys: Place phantom targets
        arena_size: Arena preset
        win_proximity: Proximity needed to win, or None for free play
    """
    pings_mode: PingsMode = PingsMode.LIMITED
    pings_count: int = 5
    target_size: float = 100
    movement_mode: MovementMode = MovementMode.STATIC
    timer_enabled: bool = True
    decoys: bool = False
    arena_size: ArenaSize = ArenaSize.MEDIUM
    win_proximity: Optional[int] = Field(default=None, ge=0, le=100)

    model_config = ConfigDict(frozen=True)

    @property
    def is_unlimited(self) -> bool:
        return self.pings_mode == PingsMode.UNLIMITED

    def bounds(self) -> GameBounds:
        return ARENA_PRESETS[self.arena_size]

    def mechanic_rules(self) -> MechanicRules:
        """Map movement and decoys onto chapter mechanics."""
        move = self.movement_mode == MovementMode.AFTER_PINGS
        if move and self.decoys:
            mechanic = SpecialMechanic.COMBINED_CHALLENGE
        elif move:
            mechanic = SpecialMechanic.MOVING_TARGET
        elif self.decoys:
            mechanic = SpecialMechanic.PHANTOM_TARGETS
        else:
            mechanic = SpecialMechanic.NONE

        # Custom games never shrink, even when both other mechanics are on
        return MechanicRules(mechanic=mechanic, move=move, phantoms=self.decoys)


def validate_custom_config(custom: CustomGameConfig) -> CustomGameConfig:
    """Clamp pings to 1-999 and target size to 30-200."""
    return custom.model_copy(update={
        'pings_count': max(MIN_PINGS_COUNT, min(MAX_PINGS_COUNT, custom.pings_count)),
        'target_size': max(MIN_CUSTOM_TARGET_SIZE, min(MAX_CUSTOM_TARGET_SIZE, custom.target_size)),
    })


def load_custom_config(store: KeyValueStore) -> CustomGameConfig:
    """Last used custom config, or defaults if none (or a malformed one) is stored."""
    raw: Optional[Dict[str, Any]] = store.get(CUSTOM_CONFIG_KEY)
    if raw is None:
        return CustomGameConfig()
    try:
        return validate_custom_config(CustomGameConfig.model_validate(raw))
    except ValidationError as e:
        log.warning("Ignoring malformed custom config: %s", e)
        return CustomGameConfig()


def save_custom_config(store: KeyValueStore, custom: CustomGameConfig) -> CustomGameConfig:
    custom = validate_custom_config(custom)
    store.set(CUSTOM_CONFIG_KEY, custom.model_dump(mode='json'))
    return custom


# =============================================================================
# Named presets
# =============================================================================

class CustomPreset(BaseModel):
    """A custom config saved under a player-chosen name."""
    name: str
    settings: CustomGameConfig
    created_at: str


def load_custom_presets(store: KeyValueStore) -> Dict[str, CustomPreset]:
    """Saved presets by name. Malformed entries are skipped."""
    raw = store.get(CUSTOM_PRESETS_KEY, {})
    if not isinstance(raw, dict):
        log.warning("Stored custom presets are not a mapping, using none")
        return {}

    presets: Dict[str, CustomPreset] = {}
    for name, value in raw.items():
        try:
            presets[name] = CustomPreset.model_validate(value)
        except ValidationError as e:
            log.warning("Ignoring malformed preset %r: %s", name, e)
    return presets


def _save_presets(store: KeyValueStore, presets: Dict[str, CustomPreset]) -> None:
    store.set(CUSTOM_PRESETS_KEY, {name: p.model_dump(mode='json') for name, p in presets.items()})


def save_custom_preset(store: KeyValueStore, name: str, custom: CustomGameConfig) -> CustomPreset:
    """Save (or overwrite) a clamped copy of a config under a name."""
    presets = load_custom_presets(store)
    preset = CustomPreset(
        name=name,
        settings=validate_custom_config(custom),
        created_at=datetime.now(timezone.utc).isoformat(),
    )
    presets[name] = preset
    _save_presets(store, presets)
    return preset


def delete_custom_preset(store: KeyValueStore, name: str) -> bool:
    presets = load_custom_presets(store)
    if presets.pop(name, None) is None:
        return False
    _save_presets(store, presets)
    return True


def get_preset_names(store: KeyValueStore) -> List[str]:
    return list(load_custom_presets(store))
