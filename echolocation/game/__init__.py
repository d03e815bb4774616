"""
Echolocation game core.

Provides:
- geometry: Target placement, phantoms, distance and proximity math
- phase: Turn-phase state machine
- pings: Ping history, budgets and snapshot replays
- chapters: YAML chapter catalogue, level derivation and target mechanics
- boons: Boon catalogue and effect composition
- scoring: Round scoring and ranks
- hints: Hint generation
- cheats / unlocks: Cheat flags and the chapter unlock gate
- progress: Persisted chapter stats and save pointer
- custom: Custom game configuration and named presets
- custom_stats: Lifetime custom game statistics
- game_mode: Classic and custom round loops
"""

from echolocation.game.phase import GamePhaseMachine
from echolocation.game.pings import PingSession
from echolocation.game.chapters import MechanicRules, get_level_config
from echolocation.game.boons import apply_boon_effects
from echolocation.game.scoring import calculate_score
from echolocation.game.cheats import CheatGate
from echolocation.game.progress import ProgressRepository
from echolocation.game.unlocks import UnlockGate
from echolocation.game.custom import CustomGameConfig
from echolocation.game.custom_stats import CustomStatsRepository
from echolocation.game.game_mode import ClassicGameMode, CustomGameMode

__all__ = [
    'GamePhaseMachine',
    'PingSession',
    'MechanicRules',
    'get_level_config',
    'apply_boon_effects',
    'calculate_score',
    'CheatGate',
    'ProgressRepository',
    'UnlockGate',
    'CustomGameConfig',
    'CustomStatsRepository',
    'ClassicGameMode',
    'CustomGameMode',
]
