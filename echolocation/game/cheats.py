"""
Cheat codes: named boolean flags persisted in the key-value store.

Usage:
    cheats = CheatGate(store)
    cheats.activate(' unlock_all ')   # True: codes are trimmed and case-insensitive
    cheats.is_active('UNLOCK_ALL')    # True
"""
from typing import List

from echolocation.logging import get_logger
from echolocation.models import CheatCategory, CheatCode
from echolocation.storage import CHEAT_KEY_PREFIX, KeyValueStore

log = get_logger('cheats')

REFERENCE_CODE = 'UP_UP_DOWN_DOWN_LEFT_RIGHT_LEFT_RIGHT_B_A_START'
UNLOCK_ALL = 'UNLOCK_ALL'
UNLOCK_ALL_BOONS = 'UNLOCK_ALL_BOONS'
SWAP_BOONS = 'SWAP_BOONS'
REVEAL_TARGET = 'REVEAL_TARGET'

CHEAT_CODES: List[CheatCode] = [
    CheatCode(code=REFERENCE_CODE, name='Classic Reference',
              description='A nod to the classics. Does nothing, but you know.',
              category=CheatCategory.META, special=True),
    CheatCode(code=UNLOCK_ALL, name='Unlock All Chapters',
              description='Every chapter is playable immediately',
              category=CheatCategory.PROGRESSION),
    CheatCode(code=UNLOCK_ALL_BOONS, name='Unlock All Boons',
              description='Every boon is available regardless of progress',
              category=CheatCategory.PROGRESSION),
    CheatCode(code=SWAP_BOONS, name='Swap Boons',
              description='Change active boons between levels',
              category=CheatCategory.GAMEPLAY),
    CheatCode(code=REVEAL_TARGET, name='Reveal Target',
              description='Show the target in Shrinking Echoes and Drifting Signal',
              category=CheatCategory.DEBUG),
]

_CODES = {c.code: c for c in CHEAT_CODES}


def _normalize(code: str) -> str:
    return code.strip().upper()


def _key(code: str) -> str:
    return f"{CHEAT_KEY_PREFIX}{code.lower()}"


class CheatGate:
    """Reads and writes cheat flags through an injected store."""

    def __init__(self, store: KeyValueStore):
        self.store = store

    def activate(self, code: str) -> bool:
        """Turn a cheat on. Unknown codes return False and store nothing."""
        normalized = _normalize(code)
        if normalized not in _CODES:
            log.debug("Unknown cheat code %r", code)
            return False
        self.store.set(_key(normalized), True)
        log.info("Cheat activated: %s", normalized)
        return True

    def deactivate(self, code: str) -> bool:
        normalized = _normalize(code)
        if normalized not in _CODES:
            return False
        self.store.delete(_key(normalized))
        return True

    def is_active(self, code: str) -> bool:
        normalized = _normalize(code)
        if normalized not in _CODES:
            return False
        return self.store.get(_key(normalized), False) is True

    def active_cheats(self) -> List[CheatCode]:
        return [c for c in CHEAT_CODES if self.is_active(c.code)]

    @staticmethod
    def all_cheats() -> List[CheatCode]:
        return list(CHEAT_CODES)
