"""
Chapter and boon unlock rules.

A chapter is playable if any one of these holds:
    - it is chapter 1
    - the UNLOCK_ALL cheat is active
    - the previous chapter is completed
    - at least one of its levels has been passed
    - the classic save pointer has reached it
"""
from typing import List

from echolocation.game.boons import BOONS, get_unlocked_boons
from echolocation.game.chapters import get_chapter
from echolocation.game.cheats import REVEAL_TARGET, SWAP_BOONS, UNLOCK_ALL, UNLOCK_ALL_BOONS, CheatGate
from echolocation.game.progress import ProgressRepository
from echolocation.models import Boon, SpecialMechanic

# Mechanics where revealing the target is allowed
_REVEALABLE = (SpecialMechanic.SHRINKING_TARGET, SpecialMechanic.MOVING_TARGET)


class UnlockGate:
    def __init__(self, cheats: CheatGate, progress: ProgressRepository):
        self.cheats = cheats
        self.progress = progress

    def is_chapter_unlocked(self, chapter: int) -> bool:
        if chapter <= 1:
            return True
        if self.cheats.is_active(UNLOCK_ALL):
            return True

        stats = self.progress.load_stats()
        previous = stats.get(chapter - 1)
        if previous is not None and previous.completed:
            return True
        if self.progress.has_progress(chapter):
            return True
        return self.progress.load_save_pointer().chapter >= chapter

    def available_boons(self) -> List[Boon]:
        """Boons from completed chapters, or all of them with UNLOCK_ALL_BOONS."""
        if self.cheats.is_active(UNLOCK_ALL_BOONS):
            return list(BOONS)
        return get_unlocked_boons(self.progress.completed_chapters())

    def can_swap_boons(self) -> bool:
        return self.cheats.is_active(SWAP_BOONS)

    def reveal_target_allowed(self, chapter: int) -> bool:
        """REVEAL_TARGET only works in the shrinking and moving chapters."""
        if not self.cheats.is_active(REVEAL_TARGET):
            return False
        return get_chapter(chapter).special_mechanic in _REVEALABLE
