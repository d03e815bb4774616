"""
Turn-phase state machine for a round.

    pinging --place_final_guess--> placing --canvas click--> confirming
    placing --go_back_to_pinging--> pinging      (only with pings left)
    confirming --reposition--> placing           (guess discarded)

Submitting is not a transition: the caller reads confirmed_guess and
scores it. Illegal actions return False and leave the state untouched.
"""
from typing import Optional

from echolocation.logging import get_logger
from echolocation.models import GamePhase, Position

log = get_logger('phase')


class GamePhaseMachine:
    """Tracks the current phase and the pending final guess."""

    def __init__(self):
        self._phase = GamePhase.PINGING
        self._final_guess: Optional[Position] = None

    @property
    def phase(self) -> GamePhase:
        return self._phase

    @property
    def final_guess(self) -> Optional[Position]:
        return self._final_guess

    @property
    def confirmed_guess(self) -> Optional[Position]:
        """The guess ready for submission, only while confirming."""
        if self._phase == GamePhase.CONFIRMING:
            return self._final_guess
        return None

    def can_ping(self) -> bool:
        return self._phase == GamePhase.PINGING

    def place_final_guess(self) -> bool:
        """Enter guess placement from pinging (or stay in placing)."""
        if self._phase == GamePhase.CONFIRMING:
            log.debug("place_final_guess ignored while confirming")
            return False
        self._phase = GamePhase.PLACING
        return True

    def handle_canvas_click(self, position: Position) -> bool:
        """Set the guess while placing and advance to confirming."""
        if self._phase != GamePhase.PLACING:
            return False
        self._final_guess = position
        self._phase = GamePhase.CONFIRMING
        return True

    def reposition(self) -> bool:
        """Discard the pending guess and return to placing."""
        if self._phase != GamePhase.CONFIRMING:
            return False
        self._final_guess = None
        self._phase = GamePhase.PLACING
        return True

    def go_back_to_pinging(self, pings_remaining: Optional[int]) -> bool:
        """Return from placing to pinging.

        Args:
            pings_remaining: Remaining budget, or None when pings are unlimited
        """
        if self._phase != GamePhase.PLACING:
            return False
        if pings_remaining is not None and pings_remaining <= 0:
            log.debug("Cannot return to pinging: no pings left")
            return False
        self._final_guess = None
        self._phase = GamePhase.PINGING
        return True

    def reset(self) -> None:
        """Back to pinging with no guess. Call on every round restart."""
        self._phase = GamePhase.PINGING
        self._final_guess = None

    def __repr__(self) -> str:
        return f"GamePhaseMachine(phase={self._phase.value}, guess={self._final_guess})"
