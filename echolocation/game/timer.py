"""Round timer with an injectable clock."""
import time
from typing import Callable, Optional


class GameTimer:
    """Measures elapsed round time.

    freeze() stops the clock (called when the guess is confirmed); the
    frozen value is then reported by elapsed and final_time. A disabled
    timer always reports 0.
    """

    def __init__(self, enabled: bool = True, clock: Callable[[], float] = time.monotonic):
        self.enabled = enabled
        self._clock = clock
        self._start = clock()
        self._final: Optional[float] = None

    @property
    def elapsed(self) -> float:
        if not self.enabled:
            return 0.0
        if self._final is not None:
            return self._final
        return self._clock() - self._start

    @property
    def final_time(self) -> Optional[float]:
        return self._final

    @property
    def frozen(self) -> bool:
        return self._final is not None

    def freeze(self) -> float:
        if self._final is None:
            self._final = self.elapsed
        return self._final

    def reset(self) -> None:
        self._start = self._clock()
        self._final = None
