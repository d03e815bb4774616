"""Shared pytest fixtures for the echolocation tests."""
import random

import pytest

from echolocation.logging import LogSink, close_all_sinks, register_sink
from echolocation.models import GameBounds, Position, Target
from echolocation.storage import MemoryStore


class FakeClock:
    """Manually advanced clock for timers and ping timestamps."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def advance(self, seconds: float) -> None:
        self.now += seconds

    def __call__(self) -> float:
        return self.now


class CaptureSink(LogSink):
    """Sink that keeps emitted records in memory."""

    def __init__(self):
        self.records = []

    def emit(self, module, record):
        self.records.append((module, record))

    def flush(self):
        pass

    def close(self):
        pass


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def rng():
    """Seeded generator so placement and mechanics are reproducible."""
    return random.Random(42)


@pytest.fixture
def bounds():
    return GameBounds(width=800, height=600)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def target():
    """80px target with its center at (400, 300)."""
    return Target(position=Position(x=360, y=260), size=80)


@pytest.fixture
def round_sink():
    """Capture 'rounds' telemetry records for the duration of a test."""
    sink = CaptureSink()
    register_sink('rounds', sink)
    yield sink
    close_all_sinks()
