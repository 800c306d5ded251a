"""
Shared fixtures: a manual timer for the step queue, and small mazes.
"""

import logging

import pytest

from cargo.events import EventDispatcher
from cargo.world.maze import MazeDescription


class FakeTimer:
    """Stands in for threading.Timer; fires only when told to."""

    def __init__(self, registry, interval, function):
        self.registry = registry
        self.interval = interval
        self.function = function
        self.started = False
        self.cancelled = False

    def start(self):
        self.started = True
        self.registry.append(self)

    def cancel(self):
        self.cancelled = True

    def fire(self):
        self.function()


class TimerRegistry:
    """Collects every timer created by a queue."""

    def __init__(self):
        self.timers = []

    def append(self, timer):
        self.timers.append(timer)

    def factory(self, interval, function):
        return FakeTimer(self, interval, function)

    @property
    def pending(self):
        return [t for t in self.timers if not t.cancelled and not getattr(t, "fired", False)]

    def fire_next(self):
        """Fire the most recently armed, still active timer."""
        timer = self.pending[-1]
        timer.fired = True
        timer.fire()
        return timer

    def run(self, max_ticks=1000):
        """Fire timers until none is armed; returns ticks fired."""
        ticks = 0
        while self.pending and ticks < max_ticks:
            self.fire_next()
            ticks += 1
        return ticks


@pytest.fixture(autouse=True)
def restore_root_logger():
    """Drop the handlers configure_logging() installs on the root logger."""
    root = logging.getLogger()
    level = root.level
    yield
    for handler in list(root.handlers):
        if type(handler) in (logging.StreamHandler, logging.FileHandler):
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)


@pytest.fixture
def timers():
    return TimerRegistry()


@pytest.fixture
def events():
    return EventDispatcher(raise_errors=True)


class Recorder:
    """Subscribes to signals and records (signal, args) in order."""

    def __init__(self, dispatcher, *signals):
        self.calls = []
        for signal in signals:
            dispatcher.subscribe(signal, lambda *args, _s=signal: self.calls.append((_s, args)))

    def names(self):
        return [name for name, _ in self.calls]

    def count(self, signal):
        return sum(1 for name, _ in self.calls if name == signal)


@pytest.fixture
def recorder():
    return Recorder


CORRIDOR = """
#######
#>...G#
#######
"""

OPEN_FIELD = """
.....
.....
..>..
.....
....G
"""

BOXED = """
...
.#.
#>#
.#G
"""


@pytest.fixture
def corridor_maze():
    return MazeDescription.from_ascii(CORRIDOR)


@pytest.fixture
def open_maze():
    return MazeDescription.from_ascii(OPEN_FIELD)


@pytest.fixture
def boxed_maze():
    return MazeDescription.from_ascii(BOXED)
