"""
Scheduler Module - Timed Step Queue

Deferred actions drained one per tick, with pause/resume/step and a
bounded, adjustable delay between ticks.
"""

from .queue import DEFAULT_DELAY, MAX_DELAY, MIN_DELAY, StepQueue

__all__ = [
    "StepQueue",
    "DEFAULT_DELAY",
    "MIN_DELAY",
    "MAX_DELAY",
]
