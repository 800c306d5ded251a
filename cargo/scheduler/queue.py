"""
Step Queue

An ordered list of deferred actions (zero-argument callables) drained one
per tick. Actions can be added at the tail, or at the head to take
priority over everything already queued; the interpreter relies on the
latter to walk nested blocks without recursion.

Draining is driven by a timer that re-arms itself after every action while
the queue is running, so a long or endless program stays interruptible
with ``pause`` / ``clear`` and can be advanced by hand with ``step``.
"""

import logging
import threading
from collections import deque
from typing import Any, Callable, Deque, Optional, Sequence, Union

from ..events import EventDispatcher, Signal

logger = logging.getLogger(__name__)

DEFAULT_DELAY = 250.0   # ms
MIN_DELAY = 1.0         # ms
MAX_DELAY = 10000.0     # ms

Action = Callable[[], Any]
TimerFactory = Callable[[float, Callable[[], None]], Any]


class StepQueue:
    """
    Deferred action queue with timed draining and speed control.

    Only one action is ever in flight: draining, enqueueing, pausing and
    clearing are serialised with a re-entrant lock, so an action may
    enqueue further actions while it runs.

    Attributes:
        step_delay: Delay between two ticks, in milliseconds
        paused: Automatic draining is halted
    """

    def __init__(
        self,
        step_delay: Optional[float] = None,
        dispatcher: Optional[EventDispatcher] = None,
        timer_factory: TimerFactory = threading.Timer,
        min_delay: float = MIN_DELAY,
        max_delay: float = MAX_DELAY,
        default_delay: float = DEFAULT_DELAY,
    ):
        """
        Initialize the queue.

        Args:
            step_delay: Initial delay in ms (defaults to ``default_delay``)
            dispatcher: Event dispatcher for ``queue.empty``
            timer_factory: Called as ``factory(seconds, callback)``, must
                return an object with ``start()`` and ``cancel()``
            min_delay: Lower bound for ``faster``
            max_delay: Upper bound for ``slower``
            default_delay: Value restored by ``reset_speed``
        """
        if not min_delay <= default_delay <= max_delay:
            raise ValueError(f"Default delay {default_delay} outside [{min_delay}, {max_delay}]")

        self.events = dispatcher or EventDispatcher()
        self.timer_factory = timer_factory
        self.min_delay = float(min_delay)
        self.max_delay = float(max_delay)
        self.default_delay = float(default_delay)
        self.step_delay = self.default_delay
        if step_delay is not None:
            self.set_delay(step_delay)

        self.paused = False
        self._actions: Deque[Action] = deque()
        self._lock = threading.RLock()
        self._timer = None

    # Queue contents

    def enqueue_back(self, actions: Union[Action, Sequence[Action]]) -> "StepQueue":
        """Append one action, or a sequence of actions, to the tail."""
        with self._lock:
            if callable(actions):
                self._actions.append(actions)
            else:
                self._actions.extend(actions)
        return self

    def enqueue_front(self, actions: Union[Action, Sequence[Action]]) -> "StepQueue":
        """Insert one action, or a sequence in its own order, at the head."""
        with self._lock:
            if callable(actions):
                self._actions.appendleft(actions)
            else:
                self._actions.extendleft(reversed(list(actions)))
        return self

    def clear(self) -> "StepQueue":
        """Discard every pending action and stop the timer."""
        with self._lock:
            dropped = len(self._actions)
            self._actions.clear()
            self._cancel_timer()
        if dropped:
            logger.debug(f"Cleared {dropped} pending actions")
        return self

    def is_empty(self) -> bool:
        return not self._actions

    def __len__(self) -> int:
        return len(self._actions)

    @property
    def running(self) -> bool:
        """A tick is scheduled."""
        return self._timer is not None

    # Draining

    def drain_one(self) -> bool:
        """
        Pop and invoke the head action.

        Emits ``queue.empty`` when the queue is empty afterwards (or was
        already empty).

        Returns:
            True if an action ran
        """
        with self._lock:
            if not self._actions:
                self.events.trigger(Signal.QUEUE_EMPTY)
                return False

            action = self._actions.popleft()
            action()

            if not self._actions:
                logger.debug("Queue drained")
                self.events.trigger(Signal.QUEUE_EMPTY)
            return True

    def drain(self, max_steps: Optional[int] = None) -> int:
        """
        Drain synchronously, without timers.

        Stops early when an action pauses the queue.

        Args:
            max_steps: Stop after this many actions (None for no limit)

        Returns:
            Number of actions run
        """
        if max_steps is not None and max_steps < 0:
            raise ValueError("max_steps must not be negative")

        steps = 0
        with self._lock:
            self._cancel_timer()
            self.paused = False
            while self._actions and not self.paused and (max_steps is None or steps < max_steps):
                self.drain_one()
                steps += 1
        return steps

    def _tick(self, timer) -> None:
        with self._lock:
            # A cancelled or superseded timer may still fire once it gets the lock
            if timer is not self._timer:
                return
            self._timer = None
            if self.paused:
                return
            self.drain_one()
            if self._actions and not self.paused and self._timer is None:
                self._arm()

    def _arm(self) -> None:
        self._cancel_timer()
        timer = self.timer_factory(self.step_delay / 1000.0, lambda: self._tick(timer))
        if hasattr(timer, "daemon"):
            timer.daemon = True
        self._timer = timer
        timer.start()

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    # Flow control

    def pause(self) -> "StepQueue":
        """Halt automatic draining; queued actions are kept."""
        with self._lock:
            self.paused = True
            self._cancel_timer()
        return self

    def resume(self) -> "StepQueue":
        """(Re)start automatic draining after the current delay."""
        with self._lock:
            self.paused = False
            self._arm()
        return self

    def step(self) -> bool:
        """Drain exactly one action regardless of pause state, then stay paused."""
        with self._lock:
            self.paused = True
            self._cancel_timer()
            return self.drain_one()

    # Speed

    def set_delay(self, delay: float) -> "StepQueue":
        """
        Set the delay between ticks.

        Raises:
            ValueError: If the delay is outside the allowed range
        """
        if not self.min_delay <= delay <= self.max_delay:
            raise ValueError(f"Step delay {delay} outside [{self.min_delay}, {self.max_delay}] ms")
        self.step_delay = float(delay)
        return self

    def faster(self) -> float:
        """Halve the delay, never below the minimum."""
        self.step_delay = max(self.min_delay, self.step_delay / 2)
        return self.step_delay

    def slower(self) -> float:
        """Double the delay, never above the maximum."""
        self.step_delay = min(self.max_delay, self.step_delay * 2)
        return self.step_delay

    def reset_speed(self) -> float:
        self.step_delay = self.default_delay
        return self.step_delay

    def __repr__(self):
        return f"StepQueue(pending={len(self)}, delay={self.step_delay}ms, paused={self.paused})"
