"""
Event Dispatcher

Named signals emitted by the engine, and a small synchronous observer bus
that delivers them to collaborators (UI, audio, scoring, the CLI).

Delivery is ordered: handlers with a higher priority run first, handlers
with the same priority run in subscription order.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)


class Signal:
    """Names of every signal the engine emits."""

    # Compiler
    PROGRAM_PARSED = "parser.program-parsed"
    PROGRAM_EMPTY = "parser.program-empty"
    PARSE_ERROR = "error.parser"

    # Interpreter
    PROGRAM_RUN = "program.run"
    STEP_EXECUTING = "program.executing"

    # Car
    DRIVE = "car.drive"
    COLLISION = "car.collision"
    TURN_LEFT = "car.turn-left"
    TURN_RIGHT = "car.turn-right"
    CREDIT_PICKED_UP = "car.credit-picked-up"
    CREDIT_FAILED = "car.credit-failed"
    REACHED_FINISH = "car.reached-finish"

    # Scheduler / world / session
    QUEUE_EMPTY = "queue.empty"
    CREDITS_PLACED = "grid.credits-placed"
    SESSION_RESET = "session.reset"

    # Bookkeeping
    COMMANDS_EXECUTED_UPDATE = "game.command-execute-update"
    CREDITS_UPDATE = "game.credits-update"
    GOT_ALL_CREDITS = "game.got-all-credits"
    SCORE_UPDATE = "game.score-update"

    # A subscriber raised
    HANDLER_ERROR = "error.handler"


Handler = Callable[..., Any]


@dataclass
class Subscription:
    """A handler registered for one signal."""
    signal: str
    handler: Handler
    priority: int = 0
    order: int = 0


class EventDispatcher:
    """
    Synchronous publish/subscribe bus.

    A handler that raises does not abort the component that emitted the
    signal: the exception is logged and re-announced as
    ``Signal.HANDLER_ERROR``. Pass ``raise_errors=True`` to propagate
    instead.

    Example:
        events = EventDispatcher()
        events.subscribe(Signal.DRIVE, lambda src, dst: print(src, dst))
        events.trigger(Signal.DRIVE, (1, 1), (2, 1))
    """

    def __init__(self, raise_errors: bool = False):
        self.raise_errors = raise_errors
        self._subscriptions: Dict[str, List[Subscription]] = {}
        self._counter = 0
        self._logging = False

    def subscribe(self, signal: str, handler: Handler, priority: int = 0) -> Subscription:
        """
        Register a handler for a signal.

        Args:
            signal: Signal name (see ``Signal``)
            handler: Callable receiving the signal's arguments
            priority: Higher priorities are called first

        Returns:
            The subscription, usable with ``unsubscribe``
        """
        self._counter += 1
        sub = Subscription(signal=signal, handler=handler, priority=priority, order=self._counter)
        subs = self._subscriptions.setdefault(signal, [])
        subs.append(sub)
        subs.sort(key=lambda s: (-s.priority, s.order))
        return sub

    def subscribe_many(self, mapping: Dict[str, Handler], priority: int = 0) -> List[Subscription]:
        """Register several handlers at once, one per signal."""
        return [self.subscribe(signal, handler, priority) for signal, handler in mapping.items()]

    def unsubscribe(self, signal: str, handler: Optional[Handler] = None) -> int:
        """
        Remove handlers for a signal.

        Args:
            signal: Signal name
            handler: Handler to remove, or None to remove all of them

        Returns:
            Number of subscriptions removed
        """
        subs = self._subscriptions.get(signal, [])
        keep = [s for s in subs if handler is not None and s.handler != handler]
        removed = len(subs) - len(keep)
        self._subscriptions[signal] = keep
        return removed

    def handlers(self, signal: str) -> List[Handler]:
        return [s.handler for s in self._subscriptions.get(signal, [])]

    def enable_logging(self, enabled: bool = True) -> None:
        """Log every triggered signal at DEBUG level."""
        self._logging = enabled

    def trigger(self, signal: str, *args: Any) -> None:
        """
        Deliver a signal to its subscribers, in priority order.

        Args:
            signal: Signal name
            *args: Payload passed positionally to each handler
        """
        if self._logging:
            logger.debug(f"signal {signal} {args!r}")

        # Copy so handlers may (un)subscribe while we iterate
        for sub in list(self._subscriptions.get(signal, [])):
            try:
                sub.handler(*args)
            except Exception as e:
                if self.raise_errors:
                    raise
                logger.exception(f"Handler {sub.handler!r} failed on {signal}")
                if signal != Signal.HANDLER_ERROR:
                    self.trigger(Signal.HANDLER_ERROR, signal, sub.handler, e)
