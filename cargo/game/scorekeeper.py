"""
Scorekeeper

Bookkeeping collaborator: counts executed commands and collected credits
and derives a score from them (lower is better):

    score = (credits in game - credits collected) * 10
            + commands executed
            + commands in program * 2
"""

import logging
from typing import Optional

from ..events import EventDispatcher, Signal

logger = logging.getLogger(__name__)


class GameError(Exception):
    """
    Raised when the bookkeeping reaches an impossible state.

    This points at a bookkeeping bug, not a user mistake.
    """


class Scorekeeper:
    """
    Keeps score by listening to engine signals.

    A GameError marks the scorekeeper as failed; it then ignores every
    further signal instead of reporting wrong numbers.
    """

    def __init__(self, dispatcher: EventDispatcher, credits_in_game: int = 0):
        self.events = dispatcher
        self.credits_in_game = max(0, credits_in_game)
        self.credits_collected = 0
        self.commands_executed = 0
        self.commands_in_program = 0
        self.score = 0
        self.failed: Optional[GameError] = None

        self.events.subscribe_many({
            Signal.STEP_EXECUTING: self.on_command_executed,
            Signal.CREDIT_PICKED_UP: self.on_credit_picked_up,
            Signal.CREDITS_PLACED: self.set_game_credits,
            Signal.SESSION_RESET: self.reset,
            Signal.PROGRAM_PARSED: self.on_program_parsed,
        })

    def on_command_executed(self, line: int = 0) -> None:
        if self.failed:
            return
        self.commands_executed += 1
        self.events.trigger(Signal.COMMANDS_EXECUTED_UPDATE, self.commands_executed)
        self._update_score()

    def on_credit_picked_up(self, position=None) -> None:
        """
        Count a collected credit.

        Raises:
            GameError: If more credits were collected than the game holds
        """
        if self.failed:
            return
        self.credits_collected += 1

        if self.credits_collected > self.credits_in_game:
            self.failed = GameError(
                "More credits picked up than there are credits in this game. "
                f"Credits in game: {self.credits_in_game}, "
                f"credits picked up: {self.credits_collected}"
            )
            logger.error(str(self.failed))
            raise self.failed

        self.events.trigger(Signal.CREDITS_UPDATE, self.credits_collected, self.credits_in_game)
        if self.credits_collected == self.credits_in_game:
            self.events.trigger(Signal.GOT_ALL_CREDITS, self.credits_collected)
        self._update_score()

    def set_game_credits(self, count: int) -> None:
        """Number of credits placed on the grid."""
        if self.failed:
            return
        self.credits_in_game = max(0, count)
        self.events.trigger(Signal.CREDITS_UPDATE, self.credits_collected, self.credits_in_game)

    def on_program_parsed(self, program=None, command_count: int = 0) -> None:
        self.commands_in_program = command_count
        self.reset()

    def reset(self) -> None:
        """Zero the counters for a new run."""
        if self.failed:
            return
        self.commands_executed = 0
        self.credits_collected = 0
        self.score = 0
        self.events.trigger(Signal.COMMANDS_EXECUTED_UPDATE, self.commands_executed)
        self.events.trigger(Signal.CREDITS_UPDATE, self.credits_collected, self.credits_in_game)
        self.events.trigger(Signal.SCORE_UPDATE, self.score)

    def _update_score(self) -> None:
        self.score = (
            (self.credits_in_game - self.credits_collected) * 10
            + self.commands_executed
            + self.commands_in_program * 2
        )
        self.events.trigger(Signal.SCORE_UPDATE, self.score)
