"""
Program Interpreter

Executes a command tree against the car, one queued command per tick.

Nothing is executed recursively. When a block's guard holds, its children
are pushed to the *front* of the step queue, followed by the block itself
if it is a loop, so the guard is checked again once the body has run. This
keeps the depth-first order of the tree while the call stack stays flat,
however long a loop runs.
"""

import logging
from functools import partial
from typing import Callable, Dict, Optional

from ..compiler.commands import BlockCommand, Command, Program
from ..compiler.grammar import Condition, Instruction
from ..events import EventDispatcher, Signal
from ..scheduler.queue import Action, StepQueue
from ..world.car import Car

logger = logging.getLogger(__name__)


class Interpreter:
    """
    Drives a step queue from a command tree.

    Attributes:
        queue: The step queue actions are scheduled on
        car: The car whose sensors and actions commands use
    """

    def __init__(self, queue: StepQueue, car: Car, dispatcher: Optional[EventDispatcher] = None):
        self.queue = queue
        self.car = car
        self.events = dispatcher or queue.events

        self.sensors: Dict[Condition, Callable[[], bool]] = {
            Condition.ON_CREDIT: lambda: self.car.on_credit(),
            Condition.ON_FINISH: lambda: self.car.on_finish(),
            Condition.WALL_AHEAD: lambda: self.car.is_wall_ahead(),
        }
        self.actions: Dict[Instruction, Callable[[], object]] = {
            Instruction.DRIVE: lambda: self.car.drive(),
            Instruction.TURN_LEFT: lambda: self.car.turn_left(),
            Instruction.TURN_RIGHT: lambda: self.car.turn_right(),
            Instruction.PICK_UP_CREDIT: lambda: self.car.pick_up_credit(),
            Instruction.STOP: lambda: None,
        }

    def wrap(self, command: Command) -> Action:
        """A queue action executing one command."""
        return partial(self.execute, command)

    def seed(self, program: Program) -> bool:
        """
        Queue the top-level commands, unless a run is already in progress.

        Returns:
            True if the queue was seeded
        """
        if not self.queue.is_empty():
            return False
        self.queue.enqueue_back([self.wrap(command) for command in program])
        logger.info(f"Seeded queue with {len(program)} top-level commands")
        return True

    def run(self, program: Program) -> None:
        """Start (or resume) timed execution of a program."""
        self.seed(program)
        self.events.trigger(Signal.PROGRAM_RUN, program)
        self.queue.resume()

    def step(self, program: Program) -> bool:
        """Execute a single queued command of a program, seeding if needed."""
        self.seed(program)
        self.events.trigger(Signal.PROGRAM_RUN, program)
        return self.queue.step()

    def evaluate(self, condition: Condition) -> bool:
        """Read the car sensor behind a condition."""
        return bool(self.sensors[condition]())

    def guard(self, command: Command) -> bool:
        """The (possibly inverted) condition of a command; True if unguarded."""
        condition = getattr(command, "condition", None)
        if condition is None:
            return True
        value = self.evaluate(condition)
        return not value if command.control.is_negated else value

    def execute(self, command: Command) -> None:
        """
        Execute one drained command.

        A false guard ends the command; this is also how loops terminate,
        since a loop is only re-queued after its guard held.
        """
        self.events.trigger(Signal.STEP_EXECUTING, command.line)

        if not self.guard(command):
            logger.debug(f"Line {command.line}: guard false, skipping {command.source_text}")
            return

        if isinstance(command, BlockCommand):
            expansion = [self.wrap(child) for child in command.children]
            if command.is_loop:
                expansion.append(self.wrap(command))
            self.queue.enqueue_front(expansion)
            return

        logger.debug(f"Line {command.line}: {command.instruction.value}")
        self.actions[command.instruction]()
