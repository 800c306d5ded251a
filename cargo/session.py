"""
CarGo Session - Main Orchestrator

A session owns everything one game needs and wires it together:
- World: the grid and its car
- Compiler: program text to command tree
- Scheduler: the timed step queue
- Interpreter: command tree to queued car actions

Collaborators (UI, audio, scoring) observe the session through its event
dispatcher rather than reaching into globals.
"""

import logging
import threading
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Deque, Dict, List, Optional, Tuple

from .compiler.commands import Program
from .compiler.parser import ParseError, Parser
from .config import CargoConfig
from .events import EventDispatcher, Signal
from .interpreter.interpreter import Interpreter
from .scheduler.queue import StepQueue, TimerFactory
from .world.car import Heading
from .world.grid import Grid
from .world.maze import DEFAULT_MAZE, MazeDescription, load_maze

logger = logging.getLogger(__name__)


@dataclass
class RunResult:
    """
    Outcome of a headless run.
    """
    success: bool                       # Finish reached
    steps: int                          # Commands executed
    position: Tuple[int, int]
    heading: Heading
    credits_collected: int = 0
    collisions: int = 0
    finished: bool = True               # False if the step limit cut the run short
    trace: List[Dict[str, Any]] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def reached_finish(self) -> bool:
        return self.success

    def __str__(self) -> str:
        status = "✅ SUCCESS" if self.success else "❌ FAILED"
        if self.error:
            return f"{status} - {self.error}"
        suffix = "" if self.finished else " (step limit reached)"
        return (
            f"{status} - {self.steps} steps, {self.credits_collected} credits, "
            f"{self.collisions} collisions{suffix}"
        )


class Session:
    """
    One game: world, compiler, scheduler and interpreter.

    Example:
        session = Session(MazeDescription.from_ascii(MAP))
        result = session.run_to_completion("UNTIL ON FINISH:\\nDRIVE\\nEND")
        if result.success:
            print(session.grid.to_ascii())
    """

    def __init__(
        self,
        maze: Optional[MazeDescription] = None,
        config: Optional[CargoConfig] = None,
        dispatcher: Optional[EventDispatcher] = None,
        timer_factory: TimerFactory = threading.Timer,
    ):
        """
        Initialize the session.

        Args:
            maze: Maze description (default: config.maze_path, else the built-in maze)
            config: Session configuration (default: from environment)
            dispatcher: Event dispatcher shared by all components
            timer_factory: Timer used by the step queue
        """
        self.config = config or CargoConfig()
        self.events = dispatcher or EventDispatcher()

        if maze is None:
            maze = load_maze(self.config.maze_path) if self.config.maze_path else DEFAULT_MAZE
        self.maze = maze

        # Newest entries only, so endless runs stay bounded
        self.trace: Deque[Dict[str, Any]] = deque(maxlen=self.config.trace_limit)
        self.steps = 0
        self.credits_collected = 0
        self.collisions = 0
        self.reached_finish = False
        self.last_error: Optional[ParseError] = None
        self._idle = threading.Event()
        self._idle.set()
        self._subscribe()

        self.grid = Grid(maze, self.events)
        self.queue = StepQueue(
            step_delay=self.config.scheduler.step_delay,
            dispatcher=self.events,
            timer_factory=timer_factory,
            min_delay=self.config.scheduler.min_delay,
            max_delay=self.config.scheduler.max_delay,
        )
        self.parser = Parser(self.events)
        self.interpreter = Interpreter(self.queue, self.grid.car, self.events)
        self.program: Program = ()

        logger.info(f"Session ready: {maze.width}x{maze.height} maze, start {maze.start}, goal {maze.goal}")

    @property
    def car(self):
        return self.grid.car

    def _subscribe(self) -> None:
        self.events.subscribe_many({
            Signal.STEP_EXECUTING: self._on_step,
            Signal.DRIVE: lambda src, dst: self._record("drive"),
            Signal.COLLISION: self._on_collision,
            Signal.TURN_LEFT: lambda heading: self._record("turn_left"),
            Signal.TURN_RIGHT: lambda heading: self._record("turn_right"),
            Signal.CREDIT_PICKED_UP: self._on_credit,
            Signal.CREDIT_FAILED: lambda pos: self._record("credit_failed"),
            Signal.REACHED_FINISH: self._on_finish,
            Signal.PARSE_ERROR: self._on_parse_error,
            Signal.QUEUE_EMPTY: self._idle.set,
        })

    def _record(self, event: str) -> None:
        self.trace.append({
            "step": self.steps,
            "event": event,
            "position": self.car.position,
            "heading": self.car.heading.name,
        })

    def _on_step(self, line: int) -> None:
        self.steps += 1

    def _on_collision(self, position) -> None:
        self.collisions += 1
        self._record("collision")

    def _on_credit(self, position) -> None:
        self.credits_collected += 1
        self._record("credit_picked_up")

    def _on_finish(self, position) -> None:
        self.reached_finish = True
        self._record("reached_finish")

    def _on_parse_error(self, error: ParseError) -> None:
        self.last_error = error

    # Program control

    def compile(self, text: str) -> Optional[Program]:
        """
        Compile program text.

        A program that differs from the loaded one discards whatever is
        still queued from the old program.

        Returns:
            The program, or None if it failed to parse (already signalled)
        """
        self.parser.mark_edited()
        program = self.parser.parse_program(text)
        if program is None:
            return None
        self.last_error = None
        if program is not self.program:
            self.queue.clear()
            self.program = program
        return program

    def run(self, text: Optional[str] = None) -> bool:
        """
        Start or resume timed execution.

        Args:
            text: New program text, or None to run the loaded program

        Returns:
            True if a program is running
        """
        if text is not None and self.compile(text) is None:
            return False
        if not self.program:
            logger.warning("Nothing to run: program is empty")
            return False
        self._idle.clear()
        self.interpreter.run(self.program)
        return True

    def step(self, text: Optional[str] = None) -> bool:
        """Execute one queued command. Returns True if one ran."""
        if text is not None and self.compile(text) is None:
            return False
        if not self.program:
            return False
        return self.interpreter.step(self.program)

    def pause(self) -> None:
        self.queue.pause()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until the queue drains. Returns False on timeout."""
        return self._idle.wait(timeout)

    def reset(self) -> None:
        """Drop pending commands, then rebuild the world from the maze."""
        self.queue.clear()
        self.grid.reset()
        self.trace.clear()
        self.steps = 0
        self.credits_collected = 0
        self.collisions = 0
        self.reached_finish = False
        self._idle.set()
        logger.info("Session reset")
        self.events.trigger(Signal.SESSION_RESET)

    # Speed

    def faster(self) -> float:
        return self.queue.faster()

    def slower(self) -> float:
        return self.queue.slower()

    def reset_speed(self) -> float:
        return self.queue.reset_speed()

    # Headless execution

    def run_to_completion(self, text: Optional[str] = None, max_steps: Optional[int] = None) -> RunResult:
        """
        Run a program synchronously, without timers.

        Args:
            text: Program text, or None for the loaded program
            max_steps: Step limit (default: config.max_steps); endless
                programs stop here

        Returns:
            RunResult
        """
        if text is not None and self.compile(text) is None:
            return self.result(error=str(self.last_error))

        limit = max_steps if max_steps is not None else self.config.max_steps
        self.interpreter.seed(self.program)
        self.events.trigger(Signal.PROGRAM_RUN, self.program)
        self.queue.drain(limit)

        if not self.queue.is_empty():
            logger.warning(f"Stopped after {limit} steps with {len(self.queue)} commands pending")
        return self.result()

    def result(self, error: Optional[str] = None) -> RunResult:
        """Snapshot of the current run."""
        return RunResult(
            success=self.reached_finish and error is None,
            steps=self.steps,
            position=self.car.position,
            heading=self.car.heading,
            credits_collected=self.credits_collected,
            collisions=self.collisions,
            finished=self.queue.is_empty(),
            trace=list(self.trace),
            error=error,
        )
