"""
CarGo - Program Compiler and Execution Engine

Steer a car through a grid maze with a short program: the text is
compiled into a command tree and executed one step at a time on a
pausable, speed-adjustable step queue.
"""

from .compiler import (
    BlockCommand,
    ConditionalCommand,
    ParseError,
    Parser,
    SimpleCommand,
    format_program,
    parse,
)
from .config import CargoConfig, create_config
from .events import EventDispatcher, Signal
from .game import GameError, Scorekeeper
from .interpreter import Interpreter
from .scheduler import StepQueue
from .session import RunResult, Session
from .world import DEFAULT_MAZE, Car, Grid, Heading, MazeDescription, MazeError, load_maze

__version__ = "0.1.0"
__author__ = "CarGo Team"

__all__ = [
    # Compiler
    "BlockCommand",
    "ConditionalCommand",
    "ParseError",
    "Parser",
    "SimpleCommand",
    "format_program",
    "parse",
    # Configuration
    "CargoConfig",
    "create_config",
    # Events
    "EventDispatcher",
    "Signal",
    # Game
    "GameError",
    "Scorekeeper",
    # Execution
    "Interpreter",
    "StepQueue",
    "RunResult",
    "Session",
    # World
    "DEFAULT_MAZE",
    "Car",
    "Grid",
    "Heading",
    "MazeDescription",
    "MazeError",
    "load_maze",
]
