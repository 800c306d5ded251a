"""
Command Tree

The compiled program: a tuple of commands, where blocks hold their own
nested tuple of children. All commands are frozen dataclasses, so two
parses of the same text compare equal field by field.
"""

from dataclasses import dataclass
from typing import Tuple, Union

from .grammar import Condition, Control, Instruction


@dataclass(frozen=True)
class SimpleCommand:
    """
    An unconditional single action.

    Attributes:
        instruction: The car action
        line: 1-based source line
        source_text: Normalised (uppercased) source line
    """
    instruction: Instruction
    line: int
    source_text: str = ""


@dataclass(frozen=True)
class ConditionalCommand:
    """A one-line guarded action, e.g. ``IF WALL AHEAD: TURN LEFT``."""
    control: Control
    condition: Condition
    instruction: Instruction
    line: int
    source_text: str = ""


@dataclass(frozen=True)
class BlockCommand:
    """
    A guarded, END-terminated body.

    WHILE and UNTIL blocks are loops; IF and UNLESS blocks run their body
    at most once.
    """
    control: Control
    condition: Condition
    children: Tuple["Command", ...]
    line: int
    source_text: str = ""

    @property
    def is_loop(self) -> bool:
        return self.control.is_loop


Command = Union[SimpleCommand, ConditionalCommand, BlockCommand]
Program = Tuple[Command, ...]


def count_commands(program: Program) -> int:
    """
    Number of commands and condition checks in a program.

    A simple command counts 1, a one-liner 2 (check and action), a block
    1 plus its children.
    """
    total = 0
    for command in program:
        if isinstance(command, BlockCommand):
            total += 1 + count_commands(command.children)
        elif isinstance(command, ConditionalCommand):
            total += 2
        else:
            total += 1
    return total


def iter_commands(program: Program):
    """Depth-first, left-to-right walk over every command."""
    for command in program:
        yield command
        if isinstance(command, BlockCommand):
            yield from iter_commands(command.children)
