"""
Compiler Module - Program Text to Command Tree

This module turns a short car program into a structured command tree:
1. Lines are normalised (trimmed, uppercased)
2. Each line is matched against the instruction grammars
3. Blocks are collected recursively up to their END

Malformed programs are rejected here and never reach the interpreter.
"""

from .commands import (
    BlockCommand,
    Command,
    ConditionalCommand,
    Program,
    SimpleCommand,
    count_commands,
    iter_commands,
)
from .formatter import format_program, format_with_marker
from .grammar import Condition, Control, Instruction
from .parser import ParseError, Parser, parse

__all__ = [
    "BlockCommand",
    "Command",
    "ConditionalCommand",
    "Program",
    "SimpleCommand",
    "count_commands",
    "iter_commands",
    "format_program",
    "format_with_marker",
    "Condition",
    "Control",
    "Instruction",
    "ParseError",
    "Parser",
    "parse",
]
