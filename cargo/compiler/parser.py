"""
Program Parser

Turns raw program text into a command tree.

Every line is matched against the line grammars; block openers recurse
to collect their children up to the matching END. A block still open at
the end of the input is closed silently, and an END with no open block
ends the program there. Any line matching no grammar
aborts the whole parse: no partial program is ever produced.
"""

import logging
import re
from typing import List, Optional, Tuple

from ..events import EventDispatcher, Signal
from .commands import BlockCommand, Command, ConditionalCommand, Program, SimpleCommand, count_commands
from .grammar import LINE_PATTERNS, Condition, Control, Instruction, LineKind, keyword, normalize_line

logger = logging.getLogger(__name__)

_LINE_BREAK = re.compile(r"\r\n|\n|\r")


class ParseError(Exception):
    """
    Raised when a program line cannot be parsed.

    Attributes:
        message: What went wrong
        line_text: The offending line as written (trimmed, case kept)
        line_number: 1-based line number, if known
    """

    def __init__(self, message: str, line_text: str, line_number: Optional[int] = None):
        super().__init__(f"{message}: {line_text!r}" + (f" (line {line_number})" if line_number else ""))
        self.message = message
        self.line_text = line_text
        self.line_number = line_number


def split_program(text: str) -> List[str]:
    """Trim the program and split it into lines; blank programs have none."""
    trimmed = (text or "").strip()
    if not trimmed:
        return []
    return _LINE_BREAK.split(trimmed)


def match_line(raw: str, line_number: int) -> Tuple[LineKind, "re.Match"]:
    """
    Find the first line grammar matching a source line.

    Raises:
        ParseError: If no grammar matches
    """
    clean = normalize_line(raw)
    for kind, pattern in LINE_PATTERNS:
        match = pattern.match(clean)
        if match:
            return kind, match
    raise ParseError("Failed to parse instruction", raw.strip(), line_number)


class _BlockParser:
    """Recursive descent over a list of lines, one block per call."""

    def __init__(self, lines: List[str]):
        self.lines = lines
        self.index = 0

    def parse(self) -> Program:
        return self._parse_block(depth=0)

    def _next_line(self) -> Tuple[str, int]:
        raw = self.lines[self.index]
        self.index += 1
        return raw, self.index

    def _parse_block(self, depth: int) -> Program:
        block: List[Command] = []

        while self.index < len(self.lines):
            raw, line_number = self._next_line()
            kind, match = match_line(raw, line_number)
            source_text = normalize_line(raw)

            if kind is LineKind.BLOCK_END:
                if depth == 0:
                    # A top-level END ends the program; later lines are ignored
                    dropped = len(self.lines) - self.index
                    if dropped:
                        logger.warning(f"END on line {line_number} closes no block, ignoring {dropped} trailing lines")
                    self.index = len(self.lines)
                return tuple(block)

            if kind is LineKind.SIMPLE:
                block.append(SimpleCommand(
                    instruction=keyword(Instruction, match.group("instruction")),
                    line=line_number,
                    source_text=source_text,
                ))
            elif kind is LineKind.CONDITIONAL:
                block.append(ConditionalCommand(
                    control=keyword(Control, match.group("control")),
                    condition=keyword(Condition, match.group("condition")),
                    instruction=keyword(Instruction, match.group("instruction")),
                    line=line_number,
                    source_text=source_text,
                ))
            else:
                children = self._parse_block(depth + 1)
                block.append(BlockCommand(
                    control=keyword(Control, match.group("control")),
                    condition=keyword(Condition, match.group("condition")),
                    children=children,
                    line=line_number,
                    source_text=source_text,
                ))

        # Running out of input closes any open block
        return tuple(block)


def parse_lines(lines: List[str]) -> Program:
    return _BlockParser(lines).parse()


def parse(text: str) -> Program:
    """
    Parse program text into a command tree.

    Args:
        text: Multi-line program, case-insensitive

    Returns:
        Tuple of commands (empty for a blank program)

    Raises:
        ParseError: On the first line matching no grammar
    """
    return parse_lines(split_program(text))


class Parser:
    """
    Signalling, caching front-end to ``parse``.

    Re-parsing text whose normalised lines are unchanged returns the very
    same program object, so collaborators can skip redundant work with an
    identity check. Until ``mark_edited`` is called after a successful
    parse, the cached program is returned without looking at the text.
    """

    def __init__(self, dispatcher: Optional[EventDispatcher] = None):
        self.events = dispatcher or EventDispatcher()
        self._last_lines: Optional[List[str]] = None
        self._program: Program = ()
        self.command_count = 0
        self.edited = True

    @property
    def program(self) -> Program:
        """The last successfully parsed program."""
        return self._program

    def mark_edited(self) -> None:
        """Flag the program text as changed since the last parse."""
        self.edited = True

    def clear_cache(self) -> None:
        self.edited = True
        self._last_lines = None
        self._program = ()
        self.command_count = 0

    def parse_program(self, text: str) -> Optional[Program]:
        """
        Parse a program and announce the outcome.

        Emits ``parser.program-parsed`` (program, command count) and
        ``parser.program-empty`` on success, ``error.parser`` (ParseError)
        on failure.

        Returns:
            The program, or None if it failed to parse
        """
        lines = split_program(text)
        normalized = [normalize_line(line) for line in lines]

        if not self.edited or normalized == self._last_lines:
            if not self._program:
                self.events.trigger(Signal.PROGRAM_EMPTY)
            return self._program

        try:
            program = parse_lines(lines)
        except ParseError as e:
            logger.warning(f"Parse error: {e}")
            self.clear_cache()
            self.events.trigger(Signal.PARSE_ERROR, e)
            return None

        self._last_lines = normalized
        self._program = program
        self.edited = False
        self.command_count = count_commands(program)
        logger.info(f"Parsed program: {len(lines)} lines, {self.command_count} commands")

        self.events.trigger(Signal.PROGRAM_PARSED, program, self.command_count)
        if not program:
            self.events.trigger(Signal.PROGRAM_EMPTY)
        return program
