"""
Program Formatter

Converts a command tree back to indented program text, used to show the
running program with the active line highlighted.
"""

from typing import List

from .commands import BlockCommand, Program

INDENT = "  "


def _command_lines(program: Program, depth: int) -> List[str]:
    lines = []
    for command in program:
        lines.append(INDENT * depth + command.source_text)
        if isinstance(command, BlockCommand):
            lines.extend(_command_lines(command.children, depth + 1))
            lines.append(INDENT * depth + "END")
    return lines


def format_program(program: Program) -> List[str]:
    """
    Indented source lines for a program.

    For a program parsed from canonical text (one command per line, every
    block closed with END) line ``n`` of the result is the line whose
    commands carry ``line == n``.
    """
    return _command_lines(program, 0)


def format_with_marker(program: Program, active_line: int, marker: str = "=>") -> str:
    """Formatted program with ``marker`` in front of the active line."""
    pad = " " * len(marker)
    return "\n".join(
        f"{marker if n == active_line else pad} {text}"
        for n, text in enumerate(format_program(program), start=1)
    )
