"""
Instruction Grammar

Keywords of the car language and the four line grammars, tried in order:

    <simple>      ::= DRIVE | TURN LEFT | TURN RIGHT | PICK UP CREDIT | STOP
    <oneliner>    ::= (IF|UNLESS|WHILE|UNTIL) <condition> ":" <simple>
    <blockopen>   ::= (IF|UNLESS|WHILE|UNTIL) <condition> ":"
    <blockclose>  ::= END

    <condition>   ::= ON CREDIT | ON FINISH | WALL AHEAD
"""

import re
from enum import Enum
from typing import Iterable, Type


class Instruction(Enum):
    """Car actions."""
    DRIVE = "DRIVE"
    TURN_LEFT = "TURN LEFT"
    TURN_RIGHT = "TURN RIGHT"
    PICK_UP_CREDIT = "PICK UP CREDIT"
    STOP = "STOP"


class Condition(Enum):
    """Car sensor queries."""
    ON_CREDIT = "ON CREDIT"
    ON_FINISH = "ON FINISH"
    WALL_AHEAD = "WALL AHEAD"


class Control(Enum):
    """Keywords introducing a conditional or a loop."""
    IF = "IF"
    UNLESS = "UNLESS"
    WHILE = "WHILE"
    UNTIL = "UNTIL"

    @property
    def is_loop(self) -> bool:
        return self in (Control.WHILE, Control.UNTIL)

    @property
    def is_negated(self) -> bool:
        return self in (Control.UNLESS, Control.UNTIL)


END = "END"


class LineKind(Enum):
    SIMPLE = "simple"
    CONDITIONAL = "conditional"
    BLOCK_OPEN = "block_open"
    BLOCK_END = "block_end"


def _alternatives(keywords: Type[Enum]) -> str:
    # Multi-word keywords accept any run of whitespace between words
    words: Iterable[str] = (k.value for k in keywords)
    return "|".join(r"\s+".join(map(re.escape, w.split())) for w in words)


_INSTRUCTION = _alternatives(Instruction)
_CONDITION = _alternatives(Condition)
_CONTROL = _alternatives(Control)

# Order matters: the first matching grammar wins
LINE_PATTERNS = (
    (LineKind.SIMPLE, re.compile(rf"^(?P<instruction>{_INSTRUCTION})$")),
    (LineKind.CONDITIONAL, re.compile(
        rf"^(?P<control>{_CONTROL})\s+(?P<condition>{_CONDITION})\s*:\s*(?P<instruction>{_INSTRUCTION})$"
    )),
    (LineKind.BLOCK_OPEN, re.compile(rf"^(?P<control>{_CONTROL})\s+(?P<condition>{_CONDITION})\s*:$")),
    (LineKind.BLOCK_END, re.compile(rf"^{END}$")),
)


def normalize_line(line: str) -> str:
    """Trim and uppercase a source line."""
    return line.strip().upper()


def keyword(enum_cls: Type[Enum], text: str) -> Enum:
    """Resolve matched keyword text (whitespace collapsed) to its enum member."""
    return enum_cls(" ".join(text.split()))
