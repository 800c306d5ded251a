"""
Maze Descriptions

A maze description is everything needed to (re)build a grid: dimensions,
car start position and heading, the finish cell, and a list of wall/credit
fills given as single points or inclusive rectangles.

Descriptions can be loaded from JSON (the camelCase game data shape or
snake_case keys) or drawn as ASCII art.
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Tuple

from .car import Heading

Position = Tuple[int, int]

WALL = "wall"
CREDIT = "credit"
FILL_KINDS = (WALL, CREDIT)


class MazeError(ValueError):
    """Raised when a maze description is inconsistent."""


@dataclass(frozen=True)
class Fill:
    """
    A wall or credit fill.

    Attributes:
        kind: "wall" or "credit"
        pos: Single cell, or None when ``rect`` is used
        rect: Two opposite corners of an inclusive rectangle
    """
    kind: str
    pos: Optional[Position] = None
    rect: Optional[Tuple[Position, Position]] = None

    def positions(self) -> Iterator[Position]:
        """Every cell covered by this fill, corner order does not matter."""
        if self.pos is not None:
            yield self.pos
            return
        (x0, y0), (x1, y1) = self.rect
        for y in range(min(y0, y1), max(y0, y1) + 1):
            for x in range(min(x0, x1), max(x0, x1) + 1):
                yield (x, y)

    def to_dict(self) -> Dict[str, Any]:
        if self.pos is not None:
            return {"type": self.kind, "pos": list(self.pos)}
        return {"type": self.kind, "rect": [list(self.rect[0]), list(self.rect[1])]}


@dataclass
class MazeDescription:
    """
    Static description of a maze, used to build and reset a Grid.
    """
    width: int
    height: int
    start: Position
    start_heading: Heading
    goal: Position
    fills: List[Fill] = field(default_factory=list)

    def __post_init__(self):
        self.start = tuple(self.start)
        self.goal = tuple(self.goal)
        self.validate()

    def in_bounds(self, pos: Position) -> bool:
        x, y = pos
        return 0 <= x < self.width and 0 <= y < self.height

    def validate(self) -> None:
        """
        Check the description is buildable.

        Raises:
            MazeError: On bad dimensions, off-grid positions, unknown fill
                kinds, or a start position covered by a wall
        """
        if self.width <= 0 or self.height <= 0:
            raise MazeError(f"Maze dimensions must be positive, got {self.width}x{self.height}")
        if not self.in_bounds(self.start):
            raise MazeError(f"Start position {self.start} is outside the maze")
        if not self.in_bounds(self.goal):
            raise MazeError(f"Goal position {self.goal} is outside the maze")

        for fill in self.fills:
            if fill.kind not in FILL_KINDS:
                raise MazeError(f"Unknown fill type: {fill.kind!r}")
            if (fill.pos is None) == (fill.rect is None):
                raise MazeError("A fill needs exactly one of 'pos' or 'rect'")
            for pos in fill.positions():
                if not self.in_bounds(pos):
                    raise MazeError(f"{fill.kind} at {pos} is outside the maze")
                if fill.kind == WALL and pos == self.start:
                    raise MazeError(f"Start position {self.start} is a wall")

    @property
    def credit_count(self) -> int:
        """Distinct cells holding a credit."""
        return len({
            pos for fill in self.fills if fill.kind == CREDIT for pos in fill.positions()
        })

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MazeDescription":
        """
        Create a description from a dictionary.

        Accepts both the camelCase game-data keys (``startPos``,
        ``startDirection``, ``goalPos``, ``content``) and snake_case
        (``start``, ``start_heading``, ``goal``, ``fills``).
        """
        try:
            start = data.get("startPos", data.get("start"))
            heading = data.get("startDirection", data.get("start_heading", "RIGHT"))
            goal = data.get("goalPos", data.get("goal"))
            fills = []
            for item in data.get("content", data.get("fills", [])):
                kind = item.get("type", item.get("kind"))
                if "pos" in item:
                    fills.append(Fill(kind=kind, pos=tuple(item["pos"])))
                elif "rect" in item:
                    a, b = item["rect"]
                    fills.append(Fill(kind=kind, rect=(tuple(a), tuple(b))))
                else:
                    raise MazeError(f"Fill without 'pos' or 'rect': {item!r}")

            return cls(
                width=int(data["width"]),
                height=int(data["height"]),
                start=tuple(start),
                start_heading=Heading.parse(heading),
                goal=tuple(goal),
                fills=fills,
            )
        except MazeError:
            raise
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise MazeError(f"Malformed maze description: {e}") from e

    def to_dict(self) -> Dict[str, Any]:
        """Export in the camelCase game-data shape."""
        return {
            "width": self.width,
            "height": self.height,
            "startPos": list(self.start),
            "startDirection": self.start_heading.name,
            "goalPos": list(self.goal),
            "content": [f.to_dict() for f in self.fills],
        }

    @classmethod
    def from_ascii(cls, ascii_map: str) -> "MazeDescription":
        """
        Create a description from ASCII art.

        Legend:
        - '.' or ' ' = empty
        - '#' = wall
        - '$' = credit
        - 'G' = finish
        - '^', 'v', '<', '>' = car start and heading

        Row 0 is the first line (y grows downward).
        """
        lines = [line.rstrip() for line in ascii_map.strip("\n").split("\n")]
        lines = [line for line in lines if line.strip()]
        if not lines:
            raise MazeError("Empty ASCII maze")

        arrows = {"^": Heading.UP, "v": Heading.DOWN, "<": Heading.LEFT, ">": Heading.RIGHT}
        height = len(lines)
        width = max(len(line) for line in lines)

        fills: List[Fill] = []
        start = goal = None
        heading = Heading.RIGHT

        for y, line in enumerate(lines):
            for x, char in enumerate(line):
                if char == "#":
                    fills.append(Fill(kind=WALL, pos=(x, y)))
                elif char == "$":
                    fills.append(Fill(kind=CREDIT, pos=(x, y)))
                elif char == "G":
                    goal = (x, y)
                elif char in arrows:
                    start, heading = (x, y), arrows[char]
                elif char not in ". ":
                    raise MazeError(f"Unknown maze character {char!r} at ({x}, {y})")

        if start is None:
            raise MazeError("ASCII maze has no car start ('^', 'v', '<' or '>')")
        if goal is None:
            raise MazeError("ASCII maze has no finish ('G')")

        return cls(width=width, height=height, start=start, start_heading=heading, goal=goal, fills=fills)


def load_maze(path: str) -> MazeDescription:
    """
    Load a maze description from a JSON file.

    Args:
        path: Path to the JSON file

    Returns:
        MazeDescription

    Raises:
        OSError: If the file cannot be read
        MazeError: If the file is not valid JSON or not a valid maze
    """
    with open(Path(path), "r") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise MazeError(f"{path} is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise MazeError(f"{path} does not hold a maze object")
    return MazeDescription.from_dict(data)


# The 15x15 maze the game ships with: a ring road around a solid block,
# one credit on the far side.
DEFAULT_MAZE = MazeDescription(
    width=15,
    height=15,
    start=(1, 1),
    start_heading=Heading.RIGHT,
    goal=(1, 13),
    fills=[
        Fill(kind=WALL, rect=((0, 0), (14, 0))),
        Fill(kind=WALL, rect=((14, 0), (14, 14))),
        Fill(kind=WALL, rect=((0, 1), (0, 14))),
        Fill(kind=WALL, rect=((1, 14), (13, 14))),
        Fill(kind=WALL, rect=((1, 2), (12, 12))),
        Fill(kind=CREDIT, pos=(13, 3)),
    ],
)
