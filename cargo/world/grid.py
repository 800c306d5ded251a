"""
Grid

The maze as a fixed-size mapping of positions to cells, plus the car that
drives on it. Cells are built once from a MazeDescription and mutated in
place; ``reset`` rebuilds them from the same description.
"""

import logging
from typing import Dict, Optional, Tuple

from ..events import EventDispatcher, Signal
from .car import Car, Heading
from .cell import Cell
from .maze import WALL, MazeDescription

logger = logging.getLogger(__name__)


class Grid:
    """
    A 2D grid world built from a maze description.

    Attributes:
        maze: The description the grid is (re)built from
        width: Number of columns
        height: Number of rows
        cells: Mapping of (x, y) to Cell
        car: The car, created once per grid
    """

    def __init__(self, maze: MazeDescription, dispatcher: Optional[EventDispatcher] = None):
        """
        Build all cells and place the car.

        Args:
            maze: Maze description
            dispatcher: Event dispatcher shared with the car
        """
        self.maze = maze
        self.width = maze.width
        self.height = maze.height
        self.events = dispatcher or EventDispatcher()
        self.cells: Dict[Tuple[int, int], Cell] = {}

        self._build()
        self.car = Car(self, maze.start, maze.start_heading, self.events)
        self._announce_credits()

    def _build(self) -> None:
        self.cells = {
            (x, y): Cell(position=(x, y))
            for y in range(self.height)
            for x in range(self.width)
        }
        for fill in self.maze.fills:
            flag = "wall" if fill.kind == WALL else "credit"
            for pos in fill.positions():
                self.cells[pos].toggle_flag(flag, True)

        self.cells[self.maze.goal].toggle_flag("finish", True)
        logger.debug(f"Built {self.width}x{self.height} grid")

    def _announce_credits(self) -> None:
        self.events.trigger(Signal.CREDITS_PLACED, self.credit_count())

    def reset(self) -> "Grid":
        """Rebuild every cell and put the same car back at the start."""
        self._build()
        self.car.place(self.maze.start, self.maze.start_heading)
        logger.info("Grid reset")
        self._announce_credits()
        return self

    def get_cell(self, pos: Tuple[int, int]) -> Optional[Cell]:
        """Cell at a position, or None when off the grid."""
        return self.cells.get(tuple(pos))

    def cell_ahead(self, pos: Tuple[int, int], heading: Heading) -> Optional[Cell]:
        dx, dy = heading.value
        return self.get_cell((pos[0] + dx, pos[1] + dy))

    def credit_count(self) -> int:
        """Credits currently lying on the grid."""
        return sum(1 for cell in self.cells.values() if cell.credit)

    def to_ascii(self) -> str:
        """
        ASCII rendering of the grid.

        Legend: '#' wall, '$' credit, 'G' finish, '.' empty, and the car as
        an arrow pointing in its heading.
        """
        lines = []
        for y in range(self.height):
            row = []
            for x in range(self.width):
                cell = self.cells[(x, y)]
                if cell.occupied:
                    row.append((cell.facing or self.car.heading).arrow)
                elif cell.wall:
                    row.append("#")
                elif cell.credit:
                    row.append("$")
                elif cell.finish:
                    row.append("G")
                else:
                    row.append(".")
            lines.append(" ".join(row))
        return "\n".join(lines)

    def __repr__(self):
        return f"Grid({self.width}x{self.height}, car={self.car!r})"
