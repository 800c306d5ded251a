"""
World Module - Maze, Cells and the Car

This module holds the mutable world the program drives:
- A Grid of Cells built from a MazeDescription
- The Car with its sensors (on credit, on finish, wall ahead)
  and actions (drive, turn, pick up credit)
"""

from .car import Car, Heading
from .cell import Cell
from .grid import Grid
from .maze import DEFAULT_MAZE, Fill, MazeDescription, MazeError, load_maze

__all__ = [
    "Car",
    "Heading",
    "Cell",
    "Grid",
    "DEFAULT_MAZE",
    "Fill",
    "MazeDescription",
    "MazeError",
    "load_maze",
]
