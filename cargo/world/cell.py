"""
Grid Cell

A single square of the maze and its flags.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

from .car import Heading

FLAGS = ("wall", "credit", "finish", "occupied")


@dataclass
class Cell:
    """
    One cell of the grid.

    Attributes:
        position: (x, y) coordinates
        wall: Cell cannot be entered
        credit: A credit lies here
        finish: The goal cell
        occupied: The car is here
        facing: Car heading, only meaningful while occupied
    """
    position: Tuple[int, int]
    wall: bool = False
    credit: bool = False
    finish: bool = False
    occupied: bool = False
    facing: Optional[Heading] = None

    def toggle_flag(self, flag: str, on: Optional[bool] = None) -> "Cell":
        """
        Set a flag, or flip it when ``on`` is None.

        Clearing ``occupied`` also clears ``facing``.

        Raises:
            ValueError: For an unknown flag name
        """
        if flag not in FLAGS:
            raise ValueError(f"Unknown cell flag: {flag}")
        value = (not getattr(self, flag)) if on is None else bool(on)
        setattr(self, flag, value)
        if flag == "occupied" and not value:
            self.facing = None
        return self

    def take_credit(self) -> bool:
        """Remove the credit from this cell, reporting whether there was one."""
        if self.credit:
            self.credit = False
            return True
        return False
