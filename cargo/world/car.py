"""
Car

The single agent of a session. The car only knows its position and
heading; every cell lookup goes through the grid it belongs to, so a grid
reset never leaves the car holding stale cells.
"""

import logging
from enum import Enum
from typing import Optional, Tuple

from ..events import EventDispatcher, Signal

logger = logging.getLogger(__name__)


class Heading(Enum):
    """Cardinal headings as (dx, dy) in screen coordinates (y grows down)."""
    UP = (0, -1)
    DOWN = (0, 1)
    LEFT = (-1, 0)
    RIGHT = (1, 0)

    @property
    def left(self) -> "Heading":
        """Heading after a 90 degree counter-clockwise turn."""
        turns = {
            Heading.UP: Heading.LEFT,
            Heading.LEFT: Heading.DOWN,
            Heading.DOWN: Heading.RIGHT,
            Heading.RIGHT: Heading.UP,
        }
        return turns[self]

    @property
    def right(self) -> "Heading":
        """Heading after a 90 degree clockwise turn."""
        turns = {
            Heading.UP: Heading.RIGHT,
            Heading.RIGHT: Heading.DOWN,
            Heading.DOWN: Heading.LEFT,
            Heading.LEFT: Heading.UP,
        }
        return turns[self]

    @property
    def arrow(self) -> str:
        return {Heading.UP: "^", Heading.DOWN: "v", Heading.LEFT: "<", Heading.RIGHT: ">"}[self]

    @classmethod
    def parse(cls, value) -> "Heading":
        """
        Accept a Heading, a full name ("right") or a one-letter code ("r").

        Raises:
            ValueError: If the value names no heading
        """
        if isinstance(value, Heading):
            return value
        text = str(value).strip().upper()
        codes = {"U": cls.UP, "D": cls.DOWN, "L": cls.LEFT, "R": cls.RIGHT}
        if text in codes:
            return codes[text]
        try:
            return cls[text]
        except KeyError:
            raise ValueError(f"Unknown heading: {value!r}")


class Car:
    """
    The car driving through the grid.

    Movement and sensing never raise: driving into a wall or picking up a
    credit that is not there are ordinary outcomes, reported as signals.
    """

    def __init__(
        self,
        grid: "Grid",
        position: Tuple[int, int],
        heading: Heading,
        dispatcher: Optional[EventDispatcher] = None
    ):
        """
        Place a new car on the grid.

        Args:
            grid: The grid the car drives on
            position: Start cell
            heading: Start heading
            dispatcher: Event dispatcher for car signals
        """
        self.grid = grid
        self.events = dispatcher or EventDispatcher()
        self.position = tuple(position)
        self.heading = heading
        self._occupy()

    @property
    def cell(self):
        return self.grid.get_cell(self.position)

    def _occupy(self) -> None:
        cell = self.cell
        cell.toggle_flag("occupied", True)
        cell.facing = self.heading

    def place(self, position: Tuple[int, int], heading: Heading) -> "Car":
        """Reposition the car, e.g. after a grid reset."""
        current = self.grid.get_cell(self.position)
        if current is not None and current.occupied:
            current.toggle_flag("occupied", False)
        self.position = tuple(position)
        self.heading = heading
        self._occupy()
        logger.debug(f"Car placed at {self.position} facing {self.heading.name}")
        return self

    def cell_ahead(self):
        """The cell in front of the car, or None at the edge of the grid."""
        return self.grid.cell_ahead(self.position, self.heading)

    # Sensors

    def is_wall_ahead(self) -> bool:
        ahead = self.cell_ahead()
        return ahead is None or ahead.wall

    def on_credit(self) -> bool:
        return self.cell.credit

    def on_finish(self) -> bool:
        return self.cell.finish

    # Actions

    def drive(self) -> bool:
        """
        Drive one cell forward.

        Returns:
            True if the car moved, False on a collision
        """
        target = self.cell_ahead()

        if target is None or target.wall:
            logger.warning(f"Collision at {self.position} facing {self.heading.name}")
            self.events.trigger(Signal.COLLISION, self.position)
            return False

        source = self.cell
        source.toggle_flag("occupied", False)
        target.toggle_flag("occupied", True)
        target.facing = self.heading

        self.position = target.position
        self.events.trigger(Signal.DRIVE, source.position, target.position)

        if target.finish:
            logger.info(f"Reached the finish at {self.position}")
            self.events.trigger(Signal.REACHED_FINISH, self.position)
        return True

    def turn_left(self) -> "Car":
        self.heading = self.heading.left
        self.cell.facing = self.heading
        self.events.trigger(Signal.TURN_LEFT, self.heading)
        return self

    def turn_right(self) -> "Car":
        self.heading = self.heading.right
        self.cell.facing = self.heading
        self.events.trigger(Signal.TURN_RIGHT, self.heading)
        return self

    def pick_up_credit(self) -> bool:
        """
        Pick up the credit under the car, if any.

        Returns:
            True if a credit was collected
        """
        if self.cell.take_credit():
            self.events.trigger(Signal.CREDIT_PICKED_UP, self.position)
            return True

        logger.warning(f"No credit to pick up at {self.position}")
        self.events.trigger(Signal.CREDIT_FAILED, self.position)
        return False

    def __repr__(self):
        return f"Car(position={self.position}, heading={self.heading.name})"
