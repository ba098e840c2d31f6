"""
Board state implementation for the knight path solver.

BoardState owns the visited map (source of truth) and the two maps derived
from it: accessibility and priority. The only mutators are move_to() and
penalize(), both of which regenerate the derived maps before returning.
"""

import numpy as np
from typing import Iterator, List, Optional, Tuple

from .interfaces import BoardInterface
from .utils import (
    Coordinate,
    PriorityParams,
    compute_accessibility,
    compute_priority,
    knight_targets,
)


def _read_only(array: np.ndarray) -> np.ndarray:
    view = array.view()
    view.flags.writeable = False
    return view


class BoardState(BoardInterface):
    """
    W×H board with a single occupant.

    Attributes:
        _width, _height: Board dimensions
        _visited: Boolean map of occupied cells
        _accessibility: Unvisited knight neighbour count per cell
        _priority: Derived desirability score per cell
        _position: Current occupant cell
        _penalized: Cells whose priority is suppressed, one entry per penalty
        _max_distance: Board diagonal length
    """

    def __init__(
        self,
        width: int,
        height: int,
        start: Coordinate,
        params: Optional[PriorityParams] = None,
        use_jit: bool = True
    ):
        """
        Initialize a fresh board with only the start cell visited.

        Args:
            width: Board width (x extent)
            height: Board height (y extent)
            start: Starting cell
            params: Priority constants (defaults if None)
            use_jit: Use the JIT accessibility kernel instead of the Python loop

        Raises:
            ValueError: If the size is not positive or start is out of bounds
        """
        if width < 1 or height < 1:
            raise ValueError(f"Board size must be positive, got {width}x{height}")
        if not start.in_bounds(width, height):
            raise ValueError(f"Start {start} is outside a {width}x{height} board")

        self._width = width
        self._height = height
        self._params = params or PriorityParams()
        self._use_jit = use_jit
        self._max_distance = Coordinate(width, height).length()
        self._penalized: List[Coordinate] = []

        self._visited = np.zeros((width, height), dtype=bool)
        self._accessibility = np.zeros((width, height), dtype=np.int64)
        self._priority = np.zeros((width, height), dtype=np.float64)
        self._position = start

        self._visited[start.x, start.y] = True
        self._regenerate()

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def size(self) -> Coordinate:
        return Coordinate(self._width, self._height)

    @property
    def position(self) -> Coordinate:
        return self._position

    @property
    def visited(self) -> np.ndarray:
        return _read_only(self._visited)

    @property
    def accessibility(self) -> np.ndarray:
        return _read_only(self._accessibility)

    @property
    def priority(self) -> np.ndarray:
        return _read_only(self._priority)

    @property
    def penalized(self) -> Tuple[Coordinate, ...]:
        return tuple(self._penalized)

    @property
    def max_distance(self) -> float:
        return self._max_distance

    @property
    def params(self) -> PriorityParams:
        return self._params

    @property
    def visited_count(self) -> int:
        return int(self._visited.sum())

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def in_bounds(self, cell: Coordinate) -> bool:
        return cell.in_bounds(self._width, self._height)

    def can_move_to(self, cell: Coordinate) -> bool:
        """Whether a cell is on the board and not yet visited."""
        return self.in_bounds(cell) and not self._visited[cell.x, cell.y]

    def neighbours(self, cell: Optional[Coordinate] = None) -> Iterator[Coordinate]:
        """Yield unvisited knight targets of a cell (default: the occupant) in canonical order."""
        origin = self._position if cell is None else cell
        for target in knight_targets(origin, self._width, self._height):
            if not self._visited[target.x, target.y]:
                yield target

    def is_complete(self) -> bool:
        return bool(self._visited.all())

    def is_saturated(self) -> bool:
        """Whether no cell anywhere has a non-zero accessibility count."""
        return int(self._accessibility.max()) == 0

    def is_stuck(self) -> bool:
        """
        Whether the remaining cells are mutually unreachable.

        True when the board is incomplete and no unvisited cell has a
        non-zero accessibility count, i.e. every unvisited cell is isolated.
        """
        if self.is_complete():
            return False
        return not bool((self._accessibility[~self._visited] > 0).any())

    # -------------------------------------------------------------------------
    # Mutators
    # -------------------------------------------------------------------------

    def move_to(self, cell: Coordinate) -> None:
        """
        Move the occupant to a cell, marking it visited.

        Raises:
            ValueError: If the cell is off the board
        """
        if not self.in_bounds(cell):
            raise ValueError(f"Cell {cell} is outside a {self._width}x{self._height} board")
        self._position = cell
        self._visited[cell.x, cell.y] = True
        self._regenerate()

    def penalize(self, cell: Coordinate) -> None:
        """
        Suppress a cell's priority by the penalty factor.

        Penalties accumulate; accessibility is unaffected so only the
        priority map is regenerated.
        """
        if not self.in_bounds(cell):
            raise ValueError(f"Cell {cell} is outside a {self._width}x{self._height} board")
        self._penalized.append(cell)
        self._generate_priority_map()

    def copy(self, position: Optional[Coordinate] = None) -> 'BoardState':
        """
        Create a deep copy, optionally with a substituted position.

        Args:
            position: Occupant of the copy (current occupant if None)

        Returns:
            New BoardState sharing no storage with this one
        """
        new_board = BoardState.__new__(BoardState)
        new_board._width = self._width
        new_board._height = self._height
        new_board._params = self._params
        new_board._use_jit = self._use_jit
        new_board._max_distance = self._max_distance
        new_board._penalized = list(self._penalized)
        new_board._visited = self._visited.copy()
        new_board._accessibility = self._accessibility.copy()
        new_board._priority = self._priority.copy()
        new_board._position = self._position

        if position is not None and position != self._position:
            new_board.move_to(position)
        return new_board

    def reset(self, position: Optional[Coordinate] = None) -> 'BoardState':
        """
        Create a fresh single-cell board that keeps this board's penalties.

        Args:
            position: Occupant of the new board (current occupant if None)

        Returns:
            New BoardState with only `position` visited
        """
        start = self._position if position is None else position
        new_board = BoardState(
            self._width, self._height, start,
            params=self._params, use_jit=self._use_jit,
        )
        if self._penalized:
            new_board._penalized = list(self._penalized)
            new_board._generate_priority_map()
        return new_board

    # -------------------------------------------------------------------------
    # Map generation
    # -------------------------------------------------------------------------

    def _regenerate(self) -> None:
        self._generate_step_map()
        self._generate_priority_map()

    def _generate_step_map(self) -> None:
        self._accessibility = compute_accessibility(self._visited, self._use_jit)

    def _generate_priority_map(self) -> None:
        self._priority = compute_priority(
            self._accessibility,
            self._visited,
            self._position,
            self._max_distance,
            self._penalized,
            self._params,
        )

    def __repr__(self) -> str:
        return (f"BoardState({self._width}x{self._height}, position={self._position}, "
                f"visited={self.visited_count}, penalized={len(self._penalized)})")
