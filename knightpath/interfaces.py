"""
Abstract interfaces for Board and Solver classes.

These interfaces define the contract between the solver core and its
read-only consumers (terminal renderer, plots, CLI).
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, Optional

import numpy as np


class BoardInterface(ABC):
    """
    Abstract interface for board state representations.

    A board state is a W×H grid with a single occupant and the maps derived
    from the set of visited cells.

    Attributes:
        width: Number of columns (x extent)
        height: Number of rows (y extent)
        position: Current occupant cell
    """

    @property
    @abstractmethod
    def width(self) -> int:
        """Board width."""
        pass

    @property
    @abstractmethod
    def height(self) -> int:
        """Board height."""
        pass

    @property
    @abstractmethod
    def position(self) -> Any:
        """Current occupant cell."""
        pass

    @property
    @abstractmethod
    def visited(self) -> np.ndarray:
        """
        Visited map.

        Returns:
            Read-only boolean array of shape (width, height), indexed [x, y].
        """
        pass

    @property
    @abstractmethod
    def accessibility(self) -> np.ndarray:
        """
        Accessibility map.

        Returns:
            Read-only integer array of shape (width, height).
        """
        pass

    @property
    @abstractmethod
    def priority(self) -> np.ndarray:
        """
        Priority map.

        Returns:
            Read-only float array of shape (width, height).
        """
        pass

    @abstractmethod
    def is_complete(self) -> bool:
        """Whether every cell has been visited."""
        pass

    @abstractmethod
    def copy(self) -> 'BoardInterface':
        """
        Create a deep copy of this board state.

        Returns:
            New BoardInterface instance sharing no storage with this one.
        """
        pass


class SolverInterface(ABC):
    """
    Abstract interface for tour solvers.

    A solver repeatedly advances a board state one step at a time until the
    tour is complete or its termination bounds are hit.
    """

    @abstractmethod
    def advance(self) -> Any:
        """
        Perform exactly one solver iteration.

        Returns:
            Outcome of the iteration.
        """
        pass

    @abstractmethod
    def run(
        self,
        max_iterations: Optional[int] = None,
        verbose: bool = False,
        log_interval: int = 0,
        callback: Optional[Callable] = None
    ) -> Any:
        """
        Advance until a terminal outcome or the iteration cap.

        Args:
            max_iterations: Iteration cap (None for the configured default)
            verbose: Whether to print progress
            log_interval: Print progress every N iterations (0 disables)
            callback: Called as callback(solver, outcome) after every iteration

        Returns:
            Run result.
        """
        pass

    @abstractmethod
    def get_board(self) -> BoardInterface:
        """
        Get the current board state.

        Returns:
            Current BoardInterface instance.
        """
        pass
