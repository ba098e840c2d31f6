"""
Knight path solver.

This module provides:
- select_best_move: deterministic greedy move selector over a BoardState
- TourController: drives the selector, backtracks out of dead ends and
  restarts with priority penalties when the selector oscillates

The controller terminates on its own only when the board is complete or its
restart budget is spent. With an unbounded budget it can keep restarting
forever on boards that have no tour from the chosen start, so callers should
also cap the number of iterations (see TourController.run).
"""

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional, Tuple

import numpy as np

from .board import BoardState
from .config import Config
from .interfaces import BoardInterface, SolverInterface
from .utils import KNIGHT_MOVES, Coordinate


class HistoryUnderflowError(RuntimeError):
    """Raised when the controller is asked to undo a move it never made."""


class Outcome(Enum):
    """Result of a single controller iteration."""

    MOVED = 'moved'
    REVERTED_DEAD_END = 'reverted-dead-end'
    REVERTED_OSCILLATION_RESTART = 'reverted-oscillation-restart'
    DONE = 'done'
    EXHAUSTED = 'exhausted'

    @property
    def is_terminal(self) -> bool:
        return self in (Outcome.DONE, Outcome.EXHAUSTED)


# =============================================================================
# Move Selection
# =============================================================================

def select_best_move(board: BoardInterface) -> Optional[Coordinate]:
    """
    Pick the unvisited knight target with the highest priority.

    Candidates are scanned in canonical KNIGHT_MOVES order and compared with
    strict greater-than, so the earliest candidate wins ties. The sentinel
    starts below every valid priority, so a priority of 0 is still selectable.

    Args:
        board: Board state to move on

    Returns:
        Best target cell, or None if no unvisited knight target exists
    """
    best = None
    best_priority = -1.0
    priority = board.priority

    for move in KNIGHT_MOVES:
        target = board.position + move
        if not board.can_move_to(target):
            continue
        if priority[target.x, target.y] > best_priority:
            best = target
            best_priority = priority[target.x, target.y]

    return best


# =============================================================================
# Tour Controller
# =============================================================================

@dataclass
class TourResult:
    """
    Summary of a controller run.

    Attributes:
        outcome: Outcome of the last iteration
        complete: Whether every cell was visited
        path: Start cell followed by every committed move
        visited: Copy of the final visited map
        iterations: Number of advance() calls
        restarts: Number of oscillation restarts performed
        dead_ends: Number of single-step reverts
        stuck_dead_ends: Dead ends where every unvisited cell was isolated
        elapsed: Wall-clock seconds spent in run()
    """

    outcome: Outcome
    complete: bool
    path: List[Coordinate]
    visited: np.ndarray
    iterations: int
    restarts: int
    dead_ends: int
    stuck_dead_ends: int
    elapsed: float = 0.0
    outcome_counts: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            'outcome': self.outcome.value,
            'complete': self.complete,
            'path': [cell.as_tuple() for cell in self.path],
            'path_length': len(self.path),
            'iterations': self.iterations,
            'restarts': self.restarts,
            'dead_ends': self.dead_ends,
            'stuck_dead_ends': self.stuck_dead_ends,
            'elapsed': self.elapsed,
            'outcome_counts': dict(self.outcome_counts),
        }


class TourController(SolverInterface):
    """
    Backtracking/restart controller around the greedy move selector.

    Keeps a snapshot of the board before every committed move together with
    the committed cell, so both stacks always have equal length.
    """

    def __init__(self, config: Config):
        """
        Initialize the controller with a fresh board at the configured start.

        Args:
            config: Run configuration (board size, start, bounds, weights)
        """
        self.config = config
        self._start = Coordinate(config.start_x, config.start_y)
        self._board = BoardState(
            config.width,
            config.height,
            self._start,
            params=config.priority_params(),
            use_jit=config.accessibility == 'jit',
        )
        self._history: List[BoardState] = []
        self._steps: List[Coordinate] = []
        self._last_move: Optional[Coordinate] = None
        self._restarts = 0
        self._iterations = 0
        self._dead_ends = 0
        self._stuck_dead_ends = 0
        self._exhausted = False

    def get_board(self) -> BoardState:
        return self._board

    @property
    def board(self) -> BoardState:
        return self._board

    @property
    def start(self) -> Coordinate:
        return self._start

    @property
    def history(self) -> Tuple[BoardState, ...]:
        return tuple(self._history)

    @property
    def steps(self) -> Tuple[Coordinate, ...]:
        return tuple(self._steps)

    @property
    def path(self) -> List[Coordinate]:
        return [self._start] + self._steps

    @property
    def last_move(self) -> Optional[Coordinate]:
        return self._last_move

    @property
    def restarts(self) -> int:
        return self._restarts

    @property
    def iterations(self) -> int:
        return self._iterations

    @property
    def dead_ends(self) -> int:
        return self._dead_ends

    @property
    def stuck_dead_ends(self) -> int:
        return self._stuck_dead_ends

    # -------------------------------------------------------------------------
    # Iteration
    # -------------------------------------------------------------------------

    def advance(self) -> Outcome:
        """
        Perform one controller iteration.

        Returns:
            MOVED, REVERTED_DEAD_END, REVERTED_OSCILLATION_RESTART, DONE,
            or EXHAUSTED once no further recovery is possible
        """
        if self._exhausted:
            return Outcome.EXHAUSTED
        self._iterations += 1

        move = select_best_move(self._board)

        if move is None:
            if self._board.is_complete():
                return Outcome.DONE
            return self._revert_dead_end()

        if move == self._last_move:
            return self._restart(move)

        self.commit(move)
        return Outcome.MOVED

    def commit(self, move: Coordinate) -> None:
        """
        Snapshot the live board and move onto a cell.

        Args:
            move: Cell to occupy next
        """
        self._history.append(self._board.copy())
        self._board.move_to(move)
        self._steps.append(move)
        self._last_move = move

    def _pop(self) -> Tuple[BoardState, Coordinate]:
        if not self._history:
            raise HistoryUnderflowError("No committed move to undo")
        return self._history.pop(), self._steps.pop()

    def _revert_dead_end(self) -> Outcome:
        if not self._history:
            # The start cell itself has no knight moves.
            self._exhausted = True
            return Outcome.EXHAUSTED

        self._dead_ends += 1
        if self._board.is_stuck():
            self._stuck_dead_ends += 1

        self._board, cell = self._pop()
        self._board.penalize(cell)
        return Outcome.REVERTED_DEAD_END

    def _restart(self, candidate: Coordinate) -> Outcome:
        if self._restarts >= self.config.max_restarts:
            self._exhausted = True
            return Outcome.EXHAUSTED

        if self._history:
            self._pop()
        self._restarts += 1

        origin = self._history[0] if self._history else self._board
        board = origin.reset(self._start)
        for cell in self._steps[len(self._steps) // 2:]:
            board.penalize(cell)
        board.penalize(candidate)

        self._board = board
        self._history.clear()
        self._steps.clear()
        self._last_move = None
        return Outcome.REVERTED_OSCILLATION_RESTART

    # -------------------------------------------------------------------------
    # Driver
    # -------------------------------------------------------------------------

    def run(
        self,
        max_iterations: Optional[int] = None,
        verbose: bool = False,
        log_interval: int = 0,
        callback: Optional[Callable[['TourController', Outcome], None]] = None
    ) -> TourResult:
        """
        Advance until the tour is done, exhausted, or the iteration cap is hit.

        Args:
            max_iterations: Iteration cap (Config.max_iterations if None)
            verbose: Whether to print progress
            log_interval: Print progress every N iterations (0 = final line only)
            callback: Called as callback(controller, outcome) after each iteration

        Returns:
            TourResult for the run
        """
        limit = max_iterations if max_iterations is not None else self.config.max_iterations
        counts = {outcome.value: 0 for outcome in Outcome}
        outcome = Outcome.DONE if self._board.is_complete() else Outcome.MOVED
        start_time = time.time()

        for _ in range(limit):
            outcome = self.advance()
            counts[outcome.value] += 1

            if callback is not None:
                callback(self, outcome)

            if verbose and log_interval > 0 and self._iterations % log_interval == 0:
                self._print_progress(outcome, time.time() - start_time)

            if outcome.is_terminal:
                break

        elapsed = time.time() - start_time
        if verbose:
            self._print_progress(outcome, elapsed)

        return TourResult(
            outcome=outcome,
            complete=self._board.is_complete(),
            path=self.path,
            visited=np.array(self._board.visited),
            iterations=self._iterations,
            restarts=self._restarts,
            dead_ends=self._dead_ends,
            stuck_dead_ends=self._stuck_dead_ends,
            elapsed=elapsed,
            outcome_counts=counts,
        )

    def _print_progress(self, outcome: Outcome, elapsed: float) -> None:
        total = self._board.width * self._board.height
        print(f"Iter {self._iterations:>7}: "
              f"Visited={self._board.visited_count:>4}/{total}, "
              f"Depth={len(self._steps):>4}, "
              f"Restarts={self._restarts:>4}, "
              f"DeadEnds={self._dead_ends:>5}, "
              f"Last={outcome.value}, "
              f"Time={elapsed:>5.1f}s")


def create_solver(config: Config) -> TourController:
    """
    Factory function to create a solver from configuration.

    Args:
        config: Run configuration

    Returns:
        TourController instance
    """
    return TourController(config)
