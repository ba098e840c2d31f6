"""
Knight Path Solver Package

This package computes near-Hamiltonian knight paths over W×H boards using a
Warnsdorff accessibility heuristic blended with distance, priority diffusion,
and a backtracking/restart controller driven by priority penalties.

Modules:
    - interfaces: Abstract base classes for Board and Solver
    - utils: Coordinates, knight moves, JIT accessibility and priority passes
    - board: Board state with derived accessibility/priority maps
    - solver: Move selector and tour controller
    - config: Configuration management
    - visualize: Terminal rendering, plots and result saving
"""

from .interfaces import BoardInterface, SolverInterface
from .utils import Coordinate, KNIGHT_MOVES, PriorityParams
from .board import BoardState
from .solver import (
    HistoryUnderflowError,
    Outcome,
    TourController,
    TourResult,
    create_solver,
    select_best_move,
)
from .config import Config
from .visualize import (
    render_board,
    print_board,
    plot_tour,
    plot_priority_map,
    plot_sweep,
    save_path,
    save_run_results,
    create_run_output_folder,
)

__all__ = [
    'BoardInterface',
    'SolverInterface',
    'Coordinate',
    'KNIGHT_MOVES',
    'PriorityParams',
    'BoardState',
    'HistoryUnderflowError',
    'Outcome',
    'TourController',
    'TourResult',
    'create_solver',
    'select_best_move',
    'Config',
    'render_board',
    'print_board',
    'plot_tour',
    'plot_priority_map',
    'plot_sweep',
    'save_path',
    'save_run_results',
    'create_run_output_folder',
]
