"""
Visualization functions for the knight path solver.

This module provides:
- Terminal rendering of the travel, accessibility and priority maps
- Tour path and priority heatmap plots
- Start-cell sweep plots
- Save functionality with metadata
"""

import json
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Sequence

import matplotlib.pyplot as plt
import numpy as np

from .interfaces import BoardInterface


# =============================================================================
# Terminal Rendering
# =============================================================================

RESET = "\x1b[0m"
WHITE = "\x1b[38;5;255m"


def priority_colour(value: float) -> str:
    """ANSI 256-colour escape for a priority value."""
    if value > 0.9:
        return "\x1b[38;5;4m"
    if value > 0.75:
        return "\x1b[38;5;48m"
    if value > 0.5:
        return "\x1b[38;5;228m"
    return "\x1b[38;5;203m"


def render_board(board: BoardInterface, colour: bool = True) -> str:
    """
    Render the board as three side-by-side text panels.

    Each output line is one board row (y). Panels, left to right:
    travel map ('%' occupant, 'X' visited, '-' open), two-digit
    accessibility counts, and colour-coded priorities.

    Args:
        board: Board to render
        colour: Whether to emit ANSI colour escapes

    Returns:
        Multi-line string
    """
    position = board.position
    visited = board.visited
    accessibility = board.accessibility
    priority = board.priority

    lines = []
    for y in range(board.height):
        travel, steps, prios = [], [], []
        for x in range(board.width):
            here = position.x == x and position.y == y

            if here:
                travel.append("%|")
            else:
                travel.append(("X" if visited[x, y] else "-") + "|")

            steps.append(f"{int(accessibility[x, y]):02d}|")

            if here:
                cell = " [] "
                prios.append(f"{WHITE}{cell}{RESET}|" if colour else f"{cell}|")
            else:
                cell = f"{priority[x, y]:.2f}"
                if colour:
                    prios.append(f"{priority_colour(priority[x, y])}{cell}{RESET}|")
                else:
                    prios.append(f"{cell}|")

        lines.append("".join(travel) + "  " + "".join(steps) + "  " + "".join(prios))
    return "\n".join(lines)


def print_board(board: BoardInterface, clear: bool = True, colour: bool = True) -> None:
    """Print the rendered board, optionally clearing the terminal first."""
    if clear:
        print("\x1b[2J\x1b[H", end="")
    print(render_board(board, colour=colour))


# =============================================================================
# Plots
# =============================================================================

def plot_tour(
    path: Sequence,
    width: int,
    height: int,
    filename: Optional[str] = None,
    show: bool = False,
    metadata: Optional[Dict] = None
) -> Optional[str]:
    """
    Plot the knight path over the board grid.

    Args:
        path: Ordered cells (objects with x, y) starting at the start cell
        width: Board width
        height: Board height
        filename: Optional path to save the figure
        show: Whether to display the plot
        metadata: Optional dict with run parameters

    Returns:
        Filename if saved, None otherwise
    """
    fig, ax = plt.subplots(figsize=(max(4, width), max(4, height)))

    # Checkerboard background
    board = np.indices((height, width)).sum(axis=0) % 2
    ax.imshow(board, cmap='Greys', alpha=0.25, origin='lower',
              extent=(-0.5, width - 0.5, -0.5, height - 0.5))

    xs = [cell.x for cell in path]
    ys = [cell.y for cell in path]
    ax.plot(xs, ys, '-', color='steelblue', linewidth=1.5, alpha=0.8)
    ax.scatter(xs, ys, c=np.arange(len(path)), cmap='viridis', s=60, zorder=3)

    if path:
        ax.scatter([xs[0]], [ys[0]], marker='s', s=160, facecolors='none',
                   edgecolors='green', linewidths=2, zorder=4, label='start')
        ax.scatter([xs[-1]], [ys[-1]], marker='X', s=160, color='red',
                   zorder=4, label='end')
        ax.legend(loc='upper right', fontsize=9)

    if width * height <= 144:
        for index, cell in enumerate(path):
            ax.annotate(str(index), (cell.x, cell.y), textcoords='offset points',
                        xytext=(0, 7), ha='center', fontsize=7)

    ax.set_xlim(-0.5, width - 0.5)
    ax.set_ylim(-0.5, height - 0.5)
    ax.set_xticks(range(width))
    ax.set_yticks(range(height))
    ax.set_aspect('equal')
    ax.set_xlabel('x')
    ax.set_ylabel('y')

    title = f'Knight Path {len(path)}/{width * height}'
    if metadata:
        subtitle_parts = []
        if 'start' in metadata:
            subtitle_parts.append(f"Start={tuple(metadata['start'])}")
        if 'outcome' in metadata:
            subtitle_parts.append(f"Outcome={metadata['outcome']}")
        if 'restarts' in metadata:
            subtitle_parts.append(f"Restarts={metadata['restarts']}")
        if subtitle_parts:
            title += '\n' + ' | '.join(subtitle_parts)
    ax.set_title(title, fontsize=12, fontweight='bold')

    plt.tight_layout()

    if filename:
        plt.savefig(filename, dpi=150, bbox_inches='tight')
        if not show:
            plt.close(fig)
        return filename

    if show:
        plt.show()
    else:
        plt.close(fig)

    return None


def plot_priority_map(
    board: BoardInterface,
    filename: Optional[str] = None,
    show: bool = False
) -> Optional[str]:
    """
    Plot the priority and accessibility maps as heatmaps.

    Args:
        board: Board to plot
        filename: Optional path to save the figure
        show: Whether to display the plot

    Returns:
        Filename if saved, None otherwise
    """
    fig, axes = plt.subplots(1, 2, figsize=(12, 5))

    for ax, grid, name, cmap in (
        (axes[0], board.priority, 'Priority', 'viridis'),
        (axes[1], board.accessibility, 'Accessibility', 'magma'),
    ):
        # Grids are indexed [x, y]; transpose so x runs horizontally.
        image = ax.imshow(np.asarray(grid).T, origin='lower', cmap=cmap)
        ax.scatter([board.position.x], [board.position.y], marker='*',
                   s=200, color='red')
        ax.set_title(name, fontsize=12, fontweight='bold')
        ax.set_xlabel('x')
        ax.set_ylabel('y')
        fig.colorbar(image, ax=ax, fraction=0.046, pad=0.04)

    plt.tight_layout()

    if filename:
        plt.savefig(filename, dpi=150, bbox_inches='tight')
        if not show:
            plt.close(fig)
        return filename

    if show:
        plt.show()
    else:
        plt.close(fig)

    return None


def plot_sweep(
    rates: np.ndarray,
    filename: Optional[str] = None,
    show: bool = False,
    title: str = 'Completion Rate by Start Cell'
) -> Optional[str]:
    """
    Plot a per-start-cell grid of values (indexed [x, y]).

    Args:
        rates: Array of shape (width, height)
        filename: Optional path to save the figure
        show: Whether to display the plot
        title: Figure title

    Returns:
        Filename if saved, None otherwise
    """
    fig, ax = plt.subplots(figsize=(6, 5))
    image = ax.imshow(np.asarray(rates).T, origin='lower', cmap='RdYlGn')
    ax.set_xlabel('start x')
    ax.set_ylabel('start y')
    ax.set_title(title, fontsize=12, fontweight='bold')
    fig.colorbar(image, ax=ax, fraction=0.046, pad=0.04)
    plt.tight_layout()

    if filename:
        plt.savefig(filename, dpi=150, bbox_inches='tight')
        if not show:
            plt.close(fig)
        return filename

    if show:
        plt.show()
    else:
        plt.close(fig)

    return None


# =============================================================================
# Saving
# =============================================================================

def save_path(path: Sequence, filename: str) -> str:
    """
    Save a path as plain text, one 'x,y' pair per line in visiting order.

    Args:
        path: Ordered cells
        filename: Path to save the file

    Returns:
        Path to saved file
    """
    with open(filename, 'w') as f:
        for cell in path:
            f.write(f"{cell.x},{cell.y}\n")
    return filename


def create_run_output_folder(
    base_output_dir: str,
    width: int,
    height: int,
    start: Sequence[int]
) -> str:
    """
    Create a timestamped output folder for a run.

    Structure: base_output_dir/{W}x{H}/run_{datetime}_start{x}-{y}/

    Returns:
        Path to created folder
    """
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    run_folder = (Path(base_output_dir) / f"{width}x{height}"
                  / f"run_{timestamp}_start{start[0]}-{start[1]}")
    run_folder.mkdir(parents=True, exist_ok=True)
    return str(run_folder)


def _to_json(value):
    if isinstance(value, np.ndarray):
        return value.tolist()
    if isinstance(value, (np.integer,)):
        return int(value)
    if isinstance(value, (np.floating,)):
        return float(value)
    return value


def save_run_results(
    output_dir: str,
    board: BoardInterface,
    path: List,
    metadata: Dict,
    save_plots: bool = True
) -> Dict[str, str]:
    """
    Save all results for a single run to a timestamped folder.

    Always saves:
    - path.txt: visiting order, one 'x,y' per line
    - metadata.json: run parameters and results

    Optionally saves:
    - tour.png: path plot
    - priority.png: priority/accessibility heatmaps of the final board

    Args:
        output_dir: Base output directory
        board: Final board state
        path: Ordered visited cells
        metadata: Dict with all run parameters
        save_plots: Whether to save plots

    Returns:
        Dict mapping result type to filename
    """
    start = metadata.get('start', (path[0].x, path[0].y) if path else (0, 0))
    run_folder = create_run_output_folder(output_dir, board.width, board.height, start)
    folder = Path(run_folder)

    saved_files = {'run_folder': run_folder}

    saved_files['path'] = save_path(path, str(folder / "path.txt"))

    json_metadata = {k: _to_json(v) for k, v in metadata.items()}
    json_metadata['timestamp'] = datetime.now().isoformat()
    json_file = folder / "metadata.json"
    with open(json_file, 'w') as f:
        json.dump(json_metadata, f, indent=2)
    saved_files['metadata'] = str(json_file)

    if save_plots:
        saved_files['tour'] = plot_tour(
            path, board.width, board.height,
            filename=str(folder / "tour.png"), metadata=metadata,
        )
        saved_files['priority'] = plot_priority_map(
            board, filename=str(folder / "priority.png"),
        )

    return saved_files
