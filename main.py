"""
Main entry point for the knight path solver.

This script provides a config-driven interface to run the solver and
optionally watch it work in the terminal.

Usage:
    python main.py --config config.yaml
    python main.py --width 8 --height 8 --start 3 3
    python main.py -W 6 -H 6 --start 0 0 --quiet --save
"""

import argparse
import sys
import time

from knightpath.config import Config
from knightpath.solver import Outcome, TourController, TourResult
from knightpath.visualize import (
    plot_priority_map,
    plot_tour,
    print_board,
    save_run_results,
)


# =============================================================================
# Runner
# =============================================================================

class SolverRunner:
    """
    Orchestrates solver execution based on configuration.
    """

    def __init__(self, config: Config):
        """
        Initialize runner with configuration.

        Args:
            config: Configuration instance
        """
        self.config = config
        self.controller = TourController(config)

    def _render(self, controller: TourController, outcome: Outcome) -> None:
        """Render the board after an iteration."""
        print_board(controller.board)
        print(f"\nIter {controller.iterations}: {outcome.value} | "
              f"Visited {controller.board.visited_count}/"
              f"{controller.board.width * controller.board.height} | "
              f"Restarts {controller.restarts}")

        if self.config.step and not outcome.is_terminal:
            input()
        elif self.config.delay > 0:
            time.sleep(self.config.delay)

    def run(self) -> TourResult:
        """
        Execute the solver based on configuration.

        Returns:
            TourResult of the run
        """
        callback = None if self.config.quiet else self._render
        if not self.config.quiet:
            print_board(self.controller.board)

        return self.controller.run(
            verbose=self.config.quiet,
            log_interval=self.config.log_interval,
            callback=callback,
        )


# =============================================================================
# CLI Interface
# =============================================================================

def parse_args() -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description='Knight Path Solver',
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )

    # Config file
    parser.add_argument(
        '--config', '-c',
        type=str,
        default='config.yaml',
        help='Path to YAML configuration file'
    )

    # Override options
    parser.add_argument(
        '--width', '-W',
        type=int,
        help='Board width (overrides config)'
    )

    parser.add_argument(
        '--height', '-H',
        type=int,
        help='Board height (overrides config)'
    )

    parser.add_argument(
        '--start',
        type=int,
        nargs=2,
        metavar=('X', 'Y'),
        help='Start cell (overrides config)'
    )

    parser.add_argument(
        '--max-restarts',
        type=int,
        help='Oscillation restarts allowed before giving up (overrides config)'
    )

    parser.add_argument(
        '--max-iterations',
        type=int,
        help='Iteration cap (overrides config)'
    )

    parser.add_argument(
        '--accessibility',
        type=str,
        choices=['jit', 'python'],
        help='Accessibility kernel (overrides config)'
    )

    parser.add_argument(
        '--log-interval',
        type=int,
        help='Log progress every N iterations in quiet mode (0 = final line only)'
    )

    parser.add_argument(
        '--quiet', '-q',
        action='store_true',
        help='Do not render the board'
    )

    parser.add_argument(
        '--step',
        action='store_true',
        help='Wait for Enter between iterations'
    )

    parser.add_argument(
        '--delay',
        type=float,
        help='Seconds to pause between rendered iterations'
    )

    parser.add_argument(
        '--save',
        action='store_true',
        help='Save plots alongside path and metadata'
    )

    parser.add_argument(
        '--output-dir', '-o',
        type=str,
        help='Output directory for saved results'
    )

    parser.add_argument(
        '--show',
        action='store_true',
        help='Show plots interactively'
    )

    return parser.parse_args()


def load_config_with_overrides(args: argparse.Namespace) -> Config:
    """
    Load configuration from file and apply CLI overrides.

    Args:
        args: Parsed command line arguments

    Returns:
        Configuration with overrides applied
    """
    try:
        config = Config.from_yaml(args.config)
    except FileNotFoundError:
        print(f"Warning: Config file '{args.config}' not found, using defaults")
        config = Config()
    except Exception as e:
        print(f"Error loading config: {e}")
        sys.exit(1)

    # Apply CLI overrides
    if args.width is not None:
        config.width = args.width
    if args.height is not None:
        config.height = args.height
    if args.start:
        config.start_x, config.start_y = args.start
    if args.max_restarts is not None:
        config.max_restarts = args.max_restarts
    if args.max_iterations is not None:
        config.max_iterations = args.max_iterations
    if args.accessibility:
        config.accessibility = args.accessibility
    if args.log_interval is not None:
        config.log_interval = args.log_interval
    if args.quiet:
        config.quiet = True
    if args.step:
        config.step = True
    if args.delay is not None:
        config.delay = args.delay
    if args.save:
        config.save = True
    if args.output_dir:
        config.output_dir = args.output_dir
    if args.show:
        config.show = True

    return config


def main():
    """Main entry point."""
    args = parse_args()

    # Load configuration
    config = load_config_with_overrides(args)

    # Validate
    errors = config.validate()
    if errors:
        print("Configuration errors:")
        for error in errors:
            print(f"  - {error}")
        sys.exit(1)

    # Print configuration
    config.print_summary()

    # Run solver
    runner = SolverRunner(config)
    result = runner.run()
    board = runner.controller.board

    # Final summary
    print(f"\n{'#'*60}")
    print("# Final Results")
    print(f"{'#'*60}")

    total = config.width * config.height
    if result.complete:
        print(f"✓ DONE: visited all {total} cells")
    else:
        print(f"✗ Incomplete ({result.outcome.value}): "
              f"visited {board.visited_count}/{total} cells")
    print(f"Iterations: {result.iterations:,}, Restarts: {result.restarts}, "
          f"Dead ends: {result.dead_ends} ({result.stuck_dead_ends} isolated), "
          f"Time: {result.elapsed:.2f}s")
    print("Path: " + " ".join(f"{c.x},{c.y}" for c in result.path))

    # Always save path and metadata to a timestamped folder
    metadata = config.to_dict()
    metadata['start'] = [config.start_x, config.start_y]
    metadata.update(result.to_dict())

    saved = save_run_results(
        config.output_dir, board, result.path, metadata, save_plots=config.save
    )
    print(f"\nSaved to {saved['run_folder']}/")
    print("  - path.txt")
    print("  - metadata.json")
    if config.save:
        print("  - tour.png, priority.png")

    if config.show:
        plot_tour(result.path, config.width, config.height, show=True, metadata=metadata)
        plot_priority_map(board, show=True)

    print()
    sys.exit(0 if result.complete else 2)


if __name__ == "__main__":
    main()
