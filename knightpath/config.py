"""
Configuration management for the knight path solver.

This module provides a clean interface for loading and validating
configuration from YAML files.
"""

import yaml
from dataclasses import dataclass, fields
from typing import List

from .utils import (
    DISTANCE_TO_VALUE_WEIGHT,
    NEIGHBOUR_BLEND_WEIGHT,
    NEIGHBOUR_CYCLES,
    NEIGHBOUR_THRESHOLD,
    PENALTY_FACTOR,
    PriorityParams,
)


@dataclass
class Config:
    """
    Configuration container for a solver run.

    Attributes:
        width: Board width (x extent)
        height: Board height (y extent)
        start_x: Start cell x coordinate
        start_y: Start cell y coordinate
        max_restarts: Oscillation restarts allowed before giving up
        max_iterations: Iteration cap for a run
        accessibility: Accessibility kernel ('jit' or 'python')
        distance_weight: Blend between accessibility and distance scores
        diffusion_weight: Pull of diffused neighbours toward 1
        diffusion_threshold: Minimum priority that diffuses to neighbours
        diffusion_cycles: Diffusion passes per map generation
        penalty_factor: Priority multiplier per penalty
        quiet: Disable board rendering
        step: Wait for Enter between iterations
        delay: Seconds to sleep between rendered iterations
        log_interval: Progress line every N iterations (0 = final line only)
        show: Whether to show plots
        save: Whether to save plots and path data
        output_dir: Directory to save results
    """

    # Board configuration
    width: int = 8
    height: int = 8
    start_x: int = 3
    start_y: int = 3

    # Solver configuration
    max_restarts: int = 100
    max_iterations: int = 100000
    accessibility: str = 'jit'
    distance_weight: float = DISTANCE_TO_VALUE_WEIGHT
    diffusion_weight: float = NEIGHBOUR_BLEND_WEIGHT
    diffusion_threshold: float = NEIGHBOUR_THRESHOLD
    diffusion_cycles: int = NEIGHBOUR_CYCLES
    penalty_factor: float = PENALTY_FACTOR

    # Rendering
    quiet: bool = False
    step: bool = False
    delay: float = 0.0
    log_interval: int = 0

    # Visualization and output
    show: bool = False
    save: bool = False
    output_dir: str = 'results'

    @classmethod
    def from_yaml(cls, path: str) -> 'Config':
        """
        Load configuration from YAML file.

        Args:
            path: Path to YAML configuration file

        Returns:
            Config instance
        """
        with open(path, 'r') as f:
            data = yaml.safe_load(f)

        return cls.from_dict(data or {})

    @classmethod
    def from_dict(cls, data: dict) -> 'Config':
        """
        Create configuration from dictionary.

        Accepts 'size' as shorthand for a square board and 'start' as an
        [x, y] pair.

        Args:
            data: Configuration dictionary

        Returns:
            Config instance

        Raises:
            ValueError: If 'start' is not a pair
        """
        data = dict(data)

        size = data.pop('size', None)
        if size is not None:
            data.setdefault('width', size)
            data.setdefault('height', size)

        start = data.pop('start', None)
        if start is not None:
            if len(start) != 2:
                raise ValueError(f"start must be an [x, y] pair, got {start}")
            data.setdefault('start_x', start[0])
            data.setdefault('start_y', start[1])

        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})

    def to_dict(self) -> dict:
        """Convert configuration to dictionary."""
        return {f.name: getattr(self, f.name) for f in fields(self)}

    def priority_params(self) -> PriorityParams:
        """Priority constants for the board."""
        return PriorityParams(
            distance_weight=self.distance_weight,
            diffusion_weight=self.diffusion_weight,
            diffusion_threshold=self.diffusion_threshold,
            diffusion_cycles=self.diffusion_cycles,
            penalty_factor=self.penalty_factor,
        )

    def validate(self) -> List[str]:
        """
        Validate configuration values.

        Returns:
            List of validation error messages (empty if valid)
        """
        errors = []

        # Validate board
        if self.width < 1 or self.height < 1:
            errors.append(f"Board size must be positive, got {self.width}x{self.height}")
        elif not (0 <= self.start_x < self.width and 0 <= self.start_y < self.height):
            errors.append(f"Start ({self.start_x}, {self.start_y}) is outside the "
                          f"{self.width}x{self.height} board")

        # Validate bounds
        if self.max_restarts < 0:
            errors.append(f"max_restarts must be non-negative, got {self.max_restarts}")
        if self.max_iterations < 1:
            errors.append(f"max_iterations must be positive, got {self.max_iterations}")

        # Validate accessibility kernel
        valid_kernels = ['jit', 'python']
        if self.accessibility not in valid_kernels:
            errors.append(f"Invalid accessibility '{self.accessibility}', must be one of {valid_kernels}")

        # Validate weights
        for name in ('distance_weight', 'diffusion_weight', 'diffusion_threshold'):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                errors.append(f"{name} must be in [0, 1], got {value}")
        if not 0.0 < self.penalty_factor <= 1.0:
            errors.append(f"penalty_factor must be in (0, 1], got {self.penalty_factor}")
        if self.diffusion_cycles < 0:
            errors.append(f"diffusion_cycles must be non-negative, got {self.diffusion_cycles}")

        # Validate rendering
        if self.delay < 0:
            errors.append(f"delay must be non-negative, got {self.delay}")
        if self.log_interval < 0:
            errors.append(f"log_interval must be non-negative, got {self.log_interval}")

        return errors

    def print_summary(self) -> None:
        """Print configuration summary."""
        print("=" * 60)
        print("Configuration Summary")
        print("=" * 60)
        print(f"Board: {self.width}x{self.height}")
        print(f"Start: ({self.start_x}, {self.start_y})")
        print(f"Max restarts: {self.max_restarts:,}")
        print(f"Max iterations: {self.max_iterations:,}")
        print(f"Accessibility: {self.accessibility}")
        print(f"Weights: distance={self.distance_weight}, "
              f"diffusion={self.diffusion_weight}@{self.diffusion_threshold} x{self.diffusion_cycles}, "
              f"penalty={self.penalty_factor}")
        if self.log_interval > 0:
            print(f"Log interval: {self.log_interval:,}")
        print(f"Rendering: {'off' if self.quiet else ('step' if self.step else 'on')}")
        print(f"Save: {self.save}" + (f" → {self.output_dir}" if self.save else ""))
        print("=" * 60)
