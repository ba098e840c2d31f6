"""
Utility functions for the knight path solver.

This module contains:
- Coordinate value type and the canonical knight move set
- Tunable priority constants
- JIT-compiled accessibility computation (with a pure-Python reference)
- Priority map passes (raw score, normalization, diffusion, penalties)
"""

import math
from dataclasses import dataclass
from typing import Iterable, Iterator, List, Tuple

import jax
import jax.numpy as jnp
import numpy as np


# =============================================================================
# Coordinates and Moves
# =============================================================================

@dataclass(frozen=True)
class Coordinate:
    """Immutable 2D integer vector."""

    x: int
    y: int

    def __add__(self, other: 'Coordinate') -> 'Coordinate':
        return Coordinate(self.x + other.x, self.y + other.y)

    def distance(self, other: 'Coordinate') -> float:
        """Euclidean distance to another coordinate."""
        return math.sqrt((self.x - other.x) ** 2 + (self.y - other.y) ** 2)

    def length(self) -> float:
        """Euclidean length of the vector."""
        return math.sqrt(self.x * self.x + self.y * self.y)

    def in_bounds(self, width: int, height: int) -> bool:
        return 0 <= self.x < width and 0 <= self.y < height

    def as_tuple(self) -> Tuple[int, int]:
        return (self.x, self.y)

    def __repr__(self) -> str:
        return f"({self.x}, {self.y})"


# Canonical order: every tie in the solver is broken by position in this list.
KNIGHT_MOVES: Tuple[Coordinate, ...] = (
    Coordinate(-2, 1),
    Coordinate(-1, 2),
    Coordinate(1, -2),
    Coordinate(2, -1),
    Coordinate(-2, -1),
    Coordinate(-1, -2),
    Coordinate(1, 2),
    Coordinate(2, 1),
)


def knight_targets(cell: Coordinate, width: int, height: int) -> Iterator[Coordinate]:
    """Yield in-bounds knight targets of a cell in canonical order."""
    for move in KNIGHT_MOVES:
        target = cell + move
        if target.in_bounds(width, height):
            yield target


# =============================================================================
# Priority Constants
# =============================================================================

DISTANCE_TO_VALUE_WEIGHT = 0.5
NEIGHBOUR_BLEND_WEIGHT = 0.8
NEIGHBOUR_THRESHOLD = 0.95
NEIGHBOUR_CYCLES = 2
PENALTY_FACTOR = 0.25


@dataclass(frozen=True)
class PriorityParams:
    """
    Tunable constants of the priority map.

    Attributes:
        distance_weight: Blend factor between accessibility score and distance score
        diffusion_weight: How far a diffused neighbour is pulled toward 1
        diffusion_threshold: Minimum snapshot priority that diffuses to neighbours
        diffusion_cycles: Number of diffusion passes per generation
        penalty_factor: Multiplier applied once per penalty entry
    """

    distance_weight: float = DISTANCE_TO_VALUE_WEIGHT
    diffusion_weight: float = NEIGHBOUR_BLEND_WEIGHT
    diffusion_threshold: float = NEIGHBOUR_THRESHOLD
    diffusion_cycles: int = NEIGHBOUR_CYCLES
    penalty_factor: float = PENALTY_FACTOR


# =============================================================================
# Accessibility (Warnsdorff degree)
# =============================================================================

@jax.jit
def compute_accessibility_jit(visited: jnp.ndarray) -> jnp.ndarray:
    """
    Count in-bounds unvisited knight neighbours of every cell (JIT-compiled).

    The open-cell mask is padded by 2 on every side so each knight offset
    becomes a plain shifted slice; padding cells count as closed.

    Args:
        visited: Boolean array of shape (W, H)

    Returns:
        Integer array of shape (W, H)
    """
    width, height = visited.shape
    open_cells = jnp.pad(jnp.logical_not(visited).astype(jnp.int32), 2)
    counts = jnp.zeros((width, height), dtype=jnp.int32)
    for move in KNIGHT_MOVES:
        counts = counts + open_cells[
            2 + move.x:2 + move.x + width,
            2 + move.y:2 + move.y + height,
        ]
    return counts


def compute_accessibility_python(visited: np.ndarray) -> np.ndarray:
    """
    Reference loop implementation of the accessibility count.

    Args:
        visited: Boolean array of shape (W, H)

    Returns:
        Integer array of shape (W, H)
    """
    width, height = visited.shape
    counts = np.zeros((width, height), dtype=np.int64)
    for x in range(width):
        for y in range(height):
            for target in knight_targets(Coordinate(x, y), width, height):
                if not visited[target.x, target.y]:
                    counts[x, y] += 1
    return counts


def compute_accessibility(visited: np.ndarray, use_jit: bool = True) -> np.ndarray:
    """Compute the accessibility map as a numpy int array."""
    if use_jit:
        return np.asarray(compute_accessibility_jit(jnp.asarray(visited)), dtype=np.int64)
    return compute_accessibility_python(visited)


# =============================================================================
# Priority Passes
# =============================================================================

def compute_raw_priority(
    accessibility: np.ndarray,
    visited: np.ndarray,
    position: Coordinate,
    max_distance: float,
    distance_weight: float = DISTANCE_TO_VALUE_WEIGHT
) -> np.ndarray:
    """
    Blend the accessibility score with closeness to the current position.

    value    = 1 - (acc - min) / max        (1 everywhere when max == 0)
    distance = 1 - dist(cell, position) / max_distance
    raw      = value + (distance - value) * distance_weight

    Args:
        accessibility: Accessibility map
        visited: Visited map
        position: Current occupant cell
        max_distance: Board diagonal length
        distance_weight: Blend factor

    Returns:
        Raw priority map, 0 on visited cells
    """
    minimum = int(accessibility.min())
    maximum = int(accessibility.max())

    if maximum > 0:
        value = 1.0 - (accessibility - minimum) / maximum
    else:
        value = np.ones(accessibility.shape, dtype=np.float64)

    xs, ys = np.indices(accessibility.shape)
    distance = np.sqrt((xs - position.x) ** 2 + (ys - position.y) ** 2)
    closeness = 1.0 - distance / max_distance

    raw = value + (closeness - value) * distance_weight
    raw[visited] = 0.0
    return raw


def normalize_priority(raw: np.ndarray, visited: np.ndarray) -> Tuple[np.ndarray, bool]:
    """
    Rescale unvisited raw scores into [0, 1].

    Args:
        raw: Raw priority map
        visited: Visited map

    Returns:
        Tuple of (normalized map, degenerate flag). The flag is set when the
        unvisited scores span zero width; those cells are then set to 1.
    """
    priority = np.zeros(raw.shape, dtype=np.float64)
    unvisited = ~visited
    if not unvisited.any():
        return priority, False

    lowest = raw[unvisited].min()
    highest = raw[unvisited].max()
    span = highest - lowest

    if span > 0:
        priority[unvisited] = (raw[unvisited] - lowest) / span
        return priority, False

    priority[unvisited] = 1.0
    return priority, True


def diffuse_priority(
    priority: np.ndarray,
    visited: np.ndarray,
    cycles: int = NEIGHBOUR_CYCLES,
    threshold: float = NEIGHBOUR_THRESHOLD,
    weight: float = NEIGHBOUR_BLEND_WEIGHT
) -> np.ndarray:
    """
    Pull knight neighbours of high-priority cells toward 1, in place.

    Each cycle reads from a snapshot taken at its start, so the result does
    not depend on iteration order within a cycle.

    Args:
        priority: Normalized priority map (modified in place)
        visited: Visited map
        cycles: Number of diffusion passes
        threshold: Minimum snapshot value that diffuses
        weight: Blend factor toward 1

    Returns:
        The same priority array
    """
    width, height = priority.shape
    for _ in range(cycles):
        snapshot = priority.copy()
        for x in range(width):
            for y in range(height):
                if snapshot[x, y] < threshold:
                    continue
                for target in knight_targets(Coordinate(x, y), width, height):
                    if visited[target.x, target.y]:
                        continue
                    old = snapshot[target.x, target.y]
                    value = old + (1.0 - old) * weight
                    if not math.isfinite(value):
                        priority[target.x, target.y] = 1.0
                        return priority
                    priority[target.x, target.y] = value
    return priority


def apply_penalties(
    priority: np.ndarray,
    penalized: Iterable[Coordinate],
    factor: float = PENALTY_FACTOR
) -> np.ndarray:
    """Multiply each penalized cell by the factor, once per occurrence."""
    for cell in penalized:
        priority[cell.x, cell.y] *= factor
    return priority


def compute_priority(
    accessibility: np.ndarray,
    visited: np.ndarray,
    position: Coordinate,
    max_distance: float,
    penalized: List[Coordinate],
    params: PriorityParams
) -> np.ndarray:
    """
    Run all four priority passes.

    Returns:
        Priority map: 0 on visited cells, [0, 1] elsewhere
    """
    raw = compute_raw_priority(
        accessibility, visited, position, max_distance, params.distance_weight
    )
    priority, degenerate = normalize_priority(raw, visited)
    if not degenerate:
        diffuse_priority(
            priority, visited,
            cycles=params.diffusion_cycles,
            threshold=params.diffusion_threshold,
            weight=params.diffusion_weight,
        )
    return apply_penalties(priority, penalized, params.penalty_factor)
