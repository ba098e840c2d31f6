"""
Test suite for board state and map generation.

Tests verify:
1. Coordinate arithmetic and the canonical move set
2. Accessibility maps (JIT kernel vs reference loop, recount on every change)
3. Priority maps (ranges, degeneracy fallbacks, diffusion, penalties)
4. Copy/reset semantics and read-only accessors
"""

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import math

import jax.numpy as jnp
import numpy as np
import pytest

from knightpath.board import BoardState
from knightpath.utils import (
    KNIGHT_MOVES,
    Coordinate,
    compute_accessibility_jit,
    compute_accessibility_python,
    compute_raw_priority,
    diffuse_priority,
    normalize_priority,
)


def count_open_neighbours(visited, x, y):
    """Independent recount of in-bounds unvisited knight neighbours."""
    width, height = visited.shape
    count = 0
    for dx, dy in [(1, 2), (2, 1), (-1, 2), (-2, 1), (1, -2), (2, -1), (-1, -2), (-2, -1)]:
        nx, ny = x + dx, y + dy
        if 0 <= nx < width and 0 <= ny < height and not visited[nx, ny]:
            count += 1
    return count


def walk(board, moves):
    """Commit a sequence of cells onto a board."""
    for cell in moves:
        board.move_to(cell)
    return board


# =============================================================================
# Coordinate / Move Set Tests
# =============================================================================

def test_coordinate_arithmetic():
    """Test addition, distance, length and hashing."""
    a = Coordinate(1, 2)
    b = Coordinate(3, 4)

    assert a + b == Coordinate(4, 6)
    assert Coordinate(0, 0).distance(Coordinate(3, 4)) == pytest.approx(5.0)
    assert Coordinate(3, 4).length() == pytest.approx(5.0)
    assert len({a, Coordinate(1, 2), b}) == 2
    assert Coordinate(0, 0).in_bounds(1, 1)
    assert not Coordinate(-1, 0).in_bounds(5, 5)
    assert not Coordinate(0, 5).in_bounds(5, 5)

    print("Coordinate arithmetic test passed")


def test_knight_move_order():
    """Test the canonical knight move order."""
    expected = [(-2, 1), (-1, 2), (1, -2), (2, -1), (-2, -1), (-1, -2), (1, 2), (2, 1)]
    assert [m.as_tuple() for m in KNIGHT_MOVES] == expected
    assert len(set(KNIGHT_MOVES)) == 8

    print("Knight move order test passed")


# =============================================================================
# Accessibility Tests
# =============================================================================

def test_fresh_board():
    """Test a fresh board has exactly the start cell visited."""
    board = BoardState(5, 5, Coordinate(2, 2))

    assert board.position == Coordinate(2, 2)
    assert board.visited_count == 1
    assert board.visited[2, 2]
    assert board.max_distance == pytest.approx(math.sqrt(50))
    assert board.penalized == ()
    assert not board.is_complete()

    print("Fresh board test passed")


def test_accessibility_values():
    """Test known accessibility counts on an 8x8 board."""
    board = BoardState(8, 8, Coordinate(3, 3))

    assert board.accessibility[0, 0] == 2
    # (1, 2) reaches (3, 3), which is visited, plus two off-board targets.
    assert board.accessibility[1, 2] == 5
    assert board.accessibility[3, 3] == 8

    print("Accessibility values test passed")


def test_accessibility_recomputed_after_moves():
    """Test accessibility always equals a fresh recount."""
    board = BoardState(6, 7, Coordinate(0, 0))
    for cell in [Coordinate(1, 2), Coordinate(3, 3), Coordinate(5, 4), Coordinate(4, 6)]:
        board.move_to(cell)
        visited = np.array(board.visited)
        for x in range(6):
            for y in range(7):
                assert board.accessibility[x, y] == count_open_neighbours(visited, x, y), \
                    f"Stale accessibility at ({x}, {y}) after moving to {cell}"

    print("Accessibility recompute test passed")


def test_jit_matches_python():
    """Test the JIT kernel agrees with the reference loop."""
    rng = np.random.default_rng(0)
    for shape in [(1, 1), (2, 3), (3, 3), (5, 8), (8, 8)]:
        for _ in range(3):
            visited = rng.random(shape) < 0.4
            jit_counts = np.asarray(compute_accessibility_jit(jnp.asarray(visited)))
            py_counts = compute_accessibility_python(visited)
            assert np.array_equal(jit_counts, py_counts), f"Mismatch for shape {shape}"

    print("JIT vs Python accessibility test passed")


def test_python_kernel_board_matches_jit_board():
    """Test both kernels give identical boards."""
    moves = [Coordinate(1, 2), Coordinate(3, 3), Coordinate(5, 4)]
    a = walk(BoardState(6, 6, Coordinate(0, 0), use_jit=True), moves)
    b = walk(BoardState(6, 6, Coordinate(0, 0), use_jit=False), moves)

    assert np.array_equal(a.accessibility, b.accessibility)
    assert np.allclose(a.priority, b.priority)

    print("Kernel board agreement test passed")


# =============================================================================
# Priority Tests
# =============================================================================

def test_priority_ranges():
    """Test visited cells are exactly 0 and others lie in [0, 1]."""
    board = BoardState(8, 8, Coordinate(3, 3))
    for cell in [Coordinate(1, 4), Coordinate(0, 6), Coordinate(2, 7), Coordinate(4, 6)]:
        board.move_to(cell)
        visited = np.array(board.visited)
        priority = np.array(board.priority)
        assert np.all(priority[visited] == 0.0)
        assert np.all(np.isfinite(priority))
        assert np.all((priority[~visited] >= 0.0) & (priority[~visited] <= 1.0))

    print("Priority range test passed")


def test_zero_max_accessibility_fallback():
    """Test the raw score stays finite when no cell has accessibility."""
    accessibility = np.zeros((3, 3), dtype=np.int64)
    visited = np.zeros((3, 3), dtype=bool)
    visited[0, 0] = True

    raw = compute_raw_priority(accessibility, visited, Coordinate(0, 0), Coordinate(3, 3).length())

    assert np.all(np.isfinite(raw))
    assert raw[0, 0] == 0.0

    print("Zero max accessibility fallback test passed")


def test_single_unvisited_cell():
    """Test the single-remaining-cell degeneracy yields 1, not NaN."""
    raw = np.array([[0.0, 0.3]])
    visited = np.array([[True, False]])
    priority, degenerate = normalize_priority(raw, visited)
    assert degenerate
    assert priority[0, 1] == 1.0
    assert priority[0, 0] == 0.0

    board = BoardState(1, 2, Coordinate(0, 0))
    assert board.priority[0, 1] == 1.0
    assert np.all(np.isfinite(board.priority))

    print("Single unvisited cell test passed")


def test_fully_visited_board():
    """Test a complete board has an all-zero priority map."""
    board = BoardState(1, 1, Coordinate(0, 0))
    assert board.is_complete()
    assert np.array_equal(board.priority, np.zeros((1, 1)))

    print("Fully visited board test passed")


def test_diffusion_reads_snapshot():
    """Test diffusion raises direct neighbours only, once per cycle."""
    visited = np.zeros((5, 5), dtype=bool)

    priority = np.zeros((5, 5))
    priority[0, 0] = 1.0
    priority[2, 4] = 1.0
    diffuse_priority(priority, visited, cycles=1)

    # (1, 2) neighbours both sources but reads the snapshot value 0.
    assert priority[1, 2] == pytest.approx(0.8)
    assert priority[2, 1] == pytest.approx(0.8)
    assert priority[4, 4] == 0.0

    priority = np.zeros((5, 5))
    priority[2, 2] = 1.0
    diffuse_priority(priority, visited, cycles=2)
    # Raised once per cycle: 0 -> 0.8 -> 0.96.
    assert priority[0, 1] == pytest.approx(0.96)
    # 0.8 is below the threshold, so the second cycle spreads no further.
    assert priority[2, 0] == 0.0

    print("Diffusion snapshot test passed")


def test_diffusion_skips_visited():
    """Test diffusion never raises visited cells."""
    visited = np.zeros((5, 5), dtype=bool)
    visited[0, 1] = True
    priority = np.zeros((5, 5))
    priority[2, 2] = 1.0
    diffuse_priority(priority, visited, cycles=2)

    assert priority[0, 1] == 0.0
    assert priority[0, 3] == pytest.approx(0.96)

    print("Diffusion visited test passed")


def test_diffusion_nan_clamps_and_stops():
    """Test a non-finite diffused value is clamped to 1 and stops diffusion."""
    visited = np.zeros((5, 5), dtype=bool)
    priority = np.zeros((5, 5))
    priority[2, 2] = 1.0
    priority[0, 1] = float('nan')

    diffuse_priority(priority, visited, cycles=2)

    assert np.all(np.isfinite(priority))
    assert priority[0, 1] == 1.0
    # Earlier targets of (2, 2) were raised before the stop...
    assert priority[0, 3] == pytest.approx(0.8)
    # ...later ones were not.
    assert priority[1, 0] == 0.0

    print("Diffusion NaN clamp test passed")


def test_penalize_twice():
    """Test penalties are cumulative and multiplicative."""
    board = BoardState(8, 8, Coordinate(3, 3))
    priority = np.array(board.priority)
    x, y = np.unravel_index(np.argmax(priority), priority.shape)
    cell = Coordinate(int(x), int(y))
    before = priority[x, y]
    accessibility = np.array(board.accessibility)

    board.penalize(cell)
    assert board.priority[x, y] == pytest.approx(before * 0.25)

    board.penalize(cell)
    assert board.priority[x, y] == pytest.approx(before * 0.25 * 0.25)
    assert board.penalized == (cell, cell)
    assert np.array_equal(board.accessibility, accessibility)

    print("Penalize twice test passed")


def test_penalize_visited_cell_stays_zero():
    """Test penalizing a visited cell keeps it at exactly 0."""
    board = BoardState(5, 5, Coordinate(2, 2))
    board.penalize(Coordinate(2, 2))
    assert board.priority[2, 2] == 0.0

    print("Penalize visited test passed")


# =============================================================================
# Lifecycle Tests
# =============================================================================

def test_copy_is_independent():
    """Test copies share no storage with the original."""
    board = BoardState(6, 6, Coordinate(0, 0))
    clone = board.copy()

    clone.move_to(Coordinate(1, 2))
    clone.penalize(Coordinate(2, 1))

    assert board.position == Coordinate(0, 0)
    assert board.visited_count == 1
    assert board.penalized == ()
    assert clone.visited_count == 2
    assert not np.array_equal(board.accessibility, clone.accessibility)

    print("Copy independence test passed")


def test_copy_with_position():
    """Test copy with a substituted position marks it visited."""
    board = BoardState(6, 6, Coordinate(0, 0))
    clone = board.copy(Coordinate(1, 2))

    assert clone.position == Coordinate(1, 2)
    assert clone.visited[1, 2] and clone.visited[0, 0]
    assert board.position == Coordinate(0, 0)

    print("Copy with position test passed")


def test_reset_keeps_penalties():
    """Test reset rebuilds a single-cell board with the same penalties."""
    board = walk(BoardState(6, 6, Coordinate(0, 0)), [Coordinate(1, 2), Coordinate(3, 3)])
    board.penalize(Coordinate(4, 5))
    fresh = board.reset(Coordinate(0, 0))

    expected = BoardState(6, 6, Coordinate(0, 0))
    expected.penalize(Coordinate(4, 5))

    assert fresh.visited_count == 1
    assert fresh.penalized == (Coordinate(4, 5),)
    assert np.allclose(fresh.priority, expected.priority)
    assert board.visited_count == 3

    print("Reset test passed")


def test_read_only_accessors():
    """Test public maps cannot be written through."""
    board = BoardState(4, 4, Coordinate(0, 0))
    with pytest.raises(ValueError):
        board.visited[1, 1] = True
    with pytest.raises(ValueError):
        board.priority[1, 1] = 0.5
    with pytest.raises(ValueError):
        board.accessibility[1, 1] = 3

    print("Read-only accessor test passed")


def test_invalid_construction():
    """Test invalid sizes and cells raise ValueError."""
    with pytest.raises(ValueError):
        BoardState(0, 5, Coordinate(0, 0))
    with pytest.raises(ValueError):
        BoardState(5, 5, Coordinate(5, 0))

    board = BoardState(5, 5, Coordinate(0, 0))
    with pytest.raises(ValueError):
        board.move_to(Coordinate(-1, 0))
    with pytest.raises(ValueError):
        board.penalize(Coordinate(0, 9))

    print("Invalid construction test passed")


def test_stuck_predicates():
    """Test the two readings of the stuck predicate."""
    # Only remaining cell is unreachable: both readings agree.
    board = BoardState(1, 2, Coordinate(0, 0))
    assert board.is_stuck()
    assert board.is_saturated()

    # Complete board: saturated, but not stuck.
    done = BoardState(1, 1, Coordinate(0, 0))
    assert done.is_saturated()
    assert not done.is_stuck()

    # Open board: neither.
    open_board = BoardState(5, 5, Coordinate(2, 2))
    assert not open_board.is_stuck()
    assert not open_board.is_saturated()

    print("Stuck predicate test passed")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
