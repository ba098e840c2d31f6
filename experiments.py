"""
Experiments for the knight path solver.

This script runs experiments to answer:
1. From which start cells does the solver complete a tour, per board size?
2. How many restarts and dead ends does completion cost?
3. How sensitive is the completion rate to the penalty factor?
"""

import os
import time

import matplotlib.pyplot as plt
import numpy as np

from knightpath.config import Config
from knightpath.solver import TourController
from knightpath.visualize import plot_sweep


def run_single_experiment(width, height, start_x, start_y, max_restarts=50,
                          max_iterations=20000, penalty_factor=0.25):
    """Run a single solver experiment and return results."""
    config = Config(
        width=width, height=height, start_x=start_x, start_y=start_y,
        max_restarts=max_restarts, max_iterations=max_iterations,
        penalty_factor=penalty_factor, quiet=True,
    )
    controller = TourController(config)

    start = time.time()
    result = controller.run()
    elapsed = time.time() - start

    return {
        'width': width,
        'height': height,
        'start': (start_x, start_y),
        'complete': result.complete,
        'outcome': result.outcome.value,
        'visited': int(result.visited.sum()),
        'iterations': result.iterations,
        'restarts': result.restarts,
        'dead_ends': result.dead_ends,
        'time': elapsed,
    }


def experiment_1_start_sweep(sizes=(5, 6, 7, 8), max_restarts=50, output_dir='results/experiments'):
    """
    Experiment 1: completion from every start cell of square boards.
    """
    print("\n" + "=" * 60)
    print("Experiment 1: Completion by start cell")
    print("=" * 60)

    os.makedirs(output_dir, exist_ok=True)
    summary = {}

    for n in sizes:
        completed = np.zeros((n, n))
        restarts = []

        for x in range(n):
            for y in range(n):
                r = run_single_experiment(n, n, x, y, max_restarts=max_restarts)
                completed[x, y] = 1.0 if r['complete'] else 0.0
                if r['complete']:
                    restarts.append(r['restarts'])

        rate = completed.mean()
        mean_restarts = np.mean(restarts) if restarts else float('nan')
        summary[n] = {'rate': rate, 'mean_restarts': mean_restarts}
        print(f"  {n}x{n}: completion={rate:.1%}, mean restarts when complete={mean_restarts:.1f}")

        plot_sweep(completed, filename=os.path.join(output_dir, f'exp1_sweep_{n}x{n}.png'),
                   title=f'Completion by Start Cell ({n}x{n})')

    return summary


def experiment_2_cost_vs_size(sizes=range(5, 13), max_restarts=50, output_dir='results/experiments'):
    """
    Experiment 2: iterations, restarts and dead ends from the centre-ish start.
    """
    print("\n" + "=" * 60)
    print("Experiment 2: Cost vs board size")
    print("=" * 60)

    os.makedirs(output_dir, exist_ok=True)
    rows = []

    for n in sizes:
        r = run_single_experiment(n, n, n // 2 - 1, n // 2 - 1, max_restarts=max_restarts)
        rows.append(r)
        print(f"  {n}x{n}: {r['outcome']:<28} visited={r['visited']:>4}/{n * n} "
              f"iters={r['iterations']:>6} restarts={r['restarts']:>3} "
              f"dead_ends={r['dead_ends']:>4} time={r['time']:.2f}s")

    fig, ax = plt.subplots(figsize=(10, 6))
    ns = [r['width'] for r in rows]
    ax.plot(ns, [r['iterations'] for r in rows], 'o-', label='iterations')
    ax.plot(ns, [r['dead_ends'] for r in rows], 's-', label='dead ends')
    ax.plot(ns, [r['restarts'] for r in rows], '^-', label='restarts')
    ax.set_xlabel('Board size N', fontsize=12)
    ax.set_ylabel('Count', fontsize=12)
    ax.set_yscale('symlog')
    ax.set_title('Solver Cost vs Board Size', fontsize=13, fontweight='bold')
    ax.legend()
    ax.grid(True, alpha=0.3)
    plt.tight_layout()
    plt.savefig(os.path.join(output_dir, 'exp2_cost_vs_size.png'), dpi=150)
    plt.close(fig)

    return rows


def experiment_3_penalty_factor(n=6, factors=(0.1, 0.25, 0.5, 0.75, 0.9), max_restarts=50,
                                output_dir='results/experiments'):
    """
    Experiment 3: completion rate over all start cells as the penalty factor varies.
    """
    print("\n" + "=" * 60)
    print(f"Experiment 3: Penalty factor sensitivity ({n}x{n})")
    print("=" * 60)

    os.makedirs(output_dir, exist_ok=True)
    rates = []

    for factor in factors:
        done = 0
        for x in range(n):
            for y in range(n):
                r = run_single_experiment(n, n, x, y, max_restarts=max_restarts,
                                          penalty_factor=factor)
                done += r['complete']
        rates.append(done / (n * n))
        print(f"  penalty={factor:.2f}: completion={rates[-1]:.1%}")

    fig, ax = plt.subplots(figsize=(8, 5))
    ax.plot(factors, rates, 'o-', linewidth=2)
    ax.set_xlabel('Penalty factor', fontsize=12)
    ax.set_ylabel('Completion rate', fontsize=12)
    ax.set_ylim(0, 1.05)
    ax.set_title(f'Completion vs Penalty Factor ({n}x{n})', fontsize=13, fontweight='bold')
    ax.grid(True, alpha=0.3)
    plt.tight_layout()
    plt.savefig(os.path.join(output_dir, 'exp3_penalty_factor.png'), dpi=150)
    plt.close(fig)

    return dict(zip(factors, rates))


def run_all_experiments():
    """Run all experiments."""
    start = time.time()
    experiment_1_start_sweep()
    experiment_2_cost_vs_size()
    experiment_3_penalty_factor()
    print(f"\nAll experiments finished in {time.time() - start:.1f}s")


if __name__ == "__main__":
    run_all_experiments()
