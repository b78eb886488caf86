"""
Quickstart example for the Minesweeper group solver.

This script demonstrates basic usage of the solver.
"""

import logging

from minegroups import (
    GridMineField,
    GroupSolver,
    format_mine_groups,
    run_solver_many_tests,
)


def main():
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    print("=" * 60)
    print("Minesweeper Group Solver - Quickstart Example")
    print("=" * 60)

    # Example 1: Solve a single field from its safe centre
    print("\n1. Solving a single 30x16 field with 20% mines...")
    print("-" * 60)

    field = GridMineField(
        width=30,
        height=16,
        mines_count=30 * 16 * 20 // 100,
        mines_generation_algorithm="safe_neighborhood_rule",
        seed=42,
    )

    solver = GroupSolver(field)
    solved = solver.solve(field.safe_cell())

    stats = solver.stats()
    print(f"Result: {'SOLVED' if solved else 'STUCK'}")
    print(f"Cells explored: {stats['explored_count']}")
    print(f"Mines flagged: {stats['flagged_count']}")
    print(f"Intersections extracted: {stats['intersections_extracted']}")

    # Example 2: Show final field state and residual uncertainty
    print("\n2. Final field state:")
    print("-" * 60)
    print(field.format_board(reveal_all=True))
    print()
    print(format_mine_groups(solver))

    # Example 3: Run multiple games for statistics
    print("\n3. Running 50 games for solve rate statistics...")
    print("-" * 60)

    logging.getLogger("minegroups").setLevel(logging.WARNING)
    results = run_solver_many_tests(
        width=16,
        height=16,
        mines_count=40,
        runs=50,
        seed=7,
    )

    print(f"Solve rate: {results['solve_rate']*100:.1f}%")
    print(f"Stuck rate: {results['stuck_rate']*100:.1f}%")
    print(f"Lost on re-seed: {results['loss_rate']*100:.1f}%")
    print(f"Average solve attempts per game: {results['avg_solve_attempts']:.1f}")

    # Example 4: Compare the intersection range tests
    print("\n4. Solved without re-seeding, by range test (20 games each)...")
    print("-" * 60)

    for range_test in ("boundary", "exact"):
        results = run_solver_many_tests(
            width=30,
            height=16,
            mines_count=99,
            runs=20,
            seed=7,
            range_test=range_test,
        )
        print(f"{range_test:10s}: {results['first_solve_rate']*100:5.1f}% solved from the first cell")

    print("\n" + "=" * 60)
    print("Done!")
    print("=" * 60)


if __name__ == "__main__":
    main()
