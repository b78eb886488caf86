"""Driver loop and benchmarking tools for the group solver."""

import random
import time
from collections import defaultdict
from typing import Any, Dict, List, Optional, Sequence

import matplotlib.pyplot as plt
import numpy as np

from .errors import PuzzleTruthViolation
from .field import GridCell, GridMineField
from .solver import GroupSolver
from .utils import format_ns


def format_mine_groups(solver: GroupSolver) -> str:
    """
    Format the solver's residual groups, one per line.

    Returns:
        Lines like ``#12: 1 mine in (3, 4) (4, 4)``, or ``"no residual groups"``.
    """
    lines: List[str] = []
    for group in solver.mine_groups:
        cells = " ".join(
            str(getattr(cell, "coord", cell)) for cell in sorted(group.options)
        )
        noun = "mine" if group.mine_count == 1 else "mines"
        lines.append(f"#{group.group_id}: {group.mine_count} {noun} in {cells}")
    return "\n".join(lines) if lines else "no residual groups"


def pick_seed_cell(
    field: GridMineField, rng: random.Random, select_cell_attempts: int
) -> Optional[GridCell]:
    """
    Draw random cells until one is neither explored nor flagged.

    Returns:
        The drawn cell, or None if ``select_cell_attempts`` draws all hit
        resolved cells.
    """
    for _ in range(select_cell_attempts):
        cell = field.cell(rng.randrange(field.width), rng.randrange(field.height))
        if not (cell.is_explored() or cell.is_flagged()):
            return cell
    return None


def run_solver_single_test(
    width: int,
    height: int,
    mines_count: int,
    mines_generation_algorithm: str = "safe_neighborhood_rule",
    *,
    seed: Optional[int] = None,
    max_solve_attempts: int = 100,
    select_cell_attempts: int = 1000,
    show_boards: bool = False,
    **solver_kwargs: Any,
) -> Dict[str, Any]:
    """
    Solve one fresh field, re-seeding from random cells while groups remain.

    The first solve starts from the field's safe point. Every later solve
    starts from a randomly drawn unresolved cell; such a draw is a blind
    guess, and drawing a mine ends the run.

    Args:
        width: Field width.
        height: Field height.
        mines_count: Total number of mines on the field.
        mines_generation_algorithm: Mine placement rule
            ("safe_first_action_rule" or "safe_neighborhood_rule").
        seed: Seed for both mine placement and re-seed draws.
        max_solve_attempts: Maximum number of solve calls.
        select_cell_attempts: Maximum draws when picking a re-seed cell.
        show_boards: If True, print the final field and residual groups.
        **solver_kwargs: Forwarded to :class:`GroupSolver`.

    Returns:
        The solver statistics plus:
        - status: 1 solved, 0 stuck with residual groups, -1 re-seeded on a mine
        - solve_attempts, elapsed_ns, elapsed, cleared
    """
    if max_solve_attempts <= 0:
        raise ValueError("max_solve_attempts must be positive.")
    if select_cell_attempts <= 0:
        raise ValueError("select_cell_attempts must be positive.")

    rng = random.Random(seed)
    field = GridMineField(
        width,
        height,
        mines_count,
        mines_generation_algorithm,
        seed=rng.randrange(2**32),
    )
    solver = GroupSolver(field, **solver_kwargs)

    status = 0
    solve_attempts = 0
    cell: Optional[GridCell] = field.safe_cell()
    start = time.perf_counter_ns()
    try:
        while cell is not None and solve_attempts < max_solve_attempts:
            solve_attempts += 1
            if solver.solve(cell):
                status = 1
                break
            cell = pick_seed_cell(field, rng, select_cell_attempts)
    except PuzzleTruthViolation as exc:
        # Only a blind re-seed may hit a mine; anything else is a solver bug.
        if solve_attempts == 1 or exc.cell is not cell:
            raise
        status = -1
    elapsed_ns = time.perf_counter_ns() - start

    if show_boards:
        print(f"Generation mode: {mines_generation_algorithm}")
        print(field.format_board(reveal_all=True))
        print()
        print(format_mine_groups(solver))
        print()
        print(f"Finished with status {status} in {format_ns(elapsed_ns)}.")

    out: Dict[str, Any] = dict(solver.stats())
    out["status"] = status
    out["solve_attempts"] = solve_attempts
    out["elapsed_ns"] = elapsed_ns
    out["elapsed"] = format_ns(elapsed_ns)
    out["cleared"] = field.is_cleared()
    return out


def run_solver_many_tests(
    width: int,
    height: int,
    mines_count: int,
    runs: int,
    mines_generation_algorithm: str = "safe_neighborhood_rule",
    *,
    seed: Optional[int] = None,
    max_solve_attempts: int = 100,
    select_cell_attempts: int = 1000,
    **solver_kwargs: Any,
) -> Dict[str, float]:
    """
    Run many independent games and return averaged statistics plus outcome rates.

    Args:
        width: Field width.
        height: Field height.
        mines_count: Total number of mines on the field.
        runs: Number of independent games to run.
        mines_generation_algorithm: Mine placement rule.
        seed: Master seed; each run draws its own seed from it.
        max_solve_attempts: Forwarded to :func:`run_solver_single_test`.
        select_cell_attempts: Forwarded to :func:`run_solver_single_test`.
        **solver_kwargs: Forwarded to :class:`GroupSolver`.

    Returns:
        Averages of numeric payload values (prefixed with "avg_"), plus:
        - solve_rate, stuck_rate, loss_rate
        - first_solve_rate: fraction solved without any re-seed
        - extract_per_attempt
    """
    if runs <= 0:
        raise ValueError("runs must be positive.")

    rng = random.Random(seed)
    samples: Dict[str, List[float]] = defaultdict(list)
    outcomes = np.zeros(3, dtype=np.int64)  # [lost, stuck, solved]
    first_solves = 0

    for _ in range(runs):
        payload = run_solver_single_test(
            width,
            height,
            mines_count,
            mines_generation_algorithm,
            seed=rng.randrange(2**32),
            max_solve_attempts=max_solve_attempts,
            select_cell_attempts=select_cell_attempts,
            **solver_kwargs,
        )
        status = payload["status"]
        if status not in (-1, 0, 1):
            raise RuntimeError(f"Unexpected solver status: {status}")
        outcomes[status + 1] += 1
        if status == 1 and payload["solve_attempts"] == 1:
            first_solves += 1

        for k, v in payload.items():
            if k == "status":
                continue
            if isinstance(v, (int, float)) and not isinstance(v, bool):
                samples[f"avg_{k}"].append(float(v))

    out: Dict[str, float] = {k: float(np.mean(v)) for k, v in samples.items()}
    out["loss_rate"] = float(outcomes[0]) / runs
    out["stuck_rate"] = float(outcomes[1]) / runs
    out["solve_rate"] = float(outcomes[2]) / runs
    out["first_solve_rate"] = first_solves / runs

    attempted = float(np.sum(samples["avg_intersections_attempted"]))
    extracted = float(np.sum(samples["avg_intersections_extracted"]))
    out["extract_per_attempt"] = extracted / attempted if attempted > 0 else 0.0
    return out


def run_solver_density_analysis(
    width: int,
    height: int,
    densities: Sequence[float],
    runs: int,
    mines_generation_algorithm: str = "safe_neighborhood_rule",
    *,
    seed: Optional[int] = None,
    show: bool = True,
    **solver_kwargs: Any,
) -> Dict[float, Dict[str, float]]:
    """
    Run aggregated tests per mine density and plot outcome summaries.

    Args:
        width: Field width.
        height: Field height.
        densities: Mine densities in [0, 1); each is turned into a mine count.
        runs: Number of games per density.
        mines_generation_algorithm: Mine placement rule.
        seed: Master seed for reproducible sweeps.
        show: If True, call ``plt.show()`` after each figure.
        **solver_kwargs: Forwarded to :class:`GroupSolver`.

    Returns:
        Mapping from density to the statistics of run_solver_many_tests().
    """
    if not densities:
        raise ValueError("densities must not be empty.")

    results: Dict[float, Dict[str, float]] = {}
    for density in densities:
        if not 0.0 <= density < 1.0:
            raise ValueError(f"Density {density} is outside [0, 1).")
        mines = int(width * height * density)
        results[density] = run_solver_many_tests(
            width,
            height,
            mines,
            runs,
            mines_generation_algorithm,
            seed=seed,
            **solver_kwargs,
        )

    x = np.asarray(densities, dtype=float)

    # 1) Outcome rates by density
    plt.figure()  # type: ignore[misc]
    for key, label in (
        ("solve_rate", "solved"),
        ("stuck_rate", "stuck"),
        ("loss_rate", "lost on re-seed"),
    ):
        plt.plot(x, [results[d][key] for d in densities], marker="o", label=label)  # type: ignore[misc]
    plt.xlabel("Mine density")  # type: ignore[misc]
    plt.ylabel("Rate")  # type: ignore[misc]
    plt.ylim(0.0, 1.0)  # type: ignore[misc]
    plt.title(f"Outcomes by mine density ({width}x{height})")  # type: ignore[misc]
    plt.legend()  # type: ignore[misc]
    plt.tight_layout()
    if show:
        plt.show()  # type: ignore[misc]

    # 2) Intersection work by density
    bar_w = 0.4
    idx = np.arange(len(densities))
    plt.figure()  # type: ignore[misc]
    plt.bar(  # type: ignore[misc]
        idx - bar_w / 2,
        [results[d]["avg_intersections_attempted"] for d in densities],
        width=bar_w,
        label="attempted",
    )
    plt.bar(  # type: ignore[misc]
        idx + bar_w / 2,
        [results[d]["avg_intersections_extracted"] for d in densities],
        width=bar_w,
        label="extracted",
    )
    plt.xticks(idx, [f"{d:.2f}" for d in densities])  # type: ignore[misc]
    plt.ylabel("Average count per game")  # type: ignore[misc]
    plt.title("Intersections by mine density")  # type: ignore[misc]
    plt.legend()  # type: ignore[misc]
    plt.tight_layout()
    if show:
        plt.show()  # type: ignore[misc]

    return results
