"""
Minesweeper group solver

A constraint-propagation Minesweeper solver that never guesses:
- Mine groups: a mine count over a set of unresolved cells
- Certain groups (no mines, or all mines) resolve their cells
- Overlapping groups are intersected to extract smaller certain groups
- Work queues drained to a fixpoint, no recursion
"""

from .errors import ContractViolation, MineGroupsError, PuzzleTruthViolation
from .field import Cell, GridCell, GridMineField, MineField
from .group import MineGroup
from .solver import GroupSolver
from .analysis import (
    format_mine_groups,
    pick_seed_cell,
    run_solver_single_test,
    run_solver_many_tests,
    run_solver_density_analysis,
)

__version__ = "1.0.0"

__all__ = [
    # Core classes
    "GroupSolver",
    "MineGroup",
    # Field
    "Cell",
    "MineField",
    "GridCell",
    "GridMineField",
    # Errors
    "MineGroupsError",
    "ContractViolation",
    "PuzzleTruthViolation",
    # Analysis functions
    "format_mine_groups",
    "pick_seed_cell",
    "run_solver_single_test",
    "run_solver_many_tests",
    "run_solver_density_analysis",
]
