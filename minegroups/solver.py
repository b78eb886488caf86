"""Queue-driven constraint-propagation solver over mine groups."""

import logging
from typing import AbstractSet, Any, Dict, List, Optional, Set, Tuple

from .field import Cell, MineField
from .group import MineGroup
from .index import GroupIndex
from .queues import WorkQueues
from .tracing import trace, traced

logger = logging.getLogger(__name__)

INTERSECTION_SEARCHES: Tuple[str, ...] = ("first_success", "exhaustive")
RANGE_TESTS: Tuple[str, ...] = ("boundary", "exact")


def shared_mine_range(group: MineGroup, shared_size: int) -> Tuple[int, int]:
    """
    Range of mines ``group`` allows inside a subset of ``shared_size`` of its options.

    The minimum assumes every cell outside the subset holds a mine; the
    maximum is capped by both the group's mine count and the subset size.
    """
    outside = len(group.options) - shared_size
    return max(0, group.mine_count - outside), min(group.mine_count, shared_size)


class GroupSolver:
    """
    Minesweeper solver that never guesses.

    The solver works its way through a field from a single safe cell, and
    stops when no certain deduction is left:

    1. No recursion. Cells are never explored or flagged on the spot; they
       are put on work queues drained by :meth:`solve` until all of them are
       empty at once.
    2. Exploring a cell yields a :class:`MineGroup` over its unknown
       neighbors. A group with no mines is explored, a group that is all
       mines is flagged, and either way the group retires.
    3. Exploring or flagging a cell removes it from every group holding it,
       and those groups are validated again.
    4. Overlapping uncertain groups are intersected: if the mine ranges both
       groups allow on the shared cells pin down a single value, the shared
       cells become a new group and are carved out of both parents.

    Whatever groups remain after :meth:`solve` returns describe mine
    placements that cannot be decided without guessing. ``solve`` can be
    called again with another start cell; all state is kept between calls.
    """

    def __init__(
        self,
        field: MineField,
        *,
        intersection_search: str = "first_success",
        range_test: str = "boundary",
        record_steps: bool = False,
    ) -> None:
        """
        Initialize a solver bound to a specific field.

        Args:
            field: The field to solve; provides neighbor enumeration.
            intersection_search: How many partners a queued group is
                intersected with per check.
                "first_success" (default): stop after the first extraction.
                "exhaustive": keep trying the remaining partners while the
                group stays live.
            range_test: When two mine ranges over shared cells count as
                pinned to a single value.
                "boundary" (default): only when one range's minimum equals
                the other's maximum.
                "exact": whenever the ranges intersect in exactly one value.
            record_steps: If True, record a step history for replay.

        Raises:
            ValueError: If a strategy name is unrecognized.
        """
        if intersection_search not in INTERSECTION_SEARCHES:
            raise ValueError(
                'intersection_search must be "first_success" or "exhaustive".'
            )
        if range_test not in RANGE_TESTS:
            raise ValueError('range_test must be "boundary" or "exact".')

        self.field = field
        self.intersection_search = intersection_search
        self.range_test = range_test
        self.record_steps = record_steps

        self.index = GroupIndex()
        self.queues = WorkQueues()

        # Metrics / counters (for analysis)
        self.explored_count: int = 0
        self.flagged_count: int = 0
        self.groups_created: int = 0
        self.groups_reused: int = 0
        self.intersections_attempted: int = 0
        self.intersections_extracted: int = 0
        self.passes: int = 0
        self.max_live_groups: int = 0

        self.moves_sequence: List[Tuple[Cell, str]] = []
        self.steps_history: List[Dict[str, Any]] = []

    def __repr__(self) -> str:
        return f"GroupSolver(live_groups={len(self.index)}, queues={self.queues!r})"

    @property
    def mine_groups(self) -> Tuple[MineGroup, ...]:
        """Live groups, i.e. the residual uncertainty, in creation order."""
        return tuple(self.index)

    # -------------------------------------------------------------------------
    # Top-level solve
    # -------------------------------------------------------------------------

    @traced
    def solve(self, start: Cell) -> bool:
        """
        Propagate constraints from ``start`` until no certain deduction remains.

        Each pass drains the exploration queue, then the flag queue, then the
        intersection queue; passes repeat while any phase did work.

        Args:
            start: A cell known to be safe.

        Returns:
            True if no live group remains, False if uncertainty is left.

        Raises:
            PuzzleTruthViolation: If the field rejects an explore or flag.
            ContractViolation: On a broken invariant.
        """
        self.queues.schedule_explore([start])

        passes = 0
        while True:
            worked = self.queues.drain_explore(self.explore)
            worked = self.queues.drain_flag(self.flag) or worked
            worked = self.queues.drain_intersect(self.intersect_group) or worked
            if not worked:
                break
            passes += 1

        self.passes += passes
        solved = len(self.index) == 0
        logger.info(
            "Solve from %r finished after %d passes: %d explored, %d flagged, "
            "%d live groups",
            start,
            passes,
            self.explored_count,
            self.flagged_count,
            len(self.index),
        )
        return solved

    # -------------------------------------------------------------------------
    # Cell resolution
    # -------------------------------------------------------------------------

    @traced
    def explore(self, cell: Cell) -> None:
        """Explore a cell assumed safe and build a group from its unknown neighbors."""
        if cell.is_explored():
            return

        cell.explore()
        self._record_move(cell, "S")
        for group in self.index.groups_for(cell):
            group.on_explored(cell)
        self.index.forget(cell)

        flagged: List[Cell] = []
        options: Set[Cell] = set()

        def visit(neighbor: Cell) -> None:
            if neighbor.is_flagged():
                flagged.append(neighbor)
            elif not neighbor.is_explored():
                options.add(neighbor)

        self.field.for_each_neighbor(cell, visit)
        self.create_or_reuse_group(cell.surrounding_mine_count() - len(flagged), options)

    @traced
    def flag(self, cell: Cell) -> None:
        """Flag a cell assumed to hold a mine."""
        if cell.is_flagged():
            return

        cell.flag()
        self._record_move(cell, "M")
        for group in self.index.groups_for(cell):
            group.on_flagged(cell)
        self.index.forget(cell)

    def _record_move(self, cell: Cell, kind: str) -> None:
        if kind == "S":
            self.explored_count += 1
        else:
            self.flagged_count += 1
        self.moves_sequence.append((cell, kind))

        if not self.record_steps:
            return
        self.steps_history.append({
            "action": "explore" if kind == "S" else "flag",
            "cell": cell,
            "step_number": len(self.steps_history),
            "live_groups": [group.key() for group in self.index],
        })

    # -------------------------------------------------------------------------
    # Group creation
    # -------------------------------------------------------------------------

    @traced
    def create_or_reuse_group(
        self, mine_count: int, options: AbstractSet[Cell]
    ) -> MineGroup:
        """
        Return the live group for ``(mine_count, options)``, creating it if needed.

        A new group is linked into the index and validated at once, so it
        may already be retired when returned.

        Raises:
            ContractViolation: If the new group breaks an invariant.
        """
        existing = self.index.find(mine_count, options)
        if existing is not None:
            trace("Duplicate: %r", existing)
            self.groups_reused += 1
            return existing

        group = MineGroup(
            self.index.allocate_id(), mine_count, options, self.index, self.queues
        )
        self.index.add(group)
        self.groups_created += 1
        self.max_live_groups = max(self.max_live_groups, len(self.index))
        group.validate()
        return group

    # -------------------------------------------------------------------------
    # Pairwise intersection
    # -------------------------------------------------------------------------

    @traced
    def intersect_group(self, group_id: int) -> bool:
        """
        Try to extract an intersection between a queued group and its overlaps.

        Returns:
            Whether at least one intersection was extracted.
        """
        group = self.index.get(group_id)
        if group is None:
            return False

        extracted = False
        for partner in self.index.overlapping(group):
            if group.obvious:
                break
            if partner.obvious:
                continue
            if self.try_extract_intersection(group, partner):
                extracted = True
                if self.intersection_search == "first_success":
                    break
        return extracted

    def resolve_shared_count(
        self, range1: Tuple[int, int], range2: Tuple[int, int]
    ) -> Optional[int]:
        """Return the only mine count both ranges allow, or None when ambiguous."""
        lo1, hi1 = range1
        lo2, hi2 = range2
        if self.range_test == "exact":
            lo, hi = max(lo1, lo2), min(hi1, hi2)
            return lo if lo == hi else None

        if lo1 == hi2:
            return lo1
        if lo2 == hi1:
            return lo2
        return None

    @traced
    def try_extract_intersection(self, group1: MineGroup, group2: MineGroup) -> bool:
        """
        Extract the shared cells of two groups as a new group when their count is certain.

        On success both parents are reduced by the extracted group and
        re-validated. When the extracted group is one of the parents (its
        options are all shared), only the other parent is reduced.

        Returns:
            Whether an intersection group was extracted.
        """
        shared = frozenset(group1.options & group2.options)
        if not shared:
            return False

        self.intersections_attempted += 1
        count = self.resolve_shared_count(
            shared_mine_range(group1, len(shared)),
            shared_mine_range(group2, len(shared)),
        )
        if count is None:
            return False

        intersection = self.create_or_reuse_group(count, shared)
        trace("Intersection group: %r", intersection)
        for parent in (group1, group2):
            if parent is not intersection:
                parent.on_intersected(intersection)

        self.intersections_extracted += 1
        logger.debug(
            "Extracted %r from #%d and #%d", intersection, group1.group_id, group2.group_id
        )
        return True

    # -------------------------------------------------------------------------
    # Reporting
    # -------------------------------------------------------------------------

    def stats(self) -> Dict[str, int]:
        """Solver counters plus the number of live groups."""
        return {
            "explored_count": self.explored_count,
            "flagged_count": self.flagged_count,
            "groups_created": self.groups_created,
            "groups_reused": self.groups_reused,
            "intersections_attempted": self.intersections_attempted,
            "intersections_extracted": self.intersections_extracted,
            "passes": self.passes,
            "max_live_groups": self.max_live_groups,
            "live_groups": len(self.index),
        }
