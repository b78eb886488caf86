"""Mine groups: a count of mines spread over a set of unresolved cells."""

import logging
from typing import AbstractSet, FrozenSet, Set, Tuple

from .errors import ContractViolation
from .field import Cell
from .index import GroupIndex
from .queues import WorkQueues
from .tracing import trace, traced

logger = logging.getLogger(__name__)


class MineGroup:
    """
    ``mine_count`` mines somewhere among the cells of ``options``.

    A group is *obvious* once ``mine_count == 0`` (every option is safe) or
    ``mine_count == len(options)`` (every option is a mine). Validation
    schedules the options for exploration or flagging and retires the group
    from the index; a retired group is never mutated again. Groups with
    ``0 < mine_count < len(options)`` stay live and are scheduled for an
    intersection check.

    Groups do not own their cells. Every change to ``options`` after
    construction goes through the :class:`GroupIndex`, so the reverse lookup
    never goes stale.
    """

    def __init__(
        self,
        group_id: int,
        mine_count: int,
        options: AbstractSet[Cell],
        index: GroupIndex,
        queues: WorkQueues,
    ) -> None:
        self.group_id: int = group_id
        self.mine_count: int = mine_count
        self.options: Set[Cell] = set(options)
        self.obvious: bool = False
        self._index = index
        self._queues = queues

    def __repr__(self) -> str:
        return (
            f"MineGroup#{self.group_id}(mine_count={self.mine_count}, "
            f"options={sorted(self.options)}, obvious={self.obvious})"
        )

    def __len__(self) -> int:
        return len(self.options)

    def key(self) -> Tuple[int, FrozenSet[Cell]]:
        """Structural identity: ``(mine_count, frozenset(options))``."""
        return self.mine_count, frozenset(self.options)

    def _require_live(self) -> None:
        if self.obvious:
            raise ContractViolation(f"{self!r} is already retired.")

    @traced
    def on_explored(self, cell: Cell) -> None:
        """Remove a newly explored cell from the options and re-validate."""
        self._require_live()
        if cell in self.options:
            self._index.unlink(cell, self)
            trace("Removed %r", cell)
            self.validate()

    @traced
    def on_flagged(self, cell: Cell) -> None:
        """Remove a newly flagged cell, account for its mine, and re-validate."""
        self._require_live()
        if not cell.is_flagged():
            raise ContractViolation(f"{cell!r} is not flagged.")
        if cell not in self.options:
            raise ContractViolation(f"{cell!r} is not an option of {self!r}.")
        self._index.unlink(cell, self)
        self.mine_count -= 1
        trace("Decremented mine_count to %d and removed %r", self.mine_count, cell)
        self.validate()

    @traced
    def on_intersected(self, intersection: "MineGroup") -> None:
        """
        Carve an extracted intersection out of this group.

        Every cell of ``intersection.options`` is unlinked from this group and
        ``intersection.mine_count`` is subtracted from ``mine_count``.
        """
        self._require_live()
        if intersection is self:
            raise ContractViolation(f"{self!r} cannot be intersected with itself.")
        for cell in list(intersection.options):
            self._index.unlink(cell, self)
        self.mine_count -= intersection.mine_count
        self.validate()

    @traced
    def validate(self) -> None:
        """
        Check the group invariants, then act on certainty.

        Raises:
            ContractViolation: If the group is retired, holds a resolved cell,
                or its mine count lies outside ``[0, len(options)]``.
        """
        self._require_live()
        for option in self.options:
            if option.is_flagged() or option.is_explored():
                raise ContractViolation(f"{self!r} holds resolved cell {option!r}.")

        if self.mine_count < 0:
            raise ContractViolation(f"mine_count == {self.mine_count} < 0 in {self!r}.")
        if self.mine_count > len(self.options):
            raise ContractViolation(
                f"mine_count == {self.mine_count} > {len(self.options)} in {self!r}."
            )

        if self.mine_count == 0:
            self._queues.schedule_explore(self.options)
            self._retire()
            trace("Obvious, explore")
        elif self.mine_count == len(self.options):
            self._queues.schedule_flag(self.options)
            self._retire()
            trace("Obvious, flag")
        else:
            self._queues.schedule_intersect(self.group_id)

    def _retire(self) -> None:
        self._index.retire(self)
        self.obvious = True
        logger.debug("Retired %r", self)
