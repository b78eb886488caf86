"""Arena of live mine groups and the reverse lookup from cells to the groups holding them."""

from typing import TYPE_CHECKING, AbstractSet, Dict, Iterator, List, Optional, Set

from .errors import ContractViolation
from .field import Cell

if TYPE_CHECKING:
    from .group import MineGroup


class GroupIndex:
    """
    Live groups addressed by stable integer ids, plus ``cell -> {group_id}``.

    Group membership changes only through :meth:`link`, :meth:`unlink`,
    :meth:`retire` and :meth:`forget`, which keep a group's ``options`` and
    the reverse lookup in step. A cell maps to a group id exactly when the
    cell is one of that live group's options. Entries are created on first
    link and removed as soon as they become empty.
    """

    def __init__(self) -> None:
        self._groups: Dict[int, "MineGroup"] = {}
        self._by_cell: Dict[Cell, Set[int]] = {}
        self._next_id: int = 0

    def __len__(self) -> int:
        return len(self._groups)

    def __iter__(self) -> Iterator["MineGroup"]:
        """Iterate over live groups in creation order."""
        return iter(list(self._groups.values()))

    def __contains__(self, group_id: object) -> bool:
        return group_id in self._groups

    def allocate_id(self) -> int:
        group_id = self._next_id
        self._next_id += 1
        return group_id

    def get(self, group_id: int) -> Optional["MineGroup"]:
        """Return the live group with this id, or None once it has retired."""
        return self._groups.get(group_id)

    def cells(self) -> AbstractSet[Cell]:
        """Cells currently referenced by at least one live group."""
        return self._by_cell.keys()

    def group_ids_for(self, cell: Cell) -> AbstractSet[int]:
        return self._by_cell.get(cell, frozenset())

    # -------------------------------------------------------------------------
    # Membership
    # -------------------------------------------------------------------------

    def add(self, group: "MineGroup") -> None:
        """Insert a freshly built group into the arena and link all its options."""
        if group.group_id in self._groups:
            raise ContractViolation(f"Group id {group.group_id} is already live.")
        self._groups[group.group_id] = group
        for cell in group.options:
            self.link(cell, group)

    def link(self, cell: Cell, group: "MineGroup") -> None:
        if cell not in group.options:
            raise ContractViolation(f"{cell!r} is not an option of {group!r}.")
        self._by_cell.setdefault(cell, set()).add(group.group_id)

    def unlink(self, cell: Cell, group: "MineGroup") -> None:
        """Remove ``cell`` from ``group.options`` and from the reverse lookup."""
        if cell not in group.options:
            raise ContractViolation(f"{cell!r} is not an option of {group!r}.")
        group.options.remove(cell)
        self._drop_link(cell, group.group_id)

    def retire(self, group: "MineGroup") -> None:
        """
        Remove a group from the arena and every reverse lookup entry.

        The group keeps its ``options`` so it can still be read by whoever
        holds it (e.g. as the extracted side of an intersection).
        """
        for cell in group.options:
            self._drop_link(cell, group.group_id)
        del self._groups[group.group_id]

    def forget(self, cell: Cell) -> None:
        """Drop the lookup entry of a resolved cell."""
        self._by_cell.pop(cell, None)

    def _drop_link(self, cell: Cell, group_id: int) -> None:
        ids = self._by_cell.get(cell)
        if ids is None:
            return
        ids.discard(group_id)
        if not ids:
            del self._by_cell[cell]

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def groups_for(self, cell: Cell) -> List["MineGroup"]:
        """Live groups holding ``cell``, by ascending id."""
        return [self._groups[gid] for gid in sorted(self.group_ids_for(cell))]

    def overlapping(self, group: "MineGroup") -> List["MineGroup"]:
        """Every other live group sharing at least one option with ``group``, by ascending id."""
        ids: Set[int] = set()
        for cell in group.options:
            ids.update(self.group_ids_for(cell))
        ids.discard(group.group_id)
        return [self._groups[gid] for gid in sorted(ids)]

    def find(self, mine_count: int, options: AbstractSet[Cell]) -> Optional["MineGroup"]:
        """Return a live group with exactly these options and this mine count."""
        for cell in options:
            for group in self.groups_for(cell):
                if group.mine_count == mine_count and group.options == options:
                    return group
        return None
