"""FIFO work queues that drive every state transition of the solver."""

from collections import deque
from typing import Callable, Deque, Hashable, Iterable, Set, TypeVar

from .field import Cell

T = TypeVar("T", bound=Hashable)


class WorkQueues:
    """
    Cells pending exploration, cells pending flagging, and group ids pending
    an intersection check.

    Each queue is paired with a set of its pending entries, so scheduling an
    item that is already waiting is a no-op.
    """

    def __init__(self) -> None:
        self.explore_queue: Deque[Cell] = deque()
        self.explore_set: Set[Cell] = set()
        self.flag_queue: Deque[Cell] = deque()
        self.flag_set: Set[Cell] = set()
        self.intersect_queue: Deque[int] = deque()
        self.intersect_set: Set[int] = set()

    def __repr__(self) -> str:
        return (
            f"WorkQueues(explore={len(self.explore_queue)}, "
            f"flag={len(self.flag_queue)}, intersect={len(self.intersect_queue)})"
        )

    def is_empty(self) -> bool:
        return not (self.explore_queue or self.flag_queue or self.intersect_queue)

    def schedule_explore(self, cells: Iterable[Cell]) -> None:
        for cell in cells:
            _push(self.explore_queue, self.explore_set, cell)

    def schedule_flag(self, cells: Iterable[Cell]) -> None:
        for cell in cells:
            _push(self.flag_queue, self.flag_set, cell)

    def schedule_intersect(self, group_id: int) -> None:
        _push(self.intersect_queue, self.intersect_set, group_id)

    def drain_explore(self, consumer: Callable[[Cell], None]) -> bool:
        return _drain(self.explore_queue, self.explore_set, consumer)

    def drain_flag(self, consumer: Callable[[Cell], None]) -> bool:
        return _drain(self.flag_queue, self.flag_set, consumer)

    def drain_intersect(self, consumer: Callable[[int], None]) -> bool:
        return _drain(self.intersect_queue, self.intersect_set, consumer)


def _push(queue: Deque[T], pending: Set[T], item: T) -> None:
    if item not in pending:
        queue.append(item)
        pending.add(item)


def _drain(queue: Deque[T], pending: Set[T], consumer: Callable[[T], None]) -> bool:
    """
    Pop and process entries until the queue is empty, including entries
    scheduled by ``consumer`` itself.

    Returns:
        Whether at least one entry was processed.
    """
    worked = False
    while queue:
        item = queue.popleft()
        pending.remove(item)
        consumer(item)
        worked = True
    return worked
