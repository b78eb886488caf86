"""Exception types raised by the solver core and the bundled mine field."""


class MineGroupsError(Exception):
    """Base class for all errors raised by this package."""


class ContractViolation(MineGroupsError):
    """
    A programming error or broken invariant.

    Raised when a retired group is mutated, a group's mine count leaves
    ``[0, len(options)]``, a cell is unlinked from a group it does not belong
    to, or a cell is driven into an inconsistent state. Never caught by the
    solver core.
    """


class PuzzleTruthViolation(MineGroupsError):
    """The field rejected an explore or flag request against its ground truth."""

    def __init__(self, message: str, cell: object = None) -> None:
        super().__init__(message)
        self.cell = cell
