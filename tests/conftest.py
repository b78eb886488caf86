import matplotlib

matplotlib.use("Agg")

import pytest

from minegroups import GridMineField, GroupSolver


def coords(cells):
    """Coordinates of an iterable of grid cells, as a set."""
    return {cell.coord for cell in cells}


def assert_consistent(solver):
    """Every live group is uncertain, unresolved, and mirrored in the index."""
    index = solver.index
    for group in solver.mine_groups:
        assert not group.obvious
        assert 0 < group.mine_count < len(group.options)
        for cell in group.options:
            assert not cell.is_explored()
            assert not cell.is_flagged()
            assert group.group_id in index.group_ids_for(cell)

    for cell in index.cells():
        ids = index.group_ids_for(cell)
        assert ids
        for group_id in ids:
            group = index.get(group_id)
            assert group is not None
            assert cell in group.options


@pytest.fixture
def strip():
    """A 6x1 mine-free strip whose cells are used as bare group options."""
    field = GridMineField.from_layout(["......"])
    return field, [field.cell(x, 0) for x in range(6)]


@pytest.fixture
def strip_solver(strip):
    field, _ = strip
    return GroupSolver(field)
