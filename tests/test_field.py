import pytest

from minegroups import ContractViolation, GridMineField, PuzzleTruthViolation


class TestConstruction:
    def test_from_layout_places_mines(self):
        field = GridMineField.from_layout(["*..", "...", "..*"])
        assert (field.width, field.height, field.mines_count) == (3, 3, 2)
        assert field.cell(0, 0).mined
        assert field.cell(2, 2).mined
        assert not field.cell(1, 1).mined

    def test_from_layout_rejects_ragged_rows(self):
        with pytest.raises(ValueError):
            GridMineField.from_layout(["...", ".."])

    def test_safe_neighborhood_rule_keeps_centre_area_clear(self):
        for seed in range(10):
            field = GridMineField(9, 9, 60, "safe_neighborhood_rule", seed=seed)
            centre = field.safe_cell()
            assert centre.coord == (4, 4)
            assert not centre.mined
            assert not any(n.mined for n in field.neighbors(centre))
            assert sum(cell.mined for cell in field.cells()) == 60

    def test_safe_first_action_rule_only_protects_the_safe_point(self):
        field = GridMineField(3, 3, 8, "safe_first_action_rule", safe_x=0, safe_y=0, seed=1)
        assert not field.cell(0, 0).mined
        assert sum(cell.mined for cell in field.cells()) == 8

    def test_seed_is_reproducible(self):
        a = GridMineField(16, 16, 40, seed=3)
        b = GridMineField(16, 16, 40, seed=3)
        assert [c.mined for c in a.cells()] == [c.mined for c in b.cells()]

    @pytest.mark.parametrize(
        "args",
        [
            (0, 5, 1, "safe_neighborhood_rule"),
            (5, 5, -1, "safe_neighborhood_rule"),
            (5, 5, 1, "bogus_rule"),
            (3, 3, 1, "safe_neighborhood_rule"),
            (3, 3, 9, "safe_first_action_rule"),
        ],
    )
    def test_invalid_arguments(self, args):
        with pytest.raises(ValueError):
            GridMineField(*args)

    def test_mine_positions_must_match_count(self):
        with pytest.raises(ValueError):
            GridMineField(3, 3, 2, mine_positions=[(0, 0)])


class TestCells:
    def test_explore_mine_violates_truth(self):
        field = GridMineField.from_layout(["*."])
        with pytest.raises(PuzzleTruthViolation) as excinfo:
            field.cell(0, 0).explore()
        assert excinfo.value.cell is field.cell(0, 0)
        assert not field.cell(0, 0).is_explored()

    def test_flag_safe_cell_violates_truth(self):
        field = GridMineField.from_layout(["*."])
        with pytest.raises(PuzzleTruthViolation):
            field.cell(1, 0).flag()

    def test_explored_and_flagged_are_exclusive(self):
        field = GridMineField.from_layout(["*."])
        field.cell(1, 0).explore()
        field.cell(0, 0).flag()
        with pytest.raises(ContractViolation):
            field.cell(1, 0).flag()
        with pytest.raises(ContractViolation):
            field.cell(0, 0).explore()

    def test_surrounding_count_requires_exploration(self):
        field = GridMineField.from_layout(["*..", "...", "..."])
        centre = field.cell(1, 1)
        with pytest.raises(ContractViolation):
            centre.surrounding_mine_count()
        centre.explore()
        assert centre.surrounding_mine_count() == 1

    def test_counters(self):
        field = GridMineField.from_layout(["*."])
        assert not field.is_cleared()
        field.cell(1, 0).explore()
        field.cell(1, 0).explore()
        field.cell(0, 0).flag()
        assert field.explored_count == 1
        assert field.flagged_count == 1
        assert field.is_cleared()

    def test_for_each_neighbor_matches_neighbors(self):
        field = GridMineField(4, 4, 0, "safe_first_action_rule")
        seen = []
        field.for_each_neighbor(field.cell(0, 0), seen.append)
        assert seen == list(field.neighbors(field.cell(0, 0)))
        assert {c.coord for c in seen} == {(1, 0), (0, 1), (1, 1)}

    def test_cell_out_of_bounds(self):
        field = GridMineField(2, 2, 0, "safe_first_action_rule")
        with pytest.raises(ValueError):
            field.cell(2, 0)


class TestFormatBoard:
    def test_plain_rendering(self):
        field = GridMineField.from_layout(["*.", ".."])
        field.cell(1, 1).explore()
        rows = field.format_board(color=False).splitlines()
        assert len(rows) == 4
        assert rows[2].endswith("#  #")
        assert rows[3].endswith("#  1")

    def test_reveal_all_and_flags(self):
        field = GridMineField.from_layout(["*.", ".*"])
        assert "*" in field.format_board(reveal_all=True, color=False)
        assert "*" not in field.format_board(color=False).splitlines()[2]
        field.cell(0, 0).flag()
        assert "!" in field.format_board(color=False)
