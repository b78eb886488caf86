import random

import matplotlib.pyplot as plt
import pytest

import minegroups.analysis
from minegroups import (
    GridMineField,
    GroupSolver,
    PuzzleTruthViolation,
    format_mine_groups,
    pick_seed_cell,
    run_solver_density_analysis,
    run_solver_many_tests,
    run_solver_single_test,
)


class TestFormatting:
    def test_no_groups(self, strip_solver):
        assert format_mine_groups(strip_solver) == "no residual groups"

    def test_lists_live_groups(self, strip, strip_solver):
        _, (a, b, c, d, e, f) = strip
        strip_solver.create_or_reuse_group(1, {b, a})
        strip_solver.create_or_reuse_group(2, {c, d, e, f})
        assert format_mine_groups(strip_solver).splitlines() == [
            "#0: 1 mine in (0, 0) (1, 0)",
            "#1: 2 mines in (2, 0) (3, 0) (4, 0) (5, 0)",
        ]


    def test_cells_are_listed_in_row_major_order(self):
        field = GridMineField.from_layout(["." * 12, "." * 12])
        solver = GroupSolver(field)
        solver.create_or_reuse_group(1, {field.cell(0, 1), field.cell(10, 0), field.cell(2, 0)})
        assert format_mine_groups(solver) == "#0: 1 mine in (2, 0) (10, 0) (0, 1)"


class TestPickSeedCell:
    def test_skips_resolved_cells(self):
        field = GridMineField.from_layout([".."])
        field.cell(0, 0).explore()
        rng = random.Random(5)
        for _ in range(10):
            assert pick_seed_cell(field, rng, 100) is field.cell(1, 0)

    def test_gives_up_when_everything_is_resolved(self):
        field = GridMineField.from_layout([".*"])
        field.cell(0, 0).explore()
        field.cell(1, 0).flag()
        assert pick_seed_cell(field, random.Random(0), 50) is None


class TestSingleTest:
    def test_mine_free_field_is_solved_first_time(self):
        result = run_solver_single_test(5, 5, 0, seed=1)
        assert result["status"] == 1
        assert result["solve_attempts"] == 1
        assert result["cleared"] is True
        assert result["explored_count"] == 25
        assert result["live_groups"] == 0
        assert result["elapsed_ns"] >= 0
        assert isinstance(result["elapsed"], str)

    def test_same_seed_same_outcome(self):
        first = run_solver_single_test(16, 16, 40, seed=21)
        second = run_solver_single_test(16, 16, 40, seed=21)
        for key in ("status", "solve_attempts", "explored_count", "flagged_count"):
            assert first[key] == second[key]

    def test_single_attempt_never_guesses(self):
        for seed in range(10):
            result = run_solver_single_test(16, 16, 60, seed=seed, max_solve_attempts=1)
            assert result["solve_attempts"] == 1
            assert result["status"] in (0, 1)
            assert (result["status"] == 1) == (result["live_groups"] == 0)

    def test_solver_options_are_forwarded(self):
        with pytest.raises(ValueError):
            run_solver_single_test(5, 5, 0, seed=1, range_test="fuzzy")

    def test_show_boards_prints_summary(self, capsys):
        run_solver_single_test(5, 5, 0, seed=1, show_boards=True)
        out = capsys.readouterr().out
        assert "Generation mode: safe_neighborhood_rule" in out
        assert "no residual groups" in out
        assert "Finished with status 1" in out

    def test_reseed_on_a_mine_is_a_loss(self):
        for seed in range(50):
            result = run_solver_single_test(9, 9, 25, seed=seed)
            if result["status"] == -1:
                break
        else:
            pytest.fail("expected a dense field to lose on a re-seed")
        assert result["solve_attempts"] >= 2
        assert result["cleared"] is False

    def test_truth_violation_on_the_reseed_cell_is_a_loss(self, monkeypatch):
        class ReseedHitsMine(GroupSolver):
            attempts = 0

            def solve(self, start):
                self.attempts += 1
                if self.attempts == 1:
                    return False
                raise PuzzleTruthViolation("mine", start)

        monkeypatch.setattr(minegroups.analysis, "GroupSolver", ReseedHitsMine)
        result = run_solver_single_test(5, 5, 0, seed=2)
        assert result["status"] == -1
        assert result["solve_attempts"] == 2

    def test_truth_violation_on_the_first_solve_propagates(self, monkeypatch):
        class WrongFlag(GroupSolver):
            def solve(self, start):
                raise PuzzleTruthViolation("not a mine", start)

        monkeypatch.setattr(minegroups.analysis, "GroupSolver", WrongFlag)
        with pytest.raises(PuzzleTruthViolation):
            run_solver_single_test(5, 5, 0, seed=2)

    def test_truth_violation_away_from_the_reseed_cell_propagates(self, monkeypatch):
        class WrongDeduction(GroupSolver):
            attempts = 0

            def solve(self, start):
                self.attempts += 1
                if self.attempts == 1:
                    return False
                # Flags a safe cell other than the one being re-seeded.
                self.flag(next(cell for cell in self.field.cells() if cell is not start))
                return True

        monkeypatch.setattr(minegroups.analysis, "GroupSolver", WrongDeduction)
        with pytest.raises(PuzzleTruthViolation):
            run_solver_single_test(5, 5, 0, seed=2)

    @pytest.mark.parametrize(
        "kwargs", [{"max_solve_attempts": 0}, {"select_cell_attempts": 0}]
    )
    def test_invalid_attempt_limits(self, kwargs):
        with pytest.raises(ValueError):
            run_solver_single_test(5, 5, 0, seed=1, **kwargs)


class TestManyTests:
    def test_rates_cover_every_run(self):
        results = run_solver_many_tests(9, 9, 10, runs=6, seed=3)
        total = results["solve_rate"] + results["stuck_rate"] + results["loss_rate"]
        assert total == pytest.approx(1.0)
        assert 0.0 <= results["first_solve_rate"] <= results["solve_rate"]
        assert results["avg_explored_count"] > 0
        assert "avg_status" not in results
        assert 0.0 <= results["extract_per_attempt"] <= 1.0

    def test_mine_free_runs_all_solve(self):
        results = run_solver_many_tests(6, 6, 0, runs=3, seed=0)
        assert results["solve_rate"] == 1.0
        assert results["first_solve_rate"] == 1.0
        assert results["avg_explored_count"] == 36.0
        assert results["extract_per_attempt"] == 0.0

    def test_runs_must_be_positive(self):
        with pytest.raises(ValueError):
            run_solver_many_tests(9, 9, 10, runs=0)


class TestDensityAnalysis:
    def test_sweep_returns_results_per_density(self):
        plt.close("all")
        results = run_solver_density_analysis(
            8, 8, [0.0, 0.1], runs=2, seed=4, show=False
        )
        assert list(results) == [0.0, 0.1]
        assert results[0.0]["solve_rate"] == 1.0
        assert len(plt.get_fignums()) == 2
        plt.close("all")

    def test_exhaustive_search_is_forwarded(self):
        results = run_solver_density_analysis(
            8, 8, [0.1], runs=2, seed=4, show=False, intersection_search="exhaustive"
        )
        assert set(results) == {0.1}
        plt.close("all")

    @pytest.mark.parametrize("densities", [[], [1.0], [-0.1]])
    def test_invalid_densities(self, densities):
        with pytest.raises(ValueError):
            run_solver_density_analysis(8, 8, densities, runs=1, show=False)


def test_solver_stats_match_single_test_keys():
    field = GridMineField(4, 4, 0, "safe_first_action_rule")
    stats = GroupSolver(field).stats()
    result = run_solver_single_test(4, 4, 0, "safe_first_action_rule", seed=0)
    assert set(stats) <= set(result)
