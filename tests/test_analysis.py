import pytest

from risksweeper import (
    play_game,
    play_until_win,
    run_solver_level_analysis,
    run_solver_many_tests,
    run_solver_single_test,
)
from risksweeper.__main__ import main


class TestPlayGame:

    def test_win(self, corner_mine_env):
        status, payload = play_game(corner_mine_env)
        assert status == 1
        assert payload["turns"] == 1
        assert payload["revealed_cells_count"] == 8
        assert payload["markings_count"] == 1
        assert payload["reseeds_count"] == 0
        assert payload["guesses_count"] == 0
        assert payload["left_count"] == 0

    def test_loss_after_forced_guesses(self, losing_env):
        status, payload = play_game(losing_env)
        assert status == -1
        assert payload["failed_turn"] == 3
        assert payload["detonated_at"] == (0, 1)
        assert payload["guesses_count"] == 2
        assert payload["revealed_cells_count"] == 2
        # detonation leaves the board as it was before the losing open
        assert (0, 1) not in losing_env.opened

    def test_mine_free_board_is_won_in_one_turn(self, strip_env):
        status, payload = play_game(strip_env)
        assert status == 1
        assert payload["turns"] == 1


class TestBatches:

    def test_fixed_layout_is_deterministic(self):
        kwargs = dict(mines=[(0, 0)])
        first = run_solver_many_tests(3, 3, 1, 5, **kwargs)
        second = run_solver_many_tests(3, 3, 1, 5, **kwargs)
        assert first == second
        assert first["win_rate"] == 1.0
        assert first["std_turns"] == 0.0

    def test_fixed_losing_layout(self):
        stats = run_solver_many_tests(2, 2, 1, 4, mines=[(0, 1)])
        assert stats["win_rate"] == 0.0
        assert stats["avg_failed_turn"] == 3.0

    def test_seeded_batches_repeat(self):
        first = run_solver_many_tests(9, 9, 10, 6, seed=11)
        second = run_solver_many_tests(9, 9, 10, 6, seed=11)
        assert first == second
        assert 0.0 <= first["win_rate"] <= 1.0
        assert first["runs"] == 6.0

    def test_workers_match_sequential(self):
        sequential = run_solver_many_tests(9, 9, 10, 4, seed=5)
        parallel = run_solver_many_tests(9, 9, 10, 4, seed=5, workers=2)
        assert sequential == parallel

    def test_invalid_runs(self):
        with pytest.raises(ValueError):
            run_solver_many_tests(9, 9, 10, 0)
        with pytest.raises(ValueError):
            run_solver_many_tests(9, 9, 10, 1, workers=0)

    def test_single_test_prints_board(self, capsys):
        result = run_solver_single_test(3, 3, 1, mines=[(0, 0)], show_boards=True)
        assert result["status"] == 1
        out = capsys.readouterr().out
        assert "Finished with status 1." in out

    def test_level_analysis_without_plots(self):
        results = run_solver_level_analysis(1, seed=2, show_plots=False)
        assert set(results) == {"beginner", "intermediate", "expert"}
        assert all(0.0 <= r["win_rate"] <= 1.0 for r in results.values())


def test_play_until_win_stops_at_limit():
    failed, payload = play_until_win(9, 9, 10, seed=4, max_games=3)
    assert 0 <= failed <= 3
    assert "turns" in payload


class TestCli:

    def test_batch(self, capsys):
        assert main(["--height", "9", "--width", "9", "--mines", "10", "--runs", "3", "--seed", "1"]) == 0
        assert "Win rate:" in capsys.readouterr().out

    def test_single_game(self, capsys):
        assert main(["--height", "5", "--width", "5", "--mines", "0"]) == 0
        assert capsys.readouterr().out.strip() == "WIN"

    def test_until_win(self, capsys):
        assert main(["--height", "6", "--width", "6", "--mines", "3", "--seed", "0", "--until-win"]) == 0
        assert "FAILED :" in capsys.readouterr().out
