import pytest

from risksweeper.generator import (
    FixedMineGenerator,
    RandomMineGenerator,
    build_board,
    safe_zone,
)


class TestRandomMineGenerator:

    def test_places_requested_count_outside_start(self):
        mines = RandomMineGenerator(seed=1)(9, 9, 10, (8, 8))
        assert len(mines) == 10
        assert (8, 8) not in mines
        assert all(0 <= r < 9 and 0 <= c < 9 for r, c in mines)

    def test_same_seed_same_layout(self):
        a = RandomMineGenerator(seed=42)(16, 16, 40, (15, 15))
        b = RandomMineGenerator(seed=42)(16, 16, 40, (15, 15))
        assert a == b

    def test_safe_neighborhood_rule_keeps_neighbors_clear(self):
        gen = RandomMineGenerator("safe_neighborhood_rule", seed=3)
        mines = gen(5, 5, 12, (1, 1))
        assert len(mines) == 12
        assert mines.isdisjoint(safe_zone(5, 5, (1, 1), "safe_neighborhood_rule"))

    def test_too_many_mines(self):
        with pytest.raises(ValueError):
            RandomMineGenerator()(3, 3, 9, (2, 2))
        with pytest.raises(ValueError):
            RandomMineGenerator("safe_neighborhood_rule")(3, 3, 6, (2, 2))

    def test_unknown_algorithm(self):
        with pytest.raises(ValueError):
            RandomMineGenerator("anywhere")


class TestFixedMineGenerator:

    def test_returns_layout(self):
        assert FixedMineGenerator([(0, 0), (1, 2)])(3, 3, 2, (2, 2)) == {(0, 0), (1, 2)}

    def test_count_mismatch(self):
        with pytest.raises(ValueError):
            FixedMineGenerator([(0, 0)])(3, 3, 2, (2, 2))

    def test_mine_on_start(self):
        with pytest.raises(ValueError):
            FixedMineGenerator([(2, 2)])(3, 3, 1, (2, 2))

    def test_out_of_bounds(self):
        with pytest.raises(ValueError):
            FixedMineGenerator([(3, 0)])(3, 3, 1, (2, 2))


def test_build_board_counts():
    board = build_board(3, 3, {(0, 0)})
    assert board[0][0].is_mine
    counts = [[cell.adjacent_mines for cell in row] for row in board]
    assert counts == [
        [0, 1, 0],
        [1, 1, 0],
        [0, 0, 0],
    ]
    assert all(not cell.scores for row in board for cell in row)


def test_build_board_two_mines():
    board = build_board(2, 3, {(0, 0), (0, 2)})
    assert board[0][1].adjacent_mines == 2
    assert board[1][1].adjacent_mines == 2
    assert board[1][0].adjacent_mines == 1
    assert board[1][2].adjacent_mines == 1
