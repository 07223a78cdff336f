import pytest

from risksweeper.utils import all_coordinates, get_neighborhoods, neighbors


class TestNeighborhoods:

    def test_corner_has_three_neighbors(self):
        assert set(neighbors(4, 5, (0, 0))) == {(0, 1), (1, 0), (1, 1)}
        assert len(neighbors(4, 5, (3, 4))) == 3

    def test_edge_has_five_neighbors(self):
        assert len(neighbors(4, 5, (0, 2))) == 5
        assert len(neighbors(4, 5, (2, 0))) == 5
        assert len(neighbors(4, 5, (3, 1))) == 5

    def test_interior_has_eight_neighbors(self):
        assert set(neighbors(4, 5, (1, 1))) == {
            (0, 0), (0, 1), (0, 2),
            (1, 0), (1, 2),
            (2, 0), (2, 1), (2, 2),
        }

    def test_never_self_or_out_of_bounds(self):
        height, width = 5, 7
        for coord, nbrs in get_neighborhoods(height, width).items():
            assert coord not in nbrs
            assert len(nbrs) == len(set(nbrs))
            for r, c in nbrs:
                assert 0 <= r < height and 0 <= c < width
                assert max(abs(r - coord[0]), abs(c - coord[1])) == 1

    def test_single_row_and_single_cell(self):
        assert neighbors(1, 3, (0, 1)) == ((0, 0), (0, 2))
        assert neighbors(1, 1, (0, 0)) == ()

    def test_cached_per_size(self):
        assert get_neighborhoods(6, 6) is get_neighborhoods(6, 6)
        assert get_neighborhoods(6, 5) is not get_neighborhoods(5, 6)

    def test_rejects_non_positive_dimensions(self):
        with pytest.raises(ValueError):
            get_neighborhoods(0, 3)
        with pytest.raises(ValueError):
            get_neighborhoods(3, -1)


def test_all_coordinates_row_major():
    assert all_coordinates(2, 2) == [(0, 0), (0, 1), (1, 0), (1, 1)]
