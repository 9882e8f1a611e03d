"""Tests for bytetracker.tracking.lapjv."""

import numpy as np
import pytest
from scipy.optimize import linear_sum_assignment

from bytetracker.tracking import AssignmentError, lapjv, linear_assignment, solve_square


class TestSolveSquare:
    """Tests for the square solver."""

    def test_known_optimum(self):
        cost = np.array([
            [4.0, 1.0, 3.0],
            [2.0, 0.0, 5.0],
            [3.0, 2.0, 2.0],
        ])
        x, y = solve_square(cost)

        np.testing.assert_array_equal(x, [1, 0, 2])
        np.testing.assert_array_equal(y, [1, 0, 2])

    def test_single_element(self):
        x, y = solve_square(np.array([[7.0]]))
        np.testing.assert_array_equal(x, [0])
        np.testing.assert_array_equal(y, [0])

    def test_assignment_error_is_runtime_error(self):
        assert issubclass(AssignmentError, RuntimeError)


class TestLapjv:
    """Tests for lapjv with padding and cost limits."""

    def test_total_cost(self):
        cost = np.array([
            [4.0, 1.0, 3.0],
            [2.0, 0.0, 5.0],
            [3.0, 2.0, 2.0],
        ])
        total, x, y = lapjv(cost)

        assert total == pytest.approx(5.0)
        np.testing.assert_array_equal(x, [1, 0, 2])

    @pytest.mark.parametrize('shape', [(5, 5), (4, 7), (8, 3), (12, 12)])
    def test_matches_scipy(self, shape):
        """Test optimal total cost against scipy on random matrices."""
        rng = np.random.default_rng(sum(shape))
        for _ in range(10):
            cost = rng.uniform(0, 1, size=shape)
            total, x, y = lapjv(cost, extend_cost=True)

            rows, cols = linear_sum_assignment(cost)
            assert total == pytest.approx(cost[rows, cols].sum())

            # Every row or column is matched, and x and y agree
            assert np.sum(x >= 0) == min(shape)
            for i, j in enumerate(x):
                if j >= 0:
                    assert y[j] == i

    def test_integer_ties(self):
        cost = np.ones((6, 6))
        total, x, y = lapjv(cost)
        assert total == pytest.approx(6.0)
        assert sorted(x.tolist()) == list(range(6))

    def test_cost_limit_leaves_pairs_unmatched(self):
        cost = np.array([
            [0.1, 0.9],
            [0.9, 0.95],
        ])
        total, x, y = lapjv(cost, cost_limit=0.5)

        assert total == pytest.approx(0.1)
        np.testing.assert_array_equal(x, [0, -1])
        np.testing.assert_array_equal(y, [0, -1])

    def test_non_square_requires_extend_cost(self):
        with pytest.raises(ValueError):
            lapjv(np.ones((2, 3)))

    def test_non_finite_rejected(self):
        cost = np.array([[1.0, np.inf], [0.5, 1.0]])
        with pytest.raises(ValueError):
            lapjv(cost)

    def test_empty(self):
        total, x, y = lapjv(np.empty((0, 0)))
        assert total == 0.0
        assert len(x) == 0
        assert len(y) == 0

        total, x, y = lapjv(np.empty((0, 3)), extend_cost=True)
        np.testing.assert_array_equal(y, [-1, -1, -1])


class TestLinearAssignment:
    """Tests for thresholded matching."""

    def test_matches_below_threshold(self):
        cost = np.array([
            [0.9, 0.1, 0.9],
            [0.2, 0.9, 0.9],
        ])
        matches, unmatched_rows, unmatched_cols = linear_assignment(cost, thresh=0.5)

        assert sorted(map(tuple, matches.tolist())) == [(0, 1), (1, 0)]
        assert unmatched_rows == []
        assert unmatched_cols == [2]

    def test_all_above_threshold(self):
        cost = np.array([
            [0.9, 0.95],
            [0.99, 0.92],
        ])
        matches, unmatched_rows, unmatched_cols = linear_assignment(cost, thresh=0.8)

        assert matches.shape == (0, 2)
        assert unmatched_rows == [0, 1]
        assert unmatched_cols == [0, 1]

    def test_partial(self):
        cost = np.array([
            [0.1, 0.9],
            [0.9, 0.95],
        ])
        matches, unmatched_rows, unmatched_cols = linear_assignment(cost, thresh=0.5)

        np.testing.assert_array_equal(matches, [[0, 0]])
        assert unmatched_rows == [1]
        assert unmatched_cols == [1]

    def test_empty(self):
        matches, unmatched_rows, unmatched_cols = linear_assignment(np.empty((0, 3)), thresh=0.5)

        assert matches.shape == (0, 2)
        assert unmatched_rows == []
        assert unmatched_cols == [0, 1, 2]

    def test_each_index_used_once(self):
        rng = np.random.default_rng(7)
        cost = rng.uniform(0, 1, size=(9, 6))
        matches, unmatched_rows, unmatched_cols = linear_assignment(cost, thresh=0.6)

        assert len(set(matches[:, 0])) == len(matches)
        assert len(set(matches[:, 1])) == len(matches)
        assert np.all(cost[matches[:, 0], matches[:, 1]] <= 0.6)
        assert len(matches) + len(unmatched_rows) == 9
        assert len(matches) + len(unmatched_cols) == 6
