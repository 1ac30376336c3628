import numpy as np
import pytest

from trdfo.utils import InvalidInputError, exact_1d_array, exact_2d_array, get_arrays_tol, max_abs_arrays


class TestGetArraysTol:

    @pytest.mark.parametrize('n_max', [0, 1, 2, 10, 100])
    @pytest.mark.parametrize('nb_arrays', [1, 2, 10, 100])
    def test_simple(self, n_max, nb_arrays):
        rng = np.random.default_rng(0)
        arrays = (rng.random(rng.integers(n_max + 1)) for _ in range(nb_arrays))
        tol = get_arrays_tol(*arrays)
        assert tol > 0.0
        assert np.isfinite(tol)

    def test_infinite(self):
        tol = get_arrays_tol(np.array([-np.inf, 1.0]), np.array([np.inf, np.nan]))
        assert tol == 20.0 * np.finfo(float).eps

    def test_weight(self):
        # The tolerance scales with the largest finite absolute value.
        arrays = (np.array([0.5, -4.0, np.inf]), np.array([2.0]))
        assert get_arrays_tol(*arrays) == 30.0 * np.finfo(float).eps * max_abs_arrays(*arrays)
        assert max_abs_arrays(*arrays) == 4.0

    def test_empty(self):
        with pytest.raises(ValueError):
            get_arrays_tol()


class TestMaxAbsArrays:

    def test_simple(self):
        assert max_abs_arrays([0.5, -3.0], [np.inf, 2.0]) == 3.0
        assert max_abs_arrays([0.5], []) == 1.0


class TestExactArrays:

    def test_1d(self):
        np.testing.assert_array_equal(exact_1d_array(1.0, ''), [1.0])
        np.testing.assert_array_equal(exact_1d_array([[1.0, 2.0]], ''), [1.0, 2.0])
        with pytest.raises(InvalidInputError):
            exact_1d_array([[1.0, 2.0], [3.0, 4.0]], 'The array must be a vector.')
        with pytest.raises(InvalidInputError):
            exact_1d_array('x', 'The array must be a vector.')

    def test_2d(self):
        assert exact_2d_array([1.0, 2.0], '').shape == (1, 2)
        assert exact_2d_array(np.empty((0, 3)), '').shape == (0, 3)
        with pytest.raises(InvalidInputError):
            exact_2d_array(np.ones((2, 2, 2)), 'The array must be a matrix.')
