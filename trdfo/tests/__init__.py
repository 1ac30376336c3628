import operator

import numpy as np
from numpy.testing import assert_array_compare


def assert_array_less_equal(x, y, err_msg='', verbose=True):
    """
    Raise an AssertionError if two objects are not less-or-equal-ordered.

    Parameters
    ----------
    x : array_like
        Smaller object to check.
    y : array_like
        Larger object to compare.
    err_msg : str, optional
        Error message to be printed in case of failure.
    verbose : bool, optional
        Whether the conflicting values are appended to the error message
        (default is True).

    Raises
    ------
    AssertionError
        The two arrays are not less-or-equal-ordered.
    """
    assert_array_compare(operator.__le__, x, y, err_msg, verbose, header='Arrays are not less-or-equal-ordered')


def assert_feasible_history(res, xl, xu, tol=0.0):
    """
    Raise an AssertionError if a point of the history violates the bounds.

    Parameters
    ----------
    res : scipy.optimize.OptimizeResult
        Result of an optimization procedure with ``store_history=True``.
    xl, xu : array_like
        Lower and upper bounds.
    tol : float, optional
        Tolerance on the bound violation.
    """
    x_history = np.atleast_2d(res.x_history)
    assert_array_less_equal(np.broadcast_to(np.asarray(xl, dtype=float) - tol, x_history.shape), x_history)
    assert_array_less_equal(x_history, np.broadcast_to(np.asarray(xu, dtype=float) + tol, x_history.shape))
