import numpy as np

from .exceptions import InvalidInputError


def get_arrays_tol(*arrays):
    """
    Get a relative tolerance for a set of arrays.

    Parameters
    ----------
    *arrays: tuple
        Set of `arrays` to get the tolerance for.

    Returns
    -------
    float
        Relative tolerance for the set of arrays.

    Raises
    ------
    ValueError
        If no array is provided.
    """
    if len(arrays) == 0:
        raise ValueError('At least one array must be provided.')
    size = max(np.size(array) for array in arrays)
    return 10.0 * np.finfo(float).eps * max(size, 1.0) * max_abs_arrays(*arrays)


def max_abs_arrays(*arrays):
    """
    Get the maximum absolute finite value of a set of arrays.

    Parameters
    ----------
    *arrays: tuple
        Set of `arrays`.

    Returns
    -------
    float
        Maximum absolute finite value of the arrays, or one if it is smaller.
    """
    return max(np.max(np.abs(array[np.isfinite(array)]), initial=1.0) for array in map(np.asarray, arrays))


def exact_1d_array(x, message):
    """
    Preprocess a one-dimensional array.

    Parameters
    ----------
    x : array_like
        Array to be preprocessed.
    message : str
        Error message if `x` cannot be interpreted as a one-dimensional array.

    Returns
    -------
    numpy.ndarray
        Preprocessed one-dimensional array.

    Raises
    ------
    InvalidInputError
        If `x` cannot be interpreted as a one-dimensional array of floats.
    """
    try:
        x = np.atleast_1d(np.squeeze(np.asarray(x, dtype=float)))
    except (TypeError, ValueError) as exc:
        raise InvalidInputError(message) from exc
    if x.ndim != 1:
        raise InvalidInputError(message)
    return x


def exact_2d_array(x, message):
    """
    Preprocess a two-dimensional array.

    A one-dimensional array is interpreted as a matrix with one row.

    Parameters
    ----------
    x : array_like
        Array to be preprocessed.
    message : str
        Error message if `x` cannot be interpreted as a two-dimensional array.

    Returns
    -------
    numpy.ndarray
        Preprocessed two-dimensional array.

    Raises
    ------
    InvalidInputError
        If `x` cannot be interpreted as a two-dimensional array of floats.
    """
    try:
        x = np.atleast_2d(np.asarray(x, dtype=float))
    except (TypeError, ValueError) as exc:
        raise InvalidInputError(message) from exc
    if x.ndim != 2:
        raise InvalidInputError(message)
    return x
