from .exceptions import CallbackSuccess, InvalidInputError, MaxEvalError, TargetSuccess
from .math import exact_1d_array, exact_2d_array, get_arrays_tol, max_abs_arrays
from .versions import show_versions

__all__ = ['CallbackSuccess', 'InvalidInputError', 'MaxEvalError', 'TargetSuccess', 'exact_1d_array', 'exact_2d_array', 'get_arrays_tol', 'max_abs_arrays', 'show_versions']
