from inspect import signature

import numpy as np
from scipy.optimize import Bounds, OptimizeResult, linprog

from .settings import PRINT_OPTIONS, BARRIER
from .utils import CallbackSuccess, InvalidInputError, MaxEvalError, get_arrays_tol, exact_1d_array


class ObjectiveFunction:
    """
    Real-valued objective function, possibly returning nonlinear constraint
    values along with the objective function value.
    """

    def __init__(self, fun, with_constraints, max_eval, verbose, debug, *args):
        """
        Initialize the objective function.

        Parameters
        ----------
        fun : callable
            Function to evaluate.

                ``fun(x, *args) -> float``

            or, if `with_constraints` is True,

                ``fun(x, *args) -> (float, array_like)``

            where ``x`` is an array with shape (n,) and `args` is a tuple.
        with_constraints : bool
            Whether `fun` returns nonlinear constraint values.
        max_eval : int
            Maximum number of function evaluations.
        verbose : bool
            Whether to print the function evaluations.
        debug : bool
            Whether to make debugging tests during the execution.
        *args : tuple
            Additional arguments to be passed to the function. They are
            forwarded by reference, without being copied.
        """
        if debug:
            assert isinstance(with_constraints, bool)
            assert isinstance(max_eval, int)
            assert isinstance(verbose, bool)
            assert isinstance(debug, bool)
        if not callable(fun):
            raise InvalidInputError('The objective function must be callable.')

        self._fun = fun
        self._with_constraints = with_constraints
        self._max_eval = max_eval
        self._verbose = verbose
        self._args = args
        self._n_eval = 0

    def __call__(self, x):
        """
        Evaluate the objective function.

        Parameters
        ----------
        x : array_like, shape (n,)
            Point at which the objective function is evaluated.

        Returns
        -------
        float
            Function value at `x`.
        `numpy.ndarray`
            Nonlinear constraint values at `x` (empty if the function does not
            return any).

        Raises
        ------
        `trdfo.utils.MaxEvalError`
            If the maximum number of function evaluations has been reached.
        """
        if self._n_eval >= self._max_eval:
            raise MaxEvalError
        x = np.array(x, dtype=float)
        self._n_eval += 1
        if self._with_constraints:
            f, c = self._fun(x, *self._args)
            c = np.atleast_1d(np.squeeze(np.asarray(c, dtype=float)))
        else:
            f = self._fun(x, *self._args)
            c = np.empty(0)
        f = float(np.squeeze(f))
        if self._verbose:
            with np.printoptions(**PRINT_OPTIONS):
                if c.size > 0:
                    print(f'{self.name}({x}) = {f}, constraints = {c}')
                else:
                    print(f'{self.name}({x}) = {f}')
        return f, c

    @property
    def n_eval(self):
        """
        Number of function evaluations.

        Returns
        -------
        int
            Number of function evaluations.
        """
        return self._n_eval

    @property
    def max_eval(self):
        """
        Maximum number of function evaluations.

        Returns
        -------
        int
            Maximum number of function evaluations.
        """
        return self._max_eval

    @max_eval.setter
    def max_eval(self, max_eval):
        self._max_eval = max_eval

    @property
    def name(self):
        """
        Name of the objective function.

        Returns
        -------
        str
            Name of the objective function.
        """
        try:
            name = self._fun.__name__
        except AttributeError:
            name = 'fun'
        return name


class BoundConstraints:
    """
    Bound constraints ``xl <= x <= xu``.
    """

    def __init__(self, bounds):
        """
        Initialize the bound constraints.

        Parameters
        ----------
        bounds : scipy.optimize.Bounds
            Bound constraints.
        """
        self._xl = np.array(bounds.lb, float)
        self._xu = np.array(bounds.ub, float)

        # Remove the ill-defined bounds.
        self.xl[np.isnan(self.xl)] = -np.inf
        self.xu[np.isnan(self.xu)] = np.inf

    @property
    def xl(self):
        """
        Lower bound.

        Returns
        -------
        `numpy.ndarray`, shape (n,)
            Lower bound.
        """
        return self._xl

    @property
    def xu(self):
        """
        Upper bound.

        Returns
        -------
        `numpy.ndarray`, shape (n,)
            Upper bound.
        """
        return self._xu

    @property
    def m(self):
        """
        Number of bound constraints.

        Returns
        -------
        int
            Number of bound constraints.
        """
        return np.count_nonzero(self.xl > -np.inf) + np.count_nonzero(self.xu < np.inf)

    @property
    def is_feasible(self):
        """
        Whether the bound constraints are feasible.

        Returns
        -------
        bool
            Whether the bound constraints are feasible.
        """
        return bool(np.all(self.xl <= self.xu) and np.all(self.xl < np.inf) and np.all(self.xu > -np.inf))

    def maxcv(self, x):
        """
        Evaluate the maximum constraint violation.

        Parameters
        ----------
        x : array_like, shape (n,)
            Point at which the maximum constraint violation is evaluated.

        Returns
        -------
        float
            Maximum constraint violation at `x`.
        """
        x = np.asarray(x, dtype=float)
        val = np.max(self.xl - x, initial=0.0)
        return float(np.max(x - self.xu, initial=val))

    def project(self, x):
        """
        Project a point onto the feasible set.

        Parameters
        ----------
        x : array_like, shape (n,)
            Point to be projected.

        Returns
        -------
        `numpy.ndarray`, shape (n,)
            Projection of `x` onto the feasible set.
        """
        return np.clip(x, self.xl, self.xu) if self.is_feasible else np.array(x, dtype=float)


class LinearConstraints:
    """
    Linear constraints ``a_ub @ x <= b_ub`` and ``a_eq @ x == b_eq``.

    Each constraint is normalized so that the Euclidean norm of its gradient is
    one. Constraints whose gradients are zero are removed if they are
    satisfied, and make the problem infeasible otherwise.
    """

    def __init__(self, a_ub, b_ub, a_eq, b_eq, debug):
        """
        Initialize the linear constraints.

        Parameters
        ----------
        a_ub : numpy.ndarray, shape (m_linear_ub, n)
            Left-hand side matrix of the linear inequality constraints.
        b_ub : numpy.ndarray, shape (m_linear_ub,)
            Right-hand side vector of the linear inequality constraints.
        a_eq : numpy.ndarray, shape (m_linear_eq, n)
            Left-hand side matrix of the linear equality constraints.
        b_eq : numpy.ndarray, shape (m_linear_eq,)
            Right-hand side vector of the linear equality constraints.
        debug : bool
            Whether to make debugging tests during the execution.
        """
        if debug:
            assert a_ub.ndim == 2 and b_ub.shape == (a_ub.shape[0],)
            assert a_eq.ndim == 2 and b_eq.shape == (a_eq.shape[0],)
            assert a_ub.shape[1] == a_eq.shape[1]

        # Remove the ill-defined constraints.
        a_ub = np.array(a_ub, dtype=float)
        b_ub = np.array(b_ub, dtype=float)
        a_eq = np.array(a_eq, dtype=float)
        b_eq = np.array(b_eq, dtype=float)
        a_ub[np.isnan(a_ub)] = 0.0
        a_eq[np.isnan(a_eq)] = 0.0
        keep_ub = ~(np.isnan(b_ub) | (b_ub == np.inf))
        keep_eq = np.isfinite(b_eq)
        a_ub, b_ub = a_ub[keep_ub, :], b_ub[keep_ub]
        a_eq, b_eq = a_eq[keep_eq, :], b_eq[keep_eq]

        # Normalize the constraints and detect the trivial ones.
        self._is_feasible = True
        self._a_ub, self._b_ub = self._normalize(a_ub, b_ub, False)
        self._a_eq, self._b_eq = self._normalize(a_eq, b_eq, True)

    @property
    def a_ub(self):
        """
        Left-hand side matrix of the linear inequality constraints.

        Returns
        -------
        `numpy.ndarray`, shape (m_linear_ub, n)
            Left-hand side matrix of the linear inequality constraints.
        """
        return self._a_ub

    @property
    def b_ub(self):
        """
        Right-hand side vector of the linear inequality constraints.

        Returns
        -------
        `numpy.ndarray`, shape (m_linear_ub,)
            Right-hand side vector of the linear inequality constraints.
        """
        return self._b_ub

    @property
    def a_eq(self):
        """
        Left-hand side matrix of the linear equality constraints.

        Returns
        -------
        `numpy.ndarray`, shape (m_linear_eq, n)
            Left-hand side matrix of the linear equality constraints.
        """
        return self._a_eq

    @property
    def b_eq(self):
        """
        Right-hand side vector of the linear equality constraints.

        Returns
        -------
        `numpy.ndarray`, shape (m_linear_eq,)
            Right-hand side vector of the linear equality constraints.
        """
        return self._b_eq

    @property
    def m_ub(self):
        """
        Number of linear inequality constraints.

        Returns
        -------
        int
            Number of linear inequality constraints.
        """
        return self.b_ub.size

    @property
    def m_eq(self):
        """
        Number of linear equality constraints.

        Returns
        -------
        int
            Number of linear equality constraints.
        """
        return self.b_eq.size

    @property
    def is_feasible(self):
        """
        Whether no constraint with a zero gradient is violated.

        Returns
        -------
        bool
            Whether no constraint with a zero gradient is violated.
        """
        return self._is_feasible

    def maxcv(self, x):
        """
        Evaluate the maximum constraint violation.

        Parameters
        ----------
        x : array_like, shape (n,)
            Point at which the maximum constraint violation is evaluated.

        Returns
        -------
        float
            Maximum constraint violation at `x`.
        """
        x = np.asarray(x, dtype=float)
        return float(max(
            np.max(self.a_ub @ x - self.b_ub, initial=0.0),
            np.max(np.abs(self.a_eq @ x - self.b_eq), initial=0.0),
        ))

    def _normalize(self, a, b, is_equality):
        norm = np.linalg.norm(a, axis=1)
        is_zero = norm <= get_arrays_tol(b) * np.maximum(1.0, np.abs(b))
        if is_equality:
            violated = is_zero & (np.abs(b) > get_arrays_tol(b))
        else:
            violated = is_zero & (b < -get_arrays_tol(b))
        if np.any(violated):
            self._is_feasible = False
        a = a[~is_zero, :] / norm[~is_zero, np.newaxis]
        b = b[~is_zero] / norm[~is_zero]
        return a, b


class NonlinearConstraints:
    """
    Nonlinear inequality constraints ``c(x) <= 0``.
    """

    def __init__(self, m, debug):
        """
        Initialize the nonlinear constraints.

        Parameters
        ----------
        m : {int, None}
            Number of nonlinear constraints, or None if it is given by the
            first evaluation.
        debug : bool
            Whether to make debugging tests during the execution.
        """
        if debug:
            assert m is None or isinstance(m, int)
        self._m = m

    @property
    def m(self):
        """
        Number of nonlinear constraints.

        Returns
        -------
        int
            Number of nonlinear constraints.

        Raises
        ------
        ValueError
            If the number of nonlinear constraints is not known yet.
        """
        if self._m is None:
            raise ValueError('The number of nonlinear constraints is unknown.')
        return self._m

    def process(self, c_val):
        """
        Check and clean the nonlinear constraint values.

        NaN values are replaced by a large barrier value, and the values are
        clipped to the barrier.

        Parameters
        ----------
        c_val : numpy.ndarray
            Nonlinear constraint values.

        Returns
        -------
        `numpy.ndarray`, shape (m,)
            Cleaned nonlinear constraint values.

        Raises
        ------
        `trdfo.utils.InvalidInputError`
            If the number of values is inconsistent.
        """
        c_val = np.array(c_val, dtype=float)
        if self._m is None:
            self._m = c_val.size
        elif c_val.size != self._m:
            raise InvalidInputError(f'The constraint function must return {self._m} values, got {c_val.size}.')
        c_val[np.isnan(c_val)] = BARRIER
        return np.clip(c_val, -BARRIER, BARRIER)

    @staticmethod
    def maxcv(c_val):
        """
        Evaluate the maximum constraint violation.

        Parameters
        ----------
        c_val : array_like, shape (m,)
            Values of the nonlinear constraints.

        Returns
        -------
        float
            Maximum constraint violation.
        """
        return float(np.max(c_val, initial=0.0))


class Problem:
    """
    Optimization problem.
    """

    def __init__(self, obj, x0, bounds, linear, nonlinear, callback, feasibility_tol, store_history, history_size, debug):
        """
        Initialize the optimization problem.

        The problem is preprocessed to remove all the variables that are fixed
        by the bound constraints.

        Parameters
        ----------
        obj : ObjectiveFunction
            Objective function.
        x0 : array_like, shape (n,)
            Initial guess.
        bounds : BoundConstraints
            Bound constraints.
        linear : LinearConstraints
            Linear constraints.
        nonlinear : NonlinearConstraints
            Nonlinear constraints.
        callback : {callable, None}
            Callback function.
        feasibility_tol : float
            Tolerance on the constraint violation.
        store_history : bool
            Whether to store the function evaluations.
        history_size : int
            Maximum number of function evaluations to store.
        debug : bool
            Whether to make debugging tests during the execution.

        Raises
        ------
        `trdfo.utils.InvalidInputError`
            If the dimensions of the problem are inconsistent.
        """
        if debug:
            assert isinstance(obj, ObjectiveFunction)
            assert isinstance(bounds, BoundConstraints)
            assert isinstance(linear, LinearConstraints)
            assert isinstance(nonlinear, NonlinearConstraints)
            assert isinstance(feasibility_tol, float)
            assert isinstance(store_history, bool)
            assert isinstance(history_size, int)
            assert isinstance(debug, bool)

        self._obj = obj
        self._nonlinear = nonlinear
        if callback is not None and not callable(callback):
            raise InvalidInputError('The callback must be a callable function.')
        self._callback = callback

        # Check the consistency of the problem.
        x0 = exact_1d_array(x0, 'The initial guess must be a vector.')
        n = x0.size
        if n == 0:
            raise InvalidInputError('The number of variables must be positive.')
        if not np.all(np.isfinite(x0)):
            raise InvalidInputError('The initial guess must be finite.')
        if bounds.xl.size != n or bounds.xu.size != n:
            raise InvalidInputError(f'The bounds must have {n} elements.')
        if linear.a_ub.shape[1] != n or linear.a_eq.shape[1] != n:
            raise InvalidInputError(f'The left-hand side matrices of the linear constraints must have {n} columns.')

        # Check which variables are fixed.
        tol = get_arrays_tol(bounds.xl, bounds.xu)
        self._fixed_idx = (bounds.xl <= bounds.xu) & (np.abs(bounds.xl - bounds.xu) < tol)
        self._fixed_val = 0.5 * (bounds.xl[self._fixed_idx] + bounds.xu[self._fixed_idx])
        self._fixed_val = np.clip(self._fixed_val, bounds.xl[self._fixed_idx], bounds.xu[self._fixed_idx])

        # Set the bound constraints.
        self._orig_bounds = bounds
        self._bounds = BoundConstraints(Bounds(bounds.xl[~self._fixed_idx], bounds.xu[~self._fixed_idx]))

        # Set the initial guess.
        self._x0 = self._bounds.project(x0[~self._fixed_idx])

        # Set the linear constraints.
        self._linear = LinearConstraints(
            linear.a_ub[:, ~self._fixed_idx],
            linear.b_ub - linear.a_ub[:, self._fixed_idx] @ self._fixed_val,
            linear.a_eq[:, ~self._fixed_idx],
            linear.b_eq - linear.a_eq[:, self._fixed_idx] @ self._fixed_val,
            debug,
        )
        self._linear_feasible = linear.is_feasible and self._linear.is_feasible
        if self._linear_feasible and bounds.is_feasible and self._linear.m_ub + self._linear.m_eq > 0:
            # The polytope is empty if the feasibility problem has no solution.
            res = linprog(
                np.zeros(self._bounds.xl.size),
                A_ub=self._linear.a_ub if self._linear.m_ub > 0 else None,
                b_ub=self._linear.b_ub + feasibility_tol if self._linear.m_ub > 0 else None,
                A_eq=self._linear.a_eq if self._linear.m_eq > 0 else None,
                b_eq=self._linear.b_eq if self._linear.m_eq > 0 else None,
                bounds=list(zip(self._bounds.xl, self._bounds.xu)),
                method='highs',
            )
            self._linear_feasible = res.status != 2

        # Set the initial filter.
        self._feasibility_tol = feasibility_tol
        self._fun_filter = []
        self._maxcv_filter = []
        self._cub_filter = []
        self._x_filter = []

        # Set the initial history.
        self._store_history = store_history
        self._history_size = history_size
        self._fun_history = []
        self._maxcv_history = []
        self._x_history = []

    def __call__(self, x):
        """
        Evaluate the objective and nonlinear constraint functions.

        Parameters
        ----------
        x : array_like, shape (n,)
            Point at which the functions are evaluated.

        Returns
        -------
        float
            Objective function value.
        `numpy.ndarray`, shape (m_nonlinear,)
            Nonlinear inequality constraint function values.

        Raises
        ------
        `trdfo.utils.MaxEvalError`
            If the maximum number of function evaluations has been reached.
        `trdfo.utils.CallbackSuccess`
            If the callback function raises a ``StopIteration``.
        """
        # Evaluate the objective and nonlinear constraint functions. The
        # barrier values make the points at which the functions are undefined
        # worse than any other point.
        x = self.bounds.project(np.asarray(x, dtype=float))
        fun_val, cub_val = self._obj(self.build_x(x))
        if np.isnan(fun_val):
            fun_val = BARRIER
        fun_val = max(min(fun_val, BARRIER), -BARRIER)
        cub_val = self._nonlinear.process(cub_val)
        maxcv_val = self.maxcv(x, cub_val)
        if self._store_history:
            if len(self._fun_history) >= self._history_size:
                self._fun_history.pop(0)
                self._maxcv_history.pop(0)
                self._x_history.pop(0)
            self._fun_history.append(fun_val)
            self._maxcv_history.append(maxcv_val)
            self._x_history.append(self.build_x(x))

        # Add the point to the filter if it is not dominated by any point.
        maxcv_shift = max(maxcv_val - self._feasibility_tol, 0.0)
        if all(fun_val < fun_filter or maxcv_shift < max(maxcv_filter - self._feasibility_tol, 0.0) for fun_filter, maxcv_filter in zip(self._fun_filter, self._maxcv_filter)):
            self._fun_filter.append(fun_val)
            self._maxcv_filter.append(maxcv_val)
            self._cub_filter.append(np.copy(cub_val))
            self._x_filter.append(np.copy(x))

            # Remove the points in the filter that are dominated by the new
            # point, which is the last one.
            for k in range(len(self._fun_filter) - 2, -1, -1):
                if fun_val <= self._fun_filter[k] and maxcv_shift <= max(self._maxcv_filter[k] - self._feasibility_tol, 0.0):
                    self._fun_filter.pop(k)
                    self._maxcv_filter.pop(k)
                    self._cub_filter.pop(k)
                    self._x_filter.pop(k)

        # Evaluate the callback function after updating the filter to ensure
        # that the current point can be returned by the method.
        if self._callback is not None:
            sig = signature(self._callback)
            try:
                if set(sig.parameters) == {'intermediate_result'}:
                    intermediate_result = OptimizeResult(x=self.build_x(x), fun=fun_val, cstrv=maxcv_val)
                    self._callback(intermediate_result=intermediate_result)
                else:
                    self._callback(self.build_x(x))
            except StopIteration as exc:
                raise CallbackSuccess from exc

        return fun_val, cub_val

    @property
    def n(self):
        """
        Number of variables.

        Returns
        -------
        int
            Number of variables.
        """
        return self.x0.size

    @property
    def n_orig(self):
        """
        Number of variables in the original problem (with fixed variables).

        Returns
        -------
        int
            Number of variables in the original problem (with fixed variables).
        """
        return self._fixed_idx.size

    @property
    def x0(self):
        """
        Initial guess.

        Returns
        -------
        `numpy.ndarray`, shape (n,)
            Initial guess.
        """
        return self._x0

    @property
    def n_eval(self):
        """
        Number of function evaluations.

        Returns
        -------
        int
            Number of function evaluations.
        """
        return self._obj.n_eval

    @property
    def max_eval(self):
        """
        Maximum number of function evaluations.

        Returns
        -------
        int
            Maximum number of function evaluations.
        """
        return self._obj.max_eval

    @property
    def fun_name(self):
        """
        Name of the objective function.

        Returns
        -------
        str
            Name of the objective function.
        """
        return self._obj.name

    @property
    def bounds(self):
        """
        Bound constraints.

        Returns
        -------
        BoundConstraints
            Bound constraints.
        """
        return self._bounds

    @property
    def linear(self):
        """
        Linear constraints.

        Returns
        -------
        LinearConstraints
            Linear constraints.
        """
        return self._linear

    @property
    def feasibility_tol(self):
        """
        Tolerance on the constraint violation.

        Returns
        -------
        float
            Tolerance on the constraint violation.
        """
        return self._feasibility_tol

    @property
    def m_bounds(self):
        """
        Number of bound constraints.

        Returns
        -------
        int
            Number of bound constraints.
        """
        return self.bounds.m

    @property
    def m_linear_ub(self):
        """
        Number of linear inequality constraints.

        Returns
        -------
        int
            Number of linear inequality constraints.
        """
        return self.linear.m_ub

    @property
    def m_linear_eq(self):
        """
        Number of linear equality constraints.

        Returns
        -------
        int
            Number of linear equality constraints.
        """
        return self.linear.m_eq

    @property
    def m_nonlinear(self):
        """
        Number of nonlinear inequality constraints.

        Returns
        -------
        int
            Number of nonlinear inequality constraints.

        Raises
        ------
        ValueError
            If the number of nonlinear constraints is not known yet.
        """
        return self._nonlinear.m

    @property
    def is_feasible(self):
        """
        Whether the bound and linear constraints admit a feasible point.

        Returns
        -------
        bool
            Whether the bound and linear constraints admit a feasible point.
        """
        return self._orig_bounds.is_feasible and self._linear_feasible

    @property
    def fun_history(self):
        """
        History of objective function evaluations.

        Returns
        -------
        `numpy.ndarray`, shape (n_eval,)
            History of objective function evaluations.
        """
        return np.array(self._fun_history, dtype=float)

    @property
    def maxcv_history(self):
        """
        History of maximum constraint violations.

        Returns
        -------
        `numpy.ndarray`, shape (n_eval,)
            History of maximum constraint violations.
        """
        return np.array(self._maxcv_history, dtype=float)

    @property
    def x_history(self):
        """
        History of evaluated points.

        Returns
        -------
        `numpy.ndarray`, shape (n_eval, n_orig)
            History of evaluated points.
        """
        return np.array(self._x_history, dtype=float).reshape((-1, self.n_orig))

    def build_x(self, x):
        """
        Build the full vector of variables from the reduced vector.

        Parameters
        ----------
        x : array_like, shape (n,)
            Reduced vector of variables.

        Returns
        -------
        `numpy.ndarray`, shape (n_orig,)
            Full vector of variables.
        """
        x_full = np.empty(self.n_orig)
        x_full[self._fixed_idx] = self._fixed_val
        x_full[~self._fixed_idx] = x
        return self._orig_bounds.project(x_full)

    def maxcv(self, x, cub_val=None):
        """
        Evaluate the maximum constraint violation.

        Parameters
        ----------
        x : array_like, shape (n,)
            Point at which the maximum constraint violation is evaluated.
        cub_val : array_like, shape (m_nonlinear,), optional
            Values of the nonlinear inequality constraints. If not provided,
            only the bound and linear constraints are considered.

        Returns
        -------
        float
            Maximum constraint violation at `x`.
        """
        maxcv_val = max(self.bounds.maxcv(x), self.linear.maxcv(x))
        if cub_val is not None:
            maxcv_val = max(maxcv_val, self._nonlinear.maxcv(cub_val))
        return maxcv_val

    def best_eval(self):
        """
        Return the best point evaluated so far.

        A point with a smaller constraint violation (up to the feasibility
        tolerance) is always preferred. Among equally feasible points, the one
        with the least objective function value is preferred, and the most
        recent one breaks the remaining ties.

        Returns
        -------
        `numpy.ndarray`, shape (n,)
            Best point, or the initial guess if no point has been evaluated.
        float
            Corresponding objective function value (NaN if no point has been
            evaluated).
        float
            Corresponding maximum constraint violation.
        `numpy.ndarray`
            Corresponding nonlinear constraint values.
        """
        if len(self._fun_filter) == 0:
            return np.copy(self.x0), np.nan, self.maxcv(self.x0), np.empty(0)

        fun_filter = np.array(self._fun_filter)
        maxcv_filter = np.array(self._maxcv_filter)
        maxcv_shift = np.maximum(maxcv_filter - self._feasibility_tol, 0.0)
        feasible_idx = maxcv_shift <= np.min(maxcv_shift) + np.finfo(float).eps
        fun_min_idx = feasible_idx & (fun_filter <= np.min(fun_filter[feasible_idx]))
        if np.count_nonzero(fun_min_idx) > 1:
            fun_min_idx &= maxcv_shift <= np.min(maxcv_shift[fun_min_idx])
        i = np.flatnonzero(fun_min_idx)[-1]
        x_best = self.bounds.project(self._x_filter[i])
        return x_best, fun_filter[i], maxcv_filter[i], np.copy(self._cub_filter[i])
