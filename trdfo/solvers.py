from .main import minimize
from .settings import Solver


def uobyqa(fun, x0, args=(), callback=None, options=None):
    r"""
    Minimize an unconstrained function using full quadratic models.

    Each model interpolates the objective function at
    ``(n + 1) * (n + 2) / 2`` points, so that it is uniquely defined.

    Parameters
    ----------
    fun : callable
        Objective function ``fun(x, *args) -> float``.
    x0 : array_like, shape (n,)
        Initial guess.
    args : tuple, optional
        Extra arguments passed to the objective function.
    callback : callable, optional
        Callback executed at each objective function evaluation.
    options : dict, optional
        Options passed to the solver (see `trdfo.minimize`).

    Returns
    -------
    `scipy.optimize.OptimizeResult`
        Result of the optimization procedure (see `trdfo.minimize`).
    """
    return minimize(fun, x0, args, Solver.UOBYQA, callback=callback, options=options)


def newuoa(fun, x0, args=(), callback=None, options=None):
    r"""
    Minimize an unconstrained function using least Frobenius norm quadratic
    models.

    By default, each model interpolates the objective function at ``2 * n + 1``
    points, and the remaining freedom is taken up by minimizing the Frobenius
    norm of the change of the Hessian matrix of the model.

    Parameters
    ----------
    fun : callable
        Objective function ``fun(x, *args) -> float``.
    x0 : array_like, shape (n,)
        Initial guess.
    args : tuple, optional
        Extra arguments passed to the objective function.
    callback : callable, optional
        Callback executed at each objective function evaluation.
    options : dict, optional
        Options passed to the solver (see `trdfo.minimize`).

    Returns
    -------
    `scipy.optimize.OptimizeResult`
        Result of the optimization procedure (see `trdfo.minimize`).

    Examples
    --------
    >>> from trdfo import newuoa
    >>> from scipy.optimize import rosen
    >>> res = newuoa(rosen, [1.3, 0.7, 0.8, 1.9, 1.2])
    >>> res.status
    0
    """
    return minimize(fun, x0, args, Solver.NEWUOA, callback=callback, options=options)


def bobyqa(fun, x0, args=(), xl=None, xu=None, callback=None, options=None):
    r"""
    Minimize a function subject to bound constraints.

    Parameters
    ----------
    fun : callable
        Objective function ``fun(x, *args) -> float``.
    x0 : array_like, shape (n,)
        Initial guess.
    args : tuple, optional
        Extra arguments passed to the objective function.
    xl, xu : array_like, shape (n,), optional
        Lower and upper bounds on the variables. The objective function is
        never evaluated outside these bounds.
    callback : callable, optional
        Callback executed at each objective function evaluation.
    options : dict, optional
        Options passed to the solver (see `trdfo.minimize`).

    Returns
    -------
    `scipy.optimize.OptimizeResult`
        Result of the optimization procedure (see `trdfo.minimize`).
    """
    return minimize(fun, x0, args, Solver.BOBYQA, xl, xu, callback=callback, options=options)


def lincoa(fun, x0, args=(), xl=None, xu=None, aineq=None, bineq=None, aeq=None, beq=None, callback=None, options=None):
    r"""
    Minimize a function subject to bound and linear constraints.

    The linear constraints are ``aineq @ x <= bineq`` and ``aeq @ x == beq``.
    Without linear constraints, the iterations are the same as those of
    `bobyqa`.

    Parameters
    ----------
    fun : callable
        Objective function ``fun(x, *args) -> float``.
    x0 : array_like, shape (n,)
        Initial guess.
    args : tuple, optional
        Extra arguments passed to the objective function.
    xl, xu : array_like, shape (n,), optional
        Lower and upper bounds on the variables.
    aineq : array_like, shape (m_ineq, n), optional
        Left-hand side matrix of the linear inequality constraints.
    bineq : array_like, shape (m_ineq,), optional
        Right-hand side vector of the linear inequality constraints.
    aeq : array_like, shape (m_eq, n), optional
        Left-hand side matrix of the linear equality constraints.
    beq : array_like, shape (m_eq,), optional
        Right-hand side vector of the linear equality constraints.
    callback : callable, optional
        Callback executed at each objective function evaluation.
    options : dict, optional
        Options passed to the solver (see `trdfo.minimize`).

    Returns
    -------
    `scipy.optimize.OptimizeResult`
        Result of the optimization procedure (see `trdfo.minimize`).

    Examples
    --------
    >>> from trdfo import lincoa
    >>> def fun(x):
    ...     return (x[0] - 5.0) ** 2.0 + (x[1] - 4.0) ** 2.0
    >>> res = lincoa(fun, [0.0, 0.0], aineq=[[1.0, 1.0]], bineq=[5.0])
    >>> res.x.round(2)
    array([3., 2.])
    """
    return minimize(fun, x0, args, Solver.LINCOA, xl, xu, aineq, bineq, aeq, beq, callback, options)


def cobyla(fun_con, x0, args=(), xl=None, xu=None, aineq=None, bineq=None, aeq=None, beq=None, callback=None, options=None):
    r"""
    Minimize a function subject to bound, linear, and nonlinear constraints,
    using linear models.

    Parameters
    ----------
    fun_con : callable
        Objective and nonlinear constraint functions

            ``fun_con(x, *args) -> (float, array_like)``

        returning the objective function value and the values of the nonlinear
        inequality constraints ``c(x) <= 0``.
    x0 : array_like, shape (n,)
        Initial guess.
    args : tuple, optional
        Extra arguments passed to `fun_con`.
    xl, xu : array_like, shape (n,), optional
        Lower and upper bounds on the variables.
    aineq : array_like, shape (m_ineq, n), optional
        Left-hand side matrix of the linear inequality constraints.
    bineq : array_like, shape (m_ineq,), optional
        Right-hand side vector of the linear inequality constraints.
    aeq : array_like, shape (m_eq, n), optional
        Left-hand side matrix of the linear equality constraints.
    beq : array_like, shape (m_eq,), optional
        Right-hand side vector of the linear equality constraints.
    callback : callable, optional
        Callback executed at each objective function evaluation.
    options : dict, optional
        Options passed to the solver (see `trdfo.minimize`). The number of
        nonlinear constraints may be given by the ``m_nlcon`` option;
        otherwise, it is set by the first evaluation.

    Returns
    -------
    `scipy.optimize.OptimizeResult`
        Result of the optimization procedure (see `trdfo.minimize`).
    """
    return minimize(fun_con, x0, args, Solver.COBYLA, xl, xu, aineq, bineq, aeq, beq, callback, options)
