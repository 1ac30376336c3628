import logging
import sys
import warnings

import numpy as np
from scipy.optimize import Bounds, LinearConstraint, OptimizeResult

from .framework import TrustRegion
from .problem import ObjectiveFunction, BoundConstraints, LinearConstraints, NonlinearConstraints, Problem
from .settings import Capability, ExitStatus, Options, PrintLevel, Solver, DEFAULT_OPTIONS, PRINT_OPTIONS
from .utils import CallbackSuccess, InvalidInputError, MaxEvalError, TargetSuccess, exact_1d_array, exact_2d_array, get_arrays_tol

_log = logging.getLogger(__name__)


def minimize(fun, x0, args=(), method=None, xl=None, xu=None, aineq=None, bineq=None, aeq=None, beq=None, callback=None, options=None, bounds=None, constraints=()):
    r"""
    Minimize a scalar function using a derivative-free trust-region method.

    The method is selected according to the constraints of the problem, unless
    it is given explicitly by `method`. All methods are model-based
    trust-region methods in the spirit of Powell's solvers [1]_ [2]_ [3]_
    [4]_ [5]_: the objective function (and the nonlinear constraint functions)
    are modeled by quadratic or linear interpolants, which are minimized in a
    trust region to provide new trial points.

    Parameters
    ----------
    fun : callable
        Objective function to be minimized.

            ``fun(x, *args) -> float``

        where ``x`` is an array with shape (n,) and `args` is a tuple. If the
        method is ``'cobyla'``, the function also returns the values of the
        nonlinear inequality constraints ``c(x) <= 0``

            ``fun(x, *args) -> (float, array_like)``

    x0 : array_like, shape (n,)
        Initial guess.
    args : tuple, optional
        Extra arguments passed to the objective function. They are replaced by
        ``(options['data'],)`` if the ``data`` option is provided.
    method : str, optional
        Name of the method. It can be ``'uobyqa'``, ``'newuoa'``,
        ``'bobyqa'``, ``'lincoa'``, or ``'cobyla'``. By default, ``'cobyla'``
        is chosen if the option ``m_nlcon`` is positive, ``'lincoa'`` if there
        are linear constraints, ``'bobyqa'`` if there are bound constraints,
        and ``'newuoa'`` otherwise. Constraints that the method cannot handle
        are ignored with a warning.
    xl : array_like, shape (n,), optional
        Lower bounds on the variables.
    xu : array_like, shape (n,), optional
        Upper bounds on the variables.
    aineq : array_like, shape (m_ineq, n), optional
        Left-hand side matrix of the linear inequality constraints
        ``aineq @ x <= bineq``.
    bineq : array_like, shape (m_ineq,), optional
        Right-hand side vector of the linear inequality constraints.
    aeq : array_like, shape (m_eq, n), optional
        Left-hand side matrix of the linear equality constraints
        ``aeq @ x == beq``.
    beq : array_like, shape (m_eq,), optional
        Right-hand side vector of the linear equality constraints.
    callback : callable, optional
        A callback executed at each objective function evaluation. The method
        terminates if a ``StopIteration`` exception is raised by the callback.
        It should have the signature ``callback(x)`` or
        ``callback(intermediate_result)``, where ``intermediate_result`` is an
        instance of `scipy.optimize.OptimizeResult` with attributes ``x``,
        ``fun``, and ``cstrv``.
    options : dict, optional
        Options passed to the solver. Accepted keys are:

            iprint : int, optional
                Level of console reporting: 0 (silent), 1 (exit message), 2
                (each reduction of the resolution), or 3 (each evaluation).
            rhobeg : float, optional
                Initial trust-region radius.
            rhoend : float, optional
                Final trust-region radius.
            maxfun : int, optional
                Maximum number of function evaluations.
            maxiter : int, optional
                Maximum number of iterations.
            npt : int, optional
                Number of interpolation points.
            ftarget : float, optional
                Target on the objective function value. The optimization
                procedure is terminated when the objective function value of a
                nearly feasible point is less than or equal to this target.
            data : object, optional
                Opaque context forwarded to the objective function.
            m_nlcon : int, optional
                Number of nonlinear constraints (``'cobyla'`` only).
            feasibility_tol : float, optional
                Tolerance on the constraint violation.
            eta1, eta2 : float, optional
                Thresholds on the reduction ratio.
            gamma1, gamma2 : float, optional
                Factors of decrease and increase of the trust-region radius.
            store_history : bool, optional
                Whether to store the history of the function evaluations.
            history_size : int, optional
                Maximum number of function evaluations to store in the history.
            debug : bool, optional
                Whether to perform additional checks. This option should be
                used only for debugging purposes and is highly discouraged.

    bounds : `scipy.optimize.Bounds`, optional
        Bound constraints, intersected with `xl` and `xu`.
    constraints : {`scipy.optimize.LinearConstraint`, list}, optional
        Linear constraints, in addition to `aineq`, `bineq`, `aeq`, and `beq`.

    Returns
    -------
    `scipy.optimize.OptimizeResult`
        Result of the optimization procedure, with the following fields:

            message : str
                Description of the cause of the termination.
            success : bool
                Whether the optimization procedure terminated successfully.
            status : int
                Termination status of the optimization procedure (see
                `trdfo.settings.ExitStatus`).
            x : `numpy.ndarray`, shape (n,)
                Solution point.
            fun : float
                Objective function value at the solution point.
            cstrv : float
                Maximum constraint violation at the solution point, also
                available as ``maxcv``.
            nlconstr : `numpy.ndarray`, shape (m_nlcon,)
                Nonlinear constraint values at the solution point.
            nit : int
                Number of iterations.
            nfev : int
                Number of function evaluations.

        If the ``store_history`` option is True, the result also has the
        fields ``fun_history``, ``cstrv_history``, and ``x_history``.

    References
    ----------
    .. [1] M. J. D. Powell. UOBYQA: unconstrained optimization by quadratic
       approximation. *Math. Program.*, 92(3):555--582, 2002.
    .. [2] M. J. D. Powell. The NEWUOA software for unconstrained optimization
       without derivatives. In G. Di Pillo and M. Roma, editors, *Large-Scale
       Nonlinear Optimization*, pages 255--297. Springer, Boston, MA, USA,
       2006.
    .. [3] M. J. D. Powell. The BOBYQA algorithm for bound constrained
       optimization without derivatives. Technical Report DAMTP 2009/NA06,
       University of Cambridge, Cambridge, UK, 2009.
    .. [4] M. J. D. Powell. On fast trust region methods for quadratic models
       with linear constraints. *Math. Program. Comput.*, 7(3):237--267, 2015.
    .. [5] M. J. D. Powell. A direct search optimization method that models the
       objective and constraint functions by linear interpolation. In S. Gomez
       and J. P. Hennart, editors, *Advances in Optimization and Numerical
       Analysis*, pages 51--67. Springer, Dordrecht, The Netherlands, 1994.

    Examples
    --------
    .. testsetup::

        import numpy as np
        np.set_printoptions(precision=3, suppress=True)

    >>> from trdfo import minimize
    >>> from scipy.optimize import rosen

    >>> x0 = [1.3, 0.7, 0.8, 1.9, 1.2]
    >>> res = minimize(rosen, x0)
    >>> res.x
    array([1., 1., 1., 1., 1.])

    Bound and linear constraints are given as arrays:

    >>> def fun(x):
    ...     return (x[0] - 1.0) ** 2.0 + (x[1] - 2.5) ** 2.0
    >>> aineq = [[-1.0, 2.0], [1.0, 2.0], [1.0, -2.0]]
    >>> bineq = [2.0, 6.0, 2.0]
    >>> res = minimize(fun, [2.0, 0.0], xl=[0.0, 0.0], aineq=aineq, bineq=bineq)
    >>> res.x
    array([1.4, 1.7])
    """
    # Get the options that are needed to define the problem.
    if options is None:
        options = {}
    else:
        options = dict(options)
    _set_basic_options(options)
    debug = options[Options.DEBUG]
    if options[Options.DATA] is not None:
        args = (options[Options.DATA],)
    elif not isinstance(args, tuple):
        args = (args,)

    # Define the problem. Inconsistent input is reported before any
    # evaluation of the objective function.
    try:
        solver, x0, bounds, linear = _preprocess(x0, method, xl, xu, aineq, bineq, aeq, beq, bounds, constraints, options)
        obj = ObjectiveFunction(fun, solver.capability is Capability.NONLINEAR, sys.maxsize, options[Options.VERBOSE] >= PrintLevel.FEVL, debug, *args)
        nonlinear = NonlinearConstraints(options[Options.M_NLCON], debug)
        pb = Problem(obj, x0, bounds, linear, nonlinear, callback, options[Options.FEASIBILITY_TOL], options[Options.STORE_HISTORY], options[Options.HISTORY_SIZE], debug)
    except InvalidInputError as exc:
        _log.debug(f'Invalid input: {exc}')
        return _build_invalid_result(x0, str(exc), options)
    _set_default_options(options, pb.n, solver)
    obj.max_eval = options[Options.MAX_EVAL]

    # Skip the computations whenever possible.
    if not pb.is_feasible:
        # The bound or the linear constraints are infeasible.
        return _build_result(pb, ExitStatus.INFEASIBLE_ERROR, 0, options)
    elif pb.n == 0:
        # All variables are fixed by the bound constraints.
        status = ExitStatus.FIXED_SUCCESS
        try:
            pb(pb.x0)
        except CallbackSuccess:
            status = ExitStatus.CALLBACK_SUCCESS
        except InvalidInputError:
            status = ExitStatus.INVALID_INPUT
        return _build_result(pb, status, 0, options)
    if options[Options.VERBOSE] >= PrintLevel.RHO:
        print(f'Starting the optimization procedure with {solver.value.upper()}.')
        print(f'Initial trust-region radius: {options[Options.RHOBEG]}.')
        print(f'Final trust-region radius: {options[Options.RHOEND]}.')
        print(f'Maximum number of function evaluations: {options[Options.MAX_EVAL]}.')
        print(f'Maximum number of iterations: {options[Options.MAX_ITER]}.')
        print()

    n_iter = 0
    try:
        framework = TrustRegion(pb, options, solver.capability)
        quadratic_models = not framework.models.is_linear and options[Options.NPT] < ((pb.n + 1) * (pb.n + 2)) // 2

        # Start the optimization procedure.
        _log.debug('Start the main loop')
        n_short_steps = 0
        n_very_short_steps = 0
        n_alt_models = 0
        while True:
            # Stop the optimization procedure if the maximum number of
            # iterations has been exceeded.
            if n_iter >= options[Options.MAX_ITER]:
                status = ExitStatus.MAXTR_REACHED
                break
            n_iter += 1
            if not framework.models.is_finite:
                status = ExitStatus.NAN_INF_MODEL
                break

            # Update the point around which the models are built.
            if np.linalg.norm(framework.x_best - framework.models.interpolation.x_base) >= 10.0 * framework.radius:
                framework.shift_x_base(options)

            # Evaluate the trial step.
            radius_save = framework.radius
            normal_step, tangential_step = framework.get_trust_region_step(options)
            step = normal_step + tangential_step
            if not np.all(np.isfinite(step)):
                status = ExitStatus.NAN_INF_X
                break
            s_norm = np.linalg.norm(step)

            # When increasing the penalty parameter, the best point so far may
            # change. In this case, we restart the iteration.
            reduct = 0.0
            if s_norm > 0.5 * framework.resolution:
                if not framework.increase_penalty(step):
                    _log.debug('Increasing the penalty changed the best point')
                    continue
                reduct = framework.get_predicted_reduction(step)
                if np.isnan(reduct):
                    status = ExitStatus.TRSUBP_FAILED
                    break

            # If the trial step is too short or does not reduce the model, we
            # do not attempt to evaluate the objective function. Instead, we
            # reduce the trust-region radius and check whether the resolution
            # should be reduced and whether the geometry of the interpolation
            # set should be improved. The criterion for performing an
            # exceptional jump is taken from NEWUOA.
            if s_norm <= 0.5 * framework.resolution or reduct <= 0.0:
                framework.radius *= 0.1
                if radius_save > framework.resolution:
                    n_short_steps = 0
                    n_very_short_steps = 0
                else:
                    n_short_steps += 1
                    n_very_short_steps += 1
                    if s_norm > 0.1 * framework.resolution:
                        n_very_short_steps = 0
                reduce_resolution = n_short_steps >= 5 or n_very_short_steps >= 3
                if reduce_resolution:
                    n_short_steps = 0
                    n_very_short_steps = 0
                    improve_geometry = False
                else:
                    k_new, dist_new = framework.get_index_to_remove()
                    improve_geometry = dist_new > max(framework.radius, 2.0 * framework.resolution)
            else:
                # Evaluate the objective and nonlinear constraint functions.
                x_new = pb.bounds.project(framework.x_best + step)
                fun_val, cub_val = _eval(pb, x_new, options)

                # Calculate the reduction ratio.
                ratio = framework.get_reduction_ratio(step, fun_val, cub_val)
                _log.debug(f'Reduction ratio: {ratio}')

                # Update the interpolation set, unless the trial point is
                # worse than the best point and is not needed by the geometry
                # of the interpolation set.
                ill_conditioned = False
                if framework.is_acceptable_geometry(x_new, fun_val, cub_val):
                    _log.debug('The trial point is not included in the interpolation set')
                else:
                    is_better = framework.merit(x_new, fun_val, cub_val) < framework.merit(framework.x_best, framework.fun_best, framework.cub_best)
                    k_new = framework.get_index_to_remove(x_new, not is_better)[0]
                    ill_conditioned = framework.models.update_interpolation(k_new, x_new, fun_val, cub_val)
                    framework.set_best_index()

                # Update the trust-region radius.
                framework.update_radius(step, ratio, options)

                # Attempt to replace the models by the alternative ones.
                if quadratic_models and framework.radius <= framework.resolution:
                    if ratio >= 0.01:
                        n_alt_models = 0
                    else:
                        n_alt_models += 1
                        grad = framework.models.fun_grad(framework.x_best)
                        grad_alt = framework.models.fun_alt_grad(framework.x_best)
                        if np.linalg.norm(grad) < 10.0 * np.linalg.norm(grad_alt):
                            n_alt_models = 0
                        if n_alt_models >= 3:
                            _log.debug('The models are replaced by the alternative ones')
                            framework.models.reset_models()
                            n_alt_models = 0

                # Check whether the resolution should be reduced.
                k_new, dist_new = framework.get_index_to_remove()
                improve_geometry = ill_conditioned or ratio <= 0.1 and dist_new > max(framework.radius, 2.0 * framework.resolution)
                reduce_resolution = radius_save <= framework.resolution and ratio <= 0.1 and not improve_geometry

            # Reduce the resolution if necessary.
            if reduce_resolution:
                if framework.resolution <= options[Options.RHOEND]:
                    status = ExitStatus.SMALL_TR_RADIUS
                    break
                framework.reduce_resolution(options)
                framework.decrease_penalty()

                if options[Options.VERBOSE] >= PrintLevel.RHO:
                    _print_step(f'New trust-region radius: {framework.resolution}', pb, pb.build_x(framework.x_best), framework.fun_best, framework.maxcv_best, pb.n_eval, n_iter)
                    print()

            # Improve the geometry of the interpolation set if necessary.
            if improve_geometry:
                _log.debug(f'Improve the geometry of the interpolation set by replacing point {k_new}')
                step = framework.get_geometry_step(k_new, options)
                x_new = pb.bounds.project(framework.x_best + step)
                fun_val, cub_val = _eval(pb, x_new, options)
                framework.models.update_interpolation(k_new, x_new, fun_val, cub_val)
                framework.set_best_index()
    except MaxEvalError:
        status = ExitStatus.MAXFUN_REACHED
    except TargetSuccess:
        status = ExitStatus.FTARGET_ACHIEVED
    except CallbackSuccess:
        status = ExitStatus.CALLBACK_SUCCESS
    except np.linalg.LinAlgError:
        status = ExitStatus.DAMAGING_ROUNDING
    except MemoryError:
        status = ExitStatus.MEMORY_ALLOCATION_FAILS
    except InvalidInputError as exc:
        _log.debug(f'Invalid input: {exc}')
        status = ExitStatus.INVALID_INPUT
    _log.debug(f'Exit status: {status.name}')
    return _build_result(pb, status, n_iter, options)


def _preprocess(x0, method, xl, xu, aineq, bineq, aeq, beq, bounds, constraints, options):
    """
    Check the input and select the solver.
    """
    x0 = exact_1d_array(x0, 'The initial guess must be a vector.')
    n = x0.size

    # Build the bound constraints.
    xl = _get_vector(xl, n, -np.inf, 'lower bounds')
    xu = _get_vector(xu, n, np.inf, 'upper bounds')
    if bounds is not None:
        if not isinstance(bounds, Bounds):
            raise InvalidInputError('The bounds must be an instance of scipy.optimize.Bounds.')
        # Scalar bounds apply to every variable, as in scipy.optimize.
        lb = np.full(n, bounds.lb, dtype=float) if np.ndim(bounds.lb) == 0 else bounds.lb
        ub = np.full(n, bounds.ub, dtype=float) if np.ndim(bounds.ub) == 0 else bounds.ub
        xl = np.maximum(xl, _get_vector(lb, n, -np.inf, 'lower bounds'))
        xu = np.minimum(xu, _get_vector(ub, n, np.inf, 'upper bounds'))

    # Build the linear constraints.
    aineq, bineq = _get_linear(aineq, bineq, n, 'inequality')
    aeq, beq = _get_linear(aeq, beq, n, 'equality')
    if isinstance(constraints, LinearConstraint):
        constraints = [constraints]
    for constraint in constraints:
        if not isinstance(constraint, LinearConstraint):
            raise InvalidInputError('The constraints must be instances of scipy.optimize.LinearConstraint.')
        a = exact_2d_array(constraint.A, 'The left-hand side matrix of the linear constraints must be a matrix.')
        if a.shape[1] != n:
            raise InvalidInputError(f'The left-hand side matrix of the linear constraints must have {n} columns.')
        lb = np.broadcast_to(np.asarray(constraint.lb, dtype=float), a.shape[:1])
        ub = np.broadcast_to(np.asarray(constraint.ub, dtype=float), a.shape[:1])
        is_equality = np.abs(ub - lb) <= get_arrays_tol(lb, ub)
        has_ub = ~is_equality & (ub < np.inf)
        has_lb = ~is_equality & (lb > -np.inf)
        aeq = np.vstack([aeq, a[is_equality, :]])
        beq = np.r_[beq, 0.5 * (lb + ub)[is_equality]]
        aineq = np.vstack([aineq, a[has_ub, :], -a[has_lb, :]])
        bineq = np.r_[bineq, ub[has_ub], -lb[has_lb]]

    # Select the solver.
    has_bounds = np.any(xl > -np.inf) or np.any(xu < np.inf)
    has_linear = bineq.size + beq.size > 0
    if method is None:
        m_nlcon = options[Options.M_NLCON]
        if m_nlcon is not None and m_nlcon > 0:
            solver = Solver.COBYLA
        elif has_linear:
            solver = Solver.LINCOA
        elif has_bounds:
            solver = Solver.BOBYQA
        else:
            solver = Solver.NEWUOA
    else:
        try:
            solver = Solver(method.lower())
        except (AttributeError, ValueError) as exc:
            raise InvalidInputError(f'Unknown method: {method}.') from exc

    # Remove the constraints that the solver cannot handle.
    capability = solver.capability
    if capability is Capability.NONE and has_bounds:
        warnings.warn(f'{solver.value.upper()} cannot handle bound constraints; they are ignored.', RuntimeWarning, 3)
        xl = np.full(n, -np.inf)
        xu = np.full(n, np.inf)
    if capability in {Capability.NONE, Capability.BOUNDS} and has_linear:
        warnings.warn(f'{solver.value.upper()} cannot handle linear constraints; they are ignored.', RuntimeWarning, 3)
        aineq, bineq = np.empty((0, n)), np.empty(0)
        aeq, beq = np.empty((0, n)), np.empty(0)
    return solver, x0, BoundConstraints(Bounds(xl, xu)), LinearConstraints(aineq, bineq, aeq, beq, options[Options.DEBUG])


def _get_vector(x, n, default, name):
    if x is None:
        return np.full(n, default)
    x = exact_1d_array(x, f'The {name} must be a vector.')
    if x.size != n:
        raise InvalidInputError(f'The {name} must have {n} elements.')
    return x


def _get_linear(a, b, n, name):
    if a is None or np.size(a) == 0:
        a = np.empty((0, n))
    else:
        a = exact_2d_array(a, f'The left-hand side matrix of the linear {name} constraints must be a matrix.')
    if b is None:
        b = np.empty(0)
    else:
        b = exact_1d_array(b, f'The right-hand side vector of the linear {name} constraints must be a vector.')
    if a.shape[1] != n:
        raise InvalidInputError(f'The left-hand side matrix of the linear {name} constraints must have {n} columns.')
    if b.size != a.shape[0]:
        raise InvalidInputError(f'The right-hand side vector of the linear {name} constraints must have {a.shape[0]} elements.')
    return a, b


def _set_option(options, key, cast, is_valid, default):
    """
    Set an option to its default value if it is missing or invalid.
    """
    if key in options:
        try:
            value = cast(options[key])
            valid = is_valid(value)
        except (TypeError, ValueError):
            valid = False
        if not valid:
            warnings.warn(f'Invalid value for option {key.value}: {options[key]!r}. The default value {default!r} is used.', RuntimeWarning, 4)
            value = default
    else:
        value = default
    options[key.value] = value


def _set_basic_options(options):
    """
    Set the options that are needed to define the problem.
    """
    _set_option(options, Options.VERBOSE, int, lambda x: x in {level.value for level in PrintLevel}, DEFAULT_OPTIONS[Options.VERBOSE])
    _set_option(options, Options.DEBUG, bool, lambda x: True, DEFAULT_OPTIONS[Options.DEBUG])
    _set_option(options, Options.FEASIBILITY_TOL, float, lambda x: x >= 0.0, DEFAULT_OPTIONS[Options.FEASIBILITY_TOL])
    _set_option(options, Options.STORE_HISTORY, bool, lambda x: True, DEFAULT_OPTIONS[Options.STORE_HISTORY])
    _set_option(options, Options.HISTORY_SIZE, int, lambda x: x > 0, DEFAULT_OPTIONS[Options.HISTORY_SIZE])
    if options.get(Options.M_NLCON) is not None:
        _set_option(options, Options.M_NLCON, int, lambda x: x >= 0, DEFAULT_OPTIONS[Options.M_NLCON])
    else:
        options[Options.M_NLCON.value] = None
    options.setdefault(Options.DATA.value, DEFAULT_OPTIONS[Options.DATA])


def _set_default_options(options, n, solver):
    """
    Set the default options.
    """
    # Set the trust-region radii.
    _set_option(options, Options.RHOBEG, float, lambda x: 0.0 < x < np.inf, DEFAULT_OPTIONS[Options.RHOBEG])
    _set_option(options, Options.RHOEND, float, lambda x: 0.0 <= x < np.inf, min(DEFAULT_OPTIONS[Options.RHOEND], options[Options.RHOBEG]))
    if options[Options.RHOEND] > options[Options.RHOBEG]:
        warnings.warn('The final trust-region radius is larger than the initial one; it is set to the initial one.', RuntimeWarning, 3)
        options[Options.RHOEND.value] = options[Options.RHOBEG]

    # Set the number of interpolation points.
    npt_min, npt_max = solver.npt_range(max(n, 1))
    _set_option(options, Options.NPT, int, lambda x: npt_min <= x <= npt_max, solver.default_npt(max(n, 1)))

    # Set the computational budget.
    default_max_eval = max(DEFAULT_OPTIONS[Options.MAX_EVAL](n), options[Options.NPT] + 1)
    _set_option(options, Options.MAX_EVAL, int, lambda x: x > 0, default_max_eval)
    if options[Options.MAX_EVAL] < options[Options.NPT] + 1:
        # The initial interpolation set must fit in the budget. The number of
        # interpolation points is reduced first, and the budget is increased
        # only if no admissible number of interpolation points fits.
        if options[Options.MAX_EVAL] - 1 >= npt_min:
            warnings.warn(f'The number of interpolation points is reduced to {options[Options.MAX_EVAL] - 1}.', RuntimeWarning, 3)
            options[Options.NPT.value] = options[Options.MAX_EVAL] - 1
        else:
            warnings.warn(f'The maximum number of function evaluations is increased to {npt_min + 1}.', RuntimeWarning, 3)
            options[Options.NPT.value] = npt_min
            options[Options.MAX_EVAL.value] = npt_min + 1
    _set_option(options, Options.MAX_ITER, int, lambda x: x > 0, DEFAULT_OPTIONS[Options.MAX_ITER](options[Options.MAX_EVAL]))
    _set_option(options, Options.TARGET, float, lambda x: not np.isnan(x), DEFAULT_OPTIONS[Options.TARGET])

    # Set the parameters of the trust-region framework.
    _set_option(options, Options.ETA1, float, lambda x: 0.0 <= x < 1.0, DEFAULT_OPTIONS[Options.ETA1])
    _set_option(options, Options.ETA2, float, lambda x: options[Options.ETA1] <= x < 1.0, max(DEFAULT_OPTIONS[Options.ETA2], options[Options.ETA1]))
    _set_option(options, Options.GAMMA1, float, lambda x: 0.0 < x < 1.0, DEFAULT_OPTIONS[Options.GAMMA1])
    _set_option(options, Options.GAMMA2, float, lambda x: 1.0 < x < np.inf, DEFAULT_OPTIONS[Options.GAMMA2])

    # Check whether they are any unknown options.
    for key in options:
        if key not in Options.__members__.values():
            warnings.warn(f'Unknown option: {key}.', RuntimeWarning, 3)


def _eval(pb, x_eval, options):
    """
    Evaluate the objective and nonlinear constraint functions.
    """
    fun_val, cub_val = pb(x_eval)
    if fun_val <= options[Options.TARGET] and pb.maxcv(x_eval, cub_val) <= options[Options.FEASIBILITY_TOL]:
        raise TargetSuccess
    return fun_val, cub_val


def _build_result(pb, status, n_iter, options):
    """
    Build the result of the optimization process.
    """
    x, fun, maxcv, cub = pb.best_eval()
    success = status.success
    if status != ExitStatus.FTARGET_ACHIEVED:
        success = success and maxcv <= options[Options.FEASIBILITY_TOL]
    result = OptimizeResult()
    result.message = status.message
    result.success = success
    result.status = status.value
    result.x = pb.build_x(x)
    result.fun = fun
    result.cstrv = maxcv
    result.maxcv = maxcv
    result.nlconstr = cub
    result.nfev = pb.n_eval
    result.nit = n_iter
    if options[Options.STORE_HISTORY]:
        result.fun_history = pb.fun_history
        result.cstrv_history = pb.maxcv_history
        result.x_history = pb.x_history

    # Print the result if requested.
    if options[Options.VERBOSE] >= PrintLevel.EXIT:
        _print_step(result.message, pb, result.x, result.fun, result.cstrv, result.nfev, result.nit)
    return result


def _build_invalid_result(x0, message, options):
    """
    Build the result of an optimization process with an invalid input.
    """
    try:
        x = exact_1d_array(x0, message)
    except InvalidInputError:
        x = np.empty(0)
    status = ExitStatus.INVALID_INPUT
    result = OptimizeResult()
    result.message = f'{status.message}: {message}'
    result.success = status.success
    result.status = status.value
    result.x = x
    result.fun = np.nan
    result.cstrv = np.nan
    result.maxcv = np.nan
    result.nlconstr = np.empty(0)
    result.nfev = 0
    result.nit = 0
    if options[Options.VERBOSE] >= PrintLevel.EXIT:
        print()
        print(f'{result.message}.')
    return result


def _print_step(message, pb, x, fun_val, r_val, n_eval, n_iter):
    """
    Print information about the current state of the optimization process.
    """
    print()
    print(f'{message}.')
    print(f'Number of function evaluations: {n_eval}.')
    print(f'Number of iterations: {n_iter}.')
    print(f'Least value of {pb.fun_name}: {fun_val}.')
    print(f'Maximum constraint violation: {r_val}.')
    with np.printoptions(**PRINT_OPTIONS):
        print(f'Corresponding point: {x}.')
