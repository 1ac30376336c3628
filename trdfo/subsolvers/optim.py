import numpy as np
from scipy.linalg import null_space
from scipy.optimize import lsq_linear, nnls

from ..utils import get_arrays_tol


EPS = np.finfo(float).eps
TINY = np.finfo(float).tiny


def bound_constrained_tangential_step(grad, hess_prod, xl, xu, delta, debug):
    r"""
    Minimize approximately a quadratic function subject to bound constraints in
    a trust region.

    This function solves approximately

    .. math::

        \begin{aligned}
            \min_{d \in \R^n}   & \quad g^{\T}d + \frac{1}{2} d^{\T}Hd\\
            \text{s.t.}         & \quad l \le d \le u,\\
                                & \quad \norm{d} \le \Delta,
        \end{aligned}

    using an active-set variation of the truncated conjugate gradient method.

    Parameters
    ----------
    grad : numpy.ndarray, shape (n,)
        Gradient :math:`g` as shown above.
    hess_prod : callable
        Product of the Hessian matrix :math:`H` with any vector.

            ``hess_prod(d) -> numpy.ndarray, shape (n,)``

        returns the product :math:`Hd`.
    xl : numpy.ndarray, shape (n,)
        Lower bounds :math:`l` as shown above.
    xu : numpy.ndarray, shape (n,)
        Upper bounds :math:`u` as shown above.
    delta : float
        Trust-region radius :math:`\Delta` as shown above.
    debug : bool
        Whether to make debugging tests during the execution.

    Returns
    -------
    numpy.ndarray, shape (n,)
        Approximate solution :math:`d`.

    Notes
    -----
    This function implements Algorithm 6.2 of [1]_, which is adapted from the
    TRSBOX algorithm of BOBYQA [2]_. Whenever the current iterate hits a bound,
    the corresponding variable is fixed and the method is restarted. It is
    assumed that the origin is feasible with respect to the bound constraints
    `xl` and `xu`, and that `delta` is finite and positive.

    References
    ----------
    .. [1] T. M. Ragonneau. "Model-Based Derivative-Free Optimization Methods
       and Software." Ph.D. thesis. Hong Kong: Department of Applied
       Mathematics, The Hong Kong Polytechnic University, 2022.
    .. [2] M. J. D. Powell. The BOBYQA algorithm for bound constrained
       optimization without derivatives. Tech. rep. DAMTP 2009/NA06. Cambridge,
       UK: Department of Applied Mathematics and Theoretical Physics, University
       of Cambridge, 2009.
    """
    # Check the feasibility of the subproblem.
    n = grad.size
    if debug:
        tol = get_arrays_tol(xl, xu)
        assert np.max(xl, initial=-np.inf) <= tol
        assert np.min(xu, initial=np.inf) >= -tol
        assert np.isfinite(delta) and delta > 0.0
    xl = np.minimum(xl, 0.0)
    xu = np.maximum(xu, 0.0)
    grad = np.array(grad, dtype=float)

    # Calculate the initial active set. A variable on a bound is fixed if the
    # steepest descent direction points outside the feasible set.
    free_bd = ((xl < 0.0) | (grad < 0.0)) & ((xu > 0.0) | (grad > 0.0))

    # Set the initial iterate and the initial search direction.
    step = np.zeros_like(grad)
    sd = np.zeros_like(step)
    sd[free_bd] = -grad[free_bd]

    k = 0
    reduct = 0.0
    while k < np.count_nonzero(free_bd):
        # Stop the computations if sd is not a descent direction.
        grad_sd = grad @ sd
        if grad_sd >= -10.0 * EPS * n * np.linalg.norm(grad) * np.linalg.norm(sd):
            break

        # Set alpha_tr to the step size for the trust-region constraint.
        try:
            alpha_tr = _alpha_tr(step, sd, delta)
        except ZeroDivisionError:
            break

        # Stop the computations if a step along sd is expected to give a
        # relatively small reduction in the objective function.
        if -alpha_tr * grad_sd <= 1e-8 * reduct:
            break

        # Set alpha_quad to the step size for the minimization problem.
        hess_sd = hess_prod(sd)
        curv_sd = sd @ hess_sd
        if curv_sd > TINY * abs(grad_sd):
            alpha_quad = max(-grad_sd / curv_sd, 0.0)
        else:
            alpha_quad = np.inf

        # Stop the computations if the reduction in the objective function
        # provided by an unconstrained step is small.
        alpha = min(alpha_tr, alpha_quad)
        if -alpha * (grad_sd + 0.5 * alpha * curv_sd) <= 1e-8 * reduct:
            break

        # Set alpha_bd to the step size for the bound constraints.
        i_xl = (xl > -np.inf) & (sd < -TINY * np.abs(xl - step))
        i_xu = (xu < np.inf) & (sd > TINY * np.abs(xu - step))
        all_alpha_xl = np.full_like(step, np.inf)
        all_alpha_xu = np.full_like(step, np.inf)
        all_alpha_xl[i_xl] = np.maximum((xl[i_xl] - step[i_xl]) / sd[i_xl], 0.0)
        all_alpha_xu[i_xu] = np.maximum((xu[i_xu] - step[i_xu]) / sd[i_xu], 0.0)
        alpha_xl = np.min(all_alpha_xl)
        alpha_xu = np.min(all_alpha_xu)
        alpha_bd = min(alpha_xl, alpha_xu)

        # Update the iterate.
        alpha = min(alpha, alpha_bd)
        if alpha > 0.0:
            step[free_bd] = np.clip(step[free_bd] + alpha * sd[free_bd], xl[free_bd], xu[free_bd])
            grad += alpha * hess_sd
            reduct -= alpha * (grad_sd + 0.5 * alpha * curv_sd)

        if alpha < min(alpha_tr, alpha_bd):
            # Conjugate gradient iteration. The new search direction is
            # conjugate to all the previous ones with respect to H.
            beta = (grad[free_bd] @ hess_sd[free_bd]) / curv_sd
            sd[free_bd] = beta * sd[free_bd] - grad[free_bd]
            sd[~free_bd] = 0.0
            k += 1
        elif alpha < alpha_tr:
            # A bound has been hit. Fix the corresponding variable and restart
            # the calculations.
            if alpha_xl <= alpha:
                i_new = np.argmin(all_alpha_xl)
                step[i_new] = xl[i_new]
            else:
                i_new = np.argmin(all_alpha_xu)
                step[i_new] = xu[i_new]
            free_bd[i_new] = False
            sd[free_bd] = -grad[free_bd]
            sd[~free_bd] = 0.0
            k = 0
        else:
            # The iterate is on the trust-region boundary.
            break

    if debug:
        assert np.all(xl <= step)
        assert np.all(step <= xu)
        assert np.linalg.norm(step) < 1.1 * delta
    return step


def linearly_constrained_tangential_step(grad, hess_prod, xl, xu, aub, bub, aeq, delta, debug):
    r"""
    Minimize approximately a quadratic function subject to bound and linear
    constraints in a trust region.

    This function solves approximately

    .. math::

        \begin{aligned}
            \min_{d \in \R^n}   & \quad g^{\T}d + \frac{1}{2} d^{\T}Hd\\
            \text{s.t.}         & \quad l \le d \le u,\\
                                & \quad A_{\scriptscriptstyle I}d \le b_{\scriptscriptstyle I},\\
                                & \quad A_{\scriptscriptstyle E}d = 0,\\
                                & \quad \norm{d} \le \Delta,
        \end{aligned}

    using an active-set variation of the truncated conjugate gradient method.

    Parameters
    ----------
    grad : numpy.ndarray, shape (n,)
        Gradient :math:`g` as shown above.
    hess_prod : callable
        Product of the Hessian matrix :math:`H` with any vector.

            ``hess_prod(d) -> numpy.ndarray, shape (n,)``

        returns the product :math:`Hd`.
    xl : numpy.ndarray, shape (n,)
        Lower bounds :math:`l` as shown above.
    xu : numpy.ndarray, shape (n,)
        Upper bounds :math:`u` as shown above.
    aub : numpy.ndarray, shape (m_linear_ub, n)
        Coefficient matrix :math:`A_{\scriptscriptstyle I}` as shown above.
    bub : numpy.ndarray, shape (m_linear_ub,)
        Right-hand side :math:`b_{\scriptscriptstyle I}` as shown above.
    aeq : numpy.ndarray, shape (m_linear_eq, n)
        Coefficient matrix :math:`A_{\scriptscriptstyle E}` as shown above.
    delta : float
        Trust-region radius :math:`\Delta` as shown above.
    debug : bool
        Whether to make debugging tests during the execution.

    Returns
    -------
    numpy.ndarray, shape (n,)
        Approximate solution :math:`d`.

    Notes
    -----
    This function is adapted from the TRSTEP algorithm of LINCOA [1]_. The
    initial active set is made of the nearly active constraints whose Lagrange
    multipliers, calculated by a nonnegative least-squares problem, are
    positive. The search directions then lie in the null space of the gradients
    of the active constraints, and each constraint hit by the iterates is added
    to the active set before the method is restarted. It is assumed that the
    origin is feasible with respect to all the constraints, and that `delta` is
    finite and positive.

    References
    ----------
    .. [1] M. J. D. Powell. "On fast trust region methods for quadratic models
       with linear constraints." In: Math. Program. Comput. 7 (2015), pp.
       237--267.
    """
    # Check the feasibility of the subproblem.
    n = grad.size
    if debug:
        tol = get_arrays_tol(xl, xu)
        assert np.max(xl, initial=-np.inf) <= tol
        assert np.min(xu, initial=np.inf) >= -tol
        assert np.min(bub, initial=np.inf) >= -get_arrays_tol(bub)
        assert np.isfinite(delta) and delta > 0.0
    if aub.shape[0] == 0 and aeq.shape[0] == 0:
        return bound_constrained_tangential_step(grad, hess_prod, xl, xu, delta, debug)
    xl = np.minimum(xl, 0.0)
    xu = np.maximum(xu, 0.0)
    grad = np.array(grad, dtype=float)

    # Gather the bound and linear inequality constraints, and calculate their
    # residuals at the origin.
    identity = np.eye(n)
    a_all = np.vstack([-identity, identity, aub])
    resid = np.maximum(np.r_[-xl, xu, bub], 0.0)

    # Set the initial active set, the initial iterate, and the initial search
    # direction, which is the projected steepest descent direction.
    active = _initial_active_set(grad, a_all, aeq, resid, 0.2 * delta)
    z_free = _null_space(a_all[active, :], aeq, n)
    step = np.zeros_like(grad)
    sd = -z_free @ (z_free.T @ grad)

    k = 0
    reduct = 0.0
    while k < z_free.shape[1]:
        # Stop the computations if sd is not a descent direction.
        grad_sd = grad @ sd
        if grad_sd >= -10.0 * EPS * n * np.linalg.norm(grad) * np.linalg.norm(sd):
            break

        # Set alpha_tr to the step size for the trust-region constraint.
        try:
            alpha_tr = _alpha_tr(step, sd, delta)
        except ZeroDivisionError:
            break

        # Stop the computations if a step along sd is expected to give a
        # relatively small reduction in the objective function.
        if -alpha_tr * grad_sd <= 1e-8 * reduct:
            break

        # Set alpha_quad to the step size for the minimization problem.
        hess_sd = hess_prod(sd)
        curv_sd = sd @ hess_sd
        if curv_sd > TINY * abs(grad_sd):
            alpha_quad = max(-grad_sd / curv_sd, 0.0)
        else:
            alpha_quad = np.inf

        # Stop the computations if the reduction in the objective function
        # provided by an unconstrained step is small.
        alpha = min(alpha_tr, alpha_quad)
        if -alpha * (grad_sd + 0.5 * alpha * curv_sd) <= 1e-8 * reduct:
            break

        # Set alpha_ub to the step size for the inactive constraints.
        a_sd = a_all @ sd
        i_ub = ~active & (a_sd > TINY * resid)
        all_alpha_ub = np.full_like(resid, np.inf)
        all_alpha_ub[i_ub] = np.maximum(resid[i_ub] / a_sd[i_ub], 0.0)
        alpha_ub = np.min(all_alpha_ub)

        # Update the iterate.
        alpha = min(alpha, alpha_ub)
        if alpha > 0.0:
            step = np.clip(step + alpha * sd, xl, xu)
            grad += alpha * hess_sd
            resid[~active] = np.maximum(resid[~active] - alpha * a_sd[~active], 0.0)
            reduct -= alpha * (grad_sd + 0.5 * alpha * curv_sd)

        if alpha < min(alpha_tr, alpha_ub):
            # Conjugate gradient iteration in the null space of the active
            # constraints.
            grad_proj = z_free @ (z_free.T @ grad)
            beta = (grad_proj @ hess_sd) / curv_sd
            sd = beta * sd - grad_proj
            k += 1
        elif alpha < alpha_tr:
            # A constraint has been hit. Add it to the active set and restart
            # the calculations.
            i_new = np.argmin(all_alpha_ub)
            active[i_new] = True
            resid[i_new] = 0.0
            z_free = _null_space(a_all[active, :], aeq, n)
            sd = -z_free @ (z_free.T @ grad)
            k = 0
        else:
            # The iterate is on the trust-region boundary.
            break

    if debug:
        tol = get_arrays_tol(xl, xu, bub)
        assert np.all(xl <= step)
        assert np.all(step <= xu)
        assert np.all(aub @ step <= bub + tol)
        assert np.all(np.abs(aeq @ step) <= tol)
        assert np.linalg.norm(step) < 1.1 * delta
    return step


def normal_step(aub, bub, aeq, beq, xl, xu, delta, debug):
    r"""
    Minimize approximately the violation of linear constraints subject to bound
    constraints in a trust region.

    This function solves approximately

    .. math::

        \begin{aligned}
            \min_{d \in \R^n}   & \quad \frac{1}{2} \big(\norm{\max \{A_{\scriptscriptstyle I}d - b_{\scriptscriptstyle I}, 0\}}^2 + \norm{A_{\scriptscriptstyle E}d - b_{\scriptscriptstyle E}}^2\big)\\
            \text{s.t.}         & \quad l \le d \le u,\\
                                & \quad \norm{d} \le \Delta.
        \end{aligned}

    Parameters
    ----------
    aub : numpy.ndarray, shape (m_linear_ub, n)
        Coefficient matrix :math:`A_{\scriptscriptstyle I}` as shown above.
    bub : numpy.ndarray, shape (m_linear_ub,)
        Right-hand side :math:`b_{\scriptscriptstyle I}` as shown above.
    aeq : numpy.ndarray, shape (m_linear_eq, n)
        Coefficient matrix :math:`A_{\scriptscriptstyle E}` as shown above.
    beq : numpy.ndarray, shape (m_linear_eq,)
        Right-hand side :math:`b_{\scriptscriptstyle E}` as shown above.
    xl : numpy.ndarray, shape (n,)
        Lower bounds :math:`l` as shown above.
    xu : numpy.ndarray, shape (n,)
        Upper bounds :math:`u` as shown above.
    delta : float
        Trust-region radius :math:`\Delta` as shown above.
    debug : bool
        Whether to make debugging tests during the execution.

    Returns
    -------
    numpy.ndarray, shape (n,)
        Approximate solution :math:`d`.

    Notes
    -----
    The inequality constraints are turned into equality constraints with
    nonnegative slack variables, and the resulting bound-constrained linear
    least-squares problem is solved by `scipy.optimize.lsq_linear` in the
    largest box included in the trust region. The solution is then scaled back
    into the trust region, which cannot increase the violation because it is a
    convex function that is not larger at the solution than at the origin.
    """
    # Check the feasibility of the subproblem.
    n = xl.size
    if debug:
        tol = get_arrays_tol(xl, xu)
        assert np.max(xl, initial=-np.inf) <= tol
        assert np.min(xu, initial=np.inf) >= -tol
        assert np.isfinite(delta) and delta > 0.0
    xl = np.minimum(xl, 0.0)
    xu = np.maximum(xu, 0.0)
    m_ub = bub.size
    m_eq = beq.size
    step = np.zeros(n)
    if m_ub + m_eq == 0:
        return step

    # Build the least-squares problem with the slack variables. The variables
    # whose bounds coincide are fixed at zero.
    lb = np.r_[np.maximum(xl, -delta), np.zeros(m_ub)]
    ub = np.r_[np.minimum(xu, delta), np.full(m_ub, np.inf)]
    free = lb < ub
    a = np.block([
        [aub, np.eye(m_ub)],
        [aeq, np.zeros((m_eq, m_ub))],
    ])
    b = np.r_[bub, beq]
    if np.any(free[:n]):
        res = lsq_linear(a[:, free], b, bounds=(lb[free], ub[free]))
        sol = np.zeros(n + m_ub)
        sol[free] = res.x
        step = sol[:n]

        # Scale the step back into the trust region.
        s_norm = np.linalg.norm(step)
        if s_norm > delta:
            step *= delta / s_norm
        step = np.clip(step, xl, xu)

        # The step must not increase the violation of the constraints.
        if _violation(aub, bub, aeq, beq, step) > _violation(aub, bub, aeq, beq, np.zeros(n)):
            step = np.zeros(n)

    if debug:
        assert np.all(xl <= step)
        assert np.all(step <= xu)
        assert np.linalg.norm(step) < 1.1 * delta
    return step


def cauchy_step(grad, hess_prod, xl, xu, aub, bub, aeq, delta, debug):
    r"""
    Minimize a quadratic function along the projected steepest descent
    direction subject to bound and linear constraints in a trust region.

    The projected steepest descent direction is obtained from :math:`-g` by
    removing the components that point outside the bounds active at the
    origin, and by projecting the result onto the null space of
    :math:`A_{\scriptscriptstyle E}`.

    Parameters
    ----------
    grad : numpy.ndarray, shape (n,)
        Gradient of the quadratic function at the origin.
    hess_prod : callable
        Product of the Hessian matrix of the quadratic function with any
        vector.

            ``hess_prod(d) -> numpy.ndarray, shape (n,)``

    xl : numpy.ndarray, shape (n,)
        Lower bounds on the step.
    xu : numpy.ndarray, shape (n,)
        Upper bounds on the step.
    aub : numpy.ndarray, shape (m_linear_ub, n)
        Coefficient matrix of the linear inequality constraints
        ``aub @ d <= bub``.
    bub : numpy.ndarray, shape (m_linear_ub,)
        Right-hand side of the linear inequality constraints.
    aeq : numpy.ndarray, shape (m_linear_eq, n)
        Coefficient matrix of the linear equality constraints ``aeq @ d == 0``.
    delta : float
        Trust-region radius.
    debug : bool
        Whether to make debugging tests during the execution.

    Returns
    -------
    numpy.ndarray, shape (n,)
        Cauchy step.
    """
    n = grad.size
    if debug:
        tol = get_arrays_tol(xl, xu)
        assert np.max(xl, initial=-np.inf) <= tol
        assert np.min(xu, initial=np.inf) >= -tol
        assert np.isfinite(delta) and delta > 0.0
    xl = np.minimum(xl, 0.0)
    xu = np.maximum(xu, 0.0)
    bub = np.maximum(bub, 0.0)

    # Calculate the projected steepest descent direction.
    sd = -np.array(grad, dtype=float)
    sd[(xl >= 0.0) & (sd < 0.0)] = 0.0
    sd[(xu <= 0.0) & (sd > 0.0)] = 0.0
    if aeq.shape[0] > 0:
        z_free = _null_space(np.empty((0, n)), aeq, n)
        sd = z_free @ (z_free.T @ sd)
    sd_norm = np.linalg.norm(sd)
    grad_sd = grad @ sd
    step = np.zeros(n)
    if sd_norm <= TINY * delta or grad_sd >= 0.0:
        return step

    # Calculate the step size along the projected steepest descent direction.
    alpha_tr = delta / sd_norm
    curv_sd = sd @ hess_prod(sd)
    if curv_sd > TINY * abs(grad_sd):
        alpha_quad = -grad_sd / curv_sd
    else:
        alpha_quad = np.inf
    i_xl = (xl > -np.inf) & (sd < 0.0)
    i_xu = (xu < np.inf) & (sd > 0.0)
    alpha_xl = np.min(xl[i_xl] / sd[i_xl], initial=np.inf)
    alpha_xu = np.min(xu[i_xu] / sd[i_xu], initial=np.inf)
    aub_sd = aub @ sd
    i_ub = aub_sd > TINY * bub
    alpha_ub = np.min(bub[i_ub] / aub_sd[i_ub], initial=np.inf)
    alpha = max(min(alpha_tr, alpha_quad, alpha_xl, alpha_xu, alpha_ub), 0.0)
    step = np.clip(alpha * sd, xl, xu)

    if debug:
        assert np.all(xl <= step)
        assert np.all(step <= xu)
        assert np.linalg.norm(step) < 1.1 * delta
    return step


def _alpha_tr(step, sd, delta):
    """
    Largest step size along `sd` from `step` allowed by the trust region.
    """
    step_sd = step @ sd
    sd_sq = sd @ sd
    dist_tr_sq = delta ** 2.0 - step @ step
    temp = np.sqrt(max(step_sd ** 2.0 + sd_sq * dist_tr_sq, 0.0))
    if step_sd <= 0.0 and sd_sq > TINY * abs(temp - step_sd):
        alpha_tr = max((temp - step_sd) / sd_sq, 0.0)
    elif abs(temp + step_sd) > TINY * dist_tr_sq:
        alpha_tr = max(dist_tr_sq / (temp + step_sd), 0.0)
    else:
        raise ZeroDivisionError
    return alpha_tr


def _null_space(a_act, aeq, n):
    """
    Orthonormal basis of the null space of the active constraint gradients.
    """
    a = np.vstack([aeq, a_act])
    if a.shape[0] == 0:
        return np.eye(n)
    return null_space(a)


def _initial_active_set(grad, a_all, aeq, resid, tol):
    """
    Nearly active constraints with positive Lagrange multipliers.
    """
    near = resid <= tol
    active = np.zeros(resid.size, dtype=bool)
    if np.any(near):
        z_eq = _null_space(np.empty((0, grad.size)), aeq, grad.size)
        a_near = a_all[near, :] @ z_eq
        if a_near.shape[1] > 0:
            try:
                lagrange_mult, _ = nnls(a_near.T, -(z_eq.T @ grad))
            except RuntimeError:
                # The nonnegative least-squares solver did not converge. All
                # the nearly active constraints are then considered.
                lagrange_mult = np.ones(a_near.shape[0])
            active[np.flatnonzero(near)[lagrange_mult > 0.0]] = True
    return active


def _violation(aub, bub, aeq, beq, step):
    resid_ub = np.maximum(aub @ step - bub, 0.0)
    resid_eq = aeq @ step - beq
    return resid_ub @ resid_ub + resid_eq @ resid_eq
