import numpy as np

from ..utils import get_arrays_tol


TINY = np.finfo(float).tiny


def cauchy_geometry(const, grad, curv, xl, xu, delta, debug):
    r"""
    Maximize approximately the absolute value of a quadratic function subject to
    bound constraints in a trust region.

    This function solves approximately

    .. math::

        \begin{aligned}
            \max_{d \in \R^n}   & \quad \abs[\bigg]{c + g^{\T}d + \frac{1}{2} d^{\T}Hd}\\
            \text{s.t.}         & \quad l \le d \le u,\\
                                & \quad \norm{d} \le \Delta,
        \end{aligned}

    by maximizing the objective function along the constrained Cauchy direction.

    Parameters
    ----------
    const : float
        Constant :math:`c` as shown above.
    grad : numpy.ndarray, shape (n,)
        Gradient :math:`g` as shown above.
    curv : callable
        Curvature of :math:`H` along any vector.

            ``curv(d) -> float``

        returns :math:`d^{\T}Hd`.
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
    This function is described as the first alternative in p. 115 of [1]_. It is
    assumed that the origin is feasible with respect to the bound constraints
    `xl` and `xu`, and that `delta` is finite and positive.

    References
    ----------
    .. [1] T. M. Ragonneau. "Model-Based Derivative-Free Optimization Methods
       and Software." Ph.D. thesis. Hong Kong: Department of Applied
       Mathematics, The Hong Kong Polytechnic University, 2022.
    """
    if debug:
        tol = get_arrays_tol(xl, xu)
        assert np.max(xl) <= tol
        assert np.min(xu) >= -tol
        assert np.isfinite(delta) and delta > 0.0
    xl = np.minimum(xl, 0.0)
    xu = np.maximum(xu, 0.0)

    # To maximize the absolute value of a quadratic function, we maximize the
    # function itself or its negative, and we choose the solution that provides
    # the largest function value.
    step1, q_val1 = _cauchy_geometry(const, grad, curv, xl, xu, delta)
    step2, q_val2 = _cauchy_geometry(-const, -grad, lambda x: -curv(x), xl, xu, delta)
    step = step1 if abs(q_val1) >= abs(q_val2) else step2

    if debug:
        assert np.all(xl <= step)
        assert np.all(step <= xu)
        assert np.linalg.norm(step) < 1.1 * delta
    return step


def spider_geometry(const, grad, curv, xpt, xl, xu, delta, debug):
    r"""
    Maximize approximately the absolute value of a quadratic function subject to
    bound constraints in a trust region along specific straight lines.

    This function solves approximately the same problem as `cauchy_geometry`,
    by maximizing the objective function along the straight lines through the
    origin and the columns of `xpt`.

    Parameters
    ----------
    const : float
        Constant :math:`c` of the quadratic function.
    grad : numpy.ndarray, shape (n,)
        Gradient :math:`g` of the quadratic function.
    curv : callable
        Curvature of :math:`H` along any vector.

            ``curv(d) -> float``

        returns :math:`d^{\T}Hd`.
    xpt : numpy.ndarray, shape (n, npt)
        Points defining the straight lines.
    xl : numpy.ndarray, shape (n,)
        Lower bounds :math:`l`.
    xu : numpy.ndarray, shape (n,)
        Upper bounds :math:`u`.
    delta : float
        Trust-region radius :math:`\Delta`.
    debug : bool
        Whether to make debugging tests during the execution.

    Returns
    -------
    numpy.ndarray, shape (n,)
        Approximate solution :math:`d`.

    Notes
    -----
    This function is described as the second alternative in p. 115 of [1]_. It
    is assumed that the origin is feasible with respect to the bound constraints
    `xl` and `xu`, and that `delta` is finite and positive.

    References
    ----------
    .. [1] T. M. Ragonneau. "Model-Based Derivative-Free Optimization Methods
       and Software." Ph.D. thesis. Hong Kong: Department of Applied
       Mathematics, The Hong Kong Polytechnic University, 2022.
    """
    if debug:
        tol = get_arrays_tol(xl, xu)
        assert np.max(xl) <= tol
        assert np.min(xu) >= -tol
        assert np.isfinite(delta) and delta > 0.0
    xl = np.minimum(xl, 0.0)
    xu = np.maximum(xu, 0.0)

    step = np.zeros_like(grad)
    q_val = const
    s_norm = np.linalg.norm(xpt, axis=0)
    for k in np.flatnonzero(s_norm > TINY * delta):
        direction = xpt[:, k]

        # Set alpha_tr to the step size for the trust-region constraint, and
        # alpha_xl and alpha_xu to the extreme step sizes allowed by the
        # bound constraints, in both directions.
        alpha_tr = delta / s_norm[k]
        pos = direction > TINY * np.maximum(np.abs(xl), np.abs(xu))
        neg = direction < -TINY * np.maximum(np.abs(xl), np.abs(xu))
        alpha_xu = min(
            np.min(xu[pos] / direction[pos], initial=np.inf),
            np.min(xl[neg] / direction[neg], initial=np.inf),
        )
        alpha_xl = max(
            np.max(xl[pos] / direction[pos], initial=-np.inf),
            np.max(xu[neg] / direction[neg], initial=-np.inf),
        )

        # Set alpha_pos and alpha_neg to the step sizes that maximize the
        # absolute value of the quadratic function along the positive and the
        # negative directions, and restrict them to the feasible interval.
        grad_step = grad @ direction
        curv_step = curv(direction)
        alpha_pos = min(alpha_tr, alpha_xu)
        alpha_neg = max(-alpha_tr, alpha_xl)
        q_val_pos = const + alpha_pos * grad_step + 0.5 * alpha_pos ** 2.0 * curv_step
        q_val_neg = const + alpha_neg * grad_step + 0.5 * alpha_neg ** 2.0 * curv_step
        if abs(curv_step) > TINY * abs(grad_step):
            alpha_crit = -grad_step / curv_step
            if alpha_neg < alpha_crit < alpha_pos:
                q_val_crit = const + 0.5 * alpha_crit * grad_step
                if abs(q_val_crit) > max(abs(q_val_pos), abs(q_val_neg)):
                    if alpha_crit > 0.0:
                        alpha_pos, q_val_pos = alpha_crit, q_val_crit
                    else:
                        alpha_neg, q_val_neg = alpha_crit, q_val_crit

        # Accept the step that provides the largest absolute value of the
        # quadratic function if it improves the current best.
        if abs(q_val_pos) >= abs(q_val_neg) and abs(q_val_pos) > abs(q_val):
            step = np.clip(alpha_pos * direction, xl, xu)
            q_val = q_val_pos
        elif abs(q_val_neg) > abs(q_val_pos) and abs(q_val_neg) > abs(q_val):
            step = np.clip(alpha_neg * direction, xl, xu)
            q_val = q_val_neg

    if debug:
        assert np.all(xl <= step)
        assert np.all(step <= xu)
        assert np.linalg.norm(step) < 1.1 * delta
    return step


def _cauchy_geometry(const, grad, curv, xl, xu, delta):
    """
    Same as `cauchy_geometry` without the absolute value.
    """
    # Calculate the initial active set. The ascent direction is the gradient.
    fixed_xl = (xl < 0.0) & (grad < 0.0)
    fixed_xu = (xu > 0.0) & (grad > 0.0)

    # Calculate the Cauchy step.
    cauchy_step = np.zeros_like(grad)
    cauchy_step[fixed_xl] = xl[fixed_xl]
    cauchy_step[fixed_xu] = xu[fixed_xu]
    if np.linalg.norm(cauchy_step) > delta:
        working = fixed_xl | fixed_xu
        while True:
            # Calculate the Cauchy step for the directions in the working set.
            g_norm = np.linalg.norm(grad[working])
            delta_reduced = np.sqrt(max(delta ** 2.0 - cauchy_step[~working] @ cauchy_step[~working], 0.0))
            if g_norm > TINY * abs(delta_reduced):
                mu = max(delta_reduced / g_norm, 0.0)
            else:
                break
            cauchy_step[working] = mu * grad[working]

            # Update the working set.
            fixed_xl = working & (cauchy_step < xl)
            fixed_xu = working & (cauchy_step > xu)
            if not np.any(fixed_xl) and not np.any(fixed_xu):
                break
            cauchy_step[fixed_xl] = xl[fixed_xl]
            cauchy_step[fixed_xu] = xu[fixed_xu]
            working = working & ~(fixed_xl | fixed_xu)

    # Calculate the step that maximizes the quadratic along the Cauchy step.
    grad_step = grad @ cauchy_step
    if grad_step >= 0.0:
        # Set alpha_tr to the step size for the trust-region constraint.
        s_norm = np.linalg.norm(cauchy_step)
        if s_norm > TINY * delta:
            alpha_tr = max(delta / s_norm, 0.0)
        else:
            alpha_tr = 0.0

        # Set alpha_quad to the step size for the maximization problem.
        curv_step = curv(cauchy_step)
        if curv_step < -TINY * grad_step:
            alpha_quad = max(-grad_step / curv_step, 0.0)
        else:
            alpha_quad = np.inf

        # Set alpha_bd to the step size for the bound constraints.
        i_xl = (xl > -np.inf) & (cauchy_step < TINY * xl)
        i_xu = (xu < np.inf) & (cauchy_step > TINY * xu)
        alpha_xl = np.min(xl[i_xl] / cauchy_step[i_xl], initial=np.inf)
        alpha_xu = np.min(xu[i_xu] / cauchy_step[i_xu], initial=np.inf)
        alpha_bd = min(alpha_xl, alpha_xu)

        # Calculate the solution and the corresponding function value.
        alpha = min(alpha_tr, alpha_quad, alpha_bd)
        step = np.clip(alpha * cauchy_step, xl, xu)
        q_val = const + alpha * grad_step + 0.5 * alpha ** 2.0 * curv_step
    else:
        step = np.zeros_like(grad)
        q_val = const
    return step, q_val
