import logging

import numpy as np

from .models import Models
from .settings import Capability, Options
from .subsolvers import (
    bound_constrained_tangential_step,
    cauchy_geometry,
    cauchy_step,
    linearly_constrained_tangential_step,
    normal_step,
    spider_geometry,
)

_log = logging.getLogger(__name__)

TINY = np.finfo(float).tiny


class TrustRegion:
    """
    Trust-region framework.

    This class gathers the state of the trust-region method: the models, the
    trust-region radius, the lower bound on the trust-region radius (the
    resolution), and the penalty parameter of the merit function.
    """

    def __init__(self, pb, options, capability):
        """
        Initialize the trust-region framework.

        Parameters
        ----------
        pb : Problem
            Problem to solve.
        options : dict
            Options of the solver.
        capability : Capability
            Kind of constraints handled by the solver.

        Raises
        ------
        `trdfo.utils.MaxEvalError`
            If the maximum number of evaluations is reached.
        `trdfo.utils.TargetSuccess`
            If a nearly feasible point has reached the target.
        `trdfo.utils.CallbackSuccess`
            If the callback function requested to stop.
        `numpy.linalg.LinAlgError`
            If the initial interpolation system is ill-defined.
        """
        self._pb = pb
        self._capability = capability
        self._debug = options[Options.DEBUG]

        # Set the initial models.
        self._models = Models(self._pb, options)

        # Set the initial penalty parameter.
        self._penalty = 0.0

        # Set the index of the best interpolation point.
        self._best_index = 0
        self.set_best_index()

        # Set the initial trust-region radius and the resolution.
        self._resolution = options[Options.RHOBEG]
        self._radius = self.resolution

    @property
    def n(self):
        """
        Number of variables.

        Returns
        -------
        int
            Number of variables.
        """
        return self._pb.n

    @property
    def capability(self):
        """
        Kind of constraints handled by the framework.

        Returns
        -------
        Capability
            Kind of constraints handled by the framework.
        """
        return self._capability

    @property
    def is_constrained(self):
        """
        Whether the merit function involves a penalty term.

        Returns
        -------
        bool
            Whether the solver handles linear or nonlinear constraints.
        """
        return self.capability in {Capability.LINEAR, Capability.NONLINEAR}

    @property
    def models(self):
        """
        Models of the objective and nonlinear constraint functions.

        Returns
        -------
        Models
            Models of the objective and nonlinear constraint functions.
        """
        return self._models

    @property
    def radius(self):
        """
        Trust-region radius.

        Returns
        -------
        float
            Trust-region radius.
        """
        return self._radius

    @radius.setter
    def radius(self, radius):
        """
        Set the trust-region radius.

        The trust-region radius is set to the resolution if it is not
        substantially larger than it.

        Parameters
        ----------
        radius : float
            New trust-region radius.
        """
        self._radius = radius
        if self.radius <= 1.5 * self.resolution:
            self._radius = self.resolution

    @property
    def resolution(self):
        """
        Resolution of the trust-region framework.

        The resolution is a lower bound on the trust-region radius.

        Returns
        -------
        float
            Resolution of the trust-region framework.
        """
        return self._resolution

    @property
    def penalty(self):
        """
        Penalty parameter of the merit function.

        Returns
        -------
        float
            Penalty parameter.
        """
        return self._penalty

    @property
    def best_index(self):
        """
        Index of the best interpolation point.

        Returns
        -------
        int
            Index of the best interpolation point.
        """
        return self._best_index

    @property
    def x_best(self):
        """
        Best interpolation point.

        Its value is interpreted as relative to the origin, not the base point.

        Returns
        -------
        `numpy.ndarray`, shape (n,)
            Best interpolation point.
        """
        return self.models.interpolation.point(self.best_index)

    @property
    def fun_best(self):
        """
        Value of the objective function at `x_best`.

        Returns
        -------
        float
            Value of the objective function at `x_best`.
        """
        return self.models.fun_val[self.best_index]

    @property
    def cub_best(self):
        """
        Values of the nonlinear inequality constraints at `x_best`.

        Returns
        -------
        `numpy.ndarray`, shape (m_nonlinear,)
            Values of the nonlinear inequality constraints at `x_best`.
        """
        return self.models.cub_val[self.best_index, :]

    @property
    def maxcv_best(self):
        """
        Maximum constraint violation at `x_best`.

        Returns
        -------
        float
            Maximum constraint violation at `x_best`.
        """
        return self._pb.maxcv(self.x_best, self.cub_best)

    def merit(self, x, fun_val, cub_val):
        """
        Evaluate the merit function.

        Parameters
        ----------
        x : numpy.ndarray, shape (n,)
            Point at which the merit function is evaluated.
        fun_val : float
            Value of the objective function at `x`.
        cub_val : numpy.ndarray, shape (m_nonlinear,)
            Values of the nonlinear inequality constraints at `x`.

        Returns
        -------
        float
            Value of the merit function at `x`.
        """
        if self.is_constrained and self.penalty > 0.0:
            return fun_val + self.penalty * self._pb.maxcv(x, cub_val)
        return fun_val

    def lin_maxcv(self, step):
        """
        Evaluate the maximum violation of the linearized constraints.

        The bound and linear constraints are exact, and the nonlinear
        constraints are replaced by the linearizations of their models at
        `x_best`.

        Parameters
        ----------
        step : numpy.ndarray, shape (n,)
            Step from `x_best`.

        Returns
        -------
        float
            Maximum violation of the linearized constraints at
            ``x_best + step``.
        """
        x = self.x_best + step
        maxcv_val = self._pb.maxcv(x)
        if self.models.m_nonlinear > 0:
            cub_lin = self.cub_best + self.models.cub_grad(self.x_best) @ step
            maxcv_val = max(maxcv_val, np.max(cub_lin, initial=0.0))
        return maxcv_val

    def get_trust_region_step(self, options):
        """
        Get the trust-region step.

        The trust-region step is computed by solving the derivative-free
        trust-region subproblem using a Byrd-Omojokun composite-step approach.

        Parameters
        ----------
        options : dict
            Options of the solver.

        Returns
        -------
        `numpy.ndarray`, shape (n,)
            Normal step, reducing the violation of the linearized constraints.
        `numpy.ndarray`, shape (n,)
            Tangential step, reducing the model of the objective function.
        """
        # Build the linearized constraints around the best point.
        x_best = self.x_best
        xl = np.minimum(self._pb.bounds.xl - x_best, 0.0)
        xu = np.maximum(self._pb.bounds.xu - x_best, 0.0)
        aub, bub = self._get_linearized_ub(x_best)
        aeq = self._pb.linear.a_eq
        beq = self._pb.linear.b_eq - aeq @ x_best

        # Evaluate the normal step.
        n_step = np.zeros(self.n)
        if self.is_constrained and (np.any(bub < 0.0) or np.any(beq != 0.0)):
            n_step = normal_step(aub, bub, aeq, beq, xl, xu, 0.8 * self.radius, self._debug)
        n_norm = np.linalg.norm(n_step)

        # Evaluate the tangential step. It is computed in the remaining part of
        # the trust region, and does not increase the violation of any of the
        # linearized constraints.
        if n_norm > 0.0:
            delta = np.sqrt(max(self.radius ** 2.0 - n_norm ** 2.0, 0.0))
        else:
            delta = self.radius
        t_step = np.zeros(self.n)
        if delta > TINY * self.radius:
            grad = self.models.fun_grad(x_best + n_step)
            hess_prod = self.models.fun_hess_prod
            xl_t = np.minimum(xl - n_step, 0.0)
            xu_t = np.maximum(xu - n_step, 0.0)
            bub_t = np.maximum(bub - aub @ n_step, 0.0)
            if self.is_constrained:
                t_step = linearly_constrained_tangential_step(grad, hess_prod, xl_t, xu_t, aub, bub_t, aeq, delta, self._debug)
            else:
                t_step = bound_constrained_tangential_step(grad, hess_prod, xl_t, xu_t, delta, self._debug)

            # Replace the tangential step by the Cauchy step if the former
            # does not provide a sufficient decrease.
            c_step = cauchy_step(grad, hess_prod, xl_t, xu_t, aub, bub_t, aeq, delta, self._debug)
            t_reduct = -grad @ t_step - 0.5 * t_step @ hess_prod(t_step)
            c_reduct = -grad @ c_step - 0.5 * c_step @ hess_prod(c_step)
            if t_reduct < 0.1 * c_reduct:
                _log.debug('The tangential step is replaced by the Cauchy step')
                t_step = c_step
        return n_step, t_step

    def get_predicted_reduction(self, step):
        """
        Evaluate the reduction of the merit function predicted by the models.

        Parameters
        ----------
        step : numpy.ndarray, shape (n,)
            Trust-region step.

        Returns
        -------
        float
            Predicted reduction of the merit function.
        """
        x_best = self.x_best
        reduct = self.models.fun(x_best) - self.models.fun(x_best + step)
        if self.is_constrained:
            reduct += self.penalty * (self.lin_maxcv(np.zeros(self.n)) - self.lin_maxcv(step))
        return reduct

    def get_reduction_ratio(self, step, fun_val, cub_val):
        """
        Get the reduction ratio.

        Parameters
        ----------
        step : numpy.ndarray, shape (n,)
            Trust-region step.
        fun_val : float
            Objective function value at the trial point.
        cub_val : numpy.ndarray, shape (m_nonlinear,)
            Nonlinear inequality constraint values at the trial point.

        Returns
        -------
        float
            Reduction ratio.
        """
        merit_old = self.merit(self.x_best, self.fun_best, self.cub_best)
        merit_new = self.merit(self.x_best + step, fun_val, cub_val)
        reduct = self.get_predicted_reduction(step)
        if abs(reduct) > TINY * abs(merit_old - merit_new):
            return (merit_old - merit_new) / abs(reduct)
        return -1.0

    def increase_penalty(self, step):
        """
        Increase the penalty parameter.

        The penalty parameter is increased whenever the predicted reduction of
        the constraint violation does not justify the predicted increase of
        the objective function, as in COBYLA.

        Parameters
        ----------
        step : numpy.ndarray, shape (n,)
            Trust-region step.

        Returns
        -------
        bool
            Whether the best interpolation point remained the same.
        """
        if not self.is_constrained:
            return True
        x_best = self.x_best
        preref = self.models.fun(x_best) - self.models.fun(x_best + step)
        prerec = self.lin_maxcv(np.zeros(self.n)) - self.lin_maxcv(step)
        if prerec > 0.0:
            barmu = -preref / prerec
            if self.penalty < 1.5 * barmu:
                self._penalty = 2.0 * barmu
                _log.debug(f'Penalty parameter increased to {self.penalty}')
        k_best_old = self.best_index
        self.set_best_index()
        return k_best_old == self.best_index

    def decrease_penalty(self):
        """
        Decrease the penalty parameter.

        The penalty parameter is reduced to the ratio of the ranges of the
        objective function values and of the constraint violations over the
        interpolation set, if the latter is positive.
        """
        if self.is_constrained and self.penalty > 0.0:
            maxcv_val = self._get_maxcv_values()
            cv_range = np.max(maxcv_val) - np.min(maxcv_val)
            if cv_range > 0.0:
                fun_range = np.max(self.models.fun_val) - np.min(self.models.fun_val)
                self._penalty = min(self.penalty, fun_range / cv_range)
                _log.debug(f'Penalty parameter decreased to {self.penalty}')
            self.set_best_index()

    def set_best_index(self):
        """
        Set the index of the best interpolation point.

        For the unconstrained and the bound-constrained solvers, the best
        point has the least objective function value. Otherwise, it has the
        least merit function value, and the constraint violation breaks ties.
        """
        if self.is_constrained:
            maxcv_val = self._get_maxcv_values()
            merit_val = self.models.fun_val + self.penalty * maxcv_val if self.penalty > 0.0 else np.copy(self.models.fun_val)
            candidates = np.flatnonzero(merit_val <= np.min(merit_val))
            self._best_index = candidates[np.argmin(maxcv_val[candidates])]
        else:
            self._best_index = np.argmin(self.models.fun_val)

    def update_radius(self, step, ratio, options):
        """
        Update the trust-region radius.

        Parameters
        ----------
        step : numpy.ndarray, shape (n,)
            Trust-region step.
        ratio : float
            Reduction ratio.
        options : dict
            Options of the solver.
        """
        s_norm = np.linalg.norm(step)
        radius = self.radius
        if ratio > options[Options.ETA2]:
            radius = min(options[Options.GAMMA2] * radius, max(options[Options.GAMMA1] * radius, options[Options.GAMMA2] * s_norm))
        elif ratio <= options[Options.ETA1]:
            radius = min(options[Options.GAMMA1] * radius, s_norm)
        self.radius = radius

    def reduce_resolution(self, options):
        """
        Reduce the resolution of the trust-region framework.

        Parameters
        ----------
        options : dict
            Options of the solver.
        """
        resolution_old = self.resolution
        if self.resolution > 250.0 * options[Options.RHOEND]:
            self._resolution *= 0.1
        elif self.resolution > 16.0 * options[Options.RHOEND]:
            self._resolution = np.sqrt(self.resolution * options[Options.RHOEND])
        else:
            self._resolution = options[Options.RHOEND]
        self.radius = max(0.5 * resolution_old, self.resolution)
        _log.debug(f'Resolution reduced to {self.resolution}')

    def is_acceptable_geometry(self, x_new, fun_val, cub_val):
        """
        Whether a trial point can be discarded without updating the models.

        The trial point is discarded if it is worse than the best point, no
        Lagrange polynomial has an absolute value larger than one at it, and all
        the interpolation points lie within twice the trust-region radius from
        the best point.

        Parameters
        ----------
        x_new : numpy.ndarray, shape (n,)
            Trial point.
        fun_val : float
            Objective function value at `x_new`.
        cub_val : numpy.ndarray, shape (m_nonlinear,)
            Nonlinear inequality constraint values at `x_new`.

        Returns
        -------
        bool
            Whether the trial point should be discarded.
        """
        if self.merit(x_new, fun_val, cub_val) <= self.merit(self.x_best, self.fun_best, self.cub_best):
            return False
        dist = np.linalg.norm(self.models.interpolation.xpt - (self.x_best - self.models.interpolation.x_base)[:, np.newaxis], axis=0)
        if np.any(dist > 2.0 * self.radius):
            return False
        return np.max(np.abs(self.models.lagrange_values(x_new))) <= 1.0

    def get_index_to_remove(self, x_new=None, exclude_best=False):
        """
        Get the index of the interpolation point to remove.

        If `x_new` is not provided, the index returned should be used to
        improve the geometry of the interpolation set. Otherwise, the index
        returned is the one of the point to be replaced by `x_new`.

        Parameters
        ----------
        x_new : numpy.ndarray, shape (n,), optional
            New point to be added to the interpolation set.
        exclude_best : bool, optional
            Whether the best interpolation point must be kept.

        Returns
        -------
        int
            Index of the interpolation point to remove.
        float
            Distance between `x_best` and the removed point.
        """
        dist_sq = np.sum((self.models.interpolation.xpt - (self.x_best - self.models.interpolation.x_base)[:, np.newaxis]) ** 2.0, axis=0)
        if x_new is None:
            k_max = np.argmax(dist_sq)
        else:
            sigma = self.models.denominators(x_new)
            weights = np.maximum(1.0, dist_sq / max(0.1 * self.radius, self.resolution) ** 2.0) ** 3.0 * np.abs(sigma)
            if exclude_best:
                weights[self.best_index] = -1.0
            k_max = np.argmax(weights)
        return k_max, np.sqrt(dist_sq[k_max])

    def get_geometry_step(self, k_new, options):
        """
        Get the geometry-improving step.

        Two steps are computed, maximizing approximately the absolute value of
        the `k_new`-th Lagrange polynomial along the constrained Cauchy
        direction and along straight lines through the interpolation points.
        The step providing the largest denominator of the updating formula is
        returned.

        Parameters
        ----------
        k_new : int
            Index of the interpolation point to be modified.
        options : dict
            Options of the solver.

        Returns
        -------
        `numpy.ndarray`, shape (n,)
            Geometry-improving step.

        Raises
        ------
        `numpy.linalg.LinAlgError`
            If the computation of a determinant fails.
        """
        interpolation = self.models.interpolation
        x_best = self.x_best
        dist = np.linalg.norm(interpolation.point(k_new) - x_best)
        delta = max(min(0.1 * dist, self.radius), self.resolution)

        # Build the k_new-th Lagrange polynomial around x_best.
        lag = self.models.lagrange(k_new)
        const = lag(x_best, interpolation)
        grad = lag.grad(x_best, interpolation)

        def curv(v):
            return lag.curv(v, interpolation)

        xl = np.minimum(self._pb.bounds.xl - x_best, 0.0)
        xu = np.maximum(self._pb.bounds.xu - x_best, 0.0)
        xpt = interpolation.xpt - (x_best - interpolation.x_base)[:, np.newaxis]

        # Choose the step providing the largest denominator.
        step = cauchy_geometry(const, grad, curv, xl, xu, delta, options[Options.DEBUG])
        sigma = self.models.denominators(x_best + step)[k_new]
        step_alt = spider_geometry(const, grad, curv, xpt, xl, xu, delta, options[Options.DEBUG])
        sigma_alt = self.models.denominators(x_best + step_alt)[k_new]
        if abs(sigma_alt) > abs(sigma):
            step = step_alt
        return step

    def shift_x_base(self, options):
        """
        Shift the base point to `x_best`.

        Parameters
        ----------
        options : dict
            Options of the solver.
        """
        self.models.shift_x_base(np.copy(self.x_best), options)

    def _get_linearized_ub(self, x_best):
        """
        Linear inequality constraints on the step, including the linearized
        nonlinear constraints.
        """
        aub = self._pb.linear.a_ub
        bub = self._pb.linear.b_ub - aub @ x_best
        if self.models.m_nonlinear > 0:
            aub = np.vstack([aub, self.models.cub_grad(x_best)])
            bub = np.r_[bub, -self.cub_best]
        return aub, bub

    def _get_maxcv_values(self):
        interpolation = self.models.interpolation
        return np.array([self._pb.maxcv(interpolation.point(k), self.models.cub_val[k, :]) for k in range(self.models.npt)])
