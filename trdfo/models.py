import warnings

import numpy as np
from scipy.linalg import lstsq

from .settings import Options
from .utils import TargetSuccess


class Interpolation:
    """
    Interpolation set.

    This class stores a base point around which the models are expanded and the
    interpolation points. The coordinates of the interpolation points are
    relative to the base point.
    """

    def __init__(self, pb, options):
        """
        Initialize the interpolation set.

        The initial interpolation points are built around the initial guess,
        along the coordinate directions. The initial guess is first moved onto
        a bound if it lies too close to it, so that all the interpolation
        points satisfy the bound constraints.

        Parameters
        ----------
        pb : Problem
            Problem to be solved.
        options : dict
            Options of the solver. The initial and final trust-region radii are
            reduced if the bound constraints are too close to each other.
        """
        # Reduce the initial trust-region radius if necessary.
        max_radius = 0.5 * np.min(pb.bounds.xu - pb.bounds.xl)
        if options[Options.RHOBEG] > max_radius:
            options[Options.RHOBEG.value] = max_radius
            options[Options.RHOEND.value] = min(options[Options.RHOEND], max_radius)
        rhobeg = options[Options.RHOBEG]
        xl = pb.bounds.xl
        xu = pb.bounds.xu

        # Set the initial point around which the models are expanded.
        self._x_base = np.copy(pb.x0)
        near_xl = self.x_base <= xl + 0.5 * rhobeg
        close_xl = ~near_xl & (self.x_base <= xl + rhobeg)
        near_xu = self.x_base >= xu - 0.5 * rhobeg
        close_xu = ~near_xu & (self.x_base >= xu - rhobeg)
        self.x_base[near_xl] = xl[near_xl]
        self.x_base[close_xl] = np.minimum(xl + rhobeg, xu)[close_xl]
        self.x_base[near_xu] = xu[near_xu]
        self.x_base[close_xu] = np.maximum(xu - rhobeg, xl)[close_xu]

        # Set the initial interpolation set. The first n points are along the
        # coordinate directions, the next n points along the opposite
        # directions (or further away if a bound prevents it), and the
        # remaining ones are pairwise combinations of the first n points.
        n = pb.n
        npt = options[Options.NPT]
        first_step = np.where(near_xu, -rhobeg, rhobeg)
        second_step = np.where(near_xl, 2.0 * rhobeg, np.where(near_xu, -2.0 * rhobeg, -rhobeg))
        self._xpt = np.zeros((n, npt))
        for k in range(1, npt):
            if k <= n:
                self.xpt[k - 1, k] = first_step[k - 1]
            elif k <= 2 * n:
                self.xpt[k - n - 1, k] = second_step[k - n - 1]
            else:
                spread = (k - n - 1) // n
                k1 = k - (1 + spread) * n - 1
                k2 = (k1 + spread) % n
                self.xpt[k1, k] = self.xpt[k1, k1 + 1]
                self.xpt[k2, k] = self.xpt[k2, k2 + 1]

    @property
    def n(self):
        """
        Number of variables.

        Returns
        -------
        int
            Number of variables.
        """
        return self.xpt.shape[0]

    @property
    def npt(self):
        """
        Number of interpolation points.

        Returns
        -------
        int
            Number of interpolation points.
        """
        return self.xpt.shape[1]

    @property
    def xpt(self):
        """
        Interpolation points.

        Returns
        -------
        `numpy.ndarray`, shape (n, npt)
            Interpolation points, relative to the base point.
        """
        return self._xpt

    @property
    def x_base(self):
        """
        Base point around which the models are expanded.

        Returns
        -------
        `numpy.ndarray`, shape (n,)
            Base point around which the models are expanded.
        """
        return self._x_base

    @property
    def scale(self):
        """
        Largest distance between the base point and an interpolation point.

        Returns
        -------
        float
            Scaling factor of the interpolation systems.
        """
        return np.max(np.linalg.norm(self.xpt, axis=0), initial=np.finfo(float).tiny)

    def point(self, k):
        """
        Get the `k`-th interpolation point.

        The return point is relative to the origin.

        Parameters
        ----------
        k : int
            Index of the interpolation point.

        Returns
        -------
        `numpy.ndarray`, shape (n,)
            `k`-th interpolation point.
        """
        return self.x_base + self.xpt[:, k]


class Quadratic:
    """
    Quadratic model.

    This class stores the Hessian matrix of the quadratic model using the
    implicit/explicit representation designed by Powell for NEWUOA [1]_. When
    the model is linear, the Hessian matrix is identically zero.

    References
    ----------
    .. [1] M. J. D. Powell. The NEWUOA software for unconstrained optimization
       without derivatives. In G. Di Pillo and M. Roma, editors, *Large-Scale
       Nonlinear Optimization*, volume 83 of *Nonconvex Optimization and Its
       Applications*, pages 255--297. Springer, Boston, MA, USA, 2006.
    """

    def __init__(self, interpolation, values, is_linear=False):
        """
        Initialize the quadratic model.

        Parameters
        ----------
        interpolation : Interpolation
            Interpolation set.
        values : numpy.ndarray, shape (npt,)
            Values of the interpolated function at the interpolation points.
        is_linear : bool, optional
            Whether the model is linear.

        Raises
        ------
        ValueError
            If there are not enough interpolation points.
        `numpy.linalg.LinAlgError`
            If the interpolation system cannot be solved.
        """
        if interpolation.npt < interpolation.n + 1:
            raise ValueError(f'The number of interpolation points must be at least {interpolation.n + 1}.')
        self._is_linear = is_linear
        self._const, self._grad, self._i_hess = self._solve_systems(interpolation, values)
        if self._is_linear:
            self._i_hess[:] = 0.0
        self._e_hess = np.zeros((self.n, self.n))

    def __call__(self, x, interpolation):
        """
        Evaluate the quadratic model at a given point.

        Parameters
        ----------
        x : numpy.ndarray, shape (n,)
            Point at which the quadratic model is evaluated.
        interpolation : Interpolation
            Interpolation set.

        Returns
        -------
        float
            Value of the quadratic model at `x`.
        """
        x_diff = x - interpolation.x_base
        return self._const + self._grad @ x_diff + 0.5 * (self._i_hess @ (interpolation.xpt.T @ x_diff) ** 2.0 + x_diff @ self._e_hess @ x_diff)

    @property
    def n(self):
        """
        Number of variables.

        Returns
        -------
        int
            Number of variables.
        """
        return self._grad.size

    @property
    def npt(self):
        """
        Number of interpolation points used to define the quadratic model.

        Returns
        -------
        int
            Number of interpolation points used to define the quadratic model.
        """
        return self._i_hess.size

    @property
    def is_finite(self):
        """
        Whether all the coefficients of the quadratic model are finite.

        Returns
        -------
        bool
            Whether all the coefficients of the quadratic model are finite.
        """
        return bool(np.isfinite(self._const) and np.all(np.isfinite(self._grad)) and np.all(np.isfinite(self._i_hess)) and np.all(np.isfinite(self._e_hess)))

    def grad(self, x, interpolation):
        """
        Evaluate the gradient of the quadratic model at a given point.

        Parameters
        ----------
        x : numpy.ndarray, shape (n,)
            Point at which the gradient of the quadratic model is evaluated.
        interpolation : Interpolation
            Interpolation set.

        Returns
        -------
        `numpy.ndarray`, shape (n,)
            Gradient of the quadratic model at `x`.
        """
        x_diff = x - interpolation.x_base
        return self._grad + self.hess_prod(x_diff, interpolation)

    def hess(self, interpolation):
        """
        Evaluate the Hessian matrix of the quadratic model.

        Parameters
        ----------
        interpolation : Interpolation
            Interpolation set.

        Returns
        -------
        `numpy.ndarray`, shape (n, n)
            Hessian matrix of the quadratic model.
        """
        return self._e_hess + interpolation.xpt @ (self._i_hess[:, np.newaxis] * interpolation.xpt.T)

    def hess_prod(self, v, interpolation):
        """
        Evaluate the right product of the Hessian matrix of the quadratic model
        with a given vector.

        Parameters
        ----------
        v : numpy.ndarray, shape (n,)
            Vector with which the Hessian matrix of the quadratic model is
            multiplied from the right.
        interpolation : Interpolation
            Interpolation set.

        Returns
        -------
        `numpy.ndarray`, shape (n,)
            Right product of the Hessian matrix of the quadratic model with `v`.
        """
        return self._e_hess @ v + interpolation.xpt @ (self._i_hess * (interpolation.xpt.T @ v))

    def curv(self, v, interpolation):
        """
        Evaluate the curvature of the quadratic model along a given direction.

        Parameters
        ----------
        v : numpy.ndarray, shape (n,)
            Direction along which the curvature of the quadratic model is
            evaluated.
        interpolation : Interpolation
            Interpolation set.

        Returns
        -------
        float
            Curvature of the quadratic model along `v`.
        """
        return v @ self._e_hess @ v + self._i_hess @ (interpolation.xpt.T @ v) ** 2.0

    def update(self, interpolation, k_new, dir_old, values_diff):
        """
        Update the quadratic model.

        This method applies the derivative-free symmetric Broyden update to the
        quadratic model. The `k_new`-th interpolation point must be updated
        before calling this method.

        Parameters
        ----------
        interpolation : Interpolation
            Updated interpolation set.
        k_new : int
            Index of the updated interpolation point.
        dir_old : numpy.ndarray, shape (n,)
            Value of ``interpolation.xpt[:, k_new]`` before the update.
        values_diff : numpy.ndarray, shape (npt,)
            Differences between the values of the interpolated function and the
            previous quadratic model at the updated interpolation points.
        """
        # Forward the k_new-th element of the implicit Hessian matrix to the
        # explicit Hessian matrix, as it is attached to the modified point.
        self._e_hess += self._i_hess[k_new] * np.outer(dir_old, dir_old)
        self._i_hess[k_new] = 0.0

        # Update the quadratic model.
        const, grad, i_hess = self._solve_systems(interpolation, values_diff)
        self._const += const
        self._grad += grad
        if not self._is_linear:
            self._i_hess += i_hess

    def shift_x_base(self, interpolation, new_x_base):
        """
        Shift the point around which the quadratic model is defined.

        Parameters
        ----------
        interpolation : Interpolation
            Previous interpolation set.
        new_x_base : numpy.ndarray, shape (n,)
            Point that will replace ``interpolation.x_base``.
        """
        self._const = self(new_x_base, interpolation)
        self._grad = self.grad(new_x_base, interpolation)
        shift = new_x_base - interpolation.x_base
        update = np.outer(shift, (interpolation.xpt - 0.5 * shift[:, np.newaxis]) @ self._i_hess)
        self._e_hess += update + update.T

    @staticmethod
    def get_kkt_matrix(xpt):
        """
        Build the left-hand side matrix of the interpolation system.

        Parameters
        ----------
        xpt : numpy.ndarray, shape (n, npt)
            Interpolation points, relative to the base point.

        Returns
        -------
        `numpy.ndarray`, shape (npt + n + 1, npt + n + 1)
            Left-hand side matrix of the interpolation system.
        """
        n, npt = xpt.shape
        a = np.zeros((npt + n + 1, npt + n + 1))
        a[:npt, :npt] = 0.5 * (xpt.T @ xpt) ** 2.0
        a[:npt, npt] = 1.0
        a[:npt, npt + 1:] = xpt.T
        a[npt, :npt] = 1.0
        a[npt + 1:, :npt] = xpt
        return a

    @staticmethod
    def _solve_systems(interpolation, values):
        """
        Solve the interpolation system.

        The interpolation points are scaled so that the largest distance to
        the base point is one, which improves the conditioning of the system.

        Parameters
        ----------
        interpolation : Interpolation
            Interpolation set.
        values : numpy.ndarray, shape (npt,)
            Values of the interpolated function at the interpolation points.

        Returns
        -------
        float
            Constant term of the quadratic model.
        `numpy.ndarray`, shape (n,)
            Gradient of the quadratic model at ``interpolation.x_base``.
        `numpy.ndarray`, shape (npt,)
            Implicit Hessian matrix of the quadratic model.
        """
        n, npt = interpolation.xpt.shape
        scale = interpolation.scale
        a = Quadratic.get_kkt_matrix(interpolation.xpt / scale)
        x = lstsq(a, np.r_[values, np.zeros(n + 1)])[0]
        return x[npt], x[npt + 1:] / scale, x[:npt] / scale ** 4.0


class Models:
    """
    Models for a nonlinear optimization problem.

    The objective function and the nonlinear inequality constraint functions
    are modeled by quadratic (or linear) functions interpolating them on the
    same interpolation set.
    """

    def __init__(self, pb, options):
        """
        Initialize the models.

        All the initial interpolation points are evaluated. The models are
        linear when there are ``n + 1`` interpolation points.

        Parameters
        ----------
        pb : Problem
            Problem to be solved.
        options : dict
            Options of the solver.

        Raises
        ------
        `trdfo.utils.MaxEvalError`
            If the maximum number of evaluations is reached.
        `trdfo.utils.TargetSuccess`
            If a nearly feasible interpolation point has an objective function
            value below the target.
        `trdfo.utils.CallbackSuccess`
            If the callback function requested to stop.
        """
        self._debug = options[Options.DEBUG]
        self._interpolation = Interpolation(pb, options)
        self._is_linear = self.npt == self.n + 1
        self._kkt_inv = None

        # Evaluate the nonlinear functions at the initial interpolation points.
        for k in range(self.npt):
            x_eval = self.interpolation.point(k)
            fun_val, cub_val = pb(x_eval)
            if k == 0:
                self._fun_val = np.full(self.npt, np.nan)
                self._cub_val = np.full((self.npt, cub_val.size), np.nan)
            self.fun_val[k] = fun_val
            self.cub_val[k, :] = cub_val

            # Stop the iterations if the current interpolation point is nearly
            # feasible and has an objective function value below the target.
            if fun_val <= options[Options.TARGET] and pb.maxcv(x_eval, cub_val) <= options[Options.FEASIBILITY_TOL]:
                raise TargetSuccess

        # Build the initial models.
        self.reset_models()

    @property
    def n(self):
        """
        Dimension of the problem.

        Returns
        -------
        int
            Dimension of the problem.
        """
        return self.interpolation.n

    @property
    def npt(self):
        """
        Number of interpolation points.

        Returns
        -------
        int
            Number of interpolation points.
        """
        return self.interpolation.npt

    @property
    def m_nonlinear(self):
        """
        Number of nonlinear inequality constraints.

        Returns
        -------
        int
            Number of nonlinear inequality constraints.
        """
        return self.cub_val.shape[1]

    @property
    def is_linear(self):
        """
        Whether the models are linear.

        Returns
        -------
        bool
            Whether the models are linear.
        """
        return self._is_linear

    @property
    def interpolation(self):
        """
        Interpolation set.

        Returns
        -------
        Interpolation
            Interpolation set.
        """
        return self._interpolation

    @property
    def fun_val(self):
        """
        Values of the objective function at the interpolation points.

        Returns
        -------
        `numpy.ndarray`, shape (npt,)
            Values of the objective function at the interpolation points.
        """
        return self._fun_val

    @property
    def cub_val(self):
        """
        Values of the nonlinear inequality constraint functions at the
        interpolation points.

        Returns
        -------
        `numpy.ndarray`, shape (npt, m_nonlinear)
            Values of the nonlinear inequality constraint functions at the
            interpolation points.
        """
        return self._cub_val

    @property
    def is_finite(self):
        """
        Whether all the coefficients of the models are finite.

        Returns
        -------
        bool
            Whether all the coefficients of the models are finite.
        """
        return self._fun.is_finite and all(model.is_finite for model in self._cub)

    def fun(self, x):
        """
        Evaluate the model of the objective function at a given point.

        Parameters
        ----------
        x : numpy.ndarray, shape (n,)
            Point at which to evaluate the model of the objective function.

        Returns
        -------
        float
            Value of the model of the objective function at `x`.
        """
        return self._fun(x, self.interpolation)

    def fun_grad(self, x):
        """
        Evaluate the gradient of the model of the objective function at a given
        point.

        Parameters
        ----------
        x : numpy.ndarray, shape (n,)
            Point at which to evaluate the gradient of the model of the
            objective function.

        Returns
        -------
        `numpy.ndarray`, shape (n,)
            Gradient of the model of the objective function at `x`.
        """
        return self._fun.grad(x, self.interpolation)

    def fun_hess(self):
        """
        Evaluate the Hessian matrix of the model of the objective function.

        Returns
        -------
        `numpy.ndarray`, shape (n, n)
            Hessian matrix of the model of the objective function.
        """
        return self._fun.hess(self.interpolation)

    def fun_hess_prod(self, v):
        """
        Evaluate the right product of the Hessian matrix of the model of the
        objective function with a given vector.

        Parameters
        ----------
        v : numpy.ndarray, shape (n,)
            Vector with which the Hessian matrix of the model of the objective
            function is multiplied from the right.

        Returns
        -------
        `numpy.ndarray`, shape (n,)
            Right product of the Hessian matrix of the model of the objective
            function with `v`.
        """
        return self._fun.hess_prod(v, self.interpolation)

    def fun_curv(self, v):
        """
        Evaluate the curvature of the model of the objective function along a
        given direction.

        Parameters
        ----------
        v : numpy.ndarray, shape (n,)
            Direction along which the curvature of the model of the objective
            function is evaluated.

        Returns
        -------
        float
            Curvature of the model of the objective function along `v`.
        """
        return self._fun.curv(v, self.interpolation)

    def fun_alt_grad(self, x):
        """
        Evaluate the gradient of the alternative model of the objective
        function at a given point.

        The alternative model is the least Frobenius norm interpolant of the
        objective function, built from scratch.

        Parameters
        ----------
        x : numpy.ndarray, shape (n,)
            Point at which to evaluate the gradient of the alternative model of
            the objective function.

        Returns
        -------
        `numpy.ndarray`, shape (n,)
            Gradient of the alternative model of the objective function at `x`.
        """
        model = Quadratic(self.interpolation, self.fun_val, self.is_linear)
        return model.grad(x, self.interpolation)

    def cub(self, x):
        """
        Evaluate the models of the nonlinear inequality constraint functions at
        a given point.

        Parameters
        ----------
        x : numpy.ndarray, shape (n,)
            Point at which to evaluate the models.

        Returns
        -------
        `numpy.ndarray`, shape (m_nonlinear,)
            Values of the models of the nonlinear inequality constraint
            functions at `x`.
        """
        return np.array([model(x, self.interpolation) for model in self._cub], dtype=float)

    def cub_grad(self, x):
        """
        Evaluate the gradients of the models of the nonlinear inequality
        constraint functions at a given point.

        Parameters
        ----------
        x : numpy.ndarray, shape (n,)
            Point at which to evaluate the gradients of the models.

        Returns
        -------
        `numpy.ndarray`, shape (m_nonlinear, n)
            Gradients of the models of the nonlinear inequality constraint
            functions at `x`.
        """
        return np.reshape([model.grad(x, self.interpolation) for model in self._cub], (-1, self.n))

    def lagrange(self, k):
        """
        Build the `k`-th Lagrange polynomial of the interpolation set.

        Parameters
        ----------
        k : int
            Index of the Lagrange polynomial.

        Returns
        -------
        Quadratic
            Least Frobenius norm quadratic function that equals one at the
            `k`-th interpolation point and zero at the others.
        """
        return Quadratic(self.interpolation, np.eye(1, self.npt, k)[0], self.is_linear)

    def reset_models(self):
        """
        Set the models of the objective and the nonlinear inequality constraint
        functions to the least Frobenius norm interpolants, built from scratch.
        """
        self._fun = Quadratic(self.interpolation, self.fun_val, self.is_linear)
        self._cub = [Quadratic(self.interpolation, self.cub_val[:, i], self.is_linear) for i in range(self.m_nonlinear)]
        if self._debug:
            self._check_interpolation_conditions()

    def update_interpolation(self, k_new, x_new, fun_val, cub_val):
        """
        Update the interpolation set.

        This method replaces the `k_new`-th interpolation point with `x_new`,
        and updates the function values and the models accordingly.

        Parameters
        ----------
        k_new : int
            Index of the updated interpolation point.
        x_new : numpy.ndarray, shape (n,)
            New interpolation point. Its value is interpreted as relative to
            the origin, not the base point.
        fun_val : float
            Value of the objective function at `x_new`.
        cub_val : numpy.ndarray, shape (m_nonlinear,)
            Values of the nonlinear inequality constraints at `x_new`.

        Returns
        -------
        bool
            Whether the interpolation set is degenerate after the update. In
            this case, the geometry of the interpolation set must be improved.

        Raises
        ------
        `numpy.linalg.LinAlgError`
            If an interpolation system cannot be solved.
        """
        sigma = self.denominators(x_new)[k_new]

        # Compute the updates in the interpolation conditions.
        fun_diff = np.zeros(self.npt)
        cub_diff = np.zeros_like(self.cub_val)
        fun_diff[k_new] = fun_val - self.fun(x_new)
        cub_diff[k_new, :] = cub_val - self.cub(x_new)

        # Update the function values and the interpolation set.
        self.fun_val[k_new] = fun_val
        self.cub_val[k_new, :] = cub_val
        dir_old = np.copy(self.interpolation.xpt[:, k_new])
        self.interpolation.xpt[:, k_new] = x_new - self.interpolation.x_base
        self._kkt_inv = None

        # Update the models. If the updated models do not satisfy the
        # interpolation conditions, they are rebuilt from scratch.
        self._fun.update(self.interpolation, k_new, dir_old, fun_diff)
        for i, model in enumerate(self._cub):
            model.update(self.interpolation, k_new, dir_old, cub_diff[:, i])
        ill_conditioned = abs(sigma) <= 1e-10
        if not self._satisfies_interpolation_conditions():
            self.reset_models()
            ill_conditioned = True
        elif self._debug:
            self._check_interpolation_conditions()
        return ill_conditioned

    def lagrange_values(self, x):
        """
        Evaluate the Lagrange polynomials of the interpolation set at a given
        point.

        Parameters
        ----------
        x : numpy.ndarray, shape (n,)
            Point at which the Lagrange polynomials are evaluated.

        Returns
        -------
        `numpy.ndarray`, shape (npt,)
            Values of the Lagrange polynomials at `x`.
        """
        return self._solve_lagrange(x)[0]

    def denominators(self, x_new):
        """
        Compute the denominators of the derivative-free symmetric Broyden
        update.

        The denominator for the `k`-th interpolation point is the denominator
        in Equation (2.12) of [1]_, when the `k`-th interpolation point is
        replaced by `x_new`.

        Parameters
        ----------
        x_new : numpy.ndarray, shape (n,)
            New interpolation point. Its value is interpreted as relative to
            the origin, not the base point.

        Returns
        -------
        `numpy.ndarray`, shape (npt,)
            Denominators of the derivative-free symmetric Broyden update.

        References
        ----------
        .. [1] M. J. D. Powell. On updating the inverse of a KKT matrix. In Y.
           Yuan, editor, *Numerical Linear Algebra and Optimization*, pages
           56--78. Science Press, Beijing, China, 2004.
        """
        lag_values, beta = self._solve_lagrange(x_new)
        alpha = np.diag(self._get_kkt_inverse())[:self.npt]
        return alpha * beta + lag_values ** 2.0

    def shift_x_base(self, new_x_base, options):
        """
        Shift the base point without changing the interpolation set.

        Parameters
        ----------
        new_x_base : numpy.ndarray, shape (n,)
            New base point.
        options : dict
            Options of the solver.
        """
        # Update the models.
        self._fun.shift_x_base(self.interpolation, new_x_base)
        for model in self._cub:
            model.shift_x_base(self.interpolation, new_x_base)

        # Update the base point and the interpolation points.
        shift = new_x_base - self.interpolation.x_base
        self.interpolation.x_base[:] += shift
        self.interpolation.xpt[:] -= shift[:, np.newaxis]
        self._kkt_inv = None
        if options[Options.DEBUG]:
            self._check_interpolation_conditions()

    def _get_kkt_inverse(self):
        """
        Inverse of the scaled interpolation system, computed once per set.
        """
        if self._kkt_inv is None:
            a = Quadratic.get_kkt_matrix(self.interpolation.xpt / self.interpolation.scale)
            self._kkt_inv = lstsq(a, np.eye(a.shape[0]))[0]
        return self._kkt_inv

    def _solve_lagrange(self, x):
        """
        Values of the Lagrange polynomials at `x` and the corresponding
        denominator term ``beta`` of the updating formula.
        """
        scale = self.interpolation.scale
        shift = (x - self.interpolation.x_base) / scale
        xpt_shift = self.interpolation.xpt.T @ shift / scale
        w = np.r_[0.5 * xpt_shift ** 2.0, 1.0, shift]
        inv_w = self._get_kkt_inverse() @ w
        beta = 0.5 * (shift @ shift) ** 2.0 - w @ inv_w
        return inv_w[:self.npt], beta

    def _interpolation_errors(self):
        error_fun = 0.0
        error_cub = 0.0
        for k in range(self.npt):
            error_fun = max(error_fun, abs(self.fun(self.interpolation.point(k)) - self.fun_val[k]))
            error_cub = np.max(np.abs(self.cub(self.interpolation.point(k)) - self.cub_val[k, :]), initial=error_cub)
        tol = 10.0 * np.sqrt(np.finfo(float).eps) * max(self.n, self.npt)
        return error_fun / (tol * np.max(np.abs(self.fun_val), initial=1.0)), error_cub / (tol * np.max(np.abs(self.cub_val), initial=1.0))

    def _satisfies_interpolation_conditions(self):
        return max(self._interpolation_errors()) <= 1.0

    def _check_interpolation_conditions(self):
        """
        Check the interpolation conditions of all models.
        """
        error_fun, error_cub = self._interpolation_errors()
        if error_fun > 1.0:
            warnings.warn('The interpolation conditions for the objective function are not satisfied.', RuntimeWarning)
        if error_cub > 1.0:
            warnings.warn('The interpolation conditions for the nonlinear constraint functions are not satisfied.', RuntimeWarning)
