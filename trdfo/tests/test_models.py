import numpy as np
import pytest
from scipy.optimize import Bounds, rosen

from ..models import Interpolation, Quadratic, Models
from ..problem import ObjectiveFunction, BoundConstraints, LinearConstraints, NonlinearConstraints, Problem
from ..settings import Options
from ..utils import MaxEvalError, TargetSuccess


def rosen_con(x):
    return rosen(x), [np.cos(x[0]) - 1.0, x[0] + x[1] - 1.5]


class TestInterpolation:

    def test_simple(self):
        problem = get_problem([0.5, 0.5])
        options = get_options(problem, ((problem.n + 1) * (problem.n + 2)) // 2)
        interpolation = Interpolation(problem, options)
        assert interpolation.n == problem.n
        assert interpolation.npt == options[Options.NPT]
        np.testing.assert_allclose(interpolation.x_base, problem.x0, atol=1e-13)
        np.testing.assert_array_equal(interpolation.xpt[:, 0], 0.0)
        for k in range(interpolation.npt):
            point = interpolation.point(k)
            np.testing.assert_allclose(np.maximum(point, problem.bounds.xl), point, atol=1e-13)
            np.testing.assert_allclose(np.minimum(point, problem.bounds.xu), point, atol=1e-13)

        # The interpolation points are pairwise distinct.
        for k in range(interpolation.npt):
            for j in range(k):
                assert np.linalg.norm(interpolation.xpt[:, k] - interpolation.xpt[:, j]) > 0.0

    @pytest.mark.parametrize('x0,x_base', [
        ([0.0, 0.5], [0.0, 0.5]),
        ([0.1, 0.5], [0.0, 0.5]),
        ([0.3, 0.5], [0.5, 0.5]),
        ([0.9, 0.5], [1.0, 0.5]),
        ([0.7, 0.5], [0.5, 0.5]),
    ])
    def test_close(self, x0, x_base):
        problem = get_problem(x0)
        options = get_options(problem, ((problem.n + 1) * (problem.n + 2)) // 2)
        interpolation = Interpolation(problem, options)
        np.testing.assert_allclose(interpolation.x_base, x_base, atol=1e-13)
        for k in range(interpolation.npt):
            point = interpolation.point(k)
            assert np.all(problem.bounds.xl <= point)
            assert np.all(point <= problem.bounds.xu)

    def test_rhobeg(self):
        # The initial trust-region radius is reduced if the bounds are close.
        problem = get_problem([0.1, 0.1], [0.0, 0.0], [0.2, 1.0])
        options = get_options(problem, 2 * problem.n + 1)
        Interpolation(problem, options)
        assert options[Options.RHOBEG] == pytest.approx(0.1)
        assert options[Options.RHOEND] == 1e-6

    def test_scale(self):
        problem = get_problem([0.5, 0.5])
        options = get_options(problem, problem.n + 1)
        interpolation = Interpolation(problem, options)
        assert interpolation.scale == pytest.approx(options[Options.RHOBEG])


class TestQuadratic:

    def test_simple(self):
        problem = get_problem([0.5, 0.5])
        options = get_options(problem, ((problem.n + 1) * (problem.n + 2)) // 2)
        interpolation = Interpolation(problem, options)
        values = np.arange(interpolation.npt, dtype=float)
        model = Quadratic(interpolation, values)
        assert model.n == problem.n
        assert model.npt == interpolation.npt
        assert model.is_finite
        for k in range(interpolation.npt):
            np.testing.assert_allclose(model(interpolation.point(k), interpolation), values[k], atol=1e-12)
        hess = model.hess(interpolation)
        for i in range(model.n):
            e_i = np.squeeze(np.eye(1, model.n, i))
            np.testing.assert_allclose(hess[:, i], model.hess_prod(e_i, interpolation), atol=1e-12)
            np.testing.assert_allclose(hess[i, i], model.curv(e_i, interpolation), atol=1e-12)

    @pytest.mark.parametrize('n', [1, 2, 4])
    def test_quadratic(self, n):
        # A quadratic function is recovered exactly from a full set of points.
        rng = np.random.default_rng(n)
        problem = get_unconstrained_problem(rng.standard_normal(n))
        options = get_options(problem, ((n + 1) * (n + 2)) // 2)
        interpolation = Interpolation(problem, options)
        grad = rng.standard_normal(n)
        hess = rng.standard_normal((n, n))
        hess = hess + hess.T

        def fun(x):
            return 1.0 + grad @ x + 0.5 * x @ hess @ x

        values = np.array([fun(interpolation.point(k)) for k in range(interpolation.npt)])
        model = Quadratic(interpolation, values)
        np.testing.assert_allclose(model.hess(interpolation), hess, atol=1e-8)
        x = rng.standard_normal(n)
        np.testing.assert_allclose(model(x, interpolation), fun(x), atol=1e-8)
        np.testing.assert_allclose(model.grad(x, interpolation), grad + hess @ x, atol=1e-8)

    def test_linear(self):
        problem = get_problem([0.5, 0.5])
        options = get_options(problem, problem.n + 1)
        interpolation = Interpolation(problem, options)
        values = np.array([1.0, 2.0, 4.0])
        model = Quadratic(interpolation, values, True)
        np.testing.assert_array_equal(model.hess(interpolation), 0.0)
        np.testing.assert_allclose(model.grad(problem.x0, interpolation), [2.0, 6.0], atol=1e-12)

    def test_shift_x_base(self):
        problem = get_problem([0.5, 0.5])
        options = get_options(problem, 2 * problem.n + 1)
        interpolation = Interpolation(problem, options)
        values = np.array([1.0, 3.0, -2.0, 0.5, 4.0])
        model = Quadratic(interpolation, values)
        x = np.array([0.2, 0.9])
        fun_val = model(x, interpolation)
        grad = model.grad(x, interpolation)
        hess = model.hess(interpolation)

        # Shifting the base point does not change the quadratic function.
        new_x_base = np.array([0.6, 0.4])
        model.shift_x_base(interpolation, new_x_base)
        shift = new_x_base - interpolation.x_base
        interpolation.x_base[:] += shift
        interpolation.xpt[:] -= shift[:, np.newaxis]
        np.testing.assert_allclose(model(x, interpolation), fun_val, atol=1e-12)
        np.testing.assert_allclose(model.grad(x, interpolation), grad, atol=1e-12)
        np.testing.assert_allclose(model.hess(interpolation), hess, atol=1e-12)

    def test_exceptions(self):
        problem = get_problem([0.5, 0.5])
        options = get_options(problem, problem.n)
        interpolation = Interpolation(problem, options)
        values = np.zeros(interpolation.npt)
        with pytest.raises(ValueError):
            Quadratic(interpolation, values, True)


class TestModels:

    def test_simple(self):
        problem = get_problem([0.5, 0.5])
        options = get_options(problem, 2 * problem.n + 1)
        models = Models(problem, options)
        assert models.n == problem.n
        assert models.npt == options[Options.NPT]
        assert models.m_nonlinear == 2
        assert not models.is_linear
        assert models.is_finite
        assert problem.n_eval == models.npt
        for k in range(models.npt):
            x = models.interpolation.point(k)
            np.testing.assert_allclose(models.fun(x), models.fun_val[k], atol=1e-10)
            np.testing.assert_allclose(models.cub(x), models.cub_val[k, :], atol=1e-10)
        assert models.cub_grad(problem.x0).shape == (2, problem.n)

    def test_linear(self):
        problem = get_problem([0.5, 0.5])
        options = get_options(problem, problem.n + 1)
        models = Models(problem, options)
        assert models.is_linear
        np.testing.assert_array_equal(models.fun_hess(), 0.0)
        np.testing.assert_array_equal(models.fun_hess_prod(np.ones(problem.n)), 0.0)
        assert models.fun_curv(np.ones(problem.n)) == 0.0

    @pytest.mark.parametrize('npt_f', [
        lambda n: n + 1,
        lambda n: 2 * n + 1,
        lambda n: (n + 1) * (n + 2) // 2,
    ])
    def test_lagrange(self, npt_f):
        problem = get_problem([0.5, 0.5])
        options = get_options(problem, npt_f(problem.n))
        models = Models(problem, options)
        for k in range(models.npt):
            x = models.interpolation.point(k)
            np.testing.assert_allclose(models.lagrange_values(x), np.eye(1, models.npt, k)[0], atol=1e-10)
            np.testing.assert_allclose(models.denominators(x), np.eye(1, models.npt, k)[0], atol=1e-10)
            lagrange = models.lagrange(k)
            for j in range(models.npt):
                np.testing.assert_allclose(lagrange(models.interpolation.point(j), models.interpolation), float(j == k), atol=1e-10)

    def test_update_interpolation(self):
        problem = get_problem([0.5, 0.5])
        options = get_options(problem, ((problem.n + 1) * (problem.n + 2)) // 2)
        models = Models(problem, options)
        x_new = np.array([0.25, 0.75])
        fun_val, cub_val = problem(x_new)
        ill_conditioned = models.update_interpolation(models.npt - 1, x_new, fun_val, cub_val)
        assert not ill_conditioned
        np.testing.assert_array_equal(models.interpolation.point(models.npt - 1), x_new)
        assert models.fun_val[-1] == fun_val
        for k in range(models.npt):
            x = models.interpolation.point(k)
            np.testing.assert_allclose(models.fun(x), models.fun_val[k], atol=1e-10)
            np.testing.assert_allclose(models.cub(x), models.cub_val[k, :], atol=1e-10)

    def test_shift_x_base(self):
        problem = get_problem([0.5, 0.5])
        options = get_options(problem, 2 * problem.n + 1)
        models = Models(problem, options)
        x = np.array([0.3, 0.8])
        fun_val = models.fun(x)
        cub_val = models.cub(x)
        points = np.array([models.interpolation.point(k) for k in range(models.npt)])
        models.shift_x_base(np.array([0.7, 0.6]), options)
        np.testing.assert_allclose(models.interpolation.x_base, [0.7, 0.6])
        np.testing.assert_allclose([models.interpolation.point(k) for k in range(models.npt)], points, atol=1e-13)
        np.testing.assert_allclose(models.fun(x), fun_val, atol=1e-10)
        np.testing.assert_allclose(models.cub(x), cub_val, atol=1e-10)

    def test_max_eval(self):
        problem = get_problem([0.5, 0.5], max_eval=2)
        options = get_options(problem, 2 * problem.n + 1)
        with pytest.raises(MaxEvalError):
            Models(problem, options)

    def test_target(self):
        problem = get_unconstrained_problem([0.0, 0.0])
        options = get_options(problem, 2 * problem.n + 1)
        options[Options.TARGET.value] = 1.0
        with pytest.raises(TargetSuccess):
            Models(problem, options)
        assert problem.n_eval == 1


def get_options(problem, npt):
    return {
        Options.RHOBEG.value: 0.5,
        Options.RHOEND.value: 1e-6,
        Options.NPT.value: npt,
        Options.FEASIBILITY_TOL.value: 1e-8,
        Options.TARGET.value: -np.inf,
        Options.DEBUG.value: True,
    }


def get_problem(x0, xl=None, xu=None, max_eval=1000):
    obj = ObjectiveFunction(rosen_con, True, max_eval, False, True)
    bounds = BoundConstraints(Bounds([0.0, 0.0] if xl is None else xl, [1.0, 1.0] if xu is None else xu))
    linear = LinearConstraints(np.empty((0, 2)), np.empty(0), np.empty((0, 2)), np.empty(0), True)
    nonlinear = NonlinearConstraints(2, True)
    return Problem(obj, x0, bounds, linear, nonlinear, None, 1e-8, False, 1000, True)


def get_unconstrained_problem(x0):
    n = len(x0)
    obj = ObjectiveFunction(rosen, False, 1000, False, True)
    bounds = BoundConstraints(Bounds(np.full(n, -np.inf), np.full(n, np.inf)))
    linear = LinearConstraints(np.empty((0, n)), np.empty(0), np.empty((0, n)), np.empty(0), True)
    nonlinear = NonlinearConstraints(0, True)
    return Problem(obj, x0, bounds, linear, nonlinear, None, 1e-8, False, 1000, True)
