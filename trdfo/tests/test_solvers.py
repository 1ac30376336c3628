from abc import ABC

import numpy as np
import pytest
from numpy.testing import assert_, assert_allclose, assert_array_equal

from trdfo import bobyqa, cobyla, lincoa, newuoa, uobyqa
from trdfo.framework import TrustRegion
from trdfo.tests import assert_array_less_equal, assert_feasible_history


class TestBase(ABC):

    @staticmethod
    def power(x):
        x = np.asarray(x)
        n = x.size
        return np.sum(np.arange(1, n + 1) * x ** 2.0)

    @staticmethod
    def quadratic(x):
        x = np.asarray(x)
        return (x[0] - 1.0) ** 2.0 + 2.0 * (x[1] + 0.5) ** 2.0 + 0.5 * (x[0] - 1.0) * (x[1] + 0.5)

    @staticmethod
    def rosen(x):
        x = np.asarray(x)
        fvx = 100.0 * (x[1:] - x[:-1] ** 2.0) ** 2.0 + (1.0 - x[:-1]) ** 2.0
        return np.sum(fvx)

    @staticmethod
    def sphere(x):
        x = np.asarray(x)
        return np.inner(x, x)

    @staticmethod
    def trid(x):
        x = np.asarray(x)
        return np.sum((x - 1.0) ** 2.0) - np.sum(x[1:] * x[:-1])

    @staticmethod
    def trid_solution(n):
        i = np.arange(1, n + 1)
        return i * (n + 1.0 - i)

    @staticmethod
    def lincoa_fun(x):
        return 5.0 * (x[0] - 3.0) ** 2.0 + 7.0 * (x[1] - 2.0) ** 2.0 + 0.1 * (x[0] + x[1]) - 10.0

    @staticmethod
    def assert_optimize(res, n, x_solution, f_solution, maxfun, atol=1e-3):
        assert_(res.status in {0, 1}, res.message)
        assert_(res.nfev <= maxfun)
        assert_(res.cstrv >= 0.0)
        assert_allclose(res.x, x_solution, atol=atol)
        assert_(res.fun <= f_solution + atol)
        assert_(res.x.shape == (n,))


class TestUOBYQA(TestBase):

    def test_quadratic(self):
        # Quadratic models interpolate the objective function exactly.
        res = uobyqa(self.quadratic, [0.0, 0.0], options={'rhoend': 1e-3, 'debug': True})
        self.assert_optimize(res, 2, [1.0, -0.5], 0.0, 1000, 2e-3)
        assert_(res.cstrv == 0.0)

    @pytest.mark.parametrize('fun', ['sphere', 'power'])
    @pytest.mark.parametrize('n', [2, 4])
    def test_simple(self, fun, n):
        res = uobyqa(getattr(self, fun), np.ones(n), options={'debug': True})
        self.assert_optimize(res, n, np.zeros(n), 0.0, 500 * n)

    def test_trid(self):
        n = 3
        x_solution = self.trid_solution(n)
        res = uobyqa(self.trid, np.zeros(n))
        self.assert_optimize(res, n, x_solution, self.trid(x_solution), 500 * n)


class TestNEWUOA(TestBase):

    def test_quadratic(self):
        res = newuoa(self.quadratic, [0.0, 0.0], options={'rhoend': 1e-3, 'debug': True})
        self.assert_optimize(res, 2, [1.0, -0.5], 0.0, 1000, 2e-3)
        assert_(res.cstrv == 0.0)

    @pytest.mark.parametrize('fun', ['sphere', 'power', 'trid'])
    @pytest.mark.parametrize('n', [2, 5])
    @pytest.mark.parametrize('npt_f', [
        lambda n: n + 2,
        lambda n: 2 * n + 1,
    ])
    def test_simple(self, fun, n, npt_f):
        if fun == 'trid':
            x_solution = self.trid_solution(n)
        else:
            x_solution = np.zeros(n)
        res = newuoa(getattr(self, fun), np.ones(n), options={'npt': npt_f(n), 'maxfun': 1000 * n})
        self.assert_optimize(res, n, x_solution, getattr(self, fun)(x_solution), 1000 * n, 1e-2)

    def test_rosen(self):
        res = newuoa(self.rosen, [-1.2, 1.0], options={'maxfun': 2000})
        self.assert_optimize(res, 2, [1.0, 1.0], 0.0, 2000, 1e-2)

    def test_history(self):
        res = newuoa(self.sphere, [1.0, 1.0], options={'store_history': True})
        assert_(res.fun_history.shape == (res.nfev,))
        assert_(res.cstrv_history.shape == (res.nfev,))
        assert_(res.x_history.shape == (res.nfev, 2))
        assert_(res.fun == np.min(res.fun_history))
        assert_array_equal(res.cstrv_history, 0.0)


class TestBOBYQA(TestBase):

    @pytest.mark.parametrize('n', [2, 5])
    def test_active_bounds(self, n):
        # The unconstrained minimizer lies outside the feasible box.
        xl = np.ones(n)
        xu = np.full(n, 3.0)
        res = bobyqa(self.sphere, np.full(n, 2.0), xl=xl, xu=xu, options={'store_history': True, 'debug': True})
        self.assert_optimize(res, n, xl, float(n), 500 * n)
        assert_(res.cstrv == 0.0)
        assert_feasible_history(res, xl, xu)
        assert_(res.fun == np.min(res.fun_history))

    def test_inactive_bounds(self):
        xl = [-2.0, -2.0]
        xu = [2.0, 2.0]
        res = bobyqa(self.quadratic, [0.0, 0.0], xl=xl, xu=xu, options={'store_history': True})
        self.assert_optimize(res, 2, [1.0, -0.5], 0.0, 1000)
        assert_feasible_history(res, xl, xu)

    def test_close_bounds(self):
        # The bounds are closer to each other than twice the initial radius.
        xl = [0.0, 0.0]
        xu = [0.2, 0.5]
        res = bobyqa(self.sphere, [0.1, 0.1], xl=xl, xu=xu, options={'rhobeg': 1.0, 'store_history': True})
        self.assert_optimize(res, 2, [0.0, 0.0], 0.0, 1000)
        assert_feasible_history(res, xl, xu)

    def test_rosen(self):
        xl = [-2.0, -2.0]
        xu = [0.5, 2.0]
        res = bobyqa(self.rosen, [-1.2, 1.0], xl=xl, xu=xu, options={'maxfun': 2000})
        self.assert_optimize(res, 2, [0.5, 0.25], self.rosen([0.5, 0.25]), 2000, 1e-2)


class TestLINCOA(TestBase):

    def test_simple(self):
        aineq = [[1.0, 0.0], [0.0, 1.0], [1.0, 1.0]]
        bineq = [4.0, 3.0, 10.0]
        res = lincoa(self.lincoa_fun, [0.0, 0.0], aineq=aineq, bineq=bineq, options={'store_history': True, 'debug': True})
        assert_(res.success, res.message)
        assert_allclose(res.x, [3.0, 2.0], atol=2e-2)
        assert_array_less_equal(np.dot(aineq, res.x), np.add(bineq, 1e-8))
        assert_(res.cstrv == 0.0)

    def test_active(self):
        # The linear constraint is active at the solution.
        res = lincoa(self.sphere, [2.0, 2.0], aineq=[[-1.0, -1.0]], bineq=[-2.0], options={'debug': True})
        self.assert_optimize(res, 2, [1.0, 1.0], 2.0, 1000, 1e-2)
        assert_(res.cstrv <= 1e-6)

    def test_equality(self):
        res = lincoa(self.sphere, [2.0, 0.0], aeq=[[1.0, 1.0]], beq=[2.0])
        self.assert_optimize(res, 2, [1.0, 1.0], 2.0, 1000, 1e-2)
        assert_(res.cstrv <= 1e-6)

    @pytest.mark.parametrize('fun', ['sphere', 'quadratic', 'rosen'])
    def test_bound_constrained(self, fun):
        # Without linear constraints, the iterations are those of BOBYQA.
        xl = [-1.0, -1.0]
        xu = [2.0, 0.5]
        options = {'maxfun': 200, 'rhobeg': 0.5}
        res = lincoa(getattr(self, fun), [0.0, 0.0], xl=xl, xu=xu, options=options)
        res_bd = bobyqa(getattr(self, fun), [0.0, 0.0], xl=xl, xu=xu, options=options)
        assert_array_equal(res.x, res_bd.x)
        assert_(res.fun == res_bd.fun)
        assert_(res.nfev == res_bd.nfev)
        assert_(res.nit == res_bd.nit)
        assert_(res.status == res_bd.status)

    def test_infeasible_start(self):
        # The initial guess violates the linear constraints.
        aineq = [[1.0, 1.0]]
        bineq = [1.0]
        res = lincoa(self.sphere, [3.0, 3.0], aineq=aineq, bineq=bineq)
        assert_(res.success, res.message)
        assert_allclose(res.x, [0.0, 0.0], atol=1e-3)
        assert_(res.cstrv == 0.0)


class TestCOBYLA(TestBase):

    @staticmethod
    def problem_f(x):
        # Minimize x0 * x1 subject to the unit disk.
        return x[0] * x[1], [x[0] ** 2.0 + x[1] ** 2.0 - 1.0]

    @staticmethod
    def problem_hexagon(x):
        return -x[0] - x[1], [x[0] ** 2.0 + x[1] ** 2.0 - 2.0, x[0] - 1.2]

    def test_disk(self):
        res = cobyla(self.problem_f, [1.0, 0.5], options={'m_nlcon': 1, 'debug': True})
        assert_(res.success, res.message)
        x_solution = np.array([np.sqrt(0.5), -np.sqrt(0.5)])
        if res.x[0] < 0.0:
            x_solution = -x_solution
        assert_allclose(res.x, x_solution, atol=1e-2)
        assert_(res.nlconstr.shape == (1,))
        assert_(res.cstrv <= 1e-6)

    def test_powell_f(self):
        def fun_con(x):
            return -x[0] - x[1], [x[0] ** 2.0 + x[1] ** 2.0 - 1.0, x[0] ** 2.0 - x[1]]

        res = cobyla(fun_con, [1.0, 1.0], options={'m_nlcon': 2})
        assert_(res.success, res.message)
        assert_allclose(res.x, [np.sqrt(0.5), np.sqrt(0.5)], atol=1e-2)
        assert_(res.cstrv <= 1e-6)

    def test_infer_m_nlcon(self):
        # The number of nonlinear constraints is set by the first evaluation.
        res = cobyla(self.problem_hexagon, [0.0, 0.0])
        assert_(res.success, res.message)
        assert_allclose(res.x, [1.0, 1.0], atol=1e-2)
        assert_(res.nlconstr.shape == (2,))
        assert_allclose(res.fun, -2.0, atol=1e-2)

    def test_bounds(self):
        res = cobyla(self.problem_hexagon, [0.0, 0.0], xu=[0.5, 5.0], options={'m_nlcon': 2, 'store_history': True})
        assert_(res.success, res.message)
        assert_allclose(res.x, [0.5, np.sqrt(1.75)], atol=1e-2)
        assert_feasible_history(res, [-np.inf, -np.inf], [0.5, 5.0])

    def test_linear(self):
        res = cobyla(self.problem_hexagon, [0.0, 0.0], aineq=[[0.0, 1.0]], bineq=[0.5])
        assert_(res.success, res.message)
        assert_allclose(res.x, [1.2, 0.5], atol=1e-2)
        assert_(res.cstrv <= 1e-6)

    def test_unconstrained(self):
        def fun_con(x):
            return TestBase.quadratic(x), []

        res = cobyla(fun_con, [0.0, 0.0], options={'m_nlcon': 0})
        assert_(res.success, res.message)
        assert_allclose(res.x, [1.0, -0.5], atol=1e-2)
        assert_(res.cstrv == 0.0)


class TestBestPoint(TestBase):

    @staticmethod
    def record_best(monkeypatch):
        # Record the penalty parameter and the merit value of the best
        # interpolation point each time it is selected.
        records = []
        set_best_index = TrustRegion.set_best_index

        def set_best_index_recorded(self):
            set_best_index(self)
            records.append((self.penalty, self.merit(self.x_best, self.fun_best, self.cub_best)))

        monkeypatch.setattr(TrustRegion, 'set_best_index', set_best_index_recorded)
        return records

    @staticmethod
    def assert_nonincreasing(values):
        values = np.array(values)
        atol = 1e-10 * np.maximum(1.0, np.abs(values))
        assert_array_less_equal(values - np.minimum.accumulate(values), atol)

    @staticmethod
    def assert_filter_best(res, feasibility_tol=np.sqrt(np.finfo(float).eps)):
        maxcv_shift = np.maximum(res.cstrv_history - feasibility_tol, 0.0)
        feasible = maxcv_shift <= np.min(maxcv_shift) + np.finfo(float).eps
        assert_(res.fun == np.min(res.fun_history[feasible]))

    @pytest.mark.parametrize('solver,kwargs', [
        (newuoa, {}),
        (uobyqa, {}),
        (bobyqa, {'xl': [-1.0, -1.0], 'xu': [2.0, 0.5]}),
    ])
    def test_unconstrained(self, monkeypatch, solver, kwargs):
        records = self.record_best(monkeypatch)
        res = solver(self.rosen, [-1.2, 1.0], options={'store_history': True, 'maxfun': 300}, **kwargs)
        assert_(len(records) > 1)
        self.assert_nonincreasing([merit for _, merit in records])
        assert_(res.fun == np.min(res.fun_history))

    @pytest.mark.parametrize('solver,fun,kwargs', [
        (lincoa, 'lincoa_fun', {'aineq': [[1.0, 0.0], [0.0, 1.0], [1.0, 1.0]], 'bineq': [4.0, 3.0, 1.0]}),
        (lincoa, 'sphere', {'aeq': [[1.0, 1.0]], 'beq': [2.0]}),
        (cobyla, 'problem_hexagon', {}),
    ])
    def test_constrained(self, monkeypatch, solver, fun, kwargs):
        records = self.record_best(monkeypatch)
        res = solver(getattr(TestCOBYLA, fun), [2.0, 0.0], options={'store_history': True, 'maxfun': 300}, **kwargs)
        assert_(len(records) > 1)

        # The merit value of the best point does not increase as long as the
        # penalty parameter is unchanged.
        start = 0
        for k in range(1, len(records) + 1):
            if k == len(records) or records[k][0] != records[start][0]:
                self.assert_nonincreasing([merit for _, merit in records[start:k]])
                start = k

        # The returned point is the best point of the history.
        self.assert_filter_best(res)
