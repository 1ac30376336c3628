import numpy as np
import pytest
from scipy.optimize import Bounds, LinearConstraint

from ..main import minimize
from ..settings import ExitStatus
from ..solvers import bobyqa, cobyla, lincoa, newuoa, uobyqa


class TestMinimize:

    def setup_method(self):
        self.x0 = [0.0, 0.0]
        self.aineq = [[1.0, 0.0], [0.0, 1.0], [1.0, 1.0]]
        self.bineq = [4.0, 3.0, 10.0]
        self.options = {'debug': True}

    @staticmethod
    def fun(x, c=1.0):
        return 5.0 * (x[0] - 3.0) ** 2.0 + 7.0 * (x[1] - 2.0) ** 2.0 + 0.1 * c * (x[0] + x[1]) - 10.0

    @staticmethod
    def fun_con(x):
        return TestMinimize.fun(x), [x[0] ** 2.0 + x[1] ** 2.0 - 13.0]

    @staticmethod
    def assert_same(res, res_alt):
        np.testing.assert_array_equal(res.x, res_alt.x)
        assert res.fun == res_alt.fun, res
        assert res.status == res_alt.status, res
        assert res.nfev == res_alt.nfev, res
        assert res.nit == res_alt.nit, res

    def test_simple(self):
        res = minimize(self.fun, self.x0, aineq=self.aineq, bineq=self.bineq, options=self.options)
        np.testing.assert_allclose(res.x, [3.0, 2.0], atol=2e-2)
        assert res.success, res.message
        assert res.status == ExitStatus.SMALL_TR_RADIUS.value, res
        assert res.message == ExitStatus.SMALL_TR_RADIUS.message
        assert res.cstrv == 0.0, res
        assert res.maxcv == res.cstrv
        assert res.nfev <= 1000, res
        assert res.nit > 0

    def test_method(self):
        # The method is chosen according to the constraints.
        self.assert_same(minimize(self.fun, self.x0), newuoa(self.fun, self.x0))
        self.assert_same(minimize(self.fun, self.x0, xl=[-6.0, -6.0]), bobyqa(self.fun, self.x0, xl=[-6.0, -6.0]))
        self.assert_same(minimize(self.fun, self.x0, aineq=self.aineq, bineq=self.bineq), lincoa(self.fun, self.x0, aineq=self.aineq, bineq=self.bineq))
        self.assert_same(minimize(self.fun_con, self.x0, options={'m_nlcon': 1}), cobyla(self.fun_con, self.x0, options={'m_nlcon': 1}))
        self.assert_same(minimize(self.fun, self.x0, method='BOBYQA'), bobyqa(self.fun, self.x0))

    def test_unsupported_constraints(self):
        with pytest.warns(RuntimeWarning):
            res = minimize(self.fun, self.x0, method='newuoa', xl=[-1.0, -1.0], xu=[1.0, 1.0])
        np.testing.assert_allclose(res.x, [2.99, 2.0 - 0.1 / 14.0], atol=1e-3)
        assert res.cstrv == 0.0
        with pytest.warns(RuntimeWarning):
            res = minimize(self.fun, self.x0, method='bobyqa', aineq=[[1.0, 1.0]], bineq=[1.0])
        assert res.cstrv == 0.0

    def test_args(self):
        res = minimize(self.fun, self.x0, (2.0,))
        np.testing.assert_allclose(res.x, [2.98, 2.0 - 0.2 / 14.0], atol=1e-3)
        res_alt = minimize(self.fun, self.x0, 2.0)
        self.assert_same(res, res_alt)

    def test_data(self):
        # The context is forwarded by reference at each evaluation.
        data = {'calls': 0}

        def fun(x, context):
            if context is not data:
                return np.nan
            context['calls'] += 1
            return self.fun(x)

        def fun_con(x, context):
            if context is not data:
                return np.nan, [np.nan]
            context['calls'] += 1
            return self.fun_con(x)

        options = {'data': data, 'maxfun': 1000, 'store_history': True}
        xl = [-6.0, -6.0]
        xu = [6.0, 6.0]
        for solver, f in [(bobyqa, fun), (newuoa, fun)]:
            data['calls'] = 0
            if solver is bobyqa:
                res = solver(f, self.x0, xl=xl, xu=xu, options=options)
            else:
                res = solver(f, self.x0, options=options)
            assert data['calls'] == res.nfev
            np.testing.assert_allclose(res.x, [3.0, 2.0], atol=2e-2)
        for solver, f in [(lincoa, fun), (cobyla, fun_con)]:
            data['calls'] = 0
            res = solver(f, self.x0, xl=xl, xu=xu, aineq=self.aineq, bineq=self.bineq, options=options)
            assert data['calls'] == res.nfev
            assert np.all(np.isfinite(res.fun_history))
            np.testing.assert_allclose(res.x, [3.0, 2.0], atol=2e-2)

    def test_scipy_constraints(self):
        bounds = Bounds([-6.0, -6.0], [6.0, 6.0])
        constraints = LinearConstraint(self.aineq, -np.inf, self.bineq)
        res = minimize(self.fun, self.x0, bounds=bounds, constraints=constraints)
        res_alt = minimize(self.fun, self.x0, xl=bounds.lb, xu=bounds.ub, aineq=self.aineq, bineq=self.bineq)
        self.assert_same(res, res_alt)

        # Two-sided constraints are split, and equal sides give equalities.
        constraints = [LinearConstraint([[1.0, 1.0]], 1.0, 1.0), LinearConstraint([[1.0, -1.0]], -2.0, 2.0)]
        res = minimize(self.fun, self.x0, constraints=constraints)
        res_alt = minimize(self.fun, self.x0, aineq=[[1.0, -1.0], [-1.0, 1.0]], bineq=[2.0, 2.0], aeq=[[1.0, 1.0]], beq=[1.0])
        self.assert_same(res, res_alt)
        assert res.cstrv <= 1e-6

    def test_idempotent(self):
        for solver in [newuoa, lincoa]:
            res = solver(self.fun, self.x0)
            res_alt = solver(self.fun, self.x0)
            self.assert_same(res, res_alt)
        res = cobyla(self.fun_con, self.x0)
        res_alt = cobyla(self.fun_con, self.x0)
        self.assert_same(res, res_alt)
        np.testing.assert_array_equal(res.nlconstr, res_alt.nlconstr)

    def test_invalid_input(self):
        calls = []

        def fun(x):
            calls.append(x)
            return self.fun(x)

        for kwargs in [
            dict(x0=[]),
            dict(x0=self.x0, xl=[0.0, 0.0, 0.0]),
            dict(x0=[0.0, 0.0, 0.0], xl=[0.0]),
            dict(x0=[0.0, 0.0, 0.0], xl=[-1.0], xu=[1.0, 1.0, 1.0]),
            dict(x0=self.x0, aineq=[[1.0, 1.0]], bineq=[1.0, 2.0]),
            dict(x0=self.x0, aineq=[[1.0, 1.0, 1.0]], bineq=[1.0]),
            dict(x0=[np.nan, 0.0]),
            dict(x0=self.x0, method='simplex'),
            dict(x0=self.x0, bounds=[[0.0, 1.0], [0.0, 1.0]]),
        ]:
            res = minimize(fun, **kwargs)
            assert res.status == ExitStatus.INVALID_INPUT.value, kwargs
            assert not res.success
            assert res.nfev == 0
            assert np.isnan(res.fun)
        assert len(calls) == 0

        # The objective function must be callable.
        res = minimize(None, self.x0)
        assert res.status == ExitStatus.INVALID_INPUT.value

    def test_inconsistent_constraints(self):
        # The nonlinear constraint function returns an unexpected number of
        # values.
        res = cobyla(self.fun_con, self.x0, options={'m_nlcon': 2})
        assert res.status == ExitStatus.INVALID_INPUT.value
        assert not res.success

    def test_infeasible(self):
        res = minimize(self.fun, self.x0, xl=[1.0, 1.0], xu=[0.0, 2.0])
        assert res.status == ExitStatus.INFEASIBLE_ERROR.value
        assert not res.success
        assert res.nfev == 0
        res = minimize(self.fun, self.x0, aineq=[[0.0, 0.0]], bineq=[-1.0])
        assert res.status == ExitStatus.INFEASIBLE_ERROR.value

        # The linear constraints x0 <= 0 and x0 >= 1 are incompatible.
        calls = []

        def fun(x):
            calls.append(x)
            return self.fun(x)

        res = lincoa(fun, [0.0, 0.0, 0.0], aineq=[[1.0, 0.0, 0.0], [-1.0, 0.0, 0.0]], bineq=[0.0, -1.0])
        assert res.status == ExitStatus.INFEASIBLE_ERROR.value
        assert not res.success
        assert res.nfev == 0
        assert len(calls) == 0
        res = cobyla(self.fun_con, self.x0, xl=[0.0, 0.0], xu=[1.0, 1.0], aeq=[[1.0, 1.0]], beq=[3.0])
        assert res.status == ExitStatus.INFEASIBLE_ERROR.value
        assert res.nfev == 0

    def test_fixed(self):
        res = minimize(self.fun, self.x0, xl=[1.0, 0.5], xu=[1.0, 0.5])
        assert res.status == ExitStatus.FIXED_SUCCESS.value
        assert res.success, res.message
        assert res.nfev == 1
        np.testing.assert_array_equal(res.x, [1.0, 0.5])
        assert res.fun == self.fun([1.0, 0.5])

        # The fixed variables keep their values.
        res = minimize(self.fun, [0.0, 0.0, 0.0], xl=[-6.0, 1.5, -6.0], xu=[6.0, 1.5, 6.0], options={'store_history': True})
        assert res.status == ExitStatus.SMALL_TR_RADIUS.value
        assert res.x[1] == 1.5
        np.testing.assert_array_equal(res.x_history[:, 1], 1.5)
        np.testing.assert_allclose(res.x[0], 2.99, atol=1e-3)

    def test_maxfun(self):
        res = minimize(self.fun, self.x0, options={'maxfun': 10})
        assert res.status == ExitStatus.MAXFUN_REACHED.value
        assert not res.success
        assert res.nfev == 10
        # The number of interpolation points is reduced to fit in the budget.
        with pytest.warns(RuntimeWarning, match='reduced to 4'):
            res = newuoa(self.fun, self.x0, options={'maxfun': 5})
        assert res.status == ExitStatus.MAXFUN_REACHED.value
        assert res.nfev == 5

        # The budget is increased only if no number of points fits.
        with pytest.warns(RuntimeWarning, match='increased to 6'):
            res = newuoa(self.fun, [0.0, 0.0, 0.0], options={'maxfun': 4})
        assert res.nfev <= 6
        with pytest.warns(RuntimeWarning, match='increased to 5'):
            res = minimize(self.fun, self.x0, options={'maxfun': 2})
        assert res.nfev <= 5
        with pytest.warns(RuntimeWarning, match='increased to 7'):
            res = uobyqa(self.fun, self.x0, options={'maxfun': 4})
        assert res.nfev <= 7

    def test_maxiter(self):
        res = minimize(self.fun, self.x0, options={'maxiter': 2})
        assert res.status == ExitStatus.MAXTR_REACHED.value
        assert res.nit == 2

    def test_target(self):
        res = minimize(self.fun, self.x0, options={'ftarget': 0.0})
        assert res.status == ExitStatus.FTARGET_ACHIEVED.value
        assert res.success, res.message
        assert res.fun <= 0.0

    def test_callback(self):
        points = []

        def callback(x):
            points.append(x)
            if len(points) >= 5:
                raise StopIteration

        res = minimize(self.fun, self.x0, callback=callback)
        assert res.status == ExitStatus.CALLBACK_SUCCESS.value
        assert res.success, res.message
        assert res.nfev == 5

        def callback(intermediate_result):
            assert intermediate_result.cstrv == 0.0
            points.append(intermediate_result.x)

        points.clear()
        res = minimize(self.fun, self.x0, callback=callback)
        assert len(points) == res.nfev

    def test_nan(self):
        # The undefined values are replaced by a large barrier.
        def fun(x):
            if x[0] > 3.5:
                return np.nan
            return self.fun(x)

        res = minimize(fun, self.x0, options={'rhobeg': 2.0})
        assert res.status != ExitStatus.INVALID_INPUT.value, res.message
        assert np.isfinite(res.fun)
        assert res.x[0] <= 3.5
        assert res.fun < self.fun(self.x0)

    def test_history(self):
        res = minimize(self.fun, self.x0, options={'store_history': True, 'history_size': 5})
        assert res.fun_history.shape == (5,)
        assert res.cstrv_history.shape == (5,)
        assert res.x_history.shape == (5, 2)
        res = minimize(self.fun, self.x0)
        assert 'fun_history' not in res

    def test_options(self):
        with pytest.warns(RuntimeWarning, match='Unknown option'):
            minimize(self.fun, self.x0, options={'unknown': 1})
        with pytest.warns(RuntimeWarning, match='rhobeg'):
            res = minimize(self.fun, self.x0, options={'rhobeg': -1.0})
        assert res.success, res.message
        with pytest.warns(RuntimeWarning, match='npt'):
            minimize(self.fun, self.x0, options={'npt': 100})
        with pytest.warns(RuntimeWarning):
            minimize(self.fun, self.x0, options={'rhobeg': 0.1, 'rhoend': 1.0})

    @pytest.mark.parametrize('iprint', [0, 1, 2, 3])
    def test_verbose(self, capsys, iprint):
        res = minimize(self.fun, self.x0, options={'iprint': iprint, 'rhoend': 1e-2})
        captured = capsys.readouterr()
        if iprint == 0:
            assert captured.out == ''
        else:
            assert res.message in captured.out
        assert ('New trust-region radius' in captured.out) == (iprint >= 2)
        assert ('fun(' in captured.out) == (iprint >= 3)
