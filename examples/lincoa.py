#!/usr/bin/env python3
r"""
Solve the linearly constrained problem

.. math::

    \min_{x \in \mathbb{R}^2} 5 (x_1 - 3)^2 + 7 (x_2 - 2)^2 + 0.1 (x_1 + x_2) - 10

subject to :math:`x_1 \le 4`, :math:`x_2 \le 3`, :math:`x_1 + x_2 \le 10`, and
:math:`-6 \le x \le 6`.
"""
import sys

from trdfo import lincoa


def fun(x):
    return 5.0 * (x[0] - 3.0) ** 2.0 + 7.0 * (x[1] - 2.0) ** 2.0 + 0.1 * (x[0] + x[1]) - 10.0


if __name__ == "__main__":
    aineq = [[1.0, 0.0], [0.0, 1.0], [1.0, 1.0]]
    bineq = [4.0, 3.0, 10.0]
    options = {"iprint": 1, "rhoend": 1e-3, "maxfun": 400}
    res = lincoa(fun, [0.0, 0.0], xl=[-6.0, -6.0], xu=[6.0, 6.0], aineq=aineq, bineq=bineq, options=options)
    print(f"x* = {res.x}, f* = {res.fun}, cstrv = {res.cstrv}, status = {res.status}, nfev = {res.nfev}")
    sys.exit(int(abs(res.x[0] - 3.0) > 2e-2 or abs(res.x[1] - 2.0) > 2e-2))
