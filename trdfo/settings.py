import sys
from enum import Enum

import numpy as np


# Exit status.
class ExitStatus(Enum):
    """
    Exit statuses.
    """
    SMALL_TR_RADIUS = 0
    FTARGET_ACHIEVED = 1
    TRSUBP_FAILED = 2
    MAXFUN_REACHED = 3
    DAMAGING_ROUNDING = 7
    FIXED_SUCCESS = 13
    MAXTR_REACHED = 20
    CALLBACK_SUCCESS = 30
    NAN_INF_X = -1
    NAN_INF_MODEL = -3
    INFEASIBLE_ERROR = -4
    INVALID_INPUT = 100
    MEMORY_ALLOCATION_FAILS = 103

    @property
    def message(self):
        """
        Description of the exit status.

        Returns
        -------
        str
            Description of the exit status.
        """
        return _EXIT_MESSAGES[self]

    @property
    def success(self):
        """
        Whether the exit status denotes a successful termination.

        Returns
        -------
        bool
            Whether the exit status denotes a successful termination.
        """
        return self in {
            ExitStatus.SMALL_TR_RADIUS,
            ExitStatus.FTARGET_ACHIEVED,
            ExitStatus.FIXED_SUCCESS,
            ExitStatus.CALLBACK_SUCCESS,
        }


_EXIT_MESSAGES = {
    ExitStatus.SMALL_TR_RADIUS: 'The lower bound for the trust-region radius has been reached',
    ExitStatus.FTARGET_ACHIEVED: 'The target objective function value has been reached',
    ExitStatus.TRSUBP_FAILED: 'A trust-region step has failed to reduce the model',
    ExitStatus.MAXFUN_REACHED: 'The maximum number of function evaluations has been reached',
    ExitStatus.DAMAGING_ROUNDING: 'Rounding errors are becoming damaging',
    ExitStatus.FIXED_SUCCESS: 'All variables are fixed by the bound constraints',
    ExitStatus.MAXTR_REACHED: 'The maximum number of trust-region iterations has been reached',
    ExitStatus.CALLBACK_SUCCESS: 'The callback requested to stop the optimization procedure',
    ExitStatus.NAN_INF_X: 'NaN or infinite values occur in the variables',
    ExitStatus.NAN_INF_MODEL: 'NaN or infinite values occur in the models',
    ExitStatus.INFEASIBLE_ERROR: 'The constraints are infeasible',
    ExitStatus.INVALID_INPUT: 'The input is invalid',
    ExitStatus.MEMORY_ALLOCATION_FAILS: 'Memory allocation failed',
}


class Capability(Enum):
    """
    Kinds of constraints a solver is able to handle.
    """
    NONE = 'unconstrained'
    BOUNDS = 'bound-constrained'
    LINEAR = 'linearly constrained'
    NONLINEAR = 'nonlinearly constrained'


class Solver(str, Enum):
    """
    Solver names.
    """
    UOBYQA = 'uobyqa'
    NEWUOA = 'newuoa'
    BOBYQA = 'bobyqa'
    LINCOA = 'lincoa'
    COBYLA = 'cobyla'

    @property
    def capability(self):
        return _SOLVER_CAPABILITIES[self]

    def default_npt(self, n):
        """
        Default number of interpolation points.

        Parameters
        ----------
        n : int
            Number of variables.

        Returns
        -------
        int
            Default number of interpolation points.
        """
        if self is Solver.UOBYQA:
            return ((n + 1) * (n + 2)) // 2
        elif self is Solver.COBYLA:
            return n + 1
        return 2 * n + 1

    def npt_range(self, n):
        """
        Admissible numbers of interpolation points.

        Parameters
        ----------
        n : int
            Number of variables.

        Returns
        -------
        int
            Least admissible number of interpolation points.
        int
            Greatest admissible number of interpolation points.
        """
        if self is Solver.UOBYQA:
            return ((n + 1) * (n + 2)) // 2, ((n + 1) * (n + 2)) // 2
        elif self is Solver.COBYLA:
            return n + 1, n + 1
        return n + 2, ((n + 1) * (n + 2)) // 2


_SOLVER_CAPABILITIES = {
    Solver.UOBYQA: Capability.NONE,
    Solver.NEWUOA: Capability.NONE,
    Solver.BOBYQA: Capability.BOUNDS,
    Solver.LINCOA: Capability.LINEAR,
    Solver.COBYLA: Capability.NONLINEAR,
}


class Options(str, Enum):
    """
    Option names.
    """
    DATA = 'data'
    DEBUG = 'debug'
    ETA1 = 'eta1'
    ETA2 = 'eta2'
    FEASIBILITY_TOL = 'feasibility_tol'
    GAMMA1 = 'gamma1'
    GAMMA2 = 'gamma2'
    HISTORY_SIZE = 'history_size'
    M_NLCON = 'm_nlcon'
    MAX_EVAL = 'maxfun'
    MAX_ITER = 'maxiter'
    NPT = 'npt'
    RHOBEG = 'rhobeg'
    RHOEND = 'rhoend'
    STORE_HISTORY = 'store_history'
    TARGET = 'ftarget'
    VERBOSE = 'iprint'


class PrintLevel(int, Enum):
    """
    Levels of the console reporting.
    """
    SILENT = 0
    EXIT = 1
    RHO = 2
    FEVL = 3


# Default options.
DEFAULT_OPTIONS = {
    Options.DATA.value: None,
    Options.DEBUG.value: False,
    Options.ETA1.value: 0.1,
    Options.ETA2.value: 0.7,
    Options.FEASIBILITY_TOL.value: np.sqrt(np.finfo(float).eps),
    Options.GAMMA1.value: 0.5,
    Options.GAMMA2.value: 2.0,
    Options.HISTORY_SIZE.value: sys.maxsize,
    Options.M_NLCON.value: None,
    Options.MAX_EVAL.value: lambda n: 500 * n,
    Options.MAX_ITER.value: lambda maxfun: 10 * maxfun,
    Options.RHOBEG.value: 1.0,
    Options.RHOEND.value: 1e-6,
    Options.STORE_HISTORY.value: False,
    Options.TARGET.value: -np.inf,
    Options.VERBOSE.value: PrintLevel.SILENT.value,
}


# Printing options.
PRINT_OPTIONS = {
    'threshold': 6,
    'edgeitems': 2,
    'linewidth': sys.maxsize,
    'formatter': {'float_kind': lambda x: np.format_float_scientific(x, precision=3, unique=False, pad_left=2)}
}


# Constants.
BARRIER = 2.0 ** min(100, np.finfo(float).maxexp // 2, -np.finfo(float).minexp // 2)
