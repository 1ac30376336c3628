import functools
import logging
from datetime import datetime

from scipy.optimize import OptimizeResult

from .main import minimize
from .settings import ExitStatus
from .solvers import bobyqa, cobyla, lincoa, newuoa, uobyqa
from .utils import show_versions

_log = logging.getLogger(__name__)


@functools.lru_cache()
def _ensure_handler():
    """
    Attach a file handler to the package logger.

    The handler is created and attached to the package logger only the first
    time this function is called (the first call is memoized).
    """
    handler = logging.FileHandler(f"{__name__}_{datetime.now().isoformat()}.log")
    handler.setFormatter(logging.Formatter("%(asctime)s [%(levelname)-8s] %(name)s: %(message)s"))
    _log.addHandler(handler)
    return handler


def set_loglevel(level):
    """
    Set the package logger and its file handler levels to `level`, creating
    the handler if it does not exist yet.

    The possible values for `level` are given below.

    ==========  ===============
     Level       Numeric value
    ==========  ===============
     CRITICAL    50
     ERROR       40
     WARNING     30
     INFO        20
     DEBUG       10
     NOTSET      0
    ==========  ===============

    Parameters
    ----------
    level : {int, str}
        Level of the package logger and its file handler. For example, to set
        the DEBUG level, use ``logging.DEBUG``, ``"DEBUG"``, or ``10``.
    """
    _log.setLevel(level)
    _ensure_handler().setLevel(level)


# PEP0440 compatible formatted version, see:
# https://www.python.org/dev/peps/pep-0440/
#
# Dev branch marker is: "X.Y.dev" or "X.Y.devN" where N is an integer.
#
__version__ = "0.1.dev0"

__all__ = [
    "ExitStatus",
    "OptimizeResult",
    "bobyqa",
    "cobyla",
    "lincoa",
    "minimize",
    "newuoa",
    "set_loglevel",
    "show_versions",
    "uobyqa",
]
