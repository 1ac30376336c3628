from .geometry import cauchy_geometry, spider_geometry
from .optim import (
    bound_constrained_tangential_step,
    cauchy_step,
    linearly_constrained_tangential_step,
    normal_step,
)

__all__ = [
    'bound_constrained_tangential_step',
    'cauchy_geometry',
    'cauchy_step',
    'linearly_constrained_tangential_step',
    'normal_step',
    'spider_geometry',
]
