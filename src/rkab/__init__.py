"""Adaptive step-size embedded Runge-Kutta integration.

Typical use::

    import numpy as np
    from rkab import rkab, RK45

    sol = rkab(RK45, np.array([0.0, 1.0]), 1000, 1e-6, 0.0, 10.0,
               lambda t, y: np.array([y[1], -y[0]]))
"""

from .algorithms import (AdaptiveRK, ButcherTableau, Euler, RHSSystem,
                         Solution, StepControlConfig, Tolerance,
                         create_rhs_system)
from .algorithms.integrators.coefficients import RK12, RK23, RK45
from .algorithms.integrators.control import acceptability
from .algorithms.integrators.euler import euler
from .algorithms.integrators.exports import ENTRY_POINTS, get_entry_point
from .algorithms.integrators.rk import rkab
from .algorithms.utils.exceptions import ConvergenceError, RkabError

__version__ = "0.1.0"

__all__ = [
    "rkab",
    "euler",
    "acceptability",
    "AdaptiveRK",
    "Euler",
    "ButcherTableau",
    "RK12",
    "RK23",
    "RK45",
    "Solution",
    "Tolerance",
    "StepControlConfig",
    "RHSSystem",
    "create_rhs_system",
    "ENTRY_POINTS",
    "get_entry_point",
    "RkabError",
    "ConvergenceError",
]
