""" Public API for the :mod:`~rkab.algorithms` package.
"""

from .dynamics.rhs import RHSSystem, create_rhs_system
from .integrators.configs import _StepControlConfig as StepControlConfig
from .integrators.euler import _Euler as Euler
from .integrators.rk import AdaptiveRK
from .integrators.tableau import _ButcherTableau as ButcherTableau
from .integrators.types import _Solution as Solution
from .integrators.types import _Tolerance as Tolerance

__all__ = [
    "RHSSystem",
    "create_rhs_system",
    "StepControlConfig",
    "Euler",
    "AdaptiveRK",
    "ButcherTableau",
    "Solution",
    "Tolerance",
]
