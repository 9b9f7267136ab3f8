"""Embedded adaptive-step Runge-Kutta integrators and their building blocks."""

from .base import _Integrator
from .configs import _StepControlConfig
from .control import acceptability, growth_factor, minimum_step, shrink_factor
from .euler import _Euler, euler
from .exports import ENTRY_POINTS, get_entry_point
from .rk import (AdaptiveRK, _AdaptiveStepRK, _RK12, _RK23, _RK45, rkab)
from .tableau import _ButcherTableau
from .types import _Solution, _Tolerance, _ToleranceKind, _Trajectory

__all__ = [
    "_Integrator",
    "_StepControlConfig",
    "acceptability",
    "growth_factor",
    "minimum_step",
    "shrink_factor",
    "euler",
    "_Euler",
    "ENTRY_POINTS",
    "get_entry_point",
    "rkab",
    "AdaptiveRK",
    "_AdaptiveStepRK",
    "_RK12",
    "_RK23",
    "_RK45",
    "_ButcherTableau",
    "_Solution",
    "_Tolerance",
    "_ToleranceKind",
    "_Trajectory",
]
