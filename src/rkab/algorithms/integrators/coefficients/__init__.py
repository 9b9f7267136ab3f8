"""Butcher tableaux of the embedded pairs shipped with the package."""

from .rk12 import RK12
from .rk23 import RK23
from .rk45 import RK45

__all__ = ["RK12", "RK23", "RK45"]
