"""Dynamical-system wrappers around user supplied derivative callbacks."""

from .base import _DynamicalSystem, _DynamicalSystemProtocol
from .rhs import RHSSystem, create_rhs_system

__all__ = [
    "_DynamicalSystem",
    "_DynamicalSystemProtocol",
    "RHSSystem",
    "create_rhs_system",
]
