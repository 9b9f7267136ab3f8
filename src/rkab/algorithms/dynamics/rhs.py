import inspect
from typing import Callable

import numba
import numpy as np
from numba.core.registry import CPUDispatcher

from rkab.algorithms.dynamics.base import _DynamicalSystem
from rkab.algorithms.utils.config import FASTMATH


class RHSSystem(_DynamicalSystem):
    def __init__(self,
                 rhs_func: Callable[[float, np.ndarray], np.ndarray],
                 dim: int,
                 name: str = "Generic RHS",
                 jit: bool = False):
        """Wrap an arbitrary ``f(t, y)`` callable into a _DynamicalSystem instance.

        With *jit* the callable is compiled in nopython mode (unless it is a
        Numba dispatcher already). Compiled callbacks only accept the element
        types Numba supports, i.e. ``float32`` and ``float64`` states.
        """

        super().__init__(dim)

        try:
            sig = inspect.signature(getattr(rhs_func, "py_func", rhs_func))
        except (TypeError, ValueError):
            sig = None
        if sig is not None and len(sig.parameters) < 2:
            raise ValueError("rhs_func must have signature (t, y)")

        if jit and not isinstance(rhs_func, CPUDispatcher):
            self._rhs = numba.njit(cache=False, fastmath=FASTMATH)(rhs_func)
        else:
            self._rhs = rhs_func

        self.name = name
        self.jit = isinstance(self._rhs, CPUDispatcher)
    
    @property
    def rhs(self) -> Callable[[float, np.ndarray], np.ndarray]:
        return self._rhs
    
    def __repr__(self) -> str:
        return f"RHSSystem(name='{self.name}', dim={self.dim}, jit={self.jit})"


def create_rhs_system(rhs_func: Callable[[float, np.ndarray], np.ndarray],
                      dim: int,
                      name: str = "Generic RHS",
                      jit: bool = False):
    return RHSSystem(rhs_func, dim, name, jit=jit)
