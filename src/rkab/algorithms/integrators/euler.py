"""Provide the explicit fixed-step Euler method.

Mainly a baseline against which the embedded pairs are compared: it spends a
single derivative evaluation per step and has no error control.
"""

from typing import Optional

import numpy as np

from rkab.algorithms.integrators.base import SystemLike, _Integrator
from rkab.algorithms.integrators.types import _Solution, _Trajectory
from rkab.utils.log_config import logger


def euler(y0, num_steps: int, h, t, derivative, *, dtype=None) -> _Solution:
    """Take *num_steps* explicit Euler steps of size *h* starting at ``(t, y0)``.

    Parameters
    ----------
    y0 : array_like
        Initial state, shape ``(dim,)``.
    num_steps : int
        Number of steps; the result has exactly this many rows.
    h : float
        Signed step size.
    t : float
        Initial parameter value.
    derivative : callable
        ``f(t, y) -> dy/dt``.
    dtype : numpy dtype or None, optional
        Floating element type, defaults to that of *y0* (``float64`` for
        integer input).

    Returns
    -------
    :class:`~rkab.algorithms.integrators.types._Solution`
        States after each step, initial point excluded, with zero failures.
    """
    if dtype is None:
        arr = np.asarray(y0)
        dtype = arr.dtype if np.issubdtype(arr.dtype, np.floating) else np.float64
    dtype = np.dtype(dtype)
    if not np.issubdtype(dtype, np.floating):
        raise ValueError(f"Element type must be a real floating type, got {dtype}")
    ftype = dtype.type

    y = np.array(y0, dtype=dtype)
    if y.ndim != 1 or y.size == 0:
        raise ValueError(f"Initial state must be a non-empty vector, got shape {y.shape}")
    if num_steps < 0:
        raise ValueError(f"num_steps must be non-negative, got {num_steps}")

    h = ftype(h)
    t0 = ftype(t)
    trajectory = _Trajectory(y.size, dtype)

    for i in range(num_steps):
        t_i = ftype(t0 + i * h)
        dy = np.asarray(derivative(t_i, y))
        if dy.shape != y.shape:
            raise ValueError(f"Derivative returned shape {dy.shape}, expected {y.shape}")
        y += h * dy.astype(dtype, copy=False)
        trajectory.append(ftype(t0 + (i + 1) * h), y)

    logger.debug(f"Euler: {num_steps} steps of h={h} from t={t0}")
    return trajectory.to_solution(0, t_start=t0, t_end=ftype(t0 + num_steps * h))


class _Euler(_Integrator):
    """Explicit Euler on a uniform grid of time nodes."""

    def __init__(self, name: str = "Euler", dtype=None):
        super().__init__(name)
        self._dtype = dtype

    @property
    def order(self) -> int:
        return 1

    def integrate(
        self,
        system: SystemLike,
        y0: np.ndarray,
        t_vals: np.ndarray,
        **kwargs,
    ) -> _Solution:
        y0 = np.asarray(y0)
        t_vals = np.asarray(t_vals)
        system = self.resolve_system(system, y0)
        self.validate_inputs(system, y0, t_vals)

        dt = np.diff(t_vals)
        h = dt[0]
        if not np.allclose(dt, h, rtol=1e-10, atol=0.0):
            raise ValueError("Euler needs uniformly spaced time values")

        return euler(y0, t_vals.size - 1, h, t_vals[0], system.rhs, dtype=self._dtype)
