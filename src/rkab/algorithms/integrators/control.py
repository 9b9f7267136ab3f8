"""Step-size control primitives of the embedded Runge-Kutta driver.

The controller works with the *acceptability* of a step, the ratio of the
permitted to the estimated relative local error of its worst component.
Values above one mean the step satisfies the tolerance; the step size is
then scaled by a power of that ratio, bounded by the limits in
:class:`~rkab.algorithms.integrators.configs._StepControlConfig`.
"""

from typing import Union

import numpy as np

from rkab.algorithms.integrators.configs import _StepControlConfig
from rkab.algorithms.integrators.types import _Tolerance


def acceptability(
    y_low: np.ndarray,
    y_high: np.ndarray,
    tol: Union[_Tolerance, float, np.ndarray],
) -> np.floating:
    """Return ``min_i |tol_i * y_high_i / (y_low_i - y_high_i)|``.

    Parameters
    ----------
    y_low, y_high : numpy.ndarray
        Estimates of the two embedded formulas, shape ``(dim,)``.
    tol : _Tolerance, float or array_like
        Uniform or per-component tolerance.

    Returns
    -------
    numpy.floating
        Acceptability in the element type of *y_high*. Components where both
        estimates agree exactly contribute ``+inf``, so they never bind; a
        non-finite estimate makes the result NaN, which is never acceptable.
    """
    y_high = np.asarray(y_high)
    y_low = np.asarray(y_low, dtype=y_high.dtype)
    if y_low.shape != y_high.shape or y_high.ndim != 1:
        raise ValueError(
            f"Estimates must be vectors of equal length, got {y_low.shape} and {y_high.shape}"
        )
    tol = _Tolerance.coerce(tol, dim=y_high.size, dtype=y_high.dtype)

    diff = y_low - y_high
    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        ratio = np.abs(tol.values * y_high / diff)
    ratio[diff == 0] = np.inf
    return ratio.min(initial=np.inf)


def minimum_step(t, hmin_ulps=16):
    """Smallest step magnitude that still moves *t* in its own precision."""
    t = np.asarray(t)
    return t.dtype.type(hmin_ulps * np.spacing(np.abs(t)))


def growth_factor(acc, bstages: int, control: _StepControlConfig) -> float:
    """Factor applied to the step after it has been accepted.

    ``safety * acc ** (1 / bstages)`` capped at ``max_growth``. A NaN
    acceptability (a step forced through at the minimum size) keeps the
    step unchanged.
    """
    if np.isnan(acc):
        return 1.0
    factor = control.safety * float(acc) ** (1.0 / bstages)
    return min(control.max_growth, factor)


def shrink_factor(acc, bstages: int, control: _StepControlConfig, first: bool) -> float:
    """Factor applied to the step after a rejection.

    On the first rejection within a step the error model is trusted:
    ``safety * acc ** (1 / bstages)`` floored at ``min_shrink``. Any further
    rejection of the same step uses the flat ``pessimistic_shrink``.
    """
    if not first:
        return control.pessimistic_shrink
    factor = control.safety * float(acc) ** (1.0 / bstages)
    if not factor > control.min_shrink:
        return control.min_shrink
    return factor
