"""Provide the embedded adaptive step-size Runge-Kutta integrators.

The heart of the module is :func:`~rkab.algorithms.integrators.rk.rkab`, a
single driver shared by every embedded pair. Each step evaluates the stages
of a packed :class:`~rkab.algorithms.integrators.tableau._ButcherTableau`,
forms the estimates of both embedded formulas, and accepts or rejects the
step from their acceptability. The driver is generic over the numpy floating
type of the state (``float32``, ``float64``, ``longdouble``) and over the
shape of the tolerance.

Thin :class:`~rkab.algorithms.integrators.base._Integrator` subclasses bind
the shipped tableaux, and :class:`~rkab.algorithms.integrators.rk.AdaptiveRK`
selects one by name.

References
----------
Hairer, E.; Norsett, S.; Wanner, G. (1993). "Solving Ordinary Differential
Equations I".
"""

from typing import Callable, Optional

import numpy as np

from rkab.algorithms.integrators.base import SystemLike, _Integrator
from rkab.algorithms.integrators.coefficients import RK12, RK23, RK45
from rkab.algorithms.integrators.configs import _StepControlConfig
from rkab.algorithms.integrators.control import (acceptability, growth_factor,
                                                 minimum_step, shrink_factor)
from rkab.algorithms.integrators.tableau import (_ButcherTableau,
                                                 _TableauArrays)
from rkab.algorithms.integrators.types import (_Solution, _Tolerance,
                                               _Trajectory)
from rkab.algorithms.utils.config import (INITIAL_STEP_CAP,
                                          INITIAL_STEP_FRACTION, MAX_STEPS,
                                          TOL)
from rkab.algorithms.utils.exceptions import ConvergenceError
from rkab.utils.log_config import logger

DerivativeFn = Callable[[float, np.ndarray], np.ndarray]


def _resolve_dtype(y0, dtype) -> np.dtype:
    if dtype is None:
        arr = np.asarray(y0)
        dtype = arr.dtype if np.issubdtype(arr.dtype, np.floating) else np.float64
    dtype = np.dtype(dtype)
    if not np.issubdtype(dtype, np.floating):
        raise ValueError(f"Element type must be a real floating type, got {dtype}")
    return dtype


class _StageWorkspace:
    """Scratch buffers owned by one integration call and reused by every attempt."""

    def __init__(self, bstages: int, dim: int, dtype: np.dtype):
        self.k = np.empty((bstages, dim), dtype=dtype)
        self.stage = np.empty((bstages, dim), dtype=dtype)
        self.y_low = np.empty(dim, dtype=dtype)
        self.y_high = np.empty(dim, dtype=dtype)


def _evaluate_stages(
    derivative: DerivativeFn,
    arrays: _TableauArrays,
    astages: int,
    t,
    h,
    y_prev: np.ndarray,
    ws: _StageWorkspace,
) -> None:
    """Run every stage of one attempt and accumulate both embedded estimates.

    As soon as stage ``j`` is known, ``h * k_j`` is pushed into the inputs of
    all later stages and into the two estimates, so stage ``j + 1`` is ready
    when the loop reaches it.
    """
    A, c, ba, bb = arrays
    dim = y_prev.size

    ws.stage[:] = y_prev
    ws.y_low[:] = y_prev
    ws.y_high[:] = y_prev

    for j in range(bb.size):
        kj = np.asarray(derivative(t + c[j] * h, ws.stage[j]))
        if kj.shape != (dim,):
            raise ValueError(
                f"Derivative returned shape {kj.shape}, expected ({dim},)"
            )
        ws.k[j] = kj
        hk = h * ws.k[j]
        ws.stage[j + 1:] += A[j + 1:, j, None] * hk
        ws.y_high += bb[j] * hk
        if j < astages:
            ws.y_low += ba[j] * hk


def rkab(
    tableau: _ButcherTableau,
    y0,
    max_steps: int,
    tol,
    t_start,
    t_end,
    derivative: DerivativeFn,
    *,
    dim: Optional[int] = None,
    control: Optional[_StepControlConfig] = None,
    dtype=None,
) -> _Solution:
    """Integrate ``y' = derivative(t, y)`` with an embedded Runge-Kutta pair.

    Parameters
    ----------
    tableau : :class:`~rkab.algorithms.integrators.tableau._ButcherTableau`
        Embedded pair. The ``bb`` formula advances the solution, the
        ``ba`` formula only serves the error estimate.
    y0 : array_like
        Initial state, shape ``(dim,)``.
    max_steps : int
        Maximum number of accepted steps. Zero returns an empty solution
        without evaluating the derivative.
    tol : float, array_like or :class:`~rkab.algorithms.integrators.types._Tolerance`
        Relative tolerance, uniform or per component.
    t_start, t_end : float
        Integration interval; ``t_end < t_start`` integrates backwards.
    derivative : callable
        ``f(t, y) -> dy/dt`` returning an array of shape ``(dim,)``.
    dim : int or None, optional
        State dimension; checked against ``len(y0)`` when given.
    control : :class:`~rkab.algorithms.integrators.configs._StepControlConfig` or None, optional
        Step-size controller limits. Defaults to the package configuration.
    dtype : numpy dtype or None, optional
        Floating element type. Defaults to the dtype of *y0* when it is
        floating, ``float64`` otherwise.

    Returns
    -------
    :class:`~rkab.algorithms.integrators.types._Solution`
        Accepted times and states (initial point excluded) and the number of
        steps that needed at least one retry. The last time equals *t_end*
        exactly unless the step budget ran out first.

    Raises
    ------
    ValueError
        If the inputs are inconsistent. Raised before any derivative
        evaluation.
    :class:`~rkab.algorithms.utils.exceptions.ConvergenceError`
        If a single step is rejected more than ``control.max_retries`` times.

    Notes
    -----
    Each step starts from a trial size no smaller than
    ``hmin = hmin_ulps * spacing(t)`` and never past *t_end*. A step is
    accepted when its acceptability exceeds one or its size is already
    ``hmin``; the step then grows by ``min(max_growth, safety * acc **
    (1 / bstages))``. The first rejection of a step shrinks it by
    ``max(min_shrink, safety * acc ** (1 / bstages))`` and counts one
    failure; further rejections of the same step halve it.
    """
    control = _StepControlConfig() if control is None else control
    dtype = _resolve_dtype(y0, dtype)
    ftype = dtype.type

    y = np.array(y0, dtype=dtype)
    if y.ndim != 1 or y.size == 0:
        raise ValueError(f"Initial state must be a non-empty vector, got shape {y.shape}")
    if dim is None:
        dim = y.size
    elif dim <= 0:
        raise ValueError(f"Dimension must be positive, got {dim}")
    elif dim != y.size:
        raise ValueError(f"Initial state dimension {y.size} != {dim}")
    if max_steps < 0:
        raise ValueError(f"max_steps must be non-negative, got {max_steps}")

    tol = _Tolerance.coerce(tol, dim=dim, dtype=dtype)
    t = ftype(t_start)
    t_end = ftype(t_end)
    if not (np.isfinite(t) and np.isfinite(t_end)):
        raise ValueError(f"Integration bounds must be finite, got ({t_start}, {t_end})")

    arrays = tableau.cast(dtype)
    astages, bstages = tableau.astages, tableau.bstages
    trajectory = _Trajectory(dim, dtype)
    num_failures = 0

    t_dir = 1 if t_end >= t else -1
    if control.initial_step is None:
        h = min(abs(t_end - t) * INITIAL_STEP_FRACTION, INITIAL_STEP_CAP)
    else:
        h = control.initial_step
    h = ftype(t_dir * h)

    logger.debug(
        f"{tableau.name}: integrating dim={dim} ({dtype.name}) from t={t} to t={t_end}, "
        f"max_steps={max_steps}, tol={tol.kind.value}"
    )

    ws = _StageWorkspace(bstages, dim, dtype)
    y_prev = y

    while len(trajectory) < max_steps and t_dir * (t_end - t) > 0:
        hmin = minimum_step(t, control.hmin_ulps)
        if abs(h) < hmin:
            h = ftype(t_dir * hmin)
        remaining = t_end - t
        last = abs(h) >= abs(remaining)
        if last:
            h = remaining

        retries = 0
        while True:
            _evaluate_stages(derivative, arrays, astages, t, h, y_prev, ws)
            acc = acceptability(ws.y_low, ws.y_high, tol)
            if acc > 1 or abs(h) <= hmin:
                break

            retries += 1
            if retries > control.max_retries:
                msg = (
                    f"{tableau.name}: step at t={t} rejected {retries} times, more than "
                    f"max_retries={control.max_retries} (last h={h}, acceptability={acc})"
                )
                logger.error(msg)
                raise ConvergenceError(msg, t=t, h=h, retries=retries)
            if retries == 1:
                num_failures += 1

            h = ftype(h * shrink_factor(acc, bstages, control, first=retries == 1))
            if abs(h) < hmin:
                h = ftype(t_dir * hmin)
            last = abs(h) >= abs(remaining)
            if last:
                h = remaining

        if not acc > 1:
            logger.debug(f"{tableau.name}: accepted minimum step h={h} at t={t} (acceptability={acc})")

        t = t_end if last else ftype(t + h)
        np.copyto(y_prev, ws.y_high)
        trajectory.append(t, y_prev)
        h = ftype(h * growth_factor(acc, bstages, control))

    solution = trajectory.to_solution(num_failures, t_start=ftype(t_start), t_end=t_end)

    if max_steps > 0 and not solution.completed:
        logger.warning(
            f"{tableau.name}: step budget of {max_steps} exhausted at t={t} before t_end={t_end}"
        )
    logger.debug(
        f"{tableau.name}: {solution.num_steps} accepted steps, {num_failures} failures"
    )
    return solution


class _AdaptiveStepRK(_Integrator):
    """Implement an embedded adaptive Runge-Kutta integrator.

    Parameters
    ----------
    name : str or None, optional
        Identifier passed to the :class:`~rkab.algorithms.integrators.base._Integrator`
        base class. Defaults to the tableau name.
    tableau : :class:`~rkab.algorithms.integrators.tableau._ButcherTableau` or None, optional
        Embedded pair. Subclasses provide it through ``_TABLEAU``.
    tol : float or array_like, default :data:`~rkab.algorithms.utils.config.TOL`
        Default tolerance of :meth:`integrate`.
    max_steps : int, default :data:`~rkab.algorithms.utils.config.MAX_STEPS`
        Default step budget of :meth:`integrate`.
    control : :class:`~rkab.algorithms.integrators.configs._StepControlConfig` or None, optional
        Step-size controller limits.
    dtype : numpy dtype or None, optional
        Element type forced on every integration. When *None* it follows the
        initial state.
    """

    _TABLEAU: Optional[_ButcherTableau] = None

    def __init__(self,
                 name: Optional[str] = None,
                 tableau: Optional[_ButcherTableau] = None,
                 tol=TOL,
                 max_steps: int = MAX_STEPS,
                 control: Optional[_StepControlConfig] = None,
                 dtype=None):
        tableau = self._TABLEAU if tableau is None else tableau
        if tableau is None:
            raise ValueError("An embedded Runge-Kutta integrator needs a tableau")
        super().__init__(tableau.name if name is None else name)
        self._tableau = tableau
        self._tol = _Tolerance.coerce(tol)
        self._max_steps = max_steps
        self._control = _StepControlConfig() if control is None else control
        self._dtype = dtype

    @property
    def order(self) -> Optional[int]:
        return self._tableau.order

    @property
    def tableau(self) -> _ButcherTableau:
        return self._tableau

    @property
    def control(self) -> _StepControlConfig:
        return self._control

    def integrate(
        self,
        system: SystemLike,
        y0: np.ndarray,
        t_vals: np.ndarray,
        *,
        tol=None,
        max_steps: Optional[int] = None,
        **kwargs,
    ) -> _Solution:
        """Integrate from ``t_vals[0]`` to ``t_vals[-1]`` with adaptive steps.

        Only the end points of *t_vals* are used; the returned times are the
        accepted steps, not *t_vals*.
        """
        y0 = np.asarray(y0)
        t_vals = np.asarray(t_vals)
        system = self.resolve_system(system, y0)
        self.validate_inputs(system, y0, t_vals)

        return rkab(
            self._tableau,
            y0,
            self._max_steps if max_steps is None else max_steps,
            self._tol if tol is None else tol,
            t_vals[0],
            t_vals[-1],
            system.rhs,
            dim=system.dim,
            control=self._control,
            dtype=self._dtype,
        )


class _RK12(_AdaptiveStepRK):
    """Heun-Euler 1(2) pair, two derivative evaluations per attempt."""
    _TABLEAU = RK12


class _RK23(_AdaptiveStepRK):
    """Bogacki-Shampine 3(2) pair, four derivative evaluations per attempt."""
    _TABLEAU = RK23


class _RK45(_AdaptiveStepRK):
    """Runge-Kutta-Fehlberg 4(5) pair, six derivative evaluations per attempt.

    The fifth-order result advances the solution.
    """
    _TABLEAU = RK45


class AdaptiveRK:
    """Implement a factory class for creating adaptive step-size Runge-Kutta integrators.

    Examples
    --------
    >>> rk45 = AdaptiveRK("rk45", tol=1e-8)
    >>> rk23 = AdaptiveRK(method="rk23")
    """
    _map = {"rk12": _RK12, "rk23": _RK23, "rk45": _RK45}

    def __new__(cls, method: str = "rk45", **opts):
        """Create an adaptive step-size Runge-Kutta integrator.

        Parameters
        ----------
        method : str, default "rk45"
            One of ``"rk12"``, ``"rk23"`` or ``"rk45"`` (case-insensitive).
        **opts
            Additional options passed to the integrator constructor.

        Returns
        -------
        :class:`~rkab.algorithms.integrators.rk._AdaptiveStepRK`
            An adaptive step-size Runge-Kutta integrator instance.

        Raises
        ------
        ValueError
            If the method is not supported.
        """
        key = str(method).lower()
        if key not in cls._map:
            raise ValueError(
                f"Adaptive RK method {method!r} not supported; choose from {sorted(cls._map)}"
            )
        return cls._map[key](**opts)
