"""
Types for the integrators module.

This module provides the tagged tolerance value consumed by the
acceptability computation, the growable trajectory buffer filled by the
drivers, and the immutable result handed back to the caller.
"""

from dataclasses import dataclass
from enum import Enum
from numbers import Real
from typing import Optional, Sequence, Union

import numpy as np


class _ToleranceKind(Enum):
    """Shape of a tolerance: one value for every component, or one per component."""
    SCALAR = "scalar"
    VECTOR = "vector"


@dataclass(frozen=True, eq=False)
class _Tolerance:
    """Closed two-variant tolerance representation.

    Parameters
    ----------
    kind : :class:`~rkab.algorithms.integrators.types._ToleranceKind`
        Whether *values* is a single uniform tolerance or a per-component
        vector.
    values : numpy.ndarray
        0-d array for :attr:`_ToleranceKind.SCALAR`, shape ``(dim,)`` for
        :attr:`_ToleranceKind.VECTOR`.

    Notes
    -----
    Both variants broadcast against a state vector, so the acceptability
    computation runs the same arithmetic for either shape. Construct through
    :meth:`scalar`, :meth:`per_component` or :meth:`coerce`, which validate
    the values.
    """

    kind: _ToleranceKind
    values: np.ndarray

    @classmethod
    def scalar(cls, value: Real, dtype=np.float64) -> "_Tolerance":
        arr = np.asarray(value, dtype=dtype)
        if arr.ndim != 0:
            raise ValueError(f"Scalar tolerance must be a single value, got shape {arr.shape}")
        cls._check_values(arr)
        return cls(_ToleranceKind.SCALAR, arr)

    @classmethod
    def per_component(cls, values: Sequence[Real], dtype=np.float64) -> "_Tolerance":
        arr = np.array(values, dtype=dtype)
        if arr.ndim != 1 or arr.size == 0:
            raise ValueError(
                f"Per-component tolerance must be a non-empty vector, got shape {arr.shape}"
            )
        cls._check_values(arr)
        return cls(_ToleranceKind.VECTOR, arr)

    @classmethod
    def coerce(
        cls,
        tol: Union["_Tolerance", Real, Sequence[Real], np.ndarray],
        dim: Optional[int] = None,
        dtype=None,
    ) -> "_Tolerance":
        """Build a tolerance from a scalar, a sequence or an existing tolerance.

        Parameters
        ----------
        tol : _Tolerance, float or array_like
            Uniform or per-component tolerance. 0-d input yields a scalar tolerance,
            1-d input a per-component one.
        dim : int or None, optional
            When given, a per-component tolerance must have exactly this
            length.
        dtype : numpy dtype or None, optional
            Element type of the result. Defaults to the dtype of an existing
            tolerance, else ``float64``.

        Raises
        ------
        ValueError
            If the tolerance is negative, non-finite, has more than one
            dimension or its length differs from *dim*.
        """
        if isinstance(tol, _Tolerance):
            result = tol if dtype is None else tol.astype(dtype)
        else:
            dtype = np.float64 if dtype is None else dtype
            if np.ndim(tol) == 0:
                result = cls.scalar(tol, dtype=dtype)
            else:
                result = cls.per_component(tol, dtype=dtype)

        if dim is not None and result.kind is _ToleranceKind.VECTOR and result.values.size != dim:
            raise ValueError(
                f"Per-component tolerance has {result.values.size} entries, expected {dim}"
            )
        return result

    @staticmethod
    def _check_values(arr: np.ndarray) -> None:
        if not np.all(np.isfinite(arr)):
            raise ValueError("Tolerance must be finite")
        if np.any(arr < 0):
            raise ValueError("Tolerance must be non-negative")

    @property
    def is_scalar(self) -> bool:
        return self.kind is _ToleranceKind.SCALAR

    def astype(self, dtype) -> "_Tolerance":
        if self.values.dtype == np.dtype(dtype):
            return self
        return _Tolerance(self.kind, self.values.astype(dtype))

    def expand(self, dim: int) -> np.ndarray:
        """Return the tolerance as a length-*dim* vector (read-only view for scalars)."""
        return np.broadcast_to(self.values, (dim,))

    def __repr__(self) -> str:
        return f"_Tolerance(kind={self.kind.value}, values={self.values!r})"


class _Trajectory:
    """Growable buffer of accepted ``(t, state)`` samples.

    Samples are copied on :meth:`append`, so callers may keep reusing their
    scratch arrays. The buffer is frozen into a
    :class:`~rkab.algorithms.integrators.types._Solution` once integration
    ends.
    """

    def __init__(self, dim: int, dtype):
        self._dim = dim
        self._dtype = np.dtype(dtype)
        self._times = []
        self._states = []

    def append(self, t, y: np.ndarray) -> None:
        self._times.append(t)
        self._states.append(np.array(y, dtype=self._dtype, copy=True))

    @property
    def last_time(self):
        return self._times[-1] if self._times else None

    def __len__(self) -> int:
        return len(self._times)

    def to_solution(self, num_failures: int, t_start=None, t_end=None) -> "_Solution":
        n = len(self._times)
        times = np.array(self._times, dtype=self._dtype).reshape(n)
        if n:
            states = np.stack(self._states)
        else:
            states = np.empty((0, self._dim), dtype=self._dtype)
        return _Solution(
            times=times,
            states=states,
            num_failures=num_failures,
            t_start=t_start,
            t_end=t_end,
        )


@dataclass
class _Solution:
    """
    Container for integration results.

    Attributes
    ----------
    times : numpy.ndarray
        Accepted parameter values, shape (n_steps,). The initial point is not
        included.
    states : numpy.ndarray
        State after each accepted step, shape (n_steps, n_dim).
    num_failures : int
        Number of steps that needed at least one retry. Diagnostic only.
    t_start, t_end : float or None
        Requested integration interval, used by :attr:`completed`.
    """
    times: np.ndarray
    states: np.ndarray
    num_failures: int = 0
    t_start: Optional[float] = None
    t_end: Optional[float] = None

    def __post_init__(self):
        if len(self.times) != len(self.states):
            raise ValueError(
                f"Times and states must have same length: "
                f"{len(self.times)} != {len(self.states)}"
            )

    @property
    def num_steps(self) -> int:
        """Number of accepted steps."""
        return len(self.times)

    @property
    def dim(self) -> int:
        return self.states.shape[1]

    @property
    def completed(self) -> bool:
        """Whether the trajectory reached ``t_end`` (False on step-budget exhaustion)."""
        if self.t_end is None:
            raise ValueError("Solution does not record the requested end of the interval")
        if self.num_steps == 0:
            return bool(self.t_start == self.t_end)
        return bool(self.times[-1] == self.t_end)
