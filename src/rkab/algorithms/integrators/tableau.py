"""Provide the packed Butcher tableau consumed by the embedded RK driver.

An embedded pair shares its stage derivatives between two formulas: the
``ba`` weights combine the first ``astages`` stages, the ``bb`` weights all
``bstages`` of them. Only the strictly lower triangle of the stage matrix is
stored, grouped by source stage, and the always-zero first node is dropped.

Coefficients are kept as exact rationals so that a single tableau can be cast
to any numpy floating type without inheriting the rounding of another one.

References
----------
Butcher, J. C. (2008). "Numerical Methods for Ordinary Differential
Equations".
"""

import numbers
from dataclasses import dataclass
from fractions import Fraction
from functools import lru_cache
from typing import NamedTuple, Optional, Sequence, Tuple

import numpy as np


def _to_fraction(value) -> Fraction:
    if isinstance(value, (numbers.Rational, float, str)):
        return Fraction(value)
    if isinstance(value, np.floating):
        return Fraction(*value.as_integer_ratio())
    raise TypeError(f"Tableau coefficient {value!r} is not a real number")


def _exact(values: Sequence) -> Tuple[Fraction, ...]:
    return tuple(_to_fraction(v) for v in values)


def _cast_values(values: Tuple[Fraction, ...], dtype: np.dtype) -> np.ndarray:
    ftype = dtype.type
    return np.array(
        [ftype(v.numerator) / ftype(v.denominator) for v in values], dtype=dtype
    ).reshape(len(values))


class _TableauArrays(NamedTuple):
    """Dense, read-only views of a tableau in one element type.

    Attributes
    ----------
    A : numpy.ndarray of shape (bstages, bstages)
        Strictly lower triangular stage matrix.
    c : numpy.ndarray of shape (bstages,)
        Stage nodes including the leading zero.
    ba : numpy.ndarray of shape (astages,)
        Weights of the formula using the first ``astages`` stages.
    bb : numpy.ndarray of shape (bstages,)
        Weights of the formula using every stage.
    """
    A: np.ndarray
    c: np.ndarray
    ba: np.ndarray
    bb: np.ndarray


@dataclass(frozen=True)
class _ButcherTableau:
    """Immutable embedded Runge-Kutta tableau in packed form.

    Parameters
    ----------
    name : str
        Human-readable identifier of the method.
    astages, bstages : int
        Number of stages used by the ``ba`` and ``bb`` formulas.
        ``1 <= astages < bstages`` is required.
    a : sequence of real
        Strictly lower triangular stage coefficients grouped by source stage:
        group ``k`` (0-based) lists ``a[k+1][k], ..., a[bstages-1][k]``, i.e.
        ``bstages - 1 - k`` entries.
    c : sequence of real
        Nodes of stages 2 through ``bstages`` (the first node is zero).
    ba : sequence of real
        Weights of the ``astages`` formula.
    bb : sequence of real
        Weights of the ``bstages`` formula, which advances the solution.
    order : int or None, optional
        Formal order of the propagated ``bb`` formula, informational only.

    Raises
    ------
    ValueError
        If the stage counts are inconsistent or any vector has the wrong
        length.
    """

    name: str
    astages: int
    bstages: int
    a: Tuple[Fraction, ...]
    c: Tuple[Fraction, ...]
    ba: Tuple[Fraction, ...]
    bb: Tuple[Fraction, ...]
    order: Optional[int] = None

    def __post_init__(self):
        object.__setattr__(self, "a", _exact(self.a))
        object.__setattr__(self, "c", _exact(self.c))
        object.__setattr__(self, "ba", _exact(self.ba))
        object.__setattr__(self, "bb", _exact(self.bb))

        if self.astages < 1:
            raise ValueError(f"astages must be at least 1, got {self.astages}")
        if not self.astages < self.bstages:
            raise ValueError(
                f"astages ({self.astages}) must be smaller than bstages ({self.bstages})"
            )
        expected_a = self.bstages * (self.bstages - 1) // 2
        if len(self.a) != expected_a:
            raise ValueError(f"'a' must have {expected_a} entries, got {len(self.a)}")
        if len(self.c) != self.bstages - 1:
            raise ValueError(f"'c' must have {self.bstages - 1} entries, got {len(self.c)}")
        if len(self.ba) != self.astages:
            raise ValueError(f"'ba' must have {self.astages} entries, got {len(self.ba)}")
        if len(self.bb) != self.bstages:
            raise ValueError(f"'bb' must have {self.bstages} entries, got {len(self.bb)}")

    @classmethod
    def from_dense(cls,
                   name: str,
                   A: Sequence[Sequence],
                   c: Sequence,
                   ba: Sequence,
                   bb: Sequence,
                   order: Optional[int] = None) -> "_ButcherTableau":
        """Pack a dense tableau.

        Parameters
        ----------
        name : str
            Identifier of the method.
        A : array_like of shape (s, s)
            Strictly lower triangular stage matrix.
        c : array_like of shape (s,)
            Stage nodes, with ``c[0] == 0``.
        ba : array_like
            Weights of the formula with fewer stages; trailing entries beyond
            its stage count must be omitted.
        bb : array_like of shape (s,)
            Weights of the formula using all ``s`` stages.
        order : int or None, optional
            Formal order of the ``bb`` formula.

        Raises
        ------
        ValueError
            If *A* is not square and strictly lower triangular, or
            ``c[0] != 0``.
        """
        rows = [list(row) for row in A]
        s = len(rows)
        if any(len(row) != s for row in rows):
            raise ValueError("Stage matrix must be square")
        for i, row in enumerate(rows):
            if any(_to_fraction(v) != 0 for v in row[i:]):
                raise ValueError("Stage matrix must be strictly lower triangular")
        if len(c) != s or _to_fraction(c[0]) != 0:
            raise ValueError("Nodes must have one entry per stage and start at zero")

        packed = [rows[i][k] for k in range(s - 1) for i in range(k + 1, s)]
        return cls(name=name, astages=len(ba), bstages=s, a=packed,
                   c=list(c)[1:], ba=ba, bb=bb, order=order)

    def column(self, k: int) -> Tuple[Fraction, ...]:
        """Return the packed group of source stage *k* (coefficients feeding later stages)."""
        if not 0 <= k < self.bstages - 1:
            raise IndexError(f"Source stage {k} out of range for {self.bstages} stages")
        start = k * (self.bstages - 1) - k * (k - 1) // 2
        return self.a[start:start + self.bstages - 1 - k]

    def matrix(self, dtype=np.float64) -> np.ndarray:
        """Dense strictly lower triangular stage matrix."""
        return self.cast(dtype).A.copy()

    def nodes(self, dtype=np.float64) -> np.ndarray:
        """Stage nodes including the leading zero."""
        return self.cast(dtype).c.copy()

    def cast(self, dtype=np.float64) -> _TableauArrays:
        """Return cached read-only arrays of this tableau in *dtype*."""
        return _cast_tableau(self, np.dtype(dtype))

    def __str__(self) -> str:
        return f"{self.name} ({self.astages}/{self.bstages} stages)"


@lru_cache(maxsize=None)
def _cast_tableau(tableau: _ButcherTableau, dtype: np.dtype) -> _TableauArrays:
    if not np.issubdtype(dtype, np.floating):
        raise ValueError(f"Tableau can only be cast to a floating type, got {dtype}")

    s = tableau.bstages
    A = np.zeros((s, s), dtype=dtype)
    for k in range(s - 1):
        A[k + 1:, k] = _cast_values(tableau.column(k), dtype)
    c = np.concatenate([np.zeros(1, dtype=dtype), _cast_values(tableau.c, dtype)])
    ba = _cast_values(tableau.ba, dtype)
    bb = _cast_values(tableau.bb, dtype)

    arrays = _TableauArrays(A=A, c=c, ba=ba, bb=bb)
    for arr in arrays:
        arr.flags.writeable = False
    return arrays
