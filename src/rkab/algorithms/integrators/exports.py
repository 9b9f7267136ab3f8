"""Named entry points for every shipped pair, element type and tolerance shape.

Each entry point binds one tableau, one numpy floating type and one
tolerance shape, and is called as::

    fn(u_init, dim, maxsteps, tol, t, t_end, get_f) -> _Solution

Names follow ``rk{ab}{_arrtol}{suffix}``: ``ab`` is ``12``, ``23`` or ``45``,
``_arrtol`` selects a per-component tolerance and the suffix selects the
element type (none for ``float64``, ``_f`` for ``float32``, ``_ld`` for
``longdouble``).
"""

from typing import Callable, Dict

import numpy as np

from rkab.algorithms.integrators.coefficients import RK12, RK23, RK45
from rkab.algorithms.integrators.rk import rkab
from rkab.algorithms.integrators.tableau import _ButcherTableau
from rkab.algorithms.integrators.types import _Solution, _Tolerance

EntryPoint = Callable[..., _Solution]

_TABLEAUX = {"12": RK12, "23": RK23, "45": RK45}

_ELEMENT_TYPES = {
    "": np.float64,
    "_f": np.float32,
    "_ld": np.longdouble,
}


def _make_entry_point(tableau: _ButcherTableau, dtype, per_component: bool) -> EntryPoint:
    dtype = np.dtype(dtype)

    def entry_point(u_init, dim: int, maxsteps: int, tol, t, t_end, get_f) -> _Solution:
        if per_component:
            if np.ndim(tol) != 1:
                raise ValueError(f"{entry_point.__name__} needs a per-component tolerance vector")
            tolerance = _Tolerance.per_component(tol, dtype=dtype)
        else:
            if np.ndim(tol) != 0:
                raise ValueError(f"{entry_point.__name__} needs a scalar tolerance")
            tolerance = _Tolerance.scalar(tol, dtype=dtype)
        return rkab(tableau, u_init, maxsteps, tolerance, t, t_end, get_f,
                    dim=dim, dtype=dtype)

    return entry_point


def _build_entry_points() -> Dict[str, EntryPoint]:
    entry_points = {}
    for ab, tableau in _TABLEAUX.items():
        for arrtol in ("", "_arrtol"):
            for suffix, dtype in _ELEMENT_TYPES.items():
                name = f"rk{ab}{arrtol}{suffix}"
                fn = _make_entry_point(tableau, dtype, per_component=bool(arrtol))
                fn.__name__ = fn.__qualname__ = name
                fn.__doc__ = (
                    f"{tableau.name} in {np.dtype(dtype).name} with a "
                    f"{'per-component' if arrtol else 'scalar'} tolerance."
                )
                entry_points[name] = fn
    return entry_points


ENTRY_POINTS: Dict[str, EntryPoint] = _build_entry_points()


def get_entry_point(name: str) -> EntryPoint:
    """Look up an entry point such as ``"rk45"`` or ``"rk23_arrtol_f"``.

    Raises
    ------
    KeyError
        If *name* is not an exported entry point.
    """
    try:
        return ENTRY_POINTS[name]
    except KeyError:
        raise KeyError(
            f"Unknown entry point {name!r}; available: {', '.join(sorted(ENTRY_POINTS))}"
        ) from None
