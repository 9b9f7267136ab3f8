"""Heun-Euler 1(2) embedded pair.

The one-stage forward Euler formula is embedded in Heun's two-stage method;
Heun's second-order result advances the solution.
"""

from fractions import Fraction as F

from rkab.algorithms.integrators.tableau import _ButcherTableau

RK12 = _ButcherTableau(
    name="RK12",
    astages=1,
    bstages=2,
    a=(F(1),),
    c=(F(1),),
    ba=(F(1),),
    bb=(F(1, 2), F(1, 2)),
    order=2,
)
