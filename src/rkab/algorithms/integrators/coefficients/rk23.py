"""Bogacki-Shampine 3(2) embedded pair.

The third-order formula uses the first three stages (its weights coincide
with the last row of the stage matrix). The fourth stage only feeds the
second-order companion, which is the ``bb`` formula here and therefore the
one that advances the solution.

References
----------
Bogacki, P.; Shampine, L. F. (1989). "A 3(2) pair of Runge-Kutta formulas".
"""

from fractions import Fraction as F

from rkab.algorithms.integrators.tableau import _ButcherTableau

# Packed by source stage: (a21, a31, a41), (a32, a42), (a43)
A = (
    F(1, 2), F(0), F(2, 9),
    F(3, 4), F(1, 3),
    F(4, 9),
)

C = (F(1, 2), F(3, 4), F(1))

BA = (F(2, 9), F(1, 3), F(4, 9))

BB = (F(7, 24), F(1, 4), F(1, 3), F(1, 8))

RK23 = _ButcherTableau(
    name="RK23",
    astages=3,
    bstages=4,
    a=A,
    c=C,
    ba=BA,
    bb=BB,
    order=2,
)
