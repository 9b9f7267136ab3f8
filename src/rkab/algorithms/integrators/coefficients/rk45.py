"""Runge-Kutta-Fehlberg 4(5) embedded pair.

References
----------
Fehlberg, E. (1969). "Low-order classical Runge-Kutta formulas with step
size control and their application to some heat transfer problems".
"""

from fractions import Fraction as F

from rkab.algorithms.integrators.tableau import _ButcherTableau

A = (
    (0, 0, 0, 0, 0, 0),
    (F(1, 4), 0, 0, 0, 0, 0),
    (F(3, 32), F(9, 32), 0, 0, 0, 0),
    (F(1932, 2197), F(-7200, 2197), F(7296, 2197), 0, 0, 0),
    (F(439, 216), F(-8), F(3680, 513), F(-845, 4104), 0, 0),
    (F(-8, 27), F(2), F(-3544, 2565), F(1859, 4104), F(-11, 40), 0),
)

C = (0, F(1, 4), F(3, 8), F(12, 13), F(1), F(1, 2))

# 4th order, the sixth stage is not used
BA = (F(25, 216), F(0), F(1408, 2565), F(2197, 4104), F(-1, 5))

# 5th order
BB = (F(16, 135), F(0), F(6656, 12825), F(28561, 56430), F(-9, 50), F(2, 55))

RK45 = _ButcherTableau.from_dense("RK45", A, C, BA, BB, order=5)
