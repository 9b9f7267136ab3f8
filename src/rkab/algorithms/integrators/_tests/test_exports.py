import numpy as np
import pytest

from rkab.algorithms.integrators.coefficients import RK23, RK45
from rkab.algorithms.integrators.exports import ENTRY_POINTS, get_entry_point
from rkab.algorithms.integrators.rk import rkab


def oscillator(t, y):
    return np.array([y[1], -y[0]])


def test_every_combination_is_exported():
    expected = {
        f"rk{ab}{arrtol}{suffix}"
        for ab in ("12", "23", "45")
        for arrtol in ("", "_arrtol")
        for suffix in ("", "_f", "_ld")
    }
    assert set(ENTRY_POINTS) == expected
    assert get_entry_point("rk23_arrtol_f").__name__ == "rk23_arrtol_f"


def test_entry_point_matches_core_driver():
    y0 = np.array([0.0, 1.0])
    sol = get_entry_point("rk45")(y0, 2, 1000, 1e-3, 0.0, 50.0, oscillator)
    ref = rkab(RK45, y0, 1000, 1e-3, 0.0, 50.0, oscillator)

    assert np.array_equal(sol.times, ref.times)
    assert np.array_equal(sol.states, ref.states)
    assert sol.num_failures == ref.num_failures


@pytest.mark.parametrize("name, dtype", [
    ("rk45_f", np.float32),
    ("rk23_ld", np.longdouble),
    ("rk12_arrtol", np.float64),
])
def test_entry_point_element_type(name, dtype):
    tol = [1e-3, 1e-3] if "arrtol" in name else 1e-3
    sol = ENTRY_POINTS[name](np.array([0.0, 1.0]), 2, 1000, tol, 0.0, 1.0, oscillator)

    assert sol.times.dtype == dtype
    assert sol.states.dtype == dtype
    assert sol.completed


def test_arrtol_entry_point_with_uniform_vector_matches_scalar():
    y0 = np.array([0.0, 1.0])
    scalar = ENTRY_POINTS["rk23"](y0, 2, 1000, 1e-6, 0.0, 2.0, oscillator)
    vector = ENTRY_POINTS["rk23_arrtol"](y0, 2, 1000, np.array([1e-6, 1e-6]), 0.0, 2.0, oscillator)
    ref = rkab(RK23, y0, 1000, 1e-6, 0.0, 2.0, oscillator)

    assert np.array_equal(scalar.states, vector.states)
    assert np.array_equal(scalar.states, ref.states)


def test_tolerance_shape_is_enforced():
    y0 = np.array([0.0, 1.0])
    with pytest.raises(ValueError):
        ENTRY_POINTS["rk45"](y0, 2, 10, [1e-3, 1e-3], 0.0, 1.0, oscillator)
    with pytest.raises(ValueError):
        ENTRY_POINTS["rk45_arrtol"](y0, 2, 10, 1e-3, 0.0, 1.0, oscillator)
    with pytest.raises(ValueError):
        ENTRY_POINTS["rk45_arrtol"](y0, 2, 10, [1e-3, 1e-3, 1e-3], 0.0, 1.0, oscillator)


def test_unknown_entry_point():
    with pytest.raises(KeyError, match="available"):
        get_entry_point("rk46")
