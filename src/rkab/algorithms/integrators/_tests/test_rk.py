import logging

import numpy as np
import pytest
from scipy.integrate import solve_ivp

from rkab.algorithms.dynamics.rhs import create_rhs_system
from rkab.algorithms.integrators import AdaptiveRK
from rkab.algorithms.integrators.coefficients import RK12, RK23, RK45
from rkab.algorithms.integrators.configs import _StepControlConfig
from rkab.algorithms.integrators.rk import _RK45, rkab
from rkab.algorithms.utils.exceptions import ConvergenceError


def oscillator(t, y):
    return np.array([y[1], -y[0]])


def decay(t, y):
    return -y


def lotka_volterra(t, y):
    x, p = y
    return np.array([1.5 * x - x * p, x * p - 3.0 * p])


class CountingRHS:
    def __init__(self, func):
        self.func = func
        self.calls = 0

    def __call__(self, t, y):
        self.calls += 1
        return self.func(t, y)


def test_rk45_harmonic_oscillator_full_period():
    t_end = 2.0 * np.pi
    sol = rkab(RK45, np.array([0.0, 1.0]), 1000, 1e-10, 0.0, t_end, oscillator)

    assert sol.times[-1] == t_end
    assert sol.num_steps < 1000
    assert sol.completed
    assert np.all(np.diff(sol.times) > 0)
    exact = np.column_stack([np.sin(sol.times), np.cos(sol.times)])
    np.testing.assert_allclose(sol.states, exact, atol=1e-7)


def test_initial_point_is_not_stored():
    sol = rkab(RK45, np.array([0.0, 1.0]), 100, 1e-6, 0.0, 1.0, oscillator)

    assert sol.times[0] > 0.0
    assert sol.times.shape == (sol.num_steps,)
    assert sol.states.shape == (sol.num_steps, 2)


def test_end_point_is_hit_exactly():
    t_end = 0.3
    sol = rkab(RK45, np.array([1.0]), 1000, 1e-8, 0.0, t_end, decay)

    assert sol.times[-1] == np.float64(t_end)
    np.testing.assert_allclose(sol.states[-1, 0], np.exp(-t_end), rtol=1e-7)


def test_backward_integration():
    sol = rkab(RK45, np.array([1.0]), 1000, 1e-8, 1.0, 0.0, decay)

    assert sol.times[-1] == 0.0
    assert np.all(np.diff(sol.times) < 0)
    np.testing.assert_allclose(sol.states[-1, 0], np.e, rtol=1e-6)


def test_zero_max_steps_returns_empty_without_evaluating():
    rhs = CountingRHS(oscillator)
    sol = rkab(RK45, np.array([0.0, 1.0]), 0, 1e-6, 0.0, 1.0, rhs)

    assert sol.num_steps == 0
    assert sol.states.shape == (0, 2)
    assert sol.num_failures == 0
    assert rhs.calls == 0


def test_negative_max_steps_rejected_before_evaluating():
    rhs = CountingRHS(oscillator)
    with pytest.raises(ValueError):
        rkab(RK45, np.array([0.0, 1.0]), -1, 1e-6, 0.0, 1.0, rhs)
    assert rhs.calls == 0


def test_empty_interval_returns_empty_solution():
    rhs = CountingRHS(decay)
    sol = rkab(RK45, np.array([1.0]), 10, 1e-6, 2.0, 2.0, rhs)

    assert sol.num_steps == 0
    assert sol.completed
    assert rhs.calls == 0


def test_step_budget_exhaustion_returns_partial_trajectory(caplog):
    caplog.set_level(logging.WARNING, logger="rkab")
    sol = rkab(RK45, np.array([1.0]), 3, 1e-6, 0.0, 100.0, decay)

    assert sol.num_steps == 3
    assert not sol.completed
    assert sol.times[-1] < 100.0
    assert any("step budget" in rec.getMessage() for rec in caplog.records)


def test_dimension_mismatch_rejected():
    with pytest.raises(ValueError):
        rkab(RK45, np.array([0.0, 1.0]), 10, 1e-6, 0.0, 1.0, oscillator, dim=3)


def test_wrong_derivative_shape_rejected():
    with pytest.raises(ValueError):
        rkab(RK45, np.array([0.0, 1.0]), 10, 1e-6, 0.0, 1.0, lambda t, y: np.zeros(3))


def test_per_component_tolerance_matches_uniform_scalar():
    y0 = np.array([0.0, 1.0])
    scalar = rkab(RK45, y0, 1000, 1e-8, 0.0, 3.0, oscillator)
    vector = rkab(RK45, y0, 1000, np.array([1e-8, 1e-8]), 0.0, 3.0, oscillator)

    assert np.array_equal(scalar.times, vector.times)
    assert np.array_equal(scalar.states, vector.states)


def test_tighter_per_component_tolerance_takes_more_steps():
    y0 = np.array([1.0, 1.0])
    loose = rkab(RK45, y0, 10000, np.array([1e-4, 1e-4]), 0.0, 5.0, lotka_volterra)
    tight = rkab(RK45, y0, 10000, np.array([1e-4, 1e-10]), 0.0, 5.0, lotka_volterra)

    assert tight.num_steps > loose.num_steps


def test_rejections_counted_once_per_step():
    control = _StepControlConfig(initial_step=1.0)
    sol = rkab(RK45, np.array([1.0]), 100000, 1e-8, 0.0, 1.0, lambda t, y: -50.0 * y,
               control=control)

    assert sol.num_failures >= 1
    assert sol.num_failures <= sol.num_steps
    assert sol.completed


def test_non_finite_derivative_accepted_at_minimum_step():
    t0 = 1.0
    sol = rkab(RK45, np.array([1.0]), 2, 1e-6, t0, 2.0, lambda t, y: np.array([np.nan]))

    hmin = 16 * np.spacing(t0)
    assert sol.num_steps == 2
    assert sol.times[0] == t0 + hmin
    assert np.all(np.isnan(sol.states))
    assert sol.num_failures == 1


def test_retry_ceiling_raises_convergence_error():
    control = _StepControlConfig(max_retries=3)
    rhs = CountingRHS(decay)
    with pytest.raises(ConvergenceError) as excinfo:
        rkab(RK45, np.array([1.0]), 10, 0.0, 0.0, 1.0, rhs, control=control)

    # four full attempts of six stages, every one of them rejected
    assert rhs.calls == 4 * RK45.bstages
    assert excinfo.value.retries == 4
    assert "rejected 4 times" in str(excinfo.value)
    assert excinfo.value.t == 0.0


def test_forward_then_backward_returns_to_start():
    y0 = np.array([0.0, 1.0])
    forward = rkab(RK45, y0, 10000, 1e-10, 0.0, 3.0, oscillator)
    backward = rkab(RK45, forward.states[-1], 10000, 1e-10, 3.0, 0.0, oscillator)

    assert forward.times[-1] == 3.0
    assert backward.times[-1] == 0.0
    np.testing.assert_allclose(backward.states[-1], y0, atol=1e-7)


@pytest.mark.parametrize("tableau", [RK12, RK23, RK45])
def test_every_pair_solves_exponential_decay(tableau):
    sol = rkab(tableau, np.array([1.0]), 100000, 1e-6, 0.0, 1.0, decay)

    assert sol.completed
    np.testing.assert_allclose(sol.states[-1, 0], np.exp(-1.0), rtol=1e-3)


def test_higher_order_pair_needs_fewer_steps():
    y0 = np.array([0.0, 1.0])
    low = rkab(RK12, y0, 100000, 1e-6, 0.0, 2.0, oscillator)
    high = rkab(RK45, y0, 100000, 1e-6, 0.0, 2.0, oscillator)

    assert high.num_steps < low.num_steps


def test_float32_state_stays_float32():
    y0 = np.array([1.0], dtype=np.float32)
    sol = rkab(RK45, y0, 1000, 1e-4, 0.0, 1.0, decay)

    assert sol.times.dtype == np.float32
    assert sol.states.dtype == np.float32
    assert sol.times[-1] == np.float32(1.0)
    np.testing.assert_allclose(sol.states[-1, 0], np.exp(-1.0), rtol=1e-3)


def test_longdouble_integration():
    y0 = np.array([1.0], dtype=np.longdouble)
    sol = rkab(RK45, y0, 10000, 1e-12, 0.0, 1.0, decay)

    assert sol.states.dtype == np.longdouble
    expected = np.exp(np.longdouble(-1.0))
    assert abs(sol.states[-1, 0] - expected) < 1e-10


def test_integer_initial_state_promoted_to_float64():
    sol = rkab(RK45, [0, 1], 1000, 1e-6, 0.0, 1.0, oscillator)

    assert sol.states.dtype == np.float64


def test_rk45_matches_scipy_reference():
    y0 = np.array([1.0, 1.0])
    t_end = 10.0
    sol = rkab(RK45, y0, 100000, 1e-10, 0.0, t_end, lotka_volterra)
    ref = solve_ivp(lotka_volterra, (0.0, t_end), y0, method="DOP853",
                    rtol=1e-12, atol=1e-12)

    assert ref.success
    np.testing.assert_allclose(sol.states[-1], ref.y[:, -1], rtol=1e-6)


def test_adaptive_rk_factory():
    assert isinstance(AdaptiveRK(), _RK45)
    assert AdaptiveRK("RK23").order == 2
    assert AdaptiveRK("rk12").tableau is RK12
    with pytest.raises(ValueError):
        AdaptiveRK("rk99")


def test_integrator_accepts_bare_callable_and_system():
    integrator = AdaptiveRK("rk45", tol=1e-9)
    y0 = np.array([0.0, 1.0])
    t_vals = np.array([0.0, 1.0])

    sol_callable = integrator.integrate(oscillator, y0, t_vals)
    system = create_rhs_system(oscillator, dim=2, name="oscillator")
    sol_system = integrator.integrate(system, y0, t_vals)

    assert np.array_equal(sol_callable.states, sol_system.states)
    np.testing.assert_allclose(sol_system.states[-1], [np.sin(1.0), np.cos(1.0)], atol=1e-7)


def test_integrator_per_call_overrides():
    integrator = AdaptiveRK("rk45", tol=1e-4, max_steps=5)
    y0 = np.array([1.0])
    t_vals = np.array([0.0, 100.0])

    assert integrator.integrate(decay, y0, t_vals).num_steps == 5
    assert integrator.integrate(decay, y0, t_vals, max_steps=0).num_steps == 0

    coarse = integrator.integrate(decay, y0, np.array([0.0, 1.0]), max_steps=1000)
    fine = integrator.integrate(decay, y0, np.array([0.0, 1.0]), tol=1e-10, max_steps=1000)
    assert fine.num_steps > coarse.num_steps


def test_integrator_validates_inputs():
    integrator = AdaptiveRK()
    system = create_rhs_system(oscillator, dim=2)

    with pytest.raises(ValueError):
        integrator.integrate(system, np.array([1.0]), np.array([0.0, 1.0]))
    with pytest.raises(ValueError):
        integrator.integrate(system, np.array([0.0, 1.0]), np.array([0.0]))
    with pytest.raises(ValueError):
        integrator.integrate(system, np.array([0.0, 1.0]), np.array([0.0, 2.0, 1.0]))


def test_initial_state_checked_by_system_before_integrating():
    rhs = CountingRHS(oscillator)
    system = create_rhs_system(rhs, dim=2, name="oscillator")

    with pytest.raises(ValueError, match="State vector dimension 3 != system dimension 2"):
        AdaptiveRK().integrate(system, np.zeros(3), np.array([0.0, 1.0]))
    assert rhs.calls == 0


def test_protocol_only_system_dimension_checked():
    class BareSystem:
        dim = 2
        rhs = staticmethod(oscillator)

    with pytest.raises(ValueError, match="Initial state dimension 1"):
        AdaptiveRK().integrate(BareSystem(), np.zeros(1), np.array([0.0, 1.0]))


def test_integrator_repr():
    assert repr(AdaptiveRK("rk23")) == "_RK23(name='RK23', order=2)"
    assert str(AdaptiveRK("rk45")) == "RKAB-RK45"
