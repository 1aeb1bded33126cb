"""Tests for the RK4 integrator and the SHC simulation entry point."""

import numpy as np
import pandas as pd
import pytest

from shc.model.dynamics import STATE_LABELS, random_initial_state, shc_derivative
from shc.model.integrate import (
    SHCResult, rk4_step, integrate_rk4, simulate_shc,
)


@pytest.fixture
def uncoupled_params(shc_params):
    """No presynaptic neurons: dX/dt = -X / tau for every variable."""
    return shc_params.replace(n_e_ca3=0.0, n_i_ca3=0.0, n_e_ca1=0.0,
                              n_i_ca1=0.0, n_e_ch=0.0)


def _taus(p):
    return np.array([p.tau_e, p.tau_i, p.tau_c, p.tau_e,
                     p.tau_i, p.tau_c, p.tau_e, p.tau_c_ch])


# ---------------------------------------------------------------------------
# Single step
# ---------------------------------------------------------------------------

class TestRK4Step:

    def test_linear_decay_matches_taylor(self):
        """One RK4 step of dx = -x/tau is the 4th-order Taylor polynomial."""
        def decay(x, tau):
            return -x / tau

        h, tau = 0.5, 2.0
        z = -h / tau
        expected = 1.0 + z + z**2 / 2 + z**3 / 6 + z**4 / 24
        assert rk4_step(decay, np.array([1.0]), h, tau)[0] == pytest.approx(
            expected, rel=1e-14)


# ---------------------------------------------------------------------------
# Trajectory
# ---------------------------------------------------------------------------

class TestIntegrateRK4:

    def test_single_step_returns_initial_state(self, shc_params):
        x0 = random_initial_state(seed=0)
        trajectory = integrate_rk4(x0, 1, 0.1, shc_params)
        assert trajectory.shape == (8, 1)
        np.testing.assert_array_equal(trajectory[:, 0], x0)

    def test_initial_column_unmodified(self, shc_params):
        x0 = random_initial_state(seed=0)
        x0_copy = x0.copy()
        trajectory = integrate_rk4(x0, 50, 0.1, shc_params)
        assert trajectory.shape == (8, 50)
        np.testing.assert_array_equal(trajectory[:, 0], x0_copy)
        np.testing.assert_array_equal(x0, x0_copy)

    def test_columns_are_successive_steps(self, shc_params):
        x0 = random_initial_state(seed=2)
        trajectory = integrate_rk4(x0, 5, 0.1, shc_params)
        for i in range(4):
            np.testing.assert_array_equal(
                trajectory[:, i + 1],
                rk4_step(shc_derivative, trajectory[:, i], 0.1, shc_params))

    def test_deterministic(self, shc_params):
        x0 = random_initial_state(seed=5)
        a = integrate_rk4(x0, 200, 0.1, shc_params)
        b = integrate_rk4(x0, 200, 0.1, shc_params)
        np.testing.assert_array_equal(a, b)

    def test_uncoupled_exponential_decay(self, uncoupled_params):
        x0 = np.linspace(1.0, 8.0, 8)
        h, n = 0.1, 201
        trajectory = integrate_rk4(x0, n, h, uncoupled_params)
        t = (n - 1) * h
        expected = x0 * np.exp(-t / _taus(uncoupled_params))
        np.testing.assert_allclose(trajectory[:, -1], expected, rtol=1e-8)

    def test_fourth_order_convergence(self, uncoupled_params):
        """Halving h divides the global error by about 2^4."""
        x0 = np.ones(8)
        t_end = 20.0
        tau = _taus(uncoupled_params)
        exact = np.exp(-t_end / tau[1])  # tau_i = 5 ms, the fastest variable

        errors = []
        for h in (1.0, 0.5, 0.25):
            n = int(round(t_end / h)) + 1
            trajectory = integrate_rk4(x0, n, h, uncoupled_params)
            errors.append(abs(trajectory[1, -1] - exact))

        for coarse, fine in zip(errors, errors[1:]):
            assert 12.0 < coarse / fine < 20.0

    def test_batched_runs_match_single_runs(self, shc_params):
        x0s = np.stack([random_initial_state(seed=s) for s in range(3)], axis=1)
        batched = integrate_rk4(x0s, 40, 0.1, shc_params)
        assert batched.shape == (8, 3, 40)
        for k in range(3):
            np.testing.assert_allclose(
                batched[:, k, :], integrate_rk4(x0s[:, k], 40, 0.1, shc_params))

    def test_generic_derivative(self):
        def rotation(x, omega):
            return np.array([-omega * x[1], omega * x[0]])

        n, h = 629, 0.01
        trajectory = integrate_rk4([1.0, 0.0], n, h, 1.0, derivative=rotation)
        radius = np.hypot(trajectory[0], trajectory[1])
        np.testing.assert_allclose(radius, 1.0, atol=1e-8)

    @pytest.mark.parametrize("n_steps", [0, -3, 2.5])
    def test_invalid_step_count(self, shc_params, n_steps):
        with pytest.raises(ValueError):
            integrate_rk4(np.zeros(8), n_steps, 0.1, shc_params)

    @pytest.mark.parametrize("h", [0.0, -0.1])
    def test_invalid_step_size(self, shc_params, h):
        with pytest.raises(ValueError):
            integrate_rk4(np.zeros(8), 10, h, shc_params)

    def test_wrong_state_length(self, shc_params):
        with pytest.raises(ValueError, match="8 rows"):
            integrate_rk4(np.zeros(7), 10, 0.1, shc_params)

    def test_overflow_propagates(self, shc_params):
        """An unstable step size is not corrected: the state blows up."""
        x0 = random_initial_state(seed=0)
        with np.errstate(all="ignore"):
            trajectory = integrate_rk4(x0, 200, 50.0, shc_params)
        assert not np.all(np.isfinite(trajectory[:, -1]))


# ---------------------------------------------------------------------------
# Simulation entry point
# ---------------------------------------------------------------------------

class TestSimulateSHC:

    def test_result_shape(self, shc_params):
        result = simulate_shc(shc_params, duration=50.0, dt=0.1, seed=1)
        assert isinstance(result, SHCResult)
        assert result.n_steps == 500
        assert result.trajectory.shape == (8, 500)
        assert result.duration == pytest.approx(50.0)
        assert result.fs == pytest.approx(10000.0)
        np.testing.assert_allclose(result.time[:3], [0.0, 0.1, 0.2])

    def test_seeded_initial_state(self, shc_params):
        result = simulate_shc(shc_params, duration=10.0, dt=0.1, seed=4)
        np.testing.assert_array_equal(result.trajectory[:, 0],
                                      random_initial_state(seed=4))

    def test_explicit_initial_state(self, shc_params):
        x0 = np.full(8, 0.5)
        result = simulate_shc(shc_params, duration=10.0, dt=0.1, x0=x0)
        np.testing.assert_array_equal(result.trajectory[:, 0], x0)

    def test_trace_accessors(self, shc_params):
        result = simulate_shc(shc_params, duration=20.0, dt=0.1, seed=0)
        np.testing.assert_array_equal(result.lfp, result.trajectory[3])
        np.testing.assert_array_equal(result.cholinergic, result.trajectory[6])
        np.testing.assert_array_equal(result.trace("c_CA1"),
                                      result.trajectory[5])

    def test_stays_finite(self, shc_params):
        result = simulate_shc(shc_params, duration=200.0, dt=0.1, seed=0)
        assert np.all(np.isfinite(result.trajectory))

    def test_to_frame(self, shc_params):
        result = simulate_shc(shc_params, duration=5.0, dt=0.1, seed=0)
        df = result.to_frame()
        assert isinstance(df, pd.DataFrame)
        assert list(df.columns) == list(STATE_LABELS)
        assert df.index.name == "time_ms"
        assert len(df) == 50

    def test_batched_initial_states(self, shc_params):
        x0s = np.stack([random_initial_state(seed=s) for s in range(2)], axis=1)
        result = simulate_shc(shc_params, duration=1.0, dt=0.1, x0=x0s)
        assert result.trajectory.shape == (8, 2, 10)
        assert result.n_steps == 10
        for k in range(2):
            single = simulate_shc(shc_params, duration=1.0, dt=0.1,
                                  x0=x0s[:, k])
            np.testing.assert_allclose(result.trajectory[:, k, :],
                                       single.trajectory)

    def test_batched_result_has_no_frame(self, shc_params):
        x0s = np.stack([random_initial_state(seed=s) for s in range(2)], axis=1)
        result = simulate_shc(shc_params, duration=1.0, dt=0.1, x0=x0s)
        with pytest.raises(ValueError, match="single run"):
            result.to_frame()

    def test_mismatched_result_raises(self):
        with pytest.raises(AssertionError):
            SHCResult(trajectory=np.zeros((8, 10)), time=np.arange(9), dt=0.1)
