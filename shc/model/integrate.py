"""Fixed-step Runge-Kutta integration of the SHC model.

The classical four-stage scheme advances the state one step at a time:

    k1 = h f(X_i)
    k2 = h f(X_i + k1/2)
    k3 = h f(X_i + k2/2)
    k4 = h f(X_i + k3)
    X_{i+1} = X_i + (k1 + 2 k2 + 2 k3 + k4) / 6

There is no step-size control and no stability guard: the caller picks
`h` (0.1 ms for the reference runs), and overflow or NaN propagates
through the remaining steps.
"""

from dataclasses import dataclass
from typing import Tuple

import numpy as np
import pandas as pd

from shc.model.dynamics import (
    N_STATE, STATE_LABELS, random_initial_state, shc_derivative,
)
from shc.utils import get_logger, to_samples

LOG = get_logger("model.integrate")


# ---------------------------------------------------------------------------
# Runge-Kutta stepping
# ---------------------------------------------------------------------------

def rk4_step(derivative, x, h, params):
    """Advance `x` by one RK4 step of size `h`."""
    k1 = h * derivative(x, params)
    k2 = h * derivative(x + k1 / 2.0, params)
    k3 = h * derivative(x + k2 / 2.0, params)
    k4 = h * derivative(x + k3, params)
    return x + (k1 + 2.0 * k2 + 2.0 * k3 + k4) / 6.0


def integrate_rk4(x0, n_steps, h, params, derivative=shc_derivative):
    """Integrate from `x0` for `n_steps` samples.

    Parameters
    ----------
    x0 : array-like
        Initial state, shape (8,) or (8, m) for m independent runs.
    n_steps : int
        Number of columns in the trajectory, including the initial state.
    h : float
        Step size (ms).
    params : SHCParams
        Passed unchanged to `derivative`.
    derivative : callable
        derivative(x, params) -> dx/dt. Defaults to the SHC model.

    Returns
    -------
    np.ndarray
        Trajectory of shape x0.shape + (n_steps,). Column 0 is `x0`.
    """
    if isinstance(n_steps, bool) or int(n_steps) != n_steps or n_steps < 1:
        raise ValueError(f"n_steps must be a positive integer, got {n_steps}")
    if not h > 0:
        raise ValueError(f"Step size must be positive, got h={h}")

    x0 = np.array(x0, dtype=np.float64)
    if derivative is shc_derivative and (x0.ndim == 0 or x0.shape[0] != N_STATE):
        raise ValueError(
            f"SHC state must have {N_STATE} rows, got shape {x0.shape}"
        )

    n_steps = int(n_steps)
    trajectory = np.empty(x0.shape + (n_steps,), dtype=np.float64)
    trajectory[..., 0] = x0

    x = x0
    for i in range(n_steps - 1):
        x = rk4_step(derivative, x, h, params)
        trajectory[..., i + 1] = x

    return trajectory


# ---------------------------------------------------------------------------
# Result dataclass
# ---------------------------------------------------------------------------

@dataclass
class SHCResult:
    """Result of an SHC simulation.

    Parameters
    ----------
    trajectory : np.ndarray
        State traces, shape (8, n_steps), or (8, m, n_steps) for a batch
        of m runs.
    time : np.ndarray
        Time points (ms), shape (n_steps,).
    dt : float
        Step size (ms).
    labels : tuple of str
        State labels, in row order.
    """
    trajectory: np.ndarray
    time: np.ndarray
    dt: float
    labels: Tuple[str, ...] = STATE_LABELS

    def __post_init__(self):
        assert self.trajectory.shape[0] == len(self.labels)
        assert self.trajectory.shape[-1] == len(self.time)

    @property
    def n_steps(self):
        return self.trajectory.shape[-1]

    @property
    def duration(self):
        """Simulated time (ms)."""
        return self.n_steps * self.dt

    @property
    def fs(self):
        """Sampling rate (Hz)."""
        return 1000.0 / self.dt

    def trace(self, label):
        """State trace by label."""
        return self.trajectory[self.labels.index(label)]

    @property
    def lfp(self):
        """CA1 excitatory potential, used as the local field potential."""
        return self.trace("V_e_CA1")

    @property
    def cholinergic(self):
        """Cholinergic excitatory potential."""
        return self.trace("V_e_Ch")

    def to_frame(self):
        """Traces as a DataFrame indexed by time (ms). Single runs only."""
        if self.trajectory.ndim != 2:
            raise ValueError(
                "to_frame needs a single run, got trajectory of shape "
                f"{self.trajectory.shape}"
            )
        return pd.DataFrame(
            self.trajectory.T,
            index=pd.Index(self.time, name="time_ms"),
            columns=list(self.labels),
        )


# ---------------------------------------------------------------------------
# Simulation
# ---------------------------------------------------------------------------

def simulate_shc(params, duration=10000.0, dt=0.1, x0=None, seed=None):
    """Run the SHC model.

    Parameters
    ----------
    params : SHCParams
        Model coefficients.
    duration : float
        Simulated time (ms).
    dt : float
        Step size (ms).
    x0 : array-like, optional
        Initial state, shape (8,) or (8, m) for m independent runs. If
        None, `random_initial_state(seed)` is used.
    seed : int, optional
        Seed for the random initial state.

    Returns
    -------
    SHCResult
    """
    n_steps = to_samples(duration, dt)
    if x0 is None:
        x0 = random_initial_state(seed)

    LOG.info("Starting SHC simulation: %.0f ms, dt=%.3f ms, %d steps",
             duration, dt, n_steps)

    trajectory = integrate_rk4(x0, n_steps, dt, params)
    final = trajectory[..., -1]

    if not np.all(np.isfinite(final)):
        LOG.warning("SHC state is not finite at the end of the run; "
                    "consider a smaller dt")
    if final.ndim == 1:
        LOG.info("SHC simulation complete. Final state: %s",
                 {label: f"{final[i]:.3f}"
                  for i, label in enumerate(STATE_LABELS)})
    else:
        LOG.info("SHC simulation complete: %d runs", final.shape[1])

    return SHCResult(
        trajectory=trajectory,
        time=np.arange(n_steps) * dt,
        dt=dt,
    )
