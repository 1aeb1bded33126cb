"""Right-hand side of the SHC neural-mass model.

Eight leaky-integrator variables describe three coupled circuits:

    index  label     population
    0      V_e_CA3   CA3 excitatory membrane potential
    1      V_i_CA3   CA3 inhibitory membrane potential
    2      c_CA3     CA3 recurrent-synapse depression
    3      V_e_CA1   CA1 excitatory membrane potential (the LFP proxy)
    4      V_i_CA1   CA1 inhibitory membrane potential
    5      c_CA1     depression of the CA3 -> CA1 synapses
    6      V_e_Ch    cholinergic excitatory membrane potential
    7      c_Ch      cholinergic recurrent-synapse depression

Each equation relaxes its variable toward a weighted sum of sigmoidal
firing rates, some of them gated by a depression variable:

    τ_k dX_k/dt = -X_k + Σ drive_k(X)

CA3 drives CA1 through depressing synapses; the cholinergic population
feeds the depression of those synapses (c_CA1) and thereby switches CA1
between ripple-prone (SWS-like) and theta (REM-like) regimes.
"""

import numpy as np

STATE_LABELS = (
    "V_e_CA3", "V_i_CA3", "c_CA3",
    "V_e_CA1", "V_i_CA1", "c_CA1",
    "V_e_Ch", "c_Ch",
)
N_STATE = len(STATE_LABELS)
DEPRESSION_INDICES = (2, 5, 7)


# ---------------------------------------------------------------------------
# Transfer functions
# ---------------------------------------------------------------------------

def firing_rate(v, v_ref, gain, r0, r1):
    """Logistic population firing rate.

    r(V) = r0 + r1 / (1 + exp((V_ref - V) / g))
    """
    return r0 + r1 / (1.0 + np.exp((v_ref - v) / gain))


def depression_gate(c, j0, c_ref, gain):
    """Synaptic efficacy reduced by the depression variable `c`.

    J(c) = J0 / (1 + exp((c - c_ref) / g_c))
    """
    return j0 / (1.0 + np.exp((c - c_ref) / gain))


# ---------------------------------------------------------------------------
# Right-hand side
# ---------------------------------------------------------------------------

def shc_derivative(x, params):
    """Time derivative of the SHC state.

    Parameters
    ----------
    x : np.ndarray
        State, shape (8,) or (8, m) for m independent runs.
    params : SHCParams
        Model coefficients.

    Returns
    -------
    np.ndarray
        dX/dt, same shape as `x`. Overflow and NaN are propagated.
    """
    p = params
    x = np.asarray(x, dtype=np.float64)

    def rate(v, v_ref, gain):
        return firing_rate(v, v_ref, gain, p.r0, p.r1)

    # Presynaptic rates that appear in several equations
    r_e_ca3 = rate(x[0], p.v_e_ca3, p.g_e_ca3)
    r_i_ca1 = rate(x[4], p.v_i_ca1, p.g_i_ca1)
    r_e_ch = rate(x[6], p.v_e_ch, p.g_e_ch)

    dx = np.empty_like(x)

    dx[0] = (
        -x[0]
        + p.n_e_ca3 * p.p_ee_ca3
        * depression_gate(x[2], p.j0_ee_ca3, p.c_ref, p.g_c) * r_e_ca3
        - p.n_i_ca3 * p.p_ie_ca3 * p.j_ie_ca3
        * rate(x[0], p.v_i_ca3, p.g_i_ca3)
    ) / p.tau_e

    dx[1] = (
        -x[1]
        + p.n_e_ca3 * p.p_ei_ca3 * p.j_ei_ca3 * r_e_ca3
    ) / p.tau_i

    dx[2] = (
        -x[2]
        + p.n_e_ca3 * p.p_ee_ca3 * p.dc_ca3 * r_e_ca3
    ) / p.tau_c

    dx[3] = (
        -x[3]
        - p.n_i_ca1 * p.p_ie_ca1 * p.j_ie_ca1 * r_i_ca1
        + p.n_e_ca3 * p.p_ee_ca31
        * depression_gate(x[5], p.j0_ee_ca31, p.c_ref, p.g_c) * r_e_ca3
    ) / p.tau_e

    dx[4] = (
        -x[4]
        + p.n_e_ca1 * p.p_ei_ca1 * p.j_ei_ca1
        * rate(x[3], p.v_e_ca1, p.g_e_ca1)
        + p.n_e_ca3 * p.p_ei_ca31 * p.j_ei_ca31 * r_e_ca3
        - p.n_i_ca1 * p.p_ii_ca1 * p.j_ii_ca1 * r_i_ca1
    ) / p.tau_i

    dx[5] = (
        -x[5]
        + p.n_e_ca3 * p.p_ee_ca31 * p.dc_ca1 * r_e_ca3
        + p.n_e_ch * p.p_ee_ch2ca1 * p.dc_ch2ca1 * r_e_ch
    ) / p.tau_c

    dx[6] = (
        -x[6]
        + p.n_e_ch * p.p_ee_ch
        * depression_gate(x[7], p.j0_ee_ch, p.c_ref_ch, p.g_c_ch) * r_e_ch
    ) / p.tau_e

    dx[7] = (
        -x[7]
        + p.n_e_ch * p.p_ee_ch * p.dc_ch * r_e_ch
    ) / p.tau_c_ch

    return dx


# ---------------------------------------------------------------------------
# Initial state
# ---------------------------------------------------------------------------

def random_initial_state(seed=None, depression=25.0):
    """Initial state used for SHC runs.

    Membrane potentials are drawn uniformly from [-1, 1); the three
    depression variables start at `depression`, close to their operating
    level, which shortens the initial transient.

    Parameters
    ----------
    seed : int, optional
        Random seed.
    depression : float
        Starting value of c_CA3, c_CA1 and c_Ch.

    Returns
    -------
    np.ndarray
        Shape (8,).
    """
    if seed is not None:
        rng = np.random.RandomState(seed)
    else:
        rng = np.random.RandomState()

    x0 = 2.0 * (rng.random_sample(N_STATE) - 0.5)
    x0[list(DEPRESSION_INDICES)] = depression
    return x0
