"""model — The SHC neural-mass model and its integrator.

Eight coupled leaky integrators for CA3, CA1 and the cholinergic medial
septum, advanced with a fixed-step fourth-order Runge-Kutta scheme.
"""

from .params import (
    SHCParams,
    load_params,
    dump_params,
    python_name,
)
from .dynamics import (
    STATE_LABELS,
    N_STATE,
    firing_rate,
    depression_gate,
    shc_derivative,
    random_initial_state,
)
from .integrate import (
    SHCResult,
    rk4_step,
    integrate_rk4,
    simulate_shc,
)
