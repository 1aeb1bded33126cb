"""Parameter set of the SHC neural-mass model.

The SHC model couples three circuits: CA3 (excitatory, inhibitory,
synaptic depression), CA1 (excitatory, inhibitory, depression) and the
medial-septum cholinergic population (excitatory, depression). Each
coefficient below is a named, read-only field of `SHCParams`; a run
receives its parameter set explicitly and never mutates it.

Parameter files written by the MATLAB model code use its field names
(`N_e_CA3`, `V_e__CA3`, `t_e`, `c_`, ...). `SHCParams.from_dict` accepts
those as well as the Python names used here.
"""

import json
from dataclasses import asdict, dataclass, fields, replace as _replace
from pathlib import Path

import yaml
from scipy.io import loadmat

from shc.utils import get_logger

LOG = get_logger("model.params")


TIME_CONSTANTS = ("tau_e", "tau_i", "tau_c", "tau_c_ch")

_LEGACY_NAMES = {
    "c_": "c_ref",
    "c_Ch": "c_ref_ch",
    "r_0": "r0",
    "r_1": "r1",
}


@dataclass(frozen=True)
class SHCParams:
    """Coefficients of the SHC model.

    Parameters
    ----------
    n_e_ca3, n_i_ca3, n_e_ca1, n_i_ca1, n_e_ch : float
        Number of presynaptic neurons per population.
    p_ee_ca3, p_ie_ca3, p_ei_ca3 : float
        Connection probabilities inside CA3.
    p_ee_ca31, p_ei_ca31 : float
        CA3 -> CA1 connection probabilities (onto E and I).
    p_ie_ca1, p_ei_ca1, p_ii_ca1 : float
        Connection probabilities inside CA1.
    p_ee_ch, p_ee_ch2ca1 : float
        Recurrent cholinergic and cholinergic -> CA1 probabilities.
    j0_ee_ca3, j0_ee_ca31, j0_ee_ch : float
        Undepressed excitatory weights, gated by a depression variable.
    j_ie_ca3, j_ei_ca3, j_ei_ca31, j_ie_ca1, j_ei_ca1, j_ii_ca1 : float
        Fixed synaptic weights.
    dc_ca3, dc_ca1, dc_ch2ca1, dc_ch : float
        Increment of the depression variables per unit presynaptic rate.
    tau_e, tau_i, tau_c, tau_c_ch : float
        Time constants (ms) of excitatory, inhibitory, depression and
        cholinergic-depression variables. Must be strictly positive.
    r0, r1 : float
        Baseline and scale of the firing-rate sigmoid.
    v_e_ca3, v_i_ca3, v_e_ca1, v_i_ca1, v_e_ch : float
        Reference potentials (mV) of the firing-rate sigmoids.
    g_e_ca3, g_i_ca3, g_e_ca1, g_i_ca1, g_e_ch : float
        Gains (mV) of the firing-rate sigmoids.
    c_ref, g_c : float
        Reference level and gain of the hippocampal depression gate.
    c_ref_ch, g_c_ch : float
        Reference level and gain of the cholinergic depression gate.
    """
    # population sizes
    n_e_ca3: float
    n_i_ca3: float
    n_e_ca1: float
    n_i_ca1: float
    n_e_ch: float
    # connection probabilities
    p_ee_ca3: float
    p_ie_ca3: float
    p_ei_ca3: float
    p_ee_ca31: float
    p_ei_ca31: float
    p_ie_ca1: float
    p_ei_ca1: float
    p_ii_ca1: float
    p_ee_ch: float
    p_ee_ch2ca1: float
    # synaptic weights
    j0_ee_ca3: float
    j_ie_ca3: float
    j_ei_ca3: float
    j0_ee_ca31: float
    j_ei_ca31: float
    j_ie_ca1: float
    j_ei_ca1: float
    j_ii_ca1: float
    j0_ee_ch: float
    # depression increments
    dc_ca3: float
    dc_ca1: float
    dc_ch2ca1: float
    dc_ch: float
    # time constants (ms)
    tau_e: float
    tau_i: float
    tau_c: float
    tau_c_ch: float
    # firing-rate sigmoids
    r0: float
    r1: float
    v_e_ca3: float
    g_e_ca3: float
    v_i_ca3: float
    g_i_ca3: float
    v_e_ca1: float
    g_e_ca1: float
    v_i_ca1: float
    g_i_ca1: float
    v_e_ch: float
    g_e_ch: float
    # depression gates
    c_ref: float
    g_c: float
    c_ref_ch: float
    g_c_ch: float

    def __post_init__(self):
        bad = {name: getattr(self, name) for name in TIME_CONSTANTS
               if not getattr(self, name) > 0}
        if bad:
            raise ValueError(f"Time constants must be strictly positive: {bad}")

    @classmethod
    def field_names(cls):
        """Names of all coefficients, in declaration order."""
        return [f.name for f in fields(cls)]

    @classmethod
    def from_dict(cls, mapping):
        """Build a parameter set from a mapping.

        Keys may be Python field names or legacy MATLAB names.

        Raises
        ------
        ValueError
            If a key is unknown or a coefficient is missing.
        """
        known = set(cls.field_names())
        values = {}
        unknown = []
        for key, value in mapping.items():
            name = python_name(key)
            if name not in known:
                unknown.append(key)
                continue
            values[name] = float(value)

        if unknown:
            raise ValueError(f"Unknown SHC parameters: {sorted(unknown)}")
        missing = [name for name in cls.field_names() if name not in values]
        if missing:
            raise ValueError(f"Missing SHC parameters: {missing}")

        return cls(**values)

    def to_dict(self):
        """Serialize to a plain dict keyed by Python field names."""
        return asdict(self)

    def replace(self, **changes):
        """A copy with some coefficients changed."""
        return _replace(self, **changes)


def python_name(key):
    """Map a legacy MATLAB parameter name to its `SHCParams` field.

    >>> python_name("V_e__CA3")
    'v_e_ca3'
    >>> python_name("t_c_Ch")
    'tau_c_ch'
    """
    if key in _LEGACY_NAMES:
        return _LEGACY_NAMES[key]
    name = key.lower().replace("__", "_")
    if name.startswith("t_"):
        name = "tau_" + name[2:]
    return name


def _read_mat(path):
    """Coefficients stored in a .mat file.

    The file either holds a `params` struct or one variable per coefficient.
    """
    contents = loadmat(str(path), squeeze_me=True, struct_as_record=False)
    if "params" in contents:
        struct = contents["params"]
        return {name: getattr(struct, name) for name in struct._fieldnames}
    return {key: value for key, value in contents.items()
            if not key.startswith("__")}


def load_params(path):
    """Load an `SHCParams` from a YAML, JSON or MATLAB file.

    Parameters
    ----------
    path : str or Path
        File with suffix .yaml, .yml, .json or .mat.

    Returns
    -------
    SHCParams
    """
    path = Path(path)
    suffix = path.suffix.lower()

    if suffix in (".yaml", ".yml"):
        with open(path, "r") as fptr:
            mapping = yaml.safe_load(fptr)
    elif suffix == ".json":
        with open(path, "r") as fptr:
            mapping = json.load(fptr)
    elif suffix == ".mat":
        mapping = _read_mat(path)
    else:
        raise ValueError(f"Unsupported parameter file type: {path.name}")

    mapping = mapping or {}
    if isinstance(mapping.get("params"), dict):
        mapping = mapping["params"]

    params = SHCParams.from_dict(mapping)
    LOG.info("Loaded %d SHC parameters from %s", len(mapping), path)
    return params


def dump_params(params, path):
    """Write a parameter set as YAML. Returns the path written."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as fptr:
        yaml.safe_dump(params.to_dict(), fptr, sort_keys=False)
    return path
