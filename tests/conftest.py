"""Shared fixtures: an SHC parameter set used across the test modules."""

import pytest

from shc.model.params import SHCParams

PARAM_VALUES = {
    "n_e_ca3": 300.0, "n_i_ca3": 100.0, "n_e_ca1": 300.0,
    "n_i_ca1": 100.0, "n_e_ch": 200.0,
    "p_ee_ca3": 0.2, "p_ie_ca3": 0.3, "p_ei_ca3": 0.25,
    "p_ee_ca31": 0.15, "p_ei_ca31": 0.1, "p_ie_ca1": 0.3,
    "p_ei_ca1": 0.2, "p_ii_ca1": 0.1, "p_ee_ch": 0.2, "p_ee_ch2ca1": 0.05,
    "j0_ee_ca3": 0.4, "j_ie_ca3": 0.3, "j_ei_ca3": 0.2,
    "j0_ee_ca31": 0.5, "j_ei_ca31": 0.2, "j_ie_ca1": 0.4,
    "j_ei_ca1": 0.3, "j_ii_ca1": 0.1, "j0_ee_ch": 0.6,
    "dc_ca3": 0.4, "dc_ca1": 0.5, "dc_ch2ca1": 0.3, "dc_ch": 0.4,
    "tau_e": 10.0, "tau_i": 5.0, "tau_c": 100.0, "tau_c_ch": 500.0,
    "r0": 0.5, "r1": 10.0,
    "v_e_ca3": 15.0, "g_e_ca3": 3.0, "v_i_ca3": 12.0, "g_i_ca3": 2.5,
    "v_e_ca1": 15.0, "g_e_ca1": 3.0, "v_i_ca1": 12.0, "g_i_ca1": 2.5,
    "v_e_ch": 18.0, "g_e_ch": 4.0,
    "c_ref": 20.0, "g_c": 3.0, "c_ref_ch": 25.0, "g_c_ch": 3.0,
}

LEGACY_NAMES = {
    "n_e_ca3": "N_e_CA3", "n_i_ca3": "N_i_CA3", "n_e_ca1": "N_e_CA1",
    "n_i_ca1": "N_i_CA1", "n_e_ch": "N_e_Ch",
    "p_ee_ca3": "P_ee_CA3", "p_ie_ca3": "P_ie_CA3", "p_ei_ca3": "P_ei_CA3",
    "p_ee_ca31": "P_ee_CA31", "p_ei_ca31": "P_ei_CA31", "p_ie_ca1": "P_ie_CA1",
    "p_ei_ca1": "P_ei_CA1", "p_ii_ca1": "P_ii_CA1", "p_ee_ch": "P_ee_Ch",
    "p_ee_ch2ca1": "P_ee_Ch2CA1",
    "j0_ee_ca3": "J0_ee_CA3", "j_ie_ca3": "J_ie_CA3", "j_ei_ca3": "J_ei_CA3",
    "j0_ee_ca31": "J0_ee_CA31", "j_ei_ca31": "J_ei_CA31", "j_ie_ca1": "J_ie_CA1",
    "j_ei_ca1": "J_ei_CA1", "j_ii_ca1": "J_ii_CA1", "j0_ee_ch": "J0_ee_Ch",
    "dc_ca3": "dc_CA3", "dc_ca1": "dc_CA1", "dc_ch2ca1": "dc_Ch2CA1",
    "dc_ch": "dc_Ch",
    "tau_e": "t_e", "tau_i": "t_i", "tau_c": "t_c", "tau_c_ch": "t_c_Ch",
    "r0": "r_0", "r1": "r_1",
    "v_e_ca3": "V_e__CA3", "g_e_ca3": "g_e_CA3", "v_i_ca3": "V_i__CA3",
    "g_i_ca3": "g_i_CA3", "v_e_ca1": "V_e__CA1", "g_e_ca1": "g_e_CA1",
    "v_i_ca1": "V_i__CA1", "g_i_ca1": "g_i_CA1", "v_e_ch": "V_e__Ch",
    "g_e_ch": "g_e_Ch",
    "c_ref": "c_", "g_c": "g_c", "c_ref_ch": "c_Ch", "g_c_ch": "g_c_Ch",
}


@pytest.fixture
def shc_params():
    """A complete, valid SHC parameter set."""
    return SHCParams(**PARAM_VALUES)


@pytest.fixture
def legacy_mapping():
    """The same parameter set keyed by MATLAB field names."""
    return {LEGACY_NAMES[name]: value for name, value in PARAM_VALUES.items()}


@pytest.fixture
def param_values():
    """Coefficients of `shc_params` as a plain dict."""
    return dict(PARAM_VALUES)
