"""SWS-REM transition analysis.

Cholinergic drive to CA1 switches the hippocampus between slow-wave
sleep (SWS), where sharp-wave ripples occur, and REM sleep, dominated
by theta. A transition run follows the sequence

    SWS -> STP -> REM -> STP -> SWS

with short transition periods (STP) between the sleep states. This
module extracts the ripple (100-250 Hz) and theta (4-12 Hz) bands of the
CA1 LFP, detects SWRs in the two SWS stretches (each with its adjacent
STP) and reports where they fall. No ripples are expected during REM,
so it is not searched.

The trailing `edge_s` seconds of every trace are dropped to keep the
filter edge effects out of the analysis.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List

import numpy as np
import pandas as pd
from scipy.io import loadmat

from shc.model.dynamics import N_STATE
from shc.model.integrate import SHCResult
from shc.signal.filters import ripple_band, theta_band
from shc.signal.swr import RippleEvent, detect_swrs, events_frame
from shc.utils import get_logger, to_samples

LOG = get_logger("analysis.transition")


@dataclass(frozen=True)
class SleepProtocol:
    """Phase durations of a transition run, in seconds."""
    sws_s: float = 12.0
    rem_s: float = 12.0
    stp_s: float = 2.0
    edge_s: float = 2.0

    def phases(self):
        """(name, start_s, end_s) for each phase, in order."""
        sequence = [("SWS", self.sws_s), ("STP", self.stp_s),
                    ("REM", self.rem_s), ("STP", self.stp_s),
                    ("SWS", self.sws_s)]
        out = []
        t = 0.0
        for name, length in sequence:
            out.append((name, t, t + length))
            t += length
        return out

    @property
    def total_s(self):
        return 2 * self.sws_s + 2 * self.stp_s + self.rem_s


def _samples(seconds, dt):
    if seconds == 0:
        return 0
    return to_samples(seconds * 1000.0, dt)


def phase_table(protocol=None):
    """Phases of the protocol as a DataFrame."""
    protocol = protocol or SleepProtocol()
    return pd.DataFrame(protocol.phases(),
                        columns=["phase", "start_s", "end_s"])


def detection_epochs(protocol, dt):
    """Sample ranges searched for SWRs.

    Returns
    -------
    list of (int, int)
        [start, stop) of the first SWS with the following STP, and of
        the second STP with the final SWS.
    """
    sws = _samples(protocol.sws_s, dt)
    rem = _samples(protocol.rem_s, dt)
    stp = _samples(protocol.stp_s, dt)
    return [
        (0, sws + stp),
        (sws + stp + rem, 2 * sws + 2 * stp + rem),
    ]


def load_trajectory(path, key="X"):
    """Read a saved (8, n_steps) trajectory.

    Parameters
    ----------
    path : str or Path
        A `.mat` file holding the trajectory under `key`, or a `.npy` file.
    key : str
        Variable name inside a `.mat` file.

    Returns
    -------
    np.ndarray
    """
    path = Path(path)
    suffix = path.suffix.lower()
    if suffix == ".npy":
        trajectory = np.load(path)
    elif suffix == ".mat":
        contents = loadmat(str(path))
        if key not in contents:
            raise ValueError(f"{path} holds no variable named {key!r}")
        trajectory = contents[key]
    else:
        raise ValueError(f"Unsupported trajectory file: {path}")

    trajectory = np.asarray(trajectory, dtype=np.float64)
    if trajectory.ndim != 2 or trajectory.shape[0] != N_STATE:
        raise ValueError(
            f"Expected a trajectory of shape ({N_STATE}, n_steps), "
            f"got {trajectory.shape}"
        )
    LOG.info("Loaded %d steps from %s", trajectory.shape[1], path)
    return trajectory


@dataclass
class TransitionResult:
    """Signals and SWRs of a transition run.

    Attributes
    ----------
    time : np.ndarray
        Time (s) of each retained sample.
    lfp, cholinergic : np.ndarray
        CA1 excitatory and cholinergic potentials.
    ripple, theta : np.ndarray
        100-250 Hz and 4-12 Hz bands of the LFP.
    events : list of RippleEvent
        SWRs, in samples of the whole trace.
    swr_times : np.ndarray
        Event centres (s).
    phases : pd.DataFrame
        Phase table of the protocol.
    dt : float
        Sampling step (ms).
    """
    time: np.ndarray
    lfp: np.ndarray
    cholinergic: np.ndarray
    ripple: np.ndarray
    theta: np.ndarray
    events: List[RippleEvent] = field(default_factory=list)
    swr_times: np.ndarray = field(default_factory=lambda: np.empty(0))
    phases: pd.DataFrame = field(default_factory=phase_table)
    dt: float = 0.1

    @property
    def n_swrs(self):
        return len(self.events)

    def events_frame(self):
        return events_frame(self.events, self.dt)

    def swr_rate_by_phase(self):
        """Number of SWRs and their rate (Hz) in each phase.

        Phases are clipped to the retained part of the trace; a phase
        with nothing retained gets a NaN rate.
        """
        t_end = len(self.time) * self.dt / 1000.0
        rows = []
        for _, row in self.phases.iterrows():
            in_phase = ((self.swr_times >= row.start_s)
                        & (self.swr_times < row.end_s))
            covered = min(row.end_s, t_end) - row.start_s
            n = int(np.sum(in_phase))
            rows.append({
                "phase": row.phase,
                "start_s": row.start_s,
                "end_s": row.end_s,
                "n_swrs": n,
                "rate_hz": n / covered if covered > 0 else np.nan,
            })
        return pd.DataFrame(rows)


def analyze_transition(result, dt=None, protocol=None, config=None):
    """Band-pass the CA1 LFP and detect SWRs across a transition run.

    Parameters
    ----------
    result : SHCResult or np.ndarray
        A simulation result, or a trajectory of shape (8, n_steps).
    dt : float, optional
        Sampling step (ms). Required when `result` is an array.
    protocol : SleepProtocol, optional
    config : SWRDetectionConfig, optional

    Returns
    -------
    TransitionResult
    """
    protocol = protocol or SleepProtocol()
    if isinstance(result, SHCResult):
        dt = result.dt if dt is None else dt
        trajectory = result.trajectory
    else:
        if dt is None:
            raise ValueError("dt is required when passing a raw trajectory")
        trajectory = np.asarray(result, dtype=np.float64)

    fs = 1000.0 / dt
    lfp = trajectory[3]
    cholinergic = trajectory[6]

    ripple = ripple_band(lfp, fs)
    theta = theta_band(lfp, fs)

    n_keep = len(lfp) - _samples(protocol.edge_s, dt)
    if n_keep <= 0:
        raise ValueError(
            f"Trace of {len(lfp)} samples is shorter than the "
            f"{protocol.edge_s} s edge window"
        )
    if len(lfp) * dt / 1000.0 < protocol.total_s:
        LOG.warning("Trace covers %.1f s, protocol spans %.1f s",
                    len(lfp) * dt / 1000.0, protocol.total_s)

    lfp = lfp[:n_keep]
    cholinergic = cholinergic[:n_keep]
    ripple = ripple[:n_keep]
    theta = theta[:n_keep]

    events = []
    for start, stop in detection_epochs(protocol, dt):
        if start >= n_keep:
            LOG.warning("Detection epoch at sample %d lies beyond the trace",
                        start)
            continue
        found = detect_swrs(ripple[start:stop], dt, config)
        events.extend(event.shifted(start) for event in found)

    swr_times = np.array([event.center for event in events],
                         dtype=np.float64) * dt / 1000.0

    LOG.info("Transition analysis: %d SWRs over %.1f s", len(events),
             n_keep * dt / 1000.0)

    return TransitionResult(
        time=np.arange(n_keep) * dt / 1000.0,
        lfp=lfp,
        cholinergic=cholinergic,
        ripple=ripple,
        theta=theta,
        events=events,
        swr_times=swr_times,
        phases=phase_table(protocol),
        dt=dt,
    )
