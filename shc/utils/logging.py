"""Print-based logging for SHC runs.

A transition run is usually launched from a notebook, where the standard
`logging` module stays silent unless configured. Messages are printed
to stdout, one line each, tagged with the time, the module and the
level. Messages below the current threshold are dropped; the threshold
starts at the `SHC_LOG_LEVEL` environment variable (default INFO) and
can be changed with `set_level`.

Usage:
    from shc.utils import get_logger
    LOG = get_logger("model.integrate")
    LOG.info("Integrating %d steps", 100000)
"""

import os
import sys
from datetime import datetime

LEVELS = {"DEBUG": 10, "INFO": 20, "WARNING": 30, "ERROR": 40}

_threshold = {
    "level": LEVELS.get(os.environ.get("SHC_LOG_LEVEL", "INFO").upper(),
                        LEVELS["INFO"]),
}


def set_level(level):
    """Set the minimum level printed by every SHC logger.

    Parameters
    ----------
    level : str
        One of DEBUG, INFO, WARNING, ERROR (case-insensitive).
    """
    key = str(level).upper()
    if key not in LEVELS:
        raise ValueError(
            f"Unknown log level {level!r}, expected one of {list(LEVELS)}"
        )
    _threshold["level"] = LEVELS[key]


def get_level():
    """Name of the current minimum level."""
    for name, value in LEVELS.items():
        if value == _threshold["level"]:
            return name
    return str(_threshold["level"])


def get_logger(name, out=None):
    """Create a print-based logger.

    Parameters
    ----------
    name : str
        Logger name, e.g. the module path below `shc`.
    out : file-like, optional
        Extra stream that receives the same lines (e.g., an open log file).

    Returns
    -------
    callable
        A log function with .debug, .info, .warning, .error methods.
    """
    tag = f"shc:{name}"

    def log(level, msg, args):
        if LEVELS[level] < _threshold["level"]:
            return
        try:
            text = msg % args if args else msg
        except TypeError:
            text = f"{msg} {args}"
        line = f"[{datetime.now():%H:%M:%S}] {tag} {level}: {text}"
        print(line, file=sys.stdout)
        if out is not None:
            print(line, file=out)

    log.debug = lambda msg, *args: log("DEBUG", msg, args)
    log.info = lambda msg, *args: log("INFO", msg, args)
    log.warning = lambda msg, *args: log("WARNING", msg, args)
    log.error = lambda msg, *args: log("ERROR", msg, args)

    return log
