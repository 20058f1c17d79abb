import logging
import re
import sys
from datetime import timedelta

# Unit sizes in nanoseconds.
_DURATION_UNITS = {
    "ns": 1,
    "us": 1_000,
    "µs": 1_000,
    "μs": 1_000,
    "ms": 1_000_000,
    "s": 1_000_000_000,
    "m": 60 * 1_000_000_000,
    "h": 3600 * 1_000_000_000,
}

# Largest duration Go can represent, roughly 2562047h.
MAX_DURATION_NANOS = 2**63 - 1

_DURATION_PART = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|μs|ms|s|m|h)")


def setup_logging(name: str = "poolconfig", level: int = logging.DEBUG) -> logging.Logger:
    """Configures and returns a logger with standard formatting."""
    logger = logging.getLogger(name)
    logger.setLevel(level)

    # Check if handler already exists to avoid duplication
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setLevel(level)
        formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    else:
        for handler in logger.handlers:
            handler.setLevel(level)

    return logger


def parse_duration_nanos(text: str) -> int:
    """
    Parses a Go-style duration string such as "90s", "1m30s" or "1.5h"
    into whole nanoseconds.

    A bare "0" is accepted; any other number needs a unit.
    """
    s = text.strip()
    if not s:
        raise ValueError("empty duration")

    sign = 1
    if s[0] in "+-":
        if s[0] == "-":
            sign = -1
        s = s[1:]

    if s == "0":
        return 0

    total = 0
    pos = 0
    while pos < len(s):
        match = _DURATION_PART.match(s, pos)
        if not match:
            raise ValueError(f"invalid duration {text!r}")
        whole, _, fraction = match.group(1).partition(".")
        unit = _DURATION_UNITS[match.group(2)]
        total += int(whole or "0") * unit
        if fraction:
            total += int(fraction) * unit // 10 ** len(fraction)
        if total > MAX_DURATION_NANOS:
            raise ValueError(f"invalid duration {text!r}, out of range")
        pos = match.end()

    return sign * total


def parse_duration(text: str) -> timedelta:
    """Like parse_duration_nanos, truncated to timedelta's microseconds."""
    nanos = parse_duration_nanos(text)
    sign = -1 if nanos < 0 else 1
    return timedelta(microseconds=sign * (abs(nanos) // 1000))
