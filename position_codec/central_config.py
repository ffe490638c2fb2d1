"""
Project Configuration — version, protocol defaults, standard widths
====================================================================

Single source of truth for the codec's tunable protocol parameters.

The vegoid is a protocol-defined tuning byte embedded in every pool
reference. It is a configuration default, not a constant: callers may
pass their own value per call, and the environment variable
``POSITION_CODEC_VEGOID`` overrides the default at import time.
"""

import os
import re
from dataclasses import dataclass
from importlib.metadata import version, PackageNotFoundError
from pathlib import Path
from types import MappingProxyType
from typing import Optional

from position_codec.hex_utils import parse_uint

# Version — single source of truth is pyproject.toml
try:
    PROJECT_VERSION = version("position-codec")
except PackageNotFoundError:
    # Source checkout: not installed, read pyproject.toml
    _toml = Path(__file__).resolve().parent.parent / "pyproject.toml"
    _m = (
        re.search(r'version\s*=\s*"([^"]+)"', _toml.read_text())
        if _toml.exists()
        else None
    )
    PROJECT_VERSION = _m.group(1) if _m else "0.0.0-dev"
PROJECT_NAME = "Position Codec"

VEGOID_ENV_VAR = "POSITION_CODEC_VEGOID"
DEFAULT_VEGOID = 4


def _vegoid_from_env() -> int:
    raw = os.environ.get(VEGOID_ENV_VAR, "").strip()
    if not raw:
        return DEFAULT_VEGOID
    try:
        return parse_uint(raw)
    except ValueError:
        raise ValueError(
            f"{VEGOID_ENV_VAR} must be an integer, got {raw!r}"
        ) from None


@dataclass(frozen=True)
class CodecConfig:
    """Protocol parameters used when a caller does not supply their own."""

    # Vegoid written into bits 40..47 of every pool reference
    vegoid: int = DEFAULT_VEGOID

    # Position width in ticks per expiry profile (width = tickUpper - tickLower)
    STANDARD_TICK_WIDTHS = MappingProxyType(
        {
            "1H": 240,  # 1-hour gamma profile
            "1D": 720,  # 1-day
            "1W": 2400,  # 1-week
            "1M": 4800,  # 1-month
            "1Y": 15000,  # 1-year
        }
    )

    def resolve_vegoid(self, vegoid: Optional[int] = None) -> int:
        """Return ``vegoid`` if given, otherwise the configured default."""
        return self.vegoid if vegoid is None else vegoid

    @classmethod
    def tick_width(cls, timescale: str) -> int:
        """Standard width for a timescale key such as ``"1D"``."""
        try:
            return cls.STANDARD_TICK_WIDTHS[timescale.upper()]
        except KeyError:
            raise ValueError(
                f"Unknown timescale: {timescale}. "
                f"Available: {list(cls.STANDARD_TICK_WIDTHS.keys())}"
            ) from None


# Global instance
config = CodecConfig(vegoid=_vegoid_from_env())
