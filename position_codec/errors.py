"""
Codec Errors
============

Both errors subclass ``ValueError`` so callers that already guard
against bad input with ``except ValueError`` keep working.

  • FormatError              — a hex string is missing its ``0x`` prefix
  • InvalidLegParameterError — the checked builder rejected a leg field

The raw encode/decode functions never raise: wrap-around and cross-field
overflow are part of the on-chain format.
"""

from typing import Any


class FormatError(ValueError):
    """Input string is not a ``0x``-prefixed hex string."""


class InvalidLegParameterError(ValueError):
    """A leg parameter is outside the range its bit field can hold."""

    def __init__(self, parameter: str, value: Any = None, reason: str = ""):
        self.parameter = parameter
        self.value = value
        msg = f"Invalid leg parameter '{parameter}'"
        if value is not None:
            msg += f": {value!r}"
        if reason:
            msg += f" ({reason})"
        super().__init__(msg)
