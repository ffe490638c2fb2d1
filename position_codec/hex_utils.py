"""
Hex Helpers — prefix handling, padding, byte extraction
=======================================================

Presentation-side helpers for ``0x``-prefixed hex strings. Every helper
that takes a string insists on the ``0x`` prefix and raises
``FormatError`` without it, so a decimal string is never silently read
as hex.
"""

from typing import Union

from position_codec.errors import FormatError

HEX_PREFIX = "0x"


def strip_hex_prefix(hex_str: str) -> str:
    """Return the digit portion of a ``0x``-prefixed string.

    >>> strip_hex_prefix('0xabc')
    'abc'
    """
    if not hex_str.startswith(HEX_PREFIX):
        raise FormatError(f"Expected a 0x-prefixed hex string, got {hex_str!r}")
    return hex_str[len(HEX_PREFIX):]


def pad_hex(hex_str: str, length: int) -> str:
    """Left-pad a hex string with zeros to ``length`` characters including ``0x``.

    Never truncates: an input already at or beyond the target length is
    returned unchanged.

    >>> pad_hex('0x1', 4)
    '0x01'
    >>> pad_hex('0xabc', 8)
    '0x000abc'
    """
    digits = strip_hex_prefix(hex_str)
    return HEX_PREFIX + digits.rjust(length - len(HEX_PREFIX), "0")


def to_hex(value: int, digits: int) -> str:
    """Render a non-negative int as ``0x`` + at least ``digits`` hex digits.

    >>> to_hex(255, 4)
    '0x00ff'
    """
    return pad_hex(HEX_PREFIX + format(value, "x"), digits + len(HEX_PREFIX))


def hex_to_bytes(value: Union[str, bytes], expected_len: int) -> bytes:
    """Decode a ``0x`` hex string (or pass through raw bytes) of a fixed length.

    Args:
        value: ``0x``-prefixed hex string, or raw bytes.
        expected_len: Required length in bytes (20 for an address, 32 for bytes32).

    Raises:
        FormatError: Missing prefix, non-hex digits, or wrong length.
    """
    if isinstance(value, (bytes, bytearray)):
        raw = bytes(value)
    else:
        digits = strip_hex_prefix(value)
        try:
            raw = bytes.fromhex(digits)
        except ValueError:
            raise FormatError(f"Not a valid hex string: {value!r}") from None
    if len(raw) != expected_len:
        raise FormatError(
            f"Expected {expected_len} bytes, got {len(raw)}: {value!r}"
        )
    return raw


def parse_uint(text: str) -> int:
    """Parse a CLI integer given either in decimal or as ``0x`` hex.

    Decimal input is always base 10, so leading zeros are allowed.

    >>> parse_uint('0x10')
    16
    >>> parse_uint('010')
    10
    """
    text = text.strip()
    if text.lower().startswith(HEX_PREFIX):
        try:
            return int(strip_hex_prefix(text.lower()), 16)
        except ValueError:
            raise FormatError(f"Not a valid hex integer: {text!r}") from None
    if not (text.isascii() and text.isdigit()):
        raise FormatError(f"Expected a decimal or 0x-hex integer, got {text!r}")
    return int(text, 10)


def parse_int(text: str) -> int:
    """Signed variant of ``parse_uint`` (one leading ``-`` allowed).

    >>> parse_int('-0x10')
    -16
    >>> parse_int('-007')
    -7
    """
    text = text.strip()
    if text.startswith("-"):
        return -parse_uint(text[1:])
    return parse_uint(text)
