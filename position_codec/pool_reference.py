"""
Pool Reference Codec — 64-bit pool id
=====================================

The low 64 bits of every position id identify the pool:

  [16-bit tickSpacing][8-bit vegoid][40-bit address pattern]

Two addressing schemes feed the 40-bit pattern:
  • V3 — first 5 bytes of the 20-byte pool contract address
  • V4 — last 5 bytes of the 32-byte pool key hash (PoolId)

In both cases the 5 bytes are reversed and then packed little-endian,
which lands them in the low 40 bits in their original big-endian order:
address 0x88e6a0c2dd… gives pattern 0x88e6a0c2dd.

Only those 10 hex digits are read. The rest of the string is never
length-checked, so the encoders accept whatever the upstream tooling
renders. Input errors are limited to a missing ``0x`` prefix or
non-hex pattern digits.

vegoid and tickSpacing are reduced mod 256 / mod 65536. Out-of-range
values wrap silently, matching the consuming contract; vegoid = 255 and
wrapped spacings occur in real data and must not be rejected.
"""

from dataclasses import dataclass
from typing import Optional, Union

from position_codec.bit_layout import (
    ADDRESS_PATTERN_BYTES,
    ADDRESS_PATTERN_MASK,
    POOL_ID_HEX,
    POOL_ID_MASK,
    POOL_KEY_BYTES,
    TICK_SPACING_MODULUS,
    TICK_SPACING_STARTING_BIT,
    VEGOID_MODULUS,
    VEGOID_STARTING_BIT,
)
from position_codec.central_config import config
from position_codec.errors import FormatError
from position_codec.hex_utils import (
    HEX_PREFIX,
    hex_to_bytes,
    pad_hex,
    strip_hex_prefix,
    to_hex,
)

HexOrBytes = Union[str, bytes]

PATTERN_DIGITS = ADDRESS_PATTERN_BYTES * 2   # 10 hex digits


# ── Encoding ─────────────────────────────────────────────────────────────


def _pack(pattern: int, tick_spacing: int, vegoid: Optional[int]) -> int:
    """Pack the 40-bit pattern value plus vegoid and tickSpacing."""
    pool_id = pattern & ADDRESS_PATTERN_MASK
    pool_id |= (config.resolve_vegoid(vegoid) % VEGOID_MODULUS) << VEGOID_STARTING_BIT
    pool_id |= (tick_spacing % TICK_SPACING_MODULUS) << TICK_SPACING_STARTING_BIT
    return pool_id


def _pattern_value(digits: str, source: str) -> int:
    if digits.strip("0123456789abcdef"):
        raise FormatError(f"Not a valid hex string: {source!r}")
    return int(digits, 16) if digits else 0


def encode_from_address(
    address: HexOrBytes, tick_spacing: int, vegoid: Optional[int] = None
) -> int:
    """Encode a pool reference from a V3 pool address.

    Only the first 5 bytes (10 hex digits) are read; the rest of the
    address is never inspected.

    Args:
        address: Pool address (``0x`` hex or raw bytes). Case is ignored.
        tick_spacing: Pool tick spacing; wraps mod 65536.
        vegoid: Vegoid byte; wraps mod 256. ``None`` uses ``config.vegoid``.

    Returns:
        The pool reference in [0, 2^64).

    Raises:
        FormatError: The string lacks its ``0x`` prefix or the pattern
            digits are not hex.

    >>> hex(encode_from_address('0x88e6a0c2ddd26feeb64f039a2c41296fcb3f5640', 60, 4))
    '0x3c0488e6a0c2dd'
    """
    if isinstance(address, (bytes, bytearray)):
        pattern = int.from_bytes(address[:ADDRESS_PATTERN_BYTES], "big")
    else:
        digits = strip_hex_prefix(address.lower())
        pattern = _pattern_value(digits[:PATTERN_DIGITS], address)
    return _pack(pattern, tick_spacing, vegoid)


def encode_from_pool_key(
    pool_key_hash: HexOrBytes, tick_spacing: int, vegoid: Optional[int] = None
) -> int:
    """Encode a pool reference from a V4 pool key hash (bytes32 PoolId).

    The pattern is the LAST 5 bytes. The hex form is left-padded to 32
    bytes first, so an id rendered without its leading zeros (``hex(n)``)
    encodes the same as the full-width string.

    >>> hex(encode_from_pool_key('0x1122334455', 60, 4))
    '0x3c041122334455'
    """
    if isinstance(pool_key_hash, (bytes, bytearray)):
        pattern = int.from_bytes(pool_key_hash[-ADDRESS_PATTERN_BYTES:], "big")
    else:
        padded = pad_hex(pool_key_hash.lower(), len(HEX_PREFIX) + 2 * POOL_KEY_BYTES)
        pattern = _pattern_value(strip_hex_prefix(padded)[-PATTERN_DIGITS:], pool_key_hash)
    return _pack(pattern, tick_spacing, vegoid)


# ── Decoding ─────────────────────────────────────────────────────────────
# Every decoder accepts a bare pool reference or a full 256-bit position id.


def decode_vegoid(value: int) -> int:
    """Vegoid (bits 40..47) of a pool reference or position id."""
    return ((value & POOL_ID_MASK) >> VEGOID_STARTING_BIT) % VEGOID_MODULUS


def decode_tick_spacing(value: int) -> int:
    """Tick spacing (bits 48..63) of a pool reference or position id."""
    return (value & POOL_ID_MASK) >> TICK_SPACING_STARTING_BIT


def decode_pool_id(value: int) -> str:
    """Low 64 bits as ``0x`` + 16 zero-padded hex digits."""
    return to_hex(value & POOL_ID_MASK, POOL_ID_HEX)


def decode_address_pattern(value: int) -> str:
    """The 5 pattern bytes in their original (address) order, as ``0x`` hex.

    For a V3 pool this equals the first 10 hex digits of the address.
    """
    pattern = (value & ADDRESS_PATTERN_MASK).to_bytes(ADDRESS_PATTERN_BYTES, "big")
    return "0x" + pattern.hex()


def validate_pool_id(position_id: int, expected_pool_id: int) -> bool:
    """True if ``position_id`` belongs to the pool ``expected_pool_id``."""
    return (position_id & POOL_ID_MASK) == expected_pool_id


# ── Structured View ──────────────────────────────────────────────────────


@dataclass(frozen=True)
class PoolReference:
    """Decoded fields of a 64-bit pool reference."""

    address_pattern: str  # 0x + 10 hex digits, original byte order
    vegoid: int
    tick_spacing: int

    @classmethod
    def from_value(cls, value: int) -> "PoolReference":
        """Split a pool reference (or position id) into its three fields."""
        return cls(
            address_pattern=decode_address_pattern(value),
            vegoid=decode_vegoid(value),
            tick_spacing=decode_tick_spacing(value),
        )

    @property
    def value(self) -> int:
        """Re-pack into the 64-bit integer."""
        pattern = hex_to_bytes(self.address_pattern, ADDRESS_PATTERN_BYTES)
        return _pack(int.from_bytes(pattern, "big"), self.tick_spacing, self.vegoid)

    @property
    def hex(self) -> str:
        return decode_pool_id(self.value)
