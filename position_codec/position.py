"""
Position Codec — pool reference + up to four legs <-> uint256
==============================================================

  encode:  id = poolReference + Σ encode_leg(leg, leg.slot)
  decode:  poolId = low 64 bits (0x + 16 hex digits)
           legs   = slots 0..3 whose optionRatio > 0, re-indexed 0..n-1

Legs may be supplied in any order; their slot decides where they land.
Two legs claiming the same slot are summed into one corrupted word. That
is the caller's responsibility, exactly as on-chain; ``PositionBuilder``
assigns slots for you.

Python ints are arbitrary precision, so the full 256-bit arithmetic is
exact. Never route a position id through ``float``.
"""

from dataclasses import dataclass, replace
from typing import Iterable, Optional, Tuple

from position_codec.bit_layout import LEG_MASK, MAX_LEGS, leg_offset
from position_codec.legs import Leg, decode_leg, encode_leg
from position_codec.pool_reference import decode_pool_id


@dataclass(frozen=True)
class Position:
    """A decoded position: pool id (hex) and its active legs in slot order."""

    pool_id: str
    legs: Tuple[Leg, ...] = ()

    @property
    def leg_count(self) -> int:
        return len(self.legs)


# ── Encoding ─────────────────────────────────────────────────────────────


def add_leg(position_id: int, leg: Leg) -> int:
    """Add one leg onto an existing id (a bare pool reference works too)."""
    return position_id + encode_leg(leg, leg.slot)


def encode_position(pool_reference: int, legs: Iterable[Leg]) -> int:
    """Assemble a position id from a 64-bit pool reference and its legs.

    Args:
        pool_reference: Output of ``encode_from_address`` / ``encode_from_pool_key``.
        legs: Up to four legs, each carrying its own slot; order is irrelevant.

    Returns:
        The 256-bit position id.
    """
    position_id = pool_reference
    for leg in legs:
        position_id = add_leg(position_id, leg)
    return position_id


# ── Decoding ─────────────────────────────────────────────────────────────


def slot_word(position_id: int, slot: int) -> int:
    """The raw 48-bit leg word stored in ``slot``."""
    return (position_id >> leg_offset(slot)) & LEG_MASK


def decode_slots(position_id: int) -> Tuple[Optional[Leg], ...]:
    """Decode all four slots; an empty slot (optionRatio 0) is ``None``.

    Legs keep their original slot number.
    """
    slots = []
    for slot in range(MAX_LEGS):
        leg = decode_leg(slot_word(position_id, slot), slot)
        slots.append(leg if leg.option_ratio > 0 else None)
    return tuple(slots)


def decode_position(position_id: int) -> Position:
    """Split a position id into its pool id and active legs.

    Empty slots are dropped and the remaining legs are re-numbered
    0, 1, … in their original slot order, so a position with legs in
    slots 0 and 2 decodes to legs with slots 0 and 1.
    """
    active = [leg for leg in decode_slots(position_id) if leg is not None]
    return Position(
        pool_id=decode_pool_id(position_id),
        legs=tuple(replace(leg, slot=i) for i, leg in enumerate(active)),
    )


def count_legs(position_id: int) -> int:
    """Number of slots with optionRatio > 0."""
    return sum(1 for leg in decode_slots(position_id) if leg is not None)
