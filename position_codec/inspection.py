"""
Position Inspection — decoded view and strategy predicates
===========================================================

Read-only helpers built on the codec. Unlike ``decode_position``, legs
here keep their ORIGINAL slot, because risk partners refer to slots and
``is_spread`` must compare the two.

Tick bounds (width is in tick-spacing units):
  tickLower = strike − (width · tickSpacing) // 2
  tickUpper = strike + (width · tickSpacing) // 2

Loans and credits are legs with width 0:
  • loan   — width 0, short (borrows liquidity at the strike)
  • credit — width 0, long  (lends liquidity at the strike)
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple

from position_codec.legs import Leg
from position_codec.pool_reference import (
    decode_pool_id,
    decode_tick_spacing,
    decode_vegoid,
)
from position_codec.position import decode_slots


@dataclass(frozen=True)
class InspectedLeg:
    """A leg at its original slot, with its tick range resolved."""

    leg: Leg
    tick_lower: int
    tick_upper: int


@dataclass(frozen=True)
class DecodedTokenId:
    token_id: int
    pool_id: str
    vegoid: int
    tick_spacing: int
    legs: Tuple[InspectedLeg, ...]

    @property
    def leg_count(self) -> int:
        return len(self.legs)


def tick_bounds(leg: Leg, tick_spacing: int) -> Tuple[int, int]:
    """(tickLower, tickUpper) for a leg in a pool with ``tick_spacing``."""
    half_width = (leg.width * tick_spacing) // 2
    return leg.strike - half_width, leg.strike + half_width


def active_legs(position_id: int) -> List[Leg]:
    """Active legs in slot order, each keeping its original slot."""
    return [leg for leg in decode_slots(position_id) if leg is not None]


def decode_token_id(position_id: int) -> DecodedTokenId:
    """Decode every part of a position id into one structured view."""
    tick_spacing = decode_tick_spacing(position_id)
    legs = tuple(
        InspectedLeg(leg, *tick_bounds(leg, tick_spacing))
        for leg in active_legs(position_id)
    )
    return DecodedTokenId(
        token_id=position_id,
        pool_id=decode_pool_id(position_id),
        vegoid=decode_vegoid(position_id),
        tick_spacing=tick_spacing,
        legs=legs,
    )


# ── Leg Predicates ───────────────────────────────────────────────────────


def is_loan_leg(leg: Leg) -> bool:
    return leg.width == 0 and not leg.is_long


def is_credit_leg(leg: Leg) -> bool:
    return leg.width == 0 and bool(leg.is_long)


# ── Position Predicates ──────────────────────────────────────────────────


def has_long_leg(position_id: int) -> bool:
    return any(leg.is_long for leg in active_legs(position_id))


def is_short_only(position_id: int) -> bool:
    """True if the position has legs and none of them is long."""
    legs = active_legs(position_id)
    return len(legs) > 0 and not any(leg.is_long for leg in legs)


def is_spread(position_id: int) -> bool:
    """True if any leg is risk-partnered with a different slot."""
    return any(leg.risk_partner != leg.slot for leg in active_legs(position_id))


def get_asset_index(position_id: int) -> Optional[int]:
    """Asset of the first active leg, or ``None`` for an empty position."""
    legs = active_legs(position_id)
    return legs[0].asset if legs else None


def has_loan_leg(position_id: int) -> bool:
    return any(is_loan_leg(leg) for leg in active_legs(position_id))


def has_credit_leg(position_id: int) -> bool:
    return any(is_credit_leg(leg) for leg in active_legs(position_id))


def is_loan(position_id: int) -> bool:
    """True if every leg is a loan (and there is at least one)."""
    legs = active_legs(position_id)
    return len(legs) > 0 and all(is_loan_leg(leg) for leg in legs)


def is_credit(position_id: int) -> bool:
    """True if every leg is a credit (and there is at least one)."""
    legs = active_legs(position_id)
    return len(legs) > 0 and all(is_credit_leg(leg) for leg in legs)


def has_loan_or_credit(position_id: int) -> bool:
    return any(leg.width == 0 for leg in active_legs(position_id))
