"""
Position Builder — checked, fluent construction of position ids
================================================================

The raw codec trusts its input. The builder is the public entry point
that validates every field against its bit width before packing and
assigns slots 0..3 in the order legs are added.

Usage:
    position_id = (
        PositionBuilder.from_address("0x88e6…5640", tick_spacing=60)
        .add_call(strike=100, width=10)
        .add_put(strike=-100, width=10)
        .build()
    )

Calls and puts:
  • call — token_type == asset
  • put  — token_type != asset
"""

from typing import List, Optional

from position_codec.bit_layout import MAX_LEGS
from position_codec.errors import InvalidLegParameterError
from position_codec.legs import Leg
from position_codec.pool_reference import (
    HexOrBytes,
    encode_from_address,
    encode_from_pool_key,
)
from position_codec.position import encode_position


class PositionBuilder:
    """
    Accumulates validated legs on top of a fixed pool reference.

    The builder itself is mutable; ``build()`` returns a plain int and
    never changes afterwards.
    """

    def __init__(self, pool_reference: int):
        self.pool_reference = pool_reference
        self._legs: List[Leg] = []

    @classmethod
    def from_address(
        cls, address: HexOrBytes, tick_spacing: int, vegoid: Optional[int] = None
    ) -> "PositionBuilder":
        """Builder for a V3 pool address."""
        return cls(encode_from_address(address, tick_spacing, vegoid))

    @classmethod
    def from_pool_key(
        cls, pool_key_hash: HexOrBytes, tick_spacing: int, vegoid: Optional[int] = None
    ) -> "PositionBuilder":
        """Builder for a V4 pool key hash."""
        return cls(encode_from_pool_key(pool_key_hash, tick_spacing, vegoid))

    # ── Legs ─────────────────────────────────────────────────────────

    @property
    def legs(self) -> List[Leg]:
        return list(self._legs)

    def add_leg(
        self,
        asset: int,
        option_ratio: int,
        is_long: bool,
        token_type: int,
        strike: int,
        width: int,
        risk_partner: Optional[int] = None,
    ) -> "PositionBuilder":
        """Add a leg in the next free slot.

        Raises:
            InvalidLegParameterError: A field is out of range, or all four
                slots are already used (parameter ``"slot"``).
        """
        slot = len(self._legs)
        if slot >= MAX_LEGS:
            raise InvalidLegParameterError("slot", slot, f"at most {MAX_LEGS} legs")

        self._legs.append(
            Leg.checked(
                strike=strike,
                width=width,
                option_ratio=option_ratio,
                asset=asset,
                is_long=is_long,
                token_type=token_type,
                risk_partner=risk_partner,
                slot=slot,
            )
        )
        return self

    def add_call(
        self,
        strike: int,
        width: int,
        option_ratio: int = 1,
        is_long: bool = False,
        asset: int = 0,
        risk_partner: Optional[int] = None,
    ) -> "PositionBuilder":
        """Add a call (token_type = asset)."""
        return self.add_leg(
            asset=asset,
            option_ratio=option_ratio,
            is_long=is_long,
            token_type=asset,
            strike=strike,
            width=width,
            risk_partner=risk_partner,
        )

    def add_put(
        self,
        strike: int,
        width: int,
        option_ratio: int = 1,
        is_long: bool = False,
        asset: int = 0,
        risk_partner: Optional[int] = None,
    ) -> "PositionBuilder":
        """Add a put (token_type = 1 − asset)."""
        return self.add_leg(
            asset=asset,
            option_ratio=option_ratio,
            is_long=is_long,
            token_type=1 - asset if asset in (0, 1) else asset,
            strike=strike,
            width=width,
            risk_partner=risk_partner,
        )

    def add_loan(
        self,
        token_type: int,
        strike: int,
        asset: int = 0,
        option_ratio: int = 1,
        risk_partner: Optional[int] = None,
    ) -> "PositionBuilder":
        """Borrow liquidity at ``strike`` (width 0, short)."""
        return self.add_leg(
            asset=asset,
            option_ratio=option_ratio,
            is_long=False,
            token_type=token_type,
            strike=strike,
            width=0,
            risk_partner=risk_partner,
        )

    def add_credit(
        self,
        token_type: int,
        strike: int,
        asset: int = 0,
        option_ratio: int = 1,
        risk_partner: Optional[int] = None,
    ) -> "PositionBuilder":
        """Lend liquidity at ``strike`` (width 0, long)."""
        return self.add_leg(
            asset=asset,
            option_ratio=option_ratio,
            is_long=True,
            token_type=token_type,
            strike=strike,
            width=0,
            risk_partner=risk_partner,
        )

    # ── Result ───────────────────────────────────────────────────────

    def leg_count(self) -> int:
        return len(self._legs)

    def reset(self) -> "PositionBuilder":
        """Drop all legs, keeping the pool reference."""
        self._legs.clear()
        return self

    def build(self) -> int:
        """Return the position id.

        Raises:
            InvalidLegParameterError: No legs were added (parameter ``"legs"``).
        """
        if not self._legs:
            raise InvalidLegParameterError("legs", reason="a position needs at least one leg")
        return encode_position(self.pool_reference, self._legs)
