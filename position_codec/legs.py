"""
Leg Codec — one strategy leg <-> one 48-bit word
=================================================

A leg is one component of a multi-leg option strategy (one side of a
strangle, one wing of a spread). Seven scalar fields share 48 bits; see
``bit_layout`` for the exact offsets.

Strike encoding (int24 stored as uint24):
  encode:  s < 0      →  s + 2^24
  decode:  e > 2^23   →  e − 2^24

The decode threshold is a strict ``>``: the boundary value 2^23 decodes
to +8388608, not −8388608. This matches the on-chain decoder and lies
outside the valid tick domain [−887272, 887272], so it is kept as is.

Packing uses shifted *addition* for width and strike, and OR for the
five small fields, exactly as the contract does. A field value wider
than its bit field therefore carries into the next field instead of
being truncated. ``encode_leg`` does not check ranges; use
``Leg.checked`` (or ``PositionBuilder``) to catch bad values early.
"""

from dataclasses import dataclass, astuple
from typing import Optional

from position_codec.bit_layout import (
    ASSET_STARTING_BIT,
    RATIO_STARTING_BIT,
    IS_LONG_STARTING_BIT,
    TOKEN_TYPE_STARTING_BIT,
    RISK_PARTNER_STARTING_BIT,
    STRIKE_STARTING_BIT,
    WIDTH_STARTING_BIT,
    LEG_MASKS,
    MAX_LEGS,
    MAX_RATIO,
    MAX_RISK_PARTNER,
    MAX_TICK,
    MAX_WIDTH,
    MIN_TICK,
    STRIKE_CONVERSION_FACTOR,
    STRIKE_SIGN_THRESHOLD,
    leg_offset,
)
from position_codec.errors import InvalidLegParameterError


# ── Strike Transform ────────────────────────────────────────────────────

def encode_strike(strike: int) -> int:
    """Bias a signed tick into the unsigned 24-bit strike field.

    >>> encode_strike(-1)
    16777215
    >>> encode_strike(100)
    100
    """
    if strike < 0:
        return STRIKE_CONVERSION_FACTOR + strike
    return strike


def decode_strike(encoded: int) -> int:
    """Inverse of ``encode_strike`` (strict ``> 2^23`` threshold).

    >>> decode_strike(16777215)
    -1
    >>> decode_strike(8388608)
    8388608
    """
    if encoded > STRIKE_SIGN_THRESHOLD:
        return encoded - STRIKE_CONVERSION_FACTOR
    return encoded


# ── Leg Data ─────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Leg:
    """
    One option leg and the slot (0..3) it occupies in a position id.

    Fields mirror the on-chain TokenId leg:
      - asset         → which pool token is the numeraire (0 or 1)
      - option_ratio  → number of contracts, 1..127 (0 marks an empty slot)
      - is_long       → 1 = long (buy), 0 = short (sell)
      - token_type    → which token is moved (0 or 1)
      - risk_partner  → slot of the partner leg (defaults to own slot)
      - strike        → signed center tick
      - width         → range width in tick-spacing units (0 = loan/credit)

    Construction does no validation so that any bit pattern can be
    represented; ``Leg.checked`` is the validating constructor.
    """

    strike: int
    width: int
    option_ratio: int
    asset: int = 0
    is_long: int = 0
    token_type: int = 0
    risk_partner: int = 0
    slot: int = 0

    @classmethod
    def checked(
        cls,
        strike: int,
        width: int,
        option_ratio: int,
        asset: int = 0,
        is_long: int = 0,
        token_type: int = 0,
        risk_partner: Optional[int] = None,
        slot: int = 0,
    ) -> "Leg":
        """Build a leg, rejecting any field its bit width cannot hold.

        ``risk_partner`` defaults to the leg's own slot.

        Raises:
            InvalidLegParameterError: naming the first offending field.
        """
        if risk_partner is None:
            risk_partner = slot
        is_long = int(is_long)

        if not 0 <= slot < MAX_LEGS:
            raise InvalidLegParameterError("slot", slot, f"must be 0..{MAX_LEGS - 1}")
        if not 1 <= option_ratio <= MAX_RATIO:
            raise InvalidLegParameterError(
                "option_ratio", option_ratio, f"must be 1..{MAX_RATIO}"
            )
        if not 0 <= width <= MAX_WIDTH:
            raise InvalidLegParameterError("width", width, f"must be 0..{MAX_WIDTH}")
        if not MIN_TICK <= strike <= MAX_TICK:
            raise InvalidLegParameterError(
                "strike", strike, f"must be {MIN_TICK}..{MAX_TICK}"
            )
        for name, value in (("asset", asset), ("is_long", is_long), ("token_type", token_type)):
            if value not in (0, 1):
                raise InvalidLegParameterError(name, value, "must be 0 or 1")
        if not 0 <= risk_partner <= MAX_RISK_PARTNER:
            raise InvalidLegParameterError(
                "risk_partner", risk_partner, f"must be 0..{MAX_RISK_PARTNER}"
            )

        return cls(
            strike=strike,
            width=width,
            option_ratio=option_ratio,
            asset=asset,
            is_long=is_long,
            token_type=token_type,
            risk_partner=risk_partner,
            slot=slot,
        )

    @property
    def is_call(self) -> bool:
        """A call moves the numeraire token (token_type == asset)."""
        return self.token_type == self.asset

    def __str__(self) -> str:
        return (
            f"Slot: {self.slot} | Width: {self.width} | OptionRatio: {self.option_ratio} "
            f"| Asset: {self.asset} | Strike: {self.strike} | IsLong?: {self.is_long} "
            f"| Token Type: {self.token_type} | Risk Partner: {self.risk_partner}"
        )


def legs_equal(a: Leg, b: Leg) -> bool:
    """Compare the seven wire fields, ignoring the slot."""
    return astuple(a)[:-1] == astuple(b)[:-1]


# ── Encode / Decode ──────────────────────────────────────────────────────


def encode_leg(leg: Leg, slot: Optional[int] = None) -> int:
    """Pack a leg into its 48-bit word, shifted to the absolute slot offset.

    Args:
        leg: The leg to pack. Fields are NOT range-checked.
        slot: Slot 0..3; defaults to ``leg.slot``.

    Returns:
        The leg's bits at offset ``64 + 48·slot``, ready to be added to a
        pool reference.
    """
    base = leg_offset(leg.slot if slot is None else slot)

    flags = (
        (leg.risk_partner << (base + RISK_PARTNER_STARTING_BIT))
        | (leg.token_type << (base + TOKEN_TYPE_STARTING_BIT))
        | (leg.is_long << (base + IS_LONG_STARTING_BIT))
        | (leg.option_ratio << (base + RATIO_STARTING_BIT))
        | (leg.asset << (base + ASSET_STARTING_BIT))
    )

    return (
        (leg.width << (base + WIDTH_STARTING_BIT))
        + (encode_strike(leg.strike) << (base + STRIKE_STARTING_BIT))
        + flags
    )


def _field(word: int, start: int, name: str) -> int:
    return (word >> start) & LEG_MASKS[name]


def decode_leg(word: int, slot: int = 0) -> Leg:
    """Unpack a 48-bit leg word (already shifted down to bit 0).

    Args:
        word: The leg word; bits above 47 are ignored.
        slot: Slot to record on the returned leg.
    """
    return Leg(
        strike=decode_strike(_field(word, STRIKE_STARTING_BIT, "strike")),
        width=_field(word, WIDTH_STARTING_BIT, "width"),
        option_ratio=_field(word, RATIO_STARTING_BIT, "option_ratio"),
        asset=_field(word, ASSET_STARTING_BIT, "asset"),
        is_long=_field(word, IS_LONG_STARTING_BIT, "is_long"),
        token_type=_field(word, TOKEN_TYPE_STARTING_BIT, "token_type"),
        risk_partner=_field(word, RISK_PARTNER_STARTING_BIT, "risk_partner"),
        slot=slot,
    )
