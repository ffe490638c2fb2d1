"""
Position Codec — Command Implementations
=========================================

All CLI command handlers live here, keeping run.py as a thin
argparse dispatcher. Each public function corresponds to a
subcommand (info, pool, encode, decode, check).

Commands print human-readable output; input errors surface as
``ValueError`` (``FormatError`` / ``InvalidLegParameterError``) and are
reported by run.py.
"""

from __future__ import annotations

from position_codec.bit_layout import (
    ADDRESS_BYTES,
    LEG_FIELDS,
    MAX_TICK,
    MIN_TICK,
    POOL_KEY_BYTES,
    leg_offset,
)
from position_codec.builder import PositionBuilder
from position_codec.central_config import PROJECT_NAME, PROJECT_VERSION, config
from position_codec.errors import FormatError, InvalidLegParameterError
from position_codec.hex_utils import parse_int, parse_uint, strip_hex_prefix
from position_codec.inspection import (
    decode_token_id,
    get_asset_index,
    has_loan_or_credit,
    has_long_leg,
    is_short_only,
    is_spread,
)
from position_codec.legs import Leg, decode_strike, encode_strike
from position_codec.pool_reference import (
    PoolReference,
    decode_pool_id,
    decode_tick_spacing,
    decode_vegoid,
    encode_from_address,
    encode_from_pool_key,
)
from position_codec.position import decode_position, encode_position

# --leg key aliases → Leg field names
LEG_KEY_ALIASES = {
    "strike": "strike",
    "width": "width",
    "ratio": "option_ratio",
    "option_ratio": "option_ratio",
    "asset": "asset",
    "long": "is_long",
    "is_long": "is_long",
    "type": "token_type",
    "token_type": "token_type",
    "partner": "risk_partner",
    "risk_partner": "risk_partner",
    "slot": "slot",
}


# ── Parsing Helpers ──────────────────────────────────────────────────────


def parse_leg_fields(spec: str) -> dict:
    """Parse ``strike=100,width=10,ratio=1,...`` into Leg field names.

    Values are decimal (leading zeros allowed) or ``0x`` hex, optionally
    negative. ``strike``, ``width`` and ``ratio`` are required.
    """
    fields: dict[str, int] = {}
    for part in spec.split(","):
        part = part.strip()
        if not part:
            continue
        key, sep, raw = part.partition("=")
        key = key.strip().lower()
        if not sep or key not in LEG_KEY_ALIASES:
            raise FormatError(
                f"Bad leg field {part!r}. Use key=value with keys: "
                f"{', '.join(sorted(LEG_KEY_ALIASES))}"
            )
        try:
            fields[LEG_KEY_ALIASES[key]] = parse_int(raw)
        except FormatError:
            raise FormatError(f"Leg field {key!r} must be an integer, got {raw!r}") from None

    for required in ("strike", "width", "option_ratio"):
        if required not in fields:
            raise InvalidLegParameterError(required, reason="missing from --leg")
    return fields


def parse_leg_spec(spec: str, default_slot: int) -> Leg:
    """Parse a ``--leg`` spec into a checked Leg.

    ``slot`` defaults to ``default_slot``; ``partner`` defaults to the slot.
    """
    fields = parse_leg_fields(spec)
    fields.setdefault("slot", default_slot)
    return Leg.checked(**fields)


def _is_address(pool: str) -> bool:
    digits = strip_hex_prefix(pool.strip().lower())
    if len(digits) == 2 * ADDRESS_BYTES:
        return True
    if len(digits) <= 2 * POOL_KEY_BYTES:
        return False
    raise FormatError(
        f"Expected a 20-byte address (40 hex digits) or a pool key "
        f"(up to 64 hex digits), got {len(digits)} digits"
    )


def resolve_pool_reference(pool: str, tick_spacing: int, vegoid: int | None) -> int:
    """Encode a pool reference from a 20-byte address or a pool key hash.

    Exactly 40 digits is an address; anything else up to 64 digits is a
    pool key (possibly rendered without its leading zeros).
    """
    if _is_address(pool):
        return encode_from_address(pool.strip(), tick_spacing, vegoid)
    return encode_from_pool_key(pool.strip(), tick_spacing, vegoid)


def resolve_builder(
    pool: str, tick_spacing: int | None = None, vegoid: int | None = None
) -> PositionBuilder:
    """Builder for ``--pool``.

    Without ``tick_spacing`` the pool is an already encoded reference
    (decimal or hex); with it, an address or pool key to encode.
    """
    if tick_spacing is None:
        return PositionBuilder(parse_uint(pool))
    if _is_address(pool):
        return PositionBuilder.from_address(pool.strip(), tick_spacing, vegoid)
    return PositionBuilder.from_pool_key(pool.strip(), tick_spacing, vegoid)


def _print_pool(value: int) -> None:
    ref = PoolReference.from_value(value)
    print(f"  🏊 Pool ID      : {decode_pool_id(value)}")
    print(f"  🔑 Pattern      : {ref.address_pattern}")
    print(f"  🧬 Vegoid       : {ref.vegoid}")
    print(f"  📏 Tick spacing : {ref.tick_spacing}")


# ── Commands ─────────────────────────────────────────────────────────────


def cmd_info() -> None:
    """Display version, bit layout and active defaults."""
    print(f"\n📊 {PROJECT_NAME} v{PROJECT_VERSION}")
    print("=" * 55)
    print("🧩 Position id : uint256 = pool reference (64 bits) + 4 × leg (48 bits)")
    print(f"🧬 Vegoid      : {config.vegoid} (default, override with --vegoid)")
    print(f"🎯 Strike      : ticks {MIN_TICK}..{MAX_TICK}, int24 bias-encoded")
    print()
    print("📐 Pool reference:")
    print("   bits  0..39   address pattern (5 bytes)")
    print("   bits 40..47   vegoid")
    print("   bits 48..63   tick spacing")
    print()
    print("📐 Leg word (48 bits):")
    for name, (start, size) in LEG_FIELDS.items():
        end = start + size - 1
        bits = f"{start}" if size == 1 else f"{start}..{end}"
        print(f"   {bits:<8} {name:<13} ({size} bit{'s' if size > 1 else ''})")
    print()
    print("📏 Standard tick widths:")
    for scale, width in config.STANDARD_TICK_WIDTHS.items():
        print(f"   {scale:<3} {width:>6} ticks")
    print()
    print("🔗 Quick Start:")
    print("   python run.py pool   0x88e6A0c2dDD26FEEb64F039a2c41296FcB3f5640 --tick-spacing 60")
    print("   python run.py encode --pool 0x3c0488e6a0c2dd --leg strike=100,width=10,ratio=1")
    print("   python run.py decode <position-id>")
    print("   python run.py check")


def cmd_pool(pool: str, tick_spacing: int, vegoid: int | None = None) -> int:
    """Encode and display a pool reference."""
    value = resolve_pool_reference(pool, tick_spacing, vegoid)
    print(f"\n🏊 Pool Reference — {value}")
    print("=" * 55)
    _print_pool(value)
    return value


def cmd_encode(
    pool: str,
    leg_specs: list[str],
    tick_spacing: int | None = None,
    vegoid: int | None = None,
) -> int:
    """Assemble a position id from ``--pool`` and ``--leg`` specs.

    Legs fill slots 0..3 in the order given through ``PositionBuilder``.
    If any spec names an explicit ``slot``, every leg is placed where
    its spec says (unnamed ones at their position in the list).
    """
    builder = resolve_builder(pool, tick_spacing, vegoid)
    specs = [parse_leg_fields(spec) for spec in leg_specs]

    if any("slot" in fields for fields in specs):
        legs = [Leg.checked(**{"slot": i, **fields}) for i, fields in enumerate(specs)]
        position_id = encode_position(builder.pool_reference, legs)
    else:
        for fields in specs:
            builder.add_leg(
                asset=fields.get("asset", 0),
                option_ratio=fields["option_ratio"],
                is_long=fields.get("is_long", 0),
                token_type=fields.get("token_type", 0),
                strike=fields["strike"],
                width=fields["width"],
                risk_partner=fields.get("risk_partner"),
            )
        position_id = builder.build()

    print(f"\n🧩 Position ID — {len(specs)} leg(s)")
    print("=" * 55)
    print(f"  🏊 Pool ID : {decode_pool_id(builder.pool_reference)}")
    print(f"  🔢 Decimal : {position_id}")
    print(f"  🔣 Hex     : {hex(position_id)}")
    return position_id


def cmd_decode(position: str) -> None:
    """Decode a position id and print pool, legs and strategy flags."""
    position_id = parse_uint(position)
    decoded = decode_token_id(position_id)

    print(f"\n🔍 Position {position_id}")
    print("=" * 55)
    _print_pool(position_id)
    print(f"  🦵 Legs         : {decoded.leg_count}")

    for item in decoded.legs:
        leg = item.leg
        side = "LONG " if leg.is_long else "SHORT"
        kind = "call" if leg.is_call else "put"
        if leg.width == 0:
            kind = "credit" if leg.is_long else "loan"
        print(f"\n    {leg.slot}. {side} {kind} ×{leg.option_ratio}")
        print(f"       Strike   : {leg.strike}")
        print(f"       Width    : {leg.width}")
        print(f"       Range    : [{item.tick_lower}, {item.tick_upper}]")
        print(f"       Asset    : {leg.asset} | Token type: {leg.token_type}")
        print(f"       Partner  : {leg.risk_partner}")

    if decoded.leg_count:
        print()
        print(f"  📈 Has long leg  : {has_long_leg(position_id)}")
        print(f"  📉 Short only    : {is_short_only(position_id)}")
        print(f"  🔀 Spread        : {is_spread(position_id)}")
        print(f"  🏦 Loan/credit   : {has_loan_or_credit(position_id)}")
        print(f"  💱 Asset index   : {get_asset_index(position_id)}")


def cmd_check() -> bool:
    """
    Run offline checks against reference vectors.
    Validates: pool reference packing, strike transform, leg round trip,
    empty-slot removal.
    """
    address = "0x88e6a0c2ddd26feeb64f039a2c41296fcb3f5640"
    pool_key = "0x" + "1234567890" * 6 + "1234"

    print(f"\n🧪 {PROJECT_NAME} v{PROJECT_VERSION} — Codec Check")
    print("=" * 55)

    checks: list[tuple[str, bool]] = []

    # Pool reference
    ref = encode_from_address(address, 60, 4)
    checks.append(("Address pattern", ref & ((1 << 40) - 1) == 0x88E6A0C2DD))
    checks.append(("Vegoid = 4", decode_vegoid(ref) == 4))
    checks.append(("Tick spacing = 60", decode_tick_spacing(ref) == 60))
    checks.append(("Vegoid wraps 256 → 0", decode_vegoid(encode_from_address(address, 60, 256)) == 0))
    checks.append(("Spacing wraps 65596 → 60", decode_tick_spacing(encode_from_address(address, 65596)) == 60))
    v4 = encode_from_pool_key(pool_key, 60, 4)
    checks.append(("Pool key pattern = 0x5678901234", v4 & ((1 << 40) - 1) == 0x5678901234))
    unpadded = encode_from_pool_key("0x1122334455", 60, 4)
    checks.append(("Unpadded pool key", unpadded & ((1 << 40) - 1) == 0x1122334455))

    # Strike transform
    for s in (MIN_TICK, -1, 0, 1, MAX_TICK):
        checks.append((f"Strike {s} round trip", decode_strike(encode_strike(s)) == s))
    checks.append(("Strike 2^23 stays positive", decode_strike(1 << 23) == 1 << 23))

    # Two-leg position
    legs = [
        Leg(strike=100, width=10, option_ratio=1, slot=0),
        Leg(strike=-100, width=10, option_ratio=1, asset=1, token_type=1, risk_partner=1, slot=1),
    ]
    decoded = decode_position(encode_position(ref, legs))
    checks.append(("Two legs decoded", len(decoded.legs) == 2))
    checks.append(("Strikes 100 / -100", [leg.strike for leg in decoded.legs] == [100, -100]))
    checks.append(("Pool id hex", decoded.pool_id == "0x003c0488e6a0c2dd"))
    checks.append(("Leg 1 at bit 112", (encode_position(0, legs[1:]) >> leg_offset(1)) & 1 == 1))

    # Gap at slot 1
    gapped = decode_position(
        encode_position(ref, [Leg(strike=10, width=1, option_ratio=1, slot=0),
                              Leg(strike=30, width=3, option_ratio=3, slot=2)])
    )
    checks.append(("Gap removed", [leg.slot for leg in gapped.legs] == [0, 1]))
    checks.append(("Gap order kept", [leg.strike for leg in gapped.legs] == [10, 30]))

    total_ok = total_fail = 0
    for name, ok in checks:
        icon = "✅" if ok else "❌"
        print(f"    {icon} {name}")
        if ok:
            total_ok += 1
        else:
            total_fail += 1

    total = total_ok + total_fail
    print(f"\n{'═' * 55}")
    print(f"  Results: {total_ok}/{total} checks passed")
    if total_fail == 0:
        print("  🎉 ALL CHECKS PASSED")
    else:
        print(f"  ⚠️  {total_fail} checks failed")
    print(f"{'═' * 55}")

    return total_fail == 0
