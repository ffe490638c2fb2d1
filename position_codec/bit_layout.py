"""
Bit Layout — Position ID Field Offsets, Sizes and Limits
=========================================================

A position id is one uint256, least-significant bit = bit 0:

  bit   0..39   pool address pattern (5 bytes, address order)
  bit  40..47   vegoid               (uint8)
  bit  48..63   tickSpacing          (uint16)
  bit  64..111  leg[0]
  bit 112..159  leg[1]
  bit 160..207  leg[2]
  bit 208..255  leg[3]

Each 48-bit leg word:

  0       asset        (1 bit)
  1..7    optionRatio  (7 bits; 0 = slot empty)
  8       isLong       (1 bit)
  9       tokenType    (1 bit)
  10..11  riskPartner  (2 bits)
  12..35  strike       (24 bits, bias-encoded int24)
  36..47  width        (12 bits)

This layout is the contract with the on-chain decoder. Changing any
number here silently produces economically different positions.
"""

from types import MappingProxyType

# ── Pool Reference (bits 0..63) ─────────────────────────────────────────

POOL_ID_SIZE = 64
POOL_ID_MASK = (1 << POOL_ID_SIZE) - 1
POOL_ID_HEX = POOL_ID_SIZE // 4          # 16 hex digits

ADDRESS_PATTERN_BYTES = 5                # 40 bits of the pool address
ADDRESS_PATTERN_SIZE = ADDRESS_PATTERN_BYTES * 8
ADDRESS_PATTERN_MASK = (1 << ADDRESS_PATTERN_SIZE) - 1

VEGOID_STARTING_BIT = 40
VEGOID_SIZE = 8
VEGOID_MODULUS = 1 << VEGOID_SIZE        # 256

TICK_SPACING_STARTING_BIT = 48
TICK_SPACING_SIZE = 16
TICK_SPACING_MODULUS = 1 << TICK_SPACING_SIZE   # 65536

ADDRESS_BYTES = 20                       # V3 pool contract address
POOL_KEY_BYTES = 32                      # V4 pool key hash (bytes32)

# ── Legs (bits 64..255) ─────────────────────────────────────────────────

LEG_SIZE = 48
LEG_MASK = (1 << LEG_SIZE) - 1
MAX_LEGS = 4
TOKEN_ID_SIZE = POOL_ID_SIZE + MAX_LEGS * LEG_SIZE   # 256

ASSET_STARTING_BIT = 0
ASSET_SIZE = 1
RATIO_STARTING_BIT = ASSET_STARTING_BIT + ASSET_SIZE                  # 1
RATIO_SIZE = 7
IS_LONG_STARTING_BIT = RATIO_STARTING_BIT + RATIO_SIZE                # 8
IS_LONG_SIZE = 1
TOKEN_TYPE_STARTING_BIT = IS_LONG_STARTING_BIT + IS_LONG_SIZE         # 9
TOKEN_TYPE_SIZE = 1
RISK_PARTNER_STARTING_BIT = TOKEN_TYPE_STARTING_BIT + TOKEN_TYPE_SIZE  # 10
RISK_PARTNER_SIZE = 2
STRIKE_STARTING_BIT = RISK_PARTNER_STARTING_BIT + RISK_PARTNER_SIZE   # 12
STRIKE_SIZE = 24
WIDTH_STARTING_BIT = STRIKE_STARTING_BIT + STRIKE_SIZE                # 36
WIDTH_SIZE = 12

# (starting bit, size) per leg field, in wire order
LEG_FIELDS = MappingProxyType({
    "asset":        (ASSET_STARTING_BIT, ASSET_SIZE),
    "option_ratio": (RATIO_STARTING_BIT, RATIO_SIZE),
    "is_long":      (IS_LONG_STARTING_BIT, IS_LONG_SIZE),
    "token_type":   (TOKEN_TYPE_STARTING_BIT, TOKEN_TYPE_SIZE),
    "risk_partner": (RISK_PARTNER_STARTING_BIT, RISK_PARTNER_SIZE),
    "strike":       (STRIKE_STARTING_BIT, STRIKE_SIZE),
    "width":        (WIDTH_STARTING_BIT, WIDTH_SIZE),
})

LEG_MASKS = MappingProxyType({
    name: (1 << size) - 1 for name, (_, size) in LEG_FIELDS.items()
})

# ── Strike (int24 stored as uint24) ─────────────────────────────────────

STRIKE_CONVERSION_FACTOR = 1 << STRIKE_SIZE     # 2^24 = 16777216
STRIKE_SIGN_THRESHOLD = 1 << (STRIKE_SIZE - 1)  # 2^23 = 8388608

# Uniswap TickMath bounds, the valid strike domain
MIN_TICK = -887272
MAX_TICK = 887272

# ── Field Limits (checked builder) ──────────────────────────────────────

MAX_RATIO = LEG_MASKS["option_ratio"]           # 127
MAX_WIDTH = LEG_MASKS["width"]                  # 4095
MAX_RISK_PARTNER = LEG_MASKS["risk_partner"]    # 3


def leg_offset(slot: int) -> int:
    """Absolute bit offset of the leg word stored in ``slot`` (0..3)."""
    return POOL_ID_SIZE + slot * LEG_SIZE
