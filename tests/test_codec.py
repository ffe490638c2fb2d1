"""
Test Suite — Position ID Wire Format
====================================

Checks every codec primitive against hand-computed bit patterns:

  - hex_utils.py       (pad_hex, prefix handling)
  - legs.py            (strike transform, leg packing, overflow behaviour)
  - pool_reference.py  (V3 / V4 pool references, vegoid + spacing wrap)
  - position.py        (assembly, empty-slot removal, re-indexing)

Run:  python -m pytest tests/test_codec.py -v
"""

import pytest

from position_codec.bit_layout import (
    LEG_SIZE,
    MAX_TICK,
    MIN_TICK,
    POOL_ID_SIZE,
    STRIKE_CONVERSION_FACTOR,
    TOKEN_ID_SIZE,
    leg_offset,
)
from position_codec.errors import FormatError
from position_codec.hex_utils import pad_hex
from position_codec.legs import (
    Leg,
    decode_leg,
    decode_strike,
    encode_leg,
    encode_strike,
    legs_equal,
)
from position_codec.pool_reference import (
    PoolReference,
    decode_address_pattern,
    decode_pool_id,
    decode_tick_spacing,
    decode_vegoid,
    encode_from_address,
    encode_from_pool_key,
    validate_pool_id,
)
from position_codec.position import (
    Position,
    add_leg,
    count_legs,
    decode_position,
    decode_slots,
    encode_position,
    slot_word,
)


USDC_ETH_POOL = "0x88e6a0c2ddd26feeb64f039a2c41296fcb3f5640"
V4_POOL_KEY = "0x1234567890123456789012345678901234567890123456789012345678901234"

STRANGLE = [
    Leg(strike=100, width=10, option_ratio=1, asset=0, is_long=0, token_type=0, risk_partner=0, slot=0),
    Leg(strike=-100, width=10, option_ratio=1, asset=1, is_long=0, token_type=1, risk_partner=1, slot=1),
]


@pytest.fixture
def pool_ref() -> int:
    return encode_from_address(USDC_ETH_POOL, 60, 4)


# ── Layout ───────────────────────────────────────────────────────────────

class TestLayout:
    def test_token_id_is_256_bits(self):
        assert TOKEN_ID_SIZE == 256

    @pytest.mark.parametrize("slot,offset", [(0, 64), (1, 112), (2, 160), (3, 208)])
    def test_leg_offsets(self, slot, offset):
        assert leg_offset(slot) == offset

    def test_last_leg_ends_at_bit_256(self):
        assert leg_offset(3) + LEG_SIZE == TOKEN_ID_SIZE


# ── Hex Padding ──────────────────────────────────────────────────────────

class TestPadHex:
    @pytest.mark.parametrize("value,length,expected", [
        ("0x1", 4, "0x01"),
        ("0x1", 6, "0x0001"),
        ("0xabc", 8, "0x000abc"),
        ("0x123456", 8, "0x123456"),
    ])
    def test_pads_to_length(self, value, length, expected):
        assert pad_hex(value, length) == expected

    def test_never_truncates(self):
        assert pad_hex("0xabcdef", 4) == "0xabcdef"

    def test_missing_prefix_raises(self):
        with pytest.raises(FormatError):
            pad_hex("abc", 8)

    def test_format_error_is_value_error(self):
        with pytest.raises(ValueError):
            pad_hex("123", 8)


# ── Strike Transform ─────────────────────────────────────────────────────

class TestStrikeTransform:
    @pytest.mark.parametrize("strike", [MIN_TICK, -1, 0, 1, MAX_TICK])
    def test_roundtrip_valid_domain(self, strike):
        assert decode_strike(encode_strike(strike)) == strike

    def test_negative_is_biased(self):
        assert encode_strike(-100) == STRIKE_CONVERSION_FACTOR - 100
        assert encode_strike(-1) == 0xFFFFFF

    def test_positive_unchanged(self):
        assert encode_strike(887272) == 887272

    def test_boundary_decodes_positive(self):
        """2^23 itself is NOT treated as negative (strict > threshold)."""
        assert decode_strike(2 ** 23) == 2 ** 23

    def test_just_above_boundary_is_negative(self):
        assert decode_strike(2 ** 23 + 1) == 2 ** 23 + 1 - 2 ** 24


# ── Pool Reference ───────────────────────────────────────────────────────

class TestPoolReference:
    def test_scenario_a(self, pool_ref):
        assert decode_vegoid(pool_ref) == 4
        assert decode_tick_spacing(pool_ref) == 60

    def test_address_pattern_bits(self, pool_ref):
        assert pool_ref & ((1 << 40) - 1) == 0x88E6A0C2DD
        assert decode_address_pattern(pool_ref) == "0x88e6a0c2dd"

    def test_exact_value(self, pool_ref):
        assert pool_ref == (60 << 48) | (4 << 40) | 0x88E6A0C2DD

    def test_fits_in_64_bits(self, pool_ref):
        assert 0 <= pool_ref < 2 ** 64

    @pytest.mark.parametrize("vegoid", [0, 4, 42, 255, 256, 511])
    def test_vegoid_wraps(self, vegoid):
        ref = encode_from_address(USDC_ETH_POOL, 60, vegoid)
        assert decode_vegoid(ref) == vegoid % 256

    @pytest.mark.parametrize("spacing", [1, 10, 60, 200, 65535, 65536, 65596])
    def test_tick_spacing_wraps(self, spacing):
        ref = encode_from_address(USDC_ETH_POOL, spacing, 4)
        assert decode_tick_spacing(ref) == spacing % 65536

    def test_checksummed_address_same_as_lowercase(self):
        checksummed = "0x88e6A0c2dDD26FEEb64F039a2c41296FcB3f5640"
        assert encode_from_address(checksummed, 60) == encode_from_address(USDC_ETH_POOL, 60)

    def test_raw_bytes_address(self, pool_ref):
        raw = bytes.fromhex(USDC_ETH_POOL[2:])
        assert encode_from_address(raw, 60, 4) == pool_ref

    def test_address_without_prefix_raises(self):
        with pytest.raises(FormatError):
            encode_from_address(USDC_ETH_POOL[2:], 60)

    def test_only_first_ten_digits_are_read(self, pool_ref):
        assert encode_from_address("0x88e6a0c2dd", 60, 4) == pool_ref
        assert encode_from_address("0x88e6a0c2ddffff", 60, 4) == pool_ref

    def test_non_hex_pattern_raises(self):
        with pytest.raises(FormatError):
            encode_from_address("0x88e6a0c2zz" + "0" * 30, 60)

    def test_pool_key_uses_last_five_bytes(self):
        ref = encode_from_pool_key(V4_POOL_KEY, 60, 4)
        assert ref & ((1 << 40) - 1) == 0x5678901234
        assert decode_vegoid(ref) == 4
        assert decode_tick_spacing(ref) == 60

    def test_pool_key_without_leading_zeros(self):
        full = "0x00" + "ab" * 26 + "1122334455"
        unpadded = hex(int(full, 16))
        assert len(unpadded) < len(full)
        ref = encode_from_pool_key(unpadded, 60, 4)
        assert ref == encode_from_pool_key(full, 60, 4)
        assert decode_address_pattern(ref) == "0x1122334455"

    @pytest.mark.parametrize("key,pattern", [
        ("0x1122334455", 0x1122334455),
        ("0x123", 0x123),
        ("0x" + "f" * 63, 0xFFFFFFFFFF),
    ])
    def test_short_or_odd_pool_keys(self, key, pattern):
        assert encode_from_pool_key(key, 60, 4) & ((1 << 40) - 1) == pattern

    def test_pool_key_without_prefix_raises(self):
        with pytest.raises(FormatError):
            encode_from_pool_key(V4_POOL_KEY[2:], 60)

    def test_decoders_mask_full_position(self, pool_ref):
        position_id = encode_position(pool_ref, STRANGLE)
        assert decode_vegoid(position_id) == 4
        assert decode_tick_spacing(position_id) == 60

    def test_decode_pool_id_is_padded(self, pool_ref):
        assert decode_pool_id(pool_ref) == "0x003c0488e6a0c2dd"
        assert decode_pool_id(0) == "0x" + "0" * 16

    def test_validate_pool_id(self, pool_ref):
        position_id = encode_position(pool_ref, STRANGLE)
        assert validate_pool_id(position_id, pool_ref) is True
        assert validate_pool_id(position_id, pool_ref + 1) is False

    def test_structured_view(self, pool_ref):
        ref = PoolReference.from_value(pool_ref)
        assert ref == PoolReference("0x88e6a0c2dd", 4, 60)
        assert ref.value == pool_ref
        assert ref.hex == "0x003c0488e6a0c2dd"


# ── Leg Codec ────────────────────────────────────────────────────────────

class TestLegCodec:
    def test_slot0_word(self):
        expected = (10 << 36) + (100 << 12) + (1 << 1)
        assert encode_leg(STRANGLE[0], 0) == expected << POOL_ID_SIZE

    def test_slot1_word(self):
        expected = (10 << 36) + ((2 ** 24 - 100) << 12) + (1 << 10) + (1 << 9) + (1 << 1) + 1
        assert encode_leg(STRANGLE[1], 1) == expected << leg_offset(1)

    def test_slot_argument_overrides_leg_slot(self):
        assert encode_leg(STRANGLE[0], 3) == encode_leg(STRANGLE[0], 0) << (3 * LEG_SIZE)

    def test_decode_leg_inverts(self):
        word = encode_leg(STRANGLE[1], 0) >> POOL_ID_SIZE
        assert decode_leg(word, slot=1) == STRANGLE[1]

    def test_decode_ignores_bits_above_48(self):
        word = encode_leg(STRANGLE[0], 0) >> POOL_ID_SIZE
        assert decode_leg(word | (0xFF << 48)) == decode_leg(word)

    def test_ratio_overflow_spills_into_is_long(self):
        """A 7-bit field given 128 lands on the next bit instead of wrapping."""
        too_big = Leg(strike=0, width=0, option_ratio=128)
        spilled = Leg(strike=0, width=0, option_ratio=0, is_long=1)
        assert encode_leg(too_big) == encode_leg(spilled)

    def test_width_overflow_spills_into_next_slot(self):
        position_id = encode_position(0, [Leg(strike=0, width=4096, option_ratio=1)])
        assert slot_word(position_id, 0) == 1 << 1
        assert slot_word(position_id, 1) == 1

    def test_legs_equal_ignores_slot(self):
        moved = Leg(strike=100, width=10, option_ratio=1, slot=3)
        assert legs_equal(STRANGLE[0], moved)
        assert not legs_equal(STRANGLE[0], STRANGLE[1])

    def test_str(self):
        text = str(STRANGLE[1])
        assert "Slot: 1" in text
        assert "Strike: -100" in text
        assert "Risk Partner: 1" in text

    def test_is_call(self):
        assert STRANGLE[0].is_call
        assert STRANGLE[1].is_call
        assert not Leg(strike=0, width=1, option_ratio=1, asset=0, token_type=1).is_call


# ── Position Codec ───────────────────────────────────────────────────────

class TestPositionCodec:
    def test_scenario_b(self, pool_ref):
        decoded = decode_position(encode_position(pool_ref, STRANGLE))
        assert decoded.pool_id == "0x003c0488e6a0c2dd"
        assert decoded.leg_count == 2
        assert [leg.strike for leg in decoded.legs] == [100, -100]
        assert decoded.legs == tuple(STRANGLE)

    def test_scenario_c_gap_removed(self, pool_ref):
        legs = [
            Leg(strike=10, width=2, option_ratio=1, slot=0),
            Leg(strike=30, width=4, option_ratio=5, is_long=1, slot=2),
        ]
        decoded = decode_position(encode_position(pool_ref, legs))
        assert [leg.slot for leg in decoded.legs] == [0, 1]
        assert [leg.strike for leg in decoded.legs] == [10, 30]
        assert decoded.legs[1].option_ratio == 5

    def test_input_order_irrelevant(self, pool_ref):
        assert encode_position(pool_ref, STRANGLE) == encode_position(pool_ref, STRANGLE[::-1])

    def test_no_legs_is_pool_reference(self, pool_ref):
        assert encode_position(pool_ref, []) == pool_ref
        assert decode_position(pool_ref) == Position("0x003c0488e6a0c2dd", ())

    def test_four_legs_fill_256_bits(self, pool_ref):
        legs = [
            Leg(strike=MIN_TICK, width=4095, option_ratio=127, asset=1, is_long=1,
                token_type=1, risk_partner=3, slot=slot)
            for slot in range(4)
        ]
        position_id = encode_position(pool_ref, legs)
        assert position_id.bit_length() <= 256
        assert position_id >> 255 == 1
        assert decode_position(position_id).legs == tuple(legs)

    def test_add_leg_matches_encode(self, pool_ref):
        step = add_leg(add_leg(pool_ref, STRANGLE[0]), STRANGLE[1])
        assert step == encode_position(pool_ref, STRANGLE)

    def test_duplicate_slot_sums(self):
        """Reusing a slot adds the two words together; nothing detects it."""
        leg = Leg(strike=1, width=1, option_ratio=1)
        assert encode_position(0, [leg, leg]) == 2 * encode_leg(leg)
        decoded = decode_position(encode_position(0, [leg, leg]))
        assert decoded.legs[0].option_ratio == 2

    def test_decode_slots_marks_empty(self, pool_ref):
        slots = decode_slots(encode_position(pool_ref, [STRANGLE[0]]))
        assert slots[0] == STRANGLE[0]
        assert slots[1:] == (None, None, None)

    def test_count_legs(self, pool_ref):
        assert count_legs(pool_ref) == 0
        assert count_legs(encode_position(pool_ref, STRANGLE)) == 2

    def test_ratio_zero_leg_vanishes(self, pool_ref):
        ghost = Leg(strike=500, width=7, option_ratio=0, slot=2)
        decoded = decode_position(encode_position(pool_ref, STRANGLE + [ghost]))
        assert decoded.leg_count == 2
