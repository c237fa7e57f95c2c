import random

import pytest

from blocktex.astc_params import (
    CEM_PREC_A,
    BlockParams,
    IntSeqValue,
    bit_reverse_u8,
    bit_reverse_u64,
    decode_block_params,
    decode_intseq,
)


def _reverse_block(buf):
    value = int.from_bytes(bytes(buf), "little")
    return int(f"{value:0128b}"[::-1], 2).to_bytes(16, "little")


def _pack_plain(values, bits, offset):
    total = 0
    for i, v in enumerate(values):
        total |= v << (offset + i * bits)
    return total.to_bytes(16, "little")


# A 4x4 weight grid, 2-bit weights, one partition, endpoint mode 8.
SIMPLE_BLOCK = bytes([0x42, 0x00, 0x01]) + bytes(13)


def test_bit_reverse_u8_full_byte():
    assert bit_reverse_u8(0x01, 8) == 0x80


def test_bit_reverse_u8_is_involution():
    for bits in range(1, 9):
        for c in range(1 << bits):
            assert bit_reverse_u8(bit_reverse_u8(c, bits), bits) == c


def test_bit_reverse_u8_zero_bits():
    assert bit_reverse_u8(0xFF, 0) == 0


def test_bit_reverse_u8_rejects_wide():
    with pytest.raises(ValueError):
        bit_reverse_u8(1, 9)


def test_bit_reverse_u64_top_bit():
    assert bit_reverse_u64(1, 64) == 1 << 63


def test_bit_reverse_u64_is_involution():
    rng = random.Random(7)
    for bits in (1, 7, 23, 38, 64):
        for _ in range(20):
            value = rng.getrandbits(bits)
            assert bit_reverse_u64(bit_reverse_u64(value, bits), bits) == value


def test_bit_reverse_u64_rejects_zero():
    with pytest.raises(ValueError):
        bit_reverse_u64(5, 0)


def test_intseq_empty():
    assert decode_intseq(bytes(16), 0, 3, 2, 0, False) == []


def test_intseq_plain_forward_roundtrip():
    values = [5, 0, 7, 3, 1, 6, 2]
    buf = _pack_plain(values, 3, 17)
    result = decode_intseq(buf, 17, 0, 3, len(values), False)
    assert [v.bits for v in result] == values
    assert all(v.nonbits == 0 for v in result)


def test_intseq_plain_reverse_matches_forward():
    values = [1, 2, 3, 0, 3, 2]
    buf = _pack_plain(values, 2, 0)
    forward = decode_intseq(buf, 0, 0, 2, len(values), False)
    backward = decode_intseq(_reverse_block(buf), 128, 0, 2, len(values), True)
    assert backward == forward


def test_trits_zero_header_is_all_zero():
    result = decode_intseq(bytes(16), 0, 3, 0, 5, False)
    assert result == [IntSeqValue(0, 0)] * 5


def test_trits_cover_every_combination():
    combos = set()
    for t in range(256):
        buf = bytes([t]) + bytes(15)
        result = decode_intseq(buf, 0, 3, 0, 5, False)
        assert all(v.nonbits in (0, 1, 2) for v in result)
        combos.add(tuple(v.nonbits for v in result))
    assert len(combos) == 3 ** 5


def test_quints_cover_every_combination():
    combos = set()
    for q in range(128):
        buf = bytes([q]) + bytes(15)
        result = decode_intseq(buf, 0, 5, 0, 3, False)
        assert all(0 <= v.nonbits <= 4 for v in result)
        combos.add(tuple(v.nonbits for v in result))
    assert len(combos) == 5 ** 3


def test_trits_plain_bits_positions():
    # One plain bit per value, interleaved with a zero trit header.
    value = sum(1 << pos for pos in (0, 3, 6, 8, 11))
    buf = value.to_bytes(16, "little")
    result = decode_intseq(buf, 0, 3, 1, 5, False)
    assert [v.bits for v in result] == [1] * 5
    assert [v.nonbits for v in result] == [0] * 5


def test_trits_partial_group_length():
    result = decode_intseq(bytes(range(16)), 0, 3, 2, 7, False)
    assert len(result) == 7


@pytest.mark.parametrize("a,b,count", [(3, 3, 10), (5, 2, 6), (3, 1, 4), (5, 4, 5)])
def test_intseq_reverse_matches_forward(a, b, count):
    rng = random.Random(a * 100 + b * 10 + count)
    buf = bytes(rng.getrandbits(8) for _ in range(16))
    forward = decode_intseq(buf, 0, a, b, count, False)
    backward = decode_intseq(_reverse_block(buf), 128, a, b, count, True)
    assert backward == forward


def test_simple_block_params():
    params = decode_block_params(SIMPLE_BLOCK, 4, 4)
    assert (params.width, params.height) == (4, 4)
    assert params.part_num == 1
    assert params.dual_plane is False
    assert params.cem[0] == 8
    assert params.weight_num == params.width * params.height
    assert params.endpoint_value_num == 6
    assert (params.block_width, params.block_height) == (4, 4)


def test_dual_plane_doubles_weights():
    buf = bytearray(SIMPLE_BLOCK)
    buf[1] |= 4
    single = decode_block_params(SIMPLE_BLOCK, 4, 4)
    dual = decode_block_params(bytes(buf), 4, 4)
    assert dual.dual_plane is True
    assert dual.weight_num == 2 * single.weight_num
    assert 0 <= dual.plane_selector < 4
    assert dual.cem_range >= single.cem_range


def test_too_many_weight_bits_raises():
    buf = bytes([0x7C, 0x07]) + bytes(14)
    with pytest.raises(ValueError):
        decode_block_params(buf, 12, 12)


def test_short_buffer_raises():
    with pytest.raises(ValueError):
        decode_block_params(bytes(8), 4, 4)


def test_random_block_invariants():
    rng = random.Random(1234)
    decoded = 0
    for _ in range(500):
        buf = bytes(rng.getrandbits(8) for _ in range(16))
        try:
            params = decode_block_params(buf, 8, 8)
        except ValueError:
            continue
        decoded += 1
        assert isinstance(params, BlockParams)
        planes = 2 if params.dual_plane else 1
        assert params.weight_num == params.width * params.height * planes
        assert 2 <= params.width <= 12
        assert 2 <= params.height <= 12
        assert 1 <= params.part_num <= 4
        assert all(0 <= c <= 15 for c in params.cem)
        assert 0 <= params.cem_range < len(CEM_PREC_A)
        assert params.endpoint_value_num == sum(
            (c >> 1 & 6) + 2 for c in params.cem[: params.part_num]
        )
    assert decoded > 0