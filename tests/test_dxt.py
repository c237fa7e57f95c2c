import pytest

from blocktex.color import color, pixels_to_bytes, rgb565_le
from blocktex.dxt import (
    decode_bc1_block,
    decode_bc2_alpha,
    decode_bc2_block,
    decode_bc3_alpha,
    decode_bc3_block,
    decode_bc4_block,
    decode_bc5_block,
)


def _pack(values, bits, nbytes):
    total = 0
    for i, v in enumerate(values):
        total |= v << (bits * i)
    return total.to_bytes(nbytes, "little")


def _bc1(q0, q1, indices):
    return q0.to_bytes(2, "little") + q1.to_bytes(2, "little") + _pack(indices, 2, 4)


def _bc3_alpha(a0, a1, indices):
    return bytes([a0, a1]) + _pack(indices, 3, 6)


def _channels(pixel):
    b, g, r, a = pixels_to_bytes([pixel])
    return r, g, b, a


def test_bc1_endpoints():
    q0, q1 = 0xF800, 0x001F
    out = decode_bc1_block(_bc1(q0, q1, [0, 1] * 8))
    assert len(out) == 16
    assert out[0] == color(*rgb565_le(q0), 255)
    assert out[1] == color(*rgb565_le(q1), 255)


def test_bc1_four_colour_interpolation_ordered():
    out = decode_bc1_block(_bc1(0xF800, 0x001F, [2, 3] * 8))
    r2, g2, b2, a2 = _channels(out[0])
    r3, g3, b3, a3 = _channels(out[1])
    assert r2 > r3 and b2 < b3
    assert a2 == a3 == 255


def test_bc1_three_colour_mode_transparent():
    out = decode_bc1_block(_bc1(0x001F, 0xF800, [3] * 16))
    assert out == [color(0, 0, 0, 0)] * 16


def test_bc1_three_colour_mode_midpoint_between():
    q0, q1 = 0x0000, 0xFFFF
    out = decode_bc1_block(_bc1(q0, q1, [2] * 16))
    r, g, b, a = _channels(out[5])
    assert 0 < r < 255 and 0 < g < 255 and 0 < b < 255
    assert a == 255


def test_bc1_short_data_raises():
    with pytest.raises(ValueError):
        decode_bc1_block(bytes(7))


def test_bc2_alpha_full_and_empty():
    colour_part = _bc1(0xF800, 0x001F, [0] * 16)
    opaque = decode_bc2_block(_pack([0xF] * 16, 4, 8) + colour_part)
    clear = decode_bc2_block(_pack([0] * 16, 4, 8) + colour_part)
    assert all(_channels(p)[3] == 255 for p in opaque)
    assert all(_channels(p)[3] == 0 for p in clear)
    assert [p & 0xFFFFFF for p in opaque] == [p & 0xFFFFFF for p in clear]


def test_bc2_alpha_keeps_other_channels():
    base = [color(10, 20, 30, 40)] * 16
    out = decode_bc2_alpha(_pack([0xF] * 16, 4, 8), base, 0)
    assert all(_channels(p)[:3] == (10, 20, 255) for p in out)
    assert all(_channels(p)[3] == 40 for p in out)


def test_bc3_alpha_endpoints_and_decreasing_palette():
    a0, a1 = 200, 50
    out = decode_bc3_alpha(_bc3_alpha(a0, a1, list(range(8)) * 2), [0] * 16, 3)
    alphas = [_channels(p)[3] for p in out[:8]]
    assert alphas[0] == a0
    assert alphas[1] == a1
    middle = alphas[2:]
    assert all(a1 < x < a0 for x in middle)
    assert middle == sorted(middle, reverse=True)


def test_bc3_alpha_six_value_mode_extremes():
    out = decode_bc3_alpha(_bc3_alpha(10, 90, [6, 7] * 8), [0] * 16, 3)
    assert _channels(out[0])[3] == 0
    assert _channels(out[1])[3] == 255


def test_bc3_block_combines_colour_and_alpha():
    colour_part = _bc1(0x07E0, 0x001F, [0] * 16)
    out = decode_bc3_block(_bc3_alpha(77, 10, [0] * 16) + colour_part)
    green = decode_bc1_block(colour_part)[0]
    assert all(p & 0xFFFFFF == green & 0xFFFFFF for p in out)
    assert all(_channels(p)[3] == 77 for p in out)


def test_bc4_fills_red_only():
    out = decode_bc4_block(_bc3_alpha(123, 45, [0, 1] * 8))
    assert _channels(out[0]) == (123, 0, 0, 255)
    assert _channels(out[1]) == (45, 0, 0, 255)


def test_bc5_fills_red_and_green():
    data = _bc3_alpha(123, 45, [0] * 16) + _bc3_alpha(66, 99, [1] * 16)
    out = decode_bc5_block(data)
    assert all(_channels(p) == (123, 99, 0, 255) for p in out)


def test_bc5_short_data_raises():
    with pytest.raises(ValueError):
        decode_bc5_block(bytes(12))