import pytest

from blocktex.bc6 import (
    decode_bc6_block,
    decode_bc6_block_signed,
    decode_bc6_block_unsigned,
)
from blocktex.color import color

OPAQUE_BLACK = color(0, 0, 0, 255)
WHITE = color(255, 255, 255, 255)


def _mode3_block(r1=0, g1=0, b1=0, indices=0):
    """Build an unpartitioned mode-3 block with endpoint 0 at zero."""
    value = 0b00011
    value |= r1 << 35 | g1 << 45 | b1 << 55
    value |= indices << 65
    return value.to_bytes(16, "little")


def _indices(values):
    """Pack 16 per-pixel indices: 3 bits for the anchor, 4 for the rest."""
    packed = values[0] & 7
    pos = 3
    for v in values[1:]:
        packed |= (v & 0xF) << pos
        pos += 4
    return packed


def test_zero_block_unsigned_is_opaque_black():
    assert decode_bc6_block_unsigned(bytes(16)) == [OPAQUE_BLACK] * 16


def test_zero_block_signed_is_opaque_black():
    assert decode_bc6_block_signed(bytes(16)) == [OPAQUE_BLACK] * 16


def test_reserved_mode_gives_zero_pixels():
    data = bytes([0x13]) + bytes(15)
    assert decode_bc6_block(data, False) == [0] * 16


def test_all_ones_is_reserved_mode():
    assert decode_bc6_block(b"\xff" * 16, True) == [0] * 16


def test_saturated_unsigned_endpoints_are_white():
    data = bytes([0xE3]) + b"\xff" * 15
    assert decode_bc6_block_unsigned(data) == [WHITE] * 16


def test_saturated_signed_endpoints_are_negative_and_clamp_to_black():
    data = bytes([0xE3]) + b"\xff" * 15
    assert decode_bc6_block_signed(data) == [OPAQUE_BLACK] * 16


def test_wrappers_match_generic_decoder():
    data = bytes(range(16))
    assert decode_bc6_block_signed(data) == decode_bc6_block(data, True)
    assert decode_bc6_block_unsigned(data) == decode_bc6_block(data, False)


def test_index_zero_selects_first_endpoint():
    data = _mode3_block(1023, 1023, 1023, indices=0)
    assert decode_bc6_block_unsigned(data) == [OPAQUE_BLACK] * 16


def test_max_index_selects_second_endpoint():
    data = _mode3_block(1023, 1023, 1023, indices=_indices([7] + [15] * 15))
    pixels = decode_bc6_block_unsigned(data)
    assert pixels[1:] == [WHITE] * 15


def test_grey_endpoints_give_equal_channels():
    data = _mode3_block(300, 300, 300, indices=_indices([3] * 16))
    for p in decode_bc6_block_unsigned(data):
        r, g, b = (p >> 16) & 0xFF, (p >> 8) & 0xFF, p & 0xFF
        assert r == g == b


@pytest.mark.parametrize("first", [0x00, 0x01, 0x02, 0x03, 0x06, 0x07, 0x0A, 0x0B,
                                   0x0E, 0x0F, 0x12, 0x16, 0x1A, 0x1E])
@pytest.mark.parametrize("signed", [False, True])
def test_valid_modes_give_sixteen_opaque_pixels(first, signed):
    data = bytes([first]) + bytes((i * 37 + 11) & 0xFF for i in range(15))
    pixels = decode_bc6_block(data, signed)
    assert len(pixels) == 16
    assert all(p >> 24 == 255 for p in pixels)


@pytest.mark.parametrize("first", [0x13, 0x17, 0x1B, 0x1F])
def test_reserved_modes_ignore_payload(first):
    data = bytes([first]) + b"\xa5" * 15
    assert decode_bc6_block_unsigned(data) == [0] * 16


def test_short_block_raises():
    with pytest.raises(ValueError):
        decode_bc6_block(bytes(15), False)