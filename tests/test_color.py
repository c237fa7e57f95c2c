import pytest

from blocktex.color import (
    color,
    copy_block_buffer,
    decode_blocks,
    half_to_float,
    pixels_to_bytes,
    rgb565_le,
)


@pytest.mark.parametrize("rgba", [(1, 2, 3, 4), (200, 17, 99, 0), (0, 0, 0, 255)])
def test_color_serialises_as_bgra(rgba):
    r, g, b, a = rgba
    assert pixels_to_bytes([color(r, g, b, a)]) == bytes([b, g, r, a])


def test_pixels_to_bytes_length():
    pixels = [color(i, i, i, i) for i in range(10)]
    assert len(pixels_to_bytes(pixels)) == 4 * len(pixels)


def test_rgb565_channels_separate():
    for v in range(32):
        r, g, b = rgb565_le(v << 11)
        assert (r >> 3, g, b) == (v, 0, 0)
        r, g, b = rgb565_le(v)
        assert (r, g, b >> 3) == (0, 0, v)
    for v in range(64):
        r, g, b = rgb565_le(v << 5)
        assert (r, g >> 2, b) == (0, v, 0)


def test_rgb565_replicates_high_bits():
    for d in range(0, 0x10000, 97):
        r, g, b = rgb565_le(d)
        assert r & 7 == r >> 5
        assert g & 3 == g >> 6
        assert b & 7 == b >> 5


def test_rgb565_white():
    assert rgb565_le(0xFFFF) == (255, 255, 255)


def test_half_to_float_known_values():
    assert half_to_float(0x3C00) == 1.0
    assert half_to_float(0xC000) == -2.0


def test_half_to_float_special():
    assert half_to_float(0x7C00) == float("inf")
    assert half_to_float(0xFC00) == float("-inf")
    assert str(half_to_float(0x7E00)) == "nan"


def test_copy_block_buffer_clips():
    image = [None] * (5 * 3)
    block = list(range(16))
    copy_block_buffer(1, 0, 5, 3, 4, 4, block, image)
    assert image[4] == block[0]
    assert image[9] == block[4]
    assert image[14] == block[8]
    assert image[:4] == [None] * 4


def test_decode_blocks_layout():
    width, height = 6, 5
    data = bytes(range(4))
    image = decode_blocks(data, width, height, 4, 4, 1, lambda blk: [blk[0]] * 16)
    assert len(image) == width * height
    for y in range(height):
        for x in range(width):
            assert image[y * width + x] == (x // 4) + (y // 4) * 2


def test_decode_blocks_pixel_order():
    image = decode_blocks(bytes(1), 4, 4, 4, 4, 1, lambda blk: list(range(16)))
    for y in range(4):
        for x in range(4):
            assert image[y * 4 + x] == y * 4 + x


def test_decode_blocks_not_enough_data():
    with pytest.raises(ValueError):
        decode_blocks(bytes(3), 8, 8, 4, 4, 1, lambda blk: [0] * 16)