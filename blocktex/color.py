"""Pixel packing and image assembly shared by all block decoders.

Pixels are 32-bit integers that serialise little-endian as B, G, R, A bytes.
"""

import struct


def color(r, g, b, a):
    """Pack 8-bit channels into a BGRA pixel value."""
    return (b & 0xFF) | (g & 0xFF) << 8 | (r & 0xFF) << 16 | (a & 0xFF) << 24


def rgb565_le(d):
    """Expand a 16-bit RGB565 value into 8-bit ``(r, g, b)``."""
    d &= 0xFFFF
    r = (d >> 8 & 0xF8) | (d >> 13)
    g = (d >> 3 & 0xFC) | (d >> 9 & 3)
    b = ((d << 3) & 0xFF) | (d >> 2 & 7)
    return r, g, b


def half_to_float(value):
    """Convert IEEE 754 half-precision bits to a float."""
    return struct.unpack("<e", (value & 0xFFFF).to_bytes(2, "little"))[0]


def copy_block_buffer(bx, by, width, height, block_width, block_height, buffer, image):
    """Blit a decoded block into ``image``, clipping at the right and bottom edges."""
    x = block_width * bx
    y0 = block_height * by
    copy_width = min(block_width, width - x)
    copy_height = min(block_height, height - y0)
    for row in range(copy_height):
        start = (y0 + row) * width + x
        src = row * block_width
        image[start:start + copy_width] = buffer[src:src + copy_width]


def decode_blocks(data, width, height, block_width, block_height, block_size, decode_block):
    """Decode a whole image laid out as consecutive fixed-size blocks.

    ``decode_block`` takes the bytes of one block and returns its pixels in
    row-major order. Returns ``width * height`` pixels.
    """
    if block_width <= 0 or block_height <= 0:
        raise ValueError("block dimensions must be positive")
    blocks_x = -(-width // block_width)
    blocks_y = -(-height // block_height)
    if len(data) < blocks_x * blocks_y * block_size:
        raise ValueError("not enough data to decode image")
    image = [0] * (width * height)
    offset = 0
    for by in range(blocks_y):
        for bx in range(blocks_x):
            block = decode_block(data[offset:offset + block_size])
            copy_block_buffer(bx, by, width, height, block_width, block_height, block, image)
            offset += block_size
    return image


def pixels_to_bytes(pixels):
    """Serialise pixels as raw BGRA bytes."""
    return struct.pack(f"<{len(pixels)}I", *pixels)