"""BC1 to BC5 (DXT1/3/5, RGTC) block decoders.

Each block decoder takes the bytes of one block and returns 16 pixels in
row-major order.
"""

from blocktex.color import color, rgb565_le

_OPAQUE_BLACK = color(0, 0, 0, 255)


def _require(data, size, name):
    if len(data) < size:
        raise ValueError(f"{name} block needs {size} bytes, got {len(data)}")


def decode_bc1_block(data):
    """Decode an 8-byte BC1 block."""
    _require(data, 8, "BC1")
    q0 = int.from_bytes(bytes(data[0:2]), "little")
    q1 = int.from_bytes(bytes(data[2:4]), "little")
    r0, g0, b0 = rgb565_le(q0)
    r1, g1, b1 = rgb565_le(q1)
    if q0 > q1:
        c2 = color((r0 * 2 + r1) // 3, (g0 * 2 + g1) // 3, (b0 * 2 + b1) // 3, 255)
        c3 = color((r0 + r1 * 2) // 3, (g0 + g1 * 2) // 3, (b0 + b1 * 2) // 3, 255)
    else:
        c2 = color((r0 + r1) // 2, (g0 + g1) // 2, (b0 + b1) // 2, 255)
        c3 = color(0, 0, 0, 0)
    palette = (color(r0, g0, b0, 255), color(r1, g1, b1, 255), c2, c3)
    indices = int.from_bytes(bytes(data[4:8]), "little")
    return [palette[(indices >> (2 * i)) & 3] for i in range(16)]


def _channel_mask(channel):
    shift = channel * 8
    return shift, 0xFFFFFFFF ^ (0xFF << shift)


def decode_bc2_alpha(data, pixels, channel):
    """Return ``pixels`` with ``channel`` replaced by BC2's explicit 4-bit values."""
    _require(data, 8, "BC2 alpha")
    shift, keep = _channel_mask(channel)
    nibbles = int.from_bytes(bytes(data[:8]), "little")
    result = []
    for i, pixel in enumerate(pixels[:16]):
        value = (nibbles >> (4 * i)) & 0xF
        result.append((pixel & keep) | ((value << 4) | value) << shift)
    return result + list(pixels[16:])


def decode_bc2_block(data):
    """Decode a 16-byte BC2 block."""
    _require(data, 16, "BC2")
    return decode_bc2_alpha(data, decode_bc1_block(data[8:]), 3)


def _bc3_palette(a0, a1):
    if a0 > a1:
        return (
            a0,
            a1,
            (a0 * 6 + a1) // 7,
            (a0 * 5 + a1 * 2) // 7,
            (a0 * 4 + a1 * 3) // 7,
            (a0 * 3 + a1 * 4) // 7,
            (a0 * 2 + a1 * 5) // 7,
            (a0 + a1 * 6) // 7,
        )
    return (
        a0,
        a1,
        (a0 * 4 + a1) // 5,
        (a0 * 3 + a1 * 2) // 5,
        (a0 * 2 + a1 * 3) // 5,
        (a0 + a1 * 4) // 5,
        0,
        255,
    )


def decode_bc3_alpha(data, pixels, channel):
    """Return ``pixels`` with ``channel`` replaced by BC3's interpolated values."""
    _require(data, 8, "BC3 alpha")
    shift, keep = _channel_mask(channel)
    palette = _bc3_palette(data[0], data[1])
    indices = int.from_bytes(bytes(data[:8]), "little") >> 16
    result = []
    for pixel in pixels:
        result.append((pixel & keep) | palette[indices & 7] << shift)
        indices >>= 3
    return result


def decode_bc3_block(data):
    """Decode a 16-byte BC3 block."""
    _require(data, 16, "BC3")
    return decode_bc3_alpha(data, decode_bc1_block(data[8:]), 3)


def decode_bc4_block(data):
    """Decode an 8-byte BC4 block into the red channel of opaque black pixels."""
    return decode_bc3_alpha(data, [_OPAQUE_BLACK] * 16, 2)


def decode_bc5_block(data):
    """Decode a 16-byte BC5 block into red and green of opaque black pixels."""
    _require(data, 16, "BC5")
    pixels = decode_bc3_alpha(data, [_OPAQUE_BLACK] * 16, 2)
    return decode_bc3_alpha(data[8:], pixels, 1)