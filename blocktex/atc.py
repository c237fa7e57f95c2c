"""ATC (AMD/ATI texture compression) block and image decoders."""

from blocktex.color import color, decode_blocks
from blocktex.dxt import decode_bc3_alpha


def _expand_quantized(value, bits):
    shifted = (value << (8 - bits)) & 0xFF
    return shifted | (shifted >> bits)


def _unpack_555(c):
    return [_expand_quantized((c >> shift) & 0x1F, 5) for shift in (0, 5, 10)]


def _unpack_565(c):
    return [
        _expand_quantized(c & 0x1F, 5),
        _expand_quantized((c >> 5) & 0x3F, 6),
        _expand_quantized((c >> 11) & 0x1F, 5),
    ]


def decode_atc_rgb4_block(data):
    """Decode an 8-byte ATC RGB block into 16 opaque pixels."""
    if len(data) < 8:
        raise ValueError(f"ATC RGB block needs 8 bytes, got {len(data)}")
    c0 = int.from_bytes(bytes(data[0:2]), "little")
    c1 = int.from_bytes(bytes(data[2:4]), "little")
    high = _unpack_565(c1)

    if c0 & 0x8000 == 0:
        low = _unpack_555(c0)
        palette = (
            low,
            [(5 * a + 3 * b) // 8 for a, b in zip(low, high)],
            [(5 * b + 3 * a) // 8 for a, b in zip(low, high)],
            high,
        )
    else:
        mid = _unpack_555(c0)
        palette = (
            [0, 0, 0],
            [(((a - b) & 0xFFFF) // 4) & 0xFF for a, b in zip(mid, high)],
            mid,
            high,
        )

    indices = int.from_bytes(bytes(data[4:8]), "little")
    pixels = []
    for i in range(16):
        entry = palette[(indices >> (2 * i)) & 3]
        pixels.append(color(entry[2], entry[1], entry[0], 255))
    return pixels


def decode_atc_rgba8_block(data):
    """Decode a 16-byte ATC RGBA (explicit interpolated alpha) block."""
    if len(data) < 16:
        raise ValueError(f"ATC RGBA block needs 16 bytes, got {len(data)}")
    return decode_bc3_alpha(data, decode_atc_rgb4_block(data[8:]), 3)


def decode_atc_rgb4(data, width, height):
    """Decode an ATC RGB image into ``width * height`` BGRA pixels."""
    return decode_blocks(data, width, height, 4, 4, 8, decode_atc_rgb4_block)


def decode_atc_rgba8(data, width, height):
    """Decode an ATC RGBA image into ``width * height`` BGRA pixels."""
    return decode_blocks(data, width, height, 4, 4, 16, decode_atc_rgba8_block)