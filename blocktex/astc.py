"""ASTC block decoding: weight grids, partition selection, colour
interpolation and whole-image decoding."""

import math

from blocktex.astc_endpoints import decode_endpoints
from blocktex.astc_params import (
    BLOCK_SIZE,
    WEIGHT_PREC_A,
    WEIGHT_PREC_B,
    decode_block_params,
    decode_intseq,
)
from blocktex.color import color, decode_blocks, half_to_float

MAX_BLOCK_PIXELS = 144

# Colour endpoint modes whose colour (resp. alpha) channels are HDR.
_HDR_COLOR_MODES = frozenset({2, 3, 7, 11, 14, 15})
_HDR_ALPHA_MODES = frozenset({2, 3, 7, 11, 15})

_ERROR_COLOR = color(255, 0, 255, 255)

_U32 = 0xFFFFFFFF


def select_color(v0, v1, weight):
    """Interpolate two 8-bit LDR endpoint values with a 0..64 weight."""
    mixed = ((v0 << 8 | v0) * (64 - weight) + (v1 << 8 | v1) * weight + 32) >> 6
    return ((mixed * 255 + 32768) // 65536) & 0xFF


def select_color_hdr(v0, v1, weight):
    """Interpolate two 12-bit HDR endpoint values and map the result to 8 bits."""
    c = (((v0 << 4) * (64 - weight) + (v1 << 4) * weight + 32) >> 6) & 0xFFFF
    m = c & 0x7FF
    if m < 512:
        m *= 3
    elif m < 1536:
        m = 4 * m - 512
    else:
        m = 5 * m - 2048
    f = half_to_float((c >> 1 & 0x7C00) | (m & 0xFFFF) >> 3)
    if not math.isfinite(f):
        return 255
    return min(max(math.floor(f * 255.0), 0), 255)


def _half_to_u8(h):
    f = half_to_float(h)
    if math.isnan(f):
        return 0
    if math.isinf(f):
        return 255 if f > 0 else 0
    return min(max(math.floor(f * 255.0), 0), 255)


def _unquantize_weight(item, a, b):
    """Map one weight integer-sequence value to the 0..64 range."""
    bits, nonbits = item.bits, item.nonbits
    if a == 0:
        if b == 1:
            w = 63 if bits else 0
        elif b == 2:
            w = bits << 4 | bits << 2 | bits
        elif b == 3:
            w = bits << 3 | bits
        elif b == 4:
            w = bits << 2 | bits >> 2
        elif b == 5:
            w = bits << 1 | bits >> 4
        else:
            raise ValueError("unsupported ASTC weight range")
        return w + 1 if w > 32 else w
    if b == 0:
        return nonbits * (32 if a == 3 else 16)
    if a == 3 and b == 1:
        w = nonbits * 50
    elif a == 3 and b == 2:
        w = nonbits * 23 + (0b1000101 if bits & 2 else 0)
    elif a == 3 and b == 3:
        w = nonbits * 11 + ((bits << 4 | bits >> 1) & 0b1100011)
    elif a == 5 and b == 1:
        w = nonbits * 28
    elif a == 5 and b == 2:
        w = nonbits * 13 + (0b1000010 if bits & 2 else 0)
    else:
        raise ValueError("unsupported ASTC weight range")
    mask = (bits & 1) * 0x7F
    w = (mask & 0x20) | ((w ^ mask) >> 2)
    return w + 1 if w > 32 else w


def decode_weights(buf, params):
    """Decode and infill the weight grid to one ``(plane0, plane1)`` pair per texel.

    For single-plane blocks the second value is always 0.
    """
    bw, bh = params.block_width, params.block_height
    if bw < 2 or bh < 2:
        raise ValueError("ASTC block dimensions must be at least 2")
    a = WEIGHT_PREC_A[params.weight_range]
    b = WEIGHT_PREC_B[params.weight_range]
    if a == 0 and not 1 <= b <= 5:
        raise ValueError("unsupported ASTC weight range")
    seq = decode_intseq(buf, 128, a, b, params.weight_num, True)
    values = [_unquantize_weight(item, a, b) for item in seq]

    planes = 2 if params.dual_plane else 1
    grid_w, grid_h = params.width, params.height
    needed = max(128, (grid_w * grid_h + 2 * grid_w + 2) * planes)
    wv = values + [0] * (needed - len(values))

    ds = (1024 + bw // 2) // (bw - 1)
    dt = (1024 + bh // 2) // (bh - 1)
    result = []
    for t in range(bh):
        gt = (dt * t * (grid_h - 1) + 32) >> 6
        ft = gt & 0xF
        for s in range(bw):
            gs = (ds * s * (grid_w - 1) + 32) >> 6
            fs = gs & 0xF
            v = (gs >> 4) + (gt >> 4) * grid_w
            w11 = (fs * ft + 8) >> 4
            w10 = ft - w11
            w01 = fs - w11
            w00 = 16 - fs - ft + w11
            texel = [
                (
                    wv[v * planes + p] * w00
                    + wv[(v + 1) * planes + p] * w01
                    + wv[(v + grid_w) * planes + p] * w10
                    + wv[(v + grid_w + 1) * planes + p] * w11
                    + 8
                ) >> 4
                for p in range(planes)
            ]
            result.append((texel[0], texel[1] if planes == 2 else 0))
    return result


def _hash_seed(seed):
    rnum = seed & _U32
    rnum ^= rnum >> 15
    rnum = (rnum - (rnum << 17)) & _U32
    rnum = (rnum + (rnum << 7)) & _U32
    rnum = (rnum + (rnum << 4)) & _U32
    rnum ^= rnum >> 5
    rnum = (rnum + (rnum << 16)) & _U32
    rnum ^= rnum >> 7
    rnum ^= rnum >> 3
    rnum = (rnum ^ (rnum << 6)) & _U32
    rnum ^= rnum >> 17
    return rnum


def select_partition(buf, params):
    """Partition index of every texel, in row-major order."""
    part_num = params.part_num
    bw, bh = params.block_width, params.block_height
    word = int.from_bytes(bytes(buf[0:4]), "little")
    seed = (word >> 13 & 0x3FF) | (part_num - 1) << 10
    rnum = _hash_seed(seed)

    seeds = [((rnum >> (i * 4)) & 0xF) ** 2 for i in range(8)]
    sh = (4 if seed & 2 else 5, 6 if part_num == 3 else 5)
    if seed & 1:
        seeds = [s >> sh[i % 2] for i, s in enumerate(seeds)]
    else:
        seeds = [s >> sh[1 - i % 2] for i, s in enumerate(seeds)]

    scale = 2 if bw * bh < 31 else 1
    result = []
    for t in range(bh):
        y = t * scale
        for s in range(bw):
            x = s * scale
            a = (seeds[0] * x + seeds[1] * y + (rnum >> 14)) & 0x3F
            b = (seeds[2] * x + seeds[3] * y + (rnum >> 10)) & 0x3F
            c = (seeds[4] * x + seeds[5] * y + (rnum >> 6)) & 0x3F if part_num >= 3 else 0
            d = (seeds[6] * x + seeds[7] * y + (rnum >> 2)) & 0x3F if part_num >= 4 else 0
            if a >= b and a >= c and a >= d:
                result.append(0)
            elif b >= c and b >= d:
                result.append(1)
            elif c >= d:
                result.append(2)
            else:
                result.append(3)
    return result


def _apply_color(params, endpoints, weights, partition):
    selectors = [0, 0, 0, 0]
    if params.dual_plane:
        selectors[params.plane_selector] = 1
    pixels = []
    for texel, part in zip(weights, partition):
        cem = params.cem[part]
        ep = endpoints[part]
        pick_color = select_color_hdr if cem in _HDR_COLOR_MODES else select_color
        pick_alpha = select_color_hdr if cem in _HDR_ALPHA_MODES else select_color
        r = pick_color(ep[0], ep[4], texel[selectors[0]])
        g = pick_color(ep[1], ep[5], texel[selectors[1]])
        b = pick_color(ep[2], ep[6], texel[selectors[2]])
        a = pick_alpha(ep[3], ep[7], texel[selectors[3]])
        pixels.append(color(r, g, b, a))
    return pixels


def decode_astc_block(buf, block_width, block_height):
    """Decode one 16-byte ASTC block into ``block_width * block_height`` pixels."""
    buf = bytes(buf)
    if len(buf) < BLOCK_SIZE:
        raise ValueError(f"ASTC block needs {BLOCK_SIZE} bytes, got {len(buf)}")
    count = block_width * block_height
    if count > MAX_BLOCK_PIXELS:
        raise ValueError("block size is too big")

    if buf[0] == 0xFC and buf[1] & 1:
        if buf[1] & 2:
            channels = [
                _half_to_u8(int.from_bytes(buf[i:i + 2], "little"))
                for i in (8, 10, 12, 14)
            ]
            fill = color(*channels)
        else:
            fill = color(buf[9], buf[11], buf[13], buf[15])
        return [fill] * count
    if ((buf[0] & 0xC3) == 0xC0 and buf[1] & 1) or (buf[0] & 0xF) == 0:
        return [_ERROR_COLOR] * count

    params = decode_block_params(buf, block_width, block_height)
    endpoints = decode_endpoints(buf, params)
    weights = decode_weights(buf, params)
    if params.part_num > 1:
        partition = select_partition(buf, params)
    else:
        partition = [0] * count
    return _apply_color(params, endpoints, weights, partition)


def decode_astc(data, width, height, block_width, block_height):
    """Decode an ASTC image into ``width * height`` BGRA pixels."""
    if block_width * block_height > MAX_BLOCK_PIXELS:
        raise ValueError("block size is too big")
    return decode_blocks(
        data,
        width,
        height,
        block_width,
        block_height,
        BLOCK_SIZE,
        lambda block: decode_astc_block(block, block_width, block_height),
    )


def decode_astc_4_4(data, width, height):
    """Decode an ASTC 4x4 image."""
    return decode_astc(data, width, height, 4, 4)


def decode_astc_5_4(data, width, height):
    """Decode an ASTC 5x4 image."""
    return decode_astc(data, width, height, 5, 4)


def decode_astc_5_5(data, width, height):
    """Decode an ASTC 5x5 image."""
    return decode_astc(data, width, height, 5, 5)


def decode_astc_6_5(data, width, height):
    """Decode an ASTC 6x5 image."""
    return decode_astc(data, width, height, 6, 5)


def decode_astc_6_6(data, width, height):
    """Decode an ASTC 6x6 image."""
    return decode_astc(data, width, height, 6, 6)


def decode_astc_8_5(data, width, height):
    """Decode an ASTC 8x5 image."""
    return decode_astc(data, width, height, 8, 5)


def decode_astc_8_6(data, width, height):
    """Decode an ASTC 8x6 image."""
    return decode_astc(data, width, height, 8, 6)


def decode_astc_8_8(data, width, height):
    """Decode an ASTC 8x8 image."""
    return decode_astc(data, width, height, 8, 8)


def decode_astc_10_5(data, width, height):
    """Decode an ASTC 10x5 image."""
    return decode_astc(data, width, height, 10, 5)


def decode_astc_10_6(data, width, height):
    """Decode an ASTC 10x6 image."""
    return decode_astc(data, width, height, 10, 6)


def decode_astc_10_8(data, width, height):
    """Decode an ASTC 10x8 image."""
    return decode_astc(data, width, height, 10, 8)


def decode_astc_10_10(data, width, height):
    """Decode an ASTC 10x10 image."""
    return decode_astc(data, width, height, 10, 10)


def decode_astc_12_10(data, width, height):
    """Decode an ASTC 12x10 image."""
    return decode_astc(data, width, height, 12, 10)


def decode_astc_12_12(data, width, height):
    """Decode an ASTC 12x12 image."""
    return decode_astc(data, width, height, 12, 12)