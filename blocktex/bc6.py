"""BC6H (BPTC float) block decoder producing 8-bit BGRA pixels."""

from typing import NamedTuple

from blocktex.bitreader import BitReader
from blocktex.bptc_tables import BPTC_ANCHOR2, BPTC_FACTORS, partition2_subset
from blocktex.color import color, half_to_float

_U16 = 0xFFFF
_BLOCK_SIZE = 16


def _layout(spec):
    """Parse a field layout such as ``"r0:10 g2:1<<4"``.

    Each token names a channel and endpoint slot, the number of bits read and
    the position they are shifted to.
    """
    fields = []
    for token in spec.split():
        target, _, width = token.partition(":")
        bits, _, shift = width.partition("<<")
        fields.append(("rgb".index(target[0]), int(target[1]), int(bits), int(shift or 0)))
    return tuple(fields)


class _ModeInfo(NamedTuple):
    transformed: bool
    partition_bits: int
    endpoint_bits: int
    delta_bits: tuple
    layout: tuple


_MODES = {
    0: _ModeInfo(True, 5, 10, (5, 5, 5), _layout(
        "g2:1<<4 b2:1<<4 b3:1<<4 r0:10 g0:10 b0:10 r1:5 g3:1<<4 g2:4 g1:5 "
        "b3:1 g3:4 b1:5 b3:1<<1 b2:4 r2:5 b3:1<<2 r3:5 b3:1<<3"
    )),
    1: _ModeInfo(True, 5, 7, (6, 6, 6), _layout(
        "g2:1<<5 g3:1<<4 g3:1<<5 r0:7 b3:1 b3:1<<1 b2:1<<4 g0:7 b2:1<<5 "
        "b3:1<<2 g2:1<<4 b0:7 b3:1<<3 b3:1<<5 b3:1<<4 r1:6 g2:4 g1:6 g3:4 "
        "b1:6 b2:4 r2:6 r3:6"
    )),
    2: _ModeInfo(True, 5, 11, (5, 4, 4), _layout(
        "r0:10 g0:10 b0:10 r1:5 r0:1<<10 g2:4 g1:4 g0:1<<10 b3:1 g3:4 b1:4 "
        "b0:1<<10 b3:1<<1 b2:4 r2:5 b3:1<<2 r3:5 b3:1<<3"
    )),
    3: _ModeInfo(False, 0, 10, (10, 10, 10), _layout(
        "r0:10 g0:10 b0:10 r1:10 g1:10 b1:10"
    )),
    6: _ModeInfo(True, 5, 11, (4, 5, 4), _layout(
        "r0:10 g0:10 b0:10 r1:4 r0:1<<10 g3:1<<4 g2:4 g1:5 g0:1<<10 g3:4 "
        "b1:4 b0:1<<10 b3:1<<1 b2:4 r2:4 b3:1 b3:1<<2 r3:4 g2:1<<4 b3:1<<3"
    )),
    7: _ModeInfo(True, 0, 11, (9, 9, 9), _layout(
        "r0:10 g0:10 b0:10 r1:9 r0:1<<10 g1:9 g0:1<<10 b1:9 b0:1<<10"
    )),
    10: _ModeInfo(True, 5, 11, (4, 4, 5), _layout(
        "r0:10 g0:10 b0:10 r1:4 r0:1<<10 b2:1<<4 g2:4 g1:4 g0:1<<10 b3:1 "
        "g3:4 b1:5 b0:1<<10 b2:4 r2:4 b3:1<<1 b3:1<<2 r3:4 b3:1<<4 b3:1<<3"
    )),
    11: _ModeInfo(True, 0, 12, (8, 8, 8), _layout(
        "r0:10 g0:10 b0:10 r1:8 r0:1<<11 r0:1<<10 g1:8 g0:1<<11 g0:1<<10 "
        "b1:8 b0:1<<11 b0:1<<10"
    )),
    14: _ModeInfo(True, 5, 9, (5, 5, 5), _layout(
        "r0:9 b2:1<<4 g0:9 g2:1<<4 b0:9 b3:1<<4 r1:5 g3:1<<4 g2:4 g1:5 b3:1 "
        "g3:4 b1:5 b3:1<<1 b2:4 r2:5 b3:1<<2 r3:5 b3:1<<3"
    )),
    15: _ModeInfo(True, 0, 16, (4, 4, 4), _layout(
        "r0:10 g0:10 b0:10 "
        "r1:4 r0:1<<15 r0:1<<14 r0:1<<13 r0:1<<12 r0:1<<11 r0:1<<10 "
        "g1:4 g0:1<<15 g0:1<<14 g0:1<<13 g0:1<<12 g0:1<<11 g0:1<<10 "
        "b1:4 b0:1<<15 b0:1<<14 b0:1<<13 b0:1<<12 b0:1<<11 b0:1<<10"
    )),
    18: _ModeInfo(True, 5, 8, (6, 5, 5), _layout(
        "r0:8 g3:1<<4 b2:1<<4 g0:8 b3:1<<2 g2:1<<4 b0:8 b3:1<<3 b3:1<<4 "
        "r1:6 g2:4 g1:5 b3:1 g3:4 b1:5 b3:1<<1 b2:4 r2:6 r3:6"
    )),
    22: _ModeInfo(True, 5, 8, (5, 6, 5), _layout(
        "r0:8 b3:1 b2:1<<4 g0:8 g2:1<<5 g2:1<<4 b0:8 g3:1<<5 b3:1<<4 r1:5 "
        "g3:1<<4 g2:4 g1:6 g3:4 b1:5 b3:1<<1 b2:4 r2:5 b3:1<<2 r3:5 b3:1<<3"
    )),
    26: _ModeInfo(True, 5, 8, (5, 5, 6), _layout(
        "r0:8 b3:1<<1 b2:1<<4 g0:8 b2:1<<5 g2:1<<4 b0:8 b3:1<<5 b3:1<<4 "
        "r1:5 g3:1<<4 g2:4 g1:5 b3:1 g3:4 b1:6 b2:4 r2:5 b3:1<<2 r3:5 b3:1<<3"
    )),
    30: _ModeInfo(False, 5, 6, (6, 6, 6), _layout(
        "r0:6 g3:1<<4 b3:1 b3:1<<1 b2:1<<4 g0:6 g2:1<<5 b2:1<<5 b3:1<<2 "
        "g2:1<<4 b0:6 g3:1<<5 b3:1<<3 b3:1<<5 b3:1<<4 r1:6 g2:4 g1:6 g3:4 "
        "b1:6 b2:4 r2:6 r3:6"
    )),
}


def _sign_extend(value, num_bits):
    mask = 1 << (num_bits - 1)
    return ((value ^ mask) - mask) & _U16


def _unquantize(value, signed, endpoint_bits):
    max_value = 1 << (endpoint_bits - 1)
    if signed:
        if endpoint_bits >= 16:
            return value
        negative = value & 0x8000
        value &= 0x7FFF
        if value == 0:
            unq = 0
        elif value >= max_value - 1:
            unq = 0x7FFF
        else:
            unq = (((value << 15) + 0x4000) >> (endpoint_bits - 1)) & _U16
        return (0x10000 - unq) & _U16 if negative else unq
    if endpoint_bits >= 15:
        return value
    if value == 0:
        return 0
    if value == max_value:
        return _U16
    return (((value << 15) + 0x4000) >> (endpoint_bits - 1)) & _U16


def _finish_unquantize(value, signed):
    if signed:
        return ((((value & 0x7FFF) * 31) >> 5) & _U16) | (value & 0x8000)
    return ((value * 31) >> 6) & _U16


def _half_to_u8(h):
    f = half_to_float(h)
    if f != f:
        return 0
    return int(min(max(f * 255.0, 0.0), 255.0))


def decode_bc6_block(data, signed):
    """Decode a 16-byte BC6H block into 16 opaque pixels.

    Reserved modes decode to 16 zero pixels.
    """
    if len(data) < _BLOCK_SIZE:
        raise ValueError(f"BC6H block needs {_BLOCK_SIZE} bytes, got {len(data)}")
    reader = BitReader(data, 0)
    mode = reader.read(2)
    if mode & 2:
        mode |= reader.read(3) << 2
    info = _MODES.get(mode)
    if info is None:
        return [0] * 16

    endpoints = [[0] * 4 for _ in range(3)]
    for channel, slot, bits, shift in info.layout:
        endpoints[channel][slot] |= reader.read(bits) << shift

    bits = info.endpoint_bits
    if signed:
        for channel in endpoints:
            channel[0] = _sign_extend(channel[0], bits)

    num_subsets = 2 if info.partition_bits else 1
    mask = (1 << bits) - 1
    for slot in range(1, num_subsets * 2):
        for channel, delta_bits in zip(endpoints, info.delta_bits):
            if signed or info.transformed:
                channel[slot] = _sign_extend(channel[slot], delta_bits)
            if info.transformed:
                channel[slot] = ((channel[slot] + channel[0]) & _U16) & mask
                if signed:
                    channel[slot] = _sign_extend(channel[slot], bits)

    for channel in endpoints:
        for slot in range(num_subsets * 2):
            channel[slot] = _unquantize(channel[slot], signed, bits)

    partition = reader.read(5) if info.partition_bits else 0
    index_bits = 3 if info.partition_bits else 4
    factors = BPTC_FACTORS[index_bits - 2]

    pixels = []
    for idx in range(16):
        subset = partition2_subset(partition, idx) if info.partition_bits else 0
        anchor_index = BPTC_ANCHOR2[partition] if subset else 0
        index = reader.read(index_bits - (idx == anchor_index))
        fcb = factors[index]
        fca = 64 - fcb
        base = subset * 2
        r, g, b = (
            _half_to_u8(_finish_unquantize(
                ((ch[base] * fca + ch[base + 1] * fcb + 32) >> 6) & _U16, signed
            ))
            for ch in endpoints
        )
        pixels.append(color(r, g, b, 255))
    return pixels


def decode_bc6_block_signed(data):
    """Decode a signed BC6H block."""
    return decode_bc6_block(data, True)


def decode_bc6_block_unsigned(data):
    """Decode an unsigned BC6H block."""
    return decode_bc6_block(data, False)