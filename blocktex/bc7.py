"""BC7 (BPTC unorm) block decoder."""

from typing import NamedTuple

from blocktex.bitreader import BitReader
from blocktex.bptc_tables import (
    BPTC_ANCHOR2,
    BPTC_ANCHOR3,
    BPTC_FACTORS,
    partition2_subset,
    partition3_subset,
)
from blocktex.color import color

_BLOCK_SIZE = 16


class _ModeInfo(NamedTuple):
    num_subsets: int
    partition_bits: int
    rotation_bits: int
    index_selection_bits: int
    color_bits: int
    alpha_bits: int
    endpoint_pbits: int
    shared_pbits: int
    index_bits: tuple


_MODES = (
    _ModeInfo(3, 4, 0, 0, 4, 0, 1, 0, (3, 0)),
    _ModeInfo(2, 6, 0, 0, 6, 0, 0, 1, (3, 0)),
    _ModeInfo(3, 6, 0, 0, 5, 0, 0, 0, (2, 0)),
    _ModeInfo(2, 6, 0, 0, 7, 0, 1, 0, (2, 0)),
    _ModeInfo(1, 0, 2, 1, 5, 6, 0, 0, (2, 3)),
    _ModeInfo(1, 0, 2, 0, 7, 8, 0, 0, (2, 2)),
    _ModeInfo(1, 0, 0, 0, 7, 7, 1, 0, (4, 0)),
    _ModeInfo(2, 6, 0, 0, 5, 5, 1, 0, (2, 0)),
)


def _expand_quantized(value, bits):
    shifted = (value << (8 - bits)) & 0xFF
    return shifted | (shifted >> bits)


def _lerp(e0, e1, factor):
    return ((e0 * (64 - factor) + e1 * factor + 32) >> 6) & 0xFF


def _subset_and_anchor(num_subsets, partition, idx):
    if num_subsets == 2:
        subset = partition2_subset(partition, idx)
        return subset, BPTC_ANCHOR2[partition] if subset else 0
    if num_subsets == 3:
        subset = partition3_subset(partition, idx)
        return subset, BPTC_ANCHOR3[subset - 1][partition] if subset else 0
    return 0, 0


def decode_bc7_block(data):
    """Decode a 16-byte BC7 block into 16 pixels.

    Blocks with the reserved mode decode to 16 zero pixels.
    """
    if len(data) < _BLOCK_SIZE:
        raise ValueError(f"BC7 block needs {_BLOCK_SIZE} bytes, got {len(data)}")
    reader = BitReader(data, 0)
    mode = 0
    while reader.read(1) == 0 and mode < 8:
        mode += 1
    if mode == 8:
        return [0] * 16

    info = _MODES[mode]
    pbits = info.endpoint_pbits or info.shared_pbits
    partition = reader.read(info.partition_bits)
    rotation = reader.read(info.rotation_bits)
    selection = reader.read(info.index_selection_bits)
    count = info.num_subsets * 2

    rgb = [
        [(reader.read(info.color_bits) << pbits) & 0xFF for _ in range(count)]
        for _ in range(3)
    ]
    if info.alpha_bits:
        alpha = [(reader.read(info.alpha_bits) << pbits) & 0xFF for _ in range(count)]
    else:
        alpha = [0xFF] * count
    channels = rgb + [alpha]

    if pbits:
        for subset in range(info.num_subsets):
            pda = reader.read(pbits)
            pdb = pda if info.shared_pbits else reader.read(pbits)
            for channel in channels:
                channel[subset * 2] |= pda
                channel[subset * 2 + 1] |= pdb

    color_bits = info.color_bits + pbits
    for channel in rgb:
        channel[:] = [_expand_quantized(v, color_bits) for v in channel]
    if info.alpha_bits:
        alpha_bits = info.alpha_bits + pbits
        alpha[:] = [_expand_quantized(v, alpha_bits) for v in alpha]

    first_bits, second_bits = info.index_bits
    has_second = second_bits != 0
    factors = (
        BPTC_FACTORS[first_bits - 2],
        BPTC_FACTORS[(second_bits if has_second else first_bits) - 2],
    )
    offsets = [0, info.num_subsets * (16 * first_bits - 1)]

    pixels = []
    for idx in range(16):
        subset, anchor = _subset_and_anchor(info.num_subsets, partition, idx)
        is_anchor = int(idx == anchor)

        width = first_bits - is_anchor
        first = reader.peek(offsets[0], width)
        offsets[0] += width
        if has_second:
            width = second_bits - is_anchor
            second = reader.peek(offsets[1], width)
            offsets[1] += width
        else:
            second = first
        indices = (first, second)

        fc = factors[selection][indices[selection]]
        fa = factors[1 - selection][indices[1 - selection]]
        base = subset * 2
        r, g, b = (_lerp(ch[base], ch[base + 1], fc) for ch in rgb)
        a = _lerp(alpha[base], alpha[base + 1], fa)

        if rotation == 1:
            a, r = r, a
        elif rotation == 2:
            a, g = g, a
        elif rotation == 3:
            a, b = b, a
        pixels.append(color(r, g, b, a))
    return pixels