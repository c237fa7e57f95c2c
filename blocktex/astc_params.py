"""ASTC block header decoding: block mode, partition count, colour endpoint
modes and bounded integer sequence (trit/quint) unpacking."""

from dataclasses import dataclass, field
from typing import NamedTuple

from blocktex.bitreader import getbits, getbits64

BLOCK_SIZE = 16

_U64 = (1 << 64) - 1

# Weight quantisation: (kind, bits) with kind 3 = trits, 5 = quints, 0 = bits only.
WEIGHT_PREC_A = (0, 0, 0, 3, 0, 5, 3, 0, 0, 0, 5, 3, 0, 5, 3, 0)
WEIGHT_PREC_B = (0, 0, 1, 0, 2, 0, 1, 3, 0, 0, 1, 2, 4, 2, 3, 5)

# Colour endpoint quantisation levels, from finest to coarsest.
CEM_PREC_A = (0, 3, 5, 0, 3, 5, 0, 3, 5, 0, 3, 5, 0, 3, 5, 0, 3, 0, 0)
CEM_PREC_B = (8, 6, 5, 7, 5, 4, 6, 4, 3, 5, 3, 2, 4, 2, 1, 3, 1, 2, 1)

_REVERSE8 = tuple(int(f"{i:08b}"[::-1], 2) for i in range(256))


def _bit(value, index):
    return (value >> index) & 1


def _decode_trits(t):
    """Unpack the five trits encoded in the 8-bit value ``t``."""
    if (t >> 2) & 7 == 7:
        c = ((t >> 5) & 7) << 2 | (t & 3)
        t4 = t3 = 2
    else:
        c = t & 0x1F
        if (t >> 5) & 3 == 3:
            t4, t3 = 2, _bit(t, 7)
        else:
            t4, t3 = _bit(t, 7), (t >> 5) & 3
    if c & 3 == 3:
        t2 = 2
        t1 = _bit(c, 4)
        t0 = _bit(c, 3) << 1 | (_bit(c, 2) & (1 - _bit(c, 3)))
    elif (c >> 2) & 3 == 3:
        t2 = t1 = 2
        t0 = c & 3
    else:
        t2 = _bit(c, 4)
        t1 = (c >> 2) & 3
        t0 = _bit(c, 1) << 1 | (_bit(c, 0) & (1 - _bit(c, 1)))
    return t0, t1, t2, t3, t4


def _decode_quints(q):
    """Unpack the three quints encoded in the 7-bit value ``q``."""
    if (q >> 1) & 3 == 3 and (q >> 5) & 3 == 0:
        not_q0 = 1 - _bit(q, 0)
        q2 = _bit(q, 0) << 2 | (_bit(q, 4) & not_q0) << 1 | (_bit(q, 3) & not_q0)
        return 4, 4, q2
    if (q >> 1) & 3 == 3:
        q2 = 4
        c = ((q >> 3) & 3) << 3 | (~(q >> 5) & 3) << 1 | (q & 1)
    else:
        q2 = (q >> 5) & 3
        c = q & 0x1F
    if c & 7 == 5:
        return (c >> 3) & 3, 4, q2
    return c & 7, (c >> 3) & 3, q2


_TRITS = tuple(zip(*(_decode_trits(t) for t in range(256))))
_QUINTS = tuple(zip(*(_decode_quints(q) for q in range(128))))


def _trit_index(d, b):
    return (
        (d >> b & 3)
        | (d >> (b * 2) & 0xC)
        | (d >> (b * 3) & 0x10)
        | (d >> (b * 4) & 0x60)
        | (d >> (b * 5) & 0x80)
    )


def _quint_index(d, b):
    return (d >> b & 7) | (d >> (b * 2) & 0x18) | (d >> (b * 3) & 0x60)


class IntSeqValue(NamedTuple):
    """One element of an integer sequence: its plain bits and its trit/quint."""

    bits: int
    nonbits: int


@dataclass
class BlockParams:
    """Layout of one ASTC block as described by its header bits."""

    block_width: int
    block_height: int
    width: int = 0
    height: int = 0
    part_num: int = 0
    dual_plane: bool = False
    plane_selector: int = 0
    weight_range: int = 0
    weight_num: int = 0
    cem: list = field(default_factory=lambda: [0, 0, 0, 0])
    cem_range: int = 0
    endpoint_value_num: int = 0


def bit_reverse_u8(c, bits):
    """Reverse the low ``bits`` bits of the byte ``c``."""
    if not 0 <= bits <= 8:
        raise ValueError(f"bit count {bits} outside 0..8")
    if bits == 0:
        return 0
    return _REVERSE8[c & 0xFF] >> (8 - bits)


def bit_reverse_u64(d, bits):
    """Reverse the low ``bits`` bits of the 64-bit value ``d``."""
    if not 0 < bits <= 64:
        raise ValueError(f"bit count {bits} outside 1..64")
    return int(f"{d & _U64:064b}"[::-1], 2) >> (64 - bits)


def _ise_bits(count, a, b):
    """Number of bits taken by ``count`` values of the given quantisation."""
    if a == 3:
        return count * b + (count * 8 + 4) // 5
    if a == 5:
        return count * b + (count * 7 + 2) // 3
    return count * b


def decode_intseq(buf, offset, a, b, count, reverse):
    """Decode ``count`` integer-sequence values starting at bit ``offset``.

    ``a`` is 3 for trits, 5 for quints and anything else for plain bits;
    ``b`` is the number of plain bits per value. With ``reverse`` the sequence
    is read backwards from ``offset`` with bit order reversed.
    """
    if count <= 0:
        return []
    mask = (1 << b) - 1

    if a not in (3, 5):
        if reverse:
            return [
                IntSeqValue(bit_reverse_u8(getbits(buf, offset - (n + 1) * b, b), b), 0)
                for n in range(count)
            ]
        return [IntSeqValue(getbits(buf, offset + n * b, b), 0) for n in range(count)]

    if a == 3:
        per_group, extra, positions, table, index = 5, 8, (0, 2, 4, 5, 7), _TRITS, _trit_index
    else:
        per_group, extra, positions, table, index = 3, 7, (0, 3, 5), _QUINTS, _quint_index

    block_size = extra + per_group * b
    block_count = (count + per_group - 1) // per_group
    last_count = (count + per_group - 1) % per_group + 1
    last_size = (block_size * last_count + per_group - 1) // per_group

    values = []
    p = offset
    for i in range(block_count):
        size = block_size if i < block_count - 1 else last_size
        if reverse:
            d = bit_reverse_u64(getbits64(buf, p - size, size), size)
            p -= block_size
        else:
            d = getbits64(buf, p, size)
            p += block_size
        x = index(d, b)
        for j, pos in enumerate(positions):
            if len(values) < count:
                values.append(IntSeqValue((d >> (pos + b * j)) & mask, table[j][x]))
    return values


def _grid_size(buf, params):
    """Fill in the weight grid size and weight range from the block mode."""
    b0, b1 = buf[0], buf[1]
    mode16 = b0 | b1 << 8
    params.weight_range = (b0 >> 4 & 1) | (b1 << 2 & 8)

    if b0 & 3:
        params.weight_range |= b0 << 1 & 6
        kind = b0 & 0xC
        if kind == 0:
            params.width = (mode16 >> 7 & 3) + 4
            params.height = (b0 >> 5 & 3) + 2
        elif kind == 4:
            params.width = (mode16 >> 7 & 3) + 8
            params.height = (b0 >> 5 & 3) + 2
        elif kind == 8:
            params.width = (b0 >> 5 & 3) + 2
            params.height = (mode16 >> 7 & 3) + 8
        elif b1 & 1:
            params.width = (b0 >> 7 & 1) + 2
            params.height = (b0 >> 5 & 3) + 2
        else:
            params.width = (b0 >> 5 & 3) + 2
            params.height = (b0 >> 7 & 1) + 6
    else:
        params.weight_range |= b0 >> 1 & 6
        kind = mode16 & 0x180
        if kind == 0:
            params.width = 12
            params.height = (b0 >> 5 & 3) + 2
        elif kind == 0x80:
            params.width = (b0 >> 5 & 3) + 2
            params.height = 12
        elif kind == 0x100:
            params.width = (b0 >> 5 & 3) + 6
            params.height = (b1 >> 1 & 3) + 6
            params.dual_plane = False
            params.weight_range &= 7
        else:
            wide = bool(b0 & 0x20)
            params.width = 10 if wide else 6
            params.height = 6 if wide else 10


def decode_block_params(buf, block_width, block_height):
    """Decode the header of a 16-byte ASTC block into :class:`BlockParams`."""
    if len(buf) < BLOCK_SIZE:
        raise ValueError(f"ASTC block needs {BLOCK_SIZE} bytes, got {len(buf)}")
    params = BlockParams(block_width, block_height)
    params.dual_plane = bool(buf[1] & 4)
    _grid_size(buf, params)

    params.part_num = (buf[1] >> 3 & 3) + 1
    params.weight_num = params.width * params.height
    if params.dual_plane:
        params.weight_num *= 2

    weight_bits = _ise_bits(
        params.weight_num,
        WEIGHT_PREC_A[params.weight_range],
        WEIGHT_PREC_B[params.weight_range],
    )

    cem_base = 0
    if params.part_num == 1:
        params.cem[0] = ((buf[1] | buf[2] << 8) >> 5) & 0xF
        config_bits = 17
    else:
        cem_base = ((buf[2] | buf[3] << 8) >> 7) & 3
        if cem_base == 0:
            shared = buf[3] >> 1 & 0xF
            for i in range(params.part_num):
                params.cem[i] = shared
            config_bits = 29
        else:
            for i in range(params.part_num):
                params.cem[i] = ((buf[3] >> (i + 1) & 1) + cem_base - 1) << 2
            if params.part_num == 2:
                params.cem[0] |= buf[3] >> 3 & 3
                params.cem[1] |= getbits(buf, 126 - weight_bits, 2)
            elif params.part_num == 3:
                params.cem[0] |= buf[3] >> 4 & 1
                params.cem[0] |= getbits(buf, 122 - weight_bits, 2) & 2
                params.cem[1] |= getbits(buf, 124 - weight_bits, 2)
                params.cem[2] |= getbits(buf, 126 - weight_bits, 2)
            else:
                for i in range(4):
                    params.cem[i] |= getbits(buf, 120 + i * 2 - weight_bits, 2)
            config_bits = 25 + params.part_num * 3

    if params.dual_plane:
        config_bits += 2
        if cem_base:
            selector_pos = 130 - weight_bits - params.part_num * 3
        else:
            selector_pos = 126 - weight_bits
        params.plane_selector = getbits(buf, selector_pos, 2)

    remain_bits = 128 - config_bits - weight_bits
    if remain_bits < 0:
        raise ValueError("invalid ASTC block: weights do not fit in 128 bits")

    params.endpoint_value_num = sum(
        (params.cem[i] >> 1 & 6) + 2 for i in range(params.part_num)
    )
    for level, (a, b) in enumerate(zip(CEM_PREC_A, CEM_PREC_B)):
        if _ise_bits(params.endpoint_value_num, a, b) <= remain_bits:
            params.cem_range = level
            break
    return params