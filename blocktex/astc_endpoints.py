"""ASTC colour endpoint decoding: integer-sequence unquantisation and the
sixteen colour endpoint modes, LDR and HDR."""

from blocktex.astc_params import BLOCK_SIZE, CEM_PREC_A, CEM_PREC_B, decode_intseq

_HDR_MAX = 0xFFF
_HDR_ALPHA = 0x780
_MAX_VALUES = 32

_TRIT_SCALE = (0, 204, 93, 44, 22, 11, 5)
_QUINT_SCALE = (0, 113, 54, 26, 13, 6)

_TRIT_SPREAD = {
    1: lambda x: 0,
    2: lambda x: 0b100010110 * x,
    3: lambda x: x << 7 | x << 2 | x,
    4: lambda x: x << 6 | x,
    5: lambda x: x << 5 | x >> 2,
    6: lambda x: x << 4 | x >> 4,
}

_QUINT_SPREAD = {
    1: lambda x: 0,
    2: lambda x: 0b100001100 * x,
    3: lambda x: x << 7 | x << 1 | x >> 1,
    4: lambda x: x << 6 | x >> 1,
    5: lambda x: x << 5 | x >> 3,
}

_BITS_EXPAND = {
    1: lambda v: v * 0xFF,
    2: lambda v: v * 0x55,
    3: lambda v: v << 5 | v << 2 | v >> 1,
    4: lambda v: v << 4 | v,
    5: lambda v: v << 3 | v >> 2,
    6: lambda v: v << 2 | v >> 4,
    7: lambda v: v << 1 | v >> 6,
    8: lambda v: v,
}


def _clamp(value, high):
    return min(max(value, 0), high)


def _clamped(values, high=255):
    return [_clamp(v, high) for v in values]


def _blue(r1, g1, b1, a1, r2, g2, b2, a2):
    """Blue-contracted endpoint pair."""
    return [
        (r1 + b1) >> 1, (g1 + b1) >> 1, b1, a1,
        (r2 + b2) >> 1, (g2 + b2) >> 1, b2, a2,
    ]


def _bit_transfer_signed(v, a, b):
    v[b] = (v[b] >> 1) | (v[a] & 0x80)
    v[a] = (v[a] >> 1) & 0x3F
    if v[a] & 0x20:
        v[a] -= 0x40


def _unquantize(item, a, b):
    """Map one integer-sequence value to the 0..255 range."""
    if a in (3, 5):
        scale = (_TRIT_SCALE if a == 3 else _QUINT_SCALE)[b]
        spread = (_TRIT_SPREAD if a == 3 else _QUINT_SPREAD).get(b, lambda x: 0)
        mask = (item.bits & 1) * 0x1FF
        base = item.nonbits * scale + spread(item.bits >> 1)
        return (mask & 0x80) | ((base ^ mask) >> 2)
    expand = _BITS_EXPAND.get(b)
    return expand(item.bits) if expand else 0


def decode_endpoints_hdr7(v):
    """Decode HDR RGB base+scale endpoints (mode 7) from four values."""
    if len(v) < 4:
        raise ValueError("HDR RGB scale mode needs 4 values")
    modeval = (v[2] >> 4 & 0x8) | (v[1] >> 5 & 0x4) | (v[0] >> 6)
    if modeval & 0xC != 0xC:
        major, mode = modeval >> 2, modeval & 3
    elif modeval != 0xF:
        major, mode = modeval & 3, 4
    else:
        major, mode = 0, 5

    c = [v[0] & 0x3F, v[1] & 0x1F, v[2] & 0x1F, v[3] & 0x1F]
    if mode == 0:
        c[3] |= v[3] & 0x60
        c[0] |= v[3] >> 1 & 0x40
        c[0] |= v[2] << 1 & 0x80
        c[0] |= v[1] << 3 & 0x300
        c[0] |= v[2] << 5 & 0x400
        shift = 1
    elif mode == 1:
        c[1] |= v[1] & 0x20
        c[2] |= v[2] & 0x20
        c[0] |= v[3] >> 1 & 0x40
        c[0] |= v[2] << 1 & 0x80
        c[0] |= v[1] << 2 & 0x100
        c[0] |= v[3] << 4 & 0x600
        shift = 1
    elif mode == 2:
        c[3] |= v[3] & 0xE0
        c[0] |= v[2] << 1 & 0xC0
        c[0] |= v[1] << 3 & 0x300
        shift = 2
    elif mode == 3:
        c[1] |= v[1] & 0x20
        c[2] |= v[2] & 0x20
        c[3] |= v[3] & 0x60
        c[0] |= v[3] >> 1 & 0x40
        c[0] |= v[2] << 1 & 0x80
        c[0] |= v[1] << 2 & 0x100
        shift = 3
    elif mode == 4:
        c[1] |= v[1] & 0x60
        c[2] |= v[2] & 0x60
        c[3] |= v[3] & 0x20
        c[0] |= v[3] >> 1 & 0x40
        c[0] |= v[3] << 1 & 0x80
        shift = 4
    else:
        c[1] |= v[1] & 0x60
        c[2] |= v[2] & 0x60
        c[3] |= v[3] & 0x60
        c[0] |= v[3] >> 1 & 0x40
        shift = 5
    c = [x << shift for x in c]

    if mode != 5:
        c[1] = c[0] - c[1]
        c[2] = c[0] - c[2]

    if major == 1:
        order = (c[1], c[0], c[2])
    elif major == 2:
        order = (c[2], c[1], c[0])
    else:
        order = (c[0], c[1], c[2])
    scale = c[3]
    return _clamped(
        [order[0] - scale, order[1] - scale, order[2] - scale, _HDR_ALPHA,
         order[0], order[1], order[2], _HDR_ALPHA],
        _HDR_MAX,
    )


def decode_endpoints_hdr11(v, alpha1, alpha2):
    """Decode HDR RGB direct endpoints (mode 11) from six values."""
    if len(v) < 6:
        raise ValueError("HDR RGB direct mode needs 6 values")
    major = (v[4] >> 7) | (v[5] >> 6 & 2)
    if major == 3:
        return [
            v[0] << 4, v[2] << 4, v[4] << 5 & 0xFE0, alpha1,
            v[1] << 4, v[3] << 4, v[5] << 5 & 0xFE0, alpha2,
        ]

    mode = (v[1] >> 7) | (v[2] >> 6 & 2) | (v[3] >> 5 & 4)
    va = v[0] | (v[1] << 2 & 0x100)
    vb0 = v[2] & 0x3F
    vb1 = v[3] & 0x3F
    vc = v[1] & 0x3F

    if mode in (0, 2):
        dmask, dsign, dfill = 0x7F, 0x40, 0xFF80
    elif mode in (1, 3, 5, 7):
        dmask, dsign, dfill = 0x3F, 0x20, 0xFFC0
    else:
        dmask, dsign, dfill = 0x1F, 0x10, 0xFFE0
    vd0 = v[4] & dmask
    if vd0 & dsign:
        vd0 |= dfill
    vd1 = v[5] & dmask
    if vd1 & dsign:
        vd1 |= dfill

    if mode == 0:
        vb0 |= v[2] & 0x40
        vb1 |= v[3] & 0x40
    elif mode == 1:
        vb0 |= v[2] & 0x40
        vb1 |= v[3] & 0x40
        vb0 |= v[4] << 1 & 0x80
        vb1 |= v[5] << 1 & 0x80
    elif mode == 2:
        va |= v[2] << 3 & 0x200
        vc |= v[3] & 0x40
    elif mode == 3:
        va |= v[4] << 3 & 0x200
        vc |= v[5] & 0x40
        vb0 |= v[2] & 0x40
        vb1 |= v[3] & 0x40
    elif mode == 4:
        va |= v[4] << 4 & 0x200
        va |= v[5] << 5 & 0x400
        vb0 |= v[2] & 0x40
        vb1 |= v[3] & 0x40
        vb0 |= v[4] << 1 & 0x80
        vb1 |= v[5] << 1 & 0x80
    elif mode == 5:
        va |= v[2] << 3 & 0x200
        va |= v[3] << 4 & 0x400
        vc |= v[5] & 0x40
        vc |= v[4] << 1 & 0x80
    elif mode == 6:
        va |= v[4] << 4 & 0x200
        va |= v[5] << 5 & 0x400
        va |= v[4] << 5 & 0x800
        vc |= v[5] & 0x40
        vb0 |= v[2] & 0x40
        vb1 |= v[3] & 0x40
    else:
        va |= v[2] << 3 & 0x200
        va |= v[3] << 4 & 0x400
        va |= v[4] << 5 & 0x800
        vc |= v[5] & 0x40

    shamt = (mode >> 1) ^ 3
    va <<= shamt
    vb0 <<= shamt
    vb1 <<= shamt
    vc <<= shamt
    vd0 <<= shamt
    vd1 <<= shamt

    if major == 1:
        values = [va - vb0 - vc - vd0, va - vc, va - vb1 - vc - vd1, alpha1,
                  va - vb0, va, va - vb1, alpha2]
    elif major == 2:
        values = [va - vb1 - vc - vd1, va - vb0 - vc - vd0, va - vc, alpha1,
                  va - vb1, va - vb0, va, alpha2]
    else:
        values = [va - vc, va - vb0 - vc - vd0, va - vb1 - vc - vd1, alpha1,
                  va, va - vb0, va - vb1, alpha2]
    return _clamped(values, _HDR_MAX)


def _decode_partition(cem, v):
    """Endpoint pair ``[r1, g1, b1, a1, r2, g2, b2, a2]`` for one partition."""
    if cem == 0:
        return [v[0], v[0], v[0], 255, v[1], v[1], v[1], 255]
    if cem == 1:
        l0 = (v[0] >> 2) | (v[1] & 0xC0)
        l1 = _clamp(l0 + (v[1] & 0x3F), 255)
        return [l0, l0, l0, 255, l1, l1, l1, 255]
    if cem == 2:
        if v[0] <= v[1]:
            y0, y1 = v[0] << 4, v[1] << 4
        else:
            y0, y1 = (v[1] << 4) + 8, (v[0] << 4) - 8
        return [y0, y0, y0, _HDR_ALPHA, y1, y1, y1, _HDR_ALPHA]
    if cem == 3:
        if v[0] & 0x80:
            y0 = (v[1] & 0xE0) << 4 | (v[0] & 0x7F) << 2
            d = (v[1] & 0x1F) << 2
        else:
            y0 = (v[1] & 0xF0) << 4 | (v[0] & 0x7F) << 1
            d = (v[1] & 0x0F) << 1
        y1 = _clamp(y0 + d, _HDR_MAX)
        return [y0, y0, y0, _HDR_ALPHA, y1, y1, y1, _HDR_ALPHA]
    if cem == 4:
        return [v[0], v[0], v[0], v[2], v[1], v[1], v[1], v[3]]
    if cem == 5:
        _bit_transfer_signed(v, 1, 0)
        _bit_transfer_signed(v, 3, 2)
        v[1] += v[0]
        return _clamped([v[0], v[0], v[0], v[2], v[1], v[1], v[1], v[2] + v[3]])
    if cem in (6, 10):
        a1, a2 = (v[4], v[5]) if cem == 10 else (255, 255)
        return [
            (v[0] * v[3]) >> 8, (v[1] * v[3]) >> 8, (v[2] * v[3]) >> 8, a1,
            v[0], v[1], v[2], a2,
        ]
    if cem == 7:
        return decode_endpoints_hdr7(v)
    if cem in (8, 12):
        a1, a2 = (v[6], v[7]) if cem == 12 else (255, 255)
        if v[0] + v[2] + v[4] <= v[1] + v[3] + v[5]:
            return [v[0], v[2], v[4], a1, v[1], v[3], v[5], a2]
        return _blue(v[1], v[3], v[5], a2, v[0], v[2], v[4], a1)
    if cem in (9, 13):
        pairs = 4 if cem == 13 else 3
        for i in range(pairs):
            _bit_transfer_signed(v, 2 * i + 1, 2 * i)
        if cem == 13:
            a1, a2 = v[6], v[6] + v[7]
        else:
            a1, a2 = 255, 255
        if v[1] + v[3] + v[5] >= 0:
            return _clamped([v[0], v[2], v[4], a1,
                             v[0] + v[1], v[2] + v[3], v[4] + v[5], a2])
        return _clamped(_blue(v[0] + v[1], v[2] + v[3], v[4] + v[5], a2,
                              v[0], v[2], v[4], a1))
    if cem == 11:
        return decode_endpoints_hdr11(v, _HDR_ALPHA, _HDR_ALPHA)
    if cem == 14:
        return decode_endpoints_hdr11(v, v[6], v[7])
    if cem == 15:
        mode = ((v[6] >> 7) & 1) | ((v[7] >> 6) & 2)
        v[6] &= 0x7F
        v[7] &= 0x7F
        if mode == 3:
            return decode_endpoints_hdr11(v, v[6] << 5, v[7] << 5)
        v[6] |= (v[7] << (mode + 1)) & 0x780
        v[7] = ((v[7] & (0x3F >> mode)) ^ (0x20 >> mode)) - (0x20 >> mode)
        v[6] <<= 4 - mode
        v[7] <<= 4 - mode
        return decode_endpoints_hdr11(v, v[6], _clamp(v[6] + v[7], _HDR_MAX))
    raise ValueError(f"unsupported ASTC colour endpoint mode {cem}")


def decode_endpoints(buf, params):
    """Decode the colour endpoints of an ASTC block.

    Returns one list of eight values ``[r1, g1, b1, a1, r2, g2, b2, a2]`` per
    partition. LDR modes give 0..255 values, HDR modes 0..0xfff values.
    """
    if len(buf) < BLOCK_SIZE:
        raise ValueError(f"ASTC block needs {BLOCK_SIZE} bytes, got {len(buf)}")
    a = CEM_PREC_A[params.cem_range]
    b = CEM_PREC_B[params.cem_range]
    offset = 17 if params.part_num == 1 else 29
    seq = decode_intseq(buf, offset, a, b, params.endpoint_value_num, False)
    values = [_unquantize(item, a, b) for item in seq]
    values += [0] * max(0, _MAX_VALUES - len(values))

    endpoints = []
    pos = 0
    for cem in params.cem[:params.part_num]:
        endpoints.append(_decode_partition(cem, values[pos:]))
        pos += (cem // 4 + 1) * 2
    return endpoints