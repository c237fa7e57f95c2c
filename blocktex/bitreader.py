"""Little-endian bit extraction helpers used by the block decoders."""

_U64 = (1 << 64) - 1


def _window(buf, bit_offset, num_bits):
    """Return the (at most four) bytes covering the requested bits as an int."""
    start = bit_offset // 8
    end = (bit_offset + num_bits + 7) // 8
    if end - start > 4:
        raise ValueError(
            f"cannot read {num_bits} bits at offset {bit_offset}: more than 4 bytes"
        )
    if start < 0 or end > len(buf):
        raise ValueError(
            f"bit range {bit_offset}..{bit_offset + num_bits} outside a "
            f"{len(buf)}-byte buffer"
        )
    return int.from_bytes(bytes(buf[start:end]), "little")


def getbits(buf, bit_offset, num_bits):
    """Read ``num_bits`` bits starting at ``bit_offset`` (LSB first)."""
    return (_window(buf, bit_offset, num_bits) >> (bit_offset % 8)) & (
        (1 << num_bits) - 1
    )


def _word(buf, index):
    start = index * 8
    if len(buf) < start + 8:
        raise ValueError(f"need {start + 8} bytes, buffer holds {len(buf)}")
    return int.from_bytes(bytes(buf[start:start + 8]), "little")


def getbits64(buf, bit, length):
    """Read up to 64 bits from a 128-bit block; ``bit`` may be negative."""
    if length == 0:
        return 0
    mask = (1 << length) - 1
    if bit >= 64:
        return (_word(buf, 1) >> (bit - 64)) & mask
    low = _word(buf, 0)
    if bit <= 0:
        return ((low << -bit) & _U64) & mask
    if bit + length <= 64:
        return (low >> bit) & mask
    high = _word(buf, 1)
    return (low >> bit) | (((high << (64 - bit)) & _U64) & mask)


class BitReader:
    """Sequential LSB-first reader over a byte buffer."""

    def __init__(self, data, bit_pos=0):
        self.data = data
        self.bit_pos = bit_pos

    def read(self, num_bits):
        """Read ``num_bits`` bits and advance the position."""
        value = self.peek(0, num_bits)
        self.bit_pos += num_bits
        return value

    def peek(self, offset, num_bits):
        """Read ``num_bits`` bits ``offset`` bits ahead without advancing."""
        pos = self.bit_pos + offset
        raw = _window(self.data, pos, num_bits)
        return ((raw >> (pos & 7)) & 0xFFFF) & ((1 << num_bits) - 1)