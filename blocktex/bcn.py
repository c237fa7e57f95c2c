"""Whole-image decoders for the BC1 to BC7 formats."""

from blocktex.bc6 import decode_bc6_block_signed, decode_bc6_block_unsigned
from blocktex.bc7 import decode_bc7_block
from blocktex.color import decode_blocks
from blocktex.dxt import (
    decode_bc1_block,
    decode_bc2_block,
    decode_bc3_block,
    decode_bc4_block,
    decode_bc5_block,
)


def decode_bc1(data, width, height):
    """Decode a BC1 image into ``width * height`` BGRA pixels."""
    return decode_blocks(data, width, height, 4, 4, 8, decode_bc1_block)


def decode_bc2(data, width, height):
    """Decode a BC2 image into ``width * height`` BGRA pixels."""
    return decode_blocks(data, width, height, 4, 4, 16, decode_bc2_block)


def decode_bc3(data, width, height):
    """Decode a BC3 image into ``width * height`` BGRA pixels."""
    return decode_blocks(data, width, height, 4, 4, 16, decode_bc3_block)


def decode_bc4(data, width, height):
    """Decode a BC4 image into ``width * height`` BGRA pixels."""
    return decode_blocks(data, width, height, 4, 4, 8, decode_bc4_block)


def decode_bc5(data, width, height):
    """Decode a BC5 image into ``width * height`` BGRA pixels."""
    return decode_blocks(data, width, height, 4, 4, 16, decode_bc5_block)


def decode_bc6_signed(data, width, height):
    """Decode a signed BC6H image into ``width * height`` BGRA pixels."""
    return decode_blocks(data, width, height, 4, 4, 16, decode_bc6_block_signed)


def decode_bc6_unsigned(data, width, height):
    """Decode an unsigned BC6H image into ``width * height`` BGRA pixels."""
    return decode_blocks(data, width, height, 4, 4, 16, decode_bc6_block_unsigned)


def decode_bc6(data, width, height, signed):
    """Decode a BC6H image, signed or unsigned."""
    if signed:
        return decode_bc6_signed(data, width, height)
    return decode_bc6_unsigned(data, width, height)


def decode_bc7(data, width, height):
    """Decode a BC7 image into ``width * height`` BGRA pixels."""
    return decode_blocks(data, width, height, 4, 4, 16, decode_bc7_block)