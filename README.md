# blocktex

Decoders for block-compressed GPU texture formats. They are written in plain
Python and need no third-party packages.

Supported formats:

- **BCn / DXT**: BC1, BC2, BC3, BC4, BC5, BC6H (signed and unsigned), BC7
- **ATC**: ATC RGB (4 bpp) and ATC RGBA (8 bpp, interpolated alpha)
- **ASTC**: LDR and HDR blocks, including void-extent blocks, with any block
  footprint of up to 144 texels (the sized helpers cover 4x4 to 12x12)

## Usage

Each image decoder takes three arguments: the compressed bytes, the image width
and the image height. It returns a list of `width * height` 32-bit pixels in
row-major order. A pixel is packed as little-endian BGRA, so blue is in the
lowest byte and alpha in the highest. `blocktex.color.pixels_to_bytes` turns the
list into raw BGRA bytes.

```python
from blocktex.bcn import decode_bc1
from blocktex.color import pixels_to_bytes

with open("texture.bc1", "rb") as fh:
    data = fh.read()

pixels = decode_bc1(data, 256, 256)
raw = pixels_to_bytes(pixels)  # 256 * 256 * 4 bytes, BGRA order
```

Image decoders:

- `blocktex.bcn`: `decode_bc1`, `decode_bc2`, `decode_bc3`, `decode_bc4`,
  `decode_bc5`, `decode_bc6_signed`, `decode_bc6_unsigned`,
  `decode_bc6(data, width, height, signed)`, `decode_bc7`
- `blocktex.atc`: `decode_atc_rgb4`, `decode_atc_rgba8`
- `blocktex.astc`: `decode_astc(data, width, height, block_width, block_height)`
  and sized helpers from `decode_astc_4_4` to `decode_astc_12_12`

```python
from blocktex.astc import decode_astc, decode_astc_6_6

pixels = decode_astc_6_6(data, width, height)
pixels = decode_astc(data, width, height, block_width=8, block_height=8)
```

BC4 writes its value into the red channel and BC5 writes into red and green. In
both cases the other channels are black and alpha is 255. HDR data (BC6H and
ASTC HDR modes) is clamped to the 0..255 range. Some blocks decode to a fixed
colour:

- Reserved BC6H and BC7 modes give all-zero pixels.
- ASTC blocks marked as errors give opaque magenta.

## Single blocks

The per-block decoders are public as well. Each one takes the bytes of one block
and returns that block's pixels:

- `blocktex.dxt`: `decode_bc1_block` to `decode_bc5_block`
- `blocktex.bc6`: `decode_bc6_block`
- `blocktex.bc7`: `decode_bc7_block`
- `blocktex.atc`: `decode_atc_rgb4_block`, `decode_atc_rgba8_block`
- `blocktex.astc`: `decode_astc_block(buf, block_width, block_height)`

The lower-level pieces are importable too. `blocktex.bitreader` holds the bit
readers. `blocktex.astc_params` and `blocktex.astc_endpoints` decode the ASTC
header and colour endpoints. `blocktex.color.decode_blocks` assembles an image
from any block decoder.

## Errors

The decoders raise `ValueError` in these cases:

- The data is shorter than the image dimensions require.
- A block is shorter than its format's block size.
- An ASTC footprint has more than 144 texels.
- An ASTC block is malformed, for example its weights do not fit in 128 bits
  or it uses an unsupported weight range or endpoint mode.

## Limitations

The package only decodes to in-memory pixel lists. It does not:

- read container files such as DDS, KTX or PVR,
- write image files,
- provide a command-line tool,
- handle ETC, EAC, PVRTC or crunch-compressed textures.

## Development

```
pip install -e .[test]
pytest
```