"""Decoders for block-compressed GPU texture formats (BCn, ATC, ASTC)."""

__version__ = "0.1.0"

__all__ = [
    "astc",
    "astc_endpoints",
    "astc_params",
    "atc",
    "bc6",
    "bc7",
    "bcn",
    "bitreader",
    "bptc_tables",
    "color",
    "dxt",
]