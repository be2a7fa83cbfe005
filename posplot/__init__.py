"""Building blocks for proof-of-space plot files: bit helpers, line-point
encoding, SHA-256, bit streams, histograms, directory locks and bucket sorting."""

__version__ = "0.1.0"

__all__ = [
    "bitstream",
    "disk_util",
    "encoding",
    "hist",
    "sha256",
    "sort_manager",
    "util",
]