"""Variable-length integer fields used for the mode selector and block count."""
from __future__ import annotations

def encode_int(n: int) -> bytes:
    """Minimal big-endian two's-complement encoding (``0 -> b"\\x00"``, ``128 -> b"\\x00\\x80"``)."""
    bits = n.bit_length() if n >= 0 else (~n).bit_length()
    return n.to_bytes(bits // 8 + 1, "big", signed=True)

def decode_int(data: bytes) -> int:
    if not data:
        raise ValueError("zero length integer field")
    return int.from_bytes(data, "big", signed=True)
