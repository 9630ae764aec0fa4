from __future__ import annotations
from keyrelay.protocol.constants import KEY_SIZE
from keyrelay.crypto.primitives import encrypt_block, decrypt_block

class KeyWrapError(ValueError):
    pass

def _validate(value: bytes, name: str) -> None:
    if len(value) != KEY_SIZE:
        raise KeyWrapError(f"{name} must be {KEY_SIZE} bytes, got {len(value)}")

def wrap_key(key: bytes, wrapping_key: bytes) -> bytes:
    _validate(key, "session key")
    _validate(wrapping_key, "wrapping key")
    return encrypt_block(key, wrapping_key)

def unwrap_key(wrapped: bytes, wrapping_key: bytes) -> bytes:
    _validate(wrapped, "wrapped key")
    _validate(wrapping_key, "wrapping key")
    return decrypt_block(wrapped, wrapping_key)
