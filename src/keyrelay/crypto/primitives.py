from __future__ import annotations
import hashlib
import hmac
import secrets
from keyrelay.protocol.constants import BLOCK_SIZE, KEY_SIZE

def require_cipher():
    try:
        from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
        return Cipher, algorithms, modes
    except ImportError as e:
        raise RuntimeError("Missing dependency 'cryptography'") from e

def _check_block_args(block: bytes, key: bytes) -> None:
    if len(block) != BLOCK_SIZE:
        raise ValueError(f"block must be {BLOCK_SIZE} bytes, got {len(block)}")
    if len(key) != KEY_SIZE:
        raise ValueError(f"key must be {KEY_SIZE} bytes, got {len(key)}")

def _aes_ecb(key: bytes):
    Cipher, algorithms, modes = require_cipher()
    return Cipher(algorithms.AES(key), modes.ECB())

def encrypt_block(block: bytes, key: bytes) -> bytes:
    _check_block_args(block, key)
    enc = _aes_ecb(key).encryptor()
    return enc.update(bytes(block)) + enc.finalize()

def decrypt_block(block: bytes, key: bytes) -> bytes:
    _check_block_args(block, key)
    dec = _aes_ecb(key).decryptor()
    return dec.update(bytes(block)) + dec.finalize()

def random_key() -> bytes:
    return secrets.token_bytes(KEY_SIZE)

def xor_bytes(a: bytes, b: bytes) -> bytes:
    if len(a) != len(b):
        raise ValueError(f"xor length mismatch: {len(a)} != {len(b)}")
    return bytes(x ^ y for x, y in zip(a, b))

def digest_for_logging(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()

def safe_compare(a: bytes, b: bytes) -> bool:
    return hmac.compare_digest(a, b)
