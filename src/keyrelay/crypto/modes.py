"""Block cipher modes built on the single-block AES primitive.

The payload is cut into 16-byte chunks and each chunk is PKCS#7-padded and
encrypted on its own, so a session carries one ciphertext unit per chunk:
32 bytes for a full chunk, 16 bytes for the short tail. An empty payload
encrypts to no units at all.
"""
from __future__ import annotations
from abc import ABC, abstractmethod
from enum import IntEnum
from typing import List, Optional, Sequence

from keyrelay.protocol.constants import BLOCK_SIZE, IV_SIZE, MODE_ECB, MODE_CBC
from keyrelay.crypto.primitives import encrypt_block, decrypt_block, xor_bytes


def require_padding():
    try:
        from cryptography.hazmat.primitives import padding
        return padding
    except ImportError as e:
        raise RuntimeError("Missing dependency 'cryptography'") from e


def pad(payload: bytes) -> bytes:
    padder = require_padding().PKCS7(BLOCK_SIZE * 8).padder()
    return padder.update(bytes(payload)) + padder.finalize()


def unpad(data: bytes) -> bytes:
    unpadder = require_padding().PKCS7(BLOCK_SIZE * 8).unpadder()
    return unpadder.update(data) + unpadder.finalize()


def chunk(data: bytes) -> List[bytes]:
    return [data[i:i + BLOCK_SIZE] for i in range(0, len(data), BLOCK_SIZE)]


def seal_chunk(piece: bytes, key: bytes) -> bytes:
    """Pad one payload chunk and encrypt it into a 16- or 32-byte unit."""
    return b"".join(encrypt_block(b, key) for b in chunk(pad(piece)))


def open_unit(unit: bytes, key: bytes) -> bytes:
    if len(unit) not in (BLOCK_SIZE, 2 * BLOCK_SIZE):
        raise ValueError(f"ciphertext unit is {len(unit)} bytes, expected {BLOCK_SIZE} or {2 * BLOCK_SIZE}")
    return unpad(b"".join(decrypt_block(b, key) for b in chunk(unit)))


class Mode(IntEnum):
    ECB = MODE_ECB
    CBC = MODE_CBC

    @classmethod
    def from_selector(cls, selector: int) -> "Mode":
        # anything that is not the ECB code falls back to CBC
        return cls.ECB if selector == MODE_ECB else cls.CBC


class CipherMode(ABC):
    mode: Mode

    @abstractmethod
    def encrypt(self, payload: bytes) -> List[bytes]:
        ...

    @abstractmethod
    def decrypt(self, blocks: Sequence[bytes]) -> bytes:
        ...


class ECBMode(CipherMode):
    mode = Mode.ECB

    def __init__(self, key: bytes):
        self._key = bytes(key)

    def encrypt(self, payload: bytes) -> List[bytes]:
        return [seal_chunk(p, self._key) for p in chunk(payload)]

    def decrypt(self, blocks: Sequence[bytes]) -> bytes:
        return b"".join(open_unit(c, self._key) for c in blocks)


class CBCMode(CipherMode):
    """CBC over the per-chunk primitive.

    Each chunk is XORed with the leading bytes of the chaining value before
    it is sealed. The chaining value starts at ``iv`` and is replaced by every
    ciphertext unit this instance produces or consumes, so successive calls
    continue one chain. Encryptor and decryptor must each be seeded with the
    same IV.
    """
    mode = Mode.CBC

    def __init__(self, key: bytes, iv: bytes):
        if len(iv) != IV_SIZE:
            raise ValueError(f"IV must be {IV_SIZE} bytes, got {len(iv)}")
        self._key = bytes(key)
        self._chain = bytes(iv)

    @property
    def chaining_value(self) -> bytes:
        return self._chain

    def encrypt(self, payload: bytes) -> List[bytes]:
        out = []
        for p in chunk(payload):
            c = seal_chunk(xor_bytes(p, self._chain[:len(p)]), self._key)
            self._chain = c
            out.append(c)
        return out

    def decrypt(self, blocks: Sequence[bytes]) -> bytes:
        plain = bytearray()
        for c in blocks:
            p = open_unit(c, self._key)
            plain += xor_bytes(p, self._chain[:len(p)])
            self._chain = bytes(c)
        return bytes(plain)


def cipher_for(mode: Mode, key: bytes, iv: Optional[bytes] = None) -> CipherMode:
    if mode is Mode.ECB:
        return ECBMode(key)
    if mode is Mode.CBC:
        if iv is None:
            raise ValueError("CBC requires an IV")
        return CBCMode(key, iv)
    raise ValueError(f"unsupported mode: {mode!r}")
