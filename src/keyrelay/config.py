"""Key material and per-role configuration.

Each role receives only the secrets it needs. The wrapping key and IV are
shared out of band by constructing the configs from one ``KeyMaterial``.
"""
from __future__ import annotations
from pydantic import BaseModel, ConfigDict, Field, field_validator

from keyrelay.protocol.constants import KEY_SIZE, IV_SIZE
from keyrelay.crypto.primitives import random_key


def _exact_length(value: bytes, n: int, name: str) -> bytes:
    if len(value) != n:
        raise ValueError(f"{name} must be {n} bytes, got {len(value)}")
    return value


class KeyManagerConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    key1: bytes = Field(repr=False)
    key2: bytes = Field(repr=False)
    wrapping_key: bytes = Field(repr=False)

    @field_validator("key1", "key2", "wrapping_key")
    @classmethod
    def _key_length(cls, v: bytes, info) -> bytes:
        return _exact_length(v, KEY_SIZE, info.field_name)


class PeerConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    wrapping_key: bytes = Field(repr=False)
    iv: bytes = Field(repr=False)

    @field_validator("wrapping_key")
    @classmethod
    def _key_length(cls, v: bytes) -> bytes:
        return _exact_length(v, KEY_SIZE, "wrapping_key")

    @field_validator("iv")
    @classmethod
    def _iv_length(cls, v: bytes) -> bytes:
        return _exact_length(v, IV_SIZE, "iv")


class KeyMaterial(BaseModel):
    model_config = ConfigDict(frozen=True)

    key1: bytes = Field(repr=False)
    key2: bytes = Field(repr=False)
    wrapping_key: bytes = Field(repr=False)
    iv: bytes = Field(repr=False)

    @field_validator("key1", "key2", "wrapping_key", "iv")
    @classmethod
    def _length(cls, v: bytes, info) -> bytes:
        return _exact_length(v, KEY_SIZE, info.field_name)

    @classmethod
    def generate(cls) -> "KeyMaterial":
        return cls(key1=random_key(), key2=random_key(), wrapping_key=random_key(), iv=random_key())

    def km_config(self) -> KeyManagerConfig:
        return KeyManagerConfig(key1=self.key1, key2=self.key2, wrapping_key=self.wrapping_key)

    def peer_config(self) -> PeerConfig:
        return PeerConfig(wrapping_key=self.wrapping_key, iv=self.iv)
