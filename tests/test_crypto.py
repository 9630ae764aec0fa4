import os

import pytest

from keyrelay.crypto.keywrap import KeyWrapError, unwrap_key, wrap_key
from keyrelay.crypto.modes import CBCMode, ECBMode, Mode, cipher_for, pad, unpad
from keyrelay.crypto.primitives import decrypt_block, digest_for_logging, encrypt_block, random_key, xor_bytes

FIPS_KEY = bytes.fromhex("000102030405060708090a0b0c0d0e0f")
FIPS_PT = bytes.fromhex("00112233445566778899aabbccddeeff")
FIPS_CT = bytes.fromhex("69c4e0d86a7b0430d8cdb78070b4c55a")

PAYLOADS = [b"", b"a", b"HELLO WORLD!!!!!", b"x" * 15, b"y" * 17, b"z" * 48, os.urandom(1000)]


class TestPrimitive:
    def test_known_answer(self):
        assert encrypt_block(FIPS_PT, FIPS_KEY) == FIPS_CT
        assert decrypt_block(FIPS_CT, FIPS_KEY) == FIPS_PT

    @pytest.mark.parametrize("block, key", [(b"\x00" * 15, FIPS_KEY), (b"\x00" * 17, FIPS_KEY), (FIPS_PT, b"\x00" * 32)])
    def test_bad_lengths(self, block, key):
        with pytest.raises(ValueError):
            encrypt_block(block, key)

    def test_random_key(self):
        k1, k2 = random_key(), random_key()
        assert len(k1) == 16 and k1 != k2

    def test_xor(self):
        assert xor_bytes(b"\x0f\xf0", b"\xff\xff") == b"\xf0\x0f"
        with pytest.raises(ValueError):
            xor_bytes(b"a", b"ab")

    def test_digest_is_sha256_hex(self):
        assert digest_for_logging(b"") == "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"


class TestPadding:
    def test_pad_always_adds(self):
        assert pad(b"") == b"\x10" * 16
        assert pad(b"x" * 16) == b"x" * 16 + b"\x10" * 16
        assert pad(b"abc") == b"abc" + b"\x0d" * 13

    def test_bad_padding_rejected(self):
        with pytest.raises(ValueError):
            unpad(b"x" * 15 + b"\x00")


class TestECB:
    @pytest.mark.parametrize("payload", PAYLOADS)
    def test_round_trip(self, payload):
        key = random_key()
        blocks = ECBMode(key).encrypt(payload)
        assert len(blocks) == -(-len(payload) // 16)
        assert all(len(b) in (16, 32) for b in blocks)
        assert ECBMode(key).decrypt(blocks) == payload

    def test_full_chunk_is_two_blocks_short_chunk_is_one(self):
        blocks = ECBMode(FIPS_KEY).encrypt(FIPS_PT + b"tail")
        assert [len(b) for b in blocks] == [32, 16]
        assert blocks[0] == FIPS_CT + encrypt_block(b"\x10" * 16, FIPS_KEY)
        assert blocks[1] == encrypt_block(pad(b"tail"), FIPS_KEY)

    def test_empty_payload_has_no_blocks(self):
        assert ECBMode(FIPS_KEY).encrypt(b"") == []
        assert ECBMode(FIPS_KEY).decrypt([]) == b""

    def test_identical_blocks_identical_ciphertext(self):
        blocks = ECBMode(FIPS_KEY).encrypt(FIPS_PT * 2)
        assert blocks[0] == blocks[1]
        assert blocks[0][:16] == FIPS_CT

    def test_blocks_are_position_independent(self):
        key = random_key()
        p = [b"A" * 16, b"B" * 16, b"C" * 16]
        blocks = ECBMode(key).encrypt(b"".join(p))
        swapped = [blocks[1], blocks[0], blocks[2]]
        assert ECBMode(key).decrypt(swapped) == p[1] + p[0] + p[2]

    @pytest.mark.parametrize("size", [0, 15, 17, 48])
    def test_wrong_block_length_rejected(self, size):
        with pytest.raises(ValueError):
            ECBMode(FIPS_KEY).decrypt([b"\x00" * size])

    def test_wrong_key_does_not_recover_block(self):
        assert decrypt_block(encrypt_block(FIPS_PT, FIPS_KEY), b"\x02" * 16) != FIPS_PT


class TestCBC:
    @pytest.mark.parametrize("payload", PAYLOADS)
    def test_round_trip(self, payload):
        key, iv = random_key(), random_key()
        blocks = CBCMode(key, iv).encrypt(payload)
        assert len(blocks) == -(-len(payload) // 16)
        assert all(len(b) in (16, 32) for b in blocks)
        assert CBCMode(key, iv).decrypt(blocks) == payload

    def test_first_block_matches_definition(self):
        iv = bytes(range(16))
        blocks = CBCMode(FIPS_KEY, iv).encrypt(xor_bytes(FIPS_PT, iv))
        assert blocks[0][:16] == FIPS_CT

    def test_short_tail_uses_leading_chain_bytes(self):
        iv = bytes(range(16))
        blocks = CBCMode(FIPS_KEY, iv).encrypt(b"A" * 16 + b"tail")
        expected = encrypt_block(pad(xor_bytes(b"tail", blocks[0][:4])), FIPS_KEY)
        assert blocks[1] == expected

    def test_identical_blocks_differ_after_nontrivial_block(self):
        key, iv = random_key(), random_key()
        blocks = CBCMode(key, iv).encrypt(b"P" * 16 + b"Q" * 16 + b"Q" * 16)
        assert blocks[1] != blocks[2]

    def test_swapped_blocks_do_not_reproduce_plaintext(self):
        # every full-chunk unit keeps its own valid padding block, so reordering decrypts cleanly
        key, iv = FIPS_KEY, bytes(range(16))
        payload = b"A" * 16 + b"B" * 16 + b"C" * 16
        blocks = CBCMode(key, iv).encrypt(payload)
        out = CBCMode(key, iv).decrypt([blocks[1], blocks[0]] + blocks[2:])
        assert len(out) == len(payload)
        assert out[:16] != b"A" * 16
        assert out[16:32] != b"B" * 16
        assert out[32:] != b"C" * 16

    def test_chaining_value_tracks_ciphertext(self):
        key, iv = random_key(), random_key()
        enc = CBCMode(key, iv)
        assert enc.chaining_value == iv
        blocks = enc.encrypt(b"data")
        assert enc.chaining_value == blocks[-1]
        dec = CBCMode(key, iv)
        dec.decrypt(blocks)
        assert dec.chaining_value == blocks[-1]

    def test_chain_continues_across_calls(self):
        key, iv = random_key(), random_key()
        enc = CBCMode(key, iv)
        first = enc.encrypt(b"first message")
        second = enc.encrypt(b"first message")
        assert first != second
        dec = CBCMode(key, iv)
        assert dec.decrypt(first) == b"first message"
        assert dec.decrypt(second) == b"first message"

    def test_mismatched_iv_corrupts_first_block_only(self):
        key = random_key()
        payload = b"A" * 16 + b"B" * 16 + b"C" * 5
        blocks = CBCMode(key, b"\x00" * 16).encrypt(payload)
        out = CBCMode(key, b"\x01" + b"\x00" * 15).decrypt(blocks)
        assert out[:16] != payload[:16]
        assert out[16:] == payload[16:]

    def test_bad_iv_length(self):
        with pytest.raises(ValueError):
            CBCMode(FIPS_KEY, b"\x00" * 8)


class TestModeSelection:
    def test_selector_one_is_ecb(self):
        assert Mode.from_selector(1) is Mode.ECB

    @pytest.mark.parametrize("selector", [2, 0, 3, 7, -1])
    def test_anything_else_is_cbc(self, selector):
        assert Mode.from_selector(selector) is Mode.CBC

    def test_factory(self):
        assert isinstance(cipher_for(Mode.ECB, FIPS_KEY), ECBMode)
        assert isinstance(cipher_for(Mode.CBC, FIPS_KEY, FIPS_KEY), CBCMode)
        with pytest.raises(ValueError):
            cipher_for(Mode.CBC, FIPS_KEY)


class TestKeyWrap:
    def test_wrap_is_single_aes_block(self):
        wrapped = wrap_key(b"\x11" * 16, b"\x00" * 16)
        assert wrapped == encrypt_block(b"\x11" * 16, b"\x00" * 16)
        assert len(wrapped) == 16
        assert unwrap_key(wrapped, b"\x00" * 16) == b"\x11" * 16

    def test_wrapped_key_differs_from_key(self):
        key = random_key()
        assert wrap_key(key, random_key()) != key

    @pytest.mark.parametrize("wrapped", [b"", b"\x00" * 15, b"\x00" * 32])
    def test_unwrap_bad_length(self, wrapped):
        with pytest.raises(KeyWrapError):
            unwrap_key(wrapped, b"\x00" * 16)

    def test_wrap_bad_wrapping_key(self):
        with pytest.raises(KeyWrapError):
            wrap_key(b"\x00" * 16, b"\x00" * 24)
