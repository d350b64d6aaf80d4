import pytest
from hypothesis import given, strategies as st

from minicrypt import rdes_engine
from minicrypt.errors import InvalidKeyError
from minicrypt.rdes_engine import MiniDES

keys_12bit = st.integers(min_value=0, max_value=0xFFF)
nibbles = st.integers(min_value=0, max_value=0xF)


def test_key_schedule_fixed_value():
    assert rdes_engine.key_schedule(0xAE3) == (0x4, 0xD, 0x9)
    assert rdes_engine.key_schedule(0xAE3) == rdes_engine.key_schedule(0xAE3)


def test_key_schedule_zero_and_uniform_keys():
    assert rdes_engine.key_schedule(0x000) == (0, 0, 0)
    assert rdes_engine.key_schedule(0x777) == (0, 0, 0)
    assert rdes_engine.key_schedule(0xF00) == (0xF, 0x0, 0xF)


@given(keys_12bit)
def test_key_schedule_nibbles(key):
    k1, k2, k3 = rdes_engine.key_schedule(key)
    assert all(0 <= k <= 0xF for k in (k1, k2, k3))
    # each nibble appears in exactly two round keys
    assert k1 ^ k2 ^ k3 == 0


@pytest.mark.parametrize("rnd,expected", [(0, 0x5 ^ 0x1), (1, 0x5 ^ 0x2), (2, 0x5 ^ 0x3)])
def test_round_function_selects_round_key(rnd, expected):
    assert rdes_engine.round_function(0x5, 0x1, 0x2, 0x3, rnd) == expected


def test_encrypt_byte_known_value():
    k1, k2, k3 = rdes_engine.key_schedule(0xAE3)
    assert rdes_engine.encrypt_byte(0x00, k1, k2, k3) == 0x49
    assert rdes_engine.decrypt_byte(0x49, k1, k2, k3) == 0x00


def test_zero_keys_are_not_identity():
    # L=1, R=2 -> (2, 3) -> (3, 1) -> (1, 2), recombined as R<<4 | L
    out = rdes_engine.encrypt_byte(0x12, 0, 0, 0)
    assert out == 0x21
    assert rdes_engine.decrypt_byte(out, 0, 0, 0) == 0x12


@given(st.integers(min_value=0, max_value=255), nibbles, nibbles, nibbles)
def test_byte_round_trip(byte, k1, k2, k3):
    out = rdes_engine.encrypt_byte(byte, k1, k2, k3)
    assert 0 <= out <= 255
    assert rdes_engine.decrypt_byte(out, k1, k2, k3) == byte


@given(keys_12bit)
def test_encrypt_byte_is_permutation(key):
    keys = rdes_engine.key_schedule(key)
    assert sorted(rdes_engine.encrypt(bytes(range(256)), *keys)) == list(range(256))


@given(st.binary(), keys_12bit)
def test_buffer_round_trip(data, key):
    keys = rdes_engine.key_schedule(key)
    ciphertext = rdes_engine.encrypt(data, *keys)
    assert len(ciphertext) == len(data)
    assert rdes_engine.decrypt(ciphertext, *keys) == data


def test_ecb_identical_bytes_identical_output():
    ciphertext = rdes_engine.encrypt(b"aaaa", *rdes_engine.key_schedule(0x123))
    assert len(set(ciphertext)) == 1


def test_empty_buffer():
    assert rdes_engine.encrypt(b"", 1, 2, 3) == b""
    assert rdes_engine.decrypt(b"", 1, 2, 3) == b""


@pytest.mark.parametrize("text,expected", [("AE3", 0xAE3), ("ae3", 0xAE3), ("000", 0), ("FFF", 0xFFF), (" 1b2 ", 0x1B2)])
def test_parse_key(text, expected):
    assert rdes_engine.parse_key(text) == expected


@pytest.mark.parametrize("text", ["", "AE", "AE31", "XYZ", "0x1", "-12", "1 2"])
def test_parse_key_rejects(text):
    with pytest.raises(InvalidKeyError):
        rdes_engine.parse_key(text)


def test_mini_des_session():
    cipher = MiniDES("AE3")
    assert cipher.key == 0xAE3
    assert cipher.round_keys == (0x4, 0xD, 0x9)
    assert cipher.round_keys_hex() == ["4", "D", "9"]
    assert MiniDES(0xAE3).round_keys == cipher.round_keys


def test_mini_des_rejects_wide_int_key():
    with pytest.raises(InvalidKeyError):
        MiniDES(0x1000)


def test_mini_des_text_round_trip():
    cipher = MiniDES("3C7")
    ciphertext = cipher.encrypt_text("Feistel ✓")
    assert cipher.decrypt_text(ciphertext) == "Feistel ✓"


def test_mini_des_decrypt_text_bad_hex():
    with pytest.raises(ValueError):
        MiniDES("3C7").decrypt_text("zz")
