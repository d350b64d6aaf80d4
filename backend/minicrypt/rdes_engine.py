import logging
import string
from typing import Tuple, Union

from .errors import InvalidKeyError

logger = logging.getLogger(__name__)

NIBBLE_MASK = 0xF
KEY_HEX_DIGITS = 3
ROUNDS = 3

RoundKeys = Tuple[int, int, int]


def parse_key(key_str: str) -> int:
    """Parse a 12-bit key written as exactly 3 hex digits (e.g. "AE3")."""
    key_str = key_str.strip()
    if len(key_str) != KEY_HEX_DIGITS or any(c not in string.hexdigits for c in key_str):
        raise InvalidKeyError("Unable to interpret 12-bit key, must be 3 hexadecimal characters (0 - F)")
    return int(key_str, 16)


def key_schedule(key: int) -> RoundKeys:
    n1 = (key >> 8) & NIBBLE_MASK   # bits 8-11
    n2 = (key >> 4) & NIBBLE_MASK   # bits 4-7
    n3 = key & NIBBLE_MASK          # bits 0-3
    return n1 ^ n2, n2 ^ n3, n3 ^ n1


def round_function(half: int, k1: int, k2: int, k3: int, rnd: int) -> int:
    if rnd == 0:
        return half ^ k1
    elif rnd == 1:
        return half ^ k2
    else:
        return half ^ k3


def _feistel(byte: int, k1: int, k2: int, k3: int, rounds) -> int:
    left = byte >> 4
    right = byte & NIBBLE_MASK

    for rnd in rounds:
        left, right = right, round_function(right, k1, k2, k3, rnd) ^ left

    # Halves are recombined swapped, which lets decryption reuse the same step
    return (right << 4) | left


def encrypt_byte(byte: int, k1: int, k2: int, k3: int) -> int:
    return _feistel(byte, k1, k2, k3, range(ROUNDS))


def decrypt_byte(byte: int, k1: int, k2: int, k3: int) -> int:
    return _feistel(byte, k1, k2, k3, reversed(range(ROUNDS)))


def encrypt(data: bytes, k1: int, k2: int, k3: int) -> bytes:
    return bytes(encrypt_byte(b, k1, k2, k3) for b in data)


def decrypt(data: bytes, k1: int, k2: int, k3: int) -> bytes:
    return bytes(decrypt_byte(b, k1, k2, k3) for b in data)


class MiniDES:
    """
    Reduced DES session: the key schedule runs once in the constructor and the
    round keys are reused for every byte afterwards.
    """

    def __init__(self, key: Union[int, str]):
        if isinstance(key, str):
            key = parse_key(key)
        elif not 0 <= key <= 0xFFF:
            raise InvalidKeyError(f"Key must fit in 12 bits, got {key:#x}")

        self.key = key
        self.round_keys = key_schedule(key)
        logger.debug(f"Round keys: {' '.join(self.round_keys_hex())}")

    def round_keys_hex(self) -> list:
        return [f"{k:X}" for k in self.round_keys]

    def encrypt_bytes(self, data: bytes) -> bytes:
        return encrypt(data, *self.round_keys)

    def decrypt_bytes(self, data: bytes) -> bytes:
        return decrypt(data, *self.round_keys)

    def encrypt_text(self, plaintext: str) -> str:
        data = plaintext.encode('utf-8')
        return self.encrypt_bytes(data).hex()

    def decrypt_text(self, ciphertext_hex: str) -> str:
        try:
            data = bytes.fromhex(ciphertext_hex)
        except ValueError:
            raise ValueError("Invalid Hex String")

        decrypted = self.decrypt_bytes(data)
        try:
            return decrypted.decode('utf-8')
        except UnicodeDecodeError:
            return decrypted.hex()
