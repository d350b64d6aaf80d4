"""
Affine byte cipher E(x) = (a*x + b) mod 256 and the JPEG-signature attack.

Every JPEG file starts with 0xFF 0xD8. Encrypting those two known bytes gives
two congruences in the unknowns a and b:

    y = 255*a + b  (mod 256)
    z = 216*a + b  (mod 256)

Subtracting them leaves y - z = 39*a (mod 256), which pins down a, after which
b follows from the first equation.
"""
import logging
from typing import List, NamedTuple, Tuple

from .errors import KeyRecoveryError
from .modmath import gcd, mod, mod_inverse

logger = logging.getLogger(__name__)

MODULUS = 256
JPEG_SIGNATURE = (0xFF, 0xD8)
SIGNATURE_DIFFERENCE = JPEG_SIGNATURE[0] - JPEG_SIGNATURE[1]  # 39


class AffineKey(NamedTuple):
    a: int
    b: int


def encrypt(data: bytes, a: int, b: int) -> bytes:
    # Any a is accepted here, only decryption needs an invertible one
    return bytes(mod(a * x + b, MODULUS) for x in data)


def decrypt(data: bytes, a: int, b: int) -> bytes:
    a_inv = mod_inverse(a, MODULUS)
    return bytes(mod(a_inv * y - a_inv * b, MODULUS) for y in data)


def find_key_candidates(data: bytes) -> List[AffineKey]:
    """
    All (a, b) pairs, in ascending scan order, that map the JPEG signature
    onto the first two ciphertext bytes. Empty when fewer than two bytes exist.
    """
    if len(data) < len(JPEG_SIGNATURE):
        return []

    y, z = data[0], data[1]
    diff = mod(y - z, MODULUS)

    a_values = [
        i for i in range(MODULUS)
        if mod(SIGNATURE_DIFFERENCE * i, MODULUS) == diff and gcd(MODULUS, i) == 1
    ]

    candidates = []
    for a in a_values:
        for i in range(MODULUS):
            if mod(JPEG_SIGNATURE[0] * a + i, MODULUS) == y:
                candidates.append(AffineKey(a, i))
    return candidates


def recover_key(data: bytes) -> AffineKey:
    candidates = find_key_candidates(data)
    if not candidates:
        raise KeyRecoveryError("Unable to find encryption keys")

    # 39 is odd, so the congruences have at most one solution and the last
    # match of the ascending scan is the only one.
    key = candidates[-1]
    logger.debug(f"Recovered affine key a={key.a}, b={key.b}")
    return key


def attack_with_key(data: bytes) -> Tuple[bytes, AffineKey]:
    key = recover_key(data)
    return decrypt(data, key.a, key.b), key


def attack(data: bytes) -> bytes:
    """Recover the plaintext of an affine-encrypted JPEG from the ciphertext alone."""
    plaintext, _ = attack_with_key(data)
    return plaintext
