from .errors import InvalidKeyError


def mod(a: int, n: int) -> int:
    """Canonical remainder of a in [0, n), negative a included."""
    if n <= 0:
        raise ValueError("Modulus must be positive")
    # Python's % takes the sign of the divisor
    return a % n


def gcd(a: int, b: int) -> int:
    a, b = abs(a), abs(b)
    while b:
        a, b = b, a % b
    return a


def mod_inverse(a: int, n: int) -> int:
    """
    Multiplicative inverse of a modulo n via the extended Euclidean algorithm.
    Raises InvalidKeyError when gcd(a, n) != 1.
    """
    a = mod(a, n)
    if gcd(a, n) != 1:
        raise InvalidKeyError(f"a={a} has no inverse mod {n} (must be coprime with {n})")

    old_r, r = a, n
    old_s, s = 1, 0
    while r:
        q = old_r // r
        old_r, r = r, old_r - q * r
        old_s, s = s, old_s - q * s
    return mod(old_s, n)
