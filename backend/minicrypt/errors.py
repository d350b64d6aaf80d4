class InvalidKeyError(ValueError):
    """Key material that cannot be used (non-invertible affine `a`, malformed 12-bit key)."""


class KeyRecoveryError(ValueError):
    """The signature attack found no (a, b) pair consistent with the ciphertext."""
