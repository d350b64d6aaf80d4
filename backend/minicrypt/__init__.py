from .errors import InvalidKeyError, KeyRecoveryError

__version__ = "0.1.0"
