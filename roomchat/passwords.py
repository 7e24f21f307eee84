# ============================================
#     RoomChat - Secret hashing (scrypt)
# ============================================

import base64
import os

from cryptography.exceptions import InvalidKey
from cryptography.hazmat.primitives.kdf.scrypt import Scrypt

_SCHEME = "scrypt"
_N = 2 ** 14
_R = 8
_P = 1
_LENGTH = 32
_SALT_BYTES = 16


def _kdf(salt: bytes, n: int = _N) -> Scrypt:
    return Scrypt(salt=salt, length=_LENGTH, n=n, r=_R, p=_P)


def _b64(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).decode("ascii")


def hash_secret(secret: str) -> str:
    """Return "scrypt$<n>$<salt>$<key>" for storage."""
    salt = os.urandom(_SALT_BYTES)
    key = _kdf(salt).derive(secret.encode("utf-8"))
    return f"{_SCHEME}${_N}${_b64(salt)}${_b64(key)}"


def check_secret(stored: str, candidate: str) -> bool:
    if not isinstance(stored, str) or not isinstance(candidate, str):
        return False

    try:
        scheme, n, salt, key = stored.split("$")
        if scheme != _SCHEME:
            return False
        kdf = _kdf(base64.urlsafe_b64decode(salt), n=int(n))
        kdf.verify(candidate.encode("utf-8"), base64.urlsafe_b64decode(key))
        return True
    except InvalidKey:
        return False
    except ValueError:
        # malformed stored hash
        return False
