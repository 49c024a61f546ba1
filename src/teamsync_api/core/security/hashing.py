"""Password hashing for locally managed credentials.

Stored values look like ``scrypt$16384$8$1$<salt>$<digest>``. The cost
parameters travel with each hash, so raising them later only affects new
passwords.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import os
import secrets
from dataclasses import dataclass

SCHEME = "scrypt"
SALT_SIZE = 16
DIGEST_SIZE = 32

# Set by the test suite; scrypt at full cost dominates runtime otherwise.
FAST_HASH_ENV = "TEAMSYNC_TEST_FAST_HASH"


@dataclass(frozen=True)
class ScryptParams:
    n: int = 2**14
    r: int = 8
    p: int = 1

    def derive(self, secret: str, salt: bytes, size: int = DIGEST_SIZE) -> bytes:
        return hashlib.scrypt(
            secret.encode("utf-8"), salt=salt, n=self.n, r=self.r, p=self.p, dklen=size
        )


def current_params() -> ScryptParams:
    if os.getenv(FAST_HASH_ENV):
        return ScryptParams(n=2**10)
    return ScryptParams()


def _b64(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def _unb64(text: str) -> bytes:
    return base64.urlsafe_b64decode(text + "=" * (-len(text) % 4))


def hash_password(password: str) -> str:
    """Return a salted scrypt hash; surrounding whitespace is ignored."""

    secret = password.strip()
    if not secret:
        raise ValueError("Password must not be empty")

    params = current_params()
    salt = secrets.token_bytes(SALT_SIZE)
    digest = params.derive(secret, salt)
    fields = (SCHEME, str(params.n), str(params.r), str(params.p), _b64(salt), _b64(digest))
    return "$".join(fields)


def verify_password(password: str, stored: str) -> bool:
    parts = stored.split("$")
    if len(parts) != 6 or parts[0] != SCHEME:
        return False
    try:
        params = ScryptParams(n=int(parts[1]), r=int(parts[2]), p=int(parts[3]))
        salt, digest = _unb64(parts[4]), _unb64(parts[5])
        candidate = params.derive(password.strip(), salt, len(digest))
    except ValueError:
        # Malformed fields or parameters scrypt rejects.
        return False
    return hmac.compare_digest(candidate, digest)


__all__ = ["ScryptParams", "current_params", "hash_password", "verify_password"]
