"""OTP generation and keyed hashing.

The plaintext OTP leaves this module exactly once (to be emailed); only
``hash_otp(otp, salt)`` is ever persisted.
"""

from __future__ import annotations

import hashlib
import hmac
import secrets

OTP_MIN = 100000
OTP_MAX = 999999
SALT_BYTES = 16


def generate_otp() -> str:
    """Return a 6-digit numeric OTP drawn uniformly from 100000–999999."""
    return str(OTP_MIN + secrets.randbelow(OTP_MAX - OTP_MIN + 1))


def generate_salt() -> str:
    """Return a random hex-encoded salt of ``SALT_BYTES`` bytes."""
    return secrets.token_hex(SALT_BYTES)


def hash_otp(otp: str | int, salt: str) -> str:
    """HMAC-SHA256 of the OTP's string form, keyed with *salt* (hex digest)."""
    return hmac.new(salt.encode("utf-8"), str(otp).encode("utf-8"), hashlib.sha256).hexdigest()


class SecretCodec:
    """Injectable wrapper around the OTP helpers.

    Services depend on an instance rather than the module functions so
    tests can pin the generated OTP.
    """

    def generate_otp(self) -> str:
        return generate_otp()

    def generate_salt(self) -> str:
        return generate_salt()

    def hash_otp(self, otp: str | int, salt: str) -> str:
        return hash_otp(otp, salt)

    def matches(self, otp: str | int, salt: str, otp_hash: str) -> bool:
        """Constant-time check of *otp* against a stored hash."""
        return hmac.compare_digest(self.hash_otp(otp, salt), otp_hash)
