"""Login password hashing.

Production uses bcrypt, run on a worker thread through anyio so a login
does not stall the event loop. ``SimpleHasher`` exists for the test suite.
"""

from __future__ import annotations

import hashlib
from typing import Protocol, runtime_checkable

import bcrypt
from anyio import to_thread

# bcrypt only looks at the first 72 bytes; newer releases refuse longer input
MAX_PASSWORD_BYTES = 72
DEFAULT_BCRYPT_ROUNDS = 10


def password_too_long(plain: str) -> bool:
    return len(plain.encode("utf-8")) > MAX_PASSWORD_BYTES


@runtime_checkable
class PasswordHasher(Protocol):
    async def hash(self, plain: str) -> str: ...

    async def verify(self, plain: str, hashed: str) -> bool: ...


class BcryptHasher:
    def __init__(self, rounds: int = DEFAULT_BCRYPT_ROUNDS) -> None:
        self._rounds = rounds

    async def hash(self, plain: str) -> str:
        """Raises ``ValueError`` for passwords over ``MAX_PASSWORD_BYTES``."""
        if password_too_long(plain):
            raise ValueError(f"Password exceeds {MAX_PASSWORD_BYTES} bytes")
        salt = bcrypt.gensalt(rounds=self._rounds)
        digest = await to_thread.run_sync(bcrypt.hashpw, plain.encode("utf-8"), salt)
        return digest.decode("utf-8")

    async def verify(self, plain: str, hashed: str) -> bool:
        # Over-long input can never have been stored, malformed hashes never match
        if password_too_long(plain):
            return False
        try:
            return await to_thread.run_sync(
                bcrypt.checkpw, plain.encode("utf-8"), hashed.encode("utf-8")
            )
        except ValueError:
            return False


class SimpleHasher:
    """Unsalted SHA-256 with a ``simple$`` marker. Tests only."""

    prefix = "simple$"

    async def hash(self, plain: str) -> str:
        return self.prefix + hashlib.sha256(plain.encode("utf-8")).hexdigest()

    async def verify(self, plain: str, hashed: str) -> bool:
        return hashed.startswith(self.prefix) and await self.hash(plain) == hashed


_HASHERS = {"bcrypt": BcryptHasher, "simple": SimpleHasher}


def get_hasher(name: str = "bcrypt") -> PasswordHasher:
    """Return the hasher configured as ``settings.password_hasher``."""
    try:
        return _HASHERS[name]()
    except KeyError:
        raise ValueError(f"Unknown password hasher: {name!r}") from None
