"""Hash provider - salted one-way hashing.

Used for both password storage and API key derivation. bcrypt work is
CPU-bound, so calls are pushed to a worker thread to keep the event loop
responsive.
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod

import bcrypt
import structlog

from keyissuer.errors import HashProviderError

logger = structlog.get_logger()

# bcrypt ignores (or, in newer releases, rejects) input beyond 72 bytes
_BCRYPT_MAX_BYTES = 72


class HashProvider(ABC):
    """Abstract salted hash-and-verify provider."""

    @abstractmethod
    async def generate_salt(self) -> bytes:
        """Generate a fresh random salt."""
        ...

    @abstractmethod
    async def hash(self, plaintext: str, salt: bytes) -> str:
        """Hash ``plaintext`` with ``salt``; the salt is embedded in the result."""
        ...

    @abstractmethod
    async def verify(self, plaintext: str, hashed: str) -> bool:
        """Check ``plaintext`` against a value produced by ``hash``."""
        ...


def _encode(plaintext: str) -> bytes:
    return plaintext.encode("utf-8")[:_BCRYPT_MAX_BYTES]


class BcryptHashProvider(HashProvider):
    """HashProvider backed by the ``bcrypt`` library."""

    def __init__(self, rounds: int = 10) -> None:
        self._rounds = rounds

    async def generate_salt(self) -> bytes:
        return bcrypt.gensalt(rounds=self._rounds)

    async def hash(self, plaintext: str, salt: bytes) -> str:
        try:
            hashed = await asyncio.to_thread(bcrypt.hashpw, _encode(plaintext), salt)
        except (ValueError, TypeError) as e:
            logger.warning("hash.hash.failed", error=str(e))
            raise HashProviderError(f"bcrypt hash failed: {e}") from e
        return hashed.decode("utf-8")

    async def verify(self, plaintext: str, hashed: str) -> bool:
        try:
            return await asyncio.to_thread(
                bcrypt.checkpw, _encode(plaintext), hashed.encode("utf-8")
            )
        except (ValueError, TypeError) as e:
            logger.warning("hash.verify.failed", error=str(e))
            raise HashProviderError(f"bcrypt verify failed: {e}") from e
