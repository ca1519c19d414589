"""Email-level in-memory locks for issuance.

Used by CredentialIssuer.issue to serialize the "no live key yet?" check
and the following create for one email address.

Note: These locks only work within a single process/instance. Several
instances sharing one database can still issue two live keys for the
same email at the same time.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field


@dataclass
class _LockEntry:
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    users: int = 0


# Key: normalized email. Entries are dropped when the last user leaves.
_email_locks: dict[str, _LockEntry] = {}
_email_locks_lock = asyncio.Lock()


def _normalize(email: str) -> str:
    return email.strip().lower()


@asynccontextmanager
async def hold_email_lock(email: str) -> AsyncIterator[None]:
    """Hold the issuance lock for an email address.

    Concurrent holders for the same (case-insensitive) email run one at a
    time; different emails never wait on each other.

    Args:
        email: Owner email
    """
    key = _normalize(email)
    async with _email_locks_lock:
        entry = _email_locks.get(key)
        if entry is None:
            entry = _email_locks[key] = _LockEntry()
        entry.users += 1

    try:
        async with entry.lock:
            yield
    finally:
        async with _email_locks_lock:
            entry.users -= 1
            if entry.users == 0:
                _email_locks.pop(key, None)


def get_lock_count() -> int:
    """Get current number of locks (for testing/metrics)."""
    return len(_email_locks)
