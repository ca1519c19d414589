"""Record store base class - persistence abstraction.

A RecordStore owns a single collection of ApiKeyRecord rows and exposes
only what CredentialIssuer needs. It does NOT handle:
- Expiration (liveness is decided by the caller at read time)
- Hashing
- Retries

Implementations raise ``RecordStoreError`` when the backing engine fails;
"no matching record" is reported as ``None``, never as an error.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from keyissuer.models.api_key import ApiKeyRecord


class RecordStore(ABC):
    """Abstract store over the api_keys collection."""

    @abstractmethod
    async def create(self, fields: dict[str, Any]) -> "ApiKeyRecord":
        """Persist a new record and return it with a generated id.

        Args:
            fields: Column values except ``id``

        Returns:
            The persisted record
        """
        ...

    @abstractmethod
    async def find_one(
        self,
        *,
        key: str | None = None,
        email: str | None = None,
    ) -> "ApiKeyRecord | None":
        """Find one record by exact ``key`` or by ``email``.

        Exactly one filter must be given. Several records may share an
        email; the one with the latest ``expires`` is returned.
        """
        ...

    @abstractmethod
    async def find_by_id(self, record_id: str) -> "ApiKeyRecord | None":
        """Find a record by its identifier."""
        ...


def require_single_filter(key: str | None, email: str | None) -> None:
    """Reject find_one calls without exactly one filter."""
    if (key is None) == (email is None):
        raise ValueError("find_one requires exactly one of 'key' or 'email'")
