"""Credential issuer service.

Issues time-limited API keys from signup data, validates presented keys,
looks keys up by owner email or record id, and compares passwords.

Expiration policy:
- Every key lives for ``key_ttl`` (1 hour by default) from issuance.
- A key is live while ``expires > now``. Nothing is ever updated or
  deleted; expired rows just stop matching.
- An email may not mint a second key while its current one is live.
"""

from __future__ import annotations

import math
from contextlib import AbstractAsyncContextManager, nullcontext
from datetime import datetime, timedelta
from enum import Enum

import structlog
from pydantic import BaseModel, Field

from keyissuer.concurrency import hold_email_lock
from keyissuer.errors import (
    DuplicateActiveKeyError,
    HashComparisonFailedError,
    HashProviderError,
    KeyIssuanceError,
    KeyNotFoundOrExpiredError,
    LookupFailedError,
    NotFoundError,
    RecordStoreError,
)
from keyissuer.hashing import HashProvider
from keyissuer.models.api_key import ApiKeyRecord
from keyissuer.stores.base import RecordStore
from keyissuer.utils.datetime import Clock, epoch_millis, utcnow

logger = structlog.get_logger()

DEFAULT_KEY_TTL = timedelta(hours=1)
_MINUTE = timedelta(minutes=1)
_KEY_LOG_PREFIX_LEN = 8


class SignupData(BaseModel):
    """Account data submitted at signup."""

    email: str = Field(..., min_length=3, max_length=320)
    name: str = Field(..., min_length=1, max_length=200)
    password: str = Field(..., min_length=1)


class KeyStatus(str, Enum):
    """Outcome of looking up a presented key."""

    LIVE = "live"
    EXPIRED = "expired"
    NOT_FOUND = "not_found"


def remaining_minutes(expires: datetime, now: datetime) -> int:
    """Whole minutes until ``expires``, rounded up."""
    return math.ceil((expires - now) / _MINUTE)


class CredentialIssuer:
    """Service for API key issuance and verification."""

    def __init__(
        self,
        store: RecordStore,
        hash_provider: HashProvider,
        *,
        clock: Clock = utcnow,
        key_ttl: timedelta = DEFAULT_KEY_TTL,
        serialize_issuance: bool = True,
    ) -> None:
        self._store = store
        self._hash = hash_provider
        self._clock = clock
        self._key_ttl = key_ttl
        self._serialize_issuance = serialize_issuance

    def _issuance_guard(self, email: str) -> AbstractAsyncContextManager[None]:
        if self._serialize_issuance:
            return hold_email_lock(email)
        return nullcontext()

    async def issue(self, signup: SignupData) -> ApiKeyRecord:
        """Issue a new API key for ``signup.email``.

        Returns:
            The persisted record, including the plaintext key

        Raises:
            DuplicateActiveKeyError: A live key already exists for this email
            LookupFailedError: The duplicate check could not reach the store
            KeyIssuanceError: Hashing or persisting the new record failed
        """
        async with self._issuance_guard(signup.email):
            # Single clock reading shared by the duplicate check and the new record
            now = self._clock()
            existing = await self._find_live_by_email(signup.email, now)
            if existing is not None:
                minutes = remaining_minutes(existing.expires, now)
                logger.info(
                    "credential.issue.rejected",
                    email=signup.email,
                    record_id=existing.id,
                    remaining_minutes=minutes,
                )
                raise DuplicateActiveKeyError(minutes)

            try:
                salt = await self._hash.generate_salt()
                hashed_password = await self._hash.hash(signup.password, salt)
                # Same salt as the password hash.
                key = await self._hash.hash(f"{signup.email}{epoch_millis(now)}", salt)
            except HashProviderError as e:
                raise KeyIssuanceError(f"Failed to hash credentials: {e}") from e

            try:
                record = await self._store.create(
                    {
                        "key": key,
                        "name": signup.name,
                        "email": signup.email,
                        "password": hashed_password,
                        "created": now,
                        "expires": now + self._key_ttl,
                    }
                )
            except RecordStoreError as e:
                raise KeyIssuanceError(f"Failed to store API key: {e}") from e

        logger.info(
            "credential.issue.created",
            email=record.email,
            record_id=record.id,
            key_prefix=record.key[:_KEY_LOG_PREFIX_LEN],
            expires=record.expires.isoformat(),
        )
        return record

    async def inspect(self, key: str) -> KeyStatus:
        """Classify a presented key as live, expired or unknown.

        Raises:
            RecordStoreError: The store could not be queried
        """
        record = await self._store.find_one(key=key)
        if record is None:
            return KeyStatus.NOT_FOUND
        if not record.is_live(self._clock()):
            return KeyStatus.EXPIRED
        return KeyStatus.LIVE

    async def validate(self, key: str) -> bool:
        """Return True iff ``key`` exists and has not expired.

        Raises:
            KeyNotFoundOrExpiredError: The store could not be queried
        """
        try:
            status = await self.inspect(key)
        except RecordStoreError as e:
            logger.warning("credential.validate.store_error", error=str(e))
            raise KeyNotFoundOrExpiredError() from e
        logger.debug("credential.validate", status=status.value)
        return status is KeyStatus.LIVE

    async def find_by_email(self, email: str) -> ApiKeyRecord | None:
        """Return the live record for ``email``, or None.

        An expired record is treated as absent.

        Raises:
            LookupFailedError: The store could not be queried
        """
        return await self._find_live_by_email(email, self._clock())

    async def _find_live_by_email(self, email: str, now: datetime) -> ApiKeyRecord | None:
        try:
            record = await self._store.find_one(email=email)
        except RecordStoreError as e:
            logger.warning("credential.find_by_email.store_error", email=email, error=str(e))
            raise LookupFailedError() from e

        if record is not None and record.is_live(now):
            return record
        return None

    async def find_by_id(self, record_id: str) -> ApiKeyRecord:
        """Return the record with ``record_id``, live or not.

        Unlike ``find_by_email`` this does not filter out expired records.

        Raises:
            NotFoundError: No such record, or the store could not be queried
        """
        try:
            record = await self._store.find_by_id(record_id)
        except RecordStoreError as e:
            logger.warning("credential.find_by_id.store_error", record_id=record_id, error=str(e))
            raise NotFoundError(f"No key with id {record_id}") from e

        if record is None:
            raise NotFoundError(f"No key with id {record_id}")
        return record

    async def verify_password(self, record: ApiKeyRecord, password: str) -> bool:
        """Compare a plaintext password with the record's stored hash.

        Raises:
            HashComparisonFailedError: The hash provider failed
        """
        try:
            return await self._hash.verify(password, record.password)
        except HashProviderError as e:
            logger.warning("credential.verify_password.failed", record_id=record.id, error=str(e))
            raise HashComparisonFailedError() from e
