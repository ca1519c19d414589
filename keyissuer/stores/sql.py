"""SQL-backed record store using an async SQLModel session."""

from __future__ import annotations

import uuid
from typing import Any

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from keyissuer.errors import RecordStoreError
from keyissuer.models.api_key import ApiKeyRecord
from keyissuer.stores.base import RecordStore, require_single_filter

logger = structlog.get_logger()


class SqlRecordStore(RecordStore):
    """RecordStore over the ``api_keys`` table."""

    def __init__(self, db_session: AsyncSession) -> None:
        self._db = db_session

    async def create(self, fields: dict[str, Any]) -> ApiKeyRecord:
        record = ApiKeyRecord(id=str(uuid.uuid4()), **fields)
        try:
            self._db.add(record)
            await self._db.commit()
            await self._db.refresh(record)
        except SQLAlchemyError as e:
            await self._db.rollback()
            logger.warning("store.create.failed", error=str(e))
            raise RecordStoreError(f"Failed to create record: {e}") from e
        return record

    async def find_one(
        self,
        *,
        key: str | None = None,
        email: str | None = None,
    ) -> ApiKeyRecord | None:
        require_single_filter(key, email)

        query = select(ApiKeyRecord)
        if key is not None:
            query = query.where(ApiKeyRecord.key == key)
        else:
            query = query.where(ApiKeyRecord.email == email).order_by(
                ApiKeyRecord.expires.desc()
            )

        try:
            result = await self._db.execute(query.limit(1))
        except SQLAlchemyError as e:
            logger.warning("store.find_one.failed", error=str(e))
            raise RecordStoreError(f"Failed to query records: {e}") from e
        return result.scalars().first()

    async def find_by_id(self, record_id: str) -> ApiKeyRecord | None:
        try:
            return await self._db.get(ApiKeyRecord, record_id)
        except SQLAlchemyError as e:
            logger.warning("store.find_by_id.failed", record_id=record_id, error=str(e))
            raise RecordStoreError(f"Failed to load record {record_id}: {e}") from e
