"""Record store implementations."""

from keyissuer.stores.base import RecordStore
from keyissuer.stores.sql import SqlRecordStore

__all__ = ["RecordStore", "SqlRecordStore"]
