"""API key record model.

One row per issued key. Rows are never updated or deleted: a key stops
working once ``expires`` has passed, and stays in the table afterwards.
"""

from datetime import datetime

from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel


class ApiKeyRecord(SQLModel, table=True):
    """Issued API key with its owner's account data.

    ``password`` holds the bcrypt hash, never the plaintext. ``key`` is the
    credential handed to the caller once at issuance.
    """

    __tablename__ = "api_keys"

    id: str = Field(primary_key=True)
    key: str = Field(unique=True, index=True)
    name: str
    email: str = Field(index=True)
    password: str
    # Naive UTC, see keyissuer.utils.datetime.utcnow
    created: datetime = Field(sa_type=DateTime)
    expires: datetime = Field(index=True, sa_type=DateTime)

    def is_live(self, now: datetime) -> bool:
        """A record is live while its expiration lies strictly in the future."""
        return self.expires > now
