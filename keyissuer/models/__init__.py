"""SQLModel data models."""

from keyissuer.models.api_key import ApiKeyRecord

__all__ = ["ApiKeyRecord"]
