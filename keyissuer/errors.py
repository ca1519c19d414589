"""Keyissuer error types.

Error codes are stable strings for programmatic handling and map 1:1
onto the HTTP error envelope returned by the API.

Collaborator failures (record store, hash provider) are raised as
``RecordStoreError`` / ``HashProviderError`` and re-surfaced by
CredentialIssuer as one of the ``KeyIssuerError`` subclasses below.
"""

from __future__ import annotations

from typing import Any


class RecordStoreError(Exception):
    """Record store could not complete a call (engine/transport failure)."""


class HashProviderError(Exception):
    """Hash provider failed internally (bad salt, malformed hash, ...)."""


class KeyIssuerError(Exception):
    """Base error for all Keyissuer exceptions."""

    code: str = "internal_error"
    message: str = "An internal error occurred"
    status_code: int = 500

    def __init__(
        self,
        message: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message or self.__class__.message
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self, request_id: str | None = None) -> dict[str, Any]:
        """Render the API error envelope."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "request_id": request_id,
                "details": self.details,
            }
        }


class DuplicateActiveKeyError(KeyIssuerError):
    """A live key already exists for this email (409)."""

    code = "duplicate_active_key"
    message = "An API key for this account is still active"
    status_code = 409

    def __init__(self, remaining_minutes: int) -> None:
        self.remaining_minutes = remaining_minutes
        super().__init__(
            message=(
                "Your initial API key has not expired yet. "
                f"Please wait for {remaining_minutes} minute(s)"
            ),
            details={"remaining_minutes": remaining_minutes},
        )


class KeyNotFoundOrExpiredError(KeyIssuerError):
    """Key lookup failed (404).

    Covers an unknown key, an expired key and an unreachable store alike.
    """

    code = "key_not_found_or_expired"
    message = "Api Key Not Found Or Expired: Get New Key"
    status_code = 404


class LookupFailedError(KeyIssuerError):
    """Lookup by email failed (404)."""

    code = "lookup_failed"
    message = "API key not found or expired"
    status_code = 404


class NotFoundError(KeyIssuerError):
    """Resource not found (404)."""

    code = "not_found"
    message = "Resource not found"
    status_code = 404


class HashComparisonFailedError(KeyIssuerError):
    """Hash provider could not compare a password (500)."""

    code = "hash_comparison_failed"
    message = "Failed to compare passwords"
    status_code = 500


class KeyIssuanceError(KeyIssuerError):
    """Key could not be hashed or persisted (500)."""

    code = "key_issuance_failed"
    message = "Failed to issue API key"
    status_code = 500


class UnauthorizedError(KeyIssuerError):
    """Authentication required (401)."""

    code = "unauthorized"
    message = "Authentication required"
    status_code = 401
