"""Keyissuer services layer."""

from keyissuer.services.credential_issuer import (
    CredentialIssuer,
    KeyStatus,
    SignupData,
)

__all__ = ["CredentialIssuer", "KeyStatus", "SignupData"]
