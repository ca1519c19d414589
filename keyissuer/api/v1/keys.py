"""API key endpoints.

POST /v1/keys/signup     - Issue a key for a new account
POST /v1/keys/login      - Return the live key after checking the password
GET  /v1/keys/validate   - Check the presented key
GET  /v1/keys/{key_id}   - Get a key record by id (requires a live key)
"""

from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Request, status
from pydantic import BaseModel, Field

from keyissuer.api.dependencies import AuthDep, CredentialIssuerDep, extract_api_key
from keyissuer.errors import KeyNotFoundOrExpiredError, UnauthorizedError
from keyissuer.models.api_key import ApiKeyRecord
from keyissuer.services import SignupData

router = APIRouter()


class LoginRequest(BaseModel):
    """Login request body."""

    email: str = Field(..., min_length=3)
    password: str = Field(..., min_length=1)


class ApiKeyResponse(BaseModel):
    """Key record without credentials."""

    id: str
    name: str
    email: str
    created: datetime
    expires: datetime


class IssuedKeyResponse(ApiKeyResponse):
    """Key record including the plaintext key."""

    key: str


class ValidateResponse(BaseModel):
    """Key validation result."""

    valid: bool


def _record_to_response(record: ApiKeyRecord) -> ApiKeyResponse:
    return ApiKeyResponse(
        id=record.id,
        name=record.name,
        email=record.email,
        created=record.created,
        expires=record.expires,
    )


def _record_to_issued(record: ApiKeyRecord) -> IssuedKeyResponse:
    return IssuedKeyResponse(
        id=record.id,
        key=record.key,
        name=record.name,
        email=record.email,
        created=record.created,
        expires=record.expires,
    )


@router.post("/signup", response_model=IssuedKeyResponse, status_code=status.HTTP_201_CREATED)
async def signup(
    body: SignupData,
    issuer: CredentialIssuerDep,
) -> IssuedKeyResponse:
    """Issue a new API key.

    Rejected with 409 while a previous key for the same email is still live.
    """
    record = await issuer.issue(body)
    return _record_to_issued(record)


@router.post("/login", response_model=IssuedKeyResponse)
async def login(
    body: LoginRequest,
    issuer: CredentialIssuerDep,
) -> IssuedKeyResponse:
    """Return the caller's live key after checking the password."""
    record = await issuer.find_by_email(body.email)
    if record is None:
        raise KeyNotFoundOrExpiredError()

    if not await issuer.verify_password(record, body.password):
        raise UnauthorizedError("Invalid email or password")

    return _record_to_issued(record)


@router.get("/validate", response_model=ValidateResponse)
async def validate(
    request: Request,
    issuer: CredentialIssuerDep,
) -> ValidateResponse:
    """Check whether the presented key is live."""
    api_key = extract_api_key(request)
    if api_key is None:
        raise UnauthorizedError("Authentication required")
    return ValidateResponse(valid=await issuer.validate(api_key))


@router.get("/{key_id}", response_model=ApiKeyResponse)
async def get_key(
    key_id: str,
    issuer: CredentialIssuerDep,
    _api_key: AuthDep,
) -> ApiKeyResponse:
    """Get a key record by id, expired or not."""
    record = await issuer.find_by_id(key_id)
    return _record_to_response(record)
