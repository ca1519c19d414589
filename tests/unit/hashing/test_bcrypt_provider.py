"""Unit tests for BcryptHashProvider."""

from __future__ import annotations

import pytest

from keyissuer.errors import HashProviderError
from keyissuer.hashing import BcryptHashProvider


@pytest.fixture
def provider() -> BcryptHashProvider:
    return BcryptHashProvider(rounds=4)


class TestBcryptHashProvider:
    """Hash and verify round trips."""

    async def test_salt_carries_cost_factor(self, provider: BcryptHashProvider):
        salt = await provider.generate_salt()

        assert salt.startswith(b"$2b$04$")

    async def test_salts_are_random(self, provider: BcryptHashProvider):
        salts = {await provider.generate_salt() for _ in range(5)}

        assert len(salts) == 5

    async def test_hash_embeds_salt(self, provider: BcryptHashProvider):
        salt = await provider.generate_salt()

        hashed = await provider.hash("password", salt)

        assert hashed.startswith(salt.decode())

    async def test_hash_is_deterministic_for_same_salt(self, provider: BcryptHashProvider):
        salt = await provider.generate_salt()

        assert await provider.hash("password", salt) == await provider.hash("password", salt)

    async def test_verify_correct(self, provider: BcryptHashProvider):
        hashed = await provider.hash("password", await provider.generate_salt())

        assert await provider.verify("password", hashed) is True

    async def test_verify_incorrect(self, provider: BcryptHashProvider):
        hashed = await provider.hash("password", await provider.generate_salt())

        assert await provider.verify("Password", hashed) is False
        assert await provider.verify(hashed, hashed) is False

    async def test_long_input_is_truncated_not_rejected(self, provider: BcryptHashProvider):
        long_text = "x" * 100
        hashed = await provider.hash(long_text, await provider.generate_salt())

        assert await provider.verify(long_text, hashed) is True
        assert await provider.verify("x" * 72, hashed) is True

    async def test_non_ascii_input(self, provider: BcryptHashProvider):
        hashed = await provider.hash("pässwörd", await provider.generate_salt())

        assert await provider.verify("pässwörd", hashed) is True
        assert await provider.verify("passwort", hashed) is False

    async def test_malformed_hash_raises(self, provider: BcryptHashProvider):
        with pytest.raises(HashProviderError):
            await provider.verify("password", "not-a-bcrypt-hash")

    async def test_malformed_salt_raises(self, provider: BcryptHashProvider):
        with pytest.raises(HashProviderError):
            await provider.hash("password", b"bogus-salt")
