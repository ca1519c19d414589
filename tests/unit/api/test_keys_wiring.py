"""End-to-end tests for /v1/keys through the real dependencies.

Runs the app lifespan against a temporary SQLite file, so requests go
through get_session_dependency, SqlRecordStore and bcrypt.
"""

from __future__ import annotations

import httpx
import pytest

from keyissuer.api.dependencies import get_hash_provider
from keyissuer.config import get_settings
from keyissuer.main import create_app, lifespan

SIGNUP = {"email": "alice@x.com", "name": "Alice", "password": "s3cret-pass"}


@pytest.fixture
async def client(tmp_path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.delenv("KEYISSUER_CONFIG_FILE", raising=False)
    monkeypatch.setenv("KEYISSUER_DATABASE__URL", f"sqlite+aiosqlite:///{tmp_path / 'keys.db'}")
    monkeypatch.setenv("KEYISSUER_SECURITY__BCRYPT_ROUNDS", "4")
    get_settings.cache_clear()
    get_hash_provider.cache_clear()

    app = create_app()
    transport = httpx.ASGITransport(app=app)
    async with lifespan(app):
        async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as c:
            yield c

    get_settings.cache_clear()
    get_hash_provider.cache_clear()


class TestRealWiring:
    async def test_signup_then_validate(self, client: httpx.AsyncClient):
        resp = await client.post("/v1/keys/signup", json=SIGNUP)
        assert resp.status_code == 201, resp.text
        key = resp.json()["key"]

        resp = await client.get("/v1/keys/validate", headers={"Authorization": f"Bearer {key}"})

        assert resp.status_code == 200
        assert resp.json() == {"valid": True}

    async def test_second_signup_rejected_while_live(self, client: httpx.AsyncClient):
        resp = await client.post("/v1/keys/signup", json=SIGNUP)
        assert resp.status_code == 201, resp.text

        resp = await client.post("/v1/keys/signup", json=SIGNUP)

        assert resp.status_code == 409
        assert resp.json()["error"]["details"] == {"remaining_minutes": 60}

    async def test_login_and_get_by_id(self, client: httpx.AsyncClient):
        issued = (await client.post("/v1/keys/signup", json=SIGNUP)).json()

        login = await client.post(
            "/v1/keys/login",
            json={"email": "alice@x.com", "password": "s3cret-pass"},
        )
        assert login.status_code == 200
        assert login.json()["key"] == issued["key"]

        resp = await client.get(f"/v1/keys/{issued['id']}", headers={"X-API-Key": issued["key"]})
        assert resp.status_code == 200
        assert resp.json()["email"] == "alice@x.com"

    async def test_unknown_key_is_invalid(self, client: httpx.AsyncClient):
        resp = await client.get("/v1/keys/validate", headers={"X-API-Key": "no-such-key"})

        assert resp.status_code == 200
        assert resp.json() == {"valid": False}
