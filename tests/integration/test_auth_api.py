"""End-to-end auth flow over HTTP: envelope, status codes and token lifetime."""

import pytest

import refshelf.dependencies as dep_mod
from refshelf.auth.errors import ConfigurationError
from refshelf.config import RefshelfConfig

from fakes import TEST_PASSWORD

pytestmark = pytest.mark.asyncio

READER_EMAIL = "reader@example.com"


def _bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def _status(resp) -> dict:
    return resp.json()["status"]


# -----------------------------------------------------------------------
# Root and routing
# -----------------------------------------------------------------------

async def test_root(client):
    resp = await client.get("/")
    assert resp.status_code == 200
    assert resp.json() == {"status": {"code": 200, "message": "ok"}, "data": "API Root"}


async def test_unknown_path_is_404_envelope(client):
    resp = await client.get("/no/such/endpoint")
    assert resp.status_code == 404
    assert _status(resp) == {"code": 404, "message": "API endpoint not found"}


async def test_request_id_is_echoed(client):
    resp = await client.get("/", headers={"X-Request-ID": "trace-me-123"})
    assert resp.headers["x-request-id"] == "trace-me-123"


async def test_request_id_is_generated(client):
    resp = await client.get("/")
    assert len(resp.headers["x-request-id"]) == 32


# -----------------------------------------------------------------------
# Login and check
# -----------------------------------------------------------------------

async def test_login_then_check(client, reader_token):
    resp = await client.get("/check", headers=_bearer(reader_token))
    assert resp.status_code == 200
    assert resp.json()["data"] == "Authenticated"


async def test_lowercase_bearer_scheme_is_accepted(client, reader_token):
    resp = await client.get("/check", headers={"Authorization": f"bearer {reader_token}"})
    assert resp.status_code == 200


@pytest.mark.parametrize("template", ["BEARER {token}", "Bearer   {token}"])
async def test_bearer_scheme_variants_are_accepted(client, reader_token, template):
    resp = await client.get("/check", headers={"Authorization": template.format(token=reader_token)})
    assert resp.status_code == 200


@pytest.mark.parametrize("header", ["Bearer", "Bearer ", "Basic dXNlcjpwYXNz", "just-a-token"])
async def test_malformed_authorization_is_401(client, reader_token, header):
    resp = await client.get("/check", headers={"Authorization": header})
    assert resp.status_code == 401


async def test_logout_with_other_scheme_is_400(client, reader_token):
    resp = await client.post("/log-out", headers={"Authorization": f"Basic {reader_token}"})
    assert resp.status_code == 400


async def test_bearer_scheme_in_openapi(client):
    resp = await client.get("/openapi.json")
    schemes = resp.json()["components"]["securitySchemes"]
    assert schemes["HTTPBearer"]["scheme"] == "bearer"


async def test_check_without_token_is_401(client):
    resp = await client.get("/check")
    assert resp.status_code == 401
    assert _status(resp) == {"code": 401, "message": "Unauthorized"}
    assert resp.headers["www-authenticate"] == "Bearer"


async def test_check_with_forged_token_is_401(client):
    resp = await client.get("/check", headers=_bearer("eyJhbGciOiJIUzI1NiJ9.e30.forged"))
    assert resp.status_code == 401


async def test_wrong_password_is_401(client):
    resp = await client.post("/log-in", json={"email": READER_EMAIL, "password": "Wrong-Pass-1"})
    assert resp.status_code == 401
    assert _status(resp)["code"] == 401
    assert "data" not in resp.json()


async def test_login_missing_fields_is_400(client):
    resp = await client.post("/log-in", json={"email": READER_EMAIL})
    assert resp.status_code == 400
    assert _status(resp)["message"] == "Missing required fields: password."


async def test_login_empty_fields_is_400(client):
    resp = await client.post("/log-in", json={"email": "", "password": ""})
    assert resp.status_code == 400
    assert _status(resp)["message"] == "Missing required fields: email, password."


async def test_login_invalid_json_is_400(client):
    resp = await client.post(
        "/log-in",
        content=b"{not json",
        headers={"Content-Type": "application/json"},
    )
    assert resp.status_code == 400
    assert _status(resp)["message"] == "Invalid JSON provided."


async def test_login_throttled_after_repeated_failures(client):
    for _ in range(5):
        resp = await client.post("/log-in", json={"email": READER_EMAIL, "password": "Wrong-Pass-1"})
        assert resp.status_code == 401

    resp = await client.post("/log-in", json={"email": READER_EMAIL, "password": TEST_PASSWORD})
    assert resp.status_code == 429


async def test_token_expires_with_clock(client, reader_token, clock):
    clock.advance(3601)
    resp = await client.get("/check", headers=_bearer(reader_token))
    assert resp.status_code == 401


# -----------------------------------------------------------------------
# Logout
# -----------------------------------------------------------------------

async def test_logout_revokes_token(client, reader_token):
    resp = await client.post("/log-out", headers=_bearer(reader_token))
    assert resp.status_code == 200
    assert resp.json()["data"] == "Logged out"

    resp = await client.get("/check", headers=_bearer(reader_token))
    assert resp.status_code == 401


async def test_logout_via_get(client, reader_token):
    resp = await client.get("/log-out", headers=_bearer(reader_token))
    assert resp.status_code == 200


async def test_logout_without_token_is_400(client):
    resp = await client.post("/log-out")
    assert resp.status_code == 400
    assert _status(resp)["message"] == "No token provided for logout."


async def test_logout_other_session_unaffected(client, reader_token):
    resp = await client.post("/log-in", json={"email": READER_EMAIL, "password": TEST_PASSWORD})
    second = resp.json()["data"]["token"]

    await client.post("/log-out", headers=_bearer(reader_token))

    resp = await client.get("/check", headers=_bearer(second))
    assert resp.status_code == 200


# -----------------------------------------------------------------------
# Registration
# -----------------------------------------------------------------------

async def test_registration_available(client):
    resp = await client.get("/register")
    assert resp.status_code == 200
    assert resp.json()["data"] == "Available"


async def test_registration_disabled(client):
    dep_mod.get_session_lifecycle().registration_enabled = False

    resp = await client.get("/register")
    assert resp.status_code == 503
    resp = await client.post(
        "/register",
        json={"email": "new@example.com", "password": "Sturdy-Pass-42", "username": "newbie"},
    )
    assert resp.status_code == 503
    assert _status(resp)["message"] == "Registration is disabled."


async def test_register_then_login(client):
    resp = await client.post(
        "/register",
        json={"email": "new@example.com", "password": "Sturdy-Pass-42", "username": "newbie"},
    )
    assert resp.status_code == 200
    assert resp.json()["data"].startswith("We have signed up a new user with the ID ")

    resp = await client.post("/log-in", json={"email": "new@example.com", "password": "Sturdy-Pass-42"})
    assert resp.status_code == 200


async def test_register_existing_email_is_409(client):
    resp = await client.post(
        "/register",
        json={"email": READER_EMAIL, "password": "Sturdy-Pass-42", "username": "someone"},
    )
    assert resp.status_code == 409
    assert _status(resp)["message"] == "Email address already exists!"


async def test_register_bad_username_is_400(client):
    resp = await client.post(
        "/register",
        json={"email": "new@example.com", "password": "Sturdy-Pass-42", "username": "bad/name"},
    )
    assert resp.status_code == 400


async def test_register_missing_fields_is_400(client):
    resp = await client.post("/register", json={"email": "new@example.com"})
    assert resp.status_code == 400
    assert _status(resp)["message"] == "Missing required fields: password, username."


# -----------------------------------------------------------------------
# Lifespan
# -----------------------------------------------------------------------

async def test_lifespan_starts_and_stops_sweeper(test_app):
    from refshelf.main import lifespan

    async with lifespan(test_app):
        assert dep_mod.get_token_sweeper().running is True
    assert dep_mod.get_token_sweeper().running is False


async def test_lifespan_refuses_to_start_without_secret(test_app):
    from refshelf.main import lifespan

    dep_mod._config_instance = RefshelfConfig(_env_file=None, jwt_secret_key=None)
    dep_mod._auth_settings = None

    with pytest.raises(ConfigurationError):
        async with lifespan(test_app):
            pass
