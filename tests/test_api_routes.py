"""
tests/test_api_routes.py -- Integration tests for the account routes.

These tests exercise the full stack: FastAPI routing -> request model
validation -> account service -> UserStore -> response serialization.

Coverage:
  - Register happy path: 200, camelCase body, well-formed token, no-store
  - Register duplicate (any case): 400 email_taken
  - Register validation: 422 envelope that does not echo the password
  - Login: 200 with token; wrong password and unknown email give the same 401
  - /me: 200 with Bearer token; 401 without or with a bad token

Fixtures used (from conftest.py):
  - api_client: (client, issuer, token) -- user TEST_EMAIL / TEST_PASSWORD pre-registered
"""

from __future__ import annotations

from fastapi.testclient import TestClient

from auth.models import Identity
from auth.tokens import TokenIssuer
from tests.conftest import TEST_EMAIL, TEST_PASSWORD

ApiClient = tuple[TestClient, TokenIssuer, str]


class TestRegister:
    def test_register_returns_user_and_token(self, api_client: ApiClient) -> None:
        client, issuer, _token = api_client
        resp = client.post(
            "/api/account/register",
            json={"displayName": "New Person", "email": "New.Person@example.com", "password": "Secret1"},
        )
        assert resp.status_code == 200
        assert resp.headers["Cache-Control"] == "no-store"
        data = resp.json()
        assert set(data) == {"id", "displayName", "email", "token"}
        assert data["displayName"] == "New Person"
        assert data["email"] == "New.Person@example.com"
        claims = issuer.decode(data["token"])
        assert claims["nameid"] == data["id"]
        assert claims["email"] == "New.Person@example.com"

    def test_register_duplicate_email_any_case(self, api_client: ApiClient) -> None:
        client, _issuer, _token = api_client
        resp = client.post(
            "/api/account/register",
            json={"displayName": "Dup", "email": TEST_EMAIL.upper(), "password": "Secret1"},
        )
        assert resp.status_code == 400
        assert resp.json()["error"]["code"] == "email_taken"

    def test_register_validation_error_hides_password(self, api_client: ApiClient) -> None:
        client, _issuer, _token = api_client
        resp = client.post(
            "/api/account/register",
            json={"displayName": "Short", "email": "short@example.com", "password": "p9!"},
        )
        assert resp.status_code == 422
        body = resp.json()
        assert body["error"]["code"] == "validation_error"
        assert "password" in body["error"]["detail"]
        assert "p9!" not in resp.text

    def test_register_rejects_malformed_email(self, api_client: ApiClient) -> None:
        client, _issuer, _token = api_client
        resp = client.post(
            "/api/account/register",
            json={"displayName": "Bad", "email": "not-an-email", "password": "Secret1"},
        )
        assert resp.status_code == 422


class TestLogin:
    def test_login_success(self, api_client: ApiClient) -> None:
        client, issuer, _token = api_client
        resp = client.post("/api/account/login", json={"email": TEST_EMAIL, "password": TEST_PASSWORD})
        assert resp.status_code == 200
        assert resp.headers["Cache-Control"] == "no-store"
        data = resp.json()
        assert data["email"] == TEST_EMAIL
        assert data["displayName"] == "Test User"
        assert issuer.decode(data["token"])["nameid"] == data["id"]

    def test_login_email_case_insensitive(self, api_client: ApiClient) -> None:
        client, _issuer, _token = api_client
        resp = client.post("/api/account/login", json={"email": TEST_EMAIL.upper(), "password": TEST_PASSWORD})
        assert resp.status_code == 200

    def test_wrong_password_and_unknown_email_look_the_same(self, api_client: ApiClient) -> None:
        client, _issuer, _token = api_client
        wrong_pw = client.post("/api/account/login", json={"email": TEST_EMAIL, "password": "wrong"})
        unknown = client.post("/api/account/login", json={"email": "ghost@example.com", "password": "wrong"})
        assert wrong_pw.status_code == 401
        assert unknown.status_code == 401
        assert wrong_pw.json() == unknown.json()
        assert wrong_pw.json()["error"]["code"] == "bad_credentials"
        assert "token" not in wrong_pw.text


class TestMe:
    def test_me_with_bearer_token(self, api_client: ApiClient) -> None:
        client, _issuer, token = api_client
        resp = client.get("/api/account/me", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 200
        data = resp.json()
        assert data["email"] == TEST_EMAIL
        assert data["displayName"] == "Test User"

    def test_me_without_token(self, api_client: ApiClient) -> None:
        client, _issuer, _token = api_client
        resp = client.get("/api/account/me")
        assert resp.status_code == 401
        assert resp.json()["error"]["code"] == "unauthorized"

    def test_me_with_foreign_token(self, api_client: ApiClient) -> None:
        client, _issuer, token = api_client
        other = TokenIssuer.configure("x" * 64)
        forged = other.issue(Identity(id="someone", email=TEST_EMAIL)).encoded
        resp = client.get("/api/account/me", headers={"Authorization": f"Bearer {forged}"})
        assert resp.status_code == 401
