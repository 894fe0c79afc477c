"""End-to-end tests for password authentication and sessions."""

from fastapi.testclient import TestClient

from kycauth.domain.error import StoreUnavailableError
from kycauth.domain.repository import UserRepository
from kycauth.domain.service import RateLimiter
from tests.harness import create_client_fixture

# E2E test fixture
client = create_client_fixture()

JANE = {
    "name": "Jane Doe",
    "email": "jane@x.com",
    "password": "Passw0rd",
    "dateOfBirth": "1990-04-01",
}


def signup(client: TestClient, **overrides) -> dict:
    response = client.post("/auth/signup", json={**JANE, **overrides})
    assert response.status_code == 201, response.text
    return response.json()


def bearer(access_token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {access_token}"}


def reset_rate_limit(client: TestClient, path: str) -> None:
    """Clear the attempt window so a test can go past five requests."""
    container = client.app.state.dishka_container
    limiter = client.portal.call(container.get, RateLimiter)
    client.portal.call(limiter.reset, "testclient", path)


class TestSignup:
    """POST /auth/signup."""

    def test_signup_then_me(self, client):
        """Signup returns an access token that works on /auth/me."""
        # Act
        body = signup(client)

        # Assert
        assert body["success"] is True
        assert body["message"] == "User registered successfully"
        data = body["data"]
        assert data["tokenType"] == "Bearer"
        assert data["expiresIn"] == 900
        assert "refreshToken" not in data
        assert "passwordHash" not in data["user"]
        assert client.cookies.get("refreshToken")

        me = client.get("/auth/me", headers=bearer(data["accessToken"]))
        assert me.status_code == 200
        assert me.json()["data"]["user"]["email"] == "jane@x.com"
        assert me.json()["data"]["user"]["hasPassword"] is True

    def test_duplicate_email(self, client):
        signup(client)

        response = client.post("/auth/signup", json={**JANE, "email": "JANE@x.com"})

        assert response.status_code == 409
        assert response.json()["code"] == "DUPLICATE_EMAIL"

    def test_weak_password(self, client):
        response = client.post("/auth/signup", json={**JANE, "password": "password"})

        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["code"] == "VALIDATION_ERROR"
        assert body["errors"][0]["field"] == "password"

    def test_password_over_72_bytes(self, client):
        response = client.post(
            "/auth/signup", json={**JANE, "password": "Aa1" + "x" * 70}
        )

        assert response.status_code == 400
        body = response.json()
        assert body["code"] == "VALIDATION_ERROR"
        assert body["errors"][0]["field"] == "password"

    def test_missing_field(self, client):
        response = client.post("/auth/signup", json={"email": "jane@x.com"})

        assert response.status_code == 400
        fields = {e["field"] for e in response.json()["errors"]}
        assert {"name", "password"} <= fields


class TestLogin:
    """POST /auth/login."""

    def test_login(self, client):
        signup(client)
        client.cookies.clear()

        response = client.post(
            "/auth/login", json={"email": "Jane@X.com", "password": "Passw0rd"}
        )

        assert response.status_code == 200
        assert response.json()["message"] == "Login successful"
        assert client.cookies.get("refreshToken")

    def test_unknown_email_and_wrong_password_look_alike(self, client):
        signup(client)

        unknown = client.post(
            "/auth/login", json={"email": "nobody@x.com", "password": "Passw0rd"}
        )
        wrong = client.post(
            "/auth/login", json={"email": "jane@x.com", "password": "Wrong123"}
        )

        assert unknown.status_code == wrong.status_code == 401
        assert unknown.json() == wrong.json()
        assert wrong.json()["code"] == "INVALID_CREDENTIALS"

    def test_store_failure_is_not_bad_credentials(self, client, monkeypatch):
        """A failing credential store gives 500, never the 401 of an unknown email."""
        # Arrange
        container = client.app.state.dishka_container
        repo = client.portal.call(container.get, UserRepository)

        async def unavailable(email):
            raise StoreUnavailableError("Credential store timed out")

        monkeypatch.setattr(repo, "find_by_email", unavailable)

        # Act
        response = client.post(
            "/auth/login", json={"email": "jane@x.com", "password": "Passw0rd"}
        )

        # Assert
        assert response.status_code == 500
        body = response.json()
        assert body["code"] == "INTERNAL_ERROR"
        assert "refreshToken" not in client.cookies

    def test_lockout_after_five_failures(self, client):
        """Five failures lock the account; the correct password then gets 423."""
        # Arrange
        signup(client)
        for _ in range(5):
            response = client.post(
                "/auth/login", json={"email": "jane@x.com", "password": "Wrong123"}
            )
            assert response.status_code == 401
        reset_rate_limit(client, "/auth/login")

        # Act
        response = client.post(
            "/auth/login", json={"email": "jane@x.com", "password": "Passw0rd"}
        )

        # Assert
        assert response.status_code == 423
        body = response.json()
        assert body["code"] == "ACCOUNT_LOCKED"
        assert body["lockedUntil"]

    def test_sixth_attempt_is_rate_limited(self, client):
        for _ in range(5):
            client.post("/auth/login", json={"email": "a@x.com", "password": "x"})

        response = client.post("/auth/login", json={"email": "a@x.com", "password": "x"})

        assert response.status_code == 429
        assert response.json()["code"] == "RATE_LIMITED"
        retry_after = int(response.headers["Retry-After"])
        assert 0 < retry_after <= 15 * 60
        assert response.json()["retryAfter"] == retry_after


class TestRefresh:
    """POST /auth/refresh."""

    def test_refresh_from_cookie_rotates(self, client):
        signup(client)
        original = client.cookies.get("refreshToken")

        response = client.post("/auth/refresh")

        assert response.status_code == 200
        assert response.json()["data"]["accessToken"]
        assert client.cookies.get("refreshToken") != original

    def test_refresh_token_is_single_use(self, client):
        """Replaying a consumed refresh token in the body answers 401."""
        # Arrange
        signup(client)
        original = client.cookies.get("refreshToken")
        assert client.post("/auth/refresh").status_code == 200
        client.cookies.clear()

        # Act
        response = client.post("/auth/refresh", json={"refreshToken": original})

        # Assert
        assert response.status_code == 401
        assert response.json()["code"] == "INVALID_TOKEN"

    def test_missing_refresh_token(self, client):
        response = client.post("/auth/refresh")

        assert response.status_code == 401
        assert response.json()["code"] == "TOKEN_MISSING"


class TestSessionEnd:
    """Logout, logout-all and change-password."""

    def test_logout_revokes_refresh_token(self, client):
        # Arrange
        token = signup(client)["data"]["accessToken"]
        refresh_token = client.cookies.get("refreshToken")

        # Act
        response = client.post("/auth/logout", headers=bearer(token))

        # Assert
        assert response.status_code == 200
        assert response.json()["message"] == "Logged out successfully"
        assert client.cookies.get("refreshToken") is None
        replay = client.post("/auth/refresh", json={"refreshToken": refresh_token})
        assert replay.status_code == 401

    def test_logout_requires_token(self, client):
        response = client.post("/auth/logout")

        assert response.status_code == 401
        assert response.json()["code"] == "TOKEN_MISSING"

    def test_logout_all(self, client):
        token = signup(client)["data"]["accessToken"]
        refresh_token = client.cookies.get("refreshToken")

        response = client.post("/auth/logout-all", headers=bearer(token))

        assert response.status_code == 200
        client.cookies.clear()
        replay = client.post("/auth/refresh", json={"refreshToken": refresh_token})
        assert replay.status_code == 401

    def test_change_password(self, client):
        # Arrange
        token = signup(client)["data"]["accessToken"]

        # Act
        response = client.post(
            "/auth/change-password",
            headers=bearer(token),
            json={"currentPassword": "Passw0rd", "newPassword": "N3wSecret"},
        )

        # Assert
        assert response.status_code == 200
        old = client.post(
            "/auth/login", json={"email": "jane@x.com", "password": "Passw0rd"}
        )
        new = client.post(
            "/auth/login", json={"email": "jane@x.com", "password": "N3wSecret"}
        )
        assert old.status_code == 401
        assert new.status_code == 200

    def test_change_password_wrong_current(self, client):
        token = signup(client)["data"]["accessToken"]

        response = client.post(
            "/auth/change-password",
            headers=bearer(token),
            json={"currentPassword": "Wrong123", "newPassword": "N3wSecret"},
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Current password is incorrect"

    def test_change_password_over_72_bytes(self, client):
        # Arrange
        token = signup(client)["data"]["accessToken"]

        # Act
        response = client.post(
            "/auth/change-password",
            headers=bearer(token),
            json={"currentPassword": "Passw0rd", "newPassword": "Aa1" + "x" * 70},
        )

        # Assert
        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"
        login = client.post(
            "/auth/login", json={"email": "jane@x.com", "password": "Passw0rd"}
        )
        assert login.status_code == 200


class TestGatekeeper:
    """Bearer token handling on protected routes."""

    def test_garbage_token(self, client):
        response = client.get("/auth/me", headers=bearer("not-a-jwt"))

        assert response.status_code == 401
        assert response.json()["code"] == "INVALID_TOKEN"

    def test_refresh_token_as_bearer(self, client):
        signup(client)

        response = client.get(
            "/auth/me", headers=bearer(client.cookies.get("refreshToken"))
        )

        assert response.status_code == 401
        assert response.json()["code"] == "INVALID_TOKEN"

    def test_unknown_route(self, client):
        response = client.get("/nope")

        assert response.status_code == 404
        assert response.json()["success"] is False
