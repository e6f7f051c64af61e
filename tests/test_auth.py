"""
Tests for authentication endpoints.
"""

from inkwell.core.db.session import SESSION_COOKIE


class TestAuthRegistration:
    """Tests for user registration."""

    def test_register_new_user(self, db_session, client_factory):
        """Test successful user registration."""
        client = client_factory(db_session)
        response = client.post(
            "/api/auth/register",
            json={"email": "New.User@Example.com", "full_name": "New User"}
        )

        assert response.status_code == 201
        data = response.json()
        assert data["sk"].startswith("sk-")
        assert data["user"]["email"] == "new.user@example.com"
        assert data["user"]["role"] == "user"
        assert data["user"]["display_name"] == "New User"
        assert response.cookies.get(SESSION_COOKIE) == data["sk"]

    def test_session_cookie_and_security_headers(self, db_session, client_factory):
        client = client_factory(db_session)
        response = client.post("/api/auth/register", json={"email": "cookie@example.com"})

        cookie = response.headers["set-cookie"].lower()
        assert "httponly" in cookie
        assert "samesite=strict" in cookie
        assert response.headers["X-Frame-Options"] == "DENY"
        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert "frame-ancestors 'none'" in response.headers["Content-Security-Policy"]

    def test_registered_user_can_comment(self, db_session, client_factory, test_post):
        client = client_factory(db_session)
        client.post("/api/auth/register", json={"email": "fresh@example.com"})

        response = client.post("/api/comments", json={"content": "First!", "post_id": "P1"})

        assert response.status_code == 201
        assert response.json()["author_name"] == "fresh"

    def test_register_duplicate_email(self, db_session, client_factory, test_user_data):
        """Test that duplicate e-mail addresses are rejected."""
        client = client_factory(db_session)
        response = client.post(
            "/api/auth/register",
            json={"email": "READER@example.com"}
        )

        assert response.status_code == 409
        assert "already registered" in response.json()["detail"].lower()

    def test_register_invalid_email(self, db_session, client_factory):
        client = client_factory(db_session)
        response = client.post(
            "/api/auth/register",
            json={"email": "not-an-email"}
        )

        assert response.status_code == 422

    def test_admin_email_gets_admin_role(self, db_session, client_factory, monkeypatch):
        monkeypatch.setenv("INKWELL_ADMIN_EMAILS", "boss@example.com, other@example.com")
        client = client_factory(db_session)
        response = client.post(
            "/api/auth/register",
            json={"email": "boss@example.com"}
        )

        assert response.json()["user"]["role"] == "admin"


class TestAuthSession:
    """Tests for verifying, inspecting and ending sessions."""

    def test_verify_valid_key(self, db_session, client_factory, test_user_data):
        client = client_factory(db_session)
        response = client.post("/api/auth/verify", json={"sk": test_user_data["sk"]})

        assert response.status_code == 200
        assert response.json()["email"] == "reader@example.com"
        assert response.cookies.get(SESSION_COOKIE) == test_user_data["sk"]

    def test_verify_invalid_key(self, db_session, client_factory, test_user_data):
        client = client_factory(db_session)
        sk = test_user_data["sk"]
        tampered = sk[:-1] + ("0" if sk[-1] != "0" else "1")
        response = client.post("/api/auth/verify", json={"sk": tampered})

        assert response.status_code == 401

    def test_me(self, db_session, client_factory, test_user_data):
        client = client_factory(db_session, user_sk=test_user_data["sk"])
        response = client.get("/api/auth/me")

        assert response.status_code == 200
        assert response.json()["display_name"] == "Ada Reader"

    def test_me_unauthenticated(self, db_session, client_factory):
        client = client_factory(db_session)
        response = client.get("/api/auth/me")

        assert response.status_code == 401

    def test_logout_clears_cookie(self, db_session, client_factory, test_user_data):
        client = client_factory(db_session, user_sk=test_user_data["sk"])
        response = client.post("/api/auth/logout")

        assert response.status_code == 200
        assert SESSION_COOKIE in response.headers["set-cookie"]
        assert "Max-Age=0" in response.headers["set-cookie"]
