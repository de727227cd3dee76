"""HTTP tests for registration, login and the current-user endpoint."""

from learnhub.config import settings


def _register(client, email="new@example.com", password="pw-123456", display_name="New"):
    return client.post(
        "/api/auth/register",
        json={"email": email, "password": password, "display_name": display_name},
    )


class TestAuth:
    """Test registration, login and token use."""

    def test_register_login_me(self, client):
        resp = _register(client)
        assert resp.status_code == 201
        assert resp.json()["role"] == "student"

        token = client.post(
            "/api/auth/login",
            json={"email": "new@example.com", "password": "pw-123456"},
        ).json()["access_token"]
        me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert me.status_code == 200
        assert me.json()["email"] == "new@example.com"

    def test_duplicate_email_conflicts(self, client):
        _register(client)
        assert _register(client, email="NEW@example.com").status_code == 409

    def test_wrong_password_is_401(self, client):
        _register(client)
        resp = client.post("/api/auth/login", json={"email": "new@example.com", "password": "nope"})
        assert resp.status_code == 401
        assert resp.json()["detail"] == "Invalid email or password."

    def test_admin_emails_are_promoted(self, client, monkeypatch):
        monkeypatch.setattr(settings, "ADMIN_EMAILS", "boss@example.com")
        assert _register(client, email="boss@example.com").json()["role"] == "admin"

    def test_blank_display_name_falls_back_to_mailbox(self, client):
        assert _register(client, email="jo@example.com", display_name=" ").json()["display_name"] == "jo"

    def test_me_requires_token(self, client):
        assert client.get("/api/auth/me").status_code == 401

    def test_me_rejects_garbage_token(self, client):
        resp = client.get("/api/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
        assert resp.status_code == 401

    def test_overlong_password_is_rejected(self, client):
        """Passwords past bcrypt's 72-byte limit are a 400, not a server error."""
        resp = _register(client, password="p" * 100)
        assert resp.status_code == 400
        assert "72" in resp.json()["detail"]

        _register(client)
        resp = client.post("/api/auth/login", json={"email": "new@example.com", "password": "p" * 100})
        assert resp.status_code == 400

    def test_multibyte_password_counts_bytes(self, client):
        # 30 characters, 90 bytes in UTF-8.
        assert _register(client, password="€" * 30).status_code == 400
        assert _register(client, password="p" * 72).status_code == 201
