"""
Invoicely - Kimlik Dogrulama Testleri

Test edilen endpoint'ler:
    POST /api/v1/auth/register
    POST /api/v1/auth/login
    GET  /api/v1/auth/me
"""

from invoicely.services.auth import create_access_token


class TestRegister:

    def test_register(self, client):
        response = client.post(
            "/api/v1/auth/register",
            json={
                "email": "new@invoicely.com",
                "password": "Strong1234!",
                "full_name": "New User",
            },
        )
        assert response.status_code == 201, response.text
        data = response.json()
        assert data["email"] == "new@invoicely.com"
        assert data["is_active"] is True
        # Sifre hash'i response'da olmamali
        assert "hashed_password" not in data
        assert "password" not in data

    def test_register_duplicate_email(self, client, test_user):
        response = client.post(
            "/api/v1/auth/register",
            json={
                "email": "test@invoicely.com",
                "password": "Strong1234!",
                "full_name": "Duplicate",
            },
        )
        assert response.status_code == 400
        assert "already registered" in response.json()["detail"]

    def test_register_short_password(self, client):
        response = client.post(
            "/api/v1/auth/register",
            json={"email": "short@invoicely.com", "password": "Ab1!", "full_name": "Short"},
        )
        assert response.status_code == 422

    def test_register_invalid_email(self, client):
        response = client.post(
            "/api/v1/auth/register",
            json={"email": "not-an-email", "password": "Strong1234!", "full_name": "Bad Email"},
        )
        assert response.status_code == 422


class TestLogin:

    def test_login(self, client, test_user):
        response = client.post(
            "/api/v1/auth/login",
            data={"username": "test@invoicely.com", "password": "Test1234!"},
        )
        assert response.status_code == 200, response.text
        data = response.json()
        assert data["token_type"] == "bearer"
        assert data["access_token"]

    def test_login_wrong_password(self, client, test_user):
        response = client.post(
            "/api/v1/auth/login",
            data={"username": "test@invoicely.com", "password": "Wrong1234!"},
        )
        assert response.status_code == 401
        assert "incorrect" in response.json()["detail"].lower()

    def test_login_nonexistent_user(self, client):
        response = client.post(
            "/api/v1/auth/login",
            data={"username": "nobody@invoicely.com", "password": "Whatever1!"},
        )
        assert response.status_code == 401

    def test_login_inactive_user(self, client, db_session, test_user):
        test_user.is_active = False
        db_session.commit()
        response = client.post(
            "/api/v1/auth/login",
            data={"username": "test@invoicely.com", "password": "Test1234!"},
        )
        assert response.status_code == 403

    def test_login_token_works_for_me(self, client, test_user):
        token = client.post(
            "/api/v1/auth/login",
            data={"username": "test@invoicely.com", "password": "Test1234!"},
        ).json()["access_token"]
        response = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 200
        assert response.json()["email"] == "test@invoicely.com"


class TestMe:

    def test_me_without_token(self, client):
        assert client.get("/api/v1/auth/me").status_code == 401

    def test_me_with_invalid_token(self, client):
        response = client.get("/api/v1/auth/me", headers={"Authorization": "Bearer garbage"})
        assert response.status_code == 401

    def test_me_with_cookie(self, client, test_user):
        client.cookies.set("access_token", create_access_token(test_user.id))
        response = client.get("/api/v1/auth/me")
        assert response.status_code == 200
        assert response.json()["id"] == str(test_user.id)
