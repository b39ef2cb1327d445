"""
API Tests for login and session lookup
"""
import pytest
from httpx import AsyncClient

from cmis_portal.core.security import decode_token


class TestLogin:
    """POST /api/auth/login"""

    @pytest.mark.asyncio
    async def test_login_success(self, client: AsyncClient, test_student):
        response = await client.post("/api/auth/login", json={
            "email": test_student.email,
            "password": "testpassword123"
        })

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["tokenType"] == "bearer"
        assert body["expiresIn"] > 0
        assert body["student"]["id"] == test_student.student_id
        assert "password" not in body["student"]
        assert decode_token(body["accessToken"])["sub"] == str(test_student.student_id)

    @pytest.mark.asyncio
    async def test_login_email_case_insensitive(self, client: AsyncClient, test_student):
        response = await client.post("/api/auth/login", json={
            "email": f"  {test_student.email.upper()} ",
            "password": "testpassword123"
        })

        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_login_wrong_password(self, client: AsyncClient, test_student):
        response = await client.post("/api/auth/login", json={
            "email": test_student.email,
            "password": "wrongpassword"
        })

        assert response.status_code == 401
        assert response.json() == {"error": "Invalid email or password"}

    @pytest.mark.asyncio
    async def test_login_unknown_email(self, client: AsyncClient):
        response = await client.post("/api/auth/login", json={
            "email": "nobody@tamu.edu",
            "password": "whatever123"
        })

        assert response.status_code == 401
        assert response.json() == {"error": "Invalid email or password"}

    @pytest.mark.asyncio
    async def test_login_account_not_set_up(self, client: AsyncClient, student_factory):
        student = await student_factory(is_registered=False)

        response = await client.post("/api/auth/login", json={
            "email": student.email,
            "password": "whatever123"
        })

        assert response.status_code == 401
        assert response.json() == {"error": "Account not properly set up. Please contact administrator."}

    @pytest.mark.asyncio
    async def test_login_missing_password(self, client: AsyncClient):
        response = await client.post("/api/auth/login", json={"email": "ada@tamu.edu"})

        assert response.status_code == 400
        assert response.json() == {"error": "Email and password are required"}


class TestMe:
    """GET /api/auth/me"""

    @pytest.mark.asyncio
    async def test_me(self, client: AsyncClient, test_student, auth_headers):
        response = await client.get("/api/auth/me", headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["student"]["email"] == test_student.email

    @pytest.mark.asyncio
    async def test_me_without_token(self, client: AsyncClient):
        response = await client.get("/api/auth/me")

        assert response.status_code == 401
        assert response.json() == {"error": "Not authenticated"}

    @pytest.mark.asyncio
    async def test_me_with_bad_token(self, client: AsyncClient):
        response = await client.get("/api/auth/me", headers={"Authorization": "Bearer garbage"})

        assert response.status_code == 401
