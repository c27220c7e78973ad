"""
Ulyngo Backend — Auth Service and Route Tests
===============================================

AuthService against the AsyncMock session, plus the HTTP contract of
/api/auth and the admin guard.
"""

from uuid import uuid4

import pytest

from app.exceptions import AuthenticationError, ConflictError
from app.models.user import User, UserActivityLog
from app.schemas.auth import LoginRequest, RegisterRequest
from app.services.auth_service import auth_service
from app.services.security import decode_access_token, hash_password
from conftest import db_result


def make_user(password="userpassword", role="user") -> User:
    return User(
        id=uuid4(),
        username="raffa",
        email="raffa@ulyn.com",
        password_hash=hash_password(password),
        role=role,
    )


class TestAuthService:
    @pytest.mark.asyncio
    async def test_register_creates_user_role_and_log(self, mock_db_session):
        mock_db_session.execute.return_value = db_result(first=None)
        body = RegisterRequest(username="raffa", email="raffa@ulyn.com", password="userpassword")

        user = await auth_service.register(mock_db_session, body)

        assert user.role == "user"
        assert user.password_hash != "userpassword"
        added = [c.args[0] for c in mock_db_session.add.call_args_list]
        assert added[0] is user
        assert isinstance(added[1], UserActivityLog)
        assert added[1].activity_type == "register"

    @pytest.mark.asyncio
    async def test_register_duplicate_is_conflict(self, mock_db_session):
        mock_db_session.execute.return_value = db_result(first=(uuid4(),))
        body = RegisterRequest(username="raffa", email="raffa@ulyn.com", password="userpassword")

        with pytest.raises(ConflictError):
            await auth_service.register(mock_db_session, body)
        mock_db_session.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_login_success_issues_token_and_touches_user(self, mock_db_session):
        user = make_user()
        mock_db_session.execute.return_value = db_result(scalar=user)

        result = await auth_service.login(
            mock_db_session, LoginRequest(username="raffa", password="userpassword")
        )

        claims = decode_access_token(result.token)
        assert claims["sub"] == str(user.id)
        assert claims["role"] == "user"
        assert result.user.username == "raffa"
        assert user.last_active_at is not None
        logged = mock_db_session.add.call_args.args[0]
        assert logged.activity_type == "login"

    @pytest.mark.asyncio
    async def test_login_wrong_password(self, mock_db_session):
        mock_db_session.execute.return_value = db_result(scalar=make_user())

        with pytest.raises(AuthenticationError) as exc_info:
            await auth_service.login(
                mock_db_session, LoginRequest(username="raffa", password="wrong")
            )
        assert exc_info.value.message == "Invalid credentials"

    @pytest.mark.asyncio
    async def test_login_unknown_user(self, mock_db_session):
        mock_db_session.execute.return_value = db_result(scalar=None)

        with pytest.raises(AuthenticationError):
            await auth_service.login(
                mock_db_session, LoginRequest(username="ghost", password="whatever")
            )


class TestAuthRoutes:
    @pytest.mark.asyncio
    async def test_register_201(self, test_client, mock_db_session):
        mock_db_session.execute.return_value = db_result(first=None)

        response = await test_client.post(
            "/api/auth/register",
            json={"username": "newbie", "email": "newbie@ulyn.com", "password": "secret123"},
        )

        assert response.status_code == 201
        assert response.json() == {"message": "User registered successfully"}

    @pytest.mark.asyncio
    async def test_register_invalid_email_is_400(self, test_client):
        response = await test_client.post(
            "/api/auth/register",
            json={"username": "newbie", "email": "not-an-email", "password": "secret123"},
        )

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "Invalid request body"
        assert "email" in body["details"]

    @pytest.mark.asyncio
    async def test_register_password_over_72_bytes_is_400(self, test_client, mock_db_session):
        # 40 characters, 80 bytes
        response = await test_client.post(
            "/api/auth/register",
            json={"username": "newbie", "email": "newbie@ulyn.com", "password": "é" * 40},
        )

        assert response.status_code == 400
        assert "password" in response.json()["details"]
        mock_db_session.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_register_multibyte_password_within_72_bytes(self, test_client, mock_db_session):
        mock_db_session.execute.return_value = db_result(first=None)

        response = await test_client.post(
            "/api/auth/register",
            json={"username": "newbie", "email": "newbie@ulyn.com", "password": "é" * 36},
        )

        assert response.status_code == 201

    @pytest.mark.asyncio
    async def test_login_invalid_credentials_401(self, test_client, mock_db_session):
        mock_db_session.execute.return_value = db_result(scalar=None)

        response = await test_client.post(
            "/api/auth/login", json={"username": "ghost", "password": "whatever"}
        )

        assert response.status_code == 401
        assert response.json()["error"] == "Invalid credentials"
        assert response.json()["code"] == "unauthorized"

    @pytest.mark.asyncio
    async def test_login_returns_token_and_user(self, test_client, mock_db_session):
        user = make_user(role="admin")
        mock_db_session.execute.return_value = db_result(scalar=user)

        response = await test_client.post(
            "/api/auth/login", json={"username": "raffa", "password": "userpassword"}
        )

        assert response.status_code == 200
        body = response.json()
        assert body["user"] == {"id": str(user.id), "username": "raffa", "role": "admin"}
        assert decode_access_token(body["token"])["role"] == "admin"


class TestAdminGuard:
    @pytest.mark.asyncio
    async def test_user_role_is_403(self, test_client, user_headers):
        response = await test_client.post(
            "/api/marker/tags", json={"name": "Hiking"}, headers=user_headers
        )

        assert response.status_code == 403
        assert response.json()["error"] == (
            "Access denied. Administrator privileges are required."
        )

    @pytest.mark.asyncio
    async def test_no_token_is_401(self, test_client):
        response = await test_client.delete(f"/api/markers/{uuid4()}")

        assert response.status_code == 401
