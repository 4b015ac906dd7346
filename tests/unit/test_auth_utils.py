import json
from unittest.mock import Mock
from urllib.parse import quote

import pytest
from fastapi import HTTPException
from fastapi.security import HTTPAuthorizationCredentials

from examly.database import Database
from examly.utils.auth_utils import extract_token, get_current_user, require_admin
from tests.fakes import FakeSupabaseClient

JWT = "aaa.bbb.ccc"

def make_request(cookies=None):
    request = Mock()
    request.cookies = cookies or {}
    return request

@pytest.fixture
def auth_db():
    client = FakeSupabaseClient({
        "profiles": [
            {"id": "admin-id", "role": "admin"},
            {"id": "user-id", "role": "teacher"},
        ],
    })
    client.add_user("valid-token", "user-id", email="test@example.com")
    return Database(client)

class TestExtractToken:
    """Test where the session token is read from"""

    def test_bearer_header_wins(self):
        credentials = HTTPAuthorizationCredentials(scheme="Bearer", credentials="header-token")
        request = make_request({"sb-access-token": JWT})

        assert extract_token(request, credentials) == "header-token"

    def test_plain_jwt_cookie(self):
        assert extract_token(make_request({"sb-access-token": JWT}), None) == JWT

    def test_json_cookie(self):
        cookie = quote(json.dumps({"access_token": JWT, "refresh_token": "r"}))

        assert extract_token(make_request({"supabase-auth-token": cookie}), None) == JWT

    def test_nested_session_cookie(self):
        cookie = json.dumps({"currentSession": {"access_token": JWT}})

        assert extract_token(make_request({"sb-session": cookie}), None) == JWT

    def test_bearer_cookie(self):
        assert extract_token(make_request({"sb-token": f"Bearer {JWT}"}), None) == JWT

    def test_no_token(self):
        assert extract_token(make_request({"sb-token": "not a token"}), None) is None

class TestAuthUtils:
    """Test authentication utility functions"""

    @pytest.mark.asyncio
    async def test_get_current_user_valid_token(self, auth_db):
        """Test getting current user with valid token"""
        credentials = HTTPAuthorizationCredentials(scheme="Bearer", credentials="valid-token")

        result = await get_current_user(make_request(), credentials, auth_db)

        assert result["id"] == "user-id"
        assert result["email"] == "test@example.com"

    @pytest.mark.asyncio
    async def test_get_current_user_invalid_token(self, auth_db):
        """Test getting current user with invalid token"""
        credentials = HTTPAuthorizationCredentials(scheme="Bearer", credentials="invalid-token")

        with pytest.raises(HTTPException) as exc_info:
            await get_current_user(make_request(), credentials, auth_db)

        assert exc_info.value.status_code == 401
        assert exc_info.value.detail == "Could not validate credentials"

    @pytest.mark.asyncio
    async def test_get_current_user_missing_token(self, auth_db):
        with pytest.raises(HTTPException) as exc_info:
            await get_current_user(make_request(), None, auth_db)

        assert exc_info.value.status_code == 401
        assert exc_info.value.detail == "Authorization token required"

    @pytest.mark.asyncio
    async def test_require_admin_valid_admin(self, auth_db):
        """Test require_admin with valid admin user"""
        admin_user = {"id": "admin-id", "email": "admin@examly.test"}

        result = await require_admin(admin_user, auth_db)
        assert result == admin_user

    @pytest.mark.asyncio
    async def test_require_admin_non_admin(self, auth_db):
        """Test require_admin with non-admin user"""
        regular_user = {"id": "user-id", "email": "user@example.com"}

        with pytest.raises(HTTPException) as exc_info:
            await require_admin(regular_user, auth_db)

        assert exc_info.value.status_code == 403

    @pytest.mark.asyncio
    async def test_require_admin_without_profile(self, auth_db):
        with pytest.raises(HTTPException) as exc_info:
            await require_admin({"id": "ghost"}, auth_db)

        assert exc_info.value.status_code == 403
