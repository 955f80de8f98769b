"""
Tests for Supabase JWT verification and admin checks.
"""

import asyncio
import os
import time
from types import SimpleNamespace

import jwt
import pytest
from fastapi import HTTPException

from core.auth import SupabaseUser, extract_user, is_admin, require_admin, verify_jwt


def encode(**overrides) -> str:
    payload = {
        "sub": "user-1",
        "aud": "authenticated",
        "email": "ayse@example.com",
        "exp": int(time.time()) + 3600,
    }
    payload.update(overrides)
    return jwt.encode(payload, os.environ["SUPABASE_JWT_SECRET"], algorithm="HS256")


class TestVerifyJwt:
    """Tests for verify_jwt."""

    def test_valid_token(self):
        payload = verify_jwt(encode())

        assert payload["sub"] == "user-1"

    def test_expired(self):
        with pytest.raises(HTTPException) as exc_info:
            verify_jwt(encode(exp=int(time.time()) - 60))

        assert exc_info.value.status_code == 401
        assert exc_info.value.detail == "Token has expired"

    def test_wrong_audience(self):
        with pytest.raises(HTTPException) as exc_info:
            verify_jwt(encode(aud="anon"))

        assert exc_info.value.detail == "Invalid token audience"

    def test_wrong_secret(self):
        token = jwt.encode({"sub": "x", "aud": "authenticated", "exp": int(time.time()) + 60}, "other", algorithm="HS256")

        with pytest.raises(HTTPException) as exc_info:
            verify_jwt(token)

        assert exc_info.value.detail.startswith("Invalid token")

    def test_extract_user(self):
        user = extract_user(verify_jwt(encode(user_metadata={"full_name": "Ayşe Yılmaz"})))

        assert user.email == "ayse@example.com"
        assert user.display_name == "Ayşe Yılmaz"


class TestAdminChecks:
    """Tests for is_admin and require_admin."""

    def test_role_claim(self):
        assert is_admin(SupabaseUser(id="u", app_metadata={"role": "admin"}))

    def test_admin_email(self, monkeypatch):
        monkeypatch.setattr("core.auth.get_settings", lambda: SimpleNamespace(admin_emails=["boss@nowiht.com"]))

        assert is_admin(SupabaseUser(id="u", email="Boss@NOWIHT.com"))
        assert not is_admin(SupabaseUser(id="u", email="ayse@example.com"))
        assert not is_admin(SupabaseUser(id="u"))

    def test_require_admin_rejects_customer(self):
        with pytest.raises(HTTPException) as exc_info:
            asyncio.run(require_admin(SupabaseUser(id="u", email="ayse@example.com")))

        assert exc_info.value.status_code == 403

    def test_require_admin_returns_admin(self):
        admin = SupabaseUser(id="u", app_metadata={"role": "admin"})

        assert asyncio.run(require_admin(admin)) is admin


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
