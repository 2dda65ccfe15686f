"""Tests for bearer token issue and verification."""

from datetime import UTC, datetime, timedelta

import jwt
import pytest
from identity.auth import decode_token, issue_token
from shared.config import Settings


@pytest.fixture()
def auth_settings():
    return Settings(env="test", jwt_secret="unit-secret")


class TestIssueToken:
    def test_round_trip(self, auth_settings):
        user = decode_token(auth_settings, issue_token(auth_settings, "cust-001"))
        assert user.user_id == "cust-001"
        assert user.role == "customer"
        assert not user.is_admin

    def test_admin_role(self, auth_settings):
        user = decode_token(auth_settings, issue_token(auth_settings, "admin-1", role="admin"))
        assert user.is_admin

    def test_unknown_role_cannot_be_issued(self, auth_settings):
        with pytest.raises(ValueError):
            issue_token(auth_settings, "cust-001", role="superuser")


class TestDecodeToken:
    def test_wrong_secret(self, auth_settings):
        token = issue_token(Settings(env="test", jwt_secret="other-secret"), "cust-001")
        with pytest.raises(jwt.InvalidTokenError):
            decode_token(auth_settings, token)

    def test_expired(self, auth_settings):
        past = datetime.now(UTC) - timedelta(days=1)
        token = jwt.encode({"sub": "cust-001", "role": "customer", "exp": past}, "unit-secret", algorithm="HS256")
        with pytest.raises(jwt.ExpiredSignatureError):
            decode_token(auth_settings, token)

    def test_missing_subject(self, auth_settings):
        future = datetime.now(UTC) + timedelta(days=1)
        token = jwt.encode({"role": "customer", "exp": future}, "unit-secret", algorithm="HS256")
        with pytest.raises(jwt.InvalidTokenError):
            decode_token(auth_settings, token)

    def test_unknown_role(self, auth_settings):
        future = datetime.now(UTC) + timedelta(days=1)
        token = jwt.encode({"sub": "x", "role": "root", "exp": future}, "unit-secret", algorithm="HS256")
        with pytest.raises(jwt.InvalidTokenError):
            decode_token(auth_settings, token)

    def test_garbage(self, auth_settings):
        with pytest.raises(jwt.InvalidTokenError):
            decode_token(auth_settings, "not-a-token")
