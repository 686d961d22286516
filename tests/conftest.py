"""Pytest configuration and fixtures."""

import os
from unittest.mock import MagicMock

import pytest

# Set before app modules are imported at collection time
TEST_ENV = {
    "SUPABASE_URL": "https://test.supabase.co",
    "SUPABASE_SERVICE_ROLE_KEY": "test-key",
    "SUPABASE_JWT_SECRET": "test-jwt-secret",
    "OPENAI_API_KEY": "test-openai-key",
    "PINECONE_API_KEY": "test-pinecone-key",
    "S3_BUCKET_NAME": "test-bucket",
    "BRAINTOK_ENV": "test",
}
os.environ.update(TEST_ENV)


@pytest.fixture(scope="session", autouse=True)
def setup_test_env():
    """Set up test environment variables."""
    os.environ.update(TEST_ENV)


@pytest.fixture(autouse=True)
def fresh_settings():
    """Drop cached settings so per-test env changes take effect."""
    from app.core.config import get_settings

    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def mock_supabase(execute_results=None):
    """Supabase mock with chained query builder.

    Args:
        execute_results: Optional list of return values for successive
            .execute() calls (uses side_effect). When not provided,
            every .execute() returns ``MagicMock(data=[], count=0)``.
    """
    sb = MagicMock()
    chain = MagicMock()
    if execute_results is not None:
        chain.execute.side_effect = execute_results
    else:
        chain.execute.return_value = MagicMock(data=[], count=0)
    for method in ("select", "insert", "update", "delete", "eq", "match", "order", "limit"):
        getattr(chain, method).return_value = chain
    sb.table.return_value = chain
    return sb


@pytest.fixture
def supabase_chain():
    """Factory fixture returning (client, chain) for a patched Supabase."""

    def _make(execute_results=None):
        sb = mock_supabase(execute_results)
        return sb, sb.table.return_value

    return _make


@pytest.fixture
def make_token():
    """Factory for Supabase-style HS256 access tokens signed with the test secret."""
    import time

    from jose import jwt

    def _make(sub="user-123", email="ada@example.com", expires_in=3600, audience="authenticated", **extra):
        claims = {"exp": int(time.time()) + expires_in, "aud": audience, **extra}
        if sub is not None:
            claims["sub"] = sub
        if email is not None:
            claims["email"] = email
        return jwt.encode(claims, TEST_ENV["SUPABASE_JWT_SECRET"], algorithm="HS256")

    return _make


@pytest.fixture
def client():
    from fastapi.testclient import TestClient

    from app.main import app

    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def authed():
    """Bypass bearer verification for routes that require auth."""
    from app.core.auth_middleware import AuthContext, TokenClaims, require_auth
    from app.main import app

    context = AuthContext(TokenClaims(sub="user-123", email="ada@example.com"), token="test-token")
    app.dependency_overrides[require_auth] = lambda: context
    yield context
    app.dependency_overrides.pop(require_auth, None)
