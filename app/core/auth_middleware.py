"""Authentication for REST routes and the chat socket handshake."""

from dataclasses import dataclass, field
from typing import Any, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from app.core.config import get_settings
from app.core.errors import AuthError
from app.core.logging import get_logger

logger = get_logger(__name__)

# HTTP Bearer scheme for Authorization header
security = HTTPBearer(auto_error=False)

SUPABASE_JWT_ALGORITHMS = ["HS256"]


@dataclass
class TokenClaims:
    """Verified identity carried by a Supabase access token."""

    sub: str
    email: Optional[str] = None
    claims: dict[str, Any] = field(default_factory=dict)


class AuthContext:
    """Context object containing authenticated user info."""

    def __init__(self, identity: TokenClaims, token: str):
        self.token = token
        self.user_id = identity.sub
        self.email = identity.email
        self.claims = identity.claims


def extract_bearer(value: Optional[str]) -> Optional[str]:
    """Return the token from 'Bearer <token>' or a bare token string."""
    if not value:
        return None
    value = value.strip()
    if value.lower().startswith("bearer "):
        value = value[7:].strip()
    return value or None


def _verify_locally(token: str, secret: str) -> dict[str, Any]:
    settings = get_settings()
    audience = settings.SUPABASE_JWT_AUDIENCE or None
    try:
        return jwt.decode(
            token,
            secret,
            algorithms=SUPABASE_JWT_ALGORITHMS,
            audience=audience,
            options={"verify_aud": audience is not None},
        )
    except JWTError as e:
        raise AuthError(f"Token verification failed: {e}") from e


def _verify_with_supabase(token: str) -> dict[str, Any]:
    from app.db.supabase_client import get_supabase

    try:
        auth_response = get_supabase().auth.get_user(token)
    except Exception as e:
        raise AuthError(f"Token verification failed: {e}") from e

    if not auth_response or not auth_response.user:
        raise AuthError("Token verification failed: unknown user")

    user = auth_response.user
    return {"sub": str(user.id), "email": user.email}


def verify_token(token: Optional[str]) -> TokenClaims:
    """
    Verify a Supabase-issued access token.

    Tokens are checked against SUPABASE_JWT_SECRET when it is configured,
    otherwise Supabase Auth is asked to resolve the user.

    Args:
        token: Raw JWT (no 'Bearer ' prefix)

    Returns:
        TokenClaims with the user id (sub) and email

    Raises:
        AuthError: If the token is missing, invalid, expired or lacks a sub claim
    """
    if not token:
        raise AuthError("Access token is required")

    secret = get_settings().SUPABASE_JWT_SECRET
    claims = _verify_locally(token, secret) if secret else _verify_with_supabase(token)

    sub = claims.get("sub")
    if not sub:
        raise AuthError("Invalid token payload: missing sub claim")

    return TokenClaims(sub=str(sub), email=claims.get("email"), claims=claims)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Optional[AuthContext]:
    """
    Extract and validate the current user from the request.

    Returns None if no valid auth is present (for optional auth endpoints).
    """
    if not credentials:
        return None

    token = credentials.credentials
    try:
        identity = verify_token(token)
    except AuthError as e:
        logger.warning(f"Auth error: {e}")
        return None

    return AuthContext(identity=identity, token=token)


async def require_auth(
    auth: Optional[AuthContext] = Depends(get_current_user),
) -> AuthContext:
    """Require authentication. Raises 401 if not authenticated."""
    if not auth:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or missing access token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return auth
