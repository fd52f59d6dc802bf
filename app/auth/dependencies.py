# =============================================================================
# app/auth/dependencies.py - FastAPI Auth Dependencies
# =============================================================================
# Verifies Supabase access tokens.
#
# Tokens signed with the project's asymmetric keys (ES256/RS256) are checked
# against the JWKS document; HS256 tokens use SUPABASE_JWT_SECRET.
#
# Usage:
#   from app.auth import get_current_user, AuthUser
#
#   @router.get("/proposals")
#   async def list_proposals(user: AuthUser = Depends(get_current_user)):
#       ...
# =============================================================================

import logging
import time
from typing import Any
from uuid import UUID

import httpx
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import ExpiredSignatureError, JWTError, jwt

from app.auth.models import AuthUser
from app.config import settings
from app.exceptions import AuthenticationError

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)

TOKEN_AUDIENCE = "authenticated"
JWKS_CACHE_TTL = 3600


class JWKSCache:
    """
    Signing keys published by Supabase Auth, refreshed hourly.

    A failed refresh keeps serving the previous keys.
    """

    def __init__(self, ttl: int = JWKS_CACHE_TTL):
        self.ttl = ttl
        self.keys: list[dict[str, Any]] = []
        self.fetched_at = 0.0

    @property
    def url(self) -> str:
        return f"{settings.SUPABASE_URL.rstrip('/')}/auth/v1/.well-known/jwks.json"

    def get_key(self, kid: str) -> dict[str, Any] | None:
        if not self.keys or time.time() - self.fetched_at >= self.ttl:
            self.refresh()
        return next((key for key in self.keys if key.get("kid") == kid), None)

    def refresh(self) -> None:
        try:
            response = httpx.get(self.url, timeout=10)
            response.raise_for_status()
            self.keys = response.json().get("keys", [])
            self.fetched_at = time.time()
            logger.debug(f"Loaded {len(self.keys)} signing keys from {self.url}")
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"Failed to fetch JWKS: {e}")


jwks_cache = JWKSCache()


def resolve_signing_key(token: str) -> tuple[Any, str]:
    """
    Pick the key and algorithm to verify a token with.

    Returns:
        (key, algorithm). Falls back to the HS256 secret when the token
        header is unreadable or names an unknown key.
    """
    try:
        header = jwt.get_unverified_header(token)
    except JWTError:
        return settings.SUPABASE_JWT_SECRET, "HS256"

    algorithm = header.get("alg", "HS256")
    kid = header.get("kid")
    if algorithm == "HS256" or not kid:
        return settings.SUPABASE_JWT_SECRET, "HS256"

    key = jwks_cache.get_key(kid)
    if key is None:
        logger.warning(f"No JWKS key for kid={kid}, falling back to HS256")
        return settings.SUPABASE_JWT_SECRET, "HS256"
    return key, algorithm


def decode_token(token: str) -> AuthUser:
    """
    Verify a Supabase access token and return its user.

    Raises:
        AuthenticationError: Expired, badly signed, or missing a valid sub
    """
    key, algorithm = resolve_signing_key(token)
    try:
        claims = jwt.decode(token, key, algorithms=[algorithm], audience=TOKEN_AUDIENCE)
    except ExpiredSignatureError:
        raise AuthenticationError("Token has expired")
    except JWTError as e:
        logger.warning(f"JWT validation failed: {e}")
        raise AuthenticationError()

    try:
        user_id = UUID(claims.get("sub") or "")
    except ValueError:
        raise AuthenticationError("Invalid token: missing or malformed user ID")

    return AuthUser(id=user_id, email=claims.get("email"), role=claims.get("role"))


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> AuthUser:
    """
    Require a valid bearer token.

    Raises:
        AuthenticationError: 401 when the header is missing or the token is invalid
    """
    if credentials is None:
        raise AuthenticationError("Missing bearer token")
    return decode_token(credentials.credentials)


async def get_current_user_optional(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> AuthUser | None:
    """The caller if a valid token was sent, otherwise None."""
    if credentials is None:
        return None
    try:
        return decode_token(credentials.credentials)
    except AuthenticationError:
        return None
