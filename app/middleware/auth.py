"""
Supabase JWT authentication

Bearer tokens issued by Supabase Auth are verified against the project's
JWKS (public keys). The verified claims become the request's session.
"""
import logging
import time
from typing import Any, Dict, Optional

import httpx
from fastapi import Header, HTTPException
from jose import jwk, jwt

from app import config

logger = logging.getLogger(__name__)

_jwks_cache: Optional[dict] = None
_jwks_cache_time: float = 0

JWT_AUDIENCE = "authenticated"
SUPPORTED_ALGORITHMS = ["ES256", "RS256"]


def get_supabase_url() -> str:
    url = config.SUPABASE_URL
    if not url:
        raise ValueError("SUPABASE_URL must be set")
    return url.rstrip("/")


def get_jwks_url() -> str:
    return f"{get_supabase_url()}/auth/v1/.well-known/jwks.json"


def get_jwt_issuer() -> str:
    return f"{get_supabase_url()}/auth/v1"


def reset_jwks_cache() -> None:
    global _jwks_cache, _jwks_cache_time
    _jwks_cache = None
    _jwks_cache_time = 0


async def get_jwks() -> dict:
    """
    Fetch and cache JWKS from Supabase.
    An expired cache is still used when a refresh fails.
    """
    global _jwks_cache, _jwks_cache_time

    now = time.time()
    if _jwks_cache and (now - _jwks_cache_time) < config.JWKS_CACHE_SECONDS:
        return _jwks_cache

    jwks_url = get_jwks_url()
    logger.info(f"Fetching JWKS from Supabase: {jwks_url}")

    try:
        async with httpx.AsyncClient() as client:
            response = await client.get(jwks_url, timeout=10.0)
            response.raise_for_status()
            _jwks_cache = response.json()
            _jwks_cache_time = now
            return _jwks_cache
    except httpx.HTTPError as e:
        logger.error(f"Failed to fetch JWKS: {e}")
        if _jwks_cache:
            logger.warning("Using expired JWKS cache due to fetch failure")
            return _jwks_cache
        raise HTTPException(
            status_code=500,
            detail="Failed to fetch authentication keys"
        )


async def verify_token(token: str) -> Dict[str, Any]:
    """
    Verify a Supabase JWT and return its claims.

    Raises:
        HTTPException(401): signature, expiry, audience or issuer invalid
    """
    jwks = await get_jwks()

    try:
        header = jwt.get_unverified_header(token)
    except jwt.JWTError as e:
        raise HTTPException(status_code=401, detail=f"Invalid token: {str(e)}")

    kid = header.get("kid")
    if not kid:
        raise HTTPException(status_code=401, detail="Token missing key ID (kid)")

    key_data = next((k for k in jwks.get("keys", []) if k.get("kid") == kid), None)
    if not key_data:
        raise HTTPException(status_code=401, detail=f"Key with ID '{kid}' not found in JWKS")

    try:
        return jwt.decode(
            token,
            jwk.construct(key_data),
            algorithms=SUPPORTED_ALGORITHMS,
            audience=JWT_AUDIENCE,
            issuer=get_jwt_issuer(),
        )
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Token has expired")
    except jwt.JWTClaimsError as e:
        raise HTTPException(status_code=401, detail=f"Token validation failed: {str(e)}")
    except jwt.JWTError as e:
        raise HTTPException(status_code=401, detail=f"Invalid token: {str(e)}")


def extract_bearer_token(authorization: Optional[str]) -> str:
    if not authorization:
        raise HTTPException(status_code=401, detail="Authorization header missing")

    try:
        scheme, token = authorization.split(" ", 1)
    except ValueError:
        raise HTTPException(
            status_code=401,
            detail="Invalid authorization header format. Expected 'Bearer <token>'"
        )

    if scheme.lower() != "bearer":
        raise HTTPException(
            status_code=401,
            detail="Invalid authorization scheme. Expected 'Bearer'"
        )
    return token


async def get_current_claims(
    authorization: Optional[str] = Header(None)
) -> Dict[str, Any]:
    """FastAPI dependency returning the verified claims of the bearer token"""
    token = extract_bearer_token(authorization)
    claims = await verify_token(token)
    if not claims.get("sub"):
        raise HTTPException(status_code=401, detail="Invalid token: no user ID")
    return claims
