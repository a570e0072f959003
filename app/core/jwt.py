"""Auth provider session token verification

Provider tokens are RS256 and verified against the provider's JWKS when
``AUTH_JWKS_URL`` is set; otherwise a shared HS256 secret is used (local
development and tests).
"""
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Dict, Any
import logging

import jwt
from jwt import PyJWKClient
from jwt.exceptions import PyJWKClientError

from app.config.settings import AuthSettings

logger = logging.getLogger(__name__)


@lru_cache(maxsize=4)
def get_jwks_client(url: str, lifespan: int = 300) -> PyJWKClient:
    return PyJWKClient(url, cache_keys=True, lifespan=lifespan)


def create_session_token(subject: str, auth: AuthSettings, expires_minutes: int = 60) -> str:
    """Issue a token the way the auth provider does; used by tests and local tooling."""
    now = datetime.now(timezone.utc)
    payload: Dict[str, Any] = {
        "sub": subject,
        "iat": now,
        "exp": now + timedelta(minutes=expires_minutes),
    }
    if auth.jwt_issuer:
        payload["iss"] = auth.jwt_issuer
    return jwt.encode(payload, auth.jwt_secret, algorithm=auth.jwt_algorithm)


def _verification_key(token: str, auth: AuthSettings) -> tuple[Any, list[str]]:
    if auth.jwks_url:
        client = get_jwks_client(auth.jwks_url, auth.jwks_cache_seconds or 300)
        return client.get_signing_key_from_jwt(token).key, [auth.jwks_algorithm]
    return auth.jwt_secret, [auth.jwt_algorithm]


def decode_session_token(token: str, auth: AuthSettings) -> Dict[str, Any] | None:
    """
    Verify a session token and return its claims.

    Returns:
        Claims dict, or None if the token is malformed, expired, signed
        with an unknown key or issued by someone else
    """
    options = {"require": ["sub", "exp"]}
    try:
        key, algorithms = _verification_key(token, auth)
        return jwt.decode(
            token,
            key,
            algorithms=algorithms,
            issuer=auth.jwt_issuer,
            options=options,
        )
    except PyJWKClientError as e:
        logger.warning(f"Could not resolve signing key from JWKS: {e}")
        return None
    except jwt.PyJWTError:
        return None
