"""Bearer token validation for identity-provider sessions.

Production tokens are ES256-signed by the identity provider and checked
against its JWKS document. HS256 tokens signed with ``jwt_secret_key`` are
accepted as well; the test suite mints those with ``create_token``.

Claims read from the token::

    {
        "sub": "user-uuid",
        "email": "user@example.com",
        "user_metadata": {
            "full_name": "Ada Lovelace",
            "first_name": "Ada",
            "last_name": "Lovelace",
            "avatar_url": "https://..."
        },
        "exp": 1234567890
    }
"""

import time
from datetime import datetime, timedelta
from typing import Any, Optional
from uuid import UUID

import httpx
import structlog
from jose import JWTError, jwt
from jose.backends import ECKey

from core.config import settings
from infrastructure.auth.provider import TokenUser

logger = structlog.get_logger()

JWKS_TIMEOUT_SECONDS = 10.0
JWKS_MAX_AGE_SECONDS = 3600

# kid -> JWK, shared by every request of the process
_jwks_cache: dict[str, Any] | None = None
_jwks_fetched_at = 0.0


def _split_name(
    user_metadata: dict[str, Any], display_name: Optional[str]
) -> tuple[Optional[str], Optional[str]]:
    """First and last name from explicit metadata, else from the display name."""
    first = user_metadata.get("first_name") or user_metadata.get("given_name")
    last = user_metadata.get("last_name") or user_metadata.get("family_name")
    if first or last or not display_name:
        return first, last
    parts = display_name.split(None, 1)
    return parts[0], parts[1] if len(parts) > 1 else None


def _token_user(claims: dict[str, Any]) -> Optional[TokenUser]:
    email = claims.get("email")
    try:
        user_id = UUID(str(claims.get("sub")))
    except ValueError:
        return None
    if not email:
        return None

    metadata = claims.get("user_metadata") or {}
    display_name = (
        metadata.get("display_name")
        or metadata.get("name")
        or metadata.get("full_name")
        or claims.get("name")
    )
    first_name, last_name = _split_name(metadata, display_name)

    return TokenUser(
        id=user_id,
        email=email,
        display_name=display_name,
        first_name=first_name,
        last_name=last_name,
        profile_image_url=metadata.get("avatar_url") or metadata.get("picture"),
    )


async def _get_jwks_keys() -> dict[str, Any]:
    """Signing keys of the identity provider by ``kid``; empty when unavailable."""
    global _jwks_cache, _jwks_fetched_at
    if _jwks_cache is not None and time.monotonic() - _jwks_fetched_at < JWKS_MAX_AGE_SECONDS:
        return _jwks_cache

    jwks_url = settings.supabase_jwks_url
    if not jwks_url:
        return {}

    try:
        async with httpx.AsyncClient() as client:
            response = await client.get(jwks_url, timeout=JWKS_TIMEOUT_SECONDS)
            response.raise_for_status()
            document = response.json()
    except Exception:
        logger.exception("jwks_fetch_failed", url=jwks_url)
        return {}

    _jwks_cache = {key["kid"]: key for key in document.get("keys", []) if key.get("kid")}
    _jwks_fetched_at = time.monotonic()
    logger.info("jwks_fetched", keys=len(_jwks_cache))
    return _jwks_cache


class JWTAuthProvider:
    """Validates identity-provider JWTs and maps their claims to a TokenUser."""

    def __init__(
        self,
        secret_key: str = settings.jwt_secret_key,
        algorithm: str = settings.jwt_algorithm,
        expire_minutes: int = settings.jwt_expire_minutes,
    ) -> None:
        self._secret_key = secret_key
        self._algorithm = algorithm
        self._expire_minutes = expire_minutes

    async def validate_token(self, token: str) -> Optional[TokenUser]:
        """
        Validate a bearer token.

        Returns:
            TokenUser if the signature and expiry check out and the token
            names a subject and an email, None otherwise
        """
        try:
            header = jwt.get_unverified_header(token)
            if header.get("alg", self._algorithm) == "ES256":
                claims = await self._validate_es256(token, header)
            else:
                claims = jwt.decode(
                    token,
                    self._secret_key,
                    algorithms=[self._algorithm],
                    options={"verify_aud": False},
                )
        except JWTError:
            return None

        if claims is None:
            return None
        return _token_user(claims)

    async def _validate_es256(self, token: str, header: dict) -> Optional[dict]:
        kid = header.get("kid")
        if not kid:
            return None

        key_data = (await _get_jwks_keys()).get(kid)
        if not key_data:
            # Unknown kid: the provider may have rotated its keys
            global _jwks_cache
            _jwks_cache = None
            key_data = (await _get_jwks_keys()).get(kid)
            if not key_data:
                logger.warning("jwks_key_not_found", kid=kid)
                return None

        return jwt.decode(
            token,
            ECKey(key_data, algorithm="ES256"),
            algorithms=["ES256"],
            options={"verify_aud": False},
        )

    def create_token(self, user: TokenUser) -> str:
        """Mint an HS256 token carrying the user's identity claims."""
        payload: dict = {
            "sub": str(user.id),
            "email": user.email,
            "aud": "authenticated",
            "exp": datetime.utcnow() + timedelta(minutes=self._expire_minutes),
            "user_metadata": {
                "display_name": user.display_name,
                "first_name": user.first_name,
                "last_name": user.last_name,
                "avatar_url": user.profile_image_url,
            },
        }
        return jwt.encode(payload, self._secret_key, algorithm=self._algorithm)
