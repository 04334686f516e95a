"""Authentication dependencies for FastAPI."""

from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from api.dependencies.services import get_user_service
from core.exceptions import AdminRequiredError, AuthenticationError, ErrorCode
from domain.entities.user import User
from domain.services.user_service import UserService
from infrastructure.auth.jwt_provider import JWTAuthProvider
from infrastructure.auth.provider import IAuthProvider, TokenUser

# Security scheme for OpenAPI docs
security = HTTPBearer(auto_error=False)

# Singleton auth provider
_auth_provider: JWTAuthProvider | None = None


def get_auth_provider() -> IAuthProvider:
    """Get or create the auth provider singleton."""
    global _auth_provider
    if _auth_provider is None:
        _auth_provider = JWTAuthProvider()
    return _auth_provider


async def get_current_user(
    credentials: Annotated[
        HTTPAuthorizationCredentials | None,
        Depends(security),
    ],
    auth_provider: IAuthProvider = Depends(get_auth_provider),
) -> TokenUser:
    """
    Dependency to get the current authenticated user.

    Raises:
        AuthenticationError: If no token provided or token is invalid
    """
    if not credentials:
        raise AuthenticationError(
            message="Authorization header required",
            error_code=ErrorCode.UNAUTHORIZED,
        )

    token = credentials.credentials
    user = await auth_provider.validate_token(token)

    if not user:
        raise AuthenticationError(
            message="Invalid or expired token",
            error_code=ErrorCode.INVALID_TOKEN,
        )

    return user


async def get_optional_user(
    credentials: Annotated[
        HTTPAuthorizationCredentials | None,
        Depends(security),
    ],
    auth_provider: IAuthProvider = Depends(get_auth_provider),
) -> TokenUser | None:
    """
    Dependency to get the current user if authenticated.

    Returns:
        TokenUser if authenticated, None otherwise (no exception raised)
    """
    if not credentials:
        return None

    return await auth_provider.validate_token(credentials.credentials)


# Type alias for convenience in route handlers
CurrentUser = Annotated[TokenUser, Depends(get_current_user)]
OptionalUser = Annotated[TokenUser | None, Depends(get_optional_user)]


async def get_initialized_user(
    token_user: CurrentUser,
    user_service: UserService = Depends(get_user_service),
) -> User:
    """
    Dependency that mirrors the token's identity into the users table.

    Raises:
        UserBannedError: If the account is banned
    """
    return await user_service.sync_from_identity(
        user_id=token_user.id,
        email=token_user.email,
        first_name=token_user.first_name,
        last_name=token_user.last_name,
        profile_image_url=token_user.profile_image_url,
    )


InitializedUser = Annotated[User, Depends(get_initialized_user)]


async def get_admin_user(user: InitializedUser) -> User:
    """
    Dependency that only lets admins through.

    Raises:
        AdminRequiredError: If the user is not an admin
    """
    if not user.is_admin:
        raise AdminRequiredError()
    return user


AdminUser = Annotated[User, Depends(get_admin_user)]
