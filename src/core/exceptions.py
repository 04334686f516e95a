"""Custom exceptions and error codes."""

from enum import StrEnum
from typing import Any


class ErrorCode(StrEnum):
    """Standardized error codes for the API."""

    # Authentication errors (401)
    UNAUTHORIZED = "UNAUTHORIZED"
    INVALID_TOKEN = "INVALID_TOKEN"
    TOKEN_EXPIRED = "TOKEN_EXPIRED"

    # Authorization errors (403)
    FORBIDDEN = "FORBIDDEN"
    USER_BANNED = "USER_BANNED"
    ADMIN_REQUIRED = "ADMIN_REQUIRED"
    PRO_REQUIRED = "PRO_REQUIRED"

    # Not found errors (404)
    USER_NOT_FOUND = "USER_NOT_FOUND"
    PROFILE_NOT_FOUND = "PROFILE_NOT_FOUND"
    DOMAIN_NOT_FOUND = "DOMAIN_NOT_FOUND"
    REPORT_NOT_FOUND = "REPORT_NOT_FOUND"

    # Validation errors (400)
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_SLUG = "INVALID_SLUG"
    INVALID_DOMAIN = "INVALID_DOMAIN"
    PROFILE_INCOMPLETE = "PROFILE_INCOMPLETE"
    INVALID_STATUS_TRANSITION = "INVALID_STATUS_TRANSITION"

    # Conflict errors (409)
    PROFILE_EXISTS = "PROFILE_EXISTS"
    SLUG_TAKEN = "SLUG_TAKEN"
    DOMAIN_TAKEN = "DOMAIN_TAKEN"

    # Rate limiting (429)
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"
    SLUG_CHANGE_COOLDOWN = "SLUG_CHANGE_COOLDOWN"

    # Server errors (500/503)
    INTERNAL_ERROR = "INTERNAL_ERROR"
    DATABASE_ERROR = "DATABASE_ERROR"
    EXTERNAL_SERVICE_ERROR = "EXTERNAL_SERVICE_ERROR"


class AppException(Exception):
    """Base application exception."""

    def __init__(
        self,
        error_code: ErrorCode,
        message: str,
        status_code: int = 400,
        details: Any | None = None,
    ) -> None:
        self.error_code = error_code
        self.message = message
        self.status_code = status_code
        self.details = details
        super().__init__(self.message)


# --- Error kinds ---


class ValidationError(AppException):
    """User-correctable input error, surfaced verbatim."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.VALIDATION_ERROR,
        details: Any | None = None,
    ) -> None:
        super().__init__(
            error_code=error_code,
            message=message,
            status_code=400,
            details=details,
        )


class ConflictError(AppException):
    """Resource already in use."""

    def __init__(self, error_code: ErrorCode, message: str, details: Any | None = None) -> None:
        super().__init__(
            error_code=error_code,
            message=message,
            status_code=409,
            details=details,
        )


class RateLimitedError(AppException):
    """Operation not allowed yet."""

    def __init__(self, error_code: ErrorCode, message: str, details: Any | None = None) -> None:
        super().__init__(
            error_code=error_code,
            message=message,
            status_code=429,
            details=details,
        )


class NotFoundError(AppException):
    """Resource missing or not visible to the caller."""

    def __init__(self, error_code: ErrorCode, message: str, details: Any | None = None) -> None:
        super().__init__(
            error_code=error_code,
            message=message,
            status_code=404,
            details=details,
        )


class ExternalServiceError(AppException):
    """An external collaborator (DNS, SSL, billing, identity) is unavailable."""

    def __init__(self, service: str, message: str = "") -> None:
        super().__init__(
            error_code=ErrorCode.EXTERNAL_SERVICE_ERROR,
            message=message or f"{service} is temporarily unavailable, please retry",
            status_code=503,
            details={"service": service},
        )
        self.service = service


# --- Authentication / authorization ---


class AuthenticationError(AppException):
    """Authentication failed."""

    def __init__(
        self,
        message: str = "Authentication required",
        error_code: ErrorCode = ErrorCode.UNAUTHORIZED,
    ) -> None:
        super().__init__(
            error_code=error_code,
            message=message,
            status_code=401,
        )


class AuthorizationError(AppException):
    """Authorization failed."""

    def __init__(
        self,
        message: str = "Access denied",
        error_code: ErrorCode = ErrorCode.FORBIDDEN,
    ) -> None:
        super().__init__(
            error_code=error_code,
            message=message,
            status_code=403,
        )


class UserBannedError(AuthorizationError):
    """The account has been banned by an administrator."""

    def __init__(self) -> None:
        super().__init__(
            message="This account has been suspended",
            error_code=ErrorCode.USER_BANNED,
        )


class AdminRequiredError(AuthorizationError):
    """Admin access required."""

    def __init__(self) -> None:
        super().__init__(
            message="Admin access required",
            error_code=ErrorCode.ADMIN_REQUIRED,
        )


class ProRequiredError(AuthorizationError):
    """Feature restricted to Pro subscribers."""

    def __init__(self, feature: str) -> None:
        super().__init__(
            message=f"{feature} are a Pro feature",
            error_code=ErrorCode.PRO_REQUIRED,
        )


# --- Not found ---


class UserNotFoundError(NotFoundError):
    """User not found."""

    def __init__(self, user_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.USER_NOT_FOUND,
            message=f"User not found: {user_id}",
            details={"user_id": user_id},
        )


class ProfileNotFoundError(NotFoundError):
    """Profile not found.

    The message never names the lookup key so that unpublished profiles are
    indistinguishable from missing ones.
    """

    def __init__(self) -> None:
        super().__init__(
            error_code=ErrorCode.PROFILE_NOT_FOUND,
            message="Profile not found",
        )


class DomainVerificationNotFoundError(NotFoundError):
    """No custom domain has been submitted for the profile."""

    def __init__(self) -> None:
        super().__init__(
            error_code=ErrorCode.DOMAIN_NOT_FOUND,
            message="No custom domain configured",
        )


class ModerationReportNotFoundError(NotFoundError):
    """Moderation report not found."""

    def __init__(self, report_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.REPORT_NOT_FOUND,
            message=f"Report not found: {report_id}",
            details={"report_id": report_id},
        )


# --- Validation ---


class InvalidSlugError(ValidationError):
    """Slug does not satisfy the length/charset rules."""

    def __init__(self, slug: str, reason: str) -> None:
        super().__init__(
            message=f"Invalid username: {reason}",
            error_code=ErrorCode.INVALID_SLUG,
            details={"slug": slug},
        )


class InvalidDomainError(ValidationError):
    """Domain is not a valid host name."""

    def __init__(self, domain: str, reason: str = "not a valid host name") -> None:
        super().__init__(
            message=f"Invalid domain: {reason}",
            error_code=ErrorCode.INVALID_DOMAIN,
            details={"domain": domain},
        )


class ProfileIncompleteError(ValidationError):
    """Profile lacks the fields required for publication."""

    def __init__(self, missing: list[str]) -> None:
        super().__init__(
            message="Profile is missing required fields: " + ", ".join(missing),
            error_code=ErrorCode.PROFILE_INCOMPLETE,
            details={"missing": missing},
        )


class InvalidStatusTransitionError(ValidationError):
    """Requested status change is not a legal edge."""

    def __init__(self, entity: str, current: str, requested: str) -> None:
        super().__init__(
            message=f"Cannot change {entity} status from {current} to {requested}",
            error_code=ErrorCode.INVALID_STATUS_TRANSITION,
            details={"current": current, "requested": requested},
        )


# --- Conflict ---


class ProfileAlreadyExistsError(ConflictError):
    """The user already owns a profile."""

    def __init__(self, user_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.PROFILE_EXISTS,
            message="Profile already exists",
            details={"user_id": user_id},
        )


class SlugTakenError(ConflictError):
    """Slug already used by another profile."""

    def __init__(self, slug: str) -> None:
        super().__init__(
            error_code=ErrorCode.SLUG_TAKEN,
            message=f"Username already taken: {slug}. Please pick another one",
            details={"slug": slug},
        )


class DomainTakenError(ConflictError):
    """Custom domain already attached to another profile."""

    def __init__(self, domain: str) -> None:
        super().__init__(
            error_code=ErrorCode.DOMAIN_TAKEN,
            message=f"Domain already in use: {domain}",
            details={"domain": domain},
        )


# --- Rate limited ---


class SlugChangeCooldownError(RateLimitedError):
    """Slug was changed too recently."""

    def __init__(self, retry_after_seconds: int, cooldown_days: int) -> None:
        super().__init__(
            error_code=ErrorCode.SLUG_CHANGE_COOLDOWN,
            message=f"You can only change your username once every {cooldown_days} days",
            details={"retry_after_seconds": retry_after_seconds},
        )
