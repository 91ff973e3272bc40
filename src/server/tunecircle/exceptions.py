from fastapi import status

INTERNAL_ERROR_MESSAGE = "It's not you, it's us"


class AppError(Exception):
    """Base class for errors rendered as `{"error": {"message": ...}}`."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = INTERNAL_ERROR_MESSAGE

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AppError):
    """A request field failed its named check."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Validation error"


class AlreadyPresentError(ValidationError):
    """The element is already a member of the list."""

    default_message = "Element already present"


class InvalidTypeError(ValidationError):
    """The requested catalog type is not supported."""

    default_message = "Invalid type"


class UnauthorizedError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Unauthorized"


class MissingCredentialError(UnauthorizedError):
    default_message = "No Token inserted"


class ExpiredCredentialError(UnauthorizedError):
    default_message = "Token has expired"


class InvalidCredentialError(UnauthorizedError):
    default_message = "Invalid Token"


class ForbiddenError(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "You do not have permission to update this playlist"


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class UserNotFoundError(NotFoundError):
    default_message = "User not found"


class NoItemsFoundError(NotFoundError):
    default_message = "No items found"


class ConflictError(AppError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Username or email already exists"


class DependencyFailureError(AppError):
    """The external catalog answered with an error or could not be reached."""

    status_code = status.HTTP_424_FAILED_DEPENDENCY

    def __init__(self, upstream_message: str | None = None):
        super().__init__(
            f"Failed dependency: External service failure. {upstream_message or ''}".strip()
        )


class InternalError(AppError):
    pass
