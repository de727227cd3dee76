"""Application error hierarchy.

Each error carries an internal message (for logs) and a user-facing message
(for the response body). The FastAPI handlers in ``learnhub.main`` turn them
into ``{"detail": user_message}`` responses.
"""

import logging
from typing import Any, Optional

logger = logging.getLogger(__name__)

GENERIC_FAILURE_MESSAGE = "An unexpected error occurred. Please try again later."


class AppError(Exception):
    status_code = 400

    def __init__(self, message: str, user_message: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.user_message = user_message or message
        if status_code is not None:
            self.status_code = status_code


class UnauthorizedError(AppError):
    status_code = 401

    def __init__(self, message: str = "Unauthorized access", user_message: str = "Authentication required. Please log in."):
        super().__init__(message, user_message)


class ForbiddenError(AppError):
    status_code = 403

    def __init__(self, message: str = "Forbidden access", user_message: str = "You do not have permission to perform this action."):
        super().__init__(message, user_message)


class NotFoundError(AppError):
    status_code = 404

    def __init__(self, message: str = "Resource not found", user_message: Optional[str] = None):
        super().__init__(message, user_message)


class ValidationError(AppError):
    status_code = 400


class ConflictError(AppError):
    status_code = 409

    def __init__(self, message: str = "Resource conflict", user_message: Optional[str] = None):
        super().__init__(message, user_message)


def log_error(context: str, error: BaseException, **info: Any) -> None:
    """Log an error with the operation it happened in and any ids involved."""
    extra = " ".join(f"{k}={v}" for k, v in info.items())
    logger.error("[%s] %s: %s %s", context, type(error).__name__, error, extra, exc_info=error)
