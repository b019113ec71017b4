"""
User-related exceptions.
"""

from .base import MarketplaceException, NotFoundException


class UserException(MarketplaceException):
    """Base exception for user-related errors."""
    pass


class UserNotFoundException(UserException, NotFoundException):
    """Raised when user is not found in database."""

    def __init__(self, user_id: int):
        super().__init__(
            f"User {user_id} not found",
            details={'user_id': user_id}
        )
        self.user_id = user_id


class UserAlreadyExistsException(UserException):
    """Raised when username or e-mail is already registered."""

    def __init__(self, username: str):
        super().__init__(
            f"User '{username}' or its e-mail is already registered",
            details={'username': username}
        )
        self.username = username
