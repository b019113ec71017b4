"""
Base exception classes for the marketplace core.
"""


class MarketplaceException(Exception):
    """
    Base exception for all marketplace errors.

    All custom exceptions inherit from this class so callers can catch every
    domain failure with a single handler.

    Attributes:
        message: Human-readable error message
        details: Optional dict with additional context (entity IDs, reasons, etc.)
    """

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Return the error message."""
        return self.message

    def __repr__(self) -> str:
        """Return detailed representation with context."""
        if self.details:
            details_str = ', '.join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.__class__.__name__}('{self.message}', {details_str})"
        return f"{self.__class__.__name__}('{self.message}')"


class NotFoundException(MarketplaceException):
    """A referenced product, cart line or user does not exist."""
    pass


class ForbiddenException(MarketplaceException):
    """The acting user does not own the record they tried to change."""
    pass
