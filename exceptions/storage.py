"""
Storage-layer exceptions.
"""

from .base import MarketplaceException


class StorageUnavailableException(MarketplaceException):
    """
    Raised when the transaction layer cannot be reached or gave up.

    Transient by nature: the operation left no partial writes and the caller
    may safely retry it.
    """

    retryable = True

    def __init__(self, operation: str, reason: str):
        super().__init__(
            f"Storage unavailable during {operation}: {reason}",
            details={'operation': operation, 'reason': reason}
        )
        self.operation = operation
        self.reason = reason
