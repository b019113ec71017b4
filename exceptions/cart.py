"""
Cart-related exceptions.
"""

from enums.rejection_reason import RejectionReason
from .base import MarketplaceException, NotFoundException, ForbiddenException


class CartException(MarketplaceException):
    """Base exception for cart-related errors."""
    pass


class CartLineNotFoundException(CartException, NotFoundException):
    """Raised when a cart line does not exist (or was already removed)."""

    def __init__(self, line_id: int):
        super().__init__(
            f"Cart line {line_id} not found",
            details={'line_id': line_id}
        )
        self.line_id = line_id


class CartLineForbiddenException(CartException, ForbiddenException):
    """Raised when a user touches a cart line that belongs to someone else."""

    def __init__(self, line_id: int, user_id: int):
        super().__init__(
            f"User {user_id} does not own cart line {line_id}",
            details={'line_id': line_id, 'user_id': user_id}
        )
        self.line_id = line_id
        self.user_id = user_id


class CartRejectedException(CartException):
    """Raised when a cart mutation breaks a business rule. Carries a reason code."""

    def __init__(self, reason: RejectionReason, user_id: int, product_id: int | None = None,
                 quantity: int | None = None):
        messages = {
            RejectionReason.INVALID_QUANTITY: f"Quantity must be at least 1 (got: {quantity})",
            RejectionReason.PRODUCT_UNAVAILABLE: f"Product {product_id} is not available",
            RejectionReason.SELF_PURCHASE: f"User {user_id} cannot add own product {product_id} to cart",
            RejectionReason.USER_INACTIVE: f"User {user_id} is inactive",
        }
        details = {'reason': reason.value, 'user_id': user_id}
        if product_id is not None:
            details['product_id'] = product_id
        if quantity is not None:
            details['quantity'] = quantity
        super().__init__(messages[reason], details=details)
        self.reason = reason
        self.user_id = user_id
        self.product_id = product_id


class CartConflictException(CartException):
    """
    Raised when concurrent inserts keep colliding on the (user, product)
    uniqueness constraint after every retry was used up.
    """

    def __init__(self, user_id: int, product_id: int, attempts: int):
        super().__init__(
            f"Cart line for user {user_id} and product {product_id} kept conflicting after {attempts} attempts",
            details={'user_id': user_id, 'product_id': product_id, 'attempts': attempts}
        )
        self.user_id = user_id
        self.product_id = product_id
        self.attempts = attempts
