"""
Catalog-related exceptions.
"""

from .base import MarketplaceException, NotFoundException, ForbiddenException


class ProductException(MarketplaceException):
    """Base exception for catalog errors."""
    pass


class ProductNotFoundException(ProductException, NotFoundException):
    """Raised when a product is not found in the database."""

    def __init__(self, product_id: int):
        super().__init__(
            f"Product {product_id} not found",
            details={'product_id': product_id}
        )
        self.product_id = product_id


class ProductOwnershipException(ProductException, ForbiddenException):
    """Raised when someone other than the seller changes a listing."""

    def __init__(self, product_id: int, user_id: int):
        super().__init__(
            f"User {user_id} is not the seller of product {product_id}",
            details={'product_id': product_id, 'user_id': user_id}
        )
        self.product_id = product_id
        self.user_id = user_id


class InvalidProductDataException(ProductException):
    """Raised when listing data or a listing query is invalid."""

    def __init__(self, reason: str, product_id: int | None = None):
        message = f"Invalid data for product {product_id}: {reason}" if product_id else f"Invalid product data: {reason}"
        super().__init__(message, details={'product_id': product_id, 'reason': reason})
        self.product_id = product_id
        self.reason = reason


class DuplicateProductException(ProductException):
    """Raised when a seller lists the same title at the same price twice."""

    def __init__(self, seller_id: int, title: str):
        super().__init__(
            f"Seller {seller_id} already lists '{title}' at this price",
            details={'seller_id': seller_id, 'title': title}
        )
        self.seller_id = seller_id
        self.title = title
