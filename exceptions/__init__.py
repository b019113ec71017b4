"""
Custom exceptions for the marketplace core.

Exception Hierarchy:
--------------------
MarketplaceException (base)
├── NotFoundException
│   ├── ProductNotFoundException
│   ├── CartLineNotFoundException
│   └── UserNotFoundException
├── ForbiddenException
│   ├── CartLineForbiddenException
│   └── ProductOwnershipException
├── CartException
│   ├── CartRejectedException (reason: RejectionReason)
│   └── CartConflictException
├── ProductException
│   ├── InvalidProductDataException
│   └── DuplicateProductException
├── UserException
│   └── UserAlreadyExistsException
└── StorageUnavailableException (retryable)

Usage:
------
Services raise specific exceptions:
    raise CartLineNotFoundException(line_id=123)

Callers translate them for their transport:
    try:
        await CartService.remove_line(line_id, user_id, session)
    except NotFoundException as e:
        return 404, str(e)
"""

from .base import MarketplaceException, NotFoundException, ForbiddenException
from .cart import (
    CartException,
    CartLineNotFoundException,
    CartLineForbiddenException,
    CartRejectedException,
    CartConflictException
)
from .product import (
    ProductException,
    ProductNotFoundException,
    ProductOwnershipException,
    InvalidProductDataException,
    DuplicateProductException
)
from .storage import StorageUnavailableException
from .user import UserException, UserNotFoundException, UserAlreadyExistsException

__all__ = [
    # Base
    'MarketplaceException',
    'NotFoundException',
    'ForbiddenException',

    # Cart
    'CartException',
    'CartLineNotFoundException',
    'CartLineForbiddenException',
    'CartRejectedException',
    'CartConflictException',

    # Product
    'ProductException',
    'ProductNotFoundException',
    'ProductOwnershipException',
    'InvalidProductDataException',
    'DuplicateProductException',

    # Storage
    'StorageUnavailableException',

    # User
    'UserException',
    'UserNotFoundException',
    'UserAlreadyExistsException',
]
