from enum import Enum


class ProductStatus(str, Enum):
    """
    Listing lifecycle.

    ACTIVE: Visible in the catalog and addable to carts
    SOLD: Finalized by a purchase, row kept for history
    INACTIVE: Soft-deleted (delisted) by the seller, row kept for history

    Allowed transitions: ACTIVE -> SOLD, ACTIVE -> INACTIVE.
    """
    ACTIVE = "active"
    SOLD = "sold"
    INACTIVE = "inactive"
