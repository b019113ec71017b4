from enum import Enum


class RejectionReason(str, Enum):
    """
    Business-rule violations reported by CartRejectedException.

    Each value is a stable reason code callers can map to user-facing text.
    """
    INVALID_QUANTITY = "invalid_quantity"
    PRODUCT_UNAVAILABLE = "product_unavailable"
    SELF_PURCHASE = "self_purchase"
    USER_INACTIVE = "user_inactive"
