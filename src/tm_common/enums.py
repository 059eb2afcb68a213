"""Global enums — must match DB CHECK constraints exactly."""

from enum import Enum


class ListingStatus(str, Enum):
    PENDING = "Pending"
    ACTIVE = "Active"
    SOLD = "Sold"
    EXPIRED = "Expired"
    CANCELLED = "Cancelled"
    REJECTED = "Rejected"


class ItemStatus(str, Enum):
    PENDING = "Pending"
    ACTIVE = "Active"
    SOLD = "Sold"
    EXPIRED = "Expired"
    CANCELLED = "Cancelled"


class OrderStatus(str, Enum):
    PENDING = "Pending"
    PAID = "Paid"
    CANCELLED = "Cancelled"


class PaymentStatus(str, Enum):
    PENDING = "Pending"
    COMPLETED = "Completed"
    FAILED = "Failed"


class CancelReason(str, Enum):
    BUYER_CANCELLED = "BUYER_CANCELLED"
    PAYMENT_TIMEOUT = "PAYMENT_TIMEOUT"


class RiskFlagType(str, Enum):
    HIGH_PRICE = "HighPrice"
    LOW_PRICE = "LowPrice"
    NEW_SELLER = "NewSeller"
    HIGH_QUANTITY = "HighQuantity"
    BLACKLISTED_SELLER = "BlacklistedSeller"


class ModerationAction(str, Enum):
    APPROVE = "approve"
    REJECT = "reject"
