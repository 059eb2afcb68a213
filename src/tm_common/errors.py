"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Request validation
  2xxx: Not found
  3xxx: Inventory conflict
  4xxx: State / permission
  9xxx: System

ConflictError and InvalidStateError are expected outcomes of racing callers
("ticket no longer available", "order already resolved"), not defects.
"""


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        super().__init__(message)


# --- 1xxx: Request ---

class InvalidRequestError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(1001, f"Invalid request: {detail}", 400)


# --- 2xxx: Not found ---

class NotFoundError(AppError):
    def __init__(self, code: int, message: str) -> None:
        super().__init__(code, message, 404)


class ListingNotFoundError(NotFoundError):
    def __init__(self, listing_id: str) -> None:
        super().__init__(2001, f"Listing not found: {listing_id}")


class OrderNotFoundError(NotFoundError):
    def __init__(self, order_id: str) -> None:
        super().__init__(2002, f"Order not found: {order_id}")


class ItemNotFoundError(NotFoundError):
    def __init__(self, item_ids: list[str]) -> None:
        super().__init__(2003, f"Inventory items not found: {', '.join(item_ids)}")


# --- 3xxx: Inventory ---

class ConflictError(AppError):
    """Inventory unavailable: another reservation won or the item is not on sale."""

    def __init__(self, item_ids: list[str]) -> None:
        self.item_ids = item_ids
        super().__init__(
            3001, f"Tickets no longer available: {', '.join(item_ids)}", 409
        )


class InventoryConflictError(ConflictError):
    """Raised by checkout when the reservation step lost the race."""


class SelfPurchaseError(AppError):
    def __init__(self) -> None:
        super().__init__(3002, "Cannot purchase tickets from your own listing", 422)


# --- 4xxx: State / permission ---

class InvalidStateError(AppError):
    def __init__(self, code: int, message: str) -> None:
        super().__init__(code, message, 409)


class OrderAlreadyResolvedError(InvalidStateError):
    def __init__(self, order_id: str, status: str) -> None:
        self.status = status
        super().__init__(4001, f"Order {order_id} already resolved (status={status})")


class OrderItemsNotReservedError(InvalidStateError):
    def __init__(self, order_id: str) -> None:
        super().__init__(4002, f"Order {order_id} holds items that are no longer reserved")


class ListingStateError(InvalidStateError):
    def __init__(self, listing_id: str, status: str, action: str) -> None:
        self.status = status
        super().__init__(4003, f"Cannot {action} listing {listing_id} in status {status}")


class ListingHasPendingOrdersError(InvalidStateError):
    def __init__(self, listing_id: str, held: int) -> None:
        self.held = held
        super().__init__(
            4004, f"Listing {listing_id} has {held} tickets held by unpaid orders"
        )


class InvalidCredentialsError(AppError):
    def __init__(self) -> None:
        super().__init__(4010, "Invalid or expired token", 401)


class ForbiddenError(AppError):
    def __init__(self) -> None:
        super().__init__(4030, "Forbidden", 403)


# --- 9xxx: System ---

class StorageError(AppError):
    """Transaction or connection failure. Always safe for the caller to retry."""

    def __init__(self, detail: str = "Storage unavailable, retry later") -> None:
        super().__init__(9001, detail, 503)


class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500)
