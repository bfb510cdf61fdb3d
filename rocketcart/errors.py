"""
Cart Errors

Message constants shared by the store and the notification sink, plus the
exception taxonomy raised inside the store. None of these escape
CartStore operations: each one is recovered and mapped to one notification.
"""

# Notification keys (see rocketcart.notifications.MESSAGES)
ERROR_ADD_FAILED = "add_failed"
ERROR_REMOVE_FAILED = "remove_failed"
ERROR_UPDATE_FAILED = "update_failed"
ERROR_OUT_OF_STOCK = "out_of_stock"

# Diagnostic strings
ERROR_PRODUCT_NOT_FOUND = "Product not found"
ERROR_PRODUCT_NOT_IN_CART = "Product not in cart"
ERROR_GATEWAY = "Inventory gateway failure"
ERROR_STORAGE = "Cart storage failure"
ERROR_INVALID_PERSISTED_STATE = "Persisted cart is invalid"


class CartError(Exception):
    """Base class for every cart-level failure."""

    default_message = "Cart error"

    def __init__(self, message: str | None = None, product_id: int | None = None):
        super().__init__(message or self.default_message)
        self.product_id = product_id


class ProductNotFound(CartError):
    """The inventory has no product with this id."""

    default_message = ERROR_PRODUCT_NOT_FOUND


class ProductNotInCart(CartError):
    """The cart holds no line for this id."""

    default_message = ERROR_PRODUCT_NOT_IN_CART


class OutOfStock(CartError):
    """Requested quantity exceeds the stock level observed during the call."""

    default_message = "Requested quantity out of stock"

    def __init__(
        self,
        product_id: int | None = None,
        requested: int = 0,
        available: int = 0,
    ):
        super().__init__(
            f"Requested {requested}, only {available} in stock", product_id=product_id
        )
        self.requested = requested
        self.available = available


class GatewayFailure(CartError):
    """Network error, remote 4xx/5xx or malformed inventory payload."""

    default_message = ERROR_GATEWAY


class StorageFailure(CartError):
    """The persistence slot could not be written or read."""

    default_message = ERROR_STORAGE


class InvalidPersistedState(CartError):
    """The persisted snapshot could not be decoded into a cart."""

    default_message = ERROR_INVALID_PERSISTED_STATE


__all__ = [
    "ERROR_ADD_FAILED",
    "ERROR_REMOVE_FAILED",
    "ERROR_UPDATE_FAILED",
    "ERROR_OUT_OF_STOCK",
    "ERROR_PRODUCT_NOT_FOUND",
    "ERROR_PRODUCT_NOT_IN_CART",
    "ERROR_GATEWAY",
    "ERROR_STORAGE",
    "ERROR_INVALID_PERSISTED_STATE",
    "CartError",
    "ProductNotFound",
    "ProductNotInCart",
    "OutOfStock",
    "GatewayFailure",
    "StorageFailure",
    "InvalidPersistedState",
]
