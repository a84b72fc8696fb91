class ShopError(Exception):
    """
    Base class for every failure an operation reports back to its caller.

    The backend facade turns these into `ApiResponse.fail(str(err))`, so the
    string form is what a caller sees.
    """

    message = "Request failed"

    def __init__(self, message=None):
        super().__init__(message or self.message)


class InvalidCredentials(ShopError):
    message = "Invalid credentials"


class AuthenticationRequired(ShopError):
    message = "Authentication required"


class SessionExpired(ShopError):
    message = "Session expired"


class AdminRequired(ShopError):
    message = "Admin access required"


class ProductNotFound(ShopError):
    message = "Product not found"


class OrderNotFound(ShopError):
    message = "Order not found"


class UserNotFound(ShopError):
    message = "User not found"


class ItemNotFound(ShopError):
    message = "Item not found in cart"


class InsufficientStock(ShopError):
    message = "Insufficient stock"


class CartEmpty(ShopError):
    message = "Cart is empty"


class AccessDenied(ShopError):
    message = "Access denied"


class ValidationFailed(ShopError):
    message = "Invalid input"
