class KioskError(Exception):
    """Business-rule failure raised by the services and rendered by the API."""
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFound(KioskError):
    status_code = 404


class ProductNotFound(NotFound):
    def __init__(self, product_id: int):
        super().__init__(f"Product {product_id} not found")
        self.product_id = product_id


class OutOfStock(KioskError):
    pass


class InsufficientAvailable(KioskError):
    def __init__(self, message: str, available: int = 0):
        super().__init__(message)
        self.available = available


class InsufficientStock(KioskError):
    pass


class LimitExceeded(KioskError):
    pass


class InvalidQuantity(KioskError):
    pass


class InvalidSlot(KioskError):
    pass


class InvalidOrder(KioskError):
    pass


class InvalidTransition(KioskError):
    pass


class PaymentVerificationFailed(KioskError):
    status_code = 402


class PaymentGatewayError(KioskError):
    status_code = 502


class InvalidCredentials(KioskError):
    status_code = 401

    def __init__(self, message: str = "Invalid credentials"):
        super().__init__(message)


class Unauthorized(KioskError):
    status_code = 401

    def __init__(self, message: str = "Invalid or expired token"):
        super().__init__(message)
