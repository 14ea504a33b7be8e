"""Domain exceptions raised by the service layer.

Each exception carries the HTTP status it maps to; the handlers registered in
``grocery.main`` turn them into ``{"detail": message}`` responses.
"""


class GroceryError(Exception):
    """Base exception for all application errors."""

    status_code: int = 500

    def __init__(self, message: str = "An internal error occurred", status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class NotFoundError(GroceryError):
    """A referenced row does not exist (or is soft-deleted)."""

    status_code = 404

    def __init__(self, message: str = "Product not found"):
        super().__init__(message)


class BusinessRuleError(GroceryError):
    """The request is well-formed but violates a business constraint."""

    status_code = 400


class NegativeStockError(BusinessRuleError):
    def __init__(self, product_id, current_stock: int, quantity_change: int):
        super().__init__("Stock cannot be negative")
        self.product_id = product_id
        self.current_stock = current_stock
        self.quantity_change = quantity_change


class InsufficientStockError(BusinessRuleError):
    """One or more sale lines ask for more units than are on hand."""

    def __init__(self, shortfalls: list[str]):
        super().__init__("; ".join(shortfalls))
        self.shortfalls = shortfalls


class StockConflictError(GroceryError):
    """Stock changed between the availability check and the decrement."""

    status_code = 409


class InvalidTransitionError(GroceryError):
    status_code = 409

    def __init__(self, current: str, requested: str):
        super().__init__(f"Cannot change status from '{current}' to '{requested}'")
        self.current = current
        self.requested = requested


class AuditLogError(GroceryError):
    """Writing the inventory audit row failed under strict audit durability."""

    status_code = 500
