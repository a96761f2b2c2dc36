"""
Domain Errors

Every error raised by the order, menu and history services derives from
OrderDeskError. The HTTP layer turns them into ErrorResponse bodies using the
status_code and code carried by each class.
"""

from typing import Optional


class OrderDeskError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code: int = 500
    code: str = "INTERNAL_ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidOrderShape(OrderDeskError):
    """The submitted items are not a list of well-formed order lines."""
    status_code = 400
    code = "INVALID_ORDER"


class OrderNotFound(OrderDeskError):
    status_code = 404
    code = "ORDER_NOT_FOUND"

    def __init__(self, order_id: str):
        super().__init__(f"Order {order_id} not found")
        self.order_id = order_id


class MenuItemNotFound(OrderDeskError):
    status_code = 404
    code = "MENU_ITEM_NOT_FOUND"

    def __init__(self, item_id: int):
        super().__init__(f"Menu item {item_id} not found")
        self.item_id = item_id


class MissingRequiredField(OrderDeskError):
    """A new menu item lacks one of its required fields."""
    status_code = 400
    code = "MISSING_REQUIRED_FIELD"

    def __init__(self, fields: list[str]):
        super().__init__(f"Missing or invalid required fields: {', '.join(fields)}")
        self.fields = fields


class InvalidMenuUpdate(OrderDeskError):
    status_code = 400
    code = "INVALID_MENU_UPDATE"


class ReportNotFound(OrderDeskError):
    status_code = 404
    code = "REPORT_NOT_FOUND"


class Unauthorized(OrderDeskError):
    status_code = 401
    code = "UNAUTHORIZED"

    def __init__(self, message: str = "Authentication required", realm: Optional[str] = None):
        super().__init__(message)
        self.realm = realm or "orderdesk"


class PersistenceWriteFailure(OrderDeskError):
    """A JSON or report file could not be written."""
    status_code = 500
    code = "PERSISTENCE_FAILURE"
