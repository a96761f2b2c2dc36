"""
Order Validator

Structural check of the ``items`` of a submitted order.
"""

from collections.abc import Mapping
from numbers import Real
from typing import Any, Optional

from orderdesk.core.exceptions import InvalidOrderShape
from orderdesk.schemas import OrderItem

PRICE_FIELDS = ("price_local", "price_foreign")


def _is_number(value: Any) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool)


def _item_problem(item: Any) -> Optional[str]:
    if not isinstance(item, Mapping):
        return "must be an object"

    name = item.get("name")
    if not isinstance(name, str) or not name.strip():
        return "needs a name"

    for field in PRICE_FIELDS:
        value = item.get(field)
        if not _is_number(value) or value <= 0:
            return f"needs a positive {field}"

    quantity = item.get("quantity")
    if not isinstance(quantity, int) or isinstance(quantity, bool) or quantity <= 0:
        return "needs a positive integer quantity"

    return None


def validate_order_items(candidate: Any) -> list[OrderItem]:
    """
    Check that ``candidate`` is a list of well-formed order lines.

    An empty list is accepted. Strings and mappings are not sequences of
    items here even though Python would iterate them.

    Returns:
        The items as OrderItem models, in submission order

    Raises:
        InvalidOrderShape: on the first malformed element, or when
            ``candidate`` is not a list
    """
    if not isinstance(candidate, (list, tuple)):
        raise InvalidOrderShape("Invalid order format: items must be a list")

    for position, item in enumerate(candidate):
        problem = _item_problem(item)
        if problem:
            raise InvalidOrderShape(f"Invalid order format: item {position} {problem}")

    return [OrderItem.model_validate(dict(item)) for item in candidate]
