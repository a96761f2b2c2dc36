"""
Pydantic Schemas for Orders, Menu and History

Orders and history records are held in memory as these models and
serialised as-is on the wire and in the JSON files.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# ENUMS
# =============================================================================

class OrderStatusEnum(str, Enum):
    """
    Statuses used by the kitchen displays.

    Status updates accept any non-empty string; these are the values the
    displays know how to colour.
    """
    PREPARING = "preparing"
    READY = "ready"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class PriorityEnum(str, Enum):
    LOW = "low"
    HIGH = "high"


class BroadcastEvent(str, Enum):
    MENU_UPDATED = "menu-updated"
    ORDER_CREATED = "order-created"
    ORDER_STATUS_CHANGED = "order-status-changed"


# =============================================================================
# ORDERS
# =============================================================================

class OrderItem(BaseModel):
    """Single line in an order. Extra keys sent by the diner app are kept."""
    model_config = ConfigDict(extra="allow")

    name: str = Field(..., examples=["Burger"])
    price_local: float = Field(..., examples=[18000])
    price_foreign: float = Field(..., examples=[4.5])
    quantity: int = Field(..., examples=[2])


class OrderSubmission(BaseModel):
    """
    Request body for POST /order.

    ``items`` is deliberately untyped here: its shape is checked by the
    order validator so that malformed orders map to INVALID_ORDER.
    """
    items: Any = Field(default=None, examples=[[{
        "name": "Burger", "price_local": 18000, "price_foreign": 4.5, "quantity": 1,
    }]])
    table: Optional[Union[str, int]] = Field(default=None, examples=["7"])


class Order(BaseModel):
    """An active order held in the order store."""
    id: str
    table: str
    items: list[OrderItem]
    status: str
    priority: PriorityEnum
    arrival_time: str


class StatusUpdate(BaseModel):
    """Request body for PUT /order/{id}."""
    model_config = ConfigDict(str_strip_whitespace=True)

    status: str = Field(..., min_length=1, max_length=50, examples=["ready"])


class StatusChange(BaseModel):
    """Payload of the order-status-changed event."""
    id: str
    status: str


# =============================================================================
# HISTORY
# =============================================================================

class HistoryRecord(Order):
    """An archived order. (archived_date, id) identifies it across days."""
    model_config = ConfigDict(extra="allow")

    archived_date: str

    @property
    def key(self) -> tuple[str, str]:
        return (self.archived_date, self.id)


# =============================================================================
# MENU
# =============================================================================

class MenuItemCreate(BaseModel):
    """Request body for POST /menu. Every field is required and non-empty."""
    model_config = ConfigDict(extra="ignore")

    name: str = Field(..., min_length=1, max_length=100)
    category: str = Field(..., min_length=1, max_length=50)
    image: str = Field(..., min_length=1, max_length=500)
    price_local: float = Field(..., gt=0)
    price_foreign: float = Field(..., gt=0)
    description: str = Field(..., min_length=1, max_length=1000)


class MenuItemUpdate(BaseModel):
    """Partial update for PUT /menu/{id}. Unknown fields are rejected."""
    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = Field(None, min_length=1, max_length=100)
    category: Optional[str] = Field(None, min_length=1, max_length=50)
    image: Optional[str] = Field(None, min_length=1, max_length=500)
    price_local: Optional[float] = Field(None, gt=0)
    price_foreign: Optional[float] = Field(None, gt=0)
    description: Optional[str] = Field(None, min_length=1, max_length=1000)


class MenuItem(MenuItemCreate):
    id: int


# =============================================================================
# RESPONSE SCHEMAS
# =============================================================================

class ErrorResponse(BaseModel):
    """Standard error response."""
    success: bool = False
    error: str
    detail: Optional[str] = None


class SchedulerStatus(BaseModel):
    running: bool
    next_run_at: Optional[datetime] = None
    last_run_at: Optional[datetime] = None
    last_archived_count: Optional[int] = None
    last_report_ok: Optional[bool] = None
    last_history_persisted: Optional[bool] = None


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    active_orders: int
    next_order_id: str
    viewers: int
    history_records: int
    menu_items: int
    scheduler: SchedulerStatus
    redis: str
    timestamp: datetime
