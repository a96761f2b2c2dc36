"""
                        Services Module

Business logic behind the HTTP and WebSocket surface.

Services:
    - order_store / validator / lifecycle: active orders and their changes
    - broadcast: real-time fan-out to kitchen and admin displays
    - history / scheduler: the daily archive cycle
    - menu: menu catalog
    - excel_manager: file-locked Excel reports
"""

from orderdesk.services.broadcast import BroadcastChannel
from orderdesk.services.excel_manager import ExcelManager
from orderdesk.services.history import HistoryLog
from orderdesk.services.lifecycle import OrderLifecycleManager
from orderdesk.services.menu import MenuCatalog
from orderdesk.services.order_store import OrderStore
from orderdesk.services.scheduler import ArchiveResult, ArchiveScheduler

__all__ = [
    "ArchiveResult",
    "ArchiveScheduler",
    "BroadcastChannel",
    "ExcelManager",
    "HistoryLog",
    "MenuCatalog",
    "OrderLifecycleManager",
    "OrderStore",
]
