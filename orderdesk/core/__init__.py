"""
Core module initialization.
Exports configuration, logging and error utilities.
"""

from orderdesk.core.config import get_settings, setup_logging, Settings, EnvironmentMode, ReportDispatch
from orderdesk.core.exceptions import OrderDeskError

__all__ = [
    "get_settings",
    "setup_logging",
    "Settings",
    "EnvironmentMode",
    "ReportDispatch",
    "OrderDeskError",
]
