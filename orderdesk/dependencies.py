"""
Dependency injection for FastAPI routes.

The stores and services are created once per application by create_app()
and kept on ``app.state``; routes receive them through these getters.
"""

from fastapi import Request

from orderdesk.core.config import Settings
from orderdesk.services.broadcast import BroadcastChannel
from orderdesk.services.excel_manager import ExcelManager
from orderdesk.services.history import HistoryLog
from orderdesk.services.lifecycle import OrderLifecycleManager
from orderdesk.services.menu import MenuCatalog


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_lifecycle(request: Request) -> OrderLifecycleManager:
    return request.app.state.lifecycle


def get_broadcaster(request: Request) -> BroadcastChannel:
    return request.app.state.broadcaster


def get_menu(request: Request) -> MenuCatalog:
    return request.app.state.menu


def get_history(request: Request) -> HistoryLog:
    return request.app.state.history


def get_excel(request: Request) -> ExcelManager:
    return request.app.state.excel
