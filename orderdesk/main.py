"""
FastAPI Application Entry Point

OrderDesk - real-time order taking for a single restaurant.

Endpoints:
    - GET /menu, POST /menu, PUT /menu/{id}, DELETE /menu/{id}: Menu catalog
    - GET /orders: Active orders, newest first
    - POST /order: Submit an order
    - PUT /order/{id}: Change an order's status
    - GET /report: Download the day's Excel report
    - GET /history: Archived orders (admin)
    - GET /health: System health check
    - WS /ws: Live menu-updated / order-created / order-status-changed events

Run with:
    uvicorn orderdesk.main:app --host 0.0.0.0 --port 3000
"""

import json
import logging
from contextlib import asynccontextmanager
from datetime import date, datetime
from typing import Any, Callable, Optional

import redis
from fastapi import APIRouter, Body, Depends, FastAPI, Query, Request, Response, WebSocket
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse

from orderdesk.core.config import ReportDispatch, Settings, get_settings, setup_logging
from orderdesk.core.exceptions import InvalidOrderShape, OrderDeskError, ReportNotFound, Unauthorized
from orderdesk.core.security import require_admin, require_kitchen
from orderdesk.dependencies import (
    get_app_settings,
    get_broadcaster,
    get_excel,
    get_history,
    get_lifecycle,
    get_menu,
)
from orderdesk.schemas import (
    BroadcastEvent,
    ErrorResponse,
    HealthResponse,
    HistoryRecord,
    MenuItem,
    Order,
    OrderSubmission,
    SchedulerStatus,
    StatusUpdate,
)
from orderdesk.services import (
    ArchiveScheduler,
    BroadcastChannel,
    ExcelManager,
    HistoryLog,
    MenuCatalog,
    OrderLifecycleManager,
    OrderStore,
)

logger = logging.getLogger(__name__)

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

ORDER_EXAMPLE_ITEMS = [
    {"name": "Burger", "price_local": 18000, "price_foreign": 4.5, "quantity": 1},
    {"name": "Lemon drink", "price_local": 5000, "price_foreign": 1.25, "quantity": 2},
]

router = APIRouter()


# =============================================================================
# ROOT & HEALTH ENDPOINTS
# =============================================================================

@router.get("/", tags=["Root"])
async def root(settings: Settings = Depends(get_app_settings)) -> dict[str, str]:
    """API root with navigation links."""
    return {
        "message": f"🍽️ Welcome to {settings.app_name}",
        "version": settings.app_version,
        "environment": settings.env_mode.value,
        "documentation": "/docs",
        "health": "/health",
        "events": "/ws",
    }


def _check_redis(url: str) -> str:
    try:
        r = redis.Redis.from_url(url, socket_timeout=2)
        r.ping()
        r.close()
        return "healthy"
    except Exception as e:
        logger.error(f"Redis health check failed: {e}")
        return f"unhealthy: {str(e)}"


@router.get(
    "/health",
    response_model=HealthResponse,
    tags=["Health"],
    summary="System Health Check",
)
async def health_check(request: Request) -> HealthResponse:
    """Report the state of the order store, viewers and archive scheduler."""
    state = request.app.state
    settings: Settings = state.settings
    scheduler: ArchiveScheduler = state.scheduler

    if settings.report_dispatch == ReportDispatch.CELERY:
        redis_status = await run_in_threadpool(_check_redis, settings.redis_url)
    else:
        redis_status = "not used"

    last = scheduler.last_result
    problems = [
        settings.archive_enabled and not scheduler.running,
        redis_status.startswith("unhealthy"),
        last is not None and not (last.report_ok and last.history_persisted),
    ]

    return HealthResponse(
        status="degraded" if any(problems) else "operational",
        active_orders=len(state.store),
        next_order_id=state.store.next_order_id,
        viewers=state.broadcaster.viewer_count,
        history_records=len(state.history),
        menu_items=len(state.menu),
        scheduler=SchedulerStatus(
            running=scheduler.running,
            next_run_at=scheduler.next_run_at,
            last_run_at=last.started_at if last else None,
            last_archived_count=last.archived_count if last else None,
            last_report_ok=last.report_ok if last else None,
            last_history_persisted=last.history_persisted if last else None,
        ),
        redis=redis_status,
        timestamp=state.clock(),
    )


# =============================================================================
# MENU ENDPOINTS
# =============================================================================

@router.get("/menu", response_model=list[MenuItem], tags=["Menu"])
async def list_menu(menu: MenuCatalog = Depends(get_menu)) -> list[MenuItem]:
    return menu.items()


@router.post(
    "/menu",
    response_model=MenuItem,
    status_code=201,
    responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse}},
    tags=["Menu"],
    dependencies=[Depends(require_admin)],
)
async def create_menu_item(
    payload: dict[str, Any] = Body(...),
    menu: MenuCatalog = Depends(get_menu),
    broadcaster: BroadcastChannel = Depends(get_broadcaster),
) -> MenuItem:
    item = menu.create(payload)
    await broadcaster.publish(BroadcastEvent.MENU_UPDATED, item)
    return item


@router.put(
    "/menu/{item_id}",
    response_model=MenuItem,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    tags=["Menu"],
    dependencies=[Depends(require_admin)],
)
async def update_menu_item(
    item_id: int,
    payload: dict[str, Any] = Body(...),
    menu: MenuCatalog = Depends(get_menu),
    broadcaster: BroadcastChannel = Depends(get_broadcaster),
) -> MenuItem:
    """Merge the given fields onto an existing item."""
    item = menu.update(item_id, payload)
    await broadcaster.publish(BroadcastEvent.MENU_UPDATED, item)
    return item


@router.delete(
    "/menu/{item_id}",
    status_code=204,
    tags=["Menu"],
    dependencies=[Depends(require_admin)],
)
async def delete_menu_item(
    item_id: int,
    menu: MenuCatalog = Depends(get_menu),
    broadcaster: BroadcastChannel = Depends(get_broadcaster),
) -> Response:
    menu.delete(item_id)
    await broadcaster.publish(BroadcastEvent.MENU_UPDATED, {"id": item_id})
    return Response(status_code=204)


# =============================================================================
# ORDER ENDPOINTS
# =============================================================================

@router.get("/orders", response_model=list[Order], tags=["Orders"])
async def list_orders(lifecycle: OrderLifecycleManager = Depends(get_lifecycle)) -> list[Order]:
    """Active orders, newest first."""
    return lifecycle.list_active()


@router.post(
    "/order",
    response_model=Order,
    responses={400: {"model": ErrorResponse}},
    tags=["Orders"],
    summary="Submit Order",
    openapi_extra={
        "requestBody": {
            "required": True,
            "content": {
                "application/json": {
                    "schema": OrderSubmission.model_json_schema(),
                    "example": {"items": ORDER_EXAMPLE_ITEMS, "table": "7"},
                }
            },
        }
    },
)
async def submit_order(
    request: Request,
    lifecycle: OrderLifecycleManager = Depends(get_lifecycle),
) -> Order:
    """
    Submit an order body shaped like OrderSubmission.

    The body is parsed here rather than by FastAPI so that every malformed
    order, unparseable JSON included, is answered with 400 INVALID_ORDER.
    """
    raw = await request.body()
    try:
        payload = json.loads(raw) if raw else None
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise InvalidOrderShape(f"Invalid order format: body is not valid JSON ({e})") from e
    return await lifecycle.submit(payload)


@router.put(
    "/order/{order_id}",
    response_model=Order,
    responses={401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    tags=["Orders"],
    summary="Update Order Status",
    dependencies=[Depends(require_kitchen)],
)
async def update_order_status(
    order_id: str,
    update: StatusUpdate,
    lifecycle: OrderLifecycleManager = Depends(get_lifecycle),
) -> Order:
    return await lifecycle.update_status(order_id, update.status)


# =============================================================================
# REPORT & HISTORY ENDPOINTS
# =============================================================================

@router.get(
    "/report",
    response_class=FileResponse,
    responses={404: {"model": ErrorResponse}},
    tags=["Reports"],
    summary="Download Daily Report",
)
async def download_report(
    request: Request,
    day: Optional[date] = Query(None, description="Report date, defaults to today"),
    excel: ExcelManager = Depends(get_excel),
) -> FileResponse:
    report_date = day or request.app.state.clock().date()
    path = excel.report_path(report_date)
    if not path.exists():
        raise ReportNotFound(f"No report for {report_date.isoformat()}")
    return FileResponse(path, media_type=XLSX_MEDIA_TYPE, filename=path.name)


@router.get(
    "/history",
    response_model=list[HistoryRecord],
    responses={401: {"model": ErrorResponse}},
    tags=["Reports"],
    dependencies=[Depends(require_admin)],
)
async def list_history(
    archived_date: Optional[date] = Query(None),
    history: HistoryLog = Depends(get_history),
) -> list[HistoryRecord]:
    return history.records(archived_date.isoformat() if archived_date else None)


# =============================================================================
# REAL-TIME CHANNEL
# =============================================================================

@router.websocket("/ws")
async def viewer_socket(websocket: WebSocket) -> None:
    """Push-only event stream; anything the viewer sends is ignored."""
    broadcaster: BroadcastChannel = websocket.app.state.broadcaster
    await websocket.accept()
    broadcaster.register(websocket)
    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                break
    finally:
        broadcaster.unregister(websocket)


# =============================================================================
# ERROR HANDLERS
# =============================================================================

async def orderdesk_exception_handler(request: Request, exc: OrderDeskError) -> JSONResponse:
    """Convert domain errors into ErrorResponse bodies."""
    headers = None
    if isinstance(exc, Unauthorized):
        headers = {"WWW-Authenticate": f'Basic realm="{exc.realm}"'}

    if exc.status_code >= 500:
        logger.error(f"{exc.code} on {request.method} {request.url.path}: {exc.message}")

    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(error=exc.code, detail=exc.message).model_dump(),
        headers=headers,
    )


def register_exception_handlers(app: FastAPI, settings: Settings) -> None:
    app.add_exception_handler(OrderDeskError, orderdesk_exception_handler)

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Catch-all exception handler."""
        logger.exception(f"Unhandled exception: {exc}")

        return JSONResponse(
            status_code=500,
            content={
                "success": False,
                "error": "Internal Server Error",
                "detail": str(exc) if settings.debug else "An unexpected error occurred",
            },
        )


# =============================================================================
# APPLICATION FACTORY
# =============================================================================

def create_app(
    settings: Optional[Settings] = None,
    clock: Optional[Callable[[], datetime]] = None,
) -> FastAPI:
    """
    Build the application and the state it owns.

    Args:
        settings: Configuration, defaults to get_settings()
        clock: Source of the current local time, defaults to now() in the
            configured time zone
    """
    settings = settings or get_settings()
    if clock is None:
        tz = settings.tzinfo
        clock = lambda: datetime.now(tz)  # noqa: E731

    store = OrderStore()
    broadcaster = BroadcastChannel(send_timeout=settings.broadcast_send_timeout)
    history = HistoryLog(settings.history_path)
    menu = MenuCatalog(settings.menu_path)
    excel = ExcelManager(settings.reports_path, lock_timeout=settings.report_lock_timeout)
    lifecycle = OrderLifecycleManager(store, broadcaster, clock)
    scheduler = ArchiveScheduler(
        store,
        history,
        excel,
        clock,
        period=settings.archive_period,
        archive_at=settings.archive_at,
        dispatch=settings.report_dispatch,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Manage application startup and shutdown events.
        """
        logger.info("=" * 60)
        logger.info(f"🚀 Starting {settings.app_name}")
        logger.info(f"   Version: {settings.app_version}")
        logger.info(f"   Environment: {settings.env_mode.value}")
        logger.info(f"   Data directory: {settings.data_path}")
        logger.info(f"   Report dispatch: {settings.report_dispatch.value}")
        logger.info("=" * 60)

        missing = settings.validate_production_config()
        if missing:
            logger.warning(f"⚠️ Missing production config: {missing}")

        if settings.archive_enabled:
            scheduler.start()
        else:
            logger.info("Archive scheduler disabled")

        yield  # Application runs

        logger.info("Shutting down...")
        await scheduler.stop()
        logger.info("✅ Cleanup complete")

    app = FastAPI(
        title=settings.app_name,
        description=(
            "Real-time order taking for a single restaurant: menu, live order "
            "queue for the kitchen and a daily archive to Excel and history."
        ),
        version=settings.app_version,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    app.state.settings = settings
    app.state.clock = clock
    app.state.store = store
    app.state.broadcaster = broadcaster
    app.state.history = history
    app.state.menu = menu
    app.state.excel = excel
    app.state.lifecycle = lifecycle
    app.state.scheduler = scheduler

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["*"],
    )

    register_exception_handlers(app, settings)
    app.include_router(router)
    return app


setup_logging()
app = create_app()


def run() -> None:
    """Console entry point."""
    import uvicorn

    settings = get_settings()
    uvicorn.run("orderdesk.main:app", host=settings.api_host, port=settings.api_port)
