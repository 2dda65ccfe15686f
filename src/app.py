"""Storefront FastAPI application.

Synchronous HTTP server for carts and orders. ``create_app`` wires the
collaborators once (database, email channel, notifier, checkout services) and
keeps them on ``app.state`` for the route dependencies. Order emails go
out on a small thread pool that is drained on shutdown.

Usage:
    uvicorn app:create_app --factory --host 0.0.0.0 --port 8000 --reload
"""

from concurrent.futures import ThreadPoolExecutor
from contextlib import asynccontextmanager
from uuid import uuid4

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from notifications.channel import build_email_channel
from notifications.notification.order_notifier import OrderNotifier
from ordering.api.routes import cart_router, order_router
from ordering.cart.items import ManageCartItemsHandler
from ordering.order.placement import OrderPlacementService
from ordering.order.status import UpdateOrderStatusHandler
from shared.api import register_exception_handlers
from shared.config import Settings, get_settings
from shared.database import make_engine, make_session_factory, setup_db
from shared.logging import add_context, clear_context, configure_logging

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    if app.state.notification_executor is not None:
        app.state.notification_executor.shutdown(wait=True)
    app.state.email.close()
    app.state.engine.dispose()


def create_app(settings: Settings | None = None, email=None, create_schema: bool = True) -> FastAPI:
    """Build the application.

    Args:
        settings: Defaults to the process-wide settings.
        email: Email channel to notify customers through; built from
            ``settings.email_adapter`` when omitted.
        create_schema: Create missing tables on the configured database.
    """
    settings = settings or get_settings()
    configure_logging(settings.env, settings.log_level)

    engine = make_engine(settings)
    if create_schema:
        setup_db(engine)
    session_factory = make_session_factory(engine)

    email = email if email is not None else build_email_channel(settings)
    executor = None
    if settings.notification_workers:
        executor = ThreadPoolExecutor(
            max_workers=settings.notification_workers,
            thread_name_prefix="notifications",
        )
    notifier = OrderNotifier(session_factory, email, executor=executor)

    app = FastAPI(
        title="Storefront API",
        description="Shopping cart and atomic checkout",
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = session_factory
    app.state.email = email
    app.state.notification_executor = executor
    app.state.placement_service = OrderPlacementService(
        session_factory,
        notifier=notifier,
        max_attempts=settings.checkout_max_attempts,
    )
    app.state.cart_handler = ManageCartItemsHandler(session_factory)
    app.state.status_handler = UpdateOrderStatusHandler(session_factory, notifier=notifier)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def request_context_middleware(request: Request, call_next):
        """Bind a request id to every log line emitted while serving the request."""
        clear_context()
        request_id = request.headers.get("X-Request-ID") or str(uuid4())
        add_context(request_id=request_id, path=request.url.path, method=request.method)
        try:
            response = await call_next(request)
        finally:
            clear_context()
        response.headers["X-Request-ID"] = request_id
        return response

    # -----------------------------------------------------------------------
    # Routers
    # -----------------------------------------------------------------------
    app.include_router(cart_router)
    app.include_router(order_router)
    register_exception_handlers(app)

    # -----------------------------------------------------------------------
    # Health
    # -----------------------------------------------------------------------
    @app.get("/health")
    async def health():
        return JSONResponse(content={"status": "ok", "env": settings.env})

    logger.info("Application created", env=settings.env, email_adapter=type(email).__name__)
    return app

