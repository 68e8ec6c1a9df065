import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from payfast_bridge.router.routes_health import router as health_router
from payfast_bridge.router.routes_notifications import router as notifications_router
from payfast_bridge.router.routes_payments import router as payments_router
from payfast_bridge.services.gateway_client import PayFastGatewayClient
from payfast_bridge.services.notification_service import NotificationVerifier
from payfast_bridge.services.order_dispatch import OrderStatusCallback, log_order_status
from payfast_bridge.services.origin import OriginVerifier, Resolver, resolve_host
from payfast_bridge.utils.config import Settings
from payfast_bridge.utils.logging import configure_logging
from payfast_bridge.utils.runtime import drain_background_tasks

logger = logging.getLogger(__name__)

SHUTDOWN_GRACE_SECONDS = 5.0


def build_verifier(
    settings: Settings, http_client: httpx.AsyncClient, resolver: Resolver = resolve_host
) -> NotificationVerifier:
    origin_verifier = OriginVerifier(
        hosts=settings.payfast_valid_hosts,
        trusted_networks=settings.payfast_trusted_networks,
        timeout_seconds=settings.dns_timeout_seconds,
        resolver=resolver,
    )
    gateway_client = PayFastGatewayClient(
        http_client,
        validate_url=settings.validate_url,
        timeout_seconds=settings.validation_timeout_seconds,
    )
    return NotificationVerifier(
        origin_verifier=origin_verifier,
        gateway_client=gateway_client,
        passphrase=settings.payfast_passphrase,
        tolerate_unreachable_gateway=settings.payfast_sandbox,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    configure_logging(settings.log_level)
    logger.info(
        "Starting PayFast bridge. environment=%s passphrase_configured=%s",
        settings.environment,
        settings.payfast_passphrase is not None,
    )
    async with httpx.AsyncClient(transport=app.state.http_transport) as http_client:
        app.state.verifier = build_verifier(settings, http_client, resolver=app.state.resolver)
        try:
            yield
        finally:
            await drain_background_tasks(grace_seconds=SHUTDOWN_GRACE_SECONDS)


def create_app(
    settings: Settings | None = None,
    *,
    order_callback: OrderStatusCallback = log_order_status,
    http_transport: httpx.AsyncBaseTransport | None = None,
    resolver: Resolver = resolve_host,
) -> FastAPI:
    """Build the application.

    Run with ``uvicorn --factory payfast_bridge.main:create_app``. Settings are
    read from the environment when not given, so missing merchant
    configuration fails here, before the server accepts a connection.
    """
    if settings is None:
        settings = Settings()

    app = FastAPI(title="PayFast Payment Bridge", lifespan=lifespan)
    app.state.settings = settings
    app.state.order_callback = order_callback
    app.state.http_transport = http_transport
    app.state.resolver = resolver
    # The checkout endpoint is called from the merchant's browser front-end.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )
    app.include_router(health_router)
    app.include_router(payments_router)
    app.include_router(notifications_router)
    return app
