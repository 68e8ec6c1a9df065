from fastapi import Request

from payfast_bridge.services.notification_service import NotificationVerifier
from payfast_bridge.services.order_dispatch import OrderStatusCallback
from payfast_bridge.utils.config import Settings


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_verifier(request: Request) -> NotificationVerifier:
    return request.app.state.verifier


def get_order_callback(request: Request) -> OrderStatusCallback:
    return request.app.state.order_callback


def client_address(request: Request, trust_forwarded_for: bool) -> str | None:
    if trust_forwarded_for:
        forwarded = request.headers.get("x-forwarded-for", "")
        first_hop = forwarded.split(",", 1)[0].strip()
        if first_hop:
            return first_hop
    return request.client.host if request.client else None
