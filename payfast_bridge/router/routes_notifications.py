from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import PlainTextResponse

from payfast_bridge.dto.notification import RejectedNotification
from payfast_bridge.router.dependencies import client_address, get_order_callback, get_settings, get_verifier
from payfast_bridge.services.notification_service import NotificationVerifier
from payfast_bridge.services.order_dispatch import OrderStatusCallback, schedule_order_update
from payfast_bridge.utils.config import Settings

router = APIRouter(prefix="/api/payfast", tags=["notifications"])


@router.post("/notify", response_class=PlainTextResponse)
async def receive_notification(
    request: Request,
    settings: Settings = Depends(get_settings),
    verifier: NotificationVerifier = Depends(get_verifier),
    order_callback: OrderStatusCallback = Depends(get_order_callback),
) -> PlainTextResponse:
    form = await request.form()
    # File parts have no place in an ITN; only plain values are signed.
    payload = {key: value for key, value in form.items() if isinstance(value, str)}

    result = await verifier.verify(payload, client_address(request, settings.trust_forwarded_for))
    if isinstance(result, RejectedNotification):
        # The body never says which check failed.
        if result.retryable:
            return PlainTextResponse("Service Unavailable", status_code=status.HTTP_503_SERVICE_UNAVAILABLE)
        return PlainTextResponse("Bad Request", status_code=status.HTTP_400_BAD_REQUEST)

    # Acknowledge right away; merchant order handling runs in the background.
    schedule_order_update(order_callback, result, timeout_seconds=settings.order_callback_timeout_seconds)
    return PlainTextResponse("OK", status_code=status.HTTP_200_OK)
