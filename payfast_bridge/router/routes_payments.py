import json

from fastapi import APIRouter, Depends, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from payfast_bridge.dto.payment import PaymentCreateIn, PaymentCreateOut, PaymentErrorOut
from payfast_bridge.router.dependencies import get_settings
from payfast_bridge.services.payment_service import build_payment_request
from payfast_bridge.utils.config import Settings
from payfast_bridge.utils.errors import InvalidInputError

router = APIRouter(prefix="/api", tags=["payments"])

FORM_CONTENT_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


async def read_payment_input(request: Request) -> PaymentCreateIn:
    # Checkout pages post either JSON (fetch) or a plain HTML form.
    content_type = request.headers.get("content-type", "").lower()
    try:
        if content_type.startswith(FORM_CONTENT_TYPES):
            form = await request.form()
            raw = {key: value for key, value in form.items() if isinstance(value, str)}
        else:
            raw = await request.json()
        return PaymentCreateIn.model_validate(raw)
    except json.JSONDecodeError as exc:
        raise RequestValidationError(
            [{"type": "json_invalid", "loc": ("body", exc.pos), "msg": "JSON decode error", "input": {}}]
        ) from exc
    except ValidationError as exc:
        raise RequestValidationError(exc.errors(include_url=False)) from exc


@router.post(
    "/create-payment",
    response_model=PaymentCreateOut,
    responses={status.HTTP_400_BAD_REQUEST: {"model": PaymentErrorOut}},
)
async def create_payment(
    payload: PaymentCreateIn = Depends(read_payment_input),
    settings: Settings = Depends(get_settings),
):
    try:
        payment = build_payment_request(payload.amount, payload.item_name, payload.customer(), settings)
    except InvalidInputError as exc:
        error = PaymentErrorOut(error=exc.message, field=exc.field)
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=error.model_dump())
    return PaymentCreateOut(data=payment.fields, payfast_url=payment.submission_url, redirect_url=payment.redirect_url)
