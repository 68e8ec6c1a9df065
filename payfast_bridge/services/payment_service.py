import logging
import threading
import time
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from urllib.parse import urlencode

from payfast_bridge.dto.payment import CustomerDetails, PaymentRequest
from payfast_bridge.utils.config import Settings
from payfast_bridge.utils.errors import InvalidInputError
from payfast_bridge.utils.signature import SIGNATURE_FIELD, generate_signature

logger = logging.getLogger(__name__)

DEFAULT_FIRST_NAME = "Customer"
DEFAULT_LAST_NAME = "Name"


def epoch_millis() -> int:
    return time.time_ns() // 1_000_000


class OrderIdGenerator:
    """Issues ``ORDER_<epoch-millis>`` ids that never repeat within the process.

    Two checkouts landing in the same millisecond get consecutive values
    instead of the same id.
    """

    def __init__(self, prefix: str = "ORDER_", clock=epoch_millis):
        self.prefix = prefix
        self._clock = clock
        self._lock = threading.Lock()
        self._last = 0

    def next_id(self) -> str:
        with self._lock:
            self._last = max(self._clock(), self._last + 1)
            return f"{self.prefix}{self._last}"


order_ids = OrderIdGenerator()


def normalize_amount(amount: object) -> str:
    if amount is None or (isinstance(amount, str) and not amount.strip()):
        raise InvalidInputError("amount", "Amount is required")
    if isinstance(amount, bool):
        raise InvalidInputError("amount", "Amount must be a number")
    try:
        value = Decimal(str(amount).strip())
    except InvalidOperation as exc:
        raise InvalidInputError("amount", "Amount must be a number") from exc
    if not value.is_finite() or value <= 0:
        raise InvalidInputError("amount", "Amount must be greater than zero")
    try:
        return str(value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))
    except InvalidOperation as exc:
        # More digits than the decimal context can hold.
        raise InvalidInputError("amount", "Amount is too large") from exc


def split_name(full_name: str | None) -> tuple[str, str]:
    tokens = (full_name or "").split()
    if not tokens:
        return DEFAULT_FIRST_NAME, DEFAULT_LAST_NAME
    return tokens[0], " ".join(tokens[1:]) or DEFAULT_LAST_NAME


def build_payment_request(
    amount: object,
    item_name: str | None,
    customer: CustomerDetails,
    settings: Settings,
    *,
    order_id_generator: OrderIdGenerator = order_ids,
) -> PaymentRequest:
    normalized_amount = normalize_amount(amount)
    if item_name is None or not item_name.strip():
        raise InvalidInputError("item_name", "Item name is required")
    item_name = item_name.strip()

    first_name, last_name = split_name(customer.name)
    merchant_order_id = order_id_generator.next_id()
    fields = {
        "merchant_id": settings.payfast_merchant_id,
        "merchant_key": settings.payfast_merchant_key,
        "return_url": settings.payfast_return_url,
        "cancel_url": settings.payfast_cancel_url,
        "notify_url": settings.payfast_notify_url,
        "name_first": first_name,
        "name_last": last_name,
        "email_address": customer.email or settings.default_customer_email,
        "cell_number": customer.phone or "",
        "m_payment_id": merchant_order_id,
        "amount": normalized_amount,
        "item_name": item_name,
        "item_description": f"Payment for {item_name}",
        "custom_str1": customer.email or "",
        "custom_str2": customer.phone or "",
    }
    fields[SIGNATURE_FIELD] = generate_signature(fields, settings.payfast_passphrase)

    submission_url = settings.process_url
    # Empty values are dropped from the redirect, as they are from the signature.
    query = urlencode({key: value for key, value in fields.items() if value != ""})
    logger.info(
        "Payment created. m_payment_id=%s amount=%s item_name=%s environment=%s",
        merchant_order_id,
        normalized_amount,
        item_name,
        settings.environment,
    )
    return PaymentRequest(
        merchant_order_id=merchant_order_id,
        fields=fields,
        submission_url=submission_url,
        redirect_url=f"{submission_url}?{query}",
    )
