from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from payfast_bridge.utils.enums import PaymentStatus, RejectionReason


class VerifiedNotification(BaseModel):
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    merchant_order_id: str = Field(min_length=1)
    status: str = Field(min_length=1)
    gross_amount: Decimal

    @property
    def is_complete(self) -> bool:
        return self.status.upper() == PaymentStatus.COMPLETE


class RejectedNotification(BaseModel):
    model_config = ConfigDict(frozen=True)

    reason: RejectionReason
    # True when the gateway should redeliver (we could not confirm with it).
    retryable: bool = False


NotificationResult = VerifiedNotification | RejectedNotification
