import hmac
import logging
from collections.abc import Callable, Mapping

from pydantic import ValidationError

from payfast_bridge.dto.notification import NotificationResult, RejectedNotification, VerifiedNotification
from payfast_bridge.services.gateway_client import PayFastGatewayClient
from payfast_bridge.services.origin import OriginVerifier
from payfast_bridge.utils.enums import RejectionReason
from payfast_bridge.utils.errors import UpstreamUnavailableError
from payfast_bridge.utils.signature import SIGNATURE_FIELD, generate_signature

logger = logging.getLogger(__name__)

Signer = Callable[[Mapping[str, object], str | None], str]


class NotificationVerifier:
    """Authenticates a gateway notification in four gates.

    Origin, signature, echo validation against the gateway, then status
    extraction. The first failing gate decides the outcome and later gates
    are not run.

    ``tolerate_unreachable_gateway`` lets a notification through when the
    gateway could not be asked at all (sandbox only). A gateway that answers
    with anything other than VALID is never tolerated.
    """

    def __init__(
        self,
        *,
        origin_verifier: OriginVerifier,
        gateway_client: PayFastGatewayClient,
        passphrase: str | None,
        tolerate_unreachable_gateway: bool = False,
        signer: Signer = generate_signature,
    ):
        self.origin_verifier = origin_verifier
        self.gateway_client = gateway_client
        self.passphrase = passphrase
        self.tolerate_unreachable_gateway = tolerate_unreachable_gateway
        self.signer = signer

    async def verify(self, payload: Mapping[str, str], client_ip: str | None) -> NotificationResult:
        fields = dict(payload)
        merchant_order_id = fields.get("m_payment_id")

        if not await self.origin_verifier.is_trusted(client_ip):
            return self._reject(RejectionReason.UNTRUSTED_ORIGIN, client_ip, merchant_order_id)

        # The signature never takes part in its own canonical string.
        received_signature = fields.pop(SIGNATURE_FIELD, None)
        if not self._signature_matches(fields, received_signature):
            return self._reject(RejectionReason.BAD_SIGNATURE, client_ip, merchant_order_id)

        try:
            vouched = await self.gateway_client.validate(fields)
        except UpstreamUnavailableError as exc:
            if not self.tolerate_unreachable_gateway:
                return self._reject(
                    RejectionReason.VALIDATION_FAILED, client_ip, merchant_order_id, detail=str(exc), retryable=True
                )
            logger.warning(
                "Gateway unreachable, accepting notification without echo validation. "
                "m_payment_id=%s error=%s",
                merchant_order_id,
                exc,
            )
        else:
            if not vouched:
                return self._reject(RejectionReason.VALIDATION_FAILED, client_ip, merchant_order_id)

        try:
            result = VerifiedNotification(
                merchant_order_id=fields.get("m_payment_id") or "",
                status=fields.get("payment_status") or "",
                gross_amount=fields.get("amount_gross") or "",
            )
        except ValidationError as exc:
            return self._reject(
                RejectionReason.MALFORMED_PAYLOAD,
                client_ip,
                merchant_order_id,
                detail=f"{exc.error_count()} invalid field(s)",
            )

        logger.info(
            "Notification verified. m_payment_id=%s payment_status=%s amount_gross=%s",
            result.merchant_order_id,
            result.status,
            result.gross_amount,
        )
        return result

    def _signature_matches(self, fields: Mapping[str, str], received: str | None) -> bool:
        if not received:
            return False
        expected = self.signer(fields, self.passphrase)
        return hmac.compare_digest(expected.encode("ascii"), received.strip().encode("utf-8"))

    @staticmethod
    def _reject(
        reason: RejectionReason,
        client_ip: str | None,
        merchant_order_id: str | None,
        *,
        detail: str | None = None,
        retryable: bool = False,
    ) -> RejectedNotification:
        logger.warning(
            "Notification rejected. reason=%s client_ip=%s m_payment_id=%s detail=%s",
            reason,
            client_ip,
            merchant_order_id,
            detail,
        )
        return RejectedNotification(reason=reason, retryable=retryable)
