from enum import StrEnum


class PaymentStatus(StrEnum):
    COMPLETE = "COMPLETE"
    PENDING = "PENDING"
    FAILED = "FAILED"
    CANCELLED = "CANCELLED"


class RejectionReason(StrEnum):
    UNTRUSTED_ORIGIN = "untrusted-origin"
    BAD_SIGNATURE = "bad-signature"
    VALIDATION_FAILED = "validation-failed"
    MALFORMED_PAYLOAD = "malformed-payload"
