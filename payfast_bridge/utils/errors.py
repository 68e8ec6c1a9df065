class PaymentGatewayError(Exception):
    """Base class for errors raised by the payment bridge."""


class InvalidInputError(PaymentGatewayError):
    """A checkout request is missing a required field or has a malformed one."""

    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field
        self.message = message


class UpstreamUnavailableError(PaymentGatewayError):
    """The gateway could not be reached or did not answer with a verdict."""
