import asyncio

import httpx
import pytest
from fastapi.testclient import TestClient

from payfast_bridge.main import create_app
from payfast_bridge.utils.config import Settings
from payfast_bridge.utils.signature import generate_signature

GATEWAY_IP = "197.97.145.144"
ATTACKER_IP = "203.0.113.50"
PASSPHRASE = "jt7NOE43FZPn"


def make_settings(**overrides) -> Settings:
    values = {
        "payfast_merchant_id": "10000100",
        "payfast_merchant_key": "46f0cd694581a",
        "payfast_passphrase": PASSPHRASE,
        "payfast_return_url": "https://shop.example.com/return",
        "payfast_cancel_url": "https://shop.example.com/cancel",
        "payfast_notify_url": "https://shop.example.com/api/payfast/notify",
        "payfast_sandbox": False,
        "trust_forwarded_for": True,
        "validation_timeout_seconds": 1.0,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


def make_itn(passphrase: str | None = PASSPHRASE, **overrides) -> dict[str, str]:
    payload = {
        "m_payment_id": "ORDER_1700000000000",
        "pf_payment_id": "1089250",
        "payment_status": "COMPLETE",
        "item_name": "Widget",
        "item_description": "Payment for Widget",
        "amount_gross": "10.00",
        "amount_fee": "-2.30",
        "amount_net": "7.70",
        "custom_str1": "",
        "name_first": "Jane",
        "name_last": "Doe",
        "email_address": "jane@example.com",
        "merchant_id": "10000100",
    }
    payload.update(overrides)
    payload["signature"] = generate_signature(payload, passphrase)
    return payload


class FakeResolver:
    def __init__(self, addresses: dict[str, set[str]] | None = None):
        self.addresses = addresses if addresses is not None else {"www.payfast.co.za": {GATEWAY_IP}}
        self.calls: list[str] = []

    async def __call__(self, hostname: str) -> set[str]:
        self.calls.append(hostname)
        if hostname not in self.addresses:
            raise OSError(f"cannot resolve {hostname}")
        return self.addresses[hostname]


class FakeGateway:
    """Stands in for the gateway's validate endpoint via httpx.MockTransport."""

    def __init__(
        self,
        verdict: str = "VALID",
        error: Exception | None = None,
        status_code: int = 200,
        delay_seconds: float = 0.0,
    ):
        self.verdict = verdict
        self.error = error
        self.status_code = status_code
        self.delay_seconds = delay_seconds
        self.requests: list[httpx.Request] = []

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.delay_seconds:
            await asyncio.sleep(self.delay_seconds)
        if self.error is not None:
            raise self.error
        return httpx.Response(self.status_code, text=self.verdict)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


class RecordingCallback:
    def __init__(self):
        self.results = []

    async def __call__(self, result) -> None:
        self.results.append(result)


@pytest.fixture
def settings():
    return make_settings()


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def resolver():
    return FakeResolver()


@pytest.fixture
def order_callback():
    return RecordingCallback()


@pytest.fixture
def client(settings, gateway, resolver, order_callback):
    app = create_app(settings, order_callback=order_callback, http_transport=gateway.transport, resolver=resolver)
    with TestClient(app) as test_client:
        yield test_client
