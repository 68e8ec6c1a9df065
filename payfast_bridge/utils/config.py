import ipaddress

from pydantic import ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

SANDBOX_HOST = "sandbox.payfast.co.za"
PRODUCTION_HOST = "www.payfast.co.za"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore", frozen=True)

    payfast_merchant_id: str
    payfast_merchant_key: str
    payfast_passphrase: str | None = None
    payfast_return_url: str
    payfast_cancel_url: str
    payfast_notify_url: str
    payfast_sandbox: bool = False
    payfast_valid_hosts: list[str] = [
        "www.payfast.co.za",
        "sandbox.payfast.co.za",
        "w1w.payfast.co.za",
        "w2w.payfast.co.za",
    ]
    payfast_trusted_networks: list[str] = []
    trust_forwarded_for: bool = False
    cors_allow_origins: list[str] = ["*"]
    validation_timeout_seconds: float = 8.0
    dns_timeout_seconds: float = 3.0
    order_callback_timeout_seconds: float = 30.0
    default_customer_email: str = "noreply@example.com"
    log_level: str = "INFO"

    @field_validator(
        "payfast_merchant_id",
        "payfast_merchant_key",
        "payfast_return_url",
        "payfast_cancel_url",
        "payfast_notify_url",
    )
    @classmethod
    def validate_required(cls, value: str, info: ValidationInfo) -> str:
        if not value.strip():
            raise ValueError(f"{info.field_name.upper()} must be a non-empty string")
        return value.strip()

    @field_validator("payfast_passphrase")
    @classmethod
    def normalize_passphrase(cls, value: str | None) -> str | None:
        # A blank passphrase means the merchant account has none configured.
        if value is None or not value.strip():
            return None
        return value

    @field_validator("payfast_trusted_networks")
    @classmethod
    def validate_networks(cls, value: list[str]) -> list[str]:
        for network in value:
            try:
                ipaddress.ip_network(network, strict=False)
            except ValueError as exc:
                raise ValueError(f"PAYFAST_TRUSTED_NETWORKS has an invalid network: {network!r}") from exc
        return value

    @field_validator("validation_timeout_seconds", "dns_timeout_seconds", "order_callback_timeout_seconds")
    @classmethod
    def validate_timeout(cls, value: float, info: ValidationInfo) -> float:
        if value <= 0:
            raise ValueError(f"{info.field_name.upper()} must be > 0")
        return value

    @property
    def environment(self) -> str:
        return "sandbox" if self.payfast_sandbox else "production"

    @property
    def gateway_host(self) -> str:
        return SANDBOX_HOST if self.payfast_sandbox else PRODUCTION_HOST

    @property
    def process_url(self) -> str:
        return f"https://{self.gateway_host}/eng/process"

    @property
    def validate_url(self) -> str:
        return f"https://{self.gateway_host}/eng/query/validate"
