import asyncio
import logging
from collections.abc import Mapping

import httpx

from payfast_bridge.utils.errors import UpstreamUnavailableError

logger = logging.getLogger(__name__)

VALID_VERDICT = "VALID"


class PayFastGatewayClient:
    """Server-to-server calls to the gateway."""

    def __init__(self, http_client: httpx.AsyncClient, validate_url: str, timeout_seconds: float):
        self._http = http_client
        self.validate_url = validate_url
        self.timeout_seconds = timeout_seconds

    async def validate(self, fields: Mapping[str, str]) -> bool:
        """Echo ``fields`` back to the gateway and report whether it vouches for them.

        Raises ``UpstreamUnavailableError`` when no verdict could be obtained:
        transport failures, timeouts and non-2xx answers.
        """
        try:
            response = await asyncio.wait_for(
                self._http.post(
                    self.validate_url,
                    data=dict(fields),
                    headers={"Content-Type": "application/x-www-form-urlencoded"},
                    timeout=self.timeout_seconds,
                ),
                timeout=self.timeout_seconds,
            )
            response.raise_for_status()
        except asyncio.TimeoutError as exc:
            raise UpstreamUnavailableError(f"gateway validation timed out after {self.timeout_seconds}s") from exc
        except httpx.HTTPError as exc:
            raise UpstreamUnavailableError(f"gateway validation failed: {exc}") from exc

        verdict = response.text.strip()
        if verdict != VALID_VERDICT:
            logger.warning("Gateway rejected notification. verdict=%r", verdict[:200])
            return False
        return True
