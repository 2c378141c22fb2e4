"""HTTP client that triggers the price schedule batch, with exponential backoff retry"""

import asyncio
import logging
from typing import Any, Dict, Optional

import httpx
from optioil_gateway.config import settings
from optioil_gateway.infrastructure.observability.metrics import trigger_failure_counter

BATCH_PATH = "/v1/admin/batch/price-schedules"


class BatchTriggerError(Exception):
    """The gateway rejected the trigger or stayed unreachable after all retries"""

    pass


class BatchTriggerClient:
    """Client used by cron to run apply_schedules on the gateway"""

    def __init__(
        self,
        base_url: str | None = None,
        secret: str | None = None,
        timeout: float | None = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url or settings.gateway_base_url
        self.secret = secret or settings.scheduler_secret
        self.timeout = timeout or settings.http_timeout_seconds
        self.max_retries = settings.trigger_max_retries
        self.backoff_base = settings.trigger_backoff_base
        self.transport = transport

    async def apply_schedules(self) -> Dict[str, Any]:
        """
        Ask the gateway to apply all due price schedules.

        Retry strategy:
        - Exponential backoff: base, 2*base, 4*base... between attempts
        - Retries on 5xx errors and network failures; 4xx fail immediately
        - Retrying is safe: applied schedules are never selected twice

        Raises:
            BatchTriggerError: on 4xx, a non-JSON success body, or when every attempt failed
        """
        attempt = 0
        async with httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            transport=self.transport,
        ) as client:
            while True:
                try:
                    response = await client.post(
                        BATCH_PATH,
                        json={"action": "apply_schedules"},
                        headers={"Authorization": f"Bearer {self.secret}"},
                    )
                    response.raise_for_status()
                    try:
                        return response.json()
                    except ValueError as e:
                        raise BatchTriggerError(
                            f"Gateway returned a non-JSON response: {response.status_code}"
                        ) from e

                except httpx.HTTPStatusError as e:
                    trigger_failure_counter.inc()
                    if e.response.status_code < 500:
                        raise BatchTriggerError(
                            f"Gateway rejected batch trigger: {e.response.status_code}"
                        ) from e
                    error: Exception = e

                except httpx.RequestError as e:
                    trigger_failure_counter.inc()
                    error = e

                attempt += 1
                if attempt >= self.max_retries:
                    raise BatchTriggerError(
                        f"Batch trigger failed after {attempt} attempts: {error}"
                    ) from error

                backoff = self.backoff_base * (2 ** (attempt - 1))
                logging.warning(
                    f"Batch trigger attempt {attempt} failed, retrying in {backoff}s",
                    extra={"attempt": attempt, "error": str(error)},
                )
                await asyncio.sleep(backoff)
