"""Base client class."""
import logging
from typing import Any, Dict, Optional

import httpx
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_fixed,
)

logger = logging.getLogger(__name__)


class BaseHTTPClient:
    """Base HTTP client with retry and timeout logic.

    Only transport failures (connect errors, timeouts) are retried; an HTTP
    error status is returned to the caller on the first attempt.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 5.0,
        retries: int = 3,
        retry_wait: float = 0.2,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.retries = retries
        self.retry_wait = retry_wait
        self.client = httpx.AsyncClient(timeout=timeout, transport=transport)

    async def close(self) -> None:
        """Close the client."""
        await self.client.aclose()

    def _retrying(self) -> AsyncRetrying:
        return AsyncRetrying(
            stop=stop_after_attempt(self.retries),
            wait=wait_fixed(self.retry_wait),
            retry=retry_if_exception_type(httpx.TransportError),
            reraise=True,
        )

    async def post(
        self, path: str, data: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """Make POST request."""
        url = f"{self.base_url}{path}"
        try:
            async for attempt in self._retrying():
                with attempt:
                    response = await self.client.post(url, json=data)
            response.raise_for_status()
            return response.json()
        except httpx.TimeoutException as e:
            logger.error(f"Timeout calling {url}: {e}")
            raise
        except httpx.HTTPStatusError as e:
            logger.error(f"HTTP error calling {url}: {e.response.status_code}")
            raise
        except httpx.HTTPError as e:
            logger.error(f"Error calling {url}: {e}")
            raise
