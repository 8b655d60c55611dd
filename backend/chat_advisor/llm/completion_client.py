"""
HTTP client for the chat completion worker.

The worker proxies an OpenAI chat completion: it takes {"messages": [...]}
and returns the upstream JSON body unchanged. One POST per request, no
timeout and no retry.
"""

import asyncio
import json
import logging
from typing import Any, Optional

import aiohttp

from chat_advisor.config import WORKER_URL_PLACEHOLDER
from chat_advisor.errors import ConfigurationError, TransportError
from chat_advisor.models import RequestPayload

logger = logging.getLogger(__name__)


class CompletionClient:
    """
    Sends conversation payloads to the completion worker.

    Keeps one persistent aiohttp session per client, created on first use.
    """

    def __init__(
        self,
        endpoint: Optional[str],
        placeholder_token: str = WORKER_URL_PLACEHOLDER,
    ):
        self.endpoint = (endpoint or "").strip()
        self.placeholder_token = placeholder_token
        self._session: Optional[aiohttp.ClientSession] = None
        self._session_lock = asyncio.Lock()

    @property
    def is_configured(self) -> bool:
        """False when the endpoint is unset or still the placeholder."""
        if not self.endpoint:
            return False
        return self.placeholder_token not in self.endpoint

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create the persistent session."""
        async with self._session_lock:
            if self._session is None or self._session.closed:
                # No total timeout: the call waits until the transport settles
                self._session = aiohttp.ClientSession(
                    timeout=aiohttp.ClientTimeout(total=None)
                )
                logger.debug("Created completion worker session")
            return self._session

    async def close(self) -> None:
        """Close persistent session."""
        if self._session and not self._session.closed:
            await self._session.close()
            logger.debug("Closed completion worker session")

    async def complete(self, payload: RequestPayload) -> Any:
        """
        POST the payload to the worker and decode the JSON reply.

        Args:
            payload: Directive plus transcript

        Returns:
            Decoded response body (any JSON value)

        Raises:
            ConfigurationError: Endpoint unset or placeholder, nothing was sent
            TransportError: Network failure or non-JSON body
        """
        if not self.is_configured:
            raise ConfigurationError(
                "Worker URL is not configured. Set WORKER_URL or DEFAULT_WORKER_URL.",
                endpoint=self.endpoint or None,
            )

        body = payload.to_body()
        logger.info(f"Sending {len(body['messages'])} messages to worker")

        try:
            session = await self._get_session()
            async with session.post(
                self.endpoint,
                headers={"Content-Type": "application/json"},
                data=json.dumps(body),
            ) as response:
                text = await response.text()
                if response.status != 200:
                    logger.warning(f"Worker returned HTTP {response.status}")
        except aiohttp.ClientError as e:
            raise TransportError(f"Worker request failed: {e}", cause=e) from e

        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            raise TransportError(f"Worker response is not JSON: {e}", cause=e) from e
