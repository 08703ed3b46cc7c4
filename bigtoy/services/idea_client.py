"""
Client for the Idea-Generation Endpoint.
Streams the raw response body so ideas can be rendered as they arrive.
"""

import json
from typing import AsyncIterator, Optional

import httpx

from bigtoy.errors import AnalysisTimeoutError, NetworkError, RateLimitedError, RequestError
from bigtoy.models.idea import AnalysisRequest
from bigtoy.utils.logger import logger


def extract_server_message(body: bytes) -> Optional[str]:
    """
    Pull a human readable message out of an error response body.

    Args:
        body: Raw response body

    Returns:
        The ``error`` or ``message`` field, or None when the body has neither
    """
    try:
        payload = json.loads(body.decode("utf-8", errors="replace"))
    except ValueError:
        return None

    if not isinstance(payload, dict):
        return None
    for key in ("error", "message"):
        value = payload.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


class IdeaStreamClient:
    """Streaming HTTP client for the Idea-Generation Endpoint."""

    def __init__(self, http_client: httpx.AsyncClient, endpoint_url: str):
        """
        Initialize the client.

        Args:
            http_client: Shared async HTTP client
            endpoint_url: Absolute URL of the analyze endpoint
        """
        self.http_client = http_client
        self.endpoint_url = endpoint_url

    async def stream_ideas(self, request: AnalysisRequest) -> AsyncIterator[bytes]:
        """
        Post the analysis request and yield the response body chunk by chunk.

        Closing or cancelling the consumer releases the connection.

        Args:
            request: Validated analysis request

        Yields:
            Raw body chunks in arrival order

        Raises:
            RateLimitedError: The endpoint answered 429
            RequestError: Any other non-2xx status
            AnalysisTimeoutError: The transport timed out
            NetworkError: Any other transport or body decoding failure
        """
        logger.info(f"Requesting ideas for {request.image_url} ({request.language.value})")
        try:
            async with self.http_client.stream(
                "POST", self.endpoint_url, json=request.to_payload()
            ) as response:
                if response.status_code == 429:
                    await response.aread()
                    logger.warning("Idea endpoint rate limit reached")
                    raise RateLimitedError()

                if not response.is_success:
                    body = await response.aread()
                    message = extract_server_message(body)
                    logger.error(f"Idea endpoint returned HTTP {response.status_code}: {message}")
                    raise RequestError(response.status_code, message)

                async for chunk in response.aiter_bytes():
                    if chunk:
                        yield chunk
        except httpx.TimeoutException as e:
            logger.error(f"Idea endpoint timed out: {e}")
            raise AnalysisTimeoutError() from e
        except httpx.TransportError as e:
            logger.error(f"Error contacting idea endpoint: {e}")
            raise NetworkError() from e
        except httpx.HTTPError as e:
            logger.error(f"Idea endpoint response could not be read: {e!r}")
            raise NetworkError() from e
