"""
HTTP client for the token directory service.

The directory is a key-value store mapping integer ids to base64 tokens:
- POST {base_url} with {"token": "<b64>"} creates an entry
- GET {base_url}/{id} reads one back
"""

import logging
import time
from typing import Any, Optional

import httpx
from pydantic import ValidationError

from ..config import settings
from ..observability.metrics import record_directory_request
from ..protocol.errors import (
    DecodeError,
    NetworkError,
    RangingError,
    RemoteError,
    ServerRejectedError,
)
from ..protocol.messages import DirectoryResponse, PublishRequest
from ..protocol.tokens import DiscoveryToken

logger = logging.getLogger(__name__)


class TokenDirectoryClient:
    """
    Async client for publishing and fetching discovery tokens.

    Each call issues exactly one request. Nothing is retried or cached;
    callers re-invoke on failure.

    Usage:
        async with TokenDirectoryClient() as directory:
            token_id = await directory.publish(my_token)
            peer_token = await directory.fetch(peer_id)
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize directory client.

        Args:
            base_url: Directory base URL (defaults to settings.directory_url)
            timeout: Request timeout in seconds
            transport: Optional httpx transport, mainly for tests
        """
        self._base_url = (base_url or settings.directory_url).rstrip("/")

        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            headers={"Content-Type": "application/json"},
            timeout=timeout or settings.request_timeout_seconds,
            transport=transport,
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    async def __aenter__(self) -> "TokenDirectoryClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()

    async def publish(self, token: DiscoveryToken) -> int:
        """
        Publish the local token and return the id the directory assigned.

        Raises:
            NetworkError, RemoteError, DecodeError, ServerRejectedError
        """
        start_time = time.monotonic()
        body = PublishRequest(token=token.to_base64())

        response_body = await self._request(
            "publish",
            "POST",
            "",
            start_time,
            json=body.model_dump(),
        )

        if response_body.id is None:
            raise self._failed("publish", DecodeError("missing 'id' field"), start_time)

        self._succeeded("publish", start_time)
        logger.info(f"Published local token as id {response_body.id}")
        return response_body.id

    async def fetch(self, token_id: int) -> DiscoveryToken:
        """
        Fetch and decode the token published under ``token_id``.

        Raises:
            NetworkError, RemoteError, DecodeError, ServerRejectedError,
            TokenDecodeError
        """
        start_time = time.monotonic()

        response_body = await self._request("fetch", "GET", f"/{token_id}", start_time)

        if response_body.token is None:
            raise self._failed("fetch", DecodeError("missing 'token' field"), start_time)

        try:
            token = DiscoveryToken.from_base64(response_body.token)
        except RangingError as e:
            raise self._failed("fetch", e, start_time) from e

        self._succeeded("fetch", start_time)
        logger.info(f"Fetched peer token for id {token_id}")
        return token

    async def _request(
        self,
        operation: str,
        method: str,
        path: str,
        start_time: float,
        json: Optional[dict[str, Any]] = None,
    ) -> DirectoryResponse:
        """Send one request and validate the shared response envelope."""
        try:
            response = await self._client.request(method, path, json=json)
        except httpx.HTTPError as e:
            raise self._failed(operation, NetworkError(str(e)), start_time) from e

        if response.status_code != 200:
            raise self._failed(operation, RemoteError(response.status_code), start_time)

        try:
            response_body = DirectoryResponse.model_validate_json(response.content)
        except ValidationError as e:
            raise self._failed(
                operation,
                DecodeError(_summarize_validation_error(e)),
                start_time,
            ) from e

        if not response_body.success:
            raise self._failed(operation, ServerRejectedError(operation), start_time)

        return response_body

    def _succeeded(self, operation: str, start_time: float) -> None:
        latency = time.monotonic() - start_time
        record_directory_request(operation, "success", latency)
        logger.debug(f"Directory {operation} completed in {latency * 1000:.0f}ms")

    def _failed(
        self,
        operation: str,
        error: RangingError,
        start_time: float,
    ) -> RangingError:
        """Log and count a failed call, returning the error to raise."""
        record_directory_request(
            operation,
            error.code.value.lower(),
            time.monotonic() - start_time,
        )
        logger.warning(f"Directory {operation} failed: {error.message}")
        return error


def _summarize_validation_error(error: ValidationError) -> str:
    """Format the first validation problem as 'loc: msg'."""
    errors = error.errors()
    if not errors:
        return str(error)
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ())) or "body"
    return f"{location}: {first.get('msg', 'invalid')}"
