"""HTTP client for the plugin registry and plugin downloads."""

import json
import logging
from typing import Optional

import httpx
import yaml

from .exceptions import (
    APIError,
    NotFoundError,
    NetworkError,
    ServerError,
    IndexFormatError,
)
from .models import RegistryIndex

logger = logging.getLogger(__name__)


class RegistryClient:
    """Client for the remote plugin index and plugin payload downloads."""

    def __init__(
        self,
        index_url: str,
        timeout: int = 30,
        user_agent: str = "skein-cli",
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the registry client.

        Args:
            index_url: URL of the plugin index document
            timeout: Request timeout in seconds
            user_agent: User-Agent header sent with every request
            transport: Optional httpx transport (used to stub the network)
        """
        if not index_url or not index_url.strip():
            raise ValueError("Index URL is required")

        self.index_url = index_url
        self.timeout = timeout
        self.user_agent = user_agent
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self):
        """Async context manager entry."""
        await self._ensure_client()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()

    async def _ensure_client(self):
        """Ensure HTTP client is initialized."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.timeout,
                follow_redirects=True,
                headers={"User-Agent": self.user_agent},
                transport=self._transport,
            )

    async def close(self):
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def get(self, url: str) -> bytes:
        """Download a document.

        A single GET is performed; there is no retry.

        Args:
            url: Absolute URL to download

        Returns:
            The response body

        Raises:
            NotFoundError: On 404 responses
            ServerError: On 5xx responses
            NetworkError: If the request fails at the transport level
            APIError: For other non-success responses
        """
        await self._ensure_client()
        if self._client is None:
            raise APIError("HTTP client not initialized", url=url)

        logger.debug("GET %s", url)
        try:
            response = await self._client.get(url)
        except httpx.RequestError as e:
            raise NetworkError(f"Network error while fetching {url}: {e}", url=url)

        if response.is_success:
            return response.content

        self._handle_api_error(response, url)
        # This should never be reached due to _handle_api_error raising
        raise APIError("Unexpected response", url=url)

    async def fetch_index(self, cli_version: str | None = None) -> RegistryIndex:
        """Fetch the plugin index.

        The index is fetched fresh on every call and never cached. When the CLI
        version is known, entries whose version range excludes it are left out.

        Args:
            cli_version: Version of the running CLI, if it is a released build

        Returns:
            The plugin index

        Raises:
            IndexFormatError: If the document can't be parsed
            APIError: If the download fails
        """
        raw = await self.get(self.index_url)

        try:
            data = yaml.safe_load(raw.decode("utf-8"))
        except (yaml.YAMLError, UnicodeDecodeError) as e:
            raise IndexFormatError(f"Invalid plugin index at {self.index_url}: {e}", url=self.index_url)

        index = RegistryIndex.from_document(data).for_version(cli_version)
        logger.debug("Plugin index lists %d plugins", len(index))
        return index

    def _handle_api_error(self, response: httpx.Response, url: str) -> None:
        """Handle error responses.

        Args:
            response: HTTP response object
            url: The requested URL

        Raises:
            Appropriate exception based on status code
        """
        status_code = response.status_code

        try:
            error_data = response.json()
            message = error_data.get("message", response.text) if isinstance(error_data, dict) else response.text
        except (json.JSONDecodeError, ValueError):
            error_data = None
            message = response.text

        message = f"HTTP {status_code} while fetching {url}" + (f": {message}" if message else "")
        response_data = error_data if isinstance(error_data, dict) else None

        if status_code == 404:
            raise NotFoundError(message, status_code=status_code, response_data=response_data, url=url)
        elif status_code >= 500:
            raise ServerError(message, status_code=status_code, response_data=response_data, url=url)
        else:
            raise APIError(message, status_code=status_code, response_data=response_data, url=url)
