"""Request sender authenticating with a permanent API token."""

import logging
from typing import Any, Mapping, Optional

import httpx

from assetbank.api.base import AuthenticatedRequestSender
from assetbank.core.config import settings
from assetbank.upload.exceptions import TransportError

logger = logging.getLogger(__name__)


class PermanentTokenRequestHandler(AuthenticatedRequestSender):
    """httpx based sender that adds a bearer token and the client user agent."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        token: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the handler.

        Args:
            base_url: API base URL, defaults to ``settings.API_BASE_URL``
            token: Permanent token, defaults to ``settings.PERMANENT_TOKEN``
            timeout: Per-request timeout in seconds, defaults to ``settings.REQUEST_TIMEOUT``
            transport: Optional httpx transport (used by tests)
        """
        base_url = base_url if base_url is not None else settings.API_BASE_URL
        if not base_url:
            raise ValueError("API_BASE_URL not configured")
        token = token if token is not None else settings.PERMANENT_TOKEN
        if not token:
            raise ValueError("PERMANENT_TOKEN not configured")

        self.base_url = base_url.rstrip("/") + "/"
        self._token = token
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout if timeout is not None else settings.REQUEST_TIMEOUT,
            transport=transport,
        )

    def _auth_headers(self) -> dict[str, str]:
        return {
            "User-Agent": settings.user_agent,
            "Authorization": f"Bearer {self._token}",
        }

    async def send(
        self,
        method: str,
        path: str,
        *,
        headers: Optional[Mapping[str, str]] = None,
        data: Optional[Mapping[str, Any]] = None,
        content: Optional[bytes] = None,
    ) -> Any:
        request_headers = httpx.Headers(headers or {})
        # Auth headers replace caller headers of any casing
        request_headers.update(self._auth_headers())

        try:
            response = await self._client.request(
                method,
                path.lstrip("/"),
                headers=request_headers,
                data=data,
                content=content,
            )
            response.raise_for_status()
        except httpx.TimeoutException as e:
            logger.warning(
                "Request timed out",
                extra={"method": method, "path": path, "error": str(e)},
            )
            raise TransportError(f"Request timed out: {method} {path}", method, path) from e
        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            logger.warning(
                "Request rejected by asset service",
                extra={"method": method, "path": path, "status_code": status_code},
            )
            raise TransportError(
                f"{method} {path} failed with status {status_code}", method, path, status_code
            ) from e
        except httpx.HTTPError as e:
            logger.warning(
                "Request failed",
                extra={"method": method, "path": path, "error": str(e)},
            )
            raise TransportError(f"{method} {path} failed: {e}", method, path) from e

        if not response.content:
            return None

        try:
            return response.json()
        except ValueError as e:
            raise TransportError(
                f"{method} {path} returned a non-JSON body", method, path, response.status_code
            ) from e

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    async def __aenter__(self) -> "PermanentTokenRequestHandler":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
