"""Abstract authenticated request sender interface."""

from abc import ABC, abstractmethod
from typing import Any, Mapping, Optional


class AuthenticatedRequestSender(ABC):
    """Sends requests to the asset service API with authentication applied."""

    @abstractmethod
    async def send(
        self,
        method: str,
        path: str,
        *,
        headers: Optional[Mapping[str, str]] = None,
        data: Optional[Mapping[str, Any]] = None,
        content: Optional[bytes] = None,
    ) -> Any:
        """Issue one request relative to the API base URL.

        Args:
            method: HTTP method
            path: Path relative to the base URL, without leading slash
            headers: Extra request headers, merged under the auth headers
            data: Form fields, sent url-encoded
            content: Raw request body

        Returns:
            Decoded JSON response body, or None for an empty body

        Raises:
            TransportError: On network failure, timeout or non-2xx status
        """
        pass
