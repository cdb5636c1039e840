"""HTTP transport that carries flow requests over the wire.

Turns the transport-neutral ``Request`` values produced by ``Client`` into
HTTP calls and maps the replies back into ``Request`` redirects and
``Response`` bodies.
"""

from __future__ import annotations

import logging

import httpx

from codegrant.models.errors import UnknownError
from codegrant.models.messages import Request, Response

logger = logging.getLogger(__name__)


class HttpTransport:
    """Synchronous httpx transport for the authorization and token endpoints."""

    def __init__(self, http_client: httpx.Client | None = None, timeout: float = 30.0):
        """Initialize the transport.

        Args:
            http_client: Client to send requests with. One is created if omitted.
            timeout: HTTP request timeout in seconds for a created client
        """
        self.timeout = timeout
        self._http_client = http_client or httpx.Client(timeout=timeout)

    def authorize(self, request: Request) -> Request:
        """Send the authorization request and return the redirect it produces.

        Raises:
            UnknownError: On network failure or when no redirect is returned
        """
        logger.debug(f"Sending authorization request to {request.url}")
        try:
            response = self._http_client.get(request.url, follow_redirects=False)
        except httpx.HTTPError as e:
            raise UnknownError(f"HTTP error during authorization: {e}") from e

        location = response.headers.get("location")
        if not response.is_redirect or not location:
            raise UnknownError(
                f"Authorization endpoint returned {response.status_code} without redirect"
            )
        return Request(url=str(response.url.join(location)))

    def exchange(self, request: Request) -> Response:
        """POST the token request form body and return the JSON reply.

        Raises:
            UnknownError: On network failure
        """
        headers = {
            "Content-Type": "application/x-www-form-urlencoded",
            "Accept": "application/json",
        }
        logger.debug(f"Sending token request to {request.url}")
        try:
            response = self._http_client.post(
                request.url, content=request.body, headers=headers
            )
        except httpx.HTTPError as e:
            raise UnknownError(f"HTTP error during token exchange: {e}") from e

        return Response(body=response.text, status_code=response.status_code)

    def close(self) -> None:
        """Close the HTTP client and clean up resources."""
        self._http_client.close()

    def __enter__(self) -> HttpTransport:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
