"""Reference authorization server for exercising the client end to end.

The server is immutable configuration plus pure request handling. It never
raises from ``auth``, ``token`` or ``route``: every failure is rendered as
an RFC 6749 error redirect or JSON error body.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace

from codegrant.models.errors import (
    InvalidClientError,
    OAuth2Error,
    UnknownError,
    coerce_error,
)
from codegrant.models.messages import Request, Response
from codegrant.server.routes import (
    build_token,
    validate_auth_request,
    validate_token_request,
)

logger = logging.getLogger(__name__)

DEFAULT_SCOPES = (
    "api.example.com/user.profile",
    "api.example.com/user.me",
    "api.example.com/add_item",
)


def status_for(error: OAuth2Error) -> int:
    if isinstance(error, InvalidClientError):
        return 401
    if isinstance(error, UnknownError):
        return 500
    return 400


@dataclass(frozen=True)
class TokenOptions:
    """Shape of the token responses the server hands out."""

    expiration: int | None = None
    scope: tuple[str, ...] = ()
    state: str | None = None


@dataclass(frozen=True)
class AuthorizationServer:
    """Validates authorization and token requests for one registered client."""

    client_id: str = "someid@example.com"
    redirect_uri: str = "https://localhost:8080/oauth/example"
    redirect_uri_required: bool = False
    valid_scopes: tuple[str, ...] = DEFAULT_SCOPES
    code: str = "MOCK_CODE"
    error: OAuth2Error | None = None
    token_options: TokenOptions = field(default_factory=TokenOptions)

    def with_error(self, error: OAuth2Error) -> AuthorizationServer:
        return replace(self, error=error)

    def require_redirect(self) -> AuthorizationServer:
        return replace(self, redirect_uri_required=True)

    def with_code(self, code: str) -> AuthorizationServer:
        return replace(self, code=code)

    def with_scope(self, scope: list[str]) -> AuthorizationServer:
        return replace(
            self, token_options=replace(self.token_options, scope=tuple(scope))
        )

    def with_state(self, state: str) -> AuthorizationServer:
        return replace(self, token_options=replace(self.token_options, state=state))

    def with_no_state(self) -> AuthorizationServer:
        return replace(self, token_options=replace(self.token_options, state=None))

    def with_expiration(self, expiration: int) -> AuthorizationServer:
        return replace(
            self, token_options=replace(self.token_options, expiration=expiration)
        )

    def auth(self, request: Request) -> Request:
        """Handle an authorization request, always answering with a redirect."""
        params = request.query_params()
        state = params.single("state")

        if self.error is not None:
            return self._error_redirect(self.error, state)

        try:
            state = validate_auth_request(self, params)
        except Exception as e:
            return self._error_redirect(coerce_error(e), state)

        logger.info(f"Issued authorization code to client {self.client_id}")
        return Request.with_params(
            self.redirect_uri,
            [("state", state), ("code", self.code), ("grant_type", "authorization_code")],
        )

    def token(self, request: Request) -> Response:
        """Handle a token request, answering with token or error JSON."""
        params = request.params()

        if self.error is not None:
            return self._error_response(self.error)

        try:
            validate_token_request(self, params)
            token = build_token(self, params)
        except Exception as e:
            return self._error_response(coerce_error(e))

        logger.info(f"Issued access token to client {self.client_id}")
        return Response(body=token.to_json())

    def route(self, request: Request) -> Request | Response:
        """Dispatch on the request path."""
        path = request.path
        if path == "/auth":
            return self.auth(request)
        if path == "/token":
            return self.token(request)
        logger.warning(f"No route for path {path}")
        return Response(
            body=UnknownError("404: Route not found").to_response_body(),
            status_code=404,
        )

    def _error_redirect(self, error: OAuth2Error, state: str | None) -> Request:
        logger.warning(
            f"Rejected authorization request: {error.error_code} - {error.description}"
        )
        return Request.with_params(self.redirect_uri, error.to_redirect_params(state))

    def _error_response(self, error: OAuth2Error) -> Response:
        logger.warning(
            f"Rejected token request: {error.error_code} - {error.description}"
        )
        return Response(body=error.to_response_body(), status_code=status_for(error))
