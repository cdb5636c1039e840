"""Request validation for the reference authorization server endpoints.

These functions raise ``OAuth2Error`` on the first failed check. The
server turns the raised error into a redirect or a JSON error body.
"""

from __future__ import annotations

from typing import TYPE_CHECKING
from urllib.parse import urlencode

from codegrant.models.errors import (
    InvalidClientError,
    InvalidGrantError,
    InvalidRequestError,
    InvalidScopeError,
    UnauthorizedClientError,
    UnsupportedGrantTypeError,
)
from codegrant.models.params import QueryParams
from codegrant.models.tokens import MOCK_TOKEN, TokenResponse

if TYPE_CHECKING:
    from codegrant.server.authorization_server import AuthorizationServer

SCOPE_DOCS_URI = "https://docs.example.com/scopes"


def single_param(params: QueryParams, name: str) -> str:
    value = params.single(name)
    if value is None:
        raise InvalidRequestError(f"Bad Request: Missing `{name}`")
    return value


def validate_auth_request(server: AuthorizationServer, params: QueryParams) -> str:
    """Validate an authorization request (RFC 6749 Section 4.1.1).

    Returns:
        The request's state
    """
    state = single_param(params, "state")

    client_id = single_param(params, "client_id")
    if client_id != server.client_id:
        raise UnauthorizedClientError("Unauthorized: Client Not Authorized")

    redirect_uri = params.get("redirect_uri")
    if redirect_uri is None:
        if server.redirect_uri_required:
            raise InvalidRequestError("Bad Request: Missing `redirect_uri`")
    elif params.single("redirect_uri") != server.redirect_uri:
        raise InvalidRequestError("Bad Request: Redirect Uri does not match valid uri")

    response_type = params.get("response_type")
    if response_type is not None and params.single("response_type") != "code":
        raise InvalidRequestError("Bad Request: Unsupported `response_type`")

    scope = params.get("scope")
    if scope is not None:
        for value in scope.values():
            for item in value.split():
                if item not in server.valid_scopes:
                    query = urlencode({"invalid_scope": item}, safe="/")
                    raise InvalidScopeError(None, f"{SCOPE_DOCS_URI}?{query}")

    return state


def validate_token_request(server: AuthorizationServer, params: QueryParams) -> None:
    """Validate an access token request (RFC 6749 Section 4.1.3)."""
    grant_type = params.get("grant_type")
    if grant_type is None:
        raise InvalidRequestError("Bad Request: Missing `grant_type`")
    if params.single("grant_type") != "authorization_code":
        raise UnsupportedGrantTypeError(
            "Unsupported: Only `authorization_code` is supported"
        )

    code = single_param(params, "code")
    if code != server.code:
        raise InvalidGrantError("Invalid Grant: Authorization code is not valid")

    client_id = params.get("client_id")
    if client_id is not None and params.single("client_id") != server.client_id:
        raise InvalidClientError("Unauthorized: Unknown client")


def build_token(server: AuthorizationServer, params: QueryParams) -> TokenResponse:
    """Shape the token response from the server's token options."""
    token = TokenResponse(access_token=MOCK_TOKEN, token_type="bearer")
    options = server.token_options

    if options.expiration is not None:
        token = token.with_expiration(options.expiration)
    if options.scope:
        token = token.with_scope(options.scope)

    state = options.state if options.state is not None else params.single("state")
    if state is not None:
        token = token.with_state(state)
    return token
