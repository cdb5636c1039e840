"""Exception hierarchy for OAuth 2.0 authorization code grant errors.

Every failure that crosses the network boundary is one of the RFC 6749
Section 4.1.2.1 / 5.2 error kinds, or ``UnknownError`` (wire code
``server_error``) for anything internal. Each exception renders itself as
redirect query pairs or as a token endpoint JSON body.
"""

from __future__ import annotations

import json
import logging

from pydantic import ValidationError

from codegrant.models.params import QueryParams
from codegrant.models.tokens import ErrorResponse

logger = logging.getLogger(__name__)


class OAuth2Error(Exception):
    """Base exception for all OAuth 2.0 protocol errors."""

    error_code = "server_error"

    def __init__(self, description: str | None = None, uri: str | None = None):
        self.description = description
        self.uri = uri
        super().__init__(description or self.error_code)

    def to_error_response(self, state: str | None = None) -> ErrorResponse:
        return ErrorResponse(
            error=self.error_code,
            error_description=self.description,
            error_uri=self.uri,
            state=state,
        )

    def to_redirect_params(self, state: str | None = None) -> list[tuple[str, str]]:
        """Render as ordered redirect query pairs, omitting absent fields."""
        params = [("error", self.error_code)]
        if self.description is not None:
            params.append(("error_description", self.description))
        if self.uri is not None:
            params.append(("error_uri", self.uri))
        if state is not None:
            params.append(("state", state))
        return params

    def to_response_body(self, state: str | None = None) -> str:
        """Render as the token endpoint JSON error body."""
        return self.to_error_response(state).to_json()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, OAuth2Error):
            return NotImplemented
        return (
            type(self) is type(other)
            and self.description == other.description
            and self.uri == other.uri
        )

    def __hash__(self) -> int:
        return hash((type(self), self.description, self.uri))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.description!r}, {self.uri!r})"


class InvalidRequestError(OAuth2Error):
    """Missing, repeated or malformed request parameter."""

    error_code = "invalid_request"


class InvalidClientError(OAuth2Error):
    """Client authentication failed."""

    error_code = "invalid_client"


class InvalidGrantError(OAuth2Error):
    """Authorization grant is invalid, expired, revoked or already used."""

    error_code = "invalid_grant"


class UnauthorizedClientError(OAuth2Error):
    """Client is not authorized to use this grant."""

    error_code = "unauthorized_client"


class UnsupportedGrantTypeError(OAuth2Error):
    """Grant type is not supported."""

    error_code = "unsupported_grant_type"


class InvalidScopeError(OAuth2Error):
    """Requested scope is invalid, unknown or malformed."""

    error_code = "invalid_scope"


class UnknownError(OAuth2Error):
    """Catch-all for internal failures, sent as ``server_error``."""

    error_code = "server_error"

    def __init__(self, message: str):
        super().__init__(message, None)

    @property
    def message(self) -> str:
        return self.description or ""


ERROR_KINDS: dict[str, type[OAuth2Error]] = {
    cls.error_code: cls
    for cls in (
        InvalidRequestError,
        InvalidClientError,
        InvalidGrantError,
        UnauthorizedClientError,
        UnsupportedGrantTypeError,
        InvalidScopeError,
    )
}


def error_from_fields(
    error: str, description: str | None = None, uri: str | None = None
) -> OAuth2Error:
    """Rebuild the exception matching a received wire error code."""
    kind = ERROR_KINDS.get(error)
    if kind is None:
        return UnknownError(description or error)
    return kind(description, uri)


def error_from_params(params: QueryParams) -> OAuth2Error | None:
    """Return the error carried by a redirect, or None if it carries none."""
    error = params.single("error")
    if error is None:
        if "error" in params:
            return InvalidRequestError("Bad Request: Repeated `error`")
        return None
    return error_from_fields(
        error, params.single("error_description"), params.single("error_uri")
    )


def error_from_body(body: str) -> OAuth2Error | None:
    """Return the error carried by a token endpoint body, or None."""
    try:
        data = json.loads(body)
    except ValueError:
        return None
    if not isinstance(data, dict) or "error" not in data:
        return None
    try:
        response = ErrorResponse.model_validate(data)
    except ValidationError as e:
        return UnknownError(f"Malformed error response: {e}")
    return error_from_fields(
        response.error, response.error_description, response.error_uri
    )


def coerce_error(exc: Exception) -> OAuth2Error:
    """Map any exception onto the taxonomy before it leaves the process."""
    if isinstance(exc, OAuth2Error):
        return exc
    logger.error(f"Coercing internal error to server_error: {exc!r}")
    return UnknownError(str(exc) or type(exc).__name__)
