"""Token endpoint wire bodies for the authorization code grant.

Both the success body (RFC 6749 Section 5.1) and the error body
(Section 5.2) are pydantic models so the client and the reference server
share one JSON shape.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

MOCK_TOKEN = "TU9DS19UT0tFTg=="


class TokenResponse(BaseModel):
    """Successful access token response.

    ``scope`` is carried as a list of granted scope identifiers.
    """

    model_config = ConfigDict(frozen=True)

    access_token: str
    token_type: str
    expires_in: int | None = None
    scope: list[str] | None = None
    state: str | None = None

    def with_expiration(self, expiration: int) -> TokenResponse:
        return self.model_copy(update={"expires_in": expiration})

    def with_scope(self, scope: list[str]) -> TokenResponse:
        return self.model_copy(update={"scope": list(scope)})

    def with_state(self, state: str) -> TokenResponse:
        return self.model_copy(update={"state": state})

    def to_json(self) -> str:
        return self.model_dump_json(exclude_none=True)


class ErrorResponse(BaseModel):
    """Error body returned by the token endpoint."""

    model_config = ConfigDict(frozen=True)

    error: str
    error_description: str | None = None
    error_uri: str | None = None
    state: str | None = None

    def to_json(self) -> str:
        return self.model_dump_json(exclude_none=True)


# Access tokens held by an authenticated client share the response shape.
AccessToken = TokenResponse
