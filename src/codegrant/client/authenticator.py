"""Client identity registered with the authorization server."""

from __future__ import annotations

from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, field_validator


class Authenticator(BaseModel):
    """Client credentials and the two endpoints of RFC 6749 Section 3.

    ``client_secret`` is only ever sent to the token endpoint, and only
    when it is set.
    """

    model_config = ConfigDict(frozen=True)

    client_id: str
    client_secret: str | None = None
    auth_uri: str = "http://localhost/auth"
    token_uri: str = "http://localhost/token"

    @field_validator("auth_uri", "token_uri")
    @classmethod
    def validate_absolute_url(cls, v: str) -> str:
        parsed = urlparse(v)
        if not parsed.scheme or not parsed.netloc:
            raise ValueError(f"Endpoint must be an absolute URL: {v!r}")
        return v

    @field_validator("client_secret", mode="before")
    @classmethod
    def blank_secret_is_none(cls, v: str | None) -> str | None:
        return v or None

    def with_secret(self, secret: str) -> Authenticator:
        return self.model_copy(update={"client_secret": secret or None})

    def with_no_secret(self) -> Authenticator:
        return self.model_copy(update={"client_secret": None})

    def get_auth_params(self) -> list[tuple[str, str]]:
        """Identity parameters for the authorization endpoint."""
        return [("client_id", self.client_id)]

    def get_token_params(self) -> list[tuple[str, str]]:
        """Identity parameters for the token endpoint."""
        params = [("client_id", self.client_id)]
        if self.client_secret:
            params.append(("client_secret", self.client_secret))
        return params
