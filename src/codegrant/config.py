"""Environment configuration for bootstrapping an authorization code client."""

from __future__ import annotations

import logging
import os
from functools import lru_cache
from typing import Any, ClassVar

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field

from codegrant.client.authenticator import Authenticator
from codegrant.client.oauth_client import Client
from codegrant.client.security import generate_state

# Ensure .env values are loaded before settings initialisation.
load_dotenv()


class ClientSettings(BaseModel):
    """Client settings loaded from ``EXAMPLE_OAUTH2_*`` environment variables."""

    ENV_PREFIX: ClassVar[str] = "EXAMPLE_OAUTH2_"

    model_config = ConfigDict(extra="ignore")

    client_id: str = Field(default="someid@example.com", description="Registered client id.")
    client_secret: str | None = Field(
        default=None, description="Client secret sent to the token endpoint."
    )
    auth_uri: str = Field(
        default="http://localhost/auth", description="Authorization endpoint URL."
    )
    token_uri: str = Field(default="http://localhost/token", description="Token endpoint URL.")
    redirect_uri: str = Field(
        default="https://localhost:8080/oauth/example",
        description="Callback URL registered with the authorization server.",
    )
    scope: str = Field(default="", description="Space separated scopes to request.")
    log_level: str = Field(default="INFO", description="Python logging level.")

    def __init__(self, **data: Any) -> None:
        env_values = type(self)._load_environment_values()
        env_values.update(data)
        super().__init__(**env_values)

    @classmethod
    def _load_environment_values(cls) -> dict[str, Any]:
        """Return field values sourced from the current environment."""
        values: dict[str, Any] = {}
        for field_name in cls.model_fields:
            env_key = f"{cls.ENV_PREFIX}{field_name.upper()}"
            if env_key in os.environ:
                values[field_name] = os.environ[env_key]
        return values

    @property
    def scopes(self) -> list[str]:
        return self.scope.split()

    def authenticator(self) -> Authenticator:
        return Authenticator(
            client_id=self.client_id,
            client_secret=self.client_secret,
            auth_uri=self.auth_uri,
            token_uri=self.token_uri,
        )

    def client(self, with_state: bool = True) -> Client:
        """Build a fresh client session, with a random state by default."""
        client = Client(
            auth=self.authenticator(),
            redirect_uri=self.redirect_uri,
            scope=tuple(self.scopes),
        )
        if with_state:
            client = client.with_state(generate_state())
        return client


@lru_cache(maxsize=1)
def get_settings() -> ClientSettings:
    """Return a singleton instance of :class:`ClientSettings`."""
    return ClientSettings()


def configure_logging(level: str | None = None) -> None:
    """Configure root logging from settings.

    The root level is applied even when handlers are already installed.
    """
    level_name = (level or get_settings().log_level).upper()
    logging.basicConfig(format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    logging.getLogger().setLevel(level_name)


__all__ = ["ClientSettings", "configure_logging", "get_settings"]
