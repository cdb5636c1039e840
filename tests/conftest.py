import pytest

from codegrant.client.authenticator import Authenticator
from codegrant.client.oauth_client import Client
from codegrant.client.storage import MemoryStorage
from codegrant.server.authorization_server import AuthorizationServer

CLIENT_ID = "someid@example.com"
REDIRECT_URI = "https://localhost:8080/oauth/example"
SCOPES = ("api.example.com/user.profile", "api.example.com/add_item")


@pytest.fixture
def authenticator() -> Authenticator:
    return Authenticator(
        client_id=CLIENT_ID,
        auth_uri="http://example.com/auth",
        token_uri="http://example.com/token",
    )


@pytest.fixture
def client(authenticator: Authenticator) -> Client:
    return Client(auth=authenticator, redirect_uri=REDIRECT_URI, scope=SCOPES)


@pytest.fixture
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def server() -> AuthorizationServer:
    return AuthorizationServer()
