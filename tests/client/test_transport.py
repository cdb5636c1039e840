"""Tests for the httpx transport, including a full flow over HTTP."""

import httpx
import pytest
from starlette.testclient import TestClient

from codegrant.client.authenticator import Authenticator
from codegrant.client.oauth_client import Client
from codegrant.client.storage import MemoryStorage
from codegrant.client.transport import HttpTransport
from codegrant.models.errors import UnauthorizedClientError, UnknownError
from codegrant.models.messages import Request
from codegrant.server.app import create_app
from codegrant.server.authorization_server import AuthorizationServer


def failing_client() -> httpx.Client:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    return httpx.Client(transport=httpx.MockTransport(handler))


class TestHttpTransport:
    def test_exchange_posts_form_body(self):
        # Arrange
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"access_token": "t", "token_type": "bearer"})

        transport = HttpTransport(httpx.Client(transport=httpx.MockTransport(handler)))

        # Act
        response = transport.exchange(
            Request(url="https://auth.example.com/token", body="grant_type=authorization_code")
        )

        # Assert
        assert response.status_code == 200
        assert seen[0].method == "POST"
        assert seen[0].content == b"grant_type=authorization_code"
        assert seen[0].headers["Content-Type"] == "application/x-www-form-urlencoded"
        assert seen[0].headers["Accept"] == "application/json"

    def test_network_errors_become_unknown(self):
        with HttpTransport(failing_client()) as transport:
            with pytest.raises(UnknownError):
                transport.exchange(Request(url="https://auth.example.com/token"))
            with pytest.raises(UnknownError):
                transport.authorize(Request(url="https://auth.example.com/auth"))

    def test_authorize_requires_a_redirect(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="login page")

        transport = HttpTransport(httpx.Client(transport=httpx.MockTransport(handler)))

        with pytest.raises(UnknownError):
            transport.authorize(Request(url="https://auth.example.com/auth"))


class TestFlowOverHttp:
    def setup_method(self):
        self.storage = MemoryStorage()
        self.auth = Authenticator(
            client_id="someid@example.com",
            auth_uri="http://testserver/auth",
            token_uri="http://testserver/token",
        )

    def transport(self, server: AuthorizationServer) -> HttpTransport:
        return HttpTransport(TestClient(create_app(server)))

    def test_complete_authorization_code_flow(self):
        # Arrange
        server = AuthorizationServer().with_scope(["api.example.com/user.profile"])
        client = Client(
            auth=self.auth,
            redirect_uri="https://localhost:8080/oauth/example",
            scope=["api.example.com/user.profile"],
            state="FLOW_STATE",
        )

        # Act
        with self.transport(server) as transport:
            redirect = transport.authorize(client.get_user_auth_request(self.storage))
            authorized = Client.handle_auth_redirect(redirect, self.storage)
            response = transport.exchange(authorized.get_access_token_request())
            authenticated = authorized.handle_token_response(response, self.storage)

        # Assert
        assert authorized.code == "MOCK_CODE"
        assert authenticated.token.access_token == "TU9DS19UT0tFTg=="
        assert authenticated.token.scope == ["api.example.com/user.profile"]
        assert len(self.storage) == 0

    def test_rejected_client_surfaces_typed_error(self):
        client = Client(
            auth=self.auth.model_copy(update={"client_id": "example.com"}),
            redirect_uri="https://localhost:8080/oauth/example",
            state="FLOW_STATE",
        )

        with self.transport(AuthorizationServer()) as transport:
            redirect = transport.authorize(client.get_user_auth_request(self.storage))

        with pytest.raises(UnauthorizedClientError):
            Client.handle_auth_redirect(redirect, self.storage)
        assert not self.storage.has("FLOW_STATE")
