"""OAuth 2.0 authorization code grant client (RFC 6749 Section 4.1).

A ``Client`` is an immutable protocol session. Each step of the flow either
returns the next request to send or a new ``Client`` advanced to the next
state:

    Unauthenticated -> get_user_auth_request()    -> AuthRequested
    AuthRequested   -> handle_auth_redirect()     -> Authorized (has code)
    Authorized      -> get_access_token_request() -> TokenRequested
    TokenRequested  -> handle_token_response()    -> Authenticated (has token)

Failures are raised as ``OAuth2Error`` subclasses only.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass, replace
from enum import Enum
from typing import Iterable, Iterator
from urllib.parse import urlencode

from pydantic import ValidationError

from codegrant.client.authenticator import Authenticator
from codegrant.client.security import validate_state
from codegrant.client.storage import ClientStorage, StorageKeyError
from codegrant.models.errors import (
    InvalidGrantError,
    InvalidRequestError,
    OAuth2Error,
    UnknownError,
    UnsupportedGrantTypeError,
    error_from_body,
    error_from_params,
)
from codegrant.models.messages import Request, Response
from codegrant.models.params import QueryParams
from codegrant.models.tokens import AccessToken, TokenResponse

logger = logging.getLogger(__name__)

GRANT_TYPE = "authorization_code"


class AccessType(Enum):
    """How the client obtains its access token.

    Only ``GRANT`` (authorization code) is implemented.
    """

    GRANT = "grant"
    IMPLICIT = "implicit"

    @property
    def response_type(self) -> str:
        return "code" if self is AccessType.GRANT else "token"


@contextmanager
def storage_errors(action: str) -> Iterator[None]:
    """Coerce unexpected storage faults into ``UnknownError``."""
    try:
        yield
    except (OAuth2Error, StorageKeyError):
        raise
    except Exception as e:
        raise UnknownError(f"Storage failed to {action}: {e}") from e


def require_single(params: QueryParams, name: str) -> str:
    """Return the single value of ``name`` or raise ``InvalidRequestError``."""
    value = params.get(name)
    if value is None:
        raise InvalidRequestError(f"Bad Request: Missing `{name}`")
    if not value.is_single():
        raise InvalidRequestError(f"Bad Request: Expected a single `{name}`")
    return value.values()[0]


@dataclass(frozen=True)
class Client:
    """Authorization code grant session for one authorization attempt.

    The whole snapshot is what gets stored under ``state`` while the user
    agent is away at the authorization server.
    """

    auth: Authenticator
    redirect_uri: str
    scope: tuple[str, ...] = ()
    access_type: AccessType = AccessType.GRANT
    state: str | None = None
    code: str | None = None
    token: AccessToken | None = None

    def __post_init__(self) -> None:
        if isinstance(self.scope, str):
            raise TypeError("scope must be a sequence of scope values, not a str")
        object.__setattr__(self, "scope", tuple(self.scope))

    @property
    def is_authenticated(self) -> bool:
        return self.token is not None

    def with_state(self, state: str | None) -> Client:
        return replace(self, state=state)

    def with_code(self, code: str | None) -> Client:
        return replace(self, code=code)

    def with_scope(self, scope: Iterable[str]) -> Client:
        return replace(self, scope=scope)

    def with_token(self, token: AccessToken | None) -> Client:
        return replace(self, token=token)

    def get_user_auth_request(self, storage: ClientStorage[Client]) -> Request:
        """Build the authorization request (RFC 6749 Section 4.1.1).

        When a state is attached, this snapshot is stored under it before
        the request is returned. Without one, storage is never touched.

        Raises:
            UnsupportedGrantTypeError: For any access type other than GRANT
            UnknownError: If storage fails
        """
        if self.access_type is not AccessType.GRANT:
            raise UnsupportedGrantTypeError(
                f"Access type `{self.access_type.value}` is not implemented"
            )

        params = [("response_type", self.access_type.response_type)]
        params.extend(self.auth.get_auth_params())
        params.append(("redirect_uri", self.redirect_uri))
        if self.scope:
            params.append(("scope", " ".join(self.scope)))

        if self.state is not None:
            params.append(("state", self.state))
            with storage_errors("store pending client"):
                storage.set(self.state, self)

        request = Request.with_params(self.auth.auth_uri, params)
        logger.info(f"Built authorization request for client {self.auth.client_id}")
        return request

    @classmethod
    def handle_auth_redirect(
        cls, request: Request, storage: ClientStorage[Client]
    ) -> Client:
        """Consume the authorization redirect (RFC 6749 Section 4.1.2).

        The pending client is dropped from storage, so replaying the same
        redirect fails.

        Raises:
            InvalidRequestError: If grant_type, state or code is missing,
                repeated, or names an unsupported grant
            InvalidGrantError: If no pending client is stored for the state
            OAuth2Error: The error the authorization server redirected with
        """
        params = request.query_params()

        redirect_error = error_from_params(params)
        if redirect_error is not None:
            state = params.single("state")
            if state is not None:
                cls._discard_pending(storage, state)
            logger.warning(
                f"Authorization redirect carried error: {redirect_error.error_code}"
                f" - {redirect_error.description}"
            )
            raise redirect_error

        grant_type = require_single(params, "grant_type")
        if grant_type != GRANT_TYPE:
            raise InvalidRequestError(
                f"Bad Request: Unsupported grant_type `{grant_type}`"
            )

        state = require_single(params, "state")
        try:
            with storage_errors("consume pending client"):
                client = storage.drop(state)
        except StorageKeyError as e:
            logger.warning("Authorization redirect with unknown or consumed state")
            raise InvalidGrantError(
                "Bad Request: No pending authorization for `state`"
            ) from e

        code = require_single(params, "code")
        logger.info(f"Received authorization code for client {client.auth.client_id}")
        return client.with_code(code)

    def get_access_token_request(self) -> Request:
        """Build the access token request (RFC 6749 Section 4.1.3).

        Raises:
            InvalidRequestError: If no authorization code has been granted
        """
        if self.code is None:
            raise InvalidRequestError("Missing authorization code")

        params = [
            ("grant_type", GRANT_TYPE),
            ("code", self.code),
            ("redirect_uri", self.redirect_uri),
        ]
        params.extend(self.auth.get_token_params())

        logger.debug(
            f"Token request: grant_type={GRANT_TYPE}, client_id={self.auth.client_id}, "
            f"client_secret={'set' if self.auth.client_secret else 'none'}"
        )
        return Request(url=self.auth.token_uri, body=urlencode(params))

    def handle_token_response(
        self, response: Response, storage: ClientStorage[Client]
    ) -> Client:
        """Consume the access token response (RFC 6749 Section 4.1.4).

        Any entry still pending under this client's state is discarded, so a
        late redirect can no longer resume an authenticated session.

        Raises:
            OAuth2Error: The error returned by the token endpoint
            InvalidGrantError: If the echoed state does not match
            UnknownError: If the body is not a token response
        """
        token_error = error_from_body(response.body)
        if token_error is not None:
            logger.warning(
                f"Token endpoint returned error: {token_error.error_code}"
                f" - {token_error.description}"
            )
            raise token_error

        if not response.is_success():
            raise UnknownError(
                f"Token endpoint returned status {response.status_code}"
            )

        try:
            token = TokenResponse.model_validate_json(response.body)
        except ValidationError as e:
            raise UnknownError(f"Invalid token response format: {e}") from e

        if token.state is not None and self.state is not None:
            validate_state(self.state, token.state)

        if self.state is not None:
            self._discard_pending(storage, self.state)

        logger.info(f"Token exchange successful for client {self.auth.client_id}")
        return self.with_token(token)

    @staticmethod
    def _discard_pending(storage: ClientStorage[Client], state: str) -> None:
        try:
            with storage_errors("discard pending client"):
                storage.drop(state)
        except StorageKeyError:
            logger.debug("No pending client left to discard")
