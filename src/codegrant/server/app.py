"""Starlette application exposing the reference authorization server."""

from __future__ import annotations

import logging

from starlette.applications import Starlette
from starlette.exceptions import HTTPException
from starlette.requests import Request as HttpRequest
from starlette.responses import RedirectResponse, Response
from starlette.routing import Route

from codegrant.models.errors import UnknownError
from codegrant.models.messages import Request
from codegrant.server.authorization_server import AuthorizationServer

logger = logging.getLogger(__name__)

JSON_MEDIA_TYPE = "application/json"


def create_app(server: AuthorizationServer | None = None) -> Starlette:
    """Build an ASGI app serving ``/auth`` and ``/token``."""
    server = server or AuthorizationServer()

    async def handle_auth(request: HttpRequest) -> Response:
        redirect = server.auth(Request(url=str(request.url)))
        return RedirectResponse(redirect.url, status_code=302)

    async def handle_token(request: HttpRequest) -> Response:
        body = (await request.body()).decode("utf-8", errors="replace")
        response = server.token(Request(url=str(request.url), body=body))
        return Response(
            response.body,
            status_code=response.status_code,
            media_type=JSON_MEDIA_TYPE,
        )

    async def handle_http_error(request: HttpRequest, exc: HTTPException) -> Response:
        logger.warning(
            f"Rejected {request.method} {request.url.path} with {exc.status_code}"
        )
        if exc.status_code == 404:
            error = UnknownError("404: Route not found")
        else:
            error = UnknownError(f"{exc.status_code}: {exc.detail}")
        return Response(
            error.to_response_body(),
            status_code=exc.status_code,
            headers=exc.headers,
            media_type=JSON_MEDIA_TYPE,
        )

    return Starlette(
        routes=[
            Route("/auth", handle_auth, methods=["GET"]),
            Route("/token", handle_token, methods=["POST"]),
        ],
        exception_handlers={HTTPException: handle_http_error},
    )
