"""Transport-neutral request and response values exchanged by the flow."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable
from urllib.parse import urlencode, urlparse

from codegrant.models.params import QueryParams


@dataclass(frozen=True)
class Request:
    """A URL plus an optional form-encoded body.

    Authorization requests and redirects carry their parameters in the URL
    query; token requests carry them in ``body``.
    """

    url: str
    body: str = ""

    @classmethod
    def with_params(
        cls, base_url: str, params: Iterable[tuple[str, str]], body: str = ""
    ) -> Request:
        """Build a request by appending encoded params to ``base_url``."""
        query = urlencode(list(params))
        if not query:
            return cls(url=base_url, body=body)
        separator = "&" if urlparse(base_url).query else "?"
        return cls(url=f"{base_url}{separator}{query}", body=body)

    @property
    def path(self) -> str:
        return urlparse(self.url).path

    def query_params(self) -> QueryParams:
        return QueryParams.from_url(self.url)

    def form_params(self) -> QueryParams:
        return QueryParams.from_query(self.body)

    def params(self) -> QueryParams:
        """Query and form parameters combined, query first."""
        return QueryParams.from_pairs(
            list(self.query_params()) + list(self.form_params())
        )


@dataclass(frozen=True)
class Response:
    """A JSON body returned by the token endpoint."""

    body: str
    status_code: int = 200

    def is_success(self) -> bool:
        return 200 <= self.status_code < 300
