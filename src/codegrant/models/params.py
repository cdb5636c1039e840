"""Query parameter value model for OAuth 2.0 requests and redirects.

OAuth parameters may legally appear once (``client_id``, ``state``) or many
times (``scope`` when sent as repeated keys). The model keeps that distinction
instead of flattening every value into a list, so callers can reject a
parameter that was repeated where the RFC requires a single value.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterable, Iterator
from urllib.parse import parse_qsl, urlencode, urlparse


@dataclass(frozen=True)
class ParamValue(ABC):
    """Base for the two parameter value variants."""

    @abstractmethod
    def values(self) -> list[str]:
        raise NotImplementedError

    def is_single(self) -> bool:
        return isinstance(self, Single)

    def is_multi(self) -> bool:
        return isinstance(self, Multi)


@dataclass(frozen=True)
class Single(ParamValue):
    """A parameter that appeared exactly once."""

    value: str

    def values(self) -> list[str]:
        return [self.value]


@dataclass(frozen=True)
class Multi(ParamValue):
    """A parameter that appeared more than once, in arrival order."""

    items: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "items", tuple(self.items))

    def values(self) -> list[str]:
        return list(self.items)


def single(value: ParamValue | None) -> str | None:
    """Return the text of a ``Single`` value, or None for anything else."""
    if isinstance(value, Single):
        return value.value
    return None


def multi(value: ParamValue | None) -> list[str] | None:
    """Return the items of a ``Multi`` value, or None for anything else."""
    if isinstance(value, Multi):
        return list(value.items)
    return None


class QueryParams:
    """Mapping of unique parameter names to ``ParamValue``.

    Key order follows first appearance. Iterating yields the flattened
    ``(key, value)`` pairs, expanding ``Multi`` back into repeated pairs.
    """

    def __init__(self, values: dict[str, ParamValue] | None = None):
        self._values: dict[str, ParamValue] = dict(values or {})

    @classmethod
    def from_pairs(cls, pairs: Iterable[tuple[str, str]]) -> QueryParams:
        """Build from ordered pairs, collapsing repeated keys into ``Multi``."""
        values: dict[str, ParamValue] = {}
        for key, value in pairs:
            current = values.get(key)
            if current is None:
                values[key] = Single(value)
            else:
                values[key] = Multi(current.values() + [value])
        return cls(values)

    @classmethod
    def from_query(cls, query: str) -> QueryParams:
        """Build from a raw ``application/x-www-form-urlencoded`` string."""
        return cls.from_pairs(parse_qsl(query, keep_blank_values=True))

    @classmethod
    def from_url(cls, url: str) -> QueryParams:
        """Build from the query component of a URL."""
        return cls.from_query(urlparse(url).query)

    def get(self, name: str) -> ParamValue | None:
        return self._values.get(name)

    def single(self, name: str) -> str | None:
        """Shortcut for ``single(self.get(name))``."""
        return single(self.get(name))

    def to_query(self) -> str:
        return urlencode(list(self))

    def is_empty(self) -> bool:
        return not self._values

    def __getitem__(self, name: str) -> ParamValue:
        return self._values[name]

    def __contains__(self, name: object) -> bool:
        return name in self._values

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[tuple[str, str]]:
        for key, value in self._values.items():
            for item in value.values():
                yield key, item

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, QueryParams):
            return NotImplemented
        return self._values == other._values

    def __repr__(self) -> str:
        return f"QueryParams({self._values!r})"
