"""Pending authorization state storage.

Client snapshots are stored under the CSRF ``state`` they were issued with.
``drop`` is the only way a redirect may consume an entry, so each issued
state can authorize at most one redirect.
"""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Generic, Iterator, TypeVar

from codegrant.models.errors import UnknownError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class StorageKeyError(LookupError):
    """Raised when no value is stored under the requested key."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"No client stored for lookup {key!r}")


class ClientStorage(ABC, Generic[T]):
    """Key/value store for client snapshots awaiting a redirect."""

    @abstractmethod
    def set(self, key: str, value: T) -> T | None:
        """Store ``value``, returning whatever it replaced."""
        ...

    @abstractmethod
    def get(self, key: str) -> T:
        """Return the value without removing it.

        Raises:
            StorageKeyError: If nothing is stored under ``key``
        """
        ...

    @abstractmethod
    def drop(self, key: str) -> T:
        """Remove and return the value.

        Raises:
            StorageKeyError: If nothing is stored under ``key``
        """
        ...

    @abstractmethod
    def has(self, key: str) -> bool: ...


class ReadWriteLock:
    """Many concurrent readers or a single writer."""

    def __init__(self) -> None:
        self._condition = threading.Condition(threading.Lock())
        self._readers = 0
        self._writing = False

    @contextmanager
    def read(self, timeout: float | None = None) -> Iterator[None]:
        with self._condition:
            if not self._condition.wait_for(lambda: not self._writing, timeout):
                raise UnknownError("Timed out waiting for storage read lock")
            self._readers += 1
        try:
            yield
        finally:
            with self._condition:
                self._readers -= 1
                if self._readers == 0:
                    self._condition.notify_all()

    @contextmanager
    def write(self, timeout: float | None = None) -> Iterator[None]:
        with self._condition:
            ready = self._condition.wait_for(
                lambda: not self._writing and self._readers == 0, timeout
            )
            if not ready:
                raise UnknownError("Timed out waiting for storage write lock")
            self._writing = True
        try:
            yield
        finally:
            with self._condition:
                self._writing = False
                self._condition.notify_all()


class MemoryStorage(ClientStorage[T]):
    """In-process storage guarded by a read/write lock.

    Args:
        lock_timeout: Seconds to wait for the lock before failing with
            ``UnknownError``. None waits forever.
    """

    def __init__(self, lock_timeout: float | None = 5.0):
        self._entries: dict[str, T] = {}
        self._lock = ReadWriteLock()
        self.lock_timeout = lock_timeout

    def set(self, key: str, value: T) -> T | None:
        with self._lock.write(self.lock_timeout):
            previous = self._entries.get(key)
            self._entries[key] = value
        if previous is not None:
            logger.warning("Replaced a pending client stored under the same state")
        return previous

    def get(self, key: str) -> T:
        with self._lock.read(self.lock_timeout):
            try:
                return self._entries[key]
            except KeyError:
                raise StorageKeyError(key) from None

    def drop(self, key: str) -> T:
        with self._lock.write(self.lock_timeout):
            try:
                value = self._entries.pop(key)
            except KeyError:
                raise StorageKeyError(key) from None
        logger.debug("Consumed a pending client")
        return value

    def has(self, key: str) -> bool:
        with self._lock.read(self.lock_timeout):
            return key in self._entries

    def __len__(self) -> int:
        with self._lock.read(self.lock_timeout):
            return len(self._entries)
