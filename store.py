"""Key/value store abstraction and its in-memory implementation.

Business logic only talks to ``Store`` (get/put/delete/values/lock), so a
durable backend can replace ``InMemoryStore`` without touching the services.
"""
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Generic, Hashable, Optional, TypeVar

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


class Store(ABC, Generic[K, V]):
    @abstractmethod
    def get(self, key: K) -> Optional[V]:
        ...

    @abstractmethod
    def put(self, key: K, value: V) -> None:
        ...

    @abstractmethod
    def delete(self, key: K) -> bool:
        """Remove ``key``; return False if it was not there."""

    @abstractmethod
    def values(self) -> list[V]:
        ...

    @abstractmethod
    def lock(self, key: K) -> threading.RLock:
        """Exclusive lock serializing read-modify-write cycles on ``key``."""


class InMemoryStore(Store[K, V]):
    """Dict-backed store with one re-entrant lock per key."""

    def __init__(self) -> None:
        self._data: dict[K, V] = {}
        self._locks: dict[K, threading.RLock] = {}
        self._guard = threading.Lock()

    def get(self, key: K) -> Optional[V]:
        with self._guard:
            return self._data.get(key)

    def put(self, key: K, value: V) -> None:
        with self._guard:
            self._data[key] = value

    def delete(self, key: K) -> bool:
        with self._guard:
            self._locks.pop(key, None)
            return self._data.pop(key, None) is not None

    def values(self) -> list[V]:
        with self._guard:
            return list(self._data.values())

    def lock(self, key: K) -> threading.RLock:
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = threading.RLock()
            return lock

    def __len__(self) -> int:
        with self._guard:
            return len(self._data)


@dataclass
class Storage:
    """All state of one running application.

    ``users`` is keyed by user id, ``sessions`` by session token. The
    credentials lock makes the email-uniqueness check and the insert of a new
    user atomic.
    """
    users: Store = field(default_factory=InMemoryStore)
    sessions: Store = field(default_factory=InMemoryStore)
    credentials_lock: threading.Lock = field(default_factory=threading.Lock)
