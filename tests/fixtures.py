"""
Test Doubles for Container Tests

A small application domain (loggers, connections, repositories, mailers)
used to exercise binding, resolution and protection.
"""

import time
from abc import ABC, abstractmethod
from typing import List, Optional, Protocol


class Logger(ABC):
    """Interface for loggers"""

    @abstractmethod
    def log(self, message: str) -> None:
        pass


class FileLogger(Logger):
    def __init__(self, path: str = "app.log"):
        self.path = path
        self.lines: List[str] = []

    def log(self, message: str) -> None:
        self.lines.append(message)


class NullLogger(Logger):
    def __init__(self):
        pass

    def log(self, message: str) -> None:
        pass


class Connection:
    def __init__(self, dsn: str = "sqlite:///:memory:"):
        self.dsn = dsn


class Cache:
    def __init__(self):
        self.entries = {}


class Repository(ABC):
    """Interface for repositories"""

    @abstractmethod
    def find(self, key: str):
        pass


class SqlRepository(Repository):
    def __init__(self, connection: Connection, table: str = "items"):
        self.connection = connection
        self.table = table

    def find(self, key: str):
        return None


class CachedRepository(Repository):
    def __init__(self, connection: Connection, cache: Optional[Cache] = None):
        self.connection = connection
        self.cache = cache

    def find(self, key: str):
        return None if self.cache is None else self.cache.entries.get(key)


def build_repository(connection: Connection, table: str = "items") -> Repository:
    return SqlRepository(connection, table)


class Clock(Protocol):
    def now(self) -> float:
        ...


class FixedClock:
    def __init__(self, value: float = 0.0):
        self.value = value

    def now(self) -> float:
        return self.value


class Mailer:
    def __init__(self, host: str, port: int = 25, *, use_tls: bool = False):
        self.host = host
        self.port = port
        self.use_tls = use_tls


class Plugin:
    def __init__(self, name: str = "plugin", *extras, **options):
        self.name = name
        self.extras = extras
        self.options = options


class Greeter:
    def __init__(self, name):
        self.name = name


class Outer:
    class Inner:
        def __init__(self):
            pass


# Construction order tracking for lazy resolution tests
constructed: List[str] = []


class First:
    def __init__(self):
        constructed.append("first")


class Third:
    def __init__(self):
        constructed.append("third")


class Pipeline:
    def __init__(self, first: First, label: str, third: Third):
        self.first = first
        self.label = label
        self.third = third


class SlowResource:
    instances = 0

    def __init__(self):
        time.sleep(0.05)
        SlowResource.instances += 1
