"""
SQL parsing backends under comparison.

Each backend wraps one third-party parser behind the same two calls:
  is_valid(sql)  True when the parser finished without an error-level diagnostic
  parse(sql)     the parser's own result (None on rejection), used for timing

Libraries are imported lazily so a deployment only needs the parsers it
benchmarks; available_registry() holds whichever ones import.
"""

from __future__ import annotations

import importlib.util
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, Iterator, List, Optional, Sequence, Type


class Backend(ABC):
    key: str = ""
    label: str = ""
    color: str = "#999999"
    module: str = ""

    @classmethod
    def is_available(cls) -> bool:
        return importlib.util.find_spec(cls.module) is not None

    @abstractmethod
    def parse(self, sql: str) -> Any:
        ...

    def is_valid(self, sql: str) -> bool:
        return self.parse(sql) is not None

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.key!r})"


# Pantone-inspired colours: classic blue, living coral, greenery, ultra violet

class SqloxideBackend(Backend):
    """sqlparser-rs through its Python bindings"""

    key = "sqloxide"
    label = "sqloxide (sqlparser-rs)"
    color = "#0F4C81"
    module = "sqloxide"

    def parse(self, sql: str) -> Any:
        import sqloxide

        try:
            return sqloxide.parse_sql(sql=sql, dialect="postgres")
        except ValueError:
            return None


class PglastBackend(Backend):
    """PostgreSQL's own grammar via libpg_query"""

    key = "pglast"
    label = "pglast (libpg_query)"
    color = "#FF6F61"
    module = "pglast"

    def parse(self, sql: str) -> Any:
        from pglast import parser

        try:
            return parser.parse_sql(sql)
        except parser.ParseError:
            return None


class SqlglotBackend(Backend):
    key = "sqlglot"
    label = "sqlglot"
    color = "#88B04B"
    module = "sqlglot"

    def parse(self, sql: str) -> Any:
        import sqlglot
        from sqlglot.errors import SqlglotError

        try:
            return sqlglot.parse(sql, read="postgres")
        except SqlglotError:
            return None


class SqlparseBackend(Backend):
    """
    sqlparse never raises on bad input; the lexer marks text it cannot
    classify with the Error token type instead, which counts as rejection.
    """

    key = "sqlparse"
    label = "sqlparse"
    color = "#5F4B8B"
    module = "sqlparse"

    def parse(self, sql: str) -> Any:
        import sqlparse

        return sqlparse.parse(sql)

    def is_valid(self, sql: str) -> bool:
        from sqlparse import tokens

        for statement in self.parse(sql):
            for token in statement.flatten():
                if token.ttype in tokens.Error:
                    return False
        return True


BACKEND_TYPES: Sequence[Type[Backend]] = (
    SqloxideBackend,
    PglastBackend,
    SqlglotBackend,
    SqlparseBackend,
)


class BackendRegistry:
    """Ordered set of backends; order drives legend and report order."""

    def __init__(self, backends: Iterable[Backend] = ()):
        self._backends: Dict[str, Backend] = {}
        for backend in backends:
            self.register(backend)

    def register(self, backend: Backend) -> Backend:
        if not backend.key:
            raise ValueError(f"backend {backend!r} has no key")
        if backend.key in self._backends:
            raise ValueError(f"backend {backend.key!r} already registered")
        self._backends[backend.key] = backend
        return backend

    def get(self, key: str) -> Backend:
        try:
            return self._backends[key]
        except KeyError:
            raise KeyError(f"unknown backend: {key}") from None

    def keys(self) -> List[str]:
        return list(self._backends)

    def select(self, keys: Optional[Iterable[str]]) -> "BackendRegistry":
        if keys is None:
            return BackendRegistry(self)
        return BackendRegistry(self.get(k) for k in keys)

    def __contains__(self, key: object) -> bool:
        return key in self._backends

    def __iter__(self) -> Iterator[Backend]:
        return iter(list(self._backends.values()))

    def __len__(self) -> int:
        return len(self._backends)


def default_registry(types: Iterable[Type[Backend]] = BACKEND_TYPES) -> BackendRegistry:
    """Every known backend, importable or not (enough to read and draw results)."""
    return BackendRegistry(cls() for cls in types)


def available_registry(types: Iterable[Type[Backend]] = BACKEND_TYPES) -> BackendRegistry:
    return BackendRegistry(cls() for cls in types if cls.is_available())


def is_valid_for_all(sql: str, backends: Iterable[Backend]) -> bool:
    for backend in backends:
        if not backend.is_valid(sql):
            return False
    return True
