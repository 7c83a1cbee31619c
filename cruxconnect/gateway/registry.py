"""Immutable registry of gateway protocol handlers."""

from __future__ import annotations

from types import MappingProxyType
from typing import Iterable, Iterator

from ..errors import DuplicateProtocol, UnsupportedProtocol
from .handlers import ProtocolHandler


class HandlerRegistry:
    """Maps protocol names to handlers, built once from an ordered seed.

    Names are matched exactly and case-sensitively. Duplicate names in the
    seed are rejected at construction time.
    """

    def __init__(self, handlers: Iterable[ProtocolHandler]) -> None:
        by_name: dict[str, ProtocolHandler] = {}
        for handler in handlers:
            name = handler.name
            if not name:
                raise ValueError("protocol handler name must be a non-empty string")
            if name in by_name:
                raise DuplicateProtocol(f"Protocol '{name}' registered more than once")
            by_name[name] = handler
        self._handlers = MappingProxyType(by_name)

    def get(self, name: str) -> ProtocolHandler:
        try:
            return self._handlers[name]
        except KeyError:
            raise UnsupportedProtocol(name) from None

    def __contains__(self, name: object) -> bool:
        return name in self._handlers

    def __iter__(self) -> Iterator[str]:
        return iter(self._handlers)

    def __len__(self) -> int:
        return len(self._handlers)

    @property
    def names(self) -> list[str]:
        return list(self._handlers)
