"""Registry of source handlers, keyed by the endpoint name clients send."""

from typing import Type

from core.container import Container
from core.errors import RetiredSourceError, UnknownSourceError
from .base import BaseDataSource


class SourceRegistry:
    """Maps lower-cased source names to handler classes."""

    def __init__(self):
        self._handlers: dict[str, Type[BaseDataSource]] = {}

    def register(self, handler: Type[BaseDataSource]) -> Type[BaseDataSource]:
        """Add a handler class; usable as a class decorator.

        Raises:
            ValueError: If another handler already claims the name.
        """
        key = handler.name.lower()
        existing = self._handlers.get(key)
        if existing is not None and existing is not handler:
            raise ValueError(f"Source '{key}' is already handled by {existing.__name__}")
        self._handlers[key] = handler
        return handler

    def get(self, name: str) -> Type[BaseDataSource] | None:
        return self._handlers.get((name or '').lower())

    def get_all(self) -> dict[str, Type[BaseDataSource]]:
        """Registered handlers by name, in registration order."""
        return dict(self._handlers)

    def create_source(self, name: str, container: Container) -> BaseDataSource:
        """Instantiate the handler for a request's ``source`` parameter.

        Unregistered and disabled sources are reported the same way; retired
        names point the caller at their replacement.

        Raises:
            RetiredSourceError: If name was replaced by another source.
            UnknownSourceError: If no enabled handler serves name.
        """
        config = container.get_config()
        replacement = config.get_retired_sources().get((name or '').lower())
        if replacement:
            raise RetiredSourceError(replacement)

        handler = self.get(name)
        if handler is None or handler.name not in config.get_enabled_sources():
            raise UnknownSourceError()
        return handler(container)


_registry = SourceRegistry()


def get_registry() -> SourceRegistry:
    return _registry


def register(handler: Type[BaseDataSource]) -> Type[BaseDataSource]:
    """Register a handler with the process-wide registry."""
    return _registry.register(handler)
