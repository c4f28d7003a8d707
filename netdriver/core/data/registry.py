"""Reader registry for automatic registration of data source readers.

Readers self-register under a kind string, so new source formats can be
supported without touching the loader or the executor.

Example:
    ```python
    @register_reader("my_format")
    class MyFormatReader:
        ...
    ```
"""

from __future__ import annotations

from typing import TYPE_CHECKING, TypeVar

if TYPE_CHECKING:
    from netdriver.core.data.protocols import SampleReader

T = TypeVar("T")

# Global registry mapping reader kinds to reader classes
_READER_REGISTRY: dict[str, type[SampleReader]] = {}


def register_reader(kind: str, *aliases: str):
    """Decorator to register a reader class under one or more kinds.

    Args:
        kind: The reader kind used in data sources (e.g., "mnist").
        *aliases: Additional kinds resolving to the same reader.

    Returns:
        The decorator function.

    Raises:
        ValueError: If a reader is already registered for one of the kinds.
    """

    def decorator(cls: type[T]) -> type[T]:
        for name in (kind, *aliases):
            if name in _READER_REGISTRY:
                raise ValueError(
                    f"Reader already registered for kind '{name}': "
                    f"{_READER_REGISTRY[name].__name__}"
                )
            _READER_REGISTRY[name] = cls  # type: ignore[assignment]
        return cls

    return decorator


def get_reader_registry() -> dict[str, type[SampleReader]]:
    """Get a copy of the current reader registry."""
    return _READER_REGISTRY.copy()


def get_reader(kind: str) -> type[SampleReader] | None:
    """Get the reader class registered for a kind, or None."""
    return _READER_REGISTRY.get(kind)


def unregister_reader(kind: str) -> None:
    """Remove a kind from the registry, if registered."""
    _READER_REGISTRY.pop(kind, None)
