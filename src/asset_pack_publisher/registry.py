"""Store registry for factory-based blob store creation.

This module provides a central registry for blob store factories so the
CLI and pipeline can create stores by name without knowing their
implementation.
"""

from typing import TYPE_CHECKING, Callable

if TYPE_CHECKING:
    from .stores.base import BlobStore


class StoreRegistry:
    """Central registry for blob store factories.

    Store modules register themselves when the ``stores`` package is
    imported.
    """

    _factories: dict[str, Callable[..., "BlobStore"]] = {}

    @classmethod
    def register_factory(cls, name: str, factory: Callable[..., "BlobStore"]) -> None:
        """Register a factory function for creating stores.

        Args:
            name: Name of the store (e.g., 'http', 'directory')
            factory: Callable that creates a BlobStore instance

        Example:
            >>> def create_memory_store(**kwargs) -> MemoryStore:
            ...     return MemoryStore()
            >>> StoreRegistry.register_factory('memory', create_memory_store)
        """
        cls._factories[name] = factory

    @classmethod
    def create_store(cls, store_name: str, **kwargs) -> "BlobStore":
        """Create a store from a registered factory.

        Args:
            store_name: Name of the registered store
            **kwargs: Arguments passed to the store factory

        Returns:
            Configured BlobStore

        Raises:
            ValueError: If store_name is not registered

        Example:
            >>> store = StoreRegistry.create_store('directory', root=Path('/tmp/blobs'))
        """
        # Import here to avoid circular dependency
        from . import stores  # noqa: F401

        if store_name not in cls._factories:
            available = ', '.join(cls._factories.keys()) or 'none'
            raise ValueError(
                f"Unknown store: '{store_name}'. Available stores: {available}"
            )

        return cls._factories[store_name](**kwargs)

    @classmethod
    def list_stores(cls) -> list[str]:
        """List all registered store names.

        Example:
            >>> StoreRegistry.list_stores()
            ['http', 'directory']
        """
        return list(cls._factories.keys())
