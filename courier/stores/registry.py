"""Lookup of pluggable stores by registered type name.

Each registry maps a type name to a factory. A `StoreSlot` creates its store
from the registry on first access and caches it; when the configured type
cannot be built the slot logs the error and keeps the built-in default for
the rest of its life.
"""

from threading import Lock
from typing import Callable, Dict, Generic, List, Optional, Type, TypeVar

from loguru import logger

from ..exceptions import (
    StoreConstructionError,
    StoreError,
    StoreTypeMismatchError,
    UnknownStoreTypeError,
)
from .base import MailStore, QueueStore
from .simple import SimpleMailStore, SimpleQueueStore

T = TypeVar("T")


class StoreRegistry(Generic[T]):
    """Type name to factory mapping for one store capability."""

    def __init__(self, capability: Type[T]):
        self.capability = capability
        self._factories: Dict[str, Callable[[], T]] = {}
        self._lock = Lock()

    def register(self, name: str, factory: Callable[[], T], replace: bool = False) -> None:
        """Register a factory under a type name.

        Raises:
            ValueError: If the name is taken and replace is False
        """
        with self._lock:
            if name in self._factories and not replace:
                raise ValueError(
                    f"{self.capability.__name__} type {name!r} is already registered"
                )
            self._factories[name] = factory
        logger.debug(f"Registered {self.capability.__name__} type {name!r}")

    def unregister(self, name: str) -> None:
        with self._lock:
            self._factories.pop(name, None)

    def names(self) -> List[str]:
        with self._lock:
            return sorted(self._factories)

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._factories

    def create(self, name: str) -> T:
        """Build a new store of the named type.

        Raises:
            UnknownStoreTypeError: If nothing is registered under the name
            StoreConstructionError: If the factory raises
            StoreTypeMismatchError: If the result lacks the store capability
        """
        with self._lock:
            factory = self._factories.get(name)
        if factory is None:
            raise UnknownStoreTypeError(
                f"No {self.capability.__name__} registered as {name!r}"
            )

        try:
            instance = factory()
        except Exception as e:
            raise StoreConstructionError(
                f"{self.capability.__name__} {name!r} could not be constructed: {e}"
            ) from e

        if not isinstance(instance, self.capability):
            raise StoreTypeMismatchError(
                f"{name!r} produced {type(instance).__name__}, "
                f"which is not a {self.capability.__name__}"
            )
        return instance


class StoreSlot(Generic[T]):
    """Lazily created, cached store instance."""

    def __init__(
        self,
        registry: StoreRegistry[T],
        type_name: Callable[[], str],
        default_factory: Callable[[], T],
    ):
        self._registry = registry
        self._type_name = type_name
        self._default_factory = default_factory
        self._instance: Optional[T] = None
        self._lock = Lock()

    @property
    def is_filled(self) -> bool:
        return self._instance is not None

    def get(self) -> T:
        """Get the cached store, creating it on first access.

        The type name is read only while the slot is empty.
        """
        instance = self._instance
        if instance is not None:
            return instance
        with self._lock:
            if self._instance is None:
                self._instance = self._create()
            return self._instance

    def set(self, instance: Optional[T]) -> None:
        """Replace the cached store. None empties the slot.

        Raises:
            TypeError: If the instance lacks the store capability
        """
        if instance is not None and not isinstance(instance, self._registry.capability):
            raise TypeError(
                f"Expected a {self._registry.capability.__name__}, got {type(instance).__name__}"
            )
        with self._lock:
            self._instance = instance

    def reset(self) -> None:
        """Empty the slot so the next access re-reads the type name."""
        self.set(None)

    def _create(self) -> T:
        name = self._type_name()
        try:
            instance = self._registry.create(name)
            logger.info(f"Created {self._registry.capability.__name__} of type {name!r}")
            return instance
        except StoreError as e:
            logger.opt(exception=e).error(
                f"{self._registry.capability.__name__} type {name!r} could not be instantiated, "
                f"falling back to the built-in default"
            )
            return self._default_factory()


mail_store_registry: StoreRegistry[MailStore] = StoreRegistry(MailStore)
mail_store_registry.register("simple", SimpleMailStore)

queue_store_registry: StoreRegistry[QueueStore] = StoreRegistry(QueueStore)
queue_store_registry.register("simple", SimpleQueueStore)
