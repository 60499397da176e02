"""Dependency injection container.

Wires the directory repository, graph builder and fare service
together from configuration. Tests can register their own factories
instead.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional

from .config import AppConfig, get_config


@dataclass
class Container:
    """Dependency injection container.

    Usage:
        # Production
        container = Container.create_default()
        service = container.resolve(FareCalculatorService)

        # Testing
        container = Container()
        container.register(DirectoryRepositoryPort, lambda: FakeRepository())
        repository = container.resolve(DirectoryRepositoryPort)

    Attributes:
        config: Application configuration
    """

    config: AppConfig = field(default_factory=get_config)

    _factories: Dict[type[Any], Callable[[], Any]] = field(
        default_factory=dict, repr=False
    )
    _singletons: Dict[type[Any], Any] = field(default_factory=dict, repr=False)
    _singleton_types: set[type[Any]] = field(default_factory=set, repr=False)
    _lock: threading.RLock = field(default_factory=threading.RLock, repr=False)

    def register(
        self,
        port_type: type[Any],
        factory: Callable[[], Any],
        singleton: bool = True,
    ) -> None:
        """Register a factory for a port type.

        Args:
            port_type: The type (usually a Protocol) to register.
            factory: A callable that creates instances of the type.
            singleton: If True, only one instance is created.
        """
        with self._lock:
            self._factories[port_type] = factory
            self._singletons.pop(port_type, None)
            if singleton:
                self._singleton_types.add(port_type)
            else:
                self._singleton_types.discard(port_type)

    def resolve(self, port_type: type[Any]) -> Any:
        """Resolve an instance of a port type.

        Raises:
            KeyError: If the type is not registered.
        """
        with self._lock:
            if port_type not in self._factories:
                raise KeyError(f"Type not registered: {port_type}")

            if port_type in self._singleton_types:
                if port_type not in self._singletons:
                    self._singletons[port_type] = self._factories[port_type]()
                return self._singletons[port_type]

            return self._factories[port_type]()

    def is_registered(self, port_type: type[Any]) -> bool:
        return port_type in self._factories

    @classmethod
    def create_default(cls, config: Optional[AppConfig] = None) -> Container:
        """Create a container with default production bindings.

        Args:
            config: Optional configuration override.
        """
        from .adapters.directory import JsonDirectoryRepository, TextDirectoryRepository
        from .graph import GraphBuilder
        from .ports.directory import DirectoryRepositoryPort
        from .services import FareCalculatorService

        config = config or get_config()
        container = cls(config=config)

        def create_repository() -> DirectoryRepositoryPort:
            if config.directory.format == "text":
                return TextDirectoryRepository(config.directory)
            return JsonDirectoryRepository(config.directory)

        container.register(DirectoryRepositoryPort, create_repository)
        container.register(
            GraphBuilder,
            lambda: GraphBuilder(max_workers=config.build.max_workers),
        )

        def create_fare_service() -> FareCalculatorService:
            return FareCalculatorService(
                repository=container.resolve(DirectoryRepositoryPort),
                builder=container.resolve(GraphBuilder),
                fare_config=config.fare,
            )

        container.register(FareCalculatorService, create_fare_service)

        return container

