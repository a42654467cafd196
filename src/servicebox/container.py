"""
Dependency Injection Container

🔧 Service Registration and Protected Views:
The container maps interfaces to service records and builds instances
through the DependencyBuilder it extends. Bound interfaces are looked up
first; anything else is built as an ad-hoc service bound to itself.

split() and expel() derive new containers whose records are read-only
views, so code handed a derived container can build services but never
rebind or reconfigure them.
"""

import logging
from typing import TYPE_CHECKING, Any, Callable, Dict, Iterator, List, Union

from .builder import DependencyBuilder
from .exceptions import BindingError, ResolutionError, ServiceStateError
from .reflection import interface_key, resolve_type
from .services import ProtectedService, Service, ServiceInterface, ServiceKind

if TYPE_CHECKING:
    from .configuration import ContainerConfig

logger = logging.getLogger(__name__)

Identifier = Union[type, str]


class Container(DependencyBuilder):
    """
    Dependency injection container.

    Usage:
        container = Container()
        container.bind(Logger, FileLogger).singleton()
        container.factory(Repository, lambda connection: SqlRepository(connection))

        logger = container.make(Logger)
        readonly = container.split(Logger)
    """

    def __init__(self):
        self._services: Dict[str, ServiceInterface] = {}

    @classmethod
    def from_config(cls, config: "ContainerConfig") -> "Container":
        """
        Create a container wired from configuration.

        Logging is left untouched; call configure_logging(config.logging)
        to install the configured handler.
        """
        return config.apply(cls())

    def get(self, interface: Identifier) -> ServiceInterface:
        """
        Get the service record bound to an interface.

        Raises:
            BindingError: When the interface is not bound
        """
        key = self._marshal_key(interface)
        if key not in self._services:
            raise BindingError(f"Unknown interface: {interface}")

        return self._services[key]

    def has(self, *interfaces: Identifier) -> bool:
        """Check whether every given interface is bound"""
        return all(self._marshal_key(current) in self._services for current in interfaces)

    def bind(self, interface: Identifier, concrete: Any = None) -> Service:
        """
        Bind an interface to a concrete class, a pre-built instance or itself.

        Raises:
            ServiceDefinitionError: When the concrete does not implement the interface
            ServiceStateError: When the interface is protected in this container
        """
        key = self._writable_key(interface)
        service = Service(interface, concrete)
        self._services[key] = service
        logger.debug(f"Bound {service!r}")
        return service

    def factory(self, interface: Identifier, callback: Callable[..., Any]) -> Service:
        """
        Bind an interface to a factory callable.

        Raises:
            ServiceDefinitionError: When the callback is not callable
            ServiceStateError: When the interface is protected in this container
        """
        key = self._writable_key(interface)
        service = Service(interface, callback, ServiceKind.FACTORY)
        self._services[key] = service
        logger.debug(f"Bound {service!r}")
        return service

    def split(self, *interfaces: Identifier) -> "Container":
        """
        New container holding protected views of the given interfaces.

        Without interfaces every bound interface is carried over.

        Raises:
            BindingError: When one of the interfaces is not bound; nothing is copied then
        """
        keys = [self._marshal_key(current) for current in interfaces] or list(self._services)
        unknown = [key for key in keys if key not in self._services]

        if unknown:
            raise BindingError(f"One or more interfaces are not known: {', '.join(unknown)}")

        instance = self._marshal_new_instance()
        for key in keys:
            instance._services[key] = ProtectedService(self._services[key])

        logger.debug(f"Split {len(instance)} of {len(self)} services into a protected container")
        return instance

    def expel(self, *interfaces: Identifier) -> "Container":
        """
        New container holding protected views of every interface except the given ones.

        Without interfaces every bound interface is carried over.
        """
        expelled = {self._marshal_key(current) for current in interfaces}

        instance = self._marshal_new_instance()
        for key, service in self._services.items():
            if key not in expelled:
                instance._services[key] = ProtectedService(service)

        logger.debug(f"Expelled {len(self) - len(instance)} of {len(self)} services into a protected container")
        return instance

    def interfaces(self) -> List[str]:
        """Normalized keys of all bound interfaces"""
        return list(self._services)

    def _resolve_interface(self, interface: Identifier) -> ServiceInterface:
        if self.has(interface):
            return self.get(interface)

        return super()._resolve_interface(interface)

    def _marshal_key(self, interface: Identifier) -> str:
        if isinstance(interface, str):
            # Re-exported paths share the key of the class they name
            try:
                interface = resolve_type(interface)
            except ResolutionError:
                pass
        return interface_key(interface)

    def _writable_key(self, interface: Identifier) -> str:
        key = self._marshal_key(interface)
        if isinstance(self._services.get(key), ProtectedService):
            raise ServiceStateError(f"Can not rebind protected interface: {interface}")
        return key

    def _marshal_new_instance(self) -> "Container":
        return type(self)()

    def __contains__(self, interface: Identifier) -> bool:
        return self.has(interface)

    def __len__(self) -> int:
        return len(self._services)

    def __iter__(self) -> Iterator[str]:
        return iter(self._services)


__all__ = ["Container"]
