"""
Service Records - Bindings and Their Lifecycle

🧩 One Record, Two Kinds, One Guard:
A Service binds an interface to a concrete implementation and carries the
lifecycle metadata the builder needs: singleton flag, parameter bindings,
enforced optional parameters and the cached singleton instance.

- ServiceKind.DIRECT: the concrete is a class (or a pre-built instance)
- ServiceKind.FACTORY: the concrete is a callable producing the instance
- ProtectedService: read-only view over another record
"""

import inspect
import threading
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Callable, Dict, FrozenSet, Mapping, Union

from .exceptions import ResolutionError, ServiceDefinitionError, ServiceStateError
from .reflection import implements, is_routine, qualified_name, resolve_type, satisfies

Parameters = Dict[Union[str, int], Any]

_MISSING = object()


class ServiceKind(Enum):
    """How a service produces its instances"""
    DIRECT = "direct"
    FACTORY = "factory"


class ServiceInterface(ABC):
    """Contract shared by every service record"""

    @abstractmethod
    def get_interface(self) -> type:
        """The interface this service is bound to"""

    @abstractmethod
    def get_concrete(self) -> Union[type, Callable[..., Any]]:
        """The concrete class or factory callable"""

    @abstractmethod
    def get_kind(self) -> ServiceKind:
        """Whether the concrete is instantiated directly or called as a factory"""

    @abstractmethod
    def singleton(self, flag: bool = True) -> "ServiceInterface":
        """Define whether built instances are cached and reused"""

    @abstractmethod
    def is_singleton(self) -> bool:
        ...

    @abstractmethod
    def with_parameters(self, parameters: Mapping[Union[str, int], Any]) -> "ServiceInterface":
        """Replace the parameter bindings of the service"""

    @abstractmethod
    def get_parameters(self) -> Parameters:
        ...

    @abstractmethod
    def enforce_parameters(self, *names: str) -> "ServiceInterface":
        """Replace the optional parameter names that must be resolved anyway"""

    @abstractmethod
    def get_enforced_parameters(self) -> FrozenSet[str]:
        ...

    @abstractmethod
    def get_instance(self) -> Any:
        """The cached singleton instance"""

    @abstractmethod
    def has_instance(self) -> bool:
        ...

    @abstractmethod
    def with_instance(self, instance: Any) -> "ServiceInterface":
        """Assign the singleton instance of the service"""

    @property
    @abstractmethod
    def lock(self) -> threading.RLock:
        """Lock guarding the first build of a singleton"""

    @abstractmethod
    def _store_instance(self, instance: Any) -> None:
        """Cache a freshly built instance (used by the builder)"""


class Service(ServiceInterface):
    """
    Binding of an interface to a concrete implementation.

    Direct services accept a class, a dotted path to a class, a pre-built
    instance or None (the interface bound to itself). A pre-built instance
    turns the service into a singleton holding that instance.

    Factory services accept any callable; its return value is the instance.

    Raises:
        ServiceDefinitionError: When the concrete does not fit the kind or the interface
    """

    def __init__(
        self,
        interface: Union[type, str],
        concrete: Any = None,
        kind: ServiceKind = ServiceKind.DIRECT
    ):
        try:
            self._interface = resolve_type(interface)
        except ResolutionError as exc:
            raise ServiceDefinitionError(f"Invalid service interface: {exc}") from exc

        self._kind = kind
        self._is_singleton = False
        self._parameters: Parameters = {}
        self._enforced: FrozenSet[str] = frozenset()
        self._instance: Any = _MISSING
        self._lock = threading.RLock()
        self._concrete = self._dispatch_concrete(concrete)

    def get_interface(self) -> type:
        return self._interface

    def get_concrete(self) -> Union[type, Callable[..., Any]]:
        return self._concrete

    def get_kind(self) -> ServiceKind:
        return self._kind

    def singleton(self, flag: bool = True) -> "Service":
        self._is_singleton = flag
        return self

    def is_singleton(self) -> bool:
        return self._is_singleton

    def with_parameters(self, parameters: Mapping[Union[str, int], Any]) -> "Service":
        self._parameters = dict(parameters)
        return self

    def get_parameters(self) -> Parameters:
        return dict(self._parameters)

    def enforce_parameters(self, *names: str) -> "Service":
        self._enforced = frozenset(names)
        return self

    def get_enforced_parameters(self) -> FrozenSet[str]:
        return self._enforced

    def get_instance(self) -> Any:
        """
        Raises:
            ServiceStateError: When the service is no singleton or has no instance yet
        """
        if not self._is_singleton:
            raise ServiceStateError(
                "This service can not hold an instance, the service is not defined as singleton"
            )

        if self._instance is _MISSING:
            raise ServiceStateError("This service has no instance yet")

        return self._instance

    def has_instance(self) -> bool:
        return self._is_singleton and self._instance is not _MISSING

    def with_instance(self, instance: Any) -> "Service":
        """
        Raises:
            ServiceStateError: When the service is no singleton
            ServiceDefinitionError: When the instance does not implement the interface
        """
        self._require_singleton()

        if not satisfies(instance, self._interface):
            raise ServiceDefinitionError(
                f"The provided object does not implement {qualified_name(self._interface)}"
            )

        self._instance = instance
        return self

    @property
    def lock(self) -> threading.RLock:
        return self._lock

    def _store_instance(self, instance: Any) -> None:
        self._require_singleton()
        self._instance = instance

    def _require_singleton(self) -> None:
        if not self._is_singleton:
            raise ServiceStateError(
                "This service can not hold an instance, the service is not defined as singleton"
            )

    def _dispatch_concrete(self, concrete: Any) -> Union[type, Callable[..., Any]]:
        if self._kind is ServiceKind.FACTORY:
            if not callable(concrete):
                raise ServiceDefinitionError(
                    f"A factory concrete must be callable, got {concrete!r}"
                )
            return concrete

        if concrete is None:
            concrete = self._interface
        elif isinstance(concrete, str):
            try:
                concrete = resolve_type(concrete)
            except ResolutionError as exc:
                raise ServiceDefinitionError(f"Invalid service concrete: {exc}") from exc

        if is_routine(concrete):
            raise ServiceDefinitionError(
                "You can not assign callables to a regular service, use a factory instead"
            )

        if not inspect.isclass(concrete):
            self.singleton()
            self.with_instance(concrete)
            return type(concrete)

        if not implements(concrete, self._interface):
            raise ServiceDefinitionError(
                f"{qualified_name(concrete)} does not implement {qualified_name(self._interface)}"
            )

        return concrete

    def __repr__(self) -> str:
        return (
            f"Service({qualified_name(self._interface)} -> {qualified_name(self._concrete)}, "
            f"kind={self._kind.value}, singleton={self._is_singleton})"
        )


class ProtectedService(ServiceInterface):
    """
    Read-only view over another service record.

    Every mutator raises ServiceStateError, every query is forwarded. A
    singleton instance present at wrap time is snapshotted; a singleton
    built later through this view is cached on the view, never on the
    wrapped record.
    """

    def __init__(self, service: ServiceInterface):
        self._service = service
        self._instance: Any = service.get_instance() if service.has_instance() else _MISSING
        self._lock = threading.RLock()

    def get_interface(self) -> type:
        return self._service.get_interface()

    def get_concrete(self) -> Union[type, Callable[..., Any]]:
        return self._service.get_concrete()

    def get_kind(self) -> ServiceKind:
        return self._service.get_kind()

    def singleton(self, flag: bool = True) -> "ProtectedService":
        raise ServiceStateError("You can not modify a protected service")

    def is_singleton(self) -> bool:
        return self._service.is_singleton()

    def with_parameters(self, parameters: Mapping[Union[str, int], Any]) -> "ProtectedService":
        raise ServiceStateError("You can not modify a protected service")

    def get_parameters(self) -> Parameters:
        return self._service.get_parameters()

    def enforce_parameters(self, *names: str) -> "ProtectedService":
        raise ServiceStateError("You can not modify a protected service")

    def get_enforced_parameters(self) -> FrozenSet[str]:
        return self._service.get_enforced_parameters()

    def get_instance(self) -> Any:
        if not self.is_singleton():
            raise ServiceStateError(
                "This service can not hold an instance, the service is not defined as singleton"
            )

        if self._instance is _MISSING:
            raise ServiceStateError("This service has no instance yet")

        return self._instance

    def has_instance(self) -> bool:
        return self.is_singleton() and self._instance is not _MISSING

    def with_instance(self, instance: Any) -> "ProtectedService":
        raise ServiceStateError("You can not modify a protected service")

    @property
    def lock(self) -> threading.RLock:
        return self._lock

    def _store_instance(self, instance: Any) -> None:
        if not self.is_singleton():
            raise ServiceStateError(
                "This service can not hold an instance, the service is not defined as singleton"
            )
        self._instance = instance

    def __repr__(self) -> str:
        return f"ProtectedService({self._service!r})"


__all__ = ["ServiceKind", "ServiceInterface", "Service", "ProtectedService"]
