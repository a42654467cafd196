"""
Dependency Builder - Parameter Resolution and Instantiation

🔧 Automatic Constructor Injection:
The builder turns a service record into an instance. Every formal
parameter of the constructor or factory is resolved exactly once, by the
first matching rule:

1. A caller or bound parameter keyed by the parameter name
2. A caller or bound parameter keyed by the parameter position
3. A required parameter annotated with a class is built with make()
4. An optional parameter annotated with a class is built with make()
   when its name is enforced
5. An optional parameter falls back to its default value
6. Anything else is unresolvable

Arguments are produced lazily, so resolution stops at the first failure
before later parameters are touched.
"""

import logging
from typing import Any, Callable, Collection, Iterator, List, Mapping, Optional, Union

from .exceptions import ResolutionError, ServiceDefinitionError
from .reflection import (
    ParameterDescriptor, describe_parameters, invoke, is_instantiable,
    qualified_name, resolve_type, satisfies
)
from .services import Service, ServiceInterface, ServiceKind

logger = logging.getLogger(__name__)

ParameterMap = Mapping[Union[str, int], Any]


class DependencyBuilder:
    """
    Stateless resolution engine.

    Usage:
        builder = DependencyBuilder()
        mailer = builder.make(SmtpMailer, {"host": "localhost"})
        report = builder.call(render_report, {0: "weekly"})
    """

    def make(self, interface: Union[type, str], parameters: Optional[ParameterMap] = None, *enforced: str) -> Any:
        """
        Build an instance for an interface.

        Args:
            interface: Class or dotted path of the interface
            parameters: Values by parameter name or position, superseding bound ones
            *enforced: Optional parameter names that must be resolved anyway

        Returns:
            The built (or cached singleton) instance
        """
        return self.build(self._resolve_interface(interface), parameters, *enforced)

    def call(self, callback: Callable[..., Any], parameters: Optional[ParameterMap] = None, *enforced: str) -> Any:
        """Call a callable with its parameters resolved by the container"""
        if not callable(callback):
            raise ResolutionError(f"Can not call {callback!r}, it is not callable")

        descriptors = describe_parameters(callback)
        values = self._resolve_parameters(descriptors, parameters or {}, enforced, callback)
        return invoke(callback, descriptors, values)

    def build(self, service: ServiceInterface, parameters: Optional[ParameterMap] = None, *enforced: str) -> Any:
        """
        Build an instance for a service record.

        Singletons with a cached instance return it right away, without
        looking at the parameters. The first build of a singleton is
        serialized on the record's lock, so only one instance is ever cached.

        Raises:
            ServiceDefinitionError: When the built instance does not implement the interface
            ResolutionError: When a parameter or the concrete can not be resolved
        """
        if service.has_instance():
            return service.get_instance()

        if not service.is_singleton():
            return self._produce(service, parameters, enforced)

        with service.lock:
            if service.has_instance():
                return service.get_instance()

            instance = self._produce(service, parameters, enforced)
            service._store_instance(instance)
            logger.debug(f"Cached singleton instance for {qualified_name(service.get_interface())}")
            return instance

    def _produce(self, service: ServiceInterface, parameters: Optional[ParameterMap], enforced: Collection[str]) -> Any:
        merged = service.get_parameters()
        merged.update(parameters or {})
        enforce = service.get_enforced_parameters().union(enforced)

        interface = service.get_interface()
        concrete = service.get_concrete()
        logger.debug(f"Building {qualified_name(interface)} from {qualified_name(concrete)}")

        if service.get_kind() is ServiceKind.FACTORY:
            instance = self.call(concrete, merged, *enforce)
        else:
            instance = self._incubate(concrete, merged, enforce)

        if not satisfies(instance, interface):
            raise ServiceDefinitionError(
                f"Built instance of {qualified_name(type(instance))} does not implement "
                f"{qualified_name(interface)}"
            )

        return instance

    def _incubate(self, concrete: type, parameters: ParameterMap, enforce: Collection[str]) -> Any:
        """Instantiate a concrete class with its constructor parameters resolved"""
        if not is_instantiable(concrete):
            raise ResolutionError(
                f"Can not instantiate {qualified_name(concrete)}, it is abstract or a protocol"
            )

        descriptors = describe_parameters(concrete)
        values = self._resolve_parameters(descriptors, parameters, enforce, concrete)
        return invoke(concrete, descriptors, values)

    def _resolve_parameters(
        self,
        descriptors: List[ParameterDescriptor],
        parameters: ParameterMap,
        enforce: Collection[str],
        target: Any
    ) -> Iterator[Any]:
        for descriptor in descriptors:
            if descriptor.name in parameters:
                yield parameters[descriptor.name]
                continue

            if descriptor.position in parameters:
                yield parameters[descriptor.position]
                continue

            service_type = descriptor.service_type

            if service_type is not None and not descriptor.is_optional:
                yield self.make(service_type)
                continue

            if service_type is not None and descriptor.name in enforce:
                yield self.make(service_type)
                continue

            if descriptor.is_optional:
                yield descriptor.default
                continue

            raise ResolutionError(
                f"Can not resolve parameter: {descriptor.name} of {qualified_name(target)}"
            )

    def _resolve_interface(self, interface: Union[type, str]) -> ServiceInterface:
        """Ad-hoc service binding the interface to itself"""
        return Service(resolve_type(interface))


__all__ = ["DependencyBuilder"]
