"""
servicebox - Inversion of Control Container

🔧 Bind, Make, Protect:
servicebox maps interfaces to concrete implementations and builds them
with their constructor dependencies resolved automatically.

Components:
- Container: interface registry with split/expel protected views
- DependencyBuilder: make/call/build and the parameter resolution rules
- Service / ProtectedService: binding records and their read-only view
- ContainerConfig: configuration-driven wiring

Usage:
    from servicebox import Container

    container = Container()
    container.bind(Logger, FileLogger).singleton()
    logger = container.make(Logger)
"""

from .builder import DependencyBuilder
from .configuration import BindingConfig, ContainerConfig, LoggingConfig, configure_logging
from .container import Container
from .exceptions import (
    BindingError, ConfigurationError, DIError, ResolutionError,
    ServiceDefinitionError, ServiceStateError
)
from .reflection import ParameterDescriptor, describe_parameters
from .services import ProtectedService, Service, ServiceInterface, ServiceKind

__version__ = "0.1.0"

__all__ = [
    # Container and builder
    "Container", "DependencyBuilder",

    # Service records
    "Service", "ProtectedService", "ServiceInterface", "ServiceKind",

    # Reflection
    "ParameterDescriptor", "describe_parameters",

    # Configuration
    "ContainerConfig", "BindingConfig", "LoggingConfig", "configure_logging",

    # Errors
    "DIError", "BindingError", "ServiceDefinitionError",
    "ServiceStateError", "ResolutionError", "ConfigurationError"
]
