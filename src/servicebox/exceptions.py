"""
Dependency Injection Errors

🚨 Fail Fast, Fail Loud:
Every error raised by the container derives from DIError, so callers can
catch the whole family at once or pick the specific kind they care about.
Nothing in servicebox retries or swallows these.
"""


class DIError(Exception):
    """Base exception for dependency injection errors"""
    pass


class BindingError(DIError, LookupError):
    """Raised when an interface is not bound to the container"""
    pass


class ServiceDefinitionError(DIError, TypeError):
    """Raised when a concrete or instance does not fit its service interface"""
    pass


class ServiceStateError(DIError):
    """Raised when a service is used in a state that does not allow the operation"""
    pass


class ResolutionError(DIError):
    """Raised when a dependency or parameter can not be resolved"""
    pass


class ConfigurationError(DIError, ValueError):
    """Raised when container configuration is invalid"""
    pass


__all__ = [
    "DIError", "BindingError", "ServiceDefinitionError",
    "ServiceStateError", "ResolutionError", "ConfigurationError"
]
