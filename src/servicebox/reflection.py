"""
Reflection Helpers - Signatures, Types and Interface Checks

🔍 Introspection Behind One Seam:
The builder never talks to `inspect` or `typing` directly. Everything it
needs to know about a callable, a constructor or an interface goes through
the helpers in this module:

- ParameterDescriptor: one formal parameter (name, position, type, default)
- describe_parameters: descriptors for a callable or a class constructor
- satisfies / implements: nominal or structural interface checks
- locate / resolve_type: dotted import paths to Python objects
- interface_key: normalized registry key for an interface
- invoke: call a target with a lazily produced argument sequence
"""

import builtins
import functools
import importlib
import inspect
import types
import typing
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Union, get_args, get_origin, get_type_hints

from .exceptions import BindingError, ResolutionError

_EMPTY = inspect.Parameter.empty
_VARIADIC_KINDS = (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)
_NON_SERVICE_MODULES = frozenset({"builtins", "typing", "typing_extensions", "collections.abc"})
_PROTOCOL_BASES = (object, typing.Protocol, typing.Generic)


@dataclass(frozen=True)
class ParameterDescriptor:
    """A single formal parameter of a callable or constructor"""
    name: str
    position: int
    kind: Any
    annotation: Any = _EMPTY
    is_optional: bool = False
    default: Any = _EMPTY

    @property
    def service_type(self) -> Optional[type]:
        """The annotated class, when it is something the container can build"""
        annotation = self.annotation
        if annotation is _EMPTY:
            return None
        if inspect.isclass(annotation) and annotation.__module__ not in _NON_SERVICE_MODULES:
            return annotation
        return None

    @property
    def is_keyword_only(self) -> bool:
        return self.kind is inspect.Parameter.KEYWORD_ONLY


def qualified_name(obj: Any) -> str:
    """Human readable dotted name for classes, functions and other objects"""
    if inspect.isclass(obj) or inspect.isroutine(obj):
        module = getattr(obj, "__module__", None)
        name = getattr(obj, "__qualname__", getattr(obj, "__name__", repr(obj)))
        return f"{module}.{name}" if module else name
    if isinstance(obj, functools.partial):
        return f"partial({qualified_name(obj.func)})"
    return repr(obj)


def is_routine(obj: Any) -> bool:
    """True for functions, lambdas, methods and partials (bare factory values)"""
    return inspect.isroutine(obj) or isinstance(obj, functools.partial)


def describe_parameters(target: Any) -> List[ParameterDescriptor]:
    """
    Describe the formal parameters of a callable or a class constructor.

    Variadic parameters (*args, **kwargs) are not formal parameters and are
    skipped, but they still count for the position of later parameters.

    Raises:
        ResolutionError: When the target has no inspectable signature
    """
    try:
        signature = inspect.signature(target)
    except (TypeError, ValueError) as exc:
        raise ResolutionError(f"Can not inspect parameters of {qualified_name(target)}: {exc}") from exc

    hints = _type_hints(target)
    descriptors = []

    for position, (name, parameter) in enumerate(signature.parameters.items()):
        if parameter.kind in _VARIADIC_KINDS:
            continue

        annotation = hints.get(name, parameter.annotation)
        descriptors.append(ParameterDescriptor(
            name=name,
            position=position,
            kind=parameter.kind,
            annotation=_unwrap_optional(annotation),
            is_optional=parameter.default is not _EMPTY,
            default=parameter.default,
        ))

    return descriptors


def invoke(target: Any, descriptors: List[ParameterDescriptor], values: Iterable[Any]) -> Any:
    """
    Call target with one value per descriptor.

    Values are pulled one at a time, so a lazy sequence stops at the first
    parameter that fails to resolve.
    """
    args = []
    kwargs: Dict[str, Any] = {}
    values = iter(values)

    for descriptor in descriptors:
        value = next(values)
        if descriptor.is_keyword_only:
            kwargs[descriptor.name] = value
        else:
            args.append(value)

    return target(*args, **kwargs)


def satisfies(value: Any, interface: type) -> bool:
    """Check whether an object fulfills the contract of an interface"""
    try:
        return isinstance(value, interface)
    except TypeError:
        # Protocols that are not runtime checkable
        return _has_protocol_members(value, interface)


def implements(cls: type, interface: type) -> bool:
    """Check whether a class fulfills the contract of an interface"""
    if not inspect.isclass(cls):
        return False
    try:
        return issubclass(cls, interface)
    except TypeError:
        return _has_protocol_members(cls, interface)


def is_instantiable(cls: Any) -> bool:
    """Abstract classes and protocol classes can not be instantiated"""
    if not inspect.isclass(cls) or inspect.isabstract(cls):
        return False
    return not getattr(cls, "_is_protocol", False)


def locate(path: str) -> Any:
    """
    Import an object by its dotted path, e.g. ``"package.module.Class"``.

    Nested attributes (``"module.Outer.Inner"``) and builtins (``"int"``)
    are supported.

    Raises:
        ResolutionError: When nothing can be found at the given path
    """
    parts = [part for part in path.strip(".").split(".") if part]
    if not parts:
        raise ResolutionError(f"Can not locate an empty path: {path!r}")

    if len(parts) == 1:
        if hasattr(builtins, parts[0]):
            return getattr(builtins, parts[0])
        raise ResolutionError(f"Can not locate: {path}")

    for index in range(len(parts) - 1, 0, -1):
        module_name = ".".join(parts[:index])
        try:
            obj = importlib.import_module(module_name)
        except ModuleNotFoundError as exc:
            # A module that exists but fails on its own imports is a real error
            if exc.name and not f"{module_name}.".startswith(f"{exc.name}."):
                raise
            continue

        try:
            for attribute in parts[index:]:
                obj = getattr(obj, attribute)
        except AttributeError:
            break
        return obj

    raise ResolutionError(f"Can not locate: {path}")


def resolve_type(identifier: Union[type, str]) -> type:
    """Turn an interface identifier (class or dotted path) into a class"""
    if inspect.isclass(identifier):
        return identifier

    if not isinstance(identifier, str):
        raise ResolutionError(f"Not a type identifier: {identifier!r}")

    located = locate(identifier)
    if not inspect.isclass(located):
        raise ResolutionError(f"{identifier} does not name a class")
    return located


def interface_key(identifier: Union[type, str]) -> str:
    """Normalized registry key: lower-cased dotted path without outer separators"""
    if inspect.isclass(identifier):
        identifier = f"{identifier.__module__}.{identifier.__qualname__}"
    elif not isinstance(identifier, str):
        raise BindingError(f"Invalid interface identifier: {identifier!r}")

    return identifier.strip(".").lower()


def _type_hints(target: Any) -> Dict[str, Any]:
    if inspect.isclass(target):
        target = target.__init__
    elif isinstance(target, functools.partial):
        return _type_hints(target.func)
    elif not inspect.isroutine(target):
        target = type(target).__call__

    try:
        return get_type_hints(target)
    except (NameError, TypeError):
        pass

    # One unresolvable forward reference; resolve the others one by one
    namespace = getattr(target, "__globals__", {})
    return {
        name: _resolve_annotation(annotation, namespace)
        for name, annotation in getattr(target, "__annotations__", {}).items()
    }


def _resolve_annotation(annotation: Any, namespace: Dict[str, Any]) -> Any:
    if not isinstance(annotation, str):
        return annotation
    try:
        return eval(annotation, dict(namespace))
    except (NameError, AttributeError, SyntaxError, TypeError):
        return annotation


def _unwrap_optional(annotation: Any) -> Any:
    origin = get_origin(annotation)
    if origin is Union or origin is getattr(types, "UnionType", None):
        members = [arg for arg in get_args(annotation) if arg is not type(None)]
        if len(members) == 1:
            return members[0]
    return annotation


def _protocol_members(protocol: type) -> set:
    members = set()
    for base in getattr(protocol, "__mro__", ()):
        if base in _PROTOCOL_BASES:
            continue
        members.update(name for name in vars(base) if not name.startswith("_"))
        members.update(name for name in getattr(base, "__annotations__", {}) if not name.startswith("_"))
    return members


def _has_protocol_members(obj: Any, protocol: type) -> bool:
    owner = obj if inspect.isclass(obj) else type(obj)
    declared = set()
    for base in owner.__mro__:
        declared.update(getattr(base, "__annotations__", {}))

    return all(
        hasattr(obj, name) or name in declared
        for name in _protocol_members(protocol)
    )


__all__ = [
    "ParameterDescriptor", "describe_parameters", "invoke",
    "satisfies", "implements", "is_instantiable", "is_routine",
    "locate", "resolve_type", "interface_key", "qualified_name"
]
