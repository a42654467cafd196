"""
Tests for signature introspection and interface checks.
"""

import inspect

import pytest

from servicebox import BindingError, ResolutionError, describe_parameters
from servicebox.reflection import (
    implements, interface_key, invoke, is_instantiable, locate, resolve_type, satisfies
)

from .fixtures import (
    Cache, CachedRepository, Clock, Connection, FileLogger, FixedClock, Logger,
    Mailer, Outer, SqlRepository
)
from .deferred_fixtures import DeferredRepository


def collect(first, *rest, flag=False, **extra):
    return first, rest, flag, extra


class TestDescribeParameters:
    """Formal parameter descriptors"""

    def test_constructor_parameters(self):
        descriptors = describe_parameters(Mailer)

        assert [d.name for d in descriptors] == ["host", "port", "use_tls"]
        assert [d.position for d in descriptors] == [0, 1, 2]
        assert [d.is_optional for d in descriptors] == [False, True, True]
        assert descriptors[1].default == 25
        assert descriptors[2].is_keyword_only
        assert not descriptors[0].is_keyword_only

    def test_variadic_parameters_are_skipped(self):
        descriptors = describe_parameters(collect)

        assert [d.name for d in descriptors] == ["first", "flag"]
        assert [d.position for d in descriptors] == [0, 2]
        assert descriptors[0].annotation is inspect.Parameter.empty
        assert descriptors[0].service_type is None

    def test_unresolvable_hint_keeps_the_others(self):
        connection, cache = describe_parameters(DeferredRepository)

        assert connection.service_type is Connection
        assert cache.service_type is None
        assert cache.is_optional

    def test_service_types(self):
        connection, table = describe_parameters(SqlRepository)

        assert connection.service_type is Connection
        assert table.service_type is None

    def test_optional_annotation_is_unwrapped(self):
        _, cache = describe_parameters(CachedRepository)

        assert cache.annotation is Cache
        assert cache.service_type is Cache
        assert cache.is_optional
        assert cache.default is None

    def test_callable_instance(self):
        class Handler:
            def __call__(self, connection: Connection):
                return connection

        (descriptor,) = describe_parameters(Handler())

        assert descriptor.name == "connection"
        assert descriptor.service_type is Connection

    def test_not_callable(self):
        with pytest.raises(ResolutionError, match="Can not inspect"):
            describe_parameters(42)


class TestInvoke:
    """Calling targets with a value sequence"""

    def test_invoke_class(self):
        mailer = invoke(Mailer, describe_parameters(Mailer), ["smtp.local", 587, True])

        assert (mailer.host, mailer.port, mailer.use_tls) == ("smtp.local", 587, True)

    def test_invoke_function(self):
        result = invoke(collect, describe_parameters(collect), iter([1, True]))

        assert result == (1, (), True, {})

    def test_values_are_pulled_lazily(self):
        pulled = []

        def values():
            for value in ("smtp.local", 25, False, "unused"):
                pulled.append(value)
                yield value

        invoke(Mailer, describe_parameters(Mailer), values())

        assert pulled == ["smtp.local", 25, False]


class TestInterfaceChecks:
    """Nominal and structural interface satisfaction"""

    def test_nominal(self):
        assert satisfies(FileLogger(), Logger)
        assert not satisfies(Connection(), Logger)
        assert implements(FileLogger, Logger)
        assert not implements(Connection, Logger)

    def test_structural_protocol(self):
        assert satisfies(FixedClock(), Clock)
        assert not satisfies(Connection(), Clock)
        assert implements(FixedClock, Clock)
        assert not implements(Connection, Clock)

    def test_implements_requires_class(self):
        assert not implements(FileLogger(), Logger)

    def test_instantiable(self):
        assert is_instantiable(FileLogger)
        assert not is_instantiable(Logger)
        assert not is_instantiable(Clock)
        assert not is_instantiable(FileLogger())


class TestLocate:
    """Dotted path lookup and key normalization"""

    def test_locate_class(self):
        assert locate("tests.fixtures.FileLogger") is FileLogger

    def test_locate_nested_class(self):
        assert locate("tests.fixtures.Outer.Inner") is Outer.Inner

    def test_locate_builtin(self):
        assert locate("int") is int

    @pytest.mark.parametrize("path", ["tests.fixtures.Missing", "nowhere.Thing", "Missing", ""])
    def test_locate_missing(self, path):
        with pytest.raises(ResolutionError):
            locate(path)

    def test_resolve_type_requires_class(self):
        assert resolve_type(Logger) is Logger
        with pytest.raises(ResolutionError, match="does not name a class"):
            resolve_type("tests.fixtures.build_repository")
        with pytest.raises(ResolutionError):
            resolve_type(42)

    def test_interface_key(self):
        assert interface_key(Logger) == "tests.fixtures.logger"
        assert interface_key(".Tests.Fixtures.Logger.") == "tests.fixtures.logger"
        assert interface_key(Outer.Inner) == "tests.fixtures.outer.inner"

    def test_interface_key_rejects_other_values(self):
        with pytest.raises(BindingError):
            interface_key(42)
