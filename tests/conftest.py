"""Pytest fixtures for servicebox tests."""

import logging

import pytest

from servicebox import Container, DependencyBuilder

from .fixtures import FileLogger, Logger, constructed


@pytest.fixture
def container():
    """Provide an empty container."""
    return Container()


@pytest.fixture
def builder():
    """Provide a bare dependency builder (no registry)."""
    return DependencyBuilder()


@pytest.fixture
def logger_container(container):
    """Container with Logger bound to FileLogger."""
    container.bind(Logger, FileLogger)
    return container


@pytest.fixture
def construction_log():
    """Reset and provide the construction order log."""
    constructed.clear()
    yield constructed
    constructed.clear()


@pytest.fixture
def package_logger():
    """Provide the servicebox logger and drop handlers added during the test."""
    package_logger = logging.getLogger("servicebox")
    handlers = list(package_logger.handlers)
    level = package_logger.level
    yield package_logger
    for handler in list(package_logger.handlers):
        if handler not in handlers:
            package_logger.removeHandler(handler)
            handler.close()
    package_logger.setLevel(level)
