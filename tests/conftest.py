"""Shared fixtures for prefbind tests."""

import pytest

import prefbind
from prefbind import NodeRegistry, PreferenceBinder, Scope, connect


@pytest.fixture(autouse=True)
def memory_prefs():
    """Point the process-wide registry at in-memory stores for each test."""
    registry = prefbind.configure(user="memory://", system="memory://")
    yield registry
    prefbind.reset_registry()


@pytest.fixture
def registry():
    """An isolated registry backed by in-memory stores."""
    registry = NodeRegistry(connect("memory://", Scope.USER), connect("memory://", Scope.SYSTEM))
    yield registry
    registry.close()


@pytest.fixture
def binder(registry):
    """A binder over the isolated registry."""
    return PreferenceBinder(registry)
