"""Binding object fields to the preference store."""

import logging
import sys
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional, TextIO

from .codecs import read_value, write_value
from .discovery import BoundField, find_bound_fields
from .exceptions import BackingStoreError, InvalidArgumentError
from .markers import Scope
from .paths import resolve_path
from .registry import NodeRegistry, StoreHandle, get_registry


logger = logging.getLogger(__name__)


@dataclass
class FieldError:
    """A field that failed during persist() or restore()."""

    name: str
    key: str
    scope: Scope
    error: Exception


@dataclass
class NodeError:
    """A store node that failed during dump() or delete_all()."""

    scope: Scope
    path: str
    error: Exception


@dataclass
class BindReport:
    """Outcome of one persist() or restore() call."""

    path: str
    bound: List[str] = field(default_factory=list)
    errors: List[FieldError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


class PreferenceBinder:
    """Moves marked fields between objects and a NodeRegistry.

    Example:
        binder = PreferenceBinder(registry)
        binder.restore(settings)
        settings.times_ran += 1
        binder.persist(settings)
    """

    def __init__(self, registry: Optional[NodeRegistry] = None):
        """Create a binder.

        Args:
            registry: Registry to use; None means the process-wide registry,
                looked up on every call
        """
        self._registry = registry

    @property
    def registry(self) -> NodeRegistry:
        return self._registry if self._registry is not None else get_registry()

    # Binding

    def persist(self, obj: Any) -> BindReport:
        """Save the object's marked fields.

        A field holding None removes its stored value.

        Args:
            obj: The bound object, usually self

        Returns:
            BindReport listing the fields saved and the fields that failed

        Raises:
            InvalidArgumentError: If obj is None
            ConfigurationError: If no preference path can be determined
        """

        def save(handle: StoreHandle, bound: BoundField) -> None:
            node = handle.node
            value = bound.accessor.read()

            if value is None:
                if node.get(bound.key) is not None:
                    node.remove(bound.key)
                    logger.debug("Removed %s from %s", bound.key, handle.path)
                return

            write_value(node, bound.key, value, bound.declared)
            logger.debug("Saved %s to %s", bound.key, handle.path)

        return self._walk(obj, save, "persist")

    def restore(self, obj: Any) -> BindReport:
        """Load the object's marked fields.

        Fields with nothing stored keep whatever value the object holds.

        Args:
            obj: The bound object, usually self

        Returns:
            BindReport listing the fields loaded and the fields that failed

        Raises:
            InvalidArgumentError: If obj is None
            ConfigurationError: If no preference path can be determined
        """

        def load(handle: StoreHandle, bound: BoundField) -> None:
            node = handle.node

            # Nothing saved: leave the field as it is
            if node.get(bound.key) is None:
                return

            value = read_value(node, bound.key, bound.default, bound.declared)
            bound.accessor.write(value)

        return self._walk(obj, load, "restore")

    def _walk(self, obj: Any, action: Callable[[StoreHandle, BoundField], None],
              verb: str) -> BindReport:
        if obj is None:
            raise InvalidArgumentError(f"Can't {verb} a None object")

        path = resolve_path(obj)
        report = BindReport(path=path)
        registry = self.registry

        for bound in find_bound_fields(obj):
            try:
                handle = registry.get(bound.scope, path)
                action(handle, bound)
                report.bound.append(bound.key)
            except Exception as e:
                logger.warning(
                    "Could not %s %s.%s (%s preference %r)",
                    verb,
                    type(obj).__name__,
                    bound.name,
                    bound.scope.value,
                    bound.key,
                    exc_info=True,
                )
                report.errors.append(FieldError(bound.name, bound.key, bound.scope, e))

        return report

    # Administration

    def delete_all(self) -> List[NodeError]:
        """Delete every system and user preference this process has touched.

        Returns:
            Nodes whose keys could not be listed or removed
        """
        errors = []
        for handle in self.registry.handles():
            try:
                for key in handle.node.keys():
                    handle.node.remove(key)
            except BackingStoreError as e:
                errors.append(self._node_failed(handle, e, "delete"))
        return errors

    def dump(self, file: Optional[TextIO] = None) -> List[NodeError]:
        """Print every cached node's keys and values, for debugging.

        Args:
            file: Where to write; defaults to sys.stdout

        Returns:
            Nodes whose keys could not be listed
        """
        out = file if file is not None else sys.stdout
        errors = []
        for handle in self.registry.handles():
            node = handle.node
            try:
                print(f"{handle.scope.name} PREFS: {handle.path}", file=out)
                for key in node.keys():
                    # Values can't be None, so "(?)" means a concurrent removal
                    print(f"- {key:<20} = {node.get(key, '(?)')}", file=out)
            except BackingStoreError as e:
                errors.append(self._node_failed(handle, e, "dump"))
        return errors

    def flush_all(self) -> None:
        """Force every cached node to persistent storage.

        Use sparingly: this blocks on disk I/O.

        Raises:
            BackingStoreError: On the first node that can't be written
        """
        for handle in self.registry.handles():
            handle.node.flush()

    @staticmethod
    def _node_failed(handle: StoreHandle, error: Exception, verb: str) -> NodeError:
        logger.warning(
            "Could not %s %s preferences at %s",
            verb,
            handle.scope.value,
            handle.path,
            exc_info=error,
        )
        return NodeError(handle.scope, handle.path, error)


_default_binder = PreferenceBinder()


def persist(obj: Any) -> BindReport:
    """Save obj's marked fields to the process-wide preference store."""
    return _default_binder.persist(obj)


def restore(obj: Any) -> BindReport:
    """Load obj's marked fields from the process-wide preference store."""
    return _default_binder.restore(obj)


def delete_all() -> List[NodeError]:
    """Delete all preferences in the process-wide store's cached nodes."""
    return _default_binder.delete_all()


def dump(file: Optional[TextIO] = None) -> List[NodeError]:
    """Print the process-wide store's cached nodes."""
    return _default_binder.dump(file)


def flush_all() -> None:
    """Flush the process-wide store to disk."""
    _default_binder.flush_all()
