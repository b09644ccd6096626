"""Process-wide cache of preference store handles."""

import logging
import threading
from dataclasses import dataclass
from typing import Dict, List, Optional, Union
from urllib.parse import urlparse

from .backends.base import PreferenceNode, PreferencesBackend
from .backends.file import FileBackend
from .backends.memory import MemoryBackend
from .config import PrefsConfig
from .markers import Scope


logger = logging.getLogger(__name__)

BackendSpec = Union[str, PreferencesBackend]


@dataclass(frozen=True)
class StoreHandle:
    """The store node for one (scope, path) pair."""

    scope: Scope
    path: str
    node: PreferenceNode


class NodeRegistry:
    """Hands out one StoreHandle per (scope, path), creating it on first use.

    Each scope has its own cache and its own lock, so concurrent requests for
    the same pair never produce two handles. Entries are never evicted.

    Example:
        registry = NodeRegistry(connect("memory://"), connect("memory://"))
        handle = registry.get(Scope.USER, "/com/example/app")
        handle.node.put("lastDir", "/tmp")
    """

    def __init__(self, user_backend: PreferencesBackend, system_backend: PreferencesBackend):
        self._backends: Dict[Scope, PreferencesBackend] = {
            Scope.USER: user_backend,
            Scope.SYSTEM: system_backend,
        }
        self._handles: Dict[Scope, Dict[str, StoreHandle]] = {
            Scope.USER: {},
            Scope.SYSTEM: {},
        }
        self._locks = {
            Scope.USER: threading.Lock(),
            Scope.SYSTEM: threading.Lock(),
        }

    def backend(self, scope: Scope) -> PreferencesBackend:
        return self._backends[scope]

    def get(self, scope: Scope, path: str) -> StoreHandle:
        """Look up the handle for scope and path, creating it if needed.

        Raises:
            ValueError: If the backend rejects path
        """
        handles = self._handles[scope]
        with self._locks[scope]:
            handle = handles.get(path)
            if handle is None:
                node = self._backends[scope].node(path)
                handle = handles[path] = StoreHandle(scope, path, node)
                logger.debug("Opened %s preferences node %s", scope.value, path)
            return handle

    def handles(self, scope: Optional[Scope] = None) -> List[StoreHandle]:
        """Snapshot of cached handles, system scope first."""
        scopes = [scope] if scope is not None else [Scope.SYSTEM, Scope.USER]
        result = []
        for s in scopes:
            with self._locks[s]:
                result.extend(self._handles[s].values())
        return result

    def close(self) -> None:
        """Close both backends and forget every handle."""
        for scope in (Scope.SYSTEM, Scope.USER):
            with self._locks[scope]:
                self._handles[scope].clear()
        try:
            self._backends[Scope.SYSTEM].close()
        finally:
            self._backends[Scope.USER].close()


def connect(url: str, scope: Scope = Scope.USER, app_name: str = "prefbind") -> PreferencesBackend:
    """Open a preference backend from a URL.

    Supported URL schemes:
        - memory://          In-memory storage (testing)
        - sqlite:///path.db  SQLite file storage
        - sqlite:///:memory: SQLite in-memory
        - file://            JSON files in the platform config folder
        - file:///abs/dir    JSON files under the given folder

    Args:
        url: Connection URL
        scope: Tree the backend will hold
        app_name: Application folder name for the default file location

    Returns:
        Connected backend

    Example:
        backend = connect("sqlite:///prefs.db", Scope.SYSTEM)
    """
    parsed = urlparse(url)
    scheme = parsed.scheme

    if scheme == "memory":
        backend = MemoryBackend()
        backend.connect()
        return backend

    elif scheme == "sqlite":
        from .backends.sqlite import SQLiteBackend

        # Handle sqlite:///path and sqlite:///:memory:
        path = parsed.path
        if path.startswith("/"):
            path = path[1:]

        backend = SQLiteBackend()
        backend.connect(path=path if path else ":memory:", root=scope.value)
        return backend

    elif scheme == "file":
        backend = FileBackend()
        backend.connect(
            root=parsed.path or None,
            app_name=app_name,
            system=scope is Scope.SYSTEM,
        )
        return backend

    else:
        raise ValueError(f"Unknown preference store scheme: {scheme}")


# Process-wide registry, created on first use

_registry: Optional[NodeRegistry] = None
_registry_lock = threading.Lock()


def get_registry() -> NodeRegistry:
    """Return the process-wide registry, building it from the environment."""
    global _registry
    with _registry_lock:
        if _registry is None:
            config = PrefsConfig.from_env()
            _registry = NodeRegistry(
                connect(config.user_store, Scope.USER, config.app_name),
                connect(config.system_store, Scope.SYSTEM, config.app_name),
            )
            logger.debug(
                "Preference registry: user=%s system=%s",
                config.user_store,
                config.system_store,
            )
        return _registry


def configure(user: Optional[BackendSpec] = None, system: Optional[BackendSpec] = None,
              app_name: Optional[str] = None) -> NodeRegistry:
    """Replace the process-wide registry.

    Arguments left as None fall back to the environment configuration.

    Args:
        user: Backend instance or URL for user preferences
        system: Backend instance or URL for system preferences
        app_name: Application folder name for file:// URLs

    Returns:
        The new registry

    Example:
        configure(user="sqlite:///prefs.db", system="sqlite:///prefs.db")
    """
    global _registry
    config = PrefsConfig.from_env()
    app_name = app_name or config.app_name
    if user is None:
        user = config.user_store
    if system is None:
        system = config.system_store
    if isinstance(user, str):
        user = connect(user, Scope.USER, app_name)
    if isinstance(system, str):
        system = connect(system, Scope.SYSTEM, app_name)
    with _registry_lock:
        _registry = NodeRegistry(user, system)
        return _registry


def reset_registry() -> None:
    """Forget the process-wide registry without closing its backends."""
    global _registry
    with _registry_lock:
        _registry = None
