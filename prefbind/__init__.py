"""Bind object fields to persistent user and system preferences.

Mark fields with a Pref inside typing.Annotated, then call persist() and
restore(). Values are stored in a hierarchical key-value preference store,
so settings survive across runs without the application dealing with file
locations or serialization.

Quick Start:
    from typing import Annotated, Dict, Optional, Set
    import prefbind
    from prefbind import Pref, Scope, pref_settings

    @pref_settings(path="/com/example/myapp")
    class AppSettings:
        last_dir: Annotated[Optional[str], Pref()] = None
        times_ran: Annotated[int, Pref(Scope.SYSTEM)] = 0
        save_on_exit: Annotated[bool, Pref(default="true")] = True
        cache: Annotated[Set[str], Pref()]

        def __init__(self):
            self.cache = set()

    settings = AppSettings()
    prefbind.restore(settings)
    settings.times_ran += 1
    prefbind.persist(settings)

Paths:
    Without @pref_settings the path comes from the class's module, so a class
    in "com.example.app" is stored under "/com/example/app".

Supported field types:
    str, int, Long, bool, list[str], deque[str], set[str], dict[str, str],
    optionally wrapped in Optional[...]. Setting a field to None and
    persisting removes its stored value.

Stores (see prefbind.config):
    - file://            JSON files in the platform config folders (default)
    - sqlite:///path.db  SQLite file storage
    - memory://          In-memory storage (testing)
"""

from .core import (
    BindReport,
    FieldError,
    NodeError,
    PreferenceBinder,
    delete_all,
    dump,
    flush_all,
    persist,
    restore,
)
from .markers import Long, Pref, PrefSettings, Scope, pref_settings
from .paths import resolve_path
from .registry import NodeRegistry, StoreHandle, configure, connect, get_registry, reset_registry
from .config import PrefsConfig
from .exceptions import (
    PrefsError,
    ConfigurationError,
    InvalidArgumentError,
    UnsupportedTypeError,
    UnresolvableTypeError,
    BackingStoreError,
    SerializationError,
)

__all__ = [
    # Main API
    "persist",
    "restore",
    "delete_all",
    "dump",
    "flush_all",
    "PreferenceBinder",
    "BindReport",
    "FieldError",
    "NodeError",
    # Declarations
    "Pref",
    "PrefSettings",
    "Scope",
    "Long",
    "pref_settings",
    "resolve_path",
    # Stores
    "NodeRegistry",
    "StoreHandle",
    "configure",
    "connect",
    "get_registry",
    "reset_registry",
    "PrefsConfig",
    # Exceptions
    "PrefsError",
    "ConfigurationError",
    "InvalidArgumentError",
    "UnsupportedTypeError",
    "UnresolvableTypeError",
    "BackingStoreError",
    "SerializationError",
]

__version__ = "0.1.0"
