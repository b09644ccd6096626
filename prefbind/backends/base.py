"""Abstract base classes for preference backends."""

import re
from abc import ABC, abstractmethod
from typing import List, Optional


MAX_KEY_LENGTH = 80
MAX_VALUE_LENGTH = 8 * 1024

INT_MIN, INT_MAX = -(2**31), 2**31 - 1
LONG_MIN, LONG_MAX = -(2**63), 2**63 - 1

_DECIMAL = re.compile(r"[+-]?[0-9]+")


class PreferenceNode(ABC):
    """One node of a preference tree, holding string key/value pairs.

    Subclasses implement the raw string operations. Typed access is built on
    top of them here: numbers and booleans are stored as text, and a stored
    value that doesn't parse reads back as the caller's fallback.
    """

    def __init__(self, path: str):
        self.path = path

    @abstractmethod
    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        """Return the value stored under key, or default if there is none."""
        pass

    @abstractmethod
    def _put(self, key: str, value: str) -> None:
        pass

    @abstractmethod
    def remove(self, key: str) -> None:
        """Remove key if present."""
        pass

    @abstractmethod
    def keys(self) -> List[str]:
        """List the keys stored in this node.

        Raises:
            BackingStoreError: If the backend can't be read
        """
        pass

    @abstractmethod
    def flush(self) -> None:
        """Force pending changes to persistent storage.

        May block on I/O.

        Raises:
            BackingStoreError: If the backend can't be written
        """
        pass

    def put(self, key: str, value: str) -> None:
        """Store value under key.

        Raises:
            ValueError: If key or value is None or too long
        """
        _check_key(key)
        if value is None:
            raise ValueError("Preference values can't be None")
        if len(value) > MAX_VALUE_LENGTH:
            raise ValueError(f"Value too long for key {key!r}: {len(value)} chars")
        self._put(key, value)

    # Typed access

    def put_int(self, key: str, value: int) -> None:
        self.put(key, str(_checked_range(value, INT_MIN, INT_MAX)))

    def put_long(self, key: str, value: int) -> None:
        self.put(key, str(_checked_range(value, LONG_MIN, LONG_MAX)))

    def put_bool(self, key: str, value: bool) -> None:
        self.put(key, "true" if value else "false")

    def get_int(self, key: str, default: int) -> int:
        return self._get_number(key, default, INT_MIN, INT_MAX)

    def get_long(self, key: str, default: int) -> int:
        return self._get_number(key, default, LONG_MIN, LONG_MAX)

    def get_bool(self, key: str, default: bool) -> bool:
        value = self.get(key)
        if value is None:
            return default
        lowered = value.lower()
        if lowered == "true":
            return True
        if lowered == "false":
            return False
        return default

    def _get_number(self, key: str, default: int, low: int, high: int) -> int:
        value = self.get(key)
        if value is None:
            return default
        try:
            return parse_number(value, low, high)
        except ValueError:
            return default

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.path!r})"


class PreferencesBackend(ABC):
    """Abstract base class for preference backends.

    A backend is the root of one preference tree (user or system) and hands
    out nodes by absolute path. The binding engine handles field discovery,
    typing and caching; backends only store strings.
    """

    name = "abstract"

    @abstractmethod
    def connect(self, **kwargs) -> None:
        """Open the backend.

        Args:
            **kwargs: Backend-specific connection parameters
        """
        pass

    @abstractmethod
    def close(self) -> None:
        """Release resources."""
        pass

    @abstractmethod
    def _node(self, path: str) -> PreferenceNode:
        pass

    def node(self, path: str) -> PreferenceNode:
        """Open or create the node at path.

        Args:
            path: Absolute path, e.g. "/com/example/app"

        Raises:
            ValueError: If path is malformed
        """
        check_node_path(path)
        return self._node(path)


def check_node_path(path: str) -> None:
    if not path or not path.startswith("/"):
        raise ValueError(f"Node path must be absolute: {path!r}")
    if "//" in path:
        raise ValueError(f"Node path contains consecutive slashes: {path!r}")
    if path != "/" and path.endswith("/"):
        raise ValueError(f"Node path ends with a slash: {path!r}")


def _check_key(key: str) -> None:
    if key is None:
        raise ValueError("Preference keys can't be None")
    if len(key) > MAX_KEY_LENGTH:
        raise ValueError(f"Key too long: {key!r}")


def _checked_range(value: int, low: int, high: int) -> int:
    if not low <= value <= high:
        raise ValueError(f"{value} is outside [{low}, {high}]")
    return value


def parse_number(text: str, low: int, high: int) -> int:
    """Parse a plain decimal integer within [low, high].

    Only an optional sign and ASCII digits are accepted: no whitespace,
    underscores or other forms int() would take.

    Raises:
        ValueError: If text is not a decimal integer or is out of range
    """
    if not _DECIMAL.fullmatch(text):
        raise ValueError(f"Not a decimal integer: {text!r}")
    return _checked_range(int(text), low, high)
