"""In-memory preference backend for testing."""

import threading
from typing import Dict, List, Optional

from .base import PreferenceNode, PreferencesBackend


class MemoryNode(PreferenceNode):
    """Preference node held in a dict."""

    def __init__(self, path: str):
        super().__init__(path)
        self._data: Dict[str, str] = {}
        self._lock = threading.Lock()

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        with self._lock:
            return self._data.get(key, default)

    def _put(self, key: str, value: str) -> None:
        with self._lock:
            self._data[key] = value

    def remove(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def keys(self) -> List[str]:
        with self._lock:
            return list(self._data)

    def flush(self) -> None:
        """Nothing to flush."""
        pass


class MemoryBackend(PreferencesBackend):
    """In-memory preference backend.

    Useful for testing. Data is lost when the backend is closed or the
    process ends.

    Example:
        backend = MemoryBackend()
        backend.connect()

        node = backend.node("/com/example/app")
        node.put_int("timesRan", 3)
    """

    name = "memory"

    def __init__(self):
        self._nodes: Dict[str, MemoryNode] = {}
        self._lock = threading.Lock()

    def connect(self, **kwargs) -> None:
        """Initialize the in-memory tree."""
        self._nodes = {}

    def close(self) -> None:
        """Drop all nodes."""
        self._nodes.clear()

    def _node(self, path: str) -> MemoryNode:
        with self._lock:
            node = self._nodes.get(path)
            if node is None:
                node = self._nodes[path] = MemoryNode(path)
            return node
