"""JSON file tree preference backend.

Each node is stored as ``<root>/<node path>/prefs.json``. The default roots
come from platformdirs, so preferences land in the usual per-user and
site-wide configuration folders of the host OS.
"""

import atexit
import json
import logging
import os
import threading
from pathlib import Path
from typing import Dict, List, Optional

from platformdirs import site_config_dir, user_config_dir

from ..exceptions import BackingStoreError
from .base import PreferenceNode, PreferencesBackend


logger = logging.getLogger(__name__)

NODE_FILENAME = "prefs.json"


def default_root(app_name: str, system: bool = False) -> Path:
    """Platform-specific root folder for the user or system tree."""
    if system:
        return Path(site_config_dir(app_name, appauthor=False))
    return Path(user_config_dir(app_name, appauthor=False))


class FileNode(PreferenceNode):
    """Preference node backed by one JSON file.

    The file is read on first access. Writes stay in memory until flush().
    """

    def __init__(self, path: str, filename: Path):
        super().__init__(path)
        self.filename = filename
        self._data: Optional[Dict[str, str]] = None
        self._dirty = False
        self._lock = threading.Lock()

    def _load(self) -> Dict[str, str]:
        # Caller holds the lock
        if self._data is None:
            if not self.filename.exists():
                self._data = {}
            else:
                try:
                    raw = json.loads(self.filename.read_text(encoding="utf-8"))
                except (OSError, ValueError) as e:
                    raise BackingStoreError(
                        f"Could not read preferences from {self.filename}: {e}"
                    ) from e
                if not isinstance(raw, dict):
                    raise BackingStoreError(
                        f"{self.filename} does not hold a JSON object"
                    )
                self._data = {str(k): str(v) for k, v in raw.items()}
        return self._data

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        with self._lock:
            return self._load().get(key, default)

    def _put(self, key: str, value: str) -> None:
        with self._lock:
            self._load()[key] = value
            self._dirty = True

    def remove(self, key: str) -> None:
        with self._lock:
            data = self._load()
            if key in data:
                del data[key]
                self._dirty = True

    def keys(self) -> List[str]:
        with self._lock:
            return list(self._load())

    def flush(self) -> None:
        """Write the node to disk atomically if it changed."""
        with self._lock:
            if not self._dirty:
                return
            tmp = self.filename.with_suffix(self.filename.suffix + ".tmp")
            try:
                self.filename.parent.mkdir(parents=True, exist_ok=True)
                tmp.write_text(
                    json.dumps(self._data, indent=2, sort_keys=True),
                    encoding="utf-8",
                )
                os.replace(tmp, self.filename)
            except OSError as e:
                raise BackingStoreError(
                    f"Could not write preferences to {self.filename}: {e}"
                ) from e
            self._dirty = False


class FileBackend(PreferencesBackend):
    """Preference backend storing one JSON file per node.

    Pending writes are flushed when the interpreter exits, so explicit
    flushes are only needed when another process must see changes sooner.

    Example:
        backend = FileBackend()
        backend.connect(root=default_root("myapp"))
        node = backend.node("/com/example/app")
    """

    name = "file"

    def __init__(self):
        self.root: Optional[Path] = None
        self._nodes: Dict[str, FileNode] = {}
        self._lock = threading.Lock()
        self._exit_hook_registered = False

    def connect(self, root: Optional[Path] = None, app_name: str = "prefbind",
                system: bool = False, **kwargs) -> None:
        """Set the folder holding this tree.

        Args:
            root: Folder for the tree; defaults to the platform config folder
            app_name: Application name used to build the default folder
            system: Use the site-wide folder instead of the per-user one
        """
        self.root = Path(root) if root is not None else default_root(app_name, system)
        self._nodes = {}
        if not self._exit_hook_registered:
            atexit.register(self._flush_at_exit)
            self._exit_hook_registered = True

    def close(self) -> None:
        """Flush pending writes and forget cached nodes."""
        try:
            self.flush()
        finally:
            self._nodes = {}
            if self._exit_hook_registered:
                atexit.unregister(self._flush_at_exit)
                self._exit_hook_registered = False

    def _node(self, path: str) -> FileNode:
        if self.root is None:
            raise BackingStoreError("File backend is not connected")
        with self._lock:
            node = self._nodes.get(path)
            if node is None:
                parts = [p for p in path.split("/") if p]
                filename = self.root.joinpath(*parts, NODE_FILENAME)
                node = self._nodes[path] = FileNode(path, filename)
            return node

    def flush(self) -> None:
        """Flush every node this backend has handed out."""
        with self._lock:
            nodes = list(self._nodes.values())
        for node in nodes:
            node.flush()

    def _flush_at_exit(self) -> None:
        try:
            self.flush()
        except BackingStoreError:
            logger.warning("Unsaved preferences under %s", self.root, exc_info=True)
