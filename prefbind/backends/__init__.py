"""Preference backends for prefbind."""

from .base import PreferenceNode, PreferencesBackend
from .file import FileBackend, FileNode
from .memory import MemoryBackend, MemoryNode
from .sqlite import SQLiteBackend, SQLiteNode

__all__ = [
    "PreferenceNode",
    "PreferencesBackend",
    "FileBackend",
    "FileNode",
    "MemoryBackend",
    "MemoryNode",
    "SQLiteBackend",
    "SQLiteNode",
]
