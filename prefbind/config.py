"""Configuration for the process-wide preference registry.

Environment variables:
    PREFBIND_APP_NAME      Folder name under the platform config dirs
    PREFBIND_USER_STORE    Backend URL for user preferences
    PREFBIND_SYSTEM_STORE  Backend URL for system preferences

Backend URLs:
    file://              Platform config folder for the scope (default)
    file:///abs/dir      JSON file tree under the given folder
    sqlite:///prefs.db   SQLite file
    sqlite:///:memory:   SQLite in-memory
    memory://            In-memory (testing)
"""

import os
from dataclasses import dataclass


DEFAULT_APP_NAME = "prefbind"
DEFAULT_STORE_URL = "file://"


@dataclass
class PrefsConfig:
    """Where the user and system preference trees live."""

    app_name: str = DEFAULT_APP_NAME
    user_store: str = DEFAULT_STORE_URL
    system_store: str = DEFAULT_STORE_URL

    @classmethod
    def from_env(cls) -> "PrefsConfig":
        return cls(
            app_name=os.environ.get("PREFBIND_APP_NAME", DEFAULT_APP_NAME),
            user_store=os.environ.get("PREFBIND_USER_STORE", DEFAULT_STORE_URL),
            system_store=os.environ.get("PREFBIND_SYSTEM_STORE", DEFAULT_STORE_URL),
        )
