"""Tests for preference path resolution."""

import pytest

from prefbind import ConfigurationError, pref_settings, resolve_path


class TestExplicitPath:
    """Tests for paths set with @pref_settings."""

    def test_valid_path(self):
        """A slash path is used as-is."""

        @pref_settings(path="/com/example")
        class Settings:
            pass

        assert resolve_path(Settings()) == "/com/example"

    def test_dotted_path_rejected(self):
        """Dots are not allowed in explicit paths."""

        @pref_settings(path="com.example")
        class Settings:
            pass

        with pytest.raises(ConfigurationError):
            resolve_path(Settings())

    def test_missing_leading_slash_rejected(self):
        """Explicit paths must be absolute."""

        @pref_settings(path="no/leading/slash")
        class Settings:
            pass

        with pytest.raises(ConfigurationError):
            resolve_path(Settings())

    def test_dot_after_slash_rejected(self):
        """A dot anywhere in the path is rejected."""

        @pref_settings(path="/com/example.app")
        class Settings:
            pass

        with pytest.raises(ConfigurationError, match="dots"):
            resolve_path(Settings())

    def test_validated_on_use_not_declaration(self):
        """A bad path only fails when the path is resolved."""

        @pref_settings(path="bad.path")
        class Settings:
            pass

        obj = Settings()  # No error yet
        with pytest.raises(ConfigurationError):
            resolve_path(obj)

    def test_empty_path_falls_back_to_module(self):
        """An empty explicit path means derive from the module."""

        @pref_settings(path="")
        class Settings:
            __module__ = "com.example.app"

        assert resolve_path(Settings()) == "/com/example/app"

    def test_not_inherited(self):
        """Subclasses don't inherit the parent's explicit path."""

        @pref_settings(path="/com/example/base")
        class Base:
            pass

        class Child(Base):
            __module__ = "org.example.child"

        assert resolve_path(Base()) == "/com/example/base"
        assert resolve_path(Child()) == "/org/example/child"


class TestDerivedPath:
    """Tests for paths derived from the class's module."""

    def test_module_to_path(self):
        """Dots in the module name become slashes."""

        class Settings:
            __module__ = "com.terheyden.prefs"

        assert resolve_path(Settings()) == "/com/terheyden/prefs"

    def test_deterministic(self):
        """Same class always gives the same path."""

        class Settings:
            __module__ = "org.example.app"

        assert resolve_path(Settings()) == resolve_path(Settings())

    def test_shallow_module_rejected(self):
        """A module name without a dot is too short."""

        class Settings:
            __module__ = "settings"

        with pytest.raises(ConfigurationError, match="too short"):
            resolve_path(Settings())

    def test_main_module_rejected(self):
        """Scripts run as __main__ need an explicit path."""

        class Settings:
            __module__ = "__main__"

        with pytest.raises(ConfigurationError):
            resolve_path(Settings())

    def test_empty_module_rejected(self):
        """A class without a module can't derive a path."""

        class Settings:
            __module__ = ""

        with pytest.raises(ConfigurationError):
            resolve_path(Settings())
