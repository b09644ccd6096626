"""Preference path resolution."""

from typing import Any

from .exceptions import ConfigurationError
from .markers import get_pref_settings


def resolve_path(obj: Any) -> str:
    """Determine the preference path for an object.

    Uses the path from @pref_settings on the object's own class if one is
    set, otherwise derives it from the class's module, e.g. a class in
    module "com.example.app" maps to "/com/example/app".

    Args:
        obj: The bound object

    Returns:
        Absolute, slash-delimited preference path

    Raises:
        ConfigurationError: If no legal path can be determined
    """
    cls = type(obj)

    settings = get_pref_settings(cls)
    if settings is not None and settings.path:
        validate_path(settings.path)
        return settings.path

    module = getattr(cls, "__module__", None)
    if not module:
        raise ConfigurationError(
            f"Invalid preference path - {cls.__qualname__} has no module. "
            f"Set one with @pref_settings(path=...)."
        )

    if "." not in module:
        raise ConfigurationError(
            f"Invalid preference path - module {module!r} of {cls.__qualname__} "
            f"is too short to form a path. Set one with @pref_settings(path=...)."
        )

    return "/" + module.replace(".", "/")


def validate_path(path: str) -> None:
    """Check an explicitly configured preference path.

    Raises:
        ConfigurationError: If path doesn't start with "/" or contains "."
    """
    if not path.startswith("/"):
        raise ConfigurationError(
            f"Invalid preference path - must begin with a forward slash: {path}"
        )
    if "." in path:
        raise ConfigurationError(
            f"Invalid preference path - use forward slashes, not dots: {path}"
        )
