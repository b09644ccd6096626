"""Declarative markers for binding fields to preferences.

Fields are marked with ``typing.Annotated`` so the declared type and the
binding metadata live in one place:

    from typing import Annotated, Optional, Set
    from prefbind import Pref, Scope, pref_settings

    @pref_settings(path="/com/example/myapp")
    class AppSettings:
        license: Annotated[str, Pref(Scope.SYSTEM, key="license", default="UNLICENSED")]
        times_ran: Annotated[int, Pref(Scope.SYSTEM)] = 0
        save_on_exit: Annotated[bool, Pref(default="true")] = True
        __cache: Annotated[Set[str], Pref()]
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, NewType, Optional, Type, TypeVar


# Long-integer fields. Values are plain ints at runtime; the declared type
# selects 64-bit storage instead of 32-bit.
Long = NewType("Long", int)

T = TypeVar("T", bound=type)

SETTINGS_ATTR = "__pref_settings__"


class Scope(Enum):
    """Which preference tree a field is stored in."""

    USER = "user"
    SYSTEM = "system"


@dataclass(frozen=True)
class Pref:
    """Field-level binding metadata.

    Attributes:
        scope: Scope.USER (per-user) or Scope.SYSTEM (system-wide)
        key: Name in the preference store; blank means the field's own name
        default: Fallback used when the stored value can't be parsed.
            Always a string, so numbers and booleans are written "3", "true".
    """

    scope: Scope = Scope.USER
    key: str = ""
    default: str = ""


@dataclass(frozen=True)
class PrefSettings:
    """Class-level binding metadata."""

    path: str = ""


def pref_settings(path: str = "") -> Callable[[T], T]:
    """Class decorator setting the preference path for a class.

    The path is not validated here; it is checked the first time an
    instance is persisted or restored.

    Example:
        @pref_settings(path="/com/example/myapp")
        class Settings:
            ...
    """

    def decorate(cls: T) -> T:
        setattr(cls, SETTINGS_ATTR, PrefSettings(path=path))
        return cls

    return decorate


def get_pref_settings(cls: Type) -> Optional[PrefSettings]:
    """Return settings declared on cls itself, ignoring base classes."""
    settings = cls.__dict__.get(SETTINGS_ATTR)
    return settings if isinstance(settings, PrefSettings) else None
