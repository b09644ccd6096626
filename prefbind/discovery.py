"""Discovery of preference-bound fields on an object."""

import inspect
import sys
from dataclasses import dataclass
from typing import Annotated, Any, List, Optional, get_args, get_origin

from .exceptions import ConfigurationError
from .markers import Pref, Scope


_MISSING = object()


class FieldAccessor:
    """Read/write access to one field's storage slot on one object.

    Writes go through object.__setattr__, so frozen dataclasses and custom
    __setattr__ hooks don't block them. Nothing on the object or its class
    is modified apart from the slot itself.
    """

    def __init__(self, obj: Any, attr: str):
        self._obj = obj
        self.attr = attr

    def read(self) -> Any:
        """Current value, or None if the slot was never assigned."""
        value = getattr(self._obj, self.attr, _MISSING)
        return None if value is _MISSING else value

    def write(self, value: Any) -> None:
        object.__setattr__(self._obj, self.attr, value)

    def __repr__(self) -> str:
        return f"FieldAccessor({type(self._obj).__name__}.{self.attr})"


@dataclass
class BoundField:
    """A marked field found on an object.

    Built fresh for every persist/restore call.
    """

    obj: Any
    name: str
    accessor: FieldAccessor
    pref: Pref
    declared: Any

    @property
    def key(self) -> str:
        """Store key: the marker's key, or the field name if that is blank."""
        if self.pref.key and self.pref.key.strip():
            return self.pref.key
        return self.name

    @property
    def scope(self) -> Scope:
        return self.pref.scope

    @property
    def default(self) -> str:
        return self.pref.default


def find_bound_fields(obj: Any) -> List[BoundField]:
    """Find every field declared on type(obj) that carries a Pref marker.

    Only the concrete class's own annotations are inspected; fields declared
    on base classes are not bound. String annotations are evaluated one at a
    time, and unmarked ones that can't be evaluated (TYPE_CHECKING-only
    imports, say) are skipped.

    Args:
        obj: The object to inspect

    Returns:
        BoundFields in declaration order, never None

    Raises:
        ConfigurationError: If a marked annotation can't be evaluated, or two
            fields share a scope and key
    """
    cls = type(obj)
    try:
        annotations = _raw_annotations(cls)
    except Exception as e:
        raise ConfigurationError(
            f"Could not read annotations of {cls.__qualname__}: {e}"
        ) from e

    fields = []
    seen = {}
    for attr, hint in annotations.items():
        if isinstance(hint, str):
            hint = _evaluate(cls, attr, hint)
        pref = _find_marker(hint)
        if pref is None:
            continue
        bound = BoundField(
            obj=obj,
            name=field_name(cls, attr),
            accessor=FieldAccessor(obj, attr),
            pref=pref,
            declared=get_args(hint)[0],
        )
        other = seen.setdefault((bound.scope, bound.key), bound.name)
        if other != bound.name:
            raise ConfigurationError(
                f"{cls.__qualname__}.{other} and {cls.__qualname__}.{bound.name} "
                f"both bind {bound.scope.value} preference {bound.key!r}"
            )
        fields.append(bound)
    return fields


def _raw_annotations(cls: type) -> dict:
    try:
        return inspect.get_annotations(cls)
    except NameError:
        # Deferred annotations naming something that only exists for type checkers
        import annotationlib

        return annotationlib.get_annotations(cls, format=annotationlib.Format.STRING)


def _evaluate(cls: type, attr: str, text: str) -> Any:
    module = sys.modules.get(cls.__module__)
    namespace = dict(vars(module)) if module is not None else {}
    try:
        return eval(text, namespace, dict(vars(cls)))
    except Exception as e:
        if "Pref" not in text:
            return None
        raise ConfigurationError(
            f"Could not evaluate annotation of {cls.__qualname__}.{attr}: {e}"
        ) from e


def field_name(cls: type, attr: str) -> str:
    """Field identifier with private-name mangling undone.

    "_AppSettings__cache" on AppSettings -> "cache"; "_cache" stays "_cache".
    """
    mangled_prefix = "_" + cls.__name__.lstrip("_") + "__"
    if attr.startswith(mangled_prefix) and len(attr) > len(mangled_prefix):
        return attr[len(mangled_prefix):]
    return attr


def _find_marker(hint: Any) -> Optional[Pref]:
    if get_origin(hint) is not Annotated:
        return None
    for meta in hint.__metadata__:
        if isinstance(meta, Pref):
            return meta
    return None
