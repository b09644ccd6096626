"""Typed read/write dispatch between field values and preference nodes.

The set of supported declared types is closed:

    str, int, Long, bool            stored with the node's typed accessors
    list[str], deque[str]           stored as JSON arrays
    set[str]                        stored as a sorted JSON array
    dict[str, str]                  stored as a JSON object

Each may be wrapped in Optional[...]. Bare list/deque/set/dict are accepted
as well.
"""

import json
import types
from collections import deque
from enum import Enum, auto
from typing import Any, Callable, Dict, Optional, Tuple, Union, get_args, get_origin

from .backends.base import (
    INT_MAX,
    INT_MIN,
    LONG_MAX,
    LONG_MIN,
    PreferenceNode,
    parse_number,
)
from .exceptions import (
    SerializationError,
    UnresolvableTypeError,
    UnsupportedTypeError,
)
from .markers import Long


class ValueKind(Enum):
    """Storage shape selected by a field's declared type."""

    STRING = auto()
    INTEGER = auto()
    LONG = auto()
    BOOLEAN = auto()
    LIST = auto()
    DEQUE = auto()
    SET = auto()
    MAP = auto()

    @property
    def is_collection(self) -> bool:
        return self in _COLLECTION_KINDS


_COLLECTION_KINDS = frozenset(
    {ValueKind.LIST, ValueKind.DEQUE, ValueKind.SET, ValueKind.MAP}
)

_SCALAR_TYPES = {
    str: ValueKind.STRING,
    bool: ValueKind.BOOLEAN,
    int: ValueKind.INTEGER,
    Long: ValueKind.LONG,
}

_CONTAINER_TYPES = {
    list: ValueKind.LIST,
    deque: ValueKind.DEQUE,
    set: ValueKind.SET,
    dict: ValueKind.MAP,
}


def classify(declared: Any) -> Optional[ValueKind]:
    """Map a declared field type to its storage kind, or None if unsupported."""
    declared = _unwrap_optional(declared)

    kind = _SCALAR_TYPES.get(declared) if _hashable(declared) else None
    if kind is not None:
        return kind

    origin = get_origin(declared) or declared
    kind = _CONTAINER_TYPES.get(origin) if _hashable(origin) else None
    if kind is None:
        return None

    # Element types, where given, must all be str
    args = get_args(declared)
    if any(arg is not str for arg in args):
        return None
    return kind


def _unwrap_optional(declared: Any) -> Any:
    if get_origin(declared) in (Union, types.UnionType):
        args = [a for a in get_args(declared) if a is not type(None)]
        if len(args) == 1:
            return args[0]
    return declared


def _hashable(value: Any) -> bool:
    try:
        hash(value)
    except TypeError:
        return False
    return True


class JsonCodec:
    """Compact JSON encoding for string collections.

    Size matters in preference stores, so no whitespace is emitted.
    """

    def encode(self, value: Any) -> str:
        if isinstance(value, (set, frozenset)):
            value = sorted(value)
        elif isinstance(value, deque):
            value = list(value)
        return json.dumps(value, separators=(",", ":"), ensure_ascii=False)

    def decode(self, text: str, shape: ValueKind) -> Any:
        """Decode text into the container for shape.

        Raises:
            SerializationError: If text isn't JSON of the expected shape
        """
        try:
            data = json.loads(text)
        except ValueError as e:
            raise SerializationError(f"Stored value is not JSON: {e}") from e

        if data is None:
            return None

        if shape is ValueKind.MAP:
            if not isinstance(data, dict) or not all(
                isinstance(v, str) for v in data.values()
            ):
                raise SerializationError(
                    f"Expected a JSON object of strings, got: {text[:80]}"
                )
            return dict(data)

        if not isinstance(data, list) or not all(isinstance(v, str) for v in data):
            raise SerializationError(f"Expected a JSON array of strings, got: {text[:80]}")
        if shape is ValueKind.SET:
            return set(data)
        if shape is ValueKind.DEQUE:
            return deque(data)
        return data


_json = JsonCodec()


# Default parsing


def parse_default(kind: ValueKind, default: str) -> Any:
    """Convert a marker's default string for the given kind.

    Empty defaults mean 0 for numbers and False for booleans. Collection
    kinds have no string default.

    Raises:
        ValueError: If a non-empty default doesn't parse or is out of range
            for the kind
    """
    if kind is ValueKind.STRING:
        return default
    if kind is ValueKind.INTEGER:
        return 0 if default == "" else parse_number(default, INT_MIN, INT_MAX)
    if kind is ValueKind.LONG:
        return 0 if default == "" else parse_number(default, LONG_MIN, LONG_MAX)
    if kind is ValueKind.BOOLEAN:
        return False if default == "" else _parse_bool(default)
    return None


def _parse_bool(text: str) -> bool:
    lowered = text.strip().lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    raise ValueError(f"Invalid boolean default: {text!r}")


# Writers and readers per kind


def _require(value: Any, expected: Tuple[type, ...], kind: ValueKind) -> None:
    if not isinstance(value, expected) or (
        kind in (ValueKind.INTEGER, ValueKind.LONG) and isinstance(value, bool)
    ):
        raise TypeError(
            f"{kind.name.lower()} field holds a {type(value).__name__}"
        )


def _require_strings(value: Any, kind: ValueKind) -> None:
    items = value.values() if kind is ValueKind.MAP else value
    keys = value.keys() if kind is ValueKind.MAP else ()
    if not all(isinstance(v, str) for v in items) or not all(
        isinstance(k, str) for k in keys
    ):
        raise TypeError(f"{kind.name.lower()} field must hold only strings")


def _write_collection(node: PreferenceNode, key: str, value: Any) -> None:
    node.put(key, _json.encode(value))


def _read_collection(kind: ValueKind) -> Callable[[PreferenceNode, str, str], Any]:
    def read(node: PreferenceNode, key: str, default: str) -> Any:
        text = node.get(key)
        if text is None:
            return None
        return _json.decode(text, kind)

    return read


_RUNTIME_TYPES: Dict[ValueKind, Tuple[type, ...]] = {
    ValueKind.STRING: (str,),
    ValueKind.INTEGER: (int,),
    ValueKind.LONG: (int,),
    ValueKind.BOOLEAN: (bool,),
    ValueKind.LIST: (list,),
    ValueKind.DEQUE: (deque,),
    ValueKind.SET: (set, frozenset),
    ValueKind.MAP: (dict,),
}

_WRITERS: Dict[ValueKind, Callable[[PreferenceNode, str, Any], None]] = {
    ValueKind.STRING: lambda node, key, value: node.put(key, value),
    ValueKind.INTEGER: lambda node, key, value: node.put_int(key, value),
    ValueKind.LONG: lambda node, key, value: node.put_long(key, value),
    ValueKind.BOOLEAN: lambda node, key, value: node.put_bool(key, value),
    ValueKind.LIST: _write_collection,
    ValueKind.DEQUE: _write_collection,
    ValueKind.SET: _write_collection,
    ValueKind.MAP: _write_collection,
}

_READERS: Dict[ValueKind, Callable[[PreferenceNode, str, str], Any]] = {
    ValueKind.STRING: lambda node, key, default: node.get(key, default),
    ValueKind.INTEGER: lambda node, key, default: node.get_int(
        key, parse_default(ValueKind.INTEGER, default)
    ),
    ValueKind.LONG: lambda node, key, default: node.get_long(
        key, parse_default(ValueKind.LONG, default)
    ),
    ValueKind.BOOLEAN: lambda node, key, default: node.get_bool(
        key, parse_default(ValueKind.BOOLEAN, default)
    ),
    ValueKind.LIST: _read_collection(ValueKind.LIST),
    ValueKind.DEQUE: _read_collection(ValueKind.DEQUE),
    ValueKind.SET: _read_collection(ValueKind.SET),
    ValueKind.MAP: _read_collection(ValueKind.MAP),
}


def write_value(node: PreferenceNode, key: str, value: Any, declared: Any) -> None:
    """Store a non-None field value under key.

    Raises:
        UnsupportedTypeError: If declared is outside the supported set
        TypeError: If value doesn't match declared
        ValueError: If an integer is out of range for its kind
    """
    kind = classify(declared)
    if kind is None:
        raise UnsupportedTypeError(declared)
    _require(value, _RUNTIME_TYPES[kind], kind)
    if kind.is_collection:
        _require_strings(value, kind)
    _WRITERS[kind](node, key, value)


def read_value(node: PreferenceNode, key: str, default: str, declared: Any) -> Any:
    """Load the value stored under key for a field of the declared type.

    Scalars fall back to the parsed default when the stored text is
    malformed; collections return None when nothing is stored.

    Raises:
        UnresolvableTypeError: If declared is outside the supported set
        ValueError: If the default string is malformed
        SerializationError: If a stored collection has the wrong shape
    """
    kind = classify(declared)
    if kind is None:
        raise UnresolvableTypeError(declared)
    return _READERS[kind](node, key, default)
